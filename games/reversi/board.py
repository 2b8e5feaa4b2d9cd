"""Reversi (Othello) board state, flip rules and game-over detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from games.common import IllegalMoveError, MalformedCoordinateError, Position, in_grid, require_in_grid

LOGGER = logging.getLogger(__name__)

BOARD_SIZE = 8

DIRECTIONS: Tuple[Position, ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


class Disc(str, Enum):
    """Disc colour."""

    BLACK = "black"
    WHITE = "white"

    def opponent(self) -> "Disc":
        return Disc.WHITE if self is Disc.BLACK else Disc.BLACK


DISC_SYMBOL: Dict[Optional[Disc], str] = {
    Disc.BLACK: "B",
    Disc.WHITE: "W",
    None: ".",
}

Grid = Tuple[Tuple[Optional[Disc], ...], ...]


@dataclass(frozen=True)
class ReversiMove:
    """Placement of a disc; flipped discs are derived from the board."""

    position: Position
    player: Disc


MoveLike = Union[ReversiMove, Position]


def flips_in_direction(grid: Grid, position: Position, disc: Disc, direction: Position) -> List[Position]:
    """Opponent discs bracketed between ``position`` and a ``disc`` along one ray."""
    d_row, d_col = direction
    row, col = position[0] + d_row, position[1] + d_col
    opponent = disc.opponent()
    run: List[Position] = []
    while in_grid((row, col), BOARD_SIZE, BOARD_SIZE):
        cell = grid[row][col]
        if cell is opponent:
            run.append((row, col))
        elif cell is disc:
            return run
        else:
            return []
        row += d_row
        col += d_col
    return []


def flips_for(grid: Grid, position: Position, disc: Disc) -> List[Position]:
    """Every disc that placing ``disc`` on an empty ``position`` would flip."""
    row, col = position
    if grid[row][col] is not None:
        return []
    flipped: List[Position] = []
    for direction in DIRECTIONS:
        flipped.extend(flips_in_direction(grid, position, disc, direction))
    return flipped


def valid_positions(grid: Grid, disc: Disc) -> Tuple[Position, ...]:
    """Legal placements for ``disc`` in row-major order."""
    positions: List[Position] = []
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            if grid[row][col] is None and any(
                flips_in_direction(grid, (row, col), disc, direction) for direction in DIRECTIONS
            ):
                positions.append((row, col))
    return tuple(positions)


def count_discs(grid: Grid) -> Dict[Disc, int]:
    counts = {Disc.BLACK: 0, Disc.WHITE: 0}
    for row in grid:
        for cell in row:
            if cell is not None:
                counts[cell] += 1
    return counts


def _initial_grid() -> Grid:
    grid: List[List[Optional[Disc]]] = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    center = BOARD_SIZE // 2
    grid[center - 1][center - 1] = Disc.WHITE
    grid[center - 1][center] = Disc.BLACK
    grid[center][center - 1] = Disc.BLACK
    grid[center][center] = Disc.WHITE
    return tuple(tuple(row) for row in grid)


@dataclass(frozen=True)
class ReversiState:
    """Immutable Reversi position.

    Disc counts and the side to move's legal placements are computed once when
    the state is built. ``previous`` links to the predecessor for undo and does
    not take part in equality.
    """

    grid: Grid
    current_player: Disc
    black_count: int
    white_count: int
    valid_moves: Tuple[Position, ...]
    last_move: Optional[Position] = None
    previous: Optional["ReversiState"] = field(default=None, compare=False, repr=False)

    @classmethod
    def build(
        cls,
        grid: Grid,
        current_player: Disc,
        last_move: Optional[Position] = None,
        previous: Optional["ReversiState"] = None,
    ) -> "ReversiState":
        counts = count_discs(grid)
        return cls(
            grid=grid,
            current_player=current_player,
            black_count=counts[Disc.BLACK],
            white_count=counts[Disc.WHITE],
            valid_moves=valid_positions(grid, current_player),
            last_move=last_move,
            previous=previous,
        )

    @classmethod
    def new_game(cls) -> "ReversiState":
        return cls.build(_initial_grid(), Disc.BLACK)

    @classmethod
    def from_rows(cls, rows: List[str], current_player: Disc = Disc.BLACK) -> "ReversiState":
        """Build a position from eight strings of ``B``/``W``/``.``."""
        lookup = {"B": Disc.BLACK, "W": Disc.WHITE, ".": None}
        if len(rows) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in rows):
            raise MalformedCoordinateError("Reversi layout must be 8 rows of 8 cells")
        bad = {ch for row in rows for ch in row.upper()} - set(lookup)
        if bad:
            raise MalformedCoordinateError(f"Unknown cell characters in Reversi layout: {sorted(bad)}")
        grid = tuple(tuple(lookup[ch] for ch in row.upper()) for row in rows)
        return cls.build(grid, current_player)

    def cell(self, position: Position) -> Optional[Disc]:
        row, col = require_in_grid(position, BOARD_SIZE, BOARD_SIZE)
        return self.grid[row][col]

    @property
    def scores(self) -> Dict[Disc, int]:
        return {Disc.BLACK: self.black_count, Disc.WHITE: self.white_count}

    def flips_for(self, position: Position, disc: Optional[Disc] = None) -> List[Position]:
        position = require_in_grid(position, BOARD_SIZE, BOARD_SIZE)
        return flips_for(self.grid, position, disc or self.current_player)

    def legal_moves(self) -> List[ReversiMove]:
        return [ReversiMove(position, self.current_player) for position in self.valid_moves]

    def has_moves(self, disc: Disc) -> bool:
        if disc is self.current_player:
            return bool(self.valid_moves)
        return bool(valid_positions(self.grid, disc))

    @property
    def must_pass(self) -> bool:
        """Side to move has no placement but the opponent does."""
        return not self.valid_moves and self.has_moves(self.current_player.opponent())

    @property
    def is_game_over(self) -> bool:
        return not self.valid_moves and not self.has_moves(self.current_player.opponent())

    @property
    def winner(self) -> Optional[Disc]:
        """Side with more discs once the game is over; None while playing or on a draw."""
        if not self.is_game_over or self.black_count == self.white_count:
            return None
        return Disc.BLACK if self.black_count > self.white_count else Disc.WHITE

    @property
    def is_draw(self) -> bool:
        return self.is_game_over and self.black_count == self.white_count

    def play(self, position: Position) -> "ReversiState":
        """Place a disc for the side to move without validation."""
        flipped = flips_for(self.grid, position, self.current_player)
        grid = [list(row) for row in self.grid]
        row, col = position
        grid[row][col] = self.current_player
        for flip_row, flip_col in flipped:
            grid[flip_row][flip_col] = self.current_player
        return ReversiState.build(
            tuple(tuple(r) for r in grid),
            self.current_player.opponent(),
            last_move=position,
            previous=self,
        )

    def apply_move(self, move: MoveLike) -> "ReversiState":
        """Place a disc for the side to move; turn passes to the opponent."""
        if isinstance(move, ReversiMove):
            if move.player is not self.current_player:
                raise IllegalMoveError(f"Not {move.player.value}'s turn")
            position = move.position
        else:
            position = move
        position = require_in_grid(position, BOARD_SIZE, BOARD_SIZE)
        if position not in self.valid_moves:
            raise IllegalMoveError(f"Illegal move for {self.current_player.value}: {position}")
        LOGGER.debug("%s plays %s", self.current_player.value, position)
        return self.play(position)

    def pass_turn(self) -> "ReversiState":
        """Hand the turn to the opponent when the side to move has no placement."""
        if self.valid_moves:
            raise IllegalMoveError("Cannot pass while a legal move exists")
        if self.is_game_over:
            raise IllegalMoveError("Game is over")
        LOGGER.debug("%s has no legal move and passes", self.current_player.value)
        return ReversiState.build(
            self.grid,
            self.current_player.opponent(),
            last_move=self.last_move,
            previous=self,
        )

    def undo_move(self) -> "ReversiState":
        if self.previous is None:
            raise IllegalMoveError("No moves to undo")
        return self.previous

    def encode_state(self) -> np.ndarray:
        """Encode as (2, 8, 8) planes: black discs, white discs."""
        encoded = np.zeros((2, BOARD_SIZE, BOARD_SIZE), dtype=np.float32)
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                cell = self.grid[row][col]
                if cell is Disc.BLACK:
                    encoded[0, row, col] = 1.0
                elif cell is Disc.WHITE:
                    encoded[1, row, col] = 1.0
        return encoded

    def render_ascii(self) -> str:
        lines = ["   " + " ".join(str(c) for c in range(BOARD_SIZE))]
        for row in range(BOARD_SIZE):
            cells = []
            for col in range(BOARD_SIZE):
                if (row, col) in self.valid_moves:
                    cells.append("*")
                else:
                    cells.append(DISC_SYMBOL[self.grid[row][col]])
            lines.append(f"{row}  " + " ".join(cells))
        return "\n".join(lines)


def initial_state() -> ReversiState:
    """Four-disc centre start, black to move."""
    return ReversiState.new_game()


def legal_moves(state: ReversiState) -> List[ReversiMove]:
    return state.legal_moves()


def apply_move(state: ReversiState, move: MoveLike) -> ReversiState:
    return state.apply_move(move)


def pass_turn(state: ReversiState) -> ReversiState:
    return state.pass_turn()


def undo_move(state: ReversiState) -> ReversiState:
    return state.undo_move()


def scores(state: ReversiState) -> Dict[Disc, int]:
    return state.scores


def is_game_over(state: ReversiState) -> bool:
    return state.is_game_over


def winner(state: ReversiState) -> Optional[Disc]:
    return state.winner
