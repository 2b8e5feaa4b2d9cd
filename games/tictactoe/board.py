"""Tic-Tac-Toe board state with win-line and draw detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from games.common import IllegalMoveError, MalformedCoordinateError

LOGGER = logging.getLogger(__name__)

CELL_COUNT = 9

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)

CENTER = 4
CORNERS: Tuple[int, ...] = (0, 2, 6, 8)
EDGES: Tuple[int, ...] = (1, 3, 5, 7)


class Mark(str, Enum):
    """Player mark."""

    X = "X"
    O = "O"

    def opponent(self) -> "Mark":
        return Mark.O if self is Mark.X else Mark.X


class GameStatus(str, Enum):
    PLAYING = "playing"
    WON = "won"
    DRAW = "draw"


Cells = Tuple[Optional[Mark], ...]


@dataclass(frozen=True)
class TicTacToeMove:
    player: Mark
    index: int


MoveLike = Union[TicTacToeMove, int]


def check_winner(cells: Sequence[Optional[Mark]]) -> Tuple[Optional[Mark], Optional[Tuple[int, int, int]]]:
    """Return (winner, winning line) for the first complete triple, else (None, None)."""
    for line in WINNING_LINES:
        a, b, c = line
        if cells[a] is not None and cells[a] is cells[b] and cells[a] is cells[c]:
            return cells[a], line
    return None, None


def is_full(cells: Sequence[Optional[Mark]]) -> bool:
    return all(cell is not None for cell in cells)


def empty_cells(cells: Sequence[Optional[Mark]]) -> List[int]:
    return [index for index, cell in enumerate(cells) if cell is None]


def require_index(index: object) -> int:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < CELL_COUNT:
        raise MalformedCoordinateError(f"Cell index out of range: {index!r}")
    return index


@dataclass(frozen=True)
class TicTacToeState:
    """Immutable Tic-Tac-Toe position."""

    cells: Cells = (None,) * CELL_COUNT
    current_player: Mark = Mark.X
    status: GameStatus = GameStatus.PLAYING
    winner: Optional[Mark] = None
    winning_line: Optional[Tuple[int, int, int]] = None
    history: Tuple[TicTacToeMove, ...] = ()

    @classmethod
    def new_game(cls) -> "TicTacToeState":
        return cls()

    @classmethod
    def from_cells(
        cls,
        cells: Sequence[Optional[Union[Mark, str]]],
        current_player: Optional[Mark] = None,
    ) -> "TicTacToeState":
        """Build a position from nine cells (``Mark``, ``"X"``/``"O"`` or None).

        The side to move defaults to X when both sides have the same number of
        marks and to O otherwise.
        """
        if len(cells) != CELL_COUNT:
            raise MalformedCoordinateError("Tic-Tac-Toe board needs exactly 9 cells")
        marks: Cells = tuple(Mark(cell) if cell else None for cell in cells)
        if current_player is None:
            x_count = sum(1 for cell in marks if cell is Mark.X)
            o_count = sum(1 for cell in marks if cell is Mark.O)
            current_player = Mark.X if x_count == o_count else Mark.O
        return cls._with_outcome(marks, current_player, ())

    @classmethod
    def _with_outcome(
        cls,
        cells: Cells,
        current_player: Mark,
        history: Tuple[TicTacToeMove, ...],
    ) -> "TicTacToeState":
        winner, line = check_winner(cells)
        if winner is not None:
            status = GameStatus.WON
        elif is_full(cells):
            status = GameStatus.DRAW
        else:
            status = GameStatus.PLAYING
        return cls(
            cells=cells,
            current_player=current_player,
            status=status,
            winner=winner,
            winning_line=line,
            history=history,
        )

    @property
    def is_game_over(self) -> bool:
        return self.status is not GameStatus.PLAYING

    @property
    def move_count(self) -> int:
        return sum(1 for cell in self.cells if cell is not None)

    def legal_moves(self) -> List[int]:
        if self.is_game_over:
            return []
        return empty_cells(self.cells)

    def play(self, index: int) -> "TicTacToeState":
        """Place the side to move's mark without validation."""
        cells = list(self.cells)
        cells[index] = self.current_player
        move = TicTacToeMove(self.current_player, index)
        return TicTacToeState._with_outcome(tuple(cells), self.current_player.opponent(), self.history + (move,))

    def apply_move(self, move: MoveLike) -> "TicTacToeState":
        if isinstance(move, TicTacToeMove):
            if move.player is not self.current_player:
                raise IllegalMoveError(f"Not {move.player.value}'s turn")
            index = move.index
        else:
            index = move
        index = require_index(index)
        if self.is_game_over:
            raise IllegalMoveError("Game is over")
        if self.cells[index] is not None:
            raise IllegalMoveError(f"Cell {index} is already taken")
        LOGGER.debug("%s plays cell %d", self.current_player.value, index)
        return self.play(index)

    def undo_move(self) -> "TicTacToeState":
        if not self.history:
            raise IllegalMoveError("No moves to undo")
        move = self.history[-1]
        cells = list(self.cells)
        cells[move.index] = None
        return TicTacToeState._with_outcome(tuple(cells), move.player, self.history[:-1])

    def render_ascii(self) -> str:
        rows = []
        for start in (0, 3, 6):
            rows.append(
                " | ".join(
                    self.cells[i].value if self.cells[i] is not None else str(i)
                    for i in range(start, start + 3)
                )
            )
        return "\n---------\n".join(rows)


def initial_state() -> TicTacToeState:
    """Empty board, X to move."""
    return TicTacToeState.new_game()


def legal_moves(state: TicTacToeState) -> List[int]:
    return state.legal_moves()


def apply_move(state: TicTacToeState, move: MoveLike) -> TicTacToeState:
    return state.apply_move(move)


def undo_move(state: TicTacToeState) -> TicTacToeState:
    return state.undo_move()
