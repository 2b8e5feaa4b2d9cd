"""Chess board state, move generation, legality and terminal detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from games.chess.pieces import BACK_RANK, PIECE_ORDER, Color, Piece, PieceType
from games.chess.rules import (
    ALL_SQUARES,
    BOARD_SIZE,
    CASTLING_FILES,
    KING_OFFSETS,
    KING_START_FILE,
    KNIGHT_OFFSETS,
    SLIDING_DIRECTIONS,
    Square,
    SquareLike,
    home_rank,
    pawn_direction,
    pawn_start_rank,
    promotion_rank,
    to_square,
)
from games.common import IllegalMoveError

LOGGER = logging.getLogger(__name__)

Cells = Tuple[Optional[Piece], ...]


@dataclass(frozen=True)
class ChessMove:
    """A chess move; ``piece`` is the mover as it stood before moving."""

    from_sq: Square
    to_sq: Square
    piece: Piece
    captured: Optional[Piece] = None
    is_castling: bool = False
    promotion: Optional[PieceType] = None

    def __str__(self) -> str:
        text = f"{self.from_sq}{'x' if self.captured else '-'}{self.to_sq}"
        if self.is_castling:
            text += " (castle)"
        if self.promotion is not None:
            text += f"={self.promotion.value}"
        return text


MoveLike = Union[ChessMove, Tuple[SquareLike, SquareLike]]


def _pawn_targets(cells: Cells, origin: Square, piece: Piece) -> List[Square]:
    targets: List[Square] = []
    step = pawn_direction(piece.color)
    forward = origin.offset(0, step)
    if forward is not None and cells[forward.index] is None:
        targets.append(forward)
        if origin.rank == pawn_start_rank(piece.color):
            double = forward.offset(0, step)
            if double is not None and cells[double.index] is None:
                targets.append(double)
    for d_file in (-1, 1):
        capture = origin.offset(d_file, step)
        if capture is None:
            continue
        target = cells[capture.index]
        if target is not None and target.color is not piece.color:
            targets.append(capture)
    return targets


def _step_targets(cells: Cells, origin: Square, piece: Piece, offsets: Sequence[Tuple[int, int]]) -> List[Square]:
    targets: List[Square] = []
    for d_file, d_rank in offsets:
        dest = origin.offset(d_file, d_rank)
        if dest is None:
            continue
        target = cells[dest.index]
        if target is None or target.color is not piece.color:
            targets.append(dest)
    return targets


def _knight_targets(cells: Cells, origin: Square, piece: Piece) -> List[Square]:
    return _step_targets(cells, origin, piece, KNIGHT_OFFSETS)


def _sliding_targets(cells: Cells, origin: Square, piece: Piece) -> List[Square]:
    targets: List[Square] = []
    for d_file, d_rank in SLIDING_DIRECTIONS[piece.kind]:
        dest = origin.offset(d_file, d_rank)
        while dest is not None:
            target = cells[dest.index]
            if target is None:
                targets.append(dest)
            else:
                if target.color is not piece.color:
                    targets.append(dest)
                break
            dest = dest.offset(d_file, d_rank)
    return targets


def _king_targets(cells: Cells, origin: Square, piece: Piece) -> List[Square]:
    targets = _step_targets(cells, origin, piece, KING_OFFSETS)
    if piece.has_moved or origin != Square(KING_START_FILE, home_rank(piece.color)):
        return targets
    # Path safety is not verified, only emptiness and unmoved pieces.
    for king_file, (rook_file, _, between) in CASTLING_FILES.items():
        rook = cells[Square(rook_file, origin.rank).index]
        if rook is None or rook.kind is not PieceType.ROOK or rook.color is not piece.color or rook.has_moved:
            continue
        if all(cells[Square(f, origin.rank).index] is None for f in between):
            targets.append(Square(king_file, origin.rank))
    return targets


TargetGenerator = Callable[[Cells, Square, Piece], List[Square]]

MOVE_GENERATORS: Dict[PieceType, TargetGenerator] = {
    PieceType.PAWN: _pawn_targets,
    PieceType.KNIGHT: _knight_targets,
    PieceType.BISHOP: _sliding_targets,
    PieceType.ROOK: _sliding_targets,
    PieceType.QUEEN: _sliding_targets,
    PieceType.KING: _king_targets,
}


def _initial_cells() -> Cells:
    cells: List[Optional[Piece]] = [None] * (BOARD_SIZE * BOARD_SIZE)
    for file, kind in enumerate(BACK_RANK):
        for color in (Color.WHITE, Color.BLACK):
            cells[Square(file, home_rank(color)).index] = Piece(kind, color)
            cells[Square(file, pawn_start_rank(color)).index] = Piece(PieceType.PAWN, color)
    return tuple(cells)


@dataclass(frozen=True)
class ChessState:
    """Immutable chess position with move history and status flags."""

    cells: Cells
    turn: Color = Color.WHITE
    history: Tuple[ChessMove, ...] = ()
    is_check: bool = False
    is_checkmate: bool = False
    resigned_by: Optional[Color] = None

    @classmethod
    def new_game(cls) -> "ChessState":
        return cls(cells=_initial_cells())

    @classmethod
    def from_pieces(cls, placement: Dict[SquareLike, Piece], turn: Color = Color.WHITE) -> "ChessState":
        """Build a position from a square -> piece mapping, with status flags computed."""
        cells: List[Optional[Piece]] = [None] * (BOARD_SIZE * BOARD_SIZE)
        for square, piece in placement.items():
            cells[to_square(square).index] = piece
        return cls(cells=tuple(cells), turn=turn).with_status()

    def piece_at(self, square: SquareLike) -> Optional[Piece]:
        return self.cells[to_square(square).index]

    def iter_pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Square, Piece]]:
        """Yield (square, piece) for occupied squares, optionally of one colour."""
        for square in ALL_SQUARES:
            piece = self.cells[square.index]
            if piece is None:
                continue
            if color is None or piece.color is color:
                yield square, piece

    def king_square(self, color: Color) -> Optional[Square]:
        for square, piece in self.iter_pieces(color):
            if piece.kind is PieceType.KING:
                return square
        return None

    # Move generation

    def pseudo_legal_targets(self, origin: SquareLike) -> List[Square]:
        """Destinations allowed by the piece's movement pattern, ignoring king safety."""
        origin = to_square(origin)
        piece = self.cells[origin.index]
        if piece is None:
            return []
        return MOVE_GENERATORS[piece.kind](self.cells, origin, piece)

    def build_move(self, origin: Square, dest: Square) -> ChessMove:
        """Describe moving the piece on ``origin`` to ``dest`` with its side effects."""
        piece = self.cells[origin.index]
        if piece is None:
            raise IllegalMoveError(f"No piece on {origin}")
        is_castling = (
            piece.kind is PieceType.KING
            and not piece.has_moved
            and origin == Square(KING_START_FILE, home_rank(piece.color))
            and abs(dest.file - origin.file) == 2
        )
        promotion = None
        if piece.kind is PieceType.PAWN and dest.rank == promotion_rank(piece.color):
            promotion = PieceType.QUEEN
        return ChessMove(
            from_sq=origin,
            to_sq=dest,
            piece=piece,
            captured=self.cells[dest.index],
            is_castling=is_castling,
            promotion=promotion,
        )

    def play(self, move: ChessMove) -> "ChessState":
        """Transition without validation or status flags; used for scratch positions."""
        cells = list(self.cells)
        cells[move.from_sq.index] = None
        if move.promotion is not None:
            cells[move.to_sq.index] = move.piece.promoted(move.promotion)
        else:
            cells[move.to_sq.index] = move.piece.moved()
        if move.is_castling:
            rook_file, rook_dest_file, _ = CASTLING_FILES[move.to_sq.file]
            rook_from = Square(rook_file, move.from_sq.rank)
            rook = cells[rook_from.index]
            if rook is not None:
                cells[rook_from.index] = None
                cells[Square(rook_dest_file, move.from_sq.rank).index] = rook.moved()
        return ChessState(
            cells=tuple(cells),
            turn=move.piece.color.opponent(),
            history=self.history + (move,),
        )

    def is_square_attacked(self, square: SquareLike, by_color: Color) -> bool:
        """Whether any ``by_color`` piece has ``square`` among its pseudo-legal targets.

        Regenerates every enemy piece's moves, so one call costs a full
        pseudo-legal generation for that side.
        """
        square = to_square(square)
        for origin, piece in self.iter_pieces(by_color):
            if square in MOVE_GENERATORS[piece.kind](self.cells, origin, piece):
                return True
        return False

    def in_check(self, color: Color) -> bool:
        king = self.king_square(color)
        if king is None:
            return False
        return self.is_square_attacked(king, color.opponent())

    def moves_from(self, origin: SquareLike) -> List[ChessMove]:
        """Fully legal moves for the piece on ``origin`` regardless of whose turn it is."""
        origin = to_square(origin)
        piece = self.cells[origin.index]
        if piece is None:
            return []
        moves: List[ChessMove] = []
        for dest in MOVE_GENERATORS[piece.kind](self.cells, origin, piece):
            move = self.build_move(origin, dest)
            if not self.play(move).in_check(piece.color):
                moves.append(move)
        return moves

    def legal_moves(self, origin: SquareLike) -> List[ChessMove]:
        """Legal moves for the piece on ``origin`` if it belongs to the side to move."""
        origin = to_square(origin)
        piece = self.cells[origin.index]
        if piece is None or piece.color is not self.turn or self.is_finished:
            return []
        return self.moves_from(origin)

    def all_moves_for(self, color: Color) -> List[ChessMove]:
        moves: List[ChessMove] = []
        for origin, _ in self.iter_pieces(color):
            moves.extend(self.moves_from(origin))
        return moves

    def all_legal_moves(self) -> List[ChessMove]:
        if self.resigned_by is not None:
            return []
        return self.all_moves_for(self.turn)

    def has_legal_move(self, color: Color) -> bool:
        return any(self.moves_from(origin) for origin, _ in self.iter_pieces(color))

    # Transitions

    def with_status(self) -> "ChessState":
        """Return this position with check/checkmate flags for the side to move."""
        in_check = self.in_check(self.turn)
        checkmate = in_check and not self.has_legal_move(self.turn)
        if in_check == self.is_check and checkmate == self.is_checkmate:
            return self
        return replace(self, is_check=in_check, is_checkmate=checkmate)

    def apply_move(self, move: MoveLike) -> "ChessState":
        """Apply a legal move for the side to move and return the new position."""
        if isinstance(move, ChessMove):
            origin, dest = move.from_sq, move.to_sq
        else:
            try:
                origin, dest = move
            except (TypeError, ValueError) as exc:
                raise IllegalMoveError(f"Unsupported move format: {move!r}") from exc
            origin, dest = to_square(origin), to_square(dest)

        if self.is_finished:
            raise IllegalMoveError("Game is over")
        for candidate in self.legal_moves(origin):
            if candidate.to_sq == dest:
                LOGGER.debug("Applying %s for %s", candidate, self.turn.value)
                return self.play(candidate).with_status()
        raise IllegalMoveError(f"Illegal move: {origin}-{dest}")

    def undo_move(self) -> "ChessState":
        """Revert the last move, restoring moved flags and captured pieces."""
        if not self.history:
            raise IllegalMoveError("No moves to undo")
        move = self.history[-1]
        cells = list(self.cells)
        cells[move.from_sq.index] = move.piece
        cells[move.to_sq.index] = move.captured
        if move.is_castling:
            rook_file, rook_dest_file, _ = CASTLING_FILES[move.to_sq.file]
            rank = move.from_sq.rank
            cells[Square(rook_dest_file, rank).index] = None
            cells[Square(rook_file, rank).index] = Piece(PieceType.ROOK, move.piece.color)
        restored = ChessState(cells=tuple(cells), turn=move.piece.color, history=self.history[:-1])
        return restored.with_status()

    def resign(self) -> "ChessState":
        """The side to move resigns."""
        if self.is_game_over:
            raise IllegalMoveError("Game is over")
        return replace(self, resigned_by=self.turn)

    # Derived queries

    @property
    def is_finished(self) -> bool:
        """Checkmate or resignation; stalemate is detected separately."""
        return self.is_checkmate or self.resigned_by is not None

    @property
    def is_stalemate(self) -> bool:
        return not self.is_check and self.resigned_by is None and not self.has_legal_move(self.turn)

    @property
    def is_game_over(self) -> bool:
        return self.is_checkmate or self.resigned_by is not None or self.is_stalemate

    @property
    def winner(self) -> Optional[Color]:
        if self.resigned_by is not None:
            return self.resigned_by.opponent()
        if self.is_checkmate:
            return self.turn.opponent()
        return None

    def encode_state(self) -> np.ndarray:
        """Encode as (12, 8, 8) planes: six white piece kinds then six black, indexed [rank, file]."""
        encoded = np.zeros((2 * len(PIECE_ORDER), BOARD_SIZE, BOARD_SIZE), dtype=np.float32)
        for square, piece in self.iter_pieces():
            base = 0 if piece.color is Color.WHITE else len(PIECE_ORDER)
            encoded[base + PIECE_ORDER.index(piece.kind), square.rank, square.file] = 1.0
        return encoded

    def render_ascii(self) -> str:
        lines: List[str] = []
        for rank in range(BOARD_SIZE - 1, -1, -1):
            row = []
            for file in range(BOARD_SIZE):
                piece = self.cells[Square(file, rank).index]
                row.append(piece.symbol if piece is not None else ".")
            lines.append(f"{rank + 1}  " + " ".join(row))
        lines.append("   " + " ".join("abcdefgh"))
        return "\n".join(lines)


def initial_state() -> ChessState:
    """Standard starting position, white to move."""
    return ChessState.new_game()


def legal_moves(state: ChessState, origin: SquareLike) -> List[ChessMove]:
    return state.legal_moves(origin)


def all_legal_moves(state: ChessState) -> List[ChessMove]:
    return state.all_legal_moves()


def apply_move(state: ChessState, move: MoveLike) -> ChessState:
    return state.apply_move(move)


def undo_move(state: ChessState) -> ChessState:
    return state.undo_move()


def resign(state: ChessState) -> ChessState:
    return state.resign()


def is_square_attacked(state: ChessState, square: SquareLike, by_color: Color) -> bool:
    return state.is_square_attacked(square, by_color)


def is_in_check(state: ChessState) -> bool:
    return state.is_check


def is_checkmate(state: ChessState) -> bool:
    return state.is_checkmate


def is_stalemate(state: ChessState) -> bool:
    return state.is_stalemate
