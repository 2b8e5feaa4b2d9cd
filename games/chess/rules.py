"""Coordinate helpers and movement tables for chess."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from games.chess.pieces import Color, PieceType
from games.common import MalformedCoordinateError

BOARD_SIZE = 8
FILES = "abcdefgh"

Offset = Tuple[int, int]

KNIGHT_OFFSETS: Tuple[Offset, ...] = (
    (-2, -1), (-2, 1), (-1, -2), (-1, 2),
    (1, -2), (1, 2), (2, -1), (2, 1),
)

KING_OFFSETS: Tuple[Offset, ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)

DIAGONAL_DIRECTIONS: Tuple[Offset, ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ORTHOGONAL_DIRECTIONS: Tuple[Offset, ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))

SLIDING_DIRECTIONS = {
    PieceType.BISHOP: DIAGONAL_DIRECTIONS,
    PieceType.ROOK: ORTHOGONAL_DIRECTIONS,
    PieceType.QUEEN: DIAGONAL_DIRECTIONS + ORTHOGONAL_DIRECTIONS,
}

KING_START_FILE = 4

# Castling: king destination file -> (rook origin file, rook destination file, files that must be empty).
CASTLING_FILES = {
    6: (7, 5, (5, 6)),
    2: (0, 3, (1, 2, 3)),
}


@dataclass(frozen=True, order=True)
class Square:
    """Board square as zero-based (file, rank); ``Square(4, 0)`` is e1."""

    file: int
    rank: int

    def __post_init__(self) -> None:
        if not (0 <= self.file < BOARD_SIZE and 0 <= self.rank < BOARD_SIZE):
            raise MalformedCoordinateError(f"Square out of range: file={self.file} rank={self.rank}")

    @classmethod
    def parse(cls, text: str) -> "Square":
        """Parse algebraic notation such as ``"e4"``."""
        if not isinstance(text, str) or len(text) != 2:
            raise MalformedCoordinateError(f"Malformed square: {text!r}")
        file_char, rank_char = text[0].lower(), text[1]
        if file_char not in FILES or rank_char not in "12345678":
            raise MalformedCoordinateError(f"Malformed square: {text!r}")
        return cls(FILES.index(file_char), int(rank_char) - 1)

    @property
    def index(self) -> int:
        return self.rank * BOARD_SIZE + self.file

    @property
    def algebraic(self) -> str:
        return f"{FILES[self.file]}{self.rank + 1}"

    def offset(self, d_file: int, d_rank: int) -> "Square | None":
        """Return the square shifted by an offset, or None when off the board."""
        file, rank = self.file + d_file, self.rank + d_rank
        if 0 <= file < BOARD_SIZE and 0 <= rank < BOARD_SIZE:
            return Square(file, rank)
        return None

    def __str__(self) -> str:
        return self.algebraic


SquareLike = Union[Square, str]


def to_square(value: SquareLike) -> Square:
    """Coerce a Square or algebraic string into a Square."""
    if isinstance(value, Square):
        return value
    return Square.parse(value)


def iter_squares() -> Iterator[Square]:
    """Yield all squares rank by rank from a1 to h8."""
    for rank in range(BOARD_SIZE):
        for file in range(BOARD_SIZE):
            yield Square(file, rank)


ALL_SQUARES: Tuple[Square, ...] = tuple(iter_squares())


def pawn_direction(color: Color) -> int:
    return 1 if color is Color.WHITE else -1


def pawn_start_rank(color: Color) -> int:
    return 1 if color is Color.WHITE else 6


def promotion_rank(color: Color) -> int:
    return 7 if color is Color.WHITE else 0


def home_rank(color: Color) -> int:
    return 0 if color is Color.WHITE else 7
