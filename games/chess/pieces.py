"""Chess piece definitions and material values."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List


class Color(str, Enum):
    """Player colour."""

    WHITE = "white"
    BLACK = "black"

    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class PieceType(str, Enum):
    """Chess piece kinds."""

    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


PIECE_VALUES: Dict[PieceType, int] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 20000,
}

PIECE_SYMBOL: Dict[PieceType, str] = {
    PieceType.PAWN: "P",
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}

PIECE_ORDER: List[PieceType] = [
    PieceType.PAWN,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
    PieceType.KING,
]

BACK_RANK: List[PieceType] = [
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
]


@dataclass(frozen=True)
class Piece:
    """A chess piece; moving it produces a new value with ``has_moved`` set."""

    kind: PieceType
    color: Color
    has_moved: bool = False

    @property
    def value(self) -> int:
        return PIECE_VALUES[self.kind]

    @property
    def symbol(self) -> str:
        """Upper case for white, lower case for black."""
        letter = PIECE_SYMBOL[self.kind]
        return letter if self.color is Color.WHITE else letter.lower()

    def moved(self) -> "Piece":
        return self if self.has_moved else replace(self, has_moved=True)

    def promoted(self, kind: PieceType) -> "Piece":
        return Piece(kind=kind, color=self.color, has_moved=True)
