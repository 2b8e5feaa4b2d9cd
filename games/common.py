"""Shared types and error taxonomy for the game engines."""

from __future__ import annotations

from enum import Enum
from typing import Tuple

Position = Tuple[int, int]


class Difficulty(str, Enum):
    """AI strength tier."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class IllegalMoveError(ValueError):
    """Requested move is not legal for the current state."""


class MalformedCoordinateError(ValueError):
    """Square, cell or index lies outside the board."""


class NoLegalMovesError(RuntimeError):
    """Search was invoked on a state where the side to move has no move."""


def in_grid(pos: Position, rows: int, cols: int) -> bool:
    """Return whether a (row, col) position is inside a rows x cols grid."""
    row, col = pos
    return 0 <= row < rows and 0 <= col < cols


def require_in_grid(pos: Position, rows: int, cols: int) -> Position:
    """Validate a (row, col) pair at the rule boundary."""
    try:
        row, col = pos
    except (TypeError, ValueError) as exc:
        raise MalformedCoordinateError(f"Malformed position: {pos!r}") from exc
    if not isinstance(row, int) or not isinstance(col, int) or not in_grid((row, col), rows, cols):
        raise MalformedCoordinateError(f"Position out of range: {pos!r}")
    return (row, col)
