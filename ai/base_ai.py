"""Base AI interface."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Any, Optional, Union

from games.common import Difficulty


class BaseAI(ABC):
    """Abstract AI strategy contract.

    Every random decision is drawn from ``self._rng`` so that a seeded
    ``random.Random`` makes move selection reproducible.
    """

    def __init__(
        self,
        difficulty: Union[Difficulty, str] = Difficulty.HARD,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.difficulty = Difficulty(difficulty)
        self._rng = rng if rng is not None else random.Random(seed)

    @abstractmethod
    def choose_move(self, state: Any) -> Any:
        """Choose a legal move for the given state."""
        raise NotImplementedError
