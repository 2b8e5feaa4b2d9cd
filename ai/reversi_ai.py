"""Reversi AI: random, greedy flip-count and positional alpha-beta tiers."""

from __future__ import annotations

import logging
import math
import random
from typing import Optional, Tuple, Union

import numpy as np

from ai.base_ai import BaseAI
from ai.config import ReversiAIConfig
from games.common import Difficulty, NoLegalMovesError, Position
from games.reversi.board import Disc, ReversiState

LOGGER = logging.getLogger(__name__)

# Corners are prized, squares next to corners give them away.
POSITION_WEIGHTS = np.array(
    [
        [120, -20, 20, 5, 5, 20, -20, 120],
        [-20, -40, -5, -5, -5, -5, -40, -20],
        [20, -5, 15, 3, 3, 15, -5, 20],
        [5, -5, 3, 3, 3, 3, -5, 5],
        [5, -5, 3, 3, 3, 3, -5, 5],
        [20, -5, 15, 3, 3, 15, -5, 20],
        [-20, -40, -5, -5, -5, -5, -40, -20],
        [120, -20, 20, 5, 5, 20, -20, 120],
    ],
    dtype=np.float32,
)


def evaluate_board(state: ReversiState, perspective: Disc) -> float:
    """Positional weight of ``perspective``'s discs minus the opponent's."""
    planes = state.encode_state()
    own, other = (planes[0], planes[1]) if perspective is Disc.BLACK else (planes[1], planes[0])
    return float(np.sum(POSITION_WEIGHTS * (own - other)))


class ReversiAI(BaseAI):
    """Reversi opponent playing for whichever side is to move."""

    def __init__(
        self,
        difficulty: Union[Difficulty, str] = Difficulty.HARD,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        config: Optional[ReversiAIConfig] = None,
    ) -> None:
        super().__init__(difficulty=difficulty, seed=seed, rng=rng)
        self.config = config or ReversiAIConfig()

    def choose_move(self, state: ReversiState) -> Position:
        if not state.valid_moves:
            raise NoLegalMovesError("No legal moves available.")

        if self.difficulty is Difficulty.EASY:
            return self._rng.choice(state.valid_moves)
        if self.difficulty is Difficulty.MEDIUM:
            return self._greedy_move(state)
        score, move = self.search(state, self.config.hard_depth)
        LOGGER.debug("Minimax selected %s with score %.1f", move, score)
        return move

    def _greedy_move(self, state: ReversiState) -> Position:
        """Move flipping the most discs; earliest in row-major order wins ties."""
        best_move = state.valid_moves[0]
        best_flips = -1
        for position in state.valid_moves:
            flips = len(state.flips_for(position))
            if flips > best_flips:
                best_flips = flips
                best_move = position
        LOGGER.debug("Greedy selected %s flipping %d discs", best_move, best_flips)
        return best_move

    def search(self, state: ReversiState, depth: int) -> Tuple[float, Position]:
        """Depth-limited search maximizing for the side to move at the root."""
        if not state.valid_moves:
            raise NoLegalMovesError("No legal moves available.")
        perspective = state.current_player
        alpha, beta = -math.inf, math.inf
        best_move = state.valid_moves[0]
        best_value = -math.inf
        for position in state.valid_moves:
            value = self._alphabeta(state.play(position), depth - 1, alpha, beta, perspective)
            if value > best_value:
                best_value = value
                best_move = position
            alpha = max(alpha, best_value)
        return best_value, best_move

    def _alphabeta(
        self,
        state: ReversiState,
        depth: int,
        alpha: float,
        beta: float,
        perspective: Disc,
    ) -> float:
        # A side without a placement is scored as it stands.
        if depth <= 0 or not state.valid_moves:
            return evaluate_board(state, perspective)

        maximizing = state.current_player is perspective
        if maximizing:
            best = -math.inf
            for position in state.valid_moves:
                best = max(best, self._alphabeta(state.play(position), depth - 1, alpha, beta, perspective))
                alpha = max(alpha, best)
                if self.config.use_pruning and alpha >= beta:
                    break
            return best

        best = math.inf
        for position in state.valid_moves:
            best = min(best, self._alphabeta(state.play(position), depth - 1, alpha, beta, perspective))
            beta = min(beta, best)
            if self.config.use_pruning and alpha >= beta:
                break
        return best


def select_ai_move(
    state: ReversiState,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
    config: Optional[ReversiAIConfig] = None,
) -> Position:
    """Pick the AI's placement for the side to move."""
    return ReversiAI(difficulty=difficulty, rng=rng, config=config).choose_move(state)
