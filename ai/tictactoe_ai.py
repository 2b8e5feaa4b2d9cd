"""Tic-Tac-Toe AI: randomized strategic heuristic and exhaustive minimax."""

from __future__ import annotations

import logging
import math
import random
from typing import List, Optional, Sequence, Union

from ai.base_ai import BaseAI
from ai.config import TicTacToeAIConfig
from games.common import Difficulty, NoLegalMovesError
from games.tictactoe.board import (
    CENTER,
    CORNERS,
    EDGES,
    WINNING_LINES,
    Mark,
    TicTacToeState,
    check_winner,
    empty_cells,
    is_full,
)

LOGGER = logging.getLogger(__name__)

WIN_SCORE = 10

Cells = Sequence[Optional[Mark]]


def _place(cells: Cells, index: int, mark: Mark) -> List[Optional[Mark]]:
    after = list(cells)
    after[index] = mark
    return after


def winning_cells(cells: Cells, mark: Mark) -> List[int]:
    """Empty cells that would complete a line for ``mark``."""
    found: List[int] = []
    for line in WINNING_LINES:
        values = [cells[i] for i in line]
        if values.count(mark) == 2 and values.count(None) == 1:
            index = line[values.index(None)]
            if index not in found:
                found.append(index)
    return sorted(found)


def fork_cells(cells: Cells, mark: Mark) -> List[int]:
    """Empty cells where ``mark`` would create two distinct winning threats."""
    return [index for index in empty_cells(cells) if len(winning_cells(_place(cells, index, mark), mark)) >= 2]


def _fork_block(cells: Cells, mark: Mark, opponent_forks: List[int]) -> int:
    """Answer an opponent fork.

    A lone fork square is simply occupied. With several, force the opponent to
    defend a two-in-a-row whose blocking reply does not give them a fork.
    """
    if len(opponent_forks) == 1:
        return opponent_forks[0]
    opponent = mark.opponent()
    for index in empty_cells(cells):
        after = _place(cells, index, mark)
        threats = winning_cells(after, mark)
        if len(threats) != 1:
            continue
        reply = _place(after, threats[0], opponent)
        if len(winning_cells(reply, opponent)) < 2:
            return index
    return opponent_forks[0]


def strategic_move(state: TicTacToeState, rng: random.Random) -> int:
    """Win, block, fork, block a fork, then centre, corner, edge."""
    cells = state.cells
    mark = state.current_player
    opponent = mark.opponent()
    empty = state.legal_moves()
    if not empty:
        raise NoLegalMovesError("No legal moves available.")

    wins = winning_cells(cells, mark)
    if wins:
        return wins[0]
    blocks = winning_cells(cells, opponent)
    if blocks:
        return blocks[0]
    forks = fork_cells(cells, mark)
    if forks:
        return forks[0]
    opponent_forks = fork_cells(cells, opponent)
    if opponent_forks:
        return _fork_block(cells, mark, opponent_forks)

    for group in ((CENTER,), CORNERS, EDGES):
        available = [index for index in group if cells[index] is None]
        if available:
            return rng.choice(available)
    return rng.choice(empty)


def _minimax(cells: List[Optional[Mark]], to_move: Mark, player: Mark, alpha: float, beta: float) -> float:
    winner, _ = check_winner(cells)
    if winner is not None:
        return WIN_SCORE if winner is player else -WIN_SCORE
    if is_full(cells):
        return 0

    maximizing = to_move is player
    best = -math.inf if maximizing else math.inf
    for index in empty_cells(cells):
        cells[index] = to_move
        score = _minimax(cells, to_move.opponent(), player, alpha, beta)
        cells[index] = None
        if maximizing:
            best = max(best, score)
            alpha = max(alpha, best)
        else:
            best = min(best, score)
            beta = min(beta, best)
        if alpha >= beta:
            break
    return best


def minimax_move(state: TicTacToeState) -> int:
    """Best cell for the side to move, searched to the end of the game."""
    empty = state.legal_moves()
    if not empty:
        raise NoLegalMovesError("No legal moves available.")
    player = state.current_player
    scratch = list(state.cells)
    best_move = empty[0]
    best_score = -math.inf
    alpha = -math.inf
    for index in empty:
        scratch[index] = player
        score = _minimax(scratch, player.opponent(), player, alpha, math.inf)
        scratch[index] = None
        if score > best_score:
            best_score = score
            best_move = index
        alpha = max(alpha, best_score)
    LOGGER.debug("Minimax selected cell %d with score %s", best_move, best_score)
    return best_move


class TicTacToeAI(BaseAI):
    """Tic-Tac-Toe opponent; randomness comes only from the injected RNG."""

    def __init__(
        self,
        difficulty: Union[Difficulty, str] = Difficulty.HARD,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        config: Optional[TicTacToeAIConfig] = None,
    ) -> None:
        super().__init__(difficulty=difficulty, seed=seed, rng=rng)
        self.config = config or TicTacToeAIConfig()

    def choose_move(self, state: TicTacToeState) -> int:
        empty = state.legal_moves()
        if not empty:
            raise NoLegalMovesError("No legal moves available.")

        if self.difficulty is Difficulty.EASY:
            return self._randomized_strategic(state, empty, self.config.easy_random_rate)
        if self.difficulty is Difficulty.MEDIUM:
            return self._randomized_strategic(state, empty, self.config.medium_random_rate)

        if self._is_opening(state) and self._rng.random() < self.config.opening_strategic_rate:
            move = strategic_move(state, self._rng)
            LOGGER.debug("Opening: strategic cell %d", move)
            return move
        return minimax_move(state)

    def _randomized_strategic(self, state: TicTacToeState, empty: List[int], random_rate: float) -> int:
        if self._rng.random() < random_rate:
            move = self._rng.choice(empty)
            LOGGER.debug("Random cell %d", move)
            return move
        return strategic_move(state, self._rng)

    @staticmethod
    def _is_opening(state: TicTacToeState) -> bool:
        """The side to move has not placed a mark yet."""
        return state.current_player not in state.cells


def select_ai_move(
    state: TicTacToeState,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
    config: Optional[TicTacToeAIConfig] = None,
) -> int:
    """Pick the AI's cell for the side to move."""
    return TicTacToeAI(difficulty=difficulty, rng=rng, config=config).choose_move(state)
