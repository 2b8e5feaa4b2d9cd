"""Chess AI: static evaluation plus random, greedy and alpha-beta tiers."""

from __future__ import annotations

import logging
import math
import random
from typing import List, Optional, Tuple, Union

import numpy as np

from ai.base_ai import BaseAI
from ai.config import ChessAIConfig
from games.chess.board import ChessMove, ChessState
from games.chess.pieces import PIECE_ORDER, PIECE_VALUES, Color, PieceType
from games.common import Difficulty, NoLegalMovesError

LOGGER = logging.getLogger(__name__)

# Rows run from rank 8 down to rank 1 as seen by white.
PIECE_SQUARE_TABLES = {
    PieceType.PAWN: np.array(
        [
            [0, 0, 0, 0, 0, 0, 0, 0],
            [50, 50, 50, 50, 50, 50, 50, 50],
            [10, 10, 20, 30, 30, 20, 10, 10],
            [5, 5, 10, 25, 25, 10, 5, 5],
            [0, 0, 0, 20, 20, 0, 0, 0],
            [5, -5, -10, 0, 0, -10, -5, 5],
            [5, 10, 10, -20, -20, 10, 10, 5],
            [0, 0, 0, 0, 0, 0, 0, 0],
        ],
        dtype=np.float32,
    ),
    PieceType.KNIGHT: np.array(
        [
            [-50, -40, -30, -30, -30, -30, -40, -50],
            [-40, -20, 0, 0, 0, 0, -20, -40],
            [-30, 0, 10, 15, 15, 10, 0, -30],
            [-30, 5, 15, 20, 20, 15, 5, -30],
            [-30, 0, 15, 20, 20, 15, 0, -30],
            [-30, 5, 10, 15, 15, 10, 5, -30],
            [-40, -20, 0, 5, 5, 0, -20, -40],
            [-50, -40, -30, -30, -30, -30, -40, -50],
        ],
        dtype=np.float32,
    ),
    PieceType.BISHOP: np.array(
        [
            [-20, -10, -10, -10, -10, -10, -10, -20],
            [-10, 0, 0, 0, 0, 0, 0, -10],
            [-10, 0, 5, 10, 10, 5, 0, -10],
            [-10, 5, 5, 10, 10, 5, 5, -10],
            [-10, 0, 10, 10, 10, 10, 0, -10],
            [-10, 10, 10, 10, 10, 10, 10, -10],
            [-10, 5, 0, 0, 0, 0, 5, -10],
            [-20, -10, -10, -10, -10, -10, -10, -20],
        ],
        dtype=np.float32,
    ),
    PieceType.ROOK: np.array(
        [
            [0, 0, 0, 0, 0, 0, 0, 0],
            [5, 10, 10, 10, 10, 10, 10, 5],
            [-5, 0, 0, 0, 0, 0, 0, -5],
            [-5, 0, 0, 0, 0, 0, 0, -5],
            [-5, 0, 0, 0, 0, 0, 0, -5],
            [-5, 0, 0, 0, 0, 0, 0, -5],
            [-5, 0, 0, 0, 0, 0, 0, -5],
            [0, 0, 0, 5, 5, 0, 0, 0],
        ],
        dtype=np.float32,
    ),
    PieceType.QUEEN: np.array(
        [
            [-20, -10, -10, -5, -5, -10, -10, -20],
            [-10, 0, 0, 0, 0, 0, 0, -10],
            [-10, 0, 5, 5, 5, 5, 0, -10],
            [-5, 0, 5, 5, 5, 5, 0, -5],
            [0, 0, 5, 5, 5, 5, 0, -5],
            [-10, 5, 5, 5, 5, 5, 0, -10],
            [-10, 0, 5, 0, 0, 0, 0, -10],
            [-20, -10, -10, -5, -5, -10, -10, -20],
        ],
        dtype=np.float32,
    ),
    PieceType.KING: np.array(
        [
            [-30, -40, -40, -50, -50, -40, -40, -30],
            [-30, -40, -40, -50, -50, -40, -40, -30],
            [-30, -40, -40, -50, -50, -40, -40, -30],
            [-30, -40, -40, -50, -50, -40, -40, -30],
            [-20, -30, -30, -40, -40, -30, -30, -20],
            [-10, -20, -20, -20, -20, -20, -20, -10],
            [20, 20, 0, 0, 0, 0, 20, 20],
            [20, 30, 10, 0, 0, 10, 30, 20],
        ],
        dtype=np.float32,
    ),
}

# Material plus positional bonus per piece kind, laid out like ChessState.encode_state planes
# ([rank, file], rank 1 first). White reads the tables bottom-up, black reads them as written.
WHITE_SQUARE_VALUES = np.stack(
    [PIECE_VALUES[kind] + np.flipud(PIECE_SQUARE_TABLES[kind]) for kind in PIECE_ORDER]
)
BLACK_SQUARE_VALUES = np.stack([PIECE_VALUES[kind] + PIECE_SQUARE_TABLES[kind] for kind in PIECE_ORDER])


def evaluate_position(state: ChessState, mobility_weight: float = 10.0) -> float:
    """Score a position from white's point of view: material, piece-square and mobility terms."""
    planes = state.encode_state()
    kinds = len(PIECE_ORDER)
    score = float(np.sum(planes[:kinds] * WHITE_SQUARE_VALUES) - np.sum(planes[kinds:] * BLACK_SQUARE_VALUES))
    mobility = len(state.all_moves_for(Color.WHITE)) - len(state.all_moves_for(Color.BLACK))
    return score + mobility_weight * mobility


class ChessAI(BaseAI):
    """Chess opponent with three difficulty tiers."""

    def __init__(
        self,
        difficulty: Union[Difficulty, str] = Difficulty.HARD,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        config: Optional[ChessAIConfig] = None,
    ) -> None:
        super().__init__(difficulty=difficulty, seed=seed, rng=rng)
        self.config = config or ChessAIConfig()

    def choose_move(self, state: ChessState) -> ChessMove:
        legal_moves = state.all_legal_moves()
        if not legal_moves:
            raise NoLegalMovesError("No legal moves available.")

        if self.difficulty is Difficulty.EASY:
            return self._rng.choice(legal_moves)
        if self.difficulty is Difficulty.MEDIUM:
            return self._greedy_move(state, legal_moves)

        score, move = self.search(state, self.config.hard_depth)
        LOGGER.debug("Minimax selected %s with score %.1f", move, score)
        return move

    def evaluate(self, state: ChessState) -> float:
        return evaluate_position(state, self.config.mobility_weight)

    def _greedy_move(self, state: ChessState, legal_moves: List[ChessMove]) -> ChessMove:
        """One-ply lookahead; first move wins ties."""
        sign = 1.0 if state.turn is Color.WHITE else -1.0
        best_move = legal_moves[0]
        best_score = -math.inf
        diagnostics: List[Tuple[ChessMove, float]] = []
        for move in legal_moves:
            score = sign * self.evaluate(state.play(move))
            diagnostics.append((move, score))
            if score > best_score:
                best_score = score
                best_move = move
        self._log_diagnostics(diagnostics, best_move)
        return best_move

    def search(self, state: ChessState, depth: int) -> Tuple[float, ChessMove]:
        """Root of the minimax search: white maximizes, black minimizes."""
        legal_moves = state.all_legal_moves()
        if not legal_moves:
            raise NoLegalMovesError("No legal moves available.")

        maximizing = state.turn is Color.WHITE
        alpha, beta = -math.inf, math.inf
        best_move = legal_moves[0]
        best_value = -math.inf if maximizing else math.inf
        diagnostics: List[Tuple[ChessMove, float]] = []

        for move in legal_moves:
            value = self._alphabeta(state.play(move), depth - 1, alpha, beta)
            diagnostics.append((move, value))
            if maximizing:
                if value > best_value:
                    best_value = value
                    best_move = move
                alpha = max(alpha, best_value)
            else:
                if value < best_value:
                    best_value = value
                    best_move = move
                beta = min(beta, best_value)
            if self.config.use_pruning and beta <= alpha:
                break

        self._log_diagnostics(diagnostics, best_move, reverse=maximizing)
        return best_value, best_move

    def _alphabeta(self, state: ChessState, depth: int, alpha: float, beta: float) -> float:
        if depth <= 0:
            return self.evaluate(state)

        maximizing = state.turn is Color.WHITE
        legal_moves = state.all_moves_for(state.turn)
        if not legal_moves:
            return -math.inf if maximizing else math.inf

        if maximizing:
            best = -math.inf
            for move in legal_moves:
                best = max(best, self._alphabeta(state.play(move), depth - 1, alpha, beta))
                alpha = max(alpha, best)
                if self.config.use_pruning and beta <= alpha:
                    break
            return best

        best = math.inf
        for move in legal_moves:
            best = min(best, self._alphabeta(state.play(move), depth - 1, alpha, beta))
            beta = min(beta, best)
            if self.config.use_pruning and beta <= alpha:
                break
        return best

    def _log_diagnostics(
        self,
        diagnostics: List[Tuple[ChessMove, float]],
        chosen: ChessMove,
        reverse: bool = True,
    ) -> None:
        """Emit top-k candidate breakdown when DEBUG is enabled."""
        if not LOGGER.isEnabledFor(logging.DEBUG):
            return
        ranked = sorted(diagnostics, key=lambda item: item[1], reverse=reverse)
        for idx, (move, value) in enumerate(ranked[: self.config.debug_top_k], start=1):
            LOGGER.debug("Candidate #%d move=%s eval=%.1f chosen=%s", idx, move, value, move == chosen)


def select_ai_move(
    state: ChessState,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
    config: Optional[ChessAIConfig] = None,
) -> ChessMove:
    """Pick the AI's move for the side to move."""
    return ChessAI(difficulty=difficulty, rng=rng, config=config).choose_move(state)
