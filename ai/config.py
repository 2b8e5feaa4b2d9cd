"""AI tuning parameters, optionally loaded from a JSON file."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict


@dataclass
class ChessAIConfig:
    """Chess search settings."""

    hard_depth: int = 3
    mobility_weight: float = 10.0
    use_pruning: bool = True
    debug_top_k: int = 3

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "ChessAIConfig":
        return cls(
            hard_depth=int(payload.get("hard_depth", 3)),
            mobility_weight=float(payload.get("mobility_weight", 10.0)),
            use_pruning=bool(payload.get("use_pruning", True)),
            debug_top_k=int(payload.get("debug_top_k", 3)),
        )


@dataclass
class ReversiAIConfig:
    """Reversi search settings."""

    hard_depth: int = 3
    use_pruning: bool = True

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "ReversiAIConfig":
        return cls(
            hard_depth=int(payload.get("hard_depth", 3)),
            use_pruning=bool(payload.get("use_pruning", True)),
        )


@dataclass
class TicTacToeAIConfig:
    """Probabilities mixing random play into the heuristic tiers."""

    easy_random_rate: float = 0.7
    medium_random_rate: float = 0.4
    opening_strategic_rate: float = 0.3

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "TicTacToeAIConfig":
        return cls(
            easy_random_rate=float(payload.get("easy_random_rate", 0.7)),
            medium_random_rate=float(payload.get("medium_random_rate", 0.4)),
            opening_strategic_rate=float(payload.get("opening_strategic_rate", 0.3)),
        )


@dataclass
class AIConfig:
    """Settings for all three game AIs."""

    chess: ChessAIConfig = field(default_factory=ChessAIConfig)
    reversi: ReversiAIConfig = field(default_factory=ReversiAIConfig)
    tictactoe: TicTacToeAIConfig = field(default_factory=TicTacToeAIConfig)

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "AIConfig":
        return cls(
            chess=ChessAIConfig.from_dict(payload.get("chess", {})),
            reversi=ReversiAIConfig.from_dict(payload.get("reversi", {})),
            tictactoe=TicTacToeAIConfig.from_dict(payload.get("tictactoe", {})),
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "AIConfig":
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(payload)
