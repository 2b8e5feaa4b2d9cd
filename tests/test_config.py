import json
from pathlib import Path

from ai.config import AIConfig, ChessAIConfig, ReversiAIConfig, TicTacToeAIConfig

CONFIG_DIR = Path(__file__).resolve().parents[1] / "configs"


class TestAIConfig:
    def test_defaults(self):
        config = AIConfig()
        assert config.chess == ChessAIConfig(hard_depth=3, mobility_weight=10.0, use_pruning=True, debug_top_k=3)
        assert config.reversi.hard_depth == 3
        assert config.tictactoe.opening_strategic_rate == 0.3

    def test_partial_override(self, tmp_path):
        path = tmp_path / "ai.json"
        path.write_text(
            json.dumps({"chess": {"hard_depth": 2}, "tictactoe": {"easy_random_rate": 0.5}}),
            encoding="utf-8",
        )
        config = AIConfig.from_json(path)
        assert config.chess.hard_depth == 2
        assert config.chess.mobility_weight == 10.0
        assert config.reversi == ReversiAIConfig()
        assert config.tictactoe == TicTacToeAIConfig(easy_random_rate=0.5)

    def test_shipped_file_matches_defaults(self):
        assert AIConfig.from_json(CONFIG_DIR / "ai_config.json") == AIConfig()
