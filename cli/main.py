"""CLI entrypoint for playing chess, Reversi or Tic-Tac-Toe against the AI."""

from __future__ import annotations

import argparse
import logging
import random
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from ai.chess_ai import ChessAI
from ai.config import AIConfig
from ai.reversi_ai import ReversiAI
from ai.tictactoe_ai import TicTacToeAI
from games.chess.board import ChessState
from games.chess.pieces import Color
from games.chess.rules import Square
from games.common import Difficulty, IllegalMoveError, Position
from games.reversi.board import Disc, ReversiState
from games.tictactoe.board import GameStatus, Mark, TicTacToeState

LOGGER = logging.getLogger("boardgames.cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play chess, Reversi or Tic-Tac-Toe in the terminal.")
    parser.add_argument("--game", type=str, default="tictactoe", choices=["chess", "reversi", "tictactoe"])
    parser.add_argument(
        "--difficulty",
        type=str,
        default=Difficulty.MEDIUM.value,
        choices=[d.value for d in Difficulty],
        help="AI strength tier",
    )
    parser.add_argument("--seed", type=int, default=None, help="Deterministic AI seed")
    parser.add_argument(
        "--human-side",
        type=str,
        default="first",
        choices=["first", "second"],
        help="Whether the human moves first (white / black discs / X) or second",
    )
    parser.add_argument("--ai-vs-ai", action="store_true", help="Watch the AI play both sides")
    parser.add_argument("--config", type=str, default=None, help="Path to AI config JSON")
    parser.add_argument("--log-level", type=str, default="INFO", help="Python logging level")
    return parser.parse_args(argv)


def parse_chess_move(command: str) -> Optional[Tuple[Square, Square]]:
    """Parse ``e2 e4`` or ``e2e4``."""
    text = command.strip().replace("-", " ")
    parts = text.split()
    if len(parts) == 1 and len(parts[0]) == 4:
        parts = [parts[0][:2], parts[0][2:]]
    if len(parts) != 2:
        return None
    try:
        return Square.parse(parts[0]), Square.parse(parts[1])
    except ValueError:
        return None


def parse_reversi_move(command: str) -> Optional[Position]:
    """Parse ``<row> <col>``."""
    parts = command.strip().split()
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def parse_tictactoe_move(command: str) -> Optional[int]:
    """Parse a cell index 0-8."""
    try:
        return int(command.strip())
    except ValueError:
        return None


class GameController(ABC):
    """Holds the current state and its undo trail for one terminal game."""

    help_text = ""

    def __init__(self, state: Any, ai: Any) -> None:
        self.state = state
        self.ai = ai

    @abstractmethod
    def side_to_move(self) -> int:
        """0 for the side that moved first, 1 for the other."""
        raise NotImplementedError

    @abstractmethod
    def is_over(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def outcome(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def status_line(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def parse(self, command: str) -> Any:
        raise NotImplementedError

    def play(self, move: Any) -> None:
        self.state = self.state.apply_move(move)

    def ai_turn(self) -> Any:
        move = self.ai.choose_move(self.state)
        self.play(move)
        return move

    def undo(self, plies: int) -> bool:
        state = self.state
        for _ in range(plies):
            try:
                state = state.undo_move()
            except IllegalMoveError:
                return False
        self.state = state
        return True

    def before_turn(self) -> Optional[str]:
        """Hook for automatic transitions such as a forced pass."""
        return None


class ChessController(GameController):
    help_text = "Commands: <from> <to> (e.g. e2 e4) | resign | undo | help | quit"

    def side_to_move(self) -> int:
        return 0 if self.state.turn is Color.WHITE else 1

    def is_over(self) -> bool:
        return self.state.is_game_over

    def outcome(self) -> str:
        if self.state.resigned_by is not None:
            return f"{self.state.resigned_by.value} resigned; {self.state.winner.value} wins."
        if self.state.is_checkmate:
            return f"Checkmate. {self.state.winner.value} wins."
        return "Stalemate."

    def status_line(self) -> str:
        check = " (check)" if self.state.is_check else ""
        return f"Turn: {self.state.turn.value}{check} | Moves played: {len(self.state.history)}"

    def parse(self, command: str) -> Any:
        if command.strip().lower() == "resign":
            return "resign"
        return parse_chess_move(command)

    def play(self, move: Any) -> None:
        if move == "resign":
            self.state = self.state.resign()
        else:
            self.state = self.state.apply_move(move)


class ReversiController(GameController):
    help_text = "Commands: <row> <col> (valid cells marked *) | undo | help | quit"

    def side_to_move(self) -> int:
        return 0 if self.state.current_player is Disc.BLACK else 1

    def is_over(self) -> bool:
        return self.state.is_game_over

    def outcome(self) -> str:
        score = f"black {self.state.black_count} - white {self.state.white_count}"
        if self.state.winner is None:
            return f"Draw ({score})."
        return f"{self.state.winner.value} wins ({score})."

    def status_line(self) -> str:
        return (
            f"Turn: {self.state.current_player.value} | "
            f"black {self.state.black_count} - white {self.state.white_count}"
        )

    def parse(self, command: str) -> Any:
        return parse_reversi_move(command)

    def before_turn(self) -> Optional[str]:
        if self.state.must_pass:
            passer = self.state.current_player.value
            self.state = self.state.pass_turn()
            return f"{passer} has no legal move and passes."
        return None


class TicTacToeController(GameController):
    help_text = "Commands: <cell 0-8> | undo | help | quit"

    def side_to_move(self) -> int:
        return 0 if self.state.current_player is Mark.X else 1

    def is_over(self) -> bool:
        return self.state.is_game_over

    def outcome(self) -> str:
        if self.state.status is GameStatus.DRAW:
            return "Draw."
        line = "-".join(str(i) for i in self.state.winning_line)
        return f"{self.state.winner.value} wins on line {line}."

    def status_line(self) -> str:
        return f"Turn: {self.state.current_player.value}"

    def parse(self, command: str) -> Any:
        return parse_tictactoe_move(command)


def build_controller(game: str, difficulty: str, seed: Optional[int], config: AIConfig) -> GameController:
    rng = random.Random(seed)
    if game == "chess":
        return ChessController(ChessState.new_game(), ChessAI(difficulty, rng=rng, config=config.chess))
    if game == "reversi":
        return ReversiController(ReversiState.new_game(), ReversiAI(difficulty, rng=rng, config=config.reversi))
    if game == "tictactoe":
        return TicTacToeController(
            TicTacToeState.new_game(), TicTacToeAI(difficulty, rng=rng, config=config.tictactoe)
        )
    raise ValueError(f"Unsupported game: {game}")


def run_cli(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = AIConfig.from_json(args.config) if args.config else AIConfig()
    controller = build_controller(args.game, args.difficulty, args.seed, config)
    human_side = None if args.ai_vs_ai else (0 if args.human_side == "first" else 1)

    LOGGER.info("Starting %s game. difficulty=%s human=%s", args.game, args.difficulty, args.human_side)
    if human_side is not None:
        print(controller.help_text)

    while True:
        notice = controller.before_turn()
        if notice:
            print(notice)
        print()
        print(controller.state.render_ascii())
        print(controller.status_line())

        if controller.is_over():
            print(controller.outcome())
            break

        if controller.side_to_move() != human_side:
            move = controller.ai_turn()
            print(f"AI move: {move}")
            continue

        user_input = input("Your move> ").strip()
        lowered = user_input.lower()
        if lowered in {"quit", "exit"}:
            print("Exiting game.")
            break
        if lowered == "help":
            print(controller.help_text)
            continue
        if lowered == "undo":
            # Take back the AI reply together with the human move.
            if not controller.undo(2):
                print("Nothing to undo.")
            continue

        move = controller.parse(user_input)
        if move is None:
            print("Invalid command format.")
            continue
        try:
            controller.play(move)
        except IllegalMoveError as exc:
            print(f"Illegal move: {exc}")
        except ValueError:
            print("Invalid coordinates.")


if __name__ == "__main__":
    run_cli()
