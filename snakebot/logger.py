"""
Decision logging for snakebot
"""
import logging
import os
import sys
from typing import Dict, Optional

from snakebot.models import TurnDecision
from snakebot.config import DECISION_LOG_DIR


class DecisionLogger:
    """
    Writes one line per turn: turn, head, target, path and chosen move.

    Records go to the "decisions" logger. With a log directory, each game
    also gets its own file named <game_id>_<snake_name>.log.
    """

    def __init__(self, log_dir: Optional[str] = DECISION_LOG_DIR):
        self.log_dir = log_dir
        self.logger = logging.getLogger("decisions")
        self.logger.setLevel(logging.INFO)
        self.file_handlers: Dict[str, logging.FileHandler] = {}

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(
                '%(asctime)s [DECISION] %(message)s',
                datefmt='%H:%M:%S'
            ))
            self.logger.addHandler(handler)
            self.logger.propagate = False

    def _game_logger(self, game_id: str) -> logging.Logger:
        """Per-game child logger while a game file is open, else the shared one."""
        if game_id in self.file_handlers:
            return self.logger.getChild(game_id)
        return self.logger

    def open_game(self, game_id: str, snake_name: str):
        """Start a per-game log file (only when a log directory is set)."""
        if not self.log_dir or game_id in self.file_handlers:
            return
        os.makedirs(self.log_dir, exist_ok=True)
        path = os.path.join(self.log_dir, f"{game_id}_{snake_name}.log")
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(logging.Formatter('%(asctime)s %(message)s'))
        self.file_handlers[game_id] = handler
        self._game_logger(game_id).addHandler(handler)

    def close_game(self, game_id: str):
        handler = self.file_handlers.get(game_id)
        if handler:
            self._game_logger(game_id).removeHandler(handler)
            del self.file_handlers[game_id]
            handler.close()

    def record(self, decision: TurnDecision):
        head = decision.head.to_tuple() if decision.head else None
        target = decision.target.to_tuple() if decision.target else None
        path = [p.to_tuple() for p in decision.path]
        source = "fallback" if decision.used_fallback else "scored"
        score = f"{decision.score:.2f}" if decision.score is not None else "-"
        self._game_logger(decision.game_id).info(
            f"game={decision.game_id} turn={decision.turn} head={head} "
            f"move={decision.move.value} ({source}) target={target} score={score} "
            f"path={path} elapsed={decision.elapsed_ms:.1f}ms"
        )
