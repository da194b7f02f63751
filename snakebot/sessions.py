"""
Game sessions: one state store per running game

Several games can be played by the same server at once, so each game id
gets its own GameStateStore. Sessions are removed when the game ends, or
pruned once they have been idle longer than the TTL.
"""
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Optional
import logging

from snakebot.game_state import GameStateStore
from snakebot.models import TurnDecision
from snakebot.config import SESSION_TTL_SECONDS

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """State kept for one game"""
    game_id: str
    snake_name: str = ""
    store: GameStateStore = field(default_factory=GameStateStore)
    last_decision: Optional[TurnDecision] = None
    last_seen: float = field(default_factory=time.time)


class SessionRegistry:
    """Thread-safe map of game id to GameSession."""

    def __init__(self, ttl: float = SESSION_TTL_SECONDS):
        self.ttl = ttl
        self.sessions: Dict[str, GameSession] = {}
        self.lock = Lock()

    def start(self, game_id: str, snake_name: str = "") -> GameSession:
        """Open a fresh session, replacing any left over for this id."""
        with self.lock:
            session = GameSession(game_id=game_id, snake_name=snake_name)
            self.sessions[game_id] = session
            active = len(self.sessions)
        logger.info(f"Session opened for game {game_id} ({active} active)")
        return session

    def get(self, game_id: str) -> GameSession:
        """Session for game_id, created on demand if /start was missed."""
        with self.lock:
            session = self.sessions.get(game_id)
            if session is None:
                session = GameSession(game_id=game_id)
                self.sessions[game_id] = session
                logger.info(f"Session created on first move for game {game_id}")
            session.last_seen = time.time()
            return session

    def end(self, game_id: str) -> Optional[GameSession]:
        with self.lock:
            session = self.sessions.pop(game_id, None)
        if session:
            logger.info(f"Session closed for game {game_id}")
        return session

    def prune(self, now: Optional[float] = None) -> int:
        """Drop sessions idle for longer than the TTL. Returns how many."""
        now = time.time() if now is None else now
        with self.lock:
            expired = [
                game_id for game_id, session in self.sessions.items()
                if now - session.last_seen > self.ttl
            ]
            for game_id in expired:
                del self.sessions[game_id]
        if expired:
            logger.info(f"Pruned {len(expired)} idle sessions")
        return len(expired)

    def __len__(self) -> int:
        with self.lock:
            return len(self.sessions)
