"""
Safe-move fallback: the move of last resort
"""
import logging

from snakebot.models import Direction
from snakebot.game_state import GameStateStore

logger = logging.getLogger(__name__)


class SafeMoveFallback:
    """
    Used when the scorer finds nothing to follow, or when anything in the
    turn pipeline fails. Delegates to the store's priority search.
    """

    def __init__(self, store: GameStateStore):
        self.store = store

    def move(self) -> Direction:
        logger.info("Safe move fallback engaged")
        return self.store.safe_move()
