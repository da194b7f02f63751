"""
Candidate targets: which cells get a path computed each turn
"""
from typing import List

from snakebot.models import Point
from snakebot.game_state import GameStateStore
from snakebot.config import CANDIDATE_LIMIT


class CandidateTargetSource:
    """
    Enumerates destination cells worth scoring.

    With limit 0 every cell on the board is a candidate (row by row).
    With limit N only the N cells nearest our head are, which shrinks the
    pool on large boards without changing how paths are scored.
    """

    def __init__(self, limit: int = CANDIDATE_LIMIT):
        self.limit = limit

    def candidates(self, store: GameStateStore) -> List[Point]:
        if self.limit > 0:
            return store.nearest_points(self.limit)
        return store.all_points()
