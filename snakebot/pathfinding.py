"""
Pathfinding: BFS for shortest paths around snake bodies

Handles:
- Board edges as blocked
- Snake bodies as blocked, except tails that will move out of the way
  (a stacked tail, left behind by eating, stays put and blocks)
- A snake head as the goal cell (needed for hunting and avoidance paths)
- Deadline: gives up and reports no path once the turn budget is spent
"""
from typing import List, Optional, Set
from collections import deque
import logging
import time

from snakebot.models import Point
from snakebot.game_state import GameStateStore
from snakebot.config import DEADLINE_CHECK_INTERVAL

logger = logging.getLogger(__name__)


def shortest_path(
    start: Point,
    goal: Point,
    store: GameStateStore,
    deadline: Optional[float] = None
) -> Optional[List[Point]]:
    """
    Find shortest path using BFS.

    Neighbors are expanded left, right, down, up, so among paths of equal
    length the result is always the same one.

    Args:
        start: Starting cell (normally our head)
        goal: Destination cell
        store: Game state store holding the current snapshot
        deadline: time.monotonic() value after which the search is abandoned

    Returns:
        List of cells from start to goal inclusive, or None if unreachable
    """
    if start == goal:
        return [start]

    if not store.in_bounds(goal):
        return None

    blocked = store.blocked_points()
    if goal in blocked and goal not in store.head_points():
        return None

    queue = deque([(start, [start])])
    visited: Set[Point] = {start}
    expansions = 0

    while queue:
        if deadline is not None and expansions % DEADLINE_CHECK_INTERVAL == 0:
            if time.monotonic() >= deadline:
                logger.debug(f"Path search to {goal.to_tuple()} ran out of time")
                return None
        expansions += 1

        current, path = queue.popleft()

        for neighbor in store.get_rectilinear_neighbors(current):
            if neighbor in visited:
                continue

            if neighbor == goal:
                return path + [neighbor]

            if not store.in_bounds(neighbor):
                continue

            if neighbor in blocked:
                continue

            visited.add(neighbor)
            queue.append((neighbor, path + [neighbor]))

    return None
