"""
Path scorer: turns one shortest path per candidate cell into a single decision

Reference paths (shortest path whose destination is...):
- food: any food cell
- aggression: the head of an opponent shorter than us
- non-avoidance: the head of an opponent at least as long as us

Scoring (scale = board width + board height):
- self:       (1 - len(path)/scale) * w_self
- food:       (overlap(path, food)/scale) * w_food * (1 + hunger/33)
- centre:     (1 - avg centre distance/scale) * w_centre
- aggression: (overlap(path, aggression)/scale) * w_aggression
- avoidance:  (1 - overlap(path, non-avoidance)/scale) * w_avoidance

overlap() counts the index positions where two paths hold the same cell.
"""
from concurrent.futures import Executor, wait
from dataclasses import dataclass
from typing import Collection, List, Optional, Sequence
import logging
import time

from snakebot.models import Point, ScoredPath
from snakebot.game_state import GameStateStore
from snakebot.pathfinding import shortest_path
from snakebot.config import (
    SELF_PROXIMITY_WEIGHT, FOOD_PROXIMITY_WEIGHT, CENTER_PROXIMITY_WEIGHT,
    AGGRESSION_WEIGHT, AVOIDANCE_WEIGHT, HUNGER_DIVISOR
)

logger = logging.getLogger(__name__)


@dataclass
class ReferencePaths:
    """Strategic paths the candidates are compared against"""
    food: Optional[List[Point]] = None
    aggression: Optional[List[Point]] = None
    non_avoidance: Optional[List[Point]] = None


def path_overlap(path: Sequence[Point], reference: Optional[Sequence[Point]]) -> int:
    """Number of index positions at which both paths hold the same cell."""
    if not reference:
        return 0
    return sum(1 for a, b in zip(path, reference) if a == b)


def shortest_path_to(paths: List[List[Point]], destinations: Collection[Point]) -> Optional[List[Point]]:
    """Shortest path ending in one of destinations; the earliest wins ties."""
    matching = [p for p in paths if p[-1] in destinations]
    if not matching:
        return None
    return min(matching, key=len)


class PathScorer:
    """
    Computes a path to every candidate and picks the best-scoring one.

    Path searches are submitted to the executor and joined once, bounded
    by the turn deadline. Searches that have not finished by then are
    cancelled and left out; only fully completed results are scored.
    """

    def __init__(
        self,
        executor: Optional[Executor] = None,
        self_weight: float = SELF_PROXIMITY_WEIGHT,
        food_weight: float = FOOD_PROXIMITY_WEIGHT,
        center_weight: float = CENTER_PROXIMITY_WEIGHT,
        aggression_weight: float = AGGRESSION_WEIGHT,
        avoidance_weight: float = AVOIDANCE_WEIGHT
    ):
        self.executor = executor
        self.self_weight = self_weight
        self.food_weight = food_weight
        self.center_weight = center_weight
        self.aggression_weight = aggression_weight
        self.avoidance_weight = avoidance_weight

    def compute_paths(
        self,
        store: GameStateStore,
        candidates: List[Point],
        deadline: Optional[float] = None
    ) -> List[List[Point]]:
        """
        Shortest path from our head to each candidate.

        Returns the paths that were found, in candidate order.
        """
        start = store.my_position()

        if self.executor is None:
            results = [shortest_path(start, c, store, deadline) for c in candidates]
            return [p for p in results if p is not None]

        futures = [
            self.executor.submit(shortest_path, start, c, store, deadline)
            for c in candidates
        ]
        timeout = None if deadline is None else max(0.0, deadline - time.monotonic())
        done, not_done = wait(futures, timeout=timeout)

        if not_done:
            for future in not_done:
                future.cancel()
            logger.warning(f"Deadline reached with {len(not_done)}/{len(futures)} path searches unfinished")

        paths = []
        for future in futures:
            if future not in done:
                continue
            path = future.result()
            if path is not None:
                paths.append(path)
        return paths

    def reference_paths(self, paths: List[List[Point]], store: GameStateStore) -> ReferencePaths:
        return ReferencePaths(
            food=shortest_path_to(paths, store.food_points()),
            aggression=shortest_path_to(paths, set(store.smaller_head_points())),
            non_avoidance=shortest_path_to(paths, set(store.larger_head_points()))
        )

    def score_path(self, path: Sequence[Point], refs: ReferencePaths, store: GameStateStore) -> float:
        """Weighted sum of the five heuristic terms for one path."""
        scale = store.board_width() + store.board_height()

        self_term = (1 - len(path) / scale) * self.self_weight

        food_factor = path_overlap(path, refs.food) / scale
        food_term = food_factor * self.food_weight * (1 + store.my_hunger() / HUNGER_DIVISOR)

        average_distance = sum(store.distance_from_center(p) for p in path) / len(path)
        center_term = (1 - average_distance / scale) * self.center_weight

        aggression_term = (path_overlap(path, refs.aggression) / scale) * self.aggression_weight

        avoidance_term = (1 - path_overlap(path, refs.non_avoidance) / scale) * self.avoidance_weight

        score = self_term + food_term + center_term + aggression_term + avoidance_term
        logger.debug(
            f"Path to {path[-1].to_tuple()}: self={self_term:.2f} food={food_term:.2f} "
            f"centre={center_term:.2f} aggression={aggression_term:.2f} "
            f"avoidance={avoidance_term:.2f} total={score:.2f}"
        )
        return score

    def score_paths(self, paths: List[List[Point]], store: GameStateStore) -> Optional[ScoredPath]:
        """Best-scoring path; on equal scores the earlier path keeps the lead."""
        refs = self.reference_paths(paths, store)
        best: Optional[ScoredPath] = None
        for path in paths:
            score = self.score_path(path, refs, store)
            if best is None or score > best.score:
                best = ScoredPath(points=tuple(path), score=score)
        return best

    def select_path(
        self,
        store: GameStateStore,
        candidates: List[Point],
        deadline: Optional[float] = None
    ) -> Optional[ScoredPath]:
        """
        Pick the path to follow this turn.

        Returns None when no candidate is reachable or the winner does not
        leave the head cell; the caller then falls back to a safe move.
        """
        started = time.monotonic()
        paths = self.compute_paths(store, candidates, deadline)
        generated = time.monotonic()
        logger.info(
            f"{len(paths)} paths generated for {len(candidates)} candidates "
            f"in {(generated - started) * 1000:.1f}ms"
        )

        if not paths:
            logger.info("No reachable candidate")
            return None

        best = self.score_paths(paths, store)
        logger.info(f"{len(paths)} paths scored in {(time.monotonic() - generated) * 1000:.1f}ms")

        if best is None or len(best.points) < 2:
            logger.info("Best path does not leave the head cell")
            return None

        logger.info(f"Best path to {best.target.to_tuple()} with score {best.score:.2f}")
        return best
