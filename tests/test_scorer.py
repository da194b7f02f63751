"""
Tests for path scoring and target selection
"""
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from snakebot.game_state import GameStateStore
from snakebot.models import Direction, Point
from snakebot.pathfinding import shortest_path
from snakebot.strategy import scorer as scorer_module
from snakebot.strategy.scorer import PathScorer, path_overlap, shortest_path_to
from snakebot.strategy.targets import CandidateTargetSource


def _points(*cells):
    return [Point(x, y) for x, y in cells]


def test_path_overlap():
    """Overlap counts equal cells at equal indices, up to the shorter path"""
    a = _points((0, 0), (1, 0), (2, 0), (3, 0))
    b = _points((0, 0), (1, 0), (1, 1))
    c = _points((0, 0), (0, 1), (2, 0))
    assert path_overlap(a, b) == 2
    assert path_overlap(a, c) == 2
    assert path_overlap(a, None) == 0
    assert path_overlap(a, a) == 4


def test_shortest_path_to_keeps_first_on_ties():
    """Reference path is the shortest match, earliest on equal length"""
    paths = [
        _points((0, 0), (1, 0), (2, 0)),
        _points((0, 0), (0, 1)),
        _points((0, 0), (1, 0)),
    ]
    assert shortest_path_to(paths, {Point(0, 1), Point(1, 0)}) == paths[1]
    assert shortest_path_to(paths, {Point(2, 0)}) == paths[0]
    assert shortest_path_to(paths, {Point(4, 4)}) is None


def test_candidate_sources(make_store):
    """Whole board by default, nearest cells when limited"""
    store = make_store(4, 4, [(0, 0)])
    assert len(CandidateTargetSource().candidates(store)) == 16
    nearest = CandidateTargetSource(limit=3).candidates(store)
    assert nearest == [Point(0, 0), Point(1, 0), Point(0, 1)]


def test_scenario_empty_board_food_in_corner(make_store):
    """Head in one corner, food in the other: move right along a monotonic path"""
    store = make_store(5, 5, [(0, 0)], food=[(4, 4)])
    scorer = PathScorer()
    best = scorer.select_path(store, CandidateTargetSource().candidates(store))

    assert best is not None
    assert GameStateStore.direction_between(best.points[0], best.points[1]) == Direction.RIGHT
    assert len(best.points) == best.points[0].manhattan_distance(best.target) + 1
    for a, b in zip(best.points, best.points[1:]):
        assert b.x >= a.x and b.y >= a.y
    assert best.target == Point(4, 4)


def test_scenario_enclosed_snake(make_store):
    """No reachable cell: nothing selected, safe move is deterministic"""
    store = make_store(2, 2, [(0, 0), (1, 0), (1, 1), (0, 1), (0, 1)])
    scorer = PathScorer()
    assert scorer.select_path(store, CandidateTargetSource().candidates(store)) is None
    assert store.safe_move() == Direction.UP
    assert store.safe_move() == Direction.UP


def test_scenario_equal_scores_first_candidate_wins(make_store):
    """Symmetric candidates score the same; enumeration order decides"""
    store = make_store(5, 5, [(2, 2)])
    scorer = PathScorer()
    left, right = Point(1, 2), Point(3, 2)

    best = scorer.select_path(store, [left, right])
    assert best.target == left

    best = scorer.select_path(store, [right, left])
    assert best.target == right


def test_selection_is_deterministic(make_store):
    """Same snapshot, same winner and score, with or without threads"""
    store = make_store(
        11, 11, [(5, 5), (5, 6), (5, 7)],
        others=[("a", [(1, 1), (1, 2)]), ("b", [(8, 8), (8, 9), (8, 10), (9, 10)])],
        food=[(2, 9), (9, 2)],
        health=40
    )
    candidates = CandidateTargetSource().candidates(store)

    first = PathScorer().select_path(store, candidates)
    second = PathScorer().select_path(store, candidates)
    assert first == second

    with ThreadPoolExecutor(max_workers=4) as executor:
        threaded = PathScorer(executor=executor).select_path(store, candidates)
    assert threaded == first


def test_reference_paths(make_store):
    """Food, aggression and non-avoidance paths come from the same path set"""
    store = make_store(
        7, 7, [(3, 3), (3, 4), (3, 5)],
        others=[("small", [(0, 3), (0, 4)]), ("big", [(6, 0), (6, 1), (6, 2), (6, 3)])],
        food=[(3, 1), (5, 5)]
    )
    scorer = PathScorer()
    paths = scorer.compute_paths(store, CandidateTargetSource().candidates(store))
    refs = scorer.reference_paths(paths, store)

    assert refs.food[-1] == Point(3, 1)
    assert len(refs.food) == 3
    assert refs.aggression[-1] == Point(0, 3)
    assert refs.non_avoidance[-1] == Point(6, 0)


def test_missing_reference_paths(make_store):
    """Alone on the board: no aggression or avoidance reference"""
    store = make_store(5, 5, [(2, 2)])
    scorer = PathScorer()
    paths = scorer.compute_paths(store, CandidateTargetSource().candidates(store))
    refs = scorer.reference_paths(paths, store)
    assert refs.food is None
    assert refs.aggression is None
    assert refs.non_avoidance is None

    # full avoidance term, no food or aggression contribution
    path = _points((2, 2), (2, 1))
    expected = (1 - 2 / 10) * 5 + (1 - 0.5 / 10) * 35 + 20
    assert scorer.score_path(path, refs, store) == pytest.approx(expected)


def test_hunger_raises_food_term(make_store):
    """The same food-bound path scores higher when hungry"""
    path = _points((0, 0), (1, 0), (2, 0))
    scores = []
    for health in (100, 10):
        store = make_store(5, 5, [(0, 0)], food=[(2, 0)], health=health)
        scorer = PathScorer()
        refs = scorer.reference_paths([path], store)
        scores.append(scorer.score_path(path, refs, store))
    assert scores[1] > scores[0]


def test_larger_snake_path_penalised(make_store):
    """Heading straight at a larger snake costs avoidance score"""
    store = make_store(
        7, 7, [(3, 3), (3, 4)],
        others=[("big", [(3, 0), (4, 0), (5, 0), (6, 0)])]
    )
    scorer = PathScorer()
    toward = _points((3, 3), (3, 2))
    away = _points((3, 3), (2, 3))
    refs = scorer.reference_paths([_points((3, 3), (3, 2), (3, 1), (3, 0)), toward, away], store)
    assert scorer.score_path(toward, refs, store) < scorer.score_path(away, refs, store)


def test_expired_deadline_selects_nothing(make_store):
    """With the deadline already gone no path is usable"""
    store = make_store(11, 11, [(5, 5)])
    candidates = CandidateTargetSource().candidates(store)
    with ThreadPoolExecutor(max_workers=2) as executor:
        scorer = PathScorer(executor=executor)
        assert scorer.select_path(store, candidates, deadline=time.monotonic() - 1) is None


def test_slow_search_left_out_at_deadline(make_store, monkeypatch):
    """Searches still running at the deadline are dropped; the rest are scored"""
    store = make_store(5, 5, [(2, 2)])
    slow_goal = Point(0, 0)

    def slow_shortest_path(start, goal, store, deadline=None):
        if goal == slow_goal:
            time.sleep(0.5)
        return shortest_path(start, goal, store, deadline)

    monkeypatch.setattr(scorer_module, "shortest_path", slow_shortest_path)
    candidates = [slow_goal, Point(3, 2), Point(1, 2)]

    with ThreadPoolExecutor(max_workers=3) as executor:
        scorer = PathScorer(executor=executor)
        paths = scorer.compute_paths(store, candidates, deadline=time.monotonic() + 0.1)
        assert [p[-1] for p in paths] == [Point(3, 2), Point(1, 2)]

        best = scorer.select_path(store, candidates, deadline=time.monotonic() + 0.1)
        assert best is not None
        assert best.target == Point(3, 2)


def test_centre_term_uses_store_distance(make_store, monkeypatch):
    """Centre proximity is measured with the store's distance query"""
    store = make_store(5, 5, [(2, 2)])
    monkeypatch.setattr(store, "distance_from_center", lambda point: 0)
    scorer = PathScorer()
    refs = scorer.reference_paths([], store)
    path = _points((2, 2), (2, 1))
    assert scorer.score_path(path, refs, store) == pytest.approx((1 - 2 / 10) * 5 + 35 + 20)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
