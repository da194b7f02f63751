"""
Shared builders for game snapshots
"""
import pytest

from snakebot.game_state import GameStateStore
from snakebot.models import Board, GameState, Point, Snake


def build_snake(snake_id, body, health=100):
    return Snake(
        id=snake_id,
        name=snake_id,
        health=health,
        body=tuple(Point(x, y) for x, y in body)
    )


def build_state(width, height, you, others=(), food=(), health=100, turn=0, game_id="game-1"):
    """
    Snapshot with our snake ("me") first, then each (id, body) in others.
    Bodies and food are lists of (x, y) tuples, head first.
    """
    me = build_snake("me", you, health)
    snakes = (me,) + tuple(build_snake(snake_id, body) for snake_id, body in others)
    return GameState(
        game_id=game_id,
        turn=turn,
        you=me,
        board=Board(
            width=width,
            height=height,
            food=tuple(Point(x, y) for x, y in food),
            snakes=snakes
        )
    )


def build_payload(width, height, you, others=(), food=(), health=100, turn=0, game_id="game-1"):
    """Same snapshot as build_state, as the JSON body of a move request."""
    def snake_json(snake_id, body, snake_health=100):
        return {
            "id": snake_id,
            "name": snake_id,
            "health": snake_health,
            "body": [{"x": x, "y": y} for x, y in body]
        }

    me = snake_json("me", you, health)
    return {
        "game": {"id": game_id},
        "turn": turn,
        "board": {
            "width": width,
            "height": height,
            "food": [{"x": x, "y": y} for x, y in food],
            "snakes": [me] + [snake_json(snake_id, body) for snake_id, body in others]
        },
        "you": me
    }


@pytest.fixture
def make_store():
    """Factory: GameStateStore already updated with build_state(...)."""
    def _make(*args, **kwargs):
        store = GameStateStore()
        store.update(build_state(*args, **kwargs))
        return store
    return _make


@pytest.fixture
def make_payload():
    return build_payload
