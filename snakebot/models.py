"""
Data models for the snake decision engine

Domain types are frozen dataclasses: a GameState is replaced wholesale every
turn and never mutated, so path searches running in worker threads all see
the same snapshot.

Wire schemas (consumed fields only) are pydantic models:
- MoveRequest: body of POST /start, /move and /end
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field

from snakebot.config import MAX_HEALTH


class InvalidDirectionError(ValueError):
    """Direction token is unknown, or two points are not one step apart"""


class StateNotInitializedError(RuntimeError):
    """A query was made before the first snapshot arrived"""


class UnknownSnakeError(KeyError):
    """Snake id is not present in the current snapshot"""


@dataclass(frozen=True)
class Point:
    """Grid cell, 0-indexed from the top-left corner"""
    x: int
    y: int

    def to_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def manhattan_distance(self, other: 'Point') -> int:
        """Manhattan distance"""
        return abs(self.x - other.x) + abs(self.y - other.y)


class Direction(Enum):
    """Single-step move"""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> Tuple[int, int]:
        return _DELTAS[self]

    @classmethod
    def from_token(cls, token) -> 'Direction':
        """Accept a Direction or one of the four literal strings."""
        if isinstance(token, cls):
            return token
        try:
            return cls(token)
        except ValueError:
            raise InvalidDirectionError(f"Move {token!r} not recognized") from None


_DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


@dataclass(frozen=True)
class Snake:
    """A snake on the board. body[0] is the head, body[-1] the tail."""
    id: str
    name: str
    health: int
    body: Tuple[Point, ...]

    @property
    def head(self) -> Point:
        return self.body[0]

    @property
    def length(self) -> int:
        return len(self.body)

    @property
    def hunger(self) -> int:
        return MAX_HEALTH - self.health

    @property
    def tail_is_stacked(self) -> bool:
        """Last two segments share a cell: the tail will not move next turn."""
        return len(self.body) > 1 and self.body[-1] == self.body[-2]


@dataclass(frozen=True)
class Board:
    width: int
    height: int
    food: Tuple[Point, ...]
    snakes: Tuple[Snake, ...]


@dataclass(frozen=True)
class GameState:
    """Complete snapshot for one turn"""
    game_id: str
    turn: int
    you: Snake
    board: Board


class MoveStatus(Enum):
    """Move classification, in precedence order (first match wins)"""
    WALL = "wall"
    BODY = "body"
    CONTESTED = "contested"
    UNCONTESTED = "uncontested"


@dataclass(frozen=True)
class MoveClassification:
    """What lies one step away from a snake's head"""
    status: MoveStatus
    is_opponent_head: bool = False
    is_food: bool = False
    contesting_lengths: Tuple[int, ...] = ()


@dataclass(frozen=True)
class ScoredPath:
    """Candidate path (start and destination inclusive) with its heuristic score"""
    points: Tuple[Point, ...]
    score: float

    @property
    def target(self) -> Point:
        return self.points[-1]


@dataclass
class TurnDecision:
    """Inspectable outcome of one turn, handed to the decision logger"""
    game_id: str
    turn: int
    head: Optional[Point]
    move: Direction
    target: Optional[Point] = None
    path: Tuple[Point, ...] = ()
    score: Optional[float] = None
    used_fallback: bool = False
    elapsed_ms: float = 0.0


class PointModel(BaseModel):
    x: int
    y: int

    def to_point(self) -> Point:
        return Point(self.x, self.y)


class SnakeModel(BaseModel):
    id: str
    name: str = ""
    health: int = MAX_HEALTH
    body: List[PointModel] = Field(default_factory=list)

    def to_snake(self) -> Snake:
        return Snake(
            id=self.id,
            name=self.name or self.id,
            health=self.health,
            body=tuple(p.to_point() for p in self.body)
        )


class BoardModel(BaseModel):
    width: int
    height: int
    food: List[PointModel] = Field(default_factory=list)
    snakes: List[SnakeModel] = Field(default_factory=list)


class GameModel(BaseModel):
    id: str


class MoveRequest(BaseModel):
    """Request body shared by /start, /move and /end"""
    game: GameModel
    turn: int = 0
    board: BoardModel
    you: SnakeModel

    def to_state(self) -> GameState:
        """Convert into the immutable domain snapshot."""
        you = self.you.to_snake()
        if not you.body:
            raise ValueError("own snake has an empty body")
        snakes = tuple(s.to_snake() for s in self.board.snakes if s.body)
        if all(s.id != you.id for s in snakes):
            snakes = (you,) + snakes
        return GameState(
            game_id=self.game.id,
            turn=self.turn,
            you=you,
            board=Board(
                width=self.board.width,
                height=self.board.height,
                food=tuple(f.to_point() for f in self.board.food),
                snakes=snakes
            )
        )
