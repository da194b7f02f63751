"""
Game state store: the current snapshot and every query over it

Holds:
- The immutable GameState for the current turn (replaced wholesale by update)
- Lookup indexes derived from it (food set, snakes by id, blocked cells)

Queries:
- Board geometry (bounds, neighbors, centre distance)
- Move classification (wall / body / contested / uncontested)
- Safe-move fallback when no scored path exists
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple
import logging

from snakebot.models import (
    Direction, GameState, InvalidDirectionError, MoveClassification, MoveStatus,
    Point, Snake, StateNotInitializedError, UnknownSnakeError
)

logger = logging.getLogger(__name__)

# Tried in this order by safe_move
SAFE_MOVE_ORDER = (Direction.LEFT, Direction.RIGHT, Direction.UP, Direction.DOWN)
DEFAULT_MOVE = Direction.UP


@dataclass(frozen=True)
class _Snapshot:
    """A GameState bundled with indexes derived from it"""
    state: GameState
    food: FrozenSet[Point]
    snakes_by_id: Dict[str, Snake]
    blocked: FrozenSet[Point]
    heads: FrozenSet[Point]


class GameStateStore:
    """
    Per-game holder of the current snapshot.

    update() swaps in a new snapshot in a single assignment, so a query
    running in a worker thread sees either the old turn or the new one,
    never a mix. Every query reads the snapshot once and works on that.
    """

    def __init__(self):
        self._snapshot: Optional[_Snapshot] = None

    def update(self, state: GameState):
        """Replace the stored snapshot with the given one."""
        snakes_by_id = {s.id: s for s in state.board.snakes}
        blocked = set()
        for snake in state.board.snakes:
            cells = snake.body if snake.tail_is_stacked else snake.body[:-1]
            blocked.update(cells)
        self._snapshot = _Snapshot(
            state=state,
            food=frozenset(state.board.food),
            snakes_by_id=snakes_by_id,
            blocked=frozenset(blocked),
            heads=frozenset(s.head for s in state.board.snakes)
        )

    def _current(self) -> _Snapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise StateNotInitializedError("No game state received yet")
        return snapshot

    @property
    def is_initialized(self) -> bool:
        return self._snapshot is not None

    @property
    def state(self) -> GameState:
        return self._current().state

    # Getters

    def turn(self) -> int:
        return self._current().state.turn

    def my_id(self) -> str:
        return self._current().state.you.id

    def my_name(self) -> str:
        return self._current().state.you.name

    def my_position(self) -> Point:
        """Where is our head?"""
        return self._current().state.you.head

    def my_length(self) -> int:
        return self._current().state.you.length

    def my_hunger(self) -> int:
        return self._current().state.you.hunger

    def board_width(self) -> int:
        return self._current().state.board.width

    def board_height(self) -> int:
        return self._current().state.board.height

    def food_points(self) -> FrozenSet[Point]:
        return self._current().food

    def snakes(self) -> Tuple[Snake, ...]:
        return self._current().state.board.snakes

    def snake(self, snake_id: str) -> Snake:
        snakes_by_id = self._current().snakes_by_id
        if snake_id not in snakes_by_id:
            raise UnknownSnakeError(snake_id)
        return snakes_by_id[snake_id]

    def snake_length(self, snake_id: str) -> int:
        return self.snake(snake_id).length

    def taken_points(self) -> List[Point]:
        """Every snake body cell, concatenated snake by snake."""
        taken: List[Point] = []
        for snake in self.snakes():
            taken.extend(snake.body)
        return taken

    def point_is_taken(self, point: Point) -> bool:
        return point in self.taken_points()

    def blocked_points(self) -> FrozenSet[Point]:
        """Body cells a path may not cross (tails excluded unless stacked)."""
        return self._current().blocked

    def head_points(self) -> FrozenSet[Point]:
        return self._current().heads

    def smaller_head_points(self) -> List[Point]:
        """Heads of opponents strictly shorter than us."""
        you = self._current().state.you
        return [s.head for s in self.snakes() if s.id != you.id and s.length < you.length]

    def larger_head_points(self) -> List[Point]:
        """Heads of opponents at least as long as us."""
        you = self._current().state.you
        return [s.head for s in self.snakes() if s.id != you.id and s.length >= you.length]

    # Geometry

    def in_bounds(self, point: Point) -> bool:
        board = self._current().state.board
        return 0 <= point.x < board.width and 0 <= point.y < board.height

    @staticmethod
    def get_rectilinear_neighbors(point: Point) -> List[Point]:
        """Left, right, down, up. The order is the tie-break order everywhere."""
        x, y = point.x, point.y
        return [
            Point(x - 1, y),
            Point(x + 1, y),
            Point(x, y + 1),
            Point(x, y - 1),
        ]

    @staticmethod
    def direction_between(start: Point, finish: Point) -> Direction:
        """Direction that moves start onto the adjacent cell finish."""
        delta = (finish.x - start.x, finish.y - start.y)
        for direction in Direction:
            if direction.delta == delta:
                return direction
        raise InvalidDirectionError(
            f"{start.to_tuple()} -> {finish.to_tuple()} is not a single step"
        )

    def center(self) -> Point:
        board = self._current().state.board
        return Point(board.width // 2, board.height // 2)

    def distance_from_center(self, point: Point) -> int:
        """Manhattan distance to the centre cell."""
        return point.manhattan_distance(self.center())

    def all_points(self) -> List[Point]:
        """Every cell on the board, row by row."""
        board = self._current().state.board
        return [Point(x, y) for y in range(board.height) for x in range(board.width)]

    def nearest_points(self, count: int) -> List[Point]:
        """The count cells closest to our head, ties kept in row order."""
        head = self.my_position()
        return sorted(self.all_points(), key=head.manhattan_distance)[:count]

    def next_to_food(self, point: Point) -> bool:
        food = self.food_points()
        return any(n in food for n in self.get_rectilinear_neighbors(point))

    def point_contested_by_larger_snake(self, point: Point) -> bool:
        """Is an opponent head at least our size next to this point?"""
        you = self._current().state.you
        neighbors = self.get_rectilinear_neighbors(point)
        for snake in self.snakes():
            if snake.id == you.id:
                continue
            if snake.head in neighbors and snake.length >= you.length:
                return True
        return False

    # Move safety

    def classify_move(self, snake_id: str, direction) -> MoveClassification:
        """
        Classify the cell a snake would enter by moving in direction.

        Status precedence: wall, body, contested, uncontested. The opponent
        head flag, the food flag and the contesting lengths are recorded
        independently of the status.
        """
        direction = Direction.from_token(direction)
        snapshot = self._current()
        if snake_id not in snapshot.snakes_by_id:
            raise UnknownSnakeError(snake_id)
        head = snapshot.snakes_by_id[snake_id].head
        dx, dy = direction.delta
        target = Point(head.x + dx, head.y + dy)

        board = snapshot.state.board
        is_wall = not (0 <= target.x < board.width and 0 <= target.y < board.height)

        is_body = False
        is_head = False
        for board_snake in snapshot.state.board.snakes:
            for i, segment in enumerate(board_snake.body):
                if segment == target:
                    is_body = True
                    if i == 0:
                        is_head = True

        neighbors = self.get_rectilinear_neighbors(target)
        contesting = tuple(
            s.length for s in snapshot.state.board.snakes
            if s.id != snake_id and s.head in neighbors
        )

        if is_wall:
            status = MoveStatus.WALL
        elif is_body:
            status = MoveStatus.BODY
        elif contesting:
            status = MoveStatus.CONTESTED
        else:
            status = MoveStatus.UNCONTESTED

        return MoveClassification(
            status=status,
            is_opponent_head=is_head,
            is_food=target in snapshot.food,
            contesting_lengths=contesting
        )

    def safe_move(self) -> Direction:
        """
        Pick a move without any path search.

        Priority:
        1. A cell contested only by smaller snakes
        2. An empty, uncontested cell
        3. Any contested cell
        4. An opponent head (take it down with us)
        5. Up
        """
        my_id = self.my_id()
        my_length = self.my_length()
        infos = [(d, self.classify_move(my_id, d)) for d in SAFE_MOVE_ORDER]

        for direction, info in infos:
            if info.status == MoveStatus.CONTESTED and my_length > max(info.contesting_lengths):
                logger.info(f"Safe move: taking cell contested by smaller snake ({direction.value})")
                return direction

        for direction, info in infos:
            if info.status == MoveStatus.UNCONTESTED:
                logger.info(f"Safe move: taking uncontested cell ({direction.value})")
                return direction

        for direction, info in infos:
            if info.status == MoveStatus.CONTESTED:
                logger.info(f"Safe move: taking contested cell ({direction.value})")
                return direction

        for direction, info in infos:
            if info.is_opponent_head:
                logger.info(f"Safe move: last resort into opponent head ({direction.value})")
                return direction

        logger.warning(f"Safe move: nothing safe, defaulting to {DEFAULT_MOVE.value}")
        return DEFAULT_MOVE
