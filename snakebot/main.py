"""
Main entry point for the snakebot server

Usage:
    python -m snakebot.main

Environment variables:
    HOST, PORT: bind address (default: 0.0.0.0:9001)
    SNAKE_ENV: "production" selects the official colour
    MOVE_DEADLINE_MS: per-turn time budget (default: 240)
"""
import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from pydantic import ValidationError

from snakebot.config import (
    HOST, PORT, SNAKE_ENV, PRODUCTION_COLOR, HEAD_TYPE, TAIL_TYPE,
    MOVE_DEADLINE_MS, PATH_WORKERS, LOG_LEVEL
)
from snakebot.game_state import DEFAULT_MOVE
from snakebot.logger import DecisionLogger
from snakebot.models import Direction, GameModel, MoveRequest, TurnDecision
from snakebot.sessions import GameSession, SessionRegistry
from snakebot.strategy.fallback import SafeMoveFallback
from snakebot.strategy.scorer import PathScorer
from snakebot.strategy.targets import CandidateTargetSource

logger = logging.getLogger(__name__)


class SnakeBot:
    """
    Turn handler.

    Responsibilities:
    - Keep one session (and state store) per game
    - Update the store with each snapshot before any path search starts
    - Enumerate candidates, score paths, derive the first step
    - Fall back to a safe move when nothing scores or anything fails
    - Hand every decision to the decision logger
    """

    def __init__(
        self,
        sessions: Optional[SessionRegistry] = None,
        scorer: Optional[PathScorer] = None,
        targets: Optional[CandidateTargetSource] = None,
        decision_logger: Optional[DecisionLogger] = None,
        deadline_ms: int = MOVE_DEADLINE_MS,
        workers: int = PATH_WORKERS
    ):
        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="path")
        self.sessions = sessions or SessionRegistry()
        self.scorer = scorer or PathScorer(executor=self.executor)
        self.targets = targets or CandidateTargetSource()
        self.decisions = decision_logger or DecisionLogger()
        self.deadline_ms = deadline_ms

    def appearance(self) -> Dict[str, str]:
        """Fixed colour in production, random otherwise so test snakes differ."""
        if SNAKE_ENV == "production":
            color = PRODUCTION_COLOR
        else:
            color = f"#{random.randrange(0x1000000):06x}"
        return {"color": color, "headType": HEAD_TYPE, "tailType": TAIL_TYPE}

    def on_start(self, payload: Dict[str, Any]) -> Dict[str, str]:
        self.sessions.prune()
        if not isinstance(payload, dict):
            logger.error(f"Start request is not an object: {type(payload).__name__}")
            return self.appearance()
        try:
            move_request = MoveRequest(**payload)
            session = self.sessions.start(move_request.game.id, move_request.you.name)
            session.store.update(move_request.to_state())
            self.decisions.open_game(session.game_id, session.store.my_name())
        except (ValidationError, ValueError) as e:
            logger.error(f"Could not read start request: {e}")
        return self.appearance()

    def on_move(self, payload: Dict[str, Any]) -> Direction:
        """Decide this turn's move. Never raises."""
        started = time.monotonic()
        deadline = started + self.deadline_ms / 1000.0
        session: Optional[GameSession] = None

        try:
            state = MoveRequest(**payload).to_state()
            current = self.sessions.get(state.game_id)
            current.store.update(state)
            session = current
            decision = self._decide(session, started, deadline)
        except Exception as e:
            logger.error(f"Error in move: {e}", exc_info=True)
            decision = self._emergency_decision(session, payload, started)

        if session is not None:
            session.last_decision = decision
        self.decisions.record(decision)
        return decision.move

    def on_end(self, payload: Dict[str, Any]):
        if not isinstance(payload, dict):
            logger.warning(f"End request is not an object: {type(payload).__name__}")
            return
        try:
            game_id = GameModel(**payload.get("game", {})).id
        except (ValidationError, TypeError) as e:
            logger.warning(f"Could not read end request: {e}")
            return
        self.sessions.end(game_id)
        self.decisions.close_game(game_id)

    def _decide(self, session: GameSession, started: float, deadline: float) -> TurnDecision:
        store = session.store
        base = dict(game_id=session.game_id, turn=store.turn(), head=store.my_position())

        if time.monotonic() >= deadline:
            logger.warning(f"Turn {store.turn()}: deadline passed before path search")
            return TurnDecision(
                move=SafeMoveFallback(store).move(), used_fallback=True,
                elapsed_ms=_elapsed_ms(started), **base
            )

        candidates = self.targets.candidates(store)
        best = self.scorer.select_path(store, candidates, deadline)

        if best is None:
            return TurnDecision(
                move=SafeMoveFallback(store).move(), used_fallback=True,
                elapsed_ms=_elapsed_ms(started), **base
            )

        move = store.direction_between(best.points[0], best.points[1])
        logger.info(f"Turn {store.turn()}: moving {move.value} towards {best.target.to_tuple()}")
        return TurnDecision(
            move=move, target=best.target, path=best.points, score=best.score,
            elapsed_ms=_elapsed_ms(started), **base
        )

    def _emergency_decision(
        self,
        session: Optional[GameSession],
        payload: Dict[str, Any],
        started: float
    ) -> TurnDecision:
        """Safe move on this turn's snapshot, or the default move without one."""
        game = payload.get("game") if isinstance(payload, dict) else None
        game_id = str(game.get("id", "")) if isinstance(game, dict) else ""
        move = DEFAULT_MOVE
        turn = -1
        head = None

        if session is not None:
            try:
                move = SafeMoveFallback(session.store).move()
                turn = session.store.turn()
                head = session.store.my_position()
            except Exception as e:
                logger.error(f"Safe move failed, using {DEFAULT_MOVE.value}: {e}", exc_info=True)

        return TurnDecision(
            game_id=game_id, turn=turn, head=head, move=move,
            used_fallback=True, elapsed_ms=_elapsed_ms(started)
        )

    def shutdown(self):
        self.executor.shutdown(wait=False, cancel_futures=True)


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000.0


def create_app(bot: Optional[SnakeBot] = None) -> Flask:
    """Flask app exposing the game API routes."""
    bot = bot or SnakeBot()
    app = Flask(__name__)
    app.extensions["snakebot"] = bot

    @app.route("/start", methods=["POST"])
    def start():
        logger.debug("Enter /start")
        return jsonify(bot.on_start(request.get_json(silent=True) or {}))

    @app.route("/move", methods=["POST"])
    def move():
        direction = bot.on_move(request.get_json(silent=True) or {})
        return jsonify({"move": direction.value})

    @app.route("/end", methods=["POST"])
    def end():
        logger.debug("Enter /end")
        bot.on_end(request.get_json(silent=True) or {})
        return jsonify({})

    @app.route("/ping", methods=["POST"])
    def ping():
        return jsonify({})

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "method not allowed"}), 405

    return app


def main():
    """Main entry point"""
    logging.basicConfig(
        level=LOG_LEVEL,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    logger.info(f"Snake listening on {HOST}:{PORT} (env={SNAKE_ENV})")
    bot = SnakeBot()
    app = create_app(bot)
    try:
        app.run(host=HOST, port=PORT, threaded=True)
    finally:
        bot.shutdown()


if __name__ == "__main__":
    main()
