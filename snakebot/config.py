"""
Configuration for the snakebot decision engine

Game API (move request / response):
- POST /start - game begins, respond with appearance (color, headType, tailType)
- POST /move - full board snapshot, respond with {"move": "up"|"down"|"left"|"right"}
- POST /end - game over, drop per-game state
- POST /ping - liveness check
- Coordinates: x grows to the right, y grows downward ("up" is y - 1)
- Timeout: 500ms per move on the game server side
"""
import os
from typing import Optional

# Server
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "9001"))
SNAKE_ENV: str = os.getenv("SNAKE_ENV", "development")

# Appearance
PRODUCTION_COLOR: str = os.getenv("PRODUCTION_COLOR", "#11FF55")
HEAD_TYPE: str = os.getenv("HEAD_TYPE", "fang")
TAIL_TYPE: str = os.getenv("TAIL_TYPE", "hook")

# Timing
MOVE_DEADLINE_MS: int = int(os.getenv("MOVE_DEADLINE_MS", "240"))  # about half the server timeout
PATH_WORKERS: int = int(os.getenv("PATH_WORKERS", "8"))
DEADLINE_CHECK_INTERVAL: int = 64  # BFS expansions between clock reads

# Candidate targets (0 = every cell on the board)
CANDIDATE_LIMIT: int = int(os.getenv("CANDIDATE_LIMIT", "0"))

# Path scoring weights
SELF_PROXIMITY_WEIGHT: float = float(os.getenv("SELF_PROXIMITY_WEIGHT", "5"))
FOOD_PROXIMITY_WEIGHT: float = float(os.getenv("FOOD_PROXIMITY_WEIGHT", "35"))
CENTER_PROXIMITY_WEIGHT: float = float(os.getenv("CENTER_PROXIMITY_WEIGHT", "35"))
AGGRESSION_WEIGHT: float = float(os.getenv("AGGRESSION_WEIGHT", "25"))
AVOIDANCE_WEIGHT: float = float(os.getenv("AVOIDANCE_WEIGHT", "20"))
HUNGER_DIVISOR: float = 33.0
MAX_HEALTH: int = 100

# Sessions
SESSION_TTL_SECONDS: float = float(os.getenv("SESSION_TTL_SECONDS", "600"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR: str = os.getenv("LOG_DIR", "logs")
DECISION_LOG_DIR: Optional[str] = os.getenv("DECISION_LOG_DIR") or None
