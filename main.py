"""
Entry point for the snakebot server
"""
import os
import time
import logging

from snakebot.config import LOG_DIR, LOG_LEVEL
from snakebot.main import main as run_server

# Configure logging and write to file per run
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_DATEFMT = '%H:%M:%S'

os.makedirs(LOG_DIR, exist_ok=True)
log_file = os.path.join(LOG_DIR, f"snakebot_{int(time.time())}.log")

logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT,
    datefmt=LOG_DATEFMT,
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(log_file, encoding="utf-8")
    ]
)
# Silence noisy libs
logging.getLogger("werkzeug").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


if __name__ == "__main__":
    logger.info(f"Logging to {log_file}")
    run_server()
