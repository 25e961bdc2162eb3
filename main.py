"""
main.py — timed quiz API server entry point

The presentation layer (browser page) is served separately and talks to /api/*.
"""

import logging
import sys

from config import LOG_FILE, DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            handlers=[
                logging.FileHandler(LOG_FILE, encoding='utf-8'),
                logging.StreamHandler(sys.stdout)
            ]
        )
    except PermissionError:
        # log file locked: console only
        logging.basicConfig(level=logging.INFO)


def main() -> None:
    import uvicorn
    from api.app import create_app

    configure_logging()
    logger.info(f"=== Timed Quiz API on {DEFAULT_HOST}:{DEFAULT_PORT} ===")
    uvicorn.run(create_app(), host=DEFAULT_HOST, port=DEFAULT_PORT, log_level="warning")


if __name__ == "__main__":
    main()
