"""
Run the API with uvicorn on SERVER_HOST:SERVER_PORT. From the project root:

  python -m app.server
"""

import logging
import sys

import uvicorn
from dotenv import load_dotenv

from app.core.config import get_settings
from app.core.log_config import configure_logging

logger = logging.getLogger(__name__)


def main() -> int:
    load_dotenv()
    settings = get_settings()
    configure_logging(settings)
    try:
        uvicorn.run(
            "app.main:app",
            host=settings.SERVER_HOST,
            port=settings.SERVER_PORT,
            reload=settings.APP_ENV == "dev" and settings.DEBUG,
            log_level=settings.LOG_LEVEL.lower(),
        )
    except Exception as e:
        logger.exception("Server failed to start: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
