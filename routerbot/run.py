"""Backend launcher: validates the environment, then starts uvicorn."""
import logging
import os
import sys

import uvicorn

from routerbot.config import get_config, validate
from routerbot.errors import ConfigError
from routerbot.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    config = get_config()
    setup_logging(config.log_level)
    try:
        validate(config)
    except ConfigError as e:
        logger.error("%s", e.message)
        sys.exit(1)

    uvicorn.run(
        "routerbot.main:create_app",
        factory=True,
        host=os.environ.get("ROUTERBOT_HOST", "127.0.0.1"),
        port=int(os.environ.get("ROUTERBOT_PORT", "8765")),
    )


if __name__ == "__main__":
    main()
