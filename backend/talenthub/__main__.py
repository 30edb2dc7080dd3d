"""Run the API server: ``python -m talenthub``."""

import logging

import uvicorn

from talenthub.config import get_settings

logger = logging.getLogger("talenthub")


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("Starting server on port %d (environment: %s)", settings.port, settings.environment)
    logger.info("API: http://localhost:%d/api", settings.port)
    uvicorn.run(
        "talenthub.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
