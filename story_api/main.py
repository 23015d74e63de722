import logging

import uvicorn

from story_api.core.app_factory import create_app
from story_api.core.config import settings

logger = logging.getLogger(__name__)

app = create_app(settings)


def run() -> None:
    """Serve the API with uvicorn on the configured PORT."""
    logger.info("server.starting", extra={"port": settings.port})
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
