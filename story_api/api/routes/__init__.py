from __future__ import annotations

from story_api.api.routes.health import router as health_router
from story_api.api.routes.stories import router as stories_router

__all__ = ["health_router", "stories_router"]
