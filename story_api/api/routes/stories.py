from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from story_api.core.config import AppSettings
from story_api.schemas.story import ErrorResponse, StoryCreated, StoryOut, StorySubmission
from story_api.services.story_service import StoryService
from story_api.utils.pagination import resolve_page

router = APIRouter(tags=["Stories"])


def get_story_service(request: Request) -> StoryService:
    return request.app.state.story_service


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings.app


ServiceDep = Annotated[StoryService, Depends(get_story_service)]


@router.post(
    "/stories",
    response_model=StoryCreated,
    responses={
        400: {"model": ErrorResponse, "description": "Missing age confirmation or empty text"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Story could not be stored"},
    },
)
def submit_story(submission: StorySubmission, service: ServiceDep) -> StoryCreated:
    """Submit an anonymous story.

    Markup is stripped from username and text. Stories matching the
    offensive word list are stored flagged and hidden from the public list.
    """
    return service.submit(submission)


@router.get("/stories", response_model=list[StoryOut])
def list_stories(
    service: ServiceDep,
    app_settings: Annotated[AppSettings, Depends(get_app_settings)],
    limit: Annotated[str | None, Query(description="Page size (default 20, max 50)")] = None,
    offset: Annotated[str | None, Query(description="Number of stories to skip")] = None,
) -> list[StoryOut]:
    """List unflagged stories, newest first."""
    page = resolve_page(
        limit,
        offset,
        default_limit=app_settings.default_page_size,
        max_limit=app_settings.max_page_size,
    )
    return service.list_visible(page)


@router.get("/flagged", response_model=list[StoryOut])
def list_flagged(service: ServiceDep) -> list[StoryOut]:
    """List every flagged story, newest first. Not paginated."""
    return service.list_flagged()
