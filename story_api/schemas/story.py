"""Pydantic schemas for story requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class StorySubmission(BaseModel):
    """Body of ``POST /api/stories``.

    Fields are optional at the schema level so the service can answer a
    missing confirmation or text with its own specific messages.
    """

    model_config = ConfigDict(populate_by_name=True)

    username: str | None = Field(
        default=None,
        description="Display name; 'Anon' is stored when omitted or empty.",
    )
    text: str | None = Field(
        default=None,
        description="Story body. Markup is stripped and the result must not be empty.",
    )
    age_confirmed: bool | None = Field(
        default=None,
        alias="ageConfirmed",
        description="Client-asserted confirmation that the author is of age.",
    )


class StoryCreated(BaseModel):
    """Acknowledgement of an accepted submission."""

    ok: Literal[True] = True
    id: int = Field(..., description="Identity assigned to the new story.")
    flagged: int = Field(
        ...,
        ge=0,
        le=1,
        description="1 when the story was auto-flagged and hidden from the public list.",
    )


class StoryOut(BaseModel):
    """A stored story as returned by the listing endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    text: str
    created_at: datetime
    flagged: int = Field(..., ge=0, le=1)


class ErrorResponse(BaseModel):
    """Shape of every error body."""

    error: str = Field(..., description="Human-readable error message.")
