"""Story submission and listing service.

Holds the business rules of the API. A submission moves through
received -> validated -> sanitized -> classified -> persisted, and may be
rejected at the validation gates:

1. the author must confirm their age (client-asserted, not verified)
2. username and text are stripped of markup and length-bounded
3. the sanitized text must not be empty
4. the profanity classifier decides whether the story is flagged
5. the story is stored and its id returned

Flagged stories are kept but only surface through the flagged listing.
"""

from __future__ import annotations

import logging

from story_api.adapters.storage.base import AbstractStoryStore
from story_api.core.errors import ValidationAppError
from story_api.schemas.story import StoryCreated, StoryOut, StorySubmission
from story_api.utils.pagination import Page
from story_api.utils.profanity import ProfanityClassifier
from story_api.utils.text_sanitizer import DEFAULT_MAX_CHARS, sanitize_text

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "Anon"


class StoryService:
    """Compose sanitizer, classifier and store behind the HTTP handlers.

    Attributes:
        store: Persistence backend for stories.
        classifier: Profanity classifier deciding the flag.
    """

    def __init__(
        self,
        *,
        store: AbstractStoryStore,
        classifier: ProfanityClassifier,
        max_chars: int = DEFAULT_MAX_CHARS,
        default_username: str = DEFAULT_USERNAME,
    ) -> None:
        self.store = store
        self.classifier = classifier
        self.max_chars = max_chars
        self.default_username = default_username

    def _sanitize(self, submission: StorySubmission) -> tuple[str, str]:
        """Return the sanitized (username, text) pair.

        The placeholder username is used when the name is missing or is
        nothing but markup.
        """
        username = sanitize_text(submission.username, self.max_chars)
        if not username:
            username = sanitize_text(self.default_username, self.max_chars)
        text = sanitize_text(submission.text, self.max_chars)
        return username, text

    def submit(self, submission: StorySubmission) -> StoryCreated:
        """Validate, sanitize, classify and persist a story.

        Args:
            submission: Parsed request body.

        Returns:
            StoryCreated with the new id and the flag outcome.

        Raises:
            ValidationAppError: If age is not confirmed or the text is empty.
            StorageAppError: If the story could not be stored.
        """
        if not submission.age_confirmed:
            logger.info("story.rejected", extra={"reason": "age_confirmation_required"})
            raise ValidationAppError(
                code="age_confirmation_required",
                message="Age confirmation required",
            )

        username, text = self._sanitize(submission)

        if not text:
            logger.info("story.rejected", extra={"reason": "text_required"})
            raise ValidationAppError(
                code="text_required",
                message="Text required",
                details={"actual_value": 0},
            )

        flagged = self.classifier.classify(username, text)
        story_id = self.store.create_story(username=username, text=text, flagged=flagged)

        logger.info(
            "story.created",
            extra={"story_id": story_id, "flagged": flagged, "char_count": len(text)},
        )
        return StoryCreated(id=story_id, flagged=1 if flagged else 0)

    def list_visible(self, page: Page) -> list[StoryOut]:
        records = self.store.list_visible(limit=page.limit, offset=page.offset)
        return [StoryOut.model_validate(record) for record in records]

    def list_flagged(self) -> list[StoryOut]:
        return [StoryOut.model_validate(record) for record in self.store.list_flagged()]
