"""Word-list based offensive content detection."""

from __future__ import annotations

from typing import Iterable

from better_profanity import Profanity


class ProfanityClassifier:
    """Decide whether a submission should be auto-flagged.

    Wraps a private ``better_profanity.Profanity`` instance loaded with the
    library's default word list, so extra words configured for one app never
    leak into another. Matching is case-insensitive and works on whole
    tokens, including common character substitutions (``sh1t``).
    """

    def __init__(self, extra_words: Iterable[str] | None = None) -> None:
        self._profanity = Profanity()
        words = [w.strip() for w in extra_words or () if w and w.strip()]
        if words:
            self._profanity.add_censor_words(words)

    def is_profane(self, value: str | None) -> bool:
        if not value:
            return False
        return self._profanity.contains_profanity(value)

    def classify(self, username: str | None, text: str | None) -> bool:
        """Return True when either the display name or the body is offensive."""
        return self.is_profane(username) or self.is_profane(text)
