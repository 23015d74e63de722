import nh3

DEFAULT_MAX_CHARS = 2000


def sanitize_text(value: str | None, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Strip all markup from free-form input and bound its length.

    Every tag and attribute is removed; the contents of ``<script>`` and
    ``<style>`` are dropped entirely. Remaining text keeps HTML entity
    escaping (``&`` becomes ``&amp;``), so running the result through the
    sanitizer again returns it unchanged.

    Args:
        value: Raw user input. ``None`` is treated as an empty string.
        max_chars: Maximum length of the returned text.

    Returns:
        str: Plain, trimmed text of at most ``max_chars`` characters.
    """
    cleaned = nh3.clean(value or "", tags=set(), attributes={})
    return cleaned.strip()[:max_chars].rstrip()
