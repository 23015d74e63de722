from __future__ import annotations

import re
from dataclasses import dataclass

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class Page:
    limit: int
    offset: int


def parse_int(raw: str | None) -> int | None:
    """Parse the leading integer of a query value.

    Mirrors how browsers' ``parseInt`` reads query strings: ``"10abc"`` is 10,
    ``"abc"`` and ``""`` are not numbers.

    Examples:
        >>> parse_int("25")
        25
        >>> parse_int(" 7 items")
        7
        >>> parse_int("abc") is None
        True
    """
    if raw is None:
        return None
    match = _LEADING_INT.match(raw)
    if not match:
        return None
    return int(match.group(1))


def resolve_page(
    limit: str | None,
    offset: str | None,
    *,
    default_limit: int = 20,
    max_limit: int = 50,
) -> Page:
    """Turn raw ``limit``/``offset`` query values into a safe page window.

    Rules:
        - missing, non-numeric or non-positive ``limit`` -> ``default_limit``
        - ``limit`` above ``max_limit`` -> ``max_limit``
        - missing, non-numeric or negative ``offset`` -> 0

    Args:
        limit: Raw ``limit`` query parameter.
        offset: Raw ``offset`` query parameter.
        default_limit: Page size used when no valid limit is given.
        max_limit: Hard ceiling for the page size.

    Returns:
        Page: Resolved limit and offset.
    """
    parsed_limit = parse_int(limit)
    if parsed_limit is None or parsed_limit <= 0:
        parsed_limit = default_limit

    parsed_offset = parse_int(offset)
    if parsed_offset is None or parsed_offset < 0:
        parsed_offset = 0

    return Page(limit=min(parsed_limit, max_limit), offset=parsed_offset)
