"""
Text normalization utilities for category matching.

Backend labels arrive in every casing and spacing ("LargeCap", "Large Cap ",
"EQUITY"), so every comparison goes through these helpers first.
"""

import re
from typing import Any


def normalize_field(value: Any) -> str:
    """
    Normalize a free-text fund attribute for keyword matching.

    Rules:
    1. None becomes the empty string
    2. Non-string values are stringified
    3. Lowercase
    4. Trim leading/trailing whitespace

    Punctuation is preserved because keywords such as "banking & psu" and
    "g-sec" depend on it.

    Examples:
        >>> normalize_field("  Large Cap ")
        'large cap'
        >>> normalize_field(None)
        ''
        >>> normalize_field(42)
        '42'
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.lower().strip()


def normalize_slug(slug: str | None) -> str:
    """
    Normalize a URL slug: lowercase, trimmed, whitespace runs become hyphens.

    Examples:
        >>> normalize_slug("Large Cap")
        'large-cap'
        >>> normalize_slug("ELSS")
        'elss'
    """
    if not slug:
        return ""
    return re.sub(r"\s+", "-", slug.strip().lower())


def title_from_slug(slug: str) -> str:
    """
    Title-case a hyphenated slug for display.

    Examples:
        >>> title_from_slug("solution-oriented")
        'Solution Oriented'
    """
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-") if word)
