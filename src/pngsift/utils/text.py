"""Text helpers for search input."""

from __future__ import annotations

from typing import List


def split_search_terms(raw: str) -> List[str]:
    """Split comma separated tags and trim the whitespace around each one.

    Blank tags are kept as empty strings, which match any metadata.
    """
    if not raw:
        return []
    return [term.strip() for term in raw.split(",")]
