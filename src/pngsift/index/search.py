"""Keyword filtering over the metadata index."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping

LOGGER = logging.getLogger(__name__)


def matches_all(metadata: str, terms: Iterable[str]) -> bool:
    """True if every term occurs in ``metadata``, ignoring case."""
    haystack = metadata.lower()
    return all(term.lower() in haystack for term in terms)


def filter_index(index: Mapping[str, str], terms: Iterable[str]) -> Dict[str, str]:
    """Return the entries whose metadata contains every search term."""
    lowered = [term.lower() for term in terms]
    filtered = {
        identity: metadata
        for identity, metadata in index.items()
        if matches_all(metadata, lowered)
    }
    LOGGER.debug("Filter %s kept %d of %d entries", lowered, len(filtered), len(index))
    return filtered
