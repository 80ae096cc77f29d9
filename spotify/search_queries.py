"""Deterministic search-query builders for Spotify track lookups."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from metadata.types import CandidateTrack, CanonicalTrack

logger = logging.getLogger(__name__)

SearchFn = Callable[[str, int], Sequence[CandidateTrack]]


def build_primary_query(track: CanonicalTrack) -> str:
    """Build the field-qualified query.

    Examples:
    - ``track:"Dreams" artist:"Fleetwood Mac" album:"Rumours"``
    - ``track:"Let It Be" artist:"The Beatles"`` when the album is empty
    """
    query = f'track:"{track.name}" artist:"{track.artist}"'
    if track.album:
        query += f' album:"{track.album}"'
    return query


def build_fallback_query(track: CanonicalTrack) -> str:
    """Build the free-text query used when the primary query finds nothing."""
    return f'"{track.name}" "{track.artist}"'


def search_with_fallback(search: SearchFn, track: CanonicalTrack, limit: int = 5) -> list[CandidateTrack]:
    """Run the primary query, then the fallback query only if the first came back empty.

    The fallback results replace the empty primary result; the two are never merged.
    """
    candidates = list(search(build_primary_query(track), limit))
    if candidates:
        return candidates
    logger.debug("No results for primary query; retrying %r by %r as free text", track.name, track.artist)
    return list(search(build_fallback_query(track), limit))
