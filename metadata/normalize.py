"""Mapping of raw export records onto ``CanonicalTrack``."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Iterable

from metadata.importers.plist_decoder import unescape_entities
from metadata.types import CanonicalTrack, RawRecord

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*([-+]?\d+)")


def _parse_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT_RE.match(str(value or ""))
    if not match:
        return None
    return int(match.group(1))


def _text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple, dict)):
        return ""
    return str(value).strip()


def parse_duration(value: Any) -> int:
    """Parse ``H:MM:SS``, ``MM:SS`` or bare seconds into whole seconds.

    Examples:
    - ``"3:45"`` -> ``225``
    - ``"1:02:03"`` -> ``3723``
    - ``"90"`` -> ``90``
    - ``""`` -> ``0``
    """
    text = _text(value)
    if not text:
        return 0
    parts = text.split(":")
    if len(parts) in (2, 3):
        numbers = [_parse_int(part) for part in parts]
        if any(number is None for number in numbers):
            return 0
        if len(numbers) == 2:
            return numbers[0] * 60 + numbers[1]
        return numbers[0] * 3600 + numbers[1] * 60 + numbers[2]
    return _parse_int(text) or 0


def duration_from_millis(value: Any) -> int:
    millis = _parse_int(value)
    if not millis or millis < 0:
        return 0
    # Round half up on whole milliseconds.
    return (millis + 500) // 1000


def _build_track(fields: dict[str, Any], record: RawRecord) -> CanonicalTrack | None:
    name = fields["name"]
    artist = fields["artist"]
    if not name or not artist:
        return None
    return CanonicalTrack(
        name=name,
        artist=artist,
        album=fields.get("album") or "",
        year=fields.get("year") or "",
        duration_seconds=int(fields.get("duration_seconds") or 0),
        source_record=record,
    )


def normalize_tab_record(record: RawRecord) -> CanonicalTrack | None:
    """Map one tab-export row; ``None`` when name or artist is missing."""
    fields = {
        "name": _text(record.get("Name")),
        "artist": _text(record.get("Artist")),
        "album": _text(record.get("Album")),
        "year": _text(record.get("Year")),
        "duration_seconds": parse_duration(record.get("Time")),
    }
    return _build_track(fields, record)


def normalize_plist_record(record: RawRecord) -> CanonicalTrack | None:
    """Map one decoded library track; the album artist stands in for a missing artist."""
    artist = _text(record.get("Artist")) or _text(record.get("Album Artist"))
    fields = {
        "name": unescape_entities(_text(record.get("Name"))),
        "artist": unescape_entities(artist),
        "album": unescape_entities(_text(record.get("Album"))),
        "year": _text(record.get("Year")),
        "duration_seconds": duration_from_millis(record.get("Total Time")),
    }
    return _build_track(fields, record)


_NORMALIZERS = {
    "tab": normalize_tab_record,
    "apple_xml": normalize_plist_record,
}


def normalize_track(record: RawRecord, source_format: str) -> CanonicalTrack | None:
    try:
        normalizer = _NORMALIZERS[source_format]
    except KeyError:
        raise ValueError(f"Unsupported source format: {source_format}") from None
    return normalizer(record)


def normalize_tracks(
    records: Iterable[RawRecord],
    normalizer: Callable[[RawRecord], CanonicalTrack | None],
) -> list[CanonicalTrack]:
    """Return canonical tracks in input order, silently dropping unusable records."""
    tracks: list[CanonicalTrack] = []
    skipped = 0
    for record in records:
        track = normalizer(record)
        if track is None:
            skipped += 1
            continue
        tracks.append(track)
    if skipped:
        logger.debug("Skipped %d records without name or artist", skipped)
    return tracks
