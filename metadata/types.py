"""Structured types shared by the importers, the matcher and the converter."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union


@dataclass(frozen=True)
class PlistArrayNode:
    """An ``<array>`` element with its children split by type."""

    dicts: tuple["PlistDictNode", ...] = ()
    values: tuple[Any, ...] = ()


@dataclass(frozen=True)
class PlistDictNode:
    """A ``<dict>`` element exposed as parallel, type-segregated streams.

    The declared ``keys`` are not paired with their values. Each value type keeps
    its own document order; booleans only keep a count.
    """

    keys: tuple[str, ...] = ()
    strings: tuple[str, ...] = ()
    integers: tuple[Any, ...] = ()
    dates: tuple[Any, ...] = ()
    true_count: int = 0
    false_count: int = 0
    arrays: tuple[PlistArrayNode, ...] = ()
    dicts: tuple["PlistDictNode", ...] = ()


RawValue = Union[str, int, datetime, bool, list, PlistArrayNode]
RawRecord = dict[str, Any]


@dataclass(frozen=True)
class CanonicalTrack:
    name: str
    artist: str
    album: str = ""
    year: str = ""
    duration_seconds: int = 0
    source_record: RawRecord = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class Playlist:
    name: str
    item_track_ids: tuple[int, ...] = ()
    is_master: bool = False
    is_folder: bool = False
    persistent_id: str | None = None
    source_record: RawRecord = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class CandidateTrack:
    """A track returned by the remote catalog search."""

    name: str
    primary_artist_name: str
    album_name: str
    duration_millis: int
    external_uri: str
    track_id: str | None = None
    external_url: str | None = None

    @classmethod
    def from_spotify(cls, item: dict[str, Any]) -> "CandidateTrack":
        artists = item.get("artists") or []
        first_artist = artists[0].get("name") if artists and isinstance(artists[0], dict) else None
        album = item.get("album") or {}
        external_urls = item.get("external_urls") or {}
        return cls(
            name=str(item.get("name") or ""),
            primary_artist_name=str(first_artist or ""),
            album_name=str(album.get("name") or ""),
            duration_millis=int(item.get("duration_ms") or 0),
            external_uri=str(item.get("uri") or ""),
            track_id=item.get("id"),
            external_url=external_urls.get("spotify"),
        )


class MatchStatus(str, Enum):
    MATCHED = "matched"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class MatchResult:
    status: MatchStatus
    candidate: CandidateTrack | None = None
    score: int = 0

    @property
    def matched(self) -> bool:
        return self.status is MatchStatus.MATCHED
