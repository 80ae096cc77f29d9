"""Batch matching of canonical tracks and playlist conversion."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Protocol, Sequence

from config import settings
from engine.search_scoring import match_track
from metadata.importers.apple_xml_importer import AppleLibrary
from metadata.importers.base import ImportedLibrary
from metadata.importers.dispatcher import load_library
from metadata.types import CandidateTrack, CanonicalTrack
from playlist.export import write_not_found_report

logger = logging.getLogger(__name__)


class ConversionError(Exception):
    pass


class CatalogClient(Protocol):
    def search_track(self, track: CanonicalTrack, limit: int = ...) -> list[CandidateTrack]: ...

    def get_current_user(self) -> dict: ...

    def create_playlist(self, user_id: str, name: str, description: str = ..., public: bool = ...) -> dict: ...

    def add_tracks(self, playlist_id: str, uris: Sequence[str], batch_size: int = ...) -> list: ...


@dataclass(frozen=True)
class FoundTrack:
    track: CanonicalTrack
    candidate: CandidateTrack
    score: int

    @property
    def uri(self) -> str:
        return self.candidate.external_uri


@dataclass
class MatchReport:
    found: list[FoundTrack] = field(default_factory=list)
    not_found: list[CanonicalTrack] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.found) + len(self.not_found)


@dataclass
class ConvertOptions:
    file: Path
    name: str | None = None
    description: str | None = None
    playlist: str | None = None
    public: bool = False
    report_dir: Path = Path(".")


@dataclass(frozen=True)
class ConversionSummary:
    playlist_id: str
    playlist_name: str
    playlist_url: str | None
    found: int
    not_found: int
    total: int
    report_path: Path | None = None


def search_and_match_tracks(
    client: CatalogClient,
    tracks: Sequence[CanonicalTrack],
    *,
    pause_sec: float = settings.REQUEST_PAUSE_SEC,
    sleep: Callable[[float], None] = time.sleep,
) -> MatchReport:
    """Search and score each track in order, one at a time."""
    report = MatchReport()
    total = len(tracks)
    logger.info("Searching for %d tracks on Spotify...", total)
    for index, track in enumerate(tracks, start=1):
        logger.info('[%d/%d] Searching: "%s" by "%s"', index, total, track.name, track.artist)
        candidates = client.search_track(track, settings.SEARCH_RESULT_LIMIT)
        result = match_track(candidates, track)
        if result.matched:
            report.found.append(FoundTrack(track=track, candidate=result.candidate, score=result.score))
            logger.info(
                '  Found: "%s" by "%s" (score %d)',
                result.candidate.name,
                result.candidate.primary_artist_name,
                result.score,
            )
        else:
            report.not_found.append(track)
            logger.info("  Not found")
        if pause_sec:
            sleep(pause_sec)
    return report


def select_tracks(library: ImportedLibrary, playlist_name: str | None = None) -> list[CanonicalTrack]:
    if playlist_name and not isinstance(library, AppleLibrary):
        logger.warning("Ignoring playlist %r: only XML library files contain playlists", playlist_name)
        playlist_name = None
    tracks = library.canonical_tracks(playlist_name)
    if not tracks:
        raise ConversionError("No valid tracks found in the playlist file")
    return tracks


def default_playlist_name(file_path: Path, library: ImportedLibrary, playlist_name: str | None) -> str:
    if playlist_name and isinstance(library, AppleLibrary):
        return playlist_name
    return Path(file_path).stem


def default_description(library: ImportedLibrary, today: date | None = None) -> str:
    kind = "library" if isinstance(library, AppleLibrary) else "playlist"
    day = (today or date.today()).isoformat()
    return f"Converted from Apple Music {kind} • {day}"


def convert_playlist(options: ConvertOptions, client: CatalogClient) -> ConversionSummary:
    """Parse the export, match every track and build the Spotify playlist.

    Unmatched tracks are written to ``{name}_not_found.txt`` under ``options.report_dir``.
    """
    library = load_library(options.file)
    tracks = select_tracks(library, options.playlist)
    logger.info("Parsed %d tracks valid for conversion", len(tracks))

    user = client.get_current_user()
    user_id = str(user.get("id") or "")
    logger.info("Authenticated as: %s", user.get("display_name") or user_id)

    report = search_and_match_tracks(client, tracks)
    logger.info("Found: %d/%d", len(report.found), report.total)
    logger.info("Not found: %d/%d", len(report.not_found), report.total)

    playlist_name = options.name or default_playlist_name(options.file, library, options.playlist)
    report_path = None
    if report.not_found:
        for track in report.not_found:
            logger.info('  Not found on Spotify: "%s" by "%s"', track.name, track.artist)
        report_path = write_not_found_report(options.report_dir, playlist_name, report.not_found)
        logger.info("Tracks not found saved to: %s", report_path)

    if not report.found:
        raise ConversionError("No tracks were found on Spotify")

    description = options.description or default_description(library)
    logger.info('Creating Spotify playlist: "%s"', playlist_name)
    playlist = client.create_playlist(user_id, playlist_name, description, options.public)
    playlist_id = str(playlist.get("id") or "")
    playlist_url = (playlist.get("external_urls") or {}).get("spotify")

    logger.info("Adding tracks to playlist...")
    client.add_tracks(playlist_id, [found.uri for found in report.found], settings.ADD_TRACKS_BATCH_SIZE)
    logger.info("Converted %d tracks to Spotify playlist %s", len(report.found), playlist_url or playlist_id)

    return ConversionSummary(
        playlist_id=playlist_id,
        playlist_name=playlist_name,
        playlist_url=playlist_url,
        found=len(report.found),
        not_found=len(report.not_found),
        total=report.total,
        report_path=report_path,
    )
