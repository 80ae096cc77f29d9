from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from metadata.errors import NotFoundError, StructuralError
from metadata.normalize import normalize_track, normalize_tracks
from metadata.types import CanonicalTrack, Playlist, PlistDictNode, RawRecord

from .base import BaseImporter, ImportedLibrary
from .plist_decoder import PLAYLIST_ITEMS_KEY, TRACK_ID_KEY, build_dict_node, decode_dict_node

logger = logging.getLogger(__name__)

TRACKS_KEY = "Tracks"
PLAYLISTS_KEY = "Playlists"
MASTER_KEY = "Master"
PARENT_ID_KEY = "Parent Persistent ID"
PERSISTENT_ID_KEY = "Playlist Persistent ID"


@dataclass
class AppleLibrary(ImportedLibrary):
    """Tracks and playlists decoded from one library export.

    ``track_index`` maps each declared track id to its record. When the export
    declares the same id twice, the later track replaces the earlier one in the
    index while both stay in ``tracks``.
    """

    tracks: list[RawRecord] = field(default_factory=list)
    track_index: dict[int, RawRecord] = field(default_factory=dict)
    playlists: list[Playlist] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    source_format: str = "apple_xml"

    def playlist_by_name(self, name: str) -> Playlist:
        for playlist in self.playlists:
            if playlist.name == name:
                return playlist
        raise NotFoundError(name)

    def list_playlists(self) -> list[Playlist]:
        """Return user playlists, skipping the library master list and folders."""
        return [p for p in self.playlists if not p.is_master and not p.is_folder]

    def playlist_tracks(self, name: str) -> list[RawRecord]:
        """Resolve a playlist's members in playlist order; unknown ids are dropped."""
        playlist = self.playlist_by_name(name)
        records: list[RawRecord] = []
        missing = 0
        for track_id in playlist.item_track_ids:
            record = self.track_index.get(track_id)
            if record is None:
                missing += 1
                continue
            records.append(record)
        if missing:
            logger.warning("Playlist %r references %d tracks missing from the library", name, missing)
        return records

    def canonical_tracks(self, playlist_name: str | None = None) -> list[CanonicalTrack]:
        records = self.tracks if playlist_name is None else self.playlist_tracks(playlist_name)
        return normalize_tracks(records, partial(normalize_track, source_format=self.source_format))

    def summary(self, playlist_name: str | None = None) -> dict[str, Any]:
        if playlist_name is not None:
            playlist = self.playlist_by_name(playlist_name)
            return {
                "name": playlist.name,
                "total_tracks": len(playlist.item_track_ids),
                "valid_tracks": len(self.canonical_tracks(playlist_name)),
            }
        return {
            "total_tracks": len(self.tracks),
            "valid_tracks": len(self.canonical_tracks()),
            "playlists": [
                {
                    "name": p.name,
                    "item_count": len(p.item_track_ids),
                    "master": p.is_master,
                    "folder": p.is_folder,
                }
                for p in self.playlists
            ],
        }


def load_document(file_bytes: bytes) -> PlistDictNode:
    """Parse the XML export and return its top-level dict node."""
    try:
        root = ET.fromstring(file_bytes)
    except ET.ParseError as exc:
        raise StructuralError(f"Invalid iTunes/Apple Music XML format: {exc}") from exc

    top = root.find("dict") if root.tag == "plist" else None
    if top is None:
        raise StructuralError("Invalid iTunes/Apple Music XML format: no top-level dict")
    return build_dict_node(top)


def _warn(warnings: list[str], message: str) -> None:
    logger.warning("%s", message)
    warnings.append(message)


def _coerce_track_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _extract_tracks(top: PlistDictNode, library: AppleLibrary) -> None:
    if TRACKS_KEY not in top.keys:
        _warn(library.warnings, "No Tracks key found in XML file")
        return

    tracks_node = top.dicts[0] if top.dicts else None
    if tracks_node is None or not tracks_node.keys or not tracks_node.dicts:
        _warn(library.warnings, "No tracks dict found")
        return

    logger.info("Found %d track entries", len(tracks_node.keys))
    for key, track_node in zip(tracks_node.keys, tracks_node.dicts):
        record = decode_dict_node(track_node)
        if not record.get("Name") or not (record.get("Artist") or record.get("Album Artist")):
            continue
        track_id = _coerce_track_id(key)
        if track_id is None:
            _warn(library.warnings, f"Skipping track with non-numeric id {key!r}")
            continue
        record[TRACK_ID_KEY] = track_id
        library.tracks.append(record)
        library.track_index[track_id] = record


def _playlist_from_record(record: RawRecord) -> Playlist:
    item_ids: list[int] = []
    items = record.get(PLAYLIST_ITEMS_KEY)
    if isinstance(items, list):
        for item in items:
            track_id = _coerce_track_id(item.get(TRACK_ID_KEY))
            if track_id is not None:
                item_ids.append(track_id)
    persistent_id = record.get(PERSISTENT_ID_KEY)
    return Playlist(
        name=str(record.get("Name")),
        item_track_ids=tuple(item_ids),
        is_master=bool(record.get(MASTER_KEY)),
        is_folder=PARENT_ID_KEY in record,
        persistent_id=str(persistent_id) if persistent_id is not None else None,
        source_record=record,
    )


def _extract_playlists(top: PlistDictNode, library: AppleLibrary) -> None:
    if PLAYLISTS_KEY not in top.keys:
        _warn(library.warnings, "No Playlists key found in XML file")
        return

    playlists_node = top.arrays[0] if top.arrays else None
    if playlists_node is None or not playlists_node.dicts:
        _warn(library.warnings, "No playlists array found")
        return

    for playlist_node in playlists_node.dicts:
        record = decode_dict_node(playlist_node)
        if record.get("Name"):
            library.playlists.append(_playlist_from_record(record))


def extract_library(top: PlistDictNode) -> AppleLibrary:
    """Build the track index and playlists from the top-level dict node."""
    library = AppleLibrary()
    _extract_tracks(top, library)
    _extract_playlists(top, library)
    return library


class AppleXMLImporter(BaseImporter):
    SOURCE_FORMAT = "apple_xml"

    def parse(self, file_bytes: bytes) -> AppleLibrary:
        return extract_library(load_document(file_bytes))
