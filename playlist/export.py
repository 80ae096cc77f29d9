"""Not-found report export helpers."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from metadata.types import CanonicalTrack

_INVALID_FS_CHARS_RE = re.compile(r'[<>:"/\\|?*]')
_MULTISPACE_RE = re.compile(r"\s+")
_FIELD_BREAK_RE = re.compile(r"[\t\r\n]+")

REPORT_HEADER = "Name\tArtist\tAlbum"


def _field(value: str) -> str:
    # Tabs or newlines inside a value would shift columns on re-import.
    return _FIELD_BREAK_RE.sub(" ", value or "")


def format_not_found_report(tracks: Iterable[CanonicalTrack]) -> str:
    lines = [REPORT_HEADER]
    for track in tracks:
        lines.append("\t".join((_field(track.name), _field(track.artist), _field(track.album))))
    return "\n".join(lines) + "\n"


def write_not_found_report(report_dir: Path, playlist_name: str, tracks: Iterable[CanonicalTrack]) -> Path:
    """Write unmatched tracks as a tab-delimited file.

    Rules:
    - Filename format is ``{playlist_name}_not_found.txt``.
    - Header row is ``Name<TAB>Artist<TAB>Album``; the file re-imports as a tab export.
    - Writes are atomic (temp file then replace).
    """
    root = Path(report_dir)
    root.mkdir(parents=True, exist_ok=True)

    safe_name = sanitize_playlist_name(playlist_name) or "playlist"
    target_path = root / f"{safe_name}_not_found.txt"
    temp_path = root / f".{safe_name}_not_found.txt.tmp"

    temp_path.write_text(format_not_found_report(tracks), encoding="utf-8")
    temp_path.replace(target_path)
    return target_path


def sanitize_playlist_name(name: str) -> str:
    """Return a filesystem-safe playlist name."""
    text = _INVALID_FS_CHARS_RE.sub("", str(name))
    text = _MULTISPACE_RE.sub(" ", text).strip()
    return text.rstrip(" .")
