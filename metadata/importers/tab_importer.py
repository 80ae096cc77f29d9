from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any

from metadata.errors import EmptyInputError
from metadata.normalize import normalize_track, normalize_tracks
from metadata.types import CanonicalTrack, RawRecord

from .base import BaseImporter, ImportedLibrary, decode_text


def decode_tab_records(text: str) -> tuple[list[str], list[RawRecord]]:
    """Split a tab-separated export into its header row and one record per line.

    Whitespace-only lines are skipped everywhere. Short rows are padded with empty
    strings; extra trailing fields are ignored.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise EmptyInputError("File is empty")

    headers = lines[0].split("\t")
    records: list[RawRecord] = []
    for line in lines[1:]:
        values = line.split("\t")
        record: RawRecord = {}
        for idx, header in enumerate(headers):
            record[header] = str(values[idx]) if idx < len(values) else ""
        records.append(record)
    return headers, records


@dataclass
class TabExport(ImportedLibrary):
    headers: list[str]
    records: list[RawRecord] = field(default_factory=list)
    source_format: str = "tab"

    def canonical_tracks(self, playlist_name: str | None = None) -> list[CanonicalTrack]:
        # A tab export holds one playlist; the name filter does not apply.
        return normalize_tracks(self.records, partial(normalize_track, source_format=self.source_format))

    def summary(self, playlist_name: str | None = None) -> dict[str, Any]:
        return {
            "total_tracks": len(self.records),
            "valid_tracks": len(self.canonical_tracks()),
            "headers": list(self.headers),
        }


class TabImporter(BaseImporter):
    SOURCE_FORMAT = "tab"

    def parse(self, file_bytes: bytes) -> TabExport:
        headers, records = decode_tab_records(decode_text(file_bytes))
        return TabExport(headers=headers, records=records)
