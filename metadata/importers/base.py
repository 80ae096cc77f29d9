from __future__ import annotations

import codecs
from abc import ABC, abstractmethod
from typing import Any

from metadata.errors import UnreadableInputError
from metadata.types import CanonicalTrack


class ImportedLibrary(ABC):
    """Decoded contents of one export file."""

    source_format: str = ""

    @abstractmethod
    def canonical_tracks(self, playlist_name: str | None = None) -> list[CanonicalTrack]:
        """Return the usable tracks, optionally restricted to one playlist."""
        raise NotImplementedError

    @abstractmethod
    def summary(self, playlist_name: str | None = None) -> dict[str, Any]:
        """Return track and playlist counts for console output."""
        raise NotImplementedError


class BaseImporter(ABC):
    SOURCE_FORMAT = ""

    @abstractmethod
    def parse(self, file_bytes: bytes) -> ImportedLibrary:
        """Parse export file bytes into a decoded library."""
        raise NotImplementedError


def decode_text(file_bytes: bytes) -> str:
    # The desktop exporter writes UTF-16 with a BOM; everything else is UTF-8.
    encoding = "utf-16" if file_bytes.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)) else "utf-8-sig"
    try:
        return file_bytes.decode(encoding)
    except UnicodeDecodeError as exc:
        raise UnreadableInputError(f"File is not valid {encoding} text: {exc.reason} at byte {exc.start}") from exc
