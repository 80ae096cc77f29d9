from __future__ import annotations

from pathlib import Path

from .apple_xml_importer import AppleXMLImporter
from .base import BaseImporter, ImportedLibrary
from .tab_importer import TabImporter


def detect_format(filename: str, file_bytes: bytes) -> BaseImporter:
    lower_name = str(filename or "").strip().lower()

    if lower_name.endswith((".xml", ".plist")):
        return AppleXMLImporter()
    if lower_name.endswith((".txt", ".tsv")):
        return TabImporter()

    sniff = file_bytes.lstrip()[:200].lower()
    if sniff.startswith(b"<?xml") or b"<plist" in sniff:
        return AppleXMLImporter()
    return TabImporter()


def import_library(file_bytes: bytes, filename: str) -> ImportedLibrary:
    importer = detect_format(filename, file_bytes)
    return importer.parse(file_bytes)


def load_library(path: str | Path) -> ImportedLibrary:
    """Read an export file from disk and decode it."""
    source = Path(path).expanduser()
    if not source.exists():
        raise FileNotFoundError(f"File not found: {source}")
    return import_library(source.read_bytes(), source.name)
