from __future__ import annotations

import pytest

from metadata.importers.apple_xml_importer import AppleLibrary, AppleXMLImporter
from metadata.importers.dispatcher import detect_format, import_library, load_library
from metadata.importers.tab_importer import TabExport, TabImporter


@pytest.mark.parametrize(
    ("filename", "payload", "expected"),
    [
        ("Library.xml", b"", AppleXMLImporter),
        ("Library.PLIST", b"", AppleXMLImporter),
        ("Road Trip.txt", b"<?xml", TabImporter),
        ("export.tsv", b"", TabImporter),
        ("export", b"  <?xml version='1.0'?>", AppleXMLImporter),
        ("export.dat", b"<!DOCTYPE x><plist version='1.0'>", AppleXMLImporter),
        ("export", b"Name\tArtist\n", TabImporter),
    ],
)
def test_detect_format(filename, payload, expected) -> None:
    assert isinstance(detect_format(filename, payload), expected)


def test_import_library_returns_matching_library_type(library_xml) -> None:
    assert isinstance(import_library(library_xml, "Library.xml"), AppleLibrary)
    assert isinstance(import_library(b"Name\tArtist\nA\tB\n", "list.txt"), TabExport)


def test_load_library_reads_utf16_tab_export(tmp_path) -> None:
    path = tmp_path / "Road Trip.txt"
    path.write_bytes("Name\tArtist\nCafé\tBand\n".encode("utf-16"))

    library = load_library(path)

    assert [(t.name, t.artist) for t in library.canonical_tracks()] == [("Café", "Band")]


def test_load_library_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError, match="File not found"):
        load_library(tmp_path / "missing.txt")
