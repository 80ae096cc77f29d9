from __future__ import annotations

import codecs

import pytest

from metadata.errors import EmptyInputError, LibraryImportError, UnreadableInputError
from metadata.importers.tab_importer import TabImporter, decode_tab_records


def test_decode_zips_values_against_headers() -> None:
    text = "Name\tArtist\tAlbum\tYear\tTime\nDreams\tFleetwood Mac\tRumours\t1977\t4:17\n"

    headers, records = decode_tab_records(text)

    assert headers == ["Name", "Artist", "Album", "Year", "Time"]
    assert records == [
        {"Name": "Dreams", "Artist": "Fleetwood Mac", "Album": "Rumours", "Year": "1977", "Time": "4:17"}
    ]


def test_short_rows_are_padded_and_extra_fields_ignored() -> None:
    text = "Name\tArtist\tAlbum\nOnly Name\nA\tB\tC\tD\tE\n"

    _, records = decode_tab_records(text)

    assert records[0] == {"Name": "Only Name", "Artist": "", "Album": ""}
    assert records[1] == {"Name": "A", "Artist": "B", "Album": "C"}


def test_blank_lines_are_skipped_including_before_header() -> None:
    text = "\n   \nName\tArtist\n\n \t \nSong\tBand\n\n"

    headers, records = decode_tab_records(text)

    assert headers == ["Name", "Artist"]
    assert records == [{"Name": "Song", "Artist": "Band"}]


@pytest.mark.parametrize("text", ["", "\n\n", "  \n\t\n"])
def test_content_without_lines_raises_empty_input(text: str) -> None:
    with pytest.raises(EmptyInputError):
        decode_tab_records(text)


def test_header_only_yields_no_records() -> None:
    headers, records = decode_tab_records("Name\tArtist\n")

    assert headers == ["Name", "Artist"]
    assert records == []


def test_importer_reads_utf16_export_with_carriage_returns() -> None:
    text = "Name\tArtist\tAlbum\tTime\rCafé\tBjörk\tPost\t3:45\r"
    payload = codecs.BOM_UTF16_LE + text.encode("utf-16-le")

    export = TabImporter().parse(payload)

    tracks = export.canonical_tracks()
    assert len(tracks) == 1
    assert tracks[0].name == "Café"
    assert tracks[0].artist == "Björk"
    assert tracks[0].duration_seconds == 225


def test_importer_drops_rows_without_artist_from_canonical_tracks() -> None:
    payload = "\ufeffName\tArtist\nKeep\tBand\nDrop\t\n".encode("utf-8")

    export = TabImporter().parse(payload)

    assert [t.name for t in export.canonical_tracks()] == ["Keep"]
    assert export.summary() == {"total_tracks": 2, "valid_tracks": 1, "headers": ["Name", "Artist"]}


def test_importer_rejects_bytes_that_are_not_utf8() -> None:
    payload = "Name\tArtist\nCafé\tBjörk\n".encode("latin-1")

    with pytest.raises(UnreadableInputError, match="not valid utf-8-sig text") as excinfo:
        TabImporter().parse(payload)

    assert isinstance(excinfo.value, LibraryImportError)
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)
