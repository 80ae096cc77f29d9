from __future__ import annotations

import pytest

from engine.search_scoring import match_track, normalize_text, score_candidate, select_best
from metadata.types import CandidateTrack, CanonicalTrack, MatchStatus


def _candidate(name, artist, album="", duration_ms=0, uri=None):
    return CandidateTrack(
        name=name,
        primary_artist_name=artist,
        album_name=album,
        duration_millis=duration_ms,
        external_uri=uri or f"spotify:track:{name}",
    )


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Let It Be!", "let it be"),
        ("  AC/DC  ", "acdc"),
        ("Beatles, The", "beatles the"),
        ("snake_case", "snakecase"),
        ("Sigur Rós", "sigur rós"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_text(value, expected) -> None:
    assert normalize_text(value) == expected


@pytest.mark.parametrize("value", ["Let It Be!", " (Remastered 2009) ", "Don't Stop—Me Now", "ÄÖÜ & co."])
def test_normalize_text_is_idempotent(value) -> None:
    once = normalize_text(value)
    assert normalize_text(once) == once


def test_exact_artist_and_duration_beat_exact_name_only() -> None:
    track = CanonicalTrack(name="Let It Be", artist="The Beatles", album="", duration_seconds=243)
    first = _candidate("let it be!", "Beatles, The", duration_ms=245000)
    second = _candidate("Let It Be (Remastered)", "The Beatles", duration_ms=243000)

    assert score_candidate(track, first) == 12
    assert score_candidate(track, second) == 17
    assert select_best([first, second], track) is second


def test_ties_keep_the_earlier_candidate() -> None:
    track = CanonicalTrack(name="Song", artist="Band")
    first = _candidate("Song", "Band", uri="spotify:track:first")
    second = _candidate("Song", "Band", uri="spotify:track:second")

    assert select_best([first, second], track) is first


def test_all_zero_scores_return_first_candidate() -> None:
    track = CanonicalTrack(name="Song", artist="Band")
    first = _candidate("Nothing", "Alike")
    second = _candidate("Totally", "Different")

    result = match_track([first, second], track)

    assert result.candidate is first
    assert result.score == 0


def test_no_candidates_returns_none() -> None:
    track = CanonicalTrack(name="Song", artist="Band")

    assert select_best([], track) is None
    result = match_track([], track)
    assert result.status is MatchStatus.UNMATCHED
    assert result.candidate is None
    assert result.matched is False


def test_single_candidate_is_returned_without_scoring() -> None:
    track = CanonicalTrack(name="Song", artist="Band")
    only = _candidate("Completely Unrelated", "Someone Else")

    result = match_track([only], track)

    assert result.status is MatchStatus.MATCHED
    assert result.candidate is only
    assert result.score == 0


def test_album_counts_only_when_track_has_album() -> None:
    with_album = CanonicalTrack(name="Song", artist="Band", album="Greatest Hits")
    without_album = CanonicalTrack(name="Song", artist="Band")

    exact = _candidate("Song", "Band", album="Greatest Hits")
    partial = _candidate("Song", "Band", album="Greatest Hits Vol. 2")
    other = _candidate("Song", "Band", album="Live")

    assert score_candidate(with_album, exact) == 23
    assert score_candidate(with_album, partial) == 21
    assert score_candidate(with_album, other) == 20
    assert score_candidate(without_album, exact) == 20


@pytest.mark.parametrize(
    ("duration_ms", "points"),
    [(200000, 2), (202000, 2), (197500, 1), (205000, 1), (205001, 0), (0, 0)],
)
def test_duration_tiers(duration_ms, points) -> None:
    track = CanonicalTrack(name="Song", artist="Band", duration_seconds=200)

    assert score_candidate(track, _candidate("Song", "Band", duration_ms=duration_ms)) == 20 + points


def test_duration_ignored_when_track_duration_unknown() -> None:
    track = CanonicalTrack(name="Song", artist="Band", duration_seconds=0)

    assert score_candidate(track, _candidate("Song", "Band", duration_ms=200000)) == 20


def test_selection_is_deterministic() -> None:
    track = CanonicalTrack(name="Dreams", artist="Fleetwood Mac", album="Rumours", duration_seconds=258)
    candidates = [
        _candidate("Dreams - 2004 Remaster", "Fleetwood Mac", album="Rumours (Super Deluxe)", duration_ms=257000),
        _candidate("Dreams", "Fleetwood Mac", album="Rumours", duration_ms=254000),
        _candidate("Dreams", "The Cranberries", album="Everybody Else", duration_ms=271000),
    ]

    results = {match_track(candidates, track) for _ in range(5)}

    assert len(results) == 1
    (result,) = results
    assert result.candidate is candidates[1]
    assert result.score == 24
