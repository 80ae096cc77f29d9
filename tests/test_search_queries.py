from __future__ import annotations

from metadata.types import CandidateTrack, CanonicalTrack
from spotify.search_queries import build_fallback_query, build_primary_query, search_with_fallback


def _candidate(name: str) -> CandidateTrack:
    return CandidateTrack(
        name=name,
        primary_artist_name="Artist",
        album_name="",
        duration_millis=0,
        external_uri=f"spotify:track:{name}",
    )


def test_primary_query_includes_album_only_when_present() -> None:
    with_album = CanonicalTrack(name="Dreams", artist="Fleetwood Mac", album="Rumours")
    without_album = CanonicalTrack(name="Let It Be", artist="The Beatles")

    assert build_primary_query(with_album) == 'track:"Dreams" artist:"Fleetwood Mac" album:"Rumours"'
    assert build_primary_query(without_album) == 'track:"Let It Be" artist:"The Beatles"'


def test_fallback_query_is_unqualified_and_skips_album() -> None:
    track = CanonicalTrack(name="Dreams", artist="Fleetwood Mac", album="Rumours")

    assert build_fallback_query(track) == '"Dreams" "Fleetwood Mac"'


def test_fallback_is_not_attempted_when_primary_has_results() -> None:
    track = CanonicalTrack(name="Dreams", artist="Fleetwood Mac")
    calls: list[tuple[str, int]] = []

    def fake_search(query: str, limit: int) -> list[CandidateTrack]:
        calls.append((query, limit))
        return [_candidate("primary")]

    results = search_with_fallback(fake_search, track, limit=5)

    assert [c.name for c in results] == ["primary"]
    assert calls == [('track:"Dreams" artist:"Fleetwood Mac"', 5)]


def test_fallback_results_replace_empty_primary() -> None:
    track = CanonicalTrack(name="Dreams", artist="Fleetwood Mac", album="Rumours")
    calls: list[str] = []

    def fake_search(query: str, limit: int) -> list[CandidateTrack]:
        calls.append(query)
        if query.startswith("track:"):
            return []
        return [_candidate("fallback-1"), _candidate("fallback-2")]

    results = search_with_fallback(fake_search, track)

    assert [c.name for c in results] == ["fallback-1", "fallback-2"]
    assert calls == ['track:"Dreams" artist:"Fleetwood Mac" album:"Rumours"', '"Dreams" "Fleetwood Mac"']
