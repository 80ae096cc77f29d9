from metadata.types import MatchResult, MatchStatus

_EXACT, _CONTAINS = "exact", "contains"

_NAME_POINTS = {_EXACT: 10, _CONTAINS: 5}
_ARTIST_POINTS = {_EXACT: 10, _CONTAINS: 5}
_ALBUM_POINTS = {_EXACT: 3, _CONTAINS: 1}

_DURATION_CLOSE_SEC = 2
_DURATION_NEAR_SEC = 5


def normalize_text(value):
    """Lowercase, drop everything that is not alphanumeric or whitespace, trim."""
    if not value:
        return ""
    text = str(value).lower()
    return "".join(ch for ch in text if ch.isalnum() or ch.isspace()).strip()


def _tier(expected, candidate):
    if candidate == expected:
        return _EXACT
    # An empty side counts as contained.
    if expected in candidate or candidate in expected:
        return _CONTAINS
    return None


def _tier_points(points, expected, candidate):
    return points.get(_tier(expected, candidate), 0)


def duration_points(expected_sec, candidate_ms):
    if not expected_sec or not candidate_ms:
        return 0
    delta = abs(expected_sec - candidate_ms / 1000)
    if delta <= _DURATION_CLOSE_SEC:
        return 2
    if delta <= _DURATION_NEAR_SEC:
        return 1
    return 0


def score_candidate(track, candidate):
    """Integer score of one remote candidate against a canonical track."""
    score = _tier_points(_NAME_POINTS, normalize_text(track.name), normalize_text(candidate.name))
    score += _tier_points(
        _ARTIST_POINTS,
        normalize_text(track.artist),
        normalize_text(candidate.primary_artist_name),
    )
    if track.album:
        score += _tier_points(_ALBUM_POINTS, normalize_text(track.album), normalize_text(candidate.album_name))
    score += duration_points(track.duration_seconds, candidate.duration_millis)
    return score


def _select(candidates, track):
    if not candidates:
        return None, 0
    if len(candidates) == 1:
        return candidates[0], 0

    best = candidates[0]
    best_score = 0
    for candidate in candidates:
        score = score_candidate(track, candidate)
        # Strictly greater: on ties the earlier search result stays.
        if score > best_score:
            best_score = score
            best = candidate
    return best, best_score


def select_best(candidates, track):
    """Pick the best candidate; ``None`` only when there are no candidates.

    A single candidate is returned as-is without scoring.
    """
    best, _ = _select(list(candidates or ()), track)
    return best


def match_track(candidates, track):
    best, score = _select(list(candidates or ()), track)
    if best is None:
        return MatchResult(status=MatchStatus.UNMATCHED)
    return MatchResult(status=MatchStatus.MATCHED, candidate=best, score=score)
