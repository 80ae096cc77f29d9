from .converter import (
    ConversionError,
    ConversionSummary,
    ConvertOptions,
    MatchReport,
    convert_playlist,
    search_and_match_tracks,
)
from .search_scoring import match_track, normalize_text, score_candidate, select_best

__all__ = [
    "ConversionError",
    "ConversionSummary",
    "ConvertOptions",
    "MatchReport",
    "convert_playlist",
    "match_track",
    "normalize_text",
    "score_candidate",
    "search_and_match_tracks",
    "select_best",
]
