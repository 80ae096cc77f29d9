from .errors import EmptyInputError, LibraryImportError, NotFoundError, StructuralError, UnreadableInputError
from .types import CandidateTrack, CanonicalTrack, MatchResult, MatchStatus, Playlist

__all__ = [
    "CandidateTrack",
    "CanonicalTrack",
    "EmptyInputError",
    "LibraryImportError",
    "MatchResult",
    "MatchStatus",
    "NotFoundError",
    "Playlist",
    "StructuralError",
    "UnreadableInputError",
]
