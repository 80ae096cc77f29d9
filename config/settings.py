"""Application settings constants and environment-backed credentials."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Candidates requested per search query.
SEARCH_RESULT_LIMIT = 5

# Spotify accepts at most 100 URIs per add-items call.
ADD_TRACKS_BATCH_SIZE = 100

# Pause between consecutive track searches and between add-items batches.
REQUEST_PAUSE_SEC = 0.1

DEFAULT_REDIRECT_URI = "http://127.0.0.1:3000/callback"
SPOTIFY_SCOPES = "playlist-modify-public playlist-modify-private"

# How long the local callback server waits for the browser redirect.
AUTH_CALLBACK_TIMEOUT_SEC = 300

# Tokens expiring sooner than this are refreshed before use.
TOKEN_REFRESH_MARGIN_SEC = 60

DEFAULT_TOKEN_CACHE = Path.home() / ".cache" / "apple-to-spotify" / "tokens.sqlite"


@dataclass(frozen=True)
class SpotifySettings:
    client_id: str | None
    client_secret: str | None
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scope: str = SPOTIFY_SCOPES
    token_cache: Path | None = DEFAULT_TOKEN_CACHE

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


def _env(name: str) -> str | None:
    value = (os.environ.get(name) or "").strip()
    return value or None


def load_settings(
    *,
    client_id: str | None = None,
    client_secret: str | None = None,
) -> SpotifySettings:
    """Resolve Spotify settings; explicit values win over environment variables.

    Setting ``SPOTIFY_TOKEN_CACHE`` to an empty string or ``off`` disables the token cache.
    """
    cache_value = os.environ.get("SPOTIFY_TOKEN_CACHE")
    if cache_value is None:
        token_cache: Path | None = DEFAULT_TOKEN_CACHE
    elif cache_value.strip().lower() in {"", "off", "none"}:
        token_cache = None
    else:
        token_cache = Path(cache_value).expanduser()

    return SpotifySettings(
        client_id=(client_id or "").strip() or _env("SPOTIFY_CLIENT_ID"),
        client_secret=(client_secret or "").strip() or _env("SPOTIFY_CLIENT_SECRET"),
        redirect_uri=_env("SPOTIFY_REDIRECT_URI") or DEFAULT_REDIRECT_URI,
        token_cache=token_cache,
    )
