"""Spotify Web API client for catalog search and playlist writes."""

from __future__ import annotations

import logging
import time
import urllib.parse
from typing import Any, Protocol, Sequence

import requests

from config import settings
from metadata.types import CandidateTrack, CanonicalTrack
from spotify.oauth_client import SpotifyAuthError
from spotify.search_queries import search_with_fallback

logger = logging.getLogger(__name__)


class SpotifyRequestError(RuntimeError):
    """Raised when a Spotify API call fails for good."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AccessTokenProvider(Protocol):
    def get_valid_access_token(self) -> str: ...

    def get_auth_headers(self) -> dict[str, str]: ...

    def invalidate(self) -> None: ...


def _error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return (response.text or "").strip() or f"status={response.status_code}"
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error
    return f"status={response.status_code}"


class SpotifyCatalogClient:
    """Client for searching the Spotify catalog and building playlists."""

    _API_URL = "https://api.spotify.com/v1"

    def __init__(
        self,
        auth: AccessTokenProvider,
        *,
        timeout_sec: int = 20,
        max_rate_limit_retries: int = 3,
        batch_pause_sec: float = settings.REQUEST_PAUSE_SEC,
    ) -> None:
        self.auth = auth
        self.timeout_sec = timeout_sec
        self.max_rate_limit_retries = max_rate_limit_retries
        self.batch_pause_sec = batch_pause_sec

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._API_URL}{path}"
        unauthorized_retry_used = False
        attempts = 0
        while True:
            attempts += 1
            self.auth.get_valid_access_token()
            response = requests.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self.auth.get_auth_headers(),
                timeout=self.timeout_sec,
            )

            if response.status_code == 401 and not unauthorized_retry_used:
                unauthorized_retry_used = True
                logger.debug("Spotify returned 401 for %s; refreshing token", path)
                self.auth.invalidate()
                continue

            if response.status_code == 429:
                if attempts > self.max_rate_limit_retries:
                    raise SpotifyRequestError("Spotify request failed (429: rate limit exceeded retries)", 429)
                retry_after = response.headers.get("Retry-After", "1")
                try:
                    sleep_sec = float(retry_after)
                except (TypeError, ValueError):
                    sleep_sec = 1.0
                logger.debug("Spotify rate limited %s; sleeping %.1fs", path, sleep_sec)
                time.sleep(max(0.0, sleep_sec))
                continue

            if response.status_code not in (200, 201):
                raise SpotifyRequestError(
                    f"Spotify request failed ({response.status_code}): {_error_detail(response)}",
                    response.status_code,
                )
            if not response.content:
                return {}
            return response.json()

    def search(self, query: str, limit: int = settings.SEARCH_RESULT_LIMIT) -> list[CandidateTrack]:
        payload = self._request_json(
            "GET",
            "/search",
            params={"q": query, "type": "track", "limit": limit},
        )
        items = (payload.get("tracks") or {}).get("items") or []
        return [CandidateTrack.from_spotify(item) for item in items if isinstance(item, dict)]

    def search_track(self, track: CanonicalTrack, limit: int = settings.SEARCH_RESULT_LIMIT) -> list[CandidateTrack]:
        """Search for one track, falling back to a free-text query; failures yield ``[]``."""
        try:
            return search_with_fallback(self.search, track, limit)
        except (requests.RequestException, SpotifyRequestError, SpotifyAuthError) as exc:
            logger.warning('Search failed for "%s" by "%s": %s', track.name, track.artist, exc)
            return []

    def get_current_user(self) -> dict[str, Any]:
        try:
            return self._request_json("GET", "/me")
        except SpotifyRequestError as exc:
            raise SpotifyRequestError(f"Failed to get current user: {exc}", exc.status_code) from exc

    def create_playlist(
        self,
        user_id: str,
        name: str,
        description: str = "",
        public: bool = False,
    ) -> dict[str, Any]:
        encoded_user = urllib.parse.quote(str(user_id), safe="")
        try:
            return self._request_json(
                "POST",
                f"/users/{encoded_user}/playlists",
                json_body={"name": name, "description": description, "public": bool(public)},
            )
        except SpotifyRequestError as exc:
            raise SpotifyRequestError(f"Failed to create playlist: {exc}", exc.status_code) from exc

    def add_tracks(
        self,
        playlist_id: str,
        uris: Sequence[str],
        batch_size: int = settings.ADD_TRACKS_BATCH_SIZE,
    ) -> list[dict[str, Any]]:
        """Append track URIs in batches, pausing briefly between batches."""
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        encoded_id = urllib.parse.quote(str(playlist_id), safe="")
        uri_list = list(uris)
        results: list[dict[str, Any]] = []
        for start in range(0, len(uri_list), batch_size):
            batch = uri_list[start : start + batch_size]
            try:
                results.append(
                    self._request_json("POST", f"/playlists/{encoded_id}/tracks", json_body={"uris": batch})
                )
            except SpotifyRequestError as exc:
                raise SpotifyRequestError(f"Failed to add tracks to playlist: {exc}", exc.status_code) from exc
            if start + batch_size < len(uri_list):
                time.sleep(self.batch_pause_sec)
        return results
