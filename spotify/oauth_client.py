"""Spotify OAuth authorization-code helpers."""

from __future__ import annotations

from urllib.parse import urlencode

import requests

SPOTIFY_AUTH_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"


class SpotifyAuthError(RuntimeError):
    """Raised when authorization or a token exchange fails."""


def build_auth_url(client_id: str, redirect_uri: str, scope: str, state: str) -> str:
    """Build Spotify authorization URL."""
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": scope,
        "state": state,
    }
    return f"{SPOTIFY_AUTH_URL}?{urlencode(params)}"


def _post_token(data: dict[str, str], action: str) -> dict:
    try:
        response = requests.post(SPOTIFY_TOKEN_URL, data=data, timeout=20)
    except requests.RequestException as exc:
        raise SpotifyAuthError(f"spotify {action} failed: {exc}") from exc
    if response.status_code != 200:
        detail = (response.text or "").strip() or f"status={response.status_code}"
        raise SpotifyAuthError(f"spotify {action} failed: {detail}")
    return response.json()


def exchange_code_for_token(
    client_id: str,
    client_secret: str,
    code: str,
    redirect_uri: str,
) -> dict:
    """Exchange an authorization code for an access/refresh token payload."""
    return _post_token(
        {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "client_id": client_id,
            "client_secret": client_secret,
        },
        "code exchange",
    )


def refresh_access_token(
    client_id: str,
    client_secret: str,
    refresh_token: str,
) -> dict:
    """Exchange refresh token for a new Spotify access token payload.

    Raises:
        SpotifyAuthError: When request fails or response code is non-200.
    """
    return _post_token(
        {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": client_id,
            "client_secret": client_secret,
        },
        "refresh",
    )
