"""Authorization-code flow and token lifecycle for the Spotify Web API."""

from __future__ import annotations

import logging
import secrets
import time
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Optional
from urllib.parse import parse_qs, urlparse

from config import settings
from spotify.oauth_client import (
    SpotifyAuthError,
    build_auth_url,
    exchange_code_for_token,
    refresh_access_token,
)
from spotify.oauth_store import SpotifyOAuthStore, SpotifyOAuthToken

logger = logging.getLogger(__name__)

_SUCCESS_HTML = b"<h1>Authentication successful!</h1><p>You can close this window and return to the terminal.</p>"
_FAILURE_HTML = b"<h1>Authentication failed</h1><p>You can close this window.</p>"


class _CallbackHandler(BaseHTTPRequestHandler):
    def do_GET(self):  # noqa: N802
        parsed = urlparse(self.path)
        if parsed.path != self.server.callback_path:
            self.send_response(404)
            self.end_headers()
            return
        query = parse_qs(parsed.query)
        self.server.callback_params = {key: values[0] for key, values in query.items() if values}
        ok = "code" in self.server.callback_params and "error" not in self.server.callback_params
        self.send_response(200 if ok else 400)
        self.send_header("Content-Type", "text/html")
        self.end_headers()
        self.wfile.write(_SUCCESS_HTML if ok else _FAILURE_HTML)

    def log_message(self, format, *args):  # noqa: A002
        logger.debug("callback server: " + format, *args)


class SpotifyAuth:
    """Holds the user token and refreshes it before it expires.

    ``get_valid_access_token`` and ``get_auth_headers`` are what the catalog client
    consumes; ``authenticate`` must succeed once before either is called.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        redirect_uri: str = settings.DEFAULT_REDIRECT_URI,
        scope: str = settings.SPOTIFY_SCOPES,
        store: Optional[SpotifyOAuthStore] = None,
        callback_timeout_sec: float = settings.AUTH_CALLBACK_TIMEOUT_SEC,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scope = scope
        self.store = store
        self.callback_timeout_sec = callback_timeout_sec
        self._token: Optional[SpotifyOAuthToken] = store.load(client_id) if store else None

    def get_auth_url(self, state: str) -> str:
        return build_auth_url(self.client_id, self.redirect_uri, self.scope, state)

    def authenticate(self, *, open_browser: bool = True) -> None:
        """Reuse a cached token when possible, otherwise run the browser consent flow."""
        if self._token is not None:
            try:
                self.get_valid_access_token()
                logger.info("Using cached Spotify token")
                return
            except SpotifyAuthError:
                logger.info("Cached Spotify token could not be refreshed; re-authenticating")
                self._forget()

        state = secrets.token_urlsafe(16)
        auth_url = self.get_auth_url(state)
        logger.info("Opening browser for Spotify authentication...")
        logger.info("If browser doesn't open automatically, visit: %s", auth_url)
        if open_browser:
            webbrowser.open(auth_url)
        code = self._wait_for_code(state)
        self.exchange_code(code)

    def _wait_for_code(self, state: str) -> str:
        parsed = urlparse(self.redirect_uri)
        server = HTTPServer((parsed.hostname or "127.0.0.1", parsed.port or 80), _CallbackHandler)
        server.callback_path = parsed.path or "/"
        server.callback_params = None
        server.timeout = 1.0
        deadline = time.monotonic() + self.callback_timeout_sec
        logger.info("Waiting for authentication...")
        try:
            while server.callback_params is None:
                if time.monotonic() > deadline:
                    raise SpotifyAuthError("Authentication timeout")
                server.handle_request()
        finally:
            server.server_close()

        params = server.callback_params
        if params.get("error"):
            raise SpotifyAuthError(f"Authentication failed: {params['error']}")
        if params.get("state") != state:
            raise SpotifyAuthError("Authentication failed: state mismatch")
        return params["code"]

    def exchange_code(self, code: str) -> SpotifyOAuthToken:
        payload = exchange_code_for_token(self.client_id, self.client_secret, code, self.redirect_uri)
        return self._store_payload(payload, refresh_token=None)

    def _store_payload(self, payload: dict, refresh_token: Optional[str]) -> SpotifyOAuthToken:
        access_token = str(payload.get("access_token") or "").strip()
        expires_in = payload.get("expires_in")
        if not access_token or expires_in is None:
            raise SpotifyAuthError("token payload missing access_token or expires_in")
        token = SpotifyOAuthToken(
            access_token=access_token,
            refresh_token=str(payload.get("refresh_token") or refresh_token or ""),
            expires_at=int(time.time()) + int(expires_in),
            scope=str(payload.get("scope") or self.scope),
        )
        self._token = token
        if self.store is not None:
            self.store.save(self.client_id, token)
        return token

    def _forget(self) -> None:
        self._token = None
        if self.store is not None:
            self.store.clear(self.client_id)

    def _is_expiring(self, token: SpotifyOAuthToken) -> bool:
        return int(token.expires_at) - settings.TOKEN_REFRESH_MARGIN_SEC <= int(time.time())

    def get_valid_access_token(self) -> str:
        token = self._token
        if token is None:
            raise SpotifyAuthError("Not authenticated. Call authenticate() first.")
        if not self._is_expiring(token):
            return token.access_token
        if not token.refresh_token:
            raise SpotifyAuthError("Access token expired and no refresh token is available")
        logger.debug("Refreshing Spotify access token")
        payload = refresh_access_token(self.client_id, self.client_secret, token.refresh_token)
        return self._store_payload(payload, refresh_token=token.refresh_token).access_token

    def get_auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.get_valid_access_token()}",
            "Content-Type": "application/json",
        }

    def invalidate(self) -> None:
        """Mark the current token as expired so the next call refreshes it."""
        if self._token is not None:
            self._token.expires_at = 0
