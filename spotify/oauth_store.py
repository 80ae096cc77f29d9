"""SQLite cache of Spotify OAuth tokens, one row per client id."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


@dataclass
class SpotifyOAuthToken:
    access_token: str
    refresh_token: str
    expires_at: int  # epoch seconds
    scope: str


class SpotifyOAuthStore:
    """Token cache so repeated runs can skip the browser consent step."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_table()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_table(self):
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS oauth_tokens (
                    client_id TEXT PRIMARY KEY,
                    access_token TEXT NOT NULL,
                    refresh_token TEXT NOT NULL,
                    expires_at INTEGER NOT NULL,
                    scope TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def save(self, client_id: str, token: SpotifyOAuthToken) -> None:
        """Insert or replace the token row for ``client_id``."""
        updated_at = datetime.now(timezone.utc).isoformat()
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO oauth_tokens (client_id, access_token, refresh_token, expires_at, scope, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(client_id) DO UPDATE SET
                    access_token=excluded.access_token,
                    refresh_token=excluded.refresh_token,
                    expires_at=excluded.expires_at,
                    scope=excluded.scope,
                    updated_at=excluded.updated_at
                """,
                (
                    client_id,
                    token.access_token,
                    token.refresh_token,
                    int(token.expires_at),
                    token.scope,
                    updated_at,
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def load(self, client_id: str) -> Optional[SpotifyOAuthToken]:
        """Return the cached token for ``client_id`` or ``None``."""
        conn = self._connect()
        try:
            row = conn.execute(
                """
                SELECT access_token, refresh_token, expires_at, scope
                FROM oauth_tokens
                WHERE client_id=?
                LIMIT 1
                """,
                (client_id,),
            ).fetchone()
            if not row:
                return None
            return SpotifyOAuthToken(
                access_token=str(row["access_token"]),
                refresh_token=str(row["refresh_token"]),
                expires_at=int(row["expires_at"]),
                scope=str(row["scope"]),
            )
        finally:
            conn.close()

    def clear(self, client_id: str) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM oauth_tokens WHERE client_id=?", (client_id,))
            conn.commit()
        finally:
            conn.close()
