"""Spotify integration modules."""

from spotify.auth import SpotifyAuth
from spotify.client import SpotifyCatalogClient, SpotifyRequestError

__all__ = ["SpotifyAuth", "SpotifyCatalogClient", "SpotifyRequestError"]
