#!/usr/bin/env python3
"""
Convert Apple Music playlists to Spotify playlists.
- Reads a tab-delimited playlist export (.txt) or a full library export (.xml).
- Searches Spotify for every track, one at a time, and keeps the best match.
- Creates a Spotify playlist with the matches and writes the rest to a report.
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from config.settings import DEFAULT_REDIRECT_URI, load_settings
from engine.converter import ConversionError, ConvertOptions, convert_playlist
from metadata.errors import LibraryImportError
from metadata.importers.apple_xml_importer import AppleLibrary
from metadata.importers.dispatcher import load_library
from spotify.auth import SpotifyAuth
from spotify.client import SpotifyCatalogClient, SpotifyRequestError
from spotify.oauth_client import SpotifyAuthError
from spotify.oauth_store import SpotifyOAuthStore

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

SETUP_TEXT = f"""
Apple Music to Spotify Converter Setup

To use this tool, you need to register a Spotify app and get credentials:

1. Go to https://developer.spotify.com/dashboard
2. Log in with your Spotify account
3. Click "Create an App"
4. Fill in the app name and description
5. Add "{DEFAULT_REDIRECT_URI}" as a redirect URI
6. Copy your Client ID and Client Secret

You can provide credentials via:
  - Command line: --client-id <id> --client-secret <secret>
  - Environment variables: SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET
  - .env file in the project directory
"""


def configure_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_client(args):
    config = load_settings(client_id=args.client_id, client_secret=args.client_secret)
    if not config.has_credentials:
        logging.error("Spotify credentials not provided.")
        logging.error('Run "playlist_converter.py setup" for instructions on getting credentials.')
        return None
    store = SpotifyOAuthStore(config.token_cache) if config.token_cache else None
    auth = SpotifyAuth(
        config.client_id,
        config.client_secret,
        redirect_uri=config.redirect_uri,
        scope=config.scope,
        store=store,
    )
    logging.info("Authenticating with Spotify...")
    auth.authenticate()
    return SpotifyCatalogClient(auth)


def cmd_convert(args):
    client = build_client(args)
    if client is None:
        return 1
    options = ConvertOptions(
        file=Path(args.file),
        name=args.name,
        description=args.description,
        playlist=args.playlist,
        public=args.public,
        report_dir=Path(args.report_dir),
    )
    summary = convert_playlist(options, client)
    print(f"Success! Converted {summary.found} tracks to Spotify playlist.")
    if summary.playlist_url:
        print(f"Playlist URL: {summary.playlist_url}")
    if summary.report_path:
        print(f"Tracks not found saved to: {summary.report_path}")
    return 0


def cmd_list_playlists(args):
    path = Path(args.file)
    if path.suffix.lower() != ".xml":
        raise ConversionError("list-playlists command only works with XML library files")
    library = load_library(path)
    if not isinstance(library, AppleLibrary):
        raise ConversionError("list-playlists command only works with XML library files")

    playlists = library.list_playlists()
    print(f"Library contains {len(library.tracks)} tracks")
    print(f"Found {len(playlists)} playlists:\n")
    if not playlists:
        print("No playlists found in the library.")
        return 0
    for index, playlist in enumerate(playlists, start=1):
        print(f"{index}. {playlist.name} ({len(playlist.item_track_ids)} tracks)")
    print("\nTo convert a specific playlist, use:")
    print(f'   playlist_converter.py convert -f "{args.file}" -p "playlist name"')
    return 0


def cmd_setup(args):
    print(SETUP_TEXT)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="apple-to-spotify",
        description="Convert Apple Music playlists to Spotify playlists",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    convert = sub.add_parser("convert", help="Convert an Apple Music playlist to Spotify")
    convert.add_argument("-f", "--file", required=True, help="Path to the Apple Music playlist file (.txt or .xml)")
    convert.add_argument("-n", "--name", help="Name for the new Spotify playlist (defaults to filename)")
    convert.add_argument("-d", "--description", help="Description for the new Spotify playlist")
    convert.add_argument("-p", "--playlist", help="Specific playlist name to convert (only for XML files)")
    convert.add_argument("--public", action="store_true", help="Make the playlist public (default: private)")
    convert.add_argument("--client-id", help="Spotify Client ID (can also use SPOTIFY_CLIENT_ID env var)")
    convert.add_argument("--client-secret", help="Spotify Client Secret (can also use SPOTIFY_CLIENT_SECRET env var)")
    convert.add_argument("--report-dir", default=".", help="Directory for the not-found report.")
    convert.set_defaults(func=cmd_convert)

    listing = sub.add_parser("list-playlists", help="List all playlists in an iTunes/Apple Music XML library file")
    listing.add_argument("-f", "--file", required=True, help="Path to the Apple Music XML library file")
    listing.set_defaults(func=cmd_list_playlists)

    setup = sub.add_parser("setup", help="Set up Spotify API credentials")
    setup.set_defaults(func=cmd_setup)
    return parser


def main(argv=None):
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except (
        ConversionError,
        LibraryImportError,
        FileNotFoundError,
        SpotifyAuthError,
        SpotifyRequestError,
    ) as exc:
        logging.error("Error: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
