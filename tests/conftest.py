import sys
from pathlib import Path

import pytest

# Ensure tests can import project packages regardless of how pytest is invoked.
ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)


LIBRARY_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
  <key>Application Version</key><string>1.3.5</string>
  <key>Major Version</key><integer>1</integer>
  <key>Tracks</key>
  <dict>
    <key>101</key>
    <dict>
      <key>Name</key><string>Dreams</string>
      <key>Artist</key><string>Fleetwood Mac</string>
      <key>Album</key><string>Rumours</string>
      <key>Total Time</key><integer>257800</integer>
      <key>Year</key><integer>1977</integer>
    </dict>
    <key>102</key>
    <dict>
      <key>Name</key><string>Rock &amp;#38; Roll</string>
      <key>Album Artist</key><string>Led Zeppelin</string>
      <key>Total Time</key><integer>220500</integer>
    </dict>
    <key>103</key>
    <dict>
      <key>Name</key><string>Untitled Memo</string>
      <key>Total Time</key><integer>1000</integer>
    </dict>
  </dict>
  <key>Playlists</key>
  <array>
    <dict>
      <key>Name</key><string>Library</string>
      <key>Playlist Persistent ID</key><string>AAA0000000000001</string>
      <key>Playlist ID</key><integer>1</integer>
      <key>Master</key><true/>
      <key>Playlist Items</key>
      <array>
        <dict><key>Track ID</key><integer>101</integer></dict>
        <dict><key>Track ID</key><integer>102</integer></dict>
      </array>
    </dict>
    <dict>
      <key>Name</key><string>Road Trip</string>
      <key>Playlist Persistent ID</key><string>BBB0000000000002</string>
      <key>Playlist ID</key><integer>2</integer>
      <key>Playlist Items</key>
      <array>
        <dict><key>Track ID</key><integer>102</integer></dict>
        <dict><key>Track ID</key><integer>999</integer></dict>
        <dict><key>Track ID</key><integer>101</integer></dict>
      </array>
    </dict>
    <dict>
      <key>Name</key><string>Summer Mixes</string>
      <key>Playlist Persistent ID</key><string>CCC0000000000003</string>
      <key>Parent Persistent ID</key><string>BBB0000000000002</string>
    </dict>
  </array>
</dict>
</plist>
"""


@pytest.fixture
def library_xml() -> bytes:
    return LIBRARY_XML
