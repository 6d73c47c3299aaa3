"""
Playback module for Marker Jukebox.

This package maps combo keys to playlists and owns the single audio
channel's transport state (see jukebox.playback.session).
"""

from jukebox.playback.track import Track
from jukebox.playback.combo_key import DEFAULT_KEY, NONE_MARKER, resolve, lookup_playlist
from jukebox.playback.catalog import Catalog, load_catalog

__all__ = [
    "Track",
    "DEFAULT_KEY",
    "NONE_MARKER",
    "resolve",
    "lookup_playlist",
    "Catalog",
    "load_catalog",
]
