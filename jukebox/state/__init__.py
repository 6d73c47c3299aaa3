"""
State module for Marker Jukebox.

Provides read-only snapshots of what the audio channel is doing.
"""

from .now_playing_state import NowPlayingState, NowPlayingStateManager

__all__ = ["NowPlayingState", "NowPlayingStateManager"]
