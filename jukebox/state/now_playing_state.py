"""
Now Playing State Manager

Provides authoritative, read-only state for the track currently loaded on
the audio channel.
"""

import logging
import time
import threading
from dataclasses import dataclass
from typing import Optional

from jukebox.playback.track import Track

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NowPlayingState:
    """
    Immutable state snapshot for the loaded track.

    No derived fields (elapsed, remaining, progress): the sink owns timing.
    """
    title: str
    artist: str
    source: str
    combo_key: str
    track_index: int
    loaded_at: float  # wall-clock timestamp (time.time())

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "artist": self.artist,
            "source": self.source,
            "combo_key": self.combo_key,
            "track_index": self.track_index,
            "loaded_at": self.loaded_at,
        }


class NowPlayingStateManager:
    """
    Manages NowPlayingState lifecycle.

    State is created when a track is loaded and cleared when the session
    goes silent. PlaybackSession is the only writer; the HTTP surface reads
    from another thread, hence the lock.
    """

    def __init__(self):
        """Initialize state manager."""
        self._state: Optional[NowPlayingState] = None
        self._lock = threading.RLock()
        self._listeners = []

    def on_track_loaded(self, track: Track, combo_key: str, track_index: int) -> None:
        """
        Record a newly loaded track.

        Args:
            track: Track handed to the sink
            combo_key: Combo key whose playlist the track belongs to
            track_index: Index of the track within that playlist
        """
        with self._lock:
            self._state = NowPlayingState(
                title=track.title,
                artist=track.artist,
                source=track.source,
                combo_key=combo_key,
                track_index=track_index,
                loaded_at=time.time(),
            )
            logger.debug(f"[NOW_PLAYING] State created: {combo_key} #{track_index} - {track.source}")
            self._notify_listeners(self._state)

    def clear_state(self) -> None:
        """Clear state (session went silent)."""
        with self._lock:
            if self._state is not None:
                logger.debug(f"[NOW_PLAYING] State cleared: {self._state.combo_key} - {self._state.source}")
            self._state = None
            self._notify_listeners(None)

    def get_state(self) -> Optional[NowPlayingState]:
        """
        Get current state (read-only).

        Returns:
            Current NowPlayingState or None if nothing is loaded
        """
        with self._lock:
            return self._state

    def add_listener(self, callback) -> None:
        """
        Add a listener callback for state changes.

        Callback will be called with (state: Optional[NowPlayingState]).
        """
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback) -> None:
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def _notify_listeners(self, state: Optional[NowPlayingState]) -> None:
        # Copy listeners list to avoid lock contention during callback execution
        listeners = self._listeners.copy()

        for callback in listeners:
            try:
                callback(state)
            except Exception as e:
                # Listener failures must not affect playback
                logger.debug(f"[NOW_PLAYING] Listener callback error: {e}")
