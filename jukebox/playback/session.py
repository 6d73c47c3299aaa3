"""
Playback Session for Marker Jukebox.

Owns the single audio channel's transport state and guarantees playback
continuity under combo-key or owner churn:

- selecting the current key again never restarts the track
- a key change while playing switches straight to the new playlist
- a key change while paused only loads the new playlist's first track
- track end advances within the current playlist (looping)

PlaybackSession is the only component permitted to issue commands to the
audio sink.
"""

import logging
from typing import List, Mapping, Optional, Sequence

from jukebox.outputs.base_sink import AudioSink, PlaybackRejected
from jukebox.playback.combo_key import lookup_playlist
from jukebox.playback.track import Track
from jukebox.state.now_playing_state import NowPlayingStateManager

logger = logging.getLogger(__name__)


class PlaybackSession:
    """
    Transport state for one audio channel.

    Attributes:
        current_combo_key: Key of the loaded playlist (None before first select)
        current_playlist: Tracks resolved for current_combo_key
        current_track_index: Index of the loaded track, -1 when silent
        playing: True only while the sink has accepted play()
        volume: Channel volume in [0, 1]

    Play intent is tracked separately from `playing`: after a rejected
    play() the session keeps wanting playback, so the next select, track
    change or play() asks the sink again.
    """

    def __init__(self, sink: AudioSink, playlists: Mapping[str, Sequence[Track]],
                 now_playing: Optional[NowPlayingStateManager] = None,
                 volume: float = 1.0):
        """
        Initialize playback session.

        Args:
            sink: Audio sink for transport commands
            playlists: Static mapping of combo key -> tracks
            now_playing: Optional now-playing state manager to keep current
            volume: Initial volume in [0, 1]
        """
        self.sink = sink
        self.playlists = playlists
        self.now_playing = now_playing or NowPlayingStateManager()

        self.current_combo_key: Optional[str] = None
        self.current_playlist: List[Track] = []
        self.current_track_index: int = -1
        self.playing: bool = False
        self.volume: float = _clamp(volume)
        self._want_playing = False

        self._sink_call("set_volume", self.volume)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, key: str) -> bool:
        """
        Switch to the playlist for a combo key.

        Args:
            key: Combo key to select

        Returns:
            True if the selection changed, False for a redundant key
        """
        if key == self.current_combo_key:
            return False

        playlist = lookup_playlist(self.playlists, key)

        self.current_playlist = playlist
        self.current_track_index = -1
        self.current_combo_key = key

        logger.info(
            f"[SESSION] Selected {key!r}: {len(playlist)} track(s)"
            + (" (switching while playing)" if self._want_playing else "")
        )

        if self.playing:
            self._sink_call("stop")
            self.playing = False

        if not playlist:
            # Nothing to play for this key: stay silent
            self.now_playing.clear_state()
            return True

        self._load(0)
        if self._want_playing:
            self._start()
        return True

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def advance(self) -> None:
        """Move to the next track (wrapping), starting it if playing."""
        if not self.current_playlist:
            return
        self._load((self.current_track_index + 1) % len(self.current_playlist))
        if self._want_playing:
            self._start()

    def previous(self) -> None:
        """Move to the previous track (wrapping), starting it if playing."""
        if not self.current_playlist:
            return
        if self.current_track_index <= 0:
            index = len(self.current_playlist) - 1
        else:
            index = self.current_track_index - 1
        self._load(index)
        if self._want_playing:
            self._start()

    def play(self) -> bool:
        """
        Start playback of the loaded track.

        Returns:
            True if the channel is playing afterwards
        """
        if not self.current_playlist:
            return False
        self._want_playing = True
        if self.current_track_index < 0:
            self._load(0)
        if self.playing:
            return True
        return self._start()

    def pause(self) -> None:
        if self.current_track_index >= 0:
            self._sink_call("pause")
        self._want_playing = False
        self.playing = False

    def toggle(self) -> None:
        if self.playing:
            self.pause()
        else:
            self.play()

    def on_track_ended(self) -> None:
        """Handle end-of-track from the sink: loop within the playlist."""
        logger.debug(f"[SESSION] Track {self.current_track_index} ended")
        self.advance()

    def set_volume(self, volume: float) -> None:
        self.volume = _clamp(volume)
        self._sink_call("set_volume", self.volume)

    def seek(self, position_sec: float) -> None:
        if self.current_track_index < 0:
            return
        self._sink_call("seek", max(0.0, float(position_sec)))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current_track(self) -> Optional[Track]:
        if 0 <= self.current_track_index < len(self.current_playlist):
            return self.current_playlist[self.current_track_index]
        return None

    def current_track_meta(self) -> Optional[dict]:
        track = self.current_track
        return track.meta() if track else None

    def is_playing(self) -> bool:
        return self.playing

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load(self, index: int) -> None:
        track = self.current_playlist[index]
        self.current_track_index = index
        self._sink_call("load", track)
        self.now_playing.on_track_loaded(track, self.current_combo_key, index)
        logger.debug(f"[SESSION] Loaded #{index}: {track.title} - {track.artist}")

    def _start(self) -> bool:
        try:
            self.sink.play()
        except PlaybackRejected as e:
            # Left for the next select/play to retry
            logger.warning(f"[SESSION] Playback rejected by sink: {e}")
            self.playing = False
            return False
        except Exception as e:
            logger.warning(f"[SESSION] Sink error on play: {e}", exc_info=True)
            self.playing = False
            return False
        self.playing = True
        return True

    def _sink_call(self, command: str, *args) -> None:
        try:
            getattr(self.sink, command)(*args)
        except Exception as e:
            logger.warning(f"[SESSION] Sink error on {command}: {e}")


def _clamp(volume: float) -> float:
    return min(1.0, max(0.0, float(volume)))
