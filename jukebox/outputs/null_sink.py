import logging

from jukebox.playback.track import Track
from .base_sink import AudioSink

logger = logging.getLogger(__name__)


class NullSink(AudioSink):
    """A sink that discards all commands. Useful for dry runs and replays."""

    def load(self, track: Track) -> None:
        logger.debug(f"[SINK] load {track.source}")

    def play(self) -> None:
        logger.debug("[SINK] play")

    def pause(self) -> None:
        logger.debug("[SINK] pause")

    def stop(self) -> None:
        logger.debug("[SINK] stop")

    def seek(self, position_sec: float) -> None:
        logger.debug(f"[SINK] seek {position_sec:.2f}s")

    def set_volume(self, volume: float) -> None:
        logger.debug(f"[SINK] volume {volume:.2f}")

    def close(self) -> None:
        # Nothing to close
        return
