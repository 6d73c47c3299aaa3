from abc import ABC, abstractmethod

from jukebox.playback.track import Track


class PlaybackRejected(Exception):
    """Raised by a sink that refuses to start playback (e.g. autoplay policy)."""


class AudioSink(ABC):
    """
    Abstract base class for all audio sinks.

    Sinks are transport-only: they make no decisions about what plays.
    Only PlaybackSession issues commands to a sink.
    """

    @abstractmethod
    def load(self, track: Track) -> None:
        """
        Load a track without starting it.

        Args:
            track: Track to load
        """
        ...

    @abstractmethod
    def play(self) -> None:
        """
        Start or resume the loaded track.

        Raises:
            PlaybackRejected: If the player refuses to start
        """
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    @abstractmethod
    def seek(self, position_sec: float) -> None:
        ...

    @abstractmethod
    def set_volume(self, volume: float) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        """
        Close the sink and release resources.
        """
        ...
