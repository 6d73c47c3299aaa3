from jukebox.config import JukeboxConfig
from .base_sink import AudioSink
from .null_sink import NullSink
from .remote_sink import RemotePlayerSink


def create_output_sink(config: JukeboxConfig) -> AudioSink:
    """
    Create an audio sink based on configuration.

    Config:
        sink: "null" | "remote" (default: "null")
        remote_host / remote_port: Player control API for "remote"

    Returns:
        AudioSink instance configured according to config
    """
    if config.sink == "remote":
        return RemotePlayerSink(config.remote_host, config.remote_port)

    # Default: discard audio, selection logic still runs
    return NullSink()
