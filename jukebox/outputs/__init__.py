"""
Outputs module for Marker Jukebox.

This package contains audio sinks: the single audio channel the playback
session issues transport commands to.
"""

from .base_sink import AudioSink, PlaybackRejected
from .null_sink import NullSink
from .remote_sink import RemotePlayerSink
from .factory import create_output_sink

__all__ = [
    "AudioSink",
    "PlaybackRejected",
    "NullSink",
    "RemotePlayerSink",
    "create_output_sink",
]
