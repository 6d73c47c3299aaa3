"""
Track Model for Marker Jukebox.

Defines the Track dataclass for statically configured playlist entries.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Track:
    """
    A single playlist entry.

    Attributes:
        title: Track title for display surfaces
        artist: Track artist for display surfaces
        source: Path or URL handed to the audio sink
    """
    title: str
    artist: str
    source: str

    def meta(self) -> Dict[str, Any]:
        """Return the display metadata (title, artist)."""
        return {"title": self.title, "artist": self.artist}
