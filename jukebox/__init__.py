"""
Marker Jukebox.

Turns noisy marker detections into a stable symbolic state and drives
single-channel audio playback from it.
"""

__version__ = "1.0.0"
