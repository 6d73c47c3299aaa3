"""
Perception module for Marker Jukebox.

This package consumes producer output (ranked classifier ticks and
found/lost presence events) and turns it into stable symbolic state.
"""

from jukebox.perception.observation import (
    Symbol,
    SymbolRegistry,
    RankedObservation,
    PresenceEvent,
    top_observations,
)
from jukebox.perception.debouncer import TemporalDebouncer, StableState
from jukebox.perception.arbiter import ChannelArbiter, arbitrate

__all__ = [
    "Symbol",
    "SymbolRegistry",
    "RankedObservation",
    "PresenceEvent",
    "top_observations",
    "TemporalDebouncer",
    "StableState",
    "ChannelArbiter",
    "arbitrate",
]
