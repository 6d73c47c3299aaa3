"""
Combo Key Resolver for Marker Jukebox.

Canonicalizes up to two active symbols into one lookup key:

- no symbols:  "DEFAULT"
- one symbol:  "<symbol>|—"
- two symbols: "<lesser>|<greater>" (sorted, so order never matters)
"""

import logging
from typing import List, Mapping, Optional, Sequence, Tuple

from jukebox.playback.track import Track

logger = logging.getLogger(__name__)

DEFAULT_KEY = "DEFAULT"
NONE_MARKER = "—"
SEPARATOR = "|"


def resolve(slot_a: Optional[str], slot_b: Optional[str]) -> str:
    """
    Build the canonical combo key for two slots.

    Args:
        slot_a: First symbol, or None
        slot_b: Second symbol, or None

    Returns:
        Canonical combo key
    """
    symbols = [s for s in (slot_a, slot_b) if s]
    if not symbols:
        return DEFAULT_KEY
    if len(symbols) == 1:
        return f"{symbols[0]}{SEPARATOR}{NONE_MARKER}"
    return SEPARATOR.join(sorted(symbols))


def split_key(key: str) -> Optional[Tuple[str, str]]:
    """Return the two components of a two-part key, or None."""
    parts = key.split(SEPARATOR)
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


def lookup_playlist(table: Mapping[str, Sequence[Track]], key: str) -> List[Track]:
    """
    Resolve a combo key against a playlist table.

    Tries the exact key, then the key with its components swapped (for
    tables written without sorting), then DEFAULT. An exact or swapped
    entry that is empty also falls back to DEFAULT. A missing DEFAULT
    resolves to an empty playlist.

    Args:
        table: Mapping of combo key -> tracks
        key: Key to resolve

    Returns:
        List of tracks (possibly empty)
    """
    playlist = table.get(key)

    if playlist is None:
        parts = split_key(key)
        if parts is not None:
            swapped = f"{parts[1]}{SEPARATOR}{parts[0]}"
            playlist = table.get(swapped)
            if playlist is not None:
                logger.debug(f"[COMBO] Resolved {key!r} via swapped key {swapped!r}")

    if not playlist:
        if key != DEFAULT_KEY:
            logger.debug(f"[COMBO] No playlist for {key!r}, using {DEFAULT_KEY}")
        playlist = table.get(DEFAULT_KEY) or []

    return list(playlist)
