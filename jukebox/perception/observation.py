"""
Observation Model for Marker Jukebox.

Defines the symbols a deployment recognizes and the two observation
shapes producers may emit:

- RankedObservation: one {label, confidence} entry of a ranked tick
- PresenceEvent: a discrete found/lost event for one symbol id

Both shapes are projected into "is symbol X present on this tick".
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

# Default producer threshold for classifier scores
DEFAULT_CONFIDENCE_THRESHOLD: float = 0.75

# Producers truncate ranked ticks to the top two entries
MAX_RANKED_ENTRIES: int = 2


@dataclass(frozen=True)
class Symbol:
    """
    A physical marker known to the deployment.

    Attributes:
        id: Integer id used by discrete-event producers
        name: String used by ranked producers and in combo keys
        label: Human-readable label for display surfaces
    """
    id: int
    name: str
    label: str = ""


@dataclass(frozen=True)
class RankedObservation:
    """One entry of a ranked-observation tick."""
    label: str
    confidence: float = 1.0


@dataclass(frozen=True)
class PresenceEvent:
    """Found/lost event from a tracker-style producer."""
    symbol_id: int
    present: bool


def label_of(entry: Any) -> Optional[str]:
    """
    Project one raw tick entry onto a symbol label.

    Accepts RankedObservation instances, mappings with a "label" key and
    plain strings. Anything else, or an empty label, is treated as absence.

    Args:
        entry: Raw tick entry

    Returns:
        Label string, or None if the entry carries no usable label
    """
    if entry is None:
        return None
    if isinstance(entry, RankedObservation):
        label = entry.label
    elif isinstance(entry, Mapping):
        label = entry.get("label")
    elif isinstance(entry, str):
        label = entry
    else:
        return None

    if not isinstance(label, str) or not label:
        return None
    return label


def top_observations(
    scores: Mapping[str, float],
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    limit: int = MAX_RANKED_ENTRIES,
) -> List[RankedObservation]:
    """
    Turn raw per-label classifier scores into a ranked tick.

    Entries are sorted by confidence (highest first), entries below the
    threshold are dropped, and the result is truncated to `limit` entries.

    Args:
        scores: Mapping of label -> confidence
        threshold: Minimum confidence to keep an entry
        limit: Maximum number of entries to return

    Returns:
        Ranked list of RankedObservation
    """
    ranked = []
    for label, confidence in scores.items():
        try:
            value = float(confidence)
        except (TypeError, ValueError):
            logger.debug(f"[OBSERVATION] Ignoring non-numeric score for {label!r}: {confidence!r}")
            continue
        if value >= threshold:
            ranked.append(RankedObservation(label=label, confidence=value))

    ranked.sort(key=lambda obs: obs.confidence, reverse=True)
    return ranked[:max(0, limit)]


class SymbolRegistry:
    """
    Lookup table for the configured symbols.

    Resolves event ids to combo-key names and names to display labels.
    Unknown ids fall back to their decimal string so an unconfigured
    marker still produces a usable key.
    """

    def __init__(self, symbols: Optional[Iterable[Symbol]] = None):
        self._by_id: Dict[int, Symbol] = {}
        self._by_name: Dict[str, Symbol] = {}
        for symbol in symbols or []:
            self.add(symbol)

    def add(self, symbol: Symbol) -> None:
        if symbol.id in self._by_id:
            raise ValueError(f"Duplicate symbol id: {symbol.id}")
        if symbol.name in self._by_name:
            raise ValueError(f"Duplicate symbol name: {symbol.name!r}")
        self._by_id[symbol.id] = symbol
        self._by_name[symbol.name] = symbol

    def name_for(self, symbol_id: int) -> str:
        symbol = self._by_id.get(symbol_id)
        return symbol.name if symbol else str(symbol_id)

    def label_for(self, name: Optional[str]) -> str:
        if name is None:
            return ""
        symbol = self._by_name.get(name)
        return symbol.label if symbol and symbol.label else "Unknown"

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self):
        return iter(sorted(self._by_id.values(), key=lambda s: s.id))
