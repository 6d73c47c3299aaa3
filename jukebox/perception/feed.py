"""
Producer Feed Reader for Marker Jukebox.

Reads JSON-lines producer output. Each line is one of:

- {"tick": [{"label": ..., "confidence": ...}, ...]}   ranked tick
- {"scores": {"<label>": <confidence>, ...}}           raw classifier scores
- {"symbolId": <int>, "present": <bool>}              presence event
- {"transport": "<command>", "value": <number>}        transport command
- {"manual": [<label or null>, <label or null>]}      manual selection

Blank lines are skipped. Malformed lines are logged and skipped so a bad
producer line never stops the feed.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import IO, Any, Iterator, List, Optional, Union

from jukebox.perception.observation import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    MAX_RANKED_ENTRIES,
    PresenceEvent,
    RankedObservation,
    top_observations,
)

logger = logging.getLogger(__name__)

TRANSPORT_COMMANDS = {"play", "pause", "toggle", "next", "previous", "ended", "volume", "seek"}


@dataclass(frozen=True)
class RankedTick:
    """One ranked-observation tick, best entry first."""
    entries: List[Optional[RankedObservation]] = field(default_factory=list)


@dataclass(frozen=True)
class TransportCommand:
    """Manual transport request (or a track-end signal from the player)."""
    command: str
    value: Optional[float] = None


@dataclass(frozen=True)
class ManualSelection:
    """Direct slot selection, bypassing the debouncer."""
    slot_a: Optional[str] = None
    slot_b: Optional[str] = None


FeedItem = Union[RankedTick, PresenceEvent, TransportCommand, ManualSelection]


def _ranked_entry(raw: Any) -> Optional[RankedObservation]:
    if not isinstance(raw, dict):
        return None
    label = raw.get("label")
    if not isinstance(label, str) or not label:
        return None
    try:
        confidence = float(raw.get("confidence", 1.0))
    except (TypeError, ValueError):
        return None
    return RankedObservation(label=label, confidence=confidence)


def parse_feed_line(line: str,
                    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> Optional[FeedItem]:
    """
    Parse one feed line.

    Args:
        line: Raw JSON line
        threshold: Confidence threshold applied to raw "scores" lines

    Returns:
        Parsed FeedItem, or None for blank or malformed lines
    """
    line = line.strip()
    if not line:
        return None

    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        logger.warning(f"[FEED] Skipping malformed line: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"[FEED] Skipping non-object line: {line[:80]}")
        return None

    if "tick" in data:
        raw_entries = data["tick"] if isinstance(data["tick"], list) else []
        # Malformed entries keep their rank position as "none"
        entries = [_ranked_entry(raw) for raw in raw_entries[:MAX_RANKED_ENTRIES]]
        return RankedTick(entries=entries)

    if "scores" in data:
        scores = data["scores"] if isinstance(data["scores"], dict) else {}
        return RankedTick(entries=top_observations(scores, threshold=threshold))

    if "symbolId" in data:
        symbol_id = data.get("symbolId")
        present = data.get("present")
        if isinstance(symbol_id, bool) or not isinstance(symbol_id, int) or not isinstance(present, bool):
            logger.warning(f"[FEED] Skipping malformed presence event: {line[:80]}")
            return None
        return PresenceEvent(symbol_id=symbol_id, present=present)

    if "transport" in data:
        command = data.get("transport")
        if command not in TRANSPORT_COMMANDS:
            logger.warning(f"[FEED] Skipping unknown transport command: {command!r}")
            return None
        value = data.get("value")
        if value is not None:
            try:
                value = float(value)
            except (TypeError, ValueError):
                logger.warning(f"[FEED] Skipping transport command with bad value: {value!r}")
                return None
        return TransportCommand(command=command, value=value)

    if "manual" in data:
        slots = data["manual"] if isinstance(data["manual"], list) else []
        slots = [s if isinstance(s, str) and s else None for s in slots[:2]]
        slots += [None] * (2 - len(slots))
        return ManualSelection(slot_a=slots[0], slot_b=slots[1])

    logger.warning(f"[FEED] Skipping unrecognized line: {line[:80]}")
    return None


def read_feed(stream: IO[str],
              threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> Iterator[FeedItem]:
    """
    Yield parsed items from a JSON-lines stream, in arrival order.

    Args:
        stream: Text stream (file or stdin)
        threshold: Confidence threshold applied to raw "scores" lines
    """
    for line in stream:
        item = parse_feed_line(line, threshold=threshold)
        if item is not None:
            yield item
