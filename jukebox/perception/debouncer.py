"""
Temporal Debouncer for Marker Jukebox.

Suppresses flicker in per-tick classifier output so downstream logic only
reacts to durable state changes.

Each tick contributes its top-ranked label to slot A and its second-ranked
label to slot B. A slot's stable value is the most frequent label in its
window, provided it reaches the agreement quorum.
"""

import logging
from collections import Counter, deque
from dataclasses import dataclass
from typing import Any, Deque, Optional, Sequence

from jukebox.perception.observation import label_of

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE: int = 8
DEFAULT_AGREEMENT_RATIO: float = 0.6


@dataclass(frozen=True)
class StableState:
    """
    Debounced output for one evaluation.

    Attributes:
        slot_a: Stable top-ranked symbol, or None
        slot_b: Stable second-ranked symbol, or None
        changed: True if either slot differs from the previous evaluation
    """
    slot_a: Optional[str] = None
    slot_b: Optional[str] = None
    changed: bool = False


class TemporalDebouncer:
    """
    Majority vote over a fixed window of recent ticks.

    The window for each slot is a ring buffer of capacity `window_size`.
    The quorum is always judged against the configured capacity, so no
    value can become stable before `agreement_ratio * window_size`
    observations of it exist.
    """

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE,
                 agreement_ratio: float = DEFAULT_AGREEMENT_RATIO):
        """
        Initialize the debouncer.

        Args:
            window_size: Window capacity per slot (>= 1)
            agreement_ratio: Quorum fraction of the window, in (0, 1]

        Raises:
            ValueError: If either tunable is out of range
        """
        if int(window_size) < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        if not 0.0 < float(agreement_ratio) <= 1.0:
            raise ValueError(f"agreement_ratio must be in (0, 1], got {agreement_ratio}")

        self.window_size = int(window_size)
        self.agreement_ratio = float(agreement_ratio)
        # Rounded so exact products (0.28 * 25 == 7) are not pushed past an integer
        self.quorum = round(self.agreement_ratio * self.window_size, 9)

        self._window_a: Deque[Optional[str]] = deque(maxlen=self.window_size)
        self._window_b: Deque[Optional[str]] = deque(maxlen=self.window_size)
        self._last_a: Optional[str] = None
        self._last_b: Optional[str] = None

    def observe(self, tick: Optional[Sequence[Any]]) -> None:
        """
        Record one tick.

        Malformed ticks and entries count as "none" for their slot.

        Args:
            tick: Ranked entries for this tick, best first
        """
        entries = list(tick) if isinstance(tick, (list, tuple)) else []
        label_a = label_of(entries[0]) if len(entries) > 0 else None
        label_b = label_of(entries[1]) if len(entries) > 1 else None

        # deque(maxlen=N) evicts the oldest entry
        self._window_a.append(label_a)
        self._window_b.append(label_b)

    def current_stable(self) -> StableState:
        """
        Evaluate both windows.

        Returns:
            StableState with `changed` relative to the previous call
        """
        slot_a = self._stable_value(self._window_a)
        slot_b = self._stable_value(self._window_b)
        changed = slot_a != self._last_a or slot_b != self._last_b

        if changed:
            logger.debug(f"[DEBOUNCE] Stable state changed: A={slot_a!r} B={slot_b!r}")

        self._last_a = slot_a
        self._last_b = slot_b
        return StableState(slot_a=slot_a, slot_b=slot_b, changed=changed)

    def _stable_value(self, window: Deque[Optional[str]]) -> Optional[str]:
        counts = Counter(value for value in window if value is not None)
        if not counts:
            return None

        # Counter keeps first-seen order and most_common() is a stable sort,
        # so ties go to the value encountered first in the window
        value, count = counts.most_common(1)[0]
        return value if count >= self.quorum else None

    def window(self, slot: str = "a") -> list:
        """Return a copy of one slot's window, oldest first."""
        return list(self._window_a if slot == "a" else self._window_b)

    def reset(self) -> None:
        """Clear both windows and the previous result."""
        self._window_a.clear()
        self._window_b.clear()
        self._last_a = None
        self._last_b = None
