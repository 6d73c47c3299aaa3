"""
Channel Arbiter for Marker Jukebox.

Decides which single symbol owns the one audio channel when a tracker
reports found/lost events for several concurrently visible markers.

Policy:
- last-claimed-wins: a newly found symbol takes the channel
- fallback on loss: when the owner is lost, the remaining symbol with the
  lowest id takes over; the channel goes idle only when nothing is visible
"""

import logging
from typing import FrozenSet, Optional, Tuple

from jukebox.perception.observation import PresenceEvent

logger = logging.getLogger(__name__)

ARBITER_STATE_IDLE = "IDLE"
ARBITER_STATE_OWNED = "OWNED"


def arbitrate(
    active: FrozenSet[int],
    owner: Optional[int],
    event: PresenceEvent,
) -> Tuple[FrozenSet[int], Optional[int]]:
    """
    Apply one presence event to (active set, owner).

    Args:
        active: Symbols currently present
        owner: Current channel owner, or None when idle
        event: Incoming found/lost event

    Returns:
        Tuple of (new active set, new owner)
    """
    symbol = event.symbol_id

    if event.present:
        # Claim: the most recently found symbol takes the channel
        return active | {symbol}, symbol

    remaining = active - {symbol}
    if symbol != owner:
        return remaining, owner
    if not remaining:
        return remaining, None
    return remaining, min(remaining)


class ChannelArbiter:
    """
    Stateful wrapper around `arbitrate`.

    Holds the active set, the priority pointer (the most recently claimed
    symbol that is still present) and the channel owner.
    """

    def __init__(self):
        self._active: FrozenSet[int] = frozenset()
        self._owner: Optional[int] = None
        self._priority: Optional[int] = None

    @property
    def state(self) -> str:
        return ARBITER_STATE_IDLE if self._owner is None else ARBITER_STATE_OWNED

    @property
    def owner(self) -> Optional[int]:
        return self._owner

    @property
    def priority(self) -> Optional[int]:
        return self._priority

    @property
    def active(self) -> FrozenSet[int]:
        return self._active

    def present(self, symbol_id: int) -> bool:
        """Handle a found event. Returns True if ownership changed."""
        return self.apply(PresenceEvent(symbol_id=symbol_id, present=True))

    def absent(self, symbol_id: int) -> bool:
        """Handle a lost event. Returns True if ownership changed."""
        return self.apply(PresenceEvent(symbol_id=symbol_id, present=False))

    def apply(self, event: PresenceEvent) -> bool:
        """
        Apply one presence event.

        Args:
            event: Found/lost event

        Returns:
            True if the channel owner changed
        """
        if not event.present and event.symbol_id not in self._active:
            logger.debug(f"[ARBITER] Ignoring lost event for inactive symbol {event.symbol_id}")
            return False

        previous_owner = self._owner
        self._active, self._owner = arbitrate(self._active, self._owner, event)

        if event.present:
            self._priority = event.symbol_id
        elif self._priority == event.symbol_id:
            self._priority = None

        if self._owner == previous_owner:
            return False

        if self._owner is None:
            logger.info(f"[ARBITER] Channel released by {previous_owner} -> {ARBITER_STATE_IDLE}")
        elif event.present:
            logger.info(f"[ARBITER] Channel claimed by {self._owner} (was {previous_owner})")
        else:
            logger.info(
                f"[ARBITER] Owner {previous_owner} lost, falling back to {self._owner} "
                f"(active={sorted(self._active)})"
            )
        return True

    def reset(self) -> None:
        """Return to IDLE with an empty active set."""
        self._active = frozenset()
        self._owner = None
        self._priority = None
