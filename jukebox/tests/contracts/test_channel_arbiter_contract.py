"""
Contract tests for the Channel Arbiter.

Covers:
- Last-claimed-wins on found events
- Fallback to the lowest remaining id when the owner is lost
- IDLE only when nothing is visible
- The pure arbitrate() transition function
"""

from jukebox.perception.arbiter import (
    ARBITER_STATE_IDLE,
    ARBITER_STATE_OWNED,
    ChannelArbiter,
    arbitrate,
)
from jukebox.perception.observation import PresenceEvent


class TestClaim:

    def test_starts_idle(self, arbiter):
        assert arbiter.state == ARBITER_STATE_IDLE
        assert arbiter.owner is None
        assert arbiter.active == frozenset()

    def test_present_claims_channel(self, arbiter):
        assert arbiter.present(3) is True
        assert arbiter.state == ARBITER_STATE_OWNED
        assert arbiter.owner == 3
        assert arbiter.priority == 3

    def test_last_claimed_wins(self, arbiter):
        arbiter.present(0)
        arbiter.present(5)
        assert arbiter.owner == 5
        assert arbiter.active == frozenset({0, 5})

    def test_repeated_present_is_not_a_transition(self, arbiter):
        arbiter.present(1)
        assert arbiter.present(1) is False
        assert arbiter.owner == 1


class TestRelease:

    def test_owner_lost_falls_back_to_lowest_remaining(self, arbiter):
        for symbol in (1, 3, 2):
            arbiter.present(symbol)
        assert arbiter.owner == 2

        assert arbiter.absent(2) is True
        assert arbiter.owner == 1
        assert arbiter.state == ARBITER_STATE_OWNED
        assert arbiter.active == frozenset({1, 3})

    def test_last_symbol_lost_goes_idle(self, arbiter):
        arbiter.present(4)
        assert arbiter.absent(4) is True
        assert arbiter.state == ARBITER_STATE_IDLE
        assert arbiter.owner is None

    def test_non_owner_lost_keeps_owner(self, arbiter):
        arbiter.present(0)
        arbiter.present(1)
        assert arbiter.absent(0) is False
        assert arbiter.owner == 1
        assert arbiter.active == frozenset({1})

    def test_unknown_symbol_lost_is_ignored(self, arbiter):
        arbiter.present(0)
        assert arbiter.absent(9) is False
        assert arbiter.owner == 0
        assert arbiter.active == frozenset({0})

    def test_priority_cleared_when_claimer_leaves(self, arbiter):
        arbiter.present(0)
        arbiter.present(1)
        arbiter.absent(1)
        assert arbiter.priority is None
        assert arbiter.owner == 0

    def test_reset_returns_to_idle(self, arbiter):
        arbiter.present(0)
        arbiter.present(1)
        arbiter.reset()
        assert arbiter.state == ARBITER_STATE_IDLE
        assert arbiter.active == frozenset()
        assert arbiter.priority is None


class TestOwnerSequence:

    def test_found_found_lost_sequence(self, arbiter):
        owners = []
        for event in (PresenceEvent(0, True), PresenceEvent(1, True), PresenceEvent(1, False)):
            arbiter.apply(event)
            owners.append(arbiter.owner)
        assert owners == [0, 1, 0]

    def test_reclaim_after_fallback(self, arbiter):
        arbiter.present(2)
        arbiter.present(7)
        arbiter.absent(7)
        assert arbiter.owner == 2
        arbiter.present(7)
        assert arbiter.owner == 7


class TestArbitrateFunction:
    """arbitrate() is a pure function of (active set, owner, event)."""

    def test_claim(self):
        assert arbitrate(frozenset({1}), 1, PresenceEvent(2, True)) == (frozenset({1, 2}), 2)

    def test_fallback(self):
        assert arbitrate(frozenset({1, 2, 3}), 2, PresenceEvent(2, False)) == (frozenset({1, 3}), 1)

    def test_release(self):
        assert arbitrate(frozenset({5}), 5, PresenceEvent(5, False)) == (frozenset(), None)

    def test_non_owner_loss(self):
        assert arbitrate(frozenset({1, 2}), 2, PresenceEvent(1, False)) == (frozenset({2}), 2)

    def test_inputs_not_mutated(self):
        active = frozenset({1, 2})
        arbitrate(active, 2, PresenceEvent(2, False))
        assert active == frozenset({1, 2})

    def test_instances_do_not_share_state(self):
        first = ChannelArbiter()
        second = ChannelArbiter()
        first.present(1)
        assert second.owner is None
        assert second.active == frozenset()
