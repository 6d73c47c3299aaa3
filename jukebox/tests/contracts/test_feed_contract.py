"""
Contract tests for the producer feed reader.

Covers:
- Every supported line shape
- Threshold and top-two truncation for raw classifier scores
- Malformed lines are skipped, never raised
"""

import io
import logging

import pytest

from jukebox.perception.feed import (
    ManualSelection,
    RankedTick,
    TransportCommand,
    parse_feed_line,
    read_feed,
)
from jukebox.perception.observation import PresenceEvent, RankedObservation, top_observations


class TestLineShapes:

    def test_ranked_tick(self):
        item = parse_feed_line('{"tick": [{"label": "A", "confidence": 0.9}, {"label": "B", "confidence": 0.8}]}')
        assert item == RankedTick(entries=[RankedObservation("A", 0.9), RankedObservation("B", 0.8)])

    def test_ranked_tick_truncated_to_two_entries(self):
        item = parse_feed_line('{"tick": [{"label": "A"}, {"label": "B"}, {"label": "C"}]}')
        assert [e.label for e in item.entries] == ["A", "B"]

    def test_malformed_entry_keeps_rank_position(self):
        item = parse_feed_line('{"tick": [{"confidence": 0.9}, {"label": "B"}]}')
        assert item.entries[0] is None
        assert item.entries[1].label == "B"

    def test_empty_tick(self):
        assert parse_feed_line('{"tick": []}') == RankedTick(entries=[])

    def test_presence_event(self):
        assert parse_feed_line('{"symbolId": 3, "present": true}') == PresenceEvent(3, True)
        assert parse_feed_line('{"symbolId": 3, "present": false}') == PresenceEvent(3, False)

    def test_transport_command(self):
        assert parse_feed_line('{"transport": "next"}') == TransportCommand("next")
        assert parse_feed_line('{"transport": "volume", "value": 0.4}') == TransportCommand("volume", 0.4)

    def test_manual_selection(self):
        assert parse_feed_line('{"manual": ["A", null]}') == ManualSelection("A", None)
        assert parse_feed_line('{"manual": ["", "B"]}') == ManualSelection(None, "B")
        assert parse_feed_line('{"manual": []}') == ManualSelection(None, None)


class TestScores:

    def test_scores_filtered_and_ranked(self):
        item = parse_feed_line('{"scores": {"A": 0.8, "B": 0.95, "C": 0.5, "D": 0.76}}', threshold=0.75)
        assert [e.label for e in item.entries] == ["B", "A"]

    def test_scores_below_threshold_give_empty_tick(self):
        item = parse_feed_line('{"scores": {"A": 0.2}}', threshold=0.75)
        assert item == RankedTick(entries=[])

    def test_threshold_is_inclusive(self):
        assert top_observations({"A": 0.75}, threshold=0.75) == [RankedObservation("A", 0.75)]

    def test_non_numeric_scores_ignored(self):
        assert top_observations({"A": "high", "B": 0.9}) == [RankedObservation("B", 0.9)]


class TestMalformedLines:

    @pytest.mark.parametrize("line", [
        "",
        "   ",
        "not json",
        "[1, 2]",
        '{"unknown": 1}',
        '{"symbolId": "3", "present": true}',
        '{"symbolId": true, "present": true}',
        '{"symbolId": 3, "present": "yes"}',
        '{"transport": "rewind"}',
        '{"transport": "seek", "value": "soon"}',
    ])
    def test_malformed_line_is_skipped(self, line):
        assert parse_feed_line(line) is None

    def test_malformed_line_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            parse_feed_line("{broken")
        assert "[FEED]" in caplog.text


class TestReadFeed:

    def test_yields_items_in_order_skipping_bad_lines(self):
        stream = io.StringIO(
            '{"symbolId": 0, "present": true}\n'
            "garbage\n"
            "\n"
            '{"transport": "play"}\n'
            '{"symbolId": 0, "present": false}\n'
        )
        assert list(read_feed(stream)) == [
            PresenceEvent(0, True),
            TransportCommand("play"),
            PresenceEvent(0, False),
        ]

    def test_threshold_passed_through(self):
        stream = io.StringIO('{"scores": {"A": 0.5}}\n')
        items = list(read_feed(stream, threshold=0.4))
        assert items == [RankedTick(entries=[RankedObservation("A", 0.5)])]
