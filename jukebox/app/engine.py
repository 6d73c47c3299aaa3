"""
Jukebox Engine for Marker Jukebox.

An explicitly constructed engine instance holding its own debounce windows,
active set and playback session. The host loop passes producer output to
it; nothing here is module-global.

Drivers (a configuration choice, never mixed in one engine):
- "ranked": classifier ticks -> TemporalDebouncer -> combo key
- "event":  found/lost events -> ChannelArbiter -> owner's combo key
- "manual": direct slot selection -> combo key
"""

import copy
import logging
import threading
from typing import Any, Dict, Optional, Sequence, Tuple

from jukebox.config import DRIVERS, JukeboxConfig
from jukebox.outputs.base_sink import AudioSink
from jukebox.perception.arbiter import ChannelArbiter
from jukebox.perception.debouncer import (
    DEFAULT_AGREEMENT_RATIO,
    DEFAULT_WINDOW_SIZE,
    StableState,
    TemporalDebouncer,
)
from jukebox.perception.feed import FeedItem, ManualSelection, RankedTick, TransportCommand
from jukebox.perception.observation import PresenceEvent
from jukebox.playback.catalog import Catalog
from jukebox.playback.combo_key import DEFAULT_KEY, resolve
from jukebox.playback.session import PlaybackSession
from jukebox.state.now_playing_state import NowPlayingStateManager

logger = logging.getLogger(__name__)

DRIVER_RANKED = "ranked"
DRIVER_EVENT = "event"
DRIVER_MANUAL = "manual"

STATUS_TEXT = {
    0: "No Symbols Detected",
    1: "One Symbol Detected",
    2: "Two Symbols Detected",
}


class JukeboxEngine:
    """
    Perception-to-playback engine for one audio channel.

    All mutating entry points (on_tick, on_presence, set_manual,
    on_transport) are serialized by the host and never raise: failures are
    logged and the engine keeps its last good state.
    """

    def __init__(self, catalog: Catalog, sink: AudioSink, driver: str = DRIVER_RANKED,
                 window_size: int = DEFAULT_WINDOW_SIZE,
                 agreement_ratio: float = DEFAULT_AGREEMENT_RATIO,
                 volume: float = 1.0,
                 now_playing: Optional[NowPlayingStateManager] = None):
        """
        Initialize engine.

        Args:
            catalog: Symbols and playlists
            sink: Audio sink owned by the playback session
            driver: "ranked", "event" or "manual"
            window_size: Debounce window capacity
            agreement_ratio: Debounce quorum fraction
            volume: Initial channel volume
            now_playing: Optional now-playing state manager

        Raises:
            ValueError: If driver or debounce tunables are invalid
        """
        if driver not in DRIVERS:
            raise ValueError(f"Unknown driver: {driver} (must be one of {', '.join(DRIVERS)})")

        self.driver = driver
        self.symbols = catalog.symbols
        self.debouncer = TemporalDebouncer(window_size=window_size, agreement_ratio=agreement_ratio)
        self.arbiter = ChannelArbiter()
        self.now_playing = now_playing or NowPlayingStateManager()
        self.session = PlaybackSession(sink, catalog.playlists, now_playing=self.now_playing, volume=volume)

        self._lock = threading.RLock()
        self._combo_key = DEFAULT_KEY
        self._stable = StableState()
        self._manual: Tuple[Optional[str], Optional[str]] = (None, None)
        self._started = False

        # Readers (HTTP) take this lock only; sink I/O never runs under it
        self._snapshot_lock = threading.Lock()
        self._snapshot: Dict[str, Any] = {}
        self._publish()

        logger.info(
            f"[ENGINE] Initialized (driver={driver}, window={window_size}, "
            f"ratio={agreement_ratio}, playlists={len(catalog.playlists)})"
        )

    @classmethod
    def from_config(cls, config: JukeboxConfig, catalog: Catalog, sink: AudioSink) -> "JukeboxEngine":
        return cls(
            catalog,
            sink,
            driver=config.driver,
            window_size=config.window_size,
            agreement_ratio=config.agreement_ratio,
            volume=config.volume,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Load the playlist for the initial (empty) state without playing."""
        with self._lock:
            if self._started:
                return
            self._started = True
            self.session.select(self._combo_key)
            self._publish()

    # ------------------------------------------------------------------
    # Producer input
    # ------------------------------------------------------------------

    def on_tick(self, tick: Optional[Sequence[Any]]) -> None:
        """
        Process one ranked-observation tick.

        Args:
            tick: Ranked entries, best first (at most two are used)
        """
        if self.driver != DRIVER_RANKED:
            logger.debug(f"[ENGINE] Ignoring ranked tick (driver={self.driver})")
            return
        with self._lock:
            try:
                self.debouncer.observe(tick)
                self._stable = self.debouncer.current_stable()
                if self._stable.changed:
                    self._apply_key(resolve(self._stable.slot_a, self._stable.slot_b))
            except Exception as e:
                logger.error(f"[ENGINE] Error processing tick: {e}", exc_info=True)
            self._publish()

    def on_presence(self, event: PresenceEvent) -> None:
        """
        Process one found/lost event.

        Args:
            event: Presence event from the tracker
        """
        if self.driver != DRIVER_EVENT:
            logger.debug(f"[ENGINE] Ignoring presence event (driver={self.driver})")
            return
        with self._lock:
            try:
                if self.arbiter.apply(event):
                    owner = self.arbiter.owner
                    name = self.symbols.name_for(owner) if owner is not None else None
                    self._apply_key(resolve(name, None))
            except Exception as e:
                logger.error(f"[ENGINE] Error processing presence event: {e}", exc_info=True)
            self._publish()

    def set_manual(self, slot_a: Optional[str], slot_b: Optional[str]) -> None:
        """
        Select symbols directly, bypassing debouncing.

        Args:
            slot_a: First symbol, or None
            slot_b: Second symbol, or None
        """
        if self.driver != DRIVER_MANUAL:
            logger.debug(f"[ENGINE] Ignoring manual selection (driver={self.driver})")
            return
        with self._lock:
            try:
                self._manual = (slot_a or None, slot_b or None)
                self._apply_key(resolve(*self._manual))
            except Exception as e:
                logger.error(f"[ENGINE] Error applying manual selection: {e}", exc_info=True)
            self._publish()

    def on_transport(self, command: TransportCommand) -> None:
        """
        Apply a transport command (user controls or player track-end).

        Args:
            command: Transport command
        """
        with self._lock:
            try:
                self._dispatch_transport(command)
            except Exception as e:
                logger.error(f"[ENGINE] Error applying transport {command.command}: {e}", exc_info=True)
            self._publish()

    def handle(self, item: FeedItem) -> None:
        """Route one parsed feed item to the matching entry point."""
        if isinstance(item, RankedTick):
            self.on_tick(item.entries)
        elif isinstance(item, PresenceEvent):
            self.on_presence(item)
        elif isinstance(item, ManualSelection):
            self.set_manual(item.slot_a, item.slot_b)
        elif isinstance(item, TransportCommand):
            self.on_transport(item)
        else:
            logger.warning(f"[ENGINE] Unsupported feed item: {type(item).__name__}")

    def _dispatch_transport(self, command: TransportCommand) -> None:
        name = command.command
        if name == "play":
            self.session.play()
        elif name == "pause":
            self.session.pause()
        elif name == "toggle":
            self.session.toggle()
        elif name == "next":
            self.session.advance()
        elif name == "previous":
            self.session.previous()
        elif name == "ended":
            self.session.on_track_ended()
        elif name == "volume" and command.value is not None:
            self.session.set_volume(command.value)
        elif name == "seek" and command.value is not None:
            self.session.seek(command.value)
        else:
            logger.warning(f"[ENGINE] Transport command {name!r} ignored (value={command.value})")

    def _apply_key(self, key: str) -> None:
        if key != self._combo_key:
            logger.info(f"[ENGINE] Combo key {self._combo_key!r} -> {key!r}")
        self._combo_key = key
        self.session.select(key)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_combo_key(self) -> str:
        with self._lock:
            return self._combo_key

    def get_active_owner(self) -> Optional[int]:
        with self._lock:
            return self.arbiter.owner

    def is_playing(self) -> bool:
        with self._lock:
            return self.session.is_playing()

    def current_track_meta(self) -> Optional[dict]:
        with self._lock:
            return self.session.current_track_meta()

    def active_symbols(self) -> Tuple[Optional[str], Optional[str]]:
        """Symbols currently driving selection, as (slot A, slot B)."""
        with self._lock:
            if self.driver == DRIVER_RANKED:
                return self._stable.slot_a, self._stable.slot_b
            if self.driver == DRIVER_EVENT:
                owner = self.arbiter.owner
                return (self.symbols.name_for(owner) if owner is not None else None), None
            return self._manual

    def status(self) -> str:
        count = sum(1 for s in self.active_symbols() if s)
        return STATUS_TEXT[count]

    def get_state_dict(self) -> Dict[str, Any]:
        """
        Get engine state as dictionary for JSON serialization.

        Served from the snapshot taken after the last input, so callers
        never wait on a sink call in progress.

        Returns:
            Dictionary with selection and transport fields
        """
        with self._snapshot_lock:
            return copy.deepcopy(self._snapshot)

    def _publish(self) -> None:
        state = self._build_state_dict()
        with self._snapshot_lock:
            self._snapshot = state

    def _build_state_dict(self) -> Dict[str, Any]:
        with self._lock:
            slot_a, slot_b = self.active_symbols()
            return {
                "driver": self.driver,
                "combo_key": self._combo_key,
                "active_owner": self.arbiter.owner,
                "stable": {
                    "slot_a": slot_a,
                    "slot_b": slot_b,
                    "label_a": self.symbols.label_for(slot_a),
                    "label_b": self.symbols.label_for(slot_b),
                },
                "playing": self.session.is_playing(),
                "track_index": self.session.current_track_index,
                "track": self.session.current_track_meta(),
                "status": self.status(),
                "volume": self.session.volume,
            }
