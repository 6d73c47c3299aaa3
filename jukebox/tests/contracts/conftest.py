"""
Shared pytest fixtures for Jukebox contract tests.

Contract tests use test doubles (fakes, stubs, mocks) to avoid real dependencies.
No environment variables, real players or real catalog files are used unless a
test creates them under tmp_path.
"""

import pytest
from unittest.mock import Mock

from jukebox.app.engine import JukeboxEngine
from jukebox.perception.arbiter import ChannelArbiter
from jukebox.perception.debouncer import TemporalDebouncer
from jukebox.playback.session import PlaybackSession
from jukebox.state.now_playing_state import NowPlayingStateManager
from jukebox.tests.contracts.test_doubles import (
    RecordingSink,
    RejectingSink,
    create_catalog,
    create_playlists,
)


@pytest.fixture
def recording_sink():
    """Create a stub sink that records commands."""
    return RecordingSink()


@pytest.fixture
def rejecting_sink():
    """Create a stub sink that refuses play()."""
    return RejectingSink()


@pytest.fixture
def playlists():
    """Create the standard playlist table."""
    return create_playlists()


@pytest.fixture
def debouncer():
    """Create a debouncer with the default window (8) and ratio (0.6)."""
    return TemporalDebouncer()


@pytest.fixture
def arbiter():
    return ChannelArbiter()


@pytest.fixture
def now_playing_manager():
    return NowPlayingStateManager()


@pytest.fixture
def session(recording_sink, playlists, now_playing_manager):
    """Create a playback session over the recording sink."""
    return PlaybackSession(recording_sink, playlists, now_playing=now_playing_manager)


@pytest.fixture
def ranked_engine(recording_sink):
    engine = JukeboxEngine(create_catalog(), recording_sink, driver="ranked")
    engine.start()
    return engine


@pytest.fixture
def event_engine(recording_sink):
    engine = JukeboxEngine(create_catalog(), recording_sink, driver="event")
    engine.start()
    return engine


@pytest.fixture
def manual_engine(recording_sink):
    engine = JukeboxEngine(create_catalog(), recording_sink, driver="manual")
    engine.start()
    return engine


@pytest.fixture
def mock_listener():
    """Create a mock now-playing listener."""
    return Mock()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove JUKEBOX_* variables and point the .env lookup at an empty dir."""
    import os
    for key in list(os.environ):
        if key.startswith("JUKEBOX_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("JUKEBOX_ENV_FILE", str(tmp_path / "missing.env"))
    yield monkeypatch
    # load_dotenv writes os.environ directly, outside monkeypatch's undo log
    for key in list(os.environ):
        if key.startswith("JUKEBOX_"):
            del os.environ[key]
