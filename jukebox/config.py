"""
Configuration management for Marker Jukebox.

Reads configuration from .env file and environment variables with sensible defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Default .env file location
DEFAULT_ENV_FILE = Path("/etc/jukebox/jukebox.env")

DRIVERS = ("ranked", "event", "manual")
SINKS = ("null", "remote")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


def _load_env_file():
    """Load environment variables from .env file if it exists."""
    env_file = os.getenv("JUKEBOX_ENV_FILE", str(DEFAULT_ENV_FILE))
    env_path = Path(env_file)

    if env_path.exists():
        load_dotenv(env_path, override=False)  # Don't override existing env vars


def _get_int(name: str, default: str) -> int:
    value = os.getenv(name, default)
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid {name}: {value} (must be an integer)")


def _get_float(name: str, default: str) -> float:
    value = os.getenv(name, default)
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Invalid {name}: {value} (must be a number)")


def _get_bool(name: str, default: str) -> bool:
    value = os.getenv(name, default).strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Invalid {name}: {value} (must be true or false)")


@dataclass
class JukeboxConfig:
    """Jukebox configuration loaded from .env file and environment variables."""

    # Debouncing
    window_size: int = 8
    agreement_ratio: float = 0.6

    # Sampling (tick pacing)
    sampling_interval_ms: int = 100
    low_power_interval_ms: int = 200
    low_power: bool = False

    # Producer
    confidence_threshold: float = 0.75
    driver: str = "ranked"

    # Catalog
    catalog_path: str = "catalog.json"

    # Audio sink
    sink: str = "null"
    remote_host: str = "127.0.0.1"
    remote_port: int = 8010
    volume: float = 1.0

    # State server (port 0 disables it)
    http_host: str = "127.0.0.1"
    http_port: int = 0

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def effective_interval_ms(self) -> int:
        """Tick interval honoring low-power mode."""
        return self.low_power_interval_ms if self.low_power else self.sampling_interval_ms

    @classmethod
    def load_config(cls) -> "JukeboxConfig":
        """
        Load configuration from environment variables.

        Returns:
            JukeboxConfig instance with loaded values

        Raises:
            ValueError: If configuration is invalid
        """
        # Load .env file first (if it exists)
        _load_env_file()

        config = cls(
            window_size=_get_int("JUKEBOX_WINDOW_SIZE", "8"),
            agreement_ratio=_get_float("JUKEBOX_AGREEMENT_RATIO", "0.6"),
            sampling_interval_ms=_get_int("JUKEBOX_SAMPLING_INTERVAL_MS", "100"),
            low_power_interval_ms=_get_int("JUKEBOX_LOW_POWER_INTERVAL_MS", "200"),
            low_power=_get_bool("JUKEBOX_LOW_POWER", "false"),
            confidence_threshold=_get_float("JUKEBOX_CONFIDENCE_THRESHOLD", "0.75"),
            driver=os.getenv("JUKEBOX_DRIVER", "ranked").strip().lower(),
            catalog_path=os.getenv("JUKEBOX_CATALOG", "catalog.json"),
            sink=os.getenv("JUKEBOX_SINK", "null").strip().lower(),
            remote_host=os.getenv("JUKEBOX_REMOTE_HOST", "127.0.0.1"),
            remote_port=_get_int("JUKEBOX_REMOTE_PORT", "8010"),
            volume=_get_float("JUKEBOX_VOLUME", "1.0"),
            http_host=os.getenv("JUKEBOX_HTTP_HOST", "127.0.0.1"),
            http_port=_get_int("JUKEBOX_HTTP_PORT", "0"),
            log_level=os.getenv("JUKEBOX_LOG_LEVEL", "INFO").strip().upper(),
            log_file=os.getenv("JUKEBOX_LOG_FILE") or None,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If any value is out of range
        """
        if self.window_size < 1:
            raise ValueError(f"Invalid JUKEBOX_WINDOW_SIZE: {self.window_size} (must be >= 1)")
        if not 0.0 < self.agreement_ratio <= 1.0:
            raise ValueError(f"Invalid JUKEBOX_AGREEMENT_RATIO: {self.agreement_ratio} (must be in (0, 1])")
        if self.sampling_interval_ms <= 0:
            raise ValueError(f"Invalid JUKEBOX_SAMPLING_INTERVAL_MS: {self.sampling_interval_ms} (must be positive)")
        if self.low_power_interval_ms <= 0:
            raise ValueError(f"Invalid JUKEBOX_LOW_POWER_INTERVAL_MS: {self.low_power_interval_ms} (must be positive)")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(f"Invalid JUKEBOX_CONFIDENCE_THRESHOLD: {self.confidence_threshold} (must be in [0, 1])")
        if self.driver not in DRIVERS:
            raise ValueError(f"Invalid JUKEBOX_DRIVER: {self.driver} (must be one of {', '.join(DRIVERS)})")
        if self.sink not in SINKS:
            raise ValueError(f"Invalid JUKEBOX_SINK: {self.sink} (must be one of {', '.join(SINKS)})")
        if not 1 <= self.remote_port <= 65535:
            raise ValueError(f"Invalid JUKEBOX_REMOTE_PORT: {self.remote_port} (must be 1-65535)")
        if not 0.0 <= self.volume <= 1.0:
            raise ValueError(f"Invalid JUKEBOX_VOLUME: {self.volume} (must be in [0, 1])")
        if not 0 <= self.http_port <= 65535:
            raise ValueError(f"Invalid JUKEBOX_HTTP_PORT: {self.http_port} (must be 0-65535)")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid JUKEBOX_LOG_LEVEL: {self.log_level} (must be one of {', '.join(LOG_LEVELS)})")
