"""
Remote Player Sink for Marker Jukebox.

Sends transport commands to an external player's HTTP control API
(e.g. a browser page or a media daemon that owns the speaker).
"""

import logging
from typing import Any, Dict, Optional

import httpx

from jukebox.playback.track import Track
from .base_sink import AudioSink, PlaybackRejected

logger = logging.getLogger(__name__)


class RemotePlayerSink(AudioSink):
    """
    Client for a remote player's HTTP control API.

    Each command is POSTed as JSON to /player/<command>.

    This client is stateless and transport-only. It makes no decisions about
    what to play. A failed play() raises PlaybackRejected so the session can
    stay silent and retry later; every other failed command is logged and
    dropped.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8010,
                 client: Optional[httpx.Client] = None, timeout: float = 2.0):
        """
        Initialize remote player sink.

        Args:
            host: Player HTTP server host (default: 127.0.0.1)
            port: Player HTTP server port (default: 8010)
            client: Optional preconfigured httpx.Client
            timeout: Request timeout in seconds
        """
        self.base_url = f"http://{host}:{port}"
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

        # Suppress httpx INFO level logging (one line per command is noise)
        logging.getLogger("httpx").setLevel(logging.WARNING)

        logger.info(f"RemotePlayerSink initialized (url={self.base_url})")

    def _post(self, command: str, payload: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = f"{self.base_url}/player/{command}"
        body = {"command": command}
        if payload:
            body.update(payload)
        response = self._client.post(url, json=body, timeout=self.timeout)
        response.raise_for_status()
        return response

    def _send(self, command: str, payload: Optional[Dict[str, Any]] = None) -> bool:
        try:
            self._post(command, payload)
            return True
        except httpx.HTTPError as e:
            logger.warning(f"[SINK] Remote player rejected {command}: {e}")
            return False

    def load(self, track: Track) -> None:
        self._send("load", {"source": track.source, "title": track.title, "artist": track.artist})

    def play(self) -> None:
        try:
            self._post("play")
        except httpx.HTTPError as e:
            raise PlaybackRejected(f"Remote player refused play: {e}") from e

    def pause(self) -> None:
        self._send("pause")

    def stop(self) -> None:
        self._send("stop")

    def seek(self, position_sec: float) -> None:
        self._send("seek", {"position_sec": position_sec})

    def set_volume(self, volume: float) -> None:
        self._send("volume", {"volume": volume})

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
