"""
HTTP State Server for Marker Jukebox.

Read-only JSON endpoints for UI and debug surfaces:

- GET /state        engine state (combo key, owner, transport, status)
- GET /now_playing  loaded track snapshot, or null

The server only reads. Write methods on these paths are rejected with 405.
"""

import json
import logging
import socketserver
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Optional

logger = logging.getLogger(__name__)

READ_ONLY_PATHS = ("/state", "/now_playing")


class StateRequestHandler(BaseHTTPRequestHandler):
    """
    HTTP request handler for the state endpoints.

    The engine is reached through the server instance, so two servers in
    one process never share state.
    """

    def do_GET(self):
        """Handle GET requests."""
        engine = getattr(self.server, "engine", None)
        if engine is None:
            self.send_error(503, "Service Unavailable")
            return

        if self.path == "/state":
            self._send_json(engine.get_state_dict())
        elif self.path == "/now_playing":
            state = engine.now_playing.get_state()
            self._send_json(state.to_dict() if state is not None else None)
        else:
            self.send_error(404, "Not Found")

    def _reject_write(self):
        if self.path in READ_ONLY_PATHS:
            self.send_error(405, "Method Not Allowed")
        else:
            self.send_error(404, "Not Found")

    do_POST = _reject_write
    do_PUT = _reject_write
    do_PATCH = _reject_write
    do_DELETE = _reject_write

    def _send_json(self, data) -> None:
        body = json.dumps(data).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Cache-Control", "no-cache")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        try:
            self.wfile.write(body)
        except (BrokenPipeError, ConnectionResetError) as e:
            logger.debug(f"[HTTP] Client went away: {e}")

    def log_message(self, format, *args):
        # Route access logs through logging instead of stderr
        logger.debug(f"[HTTP] {self.address_string()} - {format % args}")


class ThreadingStateServer(socketserver.ThreadingMixIn, HTTPServer):
    """HTTP server handling each request on its own thread."""
    daemon_threads = True
    allow_reuse_address = True


class StateServer:
    """
    Runs the state endpoints on a background thread.
    """

    def __init__(self, engine, host: str = "127.0.0.1", port: int = 0):
        """
        Initialize state server.

        Args:
            engine: JukeboxEngine to expose
            host: Bind address
            port: Bind port (0 picks a free port)
        """
        self._server = ThreadingStateServer((host, port), StateRequestHandler)
        self._server.engine = engine
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self._server.server_address[1]

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="JukeboxStateServer",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"[HTTP] State server listening on {self.url}")

    def stop(self) -> None:
        if self._thread is None:
            self._server.server_close()
            return
        self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout=2.0)
        self._thread = None
        logger.info("[HTTP] State server stopped")
