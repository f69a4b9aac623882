"""One-shot local HTTP server that shows a rendered graph in the browser.

The session serves a single image route. The first request moves it from
ARMED to SERVING; once the image is written the session is DRAINING and a
timer sends the stop signal after a short grace delay, letting the response
flush before the listener is torn down. The owning control loop then stops
the server (STOPPED). If the route is never requested the session keeps
running until it is stopped externally or an optional watchdog expires.
"""

import logging
import socket
import threading
import webbrowser
from collections.abc import Callable
from enum import Enum
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlparse

from pyimportgraph.graph.models import RenderedImage

logger = logging.getLogger(__name__)

DEFAULT_GRACE_DELAY = 1.0


class SessionState(str, Enum):
    """Display session lifecycle, strictly in this order."""
    ARMED = "armed"
    SERVING = "serving"
    DRAINING = "draining"
    STOPPED = "stopped"


def route_for(image_format: str) -> str:
    """Route the image is served on, e.g. ``/index.svg``."""
    return f"/index.{image_format}"


class ImageRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler serving the session image."""

    def __init__(self, request, client_address, server, session):
        self.session = session
        super().__init__(request, client_address, server)

    def log_message(self, format, *args):
        """Override to use the module logger instead of stderr."""
        logger.info(f"{self.address_string()} - {format % args}")

    def do_GET(self):
        """Handle GET requests."""
        path = urlparse(self.path).path
        if path != self.session.route:
            self._send_error(404, f"Unknown route: {path}")
            return

        image = self.session.image
        self.session.mark_serving()
        try:
            self.send_response(200)
            self.send_header("Content-Type", image.content_type)
            self.send_header("Content-Length", str(len(image.data)))
            self.send_header("Cache-Control", "no-store")
            self.end_headers()
            self.wfile.write(image.data)
            self.wfile.flush()
        except (ConnectionAbortedError, BrokenPipeError, ConnectionResetError):
            # Client went away before the image was delivered; keep waiting for a retry
            logger.debug("Client closed connection before the image was sent")
            return

        self.session.schedule_stop()

    def do_POST(self):
        """Handle POST requests - the session is read-only."""
        self._send_error(405, "Method not allowed")

    def do_PUT(self):
        """Handle PUT requests - the session is read-only."""
        self._send_error(405, "Method not allowed")

    def do_DELETE(self):
        """Handle DELETE requests - the session is read-only."""
        self._send_error(405, "Method not allowed")

    def _send_error(self, status_code: int, message: str):
        try:
            self.send_error(status_code, message)
        except (ConnectionAbortedError, BrokenPipeError, ConnectionResetError):
            pass


class _IPv6HTTPServer(ThreadingHTTPServer):
    address_family = socket.AF_INET6


class DisplaySession:
    """Single-image HTTP session that stops itself after the first view."""

    def __init__(
        self,
        image: RenderedImage,
        route: str = "/index.svg",
        bind: str = "127.0.0.1",
        port: int = 0,
        grace_delay: float = DEFAULT_GRACE_DELAY,
    ):
        self.image = image
        self.route = route
        self.bind = bind
        self.port = port
        self.grace_delay = grace_delay
        self.server = None
        self.server_thread = None
        self.actual_port = None
        self._state = SessionState.ARMED
        self._lock = threading.Lock()
        self._stop_signal = threading.Event()
        self._stop_timer = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def url(self) -> str:
        host = f"[{self.bind}]" if ":" in self.bind else self.bind
        return f"http://{host}:{self.actual_port}{self.route}"

    def start(self) -> str:
        """Start listening and serving in a background thread."""
        if self.server is not None:
            raise RuntimeError("Display session already started")

        def handler_factory(request, client_address, server):
            return ImageRequestHandler(request, client_address, server, self)

        server_class = _IPv6HTTPServer if ":" in self.bind else ThreadingHTTPServer
        self.server = server_class((self.bind, self.port), handler_factory)
        self.actual_port = self.server.server_address[1]

        self.server_thread = threading.Thread(
            target=self.server.serve_forever,
            name="pyimportgraph-display",
            daemon=True,
        )
        self.server_thread.start()
        logger.info(f"Serving graph at {self.url}")
        return self.url

    def mark_serving(self) -> None:
        """Record that the image route has been requested."""
        with self._lock:
            if self._state is SessionState.ARMED:
                self._state = SessionState.SERVING

    def schedule_stop(self) -> None:
        """Send the stop signal after the grace delay, at most once per session."""
        with self._lock:
            if self._stop_timer is not None or self._state is SessionState.STOPPED:
                return
            self._state = SessionState.DRAINING
            self._stop_timer = threading.Timer(self.grace_delay, self.request_stop)
            self._stop_timer.daemon = True
            self._stop_timer.start()
        logger.debug(f"Image delivered; stopping in {self.grace_delay:.1f}s")

    def request_stop(self) -> None:
        """Signal the control loop to shut the server down."""
        self._stop_signal.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the stop signal arrives, then stop the server.

        Returns:
            True if stopped by the signal, False if the timeout expired first
        """
        stopped = self._stop_signal.wait(timeout)
        self.close()
        return stopped

    def close(self) -> None:
        """Stop the listener. Safe to call more than once."""
        with self._lock:
            if self._state is SessionState.STOPPED:
                return
            self._state = SessionState.STOPPED
            if self._stop_timer is not None:
                self._stop_timer.cancel()

        if self.server is not None:
            self.server.shutdown()
            self.server.server_close()
            if self.server_thread:
                self.server_thread.join(timeout=5.0)
        logger.info("Display server stopped")


def display_in_browser(
    session: DisplaySession,
    opener: Callable[[str], bool] = webbrowser.open,
    open_browser: bool = True,
    timeout: float | None = None,
    announce: Callable[[str], None] | None = None,
) -> bool:
    """Serve the session, open the browser on it and wait until it stops.

    Args:
        session: Session holding the image to show
        opener: Opens a URL in the user's browser
        open_browser: Whether to call opener at all
        timeout: Optional watchdog; None waits for the first view forever
        announce: Called with the URL when no browser was opened

    Returns:
        True if the image was served, False if the watchdog stopped the session
    """
    url = session.start()
    try:
        opened = False
        if open_browser:
            try:
                opened = opener(url)
            except webbrowser.Error as e:
                logger.warning(f"Could not open browser: {e}")
            if not opened:
                logger.warning(f"Browser did not open; waiting for a request to {url}")
        if not opened and announce is not None:
            announce(url)

        stopped = session.wait(timeout)
        if not stopped:
            logger.warning(f"No request for {url} within {timeout:.1f}s; shutting down")
        return stopped
    finally:
        session.close()
