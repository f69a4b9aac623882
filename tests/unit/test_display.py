"""Tests for the one-shot display server."""

import threading
import time

import pytest
import requests

from pyimportgraph.display import DisplaySession, SessionState, display_in_browser, route_for
from pyimportgraph.graph import RenderedImage

IMAGE = RenderedImage(data=b"<svg xmlns='http://www.w3.org/2000/svg'/>", content_type="image/svg+xml", format="svg")
GRACE = 0.2
TOLERANCE = 2.0


@pytest.fixture
def session():
    """Started session on an ephemeral port, closed after the test."""
    display = DisplaySession(IMAGE, route=route_for("svg"), grace_delay=GRACE)
    display.start()
    yield display
    display.close()


def wait_for(predicate, timeout=TOLERANCE):
    """Poll until predicate holds; the handler finishes just after the client reads."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.01)
    return True


def fetch_in_background(url):
    """Browser stand-in: request the URL from another thread."""
    thread = threading.Thread(target=requests.get, args=(url,), kwargs={"timeout": 5}, daemon=True)
    thread.start()
    return True


class TestRoute:
    def test_route_for(self):
        assert route_for("svg") == "/index.svg"
        assert route_for("png") == "/index.png"


class TestDisplaySession:
    """Test the session lifecycle."""

    def test_initial_state(self):
        display = DisplaySession(IMAGE)
        assert display.state is SessionState.ARMED
        assert display.server is None

    def test_start_binds_ephemeral_port(self, session):
        assert session.state is SessionState.ARMED
        assert session.actual_port > 0
        assert session.url == f"http://127.0.0.1:{session.actual_port}/index.svg"

    def test_start_twice_rejected(self, session):
        with pytest.raises(RuntimeError, match="already started"):
            session.start()

    def test_serves_image_then_stops(self, session):
        response = requests.get(session.url, timeout=5)
        served_at = time.monotonic()

        assert response.status_code == 200
        assert response.content == IMAGE.data
        assert response.headers["Content-Type"] == "image/svg+xml"
        assert wait_for(lambda: session.state is SessionState.DRAINING)

        assert session.wait(timeout=GRACE + TOLERANCE) is True
        elapsed = time.monotonic() - served_at

        assert session.state is SessionState.STOPPED
        assert GRACE * 0.5 <= elapsed <= GRACE + TOLERANCE

    def test_listener_closed_after_stop(self, session):
        requests.get(session.url, timeout=5)
        session.wait(timeout=GRACE + TOLERANCE)

        with pytest.raises(requests.ConnectionError):
            requests.get(session.url, timeout=1)

    def test_unknown_route_not_found(self, session):
        response = requests.get(session.url.replace("/index.svg", "/other"), timeout=5)

        assert response.status_code == 404
        assert session.state is SessionState.ARMED

    def test_post_not_allowed(self, session):
        response = requests.post(session.url, timeout=5)

        assert response.status_code == 405
        assert session.state is SessionState.ARMED

    def test_repeated_requests_schedule_single_stop(self, session):
        first = requests.get(session.url, timeout=5)
        assert wait_for(lambda: session._stop_timer is not None)
        timer = session._stop_timer
        second = requests.get(session.url, timeout=5)

        assert first.content == second.content == IMAGE.data
        assert session._stop_timer is timer
        assert session.wait(timeout=GRACE + TOLERANCE) is True

    def test_close_is_idempotent(self, session):
        session.close()
        session.close()
        assert session.state is SessionState.STOPPED

    def test_close_without_start(self):
        display = DisplaySession(IMAGE)
        display.close()
        assert display.state is SessionState.STOPPED


class TestDisplayInBrowser:
    """Test the browser hand-off helper."""

    def test_opens_browser_and_stops_after_view(self):
        display = DisplaySession(IMAGE, grace_delay=GRACE)
        opened = []

        def opener(url):
            opened.append(url)
            return fetch_in_background(url)

        assert display_in_browser(display, opener=opener, timeout=10) is True
        assert opened == [display.url]
        assert display.state is SessionState.STOPPED

    def test_announces_url_without_browser(self):
        display = DisplaySession(IMAGE, grace_delay=GRACE)
        announced = []

        def announce(url):
            announced.append(url)
            fetch_in_background(url)

        def opener(url):
            raise AssertionError("browser must not be opened")

        assert display_in_browser(display, opener=opener, open_browser=False, announce=announce, timeout=10) is True
        assert announced == [display.url]

    def test_announces_url_when_browser_fails(self):
        display = DisplaySession(IMAGE, grace_delay=GRACE)
        announced = []

        display_in_browser(display, opener=lambda url: False, announce=announced.append, timeout=0.1)

        assert announced == [display.url]

    def test_watchdog_stops_unviewed_session(self):
        display = DisplaySession(IMAGE, grace_delay=GRACE)

        assert display_in_browser(display, opener=lambda url: True, timeout=0.2) is False
        assert display.state is SessionState.STOPPED
