"""Clients for the solar panels API and the ARPANSA UV feed."""

import threading
import time
from concurrent.futures import Future, TimeoutError as FuturesTimeout

import requests
from bs4 import BeautifulSoup

from .errors import FetchError, FetchTimeout, PayloadError
from .models import CurrentSnapshot, SeriesSet

UV_LEVELS_XML = "https://uvdata.arpansa.gov.au/xml/uvvalues.xml"
PERTH_NAME = "per"


def run_in_daemon_thread(fn, *args):
    """Run fn(*args) on a daemon thread and return a Future for its result.

    Unlike ThreadPoolExecutor workers, daemon threads are not joined at
    interpreter exit.
    """
    future = Future()

    def run():
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args))
        except BaseException as e:
            future.set_exception(e)

    threading.Thread(target=run, name=f"solarpanels-{fn.__name__}", daemon=True).start()
    return future


class SolarPanelsClient:
    """Client for the solar panels HTTP API.

    This class handles:
    - Fetching today's and yesterday's generation history
    - Fetching the current production snapshot
    - Loading both at once under a deadline
    """

    def __init__(self, api_base_url, timeout=10.0, debug=False):
        """Initialize the client.

        Args:
            api_base_url: Base URL of the API, e.g. https://example.com/api
            timeout: Per-request timeout in seconds
            debug: Enable debug logging
        """
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self.debug_enabled = debug
        self.requests_session = self.new_session()

    def debug(self, msg):
        """Log debug message if debug mode is enabled."""
        if self.debug_enabled:
            print(msg)

    def new_session(self):
        """Create a session with the API's default headers."""
        session = requests.Session()
        session.headers.update({"Accept": "application/json"})
        return session

    def get_json(self, path, session=None):
        """GET an API path and decode the JSON body.

        Args:
            path: Path below the base URL, e.g. '/history'
            session: Session to use, defaults to the client's own

        Returns:
            Decoded JSON body

        Raises:
            FetchError: If the request fails, returns a non-200 status or the
                body is not JSON
        """
        session = session if session is not None else self.requests_session
        url = f"{self.api_base_url}{path}"
        self.debug(f"get_json: GET {url}")
        try:
            response = session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"GET {url} failed: {e}") from e

        if response.status_code != 200:
            self.debug(response.text)
            raise FetchError(f"GET {url} returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"GET {url} did not return JSON: {e}") from e

    def get_history(self, session=None):
        """Get today's and yesterday's generation samples.

        Returns:
            SeriesSet: Parsed history
        """
        series_set = SeriesSet.from_json(self.get_json("/history", session))
        self.debug(f"get_history: {len(series_set.today)} today, {len(series_set.yesterday)} yesterday")
        return series_set

    def get_current(self, session=None):
        """Get the current production snapshot.

        Returns:
            CurrentSnapshot: Parsed snapshot
        """
        return CurrentSnapshot.from_json(self.get_json("/current", session))

    def load(self, deadline=30.0):
        """Fetch history and the current snapshot concurrently.

        Both requests must finish within the deadline. Nothing is returned
        unless both succeed. Each fetch gets its own session and runs on a
        daemon thread. Both sessions are closed once the deadline passes, and
        a stalled request never keeps the process alive.

        Args:
            deadline: Seconds to wait for both requests

        Returns:
            tuple: (SeriesSet, CurrentSnapshot)

        Raises:
            FetchTimeout: If the deadline passes first
            FetchError: If either request fails
            PayloadError: If either response has the wrong shape
        """
        expires = time.monotonic() + deadline
        history_session = self.new_session()
        current_session = self.new_session()
        history_future = run_in_daemon_thread(self.get_history, history_session)
        current_future = run_in_daemon_thread(self.get_current, current_session)
        try:
            series_set = history_future.result(timeout=deadline)
            snapshot = current_future.result(timeout=max(0.0, expires - time.monotonic()))
        except FuturesTimeout as e:
            raise FetchTimeout(f"history/current not loaded within {deadline}s") from e
        finally:
            history_session.close()
            current_session.close()

        return series_set, snapshot

    def close(self):
        """Close the client session."""
        self.requests_session.close()


class UVClient:
    """Client for the ARPANSA real-time UV index feed."""

    def __init__(self, timeout=10.0, debug=False):
        self.timeout = timeout
        self.debug_enabled = debug
        self.requests_session = requests.Session()

    def debug(self, msg):
        """Log debug message if debug mode is enabled."""
        if self.debug_enabled:
            print(msg)

    def get_uv_level(self, location=PERTH_NAME):
        """Get the current UV index for a location.

        Args:
            location: ARPANSA location name, e.g. 'per' for Perth

        Returns:
            float: Current UV index

        Raises:
            FetchError: If the feed cannot be fetched
            PayloadError: If the location is not in the feed
        """
        try:
            uv_levels = self.requests_session.get(UV_LEVELS_XML, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"GET {UV_LEVELS_XML} failed: {e}") from e

        if uv_levels.status_code != 200:
            self.debug(uv_levels.text)
            raise FetchError(f"GET {UV_LEVELS_XML} returned HTTP {uv_levels.status_code}")

        return parse_uv_level(uv_levels.text, location)

    def close(self):
        """Close the client session."""
        self.requests_session.close()


def parse_uv_level(xml, location):
    """Find a location's UV index in the ARPANSA uvvalues.xml document.

    Args:
        xml: Document text
        location: Location name to look for

    Returns:
        float: UV index

    Raises:
        PayloadError: If the location is missing or its index is not numeric
    """
    soup = BeautifulSoup(xml, "html.parser")
    for entry in soup.find_all("location"):
        name = entry.find("name")
        if name is None or name.get_text(strip=True) != location:
            continue
        index = entry.find("index")
        if index is None:
            raise PayloadError(f"location '{location}' has no UV index")
        try:
            return float(index.get_text(strip=True))
        except ValueError as e:
            raise PayloadError(f"bad UV index for '{location}': {e}") from e

    raise PayloadError(f"location '{location}' not found in UV feed")
