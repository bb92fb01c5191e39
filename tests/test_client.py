import os
import subprocess
import sys
import threading
import time
from pathlib import Path
from unittest import mock

import pytest
import requests

from solarpanels.client import SolarPanelsClient, UVClient, parse_uv_level
from solarpanels.errors import FetchError, FetchTimeout, PayloadError

ROOT = Path(__file__).resolve().parents[1]

UV_XML = """<?xml version="1.0"?>
<stations>
  <location id="Sydney">
    <name>syd</name>
    <index>2.1</index>
    <time>12:00 PM</time>
    <status>ok</status>
  </location>
  <location id="Perth">
    <name>per</name>
    <index>7.4</index>
    <time>12:00 PM</time>
    <status>ok</status>
  </location>
</stations>
"""


def response(status_code=200, json_body=None, text=""):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(json_body, Exception):
        resp.json.side_effect = json_body
    else:
        resp.json.return_value = json_body
    return resp


def make_client(routes=None, base="https://solar.example/api/", get=None):
    """Client whose sessions are mocks; every session it creates is kept in client.sessions."""
    client = SolarPanelsClient(base, timeout=1.0)
    client.sessions = []

    def route(url, timeout):
        return routes[url]

    def new_session():
        session = mock.Mock()
        session.get.side_effect = get or route
        client.sessions.append(session)
        return session

    client.new_session = new_session
    client.requests_session = new_session()
    return client


def test_get_history(history_json):
    client = make_client({"https://solar.example/api/history": response(json_body=history_json)})
    series_set = client.get_history()
    assert len(series_set.today) == 2
    assert series_set.yesterday[0].cumulative_kwh == 9.0
    client.requests_session.get.assert_called_once_with("https://solar.example/api/history", timeout=1.0)


def test_get_current(current_json):
    client = make_client({"https://solar.example/api/current": response(json_body=current_json)})
    assert client.get_current().today_production_kwh == 3.4


def test_non_200_raises_fetch_error():
    client = make_client({"https://solar.example/api/current": response(status_code=502, text="bad gateway")})
    with pytest.raises(FetchError):
        client.get_current()


def test_bad_json_raises_fetch_error():
    client = make_client({"https://solar.example/api/history": response(json_body=ValueError("no json"))})
    with pytest.raises(FetchError):
        client.get_history()


def test_connection_error_raises_fetch_error():
    client = SolarPanelsClient("https://solar.example/api")
    client.requests_session = mock.Mock()
    client.requests_session.get.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(FetchError):
        client.get_history()


def test_load_returns_both(history_json, current_json):
    client = make_client({
        "https://solar.example/api/history": response(json_body=history_json),
        "https://solar.example/api/current": response(json_body=current_json),
    })
    series_set, snapshot = client.load(deadline=5.0)
    assert len(series_set.today) == 2
    assert snapshot.yesterday_production_kwh == 14.2


def test_load_propagates_failure(history_json):
    client = make_client({
        "https://solar.example/api/history": response(json_body=history_json),
        "https://solar.example/api/current": response(json_body={"currentProductionWh": 1}),
    })
    with pytest.raises(PayloadError):
        client.load(deadline=5.0)


def test_load_uses_own_session_per_fetch(history_json, current_json):
    client = make_client({
        "https://solar.example/api/history": response(json_body=history_json),
        "https://solar.example/api/current": response(json_body=current_json),
    })
    client.load(deadline=5.0)
    own, first, second = client.sessions
    own.get.assert_not_called()
    assert first.get.call_count == 1
    assert second.get.call_count == 1
    first.close.assert_called_once_with()
    second.close.assert_called_once_with()


def test_load_times_out(current_json):
    release = threading.Event()

    def get(url, timeout):
        if url.endswith("/history"):
            release.wait(5.0)
        return response(json_body=current_json if url.endswith("/current") else {})

    client = make_client(get=get)
    try:
        with pytest.raises(FetchTimeout):
            client.load(deadline=0.05)
        for session in client.sessions[1:]:
            session.close.assert_called_once_with()
    finally:
        release.set()


STALLED_LOAD = """
import time
from unittest import mock

from solarpanels.client import SolarPanelsClient
from solarpanels.errors import FetchTimeout


def stalled_get(url, timeout):
    time.sleep(60)


client = SolarPanelsClient("https://solar.example/api")
session = mock.Mock()
session.get.side_effect = stalled_get
client.new_session = lambda: session
try:
    client.load(deadline=0.2)
except FetchTimeout:
    print("timed out")
"""


def test_stalled_load_does_not_keep_process_alive():
    env = dict(os.environ, PYTHONPATH=str(ROOT))
    started = time.monotonic()
    result = subprocess.run(
        [sys.executable, "-c", STALLED_LOAD],
        cwd=ROOT, env=env, capture_output=True, text=True, timeout=30,
    )
    elapsed = time.monotonic() - started
    assert result.returncode == 0, result.stderr
    assert result.stdout.strip() == "timed out"
    assert elapsed < 20


def test_parse_uv_level():
    assert parse_uv_level(UV_XML, "per") == 7.4
    assert parse_uv_level(UV_XML, "syd") == 2.1


def test_parse_uv_level_missing_location():
    with pytest.raises(PayloadError):
        parse_uv_level(UV_XML, "mel")


def test_uv_client_get_uv_level():
    client = UVClient()
    client.requests_session = mock.Mock()
    client.requests_session.get.return_value = response(text=UV_XML)
    assert client.get_uv_level() == 7.4


def test_uv_client_http_error():
    client = UVClient()
    client.requests_session = mock.Mock()
    client.requests_session.get.return_value = response(status_code=500)
    with pytest.raises(FetchError):
        client.get_uv_level("per")
