import json
from datetime import datetime, timezone

import pytest
import requests

from config.settings import API_KEY_ENV
from thistle_pull.client import DataThistleClient
from thistle_pull.config import load_config

TOKEN = "eyJ" + "x" * 80
NOW = datetime(2026, 10, 19, 9, 30, 15, 123456, tzinfo=timezone.utc)

REASONS = {200: "OK", 401: "Unauthorized", 429: "Too Many Requests", 500: "Internal Server Error"}


def make_response(status=200, payload=None, headers=None, text=None, url="https://api.datathistle.com/v1/events"):
    resp = requests.Response()
    resp.status_code = status
    resp.reason = REASONS.get(status, "")
    resp.url = url
    resp.encoding = "utf-8"
    body = text if text is not None else json.dumps(payload)
    resp._content = body.encode("utf-8")
    resp.headers.update(headers or {})
    return resp


def make_events(start, count):
    return [{"event_id": f"ev-{i}", "name": f"Event {i}"} for i in range(start, start + count)]


class FakeSession:
    """Stands in for requests.Session: hands out queued responses (or raises queued exceptions)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        if not self.responses:
            raise AssertionError(f"unexpected request to {url}")
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def cfg(tmp_path):
    return load_config(environ={API_KEY_ENV: TOKEN}, now=NOW, output_path=tmp_path / "out.json")


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def client_for():
    def build(*responses, timeout=30):
        session = FakeSession(*responses)
        return DataThistleClient(TOKEN, timeout=timeout, session=session), session
    return build
