from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from config.settings import PING_TIMEOUT, PING_URL, TIMEOUT, USER_AGENT
from thistle_pull.errors import RateLimitedError, RequestFailedError, UnauthorizedError

log = logging.getLogger("thistle_pull.client")

RATE_LIMIT_HEADER = "X-RateLimit-Remaining"


@dataclass
class Page:
    events: List[Dict[str, Any]] = field(default_factory=list)
    rate_limit_remaining: Optional[str] = None

    def __len__(self) -> int:
        return len(self.events)


def build_url(base_url: str, params: Mapping[str, str]) -> str:
    return f"{base_url}?{urlencode(params)}" if params else base_url


def classify(resp: requests.Response) -> RequestFailedError:
    """Map a non-2xx response onto the error taxonomy."""
    status = resp.status_code
    body = resp.text
    if status == 429:
        return RateLimitedError("Rate limited (429)", status=status, body=body)
    if status == 401:
        return UnauthorizedError("Unauthorized (401), check your API key", status=status, body=body)
    return RequestFailedError(f"HTTP {status} {resp.reason or ''}".strip(), status=status, body=body)


class DataThistleClient:
    def __init__(self, token: str, timeout: float = TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    def _get(self, url: str, timeout: float) -> requests.Response:
        resp = self.session.get(url, headers=self.headers, timeout=timeout)
        if not resp.ok:
            raise classify(resp)
        return resp

    def get_events(self, url: str) -> Page:
        """One GET against an events URL. Every failure surfaces as a RequestFailedError."""
        try:
            resp = self._get(url, self.timeout)
            # 204 / zero-length body means no more events
            data = resp.json() if resp.content.strip() else None
        except RequestFailedError:
            raise
        except requests.RequestException as e:
            # JSONDecodeError is a RequestException too
            raise RequestFailedError(str(e)) from e

        if data is None:
            data = []
        if not isinstance(data, list):
            raise RequestFailedError(f"Expected a JSON array of events, got {type(data).__name__}")
        return Page(events=data, rate_limit_remaining=resp.headers.get(RATE_LIMIT_HEADER))

    @retry(retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
           stop=stop_after_attempt(3), wait=wait_fixed(2), reraise=True)
    def _ping(self) -> requests.Response:
        return self._get(PING_URL, PING_TIMEOUT)

    def ping(self) -> bool:
        """Check authentication against /ping. Raises on failure."""
        try:
            self._ping()
        except requests.RequestException as e:
            raise RequestFailedError(str(e)) from e
        log.info("/ping OK, authenticated")
        return True
