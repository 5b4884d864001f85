"""Sequential pagination over the DataThistle events endpoint.

One request in flight at a time. Pages are appended to a single accumulator
in the order received; the loop stops on an empty or short page, on the page
limit or on the first failed request. Failures are never retried.
"""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from config.settings import REQUEST_DELAY_SECONDS
from thistle_pull.client import DataThistleClient, build_url
from thistle_pull.config import PullConfig
from thistle_pull.errors import RateLimitedError, RequestFailedError, UnauthorizedError

log = logging.getLogger("thistle_pull.pager")


class StopReason(str, enum.Enum):
    END_OF_RESULTS = "end_of_results"
    PAGE_LIMIT = "page_limit"
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    ERROR = "error"


@dataclass
class PullResult:
    events: List[Dict[str, Any]] = field(default_factory=list)
    requests: int = 0
    pages: int = 0
    stop_reason: Optional[StopReason] = None
    error: Optional[RequestFailedError] = None

    @property
    def ok(self) -> bool:
        return self.stop_reason in (StopReason.END_OF_RESULTS, StopReason.PAGE_LIMIT)


def fetch_pages(
    client: DataThistleClient,
    cfg: PullConfig,
    max_pages: Optional[int] = None,
    delay: float = REQUEST_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> PullResult:
    result = PullResult()
    page = 1

    while True:
        if max_pages is not None and result.pages >= max_pages:
            result.stop_reason = StopReason.PAGE_LIMIT
            break

        url = build_url(cfg.base_url, cfg.query_params(page))
        log.info("Request #%d -> page %d (%s)", result.requests + 1, page, url)
        result.requests += 1

        try:
            batch = client.get_events(url)
        except RateLimitedError as e:
            log.error("Rate limited (429). Stopping early.")
            result.stop_reason, result.error = StopReason.RATE_LIMITED, e
            break
        except UnauthorizedError as e:
            log.error("Unauthorized - check your API key.")
            result.stop_reason, result.error = StopReason.UNAUTHORIZED, e
            break
        except RequestFailedError as e:
            log.error("Request failed: %s", e)
            result.stop_reason, result.error = StopReason.ERROR, e
            break

        if not batch.events:
            log.info("Empty page received -> reached the end of results.")
            result.stop_reason = StopReason.END_OF_RESULTS
            break

        result.events.extend(batch.events)
        result.pages += 1
        page += 1
        log.info("   %d events (total so far: %d)", len(batch), len(result.events))
        log.info("   Rate-limit remaining: %s", batch.rate_limit_remaining or "unknown")

        if len(batch) < cfg.limit:
            log.info("Short page (%d < %d) -> last page of results.", len(batch), cfg.limit)
            result.stop_reason = StopReason.END_OF_RESULTS
            break

        more_allowed = max_pages is None or result.pages < max_pages
        if len(batch) == cfg.limit and more_allowed and delay > 0:
            log.info("Waiting %g seconds before next request...", delay)
            sleep(delay)

    log.info("Finished (%s) after %d requests", result.stop_reason.value, result.requests)
    return result
