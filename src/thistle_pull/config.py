from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field

from config.settings import (
    API_KEY_ENV, EVENTS_URL, MIN_API_KEY_LENGTH, PAGE_SIZE, PULL_OUT_FILE,
    STATUS, TAGS, TIMEOUT, TOWN, WINDOW_MONTHS,
)
from thistle_pull.errors import ConfigError

log = logging.getLogger("thistle_pull.config")


def format_iso_timestamp(dt: datetime) -> str:
    """ISO-8601 in UTC with whole seconds and a literal Z, e.g. 2026-10-19T09:30:00Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def date_window(now: Optional[datetime] = None, months: int = WINDOW_MONTHS) -> Tuple[datetime, datetime]:
    start = (now or datetime.now(timezone.utc)).replace(microsecond=0)
    return start, start + relativedelta(months=months)


class PullConfig(BaseModel):
    token: str = Field(min_length=1, repr=False)
    base_url: str = EVENTS_URL
    limit: int = Field(default=PAGE_SIZE, gt=0)
    status: str = STATUS
    town: str = TOWN
    tags: str = TAGS
    min_date: datetime
    max_date: datetime
    timeout: float = Field(default=TIMEOUT, gt=0)
    output_path: Path = Path(PULL_OUT_FILE)

    def query_params(self, page: int) -> Dict[str, str]:
        """Fixed filter set plus the page number; only `page` varies between calls."""
        return {
            "limit": str(self.limit),
            "status": self.status,
            "town": self.town,
            "tags": self.tags,
            "min_date": format_iso_timestamp(self.min_date),
            "max_date": format_iso_timestamp(self.max_date),
            "page": str(page),
        }


def read_token(environ: Mapping[str, str]) -> str:
    token = (environ.get(API_KEY_ENV) or "").strip()
    if not token:
        raise ConfigError(f"{API_KEY_ENV} is missing or empty (add your JWT to .env)")
    if len(token) < MIN_API_KEY_LENGTH:
        log.warning("%s looks too short; it should be a long JWT (starts with eyJ...)", API_KEY_ENV)
    return token


def load_config(environ: Optional[Mapping[str, str]] = None,
                now: Optional[datetime] = None,
                months: int = WINDOW_MONTHS,
                **overrides) -> PullConfig:
    """Build the run configuration once at startup.

    The window runs from `now` (default: current UTC time) to `months` calendar
    months later. Keyword overrides replace individual PullConfig fields.
    """
    token = read_token(os.environ if environ is None else environ)
    min_date, max_date = date_window(now, months)
    fields = {"token": token, "min_date": min_date, "max_date": max_date}
    fields.update({k: v for k, v in overrides.items() if v is not None})
    return PullConfig(**fields)
