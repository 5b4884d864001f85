import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from config.settings import API_KEY_ENV, EVENTS_URL
from thistle_pull.config import PullConfig, date_window, format_iso_timestamp, load_config, read_token
from thistle_pull.errors import ConfigError

from conftest import NOW, TOKEN


class TestTimestamps:
    def test_drops_fraction_and_appends_z(self):
        assert format_iso_timestamp(NOW) == "2026-10-19T09:30:15Z"

    def test_naive_is_treated_as_utc(self):
        assert format_iso_timestamp(datetime(2026, 6, 1)) == "2026-06-01T00:00:00Z"

    def test_other_zones_are_converted(self):
        plus_one = timezone(timedelta(hours=1))
        assert format_iso_timestamp(datetime(2026, 6, 1, 1, 0, 0, tzinfo=plus_one)) == "2026-06-01T00:00:00Z"

    def test_window_is_twelve_calendar_months(self):
        start, end = date_window(NOW)
        assert format_iso_timestamp(start) == "2026-10-19T09:30:15Z"
        assert format_iso_timestamp(end) == "2027-10-19T09:30:15Z"
        assert start.microsecond == 0

    def test_window_clamps_leap_day(self):
        _, end = date_window(datetime(2028, 2, 29, tzinfo=timezone.utc), months=12)
        assert end.date().isoformat() == "2029-02-28"


class TestToken:
    def test_trims_whitespace(self):
        assert read_token({API_KEY_ENV: f"  {TOKEN}\n"}) == TOKEN

    @pytest.mark.parametrize("environ", [{}, {API_KEY_ENV: ""}, {API_KEY_ENV: "   "}])
    def test_missing_is_fatal(self, environ):
        with pytest.raises(ConfigError):
            read_token(environ)

    def test_short_key_only_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert read_token({API_KEY_ENV: "abc123"}) == "abc123"
        assert "too short" in caplog.text


class TestPullConfig:
    def test_defaults(self, cfg):
        assert cfg.base_url == EVENTS_URL
        assert (cfg.limit, cfg.status, cfg.town, cfg.tags) == (20, "live", "London", "kids")
        assert cfg.timeout == 30

    def test_query_params(self, cfg):
        assert cfg.query_params(3) == {
            "limit": "20",
            "status": "live",
            "town": "London",
            "tags": "kids",
            "min_date": "2026-10-19T09:30:15Z",
            "max_date": "2027-10-19T09:30:15Z",
            "page": "3",
        }

    def test_only_page_changes(self, cfg):
        first, second = cfg.query_params(1), cfg.query_params(2)
        assert first.pop("page") != second.pop("page")
        assert first == second

    def test_overrides(self, tmp_path):
        c = load_config(environ={API_KEY_ENV: TOKEN}, now=NOW, months=6,
                        town="Edinburgh", tags=None, output_path=tmp_path / "x.json")
        assert c.town == "Edinburgh"
        assert c.tags == "kids"
        assert c.output_path == Path(tmp_path / "x.json")
        assert format_iso_timestamp(c.max_date) == "2027-04-19T09:30:15Z"

    def test_token_not_in_repr(self, cfg):
        assert TOKEN not in repr(cfg)

    def test_rejects_bad_limit(self):
        with pytest.raises(ValidationError):
            PullConfig(token=TOKEN, min_date=NOW, max_date=NOW, limit=0)
