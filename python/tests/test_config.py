"""Tests for settings loading and fetch limit validation."""

import pytest
from pydantic import ValidationError

from pubmanifest.config import (
    MIN_FETCH_BYTES_FLOOR,
    Environment,
    Settings,
    clear_settings_cache,
    get_settings,
)


def _make_settings(**overrides) -> Settings:
    """Build a Settings instance with test defaults + overrides."""
    defaults = {"PUBMANIFEST_ENV": "test"}
    defaults.update(overrides)
    return Settings(**defaults)


class TestFetchSettingsDefaultsAndValidation:
    """Fetch settings defaults and their validation."""

    def test_defaults(self):
        s = _make_settings()
        assert s.pubmanifest_env == Environment.TEST
        assert s.fetch_timeout_s == 10.0
        assert s.max_fetch_bytes == 5 * 1024 * 1024
        assert s.follow_redirects is True
        assert s.min_fetch_port == 1024

    def test_overrides_accepted(self):
        s = _make_settings(
            PUBMANIFEST_FETCH_TIMEOUT_S=2.5,
            PUBMANIFEST_MAX_FETCH_BYTES=MIN_FETCH_BYTES_FLOOR,
            PUBMANIFEST_USER_AGENT="reader/2",
            PUBMANIFEST_FOLLOW_REDIRECTS=False,
            PUBMANIFEST_MIN_FETCH_PORT=0,
        )
        assert s.fetch_timeout_s == 2.5
        assert s.max_fetch_bytes == MIN_FETCH_BYTES_FLOOR
        assert s.user_agent == "reader/2"
        assert s.follow_redirects is False
        assert s.min_fetch_port == 0

    def test_zero_timeout_rejected(self):
        with pytest.raises(ValidationError, match="PUBMANIFEST_FETCH_TIMEOUT_S"):
            _make_settings(PUBMANIFEST_FETCH_TIMEOUT_S=0)

    def test_tiny_body_limit_rejected(self):
        with pytest.raises(ValidationError, match="PUBMANIFEST_MAX_FETCH_BYTES"):
            _make_settings(PUBMANIFEST_MAX_FETCH_BYTES=MIN_FETCH_BYTES_FLOOR - 1)

    def test_port_out_of_range_rejected(self):
        with pytest.raises(ValidationError, match="PUBMANIFEST_MIN_FETCH_PORT"):
            _make_settings(PUBMANIFEST_MIN_FETCH_PORT=70000)

    def test_unknown_environment_rejected(self):
        with pytest.raises(ValidationError):
            _make_settings(PUBMANIFEST_ENV="staging")


class TestGetSettings:
    """get_settings reads the environment once and caches."""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PUBMANIFEST_FETCH_TIMEOUT_S", "3")
        clear_settings_cache()
        assert get_settings().fetch_timeout_s == 3.0

    def test_cached_until_cleared(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("PUBMANIFEST_USER_AGENT", "other/1")
        assert get_settings() is first
        clear_settings_cache()
        assert get_settings().user_agent == "other/1"
