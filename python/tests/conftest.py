"""Pytest configuration and fixtures for pubmanifest tests.

All tests are pure unit tests; HTTP is mocked with respx where needed.
"""

import pytest

from pubmanifest.config import clear_settings_cache
from pubmanifest.context import ProcessingContext
from pubmanifest.diagnostics import Diagnostics
from pubmanifest.profiles import DEFAULT_PROFILE
from tests.helpers import DEFAULT_BASE


@pytest.fixture(autouse=True)
def reset_settings_cache(monkeypatch):
    """Reset the settings cache and run in the test environment."""
    monkeypatch.setenv("PUBMANIFEST_ENV", "test")
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def diagnostics() -> Diagnostics:
    return Diagnostics()


@pytest.fixture
def ctx(diagnostics: Diagnostics) -> ProcessingContext:
    """Context with the default profile and http://example.org/ as base."""
    return ProcessingContext(diagnostics=diagnostics, profile=DEFAULT_PROFILE, base=DEFAULT_BASE)
