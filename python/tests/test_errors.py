"""Tests for boundary errors.

Verifies:
- Error codes are plain strings
- Retryability is derived from the code
- Subclass defaults
"""

import pytest

from pubmanifest.errors import (
    RETRYABLE_CODES,
    DiscoveryError,
    ErrorCode,
    FetchError,
    PubManifestError,
)


class TestPubManifestError:
    """Tests for the base error."""

    def test_carries_code_and_message(self):
        """Code and message are kept as attributes."""
        error = PubManifestError(ErrorCode.E_INVALID_URL, "bad url")
        assert error.code == ErrorCode.E_INVALID_URL
        assert error.message == "bad url"
        assert str(error) == "bad url"

    def test_code_is_string(self):
        """Codes compare equal to their names."""
        assert ErrorCode.E_HTTP_STATUS == "E_HTTP_STATUS"

    @pytest.mark.parametrize("code", list(ErrorCode))
    def test_retryable_follows_code(self, code):
        """Only transient fetch failures are retryable."""
        assert PubManifestError(code, "x").retryable == (code in RETRYABLE_CODES)

    def test_timeout_is_retryable(self):
        assert FetchError(ErrorCode.E_FETCH_TIMEOUT, "slow").retryable

    def test_status_is_not_retryable(self):
        assert not FetchError(ErrorCode.E_HTTP_STATUS, "404").retryable


class TestSubclasses:
    """Tests for FetchError and DiscoveryError."""

    def test_fetch_error_defaults(self):
        error = FetchError()
        assert error.code == ErrorCode.E_FETCH_FAILED
        assert isinstance(error, PubManifestError)

    def test_discovery_error_defaults(self):
        error = DiscoveryError()
        assert error.code == ErrorCode.E_MANIFEST_NOT_FOUND
        assert error.message == "Manifest not found"
