"""Error definitions for the I/O boundary.

Data problems inside a manifest are never raised; they are recorded in
Diagnostics. Exceptions here are reserved for fetch and discovery failures,
which process_manifest() turns into fatal diagnostics.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes.

    Format: E_CATEGORY_NAME
    """

    # URL guard errors
    E_INVALID_URL = "E_INVALID_URL"
    E_URL_NOT_DEREFERENCEABLE = "E_URL_NOT_DEREFERENCEABLE"
    E_UNSAFE_PORT = "E_UNSAFE_PORT"

    # Fetch errors
    E_FETCH_FAILED = "E_FETCH_FAILED"
    E_FETCH_TIMEOUT = "E_FETCH_TIMEOUT"
    E_HTTP_STATUS = "E_HTTP_STATUS"
    E_UNEXPECTED_CONTENT_TYPE = "E_UNEXPECTED_CONTENT_TYPE"
    E_RESOURCE_TOO_LARGE = "E_RESOURCE_TOO_LARGE"

    # Discovery errors
    E_UNRECOGNIZED_SUFFIX = "E_UNRECOGNIZED_SUFFIX"
    E_MANIFEST_NOT_FOUND = "E_MANIFEST_NOT_FOUND"
    E_HTML_PARSE_FAILED = "E_HTML_PARSE_FAILED"


# Codes that a caller may reasonably retry
RETRYABLE_CODES: frozenset[ErrorCode] = frozenset(
    {
        ErrorCode.E_FETCH_FAILED,
        ErrorCode.E_FETCH_TIMEOUT,
    }
)


class PubManifestError(Exception):
    """Base exception for boundary errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        retryable: Whether the failure is transient (derived from code)
    """

    def __init__(self, code: ErrorCode, message: str):
        self.code = code
        self.message = message
        self.retryable = code in RETRYABLE_CODES
        super().__init__(message)


class FetchError(PubManifestError):
    """A resource could not be fetched."""

    def __init__(self, code: ErrorCode = ErrorCode.E_FETCH_FAILED, message: str = "Fetch failed"):
        super().__init__(code, message)


class DiscoveryError(PubManifestError):
    """A manifest could not be located from the given address."""

    def __init__(
        self, code: ErrorCode = ErrorCode.E_MANIFEST_NOT_FOUND, message: str = "Manifest not found"
    ):
        super().__init__(code, message)
