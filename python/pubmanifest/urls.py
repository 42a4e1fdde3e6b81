"""URL utilities.

- is_valid_url(): RFC 3986 syntax check of an absolute URI
- resolve_url(): Resolve a reference against a base
- remove_url_fragment(): Strip the fragment (#...) part
- check_web_url(): Guard applied before any fetch, raises PubManifestError

Key behaviors of check_web_url():
- Scheme must be http or https
- Length must be <= 2048 characters
- Host must be present and non-empty
- Userinfo (user:pass@host) is forbidden
- An explicit port must be above the configured minimum
"""

import re
from urllib.parse import urldefrag, urljoin, urlsplit

from pubmanifest.config import get_settings
from pubmanifest.errors import ErrorCode, PubManifestError

# Maximum URL length accepted for fetching
MAX_URL_LENGTH = 2048

# Allowed schemes for fetching
ALLOWED_SCHEMES = frozenset({"http", "https"})

# Characters that may appear in a URI, unescaped or as part of %XX
_ILLEGAL_CHARS_RE = re.compile(r"[^a-z0-9:/?#\[\]@!$&'()*+,;=.\-_~%]", re.IGNORECASE)
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9a-f]{2})", re.IGNORECASE)
_SCHEME_RE = re.compile(r"[a-z][a-z0-9+\-.]*", re.IGNORECASE)
_URI_PARTS_RE = re.compile(r"(?:([^:/?#]+):)?(?://([^/?#]*))?([^?#]*)(?:\?([^#]*))?(?:#(.*))?")


def is_valid_url(url: object) -> bool:
    """Check that url is a syntactically valid absolute URI.

    Args:
        url: The candidate value.

    Returns:
        True if url is a string with a scheme and only legal URI characters.
    """
    if not isinstance(url, str) or not url:
        return False
    if _ILLEGAL_CHARS_RE.search(url) or _BAD_ESCAPE_RE.search(url):
        return False

    match = _URI_PARTS_RE.fullmatch(url)
    if match is None:
        return False
    scheme, authority, path = match.group(1), match.group(2), match.group(3)

    if not scheme or not _SCHEME_RE.fullmatch(scheme):
        return False
    if authority is not None:
        # With an authority the path is empty or absolute
        if path and not path.startswith("/"):
            return False
    elif path.startswith("//"):
        return False
    return True


def resolve_url(base: str, url: str) -> str | None:
    """Resolve url against base; None if either side cannot be parsed."""
    try:
        return urljoin(base, url)
    except ValueError:
        return None


def remove_url_fragment(url: str) -> str:
    return urldefrag(url).url


def get_fragment(url: str) -> str:
    return urldefrag(url).fragment


def check_web_url(address: str) -> str:
    """Validate a URL before it is dereferenced.

    Args:
        address: The URL to validate.

    Returns:
        The address, unchanged.

    Raises:
        PubManifestError: If validation fails with details about the failure.
    """
    if len(address) > MAX_URL_LENGTH:
        raise PubManifestError(
            ErrorCode.E_INVALID_URL,
            f'"{address}": URL exceeds maximum length of {MAX_URL_LENGTH} characters',
        )

    try:
        parsed = urlsplit(address)
    except ValueError as e:
        raise PubManifestError(
            ErrorCode.E_INVALID_URL, f'"{address}": the URL isn\'t valid ({e})'
        ) from e
    if not parsed.scheme:
        raise PubManifestError(ErrorCode.E_INVALID_URL, f'"{address}": Invalid URL: no protocol')

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise PubManifestError(
            ErrorCode.E_URL_NOT_DEREFERENCEABLE, f'"{address}": URL is not dereferencable'
        )

    if parsed.username or parsed.password:
        raise PubManifestError(
            ErrorCode.E_INVALID_URL,
            f'"{address}": URLs with credentials (user:pass@host) are not allowed',
        )

    if not parsed.hostname or not is_valid_url(address):
        raise PubManifestError(ErrorCode.E_INVALID_URL, f'"{address}": the URL isn\'t valid')

    try:
        port = parsed.port
    except ValueError as e:
        raise PubManifestError(
            ErrorCode.E_UNSAFE_PORT, f'"{address}": Invalid port number used in URL'
        ) from e
    if port is not None and port <= get_settings().min_fetch_port:
        raise PubManifestError(
            ErrorCode.E_UNSAFE_PORT, f'"{address}": Unsafe port number used in URL ({port})'
        )

    return address
