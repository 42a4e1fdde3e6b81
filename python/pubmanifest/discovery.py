"""Manifest discovery and resource fetching.

Given an address, discovery decides between:
- a direct JSON manifest (.json, .jsonld): fetched as is, base is the address
- an HTML entry point (.html): fetched and parsed, then the first
  <link rel="publication"> is followed. A "#id" href points at an embedded
  <script id="..."> whose text is the manifest; any other href is fetched
  as JSON.

Fetching is async, uses one httpx.AsyncClient and has no retries. Every
URL goes through check_web_url() first. Failures raise PubManifestError.
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

import httpx

from pubmanifest.config import Settings, get_settings
from pubmanifest.errors import DiscoveryError, ErrorCode, FetchError, PubManifestError
from pubmanifest.html import HtmlDocument, parse_html
from pubmanifest.logging import get_logger
from pubmanifest.urls import check_web_url, resolve_url

logger = get_logger(__name__)

JSON_CONTENT_TYPES = frozenset({"application/json", "application/ld+json"})
HTML_CONTENT_TYPE = "text/html"

JSON_SUFFIXES = (".json", ".jsonld")
HTML_SUFFIXES = (".html",)


class ContentKind(str, Enum):
    """What a fetch expects to get back."""

    JSON = "json"
    HTML = "html"


@dataclass(frozen=True)
class GenerationArguments:
    """Input of the processing steps.

    Attributes:
        text: The raw JSON text of the manifest
        base: Base URL for relative references in the manifest
        document: The HTML entry point, if discovery went through one
    """

    text: str
    base: str | None
    document: HtmlDocument | None = None


def create_http_client(settings: Settings | None = None) -> httpx.AsyncClient:
    """Create an httpx client configured from settings."""
    settings = settings or get_settings()
    return httpx.AsyncClient(
        timeout=settings.fetch_timeout_s,
        follow_redirects=settings.follow_redirects,
        trust_env=False,
        headers={"User-Agent": settings.user_agent},
    )


def _content_type_accepted(content_type: str, kind: ContentKind) -> bool:
    media_types = {part.strip().lower() for part in content_type.split(";")}
    if kind == ContentKind.JSON:
        return bool(media_types & JSON_CONTENT_TYPES)
    return HTML_CONTENT_TYPE in media_types


async def fetch_resource(url: str, kind: ContentKind, client: httpx.AsyncClient) -> str:
    """Fetch a resource as text, checking status, content type and size.

    A missing content-type header is accepted as is. An unknown charset
    falls back to UTF-8.

    Raises:
        PubManifestError: On an unusable URL.
        FetchError: On fetch failure, timeout, bad status, wrong type or size limit.
    """
    check_web_url(url)
    max_bytes = get_settings().max_fetch_bytes
    accept = "application/ld+json, application/json" if kind == ContentKind.JSON else "text/html"

    try:
        async with client.stream("GET", url, headers={"Accept": accept}) as response:
            if response.status_code >= 400:
                raise FetchError(
                    ErrorCode.E_HTTP_STATUS,
                    f"HTTP response {response.status_code}: {response.reason_phrase}",
                )

            content_type = response.headers.get("content-type")
            if content_type and not _content_type_accepted(content_type, kind):
                raise FetchError(
                    ErrorCode.E_UNEXPECTED_CONTENT_TYPE,
                    f"unexpected content type, expected {kind.value}",
                )

            chunks = []
            total_bytes = 0
            async for chunk in response.aiter_bytes(chunk_size=8192):
                total_bytes += len(chunk)
                if total_bytes > max_bytes:
                    raise FetchError(
                        ErrorCode.E_RESOURCE_TOO_LARGE,
                        f"Resource exceeds maximum size of {max_bytes} bytes",
                    )
                chunks.append(chunk)

            body = b"".join(chunks)
            encoding = response.charset_encoding or "utf-8"
            try:
                return body.decode(encoding, errors="replace")
            except LookupError:
                logger.warning("manifest.fetch.unknown_charset", url=url, charset=encoding)
                return body.decode("utf-8", errors="replace")

    except httpx.TimeoutException as e:
        logger.warning("manifest.fetch.timeout", url=url)
        raise FetchError(ErrorCode.E_FETCH_TIMEOUT, f"Problem accessing {url}: timed out") from e
    except httpx.RequestError as e:
        logger.warning("manifest.fetch.failed", url=url, error=str(e))
        raise FetchError(ErrorCode.E_FETCH_FAILED, f"Problem accessing {url}: {e}") from e
    except httpx.InvalidURL as e:
        raise FetchError(ErrorCode.E_INVALID_URL, f"Problem accessing {url}: {e}") from e


async def fetch_json(url: str, client: httpx.AsyncClient) -> str:
    try:
        return await fetch_resource(url, ContentKind.JSON, client)
    except PubManifestError as e:
        raise FetchError(e.code, f"JSON fetch error in {url}: {e.message}") from e


async def fetch_html(url: str, client: httpx.AsyncClient) -> HtmlDocument:
    try:
        body = await fetch_resource(url, ContentKind.HTML, client)
        return parse_html(body, url)
    except PubManifestError as e:
        raise FetchError(e.code, f"HTML parsing error in {url}: {e.message}") from e


async def obtain_manifest(document: HtmlDocument, client: httpx.AsyncClient) -> GenerationArguments:
    """Follow the publication link of an HTML entry point.

    Raises:
        DiscoveryError: If there is no link, the embedded script is missing,
            or the linked manifest cannot be fetched.
    """
    origin = document.url
    link = document.find_publication_link()
    if link is None:
        raise DiscoveryError(
            ErrorCode.E_MANIFEST_NOT_FOUND, f"No manifest reference found in {origin}"
        )

    ref = link.get("href") or ""
    if ref.startswith("#"):
        script = document.get_element_by_id(ref[1:])
        if script is None or script.tag != "script":
            raise DiscoveryError(ErrorCode.E_MANIFEST_NOT_FOUND, f"Manifest in {origin} not found")
        return GenerationArguments(
            text=script.text or "", base=document.base_url, document=document
        )

    manifest_url = resolve_url(document.base_url or "", ref)
    if manifest_url is None:
        raise DiscoveryError(
            ErrorCode.E_INVALID_URL, f"Invalid manifest reference {ref} in {origin}"
        )
    try:
        text = await fetch_json(manifest_url, client)
    except PubManifestError as e:
        raise DiscoveryError(
            e.code, f"Problems reaching Manifest at {manifest_url} ({e.message})"
        ) from e
    return GenerationArguments(text=text, base=manifest_url, document=document)


async def discover_manifest(
    address: str, client: httpx.AsyncClient | None = None
) -> GenerationArguments:
    """Get the manifest text, base and entry document for an address.

    Raises:
        DiscoveryError: On any failure along the way.
    """
    if client is None:
        async with create_http_client() as own_client:
            return await discover_manifest(address, own_client)

    try:
        check_web_url(address)
        path = urlsplit(address).path
        if path.endswith(JSON_SUFFIXES):
            text = await fetch_json(address, client)
            return GenerationArguments(text=text, base=address)
        if path.endswith(HTML_SUFFIXES):
            document = await fetch_html(address, client)
            return await obtain_manifest(document, client)
        raise DiscoveryError(ErrorCode.E_UNRECOGNIZED_SUFFIX, f"unrecognized suffix ({path})")
    except PubManifestError as e:
        raise DiscoveryError(e.code, f"Problems discovering the manifest ({e.message})") from e
