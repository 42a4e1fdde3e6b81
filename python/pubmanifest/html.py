"""HTML document handling on lxml.

HtmlDocument pairs a parsed lxml tree with the URL it was retrieved from.
The tree is parsed with the effective base URL (the document URL, or the
target of a <base href> element), so element.base_url resolves relative
references the way a browser would.
"""

import re
from dataclasses import dataclass

from lxml import etree
from lxml.html import HtmlElement, document_fromstring

from pubmanifest.errors import ErrorCode, PubManifestError
from pubmanifest.urls import resolve_url

# role attribute value marking a table of contents
TOC_ROLE = "doc-toc"

# All Unicode whitespace including nbsp
WHITESPACE_RE = re.compile(r"[\s\u00a0]+")

_TOC_XPATH = f'//*[contains(@role, "{TOC_ROLE}")]'
_PUBLICATION_LINK_XPATH = '//link[contains(@rel, "publication")]'


@dataclass(frozen=True)
class HtmlDocument:
    """A parsed HTML document.

    Attributes:
        root: The <html> element
        url: Address the document was retrieved from (None if unknown)
    """

    root: HtmlElement
    url: str | None = None

    @property
    def base_url(self) -> str | None:
        return self.root.base_url

    def title_element(self) -> HtmlElement | None:
        titles = self.root.xpath("//title")
        return titles[0] if titles else None

    def find_toc_element(self) -> HtmlElement | None:
        """First element whose role attribute contains doc-toc."""
        found = self.root.xpath(_TOC_XPATH)
        return found[0] if found else None

    def get_element_by_id(self, element_id: str) -> HtmlElement | None:
        found = self.root.xpath("//*[@id=$element_id]", element_id=element_id)
        return found[0] if found else None

    def find_publication_link(self) -> HtmlElement | None:
        found = self.root.xpath(_PUBLICATION_LINK_XPATH)
        return found[0] if found else None


def parse_html(text: str | bytes, url: str | None = None) -> HtmlDocument:
    """Parse markup into an HtmlDocument.

    Args:
        text: The HTML source.
        url: Address the source was retrieved from.

    Raises:
        PubManifestError: If the markup cannot be parsed at all.
    """
    try:
        root = document_fromstring(text, base_url=url)
    except (etree.ParserError, ValueError) as e:
        raise PubManifestError(ErrorCode.E_HTML_PARSE_FAILED, f"HTML parsing error: {e}") from e

    base_elements = root.xpath("//base[@href]")
    if base_elements:
        effective_base = resolve_url(url or "", base_elements[0].get("href"))
        if effective_base is not None:
            # Re-parse so every element reports the effective base
            root = document_fromstring(text, base_url=effective_base)

    return HtmlDocument(root=root, url=url)


def has_role(element: HtmlElement, role: str) -> bool:
    return role in (element.get("role") or "").split()


def is_hidden(element: HtmlElement) -> bool:
    return element.get("hidden") is not None


def text_content(element: HtmlElement) -> str | None:
    """Whitespace-collapsed text of an element; None when there is none."""
    text = WHITESPACE_RE.sub(" ", element.text_content()).strip()
    return text or None


def inherited_attribute(element: HtmlElement, name: str) -> str | None:
    """Value of an attribute on the element or its closest ancestor carrying it."""
    current = element
    while current is not None:
        value = current.get(name)
        if value is not None:
            return value
        current = current.getparent()
    return None
