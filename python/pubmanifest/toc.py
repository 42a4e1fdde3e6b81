"""Table of contents extraction.

The ToC is read from an HTML element (typically a <nav role="doc-toc">) by a
depth-first walk. Each element is classified and its enter handler returns
a Traverse decision:

- headings name the ToC (once, before any list)
- the first list at each level holds the entries; later lists are ignored
- each list item opens a branch, named and linked by its first anchor
- sectioning elements and hidden elements are not entered
- everything else is transparent: its children are walked

Exit handlers run for lists and list items only. A branch with neither
a name nor sub-entries is discarded. A ToC without entries is None.
"""

from dataclasses import dataclass, field
from enum import Enum

import httpx
from lxml.html import HtmlElement

from pubmanifest.context import ProcessingContext
from pubmanifest.discovery import create_http_client, fetch_html
from pubmanifest.errors import PubManifestError
from pubmanifest.html import TOC_ROLE, has_role, is_hidden, text_content
from pubmanifest.logging import get_logger
from pubmanifest.nodes import Node
from pubmanifest.urls import get_fragment, remove_url_fragment, resolve_url

logger = get_logger(__name__)

# Sectioning content and sectioning roots
SKIPPED_ELEMENTS = frozenset(
    {
        "article",
        "aside",
        "nav",
        "section",
        "blockquote",
        "body",
        "details",
        "dialog",
        "fieldset",
        "figure",
        "td",
    }
)
HEADING_ELEMENTS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6", "hgroup"})
LIST_ELEMENTS = frozenset({"ul", "ol"})
LIST_ITEM_ELEMENT = "li"
ANCHOR_ELEMENT = "a"

# Marks a branch whose name has not been set yet
_UNSET = ""


class Traverse(Enum):
    """Decision returned when entering an element."""

    SKIP = "skip"  # do not visit the children, no exit call
    DESCEND = "descend"  # visit the children, then call exit
    STOP = "stop"  # end the whole traversal


@dataclass
class TocBranch:
    """One ToC entry.

    name starts out as "" and becomes None or a string once decided.
    """

    name: str | None = _UNSET
    url: str | None = _UNSET
    type: str | None = _UNSET
    rel: list[str] | None = None
    entries: list["TocBranch"] | None = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "url": self.url,
            "type": self.type,
            "rel": self.rel,
            "entries": None if self.entries is None else [e.to_dict() for e in self.entries],
        }


@dataclass
class Toc:
    """The ToC root."""

    name: str | None = _UNSET
    entries: list[TocBranch] | None = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "entries": None if self.entries is None else [e.to_dict() for e in self.entries],
        }


class _TocBuilder:
    """State machine: the ToC root, the branch being built and the stack of enclosing branches."""

    def __init__(self, ctx: ProcessingContext, manifest: Node, base_url: str | None):
        self.ctx = ctx
        self.unique_resources = set(manifest.get("uniqueResources", []))
        self.base_url = base_url or ""
        self.toc = Toc()
        self.branches: list[TocBranch] = []
        self.current: TocBranch | None = None

    def enter(self, element: HtmlElement) -> Traverse:
        tag = element.tag
        if tag in HEADING_ELEMENTS:
            return self._enter_heading(element)
        if tag in LIST_ELEMENTS:
            return self._enter_list()
        if tag == LIST_ITEM_ELEMENT:
            return self._enter_list_item()
        if tag == ANCHOR_ELEMENT:
            return self._enter_anchor(element)
        if tag in SKIPPED_ELEMENTS or is_hidden(element):
            return Traverse.SKIP
        return Traverse.DESCEND

    def exit(self, element: HtmlElement) -> None:
        tag = element.tag
        if tag in LIST_ELEMENTS:
            self._exit_list()
        elif tag == LIST_ITEM_ELEMENT:
            self._exit_list_item()

    def _enter_heading(self, element: HtmlElement) -> Traverse:
        if self.toc.name == _UNSET and not self.branches:
            self.toc.name = text_content(element)
        return Traverse.SKIP

    def _enter_list(self) -> Traverse:
        if self.toc.name == _UNSET:
            self.toc.name = None

        if self.current is not None:
            if self.current.entries is None or self.current.entries:
                return Traverse.SKIP
            self.branches.append(self.current)
            self.current = None
        elif not self.branches:
            if self.toc.entries is None or self.toc.entries:
                # The top-level list has been consumed; nothing else can be added
                return Traverse.STOP
        return Traverse.DESCEND

    def _exit_list(self) -> None:
        if self.branches:
            self.current = self.branches.pop()
        elif not self.toc.entries:
            self.toc.entries = None

    def _enter_list_item(self) -> Traverse:
        self.current = TocBranch()
        return Traverse.DESCEND

    def _exit_list_item(self) -> None:
        branch = self.current
        if branch is None:
            return
        if not branch.entries:
            branch.entries = None
        if branch.name == _UNSET:
            if branch.entries is None:
                self.current = None
                return
            branch.name = None

        if self.branches:
            self.branches[-1].entries.append(branch)
        elif self.toc.entries is not None:
            self.toc.entries.append(branch)
        self.current = None

    def _enter_anchor(self, element: HtmlElement) -> Traverse:
        branch = self.current
        if branch is None or branch.name != _UNSET:
            return Traverse.SKIP

        branch.name = text_content(element)

        href = element.get("href")
        if href is None:
            branch.url = None
        else:
            url = resolve_url(self.base_url, href.strip())
            if url is not None and remove_url_fragment(url) in self.unique_resources:
                branch.url = url
            else:
                self.ctx.diagnostics.log_light_validation_error(
                    f'The ToC reference "{url or href.strip()}" does not appear in the resources '
                    "listed in the manifest."
                )
                branch.url = None

        link_type = element.get("type")
        branch.type = link_type.strip() if link_type is not None else None

        rel = (element.get("rel") or "").split()
        branch.rel = rel or None
        return Traverse.SKIP


def _walk(element: HtmlElement, builder: _TocBuilder) -> bool:
    """Depth-first walk of the children of element; False once STOP was returned."""
    for child in element:
        # Comments and processing instructions
        if not isinstance(child.tag, str):
            continue
        decision = builder.enter(child)
        if decision is Traverse.STOP:
            return False
        if decision is Traverse.DESCEND:
            if not _walk(child, builder):
                return False
            builder.exit(child)
    return True


def extract_toc(ctx: ProcessingContext, toc_element: HtmlElement, manifest: Node) -> Toc | None:
    """Extract the ToC held by toc_element.

    Args:
        ctx: Processing context; diagnostics receive dangling references.
        toc_element: The element containing the ToC.
        manifest: The processed manifest; its uniqueResources bound the links.

    Returns:
        The ToC, or None if it has no entries.
    """
    builder = _TocBuilder(ctx, manifest, toc_element.base_url)
    _walk(toc_element, builder)
    toc = builder.toc
    if not toc.entries:
        return None
    return toc


async def locate_toc_element(
    ctx: ProcessingContext, manifest: Node, client: httpx.AsyncClient
) -> HtmlElement | None:
    """Find the ToC element through the first resource with rel "contents"."""
    resources = [*manifest.get("readingOrder", []), *manifest.get("resources", [])]
    resource = next((link for link in resources if "contents" in (link.get("rel") or [])), None)
    if resource is None or not resource.get("url"):
        return None

    url = resource["url"]
    try:
        document = await fetch_html(remove_url_fragment(url), client)
    except PubManifestError as e:
        ctx.diagnostics.log_light_validation_error(f"Problems fetching ToC resource ({e.message})")
        return None
    except httpx.HTTPError as e:
        logger.warning("manifest.toc.fetch_failed", url=url, error=str(e))
        ctx.diagnostics.log_light_validation_error(f"Problems fetching ToC resource ({e})")
        return None

    fragment = get_fragment(url)
    if fragment:
        element = document.get_element_by_id(fragment)
        if element is not None and has_role(element, TOC_ROLE):
            return element
        ctx.diagnostics.log_light_validation_error(f"ToC entry with {url} not found")
        return None

    element = document.find_toc_element()
    if element is None:
        ctx.diagnostics.log_light_validation_error(f"ToC entry in {url} not found")
    return element


async def generate_toc(
    ctx: ProcessingContext, manifest: Node, client: httpx.AsyncClient | None = None
) -> Toc | None:
    """Locate and extract the ToC of a processed manifest."""
    toc_element = ctx.profile.get_toc_element(ctx, manifest)
    if toc_element is None:
        if client is None:
            async with create_http_client() as own_client:
                toc_element = await locate_toc_element(ctx, manifest, own_client)
        else:
            toc_element = await locate_toc_element(ctx, manifest, client)

    if toc_element is None:
        return None

    toc = extract_toc(ctx, toc_element, manifest)
    logger.info(
        "manifest.toc.extracted",
        found=toc is not None,
        entries=len(toc.entries) if toc is not None else 0,
    )
    return toc
