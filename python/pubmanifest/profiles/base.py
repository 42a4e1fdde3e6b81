"""Profile extension points.

A profile customizes the core processing for one conformance class. The
core calls every hook unconditionally, at fixed points:

- normalize_data: per value, inside the normalizer
- data_validation: at the end of validation, before empty arrays are stripped
- add_default_values: after the HTML defaults have been filled in
- generate_internal_representation: last, once everything else is done
- get_toc_element: before the ToC is looked up through the resources

data_validation and add_default_values return None to signal a fatal,
unrecoverable gap; the core then stops and returns an empty manifest.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from lxml.html import HtmlElement

from pubmanifest.nodes import Node

if TYPE_CHECKING:
    from pubmanifest.context import ProcessingContext

DEFAULT_PROFILE_IDENTIFIER = "https://www.w3.org/TR/pub-manifest/"


class Profile:
    """Base profile; every hook is a pass-through.

    Subclasses set identifier to the URL matched against "conformsTo".
    """

    identifier: str

    def generate_internal_representation(self, ctx: ProcessingContext, processed: Node) -> Node:
        return processed

    def normalize_data(self, ctx: ProcessingContext, node: Node, term: str, value: Any) -> Any:
        return value

    def data_validation(self, ctx: ProcessingContext, data: Node) -> Node | None:
        return data

    def add_default_values(self, ctx: ProcessingContext, data: Node) -> Node | None:
        return data

    def get_toc_element(self, ctx: ProcessingContext, manifest: Node) -> HtmlElement | None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identifier!r})"


class DefaultProfile(Profile):
    """The generic publication manifest profile, also the fallback."""

    identifier = DEFAULT_PROFILE_IDENTIFIER


DEFAULT_PROFILE = DefaultProfile()
