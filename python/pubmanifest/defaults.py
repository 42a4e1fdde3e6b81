"""Default values taken from the HTML entry point.

When a manifest is embedded in, or linked from, an HTML document, that
document supplies the values a manifest may omit: the title becomes the
publication name and the document itself becomes the reading order.
"""

from pubmanifest.context import ProcessingContext
from pubmanifest.html import inherited_attribute, text_content
from pubmanifest.nodes import Node
from pubmanifest.normalize import create_linked_resource, create_localizable_string
from pubmanifest.urls import remove_url_fragment

NO_TITLE = "*No Title*"


def add_default_values(ctx: ProcessingContext, data: Node) -> Node | None:
    """Fill in "name" and "readingOrder" from the entry document, then run the profile.

    Returns:
        The completed manifest, or None on a fatal gap (no usable reading order).
    """
    if not data.get("name"):
        data["name"] = [_default_name(ctx)]

    if not data.get("readingOrder"):
        document = ctx.document
        if document is None:
            ctx.diagnostics.log_fatal_error("Empty reading order")
            return None
        if not document.url:
            ctx.diagnostics.log_fatal_error(
                "Empty reading order, and no URL assigned to the HTML entry point to serve as default"
            )
            return None
        data["readingOrder"] = [create_linked_resource(ctx, document.url)]
        unique_resources = data.setdefault("uniqueResources", [])
        url = remove_url_fragment(document.url)
        if url not in unique_resources:
            unique_resources.append(url)

    return ctx.profile.add_default_values(ctx, data)


def _default_name(ctx: ProcessingContext) -> Node:
    if ctx.document is None:
        ctx.diagnostics.log_light_validation_error('No "name" set and no default value')
        return create_localizable_string(ctx, NO_TITLE)

    title = ctx.document.title_element()
    if title is None:
        ctx.diagnostics.log_light_validation_error('No title element to set as a default "name"')
        return create_localizable_string(ctx, NO_TITLE)

    name = create_localizable_string(ctx, text_content(title) or NO_TITLE)
    language = inherited_attribute(title, "lang")
    if language:
        name["language"] = language
    direction = inherited_attribute(title, "dir")
    if direction:
        name["direction"] = direction
    return name
