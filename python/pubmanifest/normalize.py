"""Normalization: turn a parsed JSON manifest into typed nodes.

Shorthand values are expanded according to the term taxonomy of the node
that holds them:

- single values of array terms are wrapped in a list
- entities, localizable strings and linked resources are built from bare
  strings or objects
- URLs are resolved against the base URL

A value that cannot be normalized is reported and comes back as ABSENT;
callers never write ABSENT onto a node, which drops the property.
"""

from typing import Any

from pubmanifest.context import ProcessingContext
from pubmanifest.nodes import ABSENT, Node, NodeKind, is_recognized
from pubmanifest.urls import is_valid_url, resolve_url

CONTEXT_TERM = "@context"
LINKED_RESOURCE_TYPE = "LinkedResource"
ENTITY_TYPES = ("Person", "Organization")


def normalize_manifest(ctx: ProcessingContext, manifest: dict[str, Any]) -> Node:
    """Normalize every top-level term of a parsed manifest into a fresh Manifest node."""
    processed = Node(NodeKind.MANIFEST)
    for term, value in manifest.items():
        normalized = normalize_data(ctx, processed, term, value)
        if normalized is not ABSENT:
            processed[term] = normalized
    return processed


def normalize_data(ctx: ProcessingContext, node: Node, term: str, value: Any) -> Any:
    """Normalize the value of one term held by node.

    Args:
        ctx: Processing context.
        node: The node the term belongs to; selects the taxonomy.
        term: Property name.
        value: Raw value.

    Returns:
        The normalized value, or ABSENT if the term should be dropped.
    """
    if term == CONTEXT_TERM:
        return ABSENT

    terms = node.terms
    normalized = value

    if terms.is_array_term(term) and not isinstance(value, list):
        normalized = [value]

    if terms.is_entities_term(term):
        normalized = _create_all(ctx, normalized, create_entity)
    elif terms.is_strings_term(term):
        normalized = _create_all(ctx, normalized, create_localizable_string)
    elif terms.is_single_string_term(term):
        normalized = create_localizable_string(ctx, normalized)
    elif terms.is_links_term(term):
        normalized = _create_all(ctx, normalized, create_linked_resource)
    elif terms.is_single_url_term(term):
        normalized = convert_to_absolute_url(ctx, normalized)
    elif terms.is_urls_term(term):
        normalized = _create_all(ctx, normalized, convert_to_absolute_url)

    if normalized is ABSENT:
        return ABSENT

    normalized = ctx.profile.normalize_data(ctx, node, term, normalized)

    if isinstance(normalized, list):
        for item in normalized:
            if is_recognized(item):
                _normalize_node(ctx, item)
    elif is_recognized(normalized):
        _normalize_node(ctx, normalized)

    return normalized


def _normalize_node(ctx: ProcessingContext, node: Node) -> None:
    for key in list(node):
        normalized = normalize_data(ctx, node, key, node[key])
        if normalized is ABSENT:
            del node[key]
        else:
            node[key] = normalized


def _create_all(ctx: ProcessingContext, values: list[Any], create) -> list[Any]:
    created = (create(ctx, value) for value in values)
    return [item for item in created if item is not ABSENT]


def create_entity(ctx: ProcessingContext, value: Any) -> Node | Any:
    """Build a Person or Organization from a name or an object.

    A bare string becomes a Person with that name. An object keeps its type
    if it already says Person or Organization, otherwise it becomes a Person.
    """
    if isinstance(value, str):
        # The name is turned into a localizable string when the entity is walked
        return Node(NodeKind.ENTITY, type=["Person"], name=[value])

    if isinstance(value, dict):
        entity = Node(NodeKind.ENTITY, value)
        types = entity.get("type")
        if not types:
            entity["type"] = ["Person"]
        else:
            types = list(types) if isinstance(types, list) else [types]
            if not any(entity_type in types for entity_type in ENTITY_TYPES):
                types.append("Person")
            entity["type"] = types
        return entity

    ctx.diagnostics.log_strong_validation_error("Invalid entity", value)
    return ABSENT


def create_localizable_string(ctx: ProcessingContext, value: Any) -> Node | Any:
    """Build a localizable string, inheriting the ambient language and direction.

    An explicit null language or direction on an object suppresses the
    inheritance and is removed.
    """
    if isinstance(value, str):
        string = Node(NodeKind.LOCALIZABLE_STRING, value=value)
        if ctx.language:
            string["language"] = ctx.language
        if ctx.direction:
            string["direction"] = ctx.direction
        return string

    if isinstance(value, dict):
        string = Node(NodeKind.LOCALIZABLE_STRING, value)
        _inherit(string, "language", ctx.language)
        _inherit(string, "direction", ctx.direction)
        return string

    ctx.diagnostics.log_strong_validation_error("Invalid localizable string", value)
    return ABSENT


def _inherit(string: Node, key: str, ambient: str | None) -> None:
    if key in string and string[key] is None:
        del string[key]
    elif not string.get(key):
        if ambient:
            string[key] = ambient
        else:
            string.pop(key, None)


def create_linked_resource(ctx: ProcessingContext, value: Any) -> Node | Any:
    """Build a linked resource from a URL or an object, tagged "LinkedResource"."""
    if isinstance(value, str):
        return Node(NodeKind.LINKED_RESOURCE, url=value, type=[LINKED_RESOURCE_TYPE])

    if isinstance(value, dict):
        resource = Node(NodeKind.LINKED_RESOURCE, value)
        types = resource.get("type")
        if not types:
            resource["type"] = [LINKED_RESOURCE_TYPE]
        else:
            types = list(types) if isinstance(types, list) else [types]
            if LINKED_RESOURCE_TYPE not in types:
                types.append(LINKED_RESOURCE_TYPE)
            resource["type"] = types
        return resource

    ctx.diagnostics.log_strong_validation_error("Invalid Linked Resource", value)
    return ABSENT


def convert_to_absolute_url(ctx: ProcessingContext, url: Any) -> str | Any:
    """Resolve url against the base URL of the context.

    Returns:
        The absolute URL, or ABSENT if either side is unusable.
    """
    if not isinstance(ctx.base, str) or not ctx.base:
        ctx.diagnostics.log_strong_validation_error(f"Invalid base {ctx.base}")
        return ABSENT

    if not isinstance(url, str) or not url:
        ctx.diagnostics.log_strong_validation_error(f"Invalid relative URL {url}")
        return ABSENT

    absolute = resolve_url(ctx.base, url)
    if absolute is None or not is_valid_url(absolute):
        ctx.diagnostics.log_strong_validation_error(f"{absolute or url} is an invalid URL")
        return ABSENT
    return absolute
