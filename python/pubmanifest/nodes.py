"""Typed node model for manifest-family objects.

A Node is a dict of properties tagged with its NodeKind. The tag is an
attribute, not a property, so it never leaks into the output. The kind
selects the node's TermTaxonomy through TAXONOMIES.

Person and Organization are one kind, ENTITY, told apart by their "type"
property only.
"""

from enum import Enum
from typing import Any

from pubmanifest.terms import (
    ENTITY_TERMS,
    LINKED_RESOURCE_TERMS,
    LOCALIZABLE_STRING_TERMS,
    MANIFEST_TERMS,
    TermTaxonomy,
)


class NodeKind(str, Enum):
    """The closed set of manifest-family node kinds."""

    MANIFEST = "PublicationManifest"
    ENTITY = "Entity"
    LOCALIZABLE_STRING = "LocalizableString"
    LINKED_RESOURCE = "LinkedResource"


TAXONOMIES: dict[NodeKind, TermTaxonomy] = {
    NodeKind.MANIFEST: MANIFEST_TERMS,
    NodeKind.ENTITY: ENTITY_TERMS,
    NodeKind.LOCALIZABLE_STRING: LOCALIZABLE_STRING_TERMS,
    NodeKind.LINKED_RESOURCE: LINKED_RESOURCE_TERMS,
}

# Kinds whose properties are walked recursively by the normalizer and validator
RECOGNIZED_KINDS = frozenset({NodeKind.ENTITY, NodeKind.LINKED_RESOURCE})


class Absent(Enum):
    """Marker for "no value"; None is a legitimate JSON value."""

    ABSENT = "absent"

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent.ABSENT


class Node(dict):
    """A manifest-family object: a property dict plus its kind.

    defaulted_terms names the properties filled in with a default value
    rather than read from the source.
    """

    kind: NodeKind
    defaulted_terms: set[str]

    def __init__(self, kind: NodeKind, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.kind = kind
        self.defaulted_terms = set()

    @property
    def terms(self) -> TermTaxonomy:
        return TAXONOMIES[self.kind]

    def __repr__(self) -> str:
        return f"{self.kind.value}({dict.__repr__(self)})"


def is_node(value: Any, *kinds: NodeKind) -> bool:
    """Check whether value is a Node, optionally of one of the given kinds."""
    if not isinstance(value, Node):
        return False
    return not kinds or value.kind in kinds


def is_recognized(value: Any) -> bool:
    return isinstance(value, Node) and value.kind in RECOGNIZED_KINDS


def to_plain(value: Any) -> Any:
    """Recursively turn nodes into plain dicts and lists (JSON friendly)."""
    if isinstance(value, dict):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_plain(item) for item in value]
    return value
