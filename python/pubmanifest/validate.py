"""Validation of a normalized manifest.

Validation runs in two passes over the Manifest node:

1. Global data checks: every known term is checked against the runtime
   shape its taxonomy category implies, recursively. Ill-typed values are
   removed; localizable strings, entities and linked resources get the
   extra repairs of their kind.
2. Manifest-wide checks: publication type, accessibility sufficiency,
   id, duration, dates, languages, reading progression, unique resources,
   "links" bounds and structural resources.

The profile then gets its say, and finally every empty array left on a
known term is stripped. Nothing in here is fatal unless the profile says so.
"""

from typing import Any

from pubmanifest.checks import (
    check_direction_tag,
    check_duration_value,
    check_language_tag,
    is_iso_date,
)
from pubmanifest.context import ProcessingContext
from pubmanifest.nodes import ABSENT, Node, NodeKind, is_node, is_recognized
from pubmanifest.terms import TermTaxonomy
from pubmanifest.urls import is_valid_url, remove_url_fragment

DEFAULT_PUBLICATION_TYPE = "CreativeWork"
DEFAULT_READING_PROGRESSION = "ltr"

# Reserved rel values of structural resources
STRUCTURAL_RESOURCES = ("contents", "pagelist", "cover")

ITEM_LIST_TYPE = "ItemList"


def data_validation(ctx: ProcessingContext, data: Node) -> Node | None:
    """Validate a normalized manifest in place.

    Returns:
        The validated manifest, or None if the profile reported a fatal error.
    """
    terms = data.terms

    for key in list(data):
        if terms.is_regular_term(key):
            checked = global_data_checks(ctx, data, key, data[key])
            if checked is ABSENT:
                del data[key]
            else:
                data[key] = checked

    _check_publication_type(ctx, data)
    _check_access_mode_sufficient(ctx, data)
    _check_identifier(ctx, data)
    _check_duration(ctx, data)
    _check_dates(ctx, data)
    _check_languages(ctx, data)
    _check_reading_progression(ctx, data)
    data["uniqueResources"] = _union(
        get_unique_urls(ctx, data.get("readingOrder", [])),
        get_unique_urls(ctx, data.get("resources", [])),
    )
    _check_links(ctx, data)
    _check_structural_resources(ctx, data)

    validated = ctx.profile.data_validation(ctx, data)
    if validated is None:
        return None

    for key in list(validated):
        if terms.is_valid_term(key) and not remove_empty_arrays(validated[key]):
            del validated[key]

    return validated


# ---------------------------------------------------------------------------
# Pass 1: global data checks
# ---------------------------------------------------------------------------


def global_data_checks(ctx: ProcessingContext, node: Node, term: str, value: Any) -> Any:
    """Check (and repair) the value of one term of node.

    Returns:
        The checked value, or ABSENT if the term must be removed.
    """
    terms = node.terms

    if terms.is_regular_term(term):
        value = verify_value_category(ctx, node, term, value)
        if value is ABSENT:
            return ABSENT

    if isinstance(value, list):
        for item in value:
            if is_recognized(item):
                _check_node(ctx, item)
    elif is_recognized(value):
        _check_node(ctx, value)

    if terms.is_strings_term(term):
        value = [item for item in value if _check_localizable_string(ctx, item)]
    elif terms.is_single_string_term(term):
        if not _check_localizable_string(ctx, value):
            return ABSENT
    elif terms.is_entities_term(term):
        value = [item for item in value if _check_entity(ctx, term, item)]
    elif terms.is_links_term(term):
        value = [item for item in value if _check_linked_resource(ctx, term, item)]

    return value


def _check_node(ctx: ProcessingContext, node: Node) -> None:
    for key in list(node):
        checked = global_data_checks(ctx, node, key, node[key])
        if checked is ABSENT:
            del node[key]
        else:
            node[key] = checked


def _check_localizable_string(ctx: ProcessingContext, item: Node) -> bool:
    if not item.get("value"):
        ctx.diagnostics.log_strong_validation_error("Missing value for a Localizable String", item)
        return False
    if item.get("language") and not check_language_tag(item["language"], ctx.diagnostics):
        del item["language"]
    if item.get("direction") and not check_direction_tag(item["direction"], ctx.diagnostics):
        del item["direction"]
    return True


def _check_entity(ctx: ProcessingContext, term: str, item: Node) -> bool:
    names = [name for name in item.get("name", []) if name.get("value")]
    if not names:
        ctx.diagnostics.log_strong_validation_error(
            f'Missing name for a Person or Organization in "{term}"', item
        )
        return False
    item["name"] = names
    return True


def _check_linked_resource(ctx: ProcessingContext, term: str, resource: Node) -> bool:
    url = resource.get("url")
    if not url:
        ctx.diagnostics.log_strong_validation_error(
            f'URL is missing from a linked resource in "{term}"', resource
        )
        return False
    if not is_valid_url(url):
        ctx.diagnostics.log_strong_validation_error(f'"{url}" is not a valid URL')
        return False

    if "duration" in resource and not check_duration_value(resource["duration"], ctx.diagnostics):
        del resource["duration"]

    # Non-numeric lengths were already removed by the type check
    if "length" in resource and resource["length"] < 0:
        ctx.diagnostics.log_strong_validation_error(
            f'Invalid length value ({resource["length"]}) for a linked resource in "{term}"',
            resource,
        )
        return False
    return True


def verify_value_category(ctx: ProcessingContext, node: Node, term: str, value: Any) -> Any:
    """Check that value has the runtime shape the taxonomy declares for term.

    Array items of the wrong type are removed; maps are verified recursively.

    Returns:
        The (possibly filtered) value, or ABSENT if nothing valid is left.
    """
    terms = node.terms

    if terms.is_array_term(term):
        if not isinstance(value, list):
            ctx.diagnostics.log_light_validation_error(
                f'Value should be an array for "{term}"', value
            )
            return ABSENT
        if not value:
            return value

        kept = []
        for item in value:
            if not _check_expected_type_and_report(ctx, terms, term, item):
                continue
            if isinstance(item, dict) and not _verify_map(ctx, item):
                continue
            kept.append(item)

        if not kept:
            ctx.diagnostics.log_strong_validation_error(
                f'Empty array after value type check for "{term}"'
            )
            return ABSENT
        return kept

    if not _check_expected_type_and_report(ctx, terms, term, value):
        return ABSENT
    if isinstance(value, dict) and not _verify_map(ctx, value):
        return ABSENT
    return value


def _verify_map(ctx: ProcessingContext, obj: Node) -> bool:
    """Verify the known terms of a node; False if none survives."""
    terms = obj.terms
    for key in list(obj):
        if terms.is_valid_term(key):
            checked = verify_value_category(ctx, obj, key, obj[key])
            if checked is ABSENT:
                del obj[key]
            else:
                obj[key] = checked
    return any(key in terms.all_terms for key in obj)


def _check_expected_type(terms: TermTaxonomy, key: str, value: Any) -> bool:
    if terms.is_literal_or_literals_term(key):
        return isinstance(value, str)
    if terms.is_strings_term(key) or terms.is_single_string_term(key):
        return is_node(value, NodeKind.LOCALIZABLE_STRING)
    if terms.is_entities_term(key):
        return is_node(value, NodeKind.ENTITY)
    if terms.is_links_term(key):
        return is_node(value, NodeKind.LINKED_RESOURCE)
    if terms.is_url_or_urls_term(key):
        return isinstance(value, str)
    if terms.is_single_number_term(key):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if terms.is_single_boolean_term(key):
        return isinstance(value, bool)
    # No constraint defined
    return True


def _check_expected_type_and_report(
    ctx: ProcessingContext, terms: TermTaxonomy, key: str, value: Any
) -> bool:
    if _check_expected_type(terms, key, value):
        return True
    ctx.diagnostics.log_strong_validation_error(f'Type validation error for "{key}":', value)
    return False


# ---------------------------------------------------------------------------
# Pass 2: manifest-wide checks
# ---------------------------------------------------------------------------


def _check_publication_type(ctx: ProcessingContext, data: Node) -> None:
    if not data.get("type"):
        ctx.diagnostics.log_light_validation_error("Missing publication type (set default)")
        data["type"] = [DEFAULT_PUBLICATION_TYPE]
        data.defaulted_terms.add("type")


def _check_access_mode_sufficient(ctx: ProcessingContext, data: Node) -> None:
    if "accessModeSufficient" not in data:
        return
    kept = []
    for entry in data["accessModeSufficient"]:
        if isinstance(entry, dict) and entry.get("type") == ITEM_LIST_TYPE:
            kept.append(entry)
        else:
            ctx.diagnostics.log_strong_validation_error(
                'Value of "accessModeSufficient" is invalid', entry
            )
    data["accessModeSufficient"] = kept


def _check_identifier(ctx: ProcessingContext, data: Node) -> None:
    if not data.get("id"):
        ctx.diagnostics.log_light_validation_error("No id provided")
        data.pop("id", None)


def _check_duration(ctx: ProcessingContext, data: Node) -> None:
    if "duration" in data and not check_duration_value(data["duration"], ctx.diagnostics):
        del data["duration"]


def _check_dates(ctx: ProcessingContext, data: Node) -> None:
    for term in ("dateModified", "datePublished"):
        if term in data and not is_iso_date(data[term]):
            ctx.diagnostics.log_strong_validation_error(f'"{data[term]}" is an incorrect date string')
            del data[term]


def _check_languages(ctx: ProcessingContext, data: Node) -> None:
    if "inLanguage" in data:
        data["inLanguage"] = [
            tag for tag in data["inLanguage"] if check_language_tag(tag, ctx.diagnostics)
        ]


def _check_reading_progression(ctx: ProcessingContext, data: Node) -> None:
    if "readingProgression" in data:
        if not check_direction_tag(data["readingProgression"], ctx.diagnostics):
            data["readingProgression"] = DEFAULT_READING_PROGRESSION
    else:
        data["readingProgression"] = DEFAULT_READING_PROGRESSION


def get_unique_urls(ctx: ProcessingContext, resources: list[Node]) -> list[str]:
    """Fragment-stripped URLs of resources and their alternates, without duplicates.

    Order is first appearance; a duplicate is reported but not removed from
    the resources themselves.
    """
    unique: list[str] = []
    seen: set[str] = set()

    def add_all(link: Node) -> None:
        url = remove_url_fragment(link["url"])
        if url in seen:
            ctx.diagnostics.log_light_validation_error(f"Duplicate value for {link['url']}")
        else:
            seen.add(url)
            unique.append(url)
        for alternate in link.get("alternate", []):
            add_all(alternate)

    for resource in resources:
        add_all(resource)
    return unique


def _union(first: list[str], second: list[str]) -> list[str]:
    return first + [url for url in second if url not in first]


def _check_links(ctx: ProcessingContext, data: Node) -> None:
    if "links" not in data:
        return
    unique_resources = data["uniqueResources"]
    kept = []
    for link in data["links"]:
        if remove_url_fragment(link["url"]) in unique_resources:
            ctx.diagnostics.log_strong_validation_error(
                f'{link["url"]} appears in "links" but is within the bounds of the publication'
            )
            continue
        rel = link.get("rel")
        if not rel:
            ctx.diagnostics.log_light_validation_error('Rel value in "links" not set', link)
        else:
            reserved = [value for value in rel if value in STRUCTURAL_RESOURCES]
            if reserved:
                ctx.diagnostics.log_strong_validation_error(
                    f'Linked Resource in "links" includes "{",".join(reserved)}"', link
                )
                continue
        kept.append(link)
    data["links"] = kept


def _check_structural_resources(ctx: ProcessingContext, data: Node) -> None:
    found = {role: False for role in STRUCTURAL_RESOURCES}
    for resource in [*data.get("readingOrder", []), *data.get("resources", [])]:
        rel = resource.get("rel") or []
        for role in STRUCTURAL_RESOURCES:
            if role not in rel:
                continue
            if found[role]:
                ctx.diagnostics.log_light_validation_error(
                    f'Multiple definition for the structural resource "{role}"', resource
                )
                continue
            found[role] = True
            encoding_format = resource.get("encodingFormat") or ""
            if role == "cover" and encoding_format.startswith("image/") and not resource.get("name"):
                ctx.diagnostics.log_light_validation_error(
                    "No name provided for a cover page image", resource
                )


# ---------------------------------------------------------------------------
# Empty array stripping
# ---------------------------------------------------------------------------


def remove_empty_arrays(value: Any) -> bool:
    """Strip empty arrays below value, in place.

    Returns:
        False if value itself is an empty array and must be removed.
    """
    if isinstance(value, list):
        if not value:
            return False
        for item in value:
            remove_empty_arrays(item)
    elif isinstance(value, dict):
        for key in list(value):
            if not remove_empty_arrays(value[key]):
                del value[key]
    return True
