"""Tests for manifest validation.

Covers:
- Value shape checks per taxonomy category
- Repairs of localizable strings, entities and linked resources
- Manifest-wide checks (type, id, dates, languages, progression)
- uniqueResources, "links" bounds and structural resources
- Empty array stripping and idempotence
"""

import copy
from dataclasses import replace

from pubmanifest.diagnostics import Diagnostics
from pubmanifest.nodes import ABSENT, Node, NodeKind
from pubmanifest.normalize import normalize_manifest
from pubmanifest.profiles import Profile
from pubmanifest.validate import (
    data_validation,
    get_unique_urls,
    remove_empty_arrays,
    verify_value_category,
)
from tests.helpers import light_messages, strong_messages


def _validate(ctx, **terms):
    terms.setdefault("id", "urn:isbn:123")
    terms.setdefault("type", "Book")
    return data_validation(ctx, normalize_manifest(ctx, terms))


class TestManifestDefaults:
    """Tests for values set during validation."""

    def test_minimal_manifest(self, ctx, diagnostics):
        data = data_validation(ctx, normalize_manifest(ctx, {"readingOrder": "a.html"}))

        assert data["type"] == ["CreativeWork"]
        assert data["readingProgression"] == "ltr"
        assert data["uniqueResources"] == ["http://example.org/a.html"]
        assert light_messages(diagnostics) == [
            "Missing publication type (set default)",
            "No id provided",
        ]
        assert strong_messages(diagnostics) == []

    def test_defaulted_type_recorded(self, ctx):
        """Only a type filled in by default is marked as defaulted."""
        defaulted = data_validation(ctx, normalize_manifest(ctx, {"readingOrder": "a.html"}))
        explicit = data_validation(
            ctx, normalize_manifest(ctx, {"type": "CreativeWork", "readingOrder": "a.html"})
        )
        assert "type" in defaulted.defaulted_terms
        assert "type" not in explicit.defaulted_terms

    def test_invalid_progression_reset(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", readingProgression="up")
        assert data["readingProgression"] == "ltr"
        assert strong_messages(diagnostics) == ['Invalid base direction tag: "up"']

    def test_rtl_progression_kept(self, ctx):
        data = _validate(ctx, readingOrder="a.html", readingProgression="rtl")
        assert data["readingProgression"] == "rtl"


class TestValueCategories:
    """Tests for type checks against the taxonomy."""

    def test_non_array_reported(self, ctx, diagnostics):
        node = Node(NodeKind.MANIFEST)
        assert verify_value_category(ctx, node, "inLanguage", "en") is ABSENT
        assert light_messages(diagnostics) == ['Value should be an array for "inLanguage"']

    def test_wrong_item_removed(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", inLanguage=["en", 3])
        assert data["inLanguage"] == ["en"]
        assert strong_messages(diagnostics) == ['Type validation error for "inLanguage":']
        assert diagnostics.strong_validation_errors[0].problematic_object == 3

    def test_all_items_wrong(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", accessMode=[1, 2])
        assert "accessMode" not in data
        assert 'Empty array after value type check for "accessMode"' in strong_messages(diagnostics)

    def test_boolean_checked(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", abridged="yes")
        assert "abridged" not in data
        assert strong_messages(diagnostics) == ['Type validation error for "abridged":']

    def test_bool_is_not_a_length(self, ctx):
        data = _validate(ctx, readingOrder={"url": "a.mp3", "length": True})
        assert "length" not in data["readingOrder"][0]

    def test_unknown_terms_untouched(self, ctx):
        data = _validate(ctx, readingOrder="a.html", extension=[])
        assert data["extension"] == []


class TestNodeRepairs:
    """Tests for localizable string, entity and linked resource repairs."""

    def test_string_without_value(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", name=[{"language": "en"}, "Title"])
        assert data["name"] == [{"value": "Title"}]
        assert strong_messages(diagnostics) == ["Missing value for a Localizable String"]

    def test_string_bad_language_removed(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", name={"value": "X", "language": "en_US"})
        assert data["name"] == [{"value": "X"}]
        assert strong_messages(diagnostics) == ['Invalid BCP47 format for language tag: "en_US"']

    def test_string_bad_direction_removed(self, ctx):
        data = _validate(ctx, readingOrder="a.html", name={"value": "X", "direction": "up"})
        assert data["name"] == [{"value": "X"}]

    def test_entity_without_name_dropped(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", author=[{"type": "Person"}, "Jane"])
        assert [a["name"][0]["value"] for a in data["author"]] == ["Jane"]
        assert strong_messages(diagnostics) == [
            'Missing name for a Person or Organization in "author"'
        ]

    def test_entity_empty_names_filtered(self, ctx):
        data = _validate(ctx, readingOrder="a.html", editor={"name": ["", "Ann"]})
        assert data["editor"][0]["name"] == [{"value": "Ann"}]

    def test_resource_without_url(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", resources=[{"name": "x"}, "b.css"])
        assert [r["url"] for r in data["resources"]] == ["http://example.org/b.css"]
        assert 'URL is missing from a linked resource in "resources"' in strong_messages(diagnostics)

    def test_negative_length_drops_resource(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", resources={"url": "a.mp3", "length": -1})
        assert "resources" not in data
        assert strong_messages(diagnostics) == [
            'Invalid length value (-1) for a linked resource in "resources"'
        ]

    def test_non_numeric_length_removed(self, ctx):
        data = _validate(ctx, readingOrder={"url": "a.mp3", "length": "big"})
        assert data["readingOrder"][0]["url"] == "http://example.org/a.mp3"
        assert "length" not in data["readingOrder"][0]

    def test_bad_resource_duration_removed(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder={"url": "a.mp3", "duration": "1 hour"})
        assert "duration" not in data["readingOrder"][0]
        assert strong_messages(diagnostics) == ['"1 hour" is an incorrect duration value']

    def test_alternates_checked(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder={"url": "a.mp3", "alternate": {"name": "x"}})
        assert "alternate" not in data["readingOrder"][0]
        assert 'URL is missing from a linked resource in "alternate"' in strong_messages(diagnostics)


class TestManifestChecks:
    """Tests for manifest-wide checks."""

    def test_missing_id(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", id="")
        assert "id" not in data
        assert "No id provided" in light_messages(diagnostics)

    def test_bad_dates_removed(self, ctx, diagnostics):
        data = _validate(
            ctx, readingOrder="a.html", dateModified="nope", datePublished="2020-02-01"
        )
        assert "dateModified" not in data
        assert data["datePublished"] == "2020-02-01"
        assert strong_messages(diagnostics) == ['"nope" is an incorrect date string']

    def test_bad_languages_removed(self, ctx):
        data = _validate(ctx, readingOrder="a.html", inLanguage=["en", "en_GB"])
        assert data["inLanguage"] == ["en"]

    def test_bad_global_duration_removed(self, ctx):
        data = _validate(ctx, readingOrder="a.html", duration="long")
        assert "duration" not in data

    def test_access_mode_sufficient(self, ctx, diagnostics):
        item_list = {"type": "ItemList", "itemListElement": ["textual"]}
        data = _validate(ctx, readingOrder="a.html", accessModeSufficient=[item_list, "textual"])
        assert data["accessModeSufficient"] == [item_list]
        assert strong_messages(diagnostics) == ['Value of "accessModeSufficient" is invalid']


class TestUniqueResources:
    """Tests for uniqueResources computation."""

    def test_fragments_collapse(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder=["a.html#x", "a.html#y"])
        assert data["uniqueResources"] == ["http://example.org/a.html"]
        assert light_messages(diagnostics) == ["Duplicate value for http://example.org/a.html#y"]
        # The resources themselves are not deduplicated
        assert len(data["readingOrder"]) == 2

    def test_union_of_reading_order_and_resources(self, ctx):
        data = _validate(
            ctx,
            readingOrder=["a.html", "b.html"],
            resources=["style.css", "a.html", {"url": "c.mp3", "alternate": "c.ogg"}],
        )
        assert data["uniqueResources"] == [
            "http://example.org/a.html",
            "http://example.org/b.html",
            "http://example.org/style.css",
            "http://example.org/c.mp3",
            "http://example.org/c.ogg",
        ]

    def test_get_unique_urls_order(self, ctx, diagnostics):
        resources = [
            Node(NodeKind.LINKED_RESOURCE, url="http://x.org/b"),
            Node(NodeKind.LINKED_RESOURCE, url="http://x.org/a"),
            Node(NodeKind.LINKED_RESOURCE, url="http://x.org/b#2"),
        ]
        assert get_unique_urls(ctx, resources) == ["http://x.org/b", "http://x.org/a"]
        assert len(diagnostics.light_validation_errors) == 1


class TestLinks:
    """Tests for the "links" bounds."""

    def test_link_inside_publication_removed(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", links=["a.html#top"])
        assert "links" not in data
        assert strong_messages(diagnostics) == [
            'http://example.org/a.html#top appears in "links" but is within the bounds of the publication'
        ]

    def test_structural_rel_removed(self, ctx, diagnostics):
        data = _validate(
            ctx, readingOrder="a.html", links={"url": "http://other.org/x", "rel": "cover"}
        )
        assert "links" not in data
        assert strong_messages(diagnostics) == ['Linked Resource in "links" includes "cover"']

    def test_missing_rel_warned(self, ctx, diagnostics):
        data = _validate(ctx, readingOrder="a.html", links="http://other.org/y")
        assert [link["url"] for link in data["links"]] == ["http://other.org/y"]
        assert light_messages(diagnostics) == ['Rel value in "links" not set']


class TestStructuralResources:
    """Tests for contents, pagelist and cover resources."""

    def test_duplicate_cover(self, ctx, diagnostics):
        _validate(
            ctx,
            readingOrder={"url": "a.html", "rel": "cover"},
            resources={"url": "b.html", "rel": "cover"},
        )
        assert light_messages(diagnostics) == [
            'Multiple definition for the structural resource "cover"'
        ]

    def test_cover_image_without_name(self, ctx, diagnostics):
        _validate(
            ctx,
            readingOrder="a.html",
            resources={"url": "c.jpg", "rel": "cover", "encodingFormat": "image/jpeg"},
        )
        assert light_messages(diagnostics) == ["No name provided for a cover page image"]

    def test_cover_image_with_name(self, ctx, diagnostics):
        _validate(
            ctx,
            readingOrder="a.html",
            resources={"url": "c.jpg", "rel": "cover", "encodingFormat": "image/jpeg", "name": "C"},
        )
        assert light_messages(diagnostics) == []


class _RejectingProfile(Profile):
    identifier = "https://example.org/reject"

    def data_validation(self, ctx, data):
        ctx.diagnostics.log_fatal_error("rejected")
        return None


class TestProfileAndCleanup:
    """Tests for the profile hook, empty arrays and idempotence."""

    def test_profile_fatal(self, ctx):
        ctx = replace(ctx, profile=_RejectingProfile())
        assert _validate(ctx, readingOrder="a.html") is None

    def test_remove_empty_arrays(self):
        value = {"a": [], "b": [{"c": [], "d": 1}]}
        assert remove_empty_arrays(value)
        assert value == {"b": [{"d": 1}]}
        assert not remove_empty_arrays([])

    def test_empty_known_arrays_removed(self, ctx):
        data = _validate(ctx, readingOrder="a.html", accessMode=[])
        assert "accessMode" not in data

    def test_idempotent(self, ctx):
        data = _validate(
            ctx,
            readingOrder=["a.html#x", {"url": "b.mp3", "length": "big"}],
            author=[{"type": "Person"}, "Jane"],
            name={"value": "X", "language": "en_US"},
            inLanguage=["en", 3],
            links="a.html",
        )
        once = copy.deepcopy(data)
        again = data_validation(replace(ctx, diagnostics=Diagnostics()), data)
        assert again == once
