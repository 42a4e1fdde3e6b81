"""Audiobook profile.

Requirements on top of the generic manifest:
- The reading order is required and may only hold audio resources
- Recommended terms and a cover resource are reported when missing
- Resource durations should add up to the global duration
- A table of contents should be available, either in the entry document
  or through a "contents" resource
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lxml.html import HtmlElement

from pubmanifest.checks import duration_to_seconds
from pubmanifest.logging import get_logger
from pubmanifest.nodes import Node
from pubmanifest.profiles.base import Profile
from pubmanifest.urls import remove_url_fragment

if TYPE_CHECKING:
    from pubmanifest.context import ProcessingContext

logger = get_logger(__name__)

AUDIOBOOK_PROFILE_IDENTIFIER = "https://www.w3.org/TR/audiobooks/"

AUDIOBOOK_TYPE = "Audiobook"

RECOMMENDED_TERMS = (
    "abridged",
    "accessMode",
    "accessModeSufficient",
    "accessibilityFeature",
    "accessibilityHazard",
    "accessibilitySummary",
    "author",
    "dateModified",
    "datePublished",
    "id",
    "inLanguage",
    "name",
    "readBy",
    "readingProgression",
    "resources",
    "url",
)


def _is_audio(resource: Node) -> bool:
    encoding_format = resource.get("encodingFormat")
    return isinstance(encoding_format, str) and encoding_format.startswith("audio/")


def _has_rel(resource: Node, rel: str) -> bool:
    return rel in (resource.get("rel") or [])


class AudiobookProfile(Profile):
    """Profile for audiobooks."""

    identifier = AUDIOBOOK_PROFILE_IDENTIFIER

    def generate_internal_representation(self, ctx: ProcessingContext, processed: Node) -> Node:
        has_toc = ctx.document is not None and ctx.document.find_toc_element() is not None
        if not has_toc:
            has_toc = any(_has_rel(link, "contents") for link in processed.get("resources", []))
        if not has_toc:
            ctx.diagnostics.log_light_validation_error("No table of content found")

        # The entry document belongs to the publication
        if ctx.document is not None and ctx.document.url:
            unique_resources = processed.setdefault("uniqueResources", [])
            url = remove_url_fragment(ctx.document.url)
            if url not in unique_resources:
                unique_resources.append(url)

        return processed

    def data_validation(self, ctx: ProcessingContext, data: Node) -> Node | None:
        diagnostics = ctx.diagnostics

        if "readingOrder" not in data:
            diagnostics.log_fatal_error("No reading order for an audiobook")
            return None

        audio_only = []
        for item in data["readingOrder"]:
            if _is_audio(item):
                audio_only.append(item)
            else:
                diagnostics.log_strong_validation_error(
                    "Link in reading order is not an audio file", item
                )
        if not audio_only:
            diagnostics.log_fatal_error("Empty reading order for an audiobook")
            return None
        data["readingOrder"] = audio_only

        # Only a defaulted type is replaced
        if "type" not in data or "type" in data.defaulted_terms:
            diagnostics.log_light_validation_error(
                "Missing publication type for Audiobooks (set default)"
            )
            data["type"] = [AUDIOBOOK_TYPE]

        for term in RECOMMENDED_TERMS:
            if term not in data:
                diagnostics.log_light_validation_error(f'Term "{term}" is missing from the manifest')

        resources = [*data["readingOrder"], *data.get("resources", [])]
        if not any(_has_rel(item, "cover") for item in resources):
            diagnostics.log_light_validation_error("No cover resource")

        self._check_durations(ctx, data)
        return data

    def get_toc_element(self, ctx: ProcessingContext, manifest: Node) -> HtmlElement | None:
        if ctx.document is None:
            return None
        return ctx.document.find_toc_element()

    def _check_durations(self, ctx: ProcessingContext, data: Node) -> None:
        # Resource durations have already been checked for well-formedness
        total = 0.0
        for resource in data["readingOrder"]:
            if "duration" in resource:
                total += duration_to_seconds(resource["duration"])
            else:
                ctx.diagnostics.log_light_validation_error("No duration set in resource", resource)

        if "duration" in data:
            declared = duration_to_seconds(data["duration"])
            if round(declared * 1000) != round(total * 1000):
                ctx.diagnostics.log_light_validation_error(
                    f"Inconsistent global duration value ({data['duration']})"
                )
                logger.info(
                    "audiobook.duration.mismatch",
                    declared_s=declared,
                    resources_s=total,
                )


AUDIOBOOK_PROFILE = AudiobookProfile()
