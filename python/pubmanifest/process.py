"""Manifest processing entry points.

- run_processing_steps(): parse, check the context, choose the profile,
  normalize, validate, add defaults and run the profile (synchronous)
- generate_internal_representation(): the above plus ToC extraction,
  returning a plain JSON-compatible dict
- process_manifest(): discovery from an address, then generation

A fatal problem never raises: the fatal diagnostic is recorded and the
manifest comes back empty ({}).
"""

import json
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from pubmanifest.checks import check_direction_tag, check_language_tag
from pubmanifest.context import ProcessingContext
from pubmanifest.defaults import add_default_values
from pubmanifest.diagnostics import Diagnostics
from pubmanifest.discovery import GenerationArguments, create_http_client, discover_manifest
from pubmanifest.config import get_settings
from pubmanifest.errors import PubManifestError
from pubmanifest.logging import (
    clear_processing_context,
    configure_from_settings,
    get_logger,
    set_processing_context,
)
from pubmanifest.nodes import Node, to_plain
from pubmanifest.normalize import normalize_manifest
from pubmanifest.profiles.base import DEFAULT_PROFILE, Profile
from pubmanifest.toc import generate_toc
from pubmanifest.validate import data_validation

logger = get_logger(__name__)

SCHEMA_CONTEXT = "https://schema.org"
PUB_CONTEXT = "https://www.w3.org/ns/pub-context"


@dataclass
class ProcessResult:
    """Outcome of processing a manifest.

    Attributes:
        manifest: The processed manifest as plain data; {} after a fatal error
        diagnostics: Everything reported along the way
    """

    manifest: dict[str, Any]
    diagnostics: Diagnostics


def _select_profile(
    manifest: dict[str, Any], profiles: Sequence[Profile], diagnostics: Diagnostics
) -> Profile:
    conforms_to = manifest.get("conformsTo")
    if not conforms_to:
        diagnostics.log_light_validation_error("No conformance was set (falling back to default)")
        return DEFAULT_PROFILE

    if not isinstance(conforms_to, list):
        conforms_to = [conforms_to]
    for identifier in conforms_to:
        for profile in profiles:
            if profile.identifier == identifier:
                return profile

    diagnostics.log_light_validation_error("No known conformance was set (falling back to default)")
    return DEFAULT_PROFILE


def _ambient_language_and_direction(
    contexts: list[Any], diagnostics: Diagnostics
) -> tuple[str | None, str | None]:
    """Language and direction declared in @context; later entries win."""
    language = direction = None
    for entry in reversed(contexts):
        if not isinstance(entry, dict):
            continue
        if language is None and entry.get("language"):
            language = entry["language"]
        if direction is None and entry.get("direction"):
            direction = entry["direction"]
        if language is not None and direction is not None:
            break

    if language is not None and not check_language_tag(language, diagnostics):
        language = None
    if direction is not None and not check_direction_tag(direction, diagnostics):
        direction = None
    return language, direction


def run_processing_steps(
    args: GenerationArguments,
    diagnostics: Diagnostics,
    profiles: Sequence[Profile] | None = None,
) -> tuple[ProcessingContext, Node] | None:
    """Turn manifest text into a processed Manifest node.

    Args:
        args: Manifest text, base URL and optional entry document.
        diagnostics: Receives every problem found.
        profiles: Supported profiles; the default profile is always the fallback.

    Returns:
        The context used and the processed manifest, or None after a fatal error.
    """
    profiles = profiles if profiles is not None else [DEFAULT_PROFILE]

    try:
        manifest = json.loads(args.text)
    except (json.JSONDecodeError, RecursionError) as e:
        diagnostics.log_fatal_error(f"JSON parsing error: {e}")
        return None
    if not isinstance(manifest, dict):
        diagnostics.log_fatal_error("The manifest is not a JSON object")
        return None

    if not manifest.get("@context"):
        diagnostics.log_fatal_error("No context provided")
        return None
    contexts = manifest["@context"]
    if not isinstance(contexts, list):
        contexts = [contexts]
    if not (len(contexts) >= 2 and contexts[0] == SCHEMA_CONTEXT and contexts[1] == PUB_CONTEXT):
        diagnostics.log_fatal_error("The required contexts are not provided")
        return None

    profile = _select_profile(manifest, profiles, diagnostics)
    language, direction = _ambient_language_and_direction(contexts, diagnostics)

    ctx = ProcessingContext(
        diagnostics=diagnostics,
        profile=profile,
        base=args.base,
        language=language,
        direction=direction,
        document=args.document,
    )

    processed = normalize_manifest(ctx, manifest)
    processed["profile"] = profile.identifier

    validated = data_validation(ctx, processed)
    if validated is None:
        return None

    completed = add_default_values(ctx, validated)
    if completed is None:
        return None

    return ctx, profile.generate_internal_representation(ctx, completed)


async def generate_internal_representation(
    args: GenerationArguments,
    diagnostics: Diagnostics,
    profiles: Sequence[Profile] | None = None,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Process manifest text and extract its ToC.

    Returns:
        The processed manifest as plain data, with a "toc" entry; {} after a fatal error.
    """
    result = run_processing_steps(args, diagnostics, profiles)
    if result is None:
        return {}

    ctx, manifest = result
    toc = await generate_toc(ctx, manifest, client)
    manifest["toc"] = toc.to_dict() if toc is not None else None
    return to_plain(manifest)


async def process_manifest(
    url: str,
    profiles: Sequence[Profile] | None = None,
    client: httpx.AsyncClient | None = None,
) -> ProcessResult:
    """Discover the manifest at url and process it.

    Never raises for discovery or processing problems; they end up as
    fatal diagnostics with an empty manifest.
    """
    if client is None:
        async with create_http_client() as own_client:
            return await process_manifest(url, profiles, own_client)

    settings = get_settings()
    configure_from_settings(settings)

    diagnostics = Diagnostics()
    set_processing_context(run_id=str(uuid.uuid4()), manifest_url=url)
    logger.info("manifest.processing.started", env=settings.pubmanifest_env.value)
    try:
        try:
            args = await discover_manifest(url, client)
        except PubManifestError as e:
            diagnostics.log_fatal_error(f"The manifest could not be discovered ({e.message})")
            return ProcessResult(manifest={}, diagnostics=diagnostics)
        except Exception as e:
            logger.exception("manifest.discovery.failed")
            diagnostics.log_fatal_error(f"The manifest could not be discovered ({e})")
            return ProcessResult(manifest={}, diagnostics=diagnostics)

        try:
            manifest = await generate_internal_representation(args, diagnostics, profiles, client)
        except Exception as e:
            logger.exception("manifest.processing.failed")
            diagnostics.log_fatal_error(f"Some extra error occurred during generation ({e})")
            manifest = {}

        logger.info(
            "manifest.processing.finished",
            fatal=len(diagnostics.fatal_errors),
            data_removed=len(diagnostics.strong_validation_errors),
            warnings=len(diagnostics.light_validation_errors),
        )
        return ProcessResult(manifest=manifest, diagnostics=diagnostics)
    finally:
        clear_processing_context()
