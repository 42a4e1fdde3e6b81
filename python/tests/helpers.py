"""Test helpers for building manifests and reading diagnostics.

Provides:
- Manifest text builders with the required @context
- Message extraction from Diagnostics buckets
"""

import json
from typing import Any

from pubmanifest.diagnostics import Diagnostics, LogEntry
from pubmanifest.discovery import GenerationArguments
from pubmanifest.html import HtmlDocument

SCHEMA_CONTEXT = "https://schema.org"
PUB_CONTEXT = "https://www.w3.org/ns/pub-context"
REQUIRED_CONTEXT = [SCHEMA_CONTEXT, PUB_CONTEXT]

DEFAULT_BASE = "http://example.org/"


def manifest_text(context: list[Any] | None = None, **terms: Any) -> str:
    """Serialize a manifest with the required @context (or the given one)."""
    manifest = {"@context": context if context is not None else REQUIRED_CONTEXT}
    manifest.update(terms)
    return json.dumps(manifest)


def make_args(
    text: str, base: str | None = DEFAULT_BASE, document: HtmlDocument | None = None
) -> GenerationArguments:
    return GenerationArguments(text=text, base=base, document=document)


def messages(entries: list[LogEntry]) -> list[str]:
    return [entry.message for entry in entries]


def fatal_messages(diagnostics: Diagnostics) -> list[str]:
    return messages(diagnostics.fatal_errors)


def strong_messages(diagnostics: Diagnostics) -> list[str]:
    return messages(diagnostics.strong_validation_errors)


def light_messages(diagnostics: Diagnostics) -> list[str]:
    return messages(diagnostics.light_validation_errors)
