"""Per-call processing context.

Everything a processing step needs besides the data itself: the ambient
language and direction declared in @context, the base URL for relative
references, the optional HTML entry document, the chosen profile and the
diagnostics sink. One value is built per run and threaded explicitly
through the normalizer, validator, defaults and ToC extraction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pubmanifest.diagnostics import Diagnostics

if TYPE_CHECKING:
    from pubmanifest.html import HtmlDocument
    from pubmanifest.profiles.base import Profile


@dataclass(frozen=True)
class ProcessingContext:
    """Ambient state for one processing run.

    Attributes:
        diagnostics: Where problems are recorded
        profile: The conformance profile chosen for the run
        base: Base URL used to resolve relative URLs (None if unknown)
        language: Ambient BCP-47 language tag (None if not declared)
        direction: Ambient base direction, "ltr" or "rtl" (None if not declared)
        document: The HTML entry point, if the manifest was discovered through one
    """

    diagnostics: Diagnostics
    profile: Profile
    base: str | None = None
    language: str | None = None
    direction: str | None = None
    document: HtmlDocument | None = None
