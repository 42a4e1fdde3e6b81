"""Publication manifest processing.

Entry points are re-exported here; everything else is importable from
its own module.
"""

from pubmanifest.diagnostics import Diagnostics
from pubmanifest.discovery import GenerationArguments
from pubmanifest.process import (
    ProcessResult,
    generate_internal_representation,
    process_manifest,
    run_processing_steps,
)
from pubmanifest.profiles import AUDIOBOOK_PROFILE, DEFAULT_PROFILE, Profile

__all__ = [
    "AUDIOBOOK_PROFILE",
    "DEFAULT_PROFILE",
    "Diagnostics",
    "GenerationArguments",
    "ProcessResult",
    "Profile",
    "generate_internal_representation",
    "process_manifest",
    "run_processing_steps",
]
