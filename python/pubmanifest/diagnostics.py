"""Diagnostics collector.

Processing never raises for data problems. Each problem is recorded in one
of three buckets:

- Fatal errors: processing stopped and the manifest is empty
- Warnings with data removal: a value was wrong and has been deleted
- Warnings: something is suspicious or missing, nothing was removed

Every entry is also emitted as a structured log event.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

from pubmanifest.logging import get_logger
from pubmanifest.nodes import to_plain

logger = get_logger(__name__)

FATAL_ERRORS = "Fatal errors"
STRONG_VALIDATION_ERRORS = "Warnings with data removal"
LIGHT_VALIDATION_ERRORS = "Warnings"


@dataclass(frozen=True)
class LogEntry:
    """One recorded problem.

    Attributes:
        message: Human-readable description
        problematic_object: Snapshot of the offending value, if any
    """

    message: str
    problematic_object: Any = None

    def to_dict(self) -> dict[str, Any]:
        entry: dict[str, Any] = {"Error message": self.message}
        if self.problematic_object is not None:
            entry["Problematic Object"] = self.problematic_object
        return entry


@dataclass
class Diagnostics:
    """Accumulates fatal, strong and light diagnostics for one processing run."""

    fatal_errors: list[LogEntry] = field(default_factory=list)
    strong_validation_errors: list[LogEntry] = field(default_factory=list)
    light_validation_errors: list[LogEntry] = field(default_factory=list)

    def log_fatal_error(self, message: str, obj: Any = None) -> None:
        self.fatal_errors.append(_entry(message, obj))
        logger.error("manifest.diagnostic.fatal", message=message)

    def log_strong_validation_error(self, message: str, obj: Any = None) -> None:
        self.strong_validation_errors.append(_entry(message, obj))
        logger.warning("manifest.diagnostic.data_removed", message=message)

    def log_light_validation_error(self, message: str, obj: Any = None) -> None:
        self.light_validation_errors.append(_entry(message, obj))
        logger.info("manifest.diagnostic.warning", message=message)

    @property
    def has_fatal_errors(self) -> bool:
        return len(self.fatal_errors) > 0

    def is_empty(self) -> bool:
        return not (
            self.fatal_errors or self.strong_validation_errors or self.light_validation_errors
        )

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            FATAL_ERRORS: [entry.to_dict() for entry in self.fatal_errors],
            STRONG_VALIDATION_ERRORS: [entry.to_dict() for entry in self.strong_validation_errors],
            LIGHT_VALIDATION_ERRORS: [entry.to_dict() for entry in self.light_validation_errors],
        }


def _entry(message: str, obj: Any) -> LogEntry:
    # Values keep being mutated after logging; keep what was seen at the time
    return LogEntry(message=message, problematic_object=copy.deepcopy(to_plain(obj)))
