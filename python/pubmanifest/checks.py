"""Value checks for language tags, base directions, durations and dates.

Each check_* function logs a strong validation error on failure, so a
caller only has to decide what to remove.
"""

import re
from typing import Any

from dateutil.parser import isoparse

from pubmanifest.diagnostics import Diagnostics

# Well-formed BCP-47 language tag (grandfathered, langtag or private use)
BCP47_RE = re.compile(
    r"((en-GB-oed|i-ami|i-bnn|i-default|i-enochian|i-hak|i-klingon|i-lux|i-mingo|i-navajo|i-pwn"
    r"|i-tao|i-tay|i-tsu|sgn-BE-FR|sgn-BE-NL|sgn-CH-DE)"
    r"|(art-lojban|cel-gaulish|no-bok|no-nyn|zh-guoyu|zh-hakka|zh-min|zh-min-nan|zh-xiang))"
    r"|((([A-Za-z]{2,3}(-(?P<extlang>[A-Za-z]{3}(-[A-Za-z]{3}){0,2}))?)|[A-Za-z]{4}|[A-Za-z]{5,8})"
    r"(-([A-Za-z]{4}))?"
    r"(-([A-Za-z]{2}|[0-9]{3}))?"
    r"(-([A-Za-z0-9]{5,8}|[0-9][A-Za-z0-9]{3}))*"
    r"(-([0-9A-WY-Za-wy-z](-[A-Za-z0-9]{2,8})+))*"
    r"(-(x(-[A-Za-z0-9]{1,8})+))?)"
    r"|(x(-[A-Za-z0-9]{1,8})+)"
)

DIRECTIONS = frozenset({"ltr", "rtl"})

# At least one digit, with an optional fraction
_NUM = r"(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)"

# ISO 8601 duration, e.g. PT1H30M or P1Y2M3DT4H5M6.5S
# P and T must each be followed by at least one component
DURATION_RE = re.compile(
    rf"P(?=[0-9.T])(?:(?P<years>{_NUM})Y)?(?:(?P<months>{_NUM})M)?(?:(?P<weeks>{_NUM})W)?(?:(?P<days>{_NUM})D)?"
    rf"(?:T(?=[0-9.])(?:(?P<hours>{_NUM})H)?(?:(?P<minutes>{_NUM})M)?(?:(?P<seconds>{_NUM})S)?)?"
)

# Seconds per duration component; years and months use calendar averages
_DURATION_UNITS = {
    "years": 365 * 86400,
    "months": 30 * 86400,
    "weeks": 7 * 86400,
    "days": 86400,
    "hours": 3600,
    "minutes": 60,
    "seconds": 1,
}


def is_language_tag(value: Any) -> bool:
    return isinstance(value, str) and BCP47_RE.fullmatch(value) is not None


def check_language_tag(value: Any, diagnostics: Diagnostics) -> bool:
    if is_language_tag(value):
        return True
    diagnostics.log_strong_validation_error(f'Invalid BCP47 format for language tag: "{value}"')
    return False


def check_direction_tag(value: Any, diagnostics: Diagnostics) -> bool:
    if isinstance(value, str) and value in DIRECTIONS:
        return True
    diagnostics.log_strong_validation_error(f'Invalid base direction tag: "{value}"')
    return False


def check_duration_value(value: Any, diagnostics: Diagnostics) -> bool:
    if isinstance(value, str) and DURATION_RE.fullmatch(value) is not None:
        return True
    diagnostics.log_strong_validation_error(f'"{value}" is an incorrect duration value')
    return False


def duration_to_seconds(value: str) -> float:
    """Convert a well-formed ISO 8601 duration to seconds.

    Raises:
        ValueError: If the value is not a duration.
    """
    match = DURATION_RE.fullmatch(value)
    if match is None:
        raise ValueError(f"Not an ISO 8601 duration: {value!r}")
    total = 0.0
    for unit, seconds in _DURATION_UNITS.items():
        amount = match.group(unit)
        if amount:
            total += float(amount) * seconds
    return total


def is_iso_date(value: Any) -> bool:
    """Check whether value parses as an ISO 8601 date or date-time."""
    if not isinstance(value, str) or not value:
        return False
    try:
        isoparse(value)
    except (ValueError, OverflowError):
        return False
    return True
