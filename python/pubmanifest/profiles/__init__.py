"""Conformance profiles."""

from pubmanifest.profiles.audiobooks import AUDIOBOOK_PROFILE, AudiobookProfile
from pubmanifest.profiles.base import DEFAULT_PROFILE, DefaultProfile, Profile

__all__ = [
    "AUDIOBOOK_PROFILE",
    "AudiobookProfile",
    "DEFAULT_PROFILE",
    "DefaultProfile",
    "Profile",
]
