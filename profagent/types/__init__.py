"""Shared types for profagent.

Enumerations for profile kinds and view modes, plus the immutable records
(frames, samples, profiles) that flow from acquisition into the report
engine. Contains no runtime logic beyond parsing helpers.
"""

from profagent.types.base import ProfileKind, ViewMode
from profagent.types.dto import (
    Frame,
    LocationKey,
    Profile,
    ReportEntry,
    Sample,
    ValueVector,
)

__all__ = [
    # Enums
    "ProfileKind",
    "ViewMode",
    # Aliases
    "LocationKey",
    "ValueVector",
    # Records
    "Frame",
    "Sample",
    "Profile",
    "ReportEntry",
]
