"""Immutable profile records consumed by the report engine.

A :class:`Profile` is produced once by acquisition and then only read. Frames
in a :class:`Sample` are ordered innermost (currently executing) first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from profagent.types.base import ProfileKind

#: String identifying one stack location as ``"<function>:<line>"``.
LocationKey = str

#: Accumulated measurement values; slot meaning depends on the profile kind.
ValueVector = List[int]


@dataclass(frozen=True)
class Frame:
    """One stack entry.

    Attributes:
        function: Function name, ``None`` when unknown.
        line: Source line, ``None`` when there is no line information.
        filename: Source file, informational only.
    """

    function: Optional[str]
    line: Optional[int]
    filename: str = ""

    @property
    def key(self) -> LocationKey:
        """Location key, or ``""`` when the frame is unresolved."""
        if not self.function or self.line is None:
            return ""
        return f"{self.function}:{self.line}"


@dataclass(frozen=True)
class Sample:
    """A stack snapshot with its measurement values.

    Attributes:
        frames: Frames from innermost to outermost.
        values: Measurement values, same length for every sample of a profile.
    """

    frames: Tuple[Frame, ...]
    values: Tuple[int, ...]


@dataclass(frozen=True)
class Profile:
    """A named collection of samples.

    Attributes:
        kind: Profile kind, determines slot semantics of sample values.
        samples: Samples in acquisition order.
    """

    kind: ProfileKind
    samples: Tuple[Sample, ...] = ()


@dataclass(frozen=True)
class ReportEntry:
    """One aggregated row of a flat or cumulative report."""

    location: LocationKey
    values: Tuple[int, ...]
