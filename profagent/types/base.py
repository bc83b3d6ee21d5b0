"""Enumerations for profile kinds and report views."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ProfileKind(str, Enum):
    """Profile kinds that can be requested.

    Names are case-sensitive and match the wire-level ``profile`` parameter.
    """

    #: Live heap allocations (in-use bytes, live blocks).
    HEAP = "heap"
    #: Stacks of every running thread.
    GOROUTINE = "goroutine"
    #: Stacks that started new threads.
    THREADCREATE = "threadcreate"
    #: Lock contention (contentions, delay).
    BLOCK = "block"
    #: Allocation sites (blocks, bytes).
    ALLOCS = "allocs"
    #: Sampled CPU time collected over a duration.
    CPU = "cpu"

    @classmethod
    def from_string(cls, value: str) -> "ProfileKind":
        """Parse a kind name.

        Args:
            value: Exact kind name, e.g. ``"heap"``.

        Returns:
            The matching ProfileKind.

        Raises:
            ValueError: If ``value`` is not a known kind.
        """
        for member in cls:
            if member.value == value:
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown profile kind {value!r}. Valid kinds are: {valid}")


class ViewMode(str, Enum):
    """Report shapes produced by the view renderer."""

    FLAT = "flat"
    CUM = "cum"
    GRAPH = "graph"

    @classmethod
    def parse(cls, value: Any) -> "ViewMode":
        """Return the view for ``value``, falling back to FLAT when unrecognized."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        return cls.FLAT
