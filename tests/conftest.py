"""Global pytest fixtures.

``make_sample`` builds samples from ``"function:line"`` labels (an empty label
is an unresolved frame). ``fake_sampler`` is a scripted stand-in for the
runtime sampler.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

import pytest

from profagent.types import Frame, ProfileKind, Sample


def _frame(label: str) -> Frame:
    if not label:
        return Frame(function=None, line=None)
    name, _, line = label.rpartition(":")
    return Frame(function=name, line=int(line))


def _make_sample(labels: Sequence[str], values: Sequence[int]) -> Sample:
    return Sample(frames=tuple(_frame(x) for x in labels), values=tuple(values))


class FakeSampler:
    """Sampler returning canned data and recording CPU requests."""

    def __init__(self) -> None:
        self.samples: Dict[ProfileKind, List[Sample]] = {}
        self.cpu_data: bytes = b"# kind: cpu\n"
        self.cpu_error: Optional[BaseException] = None
        self.sample_error: Optional[BaseException] = None
        self.cpu_calls: List[float] = []

    def current_samples(self, kind: ProfileKind) -> List[Sample]:
        if self.sample_error is not None:
            raise self.sample_error
        return self.samples.get(kind, [])

    def cpu_profile(self, duration: float) -> bytes:
        self.cpu_calls.append(duration)
        if self.cpu_error is not None:
            raise self.cpu_error
        return self.cpu_data


@pytest.fixture
def make_sample() -> Callable[[Sequence[str], Sequence[int]], Sample]:
    return _make_sample


@pytest.fixture
def fake_sampler() -> FakeSampler:
    return FakeSampler()
