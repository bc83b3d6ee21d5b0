"""Acquisition of raw profiles from the running interpreter.

- ``sampler``: the ``Sampler`` capability and ``RuntimeSampler``.
- ``cpu``: statistical stack sampling over a duration.
- ``recorders``: thread-creation and lock-contention recorders.
- ``folded``: the folded-stack wire format for serialized profiles.
"""

from profagent.runtime.folded import dump_folded, parse_folded
from profagent.runtime.recorders import BlockRecorder, ThreadCreateRecorder, TrackedLock
from profagent.runtime.sampler import RuntimeSampler, Sampler, default_sampler

__all__ = [
    "BlockRecorder",
    "RuntimeSampler",
    "Sampler",
    "ThreadCreateRecorder",
    "TrackedLock",
    "default_sampler",
    "dump_folded",
    "parse_folded",
]
