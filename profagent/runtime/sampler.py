"""Sampler capability and its implementation for the running interpreter.

The dispatcher depends only on the :class:`Sampler` protocol: non-CPU kinds
are read as an accumulated sample set at any time, CPU profiles are collected
over a duration and returned serialized.
"""

from __future__ import annotations

import sys
import threading
import time
import tracemalloc
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from profagent.config import DEFAULT_CONFIG, AgentConfig
from profagent.errors import SamplerBusy
from profagent.logging import get_logger
from profagent.runtime.cpu import StackSampler
from profagent.runtime.folded import dump_folded
from profagent.runtime.recorders import BlockRecorder, ThreadCreateRecorder, TrackedLock
from profagent.runtime.stacks import capture_stack
from profagent.types.base import ProfileKind
from profagent.types.dto import Frame, Sample

logger = get_logger(__name__)


class Sampler(Protocol):
    """Source of raw profile data."""

    def current_samples(self, kind: ProfileKind) -> Sequence[Sample]:
        """Accumulated samples of a non-CPU kind."""
        ...

    def cpu_profile(self, duration: float) -> bytes:
        """Sample CPU for ``duration`` seconds and return a folded profile."""
        ...


Stack = Tuple[Frame, ...]


def _traceback_frames(traceback: Iterable[tracemalloc.Frame]) -> Stack:
    # tracemalloc orders frames oldest first
    return tuple(
        Frame(function=f.filename, line=f.lineno, filename=f.filename)
        for f in reversed(list(traceback))
    )


class AllocationLedger:
    """Running allocation totals per traceback, built from successive snapshots.

    tracemalloc only reports live memory. Growth of a traceback's live block
    count and size between two snapshots is added to its totals, so the
    totals are a lower bound of what was allocated there since tracing
    started. Freed tracebacks keep their totals.
    """

    def __init__(self) -> None:
        #: ``(blocks, bytes)`` allocated per stack
        self.totals: Dict[Stack, Tuple[int, int]] = {}
        self._last: Dict[Stack, Tuple[int, int]] = {}

    def update(
        self, statistics: Iterable[tracemalloc.Statistic]
    ) -> Dict[Stack, Tuple[int, int]]:
        """Fold one snapshot into the totals.

        Returns:
            Live ``(blocks, bytes)`` per stack in this snapshot.
        """
        live: Dict[Stack, Tuple[int, int]] = {}
        for stat in statistics:
            frames = _traceback_frames(stat.traceback)
            count, size = live.get(frames, (0, 0))
            live[frames] = (count + stat.count, size + stat.size)

        for frames, (count, size) in live.items():
            last_count, last_size = self._last.get(frames, (0, 0))
            blocks, nbytes = self.totals.get(frames, (0, 0))
            self.totals[frames] = (
                blocks + max(count - last_count, 0),
                nbytes + max(size - last_size, 0),
            )
        self._last = live
        return live

    def clear(self) -> None:
        self.totals.clear()
        self._last = {}


class RuntimeSampler:
    """Sampler backed by tracemalloc, thread stacks and profagent recorders.

    Heap and allocation profiles need ``tracemalloc``; thread creation needs
    the start hook. Both are enabled by :meth:`install`.

    Heap samples carry ``[live bytes, total bytes]`` and allocs samples
    ``[total blocks, total bytes]``, where totals come from an
    :class:`AllocationLedger` updated on every heap or allocs request.
    """

    def __init__(
        self,
        config: AgentConfig = DEFAULT_CONFIG,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.thread_creates = ThreadCreateRecorder(config.max_stack_depth)
        self.blocks = BlockRecorder(config.max_stack_depth)
        self._sleep = sleep
        self._cpu_lock = threading.Lock()
        self._started_tracemalloc = False
        self._alloc_lock = threading.Lock()
        self._alloc_ledger = AllocationLedger()

    def install(self) -> None:
        """Start tracemalloc and the thread-creation hook."""
        if not tracemalloc.is_tracing():
            tracemalloc.start(self.config.heap_traceback_frames)
            with self._alloc_lock:
                self._alloc_ledger.clear()
            self._started_tracemalloc = True
        self.thread_creates.install()
        logger.info("Runtime sampling installed")

    def uninstall(self) -> None:
        """Undo :meth:`install`; tracemalloc is only stopped if we started it."""
        self.thread_creates.uninstall()
        if self._started_tracemalloc and tracemalloc.is_tracing():
            tracemalloc.stop()
        self._started_tracemalloc = False
        logger.info("Runtime sampling removed")

    def new_lock(self) -> TrackedLock:
        """Lock whose contention shows up in the ``block`` profile."""
        return TrackedLock(self.blocks)

    def current_samples(self, kind: Union[ProfileKind, str]) -> List[Sample]:
        """Return the accumulated samples of ``kind``.

        Raises:
            KeyError: If ``kind`` is unknown or is the CPU kind.
        """
        try:
            kind = ProfileKind(kind)
        except ValueError:
            raise KeyError(kind) from None

        if kind is ProfileKind.HEAP:
            return self._allocation_samples(bytes_first=True)
        if kind is ProfileKind.ALLOCS:
            return self._allocation_samples(bytes_first=False)
        if kind is ProfileKind.GOROUTINE:
            return self._thread_samples()
        if kind is ProfileKind.THREADCREATE:
            return self.thread_creates.samples()
        if kind is ProfileKind.BLOCK:
            return self.blocks.samples()
        raise KeyError(kind.value)

    def cpu_profile(self, duration: float) -> bytes:
        """Sample every other thread for ``duration`` seconds.

        Raises:
            SamplerBusy: If another CPU profile is being collected.
        """
        if not self._cpu_lock.acquire(blocking=False):
            raise SamplerBusy("cpu profiling already in use")
        try:
            sampler = StackSampler(
                interval=self.config.cpu_sample_interval,
                max_depth=self.config.max_stack_depth,
                exclude={threading.get_ident()},
            )
            sampler.start()
            try:
                self._sleep(duration)
            finally:
                sampler.stop()
            return dump_folded(sampler.profile())
        finally:
            self._cpu_lock.release()

    def _thread_samples(self) -> List[Sample]:
        samples = []
        for _ident, frame in sys._current_frames().items():
            stack = capture_stack(frame, self.config.max_stack_depth)
            samples.append(Sample(frames=stack, values=(1,)))
        return samples

    def _allocation_samples(self, bytes_first: bool) -> List[Sample]:
        if not tracemalloc.is_tracing():
            logger.debug("tracemalloc is not tracing; allocation profile is empty")
            return []
        snapshot = tracemalloc.take_snapshot().filter_traces(
            [tracemalloc.Filter(False, tracemalloc.__file__)]
        )
        with self._alloc_lock:
            live = self._alloc_ledger.update(snapshot.statistics("traceback"))
            totals = dict(self._alloc_ledger.totals)

        samples = []
        for frames, (total_blocks, total_bytes) in totals.items():
            if bytes_first:
                values = (live.get(frames, (0, 0))[1], total_bytes)
            else:
                values = (total_blocks, total_bytes)
            samples.append(Sample(frames=frames, values=values))
        return samples


def default_sampler(config: Optional[AgentConfig] = None) -> RuntimeSampler:
    """Create and install a RuntimeSampler."""
    sampler = RuntimeSampler(config or DEFAULT_CONFIG)
    sampler.install()
    return sampler
