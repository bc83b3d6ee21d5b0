"""Statistical CPU sampling of all interpreter threads.

A background thread polls ``sys._current_frames()`` at a fixed interval. On
each poll every observed thread is credited with the CPU time it consumed
since the previous poll, as reported per OS thread by ``psutil``, so threads
blocked in waits or I/O accrue nothing. The sampler thread and any explicitly
excluded threads (normally the one waiting for the result) are not sampled.
"""

from __future__ import annotations

import sys
import threading
from typing import Any, Collection, Dict, Optional, Tuple

import psutil

from profagent.logging import get_logger
from profagent.runtime.stacks import capture_stack
from profagent.types.base import ProfileKind
from profagent.types.dto import Frame, Profile, Sample

logger = get_logger(__name__)


def _native_ids() -> Dict[int, int]:
    """Map Python thread identifiers to OS thread identifiers."""
    return {
        t.ident: t.native_id
        for t in threading.enumerate()
        if t.ident is not None and t.native_id is not None
    }


class StackSampler:
    """Collect a CPU profile between :meth:`start` and :meth:`stop`."""

    def __init__(
        self,
        interval: float = 0.01,
        max_depth: int = 64,
        exclude: Collection[int] = (),
        process: Optional[Any] = None,
    ):
        """Initialize the sampler.

        Args:
            interval: Seconds between two polls.
            max_depth: Frames kept per stack.
            exclude: Thread identifiers never sampled.
            process: Object with a psutil-style ``threads()`` method; defaults
                to ``psutil.Process()`` for the current process.
        """
        self.interval = interval
        self.max_depth = max_depth
        self._exclude = set(exclude)
        self._process = process if process is not None else psutil.Process()
        self._totals: Dict[Tuple[Frame, ...], int] = {}
        self._cpu_seen: Dict[int, int] = {}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.polls = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _thread_cpu_ns(self) -> Dict[int, int]:
        return {
            t.id: int((t.user_time + t.system_time) * 1_000_000_000)
            for t in self._process.threads()
        }

    def reset_baseline(self) -> None:
        """Treat CPU time consumed so far as already accounted for."""
        self._cpu_seen = self._thread_cpu_ns()

    def start(self) -> None:
        if self.running:
            raise RuntimeError("StackSampler already started")
        self.reset_baseline()
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="profagent-cpu-sampler", daemon=True
        )
        self._thread.start()
        logger.debug(f"CPU sampling started at {self.interval:.4f}s interval")

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
        logger.debug(
            f"CPU sampling stopped after {self.polls} polls, {len(self._totals)} stacks"
        )

    def sample_once(self) -> None:
        """Credit each sampled thread's CPU time since the last poll to its stack.

        Threads first seen after the baseline are credited with all their CPU
        time. Threads psutil does not report are skipped.
        """
        own = threading.get_ident()
        cpu_now = self._thread_cpu_ns()
        native = _native_ids()
        for ident, frame in sys._current_frames().items():
            if ident == own or ident in self._exclude:
                continue
            tid = native.get(ident)
            if tid is None or tid not in cpu_now:
                continue
            delta = cpu_now[tid] - self._cpu_seen.get(tid, 0)
            if delta <= 0:
                continue
            stack = capture_stack(frame, self.max_depth)
            if stack:
                self._totals[stack] = self._totals.get(stack, 0) + delta
        self._cpu_seen = cpu_now
        self.polls += 1

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.sample_once()

    def profile(self) -> Profile:
        """Samples collected so far, values ``[cpu_ns]``."""
        samples = tuple(
            Sample(frames=stack, values=(nanos,))
            for stack, nanos in self._totals.items()
        )
        return Profile(kind=ProfileKind.CPU, samples=samples)
