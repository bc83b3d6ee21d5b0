"""Always-on recorders for thread creation and lock contention.

The interpreter has no built-in equivalent of these profiles, so they are
collected by instrumentation: :class:`ThreadCreateRecorder` wraps
``threading.Thread.start`` while installed, and :class:`TrackedLock` reports
to a :class:`BlockRecorder` whenever acquiring it has to wait.
"""

from __future__ import annotations

import sys
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from profagent.logging import get_logger
from profagent.runtime.stacks import capture_stack
from profagent.types.dto import Frame, Sample

logger = get_logger(__name__)


class StackRecorder:
    """Thread-safe per-stack value totals."""

    def __init__(self, max_depth: int = 64):
        self.max_depth = max_depth
        self._lock = threading.Lock()
        self._totals: Dict[Tuple[Frame, ...], List[int]] = {}

    def record(self, stack: Tuple[Frame, ...], values: Sequence[int]) -> None:
        """Add ``values`` to the totals of ``stack``."""
        with self._lock:
            existing = self._totals.get(stack)
            if existing is None:
                self._totals[stack] = list(values)
            else:
                for i, v in enumerate(values):
                    existing[i] += v

    def samples(self) -> List[Sample]:
        """Snapshot of the recorded totals, one sample per distinct stack."""
        with self._lock:
            return [
                Sample(frames=stack, values=tuple(values))
                for stack, values in self._totals.items()
            ]

    def clear(self) -> None:
        with self._lock:
            self._totals.clear()


class ThreadCreateRecorder(StackRecorder):
    """Count thread starts per creating stack."""

    def __init__(self, max_depth: int = 64):
        super().__init__(max_depth)
        self._original_start: Optional[Callable[..., Any]] = None
        self._wrapper: Optional[Callable[..., Any]] = None

    @property
    def installed(self) -> bool:
        return self._wrapper is not None

    def install(self) -> None:
        """Wrap ``threading.Thread.start``; repeated calls are no-ops."""
        if self.installed:
            return
        original = threading.Thread.start
        recorder = self

        def start(thread: threading.Thread, *args: Any, **kwargs: Any) -> Any:
            # a wrapper left in place by uninstall() only forwards
            if recorder._wrapper is start:
                recorder.record(
                    capture_stack(sys._getframe(1), recorder.max_depth), (1,)
                )
            return original(thread, *args, **kwargs)

        start.__wrapped__ = original  # type: ignore[attr-defined]
        self._original_start = original
        self._wrapper = start
        threading.Thread.start = start  # type: ignore[method-assign]
        logger.debug("Thread creation recording installed")

    def uninstall(self) -> None:
        """Stop recording and restore ``threading.Thread.start``.

        The original is only restored while this recorder's wrapper is still
        the installed ``start``. If something wrapped it afterwards, the
        chain is left intact and this wrapper stops recording.
        """
        if self._wrapper is None:
            return
        if threading.Thread.start is self._wrapper:
            threading.Thread.start = self._original_start  # type: ignore[method-assign]
            logger.debug("Thread creation recording removed")
        else:
            logger.warning(
                "threading.Thread.start was wrapped again after install; "
                "leaving it in place with recording disabled"
            )
        self._original_start = None
        self._wrapper = None


class BlockRecorder(StackRecorder):
    """Contention events as ``[contentions, delay_ns]`` per waiting stack."""

    def record_contention(
        self, delay_ns: int, stack: Optional[Tuple[Frame, ...]] = None
    ) -> None:
        """Record one contention; the caller's stack is captured when not given."""
        if stack is None:
            stack = capture_stack(sys._getframe(1), self.max_depth)
        self.record(stack, (1, int(delay_ns)))


class TrackedLock:
    """Mutex that reports waits to a BlockRecorder.

    An acquisition that succeeds immediately records nothing.
    """

    def __init__(self, recorder: BlockRecorder):
        self._recorder = recorder
        self._lock = threading.Lock()

    def acquire(self, blocking: bool = True, timeout: float = -1) -> bool:
        if self._lock.acquire(False):
            return True
        if not blocking:
            return False
        start = time.perf_counter_ns()
        acquired = self._lock.acquire(True, timeout)
        if acquired:
            self._recorder.record_contention(
                time.perf_counter_ns() - start,
                capture_stack(sys._getframe(1), self._recorder.max_depth),
            )
        return acquired

    def release(self) -> None:
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()

    def __enter__(self) -> "TrackedLock":
        self.acquire()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.release()
