"""Conversion of interpreter frames into profile frames."""

from __future__ import annotations

from types import FrameType
from typing import List, Optional, Tuple

from profagent.types.dto import Frame


def frame_record(frame: FrameType) -> Frame:
    """Describe one interpreter frame as ``<module>.<qualname>`` at its current line."""
    code = frame.f_code
    qualname = getattr(code, "co_qualname", code.co_name)
    module = frame.f_globals.get("__name__")
    function = f"{module}.{qualname}" if module else qualname
    return Frame(function=function, line=frame.f_lineno, filename=code.co_filename)


def capture_stack(frame: Optional[FrameType], max_depth: int) -> Tuple[Frame, ...]:
    """Walk ``frame`` outwards, innermost first, keeping at most ``max_depth`` frames."""
    stack: List[Frame] = []
    while frame is not None and len(stack) < max_depth:
        stack.append(frame_record(frame))
        frame = frame.f_back
    return tuple(stack)
