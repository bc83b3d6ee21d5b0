"""Folded-stack serialization of profiles.

The format is the collapsed-stack text used by FlameGraph tooling, extended
to carry several values per record::

    # kind: block
    app.main:10;app.worker:42;threading.Lock.acquire:7 3 1250000

Frames run outermost to innermost, separated by ``;``, each written as
``function:line``. The stack is followed by one or more integer values.
Lines starting with ``#`` are ``key: value`` headers; blank lines are
ignored.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

from profagent.types.base import ProfileKind
from profagent.types.dto import Frame, Profile, Sample


def _frame_label(frame: Frame) -> str:
    name = frame.function or "?"
    if frame.line is None:
        return name
    return f"{name}:{frame.line}"


def _parse_frame(label: str) -> Frame:
    name, sep, line = label.rpartition(":")
    if not sep or not line.isdigit():
        name, line = label, ""
    function = name if name and name != "?" else None
    return Frame(function=function, line=int(line) if line else None)


def dump_folded(profile: Profile) -> bytes:
    """Serialize ``profile``; samples without frames are omitted."""
    lines = [f"# kind: {profile.kind.value}"]
    for sample in profile.samples:
        if not sample.frames or not sample.values:
            continue
        stack = ";".join(_frame_label(f) for f in reversed(sample.frames))
        values = " ".join(str(int(v)) for v in sample.values)
        lines.append(f"{stack} {values}")
    return ("\n".join(lines) + "\n").encode("utf-8")


def _split_record(line: str, lineno: int) -> Tuple[str, Tuple[int, ...]]:
    tokens = line.split(" ")
    values: List[int] = []
    # the first token always belongs to the stack
    while len(tokens) > 1:
        try:
            values.append(int(tokens[-1]))
        except ValueError:
            break
        tokens.pop()
    if not values:
        raise ValueError(f"line {lineno}: record has no values: {line!r}")
    values.reverse()
    return " ".join(tokens), tuple(values)


def parse_folded(
    data: Union[bytes, str], kind: Optional[ProfileKind] = None
) -> Profile:
    """Decode folded text into a Profile.

    Args:
        data: Serialized profile, bytes are decoded as UTF-8.
        kind: Profile kind; when omitted the ``kind`` header is used, then
            ``cpu``.

    Returns:
        Decoded profile with frames innermost first.

    Raises:
        ValueError: On undecodable bytes, records without values, records
            whose value count differs from the first record, or an unknown
            ``kind`` header.
    """
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    headers: Dict[str, str] = {}
    samples: List[Sample] = []
    width: Optional[int] = None

    for lineno, raw in enumerate(text.splitlines(), 1):
        line = raw.strip()
        if not line:
            continue
        if line.startswith("#"):
            key, _, value = line[1:].partition(":")
            headers[key.strip()] = value.strip()
            continue

        stack, values = _split_record(line, lineno)
        if width is None:
            width = len(values)
        elif len(values) != width:
            raise ValueError(
                f"line {lineno}: expected {width} values, found {len(values)}"
            )
        frames = tuple(_parse_frame(label) for label in reversed(stack.split(";")))
        samples.append(Sample(frames=frames, values=values))

    if kind is None:
        kind = ProfileKind.from_string(headers.get("kind", ProfileKind.CPU.value))
    return Profile(kind=ProfileKind(kind), samples=tuple(samples))
