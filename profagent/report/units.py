"""Human-scaled formatting of profile measurement values.

Byte magnitudes use binary units with strict thresholds: a value is shown in
a unit only when it is *greater* than that unit, so exactly 1024 stays
``"1024B"``. Durations are nanosecond counts rendered the way Go's
``time.Duration`` prints them (``1.5s``, ``2m3s``, ``250µs``).
"""

from __future__ import annotations

from typing import List, Sequence

from profagent.types.base import ProfileKind

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024
_TB = _GB * 1024

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000


def format_scalar(value: int) -> str:
    """Render a byte-style magnitude.

    Examples:
        1024 -> "1024B"; 1025 -> "1.00KB"; 3 * 1024**3 -> "3.00GB"; -5 -> "-5B".
    """
    if value > _TB:
        return f"{value / _TB:.2f}TB"
    if value > _GB:
        return f"{value / _GB:.2f}GB"
    if value > _MB:
        return f"{value / _MB:.2f}MB"
    if value > _KB:
        return f"{value / _KB:.2f}KB"
    return f"{int(value)}B"


def _fraction(value: int, scale: int) -> str:
    whole, rest = divmod(value, scale)
    digits = str(rest).rjust(len(str(scale)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def format_duration(nanos: int) -> str:
    """Render a nanosecond count as a duration string.

    Examples:
        0 -> "0s"; 1500 -> "1.5µs"; 12_000_000 -> "12ms"; 90 * 10**9 -> "1m30s".
    """
    nanos = int(nanos)
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    u = abs(nanos)

    if u < _NS_PER_US:
        return f"{sign}{u}ns"
    if u < _NS_PER_MS:
        return f"{sign}{_fraction(u, _NS_PER_US)}µs"
    if u < _NS_PER_S:
        return f"{sign}{_fraction(u, _NS_PER_MS)}ms"

    total_seconds, frac_ns = divmod(u, _NS_PER_S)
    hours, rem = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rem, 60)
    text = _fraction(seconds * _NS_PER_S + frac_ns, _NS_PER_S) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{text}"
    if minutes:
        return f"{sign}{minutes}m{text}"
    return f"{sign}{text}"


def _format_slot(index: int, value: int, kind: ProfileKind) -> str:
    if kind is ProfileKind.HEAP:
        if index == 0:
            return f"{format_scalar(value)} in use"
        if index == 1:
            return f"{format_scalar(value)} total alloc"
    elif kind is ProfileKind.BLOCK:
        if index == 0:
            return f"{int(value)} contentions"
        if index == 1:
            return f"{format_duration(value)} delay"
    elif kind is ProfileKind.CPU:
        if index == 0:
            return f"{format_duration(value)} CPU time"
    return format_scalar(value)


def format_vector(values: Sequence[int], kind: ProfileKind) -> str:
    """Render every slot of ``values`` according to ``kind``.

    Args:
        values: Measurement values of one report row.
        kind: Profile kind that defines the slot meanings.

    Returns:
        Slots joined with ``", "``, or ``"no values"`` for an empty vector.
    """
    if not values:
        return "no values"
    kind = ProfileKind(kind)
    parts: List[str] = [_format_slot(i, v, kind) for i, v in enumerate(values)]
    return ", ".join(parts)
