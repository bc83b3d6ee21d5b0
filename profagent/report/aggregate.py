"""Folding samples into per-location value totals.

Aggregation is element-wise addition, so totals do not depend on the order in
which samples are visited. The mappings returned here have no meaningful
iteration order; use :func:`top_entries` before display.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from profagent.types.dto import Frame, LocationKey, ReportEntry, Sample, ValueVector

KeyPolicy = Callable[[Sample], LocationKey]


def location_key(frames: Sequence[Frame]) -> LocationKey:
    """Key of the first frame of ``frames``, ``""`` when there is none."""
    if not frames:
        return ""
    return frames[0].key


def innermost_key(sample: Sample) -> LocationKey:
    """Key policy of the flat and cumulative views: the executing frame."""
    return location_key(sample.frames)


def accumulate(target: ValueVector, values: Sequence[int]) -> None:
    """Add ``values`` into ``target`` over the indices both vectors have."""
    for i in range(min(len(target), len(values))):
        target[i] += values[i]


def aggregate(
    samples: Iterable[Sample], key_of: KeyPolicy = innermost_key
) -> Dict[LocationKey, ValueVector]:
    """Sum sample values per location key.

    Args:
        samples: Samples to fold.
        key_of: Maps a sample to its location key; samples mapped to ``""``
            are skipped.

    Returns:
        Mapping from location key to accumulated values. The first sample
        seen for a key fixes the vector length.
    """
    totals: Dict[LocationKey, ValueVector] = {}
    for sample in samples:
        key = key_of(sample)
        if not key:
            continue
        existing = totals.get(key)
        if existing is None:
            totals[key] = list(sample.values)
        else:
            accumulate(existing, sample.values)
    return totals


def aggregate_inclusive(samples: Iterable[Sample]) -> Dict[LocationKey, ValueVector]:
    """Sum each sample into every distinct location on its stack.

    A location appearing several times in one stack (recursion) is counted
    once for that sample.
    """
    totals: Dict[LocationKey, ValueVector] = {}
    for sample in samples:
        seen = set()
        for frame in sample.frames:
            key = frame.key
            if not key or key in seen:
                continue
            seen.add(key)
            existing = totals.get(key)
            if existing is None:
                totals[key] = list(sample.values)
            else:
                accumulate(existing, sample.values)
    return totals


def rank_key(location: LocationKey, values: Sequence[int]) -> Tuple[int, LocationKey]:
    """Sort key: slot 0 descending, then location ascending."""
    return (-(values[0] if values else 0), location)


def top_entries(
    totals: Dict[LocationKey, Sequence[int]], limit: int
) -> List[ReportEntry]:
    """Select the ``limit`` highest entries by slot 0.

    Ties on slot 0 are ordered by location key so output is reproducible.
    """
    ranked = sorted(totals.items(), key=lambda item: rank_key(*item))
    return [
        ReportEntry(location=loc, values=tuple(vals))
        for loc, vals in ranked[: max(limit, 0)]
    ]
