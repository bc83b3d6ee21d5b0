"""Flat, cumulative and call-graph reports over a profile.

Every function here is a pure function of its arguments: calls allocate their
own working maps and graphs, so they may run concurrently.

The cumulative view keys samples by their innermost frame, exactly like the
flat view, so both produce the same rows under different titles. Pass
``inclusive=True`` to :func:`render_cumulative` for totals that include
callees.
"""

from __future__ import annotations

from typing import Any, List

import networkx as nx

from profagent.logging import get_logger
from profagent.report.aggregate import (
    accumulate,
    aggregate,
    aggregate_inclusive,
    innermost_key,
    rank_key,
    top_entries,
)
from profagent.report.units import format_vector
from profagent.types.base import ProfileKind, ViewMode
from profagent.types.dto import LocationKey, Profile, ReportEntry, Sample

logger = get_logger(__name__)

FLAT_TITLE = "Flat view (direct values)"
CUMULATIVE_TITLE = "Cumulative view (including children)"


def format_results(
    title: str, entries: List[ReportEntry], limit: int, kind: ProfileKind
) -> str:
    """Render ranked entries as a titled list of ``location: values`` lines."""
    lines = [f"{title} (showing top {limit} locations)", ""]
    for entry in entries:
        lines.append(f"{entry.location}: {format_vector(entry.values, kind)}")
    return "\n".join(lines) + "\n"


def render_flat(profile: Profile, limit: int) -> str:
    """Top locations by self value (innermost frame only)."""
    totals = aggregate(profile.samples, innermost_key)
    logger.debug(
        f"Flat view: {len(profile.samples)} samples folded into {len(totals)} locations"
    )
    return format_results(FLAT_TITLE, top_entries(totals, limit), limit, profile.kind)


def render_cumulative(profile: Profile, limit: int, inclusive: bool = False) -> str:
    """Cumulative report.

    Args:
        profile: Profile to report on.
        limit: Maximum number of rows.
        inclusive: Credit every location on a stack instead of only the
            innermost one.
    """
    if inclusive:
        totals = aggregate_inclusive(profile.samples)
    else:
        totals = aggregate(profile.samples, innermost_key)
    return format_results(
        CUMULATIVE_TITLE, top_entries(totals, limit), limit, profile.kind
    )


def _add_values(store: dict, values: tuple) -> None:
    existing = store.get("values")
    if existing is None:
        store["values"] = list(values)
    else:
        accumulate(existing, values)


def build_call_graph(samples: List[Sample]) -> nx.DiGraph:
    """Build a weighted caller -> callee graph.

    Each frame occurrence adds the sample's values to its node, so a function
    appearing twice on one stack is credited twice. Each adjacent pair of
    frames adds the values to the edge from frame ``i`` to frame ``i + 1``.
    Unresolved frames contribute neither node values nor edges.

    Returns:
        Directed graph whose nodes and edges carry a ``values`` list.
    """
    graph = nx.DiGraph()
    for sample in samples:
        frames = sample.frames
        for i, frame in enumerate(frames):
            caller = frame.key
            if not caller:
                continue
            if caller not in graph:
                graph.add_node(caller)
            _add_values(graph.nodes[caller], sample.values)

            if i + 1 >= len(frames):
                continue
            callee = frames[i + 1].key
            if not callee:
                continue
            if not graph.has_edge(caller, callee):
                graph.add_edge(caller, callee)
            _add_values(graph.edges[caller, callee], sample.values)
    return graph


def _ranked(items: Any) -> List[tuple]:
    return sorted(items, key=lambda item: rank_key(item[0], item[1]))


def render_graph(profile: Profile, limit: int) -> str:
    """Call-graph report: top nodes, each followed by its callees."""
    graph = build_call_graph(list(profile.samples))
    logger.debug(
        f"Graph view: {graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges"
    )

    lines = [
        f"Call graph view (top {limit} nodes)",
        "Each node is followed by its children.",
        "",
    ]
    nodes = _ranked(
        (name, data.get("values", [])) for name, data in graph.nodes(data=True)
    )
    for name, values in nodes[: max(limit, 0)]:
        lines.append(f"Node: {name}")
        lines.append(f"Values: {format_vector(values, profile.kind)}")
        children = _ranked(
            (callee, data["values"]) for _, callee, data in graph.out_edges(name, data=True)
        )
        if children:
            lines.append("Children:")
            for callee, child_values in children:
                lines.append(f"  {callee}: {format_vector(child_values, profile.kind)}")
        lines.append("")
    return "\n".join(lines) + "\n"


def render_view(
    profile: Profile, view: Any, limit: int, inclusive_cumulative: bool = False
) -> str:
    """Render ``profile`` in the requested view.

    Unrecognized view names fall back to the flat view.
    """
    mode = ViewMode.parse(view)
    if mode is ViewMode.CUM:
        return render_cumulative(profile, limit, inclusive=inclusive_cumulative)
    if mode is ViewMode.GRAPH:
        return render_graph(profile, limit)
    return render_flat(profile, limit)
