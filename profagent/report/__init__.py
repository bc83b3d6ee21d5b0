"""Aggregation and rendering of profiles into text reports.

- ``units``: unit-aware formatting of measurement values.
- ``aggregate``: location keys and per-location folding of samples.
- ``views``: flat, cumulative and call-graph reports.
"""

from profagent.report.aggregate import (
    aggregate,
    aggregate_inclusive,
    innermost_key,
    location_key,
    top_entries,
)
from profagent.report.units import format_duration, format_scalar, format_vector
from profagent.report.views import (
    build_call_graph,
    render_cumulative,
    render_flat,
    render_graph,
    render_view,
)

__all__ = [
    "aggregate",
    "aggregate_inclusive",
    "innermost_key",
    "location_key",
    "top_entries",
    "format_duration",
    "format_scalar",
    "format_vector",
    "build_call_graph",
    "render_cumulative",
    "render_flat",
    "render_graph",
    "render_view",
]
