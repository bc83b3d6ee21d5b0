"""Tests for flat, cumulative and call-graph reports."""

import networkx as nx
import pytest

from profagent.report.views import (
    CUMULATIVE_TITLE,
    FLAT_TITLE,
    build_call_graph,
    render_cumulative,
    render_flat,
    render_graph,
    render_view,
)
from profagent.types import Profile, ProfileKind, ViewMode


@pytest.fixture
def two_sample_profile(make_sample):
    """Two samples with stack [main.a, main.b] and values 10 and 5."""
    return Profile(
        kind=ProfileKind.GOROUTINE,
        samples=(
            make_sample(["main.a:10", "main.b:20"], [10]),
            make_sample(["main.a:10", "main.b:20"], [5]),
        ),
    )


class TestFlatAndCumulative:
    def test_flat_scenario(self, two_sample_profile):
        assert render_flat(two_sample_profile, 10) == (
            "Flat view (direct values) (showing top 10 locations)\n"
            "\n"
            "main.a:10: 15B\n"
        )

    def test_cumulative_matches_flat_except_title(self, make_sample):
        profile = Profile(
            kind=ProfileKind.HEAP,
            samples=(
                make_sample(["x:1", "y:2", "z:3"], [4096, 8192]),
                make_sample(["y:2", "z:3"], [100, 200]),
                make_sample(["x:1"], [1, 1]),
            ),
        )
        flat = render_flat(profile, 10)
        cum = render_cumulative(profile, 10)
        assert cum.replace(CUMULATIVE_TITLE, FLAT_TITLE) == flat
        assert cum.startswith(CUMULATIVE_TITLE)

    def test_inclusive_cumulative_credits_callers(self, two_sample_profile):
        text = render_cumulative(two_sample_profile, 10, inclusive=True)
        assert "main.a:10: 15B\n" in text
        assert "main.b:20: 15B\n" in text

    def test_unresolved_innermost_frames_excluded(self, make_sample):
        profile = Profile(
            kind=ProfileKind.GOROUTINE,
            samples=(
                make_sample(["", "main.a:10"], [1000]),
                make_sample(["main.b:20"], [1]),
            ),
        )
        text = render_flat(profile, 10)
        assert "main.a:10" not in text
        assert text.endswith("main.b:20: 1B\n")

    def test_limit_applies(self, make_sample):
        profile = Profile(
            kind=ProfileKind.GOROUTINE,
            samples=tuple(make_sample([f"f{i}:1"], [i]) for i in range(10)),
        )
        lines = render_flat(profile, 3).splitlines()[2:]
        assert lines == ["f9:1: 9B", "f8:1: 8B", "f7:1: 7B"]

    def test_empty_profile(self):
        text = render_flat(Profile(kind=ProfileKind.HEAP), 100)
        assert text == "Flat view (direct values) (showing top 100 locations)\n\n"


class TestCallGraph:
    def test_graph_scenario(self, two_sample_profile):
        assert render_graph(two_sample_profile, 10) == (
            "Call graph view (top 10 nodes)\n"
            "Each node is followed by its children.\n"
            "\n"
            "Node: main.a:10\n"
            "Values: 15B\n"
            "Children:\n"
            "  main.b:20: 15B\n"
            "\n"
            "Node: main.b:20\n"
            "Values: 15B\n"
            "\n"
        )

    def test_build_call_graph_attributes(self, two_sample_profile):
        graph = build_call_graph(list(two_sample_profile.samples))
        assert isinstance(graph, nx.DiGraph)
        assert graph.nodes["main.a:10"]["values"] == [15]
        assert graph.nodes["main.b:20"]["values"] == [15]
        assert graph.edges["main.a:10", "main.b:20"]["values"] == [15]
        assert graph.number_of_edges() == 1

    def test_recursion_counts_each_occurrence(self, make_sample):
        graph = build_call_graph([make_sample(["a:1", "a:1", "b:2"], [4])])
        assert graph.nodes["a:1"]["values"] == [8]
        assert graph.edges["a:1", "a:1"]["values"] == [4]
        assert graph.edges["a:1", "b:2"]["values"] == [4]

    def test_unresolved_frames_break_edges(self, make_sample):
        graph = build_call_graph([make_sample(["a:1", "", "c:3"], [2])])
        assert set(graph.nodes) == {"a:1", "c:3"}
        assert graph.number_of_edges() == 0

    def test_children_sorted_by_value(self, make_sample):
        profile = Profile(
            kind=ProfileKind.GOROUTINE,
            samples=(
                make_sample(["root:1", "small:2"], [1]),
                make_sample(["root:1", "big:3"], [9]),
            ),
        )
        text = render_graph(profile, 1)
        assert text.count("Node:") == 1
        assert "Node: root:1\nValues: 10B\nChildren:\n  big:3: 9B\n  small:2: 1B\n" in text

    def test_graph_limit(self, make_sample):
        profile = Profile(
            kind=ProfileKind.GOROUTINE,
            samples=(make_sample(["a:1", "b:2", "c:3"], [1]),),
        )
        assert render_graph(profile, 2).count("Node:") == 2


class TestRenderView:
    @pytest.mark.parametrize(
        "view, title",
        [
            ("flat", FLAT_TITLE),
            (ViewMode.FLAT, FLAT_TITLE),
            ("cum", CUMULATIVE_TITLE),
            ("graph", "Call graph view"),
            ("bogus", FLAT_TITLE),
            (None, FLAT_TITLE),
        ],
    )
    def test_dispatch(self, two_sample_profile, view, title):
        assert render_view(two_sample_profile, view, 5).startswith(title)

    def test_inclusive_flag_only_affects_cumulative(self, two_sample_profile):
        flat = render_view(two_sample_profile, "flat", 5, inclusive_cumulative=True)
        assert "main.b:20" not in flat
        cum = render_view(two_sample_profile, "cum", 5, inclusive_cumulative=True)
        assert "main.b:20: 15B" in cum
