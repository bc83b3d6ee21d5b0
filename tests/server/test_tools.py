"""Tests for tool descriptors and argument coercion."""

import jsonschema
import pytest

from profagent.config import DEFAULT_CONFIG, AgentConfig
from profagent.server.tools import PROFILE_TOOL, build_tools, coerce_arguments
from profagent.types import ProfileKind, ViewMode


class TestBuildTools:
    def test_tool_names(self):
        names = [t.name for t in build_tools(DEFAULT_CONFIG)]
        assert names == [
            "heap-profile",
            "goroutine-profile",
            "threadcreate-profile",
            "block-profile",
            "allocs-profile",
            "cpu-profile",
            PROFILE_TOOL,
        ]

    def test_input_schemas_are_valid_json_schema(self):
        for tool in build_tools(DEFAULT_CONFIG):
            jsonschema.Draft7Validator.check_schema(tool.input_schema)

    def test_kind_tools_expose_limit_and_view(self):
        tools = {t.name: t for t in build_tools(DEFAULT_CONFIG)}
        heap = tools["heap-profile"].input_schema["properties"]
        assert heap["limit"]["minimum"] == 100
        assert heap["limit"]["maximum"] == 10000
        assert heap["view"]["enum"] == ["flat", "cum", "graph"]
        assert "duration" not in heap
        assert tools["cpu-profile"].input_schema["properties"]["duration"]["default"] == 10
        assert tools["cpu-profile"].kind is ProfileKind.CPU

    def test_profile_tool_requires_kind(self):
        tool = {t.name: t for t in build_tools(DEFAULT_CONFIG)}[PROFILE_TOOL]
        assert tool.kind is None
        assert tool.input_schema["required"] == ["profile"]
        validator = jsonschema.Draft7Validator(tool.input_schema)
        assert validator.is_valid({"profile": "heap"})
        assert not validator.is_valid({"duration": 5})
        assert not validator.is_valid({"profile": "nope"})

    def test_schema_follows_config(self):
        config = AgentConfig(min_limit=5, max_limit=50)
        heap = build_tools(config)[0].input_schema["properties"]["limit"]
        assert (heap["minimum"], heap["maximum"]) == (5, 50)

    def test_to_dict(self):
        payload = build_tools(DEFAULT_CONFIG)[0].to_dict()
        assert set(payload) == {"name", "description", "inputSchema"}


class TestCoerceArguments:
    def test_defaults(self):
        args = coerce_arguments({}, DEFAULT_CONFIG)
        assert args == {
            "limit": 100,
            "view": ViewMode.FLAT,
            "duration": 10,
            "profile": None,
        }

    @pytest.mark.parametrize(
        "raw, expected",
        [(5, 100), (250.7, 250), (50000, 10000), ("abc", 100), (True, 100), (None, 100)],
    )
    def test_limit(self, raw, expected):
        assert coerce_arguments({"limit": raw}, DEFAULT_CONFIG)["limit"] == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [(0, 1), (5, 5), (100, 60), ("x", 10), (float("nan"), 10)],
    )
    def test_duration(self, raw, expected):
        assert coerce_arguments({"duration": raw}, DEFAULT_CONFIG)["duration"] == expected

    def test_view_fallback(self):
        assert coerce_arguments({"view": "graph"}, DEFAULT_CONFIG)["view"] is ViewMode.GRAPH
        assert coerce_arguments({"view": "weird"}, DEFAULT_CONFIG)["view"] is ViewMode.FLAT
        assert coerce_arguments({"view": 3}, DEFAULT_CONFIG)["view"] is ViewMode.FLAT

    def test_non_mapping_arguments(self):
        assert coerce_arguments(["heap"], DEFAULT_CONFIG)["limit"] == 100
