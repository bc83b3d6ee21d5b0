"""Tool descriptors exposed by the profile server.

Each profile kind has its own tool taking ``limit`` and ``view``; the CPU
tool also takes ``duration``. The single ``profile`` tool selects the kind
through an argument and returns the whole profile as folded stacks.

Input schemas are JSON Schema documents advertised to clients. Arguments are
not rejected against them: :func:`coerce_arguments` replaces missing or
malformed optional values with their defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from profagent.config import AgentConfig
from profagent.types.base import ProfileKind, ViewMode

PROFILE_TOOL = "profile"

_DESCRIPTIONS = {
    ProfileKind.HEAP: "Output heap memory profile data",
    ProfileKind.GOROUTINE: "Output thread stack traces",
    ProfileKind.THREADCREATE: "Output thread creation profile data",
    ProfileKind.BLOCK: "Output blocking operation profile data",
    ProfileKind.ALLOCS: "Output memory allocation sampling data",
    ProfileKind.CPU: "Output CPU profile data",
}


@dataclass(frozen=True)
class ToolSpec:
    """A callable tool.

    Attributes:
        name: Tool name used in ``tools/call``.
        description: Human-readable summary.
        input_schema: JSON Schema of the arguments object.
        kind: Profile kind served by the tool, ``None`` for the ``profile`` tool.
    """

    name: str
    description: str
    input_schema: Dict[str, Any]
    kind: Optional[ProfileKind] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


def tool_name(kind: ProfileKind) -> str:
    return f"{kind.value}-profile"


def _duration_property(config: AgentConfig) -> Dict[str, Any]:
    return {
        "type": "number",
        "description": "Duration of CPU profiling in seconds",
        "default": config.default_duration,
        "minimum": config.min_duration,
        "maximum": config.max_duration,
    }


def _kind_tool(kind: ProfileKind, config: AgentConfig) -> ToolSpec:
    properties: Dict[str, Any] = {
        "limit": {
            "type": "number",
            "description": "Maximum number of locations to show in results",
            "default": config.default_limit,
            "minimum": config.min_limit,
            "maximum": config.max_limit,
        },
        "view": {
            "type": "string",
            "description": (
                "View mode for profile data (flat: direct values, cum: cumulative "
                "values including children, graph: call graph)"
            ),
            "default": ViewMode.FLAT.value,
            "enum": [m.value for m in ViewMode],
        },
    }
    if kind is ProfileKind.CPU:
        properties["duration"] = _duration_property(config)
    return ToolSpec(
        name=tool_name(kind),
        description=_DESCRIPTIONS[kind],
        input_schema={"type": "object", "properties": properties},
        kind=kind,
    )


def _profile_tool(config: AgentConfig) -> ToolSpec:
    return ToolSpec(
        name=PROFILE_TOOL,
        description=(
            "Output full profile data: every sample with its complete stack, "
            "as folded stacks (outer;...;inner values)"
        ),
        input_schema={
            "type": "object",
            "properties": {
                "profile": {
                    "type": "string",
                    "description": (
                        "The type of profile to output (e.g., heap, goroutine, "
                        "threadcreate, block, allocs, cpu)"
                    ),
                    "enum": [k.value for k in ProfileKind],
                },
                "duration": _duration_property(config),
            },
            "required": ["profile"],
        },
    )


def build_tools(config: AgentConfig) -> List[ToolSpec]:
    """All tools, per-kind tools first."""
    tools = [_kind_tool(kind, config) for kind in ProfileKind]
    tools.append(_profile_tool(config))
    return tools


def coerce_arguments(arguments: Any, config: AgentConfig) -> Dict[str, Any]:
    """Apply defaults and ranges to raw tool arguments.

    Never fails: unusable values fall back to their defaults.

    Returns:
        Dictionary with ``limit`` (int), ``view`` (ViewMode), ``duration``
        (int seconds) and ``profile`` (raw value or ``None``).
    """
    if not isinstance(arguments, dict):
        arguments = {}
    return {
        "limit": config.clamp_limit(arguments.get("limit")),
        "view": ViewMode.parse(arguments.get("view")),
        "duration": config.clamp_duration(arguments.get("duration")),
        "profile": arguments.get("profile"),
    }
