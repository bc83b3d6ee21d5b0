"""Request boundary: tool descriptors and the stdio JSON-RPC server."""

from profagent.server.server import ProfileServer, ToolResult
from profagent.server.tools import ToolSpec, build_tools, coerce_arguments

__all__ = ["ProfileServer", "ToolResult", "ToolSpec", "build_tools", "coerce_arguments"]
