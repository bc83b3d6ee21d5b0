"""Tool server speaking JSON-RPC 2.0 over line-delimited stdio.

:class:`ProfileServer` is the request boundary: it coerces tool arguments,
calls the dispatcher, logs each profile error once and turns it into an
error-flagged tool result.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TextIO

from profagent._version import __version__
from profagent.config import DEFAULT_CONFIG, AgentConfig
from profagent.dispatch import ProfileDispatcher
from profagent.errors import ProfileError
from profagent.logging import get_logger
from profagent.server.tools import PROFILE_TOOL, ToolSpec, build_tools, coerce_arguments
from profagent.types.base import ProfileKind

logger = get_logger(__name__)

SERVER_NAME = "profagent"
PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


@dataclass(frozen=True)
class ToolResult:
    """Text payload of a tool call."""

    text: str
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }


def _error_result(message: str) -> ToolResult:
    logger.error(message)
    return ToolResult(text=message, is_error=True)


class ProfileServer:
    """Serve profile tools on top of a dispatcher."""

    def __init__(
        self, dispatcher: ProfileDispatcher, config: AgentConfig = DEFAULT_CONFIG
    ):
        self.dispatcher = dispatcher
        self.config = config
        self._tools: Dict[str, ToolSpec] = {t.name: t for t in build_tools(config)}

    def list_tools(self) -> List[ToolSpec]:
        return list(self._tools.values())

    def call_tool(self, name: str, arguments: Any = None) -> ToolResult:
        """Run tool ``name``; every failure becomes an error result."""
        tool = self._tools.get(name)
        if tool is None:
            return _error_result(f"unknown tool: {name}")

        args = coerce_arguments(arguments, self.config)
        logger.info(f"Tool call: {name}")
        try:
            if tool.kind is None:
                return self._call_profile_tool(args)
            duration = args["duration"] if tool.kind is ProfileKind.CPU else None
            text = self.dispatcher.render(
                tool.kind.value, args["view"], args["limit"], duration
            )
        except ProfileError as exc:
            return _error_result(str(exc))
        return ToolResult(text=text)

    def _call_profile_tool(self, args: Dict[str, Any]) -> ToolResult:
        kind = args["profile"]
        if not isinstance(kind, str):
            return _error_result("profile argument is required and must be a string")
        duration = args["duration"] if kind == ProfileKind.CPU.value else None
        return ToolResult(text=self.dispatcher.dump(kind, duration))

    def handle_message(self, message: Any) -> Optional[Dict[str, Any]]:
        """Process one JSON-RPC message.

        Returns:
            The response object, or ``None`` for notifications.
        """
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            return _rpc_error(None, INVALID_REQUEST, "Invalid Request")

        method = message["method"]
        msg_id = message.get("id")
        params = message.get("params") or {}
        if "id" not in message:
            logger.debug(f"Notification: {method}")
            return None

        if method == "initialize":
            result: Dict[str, Any] = {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": __version__},
            }
        elif method == "ping":
            result = {}
        elif method == "tools/list":
            result = {"tools": [t.to_dict() for t in self.list_tools()]}
        elif method == "tools/call":
            if not isinstance(params, dict) or not isinstance(params.get("name"), str):
                return _rpc_error(msg_id, INVALID_PARAMS, "tools/call requires a tool name")
            result = self.call_tool(params["name"], params.get("arguments")).to_dict()
        else:
            return _rpc_error(msg_id, METHOD_NOT_FOUND, f"Method not found: {method}")
        return {"jsonrpc": "2.0", "id": msg_id, "result": result}

    def serve(self, stdin: TextIO, stdout: TextIO) -> None:
        """Answer newline-delimited JSON-RPC messages until ``stdin`` closes."""
        logger.info(f"{SERVER_NAME} {__version__} serving on stdio")
        for line in stdin:
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError as exc:
                logger.warning(f"Discarding undecodable message: {exc}")
                response: Optional[Dict[str, Any]] = _rpc_error(
                    None, PARSE_ERROR, "Parse error"
                )
            else:
                response = self.handle_message(message)
            if response is not None:
                stdout.write(json.dumps(response) + "\n")
                stdout.flush()
        logger.info("stdin closed, server exiting")


def _rpc_error(msg_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "error": {"code": code, "message": message}}
