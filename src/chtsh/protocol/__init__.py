"""Protocol layer — JSON-RPC 2.0 envelopes and the stdio line transport."""

from chtsh.protocol.models import (
    CallToolParams,
    CallToolResult,
    ChtShArguments,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    TextContent,
    ToolDefinition,
)
from chtsh.protocol.transport import LineTransport, StdioTransport

__all__ = [
    "CallToolParams",
    "CallToolResult",
    "ChtShArguments",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "LineTransport",
    "StdioTransport",
    "TextContent",
    "ToolDefinition",
]
