"""Protocol models — JSON-RPC 2.0 envelopes and MCP tool payloads.

Implements the message shapes exchanged over the stdio channel: requests,
responses and their error object, plus the tool descriptor returned by
``tools/list`` and the arguments/result of a tool call.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, model_validator

# Response id used when the request carried none (or could not be parsed).
SENTINEL_ID = "0"

RequestId = StrictInt | StrictFloat | StrictStr

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request or notification."""

    jsonrpc: Literal["2.0"]
    method: StrictStr = Field(min_length=1)
    id: RequestId | None = None
    params: dict[str, Any] | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None

    @property
    def response_id(self) -> int | float | str:
        """The id a response to this request must carry."""
        return SENTINEL_ID if self.id is None else self.id


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message.

    Exactly one of ``result`` and ``error`` is set.
    """

    jsonrpc: Literal["2.0"] = "2.0"
    id: int | float | str = SENTINEL_ID
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _one_of_result_or_error(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "response must carry exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, request_id: int | float | str, result: dict[str, Any]) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(
        cls,
        request_id: int | float | str,
        code: int,
        message: str,
        data: Any = None,
    ) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError(code=code, message=message, data=data))

    def to_line(self) -> str:
        """Serialize to a single compact JSON line (without the newline)."""
        return self.model_dump_json(exclude_none=True)


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ToolDefinition(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = {"populate_by_name": True}

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")


class CallToolParams(BaseModel):
    """``params`` of a ``callTool`` request."""

    name: StrictStr
    arguments: dict[str, Any] | None = None


class ChtShArguments(BaseModel):
    """Arguments accepted by the ``cht_sh`` tool."""

    query: StrictStr = ""
    language: StrictStr | None = None
    options: list[StrictStr] | None = None


class TextContent(BaseModel):
    """A text content block in a tool result."""

    type: Literal["text"] = "text"
    text: str


class CallToolResult(BaseModel):
    """The ``result`` of a successful tool call."""

    content: list[TextContent]

    @classmethod
    def from_text(cls, text: str) -> CallToolResult:
        return cls(content=[TextContent(text=text)])
