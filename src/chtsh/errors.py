"""Shared error types and JSON-RPC error codes."""

# JSON-RPC 2.0 reserved codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Server-defined code for tool failures
SERVER_ERROR = -32000


class ChtShError(Exception):
    """Base error for all chtsh failures."""


class FetchError(ChtShError):
    """The upstream cht.sh request failed (transport error or non-2xx status)."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to fetch from cht.sh: {detail}")


class ToolNotFoundError(ChtShError):
    """Requested tool is not the one this server exposes."""

    def __init__(self, name: object) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}")


class InvalidParamsError(ChtShError):
    """Tool arguments failed validation."""

    def __init__(self, detail: str = "query is required") -> None:
        self.detail = detail
        super().__init__(f"Invalid params: {detail}")


class MissingParamsError(ChtShError):
    """A tool call arrived without ``params``."""

    def __init__(self) -> None:
        super().__init__("Missing parameters")
