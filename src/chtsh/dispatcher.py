"""RequestDispatcher — turns one JSON-RPC line into at most one response.

Every inbound line goes through the same steps:

1. **Parse** — invalid JSON yields a parse error carrying the sentinel id.
2. **Validate** — the envelope must be a JSON-RPC 2.0 request with a method.
3. **Route** — the method name selects a handler; notifications yield no
   response at all.

The dispatcher keeps no state between requests.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from chtsh.config import ServerConfig
from chtsh.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    ChtShError,
    InvalidParamsError,
    MissingParamsError,
    ToolNotFoundError,
)
from chtsh.protocol.models import (
    SENTINEL_ID,
    CallToolParams,
    CallToolResult,
    ChtShArguments,
    JsonRpcRequest,
    JsonRpcResponse,
)
from chtsh.tools import CHT_SH_TOOL, TOOL_NAME
from chtsh.utils.telemetry import (
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from chtsh.fetcher import Fetcher

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

NOTIFICATION_METHODS = frozenset({"initialized", "notifications/initialized"})

Handler = Callable[[JsonRpcRequest], Awaitable[JsonRpcResponse]]


class RequestDispatcher:
    """Routes JSON-RPC requests to the ``cht_sh`` tool and protocol handlers.

    ``handle_line`` returns ``None`` when nothing must be written back.
    """

    def __init__(self, fetcher: Fetcher, config: ServerConfig | None = None) -> None:
        self._fetcher = fetcher
        self._config = config or ServerConfig()
        self._handlers: dict[str, Handler] = {
            "initialize": self._initialize,
            "tools/list": self._list_tools,
            "ping": self._ping,
            "callTool": self._call_tool,
            "tools/call": self._call_tool,
        }

    @property
    def config(self) -> ServerConfig:
        return self._config

    async def handle_line(self, line: str) -> JsonRpcResponse | None:
        """Parse, validate and dispatch a single input line."""
        try:
            raw = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse JSON: %s", exc)
            return JsonRpcResponse.failure(SENTINEL_ID, PARSE_ERROR, "Parse error: Invalid JSON")

        try:
            request = JsonRpcRequest.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Invalid JSON-RPC 2.0 request: %s", _describe(exc))
            return JsonRpcResponse.failure(
                _extract_id(raw),
                INVALID_REQUEST,
                "Invalid Request: Not a valid JSON-RPC 2.0 request",
            )

        try:
            return await self.handle_request(request)
        except Exception as exc:
            logger.exception("Error processing request %s", request.method)
            return JsonRpcResponse.failure(
                SENTINEL_ID, INTERNAL_ERROR, "Internal error", data=str(exc)
            )

    async def handle_request(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        """Dispatch an already-validated request."""
        logger.info("Processing request method: %s", request.method)

        if request.method in NOTIFICATION_METHODS:
            logger.debug("Received %r notification; no response will be sent", request.method)
            return None

        with _tracer.start_as_current_span("chtsh.request") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            span.set_attribute(ATTR_RPC_ID, str(request.response_id))

            handler = self._handlers.get(request.method)
            if handler is None:
                logger.warning("Unknown method: %s", request.method)
                response = JsonRpcResponse.failure(
                    request.response_id,
                    METHOD_NOT_FOUND,
                    f"Method not found: {request.method}",
                )
            else:
                response = await handler(request)

            if response.error is not None:
                span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)
            return response

    async def call_tool(self, params: dict[str, Any] | None) -> str:
        """Validate tool-call ``params`` and run the lookup.

        Raises
        ------
        MissingParamsError
            If *params* is absent.
        ToolNotFoundError
            If the named tool is not ``cht_sh``.
        InvalidParamsError
            If the arguments are malformed or ``query`` is empty.
        FetchError
            If the upstream request fails.
        """
        if params is None:
            raise MissingParamsError

        name = params.get("name")
        if name != TOOL_NAME:
            raise ToolNotFoundError(name)

        try:
            call = CallToolParams.model_validate(params)
        except ValidationError as exc:
            raise InvalidParamsError(_describe(exc)) from exc

        try:
            arguments = ChtShArguments.model_validate(call.arguments or {})
        except ValidationError as exc:
            raise InvalidParamsError(_describe(exc)) from exc
        if not arguments.query:
            raise InvalidParamsError

        logger.debug("Tool call: %s, args: %s", call.name, arguments.model_dump_json())
        return await self._fetcher.fetch(
            arguments.query,
            arguments.language,
            arguments.options or [],
        )

    # -- handlers --------------------------------------------------------

    async def _initialize(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.success(
            request.response_id,
            {
                "protocolVersion": self._config.protocol_version,
                "capabilities": {},
                "serverInfo": {
                    "name": self._config.server_name,
                    "version": self._config.server_version,
                },
            },
        )

    async def _list_tools(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.success(
            request.response_id,
            {"tools": [CHT_SH_TOOL.model_dump(by_alias=True)]},
        )

    async def _ping(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.success(
            request.response_id,
            {"status": "ok", "timestamp": int(time.time() * 1000)},
        )

    async def _call_tool(self, request: JsonRpcRequest) -> JsonRpcResponse:
        request_id = request.response_id
        with _tracer.start_as_current_span("chtsh.tool") as span:
            span.set_attribute(ATTR_TOOL_NAME, str((request.params or {}).get("name")))
            try:
                text = await self.call_tool(request.params)
            except ToolNotFoundError as exc:
                return JsonRpcResponse.failure(request_id, METHOD_NOT_FOUND, str(exc))
            except InvalidParamsError as exc:
                return JsonRpcResponse.failure(request_id, INVALID_PARAMS, str(exc))
            except ChtShError as exc:
                logger.error("Error handling callTool: %s", exc)
                return JsonRpcResponse.failure(request_id, SERVER_ERROR, str(exc))

        return JsonRpcResponse.success(request_id, CallToolResult.from_text(text).model_dump())


def _extract_id(raw: object) -> int | float | str:
    """Best-effort id recovery from an envelope that failed validation."""
    if isinstance(raw, dict):
        request_id = raw.get("id")
        if isinstance(request_id, (int, float, str)) and not isinstance(request_id, bool):
            return request_id
    return SENTINEL_ID


def _describe(exc: ValidationError) -> str:
    """Compact one-line summary of a pydantic validation error."""
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'request'}: {err['msg']}"
        for err in exc.errors()
    )
