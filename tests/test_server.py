"""Tests for the Server loop over in-memory streams."""

import asyncio
import io
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from chtsh.config import ServerConfig
from chtsh.dispatcher import RequestDispatcher
from chtsh.protocol.transport import StdioTransport
from chtsh.server import Server, run_stdio


def _lines(*messages: object) -> io.StringIO:
    return io.StringIO("".join(
        (m if isinstance(m, str) else json.dumps(m)) + "\n" for m in messages
    ))


def _output(out: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in out.getvalue().splitlines()]


def _fetcher(text: str = "docs") -> MagicMock:
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value=text)
    return fetcher


async def _serve(stdin: io.TextIOBase, fetcher: MagicMock | None = None, **kwargs) -> list[dict]:
    out = io.StringIO()
    server = Server(
        RequestDispatcher(fetcher or _fetcher()),
        StdioTransport(stdin=stdin, stdout=out),
        **kwargs,
    )
    await server.serve()
    return _output(out)


class TestServerOrdered:
    async def test_handshake_session(self) -> None:
        responses = await _serve(_lines(
            {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}},
            {"jsonrpc": "2.0", "method": "initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "tools/list"},
            {"jsonrpc": "2.0", "id": 3, "method": "ping"},
        ))
        assert [r["id"] for r in responses] == [1, 2, 3]
        assert responses[1]["result"]["tools"][0]["name"] == "cht_sh"

    async def test_notification_writes_nothing(self) -> None:
        responses = await _serve(_lines({"jsonrpc": "2.0", "method": "initialized"}))
        assert responses == []

    async def test_blank_lines_are_skipped(self) -> None:
        responses = await _serve(_lines("", "   ", {"jsonrpc": "2.0", "id": 1, "method": "ping"}))
        assert len(responses) == 1

    async def test_parse_error_then_recovery(self) -> None:
        responses = await _serve(_lines("garbage", {"jsonrpc": "2.0", "id": 1, "method": "ping"}))
        assert responses[0]["error"]["code"] == -32700
        assert responses[1]["result"]["status"] == "ok"

    async def test_invalid_utf8_line_gets_parse_error(self) -> None:
        stdin = io.TextIOWrapper(
            io.BytesIO(b'\xff\xfe garbage\n{"jsonrpc":"2.0","id":1,"method":"ping"}\n'),
            encoding="utf-8",
        )
        responses = await _serve(stdin)
        assert responses[0]["id"] == "0"
        assert responses[0]["error"]["code"] == -32700
        assert responses[1]["id"] == 1
        assert responses[1]["result"]["status"] == "ok"

    async def test_responses_keep_request_order(self) -> None:
        async def slow_then_fast(query: str, language: str | None, options: list[str]) -> str:
            await asyncio.sleep(0.05 if query == "slow" else 0)
            return query

        fetcher = MagicMock()
        fetcher.fetch = AsyncMock(side_effect=slow_then_fast)
        responses = await _serve(_lines(
            {"jsonrpc": "2.0", "id": 1, "method": "callTool",
             "params": {"name": "cht_sh", "arguments": {"query": "slow"}}},
            {"jsonrpc": "2.0", "id": 2, "method": "callTool",
             "params": {"name": "cht_sh", "arguments": {"query": "fast"}}},
        ), fetcher)
        assert [r["id"] for r in responses] == [1, 2]

    async def test_closes_transport_at_eof(self) -> None:
        transport = MagicMock()
        transport.receive = AsyncMock(return_value=None)
        transport.close = AsyncMock()
        await Server(RequestDispatcher(_fetcher()), transport).serve()
        transport.close.assert_awaited_once()


class TestServerConcurrent:
    async def test_all_responses_written(self) -> None:
        responses = await _serve(_lines(
            {"jsonrpc": "2.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "id": 2, "method": "callTool",
             "params": {"name": "cht_sh", "arguments": {"query": "map"}}},
            {"jsonrpc": "2.0", "method": "initialized"},
        ), concurrent=True)
        assert sorted(r["id"] for r in responses) == [1, 2]

    async def test_waits_for_in_flight_requests(self) -> None:
        async def slow(query: str, language: str | None, options: list[str]) -> str:
            await asyncio.sleep(0.05)
            return "late"

        fetcher = MagicMock()
        fetcher.fetch = AsyncMock(side_effect=slow)
        responses = await _serve(_lines(
            {"jsonrpc": "2.0", "id": 1, "method": "callTool",
             "params": {"name": "cht_sh", "arguments": {"query": "map"}}},
        ), fetcher, concurrent=True)
        assert responses[0]["result"]["content"][0]["text"] == "late"

    async def test_failed_task_is_logged_not_fatal(self, caplog) -> None:
        dispatcher = MagicMock()
        dispatcher.handle_line = AsyncMock(side_effect=[RuntimeError("boom"), None])
        out = io.StringIO()
        server = Server(
            dispatcher,
            StdioTransport(stdin=_lines("first", "second"), stdout=out),
            concurrent=True,
        )
        await server.serve()
        assert dispatcher.handle_line.await_count == 2
        assert "Unhandled error while processing a line" in caplog.text


class TestRunStdio:
    async def test_serves_with_real_fetcher(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=f"sheet for {request.url.path}")

        mock_transport = httpx.MockTransport(handler)
        out = io.StringIO()
        transport = StdioTransport(
            stdin=_lines({"jsonrpc": "2.0", "id": 1, "method": "callTool",
                          "params": {"name": "cht_sh",
                                     "arguments": {"query": "map", "language": "python"}}}),
            stdout=out,
        )

        real_client = httpx.AsyncClient

        def client_factory(**kwargs: object) -> httpx.AsyncClient:
            kwargs["transport"] = mock_transport
            return real_client(**kwargs)

        with patch("chtsh.fetcher.httpx.AsyncClient", side_effect=client_factory):
            await run_stdio(ServerConfig(), transport)

        responses = _output(out)
        assert responses[0]["result"]["content"][0]["text"] == "sheet for /python/map"
