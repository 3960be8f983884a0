"""Server — the stdio read/handle/write loop.

In the default ordered mode each line is handled to completion before the
next one is read, so responses leave in request order.  In concurrent mode
every line gets its own task and responses are written as they complete.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from chtsh.dispatcher import RequestDispatcher
from chtsh.fetcher import ChtShFetcher
from chtsh.protocol.transport import StdioTransport

if TYPE_CHECKING:
    from chtsh.config import ServerConfig
    from chtsh.protocol.transport import LineTransport

logger = logging.getLogger(__name__)


class Server:
    """Drives a :class:`RequestDispatcher` over a :class:`LineTransport`.

    Usage::

        async with ChtShFetcher() as fetcher:
            server = Server(RequestDispatcher(fetcher), StdioTransport())
            await server.serve()
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        transport: LineTransport,
        *,
        concurrent: bool = False,
    ) -> None:
        self._dispatcher = dispatcher
        self._transport = transport
        self._concurrent = concurrent
        self._tasks: set[asyncio.Task[None]] = set()

    async def serve(self) -> None:
        """Process lines until the input stream closes."""
        asyncio.get_running_loop().set_exception_handler(_log_async_failure)
        mode = "concurrent" if self._concurrent else "ordered"
        logger.info("cht.sh MCP server starting (%s mode)", mode)

        try:
            while True:
                line = await self._transport.receive()
                if line is None:
                    break
                if not line.strip():
                    continue

                if self._concurrent:
                    task = asyncio.create_task(self._process(line))
                    self._tasks.add(task)
                    task.add_done_callback(self._on_task_done)
                else:
                    await self._process(line)

            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
        finally:
            await self._transport.close()
            logger.info("Input stream closed. Shutting down.")

    async def _process(self, line: str) -> None:
        logger.debug("Received: %s", line)
        response = await self._dispatcher.handle_line(line)
        if response is None:
            logger.debug("No response to send (notification handled)")
            return
        payload = response.to_line()
        logger.debug("Sending: %s", payload)
        self._transport.send(payload)

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled error while processing a line", exc_info=exc)


def _log_async_failure(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
    exc = context.get("exception")
    logger.error("Unhandled async failure: %s", context.get("message", "unknown"), exc_info=exc)


async def run_stdio(config: ServerConfig, transport: LineTransport | None = None) -> None:
    """Serve the ``cht_sh`` tool over stdio (or *transport*) until input closes."""
    async with ChtShFetcher(
        config.base_url,
        user_agent=config.user_agent,
        timeout=config.timeout,
    ) as fetcher:
        dispatcher = RequestDispatcher(fetcher, config)
        server = Server(dispatcher, transport or StdioTransport(), concurrent=config.concurrent)
        await server.serve()
