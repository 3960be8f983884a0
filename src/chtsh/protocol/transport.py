"""Line transport — newline-delimited messages over text streams.

A transport satisfies the :class:`LineTransport` protocol, providing
``receive``, ``send`` and ``close``.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Protocol, TextIO, runtime_checkable


@runtime_checkable
class LineTransport(Protocol):
    """Abstract line-oriented transport for JSON-RPC messages."""

    async def receive(self) -> str | None: ...
    def send(self, line: str) -> None: ...
    async def close(self) -> None: ...


class StdioTransport:
    """Reads requests from stdin and writes responses to stdout.

    Blocking reads run in a worker thread so the event loop stays free to
    complete in-flight requests. Each ``send`` writes one full line and
    flushes, so concurrent responses never interleave.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._closed = False

    async def receive(self) -> str | None:
        """Read the next line, without its terminator. ``None`` at end of input."""
        if self._closed:
            msg = "Transport closed"
            raise RuntimeError(msg)
        line = await asyncio.to_thread(self._readline)
        if not line:
            return None
        return line.rstrip("\r\n")

    def _readline(self) -> str:
        # Undecodable bytes become U+FFFD so the line still reaches the parser.
        buffer = getattr(self._stdin, "buffer", None)
        if buffer is None:
            return self._stdin.readline()
        return buffer.readline().decode("utf-8", errors="replace")

    def send(self, line: str) -> None:
        """Write a single line to stdout."""
        if self._closed:
            msg = "Transport closed"
            raise RuntimeError(msg)
        self._stdout.write(line + "\n")
        self._stdout.flush()

    async def close(self) -> None:
        self._closed = True
