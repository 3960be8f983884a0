"""ChtShFetcher — retrieves cheat-sheet text from cht.sh."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import httpx

from chtsh.config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT
from chtsh.errors import FetchError
from chtsh.utils.telemetry import ATTR_LANGUAGE, ATTR_QUERY, ATTR_URL, get_tracer

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


@runtime_checkable
class Fetcher(Protocol):
    """Anything that can turn a cheat-sheet query into text."""

    async def fetch(
        self,
        query: str,
        language: str | None = None,
        options: Sequence[str] = (),
    ) -> str: ...


def build_url(
    base_url: str,
    query: str,
    language: str | None = None,
    options: Sequence[str] = (),
) -> str:
    """Build ``{base}{language}/{query}?{options}``.

    Segments are concatenated verbatim; callers must pass URL-safe tokens.
    """
    url = base_url
    if language:
        url += f"{language}/"
    url += query
    if options:
        url += "?" + "&".join(options)
    return url


class ChtShFetcher:
    """Fetches plain-text cheat sheets over HTTP.

    Satisfies the :class:`Fetcher` protocol.

    Usage::

        async with ChtShFetcher() as fetcher:
            text = await fetcher.fetch("map", language="python")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ChtShFetcher:
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self._user_agent},
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "ChtShFetcher must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    async def fetch(
        self,
        query: str,
        language: str | None = None,
        options: Sequence[str] = (),
    ) -> str:
        """GET the cheat sheet for *query* and return the response body."""
        url = build_url(self._base_url, query, language, options)
        with _tracer.start_as_current_span("chtsh.fetch") as span:
            span.set_attribute(ATTR_QUERY, query)
            span.set_attribute(ATTR_URL, url)
            if language:
                span.set_attribute(ATTR_LANGUAGE, language)

            logger.debug("Fetching from URL: %s", url)
            try:
                response = await self._http().get(url)
                response.raise_for_status()
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.warning("Error fetching from cht.sh: %s", exc)
                raise FetchError(str(exc)) from exc
            return response.text
