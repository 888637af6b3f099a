"""
HTTP transport used by the downloader and the metadata resolver.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Protocol

import aiohttp

from maguro.exceptions import TransportError

log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0"
)


class Transport(Protocol):
    """
    Anything that can GET a URL as a stream of byte chunks.

    Implementations raise `TransportError` for every request-level failure.
    """

    def stream(self, url: str, chunk_size: int) -> AsyncIterator[bytes]:
        """Yields the response body of a GET for `url` in arrival order."""
        ...  # pragma: no cover

    async def fetch(self, url: str) -> bytes:
        """Returns the complete response body of a GET for `url`."""
        ...  # pragma: no cover


class AiohttpTransport:
    """
    A `Transport` backed by a single aiohttp ClientSession.

    Use as an async context manager; the session lives for the duration of the
    `async with` block and is never shared between transports.
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        connect_timeout: float = 15,
        read_timeout: float = 90,
    ):
        self.user_agent = user_agent
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "AiohttpTransport":
        await self._initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            # No total timeout: large media bodies may take arbitrarily long.
            timeout = aiohttp.ClientTimeout(
                total=None,
                sock_connect=self.connect_timeout,
                sock_read=self.read_timeout,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=timeout,
                headers={"User-Agent": self.user_agent},
            )
            log.debug("Opened HTTP session.")
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
            log.debug("HTTP session closed.")

    async def stream(self, url: str, chunk_size: int) -> AsyncIterator[bytes]:
        session = await self._initialize_session()
        try:
            async with session.get(url, allow_redirects=True) as response:
                response.raise_for_status()
                async for chunk in response.content.iter_chunked(chunk_size):
                    yield chunk
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(url, e) from e

    async def fetch(self, url: str) -> bytes:
        session = await self._initialize_session()
        try:
            async with session.get(url, allow_redirects=True) as response:
                response.raise_for_status()
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(url, e) from e
