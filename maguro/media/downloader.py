"""
Streams one or more URLs, strictly in order, into a caller-supplied sink.
"""

import inspect
import io
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from maguro.dash.manifest import Representation
from maguro.dash.segments import segment_urls
from maguro.exceptions import SinkWriteError, TransportError, TransportFailureError

from .transport import Transport

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 131072  # 128 KB

ChunkCallback = Callable[[bytes], Awaitable[None] | None]


class Sink(Protocol):
    """
    A byte destination that only ever receives sequential appends.

    `write` may be synchronous (regular files, `io.BytesIO`) or a coroutine
    (`aiofiles` handles). A `flush` method, if present, is called after each URL.
    """

    def write(self, data: bytes) -> Any: ...  # pragma: no cover


async def _call(func: Callable[..., Any], *args: Any) -> Any:
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class Downloader:
    """
    The retrieval engine.

    Every URL is fetched with one GET, its chunks written to the sink in arrival
    order, and the sink flushed before the next URL is requested. There is no
    retry and no parallelism; the first failure aborts the whole download.
    """

    def __init__(self, transport: Transport, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.transport = transport
        self.chunk_size = chunk_size

    async def download(
        self,
        urls: Sequence[str],
        sink: Sink,
        on_chunk: ChunkCallback | None = None,
        total_size: int | None = None,
    ) -> int:
        """
        Downloads `urls` in order into `sink`.

        Args:
            urls: The URLs to fetch; their bodies are concatenated.
            sink: Destination for the bytes.
            on_chunk: Called with each chunk as it arrives, before it is written.
                Any exception it raises aborts the download and propagates as is.
            total_size: Expected size, used only for log output.

        Returns:
            The number of bytes written.

        Raises:
            TransportFailureError: If fetching a URL fails; carries its index.
            SinkWriteError: If the sink rejects a write or flush, including a
                sink the caller has already closed.
        """
        written = 0
        expected = str(total_size) if total_size is not None else "Unknown"

        for index, url in enumerate(urls):
            log.debug(f"Fetching segment {index + 1}/{len(urls)}: {url}")
            chunks = self.transport.stream(url, self.chunk_size)
            try:
                async for chunk in chunks:
                    if on_chunk is not None:
                        await _call(on_chunk, chunk)
                    try:
                        await _call(sink.write, chunk)
                    except (OSError, ValueError) as e:
                        raise SinkWriteError(index, e) from e
                    written += len(chunk)
                    log.debug(f"Wrote {written} of {expected} bytes")
            except TransportError as e:
                cause = e.cause if isinstance(e.cause, BaseException) else e
                raise TransportFailureError(index, url, cause) from e
            finally:
                if hasattr(chunks, "aclose"):
                    await chunks.aclose()

            if hasattr(sink, "flush"):
                try:
                    await _call(sink.flush)
                except (OSError, ValueError) as e:
                    raise SinkWriteError(index, e) from e

        return written

    async def download_representation(
        self,
        representation: Representation,
        sink: Sink,
        on_chunk: ChunkCallback | None = None,
    ) -> int:
        """Downloads every segment of a DASH representation into `sink`."""
        return await self.download(segment_urls(representation), sink, on_chunk)

    async def to_bytes(
        self, urls: Sequence[str], on_chunk: ChunkCallback | None = None
    ) -> bytes:
        """Downloads `urls` into memory and returns the concatenated body."""
        buffer = io.BytesIO()
        await self.download(urls, buffer, on_chunk)
        return buffer.getvalue()
