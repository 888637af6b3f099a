"""
Media Retrieval Layer.

This package is responsible for moving bytes: the HTTP transport and the
ordered, streaming downloader that writes them to an output sink.
"""

from .downloader import DEFAULT_CHUNK_SIZE, Downloader, Sink
from .transport import AiohttpTransport, Transport

__all__ = ["DEFAULT_CHUNK_SIZE", "AiohttpTransport", "Downloader", "Sink", "Transport"]
