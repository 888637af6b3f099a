"""
Data Models Layer.

This package contains the Pydantic models for the video info response and the
application configuration, plus the session statistics record.
"""

from .config import ClientConfig
from .formats import Format, InfoResponse, StreamingData, VideoDetails
from .stats import DownloadStats

__all__ = [
    "ClientConfig",
    "DownloadStats",
    "Format",
    "InfoResponse",
    "StreamingData",
    "VideoDetails",
]
