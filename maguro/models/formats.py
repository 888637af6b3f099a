"""
Pydantic models for the flat format catalog returned by the video info endpoint.

Field aliases are the upstream API's wire names and must not be changed.
`Format` compares, orders and hashes by `itag` alone.
"""

from datetime import timedelta
from functools import total_ordering
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from maguro.media.downloader import ChunkCallback, Downloader, Sink
from maguro.media.transport import AiohttpTransport, Transport


def _to_timedelta(value: Any, unit: str) -> timedelta | None:
    if value is None or isinstance(value, timedelta):
        return value
    return timedelta(**{unit: int(value)})


class _ApiModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


@total_ordering
class Format(_ApiModel):
    """Describes a single downloadable stream of a video."""

    itag: int
    url: str
    mime_type: str = Field(alias="mimeType")
    quality: str
    # Audio-only formats have no dimensions.
    width: int | None = None
    height: int | None = None
    fps: int | None = None
    bitrate: int | None = None
    quality_label: str | None = Field(default=None, alias="qualityLabel")
    audio_quality: str | None = Field(default=None, alias="audioQuality")
    content_length: int | None = Field(default=None, alias="contentLength")
    approx_duration: timedelta | None = Field(default=None, alias="approxDurationMs")

    @field_validator("mime_type")
    @classmethod
    def validate_mime_type(cls, v: str) -> str:
        essence = v.split(";", 1)[0].strip()
        media_type, _, subtype = essence.partition("/")
        if not media_type or not subtype:
            raise ValueError(f"'{v}' is not a valid MIME type.")
        return v

    @field_validator("approx_duration", mode="before")
    @classmethod
    def parse_duration_ms(cls, v: Any) -> timedelta | None:
        return _to_timedelta(v, "milliseconds")

    @property
    def is_video(self) -> bool:
        """Whether the format carries video; a width is the only signal used."""
        return self.width is not None

    @property
    def size(self) -> int | None:
        """Advertised content length. Informational only, never verified."""
        return self.content_length

    @property
    def container(self) -> str:
        """The MIME subtype, e.g. ``mp4`` for ``video/mp4; codecs="avc1"``."""
        return self.mime_type.split(";", 1)[0].split("/", 1)[1].strip()

    async def download(
        self,
        sink: Sink,
        transport: Transport | None = None,
        on_chunk: ChunkCallback | None = None,
        chunk_size: int | None = None,
    ) -> int:
        """
        Streams the whole format into `sink`.

        When no transport is given, a temporary `AiohttpTransport` is opened for
        the duration of the call.
        """
        if transport is None:
            async with AiohttpTransport() as owned:
                return await self.download(sink, owned, on_chunk, chunk_size)

        downloader = (
            Downloader(transport, chunk_size) if chunk_size else Downloader(transport)
        )
        return await downloader.download(
            [self.url], sink, on_chunk, total_size=self.content_length
        )

    async def to_bytes(
        self,
        transport: Transport | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> bytes:
        """Reads the entire format into memory."""
        if transport is None:
            async with AiohttpTransport() as owned:
                return await self.to_bytes(owned, on_chunk)
        return await Downloader(transport).to_bytes([self.url], on_chunk)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Format):
            return NotImplemented
        return self.itag == other.itag

    def __lt__(self, other: "Format") -> bool:
        if not isinstance(other, Format):
            return NotImplemented
        return self.itag < other.itag

    def __hash__(self) -> int:
        return hash(self.itag)

    def __str__(self) -> str:
        return (
            f"itag: {self.itag:>3} | Quality: {self.quality:<7} | "
            f"Mime Type: {self.mime_type:<20}"
        )


class StreamingData(_ApiModel):
    """The set of sources a video can be downloaded from."""

    expires_in: timedelta = Field(alias="expiresInSeconds")
    # Live streams carry no progressive formats.
    formats: list[Format] | None = None
    adaptive_formats: list[Format] = Field(alias="adaptiveFormats")
    dash_manifest_url: str | None = Field(default=None, alias="dashManifestUrl")
    hls_manifest_url: str | None = Field(default=None, alias="hlsManifestUrl")

    @field_validator("expires_in", mode="before")
    @classmethod
    def parse_expiry(cls, v: Any) -> timedelta | None:
        return _to_timedelta(v, "seconds")


class VideoDetails(_ApiModel):
    """Details about a video."""

    video_id: str = Field(alias="videoId")
    title: str
    author: str
    approx_length: timedelta | None = Field(default=None, alias="lengthSeconds")
    views: int = Field(alias="viewCount")
    private: bool = Field(alias="isPrivate")
    live: bool = Field(alias="isLiveContent")

    @field_validator("approx_length", mode="before")
    @classmethod
    def parse_length(cls, v: Any) -> timedelta | None:
        return _to_timedelta(v, "seconds")

    @property
    def id(self) -> str:
        return self.video_id


class InfoResponse(_ApiModel):
    """The player response for a single video."""

    streaming_data: StreamingData = Field(alias="streamingData")
    video_details: VideoDetails = Field(alias="videoDetails")

    @property
    def details(self) -> VideoDetails:
        return self.video_details

    @property
    def dash_manifest_url(self) -> str | None:
        return self.streaming_data.dash_manifest_url

    def formats(self) -> list[Format] | None:
        """`itag`-ordered progressive formats, or None when there are none."""
        if self.streaming_data.formats is None:
            return None
        return sorted(self.streaming_data.formats)

    def adaptive_formats(self) -> list[Format]:
        """`itag`-ordered adaptive formats."""
        return sorted(self.streaming_data.adaptive_formats)

    def all_formats(self) -> list[Format]:
        """Progressive formats followed by adaptive formats, each sorted by `itag`."""
        return (self.formats() or []) + self.adaptive_formats()

    def video_formats(self) -> list[Format]:
        return [fmt for fmt in self.all_formats() if fmt.is_video]

    def audio_formats(self) -> list[Format]:
        return [fmt for fmt in self.all_formats() if not fmt.is_video]

    def find_format(self, itag: int | str) -> Format | None:
        """Returns the format with the given `itag`, if the video offers it."""
        for fmt in self.all_formats():
            if str(fmt.itag) == str(itag):
                return fmt
        return None

    def default_format(self) -> Format | None:
        """The format chosen when none is requested: the last of `all_formats`."""
        formats = self.all_formats()
        return formats[-1] if formats else None
