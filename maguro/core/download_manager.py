"""
The main orchestrator: resolves videos, selects formats, and writes downloads to disk.
"""

import logging
from pathlib import Path

import aiofiles
from rich.markup import escape

from maguro.api.client import MetadataResolver
from maguro.api.query import Query
from maguro.cli.progress_manager import ProgressManager
from maguro.dash import Manifest, Representation, parse, segment_urls
from maguro.exceptions import ConfigurationError, FormatNotFoundError, RetrievalError
from maguro.media.downloader import Downloader
from maguro.media.transport import Transport
from maguro.models.config import ClientConfig
from maguro.models.formats import Format, InfoResponse
from maguro.models.stats import DownloadStats
from maguro.utils.path import PathFormatter, create_dir

log = logging.getLogger(__name__)


def select_format(info: InfoResponse, itag: int | str | None = None) -> Format:
    """
    Picks the format to download: the requested `itag`, or the default format.

    Raises:
        FormatNotFoundError: If the video does not offer the requested format.
    """
    if itag is None:
        chosen = info.default_format()
        if chosen is None:
            raise FormatNotFoundError(
                f"Video '{info.details.id}' has no downloadable formats."
            )
        return chosen

    chosen = info.find_format(itag)
    if chosen is None:
        available = ", ".join(str(fmt.itag) for fmt in info.all_formats())
        raise FormatNotFoundError(
            f"Format itag {itag} is not available for video '{info.details.id}'. "
            f"Available: {available or 'none'}."
        )
    return chosen


def select_representation(
    manifest: Manifest, representation_id: str | None = None
) -> Representation:
    """
    Picks a representation by id, or the highest-bandwidth video representation.

    Falls back to the highest-bandwidth representation of any kind when the
    manifest has no video. Ties are broken by identifier order.

    Raises:
        FormatNotFoundError: If the id is unknown or the manifest is empty.
    """
    if representation_id is not None:
        rep = manifest.find_representation(representation_id)
        if rep is None:
            raise FormatNotFoundError(
                f"Representation '{representation_id}' is not in the manifest."
            )
        return rep

    candidates = manifest.video_representations() or list(manifest.representations())
    if not candidates:
        raise FormatNotFoundError("The manifest contains no representations.")
    return max(sorted(candidates), key=lambda rep: rep.bandwidth)


def representation_extension(manifest: Manifest, representation: Representation) -> str:
    """File extension for a representation, from its own or its set's MIME type."""
    mime_type = representation.mime_type
    if mime_type is None:
        for aset in manifest.streams():
            if any(rep is representation for rep in aset.representations):
                mime_type = aset.mime_type
                break
    if not mime_type or "/" not in mime_type:
        return "mp4"
    return mime_type.split(";", 1)[0].split("/", 1)[1].strip()


class DownloadManager:
    """Orchestrates resolving and downloading for a CLI session."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport,
        progress_manager: ProgressManager,
    ):
        self.config = config
        self.resolver = MetadataResolver(transport, config.info_endpoint)
        self.downloader = Downloader(transport, config.chunk_size)
        self.progress_manager = progress_manager
        self.path_formatter = PathFormatter(config.output_template)
        self.stats = DownloadStats()

    async def fetch_info(self, video_ids: list[str]) -> list[InfoResponse]:
        """Resolves every requested video, in order."""
        return await self.resolver.resolve_many(Query(video_ids))

    def output_path_for(self, info: InfoResponse, fmt: Format) -> Path:
        details = info.details
        return self.path_formatter.format_path(
            id=details.id,
            title=details.title,
            author=details.author,
            itag=fmt.itag,
            ext=fmt.container,
        )

    async def execute_downloads(
        self, infos: list[InfoResponse], itag: int | None = None
    ) -> list[Path]:
        """
        Downloads the selected format of every video.

        Every selection is validated before the first file is created.
        """
        if len(infos) > 1 and not self.path_formatter.is_per_video:
            raise ConfigurationError(
                f"Output template '{self.config.output_template}' would write every "
                "video to the same file. Include {id} or {title}."
            )

        planned = [(info, select_format(info, itag)) for info in infos]

        saved = []
        for info, fmt in planned:
            saved.append(await self.download_format(info, fmt))
        return saved

    async def download_format(self, info: InfoResponse, fmt: Format) -> Path:
        """Streams one format to its templated output path."""
        path = self.output_path_for(info, fmt)
        create_dir(path.parent)

        log.info(
            f"Starting download of {info.details.id} (itag {fmt.itag}) to "
            f"[dim]{escape(str(path))}[/dim]"
        )
        task_id = self.progress_manager.add_task(
            escape(f"{info.details.id} [{fmt.itag}]"), total=fmt.size
        )

        def on_chunk(chunk: bytes) -> None:
            self.stats.record_chunk(len(chunk))
            self.progress_manager.advance(task_id, len(chunk))

        try:
            async with aiofiles.open(path, "wb") as f:
                written = await self.downloader.download(
                    [fmt.url], f, on_chunk, total_size=fmt.size
                )
        except RetrievalError:
            self.stats.record_failure()
            self.progress_manager.finish_task(task_id, success=False)
            raise

        self.stats.record_success()
        self.progress_manager.finish_task(task_id)
        log.info(f"Completed download of video {info.details.id} ({written} bytes).")
        return path

    async def load_manifest(self, source: str) -> Manifest:
        """Loads a manifest from a local file path or fetches it from a URL."""
        local = Path(source)
        if local.is_file():
            log.info(f"Reading manifest from file: [dim]{escape(source)}[/dim]")
            async with aiofiles.open(local, "rb") as f:
                return parse(await f.read())
        return await self.resolver.fetch_manifest(source)

    async def download_manifest(
        self,
        manifest: Manifest,
        representation_id: str | None = None,
        output: Path | None = None,
    ) -> Path:
        """Downloads every segment of one representation into a single file."""
        rep = select_representation(manifest, representation_id)
        urls = segment_urls(rep)
        path = output or Path(f"{rep.id}.{representation_extension(manifest, rep)}")
        create_dir(path.parent)

        log.info(
            f"Downloading representation {rep.id} to [dim]{escape(str(path))}[/dim]"
        )
        task_id = self.progress_manager.add_task(escape(f"representation {rep.id}"))

        def on_chunk(chunk: bytes) -> None:
            self.stats.record_chunk(len(chunk))
            self.progress_manager.advance(task_id, len(chunk))

        try:
            async with aiofiles.open(path, "wb") as f:
                await self.downloader.download(urls, f, on_chunk)
        except RetrievalError as e:
            self.stats.record_failure(segments_completed=getattr(e, "index", 0))
            self.progress_manager.finish_task(task_id, success=False)
            raise

        self.stats.record_success(segments=len(urls))
        self.progress_manager.finish_task(task_id)
        return path
