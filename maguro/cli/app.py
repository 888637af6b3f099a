"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from maguro import __version__
from maguro.api.query import parse_video_id
from maguro.core.download_manager import DownloadManager
from maguro.exceptions import FormatNotFoundError, MaguroError
from maguro.media.transport import AiohttpTransport
from maguro.models.config import ClientConfig
from maguro.storage.config_manager import ConfigManager

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_formats_table,
    print_manifest_table,
    print_summary_panel,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("maguro")
log.setLevel("WARNING")

app = typer.Typer(
    name="maguro",
    help="A fast YouTube and DASH downloader. Use 'maguro <command> --help' for more info.",
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "maguro"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> ClientConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    except MaguroError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


def _transport_for(config: ClientConfig) -> AiohttpTransport:
    return AiohttpTransport(
        user_agent=config.user_agent,
        connect_timeout=config.connect_timeout,
        read_timeout=config.read_timeout,
    )


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """maguro downloader CLI"""
    if version:
        console.print(f"[bold]maguro[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose == 1:
        log_level = "INFO"
    elif verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("maguro").setLevel(log_level)

    if show_config:
        config = _load_config()
        print_config(CONFIG_FILE, config.model_dump())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Write a configuration file with the default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config()
    except MaguroError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command(name="download")
def download_command(
    videos: list[str] = typer.Argument(  # noqa: B008
        ..., help="Video(s) to download or introspect on, as IDs or URLs."
    ),
    show_formats: bool = typer.Option(
        False,
        "-F",
        "--formats",
        help="Display formats available for download and exit.",
    ),
    itag: int | None = typer.Option(
        None,
        "-f",
        "--format",
        help="Download a specific format by itag. Defaults to the highest itag.",
    ),
    output_template: str | None = typer.Option(
        None,
        "-o",
        "--output",
        help="Output path template. Placeholders: {id} {title} {author} {itag} {ext}.",
    ),
):
    """Download videos by ID or URL."""
    cli_options = {}
    if output_template is not None:
        cli_options["output_template"] = output_template
    config = _load_config(cli_options)

    async def _download_async():
        start_time = time.monotonic()

        async with _transport_for(config) as transport:
            async with ProgressManager(console, quiet=show_formats) as progress_manager:
                manager = DownloadManager(config, transport, progress_manager)
                infos = await manager.fetch_info(videos)

                if show_formats:
                    for info in infos:
                        print_formats_table(info, console)
                    return None

                for path in await manager.execute_downloads(infos, itag):
                    console.print(f"[green]✓ Saved[/green] [dim]{path}[/dim]")

        return manager, time.monotonic() - start_time

    try:
        result = asyncio.run(_download_async())
    except MaguroError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    if result:
        manager, duration = result
        print_summary_panel(manager.stats, duration)


@app.command(name="manifest")
def manifest_command(
    source: str = typer.Argument(
        ..., help="Manifest URL, local MPD file, or a video ID/URL with a DASH manifest."
    ),
    representation: str | None = typer.Option(
        None,
        "-r",
        "--representation",
        help="Representation ID to download. Defaults to the best video.",
    ),
    output: Path | None = typer.Option(  # noqa: B008
        None, "-o", "--output", help="Destination file."
    ),
    list_only: bool = typer.Option(
        False, "-F", "--list", help="Display the manifest's representations and exit."
    ),
):
    """Download one representation of a DASH manifest."""
    config = _load_config()

    async def _manifest_async():
        start_time = time.monotonic()

        async with _transport_for(config) as transport:
            async with ProgressManager(console, quiet=list_only) as progress_manager:
                manager = DownloadManager(config, transport, progress_manager)

                location = source
                video_id = parse_video_id(source)
                if video_id and not Path(source).is_file():
                    info = await manager.resolver.resolve(video_id)
                    if not info.dash_manifest_url:
                        raise FormatNotFoundError(
                            f"Video '{video_id}' does not offer a DASH manifest."
                        )
                    location = info.dash_manifest_url

                manifest = await manager.load_manifest(location)
                if list_only:
                    print_manifest_table(manifest, console)
                    return None

                path = await manager.download_manifest(manifest, representation, output)
                console.print(f"[green]✓ Saved[/green] [dim]{path}[/dim]")

        return manager, time.monotonic() - start_time

    try:
        result = asyncio.run(_manifest_async())
    except MaguroError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    if result:
        manager, duration = result
        print_summary_panel(manager.stats, duration)
