"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from maguro.dash import Manifest
from maguro.models.formats import InfoResponse
from maguro.models.stats import DownloadStats
from maguro.utils.formatting import format_bitrate, format_duration, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "FormatNotFoundError": [
            "• List the available formats with `maguro download -F <ID>`.",
            "• For manifests, list representations with `maguro manifest --list`.",
        ],
        "MetadataTransportError": [
            "• Check your internet connection.",
            "• The video info endpoint might be temporarily unavailable.",
        ],
        "EnvelopeDecodeError": [
            "• The info endpoint returned an unexpected response.",
            "• Check `info_endpoint` with `maguro --show-config`.",
        ],
        "PayloadSchemaError": [
            "• The video may be unavailable, private, or age-restricted.",
            "• The upstream response format may have changed.",
        ],
        "TransportFailureError": [
            "• A segment could not be fetched; the output file is incomplete.",
            "• Signed media URLs expire. Resolve the video again and retry.",
        ],
        "SinkWriteError": [
            "• Check free disk space and write permissions for the output path.",
        ],
        "UnsupportedAddressingError": [
            "• Only SegmentList addressing can be downloaded.",
            "• Pick another representation with -r.",
        ],
        "ParseError": [
            "• The manifest is not a well-formed MPD document.",
        ],
        "ConfigurationError": [
            "• Review the configuration file shown by `maguro --show-config`.",
            "• Run `maguro init --force` to restore the defaults.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_formats_table(info: InfoResponse, console: Console | None = None):
    """Displays every format available for a video."""
    console = console or Console()
    details = info.details

    table = Table(
        title=(
            f"Available formats for [cyan]{details.id}[/cyan] "
            f"[dim]({details.title}, {format_duration(details.approx_length)})[/dim]"
        ),
        box=box.SIMPLE,
    )
    table.add_column("itag", justify="right", style="bold cyan")
    table.add_column("Kind")
    table.add_column("Quality")
    table.add_column("Resolution", justify="right")
    table.add_column("FPS", justify="right")
    table.add_column("Bitrate", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("MIME Type", style="dim")

    progressive = set(info.formats() or [])
    for fmt in info.all_formats():
        if fmt in progressive:
            kind = "[green]progressive[/green]"
        else:
            kind = "video" if fmt.is_video else "[magenta]audio[/magenta]"
        resolution = f"{fmt.width}x{fmt.height}" if fmt.is_video else "-"
        table.add_row(
            str(fmt.itag),
            kind,
            fmt.quality_label or fmt.quality,
            resolution,
            str(fmt.fps) if fmt.fps else "-",
            format_bitrate(fmt.bitrate),
            format_size(fmt.size),
            fmt.mime_type,
        )

    console.print(table)
    if info.dash_manifest_url:
        console.print(f"[dim]DASH manifest: {info.dash_manifest_url}[/dim]")


def print_manifest_table(manifest: Manifest, console: Console | None = None):
    """Displays the representations of a manifest, grouped by adaptation set."""
    console = console or Console()
    if manifest.is_empty:
        console.print("[yellow]The manifest contains no periods.[/yellow]")
        return

    table = Table(title=f"Manifest ({manifest.mpd_type})", box=box.SIMPLE)
    table.add_column("Set", justify="right", style="dim")
    table.add_column("Representation", justify="right", style="bold cyan")
    table.add_column("Kind")
    table.add_column("Resolution", justify="right")
    table.add_column("Bandwidth", justify="right")
    table.add_column("Codecs")
    table.add_column("Addressing")
    table.add_column("Segments", justify="right")

    for aset in manifest.streams():
        for rep in aset.representations:
            segments = (
                str(len(rep.segment_list.segment_urls) + 1)
                if rep.segment_list is not None
                else "-"
            )
            addressing = rep.addressing or "none"
            if addressing != "SegmentList":
                addressing = f"[yellow]{addressing} (unsupported)[/yellow]"
            table.add_row(
                "-" if aset.id is None else str(aset.id),
                rep.id,
                "video" if rep.is_video else "[magenta]audio[/magenta]",
                f"{rep.width}x{rep.height}" if rep.is_video else "-",
                format_bitrate(rep.bandwidth),
                rep.codecs or "-",
                addressing,
                segments,
            )

    console.print(table)


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_summary_panel(stats: DownloadStats, duration_s: float):
    """Displays a final summary of the download session."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Downloaded:", f"[bold green]{stats.videos_downloaded}[/bold green]"
    )
    if stats.videos_failed > 0:
        stats_table.add_row("✗ Failed:", f"[bold red]{stats.videos_failed}[/bold red]")
    stats_table.add_row("Segments:", str(stats.segments_downloaded))
    stats_table.add_row("Total Size:", format_size(stats.total_size_downloaded))
    stats_table.add_row("Duration:", format_duration(duration_s))
    if stats.peak_speed_bps > 0:
        stats_table.add_row(
            "Peak Speed:", f"{stats.peak_speed_bps / (1024 * 1024):.1f} MB/s"
        )

    console.print(
        Panel(
            stats_table,
            title="[bold green]Session Summary[/bold green]",
            border_style="green",
            expand=False,
        )
    )
