"""
Helper functions for formatting data into human-readable strings.
"""

from datetime import timedelta


def format_size(bytes_size: int | None) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if bytes_size is None:
        return "Unknown"
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(bytes_size)
    i = 0
    while size >= 1024 and i < len(units) - 1:
        size /= 1024
        i += 1
    return f"{size:.1f} {units[i]}"


def format_duration(duration: float | timedelta | None) -> str:
    """
    Formats a duration into a human-readable string (e.g., '2h 34m 12s').
    """
    if duration is None:
        return "Unknown"
    if isinstance(duration, timedelta):
        duration = duration.total_seconds()
    s = int(duration)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_bitrate(bits_per_second: int | None) -> str:
    """Formats a bitrate (e.g., '2.5 Mbps')."""
    if not bits_per_second:
        return "Unknown"
    if bits_per_second >= 1_000_000:
        return f"{bits_per_second / 1_000_000:.1f} Mbps"
    return f"{bits_per_second / 1000:.0f} kbps"
