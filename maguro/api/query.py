"""
Parses user input into the video IDs to resolve.
"""

import re

from maguro.models.config import DEFAULT_INFO_ENDPOINT

# The first named group is always the video ID.
_VIDEO_URL = re.compile(
    r"(?:youtube\.com/(?:watch\?(?:[^#\s]*&)?v=|embed/|shorts/|v/)|youtu\.be/)"
    r"(?P<id>[\w-]{11})"
)
_VIDEO_ID = re.compile(r"^[\w-]{11}$")


def parse_video_id(value: str) -> str | None:
    """Extracts a video ID from a bare ID or a watch/short/embed URL."""
    value = value.strip()
    if _VIDEO_ID.match(value):
        return value
    match = _VIDEO_URL.search(value)
    if match:
        return match.group("id")
    return None


class Query:
    """
    Collection of video IDs to download, parsed from whitespace-separated IDs
    and video URLs.
    """

    def __init__(self, raw: str | list[str]):
        self.raw = raw if isinstance(raw, str) else " ".join(raw)

    def ids(self) -> list[str]:
        """
        Unique video IDs in the order first seen.

        Tokens that are neither an ID nor a video URL are kept verbatim.
        """
        found = [parse_video_id(token) or token for token in self.raw.split()]
        return list(dict.fromkeys(found))

    def urls(self, endpoint: str = DEFAULT_INFO_ENDPOINT) -> list[str]:
        """Info endpoint URLs for every video in the query."""
        return [endpoint.format(video_id=video_id) for video_id in self.ids()]
