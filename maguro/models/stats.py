"""
Session counters shown in the summary panel once downloads finish.
"""

import time
from collections import deque
from dataclasses import dataclass, field

SPEED_SAMPLE_INTERVAL = 0.5  # seconds
SPEED_WINDOW = 10


@dataclass
class DownloadStats:
    """Counts finished and failed downloads, segments, and bytes received."""

    videos_downloaded: int = 0
    videos_failed: int = 0
    segments_downloaded: int = 0
    total_size_downloaded: int = 0
    peak_speed_bps: float = 0.0

    _samples: deque[float] = field(
        default_factory=lambda: deque(maxlen=SPEED_WINDOW), repr=False
    )
    _window_start: float = field(default_factory=time.monotonic, repr=False)
    _window_bytes: int = field(default=0, repr=False)

    @property
    def current_speed_bps(self) -> float:
        """Mean of the recent speed samples, in bytes per second."""
        if not self._samples:
            return 0.0
        return sum(self._samples) / len(self._samples)

    def record_chunk(self, size: int) -> None:
        self.total_size_downloaded += size
        self._window_bytes += size

        now = time.monotonic()
        elapsed = now - self._window_start
        if elapsed < SPEED_SAMPLE_INTERVAL:
            return

        self._samples.append(self._window_bytes / elapsed)
        self.peak_speed_bps = max(self.peak_speed_bps, self.current_speed_bps)
        self._window_start = now
        self._window_bytes = 0

    def record_success(self, segments: int = 1) -> None:
        self.videos_downloaded += 1
        self.segments_downloaded += segments

    def record_failure(self, segments_completed: int = 0) -> None:
        """Counts a failed download; segments written before the failure still count."""
        self.videos_failed += 1
        self.segments_downloaded += segments_completed
