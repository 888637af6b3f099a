"""
In-memory model of a DASH media presentation description (MPD).

Only the subset needed to enumerate encodings and their segments is modelled:
Manifest -> Period -> AdaptationSet -> Representation -> SegmentList -> SegmentURL.

Equality contract
-----------------
`AdaptationSet` and `Representation` compare, order and hash by their identifier
ONLY. Two representations with the same `id` are equal even if their codecs,
bandwidth or base URL differ. This makes them usable as set members, dict keys
and in sorted containers across repeated fetches of the same manifest. Do not
replace this with full structural equality.

Iteration order is always document order; sorting is left to the caller.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import total_ordering


@dataclass(frozen=True)
class Role:
    """Role descriptor of an adaptation set (e.g. ``main``, ``alternate``)."""

    scheme_id_uri: str
    value: str


@dataclass(frozen=True)
class Initialization:
    """Initialization segment of a segment list; always retrieved first."""

    source_url: str


@dataclass(frozen=True)
class SegmentURL:
    """A single media segment, relative to the representation's base URL."""

    media: str


@dataclass(frozen=True)
class SegmentList:
    """Explicit enumeration of a representation's segments, in retrieval order."""

    initialization: Initialization
    segment_urls: tuple[SegmentURL, ...] = ()
    duration: int | None = None
    timescale: int | None = None


@dataclass(frozen=True)
class SegmentBase:
    """Single-segment addressing by byte range. Parsed but not resolvable."""

    index_range: str | None = None
    initialization: Initialization | None = None


@dataclass(frozen=True)
class SegmentTemplate:
    """Template-based addressing. Parsed but not resolvable."""

    media: str | None = None
    initialization: str | None = None
    start_number: int | None = None
    duration: int | None = None
    timescale: int | None = None


def _identifier_key(identifier: str) -> tuple[int, int | str]:
    # Numeric ids sort numerically and ahead of free-form ids.
    if identifier.isdigit():
        return (0, int(identifier))
    return (1, identifier)


@total_ordering
@dataclass(frozen=True, eq=False)
class Representation:
    """One concrete encoding of a media component."""

    id: str
    bandwidth: int
    codecs: str | None = None
    mime_type: str | None = None
    width: int | None = None
    height: int | None = None
    frame_rate: float | None = None
    audio_sampling_rate: int | None = None
    quality_ranking: int | None = None
    dependency_id: str | None = None
    base_url: str | None = None
    segment_list: SegmentList | None = None
    segment_base: SegmentBase | None = None
    segment_template: SegmentTemplate | None = None

    @property
    def is_video(self) -> bool:
        """Whether this is a video encoding; a width is the only signal used."""
        return self.width is not None

    @property
    def addressing(self) -> str | None:
        """Name of the segment addressing scheme in use, if any."""
        if self.segment_list is not None:
            return "SegmentList"
        if self.segment_template is not None:
            return "SegmentTemplate"
        if self.segment_base is not None:
            return "SegmentBase"
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Representation):
            return NotImplemented
        return self.id == other.id

    def __lt__(self, other: "Representation") -> bool:
        if not isinstance(other, Representation):
            return NotImplemented
        return _identifier_key(self.id) < _identifier_key(other.id)

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        if self.is_video:
            detail = f"{self.width}x{self.height}"
        elif self.audio_sampling_rate:
            detail = f"{self.audio_sampling_rate} Hz"
        else:
            detail = "audio"
        return (
            f"id: {self.id:>4} | {detail:<10} | bandwidth: {self.bandwidth:>8} | "
            f"codecs: {self.codecs or 'unknown'}"
        )


@total_ordering
@dataclass(frozen=True, eq=False)
class AdaptationSet:
    """A group of interchangeable representations sharing one media type."""

    id: int | None = None
    mime_type: str | None = None
    content_type: str | None = None
    lang: str | None = None
    segment_alignment: bool | None = None
    subsegment_alignment: bool | None = None
    role: Role | None = None
    representations: tuple[Representation, ...] = ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AdaptationSet):
            return NotImplemented
        return self.id == other.id

    def __lt__(self, other: "AdaptationSet") -> bool:
        if not isinstance(other, AdaptationSet):
            return NotImplemented
        # Sets without an id sort first.
        return (self.id is not None, self.id or 0) < (other.id is not None, other.id or 0)

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class Period:
    adaptation_sets: tuple[AdaptationSet, ...] = ()


@dataclass(frozen=True)
class Manifest:
    """Root of a parsed MPD. A manifest without periods is valid but unusable."""

    periods: tuple[Period, ...] = field(default_factory=tuple)
    mpd_type: str = "static"
    media_presentation_duration: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.periods

    def streams(self) -> list[AdaptationSet]:
        """All adaptation sets across every period, in document order."""
        return [aset for period in self.periods for aset in period.adaptation_sets]

    def representations(self) -> Iterator[Representation]:
        """Yields every representation in document order."""
        for aset in self.streams():
            yield from aset.representations

    def find_representation(self, representation_id: str) -> Representation | None:
        """Returns the first representation with the given identifier."""
        for rep in self.representations():
            if rep.id == str(representation_id):
                return rep
        return None

    def video_representations(self) -> list[Representation]:
        return [rep for rep in self.representations() if rep.is_video]

    def audio_representations(self) -> list[Representation]:
        return [rep for rep in self.representations() if not rep.is_video]
