"""
DASH Manifest Layer.

This package models DASH media presentation descriptions, parses them from
XML, and resolves representations to the ordered segment URLs to download.
"""

from .manifest import (
    AdaptationSet,
    Initialization,
    Manifest,
    Period,
    Representation,
    Role,
    SegmentBase,
    SegmentList,
    SegmentTemplate,
    SegmentURL,
)
from .parser import parse, serialize
from .segments import segment_urls

__all__ = [
    "AdaptationSet",
    "Initialization",
    "Manifest",
    "Period",
    "Representation",
    "Role",
    "SegmentBase",
    "SegmentList",
    "SegmentTemplate",
    "SegmentURL",
    "parse",
    "segment_urls",
    "serialize",
]
