"""
Metadata API Layer.

This package resolves video identifiers to their format catalog and fetches
DASH manifests.
"""

from .client import MetadataResolver
from .query import Query, parse_video_id

__all__ = ["MetadataResolver", "Query", "parse_video_id"]
