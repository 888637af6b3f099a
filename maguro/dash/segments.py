"""
Derives the ordered list of segment URLs for a representation.
"""

import logging

from maguro.exceptions import MissingBaseUrlError, UnsupportedAddressingError

from .manifest import Representation

log = logging.getLogger(__name__)


def segment_urls(representation: Representation) -> list[str]:
    """
    Computes the URLs to fetch, in order, to reassemble a representation.

    The initialization segment always comes first, followed by every media
    segment in document order. URLs are joined as ``base_url + "/" + path``
    without any escaping or normalisation; inputs are taken as already encoded.

    Raises:
        UnsupportedAddressingError: If the representation is not addressed by a
            SegmentList.
        MissingBaseUrlError: If no base URL is available for the representation.
    """
    segment_list = representation.segment_list
    if segment_list is None:
        raise UnsupportedAddressingError(
            representation.id, representation.addressing or "none"
        )

    base_url = representation.base_url
    if base_url is None:
        raise MissingBaseUrlError(representation.id)

    urls = [f"{base_url}/{segment_list.initialization.source_url}"]
    urls.extend(f"{base_url}/{segment.media}" for segment in segment_list.segment_urls)
    log.debug(
        f"Resolved representation '{representation.id}' to {len(urls)} segment URLs."
    )
    return urls
