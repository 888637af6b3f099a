"""
Resolves video IDs to their format catalog through the video info endpoint.
"""

import json
import logging
from urllib.parse import parse_qs

from pydantic import ValidationError

from maguro.dash import Manifest, parse
from maguro.exceptions import (
    EnvelopeDecodeError,
    MetadataTransportError,
    PayloadSchemaError,
    TransportError,
)
from maguro.media.transport import Transport
from maguro.models.config import DEFAULT_INFO_ENDPOINT
from maguro.models.formats import InfoResponse

from .query import Query

log = logging.getLogger(__name__)

ENVELOPE_FIELD = "player_response"


def decode_envelope(body: bytes) -> str:
    """
    Unwraps the URL-encoded response envelope and returns the embedded JSON text.

    Fields other than the player response are ignored, even malformed ones.

    Raises:
        EnvelopeDecodeError: If the body is not form-encoded text or lacks the
            player response field.
    """
    try:
        fields = parse_qs(body.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise EnvelopeDecodeError(f"Response is not UTF-8 text: {e}") from e

    values = fields.get(ENVELOPE_FIELD)
    if not values:
        raise EnvelopeDecodeError(
            f"Response envelope has no '{ENVELOPE_FIELD}' field."
        )
    return values[0]


def decode_payload(payload: str) -> InfoResponse:
    """
    Deserializes the embedded JSON document into an `InfoResponse`.

    Raises:
        PayloadSchemaError: If the payload is not JSON or does not match the schema.
    """
    try:
        return InfoResponse.model_validate(json.loads(payload))
    except json.JSONDecodeError as e:
        raise PayloadSchemaError(f"Player response is not valid JSON: {e}") from e
    except ValidationError as e:
        raise PayloadSchemaError(
            f"Player response does not match the expected schema:\n{e}"
        ) from e


class MetadataResolver:
    """
    Client for the video info endpoint.

    Nothing is retried: every failure surfaces to the caller as a
    `MetadataError` subclass.
    """

    def __init__(self, transport: Transport, endpoint: str = DEFAULT_INFO_ENDPOINT):
        """
        Args:
            transport: Used for every request.
            endpoint: URL template containing a ``{video_id}`` placeholder.
        """
        self.transport = transport
        self.endpoint = endpoint

    async def resolve(self, video_id: str) -> InfoResponse:
        """Fetches and decodes the info response for a single video."""
        url = self.endpoint.format(video_id=video_id)
        log.info(f"Collecting data for {video_id}")
        try:
            body = await self.transport.fetch(url)
        except TransportError as e:
            raise MetadataTransportError(
                f"Could not fetch video info for '{video_id}': {e.cause}"
            ) from e

        return decode_payload(decode_envelope(body))

    async def resolve_many(self, query: Query) -> list[InfoResponse]:
        """Resolves every video in `query`, one after another."""
        return [await self.resolve(video_id) for video_id in query.ids()]

    async def fetch_manifest(self, url: str) -> Manifest:
        """Downloads and parses a DASH manifest."""
        log.info(f"Fetching manifest from {url}")
        try:
            document = await self.transport.fetch(url)
        except TransportError as e:
            raise MetadataTransportError(f"Could not fetch manifest: {e.cause}") from e
        return parse(document)
