"""Tests for the metadata resolver and query parsing (api/)."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from conftest import FakeTransport, make_envelope, make_player_response

from maguro.api import MetadataResolver, Query, parse_video_id
from maguro.api.client import decode_envelope
from maguro.exceptions import (
    EnvelopeDecodeError,
    MetadataTransportError,
    ParseError,
    PayloadSchemaError,
)

ENDPOINT = "https://info.example.com/get_video_info?video_id={video_id}"
VIDEO_ID = "VfWgE7D1pYY"
INFO_URL = ENDPOINT.format(video_id=VIDEO_ID)


def _resolver(body: Any) -> tuple[MetadataResolver, FakeTransport]:
    transport = FakeTransport({INFO_URL: body})
    return MetadataResolver(transport, ENDPOINT), transport


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


class TestQuery:
    @pytest.mark.parametrize(
        "value",
        [
            VIDEO_ID,
            f"https://www.youtube.com/watch?v={VIDEO_ID}",
            f"https://www.youtube.com/watch?feature=share&v={VIDEO_ID}&t=10",
            f"https://youtu.be/{VIDEO_ID}",
            f"https://www.youtube.com/shorts/{VIDEO_ID}",
            f"https://www.youtube.com/embed/{VIDEO_ID}",
        ],
    )
    def test_parse_video_id(self, value: str) -> None:
        assert parse_video_id(value) == VIDEO_ID

    def test_parse_video_id_rejects_other_input(self) -> None:
        assert parse_video_id("manifest.mpd") is None
        assert parse_video_id("https://example.com/video") is None

    def test_ids_unique_in_order(self) -> None:
        query = Query(f"abcdefghijk https://youtu.be/{VIDEO_ID} abcdefghijk")
        assert query.ids() == ["abcdefghijk", VIDEO_ID]

    def test_accepts_list(self) -> None:
        assert Query([VIDEO_ID, "abcdefghijk"]).ids() == [VIDEO_ID, "abcdefghijk"]

    def test_urls(self) -> None:
        assert Query(VIDEO_ID).urls(ENDPOINT) == [INFO_URL]


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class TestEnvelope:
    def test_extracts_payload(self) -> None:
        assert decode_envelope(make_envelope("{}")) == "{}"

    def test_missing_field(self) -> None:
        with pytest.raises(EnvelopeDecodeError, match="player_response"):
            decode_envelope(b"status=fail&reason=unavailable")

    def test_not_form_encoded(self) -> None:
        with pytest.raises(EnvelopeDecodeError):
            decode_envelope(b"<html>blocked</html>")

    def test_not_utf8(self) -> None:
        with pytest.raises(EnvelopeDecodeError):
            decode_envelope(b"\xff\xfe=\x00")

    def test_ignores_valueless_and_trailing_fields(self) -> None:
        body = b"status=ok&player_response=%7B%7D&enablecsi&"
        assert decode_envelope(body) == "{}"

    def test_ignores_unknown_fields(self) -> None:
        body = b"fexp=1&fexp=2&player_response=%7B%7D&c=WEB"
        assert decode_envelope(body) == "{}"


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class TestResolver:
    def test_resolve(self) -> None:
        resolver, transport = _resolver(make_envelope(make_player_response()))
        info = asyncio.run(resolver.resolve(VIDEO_ID))
        assert transport.requested == [INFO_URL]
        assert info.details.title == "Sample Video"
        assert [fmt.itag for fmt in info.all_formats()] == [18, 22, 137, 140, 251]

    def test_transport_failure(self) -> None:
        resolver, _ = _resolver(ConnectionError("unreachable"))
        with pytest.raises(MetadataTransportError, match="unreachable"):
            asyncio.run(resolver.resolve(VIDEO_ID))

    def test_bad_envelope(self) -> None:
        resolver, _ = _resolver(b"status=fail")
        with pytest.raises(EnvelopeDecodeError):
            asyncio.run(resolver.resolve(VIDEO_ID))

    def test_payload_not_json(self) -> None:
        resolver, _ = _resolver(make_envelope("{not json"))
        with pytest.raises(PayloadSchemaError):
            asyncio.run(resolver.resolve(VIDEO_ID))

    def test_payload_schema_mismatch(self) -> None:
        response = make_player_response()
        del response["streamingData"]
        resolver, _ = _resolver(make_envelope(response))
        with pytest.raises(PayloadSchemaError, match="streamingData"):
            asyncio.run(resolver.resolve(VIDEO_ID))

    def test_resolve_many_in_query_order(self) -> None:
        other = "abcdefghijk"
        transport = FakeTransport(
            {
                INFO_URL: make_envelope(make_player_response()),
                ENDPOINT.format(video_id=other): make_envelope(
                    make_player_response(
                        videoDetails={
                            **make_player_response()["videoDetails"],
                            "videoId": other,
                        }
                    )
                ),
            }
        )
        resolver = MetadataResolver(transport, ENDPOINT)
        infos = asyncio.run(resolver.resolve_many(Query([other, VIDEO_ID])))
        assert [info.details.id for info in infos] == [other, VIDEO_ID]

    def test_fetch_manifest(self, sample_mpd: str) -> None:
        url = "https://manifest.example.com/dash.mpd"
        resolver = MetadataResolver(FakeTransport({url: sample_mpd.encode()}))
        manifest = asyncio.run(resolver.fetch_manifest(url))
        assert [aset.id for aset in manifest.streams()] == [0, 1]

    def test_fetch_manifest_errors(self) -> None:
        url = "https://manifest.example.com/dash.mpd"
        resolver = MetadataResolver(FakeTransport({url: b"not xml"}))
        with pytest.raises(ParseError):
            asyncio.run(resolver.fetch_manifest(url))
        with pytest.raises(MetadataTransportError):
            asyncio.run(resolver.fetch_manifest("https://manifest.example.com/404"))
