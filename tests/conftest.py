"""Shared pytest fixtures for the maguro test suite.

No test touches the network: HTTP is replaced by :class:`FakeTransport`.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import urlencode

import pytest

from maguro.exceptions import TransportError


class FakeTransport:
    """In-memory transport that records every request in order.

    ``responses`` maps a URL to a list of chunks, a ``bytes`` body, or an
    exception instance to raise (wrapped in :class:`TransportError`).
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses = responses or {}
        self.requested: list[str] = []

    def _lookup(self, url: str) -> Any:
        self.requested.append(url)
        if url not in self.responses:
            raise TransportError(url, "404 Not Found")
        response = self.responses[url]
        if isinstance(response, BaseException):
            raise TransportError(url, response)
        return response

    async def stream(self, url: str, chunk_size: int) -> AsyncIterator[bytes]:
        response = self._lookup(url)
        chunks = [response] if isinstance(response, bytes) else response
        for chunk in chunks:
            yield chunk

    async def fetch(self, url: str) -> bytes:
        response = self._lookup(url)
        if isinstance(response, bytes):
            return response
        return b"".join(response)


SAMPLE_MPD = """<?xml version="1.0" encoding="UTF-8"?>
<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" type="static"
     mediaPresentationDuration="PT10S" profiles="urn:mpeg:dash:profile:isoff-main:2011">
  <ProgramInformation><Title>Sample</Title></ProgramInformation>
  <Period id="p0" duration="PT10S">
    <AdaptationSet id="0" mimeType="video/mp4" segmentAlignment="true"
                   subsegmentAlignment="true">
      <Role schemeIdUri="urn:mpeg:dash:role:2011" value="main"/>
      <ContentComponent contentType="video" id="1"/>
      <Representation id="137" bandwidth="4000000" codecs="avc1.640028"
                      width="1920" height="1080" frameRate="30000/1001">
        <BaseURL>https://cdn.example.com/video/137</BaseURL>
        <SegmentList duration="5000" timescale="1000">
          <Initialization sourceURL="init.mp4"/>
          <SegmentURL media="seg-1.m4s"/>
          <SegmentURL media="seg-2.m4s"/>
        </SegmentList>
      </Representation>
      <Representation id="136" bandwidth="2000000" codecs="avc1.4d401f"
                      width="1280" height="720" frameRate="30">
        <BaseURL>https://cdn.example.com/video/136</BaseURL>
        <SegmentTemplate media="$Number$.m4s" initialization="init.mp4"
                         startNumber="1"/>
      </Representation>
    </AdaptationSet>
    <AdaptationSet id="1" mimeType="audio/mp4" lang="en">
      <Representation id="140" bandwidth="128000" codecs="mp4a.40.2"
                      audioSamplingRate="44100">
        <AudioChannelConfiguration schemeIdUri="urn:mpeg:dash:23003:3:audio_channel_configuration:2011" value="2"/>
        <BaseURL>https://cdn.example.com/audio/140</BaseURL>
        <SegmentList>
          <Initialization sourceURL="init.mp4"/>
          <SegmentURL media="a-1.m4s"/>
        </SegmentList>
      </Representation>
      <Representation id="139" bandwidth="48000" codecs="mp4a.40.5">
        <BaseURL>https://cdn.example.com/audio/139</BaseURL>
        <SegmentBase indexRange="600-900">
          <Initialization range="0-599"/>
        </SegmentBase>
      </Representation>
    </AdaptationSet>
  </Period>
</MPD>
"""


def make_format(itag: int, **overrides: Any) -> dict[str, Any]:
    """Wire-format dict for one entry of ``formats``/``adaptiveFormats``."""
    entry: dict[str, Any] = {
        "itag": itag,
        "url": f"https://media.example.com/videoplayback?itag={itag}",
        "mimeType": 'video/mp4; codecs="avc1.4d401e"',
        "quality": "medium",
        "width": 640,
        "height": 360,
        "fps": 30,
        "bitrate": 500000,
        "contentLength": "12345",
        "approxDurationMs": "212091",
    }
    entry.update(overrides)
    return entry


def make_player_response(**overrides: Any) -> dict[str, Any]:
    response: dict[str, Any] = {
        "playabilityStatus": {"status": "OK"},
        "streamingData": {
            "expiresInSeconds": "21540",
            "formats": [make_format(22, quality="hd720"), make_format(18)],
            "adaptiveFormats": [
                make_format(251, mimeType='audio/webm; codecs="opus"',
                            width=None, height=None, fps=None, quality="tiny"),
                make_format(137, quality="hd1080", width=1920, height=1080),
                make_format(140, mimeType='audio/mp4; codecs="mp4a.40.2"',
                            width=None, height=None, fps=None, quality="tiny"),
            ],
            "dashManifestUrl": "https://manifest.example.com/api/manifest/dash/id/abc",
        },
        "videoDetails": {
            "videoId": "VfWgE7D1pYY",
            "title": "Sample Video",
            "author": "Sample Channel",
            "lengthSeconds": "212",
            "viewCount": "1234567",
            "isPrivate": False,
            "isLiveContent": False,
            "keywords": ["ignored"],
        },
    }
    response.update(overrides)
    return response


def make_envelope(payload: dict[str, Any] | str) -> bytes:
    """URL-encoded body the info endpoint returns."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return urlencode({"status": "ok", "player_response": text}).encode("utf-8")


@pytest.fixture()
def sample_mpd() -> str:
    return SAMPLE_MPD


@pytest.fixture()
def player_response() -> dict[str, Any]:
    return make_player_response()
