"""Tests for the Typer command-line interface."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import pytest
from conftest import FakeTransport, make_envelope, make_player_response
from typer.testing import CliRunner

from maguro import __version__
from maguro.cli import app as app_module
from maguro.models.config import DEFAULT_INFO_ENDPOINT

runner = CliRunner()

VIDEO_ID = "VfWgE7D1pYY"
MEDIA_URL = "https://media.example.com/videoplayback?itag={itag}"


@pytest.fixture()
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "config" / "config.ini"
    monkeypatch.setattr(app_module, "CONFIG_FILE", path)
    return path


def test_version() -> None:
    result = runner.invoke(app_module.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_defaults(config_file: Path) -> None:
    result = runner.invoke(app_module.app, ["init", "--force"])
    assert result.exit_code == 0
    assert config_file.is_file()
    assert "output_template" in config_file.read_text(encoding="utf-8")


def test_show_config(config_file: Path) -> None:
    result = runner.invoke(app_module.app, ["--show-config"])
    assert result.exit_code == 0
    assert "chunk_size" in result.output


def test_invalid_config_exits_with_error(config_file: Path) -> None:
    config_file.parent.mkdir(parents=True)
    config_file.write_text("[DEFAULT]\nchunk_size = tiny\n", encoding="utf-8")
    result = runner.invoke(app_module.app, ["--show-config"])
    assert result.exit_code == 1
    assert "ConfigurationError" in result.output


def test_manifest_list(config_file: Path, tmp_path: Path, sample_mpd: str) -> None:
    mpd = tmp_path / "sample.mpd"
    mpd.write_text(sample_mpd, encoding="utf-8")
    result = runner.invoke(app_module.app, ["manifest", str(mpd), "--list"])
    assert result.exit_code == 0
    assert "137" in result.output
    assert "140" in result.output


def test_manifest_unknown_representation(
    config_file: Path, tmp_path: Path, sample_mpd: str
) -> None:
    mpd = tmp_path / "sample.mpd"
    mpd.write_text(sample_mpd, encoding="utf-8")
    result = runner.invoke(app_module.app, ["manifest", str(mpd), "-r", "999"])
    assert result.exit_code == 1
    assert "FormatNotFoundError" in result.output


@asynccontextmanager
async def _serve(transport: FakeTransport) -> AsyncIterator[FakeTransport]:
    yield transport


@pytest.fixture()
def fake_transport(
    config_file: Path, monkeypatch: pytest.MonkeyPatch
) -> FakeTransport:
    transport = FakeTransport(
        {
            DEFAULT_INFO_ENDPOINT.format(video_id=VIDEO_ID): make_envelope(
                make_player_response()
            ),
            MEDIA_URL.format(itag=22): [b"progressive-", b"body"],
            MEDIA_URL.format(itag=251): [b"opus"],
        }
    )
    monkeypatch.setattr(app_module, "_transport_for", lambda config: _serve(transport))
    return transport


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


def test_download_list_formats(fake_transport: FakeTransport, workdir: Path) -> None:
    result = runner.invoke(app_module.app, ["download", VIDEO_ID, "-F"])
    assert result.exit_code == 0
    assert "137" in result.output
    assert "251" in result.output
    assert list(workdir.iterdir()) == []
    assert fake_transport.requested == [DEFAULT_INFO_ENDPOINT.format(video_id=VIDEO_ID)]


def test_download_unknown_format(fake_transport: FakeTransport, workdir: Path) -> None:
    result = runner.invoke(app_module.app, ["download", VIDEO_ID, "-f", "999"])
    assert result.exit_code == 1
    assert "FormatNotFoundError" in result.output
    assert list(workdir.iterdir()) == []


def test_download_output_template(
    fake_transport: FakeTransport, workdir: Path
) -> None:
    result = runner.invoke(
        app_module.app, ["download", VIDEO_ID, "-f", "22", "-o", "clip-{itag}.{ext}"]
    )
    assert result.exit_code == 0
    assert (workdir / "clip-22.mp4").read_bytes() == b"progressive-body"
    assert MEDIA_URL.format(itag=22) in fake_transport.requested
