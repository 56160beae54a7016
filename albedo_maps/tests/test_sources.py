"""Tests for source image acquisition."""
from __future__ import annotations

import base64
import io
from pathlib import Path

import pytest
import requests
from PIL import Image

from albedo_maps.core.errors import SourceError
from albedo_maps.modules import sources


def _png_bytes(color: tuple[int, int, int, int] = (255, 0, 0, 255), size: tuple[int, int] = (3, 2)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class _FakeResponse:
    def __init__(self, content: bytes, status: int = 200) -> None:
        self.content = content
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_data_uri_is_decoded() -> None:
    payload = base64.b64encode(_png_bytes()).decode("ascii")
    source = sources.load_source(f"  data:image/png;base64,{payload}\n")
    assert source.name is None
    assert source.grid.size == (3, 2)
    assert source.grid.sample(0, 0) == pytest.approx((1.0, 0.0, 0.0, 1.0))


def test_invalid_base64_raises_source_error() -> None:
    with pytest.raises(SourceError):
        sources.load_source("data:image/png;base64,@@not-base64@@")


def test_url_is_downloaded(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_get(url: str, timeout: float) -> _FakeResponse:
        calls.append((url, timeout))
        return _FakeResponse(_png_bytes((0, 255, 0, 255)))

    monkeypatch.setattr(sources.requests, "get", fake_get)
    source = sources.load_source("https://example.com/textures/brick.png", timeout=5.0)
    assert calls == [("https://example.com/textures/brick.png", 5.0)]
    assert source.name == "brick.png"
    assert source.grid.sample(2, 1) == pytest.approx((0.0, 1.0, 0.0, 1.0))


def test_http_error_raises_source_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sources.requests, "get", lambda url, timeout: _FakeResponse(b"", status=404))
    with pytest.raises(SourceError):
        sources.load_source("http://example.com/missing.png")


def test_connection_error_raises_source_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def refuse(url: str, timeout: float) -> _FakeResponse:
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(sources.requests, "get", refuse)
    with pytest.raises(SourceError):
        sources.load_source("http://example.com/a.png")


def test_local_file_is_read(tmp_path: Path) -> None:
    path = tmp_path / "albedo.png"
    path.write_bytes(_png_bytes((0, 0, 255, 255), (4, 4)))
    source = sources.load_source(str(path))
    assert source.name == "albedo.png"
    assert source.data == path.read_bytes()
    assert source.grid.size == (4, 4)


@pytest.mark.parametrize("reference", ["", "   ", "ftp://example.com/a.png"])
def test_unusable_references_raise(reference: str) -> None:
    with pytest.raises(SourceError):
        sources.load_source(reference)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(SourceError):
        sources.load_source(str(tmp_path / "nope.png"))


def test_undecodable_bytes_raise() -> None:
    payload = base64.b64encode(b"definitely not an image").decode("ascii")
    with pytest.raises(SourceError):
        sources.load_source(f"data:image/png;base64,{payload}")


def test_line_wrapped_data_uri_is_decoded() -> None:
    png = _png_bytes((0, 0, 255, 255), (40, 30))
    wrapped = base64.encodebytes(png).decode("ascii")
    assert "\n" in wrapped
    source = sources.load_source("data:image/png;base64," + wrapped)
    assert source.grid.size == (40, 30)
    assert source.grid.sample(39, 29) == pytest.approx((0.0, 0.0, 1.0, 1.0))


@pytest.mark.parametrize("reference", ["data:image/png;base64", "data:image/png;base64, \n "])
def test_data_uri_without_payload_raises(reference: str) -> None:
    with pytest.raises(SourceError):
        sources.load_source(reference)
