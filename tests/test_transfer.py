"""Tests for the HTTP transfer helpers."""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from geojsonio.transfer import TIMEOUT, download_file, upload_file


def _streaming_response(chunks: list[bytes], status: int = 200) -> MagicMock:
    response = MagicMock()
    response.iter_content.return_value = iter(chunks)
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status} Error", response=response
        )
    return response


class TestDownloadFile:
    """Test downloading files."""

    def test_download_to_path(self, tmp_path: Path) -> None:
        """Test the body is streamed to the destination."""
        dest = tmp_path / "data.geojson"
        response = _streaming_response([b'{"type":', b'"Point"}'])

        with patch("geojsonio.transfer.requests.get", return_value=response) as get:
            result = download_file("https://example.com/data.geojson", dest)

        assert result == dest
        assert dest.read_bytes() == b'{"type":"Point"}'
        get.assert_called_once_with("https://example.com/data.geojson", stream=True, timeout=TIMEOUT)
        response.close.assert_called_once()

    def test_download_to_temp_file(self) -> None:
        """Test a temporary file keeps the URL's extension."""
        response = _streaming_response([b"<kml/>"])

        with patch("geojsonio.transfer.requests.get", return_value=response):
            result = download_file("https://example.com/places.kml?token=abc")

        try:
            assert result.suffix == ".kml"
            assert result.read_bytes() == b"<kml/>"
        finally:
            result.unlink()

    def test_http_error_propagates(self, tmp_path: Path) -> None:
        """Test HTTP errors are raised unchanged and no file is left."""
        dest = tmp_path / "missing.zip"
        response = _streaming_response([], status=404)

        with patch("geojsonio.transfer.requests.get", return_value=response):
            with pytest.raises(requests.HTTPError, match="404"):
                download_file("https://example.com/missing.zip", dest)

        assert not dest.exists()

    def test_connection_error_removes_temp_file(self, tmp_path: Path) -> None:
        """Test a failed connection leaves no temporary file behind."""
        created: list[str] = []
        real_temp_file = tempfile.NamedTemporaryFile

        def tracking_temp_file(*args, **kwargs):
            f = real_temp_file(*args, dir=tmp_path, **kwargs)
            created.append(f.name)
            return f

        with patch("geojsonio.transfer.tempfile.NamedTemporaryFile", side_effect=tracking_temp_file):
            with patch(
                "geojsonio.transfer.requests.get",
                side_effect=requests.ConnectionError("connection refused"),
            ):
                with pytest.raises(requests.ConnectionError):
                    download_file("https://example.com/x.zip")

        assert len(created) == 1
        assert not Path(created[0]).exists()


class TestUploadFile:
    """Test uploading files."""

    def test_upload(self, tmp_path: Path) -> None:
        """Test the file is posted as a multipart field."""
        path = tmp_path / "roads.zip"
        path.write_bytes(b"zip-bytes")
        response = MagicMock(ok=True)

        with patch("geojsonio.transfer.requests.post", return_value=response) as post:
            result = upload_file("http://ogre.adc4gis.com/convert", path)

        assert result is response
        args, kwargs = post.call_args
        assert args == ("http://ogre.adc4gis.com/convert",)
        assert kwargs["timeout"] == TIMEOUT
        assert kwargs["files"]["upload"][0] == "roads.zip"
