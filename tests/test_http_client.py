"""Unit tests for the shared HTTP client."""

from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest
import requests

from narrated_video_pipeline.services.http_client import HttpClient, HttpStatusError


def _response(status_code: int, chunks=(), text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.iter_content.return_value = list(chunks)
    response.__enter__.return_value = response
    return response


class TestHttpClient:
    def test_default_session_retries_get_only(self) -> None:
        client = HttpClient(retries=2)
        retry = client.session.get_adapter("https://example.test").max_retries

        assert retry.total == 2
        assert "GET" in retry.allowed_methods
        assert "POST" not in retry.allowed_methods

    def test_download_to_streams_chunks(self, tmp_path: Path) -> None:
        session = Mock()
        session.get.return_value = _response(200, chunks=[b"abc", b"", b"def"])
        client = HttpClient(session=session)

        output_path = tmp_path / "nested" / "video.mp4"
        written = client.download_to("https://cdn.example.test/v.mp4", output_path, timeout=3)

        assert written == 6
        assert output_path.read_bytes() == b"abcdef"
        session.get.assert_called_once_with("https://cdn.example.test/v.mp4", stream=True, timeout=3)

    def test_download_bounded_by_overall_deadline(self, tmp_path: Path) -> None:
        session = Mock()
        session.get.return_value = _response(200, chunks=[b"a", b"b", b"c", b"d"])
        client = HttpClient(session=session)

        with patch("narrated_video_pipeline.services.http_client.time") as clock:
            clock.monotonic.side_effect = [0.0, 4.0, 8.0, 12.0, 16.0]
            with pytest.raises(requests.Timeout, match="exceeded 10"):
                client.download_to("https://cdn.example.test/v.mp4", tmp_path / "v.mp4", timeout=10)

        assert (tmp_path / "v.mp4").read_bytes() == b"ab"

    def test_download_error_status(self, tmp_path: Path) -> None:
        session = Mock()
        session.get.return_value = _response(403, text="AccessDenied")
        client = HttpClient(session=session)

        with pytest.raises(HttpStatusError) as exc_info:
            client.download_to("https://cdn.example.test/v.mp4", tmp_path / "v.mp4", timeout=3)

        assert exc_info.value.status_code == 403
        assert exc_info.value.body == "AccessDenied"

    def test_post_bytes(self) -> None:
        session = Mock()
        session.post.return_value = _response(200)
        client = HttpClient(session=session)

        client.post_bytes("https://storage.example.test/x", b"data", headers={"a": "b"}, timeout=9)

        session.post.assert_called_once_with("https://storage.example.test/x", data=b"data", headers={"a": "b"}, timeout=9)

    def test_post_json_error(self) -> None:
        session = Mock()
        session.post.return_value = _response(500, text="boom")
        client = HttpClient(session=session)

        with pytest.raises(HttpStatusError, match="HTTP 500"):
            client.post_json("https://api.example.test/x", {"k": "v"})
