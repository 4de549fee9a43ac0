"""Shared HTTP client for downloads, storage uploads and collaborator APIs."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..logging_config import LoggerMixin


DOWNLOAD_CHUNK_SIZE = 1024 * 1024


class HttpStatusError(Exception):
    """Raised when a response carries a non-success status."""

    def __init__(self, url: str, status_code: int, body: str):
        super().__init__(f"HTTP {status_code} from {url}: {body}")
        self.url = url
        self.status_code = status_code
        self.body = body


class HttpClient(LoggerMixin):
    """HTTP client with connection retries for idempotent requests.

    Only GET is retried; uploads are sent once so a storage backend that
    rejects duplicates never sees a replay.
    """

    def __init__(self, session: Optional[requests.Session] = None, retries: int = 3):
        if session is None:
            retry = Retry(
                total=retries,
                connect=retries,
                read=retries,
                status=retries,
                backoff_factor=0.5,
                status_forcelist=(429, 500, 502, 503, 504),
                allowed_methods=frozenset(["GET"]),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry)
            session = requests.Session()
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

    def download_to(self, url: str, output_path: Path, timeout: float) -> int:
        """Stream ``url`` into ``output_path`` and return the number of bytes written.

        ``timeout`` bounds the whole transfer, not only the connect and each
        read, so a server trickling bytes cannot hold the download open.

        Raises:
            requests.Timeout: If the transfer runs past ``timeout`` seconds
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        deadline = time.monotonic() + timeout

        with self.session.get(url, stream=True, timeout=timeout) as response:
            self._check(response, url)
            written = 0
            with open(output_path, "wb") as handle:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if time.monotonic() > deadline:
                        raise requests.Timeout(f"Download of {url} exceeded {timeout}s after {written} bytes")
                    if not chunk:
                        continue
                    handle.write(chunk)
                    written += len(chunk)
        return written

    def post_bytes(
        self,
        url: str,
        data: bytes,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 300.0,
    ) -> requests.Response:
        """POST a raw body and return the successful response."""
        response = self.session.post(url, data=data, headers=dict(headers or {}), timeout=timeout)
        self._check(response, url)
        return response

    def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 300.0,
    ) -> requests.Response:
        """POST a JSON body and return the successful response."""
        response = self.session.post(url, json=payload, headers=dict(headers or {}), timeout=timeout)
        self._check(response, url)
        return response

    @staticmethod
    def _check(response: requests.Response, url: str) -> None:
        if 200 <= response.status_code < 300:
            return
        body = response.text or ""
        raise HttpStatusError(url, response.status_code, body[:500])
