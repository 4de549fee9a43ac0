"""Resource stager: per-job working directories and input downloads.

Every file a job touches lives under one directory created for that job, so a
single recursive removal reclaims everything on both success and failure.
"""

from pathlib import Path
from typing import Optional, Union

import requests

from ..errors import DownloadError, PipelineTimeoutError, StorageError
from ..logging_config import LoggerMixin
from ..models import Job, StagedInputs
from ..utils.file_utils import create_unique_directory, is_within_directory, remove_directory, safe_filename
from ..utils.validation import AUDIO_EXTENSIONS, VIDEO_EXTENSIONS, extension_from_url
from .http_client import HttpClient, HttpStatusError


class ResourceStager(LoggerMixin):
    """Allocate job-scoped directories, fetch remote media into them, remove them."""

    def __init__(
        self,
        work_root: Union[str, Path],
        http_client: Optional[HttpClient] = None,
        download_timeout: float = 120.0,
    ):
        self.work_root = Path(work_root)
        self.http = http_client or HttpClient()
        self.download_timeout = download_timeout

    def allocate(self, job: Job) -> Path:
        """Create the working directory for ``job`` and record it on the job.

        Raises:
            StorageError: If the directory cannot be created or the job already has one
        """
        if job.work_dir is not None:
            raise StorageError(f"Job {job.id} already owns a working directory: {job.work_dir}")

        prefix = f"job-{safe_filename(job.id, max_length=64)}-"
        try:
            work_dir = create_unique_directory(self.work_root, prefix)
        except OSError as e:
            self.logger.error("Failed to create working directory", job_id=job.id, error=str(e))
            raise StorageError(f"Cannot create working directory under {self.work_root}: {e}") from e

        job.work_dir = work_dir
        self.logger.info("Working directory allocated", job_id=job.id, work_dir=str(work_dir))
        return work_dir

    def stage(self, job: Job) -> StagedInputs:
        """Allocate the job's directory and download both media inputs into it.

        If a download fails the directory stays recorded on ``job`` so the
        caller can release it.

        Raises:
            StorageError: If the working directory cannot be created
            DownloadError: If either fetch does not complete with a success status
            PipelineTimeoutError: If either fetch exceeds the download timeout
        """
        work_dir = self.allocate(job)

        video_ext = extension_from_url(job.video_source_url, VIDEO_EXTENSIONS, ".mp4")
        audio_ext = extension_from_url(job.audio_source_url, AUDIO_EXTENSIONS, ".mp3")
        video_path = work_dir / f"video{video_ext}"
        audio_path = work_dir / f"audio{audio_ext}"

        self._download(job, "video", job.video_source_url, video_path)
        self._download(job, "audio", job.audio_source_url, audio_path)

        return StagedInputs(video_path=video_path, audio_path=audio_path, work_dir=work_dir)

    def path_for(self, job: Job, name: str) -> Path:
        """Return a path for ``name`` inside the job's working directory."""
        if job.work_dir is None:
            raise StorageError(f"Job {job.id} has no working directory")
        path = job.work_dir / name
        if not is_within_directory(job.work_dir, path):
            raise StorageError(f"Path {name!r} escapes the working directory of job {job.id}")
        return path

    def release(self, work_dir: Optional[Union[str, Path]]) -> None:
        """Remove ``work_dir`` and everything under it. Safe to call repeatedly.

        Raises:
            StorageError: If the directory exists but cannot be removed
        """
        if work_dir is None:
            return
        try:
            removed = remove_directory(work_dir)
        except OSError as e:
            raise StorageError(f"Failed to remove working directory {work_dir}: {e}") from e

        if removed:
            self.logger.info("Working directory released", work_dir=str(work_dir))
        else:
            self.logger.debug("Working directory already gone", work_dir=str(work_dir))

    def _download(self, job: Job, kind: str, url: str, output_path: Path) -> None:
        self.logger.info("Downloading input", job_id=job.id, kind=kind, output_path=str(output_path))
        try:
            written = self.http.download_to(url, output_path, timeout=self.download_timeout)
        except requests.Timeout as e:
            self.logger.error("Download timed out", job_id=job.id, kind=kind, timeout=self.download_timeout)
            raise PipelineTimeoutError(
                f"Timed out downloading {kind}", details=f"{kind} download exceeded {self.download_timeout}s: {e}"
            ) from e
        except HttpStatusError as e:
            self.logger.error("Download rejected", job_id=job.id, kind=kind, status=e.status_code)
            raise DownloadError(f"Failed to download {kind}", details=str(e)) from e
        except requests.RequestException as e:
            self.logger.error("Download failed", job_id=job.id, kind=kind, error=str(e))
            raise DownloadError(f"Failed to download {kind}", details=str(e)) from e
        except OSError as e:
            raise StorageError(f"Failed to write {kind} to {output_path}", details=str(e)) from e

        if written == 0:
            raise DownloadError(f"Failed to download {kind}", details=f"{kind} source returned an empty body")

        self.logger.info("Input downloaded", job_id=job.id, kind=kind, size_bytes=written)
