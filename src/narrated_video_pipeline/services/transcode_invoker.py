"""Transcode invoker: mux video, narration audio and burned-in subtitles with FFmpeg.

Command construction lives on the ``TranscodeRequest`` value object so it can
be checked without spawning a process; ``TranscodeInvoker.invoke`` runs one
FFmpeg process per call, follows its ``-progress`` output, enforces the
timeout and verifies the output file.
"""

import subprocess
import threading
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Deque, List, Optional

from ..errors import PipelineTimeoutError, TranscodeError
from ..logging_config import LoggerMixin

STDERR_TAIL_LINES = 40

_OPTION_SPECIAL = ("\\", ":", "'")
_GRAPH_SPECIAL = ("\\", "'", "[", "]", ",", ";")


def escape_filter_path(path: Path) -> str:
    """Escape a file path for use as an FFmpeg filtergraph option value.

    FFmpeg unescapes the value twice: once when splitting the filtergraph and
    once when splitting the filter's ``key=value`` options, so the path is
    escaped for the option level first and the result for the graph level.
    """
    value = str(path)
    for special in (_OPTION_SPECIAL, _GRAPH_SPECIAL):
        for char in special:
            value = value.replace(char, "\\" + char)
    return value


@dataclass(frozen=True)
class TranscodeRequest:
    """Description of one mux operation.

    Exactly one video stream (first input) and one audio stream (second
    input) are mapped; the source video's own audio is discarded.
    """

    video_path: Path
    audio_path: Path
    output_path: Path
    subtitle_path: Optional[Path] = None
    subtitle_force_style: Optional[str] = None
    video_codec: str = "libx264"
    preset: str = "veryfast"
    crf: int = 23
    pixel_format: str = "yuv420p"
    audio_codec: str = "aac"
    audio_bitrate: str = "192k"
    shortest: bool = True
    faststart: bool = True

    def __post_init__(self):
        """Validate request data."""
        if not 0 <= self.crf <= 51:
            raise ValueError("CRF must be between 0 and 51")
        if self.subtitle_force_style and self.subtitle_path is None:
            raise ValueError("force_style requires a subtitle file")

    @property
    def burns_subtitles(self) -> bool:
        return self.subtitle_path is not None

    @property
    def video_encoding(self) -> str:
        """Burned-in subtitles change pixel data, so the video cannot be stream-copied."""
        return self.video_codec if self.burns_subtitles else "copy"

    def subtitle_filter(self) -> Optional[str]:
        """The ``-vf`` value that burns the subtitle file in, if any."""
        if self.subtitle_path is None:
            return None
        value = f"subtitles=filename={escape_filter_path(self.subtitle_path)}"
        if self.subtitle_force_style:
            value += f":force_style='{self.subtitle_force_style}'"
        return value

    def build_command(self, ffmpeg_binary: str = "ffmpeg") -> List[str]:
        """Build the FFmpeg argument list. No side effects."""
        command = [
            ffmpeg_binary,
            "-hide_banner",
            "-nostdin",
            "-nostats",
            "-loglevel", "error",
            "-progress", "pipe:1",
            "-i", str(self.video_path),
            "-i", str(self.audio_path),
            "-map", "0:v:0",
            "-map", "1:a:0",
        ]

        subtitle_filter = self.subtitle_filter()
        if subtitle_filter:
            command.extend(["-vf", subtitle_filter])
            command.extend([
                "-c:v", self.video_codec,
                "-preset", self.preset,
                "-crf", str(self.crf),
                "-pix_fmt", self.pixel_format,
            ])
        else:
            command.extend(["-c:v", "copy"])

        command.extend([
            "-c:a", self.audio_codec,
            "-b:a", self.audio_bitrate,
        ])
        if self.shortest:
            command.append("-shortest")
        if self.faststart:
            command.extend(["-movflags", "+faststart"])
        command.extend(["-y", str(self.output_path)])
        return command


@dataclass
class Completion:
    """Outcome of a successful transcode."""

    output_path: Path
    returncode: int
    elapsed: float  # seconds
    size_bytes: int
    diagnostics: str = ""


class TranscodeInvoker(LoggerMixin):
    """Run FFmpeg for a transcode request and verify the result."""

    def __init__(
        self,
        ffmpeg_binary: str = "ffmpeg",
        timeout: float = 600.0,
        video_codec: str = "libx264",
        preset: str = "veryfast",
        crf: int = 23,
        audio_codec: str = "aac",
        audio_bitrate: str = "192k",
    ):
        self.ffmpeg_binary = ffmpeg_binary
        self.timeout = timeout
        self.video_codec = video_codec
        self.preset = preset
        self.crf = crf
        self.audio_codec = audio_codec
        self.audio_bitrate = audio_bitrate

    def build_request(
        self,
        video_path: Path,
        audio_path: Path,
        output_path: Path,
        subtitle_path: Optional[Path] = None,
        subtitle_force_style: Optional[str] = None,
    ) -> TranscodeRequest:
        """Create a request using this invoker's encoding profile."""
        return TranscodeRequest(
            video_path=video_path,
            audio_path=audio_path,
            output_path=output_path,
            subtitle_path=subtitle_path,
            subtitle_force_style=subtitle_force_style,
            video_codec=self.video_codec,
            preset=self.preset,
            crf=self.crf,
            audio_codec=self.audio_codec,
            audio_bitrate=self.audio_bitrate,
        )

    def invoke(
        self,
        request: TranscodeRequest,
        progress_callback=None,
        expected_duration: Optional[float] = None,
    ) -> Completion:
        """
        Launch one FFmpeg process for ``request`` and wait for it.

        Args:
            request: Mux description
            progress_callback: Optional object with ``on_stage_progress``
            expected_duration: Output length estimate in seconds, enables percentages

        Returns:
            Completion for a verified output file

        Raises:
            PipelineTimeoutError: If FFmpeg does not exit within the timeout
            TranscodeError: On launch failure, non-zero exit or missing output
        """
        command = request.build_command(self.ffmpeg_binary)
        self.logger.info(
            "Starting transcode",
            command=subprocess.list2cmdline(command),
            video_encoding=request.video_encoding,
            timeout=self.timeout,
        )

        started = time.monotonic()
        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            self.logger.error("Failed to launch FFmpeg", binary=self.ffmpeg_binary, error=str(e))
            raise TranscodeError(f"Failed to launch {self.ffmpeg_binary}", details=str(e)) from e

        stderr_tail: Deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        readers = [
            threading.Thread(
                target=self._follow_progress,
                args=(process.stdout, progress_callback, expected_duration),
                daemon=True,
            ),
            threading.Thread(target=self._collect_stderr, args=(process.stderr, stderr_tail), daemon=True),
        ]
        for reader in readers:
            reader.start()

        try:
            returncode = process.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            process.kill()
            process.wait()
            self._join(readers)
            self._discard_partial(request.output_path)
            self.logger.error("Transcode timed out", timeout=self.timeout)
            raise PipelineTimeoutError(
                "Transcode timed out",
                details=f"FFmpeg did not finish within {self.timeout}s",
            ) from e

        self._join(readers)
        elapsed = time.monotonic() - started
        diagnostics = "\n".join(stderr_tail)

        if returncode != 0:
            self._discard_partial(request.output_path)
            self.logger.error("FFmpeg failed", returncode=returncode, stderr=diagnostics)
            raise TranscodeError(
                f"FFmpeg exited with code {returncode}",
                details=diagnostics or f"FFmpeg exited with code {returncode}",
            )

        output_path = Path(request.output_path)
        if not output_path.exists() or output_path.stat().st_size == 0:
            self.logger.error("FFmpeg reported success without output", output_path=str(output_path))
            raise TranscodeError(
                "Transcode produced no output",
                details=f"FFmpeg exited with code 0 but {output_path} is missing or empty",
            )

        completion = Completion(
            output_path=output_path,
            returncode=returncode,
            elapsed=elapsed,
            size_bytes=output_path.stat().st_size,
            diagnostics=diagnostics,
        )
        self.logger.info(
            "Transcode completed",
            output_path=str(output_path),
            elapsed=f"{elapsed:.2f}s",
            size_mb=f"{completion.size_bytes / (1024 * 1024):.2f}MB",
        )
        return completion

    # ---------------------------
    # Process output handling
    # ---------------------------

    def _follow_progress(self, stream, progress_callback, expected_duration: Optional[float]) -> None:
        """Parse ``key=value`` lines emitted by ``-progress pipe:1``."""
        last_percent = -1
        for raw_line in stream:
            key, _, value = raw_line.strip().partition("=")
            if key != "out_time_ms" or not expected_duration:
                continue
            try:
                out_seconds = int(value) / 1_000_000
            except ValueError:
                continue

            percent = max(0, min(100, int(out_seconds / expected_duration * 100)))
            if percent == last_percent:
                continue
            last_percent = percent

            if percent % 10 == 0:
                self.logger.info("Transcode progress", percent=percent)
            if progress_callback is not None and hasattr(progress_callback, "on_stage_progress"):
                progress_callback.on_stage_progress("transcode", percent, 100, f"Encoding {percent}%")

    @staticmethod
    def _collect_stderr(stream, tail: Deque[str]) -> None:
        for raw_line in stream:
            line = raw_line.rstrip()
            if line:
                tail.append(line)

    @staticmethod
    def _join(readers: List[threading.Thread]) -> None:
        for reader in readers:
            reader.join(timeout=5)

    def _discard_partial(self, output_path: Path) -> None:
        path = Path(output_path)
        if path.exists():
            path.unlink()
            self.logger.debug("Partial output removed", output_path=str(path))
