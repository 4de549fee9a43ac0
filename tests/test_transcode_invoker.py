"""Tests for FFmpeg command construction and process handling."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from narrated_video_pipeline.errors import PipelineTimeoutError, TranscodeError
from narrated_video_pipeline.services.transcode_invoker import (
    TranscodeInvoker,
    TranscodeRequest,
    escape_filter_path,
)


def read_ffmpeg_token(value: str, terminators: str):
    """Read one token the way FFmpeg does: a backslash keeps the next character literally."""
    token = []
    index = 0
    while index < len(value):
        char = value[index]
        if char == "\\" and index + 1 < len(value):
            token.append(value[index + 1])
            index += 2
            continue
        if char in terminators:
            break
        token.append(char)
        index += 1
    return "".join(token), value[index:]


@pytest.fixture
def request_paths(tmp_path: Path):
    return {
        "video_path": tmp_path / "video.mp4",
        "audio_path": tmp_path / "audio.mp3",
        "output_path": tmp_path / "output.mp4",
    }


class TestTranscodeRequest:
    def test_stream_copy_without_subtitles(self, request_paths) -> None:
        command = TranscodeRequest(**request_paths).build_command("ffmpeg")

        assert command[0] == "ffmpeg"
        assert command[command.index("-c:v") + 1] == "copy"
        assert "-vf" not in command
        assert command[-2:] == ["-y", str(request_paths["output_path"])]

    def test_maps_first_video_and_second_audio(self, request_paths) -> None:
        command = TranscodeRequest(**request_paths).build_command()

        inputs = [command[i + 1] for i, arg in enumerate(command) if arg == "-i"]
        maps = [command[i + 1] for i, arg in enumerate(command) if arg == "-map"]
        assert inputs == [str(request_paths["video_path"]), str(request_paths["audio_path"])]
        assert maps == ["0:v:0", "1:a:0"]
        assert "-shortest" in command
        assert command[command.index("-movflags") + 1] == "+faststart"
        assert command[command.index("-c:a") + 1] == "aac"
        assert command[command.index("-b:a") + 1] == "192k"

    def test_burned_subtitles_reencode_video(self, request_paths, tmp_path: Path) -> None:
        subtitle = tmp_path / "subtitles.ass"
        command = TranscodeRequest(subtitle_path=subtitle, **request_paths).build_command()

        assert command[command.index("-vf") + 1] == f"subtitles=filename={escape_filter_path(subtitle)}"
        assert command[command.index("-c:v") + 1] == "libx264"
        assert command[command.index("-preset") + 1] == "veryfast"
        assert command[command.index("-crf") + 1] == "23"
        assert command[command.index("-pix_fmt") + 1] == "yuv420p"

    def test_force_style_appended(self, request_paths, tmp_path: Path) -> None:
        request = TranscodeRequest(
            subtitle_path=tmp_path / "subtitles.srt",
            subtitle_force_style="FontSize=11,Bold=1",
            **request_paths,
        )
        assert request.subtitle_filter().endswith(":force_style='FontSize=11,Bold=1'")

    def test_force_style_requires_subtitles(self, request_paths) -> None:
        with pytest.raises(ValueError):
            TranscodeRequest(subtitle_force_style="Bold=1", **request_paths)

    def test_invalid_crf(self, request_paths) -> None:
        with pytest.raises(ValueError):
            TranscodeRequest(crf=60, **request_paths)

    def test_escape_filter_path_both_levels(self) -> None:
        assert escape_filter_path(Path("/tmp/job:1/subtitles.ass")) == "/tmp/job\\\\:1/subtitles.ass"

    @pytest.mark.parametrize(
        "name",
        ["job:1/subtitles.ass", "it's/subtitles.ass", "a,b[c];d/subtitles.ass", "back\\slash/subtitles.ass"],
    )
    def test_subtitle_filter_survives_ffmpeg_parsing(self, request_paths, tmp_path: Path, name: str) -> None:
        subtitle = tmp_path / name
        request = TranscodeRequest(subtitle_path=subtitle, **request_paths)

        graph_token, rest = read_ffmpeg_token(request.subtitle_filter(), "[],;")
        assert rest == ""
        filter_name, options = graph_token.split("=", 1)
        option_token, rest = read_ffmpeg_token(options, ":")

        assert filter_name == "subtitles"
        assert rest == ""
        assert option_token == f"filename={subtitle}"

    def test_invoker_profile_applied(self, request_paths) -> None:
        invoker = TranscodeInvoker(video_codec="libx265", preset="fast", crf=28, audio_bitrate="128k")
        request = invoker.build_request(subtitle_path=Path("s.ass"), **request_paths)

        assert request.video_codec == "libx265"
        assert request.preset == "fast"
        assert request.crf == 28
        assert request.audio_bitrate == "128k"


class TestInvoke:
    def test_success(self, fake_ffmpeg, request_paths) -> None:
        binary = fake_ffmpeg(
            """
            echo "out_time_ms=500000"
            echo "out_time_ms=1000000"
            echo "progress=end"
            printf 'mp4-bytes' > "$OUT"
            exit 0
            """
        )
        progress = Mock()
        completion = TranscodeInvoker(ffmpeg_binary=binary, timeout=10).invoke(
            TranscodeRequest(**request_paths), progress_callback=progress, expected_duration=1.0
        )

        assert completion.output_path == request_paths["output_path"]
        assert completion.returncode == 0
        assert completion.size_bytes == len(b"mp4-bytes")
        progress.on_stage_progress.assert_any_call("transcode", 50, 100, "Encoding 50%")
        progress.on_stage_progress.assert_any_call("transcode", 100, 100, "Encoding 100%")

    def test_non_zero_exit(self, fake_ffmpeg, request_paths) -> None:
        binary = fake_ffmpeg(
            """
            printf 'partial' > "$OUT"
            echo "Invalid data found when processing input" >&2
            exit 1
            """
        )
        with pytest.raises(TranscodeError) as exc_info:
            TranscodeInvoker(ffmpeg_binary=binary, timeout=10).invoke(TranscodeRequest(**request_paths))

        assert "Invalid data found" in exc_info.value.details
        assert not request_paths["output_path"].exists()

    def test_success_without_output(self, fake_ffmpeg, request_paths) -> None:
        binary = fake_ffmpeg("exit 0\n")
        with pytest.raises(TranscodeError, match="no output"):
            TranscodeInvoker(ffmpeg_binary=binary, timeout=10).invoke(TranscodeRequest(**request_paths))

    def test_empty_output_rejected(self, fake_ffmpeg, request_paths) -> None:
        binary = fake_ffmpeg(': > "$OUT"\nexit 0\n')
        with pytest.raises(TranscodeError):
            TranscodeInvoker(ffmpeg_binary=binary, timeout=10).invoke(TranscodeRequest(**request_paths))

    def test_timeout(self, fake_ffmpeg, request_paths) -> None:
        binary = fake_ffmpeg('printf \'partial\' > "$OUT"\nexec sleep 30\n')
        with pytest.raises(PipelineTimeoutError) as exc_info:
            TranscodeInvoker(ffmpeg_binary=binary, timeout=0.5).invoke(TranscodeRequest(**request_paths))

        assert exc_info.value.retryable is True
        assert not request_paths["output_path"].exists()

    def test_missing_binary(self, request_paths, tmp_path: Path) -> None:
        invoker = TranscodeInvoker(ffmpeg_binary=str(tmp_path / "no-such-ffmpeg"))
        with pytest.raises(TranscodeError, match="Failed to launch"):
            invoker.invoke(TranscodeRequest(**request_paths))

    def test_work_dir_with_colon_reaches_engine_intact(self, fake_ffmpeg, tmp_path: Path) -> None:
        work_dir = tmp_path / "job:1"
        work_dir.mkdir()
        argv_file = tmp_path / "argv.txt"
        binary = fake_ffmpeg(
            f"""
            printf '%s\\n' "$@" > "{argv_file}"
            printf 'mp4' > "$OUT"
            """
        )
        request = TranscodeRequest(
            video_path=work_dir / "video.mp4",
            audio_path=work_dir / "audio.mp3",
            output_path=work_dir / "output.mp4",
            subtitle_path=work_dir / "subtitles.ass",
        )

        TranscodeInvoker(ffmpeg_binary=binary, timeout=10).invoke(request)

        argv = argv_file.read_text().splitlines()
        video_filter = argv[argv.index("-vf") + 1]
        graph_token, _ = read_ffmpeg_token(video_filter, "[],;")
        option_token, rest = read_ffmpeg_token(graph_token.split("=", 1)[1], ":")
        assert rest == ""
        assert option_token == f"filename={work_dir / 'subtitles.ass'}"
