"""Pipeline orchestration for assembling one narrated video.

The orchestrator sequences the services for a single job:

1. Resource staging (working directory, video and narration downloads)
2. Cue synthesis (estimated subtitle timing from the script)
3. Subtitle encoding (cue track written into the working directory)
4. Transcoding (FFmpeg mux with burned-in subtitles)
5. Publishing (upload to storage)

The first failing step moves the job to ``FAILED`` with that step's error;
no step is retried. The working directory is released exactly once on every
path, and a cleanup failure never changes the job's outcome.
"""

from typing import Any, Callable, Dict, Optional, Union

from ..config import PipelineConfig, Settings, get_settings
from ..errors import InvalidInputError, PipelineError, StorageError
from ..logging_config import LoggerMixin
from ..models import CueMode, Job, JobState, PipelineOutcome
from ..utils.file_utils import safe_filename
from ..utils.validation import validate_script, validate_url
from .cue_synthesizer import CueSynthesizer
from .publisher import StoragePublisher
from .resource_stager import ResourceStager
from .subtitle_encoder import SubtitleEncoder, SubtitleStyle, get_encoder
from .transcode_invoker import TranscodeInvoker


class ProgressCallback:
    """Progress callback interface for pipeline status updates."""

    def on_stage_start(self, stage_name: str, total_items: int = 1) -> None:
        """Called when a pipeline stage starts."""
        pass

    def on_stage_progress(self, stage_name: str, current: int, total: int, status_msg: str = "") -> None:
        """Called when progress is made within a stage."""
        pass

    def on_stage_complete(self, stage_name: str, output_info: Dict[str, Any]) -> None:
        """Called when a pipeline stage completes."""
        pass

    def on_stage_error(self, stage_name: str, error: str) -> None:
        """Called when a stage encounters an error."""
        pass


class VideoAssemblyPipeline(LoggerMixin):
    """Run jobs through stage → cues → subtitles → transcode → publish."""

    def __init__(
        self,
        config: PipelineConfig,
        stager: ResourceStager,
        publisher: StoragePublisher,
        invoker: Optional[TranscodeInvoker] = None,
        synthesizer: Optional[CueSynthesizer] = None,
        encoder: Optional[SubtitleEncoder] = None,
        style: Optional[SubtitleStyle] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.config = config
        self.stager = stager
        self.publisher = publisher
        self.invoker = invoker or TranscodeInvoker(timeout=config.transcode_timeout)
        self.synthesizer = synthesizer or CueSynthesizer(
            words_per_line=config.words_per_line,
            word_duration=config.word_duration,
            chunk_char_budget=config.chunk_char_budget,
            speaking_rate_wpm=config.speaking_rate_wpm,
        )
        self.encoder = encoder or get_encoder(config.subtitle_format)
        self.style = style or SubtitleStyle()
        self.progress_callback = progress_callback or ProgressCallback()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> "VideoAssemblyPipeline":
        """Wire every component from application settings."""
        settings = settings or get_settings()
        config = PipelineConfig.from_settings(settings)
        return cls(
            config=config,
            stager=ResourceStager(settings.work_root, download_timeout=config.download_timeout),
            publisher=StoragePublisher(
                settings.storage_url,
                settings.storage_key,
                bucket=settings.output_bucket,
                upload_timeout=config.upload_timeout,
            ),
            invoker=TranscodeInvoker(
                ffmpeg_binary=settings.ffmpeg_binary,
                timeout=config.transcode_timeout,
                video_codec=settings.video_codec,
                preset=settings.video_preset,
                crf=settings.video_crf,
                audio_codec=settings.audio_codec,
                audio_bitrate=settings.audio_bitrate,
            ),
            progress_callback=progress_callback,
        )

    # ---------------------------
    # Entry points
    # ---------------------------

    def process(
        self,
        video_url: str,
        audio_url: str,
        script: str,
        project_id: str,
        mode: Optional[Union[CueMode, str]] = None,
        narration_duration: Optional[float] = None,
    ) -> PipelineOutcome:
        """Validate raw request fields, build a job and run it.

        Raises:
            InvalidInputError: If any field is missing or malformed
        """
        missing = [
            name for name, value in (
                ("videoUrl", video_url),
                ("audioUrl", audio_url),
                ("script", script),
                ("projectId", project_id),
            )
            if not isinstance(value, str) or not value.strip()
        ]
        if missing:
            raise InvalidInputError(
                "Missing required parameters", details=f"Missing required parameters: {', '.join(missing)}"
            )
        for name, url in (("videoUrl", video_url), ("audioUrl", audio_url)):
            if not validate_url(url):
                raise InvalidInputError(f"Invalid {name}", details=f"{name} must be an http(s) URL")
        if not validate_script(script):
            raise InvalidInputError("Script is empty")
        if narration_duration is not None and narration_duration <= 0:
            raise InvalidInputError("Invalid audioDuration", details="audioDuration must be positive")

        job = Job(
            id=project_id.strip(),
            video_source_url=video_url,
            audio_source_url=audio_url,
            script=script,
            narration_duration=narration_duration,
        )
        return self.run(job, mode=mode)

    def run(self, job: Job, mode: Optional[Union[CueMode, str]] = None) -> PipelineOutcome:
        """
        Process ``job`` to a terminal state.

        Args:
            job: Job to process; its working directory is assigned here
            mode: Cue rendering mode (defaults to the configured mode)

        Returns:
            Outcome in ``SUCCEEDED`` with a storage key, or ``FAILED`` with the first error
        """
        mode = mode or self.config.default_mode
        outcome = PipelineOutcome(job_id=job.id, state=JobState.RECEIVED, transitions=[JobState.RECEIVED])
        log = self.logger.bind(job_id=job.id)
        log.info("Job received", mode=str(getattr(mode, "value", mode)))

        stage_name = "stage"
        try:
            staged = self._step(stage_name, lambda: self.stager.stage(job))
            self._advance(outcome, JobState.STAGED)

            stage_name = "cues"
            track = self._step(stage_name, lambda: self.synthesizer.synthesize(job.script, mode))
            if job.narration_duration:
                track = track.rescaled(job.narration_duration)
            self._advance(outcome, JobState.CUES_READY)

            stage_name = "subtitles"
            subtitle_path = self._step(stage_name, lambda: self._write_subtitles(job, track))
            self._advance(outcome, JobState.ENCODED)

            stage_name = "transcode"
            request = self.invoker.build_request(
                video_path=staged.video_path,
                audio_path=staged.audio_path,
                output_path=self.stager.path_for(job, f"output-{safe_filename(job.id)}.mp4"),
                subtitle_path=subtitle_path,
                subtitle_force_style=self.style.to_force_style() if self.encoder.needs_force_style else None,
            )
            completion = self._step(
                stage_name,
                lambda: self.invoker.invoke(
                    request,
                    progress_callback=self.progress_callback,
                    expected_duration=job.narration_duration or track.duration,
                ),
            )
            self._advance(outcome, JobState.TRANSCODED)

            stage_name = "publish"
            outcome.remote_key = self._step(stage_name, lambda: self.publisher.publish(completion.output_path, job))
            self._advance(outcome, JobState.PUBLISHED)

            self._advance(outcome, JobState.SUCCEEDED)
            log.info("Job succeeded", remote_key=outcome.remote_key)

        except PipelineError as e:
            self._fail(outcome, stage_name, e)
        except Exception as e:
            log.exception("Unexpected pipeline failure", stage=stage_name)
            self._fail(outcome, stage_name, PipelineError(f"Unexpected failure during {stage_name}", details=str(e)))
        finally:
            self._release(job)

        return outcome

    # ---------------------------
    # Internal helpers
    # ---------------------------

    def _step(self, stage_name: str, action: Callable[[], Any]) -> Any:
        self.progress_callback.on_stage_start(stage_name)
        result = action()
        self.progress_callback.on_stage_complete(stage_name, {"result": str(result)})
        return result

    def _write_subtitles(self, job: Job, track):
        content = self.encoder.encode(track, self.style)
        path = self.stager.path_for(job, f"subtitles{self.encoder.extension}")
        try:
            path.write_bytes(content)
        except OSError as e:
            raise StorageError(f"Failed to write subtitle file {path}", details=str(e)) from e
        self.logger.debug("Subtitle file written", job_id=job.id, path=str(path), cues=len(track))
        return path

    @staticmethod
    def _advance(outcome: PipelineOutcome, state: JobState) -> None:
        if outcome.state.is_terminal:
            raise RuntimeError(f"Job {outcome.job_id} is already terminal ({outcome.state.value})")
        outcome.state = state
        outcome.transitions.append(state)

    def _fail(self, outcome: PipelineOutcome, stage_name: str, error: PipelineError) -> None:
        outcome.state = JobState.FAILED
        outcome.error = error
        outcome.transitions.append(JobState.FAILED)
        self.progress_callback.on_stage_error(stage_name, error.details)
        self.logger.error(
            "Job failed",
            job_id=outcome.job_id,
            stage=stage_name,
            code=error.code,
            error=error.message,
            details=error.details,
        )

    def _release(self, job: Job) -> None:
        try:
            self.stager.release(job.work_dir)
        except Exception as e:
            self.logger.error("Cleanup failed", job_id=job.id, work_dir=str(job.work_dir), error=str(e))
