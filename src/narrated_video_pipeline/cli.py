"""Command line entry point: serve the HTTP API or run one job locally."""

import argparse
import json
import sys
from typing import List, Optional

from .config import get_settings
from .logging_config import get_logger

logger = get_logger(__name__)


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "narrated_video_pipeline.api.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def _run(args: argparse.Namespace) -> int:
    from .errors import InvalidInputError
    from .services.pipeline import VideoAssemblyPipeline

    with open(args.script_file, "r", encoding="utf-8") as handle:
        script = handle.read()

    pipeline = VideoAssemblyPipeline.from_settings(get_settings())
    try:
        outcome = pipeline.process(
            video_url=args.video_url,
            audio_url=args.audio_url,
            script=script,
            project_id=args.project_id,
            mode=args.mode,
            narration_duration=args.audio_duration,
        )
    except InvalidInputError as exc:
        logger.error("Invalid job", details=exc.details)
        print(json.dumps(exc.to_dict(), indent=2))
        return 2

    print(json.dumps(outcome.to_dict(), indent=2))
    return 0 if outcome.succeeded else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="narrated-video-pipeline", description=__doc__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=_serve)

    run = subparsers.add_parser("run", help="Process a single job and print its outcome")
    run.add_argument("--video-url", required=True)
    run.add_argument("--audio-url", required=True)
    run.add_argument("--script-file", required=True)
    run.add_argument("--project-id", required=True)
    run.add_argument("--mode", choices=["word_highlight", "chunked"], default=None)
    run.add_argument("--audio-duration", type=float, default=None, help="Narration length in seconds")
    run.set_defaults(func=_run)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
