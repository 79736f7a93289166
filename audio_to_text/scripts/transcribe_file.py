from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

from playwright.async_api import Error as PlaywrightError

from audio_to_text.internal_core.config import load_config
from audio_to_text.internal_core.errors import TranscriptionError
from audio_to_text.internal_core.log import configure_logging
from audio_to_text.internal_core.transcriber import transcribe_file_detailed

logger = logging.getLogger("audio_to_text.cli")


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Transcribe an audio file through the browser's speech recognizer."
    )
    parser.add_argument("file", type=Path, help="Audio file (any format ffmpeg can decode).")
    parser.add_argument("--language", default=None, help="BCP-47 language tag, e.g. en-US or fa-IR.")
    parser.add_argument("--speaker-device", default=None, help="Virtual speaker (null sink) name.")
    parser.add_argument("--microphone-device", default=None, help="Virtual microphone (remap source) name.")
    parser.add_argument("--chunk-seconds", type=_positive_int, default=None, help="Chunk length in seconds.")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON.")
    return parser


async def _run_cancellable(args: argparse.Namespace) -> str:
    cfg = load_config()
    configure_logging(cfg.ATT_LOG_LEVEL)

    task = asyncio.ensure_future(
        transcribe_file_detailed(
            args.file.expanduser().resolve(),
            language=args.language,
            speaker_device=args.speaker_device,
            microphone_device=args.microphone_device,
            chunk_seconds=args.chunk_seconds,
            config=cfg,
        )
    )
    # SIGTERM cancels the run so chunk files and virtual devices are released.
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except (NotImplementedError, RuntimeError):
        pass

    result = await task
    if args.json:
        return result.model_dump_json(indent=2)
    return result.text or "[No text captured]"


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        output = asyncio.run(_run_cancellable(args))
    except TranscriptionError as e:
        logger.error("Transcription failed (%s): %s", e.code, e.message)
        return 1
    except PlaywrightError as e:
        logger.error("Browser automation failed: %s", e)
        return 1
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.warning("Transcription cancelled.")
        return 130
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
