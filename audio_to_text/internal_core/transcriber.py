from __future__ import annotations

import logging
import time
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Optional, Union

from .asr.base import SpeechRecognizer
from .asr.browser_recognizer import BrowserRecognizer
from .audio_utils import AudioSegmenter
from .config import TranscriberConfig, load_config
from .contracts import TranscriptionResult
from .routing.playback import PaplayPlayer
from .routing.router import AudioRouter

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class TranscriptionSession:
    """
    One transcription run: segment, route, recognize, release.

    Chunk files, virtual devices and the browser are acquired inside an
    AsyncExitStack, so they are released on success, on error and on
    cancellation alike.
    """

    def __init__(
        self,
        cfg: TranscriberConfig,
        *,
        segmenter: Optional[AudioSegmenter] = None,
        router: Optional[AudioRouter] = None,
        recognizer: Optional[SpeechRecognizer] = None,
    ):
        self.cfg = cfg
        self.segmenter = segmenter or AudioSegmenter.from_config(cfg)
        self.router = router or AudioRouter.from_config(cfg)
        self.recognizer = recognizer or BrowserRecognizer.from_config(
            cfg, player=PaplayPlayer.from_config(cfg)
        )

    async def run(self, file_path: PathLike, language: Optional[str] = None) -> TranscriptionResult:
        cfg = self.cfg
        audio_path = str(file_path)
        language = language or cfg.ATT_LANGUAGE
        started = time.monotonic()

        async with AsyncExitStack() as stack:
            # Raises AudioNotFoundError / InvalidAudioFormatError before any routing.
            work_dir = self.segmenter.prepare_work_dir(audio_path)
            # Removes the resolved directory; the source may be gone by exit time.
            stack.callback(self.segmenter.remove_work_dir, work_dir)

            chunks = self.segmenter.split_into_chunks(audio_path, cfg.ATT_CHUNK_SECONDS)

            stack.callback(self.router.teardown)
            self.router.setup(cfg.ATT_SPEAKER_DEVICE, cfg.ATT_MICROPHONE_DEVICE)

            stack.push_async_callback(self.recognizer.close)
            text = await self.recognizer.recognize(chunks, language)

        elapsed = time.monotonic() - started
        logger.info("Transcribed %s: %d chunk(s) in %.1fs", audio_path, len(chunks), elapsed)
        return TranscriptionResult(
            text=text,
            chunks=list(getattr(self.recognizer, "last_chunk_transcripts", []) or []),
            recognition_errors=list(getattr(self.recognizer, "last_errors", []) or []),
            meta={
                "audio_path": audio_path,
                "language": language,
                "recognizer": self.recognizer.name(),
                "speaker_device": cfg.ATT_SPEAKER_DEVICE,
                "microphone_device": cfg.ATT_MICROPHONE_DEVICE,
                "chunk_seconds": cfg.ATT_CHUNK_SECONDS,
                "chunks": len(chunks),
                "elapsed_sec": round(elapsed, 3),
            },
        )


def _resolve_config(
    config: Optional[TranscriberConfig],
    language: Optional[str],
    speaker_device: Optional[str],
    microphone_device: Optional[str],
    chunk_seconds: Optional[int] = None,
) -> TranscriberConfig:
    base = config or load_config()
    return base.with_overrides(
        language=language,
        speaker_device=speaker_device,
        microphone_device=microphone_device,
        chunk_seconds=chunk_seconds,
    )


async def transcribe_file_detailed(
    file_path: PathLike,
    *,
    language: Optional[str] = None,
    speaker_device: Optional[str] = None,
    microphone_device: Optional[str] = None,
    chunk_seconds: Optional[int] = None,
    config: Optional[TranscriberConfig] = None,
) -> TranscriptionResult:
    cfg = _resolve_config(config, language, speaker_device, microphone_device, chunk_seconds)
    return await TranscriptionSession(cfg).run(file_path, cfg.ATT_LANGUAGE)


async def transcribe_from_file(
    file_path: PathLike,
    *,
    language: Optional[str] = None,
    speaker_device: Optional[str] = None,
    microphone_device: Optional[str] = None,
    config: Optional[TranscriberConfig] = None,
) -> str:
    """
    Transcribe an audio file using the browser's speech recognition.

    Any format ffmpeg can decode is accepted. `language` is a BCP-47 tag
    (default "en-US"); the device names are the PulseAudio sink/source names
    to create or reuse (defaults "virtual_speaker" / "virtual_microphone").
    """
    result = await transcribe_file_detailed(
        file_path,
        language=language,
        speaker_device=speaker_device,
        microphone_device=microphone_device,
        config=config,
    )
    return result.text
