from __future__ import annotations

"""
HTTP surface for audio-to-text.

Design intent:
- Keep API orchestration thin and typed.
- Run one transcription at a time; the virtual devices are system-wide.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from audio_to_text.internal_core.config import TranscriberConfig, load_config
from audio_to_text.internal_core.contracts import TranscriptionResult
from audio_to_text.internal_core.errors import (
    AudioNotFoundError,
    InvalidAudioFormatError,
    PlaybackError,
    SubprocessFailure,
)
from audio_to_text.internal_core.log import configure_logging
from audio_to_text.internal_core.process import check_tools
from audio_to_text.internal_core.transcriber import transcribe_file_detailed


class TranscribeRequest(BaseModel):
    audio_path: str = Field(min_length=1)
    language: str | None = Field(default=None, min_length=2, max_length=35)
    speaker_device: str | None = Field(default=None, min_length=1, max_length=128)
    microphone_device: str | None = Field(default=None, min_length=1, max_length=128)
    chunk_seconds: int | None = Field(default=None, ge=1, le=60)


TranscribeCallable = Callable[..., Awaitable[TranscriptionResult]]

app = FastAPI(title="audio-to-text service")
logger = logging.getLogger(__name__)


def _get_config() -> TranscriberConfig:
    existing = getattr(app.state, "transcriber_config", None)
    if isinstance(existing, TranscriberConfig):
        return existing
    created = load_config()
    configure_logging(created.ATT_LOG_LEVEL)
    setattr(app.state, "transcriber_config", created)
    return created


def _get_transcribe_lock() -> asyncio.Lock:
    existing = getattr(app.state, "transcribe_lock", None)
    if isinstance(existing, asyncio.Lock):
        return existing
    created = asyncio.Lock()
    setattr(app.state, "transcribe_lock", created)
    return created


def _get_transcribe_callable() -> TranscribeCallable:
    injected = getattr(app.state, "transcribe_callable", None)
    if callable(injected):
        return injected
    return transcribe_file_detailed


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/healthz/tools")
async def healthz_tools() -> dict[str, Any]:
    cfg = _get_config()
    tools = check_tools(
        {
            "ffmpeg": cfg.ATT_FFMPEG_BIN,
            "ffprobe": cfg.ATT_FFPROBE_BIN,
            "pactl": cfg.ATT_PACTL_BIN,
            "paplay": cfg.ATT_PAPLAY_BIN,
        }
    )
    ready = all(bool(item["available"]) for item in tools.values())
    return {"status": "ok" if ready else "degraded", "tools": tools}


@app.post("/transcribe", response_model=TranscriptionResult)
async def transcribe(payload: TranscribeRequest) -> TranscriptionResult:
    cfg = _get_config()
    audio_path = str(Path(payload.audio_path).expanduser())
    transcribe_fn = _get_transcribe_callable()

    async with _get_transcribe_lock():
        try:
            return await transcribe_fn(
                audio_path,
                language=payload.language,
                speaker_device=payload.speaker_device,
                microphone_device=payload.microphone_device,
                chunk_seconds=payload.chunk_seconds,
                config=cfg,
            )
        except AudioNotFoundError as exc:
            raise HTTPException(status_code=404, detail=exc.message) from exc
        except InvalidAudioFormatError as exc:
            raise HTTPException(status_code=400, detail=exc.message) from exc
        except (SubprocessFailure, PlaybackError) as exc:
            logger.error("transcription failed code=%s path=%s: %s", exc.code, audio_path, exc.message)
            raise HTTPException(status_code=500, detail=f"{exc.code}: {exc.message}") from exc
