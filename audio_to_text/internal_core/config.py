from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional


WORK_DIR_NAME = "audio-to-text"


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None or value == "" else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass(frozen=True)
class TranscriberConfig:
    ATT_LANGUAGE: str
    ATT_SPEAKER_DEVICE: str
    ATT_MICROPHONE_DEVICE: str
    ATT_CHUNK_SECONDS: int
    ATT_SAMPLE_RATE: int
    ATT_TMP_ROOT: str
    ATT_FFMPEG_BIN: str
    ATT_FFPROBE_BIN: str
    ATT_PACTL_BIN: str
    ATT_PAPLAY_BIN: str
    ATT_START_DELAY_MS: int
    ATT_TAIL_DELAY_MS: int
    ATT_DRAIN_DELAY_MS: int
    ATT_BROWSER_HEADLESS: bool
    ATT_LOG_LEVEL: str

    def work_root_path(self) -> Path:
        return Path(self.ATT_TMP_ROOT).expanduser() / WORK_DIR_NAME

    def with_overrides(
        self,
        *,
        language: Optional[str] = None,
        speaker_device: Optional[str] = None,
        microphone_device: Optional[str] = None,
        chunk_seconds: Optional[int] = None,
    ) -> "TranscriberConfig":
        changes: dict[str, object] = {}
        if language:
            changes["ATT_LANGUAGE"] = language
        if speaker_device:
            changes["ATT_SPEAKER_DEVICE"] = speaker_device
        if microphone_device:
            changes["ATT_MICROPHONE_DEVICE"] = microphone_device
        if chunk_seconds is not None:
            if int(chunk_seconds) <= 0:
                raise ValueError("chunk_seconds must be > 0")
            changes["ATT_CHUNK_SECONDS"] = int(chunk_seconds)
        return replace(self, **changes) if changes else self


def load_config() -> TranscriberConfig:
    return TranscriberConfig(
        ATT_LANGUAGE=_getenv_str("ATT_LANGUAGE", "en-US"),
        ATT_SPEAKER_DEVICE=_getenv_str("ATT_SPEAKER_DEVICE", "virtual_speaker"),
        ATT_MICROPHONE_DEVICE=_getenv_str("ATT_MICROPHONE_DEVICE", "virtual_microphone"),
        ATT_CHUNK_SECONDS=_getenv_int("ATT_CHUNK_SECONDS", 5),
        ATT_SAMPLE_RATE=_getenv_int("ATT_SAMPLE_RATE", 16000),
        ATT_TMP_ROOT=_getenv_str("ATT_TMP_ROOT", tempfile.gettempdir()),
        ATT_FFMPEG_BIN=_getenv_str("ATT_FFMPEG_BIN", "ffmpeg"),
        ATT_FFPROBE_BIN=_getenv_str("ATT_FFPROBE_BIN", "ffprobe"),
        ATT_PACTL_BIN=_getenv_str("ATT_PACTL_BIN", "pactl"),
        ATT_PAPLAY_BIN=_getenv_str("ATT_PAPLAY_BIN", "paplay"),
        # Recognizer warm-up / tail / drain windows around each chunk.
        ATT_START_DELAY_MS=_getenv_int("ATT_START_DELAY_MS", 500),
        ATT_TAIL_DELAY_MS=_getenv_int("ATT_TAIL_DELAY_MS", 500),
        ATT_DRAIN_DELAY_MS=_getenv_int("ATT_DRAIN_DELAY_MS", 500),
        ATT_BROWSER_HEADLESS=_getenv_bool("ATT_BROWSER_HEADLESS", True),
        ATT_LOG_LEVEL=_getenv_str("ATT_LOG_LEVEL", "INFO"),
    )
