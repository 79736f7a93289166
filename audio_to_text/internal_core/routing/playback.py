from __future__ import annotations

import asyncio
import logging

from ..config import TranscriberConfig
from ..errors import PlaybackError

logger = logging.getLogger(__name__)


class PaplayPlayer:
    """Plays a WAV file out through a named PulseAudio sink."""

    def __init__(self, device: str, paplay_bin: str = "paplay"):
        self.device = device
        self._paplay = paplay_bin

    @classmethod
    def from_config(cls, cfg: TranscriberConfig) -> "PaplayPlayer":
        return cls(cfg.ATT_SPEAKER_DEVICE, cfg.ATT_PAPLAY_BIN)

    async def play(self, path: str) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                self._paplay,
                f"--device={self.device}",
                str(path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Error playing audio: %s", e)
            raise PlaybackError(f"Could not start {self._paplay}: {e}") from e

        try:
            _, stderr = await proc.communicate()
        except asyncio.CancelledError:
            proc.kill()
            await proc.wait()
            raise
        if proc.returncode != 0:
            detail = stderr.decode("utf-8", "ignore").strip()
            logger.error("Error playing audio %s: %s", path, detail or f"exit_code={proc.returncode}")
            raise PlaybackError(
                f"Playback of {path} failed (exit_code={proc.returncode}): {detail or 'unknown error'}",
                returncode=proc.returncode,
                stderr=detail,
            )
        logger.info("Audio playback finished: %s", path)
