from __future__ import annotations

import json
import logging
import math
import shutil
from pathlib import Path
from typing import List, Optional

from .config import TranscriberConfig, WORK_DIR_NAME
from .contracts import AudioChunk
from .errors import AudioNotFoundError, InvalidAudioFormatError, SubprocessFailure
from .process import CommandRunner, run_command

logger = logging.getLogger(__name__)


class AudioSegmenter:
    """Validates an audio file and cuts it into fixed-length mono WAV chunks."""

    def __init__(
        self,
        tmp_root: str,
        *,
        ffprobe_bin: str = "ffprobe",
        ffmpeg_bin: str = "ffmpeg",
        sample_rate: int = 16000,
        runner: Optional[CommandRunner] = None,
    ):
        self._work_root = Path(tmp_root).expanduser() / WORK_DIR_NAME
        self._ffprobe_bin = ffprobe_bin
        self._ffmpeg_bin = ffmpeg_bin
        self._sample_rate = int(sample_rate)
        self._run = runner or run_command

    @classmethod
    def from_config(
        cls, cfg: TranscriberConfig, runner: Optional[CommandRunner] = None
    ) -> "AudioSegmenter":
        return cls(
            cfg.ATT_TMP_ROOT,
            ffprobe_bin=cfg.ATT_FFPROBE_BIN,
            ffmpeg_bin=cfg.ATT_FFMPEG_BIN,
            sample_rate=cfg.ATT_SAMPLE_RATE,
            runner=runner,
        )

    def work_dir_for(self, file_path: str) -> Path:
        return self._work_root / Path(file_path).name

    def is_audio_file(self, file_path: str) -> bool:
        cmd = [
            self._ffprobe_bin,
            "-v",
            "error",
            "-show_streams",
            "-select_streams",
            "a",
            "-of",
            "json",
            str(file_path),
        ]
        try:
            payload = json.loads(self._run(cmd))
        except (SubprocessFailure, ValueError) as e:
            logger.debug("audio probe rejected %s: %s", file_path, e)
            return False
        if not isinstance(payload, dict):
            return False
        streams = payload.get("streams")
        return isinstance(streams, list) and len(streams) > 0

    def prepare_work_dir(self, file_path: str) -> Path:
        if not Path(file_path).exists():
            raise AudioNotFoundError(str(file_path))
        if not self.is_audio_file(file_path):
            raise InvalidAudioFormatError(str(file_path))

        work_dir = self.work_dir_for(file_path)
        work_dir.mkdir(parents=True, exist_ok=True)
        return work_dir

    def get_duration(self, file_path: str) -> int:
        cmd = [
            self._ffprobe_bin,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            str(file_path),
        ]
        raw = self._run(cmd)
        try:
            duration = float(raw)
        except ValueError as e:
            raise SubprocessFailure(
                "SUBPROCESS_OUTPUT_INVALID",
                f"Could not parse audio duration from ffprobe output: {raw!r}",
                cmd=cmd,
            ) from e
        if math.isnan(duration) or duration < 0:
            raise SubprocessFailure(
                "SUBPROCESS_OUTPUT_INVALID",
                f"ffprobe reported an invalid duration: {raw!r}",
                cmd=cmd,
            )
        return int(math.ceil(duration))

    def split_into_chunks(self, file_path: str, chunk_seconds: int) -> List[AudioChunk]:
        if chunk_seconds <= 0:
            raise ValueError("chunk_seconds must be > 0")

        work_dir = self.prepare_work_dir(file_path)
        duration = self.get_duration(file_path)

        chunks: List[AudioChunk] = []
        for start in range(0, duration, chunk_seconds):
            end = start + chunk_seconds
            chunk_path = work_dir / f"{start}-{end}.wav"
            # Last chunk may run past the real duration; ffmpeg clamps it.
            self._run(
                [
                    self._ffmpeg_bin,
                    "-y",
                    "-i",
                    str(file_path),
                    "-ss",
                    str(start),
                    "-t",
                    str(chunk_seconds),
                    "-ar",
                    str(self._sample_rate),
                    "-ac",
                    "1",
                    str(chunk_path),
                ]
            )
            chunks.append(AudioChunk(path=str(chunk_path), start=start, end=end))

        logger.info("Split %s (%ss) into %d chunk(s)", file_path, duration, len(chunks))
        return chunks

    def remove_work_dir(self, work_dir: Path) -> None:
        if work_dir.exists():
            shutil.rmtree(work_dir, ignore_errors=True)
            logger.info("Removed chunk directory %s", work_dir)

    def cleanup(self, file_path: str) -> None:
        self.remove_work_dir(self.prepare_work_dir(file_path))
