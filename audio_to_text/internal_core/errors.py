from __future__ import annotations

from typing import Optional, Sequence


class TranscriptionError(RuntimeError):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class AudioNotFoundError(TranscriptionError):
    def __init__(self, path: str):
        super().__init__("AUDIO_NOT_FOUND", f"Audio file not found: {path}")
        self.path = path


class InvalidAudioFormatError(TranscriptionError):
    def __init__(self, path: str):
        super().__init__("INVALID_AUDIO_FORMAT", f"File is not a valid audio format: {path}")
        self.path = path


class SubprocessFailure(TranscriptionError):
    """An external tool exited non-zero, could not be started, or printed unusable output."""

    def __init__(
        self,
        code: str,
        message: str,
        cmd: Sequence[str] = (),
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(code, message)
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr


class PlaybackError(TranscriptionError):
    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__("PLAYBACK_FAILED", message)
        self.returncode = returncode
        self.stderr = stderr
