from .config import TranscriberConfig, load_config
from .transcriber import TranscriptionSession, transcribe_file_detailed, transcribe_from_file

__all__ = [
    "TranscriberConfig",
    "TranscriptionSession",
    "load_config",
    "transcribe_file_detailed",
    "transcribe_from_file",
]
