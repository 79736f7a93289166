"""
audio-to-text package.

Design intent:
- Transcribe audio files with the browser's built-in speech recognizer.
- Keep tool orchestration (ffmpeg, pactl, paplay, Chromium) in internal_core.
- Release chunk files and virtual devices on every exit path.
"""

from .internal_core import TranscriberConfig, load_config, transcribe_from_file

__all__ = ["TranscriberConfig", "load_config", "transcribe_from_file"]
