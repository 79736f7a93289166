from __future__ import annotations

from .base import SpeechRecognizer
from .browser_recognizer import BrowserRecognizer, ChromiumSession, launch_chromium

__all__ = [
    "BrowserRecognizer",
    "ChromiumSession",
    "SpeechRecognizer",
    "launch_chromium",
]
