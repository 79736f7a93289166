from __future__ import annotations

from .playback import PaplayPlayer
from .pulse_modules import PulseModule, parse_short_modules
from .router import AudioRouter, RoutingState

__all__ = [
    "AudioRouter",
    "PaplayPlayer",
    "PulseModule",
    "RoutingState",
    "parse_short_modules",
]
