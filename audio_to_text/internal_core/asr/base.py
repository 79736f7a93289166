from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ..contracts import AudioChunk


class SpeechRecognizer(ABC):
    @abstractmethod
    async def recognize(self, chunks: Sequence[AudioChunk], language: str = "en-US") -> str: ...

    @abstractmethod
    async def close(self) -> None: ...

    @abstractmethod
    def name(self) -> str: ...
