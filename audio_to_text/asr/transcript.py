from __future__ import annotations

"""
Append-only transcript assembled one segment per recognized chunk.

Design intent:
- Prefix every segment with a space so words never fuse across chunks.
- Normalize whitespace only when the final text is read.
"""

import re

_WS_RE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


class TranscriptAccumulator:
    def __init__(self) -> None:
        self._raw = ""
        self._segments = 0

    @property
    def segment_count(self) -> int:
        return self._segments

    def append(self, text: str) -> None:
        self._raw += f" {text}"
        self._segments += 1

    def text(self) -> str:
        return normalize_whitespace(self._raw)
