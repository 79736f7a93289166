from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AudioChunk(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    start: int = Field(ge=0)
    end: int = Field(ge=0)

    @model_validator(mode="after")
    def _validate_window(self) -> "AudioChunk":
        if self.end <= self.start:
            raise ValueError("AudioChunk.end must be > AudioChunk.start")
        return self


class RecognitionErrorEvent(BaseModel):
    """Fields of a SpeechRecognitionErrorEvent as reported by the page."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = "SpeechRecognitionErrorEvent"
    is_trusted: Optional[bool] = Field(default=None, alias="isTrusted")
    bubbles: Optional[bool] = None
    cancel_bubble: Optional[bool] = Field(default=None, alias="cancelBubble")
    cancelable: Optional[bool] = None
    composed: Optional[bool] = None
    default_prevented: Optional[bool] = Field(default=None, alias="defaultPrevented")
    error: Optional[str] = None
    event_phase: Optional[int] = Field(default=None, alias="eventPhase")
    message: Optional[str] = None
    return_value: Optional[bool] = Field(default=None, alias="returnValue")
    time_stamp: Optional[float] = Field(default=None, alias="timeStamp")
    type: Optional[str] = None
    date: Optional[str] = None
    chunk_start: Optional[int] = None


class ChunkTranscript(BaseModel):
    model_config = ConfigDict(extra="forbid")

    chunk_index: int
    start: int
    end: int
    text: str


class TranscriptionResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str
    chunks: List[ChunkTranscript] = Field(default_factory=list)
    recognition_errors: List[RecognitionErrorEvent] = Field(default_factory=list)
    meta: Dict[str, Any] = Field(default_factory=dict)
