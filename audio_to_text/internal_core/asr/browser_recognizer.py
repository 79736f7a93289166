from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from playwright.async_api import async_playwright

from ...asr.transcript import TranscriptAccumulator
from ..config import TranscriberConfig
from ..contracts import AudioChunk, ChunkTranscript, RecognitionErrorEvent
from ..routing.playback import PaplayPlayer
from .base import SpeechRecognizer
from .page_script import RECOGNITION_SCRIPT

logger = logging.getLogger(__name__)

# Auto-accept the microphone prompt; the sandbox flags are needed when running
# as root or inside containers without user namespaces.
CHROMIUM_ARGS = [
    "--use-fake-ui-for-media-stream",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]


class ChromiumSession:
    """A launched Chromium browser together with the Playwright driver that owns it."""

    def __init__(self, playwright: Any, browser: Any):
        self._playwright = playwright
        self._browser = browser

    async def new_page(self) -> Any:
        return await self._browser.new_page()

    async def close(self) -> None:
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()


async def launch_chromium(headless: bool = True) -> ChromiumSession:
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=headless, args=CHROMIUM_ARGS)
    except Exception:
        await playwright.stop()
        raise
    return ChromiumSession(playwright, browser)


BrowserFactory = Callable[[], Awaitable[Any]]


class BrowserRecognizer(SpeechRecognizer):
    """
    Drives the browser's built-in speech recognizer one chunk at a time.

    For every chunk a fresh page is opened, the recognizer is started, the chunk
    is played into the virtual speaker (which the recognizer hears through the
    virtual microphone) and the final results are collected.
    """

    def __init__(
        self,
        player: PaplayPlayer,
        *,
        browser_factory: Optional[BrowserFactory] = None,
        headless: bool = True,
        start_delay_ms: int = 500,
        tail_delay_ms: int = 500,
        drain_delay_ms: int = 500,
    ):
        self._player = player
        self._browser_factory = browser_factory or (lambda: launch_chromium(headless=headless))
        self._browser: Any = None
        self._delays = {
            "startDelayMs": int(start_delay_ms),
            "tailDelayMs": int(tail_delay_ms),
            "drainDelayMs": int(drain_delay_ms),
        }
        self.last_chunk_transcripts: List[ChunkTranscript] = []
        self.last_errors: List[RecognitionErrorEvent] = []

    @classmethod
    def from_config(
        cls,
        cfg: TranscriberConfig,
        player: Optional[PaplayPlayer] = None,
        browser_factory: Optional[BrowserFactory] = None,
    ) -> "BrowserRecognizer":
        return cls(
            player or PaplayPlayer.from_config(cfg),
            browser_factory=browser_factory,
            headless=cfg.ATT_BROWSER_HEADLESS,
            start_delay_ms=cfg.ATT_START_DELAY_MS,
            tail_delay_ms=cfg.ATT_TAIL_DELAY_MS,
            drain_delay_ms=cfg.ATT_DRAIN_DELAY_MS,
        )

    def name(self) -> str:
        return "browser_webkit_speech"

    async def _get_or_create_browser(self) -> Any:
        if self._browser is None:
            self._browser = await self._browser_factory()
        return self._browser

    async def close(self) -> None:
        if self._browser is not None:
            browser, self._browser = self._browser, None
            await browser.close()

    async def _recognize_chunk(
        self, browser: Any, chunk: AudioChunk, language: str
    ) -> str:
        parts: List[str] = []
        playback_errors: List[BaseException] = []

        async def play_audio() -> None:
            try:
                await self._player.play(chunk.path)
            except Exception as e:
                playback_errors.append(e)
                raise

        def log_value(value: Any) -> None:
            logger.info("page: %s", value)

        def on_speech_result(text: Any) -> None:
            if text:
                parts.append(str(text))

        def on_speech_error(payload: Any) -> None:
            data = payload if isinstance(payload, dict) else {"message": str(payload)}
            event = RecognitionErrorEvent.model_validate({**data, "chunk_start": chunk.start})
            self.last_errors.append(event)
            logger.warning(
                "Speech recognition error at %ss: error=%s message=%s",
                chunk.start,
                event.error,
                event.message,
            )

        page = await browser.new_page()
        await page.expose_function("playAudio", play_audio)
        await page.expose_function("log", log_value)
        await page.expose_function("onSpeechResult", on_speech_result)
        await page.expose_function("onSpeechError", on_speech_error)

        try:
            await page.evaluate(RECOGNITION_SCRIPT, {"language": language, **self._delays})
        except Exception as e:
            if playback_errors:
                raise playback_errors[0] from e
            raise

        await page.close()
        return " ".join(parts)

    async def recognize(self, chunks: Sequence[AudioChunk], language: str = "en-US") -> str:
        logger.info("Launching browser and setting up recognizer...")
        browser = await self._get_or_create_browser()

        transcript = TranscriptAccumulator()
        self.last_chunk_transcripts = []
        self.last_errors = []

        for index, chunk in enumerate(chunks):
            logger.info("Processing audio chunk: %s (start: %ss)", chunk.path, chunk.start)
            text = await self._recognize_chunk(browser, chunk, language)
            if text.strip():
                transcript.append(text)
            self.last_chunk_transcripts.append(
                ChunkTranscript(
                    chunk_index=index,
                    start=chunk.start,
                    end=chunk.end,
                    text=" ".join(text.split()),
                )
            )

        await self.close()
        return transcript.text()
