from __future__ import annotations

import inspect
import json
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

import pytest

from audio_to_text.internal_core.config import load_config
from audio_to_text.internal_core.errors import PlaybackError, SubprocessFailure


class FakeMediaTools:
    """Stands in for ffprobe/ffmpeg; ffmpeg writes a placeholder file per chunk."""

    def __init__(self, duration: str = "12.0", is_audio: bool = True) -> None:
        self.duration = duration
        self.is_audio = is_audio
        self.calls: list[list[str]] = []
        self.fail_ffmpeg_at: Optional[int] = None

    def __call__(self, cmd: Sequence[str]) -> str:
        cmd = list(cmd)
        self.calls.append(cmd)
        if cmd[0] == "ffprobe" and "-show_streams" in cmd:
            if not self.is_audio:
                raise SubprocessFailure("SUBPROCESS_FAILED", "ffprobe failed", cmd=cmd, returncode=1)
            return json.dumps({"streams": [{"index": 0, "codec_type": "audio"}]})
        if cmd[0] == "ffprobe":
            return self.duration
        if cmd[0] == "ffmpeg":
            if self.fail_ffmpeg_at is not None and len(self.ffmpeg_calls) - 1 == self.fail_ffmpeg_at:
                raise SubprocessFailure("SUBPROCESS_FAILED", "ffmpeg failed", cmd=cmd, returncode=1)
            Path(cmd[-1]).write_bytes(b"RIFF")
            return ""
        raise AssertionError(f"unexpected command: {cmd}")

    @property
    def ffmpeg_calls(self) -> list[list[str]]:
        return [c for c in self.calls if c[0] == "ffmpeg"]


class FakePactl:
    """Minimal in-memory PulseAudio server driven through pactl-style commands."""

    def __init__(self, default_source: str = "alsa_input.pci-0000_00_1f.3.analog-stereo") -> None:
        self.default_source = default_source
        self.modules: dict[int, tuple[str, str]] = {
            0: ("module-device-restore", ""),
            1: ("module-null-sink", "sink_name=other_sink"),
        }
        self.next_index = 25
        self.calls: list[list[str]] = []

    def __call__(self, cmd: Sequence[str]) -> str:
        cmd = list(cmd)
        self.calls.append(cmd)
        args = cmd[1:]
        if args == ["list", "short", "modules"]:
            return "\n".join(
                f"{idx}\t{name}\t{arg}\t" for idx, (name, arg) in sorted(self.modules.items())
            )
        if args == ["get-default-source"]:
            return self.default_source
        if args[0] == "set-default-source":
            self.default_source = args[1]
            return ""
        if args[0] == "load-module":
            idx = self.next_index
            self.next_index += 1
            self.modules[idx] = (args[1], " ".join(args[2:]))
            return str(idx)
        if args[0] == "unload-module":
            idx = int(args[1])
            if idx not in self.modules:
                raise SubprocessFailure("SUBPROCESS_FAILED", "No such module", cmd=cmd, returncode=1)
            del self.modules[idx]
            return ""
        raise AssertionError(f"unexpected command: {cmd}")

    def commands(self, verb: str) -> list[list[str]]:
        return [c for c in self.calls if c[1] == verb]


class FakePlayer:
    def __init__(self, fail_on: Optional[str] = None) -> None:
        self.played: list[str] = []
        self.fail_on = fail_on
        self.device = "virtual_speaker"

    async def play(self, path: str) -> None:
        self.played.append(path)
        if self.fail_on is not None and path == self.fail_on:
            raise PlaybackError(f"Playback of {path} failed (exit_code=1): boom", returncode=1, stderr="boom")


async def _call(fn: Callable[..., Any], *args: Any) -> Any:
    res = fn(*args)
    if inspect.isawaitable(res):
        res = await res
    return res


class FakePage:
    def __init__(self, browser: "FakeBrowser", index: int) -> None:
        self._browser = browser
        self._index = index
        self.exposed: dict[str, Callable[..., Any]] = {}
        self.evaluate_args: list[Any] = []
        self.closed = False

    async def expose_function(self, name: str, fn: Callable[..., Any]) -> None:
        self.exposed[name] = fn

    async def evaluate(self, script: str, arg: Any = None) -> None:
        self.evaluate_args.append(arg)
        results = self._browser.results[self._index] if self._index < len(self._browser.results) else []
        errors = self._browser.errors.get(self._index, [])
        try:
            await _call(self.exposed["playAudio"])
        except Exception as e:
            raise RuntimeError("page.evaluate: Error: playAudio failed") from e
        for text in results:
            await _call(self.exposed["onSpeechResult"], text)
        for payload in errors:
            await _call(self.exposed["onSpeechError"], payload)

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, results: Sequence[Sequence[str]] = (), errors: Optional[dict] = None) -> None:
        self.results = [list(r) for r in results]
        self.errors = dict(errors or {})
        self.pages: list[FakePage] = []
        self.close_calls = 0

    async def new_page(self) -> FakePage:
        page = FakePage(self, len(self.pages))
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def cfg(tmp_path, monkeypatch):
    for name in ("ATT_LANGUAGE", "ATT_SPEAKER_DEVICE", "ATT_MICROPHONE_DEVICE", "ATT_CHUNK_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ATT_TMP_ROOT", str(tmp_path / "tmp"))
    monkeypatch.setenv("ATT_START_DELAY_MS", "0")
    monkeypatch.setenv("ATT_TAIL_DELAY_MS", "0")
    monkeypatch.setenv("ATT_DRAIN_DELAY_MS", "0")
    return load_config()


@pytest.fixture
def audio_file(tmp_path) -> Path:
    path = tmp_path / "example.ogg"
    path.write_bytes(b"OggS")
    return path


@pytest.fixture
def media_tools() -> FakeMediaTools:
    return FakeMediaTools()


@pytest.fixture
def pactl() -> FakePactl:
    return FakePactl()


@pytest.fixture
def fake_player() -> FakePlayer:
    return FakePlayer()


@pytest.fixture
def make_browser() -> Callable[..., FakeBrowser]:
    return FakeBrowser


@pytest.fixture
def make_player() -> Callable[..., FakePlayer]:
    return FakePlayer
