import json

import pytest
from playwright.async_api import Error as PlaywrightError

from audio_to_text.internal_core.contracts import TranscriptionResult
from audio_to_text.internal_core.errors import InvalidAudioFormatError
from audio_to_text.scripts import transcribe_file as cli


def test_cli_prints_transcript(monkeypatch, capsys, cfg, audio_file) -> None:
    seen = {}

    async def fake_transcribe(path, **kwargs):
        seen["path"] = path
        seen.update(kwargs)
        return TranscriptionResult(text="hello world")

    monkeypatch.setattr(cli, "transcribe_file_detailed", fake_transcribe)

    code = cli.main([str(audio_file), "--language", "fa-IR", "--chunk-seconds", "4"])

    assert code == 0
    assert capsys.readouterr().out.strip() == "hello world"
    assert seen["path"] == audio_file.resolve()
    assert seen["language"] == "fa-IR"
    assert seen["chunk_seconds"] == 4


def test_cli_reports_empty_transcript(monkeypatch, capsys, cfg, audio_file) -> None:
    async def fake_transcribe(path, **kwargs):
        return TranscriptionResult(text="")

    monkeypatch.setattr(cli, "transcribe_file_detailed", fake_transcribe)

    assert cli.main([str(audio_file)]) == 0
    assert capsys.readouterr().out.strip() == "[No text captured]"


def test_cli_json_output(monkeypatch, capsys, cfg, audio_file) -> None:
    async def fake_transcribe(path, **kwargs):
        return TranscriptionResult(text="hi", meta={"chunks": 1})

    monkeypatch.setattr(cli, "transcribe_file_detailed", fake_transcribe)

    assert cli.main([str(audio_file), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["text"] == "hi"
    assert payload["meta"] == {"chunks": 1}


def test_cli_returns_error_code_on_failure(monkeypatch, cfg, audio_file) -> None:
    async def fake_transcribe(path, **kwargs):
        raise InvalidAudioFormatError(str(path))

    monkeypatch.setattr(cli, "transcribe_file_detailed", fake_transcribe)

    assert cli.main([str(audio_file)]) == 1


@pytest.mark.parametrize("value", ["0", "-3", "five"])
def test_cli_rejects_invalid_chunk_seconds(capsys, audio_file, value) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main([str(audio_file), "--chunk-seconds", value])
    assert exc_info.value.code == 2
    assert "--chunk-seconds" in capsys.readouterr().err


def test_cli_returns_error_code_when_browser_launch_fails(monkeypatch, cfg, audio_file) -> None:
    async def fake_transcribe(path, **kwargs):
        raise PlaywrightError("Executable doesn't exist at /root/.cache/ms-playwright/chromium")

    monkeypatch.setattr(cli, "transcribe_file_detailed", fake_transcribe)

    assert cli.main([str(audio_file)]) == 1


def test_cli_returns_error_code_on_bad_environment(monkeypatch, cfg, audio_file) -> None:
    monkeypatch.setenv("ATT_CHUNK_SECONDS", "five")

    assert cli.main([str(audio_file)]) == 1
