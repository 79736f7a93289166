from audio_to_text.asr.transcript import TranscriptAccumulator, normalize_whitespace


def test_segments_join_with_single_space() -> None:
    transcript = TranscriptAccumulator()
    transcript.append("hello")
    transcript.append("world")

    assert transcript.text() == "hello world"
    assert transcript.segment_count == 2


def test_whitespace_is_collapsed_and_trimmed() -> None:
    transcript = TranscriptAccumulator()
    transcript.append("  good   morning\n")
    transcript.append("\teveryone ")

    assert transcript.text() == "good morning everyone"


def test_empty_transcript() -> None:
    assert TranscriptAccumulator().text() == ""
    assert normalize_whitespace("   ") == ""
