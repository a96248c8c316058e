"""Unit tests for the Transcriber."""

import pytest

from podbuddy.transcription.transcriber import Transcriber


@pytest.fixture
def transcriber():
    return Transcriber()


@pytest.mark.unit
class TestProcess:
    """Test cases for Transcriber.process."""

    def test_initializes_with_empty_transcript(self, transcriber):
        assert transcriber.full_transcript == ""

    def test_processes_and_adds_text_to_transcript(self, transcriber):
        result = transcriber.process("[00:00:00.000 --> 00:00:05.000]  Hello, world!")

        assert result == "Hello, world! "
        assert transcriber.full_transcript == "Hello, world! "

    def test_joins_multiple_lines(self, transcriber):
        transcriber.process("[00:00:00.000 --> 00:00:05.000]  Hello,")
        transcriber.process("[00:00:05.000 --> 00:00:10.000]  world!")

        assert transcriber.full_transcript == "Hello, world! "

    def test_no_trailing_space_without_punctuation(self, transcriber):
        assert transcriber.process("[00:00:00.000 --> 00:00:05.000]  and then we") == "and then we"

    def test_blank_audio_is_empty(self, transcriber):
        result = transcriber.process("[00:00:00.000 --> 00:00:05.000]  [BLANK_AUDIO]")

        assert result == ""
        assert transcriber.full_transcript == ""

    def test_empty_and_unmatched_lines(self, transcriber):
        assert transcriber.process("") == ""
        assert transcriber.process("whisper_init_from_file: loading model\n") == ""
        assert transcriber.full_transcript == ""

    def test_strips_quote_artifacts(self, transcriber):
        result = transcriber.process('[00:00:00.000 --> 00:00:05.000]  [" So what now"]\n')

        assert result == "So what now"

    def test_three_lines_accumulate_without_blank_audio(self, transcriber):
        lines = [
            "[00:00:00.000 --> 00:00:02.000]  Hello there.",
            "[00:00:02.000 --> 00:00:04.000]  [BLANK_AUDIO]",
            "[00:00:04.000 --> 00:00:06.000]  How are you?",
        ]

        results = [transcriber.process(line) for line in lines]

        assert [r for r in results if r] == ["Hello there. ", "How are you? "]
        assert transcriber.full_transcript == "Hello there. How are you? "


@pytest.mark.unit
class TestLatest:
    """Test cases for Transcriber.latest."""

    @pytest.fixture(autouse=True)
    def _fill(self, transcriber):
        transcriber.process("[00:00:00.000 --> 00:00:05.000]  This is a long sentence.")
        transcriber.process("[00:00:05.000 --> 00:00:10.000]  It has multiple parts.")

    def test_returns_latest_portion(self, transcriber):
        assert transcriber.latest(23) == "It has multiple parts. "

    def test_returns_everything_when_limit_exceeds_length(self, transcriber):
        assert transcriber.latest(100) == "This is a long sentence. It has multiple parts. "

    def test_zero_limit(self, transcriber):
        assert transcriber.latest(0) == ""

    def test_is_idempotent(self, transcriber):
        assert transcriber.latest(10) == transcriber.latest(10)
        assert len(transcriber.latest(10)) <= 10

    def test_rejects_negative_limit(self, transcriber):
        with pytest.raises(ValueError):
            transcriber.latest(-1)

    def test_empty_transcript(self):
        assert Transcriber().latest() == ""
