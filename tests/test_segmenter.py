"""Tests for transcript segmentation into speaker turns."""

from __future__ import annotations

from task_pipeline.extraction.segmenter import segment_transcript

TRANSCRIPT = """00:00:23 — Mark
I will implement rate limiting.

[00:32] Jenna (PM): Okay, please complete that by March 5.
Sarah: sounds good
plain narration line"""


class TestSegmentTranscript:
    def test_turn_count_skips_blank_lines(self) -> None:
        assert len(segment_transcript(TRANSCRIPT)) == 5

    def test_orders_are_indices_of_non_empty_lines(self) -> None:
        assert [t.order for t in segment_transcript(TRANSCRIPT)] == [0, 1, 2, 3, 4]

    def test_speaker_header_has_empty_text(self) -> None:
        header = segment_transcript(TRANSCRIPT)[0]
        assert header.speaker == "Mark"
        assert header.text == ""

    def test_continuation_line_has_no_speaker(self) -> None:
        turn = segment_transcript(TRANSCRIPT)[1]
        assert turn.speaker is None
        assert turn.text == "I will implement rate limiting."

    def test_timestamp_and_role_stripped(self) -> None:
        turn = segment_transcript(TRANSCRIPT)[2]
        assert turn.speaker == "Jenna"
        assert turn.text == "Okay, please complete that by March 5."

    def test_plain_speaker_prefix(self) -> None:
        turn = segment_transcript(TRANSCRIPT)[3]
        assert turn.speaker == "Sarah"
        assert turn.text == "sounds good"

    def test_two_word_name(self) -> None:
        (turn,) = segment_transcript("Eva Martinez: I'll take it")
        assert turn.speaker == "Eva Martinez"
        assert turn.text == "I'll take it"

    def test_bare_timestamp_prefix(self) -> None:
        (turn,) = segment_transcript("09:15 Priya: hi all")
        assert turn.speaker == "Priya"

    def test_lowercase_name_is_not_a_speaker(self) -> None:
        (turn,) = segment_transcript("mark: hello")
        assert turn.speaker is None
        assert turn.text == "mark: hello"

    def test_empty_transcript(self) -> None:
        assert segment_transcript("") == []
        assert segment_transcript("\n  \n") == []
