# tests/test_context.py
"""Tests for video context extraction."""

from types import SimpleNamespace

from tubestudio.context import SCENE_LOG_PROMPT, VideoContextExtractor, transcript_lines, truncate
from tubestudio.models import CloudUriReference, TranscriptReference, TranscriptSegment


class TestTranscriptLines:
    def test_format(self, sample_segments):
        lines = transcript_lines(sample_segments).splitlines()
        assert lines[0] == "[0s] Hello and welcome to this video."
        assert lines[2] == "[125s] Welcome to the demo"
        assert lines[3].startswith("[3725.5s] ")

    def test_empty(self):
        assert transcript_lines([]) == ""

    def test_fractional_start_kept_exact(self):
        assert transcript_lines([TranscriptSegment(start=12345.678, text="x")]) == "[12345.678s] x"


class TestTruncate:
    def test_under_limit(self):
        assert truncate("abc", 10) == "abc"

    def test_over_limit_keeps_head(self):
        assert truncate("abcdef", 4) == "abcd"


class TestVideoContextExtractor:
    def test_transcript_needs_no_model(self, gateway, mock_llm, mock_video, transcript_ref):
        text = VideoContextExtractor(gateway).extract(transcript_ref)
        assert "[125s] Welcome to the demo" in text
        mock_llm._mock_completion.assert_not_called()
        mock_video._vertex_mock.models.generate_content.assert_not_called()

    def test_video_scene_log(self, gateway, mock_video):
        mock_video._vertex_mock.models.generate_content.return_value = SimpleNamespace(
            text="[0:00] Title card | Intro | Hi there"
        )
        text = VideoContextExtractor(gateway).extract(CloudUriReference(uri="gs://b/v.mp4"))

        assert text == "[0:00] Title card | Intro | Hi there"
        parts = mock_video._vertex_mock.models.generate_content.call_args.kwargs["contents"][0].parts
        assert parts[1].text == SCENE_LOG_PROMPT

    def test_truncated_to_limit(self, gateway):
        ref = TranscriptReference(segments=[TranscriptSegment(start=i, text="x" * 50) for i in range(100)])
        assert len(VideoContextExtractor(gateway, char_limit=1000).extract(ref)) == 1000
