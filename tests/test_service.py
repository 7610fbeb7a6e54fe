# tests/test_service.py
"""Tests for StudioService."""

import json
from types import SimpleNamespace

from tubestudio.models import CloudUriReference, ShortsStats


class TestStudioService:
    def test_fetch_youtube(self, service, mock_extractor):
        yt = service.fetch_youtube("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
        assert yt.video_id == "dQw4w9WgXcQ"
        assert yt.url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    def test_upload_video(self, service, tmp_path):
        video = tmp_path / "demo.mp4"
        video.write_bytes(b"\x00")
        ref = service.upload_video(video)
        assert ref.kind == "fileHandle"

    def test_extract_context_from_transcript(self, service, transcript_ref):
        assert service.extract_context(transcript_ref).startswith("[0s] Hello")

    def test_analyze(self, service, mock_llm, transcript_ref):
        mock_llm._mock_completion.return_value.choices[0].message.content = json.dumps(
            [{"time": "0:00", "title": "Intro"}]
        )
        assert [ch.title for ch in service.analyze(transcript_ref)] == ["Intro"]

    def test_autocomplete(self, service, suggestion_table):
        suggestion_table["gemini"] = ["gemini 3", "gemini api"]
        assert service.autocomplete("gemini") == ["gemini 3", "gemini api"]

    def test_transcribe_transcript(self, service, transcript_ref):
        result = service.transcribe(transcript_ref)
        assert result.srt.startswith("1\n00:00:00,000 --> 00:00:05,000\n")

    def test_shorts_roundtrip(self, service, mock_video):
        mock_video._vertex_mock.models.generate_content.return_value = SimpleNamespace(
            text=json.dumps({"hook": "h", "topic": "t"})
        )
        entry = service.train_short(CloudUriReference(uri="gs://b/s.mp4"), ShortsStats(likes=3))
        assert [e.id for e in service.shorts_history()] == [entry.id]

        mock_video._vertex_mock.models.generate_content.return_value = SimpleNamespace(
            text=json.dumps({"feedback": "Good", "score": 8})
        )
        assert service.analyze_short(CloudUriReference(uri="gs://b/new.mp4")).feedback == "Good"
