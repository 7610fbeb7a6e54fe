# tests/test_models.py
"""Tests for tubestudio domain models."""

import pytest
from pydantic import TypeAdapter, ValidationError

from tubestudio.models import (
    Chapter,
    CloudUriReference,
    FileHandleReference,
    ShortsStats,
    TranscriptReference,
    VideoMetadata,
    VideoReference,
    reference_for_uri,
)


class TestVideoReference:
    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(VideoReference)
        ref = adapter.validate_python({"kind": "cloudUri", "uri": "gs://bucket/video.mp4", "mimeType": "video/webm"})
        assert isinstance(ref, CloudUriReference)
        assert ref.mime_type == "video/webm"

    def test_transcript_variant(self):
        adapter = TypeAdapter(VideoReference)
        ref = adapter.validate_python({"kind": "transcript", "segments": [{"start": 0, "text": "Hi"}]})
        assert isinstance(ref, TranscriptReference)

    def test_transcript_must_be_chronological(self):
        with pytest.raises(ValidationError, match="chronological"):
            TranscriptReference(segments=[{"start": 10, "text": "b"}, {"start": 5, "text": "a"}])

    def test_equal_starts_allowed(self):
        ref = TranscriptReference(segments=[{"start": 5, "text": "a"}, {"start": 5, "text": "b"}])
        assert len(ref.segments) == 2

    def test_reference_for_uri_scheme(self):
        assert isinstance(reference_for_uri("gs://bucket/a.mp4"), CloudUriReference)
        ref = reference_for_uri("https://generativelanguage.googleapis.com/v1beta/files/xyz", "video/quicktime")
        assert isinstance(ref, FileHandleReference)
        assert ref.file_name == "files/xyz"
        assert ref.mime_type == "video/quicktime"

    def test_wire_uses_camel_case(self):
        ref = FileHandleReference(uri="https://x/files/abc", mime_type="video/mp4")
        assert ref.to_wire() == {"kind": "fileHandle", "uri": "https://x/files/abc", "mimeType": "video/mp4"}


class TestChapter:
    def test_optional_fields_omitted_on_wire(self):
        assert Chapter(time="0:00", title="Intro").to_wire() == {"time": "0:00", "title": "Intro"}

    def test_original_title_alias(self):
        ch = Chapter.model_validate({"time": "0:00", "title": "Intro", "originalTitle": "intro:"})
        assert ch.original_title == "intro:"


class TestVideoMetadata:
    def test_titles_capped_at_five(self):
        meta = VideoMetadata.model_validate({"videoTitles": [str(i) for i in range(8)]})
        assert meta.video_titles == ["0", "1", "2", "3", "4"]

    def test_tag_list_joined(self):
        meta = VideoMetadata.model_validate({"tags": ["ai", " coding ", ""]})
        assert meta.tags == "ai, coding"

    def test_wire_shape(self):
        data = VideoMetadata(description="d").to_wire()
        assert set(data) == {"videoTitles", "thumbnailTitles", "description", "tags"}


class TestShortsStats:
    def test_weighted_score(self):
        assert ShortsStats(likes=10, saves=2, comments=3, shares=1).score == 10 + 4 + 9 + 4
