# tests/test_cli_integration.py
"""CLI integration tests using Typer's CliRunner."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from tubestudio.cli import app
from tubestudio.models import FileHandleReference

from conftest import FILE_URI

runner = CliRunner()


def _completion(content):
    resp = MagicMock()
    resp.choices = [MagicMock()]
    resp.choices[0].message.content = json.dumps(content)
    return resp


@pytest.fixture
def mock_service(service):
    """Patch _get_service to return the mocked service."""
    with patch("tubestudio.cli._get_service", return_value=service):
        yield service


class TestCLI:
    def test_process(self, mock_service, mock_llm):
        mock_llm._mock_completion.side_effect = [
            _completion([{"time": "0:00", "title": "intro"}, {"time": "2:05", "title": "demo"}]),
            _completion([{"time": "0:00", "title": "Introduction"}, {"time": "2:05", "title": "Live Demo"}]),
            _completion({"videoTitles": ["Big Title"], "thumbnailTitles": ["Wow"], "description": "Hook", "tags": "a, b"}),
        ]
        result = runner.invoke(app, ["process", "https://www.youtube.com/watch?v=dQw4w9WgXcQ"])

        assert result.exit_code == 0
        assert "0:00 Introduction" in result.stdout
        assert "2:05 Live Demo" in result.stdout
        assert "Big Title" in result.stdout
        assert "Join My Community to Level Up" in result.stdout

    def test_process_to_file(self, mock_service, mock_llm, tmp_path):
        mock_llm._mock_completion.side_effect = [
            _completion([{"time": "0:00", "title": "intro"}]),
            _completion([{"time": "0:00", "title": "Introduction"}]),
            _completion({"description": "Hook"}),
        ]
        out = tmp_path / "result.json"
        result = runner.invoke(app, ["process", "https://youtu.be/dQw4w9WgXcQ", "-o", str(out)])

        assert result.exit_code == 0
        data = json.loads(out.read_text())
        assert data["title"] == "Intro to Machine Learning"
        assert data["chapters"][0] == {"time": "0:00", "title": "Introduction", "originalTitle": "intro", "suggestions": []}

    def test_process_missing_file(self, mock_service, tmp_path):
        result = runner.invoke(app, ["process", str(tmp_path / "missing.mp4")])
        assert result.exit_code == 1
        assert "❌" in result.output

    def test_transcribe_writes_srt(self, mock_service, tmp_path):
        out = tmp_path / "subs.srt"
        result = runner.invoke(app, ["transcribe", "https://www.youtube.com/watch?v=dQw4w9WgXcQ", "--srt", str(out)])

        assert result.exit_code == 0
        assert out.read_text().startswith("1\n00:00:00,000 --> 00:00:05,000\n")
        assert "Welcome to the demo" in result.stdout

    def test_suggest(self, mock_service, suggestion_table):
        suggestion_table["gemini"] = ["gemini 3 pro"]
        result = runner.invoke(app, ["suggest", "gemini"])
        assert result.exit_code == 0
        assert "1. gemini 3 pro" in result.stdout

    def test_suggest_none(self, mock_service):
        result = runner.invoke(app, ["suggest", "zzzz"])
        assert "No suggestions." in result.stdout

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "process" in result.output

    def test_transcribe_download_url(self, mock_service, mock_video, mock_extractor):
        mock_video._files_mock.models.generate_content.return_value = SimpleNamespace(
            text=json.dumps({"transcript": "Downloaded talk", "srt": ""})
        )
        ref = FileHandleReference(uri=FILE_URI)
        with patch.object(mock_service, "upload_video_from_url", return_value=ref) as upload:
            result = runner.invoke(app, ["transcribe", "https://storage.test/o/talk.mp4?alt=media"])

        assert result.exit_code == 0
        assert "Downloaded talk" in result.stdout
        upload.assert_called_once_with("https://storage.test/o/talk.mp4?alt=media", file_name="talk.mp4", mime_type=None)
        mock_extractor._mock.assert_not_called()
