# tests/conftest.py
"""Shared fixtures for tubestudio tests."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from tubestudio.models import TranscriptReference, TranscriptSegment, YouTubeTranscript
from tubestudio.storage.sqlite import SQLiteShortsHistoryRepository

FILE_URI = "https://generativelanguage.googleapis.com/v1beta/files/abc123"


def envelope(query: str, suggestions: list[str]) -> str:
    """Autocomplete response in the callback envelope the endpoint returns."""
    pairs = [[s, 0, [512]] for s in suggestions]
    return f"window.google.ac.h({json.dumps([query, pairs, {'k': 1}])})"


@pytest.fixture
def sample_segments():
    """Chronological transcript lines for testing."""
    return [
        TranscriptSegment(start=0.0, text="Hello and welcome to this video."),
        TranscriptSegment(start=5.0, text="Today we'll talk about machine learning."),
        TranscriptSegment(start=125.0, text="Welcome to the demo"),
        TranscriptSegment(start=3725.5, text="Thanks for watching, see you next time."),
    ]


@pytest.fixture
def transcript_ref(sample_segments):
    return TranscriptReference(segments=sample_segments)


@pytest.fixture
def sample_youtube(sample_segments):
    return YouTubeTranscript(video_id="dQw4w9WgXcQ", title="Intro to Machine Learning", segments=sample_segments)


@pytest.fixture
def sqlite_repo():
    """SQLiteShortsHistoryRepository backed by in-memory database."""
    return SQLiteShortsHistoryRepository(":memory:")


@pytest.fixture
def suggestion_table():
    """Query → suggestions served by the mocked autocomplete endpoint. Tests may mutate it."""
    return {}


@pytest.fixture
def fetcher(suggestion_table):
    """SuggestionFetcher talking to an in-process mock endpoint."""
    from tubestudio.ingestion.autocomplete import SuggestionFetcher

    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["q"]
        seen.append(query)
        return httpx.Response(200, text=envelope(query, suggestion_table.get(query, [])))

    client = httpx.Client(transport=httpx.MockTransport(handler))
    f = SuggestionFetcher(client=client, url="https://suggest.test/complete/search")
    f._seen = seen
    return f


@pytest.fixture
def mock_llm():
    """LLMClient with mocked litellm.completion."""
    from tubestudio.llm import LLMClient

    with patch("tubestudio.llm.litellm.completion") as mock_completion:
        mock_response = MagicMock()
        mock_response.choices = [MagicMock()]
        mock_response.choices[0].message.content = "[]"
        mock_completion.return_value = mock_response

        with patch.dict("os.environ", {"OPENAI_API_KEY": "test-key-123"}):
            client = LLMClient(model="gpt-4o")
            client._mock_completion = mock_completion
            yield client


@pytest.fixture
def active_file():
    return SimpleNamespace(name="files/abc123", uri=FILE_URI, mime_type="video/mp4", state="ACTIVE")


@pytest.fixture
def mock_video(active_file):
    """GeminiVideoModel with mocked File API and Vertex AI clients."""
    from tubestudio.gemini import GeminiVideoModel

    files_client = MagicMock()
    files_client.files.get.return_value = active_file
    files_client.files.upload.return_value = active_file
    files_client.models.generate_content.return_value = SimpleNamespace(text="{}")

    vertex_client = MagicMock()
    vertex_client.models.generate_content.return_value = SimpleNamespace(text="{}")

    model = GeminiVideoModel(
        model="gemini-test",
        files_client=files_client,
        vertex_client=vertex_client,
        sleep=lambda seconds: None,
    )
    model._files_mock = files_client
    model._vertex_mock = vertex_client
    return model


@pytest.fixture
def gateway(mock_llm, mock_video):
    from tubestudio.gateway import ModelGateway

    return ModelGateway(text=mock_llm, video=mock_video)


@pytest.fixture
def mock_extractor(sample_youtube):
    """YouTubeExtractor with mocked yt-dlp returning sample_youtube."""
    from tubestudio.ingestion.youtube import YouTubeExtractor

    extractor = YouTubeExtractor()
    with patch.object(extractor, "extract", return_value=sample_youtube) as mock:
        extractor._mock = mock
        yield extractor


@pytest.fixture
def service(sqlite_repo, gateway, fetcher, mock_extractor, mock_video):
    """Fully wired StudioService with all mocked dependencies."""
    from tubestudio.ingestion.uploads import VideoUploader
    from tubestudio.service import StudioService

    return StudioService(
        repository=sqlite_repo,
        gateway=gateway,
        fetcher=fetcher,
        extractor=mock_extractor,
        uploader=VideoUploader(mock_video),
    )
