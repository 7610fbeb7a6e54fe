"""Core business logic for tubestudio."""

import logging
from pathlib import Path

from tubestudio.chapters import ChapterGenerator, ChapterRefiner
from tubestudio.config import settings
from tubestudio.context import VideoContextExtractor
from tubestudio.gateway import ModelGateway
from tubestudio.ingestion.autocomplete import SuggestionFetcher
from tubestudio.ingestion.uploads import VideoUploader
from tubestudio.ingestion.youtube import YouTubeExtractor
from tubestudio.metadata import MetadataSynthesizer
from tubestudio.models import (
    Chapter,
    FileHandleReference,
    ShortsFeedback,
    ShortsStats,
    ShortsTrainingEntry,
    TranscriptionResult,
    VideoMetadata,
    YouTubeTranscript,
)
from tubestudio.shorts import ShortsCoach
from tubestudio.storage.repository import ShortsHistoryRepository
from tubestudio.transcription import Transcriber

logger = logging.getLogger(__name__)


class StudioService:
    """Single orchestration point for all tubestudio operations.

    Each public method is one stateless request/response stage; callers
    (the MCP server, the CLI, the pipeline driver) hold intermediate
    results themselves. Dependencies are injected via the constructor
    for testability.
    """

    def __init__(
        self,
        repository: ShortsHistoryRepository,
        gateway: ModelGateway | None = None,
        fetcher: SuggestionFetcher | None = None,
        extractor: YouTubeExtractor | None = None,
        uploader: VideoUploader | None = None,
    ) -> None:
        self._gateway = gateway or ModelGateway()
        self._fetcher = fetcher or SuggestionFetcher()
        self._youtube = extractor or YouTubeExtractor()
        self._uploader = uploader or VideoUploader(self._gateway.video)

        self._context = VideoContextExtractor(self._gateway)
        self._generator = ChapterGenerator(self._gateway, self._context)
        self._refiner = ChapterRefiner(self._gateway, self._fetcher)
        self._metadata = MetadataSynthesizer(self._gateway, self._fetcher)
        self._transcriber = Transcriber(self._gateway)
        self._shorts = ShortsCoach(self._gateway, repository)

        settings.ensure_dirs()

    def upload_video(
        self, path: Path | str, mime_type: str | None = None, display_name: str | None = None
    ) -> FileHandleReference:
        """Upload a local video file and return its file handle."""
        return self._uploader.upload_file(path, mime_type=mime_type, display_name=display_name)

    def upload_video_from_url(
        self, url: str, file_name: str = "video.mp4", mime_type: str | None = None
    ) -> FileHandleReference:
        """Download a video from a URL and upload it, returning its file handle."""
        return self._uploader.upload_from_url(url, file_name=file_name, mime_type=mime_type)

    def fetch_youtube(self, url: str) -> YouTubeTranscript:
        """Fetch title and captions of a YouTube video."""
        logger.info("Fetching YouTube captions: %s", url)
        return self._youtube.extract(url)

    def extract_context(self, ref) -> str:
        """Describe a video as text (transcript lines or scene log)."""
        return self._context.extract(ref)

    def analyze(self, ref) -> list[Chapter]:
        """Generate raw chapters for a video reference."""
        chapters = self._generator.generate_for(ref)
        logger.info("Generated %d raw chapters", len(chapters))
        return chapters

    def refine(self, chapters: list[Chapter]) -> list[Chapter]:
        """Rewrite chapter titles grounded in YouTube search suggestions."""
        refined = self._refiner.refine(chapters)
        logger.info("Refined %d chapters", len(refined))
        return refined

    def generate_metadata(self, ref, chapter_titles: list[str]) -> VideoMetadata:
        """Generate titles, thumbnail text, description, and tags."""
        return self._metadata.synthesize(ref, chapter_titles)

    def transcribe(self, ref) -> TranscriptionResult:
        """Produce a transcript and SRT subtitles."""
        return self._transcriber.transcribe(ref)

    def autocomplete(self, query: str) -> list[str]:
        """YouTube search suggestions for a query."""
        return self._fetcher.fetch_suggestions(query)

    def train_short(self, ref, stats: ShortsStats) -> ShortsTrainingEntry:
        """Record a past short-form video with its engagement stats."""
        return self._shorts.train(ref, stats)

    def analyze_short(self, ref) -> ShortsFeedback:
        """Get feedback on a new short-form video."""
        return self._shorts.analyze(ref)

    def shorts_history(self) -> list[ShortsTrainingEntry]:
        """All recorded short-form training entries, newest first."""
        return self._shorts.history()
