"""Client-side pipeline driver: upload → chapters → refine → metadata.

The pipeline is an explicit state machine. Every stage is a separate
stateless service call; the run object holds all intermediate results,
and the status only advances once a stage has returned.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from tubestudio.gemini import VideoProcessingError
from tubestudio.ingestion.youtube import ExtractionError
from tubestudio.llm import UpstreamUnavailableError
from tubestudio.models import (
    CLOUD_URI_SCHEME,
    Chapter,
    CloudUriReference,
    VideoMetadata,
)
from tubestudio.service import StudioService

logger = logging.getLogger(__name__)

_YOUTUBE_RE = re.compile(r"^https?://(?:www\.|m\.)?(?:youtube\.com|youtu\.be)/", re.IGNORECASE)


class PipelineStatus(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    ANALYZING = "analyzing"
    OPTIMIZING = "optimizing"
    METADATA = "metadata"
    DONE = "done"


class PipelineEvent(str, Enum):
    START = "start"
    UPLOADED = "uploaded"
    ANALYZED = "analyzed"
    REFINED = "refined"
    COMPLETED = "completed"
    FAILED = "failed"
    RESET = "reset"


class InvalidTransitionError(Exception):
    """Raised when an event is not allowed in the current status."""


_RUNNING = (
    PipelineStatus.UPLOADING,
    PipelineStatus.ANALYZING,
    PipelineStatus.OPTIMIZING,
    PipelineStatus.METADATA,
)

_TRANSITIONS: dict[tuple[PipelineStatus, PipelineEvent], PipelineStatus] = {
    (PipelineStatus.IDLE, PipelineEvent.START): PipelineStatus.UPLOADING,
    (PipelineStatus.UPLOADING, PipelineEvent.UPLOADED): PipelineStatus.ANALYZING,
    (PipelineStatus.ANALYZING, PipelineEvent.ANALYZED): PipelineStatus.OPTIMIZING,
    (PipelineStatus.OPTIMIZING, PipelineEvent.REFINED): PipelineStatus.METADATA,
    (PipelineStatus.METADATA, PipelineEvent.COMPLETED): PipelineStatus.DONE,
    (PipelineStatus.DONE, PipelineEvent.RESET): PipelineStatus.IDLE,
    (PipelineStatus.IDLE, PipelineEvent.RESET): PipelineStatus.IDLE,
    **{(status, PipelineEvent.FAILED): PipelineStatus.IDLE for status in _RUNNING},
}


def transition(status: PipelineStatus, event: PipelineEvent) -> PipelineStatus:
    """Return the status that follows ``event`` in ``status``.

    Raises:
        InvalidTransitionError: If the event is not allowed in this status.
    """
    try:
        return _TRANSITIONS[(status, event)]
    except KeyError:
        raise InvalidTransitionError(f"Cannot apply '{event.value}' while '{status.value}'") from None


def intake(service: StudioService, source: str, mime_type: str | None = None):
    """Turn a source string into a video reference and a display title.

    YouTube URLs become caption transcripts, ``gs://`` URIs are referenced in
    place, other http(s) URLs are downloaded and uploaded, and anything else
    is treated as a local file path.
    """
    if _YOUTUBE_RE.match(source):
        yt = service.fetch_youtube(source)
        return yt.as_reference(), yt.title
    if source.startswith(CLOUD_URI_SCHEME):
        return CloudUriReference(uri=source, mime_type=mime_type or "video/mp4"), None
    if source.startswith(("http://", "https://")):
        name = Path(source.split("?", 1)[0]).name or "video.mp4"
        return service.upload_video_from_url(source, file_name=name, mime_type=mime_type), name
    return service.upload_video(source, mime_type=mime_type), Path(source).name


@dataclass
class PipelineRun:
    """Everything one pipeline run has produced so far."""

    source: str
    status: PipelineStatus = PipelineStatus.IDLE
    title: str | None = None
    reference: object | None = None
    chapters: list[Chapter] = field(default_factory=list)
    metadata: VideoMetadata | None = None
    error: str | None = None
    history: list[PipelineStatus] = field(default_factory=lambda: [PipelineStatus.IDLE])


class StudioPipeline:
    """Drives one video through every stage, in order.

    Accepts a YouTube URL, a ``gs://`` URI, an http(s) download URL, or a
    local file path as source.
    """

    _HARD_FAILURES = (UpstreamUnavailableError, VideoProcessingError, ExtractionError, FileNotFoundError)

    def __init__(
        self,
        service: StudioService,
        on_status: Callable[[PipelineRun], None] | None = None,
    ) -> None:
        self._svc = service
        self._on_status = on_status

    def run(self, source: str, mime_type: str | None = None) -> PipelineRun:
        """Run the full pipeline.

        Raises:
            UpstreamUnavailableError, VideoProcessingError, ExtractionError,
            FileNotFoundError: On a hard failure. The run is reset to idle
            with ``error`` set before the exception propagates.
        """
        run = PipelineRun(source=source)
        self._advance(run, PipelineEvent.START)
        try:
            run.reference, run.title = intake(self._svc, source, mime_type)
            self._advance(run, PipelineEvent.UPLOADED)

            run.chapters = self._svc.analyze(run.reference)
            self._advance(run, PipelineEvent.ANALYZED)

            run.chapters = self._svc.refine(run.chapters)
            self._advance(run, PipelineEvent.REFINED)

            run.metadata = self._svc.generate_metadata(
                run.reference, [ch.title for ch in run.chapters]
            )
            self._advance(run, PipelineEvent.COMPLETED)
        except self._HARD_FAILURES as e:
            logger.error("Pipeline failed while %s: %s", run.status.value, e)
            run.error = str(e)
            self._advance(run, PipelineEvent.FAILED)
            raise
        return run

    def _advance(self, run: PipelineRun, event: PipelineEvent) -> None:
        run.status = transition(run.status, event)
        run.history.append(run.status)
        logger.debug("Pipeline %s → %s", event.value, run.status.value)
        if self._on_status:
            self._on_status(run)
