"""Video context extraction: the text later stages reason over."""

import logging

from tubestudio.config import settings
from tubestudio.gateway import ModelGateway
from tubestudio.models import TranscriptReference, TranscriptSegment

logger = logging.getLogger(__name__)

SCENE_LOG_PROMPT = """Watch this entire video and write a chronological, timestamped log of its content.

For every distinct moment, write one line in the form:
[H:MM:SS or MM:SS] <what is on screen> | <topic being covered> | <what is said, paraphrased closely>

Rules:
- Cover the whole video from start to finish, in order
- Start a new line whenever the scene, topic, or speaker changes
- Quote important spoken phrases, product names, and on-screen text exactly
- Plain text only, no markdown"""


def transcript_lines(segments: list[TranscriptSegment]) -> str:
    """Render segments as ``[<start>s] <text>`` lines, in order."""
    return "\n".join(f"[{_seconds(seg.start)}s] {seg.text}" for seg in segments)


def truncate(text: str, limit: int, label: str = "context") -> str:
    """Cap text at ``limit`` characters; the tail is dropped."""
    if len(text) <= limit:
        return text
    logger.info("Truncating %s from %d to %d characters", label, len(text), limit)
    return text[:limit]


def _seconds(value: float) -> str:
    return str(int(value)) if value == int(value) else repr(value)


class VideoContextExtractor:
    """Produces a textual description of a video.

    Transcripts are rendered directly; uploaded or cloud-hosted videos are
    described by the video model as a timestamped scene log.
    """

    def __init__(self, gateway: ModelGateway, char_limit: int | None = None) -> None:
        self._gateway = gateway
        self._char_limit = char_limit or settings.context_char_limit

    def extract(self, ref) -> str:
        """Return the (possibly truncated) context text for a video reference.

        Raises:
            UpstreamUnavailableError: If the needed model backend is missing or fails.
            VideoProcessingError: If an uploaded file failed processing.
        """
        if isinstance(ref, TranscriptReference):
            text = transcript_lines(ref.segments)
        else:
            logger.info("Extracting scene log from %s (%s)", ref.uri, ref.kind)
            text = self._gateway.generate(SCENE_LOG_PROMPT, ref)
        return truncate(text, self._char_limit)
