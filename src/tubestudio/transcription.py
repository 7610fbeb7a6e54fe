"""Verbatim transcripts and SRT subtitles."""

import logging

from tubestudio.config import settings
from tubestudio.gateway import ModelGateway
from tubestudio.models import TranscriptReference, TranscriptionResult
from tubestudio.subtitles import cues_from_segments, normalize_srt, render_srt

logger = logging.getLogger(__name__)

TRANSCRIBE_PROMPT = """Transcribe this entire video accurately.

For the transcript:
- Include speaker labels if multiple speakers are detected (e.g. "Speaker 1:", "Speaker 2:")
- Add paragraph breaks where there are natural pauses or topic changes
- Keep the exact words spoken, including filler words like "um" and "uh"

For the SRT:
- Use standard SRT format with sequential numbering starting at 1
- Each subtitle should be 1-3 lines max
- Timestamps must be in HH:MM:SS,mmm --> HH:MM:SS,mmm format
- Keep each caption line to about 42 characters for readability

Return a JSON object with two fields:
{
  "transcript": "The full transcript as continuous text with paragraph breaks",
  "srt": "The complete SRT file content as a string"
}

Do not include any markdown formatting. Just the raw JSON."""


class Transcriber:
    """Produces a transcript and SRT subtitles for a video."""

    def __init__(self, gateway: ModelGateway) -> None:
        self._gateway = gateway

    def transcribe(self, ref) -> TranscriptionResult:
        """Transcribe a video reference.

        Transcript references are converted locally without a model call.
        For videos, a response that is not the expected JSON is returned as
        the transcript with empty SRT.
        """
        if isinstance(ref, TranscriptReference):
            return self.from_segments(ref)

        logger.info("Transcribing %s (%s)", ref.uri, ref.kind)
        result = self._gateway.generate_json(
            TRANSCRIBE_PROMPT,
            fallback=lambda raw: TranscriptionResult(transcript=raw, srt=""),
            ref=ref,
            validate=self._to_result,
            stage="transcribe",
        )
        if result.srt:
            result.srt = normalize_srt(result.srt)
        return result

    @staticmethod
    def from_segments(ref: TranscriptReference) -> TranscriptionResult:
        """Build transcript text and SRT from timed caption lines."""
        transcript = " ".join(seg.text.strip() for seg in ref.segments if seg.text.strip())
        cues = cues_from_segments(ref.segments, tail_seconds=settings.srt_tail_seconds)
        return TranscriptionResult(transcript=transcript, srt=render_srt(cues))

    @staticmethod
    def _to_result(data) -> TranscriptionResult:
        if not isinstance(data, dict) or "transcript" not in data:
            raise ValueError("expected an object with a transcript field")
        return TranscriptionResult(
            transcript=str(data.get("transcript") or ""),
            srt=str(data.get("srt") or ""),
        )
