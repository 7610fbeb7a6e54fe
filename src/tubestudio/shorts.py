"""Short-form video coaching grounded in the creator's own best performers."""

import json
import logging

from tubestudio.gateway import ModelGateway
from tubestudio.models import (
    ShortsAnalysis,
    ShortsFeedback,
    ShortsStats,
    ShortsTrainingEntry,
    TranscriptReference,
)
from tubestudio.storage.repository import ShortsHistoryRepository

logger = logging.getLogger(__name__)

TOP_PERFORMER_COUNT = 5

TRAIN_PROMPT = """Analyze this short-form video for training purposes.
Extract the following structured information:
1. hook: what was the visual or audio hook in the first 3 seconds?
2. topic: what is the core subject matter?
3. style: the editing style, pacing, and tone (e.g. fast-paced, vlog, educational, humorous).
4. keyElements: visual elements, text overlays, or sounds that stand out (array of strings).
5. transcriptSummary: a brief summary of what was said.

Format the output as a JSON object with keys: hook, topic, style, keyElements, transcriptSummary.
Do not include markdown formatting like ```json."""


class ShortsCoach:
    """Learns from analyzed past videos and critiques new ones."""

    def __init__(self, gateway: ModelGateway, repository: ShortsHistoryRepository) -> None:
        self._gateway = gateway
        self._repo = repository

    def train(self, ref, stats: ShortsStats) -> ShortsTrainingEntry:
        """Analyze a published video and store it with its engagement stats.

        Raises:
            ValueError: If given a transcript reference (a video is required).
            UpstreamUnavailableError: If the video model is unavailable.
        """
        self._require_video(ref)
        analysis = self._gateway.generate_json(
            TRAIN_PROMPT,
            fallback=lambda raw: ShortsAnalysis(raw=raw),
            ref=ref,
            validate=ShortsAnalysis.model_validate,
            stage="shorts-train",
        )
        entry = ShortsTrainingEntry(file_uri=ref.uri, analysis=analysis, stats=stats)
        self._repo.save(entry)
        logger.info("Stored shorts training entry %s (score %d)", entry.id, stats.score)
        return entry

    def analyze(self, ref) -> ShortsFeedback:
        """Critique a new video against the top-scoring history entries.

        Raises:
            ValueError: If given a transcript reference (a video is required).
            UpstreamUnavailableError: If the video model is unavailable.
        """
        self._require_video(ref)
        top = self._repo.top_performers(TOP_PERFORMER_COUNT)
        logger.info("Analyzing short against %d top performers", len(top))
        return self._gateway.generate_json(
            self._feedback_prompt(top),
            fallback=lambda raw: ShortsFeedback(raw=raw),
            ref=ref,
            validate=ShortsFeedback.model_validate,
            stage="shorts-analyze",
        )

    def history(self) -> list[ShortsTrainingEntry]:
        return self._repo.list_all()

    @staticmethod
    def _require_video(ref) -> None:
        if isinstance(ref, TranscriptReference):
            raise ValueError("Short-form analysis needs the video itself, not a transcript")

    @staticmethod
    def context_block(entries: list[ShortsTrainingEntry]) -> str:
        """Describe past top performers for the feedback prompt."""
        if not entries:
            return "(no past videos recorded yet)"
        blocks = []
        for i, entry in enumerate(entries, 1):
            a = entry.analysis
            blocks.append(
                f"Example {i} (High Performing):\n"
                f"- Hook: {a.hook}\n"
                f"- Topic: {a.topic}\n"
                f"- Style: {a.style}\n"
                f"- Key Elements: {json.dumps(a.key_elements, ensure_ascii=False)}\n"
                f"- Stats: {entry.stats.model_dump_json()}"
            )
        return "\n\n".join(blocks)

    def _feedback_prompt(self, top: list[ShortsTrainingEntry]) -> str:
        return f"""You are an expert short-form video strategist.

Here is context on my past top-performing videos:
{self.context_block(top)}

Analyze this NEW video I just uploaded.
Based on the patterns of my successful videos above, provide actionable feedback.

Generate a JSON object with the following keys:
1. feedback: specific critique on the hook, pacing, and visual style compared to my best work.
2. score: a predicted viral score from 1-10 based on the hook and retention potential.
3. improvedScript: a rewritten version of the script (or key lines) to make it punchier.
4. viralHooks: 3 alternative opening hooks that would grab attention better (array of strings).
5. caption: an SEO-optimized caption with hashtags.
6. thumbnailText: 3 short, punchy text overlays for the cover (array of strings).

Do not include markdown formatting like ```json. Just the raw JSON."""
