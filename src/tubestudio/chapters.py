"""Chapter generation and suggestion-grounded refinement."""

import json
import logging

from tubestudio.context import VideoContextExtractor
from tubestudio.gateway import ModelGateway
from tubestudio.ingestion.autocomplete import SuggestionFetcher
from tubestudio.models import Chapter
from tubestudio.subtitles import normalize_chapter_time

logger = logging.getLogger(__name__)

_TRAILING_PUNCTUATION = ":;,.-–— "

TIME_FORMAT_RULES = """IMPORTANT: For timestamps of one hour or more, use the format H:MM:SS (e.g. 1:20:34, never 80:34).
For timestamps under one hour, use MM:SS (e.g. 14:20 or 0:45)."""


def _chapters_prompt(context: str) -> str:
    return f"""Analyze this video content and generate a comprehensive list of timestamps and chapter titles.
Focus on key topics, visual changes, and important spoken content.
The chapters must cover the whole video, from 0:00 to the end, in chronological order.

Video content:
{context}

Format the output strictly as a JSON array of objects with "time" and "title" keys.
{TIME_FORMAT_RULES}

Example:
[
  {{"time": "0:00", "title": "Introduction"}},
  {{"time": "15:30", "title": "Middle Topic"}},
  {{"time": "1:05:20", "title": "Topic After One Hour"}}
]

Do not include any markdown formatting like ```json. Just the raw JSON."""


def _refine_prompt(enriched: list[dict]) -> str:
    return f"""You are an expert YouTube SEO strategist and copywriter.

Below is a list of raw video chapters, each with the YouTube search suggestions
for its current title. Rewrite every chapter title to be:
1. SEO optimized: use the search suggestions when they are relevant and high quality.
2. Consistent: Title Case for all titles (e.g. "Intro to AI", not "intro to ai").
3. Accurate: fix likely mis-transcriptions, treating the suggestions as ground truth
   when they plausibly name the same thing (e.g. "nanobana 20" -> "Nano Banana 2").
4. Clean: no trailing punctuation such as colons or periods.

Chapters:
{json.dumps(enriched, indent=2, ensure_ascii=False)}

Return ONLY a JSON array with exactly {len(enriched)} objects with "time" and "title" keys,
in the same order as the input, keeping every "time" unchanged.
Example:
[
  {{"time": "0:00", "title": "Introduction to Gemini 3"}},
  {{"time": "1:30", "title": "Advanced Coding Features"}}
]"""


def clean_title(title: str) -> str:
    """Collapse whitespace and drop trailing punctuation."""
    return " ".join(title.split()).rstrip(_TRAILING_PUNCTUATION)


class ChapterGenerator:
    """Asks the model for a chronological chapter list."""

    def __init__(self, gateway: ModelGateway, extractor: VideoContextExtractor | None = None) -> None:
        self._gateway = gateway
        self._extractor = extractor or VideoContextExtractor(gateway)

    def generate(self, context: str) -> list[Chapter]:
        """Generate chapters from context text.

        Unparseable model output yields an empty list rather than an error.
        """
        return self._gateway.generate_json(
            _chapters_prompt(context),
            fallback=lambda raw: [],
            validate=self._to_chapters,
            stage="chapters",
        )

    def generate_for(self, ref) -> list[Chapter]:
        """Extract context for a video reference, then generate chapters from it."""
        return self.generate(self._extractor.extract(ref))

    @staticmethod
    def _to_chapters(data) -> list[Chapter]:
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array, got {type(data).__name__}")
        chapters = []
        for item in data:
            if not isinstance(item, dict) or item.get("time") is None or not item.get("title"):
                logger.debug("Dropping malformed chapter item: %r", item)
                continue
            chapters.append(Chapter(
                time=normalize_chapter_time(str(item["time"])),
                title=clean_title(str(item["title"])),
            ))
        return chapters


class ChapterRefiner:
    """Rewrites chapter titles using YouTube search suggestions as grounding.

    Suggestions are fetched concurrently, one query per chapter title, and
    attached to their chapter by position. One model call then rewrites all
    titles. The rewrite is accepted only if it has exactly one entry per
    input chapter; times always come from the input.
    """

    def __init__(self, gateway: ModelGateway, fetcher: SuggestionFetcher) -> None:
        self._gateway = gateway
        self._fetcher = fetcher

    def refine(self, chapters: list[Chapter]) -> list[Chapter]:
        """Return refined chapters, same length and order as the input.

        Falls back to the input titles (with suggestions attached) when the
        model response is unusable.
        """
        if not chapters:
            return []

        suggestions = self._fetcher.fetch_many([ch.title for ch in chapters])
        enriched = [
            ch.model_copy(update={"suggestions": found})
            for ch, found in zip(chapters, suggestions)
        ]
        logger.info(
            "Fetched suggestions for %d/%d chapters",
            sum(1 for s in suggestions if s), len(chapters),
        )

        payload = [
            {"time": ch.time, "title": ch.title, "suggestions": ch.suggestions}
            for ch in enriched
        ]
        return self._gateway.generate_json(
            _refine_prompt(payload),
            fallback=lambda raw: enriched,
            validate=lambda data: self._merge(enriched, data),
            stage="refine",
        )

    @staticmethod
    def _merge(originals: list[Chapter], data) -> list[Chapter]:
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array, got {type(data).__name__}")
        if len(data) != len(originals):
            raise ValueError(f"expected {len(originals)} chapters, got {len(data)}")

        refined = []
        for original, item in zip(originals, data):
            title = item.get("title") if isinstance(item, dict) else None
            title = clean_title(str(title)) if title else ""
            refined.append(original.model_copy(update={
                "title": title or original.title,
                "original_title": original.original_title or original.title,
            }))
        return refined
