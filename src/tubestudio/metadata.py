"""SEO metadata synthesis: titles, thumbnail text, description, tags."""

import json
import logging

from tubestudio.config import settings
from tubestudio.context import transcript_lines, truncate
from tubestudio.gateway import ModelGateway
from tubestudio.ingestion.autocomplete import SuggestionFetcher
from tubestudio.models import TranscriptReference, VideoMetadata

logger = logging.getLogger(__name__)


def ensure_prefix(description: str, prefix: str) -> str:
    """Guarantee the description starts with ``prefix`` byte-for-byte."""
    if description.startswith(prefix):
        return description
    body = description.strip()
    if body.startswith(prefix.strip()):
        body = body[len(prefix.strip()):].lstrip()
    return f"{prefix}\n\n{body}" if body else prefix


class MetadataSynthesizer:
    """Generates YouTube metadata for a video and its refined chapters."""

    def __init__(
        self,
        gateway: ModelGateway,
        fetcher: SuggestionFetcher,
        prefix: str | None = None,
    ) -> None:
        self._gateway = gateway
        self._fetcher = fetcher
        self._prefix = prefix if prefix is not None else settings.description_prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def synthesize(self, ref, chapter_titles: list[str]) -> VideoMetadata:
        """Generate metadata.

        Transcript references are inlined into the prompt; uploaded or
        cloud-hosted videos are attached to the model call. Search
        suggestions are fetched for the first few chapter titles only.

        Unparseable output degrades to empty title lists with the raw text
        as description. The description always starts with the prefix.
        """
        seeds = chapter_titles[: settings.suggestion_seed_count]
        suggestion_map = self._fetcher.fetch_map(seeds) if seeds else {}

        if isinstance(ref, TranscriptReference):
            intro = (
                "You are an expert YouTube SEO strategist.\n"
                "I need you to generate high-performing metadata for this video based on its transcript.\n\n"
                "Transcript context:\n"
                + truncate(transcript_lines(ref.segments), settings.metadata_transcript_limit, "transcript")
            )
            video = None
        else:
            intro = (
                "You are an expert YouTube SEO strategist.\n"
                "I need you to generate high-performing metadata for this video."
            )
            video = ref

        prompt = self._prompt(intro, chapter_titles, suggestion_map)
        metadata = self._gateway.generate_json(
            prompt,
            fallback=lambda raw: VideoMetadata(description=raw),
            ref=video,
            validate=self._to_metadata,
            stage="metadata",
        )
        metadata.description = ensure_prefix(metadata.description, self._prefix)
        return metadata

    def _prompt(self, intro: str, chapter_titles: list[str], suggestion_map: dict[str, list[str]]) -> str:
        chapters = "\n".join(f"- {t}" for t in chapter_titles) or "(none)"
        return f"""{intro}

Chapters of this video:
{chapters}

Here is some context on what people are searching for related to this video's topics:
{json.dumps(suggestion_map, indent=2, ensure_ascii=False)}

Please generate the following:

1. Video Titles: 5 options. Clickable, SEO-rich and exciting, in a modern, tech-forward style.
2. Thumbnail Titles: 5 options. Short, punchy text (max 5 words) that looks good on a thumbnail image.
3. Description:
   - MUST start exactly with this text:
     \"\"\"
{self._prefix}
     \"\"\"
   - Followed by a compelling hook/intro.
   - Then a bulleted summary of what is covered in the video.
   - IMPORTANT: Do NOT use markdown bold (like **text**). Write in plain text.
   - Use hyphens (-) for bullet points.
   - Tone: professional and exciting.
4. Tags: a comma-separated list of 15-20 high-ranking keywords.

Format the output strictly as JSON:
{{
  "videoTitles": ["Title 1", "Title 2", "Title 3", "Title 4", "Title 5"],
  "thumbnailTitles": ["Thumb 1", "Thumb 2", "Thumb 3", "Thumb 4", "Thumb 5"],
  "description": "Full description text...",
  "tags": "tag1, tag2, tag3"
}}

Do not include any markdown formatting like ```json. Just the raw JSON."""

    @staticmethod
    def _to_metadata(data) -> VideoMetadata:
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        metadata = VideoMetadata.model_validate(data)
        metadata.description = metadata.description.replace("**", "")
        return metadata
