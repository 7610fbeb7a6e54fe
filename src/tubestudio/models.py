"""Domain models for tubestudio.

Every value here is request-scoped: created by one pipeline stage, handed
to the next, and returned to the client as JSON. Wire names are camelCase;
Python attributes are snake_case and either spelling is accepted on input.
"""

from datetime import datetime, timezone
from typing import Annotated, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

CLOUD_URI_SCHEME = "gs://"


class WireModel(BaseModel):
    """Base for models that cross the client/server boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump with camelCase keys, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TranscriptSegment(WireModel):
    """A single caption line from a transcript."""

    start: float = Field(ge=0)  # start time in seconds
    text: str


class FileHandleReference(WireModel):
    """A video uploaded to the Gemini File API."""

    kind: Literal["fileHandle"] = "fileHandle"
    uri: str
    mime_type: str = "video/mp4"

    @property
    def file_name(self) -> str:
        """File API resource name (``files/<id>``) derived from the URI."""
        return f"files/{self.uri.rstrip('/').rsplit('/', 1)[-1]}"


class CloudUriReference(WireModel):
    """A video stored in cloud storage (``gs://bucket/path``)."""

    kind: Literal["cloudUri"] = "cloudUri"
    uri: str
    mime_type: str = "video/mp4"


class TranscriptReference(WireModel):
    """A video represented only by its timed transcript."""

    kind: Literal["transcript"] = "transcript"
    segments: list[TranscriptSegment]

    @model_validator(mode="after")
    def _check_chronological(self) -> "TranscriptReference":
        for prev, cur in zip(self.segments, self.segments[1:]):
            if cur.start < prev.start:
                raise ValueError(
                    f"transcript segments must be chronological: {cur.start}s follows {prev.start}s"
                )
        return self


VideoReference = Annotated[
    Union[FileHandleReference, CloudUriReference, TranscriptReference],
    Field(discriminator="kind"),
]


def reference_for_uri(uri: str, mime_type: str | None = None) -> FileHandleReference | CloudUriReference:
    """Build a video reference from a URI, using the scheme as discriminator."""
    mime_type = mime_type or "video/mp4"
    if uri.startswith(CLOUD_URI_SCHEME):
        return CloudUriReference(uri=uri, mime_type=mime_type)
    return FileHandleReference(uri=uri, mime_type=mime_type)


class Chapter(WireModel):
    """A chapter marker: display timestamp plus title."""

    time: str  # MM:SS below one hour, H:MM:SS from one hour on
    title: str
    original_title: str | None = None
    suggestions: list[str] | None = None


SuggestionSet = dict[str, list[str]]


class VideoMetadata(WireModel):
    """SEO metadata generated for one video."""

    video_titles: list[str] = Field(default_factory=list)
    thumbnail_titles: list[str] = Field(default_factory=list)
    description: str = ""
    tags: str = ""

    @field_validator("video_titles", "thumbnail_titles", mode="before")
    @classmethod
    def _first_five(cls, value):
        if isinstance(value, list):
            return [str(v) for v in value][:5]
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _join_tags(cls, value):
        if isinstance(value, list):
            return ", ".join(str(v).strip() for v in value if str(v).strip())
        return value


class TranscriptionResult(WireModel):
    """Verbatim transcript plus SubRip subtitles."""

    transcript: str = ""
    srt: str = ""


class YouTubeTranscript(WireModel):
    """Captions and title fetched for a YouTube video."""

    video_id: str
    title: str = "YouTube Video"
    segments: list[TranscriptSegment] = Field(default_factory=list)

    @computed_field
    @property
    def url(self) -> str:
        """Full YouTube URL derived from video_id."""
        return f"https://www.youtube.com/watch?v={self.video_id}"

    def as_reference(self) -> TranscriptReference:
        return TranscriptReference(segments=self.segments)


class ShortsStats(WireModel):
    """Engagement numbers for a published short-form video."""

    likes: int = 0
    saves: int = 0
    comments: int = 0
    shares: int = 0

    @computed_field
    @property
    def score(self) -> int:
        """Weighted engagement: deeper interactions count more."""
        return self.likes + 2 * self.saves + 3 * self.comments + 4 * self.shares


class ShortsAnalysis(WireModel):
    """Structured breakdown of a past short-form video."""

    hook: str = ""
    topic: str = ""
    style: str = ""
    key_elements: list[str] = Field(default_factory=list)
    transcript_summary: str = ""
    raw: str | None = None  # model text when it could not be parsed


class ShortsTrainingEntry(WireModel):
    """A past video with its analysis and stats, used as grounding."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    file_uri: str
    analysis: ShortsAnalysis
    stats: ShortsStats
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ShortsFeedback(WireModel):
    """Feedback on a new short-form video."""

    feedback: str = ""
    score: float | None = None  # predicted viral score, 1-10
    improved_script: str = ""
    viral_hooks: list[str] = Field(default_factory=list)
    caption: str = ""
    thumbnail_text: list[str] = Field(default_factory=list)
    raw: str | None = None
