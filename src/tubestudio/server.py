"""FastMCP server: thin wrapper exposing StudioService stages as MCP tools."""

from fastmcp import FastMCP

from tubestudio.config import settings
from tubestudio.gemini import VideoProcessingError
from tubestudio.ingestion.youtube import ExtractionError
from tubestudio.llm import UpstreamUnavailableError
from tubestudio.models import Chapter, ShortsStats, TranscriptReference, reference_for_uri
from tubestudio.service import StudioService
from tubestudio.storage.sqlite import SQLiteShortsHistoryRepository

mcp = FastMCP(
    name="tubestudio",
    instructions=(
        "tubestudio turns a video into creator assets. Get a video reference with "
        "upload_video, upload_video_from_url, or fetch_youtube (or pass a gs:// URI), "
        "then call analyze → refine → generate_metadata in that order, passing each "
        "stage's output to the next. transcribe and the shorts_* tools are independent."
    ),
)

_service: StudioService | None = None

_FAILURES = (UpstreamUnavailableError, VideoProcessingError, ExtractionError, FileNotFoundError, ValueError)


def _get_service() -> StudioService:
    """Lazy-initialise the service singleton with default dependencies."""
    global _service
    if _service is None:
        settings.ensure_dirs()
        _service = StudioService(repository=SQLiteShortsHistoryRepository())
    return _service


def _reference(file_uri: str | None, mime_type: str | None, transcript: list[dict] | None):
    """Build a video reference from tool arguments (transcript wins)."""
    if transcript:
        return TranscriptReference(segments=transcript)
    if file_uri:
        return reference_for_uri(file_uri, mime_type)
    raise ValueError("No file URI or transcript provided")


@mcp.tool(annotations={"readOnlyHint": False})
def upload_video(path: str, mime_type: str | None = None) -> dict:
    """Upload a local video file for analysis.

    Args:
        path: Path to the video file on the server's filesystem.
        mime_type: MIME type; guessed from the extension when omitted.
    """
    try:
        ref = _get_service().upload_video(path, mime_type=mime_type)
        return {"success": True, **ref.to_wire()}
    except _FAILURES as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": False})
def upload_video_from_url(url: str, file_name: str = "video.mp4", mime_type: str | None = None) -> dict:
    """Download a video from a URL (e.g. a storage download link) and upload it for analysis.

    Args:
        url: Direct download URL of the video.
        file_name: Name used for the uploaded file.
        mime_type: MIME type; guessed from the file name when omitted.
    """
    try:
        ref = _get_service().upload_video_from_url(url, file_name=file_name, mime_type=mime_type)
        return {"success": True, **ref.to_wire()}
    except _FAILURES as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": True})
def fetch_youtube(url: str) -> dict:
    """Fetch the title and timed transcript of a YouTube video.

    Args:
        url: YouTube video URL (watch, youtu.be, embed, shorts).
    """
    try:
        yt = _get_service().fetch_youtube(url)
        return {"success": True, **yt.to_wire()}
    except _FAILURES as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": True})
def analyze(
    file_uri: str | None = None,
    mime_type: str | None = None,
    transcript: list[dict] | None = None,
) -> dict:
    """Generate raw chapter timestamps for a video.

    Args:
        file_uri: Uploaded file URI or gs:// URI.
        mime_type: Video MIME type.
        transcript: Timed transcript as [{"start": seconds, "text": str}], used instead of a file.
    """
    try:
        chapters = _get_service().analyze(_reference(file_uri, mime_type, transcript))
        return {"chapters": [ch.to_wire() for ch in chapters]}
    except _FAILURES as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": True})
def refine(chapters: list[dict]) -> dict:
    """Polish chapter titles using YouTube search suggestions.

    Args:
        chapters: Chapters from analyze, as [{"time": str, "title": str}].
    """
    try:
        parsed = [Chapter.model_validate(ch) for ch in chapters]
        refined = _get_service().refine(parsed)
        return {"chapters": [ch.to_wire() for ch in refined]}
    except _FAILURES as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": True})
def generate_metadata(
    chapter_titles: list[str],
    file_uri: str | None = None,
    mime_type: str | None = None,
    transcript: list[dict] | None = None,
) -> dict:
    """Generate video titles, thumbnail texts, description, and tags.

    Args:
        chapter_titles: Refined chapter titles from refine.
        file_uri: Uploaded file URI or gs:// URI.
        mime_type: Video MIME type.
        transcript: Timed transcript, used instead of a file.
    """
    try:
        ref = _reference(file_uri, mime_type, transcript)
        metadata = _get_service().generate_metadata(ref, chapter_titles)
        return {"metadata": metadata.to_wire()}
    except _FAILURES as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": True})
def transcribe(
    file_uri: str | None = None,
    mime_type: str | None = None,
    transcript: list[dict] | None = None,
) -> dict:
    """Produce a verbatim transcript and SRT subtitles.

    Args:
        file_uri: Uploaded file URI or gs:// URI.
        mime_type: Video MIME type.
        transcript: Timed transcript; converted to SRT without a model call.
    """
    try:
        result = _get_service().transcribe(_reference(file_uri, mime_type, transcript))
        return {"success": True, **result.to_wire()}
    except _FAILURES as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": True})
def autocomplete(q: str) -> dict:
    """YouTube search suggestions for a query.

    Args:
        q: Search text.
    """
    return {"suggestions": _get_service().autocomplete(q)}


@mcp.tool(annotations={"readOnlyHint": False})
def shorts_train(
    file_uri: str,
    mime_type: str | None = None,
    likes: int = 0,
    saves: int = 0,
    comments: int = 0,
    shares: int = 0,
) -> dict:
    """Analyze a published short-form video and store it with its stats as training context.

    Args:
        file_uri: Uploaded file URI or gs:// URI of the video.
        mime_type: Video MIME type.
        likes: Like count.
        saves: Save count.
        comments: Comment count.
        shares: Share count.
    """
    try:
        stats = ShortsStats(likes=likes, saves=saves, comments=comments, shares=shares)
        entry = _get_service().train_short(reference_for_uri(file_uri, mime_type), stats)
        return {"success": True, "entry": entry.to_wire()}
    except _FAILURES as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": True})
def shorts_analyze(file_uri: str, mime_type: str | None = None) -> dict:
    """Get feedback on a new short-form video, grounded in your best past videos.

    Args:
        file_uri: Uploaded file URI or gs:// URI of the video.
        mime_type: Video MIME type.
    """
    try:
        feedback = _get_service().analyze_short(reference_for_uri(file_uri, mime_type))
        return {"success": True, "analysis": feedback.to_wire()}
    except _FAILURES as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": True})
def shorts_history() -> list[dict]:
    """List recorded short-form training entries, newest first."""
    return [entry.to_wire() for entry in _get_service().shorts_history()]
