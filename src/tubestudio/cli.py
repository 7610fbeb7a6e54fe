"""CLI interface: a thin wrapper over StudioService, the pipeline and the FastMCP server."""

import json
from pathlib import Path

import typer

from tubestudio.config import settings
from tubestudio.gemini import VideoProcessingError
from tubestudio.ingestion.youtube import ExtractionError
from tubestudio.llm import UpstreamUnavailableError
from tubestudio.pipeline import PipelineRun, PipelineStatus, StudioPipeline, intake
from tubestudio.service import StudioService
from tubestudio.storage.sqlite import SQLiteShortsHistoryRepository

app = typer.Typer(
    name="tubestudio",
    help="AI chapters, SEO metadata, and subtitles for your videos.",
    no_args_is_help=True,
)

_STATUS_LABELS = {
    PipelineStatus.UPLOADING: "📤 Uploading / fetching transcript...",
    PipelineStatus.ANALYZING: "🔎 Analyzing content...",
    PipelineStatus.OPTIMIZING: "✨ Refining chapter titles...",
    PipelineStatus.METADATA: "📝 Generating metadata...",
}

_FAILURES = (UpstreamUnavailableError, VideoProcessingError, ExtractionError, FileNotFoundError, ValueError)


def _get_service() -> StudioService:
    """Create a service instance with default dependencies."""
    settings.ensure_dirs()
    return StudioService(repository=SQLiteShortsHistoryRepository())


def _echo_status(run: PipelineRun) -> None:
    label = _STATUS_LABELS.get(run.status)
    if label:
        typer.echo(label, err=True)


@app.command()
def process(
    source: str = typer.Argument(..., help="YouTube URL, gs:// URI, download URL, or local video path."),
    mime_type: str | None = typer.Option(None, "--mime-type", help="Video MIME type (guessed when omitted)."),
    output: str | None = typer.Option(None, "--output", "-o", help="Save chapters and metadata as JSON."),
) -> None:
    """Run the full pipeline: intake, chapters, refinement, metadata."""
    pipeline = StudioPipeline(_get_service(), on_status=_echo_status)
    try:
        run = pipeline.run(source, mime_type=mime_type)
    except _FAILURES as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    if output:
        payload = {
            "title": run.title,
            "chapters": [ch.to_wire() for ch in run.chapters],
            "metadata": run.metadata.to_wire() if run.metadata else None,
        }
        Path(output).write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        typer.echo(f"✅ Saved: {output}")
        return

    typer.echo("✅ Done\n")
    typer.echo("Chapters:")
    for ch in run.chapters:
        typer.echo(f"{ch.time} {ch.title}")
    if run.metadata:
        typer.echo("\nVideo titles:")
        for title in run.metadata.video_titles:
            typer.echo(f"  • {title}")
        typer.echo("\nThumbnail text:")
        for title in run.metadata.thumbnail_titles:
            typer.echo(f"  • {title}")
        typer.echo(f"\nDescription:\n{run.metadata.description}")
        typer.echo(f"\nTags: {run.metadata.tags}")


@app.command()
def transcribe(
    source: str = typer.Argument(..., help="YouTube URL, gs:// URI, download URL, or local video path."),
    mime_type: str | None = typer.Option(None, "--mime-type", help="Video MIME type (guessed when omitted)."),
    output: str | None = typer.Option(None, "--srt", help="Write the SRT subtitles to this file."),
) -> None:
    """Transcribe a video and produce SRT subtitles."""
    svc = _get_service()
    try:
        ref, _ = intake(svc, source, mime_type=mime_type)
        result = svc.transcribe(ref)
    except _FAILURES as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    if output:
        Path(output).write_text(result.srt, encoding="utf-8")
        typer.echo(f"✅ Subtitles saved: {output}")
    typer.echo(result.transcript)


@app.command()
def suggest(query: str = typer.Argument(..., help="Search text.")) -> None:
    """Show YouTube search suggestions for a query."""
    suggestions = _get_service().autocomplete(query)
    if not suggestions:
        typer.echo("No suggestions.")
        return
    for i, s in enumerate(suggestions, 1):
        typer.echo(f"  {i}. {s}")


@app.command()
def serve(
    stdio: bool = typer.Option(False, "--stdio", help="Use stdio transport instead of HTTP."),
    host: str = typer.Option(settings.host, "--host", help="Host to bind to."),
    port: int = typer.Option(settings.port, "--port", help="Port to bind to."),
) -> None:
    """Start the tubestudio MCP server."""
    from tubestudio.server import mcp

    if stdio:
        typer.echo("Starting tubestudio MCP server (stdio)...", err=True)
        mcp.run(transport="stdio")
    else:
        typer.echo(f"Starting tubestudio MCP server on http://{host}:{port}/mcp")
        mcp.run(transport="streamable-http", host=host, port=port)
