"""Timestamp formatting and SubRip (SRT) parsing/rendering."""

import logging
import re
import textwrap
from dataclasses import dataclass

from tubestudio.models import TranscriptSegment

logger = logging.getLogger(__name__)

MAX_LINE_CHARS = 42
MAX_CUE_LINES = 3

_SRT_TIMING_RE = re.compile(
    r"(\d{1,2}):(\d{2}):(\d{2})[,.](\d{1,3})\s*-->\s*(\d{1,2}):(\d{2}):(\d{2})[,.](\d{1,3})"
)


@dataclass
class SubtitleCue:
    """One numbered SRT cue."""

    start: float
    end: float
    text: str


def format_chapter_time(seconds: float) -> str:
    """Format an offset for chapter display.

    ``M:SS``/``MM:SS`` under one hour, ``H:MM:SS`` from one hour on.
    Fractional seconds are floored.
    """
    if seconds < 0:
        raise ValueError(f"Negative offset: {seconds}")
    total = int(seconds)
    hours, rem = divmod(total, 3600)
    mins, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{mins:02d}:{secs:02d}"
    return f"{mins}:{secs:02d}"


def parse_chapter_time(text: str) -> int:
    """Parse ``SS``, ``M:SS`` or ``H:MM:SS`` into whole seconds.

    Raises:
        ValueError: If the text is not a timestamp.
    """
    parts = text.strip().split(":")
    if not 1 <= len(parts) <= 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Not a chapter timestamp: {text!r}")
    total = 0
    for part in parts:
        total = total * 60 + int(part)
    return total


def normalize_chapter_time(text: str) -> str:
    """Re-format a model-produced timestamp to the display rule (``80:34`` -> ``1:20:34``).

    Unparseable input is returned unchanged.
    """
    try:
        return format_chapter_time(parse_chapter_time(text))
    except ValueError:
        return text


def format_srt_timestamp(seconds: float) -> str:
    """Format seconds as ``HH:MM:SS,mmm``."""
    millis = max(0, round(seconds * 1000))
    hours, rem = divmod(millis, 3_600_000)
    mins, rem = divmod(rem, 60_000)
    secs, ms = divmod(rem, 1000)
    return f"{hours:02d}:{mins:02d}:{secs:02d},{ms:03d}"


def wrap_caption(text: str, width: int = MAX_LINE_CHARS) -> list[str]:
    """Wrap caption text into lines of at most ``width`` characters."""
    return textwrap.wrap(" ".join(text.split()), width=width) or [""]


def cues_from_segments(
    segments: list[TranscriptSegment], tail_seconds: float = 4.0
) -> list[SubtitleCue]:
    """Build cues from timed transcript lines.

    Blank segments are skipped. A cue ends where the next one starts; the
    last cue lasts ``tail_seconds``.
    Text longer than three wrapped lines is split across consecutive cues
    sharing the segment's time span.
    """
    spoken = [seg for seg in segments if seg.text.strip()]
    cues: list[SubtitleCue] = []
    for i, seg in enumerate(spoken):
        end = spoken[i + 1].start if i + 1 < len(spoken) else seg.start + tail_seconds
        if end <= seg.start:
            end = seg.start + 1.0
        lines = wrap_caption(seg.text)
        chunks = [lines[j:j + MAX_CUE_LINES] for j in range(0, len(lines), MAX_CUE_LINES)]
        step = (end - seg.start) / len(chunks)
        for k, chunk in enumerate(chunks):
            cues.append(SubtitleCue(
                start=seg.start + k * step,
                end=seg.start + (k + 1) * step,
                text="\n".join(chunk),
            ))
    return cues


def render_srt(cues: list[SubtitleCue]) -> str:
    """Render cues as SRT text, numbered from 1."""
    blocks = [
        f"{i}\n{format_srt_timestamp(c.start)} --> {format_srt_timestamp(c.end)}\n{c.text}"
        for i, c in enumerate(cues, 1)
    ]
    return "\n\n".join(blocks) + ("\n" if blocks else "")


def parse_srt(raw: str) -> list[SubtitleCue]:
    """Parse SRT text into cues. Blocks without a timing line are skipped."""

    def to_sec(h: str, m: str, s: str, ms: str) -> float:
        return int(h) * 3600 + int(m) * 60 + int(s) + int(ms.ljust(3, "0")) / 1000.0

    blocks = re.split(r"\n\s*\n", raw.replace("\r\n", "\n").strip())
    cues: list[SubtitleCue] = []
    for block in blocks:
        lines = [ln for ln in block.splitlines() if ln.strip()]
        if lines and lines[0].strip().isdigit():
            lines = lines[1:]
        if not lines:
            continue
        m = _SRT_TIMING_RE.search(lines[0])
        if not m:
            continue
        g = m.groups()
        cues.append(SubtitleCue(
            start=to_sec(*g[:4]),
            end=to_sec(*g[4:]),
            text="\n".join(ln.strip() for ln in lines[1:]),
        ))
    return cues


def normalize_srt(raw: str) -> str:
    """Renumber and re-render model-produced SRT.

    Returns the input unchanged (with a warning) if no cue could be parsed.
    """
    cues = parse_srt(raw)
    if not cues:
        if raw.strip():
            logger.warning("SRT output had no parseable cues; returning as-is")
        return raw
    return render_srt(cues)
