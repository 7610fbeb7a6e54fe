"""YouTube caption intake via yt-dlp."""

import logging
import re
from urllib.parse import parse_qs, urlparse

import httpx
import yt_dlp

from tubestudio.config import settings
from tubestudio.models import TranscriptSegment, YouTubeTranscript

logger = logging.getLogger(__name__)

_VIDEO_ID_RE = re.compile(r"^[\w-]{11}$")
_PATH_PREFIXES = {"embed", "v", "shorts", "live"}


class ExtractionError(Exception):
    """Raised when a YouTube transcript cannot be obtained."""


class YouTubeExtractor:
    """Fetches the title and timed captions of a YouTube video.

    The captions stand in for the video itself: pipeline stages receive
    them as a transcript reference and never touch the media.
    """

    _PREFERRED_LANGS = ("en", "en-orig", "en-US", "en-GB")

    _YDL_OPTS = {
        "quiet": True,
        "no_warnings": True,
        "skip_download": True,
        "writesubtitles": True,
        "writeautomaticsub": True,
        "subtitleslangs": list(_PREFERRED_LANGS),
        "subtitlesformat": "json3",
    }

    def __init__(self, client: httpx.Client | None = None) -> None:
        self._client = client or httpx.Client(timeout=settings.request_timeout, follow_redirects=True)

    def extract(self, url: str) -> YouTubeTranscript:
        """Fetch title and transcript for a YouTube URL.

        Manual subtitles win over automatic captions; the first English
        track that downloads and parses is used.

        Raises:
            ExtractionError: If the URL is invalid, yt-dlp fails, or the
                             video has no usable English captions.
        """
        video_id = self.parse_video_id(url)
        info = self._fetch_info(url)

        segments: list[TranscriptSegment] = []
        for track_url in self._caption_urls(info):
            data = self._download_track(track_url)
            segments = self._parse_json3(data) if data else []
            if segments:
                break
        if not segments:
            raise ExtractionError(f"No English transcript available for: {video_id}")

        logger.info("Fetched %d caption lines for %s (last at %.0fs)",
                    len(segments), video_id, segments[-1].start)
        return YouTubeTranscript(
            video_id=video_id,
            title=info.get("title") or "YouTube Video",
            segments=segments,
        )

    @staticmethod
    def parse_video_id(url: str) -> str:
        """Extract the 11-character video ID from a watch, youtu.be, embed or shorts URL.

        Raises:
            ExtractionError: If the URL is not a recognised YouTube video URL.
        """
        parsed = urlparse(url.strip())
        host = (parsed.hostname or "").lower()
        parts = [p for p in parsed.path.split("/") if p]

        candidate = None
        if host == "youtu.be" and parts:
            candidate = parts[0]
        elif host == "youtube.com" or host.endswith(".youtube.com"):
            if parts[:1] == ["watch"]:
                candidate = parse_qs(parsed.query).get("v", [None])[0]
            elif len(parts) >= 2 and parts[0] in _PATH_PREFIXES:
                candidate = parts[1]

        if candidate and _VIDEO_ID_RE.match(candidate):
            return candidate
        raise ExtractionError(f"Invalid YouTube URL: {url}")

    def _fetch_info(self, url: str) -> dict:
        """Video info with caption track URLs; no media is downloaded."""
        try:
            with yt_dlp.YoutubeDL(self._YDL_OPTS) as ydl:
                info = ydl.extract_info(url, download=False)
        except yt_dlp.utils.DownloadError as e:
            raise ExtractionError(f"Failed to fetch YouTube video: {e}") from e
        if not info:
            raise ExtractionError(f"yt-dlp returned no info for: {url}")
        return info

    def _caption_urls(self, info: dict) -> list[str]:
        urls = []
        for tracks in (info.get("subtitles") or {}, info.get("automatic_captions") or {}):
            langs = [lang for lang in self._PREFERRED_LANGS if lang in tracks]
            langs += [lang for lang in tracks if lang.startswith("en") and lang not in langs]
            for lang in langs:
                urls += [fmt["url"] for fmt in tracks[lang] if fmt.get("ext") == "json3" and fmt.get("url")]
        return urls

    def _download_track(self, url: str) -> dict | None:
        try:
            resp = self._client.get(url)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to download caption track: %s", e)
            return None

    @staticmethod
    def _parse_json3(data: dict) -> list[TranscriptSegment]:
        """Parse YouTube json3 captions into chronological segments.

        Structure: {"events": [{"tStartMs": int, "segs": [{"utf8": str}]}]}
        """
        segments = []
        for event in data.get("events") or []:
            text = " ".join("".join(seg.get("utf8", "") for seg in event.get("segs") or []).split())
            if text:
                segments.append(TranscriptSegment(start=event.get("tStartMs", 0) / 1000.0, text=text))
        return sorted(segments, key=lambda s: s.start)
