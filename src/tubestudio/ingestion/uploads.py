"""Staging local or remote video files into the Gemini File API."""

import logging
import mimetypes
import tempfile
import time
from pathlib import Path

import httpx

from tubestudio.config import settings
from tubestudio.gemini import GeminiVideoModel
from tubestudio.llm import UpstreamUnavailableError
from tubestudio.models import FileHandleReference

logger = logging.getLogger(__name__)


class VideoUploader:
    """Turns a video file (local path or download URL) into a file handle."""

    def __init__(
        self,
        video_model: GeminiVideoModel,
        client: httpx.Client | None = None,
    ) -> None:
        self._video = video_model
        self._client = client or httpx.Client(timeout=settings.request_timeout, follow_redirects=True)

    def upload_file(
        self,
        path: Path | str,
        mime_type: str | None = None,
        display_name: str | None = None,
    ) -> FileHandleReference:
        """Upload a local video file.

        Raises:
            FileNotFoundError: If the path does not exist.
            UpstreamUnavailableError: If the upload fails.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"No such video file: {path}")
        mime_type = mime_type or mimetypes.guess_type(path.name)[0] or "video/mp4"
        logger.info("Uploading %s (%d bytes, %s)", path.name, path.stat().st_size, mime_type)
        return self._video.upload(path, mime_type, display_name or path.name)

    def upload_from_url(
        self,
        url: str,
        file_name: str = "video.mp4",
        mime_type: str | None = None,
    ) -> FileHandleReference:
        """Download a video (e.g. a storage download URL) and upload it.

        The temporary copy is removed whether the download and upload succeed or fail.

        Raises:
            UpstreamUnavailableError: If the download or upload fails.
        """
        settings.ensure_dirs()
        safe_name = Path(file_name).name or "video.mp4"
        tmp = tempfile.NamedTemporaryFile(
            dir=settings.uploads_dir,
            prefix=f"{int(time.time() * 1000)}-",
            suffix=f"-{safe_name}",
            delete=False,
        )
        tmp_path = Path(tmp.name)
        try:
            with tmp:
                try:
                    with self._client.stream("GET", url) as resp:
                        resp.raise_for_status()
                        for chunk in resp.iter_bytes():
                            tmp.write(chunk)
                except httpx.HTTPError as e:
                    raise UpstreamUnavailableError(f"Failed to download video: {e}") from e
            return self.upload_file(tmp_path, mime_type=mime_type, display_name=safe_name)
        finally:
            tmp_path.unlink(missing_ok=True)
