"""Video-aware generation through the Google Gen AI SDK.

Two backends share one model call shape:

* the Gemini File API (API key) for videos uploaded as file handles, which
  must finish server-side processing before they can be referenced;
* Vertex AI (project + location) for videos already in cloud storage,
  which the backend resolves from their ``gs://`` URI directly.
"""

import logging
import os
import time
from pathlib import Path

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from tubestudio.config import settings
from tubestudio.llm import UpstreamUnavailableError
from tubestudio.models import CloudUriReference, FileHandleReference

logger = logging.getLogger(__name__)


class VideoProcessingError(Exception):
    """Raised when an uploaded file ends in a non-usable processing state."""


def _state_name(file: types.File) -> str:
    state = file.state
    return getattr(state, "name", str(state or ""))


class GeminiVideoModel:
    """Runs prompts against a video held by the File API or cloud storage.

    Clients are created lazily so a process configured for only one
    backend still works for that backend.
    """

    _KEY_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        files_client: genai.Client | None = None,
        vertex_client: genai.Client | None = None,
        poll_interval: float | None = None,
        poll_backoff: float | None = None,
        poll_max_interval: float | None = None,
        poll_timeout: float | None = None,
        sleep=time.sleep,
        clock=time.monotonic,
    ) -> None:
        self._model = model or settings.video_model
        self._files_client = files_client
        self._vertex_client = vertex_client
        self._poll_interval = poll_interval if poll_interval is not None else settings.poll_interval
        self._poll_backoff = poll_backoff if poll_backoff is not None else settings.poll_backoff
        self._poll_max_interval = poll_max_interval if poll_max_interval is not None else settings.poll_max_interval
        self._poll_timeout = poll_timeout if poll_timeout is not None else settings.poll_timeout
        self._sleep = sleep
        self._clock = clock

    @property
    def model(self) -> str:
        return self._model

    @property
    def files_available(self) -> bool:
        return self._files_client is not None or self._api_key() is not None

    @property
    def vertex_available(self) -> bool:
        return self._vertex_client is not None or bool(self._project())

    def upload(
        self, path: Path, mime_type: str, display_name: str | None = None
    ) -> FileHandleReference:
        """Upload a local video to the File API.

        Raises:
            UpstreamUnavailableError: If the File API is unconfigured or the upload fails.
        """
        client = self._files()
        try:
            uploaded = client.files.upload(
                file=str(path),
                config=types.UploadFileConfig(
                    mime_type=mime_type,
                    display_name=display_name or path.name,
                ),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise UpstreamUnavailableError(f"File upload failed: {e}") from e
        logger.info("Uploaded %s as %s", path.name, uploaded.name)
        return FileHandleReference(uri=uploaded.uri, mime_type=uploaded.mime_type or mime_type)

    def wait_until_active(self, ref: FileHandleReference) -> types.File:
        """Poll an uploaded file until it leaves the PROCESSING state.

        The delay grows by poll_backoff after each poll, capped at
        poll_max_interval; the total wait is bounded by poll_timeout.

        Raises:
            VideoProcessingError: If processing fails.
            UpstreamUnavailableError: If processing does not finish in time.
        """
        deadline = self._clock() + self._poll_timeout
        delay = self._poll_interval
        file = self.get_file(ref.file_name)

        while _state_name(file) == "PROCESSING":
            if self._clock() + delay > deadline:
                raise UpstreamUnavailableError(
                    f"File {ref.file_name} still processing after {self._poll_timeout:.0f}s"
                )
            logger.debug("File %s processing, next poll in %.1fs", ref.file_name, delay)
            self._sleep(delay)
            delay = min(delay * self._poll_backoff, self._poll_max_interval)
            file = self.get_file(ref.file_name)

        state = _state_name(file)
        if state == "FAILED":
            raise VideoProcessingError(f"Video processing failed for {ref.file_name}")
        if state != "ACTIVE":
            raise VideoProcessingError(f"File {ref.file_name} is not active (state: {state})")
        return file

    def generate(self, ref: FileHandleReference | CloudUriReference, prompt: str) -> str:
        """Run a prompt with the referenced video attached.

        Raises:
            UpstreamUnavailableError: If the backend is unconfigured or the call fails.
            VideoProcessingError: If an uploaded file failed processing.
        """
        if isinstance(ref, FileHandleReference):
            client = self._files()
            file = self.wait_until_active(ref)
            video = types.Part.from_uri(file_uri=file.uri, mime_type=file.mime_type or ref.mime_type)
        else:
            client = self._vertex()
            video = types.Part.from_uri(file_uri=ref.uri, mime_type=ref.mime_type)

        contents = [types.Content(role="user", parts=[video, types.Part.from_text(text=prompt)])]
        try:
            response = client.models.generate_content(model=self._model, contents=contents)
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise UpstreamUnavailableError(f"Video model request failed ({self._model}): {e}") from e
        return (response.text or "").strip()

    def get_file(self, name: str) -> types.File:
        """Fetch File API metadata (including processing state) by resource name."""
        try:
            return self._files().files.get(name=name)
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise UpstreamUnavailableError(f"Could not read file state for {name}: {e}") from e

    def _files(self) -> genai.Client:
        if self._files_client is None:
            key = self._api_key()
            if key is None:
                raise UpstreamUnavailableError(
                    "Gemini File API not configured. Set one of: " + ", ".join(self._KEY_VARS)
                )
            self._files_client = genai.Client(api_key=key, http_options=self._http_options())
        return self._files_client

    def _vertex(self) -> genai.Client:
        if self._vertex_client is None:
            project = self._project()
            if not project:
                raise UpstreamUnavailableError(
                    "Vertex AI not configured: cannot process cloud storage videos. "
                    "Set TUBESTUDIO_GCP_PROJECT or GOOGLE_CLOUD_PROJECT."
                )
            location = settings.gcp_location or os.environ.get("GOOGLE_CLOUD_LOCATION") or "us-central1"
            self._vertex_client = genai.Client(
                vertexai=True,
                project=project,
                location=location,
                http_options=self._http_options(),
            )
            logger.info("Vertex AI initialised for project %s (%s)", project, location)
        return self._vertex_client

    def _api_key(self) -> str | None:
        for var in self._KEY_VARS:
            if os.environ.get(var):
                return os.environ[var]
        return None

    @staticmethod
    def _project() -> str:
        return settings.gcp_project or os.environ.get("GOOGLE_CLOUD_PROJECT", "")

    @staticmethod
    def _http_options() -> types.HttpOptions:
        return types.HttpOptions(timeout=int(settings.request_timeout * 1000))
