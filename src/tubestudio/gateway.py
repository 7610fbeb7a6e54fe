"""Single entry point for model calls made by the pipeline stages."""

import logging
from typing import Callable, TypeVar

from tubestudio.gemini import GeminiVideoModel
from tubestudio.llm import LLMClient, parse_json
from tubestudio.models import CloudUriReference, FileHandleReference

logger = logging.getLogger(__name__)

T = TypeVar("T")

VideoRef = FileHandleReference | CloudUriReference


class ModelGateway:
    """Routes prompts to the text model or the video model.

    Prompts without a video (including transcript-based ones, which carry
    the transcript inline) go through LiteLLM; prompts about an uploaded
    or cloud-hosted video go through the Gen AI SDK.
    """

    def __init__(
        self,
        text: LLMClient | None = None,
        video: GeminiVideoModel | None = None,
    ) -> None:
        self._text = text or LLMClient()
        self._video = video or GeminiVideoModel()

    @property
    def video(self) -> GeminiVideoModel:
        return self._video

    def generate(self, prompt: str, ref: VideoRef | None = None) -> str:
        """Return the raw model text for a prompt, optionally about a video."""
        if ref is None:
            return self._text.complete(prompt)
        return self._video.generate(ref, prompt)

    def generate_json(
        self,
        prompt: str,
        fallback: Callable[[str], T],
        *,
        ref: VideoRef | None = None,
        validate: Callable[[object], T] | None = None,
        stage: str = "model",
    ) -> T:
        """Call the model, strip fences, parse JSON, and degrade on bad output.

        Only parse or shape failures are recovered: ``fallback`` receives the
        raw response text and its result is returned. Upstream failures
        propagate to the caller.

        Args:
            prompt: Prompt text.
            fallback: Builds the stage-specific degraded value from raw text.
            ref: Video to attach, if any.
            validate: Converts parsed JSON to the stage's type; raise
                      ValueError (or a pydantic ValidationError) to reject it.
            stage: Label used in log messages.
        """
        raw = self.generate(prompt, ref)
        try:
            data = parse_json(raw)
            return validate(data) if validate else data
        except (ValueError, TypeError) as e:
            logger.warning("%s: unusable model response (%s): %.200s", stage, e, raw)
            return fallback(raw)
