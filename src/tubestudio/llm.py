"""Text-only LLM access via LiteLLM, plus JSON response parsing helpers."""

import json
import logging
import os
import re

import litellm

from tubestudio.config import settings

logger = logging.getLogger(__name__)

# Suppress LiteLLM's verbose logging
litellm.suppress_debug_info = True

_FENCE_RE = re.compile(r"```[a-zA-Z]*[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL)


class LLMError(Exception):
    """Raised when an LLM operation fails."""


class UpstreamUnavailableError(LLMError):
    """A model backend is unreachable, misconfigured, or timed out."""


def strip_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around the whole answer.

    Backticks inside the answer (e.g. in a JSON string) are left alone.
    """
    text = text.strip()
    match = _FENCE_RE.fullmatch(text)
    if match:
        return match.group(1).strip()
    return text


def parse_json(text: str):
    """Parse JSON from a model response.

    Tries the response as-is, then without a wrapping code fence. If that
    still isn't valid JSON, retries on the outermost array or object
    embedded in surrounding prose.

    Raises:
        ValueError: If no JSON value can be recovered.
    """
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError:
        pass
    cleaned = strip_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as first_error:
        starts = [i for i in (cleaned.find("["), cleaned.find("{")) if i >= 0]
        if not starts:
            raise ValueError(f"Response is not JSON: {first_error}") from first_error
        start = min(starts)
        end = cleaned.rfind("]" if cleaned[start] == "[" else "}")
        if end <= start:
            raise ValueError(f"Response is not JSON: {first_error}") from first_error
        try:
            return json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError as e:
            raise ValueError(f"Response is not JSON: {e}") from e


class LLMClient:
    """Thin wrapper over LiteLLM for text-only prompts.

    Auto-detects available API keys, preferring Gemini, and uses
    settings.text_model when one is configured.
    """

    _KEY_TO_MODEL = {
        "GEMINI_API_KEY": "gemini/gemini-2.5-pro",
        "GOOGLE_API_KEY": "gemini/gemini-2.5-pro",
        "OPENAI_API_KEY": "gpt-4o",
        "ANTHROPIC_API_KEY": "anthropic/claude-sonnet-4-20250514",
    }

    def __init__(self, model: str | None = None, timeout: float | None = None) -> None:
        """Initialize LLM client.

        Args:
            model: LiteLLM model string. If None, uses settings.text_model
                   or auto-detects from available API keys.
            timeout: Per-request timeout in seconds. Defaults to settings.request_timeout.
        """
        self._api_key: str | None = None
        self._model = model or settings.text_model or self._detect_model()
        self._timeout = timeout or settings.request_timeout

    @property
    def model(self) -> str:
        return self._model

    @property
    def available(self) -> bool:
        """Check if any LLM provider is configured."""
        return any(os.environ.get(key) for key in self._KEY_TO_MODEL)

    def complete(self, prompt: str, max_tokens: int = 8192) -> str:
        """Send a single-turn prompt and return the response text.

        Raises:
            UpstreamUnavailableError: If no key is configured or the request fails.
        """
        if not self.available:
            raise UpstreamUnavailableError(
                "No LLM API key found. Set one of: "
                + ", ".join(self._KEY_TO_MODEL.keys())
            )
        try:
            response = litellm.completion(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.2,
                max_tokens=max_tokens,
                timeout=self._timeout,
                api_key=self._api_key,
            )
            return (response.choices[0].message.content or "").strip()
        except Exception as e:
            raise UpstreamUnavailableError(f"LLM request failed ({self._model}): {e}") from e

    def _detect_model(self) -> str:
        """Auto-detect the best available model from environment keys."""
        for key, model in self._KEY_TO_MODEL.items():
            if os.environ.get(key):
                logger.info("Auto-detected LLM provider: %s → %s", key, model)
                if key == "GOOGLE_API_KEY":
                    # LiteLLM's gemini provider only reads GEMINI_API_KEY
                    self._api_key = os.environ[key]
                return model
        return "gemini/gemini-2.5-pro"
