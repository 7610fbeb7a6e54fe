"""Configuration management for tubestudio."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_DESCRIPTION_PREFIX = (
    "Join My Community to Level Up: https://www.skool.com/vibecodepioneers\n"
    "\n"
    "Book a Meeting with Our Team: https://tally.so/r/3NBGBl\n"
    "\n"
    "Subscribe to my newsletter: https://bajulaiye.beehiiv.com/"
)


class Settings(BaseSettings):
    """Application settings with environment variable overrides.

    All settings can be overridden via environment variables
    prefixed with TUBESTUDIO_ (e.g. TUBESTUDIO_DATA_DIR, TUBESTUDIO_PORT).
    """

    model_config = {"env_prefix": "TUBESTUDIO_"}

    # Storage
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".tubestudio",
        description="Root directory for tubestudio data (shorts history, temp uploads)",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 9094

    # Models
    text_model: str | None = None  # LiteLLM model string; auto-detected when unset
    video_model: str = "gemini-2.5-pro"
    gcp_project: str = ""  # falls back to GOOGLE_CLOUD_PROJECT
    gcp_location: str = ""  # falls back to GOOGLE_CLOUD_LOCATION, then us-central1
    request_timeout: float = 180.0

    # File processing poll (Gemini File API)
    poll_interval: float = 2.0
    poll_backoff: float = 1.5
    poll_max_interval: float = 15.0
    poll_timeout: float = 600.0

    # Search suggestions
    autocomplete_url: str = "https://suggestqueries.google.com/complete/search"
    autocomplete_timeout: float = 5.0
    autocomplete_workers: int = 8
    suggestion_seed_count: int = 5

    # Prompt limits
    context_char_limit: int = 100_000
    metadata_transcript_limit: int = 50_000

    # Output
    srt_tail_seconds: float = 4.0
    description_prefix: str = DEFAULT_DESCRIPTION_PREFIX

    @property
    def db_path(self) -> Path:
        """SQLite database path for short-form training history."""
        return self.data_dir / "tubestudio.db"

    @property
    def uploads_dir(self) -> Path:
        """Scratch directory for files staged before upload."""
        return self.data_dir / "uploads"

    def ensure_dirs(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton, import this throughout the app
settings = Settings()
