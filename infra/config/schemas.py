"""
Configuration schemas for Folio.

Defines the structure of the library configuration file.
All config is stored in ~/Documents/folio/ (or FOLIO_STORAGE_ROOT).
"""

from typing import Dict, Optional, Any
from pydantic import BaseModel, Field
import os
import re

from .legacy import Config


class ReaderSettings(BaseModel):
    """Browser and reader endpoint settings."""
    base_url: str = Field("https://read.amazon.com", description="Reader web app origin")
    navigation_timeout_ms: int = Field(30_000, ge=1, description="Timeout for page loads and sign-in")
    headless: bool = Field(False, description="Run the browser without a window")
    channel: Optional[str] = Field("chrome", description="Playwright browser channel (None = bundled Chromium)")
    viewport_width: int = Field(1280, ge=320)
    viewport_height: int = Field(720, ge=240)
    device_scale_factor: float = Field(2.0, gt=0)


class ExtractionSettings(BaseModel):
    """Timing and retry budgets for the extraction loop."""
    max_reissues: int = Field(10, ge=1, description="How many times the next-page action may be issued per page turn")
    polls_per_reissue: int = Field(10, ge=1, description="Fingerprint checks between two next-page actions")
    poll_interval_seconds: float = Field(0.1, ge=0, description="Delay between fingerprint checks")
    post_capture_settle_seconds: float = Field(0.1, ge=0, description="Pause after a screenshot before turning the page")
    toc_settle_seconds: float = Field(0.25, ge=0, description="Pause after clicking a TOC row")
    position_read_attempts: int = Field(8, ge=1, description="Footer reads after a TOC click before giving up")
    position_read_interval_seconds: float = Field(0.12, ge=0)
    metadata_timeout_seconds: float = Field(10.0, ge=0, description="Wait for side-channel metadata after capture")
    metadata_poll_seconds: float = Field(0.5, gt=0)
    back_matter_ratio: float = Field(0.9, ge=0, le=1, description="Back matter only counts in this final share of the book")


class TranscriberConfig(BaseModel):
    """Configuration for a transcription backend (vision model endpoint)."""
    type: str = Field(..., description="Backend type: ollama, openrouter")
    model: str = Field(..., description="Model identifier (e.g., llava:13b)")
    host: Optional[str] = Field(None, description="Endpoint override (ollama host or OpenRouter base URL)")
    api_key_ref: Optional[str] = Field(None, description="Reference to api_keys entry (defaults to type)")
    max_dimension: int = Field(2048, ge=64, description="Longest image side sent to the model")
    timeout: int = Field(120, ge=1, description="Request timeout in seconds")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Backend-specific settings")


class TranscriptionSettings(BaseModel):
    """Retry policy and concurrency for the transcription stage."""
    transcriber: str = Field("llava", description="Name of the transcriber entry to use")
    max_attempts: int = Field(20, ge=1)
    deterministic_attempts: int = Field(2, ge=0, description="Attempts run at base_temperature before escalating")
    base_temperature: float = Field(0.0, ge=0)
    escalated_temperature: float = Field(0.5, ge=0)
    emphasis_after_attempts: int = Field(3, ge=0, description="Attempts after which the system prompt gains an emphasis line")
    refusal_max_chars: int = Field(100, ge=1, description="Only outputs shorter than this can be refusals")
    max_workers: int = Field(1, ge=1, description="In-flight transcription requests")


class LibraryConfig(BaseModel):
    """
    Library-level configuration.

    Stored at: {storage_root}/config.yaml
    """
    api_keys: Dict[str, str] = Field(
        default_factory=dict,
        description="API keys (can use ${ENV_VAR} syntax)"
    )
    transcribers: Dict[str, TranscriberConfig] = Field(
        default_factory=dict,
        description="Transcription backend definitions"
    )
    reader: ReaderSettings = Field(default_factory=ReaderSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    transcription: TranscriptionSettings = Field(default_factory=TranscriptionSettings)

    def resolve_api_key(self, key_name: str) -> Optional[str]:
        """
        Resolve an API key, expanding ${ENV_VAR} references.

        Returns None if key not found or env var not set.
        """
        if key_name not in self.api_keys:
            return None

        value = resolve_env_vars(self.api_keys[key_name])
        return value or None

    def get_transcriber(self, name: str) -> Optional[TranscriberConfig]:
        return self.transcribers.get(name)

    @classmethod
    def with_defaults(cls) -> "LibraryConfig":
        """Create a config with sensible defaults."""
        return cls(
            api_keys={
                "openrouter": "${OPENROUTER_API_KEY}",
            },
            transcribers={
                "llava": TranscriberConfig(
                    type="ollama",
                    model=Config.ollama_model,
                ),
                "gemini-flash": TranscriberConfig(
                    type="openrouter",
                    model="google/gemini-2.0-flash-001",
                ),
            },
        )


def resolve_env_vars(value: str) -> str:
    """
    Resolve ${ENV_VAR} references in a string.

    Examples:
        "${OPENROUTER_API_KEY}" -> actual value from environment
        "literal-value" -> "literal-value"
        "${MISSING_VAR}" -> "" (empty string if not set)
    """
    if not isinstance(value, str):
        return value

    pattern = r'\$\{([^}]+)\}'

    def replace(match):
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return re.sub(pattern, replace, value)
