"""
Configuration management for Veo Studio.

Centralizes all configuration including:
- API credentials
- Veo model selection per resolution
- Polling and progress-simulation timings
- Local output and ledger locations
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    """Read an optional float from the environment."""
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


@dataclass
class APIConfig:
    """API configuration for the video generation backend."""

    # AI Studio style deployments expose the key as API_KEY
    google_api_key: str = field(
        default_factory=lambda: os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY", "")
    )
    download_timeout: float = 600.0  # 10 min for large 1080p clips


@dataclass
class ModelConfig:
    """Model selection configuration."""

    # Standard model for 1080p, fast model is enough for phone-sized 720p
    standard_model: str = field(
        default_factory=lambda: os.getenv("VEO_MODEL", "veo-3.1-generate-preview")
    )
    fast_model: str = field(
        default_factory=lambda: os.getenv("VEO_FAST_MODEL", "veo-3.1-fast-generate-preview")
    )

    def model_for_resolution(self, resolution: str) -> str:
        """Pick the Veo model for the requested output resolution."""
        return self.standard_model if resolution == "1080p" else self.fast_model


@dataclass
class GenerationConfig:
    """Long-running operation settings."""

    poll_interval: float = field(
        default_factory=lambda: _env_float("VEO_POLL_INTERVAL", 5.0)
    )
    # None = poll until the backend finishes
    max_poll_seconds: Optional[float] = field(
        default_factory=lambda: _env_float("VEO_MAX_POLL_SECONDS", None)
    )
    output_dir: str = field(default_factory=lambda: os.getenv("VEO_OUTPUT_DIR", "output"))
    rpc_retry_attempts: int = 3  # Per poll/fetch RPC, submissions are never retried


@dataclass
class ProgressConfig:
    """Cosmetic progress simulation timings."""

    progress_interval: float = 0.2
    step_interval: float = 3.0
    ceiling: float = 95.0


@dataclass
class StorageConfig:
    """Ledger persistence configuration."""

    ledger_path: str = field(
        default_factory=lambda: os.getenv("VEO_LEDGER_PATH", "veo_ledger.json")
    )
    history_key: str = "veo_history"
    gallery_key: str = "veo_videos"
    history_limit: int = 20


@dataclass
class Config:
    """Main configuration class."""

    api: APIConfig = field(default_factory=APIConfig)
    models: ModelConfig = field(default_factory=ModelConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    progress: ProgressConfig = field(default_factory=ProgressConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if not self.api.google_api_key:
            issues.append("No API key configured (GOOGLE_API_KEY or API_KEY); a key picker is required")

        if self.generation.poll_interval <= 0:
            issues.append("VEO_POLL_INTERVAL must be positive")

        if self.generation.max_poll_seconds is not None and self.generation.max_poll_seconds <= 0:
            issues.append("VEO_MAX_POLL_SECONDS must be positive when set")

        return issues


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config():
    """Reload configuration from environment."""
    global _config
    _config = Config.from_env()
