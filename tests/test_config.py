"""
Configuration tests.

Run with:
    python -m pytest tests/test_config.py -v
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core import config as config_module
from core.config import Config, get_config, reload_config


class TestConfig:
    """Environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("VEO_MODEL", "VEO_FAST_MODEL", "VEO_POLL_INTERVAL", "VEO_MAX_POLL_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        config = Config()

        assert config.generation.poll_interval == 5.0
        assert config.generation.max_poll_seconds is None
        assert config.storage.history_key == "veo_history"
        assert config.storage.gallery_key == "veo_videos"
        assert config.storage.history_limit == 20
        assert config.models.model_for_resolution("1080p") == "veo-3.1-generate-preview"
        assert config.models.model_for_resolution("720p") == "veo-3.1-fast-generate-preview"

    def test_key_fallback(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", "studio-key")

        assert Config().api.google_api_key == "studio-key"

        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        assert Config().api.google_api_key == "google-key"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("VEO_POLL_INTERVAL", "1.5")
        monkeypatch.setenv("VEO_MAX_POLL_SECONDS", "600")
        monkeypatch.setenv("VEO_MODEL", "veo-custom")

        config = Config()

        assert config.generation.poll_interval == 1.5
        assert config.generation.max_poll_seconds == 600.0
        assert config.models.standard_model == "veo-custom"

    def test_validate(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        monkeypatch.setenv("VEO_POLL_INTERVAL", "0")

        issues = Config().validate()

        assert any("API key" in issue for issue in issues)
        assert any("VEO_POLL_INTERVAL" in issue for issue in issues)

    def test_reload(self, monkeypatch):
        monkeypatch.setattr(config_module, "_config", None)
        first = get_config()

        assert get_config() is first

        reload_config()
        assert get_config() is not first
