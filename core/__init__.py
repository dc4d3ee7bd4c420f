"""
Veo Studio Core Components

Provides foundational infrastructure for the generation core:
- Environment-driven configuration
"""

from .config import Config, get_config, reload_config

__all__ = ["Config", "get_config", "reload_config"]
