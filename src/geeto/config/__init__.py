"""Configuration loading: settings, prompt templates and credentials."""

from geeto.config.credentials import (
    GeminiConfig,
    GithubConfig,
    OpenRouterConfig,
    TrelloConfig,
    read_credentials,
    write_credentials,
)
from geeto.config.prompts import get_prompts, render
from geeto.config.settings import get_config, get_config_loaded_sources, reload_config
from geeto.config.utils import deep_merge, ensure_geeto_ignored, get_nested, load_yaml

__all__ = [
    # Settings
    "get_config",
    "reload_config",
    "get_config_loaded_sources",
    # Prompts
    "get_prompts",
    "render",
    # Credentials
    "GeminiConfig",
    "OpenRouterConfig",
    "TrelloConfig",
    "GithubConfig",
    "read_credentials",
    "write_credentials",
    # Utils
    "deep_merge",
    "load_yaml",
    "get_nested",
    "ensure_geeto_ignored",
]
