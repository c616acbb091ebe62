"""Configuration management for fenceview."""

import logging
import os
from pathlib import Path
from typing import Optional, Dict, Any

import yaml

from .core.layout import TWO_UP_LANGUAGES
from .providers.base import ProviderConfig

_log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/fenceview/config.yaml"


class ConfigManager:
    """Manage fenceview configuration from YAML."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            self._create_default_config()
        return self._read_yaml()

    def _read_yaml(self) -> Dict[str, Any]:
        """Read and parse YAML file."""
        try:
            with open(self.config_path, "r") as f:
                content = yaml.safe_load(f)
                return content or {}
        except (OSError, yaml.YAMLError) as e:
            _log.warning("Error reading config %s: %s", self.config_path, e)
            return {}

    def _create_default_config(self) -> None:
        """Create default configuration file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        default_config = {
            "providers": {
                "together": {
                    "enabled": True,
                    "api_key": "${TOGETHER_API_KEY}",
                    "model": "Qwen/Qwen2.5-Coder-32B-Instruct",
                    "temperature": 0.2,
                },
                "openai": {
                    "enabled": False,
                    "api_key": "${OPENAI_API_KEY}",
                    "model": "gpt-4o",
                    "temperature": 0.2,
                },
            },
            "defaults": {
                "provider": "together",
            },
            "layout": {
                "two_up_languages": sorted(TWO_UP_LANGUAGES),
            },
            "history": {
                "db_path": "~/.config/fenceview/chats.db",
            },
            "prompts": {
                "system_prompt": "",
            },
        }

        with open(self.config_path, "w") as f:
            yaml.dump(default_config, f, default_flow_style=False)

    def get_provider_config(self, provider_name: str) -> Optional[ProviderConfig]:
        """Get configuration for a specific provider."""
        provider_data = self.data.get("providers", {}).get(provider_name, {})

        if not provider_data.get("enabled", False):
            return None

        api_key = self._resolve_env_var(provider_data.get("api_key", ""))
        if not api_key:
            return None

        return ProviderConfig(
            api_key=api_key,
            model=provider_data.get("model", ""),
            base_url=provider_data.get("base_url"),
            temperature=provider_data.get("temperature", 0.7),
            max_tokens=provider_data.get("max_tokens"),
            timeout=provider_data.get("timeout", 60.0),
        )

    def _resolve_env_var(self, value: str) -> str:
        """Resolve environment variable references like ${VAR_NAME}."""
        if not value.startswith("${") or not value.endswith("}"):
            return value

        var_name = value[2:-1]
        return os.getenv(var_name, "")

    def get_default_provider(self) -> str:
        """Get the default provider name."""
        return self.data.get("defaults", {}).get("provider", "together")

    def get_enabled_providers(self) -> list[str]:
        """Get list of enabled provider names."""
        providers = self.data.get("providers", {})
        return [name for name, config in providers.items() if config.get("enabled", False)]

    def get_two_up_languages(self) -> frozenset[str]:
        """Languages rendered in the two-up layout."""
        languages = self.data.get("layout", {}).get("two_up_languages")
        if not languages:
            return TWO_UP_LANGUAGES
        return frozenset(str(lang) for lang in languages)

    def get_history_path(self) -> Optional[str]:
        """Path of the SQLite chat store (None means the built-in default)."""
        return self.data.get("history", {}).get("db_path") or None

    def get_system_prompt(self) -> str:
        """Configured system prompt override, or empty for the default."""
        return self.data.get("prompts", {}).get("system_prompt") or ""

    def save(self) -> None:
        """Save configuration to file."""
        with open(self.config_path, "w") as f:
            yaml.dump(self.data, f, default_flow_style=False)
