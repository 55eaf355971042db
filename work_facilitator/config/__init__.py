"""Configuration Management Package"""

import json
import os
import sys
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Optional

from work_facilitator import VERTEX_LOCATIONS

# Valid configuration values
VALID_PROVIDERS = {"openai", "claude", "vertexai", "llamacpp"}
VALID_PROMPT_STYLES = {"strict", "conventional"}
VALID_LOG_LEVELS = {"debug", "info", "warning", "error"}


def expand_env(value: Optional[str]) -> str:
    """'$NAME' reads environment variable NAME; anything else is returned as-is."""
    if not value:
        return ""
    if value.startswith("$"):
        return os.environ.get(value[1:], "")
    return value


@dataclass
class Config:
    """User configuration with sensible defaults."""
    ai_enabled: bool = True
    provider: str = "openai"
    api_key: str = ""
    model: Optional[str] = None
    base_url: Optional[str] = None
    max_tokens: int = 1024
    temperature: float = 0.7
    timeout: Optional[float] = None
    google_project_id: Optional[str] = None
    google_location: str = "us-central1"
    google_service_account_key: Optional[str] = None
    prompt_style: str = "strict"
    exclude_patterns: list[str] = field(default_factory=list)
    enforce_standard: bool = False
    commit_expr: str = ""
    branch_expr: str = ""
    log_level: str = "warning"

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def resolved_api_key(self) -> str:
        return expand_env(self.api_key)

    def masked(self) -> dict:
        """to_dict() with the API key hidden, for display."""
        data = self.to_dict()
        key = self.resolved_api_key()
        if self.api_key.startswith("$"):
            data["api_key"] = f"{self.api_key} ({'set' if key else 'unset'})"
        elif key:
            data["api_key"] = f"{key[:3]}...{key[-4:]}" if len(key) > 10 else "***"
        return data

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        if self.provider not in VALID_PROVIDERS:
            warnings.append(f"Invalid provider '{self.provider}', using '{defaults.provider}'")
            self.provider = defaults.provider

        if self.prompt_style not in VALID_PROMPT_STYLES:
            warnings.append(f"Invalid prompt_style '{self.prompt_style}', using '{defaults.prompt_style}'")
            self.prompt_style = defaults.prompt_style

        if self.google_location not in VERTEX_LOCATIONS:
            warnings.append(f"Invalid google_location '{self.google_location}', using '{defaults.google_location}'")
            self.google_location = defaults.google_location

        if str(self.log_level).lower() not in VALID_LOG_LEVELS:
            warnings.append(f"Invalid log_level '{self.log_level}', using '{defaults.log_level}'")
            self.log_level = defaults.log_level
        else:
            self.log_level = str(self.log_level).lower()

        if isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int) or self.max_tokens < 0:
            warnings.append(f"Invalid max_tokens '{self.max_tokens}', using {defaults.max_tokens}")
            self.max_tokens = defaults.max_tokens

        if isinstance(self.temperature, bool) or not isinstance(self.temperature, (int, float)) \
                or not 0 <= self.temperature <= 2:
            warnings.append(f"Invalid temperature '{self.temperature}', using {defaults.temperature}")
            self.temperature = defaults.temperature

        if self.timeout is not None and (isinstance(self.timeout, bool)
                                         or not isinstance(self.timeout, (int, float)) or self.timeout <= 0):
            warnings.append(f"Invalid timeout '{self.timeout}', using the provider default")
            self.timeout = defaults.timeout

        if not isinstance(self.exclude_patterns, list) \
                or not all(isinstance(p, str) for p in self.exclude_patterns):
            warnings.append("Invalid exclude_patterns, expected a list of strings")
            self.exclude_patterns = []

        if not isinstance(self.api_key, str):
            warnings.append("Invalid api_key, expected a string")
            self.api_key = defaults.api_key

        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config


class ConfigManager:
    """Manages loading and saving configuration."""

    CONFIG_FILENAME = ".wfrc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        for path in (Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME):
            if path.exists():
                self._config = self._load_from_file(path)
                self._config_path = path
                return self._config

        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            print(f"Config warning: could not load {path}: {e}", file=sys.stderr)
            return Config()
        if not isinstance(data, dict):
            print(f"Config warning: {path} must contain a JSON object", file=sys.stderr)
            return Config()
        return Config.from_dict(data)

    def save(self, config: Config, global_config: bool = True) -> Path:
        path = Path.home() / self.CONFIG_FILENAME if global_config else Path.cwd() / self.CONFIG_FILENAME
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(config.to_dict(), f, indent=2)
        return path

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def save_config(config: Config, global_config: bool = True) -> Path:
    return _manager.save(config, global_config)


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigManager",
    "expand_env",
    "load_config",
    "save_config",
    "get_config_path",
    "VALID_PROVIDERS",
    "VALID_PROMPT_STYLES",
]
