"""Configuration Management Package"""

import json
import os
import sys
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from dualcommit.llm import PROVIDERS

VALID_PROVIDERS = set(PROVIDERS)

# Default key variable per provider, used when the config names none
DEFAULT_KEY_ENVS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


@dataclass
class Config:
    """User configuration with sensible defaults."""
    provider: str = "openai"
    model: str = "gpt-4.1"
    api_key_env: str = "OPENAI_API_KEY"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    # Initial token budget; truncated responses double it up to 4000
    max_tokens: int = 2000
    auto_stage: bool = False

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        if not isinstance(self.provider, str) or self.provider.lower() not in VALID_PROVIDERS:
            warnings.append(f"Invalid provider '{self.provider}', using '{defaults.provider}'")
            self.provider = defaults.provider
        else:
            self.provider = self.provider.lower()

        if not isinstance(self.model, str) or not self.model:
            warnings.append(f"Invalid model '{self.model}', using '{defaults.model}'")
            self.model = defaults.model

        if isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int) or self.max_tokens <= 0:
            warnings.append(f"Invalid max_tokens '{self.max_tokens}', using {defaults.max_tokens}")
            self.max_tokens = defaults.max_tokens

        return warnings

    def get_api_key(self) -> Optional[str]:
        """Explicit key first, then the configured environment variable."""
        if self.api_key:
            return self.api_key
        env_name = self.api_key_env or DEFAULT_KEY_ENVS.get(self.provider, "")
        return os.environ.get(env_name) or None

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        # Validate and print warnings to stderr
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config


class ConfigError(Exception):
    """Raised when a config file cannot be written."""
    pass


class ConfigManager:
    """Manages loading and saving configuration."""

    CONFIG_FILENAME = ".gcmrc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        for path in (Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME):
            if path.is_file():
                self._config = self._load_from_file(path)
                self._config_path = path
                return self._config

        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level value must be an object")
            return Config.from_dict(data)
        except (json.JSONDecodeError, ValueError, IOError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()

    def save(self, config: Config, global_config: bool = True) -> Path:
        path = Path.home() / self.CONFIG_FILENAME if global_config else Path.cwd() / self.CONFIG_FILENAME
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(config.to_dict(), f, indent=2)
        # May hold an API key
        if os.name == 'posix':
            os.chmod(path, 0o600)
        return path

    def init(self, local: bool = False, force: bool = False) -> Path:
        """Write a default config file. Refuses to overwrite unless force."""
        path = Path.cwd() / self.CONFIG_FILENAME if local else Path.home() / self.CONFIG_FILENAME
        if path.exists() and not force:
            raise ConfigError(f"Config file already exists at {path}. Use --force to overwrite.")
        return self.save(Config(), global_config=not local)

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def init_config(local: bool = False, force: bool = False) -> Path:
    return _manager.init(local, force)


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigError",
    "ConfigManager",
    "load_config",
    "init_config",
    "get_config_path",
    "VALID_PROVIDERS",
    "DEFAULT_KEY_ENVS",
]
