"""
Configuration management for translate-i18n-ai.

Handles loading configuration from YAML files and environment variables.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from translate_i18n_ai.errors import ConfigurationError

# Load .env file if present (before Settings initialization)
load_dotenv()


class LLMProvider(str, Enum):
    """Available LLM providers."""

    OPENROUTER = "openrouter"
    CLAUDE_CODE = "claude-code"


class TranslationConfig(BaseModel):
    """Configuration for the translation backend."""

    # "openrouter" (pay-per-token) or "claude-code" (subscription)
    provider: LLMProvider = Field(default=LLMProvider.OPENROUTER)
    default_model: str = Field(default="default")
    fallback_provider: LLMProvider | None = Field(default=None)
    fallback_model: str | None = Field(default=None)
    # Only required if provider (or fallback) is "openrouter"
    openrouter_api_key: str = Field(default="")
    source_language: str = Field(default="en")
    target_languages: list[str] = Field(default_factory=lambda: ["es", "fr", "de"])
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens_per_request: int = Field(default=8192, ge=256, le=64000)
    timeout_seconds: float = Field(default=120.0, ge=5.0, le=600.0)
    max_retries: int = Field(default=3, ge=1, le=10)
    max_concurrent_locales: int = Field(default=4, ge=1, le=32)


class DefaultsConfig(BaseModel):
    """Default pipeline options, overridable per call."""

    preserve_placeholders: bool = Field(default=True)
    enable_pluralization: bool = Field(default=True)
    detect_namespaces: bool = Field(default=False)
    skip_keys: list[str] = Field(default_factory=list)
    skip_paths: list[str] = Field(default_factory=list)


class PathsConfig(BaseModel):
    """Configuration for file paths."""

    output_dir: Path = Field(default=Path("./output"))

    @field_validator("output_dir")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        """Expand user home directory and make path absolute."""
        return Path(v).expanduser().resolve()


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO")
    file: Path | None = Field(default=None)
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    max_file_size_mb: int = Field(default=10, ge=1, le=100)
    backup_count: int = Field(default=5, ge=1, le=20)

    @field_validator("level")
    @classmethod
    def upper_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """Main settings class that combines all configurations."""

    model_config = SettingsConfigDict(
        env_prefix="",  # No prefix for simpler env vars
        env_nested_delimiter="__",
        extra="ignore",
    )

    translation: TranslationConfig = Field(default_factory=TranslationConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable fallbacks for API keys."""
        super().__init__(**data)
        if not self.translation.openrouter_api_key:
            self.translation.openrouter_api_key = os.getenv("OPENROUTER_API_KEY", "")

    @classmethod
    def from_yaml(cls, path: Path | str) -> Settings:
        """Load settings from a YAML file, with environment variable overrides."""
        path = Path(path)
        if not path.exists():
            # Return defaults if file doesn't exist
            return cls()

        with open(path, encoding="utf-8") as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        yaml_config = _substitute_env_vars(yaml_config)

        try:
            return cls(**yaml_config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e


def _substitute_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively substitute ${ENV_VAR} patterns in config values."""
    result = {}
    for key, value in config.items():
        if isinstance(value, dict):
            result[key] = _substitute_env_vars(value)
        elif isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            result[key] = os.getenv(value[2:-1], "")
        elif isinstance(value, list):
            result[key] = [
                _substitute_env_vars(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


def load_config(path: Path | str | None = None) -> Settings:
    """
    Load configuration from YAML file or return defaults.

    Args:
        path: Path to YAML config file. If None, looks for a config file in
            the current directory.

    Returns:
        Settings instance with merged YAML and environment configurations.
    """
    if path is None:
        default_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(".translate-i18n.yaml"),
        ]
        for p in default_paths:
            if p.exists():
                path = p
                break

    if path is not None:
        return Settings.from_yaml(path)

    return Settings()


def create_default_config(path: Path | str = "config.yaml") -> None:
    """Create a default configuration file."""
    default_config = """# translate-i18n-ai configuration
translation:
  # "openrouter" (pay-per-token) or "claude-code" (Claude subscription)
  provider: "openrouter"
  # Model alias (default, fast, quality) or full model name
  default_model: "default"
  # Optional provider used when the primary fails
  # fallback_provider: "claude-code"
  # fallback_model: "sonnet"
  openrouter_api_key: "${OPENROUTER_API_KEY}"
  source_language: "en"
  target_languages: ["es", "fr", "de"]
  temperature: 0.3
  max_tokens_per_request: 8192
  timeout_seconds: 120
  # Retries for transient failures (rate limits, network, 5xx)
  max_retries: 3
  # Target locales translated in parallel
  max_concurrent_locales: 4

defaults:
  # Protect {{name}} and ICU {count, plural, ...} tokens
  preserve_placeholders: true
  # Expand key_one/key_other families to each language's CLDR plural forms
  enable_pluralization: true
  # Report i18next namespaces (top-level objects)
  detect_namespaces: false
  # Exact key paths left untranslated
  skip_keys: []
  # Glob patterns, "*" matches one path segment (e.g. "states.*", "*.internal.*")
  skip_paths: []

paths:
  output_dir: "./output"

logging:
  level: "INFO"
  # file: "./logs/translate-i18n.log"
"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(default_config)
