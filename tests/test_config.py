import logging

import pytest

from translate_i18n_ai.config import (
    LLMProvider,
    LoggingConfig,
    Settings,
    create_default_config,
    load_config,
)
from translate_i18n_ai.errors import ConfigurationError
from translate_i18n_ai.log import PACKAGE_LOGGER, setup_logging


def test_defaults():
    settings = Settings()

    assert settings.translation.provider is LLMProvider.OPENROUTER
    assert settings.translation.target_languages == ["es", "fr", "de"]
    assert settings.defaults.preserve_placeholders is True
    assert settings.defaults.detect_namespaces is False
    assert settings.logging.level == "INFO"


def test_api_key_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-from-env")

    assert Settings().translation.openrouter_api_key == "sk-or-from-env"


def test_from_yaml_with_env_substitution(tmp_path, monkeypatch):
    monkeypatch.setenv("MY_KEY", "sk-or-yaml")
    path = tmp_path / "config.yaml"
    path.write_text(
        """
translation:
  provider: claude-code
  openrouter_api_key: "${MY_KEY}"
  target_languages: [ru, ja]
  max_concurrent_locales: 2
defaults:
  skip_paths: ["states.*"]
logging:
  level: debug
""",
        encoding="utf-8",
    )

    settings = Settings.from_yaml(path)

    assert settings.translation.provider is LLMProvider.CLAUDE_CODE
    assert settings.translation.openrouter_api_key == "sk-or-yaml"
    assert settings.translation.target_languages == ["ru", "ja"]
    assert settings.translation.max_concurrent_locales == 2
    assert settings.defaults.skip_paths == ["states.*"]
    assert settings.logging.level == "DEBUG"


def test_missing_file_gives_defaults(tmp_path):
    settings = load_config(tmp_path / "absent.yaml")

    assert settings.translation.source_language == "en"


@pytest.mark.parametrize(
    "content",
    [
        "translation: [unclosed",
        "- just\n- a list\n",
        "translation:\n  temperature: 9\n",
        "logging:\n  level: LOUD\n",
    ],
)
def test_invalid_files_raise_configuration_error(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        Settings.from_yaml(path)


def test_default_config_round_trips(tmp_path):
    path = tmp_path / "nested" / "config.yaml"

    create_default_config(path)
    settings = load_config(path)

    assert path.exists()
    assert settings.translation.provider is LLMProvider.OPENROUTER
    assert settings.defaults.enable_pluralization is True
    assert settings.defaults.skip_paths == []


def test_setup_logging_installs_rich_and_file_handlers(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    logger = setup_logging(LoggingConfig(level="warning", file=log_file))

    assert logger.name == PACKAGE_LOGGER
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 2
    assert not logger.propagate

    logging.getLogger("translate_i18n_ai.translation.pipeline").warning("drift in greeting")
    for handler in logger.handlers:
        handler.flush()

    assert "drift in greeting" in log_file.read_text(encoding="utf-8")


def test_setup_logging_replaces_previous_handlers():
    setup_logging()
    logger = setup_logging()

    assert len(logger.handlers) == 1
