"""
Tests for settings and logging setup.

Covers:
- Defaults for every settings section
- Environment overrides (prefixed sub-settings and nested delimiter)
- get_logger naming
- setup_logging handlers and the colored formatter
"""

import logging

from npcgen.config.logging import ColoredFormatter, get_logger, setup_logging
from npcgen.config.settings import GeneratorSettings, LLMSettings, Settings


class TestSettingsDefaults:
    def test_defaults(self, monkeypatch):
        for var in ("LLM__JSON_MODE", "GENERATOR__HIDE_ALIGNMENT", "GENERATOR__SOURCE",
                    "BOT__ALLOWED_CHANNEL_IDS", "LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings(_env_file=None)
        assert settings.log_level == "INFO"
        assert settings.bot.allowed_channel_ids == []
        assert settings.llm.json_mode is True
        assert settings.generator.source == "NPC Generator (GPT)"
        assert settings.generator.hide_alignment is False


class TestSettingsEnvironment:
    def test_prefixed_sub_settings(self, monkeypatch):
        monkeypatch.setenv("LLM_MODEL", "ollama/llama3")
        monkeypatch.setenv("GENERATOR_HIDE_ALIGNMENT", "true")
        assert LLMSettings().model == "ollama/llama3"
        assert GeneratorSettings().hide_alignment is True

    def test_nested_delimiter(self, monkeypatch):
        monkeypatch.setenv("LLM__TEMPERATURE", "0.2")
        monkeypatch.setenv("BOT__ALLOWED_CHANNEL_IDS", "[123, 456]")
        settings = Settings(_env_file=None)
        assert settings.llm.temperature == 0.2
        assert settings.bot.allowed_channel_ids == [123, 456]

    def test_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GENERATOR__SOURCE", raising=False)
        env_file = tmp_path / "test.env"
        env_file.write_text("GENERATOR__SOURCE=Homebrew Tavern\nLOG_LEVEL=DEBUG\n", encoding="utf-8")
        settings = Settings(_env_file=env_file)
        assert settings.generator.source == "Homebrew Tavern"
        assert settings.log_level == "DEBUG"


class TestLogging:
    def test_get_logger_namespaces(self):
        assert get_logger("npcgen.generator.builder").name == "npcgen.generator.builder"
        assert get_logger("scratch").name == "npcgen.scratch"

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "npcgen.log"
        settings = Settings(_env_file=None, log_level="WARNING", log_file=log_file)

        setup_logging(settings)

        logger = logging.getLogger("npcgen")
        assert logger.level == logging.WARNING
        assert logger.propagate is False
        assert len(logger.handlers) == 2
        assert isinstance(logger.handlers[0].formatter, ColoredFormatter)
        assert log_file.parent.is_dir()

        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_colored_formatter_restores_levelname(self):
        formatter = ColoredFormatter(fmt="%(levelname)s %(message)s")
        record = logging.LogRecord("npcgen", logging.ERROR, __file__, 1, "bad", None, None)
        output = formatter.format(record)
        assert "\033[31mERROR\033[0m" in output
        assert record.levelname == "ERROR"
