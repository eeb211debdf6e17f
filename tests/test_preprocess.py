"""
Tests for the host preprocessing hook and runtime settings.
"""

import logging

import pytest

from supercopilot.config import SuperCopilotConfig
from supercopilot.main import SuperCopilotMain
from supercopilot.preprocess import (
    create_instance,
    get_shared_instance,
    preprocess_copilot_prompt,
    reset_shared_instance,
)
from supercopilot.settings import (
    LOGGER_NAME,
    Settings,
    Verbosity,
    configure_logging,
    level_for,
)


class ExplodingCopilot(SuperCopilotMain):
    """Dispatcher whose processing always fails."""

    def process_user_input(self, user_text="", file_path="", persona=None):
        raise RuntimeError("kaboom")


class TestSettings:
    """Test Settings.from_env()."""

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.verbosity is Verbosity.NORMAL
        assert settings.config_path is None
        assert settings.show_stack is True

    @pytest.mark.parametrize("env", [
        {"SUPERCOPILOT_ENV": "production"},
        {"VSCODE_ENV": "production"},
        {"SUPERCOPILOT_ENV": "Production"},
    ])
    def test_production(self, env):
        settings = Settings.from_env(env)
        assert settings.is_production
        assert settings.show_stack is False

    @pytest.mark.parametrize("env", [
        {"SUPERCOPILOT_DEBUG": "true"},
        {"SUPERCOPILOT_DEBUG": "1"},
        {"SUPERCOPILOT_ENV": "development"},
    ])
    def test_debug(self, env):
        assert Settings.from_env(env).is_debug

    def test_production_beats_debug(self):
        settings = Settings.from_env({"VSCODE_ENV": "production", "SUPERCOPILOT_DEBUG": "true"})
        assert settings.is_production

    def test_config_path(self):
        assert Settings.from_env({"SUPERCOPILOT_CONFIG": "/x.yaml"}).config_path == "/x.yaml"

    def test_reads_process_env(self, monkeypatch):
        monkeypatch.setenv("SUPERCOPILOT_DEBUG", "yes")
        assert Settings.from_env().is_debug


class TestConfigureLogging:
    """Test configure_logging()."""

    def test_single_handler(self):
        logger = configure_logging(Settings(verbosity=Verbosity.DEBUG))
        configure_logging(Settings(verbosity=Verbosity.DEBUG))

        ours = [h for h in logger.handlers if h.get_name() == LOGGER_NAME]
        assert len(ours) == 1
        assert logger.level == logging.DEBUG

        configure_logging(Settings())
        assert logger.level == logging.WARNING

    def test_levels(self):
        assert level_for(Verbosity.PRODUCTION) == logging.ERROR
        assert level_for(Verbosity.NORMAL) == logging.WARNING
        assert level_for(Verbosity.DEBUG) == logging.DEBUG


class TestPreprocessWithDispatcher:
    """preprocess_copilot_prompt() with an explicit dispatcher."""

    def test_help(self):
        copilot = SuperCopilotMain()
        result = preprocess_copilot_prompt("/help", {}, dispatcher=copilot)
        copilot.initialize()
        assert result == copilot.commands_handler.generate_help_text()

    def test_file_path_from_context(self):
        copilot = SuperCopilotMain()
        preprocess_copilot_prompt("explain this function", {"filePath": "app.ts"}, dispatcher=copilot)
        assert copilot.current_context.file_type == "ts"
        assert copilot.current_context.last_persona == "backend"

    def test_snake_case_context_key(self):
        copilot = SuperCopilotMain()
        preprocess_copilot_prompt("hi", {"file_path": "page.vue"}, dispatcher=copilot)
        assert copilot.current_context.last_persona == "frontend"

    def test_invalid_config_passes_through(self):
        copilot = SuperCopilotMain(config=SuperCopilotConfig())
        assert preprocess_copilot_prompt("hi", {"filePath": "x.js"}, dispatcher=copilot) == "hi"

    def test_processing_error_passes_through(self, caplog):
        copilot = ExplodingCopilot()
        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            result = preprocess_copilot_prompt("keep me", None, dispatcher=copilot)
        assert result == "keep me"
        assert "kaboom" in caplog.text

    def test_production_hides_detail(self, caplog):
        copilot = ExplodingCopilot(settings=Settings(verbosity=Verbosity.PRODUCTION))
        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            result = preprocess_copilot_prompt("keep me", None, dispatcher=copilot)
        assert result == "keep me"
        assert "kaboom" not in caplog.text
        assert "An error occurred during preprocessing" in caplog.text


class TestSharedInstance:
    """Shared dispatcher used when no dispatcher is passed."""

    def test_created_once(self):
        first = get_shared_instance()
        assert first is get_shared_instance()
        assert first.initialized

    def test_reset(self):
        first = get_shared_instance()
        reset_shared_instance()
        assert get_shared_instance() is not first

    def test_preprocess_uses_shared_instance(self):
        result = preprocess_copilot_prompt("explain this function", {"filePath": "app.ts"})
        assert "BACKEND" in result
        assert get_shared_instance().current_context.last_persona == "backend"

    def test_config_from_env(self, monkeypatch, tmp_path):
        path = tmp_path / "copilot.yaml"
        path.write_text(
            "personas:\n"
            "  only:\n"
            "    template: 'ONLY {query}'\n"
            "commands:\n"
            "  help:\n"
            "    trigger: /help\n"
            "    template: '{help}'\n"
        )
        monkeypatch.setenv("SUPERCOPILOT_CONFIG", str(path))

        assert preprocess_copilot_prompt("anything", {}) == "ONLY anything"

    def test_bad_config_from_env_passes_through(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SUPERCOPILOT_CONFIG", str(tmp_path / "missing.yaml"))
        assert preprocess_copilot_prompt("untouched", {"filePath": "a.py"}) == "untouched"
        assert get_shared_instance().initialized is False

    def test_malformed_config_cached_once(self, monkeypatch, tmp_path):
        path = tmp_path / "nested.yaml"
        path.write_text("personas:\n  web: {keywords: [{a: 1}]}\ncommands:\n  help: {trigger: /help}\n")
        monkeypatch.setenv("SUPERCOPILOT_CONFIG", str(path))

        assert preprocess_copilot_prompt("untouched", {}) == "untouched"
        shared = get_shared_instance()
        assert shared.initialized is False
        assert preprocess_copilot_prompt("again", {}) == "again"
        assert get_shared_instance() is shared

    def test_create_instance(self):
        instance = create_instance(Settings())
        assert instance.initialized
        assert instance is not get_shared_instance()
