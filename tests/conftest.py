"""Shared fixtures for SuperCopilot tests."""

import logging

import pytest

from supercopilot.commands import CommandConfig
from supercopilot.config import SuperCopilotConfig, default_config
from supercopilot.persona import PersonaConfig
from supercopilot.preprocess import reset_shared_instance
from supercopilot.settings import LOGGER_NAME


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment out of settings and drop the shared dispatcher."""
    for var in ("SUPERCOPILOT_ENV", "VSCODE_ENV", "SUPERCOPILOT_DEBUG", "SUPERCOPILOT_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    reset_shared_instance()
    yield
    reset_shared_instance()
    logger = logging.getLogger(LOGGER_NAME)
    for handler in [h for h in logger.handlers if h.get_name() == LOGGER_NAME]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def config():
    """Built-in configuration."""
    return default_config()


@pytest.fixture
def small_config():
    """Two personas and two commands with predictable templates."""
    return SuperCopilotConfig(
        personas={
            "web": PersonaConfig(
                name="web",
                extensions=["ts", "html"],
                keywords=["page", "button"],
                template="WEB[{file_type}] {query}",
            ),
            "data": PersonaConfig(
                name="data",
                extensions=["sql"],
                keywords=["query", "table"],
                template="DATA[{file_type}] {query}",
            ),
            "general": PersonaConfig(
                name="general",
                template="GENERAL {query}",
            ),
        },
        commands={
            "help": CommandConfig(
                name="help",
                triggers=["/help"],
                description="Show help",
                template="{help}",
            ),
            "ship": CommandConfig(
                name="ship",
                triggers=["/ship", "deploy"],
                description="Ship it",
                template="SHIP: {input}",
            ),
        },
        default_persona="general",
    )
