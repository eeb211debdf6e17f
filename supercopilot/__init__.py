"""
SuperCopilot - request preprocessing for AI coding assistants.

Given user input and the active file path, either:
- detects a slash command (/review, /debug, /help, ...) and renders its
  fixed prompt, or
- picks the persona that best fits the file type and query text and
  renders that persona's prompt template.

Pure string work. No network, no persistence.

Usage:
    from supercopilot import SuperCopilotMain

    copilot = SuperCopilotMain()
    prompt = copilot.process_user_input("explain this function", "app.ts")
"""

__version__ = "0.1.0"

from supercopilot.config import (
    SuperCopilotConfig,
    ConfigResult,
    ConfigError,
    SuperCopilotError,
    default_config,
    load_config,
)
from supercopilot.main import SuperCopilotMain, Context
from supercopilot.persona import PersonaSelector, PersonaMatch, extract_file_type
from supercopilot.commands import CommandsHandler, CommandMatch
from supercopilot.preprocess import preprocess_copilot_prompt
from supercopilot.settings import Settings, Verbosity

__all__ = [
    "SuperCopilotMain",
    "Context",
    "SuperCopilotConfig",
    "ConfigResult",
    "ConfigError",
    "SuperCopilotError",
    "default_config",
    "load_config",
    "PersonaSelector",
    "PersonaMatch",
    "extract_file_type",
    "CommandsHandler",
    "CommandMatch",
    "preprocess_copilot_prompt",
    "Settings",
    "Verbosity",
]
