"""
Runtime settings for SuperCopilot.

Verbosity is decided once, from the environment or by the host, and then
injected into the dispatcher. Nothing else in the package reads os.environ
for logging decisions.

Environment:
    SUPERCOPILOT_ENV / VSCODE_ENV   "production" or "development"
    SUPERCOPILOT_DEBUG              "true" / "1" forces debug output
    SUPERCOPILOT_CONFIG             path to a YAML/JSON persona+command table
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

LOGGER_NAME = "supercopilot"
LOG_FORMAT = "[SuperCopilot] %(levelname)s %(message)s"

TRUTHY = {"1", "true", "yes", "on"}


class Verbosity(Enum):
    """How much diagnostic detail to emit."""
    PRODUCTION = "production"  # errors only, no stack traces
    NORMAL = "normal"          # warnings and errors, stacks included
    DEBUG = "debug"            # everything


@dataclass(frozen=True)
class Settings:
    """Injected runtime settings."""
    verbosity: Verbosity = Verbosity.NORMAL
    config_path: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.verbosity is Verbosity.PRODUCTION

    @property
    def is_debug(self) -> bool:
        return self.verbosity is Verbosity.DEBUG

    @property
    def show_stack(self) -> bool:
        """Whether tracebacks may be written to the log."""
        return not self.is_production

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Production wins over the debug flag: a production host never gets
        stack traces, even with SUPERCOPILOT_DEBUG set.
        """
        env = os.environ if environ is None else environ
        mode = (env.get("SUPERCOPILOT_ENV") or "").lower()
        vscode_mode = (env.get("VSCODE_ENV") or "").lower()
        debug_flag = (env.get("SUPERCOPILOT_DEBUG") or "").lower() in TRUTHY

        if mode == "production" or vscode_mode == "production":
            verbosity = Verbosity.PRODUCTION
        elif debug_flag or mode == "development":
            verbosity = Verbosity.DEBUG
        else:
            verbosity = Verbosity.NORMAL

        return cls(
            verbosity=verbosity,
            config_path=env.get("SUPERCOPILOT_CONFIG") or None,
        )


def level_for(verbosity: Verbosity) -> int:
    """Map verbosity to a logging level."""
    if verbosity is Verbosity.DEBUG:
        return logging.DEBUG
    if verbosity is Verbosity.PRODUCTION:
        return logging.ERROR
    return logging.WARNING


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach a stderr handler to the package logger.

    Safe to call more than once; the level is updated and only one handler
    is ever installed.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_for(settings.verbosity))

    if not any(h.get_name() == LOGGER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.set_name(LOGGER_NAME)
        logger.addHandler(handler)

    return logger
