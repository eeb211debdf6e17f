"""
SuperCopilot configuration: the persona and command tables.

The tables are built once and never mutated afterwards. They come from the
built-in defaults or from a YAML/JSON file:

    default_persona: dev
    personas:
      backend:
        identity: Server-side engineer
        extensions: [py, go]
        keywords: [api, database]
        template: "Backend ({file_type}): {query}"
    commands:
      help:
        triggers: [/help, /h]
        description: Show available commands
        template: "{help}"

Loading never raises for bad input. Problems are reported through
ConfigResult.errors so callers can decide how to degrade.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from supercopilot.commands import CommandConfig, DEFAULT_COMMANDS
from supercopilot.persona import PersonaConfig, DEFAULT_PERSONAS, DEFAULT_PERSONA

logger = logging.getLogger(__name__)


class SuperCopilotError(Exception):
    """Base error for SuperCopilot."""


class ConfigError(SuperCopilotError):
    """Configuration could not be loaded or is invalid."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Configuration is invalid")


@dataclass
class SuperCopilotConfig:
    """Persona and command tables, in declaration order."""
    personas: Dict[str, PersonaConfig] = field(default_factory=dict)
    commands: Dict[str, CommandConfig] = field(default_factory=dict)
    default_persona: str = DEFAULT_PERSONA

    def to_dict(self) -> dict:
        return {
            "default_persona": self.default_persona,
            "personas": {k: p.to_dict() for k, p in self.personas.items()},
            "commands": {k: c.to_dict() for k, c in self.commands.items()},
        }


@dataclass
class ConfigResult:
    """Outcome of building or loading a configuration."""
    config: Optional[SuperCopilotConfig] = None
    errors: List[str] = field(default_factory=list)
    source: str = "<defaults>"

    @property
    def ok(self) -> bool:
        return self.config is not None and not self.errors

    def unwrap(self) -> SuperCopilotConfig:
        """Return the config or raise ConfigError."""
        if not self.ok:
            raise ConfigError(self.errors)
        return self.config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "source": self.source,
            "errors": self.errors,
            "personas": list(self.config.personas) if self.config else [],
            "commands": list(self.config.commands) if self.config else [],
        }


def default_config() -> SuperCopilotConfig:
    """Configuration built from the built-in tables."""
    return SuperCopilotConfig(
        personas=dict(DEFAULT_PERSONAS),
        commands=dict(DEFAULT_COMMANDS),
        default_persona=DEFAULT_PERSONA,
    )


def validate_config(config: Optional[SuperCopilotConfig]) -> List[str]:
    """Check a configuration. Returns a list of problems, empty if valid."""
    if config is None:
        return ["Configuration is missing"]

    errors = []
    if not config.personas:
        errors.append("Configuration has no personas")
    if not config.commands:
        errors.append("Configuration has no commands")

    if config.personas and config.default_persona not in config.personas:
        errors.append(f"Default persona '{config.default_persona}' is not defined")

    for key, cmd in config.commands.items():
        if not cmd.triggers:
            errors.append(f"Command '{key}' has no triggers")

    return errors


def shadowed_triggers(config: SuperCopilotConfig) -> List[str]:
    """Triggers that a later command shares with an earlier one.

    Legal: detection is first match in declaration order, so the later
    command never fires on that trigger.
    """
    warnings = []
    seen: Dict[str, str] = {}
    for key, cmd in config.commands.items():
        for trigger in cmd.triggers:
            if trigger in seen and seen[trigger] != key:
                warnings.append(f"Trigger '{trigger}' of '{key}' is shadowed by '{seen[trigger]}'")
            seen.setdefault(trigger, key)
    return warnings


def config_from_dict(data: Any, source: str = "<dict>") -> ConfigResult:
    """Build a configuration from plain data (parsed YAML/JSON)."""
    if not isinstance(data, dict):
        return ConfigResult(errors=["Configuration must be a mapping"], source=source)

    errors = []
    personas: Dict[str, PersonaConfig] = {}
    commands: Dict[str, CommandConfig] = {}

    raw_personas = data.get("personas") or {}
    if not isinstance(raw_personas, dict):
        errors.append("'personas' must be a mapping")
        raw_personas = {}
    for key, entry in raw_personas.items():
        if not isinstance(entry, dict):
            errors.append(f"Persona '{key}' must be a mapping")
            continue
        try:
            personas[str(key)] = PersonaConfig.from_dict(entry, key=str(key))
        except (TypeError, ValueError, AttributeError) as e:
            errors.append(f"Persona '{key}': {e}")

    raw_commands = data.get("commands") or {}
    if not isinstance(raw_commands, dict):
        errors.append("'commands' must be a mapping")
        raw_commands = {}
    for key, entry in raw_commands.items():
        if not isinstance(entry, dict):
            errors.append(f"Command '{key}' must be a mapping")
            continue
        try:
            commands[str(key)] = CommandConfig.from_dict(entry, key=str(key))
        except (TypeError, ValueError, AttributeError) as e:
            errors.append(f"Command '{key}': {e}")

    default_persona = data.get("default_persona")
    if not default_persona:
        default_persona = DEFAULT_PERSONA if DEFAULT_PERSONA in personas else next(iter(personas), "")

    config = SuperCopilotConfig(
        personas=personas,
        commands=commands,
        default_persona=str(default_persona),
    )
    errors.extend(validate_config(config))
    for warning in shadowed_triggers(config):
        logger.warning("%s: %s", source, warning)

    return ConfigResult(config=None if errors else config, errors=errors, source=source)


def load_config(path: Union[str, Path]) -> ConfigResult:
    """Load a configuration file (.yaml, .yml or .json)."""
    config_file = Path(path)
    source = str(config_file)

    if not config_file.exists():
        return ConfigResult(errors=[f"Config file not found: {source}"], source=source)

    try:
        text = config_file.read_text(encoding="utf-8")
        if config_file.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        return ConfigResult(errors=[f"Could not read {source}: {e}"], source=source)

    return config_from_dict(data, source=source)


def resolve_config(path: Optional[Union[str, Path]] = None) -> ConfigResult:
    """Config from a file when a path is given, else the built-in defaults."""
    if path:
        return load_config(path)
    config = default_config()
    return ConfigResult(config=config, errors=validate_config(config))
