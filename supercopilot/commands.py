"""
Slash command handling for SuperCopilot.

A command is a trigger token (usually slash-prefixed, e.g. /review) mapped
to a fixed prompt template. Detection is token based: a trigger matches
when it is the leading token of the input or any other whitespace-separated
token of it. Commands are checked in declaration order and the first one
that matches wins.

Template placeholders:
    {input}    user text with the trigger token removed
    {help}     the generated help text
    {command}  display name of the command
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from supercopilot.persona import as_str_list
from supercopilot.templating import render_template

if TYPE_CHECKING:
    from supercopilot.config import SuperCopilotConfig

logger = logging.getLogger(__name__)

HELP_HEADER = "# SuperCopilot Commands"


@dataclass
class CommandConfig:
    """Trigger tokens and prompt template for a command."""
    name: str
    triggers: List[str]
    description: str = ""
    template: str = "{input}"
    display_name: str = ""

    def __post_init__(self):
        self.triggers = [t.strip().lower() for t in self.triggers if t and t.strip()]
        if not self.display_name:
            self.display_name = self.name.replace("-", " ").replace("_", " ").title()

    @property
    def trigger(self) -> str:
        """Primary trigger, shown in listings."""
        return self.triggers[0] if self.triggers else ""

    @property
    def aliases(self) -> List[str]:
        return self.triggers[1:]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "triggers": list(self.triggers),
            "description": self.description,
            "template": self.template,
        }

    @classmethod
    def from_dict(cls, d: dict, key: str = "") -> "CommandConfig":
        triggers = as_str_list(d.get("triggers") or d.get("trigger"), "triggers")
        return cls(
            name=str(d.get("name") or key),
            triggers=triggers,
            description=str(d.get("description") or ""),
            template=str(d.get("template") or "{input}"),
            display_name=str(d.get("display_name") or ""),
        )


@dataclass
class CommandMatch:
    """Result of command detection."""
    command: str
    trigger: str
    remainder: str = ""
    prompt: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command": self.command,
            "trigger": self.trigger,
            "remainder": self.remainder,
            "prompt": self.prompt,
        }


def _token_pattern(trigger: str) -> "re.Pattern":
    return re.compile(r"(?<!\S)" + re.escape(trigger) + r"(?!\S)", re.IGNORECASE)


def strip_trigger(user_text: str, trigger: str) -> str:
    """Remove the first occurrence of a trigger token from the text."""
    if not trigger:
        return (user_text or "").strip()
    pattern = re.compile(_token_pattern(trigger).pattern + r"\s*", re.IGNORECASE)
    return pattern.sub("", user_text or "", count=1).strip()


_TASK_TEMPLATE = """## Command: {command}

{instruction}

{input}
"""


def _task(instruction: str) -> str:
    return _TASK_TEMPLATE.replace("{instruction}", instruction)


# Built-in commands. Order matters: first match wins.
DEFAULT_COMMANDS: Dict[str, CommandConfig] = {
    "help": CommandConfig(
        name="help",
        triggers=["/help", "/h", "/?"],
        description="Show available commands",
        template="{help}",
    ),
    "analyze": CommandConfig(
        name="analyze",
        triggers=["/analyze", "/a", "/analyse"],
        description="Understand code structure and detect patterns",
        template=_task("Analyze the structure, dependencies and patterns of the following. "
                       "Summarize before suggesting changes."),
    ),
    "implement": CommandConfig(
        name="implement",
        triggers=["/implement", "/build", "/code"],
        description="Write code for the described change",
        template=_task("Implement the following. Return working code first, "
                       "explanation only where it is not obvious."),
    ),
    "review": CommandConfig(
        name="review",
        triggers=["/review", "/check"],
        description="Critique code, find issues, suggest improvements",
        template=_task("Review the following for correctness, edge cases, security "
                       "and maintainability. Be specific."),
    ),
    "debug": CommandConfig(
        name="debug",
        triggers=["/debug", "/fix"],
        description="Investigate a problem and find the root cause",
        template=_task("Debug the following. State hypotheses, the evidence for each, "
                       "and the root cause before proposing a fix."),
    ),
    "test": CommandConfig(
        name="test",
        triggers=["/test"],
        description="Write or improve tests",
        template=_task("Write tests for the following. Cover edge cases and failure paths."),
    ),
    "document": CommandConfig(
        name="document",
        triggers=["/document", "/docs"],
        description="Write documentation",
        template=_task("Write clear documentation for the following."),
    ),
    "explain": CommandConfig(
        name="explain",
        triggers=["/explain", "/teach"],
        description="Explain code or a concept step by step",
        template=_task("Explain the following step by step, with a short example."),
    ),
}


class CommandsHandler:
    """Detects commands in user text and renders their prompts."""

    def __init__(self, config: "SuperCopilotConfig"):
        self.config = config

    @property
    def commands(self) -> Dict[str, CommandConfig]:
        return self.config.commands

    def detect_command(self, user_text: Optional[str]) -> Optional[CommandMatch]:
        """Find the first command whose trigger appears in the text.

        Returns None if the text holds no known trigger.
        """
        if not user_text or not user_text.strip():
            return None

        tokens = [t.lower() for t in user_text.split()]
        leading = tokens[0]

        for key, cmd in self.commands.items():
            for trigger in cmd.triggers:
                if trigger == leading or trigger in tokens:
                    return CommandMatch(
                        command=key,
                        trigger=trigger,
                        remainder=strip_trigger(user_text, trigger),
                    )
        return None

    def generate_command_prompt(
        self,
        name: str,
        user_text: Optional[str],
        trigger: Optional[str] = None,
    ) -> str:
        """Render a command's template for the given input.

        Args:
            name: Command key
            user_text: Raw user input
            trigger: The trigger detect_command() matched. When omitted, the
                first of the command's triggers present in the text is removed.

        Unknown command names return the user text unchanged.
        """
        user_text = user_text or ""
        cmd = self.commands.get(name)
        if cmd is None:
            logger.warning("Unknown command: %s", name)
            return user_text

        if trigger is None:
            trigger = next(
                (t for t in cmd.triggers if _token_pattern(t).search(user_text)),
                "",
            )
        remainder = strip_trigger(user_text, trigger)

        values = {
            "input": remainder,
            "command": cmd.display_name,
        }
        if "{help}" in cmd.template:
            values["help"] = self.generate_help_text()
        return render_template(cmd.template, values)

    def get_commands_list(self) -> List[Dict[str, Any]]:
        """All commands in declaration order, for UI listing."""
        return [
            {
                "key": key,
                "displayName": cmd.display_name,
                "trigger": cmd.trigger,
                "description": cmd.description,
                "aliases": cmd.aliases,
            }
            for key, cmd in self.commands.items()
        ]

    def generate_help_text(self) -> str:
        """Help block listing every command in declaration order."""
        lines = [HELP_HEADER, ""]
        for cmd in self.commands.values():
            aliases = f" (aliases: {', '.join(cmd.aliases)})" if cmd.aliases else ""
            lines.append(f"  `{cmd.trigger}` - {cmd.description}{aliases}")
        return "\n".join(lines)
