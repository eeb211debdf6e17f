"""
SuperCopilot dispatcher.

Holds the request context and routes input to command detection or
persona selection. handle_request() is the single entry point for the host
plugin: every outcome, including unexpected exceptions, comes back as a
JSON-serializable dict with a "success" flag.

Lifecycle:
    uninitialized -> initialized -> process*  (reset clears context only)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from supercopilot.commands import CommandsHandler
from supercopilot.config import SuperCopilotConfig, default_config, validate_config
from supercopilot.persona import PersonaSelector, extract_file_type
from supercopilot.settings import Settings

logger = logging.getLogger(__name__)


# Canonical action tags and their snake_case aliases
ACTIONS = ("processInput", "getPersonas", "getCommands", "generateHelp", "reset")

ACTION_ALIASES = {
    "process_input": "processInput",
    "get_personas": "getPersonas",
    "get_commands": "getCommands",
    "generate_help": "generateHelp",
}

_UNSET = object()


@dataclass
class Context:
    """State derived from the most recent request."""
    file_path: str = ""
    file_type: str = ""
    user_query: str = ""
    last_persona: Optional[str] = None
    last_command: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form, camelCase like the request keys."""
        return {
            "filePath": self.file_path,
            "fileType": self.file_type,
            "userQuery": self.user_query,
            "lastPersona": self.last_persona,
            "lastCommand": self.last_command,
        }


class SuperCopilotMain:
    """Routes user input to commands or personas and shapes responses."""

    def __init__(
        self,
        config: Optional[SuperCopilotConfig] = _UNSET,
        settings: Optional[Settings] = None,
    ):
        self.config = default_config() if config is _UNSET else config
        self.settings = settings or Settings()
        self.persona_selector: Optional[PersonaSelector] = None
        self.commands_handler: Optional[CommandsHandler] = None
        self.initialized = False
        self.current_context = Context()

    def _log_info(self, message: str, *args) -> None:
        # Info output is a development aid only
        if self.settings.is_debug:
            logger.info(message, *args)

    def initialize(self) -> bool:
        """Validate configuration and build the selector and handler.

        Returns:
            True on success. On failure the dispatcher stays uninitialized.
        """
        self._log_info("Initializing...")
        try:
            errors = validate_config(self.config)
            if errors:
                logger.error("Configuration is invalid: %s", "; ".join(errors))
                self.initialized = False
                return False

            self.persona_selector = PersonaSelector(self.config)
            self.commands_handler = CommandsHandler(self.config)
        except Exception as e:
            logger.error("Initialization failed: %s", e, exc_info=self.settings.show_stack)
            self.initialized = False
            return False

        self.initialized = True
        self._log_info("Initialized with %d personas, %d commands",
                       len(self.config.personas), len(self.config.commands))
        return True

    def update_context(self, file_path: Any = _UNSET, user_query: Any = _UNSET) -> None:
        """Update only the context fields that are given."""
        if file_path is not _UNSET:
            self.current_context.file_path = file_path or ""
            self.current_context.file_type = extract_file_type(file_path)
        if user_query is not _UNSET:
            self.current_context.user_query = user_query or ""

    def reset_context(self) -> None:
        """Replace the context with an empty one."""
        self.current_context = Context()

    def process_user_input(
        self,
        user_text: Optional[str] = "",
        file_path: Optional[str] = "",
        persona: Optional[str] = None,
    ) -> str:
        """Turn user input into a prompt.

        Commands take precedence over persona selection. If the dispatcher
        cannot initialize, the input text is returned unchanged.

        Args:
            user_text: Raw user input
            file_path: Active file, may be empty
            persona: Force this persona instead of scoring (ignored if unknown)

        Returns:
            The rendered prompt
        """
        safe_text = user_text or ""

        if not self.initialized and not self.initialize():
            return safe_text

        self.update_context(file_path=file_path or "", user_query=safe_text)

        match = self.commands_handler.detect_command(safe_text)
        if match:
            match.prompt = self.commands_handler.generate_command_prompt(
                match.command, safe_text, trigger=match.trigger,
            )
            self.current_context.last_command = match.command
            self.current_context.last_persona = None
            self._log_info("Command: %s", match.command)
            return match.prompt

        selected = None
        if persona:
            selected = self.persona_selector.force_persona(persona, file_path or "", safe_text)
            if selected is None:
                logger.warning("Unknown persona requested: %s", persona)
        if selected is None:
            selected = self.persona_selector.select_optimal_persona(file_path or "", safe_text)

        self.current_context.last_persona = selected.persona
        self.current_context.last_command = None
        self._log_info("Persona: %s (score %d)", selected.persona, selected.score)
        return self.persona_selector.generate_persona_prompt(selected)

    def _require_initialized(self) -> None:
        if not self.initialized and not self.initialize():
            raise RuntimeError("SuperCopilot is not initialized")

    def handle_request(self, request: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Single entry point for the host plugin.

        Args:
            request: {"action", "userText", "filePath", "options"}

        Returns:
            {"success": True, ...data} or {"success": False, "error": message}
        """
        try:
            request = request or {}
            action = request.get("action")
            action = ACTION_ALIASES.get(action, action)
            options = request.get("options") or {}

            if action == "processInput":
                prompt = self.process_user_input(
                    request.get("userText", ""),
                    request.get("filePath", ""),
                    persona=options.get("persona"),
                )
                return {
                    "success": True,
                    "prompt": prompt,
                    "context": self.current_context.to_dict(),
                }

            if action == "getPersonas":
                self._require_initialized()
                return {
                    "success": True,
                    "personas": self.persona_selector.get_personas_list(),
                }

            if action == "getCommands":
                self._require_initialized()
                return {
                    "success": True,
                    "commands": self.commands_handler.get_commands_list(),
                }

            if action == "generateHelp":
                self._require_initialized()
                return {
                    "success": True,
                    "helpText": self.commands_handler.generate_help_text(),
                }

            if action == "reset":
                self.reset_context()
                return {"success": True, "message": "Context reset"}

            return {"success": False, "error": f"Unknown action: {action}"}

        except Exception as e:
            logger.error("Request failed: %s", e, exc_info=self.settings.show_stack)
            return {"success": False, "error": str(e)}
