"""
Preprocessing hook for the host plugin runtime.

Hosts that manage their own lifecycle should build a SuperCopilotMain and
pass it in. Hosts that only want a function get a lazily created shared
dispatcher, configured from the environment on first use.

On any failure the original text is returned: an unprocessed prompt is
always better than a crashed assistant.
"""

import logging
from typing import Any, Dict, Optional

from supercopilot.config import resolve_config
from supercopilot.main import SuperCopilotMain
from supercopilot.settings import Settings, configure_logging

logger = logging.getLogger(__name__)

_SHARED_INSTANCE: Optional[SuperCopilotMain] = None


def create_instance(settings: Optional[Settings] = None) -> SuperCopilotMain:
    """Build and initialize a dispatcher from settings.

    A config file that fails to load yields an uninitialized dispatcher,
    which passes input through unchanged.
    """
    settings = settings or Settings.from_env()
    result = resolve_config(settings.config_path)
    if not result.ok:
        logger.error("Could not load config from %s: %s", result.source, "; ".join(result.errors))

    instance = SuperCopilotMain(config=result.config, settings=settings)
    instance.initialize()
    return instance


def get_shared_instance() -> SuperCopilotMain:
    """Process-wide dispatcher, created on first use."""
    global _SHARED_INSTANCE
    if _SHARED_INSTANCE is None:
        settings = Settings.from_env()
        configure_logging(settings)
        _SHARED_INSTANCE = create_instance(settings)
    return _SHARED_INSTANCE


def reset_shared_instance() -> None:
    """Drop the shared dispatcher so the next call rebuilds it."""
    global _SHARED_INSTANCE
    _SHARED_INSTANCE = None


def _context_file_path(context: Any) -> str:
    if not context:
        return ""
    if isinstance(context, dict):
        return context.get("filePath") or context.get("file_path") or ""
    return getattr(context, "file_path", "") or ""


def preprocess_copilot_prompt(
    user_text: str,
    context: Optional[Dict[str, Any]] = None,
    dispatcher: Optional[SuperCopilotMain] = None,
) -> str:
    """Transform a prompt before it reaches the assistant.

    Args:
        user_text: Raw prompt
        context: Host context, may hold "filePath"
        dispatcher: Explicit dispatcher; the shared one is used when omitted

    Returns:
        The transformed prompt, or user_text unchanged on any failure
    """
    settings = getattr(dispatcher, "settings", None)
    try:
        instance = dispatcher if dispatcher is not None else get_shared_instance()
        settings = instance.settings

        if not instance.initialized and not instance.initialize():
            if settings.is_production:
                logger.error("Initialization failed")
            else:
                logger.error("Initialization failed, passing prompt through unchanged")
            return user_text

        return instance.process_user_input(user_text, _context_file_path(context))

    except Exception as e:
        settings = settings or Settings.from_env()
        if settings.is_production:
            logger.error("An error occurred during preprocessing")
        else:
            logger.error("Preprocessing error: %s", e, exc_info=True)
        return user_text
