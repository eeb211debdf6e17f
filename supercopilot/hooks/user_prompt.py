#!/usr/bin/env python3
"""
SuperCopilot UserPromptSubmit Hook

Runs on every submitted prompt. Detects slash commands or picks a persona
for the prompt and hands the rendered prompt back to Claude Code as
additional context.

This hook never blocks: empty input, unchanged prompts and any error all
produce "{}".

Install in ~/.claude/settings.json:
{
  "hooks": {
    "UserPromptSubmit": [
      {
        "hooks": [
          {
            "type": "command",
            "command": "python3 -m supercopilot.hooks.user_prompt",
            "timeout": 2
          }
        ]
      }
    ]
  }
}
"""

import json
import logging
import sys
from typing import Optional

from supercopilot.main import SuperCopilotMain
from supercopilot.preprocess import preprocess_copilot_prompt

logger = logging.getLogger(__name__)

HOOK_EVENT_NAME = "UserPromptSubmit"


def build_output(prompt: str, transformed: str) -> dict:
    """Hook output for a transformed prompt, {} when nothing changed."""
    if not transformed or transformed == prompt:
        return {}
    return {
        "hookSpecificOutput": {
            "hookEventName": HOOK_EVENT_NAME,
            "additionalContext": transformed,
        }
    }


def handle(input_data: dict, dispatcher: Optional[SuperCopilotMain] = None) -> dict:
    """Process one hook payload."""
    prompt = input_data.get("prompt") or ""
    if not prompt.strip():
        return {}

    context = {"filePath": input_data.get("file_path") or input_data.get("filePath") or ""}
    transformed = preprocess_copilot_prompt(prompt, context, dispatcher=dispatcher)
    return build_output(prompt, transformed)


def main():
    """Main hook entry point."""
    try:
        raw_input = sys.stdin.read()
        if not raw_input.strip():
            print(json.dumps({}))
            sys.exit(0)

        input_data = json.loads(raw_input)
        if not isinstance(input_data, dict):
            print(json.dumps({}))
            sys.exit(0)

        print(json.dumps(handle(input_data)))
        sys.exit(0)

    except Exception as e:
        logger.error("Hook error: %s", e)
        # Never block on errors
        print(json.dumps({}))
        sys.exit(0)


if __name__ == "__main__":
    main()
