"""Claude Code hook entry points for SuperCopilot."""
