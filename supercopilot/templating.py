"""
Prompt template rendering.

Templates use {name} placeholders. Only names present in the values mapping
are substituted; anything else (including literal braces in code samples)
is left as written, so a template can never fail to render.
"""

import re
from typing import Any, Dict

PLACEHOLDER_RE = re.compile(r"\{([a-z_][a-z0-9_]*)\}")


def render_template(template: str, values: Dict[str, Any]) -> str:
    """Substitute known {placeholders} in a template."""
    if not template:
        return ""

    def _sub(match: "re.Match") -> str:
        key = match.group(1)
        if key in values:
            value = values[key]
            return "" if value is None else str(value)
        return match.group(0)

    return PLACEHOLDER_RE.sub(_sub, template)

