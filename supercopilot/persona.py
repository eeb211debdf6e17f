"""
Persona selection for SuperCopilot.

A persona is a named behavior profile: match rules (file extensions and
keywords) plus a prompt template. For each request the selector scores
every persona against the active file's extension and the user's text and
renders the winner's template.

Scoring:
- extension match: EXTENSION_WEIGHT points
- each keyword found in the text (case-insensitive substring): 1 point
- keyword also present as a whole word: 1 bonus point

Highest score wins. Ties keep declaration order (first declared wins).
Nothing scoring above zero falls back to the configured default persona.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from supercopilot.templating import render_template

if TYPE_CHECKING:
    from supercopilot.config import SuperCopilotConfig

logger = logging.getLogger(__name__)

EXTENSION_WEIGHT = 3
KEYWORD_WEIGHT = 1
WHOLE_WORD_BONUS = 1

FILE_TYPE_RE = re.compile(r"\.([^.]+)$")

DEFAULT_PERSONA_TEMPLATE = """## Current Persona: {persona_title}

**Identity**: {identity}

**Focus**: {focus}

**Style**: {style}

**File type**: {file_type}

---

{query}
"""


def extract_file_type(file_path: Optional[str]) -> str:
    """Extension of a path: the text after its final dot.

    "src/app.ts" -> "ts", "Makefile" -> "", "" -> "".
    """
    if not file_path:
        return ""
    name = re.split(r"[\\/]", file_path)[-1]
    match = FILE_TYPE_RE.search(name)
    return match.group(1) if match else ""


def _normalize_extension(ext: str) -> str:
    return ext.strip().lstrip(".").lower()


def as_str_list(value: Any, field_name: str) -> List[str]:
    """Coerce a config value to a list of strings.

    A scalar becomes a one-item list, so `keywords: api` means ["api"].
    Numbers are stringified. Nested mappings or lists raise ValueError.
    """
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else [value]

    result = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, (dict, list, tuple)):
            raise ValueError(f"'{field_name}' entries must be strings, got {type(item).__name__}")
        result.append(str(item))
    return result


def _str_field(value: Any, default: str = "") -> str:
    return default if value is None else str(value)


@dataclass
class PersonaConfig:
    """Match rules and prompt template for a persona."""
    name: str
    identity: str = ""
    focus: str = ""
    style: str = ""
    extensions: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    template: str = DEFAULT_PERSONA_TEMPLATE

    def __post_init__(self):
        self.extensions = [_normalize_extension(e) for e in self.extensions if e and e.strip(".")]
        self.keywords = [k.lower() for k in self.keywords if k]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "identity": self.identity,
            "focus": self.focus,
            "style": self.style,
            "extensions": list(self.extensions),
            "keywords": list(self.keywords),
            "template": self.template,
        }

    @classmethod
    def from_dict(cls, d: dict, key: str = "") -> "PersonaConfig":
        match = d.get("match") or {}
        if not isinstance(match, dict):
            raise ValueError("'match' must be a mapping")
        return cls(
            name=_str_field(d.get("name") or key),
            identity=_str_field(d.get("identity", d.get("description"))),
            focus=_str_field(d.get("focus")),
            style=_str_field(d.get("style")),
            extensions=as_str_list(d.get("extensions", match.get("extensions")), "extensions"),
            keywords=as_str_list(d.get("keywords", match.get("keywords")), "keywords"),
            template=str(d.get("template") or DEFAULT_PERSONA_TEMPLATE),
        )


@dataclass
class PersonaMatch:
    """Result of persona selection."""
    persona: str
    score: int = 0
    matched_extension: bool = False
    matched_keywords: List[str] = field(default_factory=list)
    prompt: str = ""

    @property
    def is_default(self) -> bool:
        """True when no persona scored (default or forced selection)."""
        return self.score == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "persona": self.persona,
            "score": self.score,
            "matched_extension": self.matched_extension,
            "matched_keywords": self.matched_keywords,
            "prompt": self.prompt,
        }


# Built-in personas. Order matters: it is the tie-break order.
DEFAULT_PERSONAS: Dict[str, PersonaConfig] = {
    "frontend": PersonaConfig(
        name="frontend",
        identity="UI engineer focused on components, layout and user experience",
        focus="components, state, styling, accessibility, responsiveness",
        style="show markup and styles side by side, mention browser caveats",
        extensions=["jsx", "tsx", "vue", "svelte", "css", "scss", "sass", "less", "html"],
        keywords=["component", "layout", "responsive", "accessibility", "styling", "css", "react", "button"],
    ),
    "backend": PersonaConfig(
        name="backend",
        identity="Server-side engineer focused on reliable services and data",
        focus="APIs, data models, error handling, correctness, clarity",
        style="terse, code-heavy, working examples first",
        extensions=["py", "js", "ts", "go", "rs", "java", "rb", "php", "c", "cpp", "h", "cs", "kt"],
        keywords=["api", "endpoint", "database", "server", "query", "handler", "service"],
    ),
    "architect": PersonaConfig(
        name="architect",
        identity="Systems architect focused on sustainable design",
        focus="structure, patterns, scalability, tradeoffs, boundaries, dependencies",
        style="high-level first, present options with tradeoffs, think in systems",
        keywords=["design", "architecture", "structure", "scale", "organize", "tradeoff", "boundary"],
    ),
    "security": PersonaConfig(
        name="security",
        identity="Security reviewer who assumes every input is hostile",
        focus="authentication, authorization, injection, secrets, data exposure",
        style="list concrete threats, rank by severity, give the fix",
        keywords=["security", "vulnerab", "auth", "password", "token", "encrypt", "permission", "injection"],
    ),
    "analyzer": PersonaConfig(
        name="analyzer",
        identity="Root cause detective who traces problems to their source",
        focus="debugging, investigation, hypothesis testing, evidence gathering",
        style="systematic, hypothesis-driven, shows reasoning chain",
        keywords=["debug", "bug", "trace", "investigate", "broken", "error", "fail", "crash"],
    ),
    "qa": PersonaConfig(
        name="qa",
        identity="Test engineer who thinks in edge cases",
        focus="test coverage, edge cases, fixtures, regressions",
        style="write the failing test first, then the fix",
        keywords=["test", "coverage", "assert", "mock", "fixture", "regression"],
    ),
    "scribe": PersonaConfig(
        name="scribe",
        identity="Technical writer producing clear documentation",
        focus="readmes, docstrings, guides, changelogs",
        style="plain language, short sections, examples over prose",
        extensions=["md", "rst", "txt", "adoc"],
        keywords=["document", "docs", "readme", "docstring", "changelog"],
    ),
    "mentor": PersonaConfig(
        name="mentor",
        identity="Patient teacher building understanding",
        focus="explanation, connecting concepts, building mental models",
        style="patient, examples-heavy, builds on what the user knows",
        keywords=["explain", "learn", "teach", "understand", "what is", "show me"],
    ),
    "dev": PersonaConfig(
        name="dev",
        identity="Pragmatic developer focused on shipping working code",
        focus="working code, practical solutions, correctness, simplicity",
        style="terse, code-heavy, minimal explanation unless asked",
        keywords=["implement", "build", "create", "write", "ship"],
    ),
}

DEFAULT_PERSONA = "dev"


class PersonaSelector:
    """Scores personas against (file extension, query text)."""

    def __init__(self, config: "SuperCopilotConfig"):
        self.config = config

    @property
    def personas(self) -> Dict[str, PersonaConfig]:
        return self.config.personas

    def default_key(self) -> str:
        """Configured default persona, or the first declared one."""
        if self.config.default_persona in self.personas:
            return self.config.default_persona
        return next(iter(self.personas))

    def score_persona(
        self,
        persona: PersonaConfig,
        file_type: str,
        text_lower: str,
    ) -> Tuple[int, bool, List[str]]:
        """Score one persona. Returns (score, extension matched, keywords hit)."""
        score = 0
        ext_hit = bool(file_type) and file_type.lower() in persona.extensions
        if ext_hit:
            score += EXTENSION_WEIGHT

        hits = []
        for keyword in persona.keywords:
            if keyword in text_lower:
                hits.append(keyword)
                score += KEYWORD_WEIGHT
                if re.search(r"(?<!\w)" + re.escape(keyword) + r"(?!\w)", text_lower):
                    score += WHOLE_WORD_BONUS

        return score, ext_hit, hits

    def select_optimal_persona(
        self,
        file_path: Optional[str] = "",
        user_text: Optional[str] = "",
    ) -> PersonaMatch:
        """Pick the best persona for a request and render its prompt.

        Args:
            file_path: Active file, may be empty
            user_text: The user's query, may be empty

        Returns:
            PersonaMatch, never None
        """
        file_path = file_path or ""
        user_text = user_text or ""
        file_type = extract_file_type(file_path)
        text_lower = user_text.lower()

        best: Optional[PersonaMatch] = None
        for key, persona in self.personas.items():
            score, ext_hit, hits = self.score_persona(persona, file_type, text_lower)
            # Strictly greater: earlier declaration wins ties
            if score > 0 and (best is None or score > best.score):
                best = PersonaMatch(
                    persona=key,
                    score=score,
                    matched_extension=ext_hit,
                    matched_keywords=hits,
                )

        if best is None:
            best = PersonaMatch(persona=self.default_key())

        logger.debug(
            "persona=%s score=%d file_type=%r keywords=%s",
            best.persona, best.score, file_type, best.matched_keywords,
        )
        best.prompt = self.render(best.persona, file_path, user_text)
        return best

    def force_persona(self, key: str, file_path: str = "", user_text: str = "") -> Optional[PersonaMatch]:
        """Build a match for an explicitly requested persona, None if unknown."""
        if key not in self.personas:
            return None
        match = PersonaMatch(persona=key)
        match.prompt = self.render(key, file_path or "", user_text or "")
        return match

    def render(self, key: str, file_path: str, user_text: str) -> str:
        """Render a persona's template with request values."""
        persona = self.personas[key]
        values = {
            "persona": key,
            "persona_title": persona.name.upper(),
            "identity": persona.identity,
            "focus": persona.focus,
            "style": persona.style,
            "file_path": file_path,
            "file_type": extract_file_type(file_path),
            "query": user_text,
        }
        return render_template(persona.template, values)

    def generate_persona_prompt(self, match: PersonaMatch) -> str:
        """Prompt for a selection result."""
        if match.prompt:
            return match.prompt
        return self.render(match.persona, "", "")

    def get_personas_list(self) -> List[Dict[str, Any]]:
        """All personas in declaration order, for UI listing."""
        return [
            {
                "key": key,
                "name": p.name,
                "description": p.identity,
                "extensions": list(p.extensions),
                "keywords": list(p.keywords),
            }
            for key, p in self.personas.items()
        ]
