"""
Tests for persona selection.

Covers:
- File type extraction
- Extension and keyword scoring
- Default fallback and declaration-order tie-break
- Prompt rendering and listing
"""

import pytest

from supercopilot.config import SuperCopilotConfig
from supercopilot.persona import (
    DEFAULT_PERSONAS,
    EXTENSION_WEIGHT,
    PersonaConfig,
    PersonaMatch,
    PersonaSelector,
    extract_file_type,
)


class TestExtractFileType:
    """Test extract_file_type()."""

    @pytest.mark.parametrize("path,expected", [
        ("app.ts", "ts"),
        ("src/components/Button.tsx", "tsx"),
        ("archive.tar.gz", "gz"),
        ("C:\\work\\main.py", "py"),
        ("App.TS", "TS"),
    ])
    def test_trailing_extension(self, path, expected):
        assert extract_file_type(path) == expected

    @pytest.mark.parametrize("path", ["", None, "Makefile", "src/dir.d/Makefile"])
    def test_no_extension(self, path):
        assert extract_file_type(path) == ""


class TestPersonaConfig:
    """Test PersonaConfig normalization and from_dict."""

    def test_extensions_normalized(self):
        p = PersonaConfig(name="x", extensions=[".PY", "ts", "."], keywords=["API"])
        assert p.extensions == ["py", "ts"]
        assert p.keywords == ["api"]

    def test_from_dict_match_block(self):
        p = PersonaConfig.from_dict(
            {"description": "d", "match": {"extensions": ["go"], "keywords": ["grpc"]}},
            key="go",
        )
        assert p.name == "go"
        assert p.identity == "d"
        assert p.extensions == ["go"]
        assert p.keywords == ["grpc"]

    def test_round_trip_keeps_template(self):
        p = PersonaConfig(name="x", template="T {query}")
        assert PersonaConfig.from_dict(p.to_dict()).template == "T {query}"


class TestSelection:
    """Test select_optimal_persona() against the built-in table."""

    def test_extension_selects_persona(self, config):
        selector = PersonaSelector(config)
        match = selector.select_optimal_persona("app.ts", "explain this function")

        assert match.persona == "backend"
        assert match.matched_extension is True
        assert match.score >= EXTENSION_WEIGHT
        assert "BACKEND" in match.prompt
        assert "explain this function" in match.prompt
        assert "**File type**: ts" in match.prompt

    def test_extension_match_is_case_insensitive(self, config):
        match = PersonaSelector(config).select_optimal_persona("App.TS", "")
        assert match.persona == "backend"

    def test_keywords_select_persona(self, config):
        match = PersonaSelector(config).select_optimal_persona("", "why does this crash with an error")
        assert match.persona == "analyzer"
        assert "crash" in match.matched_keywords
        assert "error" in match.matched_keywords

    def test_empty_input_returns_default(self, config):
        selector = PersonaSelector(config)
        match = selector.select_optimal_persona("", "")
        assert match.persona == "dev"
        assert match.score == 0
        assert match.is_default
        assert selector.select_optimal_persona(None, None).persona == "dev"

    def test_unmatched_input_returns_default(self, config):
        match = PersonaSelector(config).select_optimal_persona("notes", "hello there")
        assert match.persona == config.default_persona

    def test_default_is_deterministic(self, config):
        selector = PersonaSelector(config)
        results = {selector.select_optimal_persona("", "").prompt for _ in range(5)}
        assert len(results) == 1


class TestScoring:
    """Test scoring rules with a small configuration."""

    def test_whole_word_bonus(self, small_config):
        selector = PersonaSelector(small_config)
        persona = small_config.personas["web"]

        whole, _, _ = selector.score_persona(persona, "", "a page here")
        partial, _, _ = selector.score_persona(persona, "", "paged results")

        assert whole == 2
        assert partial == 1

    def test_extension_outweighs_single_keyword(self, small_config):
        match = PersonaSelector(small_config).select_optimal_persona("schema.sql", "add a button")
        assert match.persona == "data"

    def test_keywords_can_outweigh_extension(self, small_config):
        match = PersonaSelector(small_config).select_optimal_persona(
            "index.html", "query the table, then query the table again"
        )
        # web: extension (3); data: query + table, each whole word (4)
        assert match.persona == "data"

    def test_tie_goes_to_first_declared(self):
        config = SuperCopilotConfig(
            personas={
                "first": PersonaConfig(name="first", keywords=["alpha"], template="FIRST"),
                "second": PersonaConfig(name="second", keywords=["alpha"], template="SECOND"),
            },
            commands={},
            default_persona="first",
        )
        selector = PersonaSelector(config)
        for _ in range(3):
            assert selector.select_optimal_persona("", "alpha").persona == "first"

    def test_tie_follows_declaration_order_not_name(self):
        config = SuperCopilotConfig(
            personas={
                "zeta": PersonaConfig(name="zeta", keywords=["alpha"]),
                "able": PersonaConfig(name="able", keywords=["alpha"]),
            },
            commands={},
            default_persona="able",
        )
        assert PersonaSelector(config).select_optimal_persona("", "alpha").persona == "zeta"

    def test_missing_default_falls_back_to_first(self, small_config):
        small_config.default_persona = "nope"
        assert PersonaSelector(small_config).select_optimal_persona("", "").persona == "web"


class TestRendering:
    """Test prompt rendering helpers."""

    def test_template_values(self, small_config):
        match = PersonaSelector(small_config).select_optimal_persona("index.html", "fix the page")
        assert match.prompt == "WEB[html] fix the page"

    def test_generate_persona_prompt_uses_match(self, small_config):
        selector = PersonaSelector(small_config)
        match = selector.select_optimal_persona("a.sql", "q")
        assert selector.generate_persona_prompt(match) == match.prompt

    def test_generate_persona_prompt_renders_bare_match(self, small_config):
        selector = PersonaSelector(small_config)
        assert selector.generate_persona_prompt(PersonaMatch(persona="general")) == "GENERAL "

    def test_force_persona(self, small_config):
        selector = PersonaSelector(small_config)
        match = selector.force_persona("data", "x.ts", "hello")
        assert match.persona == "data"
        assert match.prompt == "DATA[ts] hello"
        assert selector.force_persona("missing") is None

    def test_personas_list_in_declaration_order(self, config):
        listing = PersonaSelector(config).get_personas_list()
        assert [p["key"] for p in listing] == list(DEFAULT_PERSONAS)
        assert "ts" in listing[1]["extensions"]
