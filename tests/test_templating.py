"""Tests for prompt template rendering."""

from supercopilot.templating import render_template


def test_known_placeholders_substituted():
    assert render_template("{a}-{b}", {"a": 1, "b": "x"}) == "1-x"


def test_unknown_placeholders_left_alone():
    template = "def f(): return {'key': 1} {query}"
    assert render_template(template, {"query": "q"}) == "def f(): return {'key': 1} q"
    assert render_template("{missing}", {}) == "{missing}"


def test_none_and_empty():
    assert render_template("[{x}]", {"x": None}) == "[]"
    assert render_template("", {"x": 1}) == ""
    assert render_template(None, {}) == ""
