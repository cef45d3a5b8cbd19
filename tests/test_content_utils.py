"""Tests for generated-code sanitizing and project naming."""

from sitecraft.services.content_utils import (
    PROJECT_NAME_LENGTH,
    derive_project_name,
    sanitize_generated_code,
)


class TestSanitizeGeneratedCode:

    def test_strips_language_tagged_fence(self):
        raw = "```html\n<html><body>Hi</body></html>\n```"
        assert sanitize_generated_code(raw) == "<html><body>Hi</body></html>"

    def test_strips_bare_fence(self):
        assert sanitize_generated_code("```\n<p>x</p>\n```") == "<p>x</p>"

    def test_fence_tag_is_case_insensitive(self):
        assert sanitize_generated_code("```HTML\n<p>x</p>```") == "<p>x</p>"

    def test_removes_fences_in_the_middle(self):
        raw = "<p>a</p>\n```css\nbody {}\n```\n<p>b</p>"
        cleaned = sanitize_generated_code(raw)
        assert "```" not in cleaned
        assert "body {}" in cleaned
        assert cleaned.startswith("<p>a</p>")
        assert cleaned.endswith("<p>b</p>")

    def test_plain_text_is_only_trimmed(self):
        assert sanitize_generated_code("  \n<div>ok</div>\n\n") == "<div>ok</div>"

    def test_fence_only_output_is_empty(self):
        assert sanitize_generated_code("```html\n```") == ""
        assert sanitize_generated_code("   ") == ""

    def test_none_and_empty(self):
        assert sanitize_generated_code("") == ""
        assert sanitize_generated_code(None) == ""

    def test_idempotent(self):
        samples = [
            "```html\n<h1>x</h1>\n```",
            "text ``` more ```js\ncode",
            "  leading and trailing  ",
            "````html\n<p>four backticks</p>\n````",
            "<p>no fences</p>",
        ]
        for raw in samples:
            once = sanitize_generated_code(raw)
            assert sanitize_generated_code(once) == once


class TestDeriveProjectName:

    def test_short_prompt_used_as_is(self):
        assert derive_project_name("Bakery landing page") == "Bakery landing page"

    def test_uses_first_line_only(self):
        assert derive_project_name("Portfolio\nwith a dark theme") == "Portfolio"

    def test_collapses_whitespace(self):
        assert derive_project_name("  A   site   for  cats ") == "A site for cats"

    def test_long_prompt_truncated(self):
        name = derive_project_name("word " * 40)
        assert name.endswith("...")
        assert len(name) <= PROJECT_NAME_LENGTH + 3
