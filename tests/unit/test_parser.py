"""Tests for the stylesheet parser."""

import pytest

from css_inspector.errors import CSSSyntaxError, ErrorCategory
from css_inspector.models import Position
from css_inspector.parser import parse_stylesheet


class TestRuleExtraction:
    """Tests for rules and declarations."""

    def test_single_rule(self):
        """Test a one-line rule."""
        model = parse_stylesheet(".a { color: red; }")

        assert len(model.rules) == 1
        rule = model.rules[0]
        assert rule.selector == ".a"
        assert rule.position == Position(1, 1)
        assert len(rule.declarations) == 1
        assert rule.declarations[0].property == "color"
        assert rule.declarations[0].value == "red"
        assert rule.declarations[0].position == Position(1, 6)

    def test_positions_are_one_based_across_lines(self):
        """Test that declaration positions point at the property start."""
        model = parse_stylesheet(".a {\n  color: red;\n}\n\n.b {\n  margin: 0;\n}\n")

        first, second = model.rules
        assert first.declarations[0].position == Position(2, 3)
        assert second.position == Position(5, 1)
        assert second.declarations[0].position == Position(6, 3)

    def test_declaration_order_preserved(self):
        """Test that repeated properties keep source order; the last wins."""
        model = parse_stylesheet(".a { color: red; margin: 0; color: blue; }")
        rule = model.rules[0]

        assert [d.property for d in rule.declarations] == ["color", "margin", "color"]
        assert rule.get("color") == "blue"
        assert rule.declaration_map()["color"] == "blue"

    def test_last_declaration_without_semicolon(self):
        """Test a final declaration terminated by the closing brace."""
        model = parse_stylesheet(".a { color: red; margin: 0 }")

        assert model.rules[0].get("margin") == "0"

    def test_important_is_stripped(self):
        """Test that !important sets the flag and leaves the bare value."""
        model = parse_stylesheet(".a { color: red !important; margin: 0 ! IMPORTANT; }")
        color, margin = model.rules[0].declarations

        assert color.value == "red"
        assert color.important is True
        assert margin.value == "0"
        assert margin.important is True

    def test_property_names_lowercased(self):
        """Test that property names are normalised except custom properties."""
        model = parse_stylesheet(".a { COLOR: Red; --Brand-Color: #fff; }")
        color, custom = model.rules[0].declarations

        assert color.property == "color"
        assert color.value == "Red"
        assert custom.property == "--Brand-Color"

    def test_comments_are_dropped(self):
        """Test that comments never end up in selectors or values."""
        model = parse_stylesheet("/* header */\n.a { /* note */ color: red; }")

        assert model.rules[0].selector == ".a"
        assert model.rules[0].declarations[0].property == "color"

    def test_comment_inside_selector(self):
        """Test that a comment between compounds leaves a single space."""
        model = parse_stylesheet(".a /* x */ .b { border: 1px /* thin */ solid; }")

        assert model.rules[0].selector == ".a .b"
        assert model.rules[0].get("border") == "1px solid"

    def test_grid_line_names_kept(self):
        """Test that bracketed grid line names survive in values."""
        model = parse_stylesheet(".item { grid-column: [start] / [end]; }")

        assert model.rules[0].get("grid-column") == "[start] / [end]"

    def test_counts(self):
        """Test model size helpers."""
        model = parse_stylesheet(".a { color: red; }\n.b { margin: 0; padding: 0; }")

        assert model.selectors_count == 2
        assert model.properties_count == 3
        assert model.size_bytes == len(model.source.encode("utf-8"))

    def test_filename_recorded(self):
        """Test that the filename is kept on the model."""
        model = parse_stylesheet(".a { color: red; }", filename="app.css")

        assert model.filename == "app.css"


class TestAtRules:
    """Tests for at-rule handling."""

    def test_media_rules_flattened(self):
        """Test that rules inside @media join the flat sequence in order."""
        source = (
            ".a { color: red; }\n"
            "@media (max-width: 600px) {\n"
            "  .b { color: blue; }\n"
            "}\n"
            ".c { color: green; }\n"
        )
        model = parse_stylesheet(source)

        assert [r.selector for r in model.rules] == [".a", ".b", ".c"]
        assert model.rules[1].context == ("@media (max-width: 600px)",)
        assert model.rules[0].context == ()

    def test_statement_at_rules_skipped(self):
        """Test that @import and @charset produce no rules."""
        source = '@charset "utf-8";\n@import url("base.css");\n.a { color: red; }'
        model = parse_stylesheet(source)

        assert [r.selector for r in model.rules] == [".a"]

    def test_descriptor_blocks_skipped(self):
        """Test that @font-face descriptors are not rules."""
        source = '@font-face { font-family: "X"; src: url(x.woff2); }\n.a { color: red; }'
        model = parse_stylesheet(source)

        assert [r.selector for r in model.rules] == [".a"]

    def test_nested_rules(self):
        """Test nested style rules record their parent selector."""
        model = parse_stylesheet(".card { color: red; .title { color: blue; } }")

        assert [r.selector for r in model.rules] == [".card", ".title"]
        assert model.rules[1].context == (".card",)
        assert len(model.rules[0].declarations) == 1


class TestSyntaxErrors:
    """Tests for CSSSyntaxError reporting."""

    def test_unclosed_block(self):
        """Test that an unclosed block is reported at its opening brace."""
        with pytest.raises(CSSSyntaxError) as exc_info:
            parse_stylesheet(".a { color: red;")

        error = exc_info.value
        assert "Unclosed block" in error.message
        assert error.line == 1
        assert error.column == 4
        assert error.category == ErrorCategory.SYNTAX

    def test_missing_colon(self):
        """Test a declaration without a colon."""
        with pytest.raises(CSSSyntaxError, match="Missing"):
            parse_stylesheet(".a {\n  color red;\n}")

    def test_unexpected_closing_brace(self):
        """Test a stray closing brace."""
        with pytest.raises(CSSSyntaxError, match="Unexpected"):
            parse_stylesheet("}")

    def test_missing_selector(self):
        """Test a block without a selector."""
        with pytest.raises(CSSSyntaxError, match="Missing selector"):
            parse_stylesheet("{ color: red; }")

    def test_declaration_outside_rule(self):
        """Test a declaration at the top level."""
        with pytest.raises(CSSSyntaxError, match="outside of a rule"):
            parse_stylesheet("color: red;")

    def test_unclosed_string(self):
        """Test an unterminated string."""
        with pytest.raises(CSSSyntaxError):
            parse_stylesheet('.a { content: "abc; }')

    def test_unclosed_comment(self):
        """Test an unterminated comment."""
        with pytest.raises(CSSSyntaxError):
            parse_stylesheet(".a { color: red; }\n/* trailing")

    def test_error_string_includes_position(self):
        """Test the error message format."""
        with pytest.raises(CSSSyntaxError) as exc_info:
            parse_stylesheet(".a {\n  color red;\n}")

        assert "(line 2, column 3)" in str(exc_info.value)
