"""Tests for the fix engine and its strategies."""

import pytest

from css_inspector.analyzer import analyze
from css_inspector.fixes import FixEngine, apply_fixes, find_rule_block, insert_declaration
from css_inspector.fixes import strategies
from css_inspector.models import Issue, IssueFix, IssueKind, IssueLocation, Severity


def fix_source(source, **kwargs):
    return apply_fixes(source, analyze(source).issues, **kwargs)


def make_issue(kind, selector=None, patch="", confidence=90, check=""):
    return Issue(
        id=f"{kind.value}-test",
        kind=kind,
        severity=Severity.WARNING,
        message="test issue",
        location=IssueLocation(selector=selector),
        check=check,
        fix=IssueFix(description="test fix", patch=patch, confidence=confidence),
    )


class TestFlexboxFixes:
    """Tests for the flexbox strategy."""

    def test_multiline_rule(self):
        """Test that min-height is added with the rule's indentation."""
        source = ".f {\n  display: flex;\n  align-items: center;\n}\n"
        result = fix_source(source)

        assert result.fixed_source == (
            ".f {\n  display: flex;\n  align-items: center;\n  min-height: 100vh;\n}\n"
        )
        assert result.fixed_count == 1
        assert result.applied_fixes[0].kind == "flexbox-alignment-failed"
        assert result.applied_fixes[0].before == ".f {\n  display: flex;\n  align-items: center;\n}"

        reanalysed = analyze(result.fixed_source)
        assert all(i.check != "flexbox.missing-height" for i in reanalysed.issues)

    def test_single_line_rule(self):
        """Test insertion into a one-line rule."""
        result = fix_source(".f { display: flex; align-items: center; }")

        assert result.fixed_source == (
            ".f { display: flex; align-items: center; min-height: 100vh; }"
        )

    def test_missing_trailing_semicolon(self):
        """Test that a semicolon is added before the new declaration."""
        result = fix_source(".f { display: flex; align-items: center }")

        assert result.fixed_source == (
            ".f { display: flex; align-items: center; min-height: 100vh; }"
        )

    def test_align_content_adds_wrap(self):
        """Test the flex-wrap fix for single-line containers."""
        result = fix_source(".f { display: flex; align-content: center; }")

        assert "flex-wrap: wrap;" in result.fixed_source


class TestGridFixes:
    """Tests for the grid strategy."""

    def test_template_and_gap(self):
        """Test adding a template and renaming grid-gap in the same rule."""
        result = fix_source(".g { display: grid; grid-gap: 10px; }")

        assert result.fixed_source == (
            ".g { display: grid; gap: 10px; "
            "grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); }"
        )
        assert result.fixed_count == 2
        assert result.skipped_count == 0

    def test_gap_rename_is_rule_scoped(self):
        """Test that only the flagged rule is rewritten."""
        source = (
            ".g { display: grid; grid-template-columns: 1fr; grid-row-gap: 4px; }\n"
            ".other { grid-row-gap: 4px; }"
        )
        result = fix_source(source)

        assert result.fixed_source == (
            ".g { display: grid; grid-template-columns: 1fr; row-gap: 4px; }\n"
            ".other { grid-row-gap: 4px; }"
        )


class TestPositioningFixes:
    """Tests for the positioning strategy."""

    def test_second_fix_sees_first(self):
        """Test that a later fix is skipped once position is present."""
        result = fix_source(".p { top: 0; z-index: 1; }")

        assert result.fixed_source == ".p { top: 0; z-index: 1; position: relative; }"
        assert result.fixed_count == 1
        assert result.skipped_count == 1
        assert result.skipped_fixes[0].reason == "Rule already declares a position"
        assert result.total_issues == 2


class TestAccessibilityFixes:
    """Tests for the accessibility strategy."""

    def test_focus_outline_restored(self):
        """Test that outline: none is replaced by a visible indicator."""
        result = fix_source("a:focus { outline: none; }")

        assert result.fixed_source == (
            "a:focus { outline: 2px solid #005fcc; outline-offset: 2px; }"
        )

    def test_comment_patch_is_skipped(self):
        """Test that suggestion-only patches are not applied."""
        result = fix_source(".a { font-size: 10px; }")

        assert result.fixed_count == 0
        assert result.skipped_fixes[0].reason == "No actionable fix code available"
        assert not result.changed


class TestGenericFixes:
    """Tests for the generic append strategy."""

    def test_complete_rule_is_appended(self):
        """Test that the multiple-ids rewrite is appended as a new rule."""
        source = "#a #b { color: red; }"
        result = fix_source(source)

        assert result.fixed_source == (
            source + "\n\n/* Auto-generated fix */\n#a .b {\n  color: red;\n}"
        )
        assert result.applied_fixes[0].confidence == 85

    def test_partial_patch_rejected(self):
        """Test that a bare declaration is not appended."""
        issue = make_issue(IssueKind.LAYOUT_OVERFLOW, selector=".a", patch="overflow: hidden;")
        result = apply_fixes(".a { color: red; }", [issue])

        assert result.skipped_fixes[0].reason == "Fix code is not a complete rule"

    def test_selector_containing_suggest_is_applied(self):
        """Test that only comments mark a patch as suggestion-only."""
        patch = ".suggestion-box {\n  color: red;\n}"
        issue = make_issue(IssueKind.LAYOUT_OVERFLOW, selector=".a", patch=patch)
        result = apply_fixes(".a { color: red; }", [issue])

        assert result.fixed_count == 1
        assert result.fixed_source.endswith(patch)

    def test_specificity_suggestion_skipped(self):
        """Test the manual refactoring skip reason."""
        result = fix_source("#a #b #c #d { color: red; }")

        reasons = {fix.reason for fix in result.skipped_fixes}
        assert "Specificity issues require manual refactoring" in reasons


class TestSelection:
    """Tests for issue selection."""

    def test_threshold_is_inclusive(self):
        """Test that a fix at exactly the threshold is applied."""
        issue = make_issue(
            IssueKind.POSITIONING_Z_INDEX, selector=".p", confidence=85
        )
        engine = FixEngine()

        assert engine.select_issues([issue], confidence_threshold=85) == [issue]
        assert engine.select_issues([issue], confidence_threshold=86) == []

    def test_type_filter(self):
        """Test restricting fixes to some kinds."""
        source = ".p { top: 0; }\n.g { display: grid; }"
        result = fix_source(source, issue_types=["grid-template-missing"])

        assert result.fixed_count == 1
        assert result.applied_fixes[0].kind == "grid-template-missing"
        assert "position" not in result.fixed_source

    def test_empty_type_filter(self):
        """Test that an empty filter applies every kind."""
        result = fix_source(".p { top: 0; }\n.g { display: grid; }", issue_types=[])

        assert result.fixed_count == 2

    def test_issues_without_fix_ignored(self):
        """Test that fixless issues are never selected."""
        issue = make_issue(IssueKind.GRID_TEMPLATE_MISSING, selector=".a")
        issue.fix = None

        assert FixEngine().select_issues([issue]) == []

    def test_nothing_selected(self):
        """Test a run with no eligible issues."""
        result = apply_fixes(".a { color: red; }", [])

        assert result.fixed_source == ".a { color: red; }"
        assert result.total_issues == 0
        assert result.to_dict()["fixed_count"] == 0


class TestFailures:
    """Tests for fixes that cannot be applied."""

    def test_selector_not_found(self):
        """Test a rule that no longer exists."""
        issue = make_issue(IssueKind.POSITIONING_Z_INDEX, selector=".missing")
        result = apply_fixes(".a { top: 0; }", [issue])

        assert result.skipped_fixes[0].reason == 'Rule ".missing" not found in source'

    def test_missing_selector(self):
        """Test an issue without a selector."""
        issue = make_issue(IssueKind.POSITIONING_Z_INDEX)
        result = apply_fixes(".a { top: 0; }", [issue])

        assert result.skipped_fixes[0].reason == (
            "No selector found for positioning-z-index issue"
        )

    def test_strategy_exception(self, monkeypatch):
        """Test that a raising strategy becomes a skipped fix."""

        def broken(source, issue):
            raise ValueError("strategy exploded")

        monkeypatch.setitem(strategies.STRATEGIES, IssueKind.POSITIONING_Z_INDEX, broken)
        source = ".p { top: 0; }"
        result = fix_source(source)

        assert result.fixed_source == source
        assert result.skipped_fixes[0].reason == "strategy exploded"


class TestRuleLocation:
    """Tests for finding the right rule block in awkward stylesheets."""

    def test_brace_inside_string(self):
        """Test that a closing brace in a string is not the end of the rule."""
        result = fix_source('.a { content: "}"; top: 0; }')

        assert result.fixed_source == '.a { content: "}"; top: 0; position: relative; }'
        assert result.fixed_count == 1

    def test_duplicate_selector_uses_issue_line(self):
        """Test that the flagged rule is fixed, not the first with that selector."""
        result = fix_source(".f{height:10px}\n.f{display:flex;align-items:center}")

        assert result.fixed_source == (
            ".f{height:10px}\n.f{display:flex;align-items:center; min-height: 100vh; }"
        )
        assert result.skipped_fixes == []

    def test_duplicate_focus_rule(self):
        """Test restoring the outline in the second of two :focus rules."""
        result = fix_source("a:focus{color:red}\na:focus{outline:none}")

        assert result.fixed_source == (
            "a:focus{color:red}\na:focus{outline: 2px solid #005fcc; outline-offset: 2px;}"
        )
        assert result.fixed_count == 1

    def test_comment_inside_selector(self):
        """Test a selector written with a comment between compounds."""
        result = fix_source(".a /* x */ .b { top: 0; }")

        assert result.fixed_source == ".a /* x */ .b { top: 0; position: relative; }"

    def test_line_picks_closest_block(self):
        """Test the line lookup directly."""
        source = ".x { top: 0; }\n.y {}\n.x { left: 0; }"

        assert find_rule_block(source, ".x").text(source) == ".x { top: 0; }"
        assert find_rule_block(source, ".x", line=3).text(source) == ".x { left: 0; }"

    def test_braces_in_comments_ignored(self):
        """Test that commented-out braces do not open blocks."""
        source = "/* .a { */\n.a { color: red; }"
        block = find_rule_block(source, ".a")

        assert block.text(source) == ".a { color: red; }"


class TestTextHelpers:
    """Tests for rule location and declaration insertion."""

    def test_find_rule_block_boundaries(self):
        """Test that a selector does not match inside a longer one."""
        source = ".nav a { color: red; }\na { color: blue; }"
        block = find_rule_block(source, "a")

        assert block.text(source) == "a { color: blue; }"
        assert block.body(source) == " color: blue; "

    def test_find_rule_block_loose_whitespace(self):
        """Test selector whitespace differences."""
        source = ".nav   a{color:red}"

        assert find_rule_block(source, ".nav a").text(source) == ".nav   a{color:red}"

    def test_find_rule_block_missing(self):
        """Test an absent selector."""
        assert find_rule_block(".a {}", ".b") is None

    @pytest.mark.parametrize(
        "body, expected",
        [
            (" color: red; ", " color: red; top: 0; "),
            (" color: red ", " color: red; top: 0; "),
            ("", " top: 0; "),
            ("\n    color: red;\n", "\n    color: red;\n    top: 0;\n"),
        ],
    )
    def test_insert_declaration(self, body, expected):
        """Test insertion keeps the body layout."""
        assert insert_declaration(body, "top: 0;") == expected
