"""Tests for the specificity calculator."""

import pytest

from css_inspector.specificity import _fallback_specificity, calculate_specificity


class TestCanonicalSpecificity:
    """Tests for selectors the selector parser accepts."""

    @pytest.mark.parametrize(
        "selector,expected",
        [
            ("div", 1),
            (".c", 10),
            ("div.c", 11),
            ("#i", 100),
            ("#a .b c", 111),
        ],
    )
    def test_standard_tiers(self, selector, expected):
        """Test the id / class / element weights."""
        score = calculate_specificity(selector)

        assert score.total == expected
        assert score.calculator == "canonical"

    def test_breakdown(self):
        """Test per-tier counts."""
        score = calculate_specificity("#a .b c")

        assert score.ids == 1
        assert score.classes == 1
        assert score.elements == 1

    def test_pseudo_class_counts_in_class_tier(self):
        """Test that a pseudo-class weighs like a class."""
        score = calculate_specificity("a:hover")

        assert score.total == 11
        assert score.pseudo_classes == 1

    def test_selector_list_takes_maximum(self):
        """Test that the most specific member of a list wins."""
        assert calculate_specificity("a, #b, .c").total == 100

    def test_memoised(self):
        """Test that repeated calls return the same score object."""
        assert calculate_specificity("ul li") is calculate_specificity("ul li")


class TestFallbackSpecificity:
    """Tests for the character-counting estimate."""

    def test_counts(self):
        """Test the fallback tiers."""
        score = _fallback_specificity("#nav .item a:hover")

        assert score.ids == 1
        assert score.classes == 1
        assert score.pseudo_classes == 1
        assert score.elements == 1
        assert score.total == 100 + 20 + 1
        assert score.calculator == "fallback"

    def test_simple_selectors_agree_with_canonical(self):
        """Test that both calculators agree on simple selectors."""
        for selector in ("div", ".c", "div.c", "#i"):
            assert _fallback_specificity(selector).total == calculate_specificity(selector).total

    def test_empty_selector_uses_fallback(self):
        """Test that an unparseable selector falls back."""
        score = calculate_specificity("")

        assert score.calculator == "fallback"
        assert score.total == 0
