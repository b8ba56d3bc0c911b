"""Selector specificity.

The canonical weights come from cssutils' selector parser. Selectors it
rejects (nesting ``&``, vendor hacks, broken input) get a character-counting
estimate instead, flagged with ``calculator="fallback"``.
"""

import logging
import re
from functools import lru_cache

import cssutils
from cssutils.css import SelectorList

from .models import SpecificityScore

# cssutils reports rejected selectors through its own logger
cssutils.log.setLevel(logging.CRITICAL)

PSEUDO_CLASS_RE = re.compile(r"(?<!:):(?!:)[\w-]+")
COMBINATOR_RE = re.compile(r"[\s>+~]")


@lru_cache(maxsize=4096)
def calculate_specificity(selector: str) -> SpecificityScore:
    """Return the specificity of a selector (or selector list).

    For a comma-separated list the most specific member wins. The total
    weighs ids by 100, the class tier by 10 and elements by 1.

    Args:
        selector: Selector text as it appears in the stylesheet.

    Returns:
        Frozen score; identical input always gives an identical score.
    """
    try:
        selectors = SelectorList(selectorText=selector)
    except Exception:
        return _fallback_specificity(selector)

    weights = [member.specificity for member in selectors]
    if not weights:
        return _fallback_specificity(selector)

    _, ids, classes, elements = max(weights)
    return SpecificityScore(
        total=ids * 100 + classes * 10 + elements,
        ids=ids,
        classes=classes,
        pseudo_classes=len(PSEUDO_CLASS_RE.findall(selector)),
        elements=elements,
        calculator="canonical",
    )


def _fallback_specificity(selector: str) -> SpecificityScore:
    ids = selector.count("#")
    classes = selector.count(".") + selector.count("[")
    pseudo_classes = selector.count(":")
    elements = sum(
        1
        for part in COMBINATOR_RE.split(selector)
        if part and not part.startswith(("#", ".", "["))
    )
    return SpecificityScore(
        total=ids * 100 + (classes + pseudo_classes) * 10 + elements,
        ids=ids,
        classes=classes,
        pseudo_classes=pseudo_classes,
        elements=elements,
        calculator="fallback",
    )
