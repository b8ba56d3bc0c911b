"""Fix strategies.

A strategy takes the current stylesheet text and one issue and returns a
``FixAttempt``. Strategies never raise for "cannot fix" situations; they
return a skipped attempt with a reason. Rule blocks are located again in
the current text on every call, on the cssutils token stream, so that
earlier edits are taken into account and braces in strings are ignored.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from cssutils.tokenize2 import Tokenizer

from ..models import Issue, IssueKind

# Declarations inserted by the targeted strategies
MIN_HEIGHT_DECLARATION = "min-height: 100vh;"
FLEX_WRAP_DECLARATION = "flex-wrap: wrap;"
GRID_TEMPLATE_DECLARATION = "grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));"
POSITION_DECLARATION = "position: relative;"
FOCUS_OUTLINE_REPLACEMENT = "outline: 2px solid #005fcc; outline-offset: 2px;"

GENERIC_FIX_MARKER = "/* Auto-generated fix */"

HEIGHT_RE = re.compile(r"(?<![\w-])(?:min-|max-)?height\s*:", re.IGNORECASE)
POSITION_RE = re.compile(r"(?<![\w-])position\s*:", re.IGNORECASE)
GRID_TEMPLATE_RE = re.compile(
    r"(?<![\w-])grid-template(?:-columns|-rows|-areas)?\s*:", re.IGNORECASE
)
DEPRECATED_GAP_RE = re.compile(r"(?<![\w-])grid-((?:row-|column-)?gap)(\s*:)", re.IGNORECASE)
OUTLINE_NONE_RE = re.compile(
    r"(?<![\w-])outline\s*:\s*none\s*(?:!\s*important\s*)?;?", re.IGNORECASE
)
COMPLETE_RULE_RE = re.compile(r"\s*[^{}\s][^{}]*\{[^{}]*\}\s*")
NEWLINE_RE = re.compile(r"\n")


@dataclass
class FixAttempt:
    """Outcome of one strategy call.

    ``before`` / ``after`` hold the affected rule block (or the appended
    text) for the audit trail.
    """

    success: bool
    source: str
    reason: str = ""
    before: str = ""
    after: str = ""

    @classmethod
    def skipped(cls, source: str, reason: str) -> "FixAttempt":
        return cls(success=False, source=source, reason=reason)


@dataclass
class RuleBlock:
    """A ``selector { body }`` span in the stylesheet text."""

    start: int
    body_start: int
    body_end: int
    end: int

    def text(self, source: str) -> str:
        return source[self.start : self.end]

    def body(self, source: str) -> str:
        return source[self.body_start : self.body_end]


Strategy = Callable[[str, Issue], FixAttempt]

# (kind, start offset, end offset) of one cssutils token
TokenSpan = tuple[str, int, int]


def _token_spans(source: str) -> list[TokenSpan]:
    """Tokenise ``source`` and map cssutils line/column pairs to offsets."""
    line_starts = [0] + [match.end() for match in NEWLINE_RE.finditer(source)]

    starts: list[tuple[str, int]] = []
    bom_length = 0
    for kind, value, line, column in Tokenizer().tokenize(source):
        if kind == "BOM":
            # cssutils does not advance the column past a byte order mark
            bom_length = len(value)
            starts.append((kind, 0))
            continue
        offset = line_starts[line - 1] + column - 1
        if line == 1:
            offset += bom_length
        starts.append((kind, offset))

    ends = [start for _, start in starts[1:]] + [len(source)]
    return [(kind, start, end) for (kind, start), end in zip(starts, ends)]


def _normalize_selector(selector: str) -> str:
    return " ".join(selector.split())


def find_rule_block(source: str, selector: str, line: int | None = None) -> RuleBlock | None:
    """Locate the block of the rule written as ``selector``.

    Blocks are found on the token stream, so braces inside strings and
    comments do not count and comments inside a selector are ignored.
    Selectors compare equal when they differ only in whitespace.

    Args:
        source: Current stylesheet text.
        selector: Selector as reported on the issue.
        line: Line of the issue. When several rules share the selector, the
            block spanning (or else closest to) this line wins; without a
            line the first block in source order is used.
    """
    wanted = _normalize_selector(selector)
    if not wanted:
        return None

    matches: list[RuleBlock] = []
    open_blocks: list[tuple[str, int | None, int]] = []
    prelude: list[str] = []
    prelude_start: int | None = None

    for kind, start, end in _token_spans(source):
        text = source[start:end]
        if kind == "COMMENT":
            continue

        if kind == "CHAR" and text in ("{", "}", ";"):
            if text == "{":
                open_blocks.append((_normalize_selector("".join(prelude)), prelude_start, end))
            elif text == "}" and open_blocks:
                block_selector, block_start, body_start = open_blocks.pop()
                if block_selector == wanted and block_start is not None:
                    matches.append(RuleBlock(block_start, body_start, start, end))
            prelude = []
            prelude_start = None
            continue

        if prelude_start is None and kind != "S":
            prelude_start = start
        if prelude_start is not None:
            prelude.append(text)

    if not matches:
        return None
    matches.sort(key=lambda block: block.start)
    if line is None:
        return matches[0]
    return min(matches, key=lambda block: _line_distance(source, block, line))


def _line_distance(source: str, block: RuleBlock, line: int) -> int:
    first = source.count("\n", 0, block.start) + 1
    last = first + source.count("\n", block.start, block.end)
    if first <= line <= last:
        return 0
    return min(abs(line - first), abs(line - last))


def insert_declaration(body: str, declaration: str) -> str:
    """Append a declaration to a rule body, keeping its layout."""
    content = body.rstrip()
    trailing = body[len(content) :]
    if content.strip() and not content.endswith(";"):
        content += ";"

    if "\n" in body:
        return f"{content}\n{_detect_indent(body)}{declaration}{trailing}"
    return f"{content} {declaration}{trailing or ' '}"


def _detect_indent(body: str) -> str:
    for line in body.splitlines():
        if line.strip():
            return line[: len(line) - len(line.lstrip())] or "  "
    return "  "


def _replace_body(source: str, block: RuleBlock, new_body: str) -> FixAttempt:
    fixed = source[: block.body_start] + new_body + source[block.body_end :]
    new_end = block.end + len(new_body) - (block.body_end - block.body_start)
    return FixAttempt(
        success=True,
        source=fixed,
        before=block.text(source),
        after=fixed[block.start : new_end],
    )


def _locate(source: str, issue: Issue) -> RuleBlock | FixAttempt:
    selector = issue.location.selector
    if not selector:
        return FixAttempt.skipped(source, f"No selector found for {issue.kind.value} issue")
    block = find_rule_block(source, selector, issue.location.line)
    if block is None:
        return FixAttempt.skipped(source, f'Rule "{selector}" not found in source')
    return block


def _append_unless(
    source: str, issue: Issue, declaration: str, present: re.Pattern, reason: str
) -> FixAttempt:
    located = _locate(source, issue)
    if isinstance(located, FixAttempt):
        return located

    body = located.body(source)
    if present.search(body):
        return FixAttempt.skipped(source, reason)
    return _replace_body(source, located, insert_declaration(body, declaration))


def fix_flexbox(source: str, issue: Issue) -> FixAttempt:
    if issue.check == "flexbox.missing-height":
        return _append_unless(
            source, issue, MIN_HEIGHT_DECLARATION, HEIGHT_RE, "Rule already declares a height"
        )

    if issue.check == "flexbox.align-content-single-line":
        located = _locate(source, issue)
        if isinstance(located, FixAttempt):
            return located
        body = located.body(source)
        return _replace_body(source, located, insert_declaration(body, FLEX_WRAP_DECLARATION))

    return apply_generic(source, issue)


def fix_grid(source: str, issue: Issue) -> FixAttempt:
    if issue.check == "grid.missing-template":
        return _append_unless(
            source,
            issue,
            GRID_TEMPLATE_DECLARATION,
            GRID_TEMPLATE_RE,
            "Rule already declares a grid template",
        )

    if issue.check == "grid.deprecated-gap":
        located = _locate(source, issue)
        if isinstance(located, FixAttempt):
            return located
        body = located.body(source)
        new_body = DEPRECATED_GAP_RE.sub(r"\1\2", body)
        if new_body == body:
            return FixAttempt.skipped(source, "No deprecated gap property left in rule")
        return _replace_body(source, located, new_body)

    return apply_generic(source, issue)


def fix_positioning(source: str, issue: Issue) -> FixAttempt:
    return _append_unless(
        source, issue, POSITION_DECLARATION, POSITION_RE, "Rule already declares a position"
    )


def fix_accessibility(source: str, issue: Issue) -> FixAttempt:
    if issue.check != "accessibility.focus-outline-removed":
        return apply_generic(source, issue)

    located = _locate(source, issue)
    if isinstance(located, FixAttempt):
        return located
    body = located.body(source)
    new_body = OUTLINE_NONE_RE.sub(FOCUS_OUTLINE_REPLACEMENT, body, count=1)
    if new_body == body:
        return FixAttempt.skipped(source, "No outline: none declaration found in rule")
    return _replace_body(source, located, new_body)


def fix_specificity(source: str, issue: Issue) -> FixAttempt:
    if issue.fix and _is_suggestion(issue.fix.patch):
        return FixAttempt.skipped(source, "Specificity issues require manual refactoring")
    return apply_generic(source, issue)


def fix_compatibility(source: str, issue: Issue) -> FixAttempt:
    if issue.fix and _is_suggestion(issue.fix.patch):
        return FixAttempt.skipped(
            source, "Compatibility issues require manual fallback implementation"
        )
    return apply_generic(source, issue)


def apply_generic(source: str, issue: Issue) -> FixAttempt:
    """Append the issue's patch when it is a complete, comment-free rule."""
    patch = issue.fix.patch if issue.fix else ""
    if not patch or _is_suggestion(patch):
        return FixAttempt.skipped(source, "No actionable fix code available")
    if not COMPLETE_RULE_RE.fullmatch(patch):
        return FixAttempt.skipped(source, "Fix code is not a complete rule")

    addition = f"\n\n{GENERIC_FIX_MARKER}\n{patch}"
    return FixAttempt(success=True, source=source + addition, after=patch)


def _is_suggestion(patch: str) -> bool:
    return "/*" in patch


STRATEGIES: dict[IssueKind, Strategy] = {
    IssueKind.FLEXBOX_ALIGNMENT_FAILED: fix_flexbox,
    IssueKind.GRID_TEMPLATE_MISSING: fix_grid,
    IssueKind.SPECIFICITY_CONFLICT: fix_specificity,
    IssueKind.POSITIONING_Z_INDEX: fix_positioning,
    IssueKind.ACCESSIBILITY_CONTRAST: fix_accessibility,
    IssueKind.COMPATIBILITY_UNSUPPORTED: fix_compatibility,
}


def strategy_for(issue: Issue) -> Strategy:
    return STRATEGIES.get(issue.kind, apply_generic)
