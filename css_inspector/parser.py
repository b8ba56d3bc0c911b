"""Stylesheet parser producing the flat rule model.

The cssutils tokenizer does the lexing (it keeps the author's text and
reports 1-based line/column for every token). ``_RuleModelBuilder`` folds
the token stream into rules and declarations:

- rules nested in at-rules (``@media``, ``@supports``, ...) or in other
  rules are flattened into one sequence, in order of their opening brace
- declaration order inside a rule is preserved
- at-rule descriptors (``@font-face``, ``@page``) and statement at-rules
  (``@import``) do not produce rules
"""

import re
from dataclasses import dataclass, field

from cssutils.tokenize2 import Tokenizer

from .errors import CSSSyntaxError
from .inspector_logging import LogCategory, get_category_logger
from .models import Declaration, Position, Rule, RuleModel

logger = get_category_logger(LogCategory.ANALYZER)

IMPORTANT_RE = re.compile(r"!\s*important\s*$", re.IGNORECASE)

# Tokens that never contribute to selector or value text
_IGNORED_TOKENS = frozenset({"COMMENT", "BOM", "CDO", "CDC"})

_STYLE_RULE = "rule"
_AT_RULE = "at-rule"

# (type, value, line, column) as yielded by cssutils
Token = tuple[str, str, int, int]


@dataclass
class _Block:
    """An open ``{ ... }`` block while walking the token stream."""

    kind: str
    prelude: str
    position: Position | None
    brace: Position
    context: tuple[str, ...] = ()
    rule_index: int | None = None
    declarations: list[Declaration] = field(default_factory=list)


class _RuleModelBuilder:
    """Walks cssutils tokens and collects rules in source order."""

    def __init__(self, source: str, filename: str | None = None):
        self.source = source
        self.filename = filename
        self._stack: list[_Block] = []
        self._buffer: list[Token] = []
        self._rules: list[Rule | None] = []
        self._previous: Token | None = None

    def build(self) -> RuleModel:
        for token in Tokenizer().tokenize(self.source):
            self._feed(token)
            self._previous = token

        if self._stack:
            block = self._stack[-1]
            raise CSSSyntaxError(
                message=f'Unclosed block "{block.prelude}"',
                line=block.brace.line,
                column=block.brace.column,
            )

        text, position = self._take_buffer()
        if text and not text.startswith("@"):
            raise CSSSyntaxError(
                message=f'Unexpected text "{_shorten(text)}" outside of a rule',
                line=position.line if position else 0,
                column=position.column if position else 0,
            )

        return RuleModel(
            source=self.source,
            rules=tuple(rule for rule in self._rules if rule is not None),
            filename=self.filename,
        )

    def _feed(self, token: Token) -> None:
        kind, value, line, column = token

        if kind in _IGNORED_TOKENS:
            return
        if kind == "INVALID":
            raise CSSSyntaxError(
                message=f'Unclosed string "{_shorten(value)}"',
                line=line,
                column=column,
            )
        if kind == "CHAR" and value == "*" and self._previous == ("CHAR", "/", line, column - 1):
            raise CSSSyntaxError(message="Unclosed comment", line=line, column=column - 1)

        if kind == "CHAR" and value == "{":
            self._open_block(Position(line, column))
        elif kind == "CHAR" and value == ";":
            self._end_statement()
        elif kind == "CHAR" and value == "}":
            self._close_block(Position(line, column))
        elif kind == "S" and self._buffer and self._buffer[-1][0] == "S":
            # Whitespace on both sides of a dropped comment
            return
        else:
            self._buffer.append(token)

    def _open_block(self, brace: Position) -> None:
        prelude, position = self._take_buffer()
        if not prelude:
            raise CSSSyntaxError(
                message='Missing selector before "{"',
                line=brace.line,
                column=brace.column,
            )

        context = tuple(block.prelude for block in self._stack)
        if prelude.startswith("@"):
            self._stack.append(
                _Block(_AT_RULE, prelude, position, brace, context=context)
            )
            return

        self._rules.append(None)
        self._stack.append(
            _Block(
                _STYLE_RULE,
                prelude,
                position,
                brace,
                context=context,
                rule_index=len(self._rules) - 1,
            )
        )

    def _end_statement(self) -> None:
        text, position = self._take_buffer()
        top = self._stack[-1] if self._stack else None

        if top is not None and top.kind == _STYLE_RULE:
            if text:
                top.declarations.append(_make_declaration(text, position))
            return

        # Statement at-rules, stray semicolons and at-rule descriptors
        if not text or text.startswith("@") or top is not None:
            return

        raise CSSSyntaxError(
            message=f'Unexpected declaration "{_shorten(text)}" outside of a rule',
            line=position.line if position else 0,
            column=position.column if position else 0,
        )

    def _close_block(self, brace: Position) -> None:
        if not self._stack:
            raise CSSSyntaxError(
                message='Unexpected "}"', line=brace.line, column=brace.column
            )

        text, position = self._take_buffer()
        block = self._stack.pop()
        if block.kind != _STYLE_RULE:
            return

        if text:
            block.declarations.append(_make_declaration(text, position))

        self._rules[block.rule_index] = Rule(
            selector=block.prelude,
            declarations=tuple(block.declarations),
            position=block.position,
            context=block.context,
        )

    def _take_buffer(self) -> tuple[str, Position | None]:
        """Join and clear the pending tokens.

        Returns:
            The stripped text and the position of its first non-space token.
        """
        text = "".join(value for _, value, _, _ in self._buffer).strip()
        position = None
        for kind, _, line, column in self._buffer:
            if kind != "S":
                position = Position(line, column)
                break
        self._buffer = []
        return text, position


def _make_declaration(text: str, position: Position | None) -> Declaration:
    name, sep, value = text.partition(":")
    line = position.line if position else 0
    column = position.column if position else 0

    if not sep:
        raise CSSSyntaxError(
            message=f'Missing ":" in declaration "{_shorten(text)}"',
            line=line,
            column=column,
        )

    name = name.strip()
    if not name or any(ch.isspace() for ch in name):
        raise CSSSyntaxError(
            message=f'Invalid property name "{_shorten(name)}"',
            line=line,
            column=column,
        )

    value = value.strip()
    important = False
    match = IMPORTANT_RE.search(value)
    if match:
        important = True
        value = value[: match.start()].rstrip()

    # Custom properties are case-sensitive
    if not name.startswith("--"):
        name = name.lower()

    return Declaration(property=name, value=value, important=important, position=position)


def _shorten(text: str, limit: int = 40) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."


def parse_stylesheet(source: str, filename: str | None = None) -> RuleModel:
    """Parse stylesheet text into a ``RuleModel``.

    Args:
        source: Stylesheet text.
        filename: Optional name recorded on the model and on issues.

    Returns:
        The flattened rule model.

    Raises:
        CSSSyntaxError: If the text cannot be parsed (unclosed blocks or
            strings, declarations without ":", stray braces).
    """
    model = _RuleModelBuilder(source, filename).build()
    logger.debug(
        f"Parsed {model.selectors_count} rules, "
        f"{model.properties_count} declarations"
    )
    return model
