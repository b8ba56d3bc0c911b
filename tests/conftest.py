"""
Shared fixtures for the css-inspector test suite.

Provides test fixtures for:
- Default and customised analysis options
- Parsing stylesheet snippets into rule models
- Writing stylesheets to temporary files for CLI tests
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from css_inspector.config import AnalysisOptions
from css_inspector.models import RuleModel
from css_inspector.parser import parse_stylesheet


@pytest.fixture
def options() -> AnalysisOptions:
    """Default analysis options."""
    return AnalysisOptions()


@pytest.fixture
def parse() -> Callable[..., RuleModel]:
    """Parse a stylesheet snippet, optionally with a filename."""

    def _parse(source: str, filename: str | None = None) -> RuleModel:
        return parse_stylesheet(source, filename)

    return _parse


@pytest.fixture
def css_file(tmp_path: Path) -> Callable[[str], Path]:
    """Write a stylesheet to a temporary file and return its path."""

    def _write(source: str, name: str = "styles.css") -> Path:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_css() -> str:
    """A stylesheet exercising every detector family."""
    return """\
.container {
  display: flex;
  align-items: center;
}

.grid {
  display: grid;
  grid-gap: 10px;
}

.badge {
  top: 0;
  z-index: 10;
}

#main #sidebar .nav a {
  color: #fff;
}

.nav a {
  color: #333;
}

button:focus {
  outline: none;
}

.input {
  appearance: none;
  font-size: 10px;
}
"""
