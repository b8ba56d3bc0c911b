"""Analysis options.

Options are pydantic models so that values coming from JSON config files or
the command line are validated in one place. Keys may be given in camelCase
(``maxFileSize``) or snake_case (``max_file_size``). User overrides are merged
per field onto the defaults, never replacing a whole section.
"""

import json
import re
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import OptionsError
from .inspector_logging import get_logger

logger = get_logger()

# Default configuration file name
CONFIG_FILENAME = "css-inspector.config.json"

DEFAULT_LOW_CONTRAST_COLORS = [
    "white",
    "#fff",
    "#ffffff",
    "rgb(255,255,255)",
    "hsl(0,0%,100%)",
    "black",
    "#000",
    "#000000",
    "rgb(0,0,0)",
    "hsl(0,0%,0%)",
]


class _OptionsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ChecksConfig(_OptionsModel):
    """Which detector families run."""

    layout: bool = Field(default=True, description="Flexbox, grid and positioning")
    performance: bool = Field(default=True, description="Size and selector budgets")
    compatibility: bool = Field(default=True, description="Browser support hints")
    accessibility: bool = Field(default=True, description="Contrast, font size, focus")
    maintainability: bool = Field(default=True, description="Specificity problems")


class ThresholdsConfig(_OptionsModel):
    """Performance budgets."""

    max_file_size: int = Field(
        default=500_000, ge=1, alias="maxFileSize", description="Bytes"
    )
    max_selectors: int = Field(
        default=4_000, ge=1, alias="maxSelectors", description="Rule count"
    )
    max_nesting: int = Field(
        default=5, ge=1, alias="maxNesting", description="Selector depth"
    )


class ScopeConfig(_OptionsModel):
    """fnmatch patterns restricting which rules and declarations are checked."""

    include_selectors: list[str] = Field(default_factory=list, alias="includeSelectors")
    exclude_selectors: list[str] = Field(default_factory=list, alias="excludeSelectors")
    include_properties: list[str] = Field(
        default_factory=list, alias="includeProperties"
    )
    exclude_properties: list[str] = Field(
        default_factory=list, alias="excludeProperties"
    )

    @property
    def is_unrestricted(self) -> bool:
        return not (
            self.include_selectors
            or self.exclude_selectors
            or self.include_properties
            or self.exclude_properties
        )

    def selector_in_scope(self, selector: str) -> bool:
        return _in_scope(selector, self.include_selectors, self.exclude_selectors)

    def property_in_scope(self, prop: str) -> bool:
        return _in_scope(prop, self.include_properties, self.exclude_properties)


class HeuristicsConfig(_OptionsModel):
    """Tunable constants of the pattern-matching heuristics."""

    specificity_gap: int = Field(default=50, ge=0, alias="specificityGap")
    high_specificity: int = Field(default=300, ge=0, alias="highSpecificity")
    probably_unused_min_specificity: int = Field(
        default=100, ge=0, alias="probablyUnusedMinSpecificity"
    )
    min_font_size_px: float = Field(default=12, gt=0, alias="minFontSizePx")
    low_contrast_colors: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LOW_CONTRAST_COLORS),
        alias="lowContrastColors",
    )


class AnalysisOptions(_OptionsModel):
    """Configuration of one analysis call.

    Treated as immutable: use ``merged_with`` to derive a variant.
    """

    checks: ChecksConfig = Field(default_factory=ChecksConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    browsers: list[str] | None = Field(
        default=None, description="Target browsers; enables compatibility info"
    )
    scope: ScopeConfig = Field(default_factory=ScopeConfig)
    heuristics: HeuristicsConfig = Field(default_factory=HeuristicsConfig)
    parallel: bool = Field(default=False, description="Run detectors on threads")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AnalysisOptions":
        """Create options from user overrides merged onto the defaults.

        Raises:
            OptionsError: If a value fails validation.
        """
        return cls().merged_with(data or {})

    def merged_with(self, overrides: dict[str, Any]) -> "AnalysisOptions":
        """Return new options with ``overrides`` merged per field.

        Nested sections (``checks``, ``thresholds``, ``scope``,
        ``heuristics``) are merged key by key; other values replace.
        """
        data = self.model_dump()
        for key, value in overrides.items():
            name = _snake_case(key)
            if isinstance(value, dict) and isinstance(data.get(name), dict):
                section = dict(data[name])
                section.update({_snake_case(k): v for k, v in value.items()})
                data[name] = section
            else:
                data[name] = value

        try:
            return AnalysisOptions.model_validate(data)
        except ValidationError as e:
            raise OptionsError(
                message=f"Invalid analysis options: {e}",
                details={"errors": e.errors(include_url=False)},
            ) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary using the camelCase keys of config files."""
        return self.model_dump(by_alias=True)


def load_options(path: Path | str | None = None) -> AnalysisOptions:
    """Load options from a JSON config file.

    Args:
        path: A config file, or a directory containing ``CONFIG_FILENAME``.
            Defaults to the current directory.

    Returns:
        The merged options, or the defaults when no config file exists.

    Raises:
        OptionsError: If the file is not valid JSON or fails validation.
    """
    config_path = Path(path) if path else Path.cwd()
    if config_path.is_dir():
        config_path = config_path / CONFIG_FILENAME

    if not config_path.exists():
        logger.debug(f"No config file at {config_path}, using defaults")
        return AnalysisOptions()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise OptionsError(
            message=f"Cannot read config file {config_path}: {e}",
            details={"path": str(config_path)},
        ) from e

    if not isinstance(data, dict):
        raise OptionsError(
            message=f"Config file {config_path} must contain a JSON object",
            details={"path": str(config_path)},
        )

    logger.debug(f"Loaded options from {config_path}")
    return AnalysisOptions.from_dict(data)


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _in_scope(value: str, include: list[str], exclude: list[str]) -> bool:
    if include and not any(fnmatchcase(value, pattern) for pattern in include):
        return False
    return not any(fnmatchcase(value, pattern) for pattern in exclude)
