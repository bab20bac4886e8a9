"""Slide templates: colour palettes, font schemes and layout geometry.

A template is one tagged value.  Built-in templates are looked up by name
and carry no data of their own; the ``custom`` kind carries a fully
specified :class:`CustomTemplate`.  Resolution is total: unknown names
fall back to ``default``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, List, Optional, Union

from pptx.util import Inches

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


__all__ = [
    "ThemeColors",
    "FontScheme",
    "LayoutSettings",
    "CustomTemplate",
    "SlideTemplate",
    "resolve_template",
    "load_custom_template",
    "list_available_templates",
    "validate_template",
]


@dataclass(frozen=True)
class ThemeColors:
    """Six RRGGBB hex colours (no leading ``#``)."""
    background: str
    text_primary: str
    text_secondary: str
    accent_1: str
    accent_2: str
    accent_3: str


@dataclass(frozen=True)
class FontScheme:
    title_font: str
    body_font: str
    code_font: str


@dataclass(frozen=True)
class LayoutSettings:
    """Slide geometry, every value in EMU."""
    slide_width: int = int(Inches(10))
    slide_height: int = int(Inches(7.5))
    margin_top: int = int(Inches(0.5))
    margin_bottom: int = int(Inches(0.5))
    margin_left: int = int(Inches(0.75))
    margin_right: int = int(Inches(0.75))
    title_height: int = int(Inches(1.25))
    content_spacing: int = int(Inches(0.25))

    @property
    def content_width(self) -> int:
        return self.slide_width - self.margin_left - self.margin_right

    @property
    def content_top(self) -> int:
        """First vertical offset below the title shape."""
        return self.margin_top + self.title_height + self.content_spacing


@dataclass(frozen=True)
class CustomTemplate:
    name: str
    theme_colors: ThemeColors
    fonts: FontScheme
    layout_settings: LayoutSettings = field(default_factory=LayoutSettings)


_BUILTIN_COLORS: Dict[str, ThemeColors] = {
    "default": ThemeColors("FFFFFF", "000000", "666666", "4F81BD", "F79646", "9BBB59"),
    "professional": ThemeColors("FFFFFF", "1F1F1F", "757575", "2E75B6", "C65911", "70AD47"),
    "modern": ThemeColors("F8F9FA", "212529", "6C757D", "007BFF", "FD7E14", "28A745"),
    "minimal": ThemeColors("FFFFFF", "2C2C2C", "8C8C8C", "007ACC", "FF6B35", "32CD32"),
}

_BUILTIN_FONTS: Dict[str, FontScheme] = {
    "default": FontScheme("Calibri", "Calibri", "Consolas"),
    "professional": FontScheme("Segoe UI", "Segoe UI", "Consolas"),
    "modern": FontScheme("Roboto", "Roboto", "Fira Code"),
    "minimal": FontScheme("Helvetica", "Helvetica", "Monaco"),
}

# Minimal trades content width for whitespace.
_BUILTIN_LAYOUTS: Dict[str, LayoutSettings] = {
    "minimal": replace(
        LayoutSettings(),
        margin_top=int(Inches(1)),
        margin_bottom=int(Inches(1)),
        margin_left=int(Inches(1.5)),
        margin_right=int(Inches(1.5)),
    ),
}

BUILTIN_TEMPLATES = tuple(_BUILTIN_COLORS)
CUSTOM = "custom"


@dataclass(frozen=True)
class SlideTemplate:
    """
    A resolved template.  ``kind`` is one of :data:`BUILTIN_TEMPLATES` or
    ``"custom"``; only the custom kind carries ``custom`` data.
    """
    kind: str = "default"
    custom: Optional[CustomTemplate] = None

    def __post_init__(self):
        if self.kind == CUSTOM and self.custom is None:
            raise ValueError("custom template requires CustomTemplate data")
        if self.kind != CUSTOM and self.kind not in _BUILTIN_COLORS:
            raise ValueError(f"Unknown template kind: {self.kind}")

    @classmethod
    def from_custom(cls, template: CustomTemplate) -> "SlideTemplate":
        return cls(kind=CUSTOM, custom=template)

    @property
    def name(self) -> str:
        return self.custom.name if self.custom is not None else self.kind

    @property
    def colors(self) -> ThemeColors:
        if self.custom is not None:
            return self.custom.theme_colors
        return _BUILTIN_COLORS[self.kind]

    @property
    def fonts(self) -> FontScheme:
        if self.custom is not None:
            return self.custom.fonts
        return _BUILTIN_FONTS[self.kind]

    @property
    def layout(self) -> LayoutSettings:
        if self.custom is not None:
            return self.custom.layout_settings
        return _BUILTIN_LAYOUTS.get(self.kind, LayoutSettings())


def resolve_template(name: Union[str, SlideTemplate, None] = "default") -> SlideTemplate:
    """
    Resolve a template name, case-insensitively.

    Args:
        name: Built-in template name, or an already resolved template.

    Returns:
        The matching :class:`SlideTemplate`; ``default`` for unknown names.
    """
    if isinstance(name, SlideTemplate):
        return name
    key = (name or "default").strip().lower()
    if key not in _BUILTIN_COLORS:
        logger.debug(f"Unknown template '{name}', falling back to default")
        key = "default"
    return SlideTemplate(kind=key)


def _build_record(cls, data, section: str):
    if not isinstance(data, dict):
        raise ConfigurationError(f"Template section '{section}' must be an object")
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - names)
    if unknown:
        raise ConfigurationError(f"Unknown keys in '{section}': {', '.join(unknown)}")
    try:
        return cls(**data)
    except TypeError as exc:
        raise ConfigurationError(f"Incomplete template section '{section}': {exc}") from exc


def load_custom_template(path: Union[str, Path]) -> SlideTemplate:
    """
    Load a custom template from a JSON file.

    The file holds ``name``, ``theme_colors``, ``fonts`` and optionally
    ``layout_settings`` (omitted layout keys keep their defaults).

    Raises:
        ConfigurationError: If the file is unreadable, not JSON, or
            missing required keys.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read template file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Template file {path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Template file {path} must contain a JSON object")
    for key in ("theme_colors", "fonts"):
        if key not in raw:
            raise ConfigurationError(f"Template file {path} is missing '{key}'")

    layout_data = raw.get("layout_settings", {})
    layout = _build_record(LayoutSettings, layout_data, "layout_settings")
    if any(not isinstance(getattr(layout, f.name), int) for f in fields(LayoutSettings)):
        raise ConfigurationError("Layout settings must be integer EMU values")

    custom = CustomTemplate(
        name=str(raw.get("name", path.stem)),
        theme_colors=_build_record(ThemeColors, raw["theme_colors"], "theme_colors"),
        fonts=_build_record(FontScheme, raw["fonts"], "fonts"),
        layout_settings=layout,
    )
    return SlideTemplate.from_custom(custom)


def list_available_templates() -> List[str]:
    """Names of the built-in templates."""
    return list(BUILTIN_TEMPLATES)


def validate_template(name: str) -> bool:
    """Check whether *name* is a built-in template (unknown names still resolve)."""
    return (name or "").strip().lower() in _BUILTIN_COLORS
