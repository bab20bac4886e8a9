"""Test template resolution and custom template loading."""

import json

import pytest

from md2pptx.errors import ConfigurationError
from md2pptx.templates import (
    CustomTemplate,
    FontScheme,
    LayoutSettings,
    SlideTemplate,
    ThemeColors,
    list_available_templates,
    load_custom_template,
    resolve_template,
    validate_template,
)


@pytest.mark.parametrize("name", ["default", "professional", "modern", "minimal"])
def test_builtin_names_resolve(name):
    assert resolve_template(name).kind == name


def test_resolution_is_case_insensitive():
    assert resolve_template("Professional").kind == "professional"


@pytest.mark.parametrize("name", ["unknown", "", None, "../evil"])
def test_unknown_names_fall_back_to_default(name):
    assert resolve_template(name) == SlideTemplate()


def test_resolved_template_passes_through():
    template = resolve_template("modern")

    assert resolve_template(template) is template


def test_theme_colors():
    colors = resolve_template("professional").colors

    assert colors.text_primary == "1F1F1F"
    assert colors.accent_1 == "2E75B6"


def test_fonts():
    fonts = resolve_template("modern").fonts

    assert fonts.title_font == "Roboto"
    assert fonts.code_font == "Fira Code"


def test_default_layout_geometry():
    layout = resolve_template("default").layout

    assert (layout.slide_width, layout.slide_height) == (9144000, 6858000)
    assert layout.content_width == 7772400
    assert layout.content_top == 1828800


def test_minimal_layout_has_wider_margins():
    layout = resolve_template("minimal").layout

    assert layout.margin_left == 1371600
    assert layout.margin_top == 914400
    assert layout.title_height == 1143000


def test_custom_template_requires_data():
    with pytest.raises(ValueError):
        SlideTemplate(kind="custom")
    with pytest.raises(ValueError):
        SlideTemplate(kind="neon")


def test_custom_template_values():
    custom = CustomTemplate(
        name="Brand",
        theme_colors=ThemeColors("000000", "FFFFFF", "CCCCCC", "FF0000", "00FF00", "0000FF"),
        fonts=FontScheme("Georgia", "Verdana", "Courier New"),
    )
    template = SlideTemplate.from_custom(custom)

    assert template.name == "Brand"
    assert template.colors.accent_1 == "FF0000"
    assert template.fonts.code_font == "Courier New"
    assert template.layout == LayoutSettings()


def test_load_custom_template(tmp_path):
    path = tmp_path / "brand.json"
    path.write_text(json.dumps({
        "name": "Brand",
        "theme_colors": {
            "background": "101010",
            "text_primary": "FAFAFA",
            "text_secondary": "AAAAAA",
            "accent_1": "FF8800",
            "accent_2": "0088FF",
            "accent_3": "88FF00",
        },
        "fonts": {"title_font": "Inter", "body_font": "Inter", "code_font": "JetBrains Mono"},
        "layout_settings": {"margin_left": 914400, "margin_right": 914400},
    }), encoding="utf-8")

    template = load_custom_template(path)

    assert template.kind == "custom"
    assert template.name == "Brand"
    assert template.colors.background == "101010"
    assert template.fonts.code_font == "JetBrains Mono"
    assert template.layout.margin_left == 914400
    assert template.layout.content_width == 9144000 - 2 * 914400
    assert template.layout.title_height == 1143000


@pytest.mark.parametrize("payload", [
    "not json",
    "[]",
    json.dumps({"fonts": {"title_font": "a", "body_font": "b", "code_font": "c"}}),
    json.dumps({
        "theme_colors": {"background": "FFFFFF"},
        "fonts": {"title_font": "a", "body_font": "b", "code_font": "c"},
    }),
])
def test_load_custom_template_rejects_bad_files(tmp_path, payload):
    path = tmp_path / "bad.json"
    path.write_text(payload, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_custom_template(path)


def test_load_custom_template_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_custom_template(tmp_path / "missing.json")


def test_list_and_validate():
    assert list_available_templates() == ["default", "professional", "modern", "minimal"]
    assert validate_template("Modern") is True
    assert validate_template("nonexistent") is False
