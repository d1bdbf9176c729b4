import pytest

from podabio_theme import widget_styles


def test_defaults():
    assert widget_styles.default_widget_styles() == {
        "border_width": "none",
        "border_effect": "shadow",
        "border_shadow_intensity": "subtle",
        "border_glow_intensity": "subtle",
        "glow_color": "#ff00ff",
        "spacing": "comfortable",
        "shape": "rounded",
    }


def test_validate_checks_enums_and_colors():
    assert widget_styles.validate({"border_width": "thick", "glow_color": "var(--accent)"})
    assert widget_styles.validate({"border_width": 2.5})
    assert not widget_styles.validate({"border_width": "huge"})
    assert not widget_styles.validate({"glow_color": "red"})
    assert not widget_styles.validate({"border_color": "url(x.png)"})
    assert widget_styles.validate({"background_color": "linear-gradient(90deg, #000 0%, #fff 100%)"})
    assert not widget_styles.validate("not a mapping")


def test_merge_with_defaults_resets_invalid_enums():
    merged = widget_styles.merge_with_defaults({"border_effect": "sparkle", "shape": "round", "extra": 1})

    assert merged["border_effect"] == "shadow"
    assert merged["shape"] == "round"
    assert merged["extra"] == 1
    assert merged["spacing"] == "comfortable"


def test_sanitize_replaces_bad_colors_and_keeps_good_ones():
    sanitized = widget_styles.sanitize(
        {
            "glow_color": "not-a-color",
            "border_color": " #123456 ",
            "background_color": "javascript:alert(1)",
            "border_width": True,
        }
    )

    assert sanitized["glow_color"] == "#ff00ff"
    assert sanitized["border_color"] == "#123456"
    assert sanitized["background_color"] == "#000000"
    assert sanitized["border_width"] == "none"


def test_sanitize_of_non_mapping_returns_defaults():
    assert widget_styles.sanitize(["thick"]) == widget_styles.default_widget_styles()


@pytest.mark.parametrize(
    ("kind", "value", "expected"),
    [
        ("border_width", "none", "0px"),
        ("border_width", "thin", "1px"),
        ("border_width", "thick", "3px"),
        ("border_width", 2, "2px"),
        ("border_width", "1.5", "1.5px"),
        ("shadow", "none", "none"),
        ("shadow", "pronounced", "0 4px 12px rgba(0, 0, 0, 0.15)"),
        ("glow_blur", "subtle", "8px"),
        ("glow_opacity", "pronounced", "0.8"),
        ("spacing", "spacious", "1.5rem"),
        ("shape", "round", "50px"),
        ("shape", "blob", "8px"),
        ("shadow", None, "0 2px 4px rgba(0, 0, 0, 0.05)"),
    ],
)
def test_enum_to_css(kind, value, expected):
    assert widget_styles.enum_to_css(kind, value) == expected


def test_enum_to_css_rejects_unknown_kind():
    with pytest.raises(KeyError):
        widget_styles.enum_to_css("sparkle", "subtle")
