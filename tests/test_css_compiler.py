import json

import pytest

from podabio_theme.css_compiler import (
    ThemeCSSCompiler,
    dominant_background_color,
    get_optimal_text_color,
)

GRADIENT = "linear-gradient(135deg, #000000 0%, #ffffff 100%)"


def _compile(accessor, page, theme=None):
    return ThemeCSSCompiler(page, theme if theme is not None else {}, accessor=accessor)


def test_color_tokens_reach_css_variables(accessor):
    css = _compile(accessor, {"color_tokens": {"text": {"primary": "#112233"}}}).generate_css_variables()

    assert css.startswith(":root {\n")
    assert "    --color-text-primary: #112233;\n" in css
    assert "--color-text-secondary: #4b5563;" in css


def test_legacy_colors_reach_css_variables(accessor):
    css = _compile(accessor, {"colors": {"primary": "#112233", "accent": "#ff6600"}}).generate_css_variables()

    assert "--color-text-primary: #112233;" in css
    assert "--color-accent-primary: #ff6600;" in css
    assert "--primary-color: #112233;" in css
    assert "--accent-color: #ff6600;" in css


def test_spacing_shape_and_typography_variables(accessor):
    css = _compile(accessor, {}).generate_css_variables()

    assert "--space-lg: 4.125rem;" in css
    assert "--layout-density: comfortable;" in css
    assert "--widget-space-md: 2rem;" in css
    assert "--widget-spacing: 4.125rem;" in css
    assert "--page-padding: 4.125rem;" in css
    assert "--shape-corner-md: 0.75rem;" in css
    assert "--shadow-level-1: 0 1px 2px rgba(15, 23, 42, 0.06);" in css
    assert "--border-width-hairline: 1px;" in css
    assert "--type-scale-xl: 2.488rem;" in css
    assert "--type-line-height-tight: 1.2;" in css
    assert "--type-weight-bold: 600;" in css
    assert "--motion-duration-fast: 150ms;" in css
    assert "--font-family-heading: 'Inter', sans-serif;" in css
    assert "--page-primary-font: 'Inter';" in css
    assert "--widget-border-radius: 0.75rem;" in css
    assert "--widget-width: 100%;" in css


def test_compact_density_changes_spacing_variables(accessor):
    css = _compile(accessor, {"layout_density": "compact"}).generate_css_variables()

    assert "--layout-density: compact;" in css
    assert "--space-lg: 2.625rem;" in css


@pytest.mark.parametrize(
    ("effect", "expected"),
    [
        ("glass", "backdrop-filter: blur(20px) saturate(180%);"),
        ("depth", "perspective: 1000px;"),
        ("floating", "box-shadow: 0 20px 60px rgba(0, 0, 0, 0.3);"),
        ("tilt", "will-change: transform;"),
    ],
)
def test_spatial_effect_rules(accessor, effect, expected):
    compiler = _compile(accessor, {"spatial_effect": effect})
    css = compiler.generate_spatial_effect_css()

    assert f"body.spatial-{effect}" in css
    assert expected in css
    assert compiler.get_spatial_effect_class() == f"spatial-{effect}"
    assert css in compiler.generate_complete_style_block()


def test_no_spatial_effect_emits_nothing(accessor):
    compiler = _compile(accessor, {})
    assert compiler.generate_spatial_effect_css() == ""
    assert compiler.get_spatial_effect_class() == "spatial-none"


def test_glow_animation_only_for_visible_glow(accessor):
    glowing = _compile(accessor, {"widget_styles": {"border_effect": "glow", "border_glow_intensity": "subtle"}})
    dimmed = _compile(accessor, {"widget_styles": {"border_effect": "glow", "border_glow_intensity": "none"}})
    shadowed = _compile(accessor, {"widget_styles": {"border_effect": "shadow"}})

    css = glowing.generate_glow_animation_css()
    assert "@keyframes glow-pulse" in css
    assert "@keyframes glow-rotate" in css
    assert "animation: glow-pulse 3s ease-in-out infinite;" in css
    assert dimmed.generate_glow_animation_css() == ""
    assert shadowed.generate_glow_animation_css() == ""


def test_glow_variables_and_reapplied_shadow(accessor):
    compiler = _compile(
        accessor,
        {"widget_styles": {"border_effect": "glow", "border_glow_intensity": "pronounced", "glow_color": "#00ff00"}},
    )
    css = compiler.generate_complete_style_block()

    assert "--widget-glow-color: #00ff00;" in css
    assert "--widget-glow-blur: 16px;" in css
    assert "--widget-glow-opacity: 0.8;" in css
    assert "box-shadow: 0 0 16px 8px rgba(0, 255, 0, 0.8) !important;" in css
    assert compiler.get_widget_effect_attributes() == 'data-border-effect="glow" data-glow-intensity="pronounced"'


def test_shadow_effect_variables(accessor):
    compiler = _compile(accessor, {})
    css = compiler.generate_complete_style_block()

    assert "--widget-box-shadow: 0 2px 4px rgba(0, 0, 0, 0.05);" in css
    assert "box-shadow: 0 1px 2px rgba(15, 23, 42, 0.06) !important;" in css
    assert compiler.get_widget_effect_attributes() == 'data-border-effect="shadow"'


def test_border_width_from_widget_styles(accessor):
    thick = _compile(accessor, {"widget_styles": {"border_width": "thick"}}).generate_complete_style_block()
    numeric = _compile(accessor, {"widget_styles": {"border_width": 2}}).generate_complete_style_block()

    assert "--widget-border-width: 3px;" in thick
    assert "border: 3px solid #d1d5db !important;" in thick
    assert "--widget-border-width: 2px;" in numeric


def test_gradient_backgrounds_are_not_fixed(accessor):
    gradient = _compile(accessor, {"page_background": GRADIENT}).generate_complete_style_block()
    solid = _compile(accessor, {"page_background": "#123456"}).generate_complete_style_block()

    assert f"background: {GRADIENT} !important;" in gradient
    assert "background-attachment: fixed" not in gradient
    assert f"--gradient-page: {GRADIENT};" in gradient
    assert "background: #123456 !important;" in solid
    assert "background-attachment: fixed !important;" in solid


def test_image_background_renders_as_cover(accessor):
    css = _compile(accessor, {"page_background": "https://cdn.example.com/bg.png"}).generate_complete_style_block()
    assert 'background: url("https://cdn.example.com/bg.png") center / cover no-repeat !important;' in css


def test_complete_block_structure(accessor):
    css = _compile(accessor, {}).generate_complete_style_block()

    assert css.startswith("<style>\n:root {\n")
    assert css.endswith("</style>\n")
    assert css.count("</style>") == 1
    for selector in ("body {", "html {", ".widget-item {", ".widget-item:not(.widget-video):hover {", ".page-title {"):
        assert selector in css
    assert css.index(":root {") < css.index("body {") < css.index(".widget-item {")


def test_garbage_tokens_still_produce_a_complete_block(accessor):
    page = {
        "color_tokens": json.dumps({"text": "oops", "background": 5, "gradient": []}),
        "typography_tokens": json.dumps({"effect": "bad", "weight": "heavy", "scale": None, "color": 7}),
        "shape_tokens": json.dumps({"corner": "x", "shadow": [], "button_corner": 3}),
        "spacing_tokens": json.dumps({"values": 5, "page_multiplier": "abc", "vertical_spacing": {"a": 1}}),
        "motion_tokens": json.dumps({"duration": "fast"}),
        "iconography_tokens": json.dumps({"size": [], "color": {}}),
        "widget_styles": json.dumps({"border_width": "huge", "glow_color": 12, "border_effect": "glow", "width": "wide"}),
        "profile_image_size": [1],
        "profile_image_effect": "glow",
        "profile_image_glow_width": "wide",
    }
    css = _compile(accessor, page).generate_complete_style_block()

    assert css.startswith("<style>\n")
    assert css.endswith("</style>\n")
    assert "--color-text-primary: #0f172a;" in css
    assert "--widget-border-radius: 0.75rem;" in css
    assert "--button-corner-radius: 0.75rem;" in css
    assert "--page-vertical-spacing: 24px;" in css
    assert "--profile-image-size: 120px;" in css
    assert "--widget-width: 100%;" in css


def test_malformed_json_columns_still_produce_a_complete_block(accessor):
    page = {"color_tokens": "{not json", "widget_styles": "[[", "colors": "null"}
    css = _compile(accessor, page).generate_complete_style_block()
    assert ":root {" in css
    assert css.endswith("</style>\n")


def test_values_cannot_break_out_of_the_style_block(accessor):
    css = _compile(accessor, {"page_background": "red</style><script>alert(1)</script>;}"}).generate_complete_style_block()

    assert css.count("</style>") == 1
    assert "<script>" not in css


def test_heading_and_body_colors(accessor):
    page = {"typography_tokens": {"color": {"heading": "#abcdef", "body": GRADIENT}}}
    css = _compile(accessor, page).generate_complete_style_block()

    assert "--page-title-color: #abcdef;" in css
    assert "--heading-font-color: #abcdef;" in css
    assert f"--body-font-gradient: {GRADIENT};" in css
    assert "background-clip: text;" in css


def test_title_border_ring_and_shadow(accessor):
    page = {
        "typography_tokens": {
            "effect": {
                "heading": "shadow",
                "shadow": {"color": "#000000", "intensity": 0.8, "depth": 3, "blur": 6},
                "border": {"color": "#222222", "width": 3},
            }
        }
    }
    css = _compile(accessor, page).generate_complete_style_block()

    assert "3px 0px 0 #222222" in css
    assert "0px 3px 0 #222222" in css
    assert "3px 3px 6px rgba(0, 0, 0, 0.8)" in css


def test_profile_image_variables(accessor):
    page = {"profile_image_size": "large", "profile_image_effect": "shadow", "profile_image_radius": 50}
    css = _compile(accessor, page).generate_css_variables()

    assert "--profile-image-size: 180px;" in css
    assert "--profile-image-radius: 50%;" in css
    assert "--profile-image-box-shadow: 4px 4px 8px rgba(0, 0, 0, 0.5);" in css


def test_compiler_loads_theme_through_page_theme_id(accessor):
    result = accessor.create_theme(1, "Floaty", {"spatial_effect": "floating", "page_background": "#101010"})
    compiler = ThemeCSSCompiler({"theme_id": result.theme_id}, accessor=accessor)

    assert compiler.get_spatial_effect_class() == "spatial-floating"
    assert "--page-background: #101010;" in compiler.generate_css_variables()


def test_dominant_background_color():
    assert dominant_background_color("#123") == "#123"
    assert dominant_background_color(GRADIENT) == "#FFFFFF"
    assert dominant_background_color("url(x.png)") == "#ffffff"
    assert dominant_background_color(None) == "#ffffff"


def test_optimal_text_color():
    assert get_optimal_text_color("#ffffff", "#000000") == "#000000"
    assert get_optimal_text_color("#000000", "#111111") == "#ffffff"
    assert get_optimal_text_color("#ffffff", "#eeeeee") == "#000000"
    assert get_optimal_text_color("#8a8a8a", "#999999") == "#f0f0f0"
