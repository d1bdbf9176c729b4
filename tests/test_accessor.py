import json

from sqlalchemy import create_engine, update
from sqlalchemy.orm import sessionmaker

from podabio_theme.accessor import ThemeAccessor
from podabio_theme.background import Background
from podabio_theme.cache import ThemeCache
from podabio_theme.models import Theme
from podabio_theme.repository import ThemeSchema, ThemesRepository
from podabio_theme.schemas import FontPair


def _create(accessor, user_id=1, name="Mine", **data):
    result = accessor.create_theme(user_id, name, data)
    assert result.success, result.error
    return result.theme_id


def test_create_get_update_delete_round_trip(accessor):
    theme_id = _create(
        accessor,
        colors={"primary": "#111111", "secondary": "#fafafa", "accent": "#ff6600"},
        page_background="linear-gradient(135deg, #000000 0%, #ffffff 100%)",
        spatial_effect="glass",
    )

    record = accessor.get_theme(theme_id)
    assert record["name"] == "Mine"
    assert record["user_id"] == 1
    assert json.loads(record["colors"]) == {"primary": "#111111", "secondary": "#fafafa", "accent": "#ff6600"}
    assert record["spatial_effect"] == "glass"

    assert accessor.update_user_theme(theme_id, 1, name="Renamed", theme_data={"page_background": "null"})
    updated = accessor.get_theme(theme_id)
    assert updated["name"] == "Renamed"
    assert updated["page_background"] is None
    assert updated["spatial_effect"] == "glass"

    assert accessor.delete_user_theme(theme_id, 1)
    assert accessor.get_theme(theme_id) is None


def test_create_defaults_empty_json_and_no_spatial_effect(accessor):
    theme_id = _create(accessor)
    record = accessor.get_theme(theme_id)

    assert record["colors"] == "{}"
    assert record["fonts"] == "{}"
    assert record["spatial_effect"] == "none"
    assert record["is_active"] is True


def test_widget_styles_are_sanitized_on_write(accessor):
    theme_id = _create(accessor, widget_styles={"border_width": "enormous", "glow_color": "blue"})
    stored = json.loads(accessor.get_theme(theme_id)["widget_styles"])

    assert stored["border_width"] == "none"
    assert stored["glow_color"] == "#000000"
    assert stored["shape"] == "rounded"


def test_user_theme_limit(accessor):
    for index in range(3):
        _create(accessor, name=f"Theme {index}")

    result = accessor.create_theme(1, "One too many", {})
    assert not result.success
    assert result.error_code == "limit_exceeded"
    assert result.error == "You can create a maximum of 3 custom themes. Please delete one first."

    assert accessor.create_theme(2, "Other user", {}).success


def test_invalid_names_and_colors_are_rejected(accessor):
    empty = accessor.create_theme(1, "   ", {})
    assert empty.error_code == "validation"
    assert empty.error == "Theme name must be 1-100 characters"

    too_long = accessor.create_theme(1, "x" * 101, {})
    assert too_long.error_code == "validation"

    bad_color = accessor.create_theme(1, "Bad", {"colors": {"primary": "red"}})
    assert not bad_color.success
    assert bad_color.error_code == "validation"
    assert accessor.get_user_themes(1) == []


def test_undecodable_json_strings_are_rejected_before_storage(accessor):
    broken = accessor.create_theme(1, "Broken", {"color_tokens": "{not json"})
    assert not broken.success
    assert broken.error_code == "validation"
    assert broken.error == "Invalid color_tokens JSON"

    assert not accessor.create_theme(1, "Null fonts", {"fonts": "null"}).success
    assert accessor.get_user_themes(1) == []

    for index in range(3):
        _create(accessor, name=f"Theme {index}", color_tokens="null")
    assert len(accessor.get_user_themes(1)) == 3

    theme_id = accessor.get_user_themes(1)[0]["id"]
    assert not accessor.update_user_theme(theme_id, 1, theme_data={"shape_tokens": "[1, 2"})


def test_update_and_delete_require_ownership(accessor):
    theme_id = _create(accessor)

    assert not accessor.update_user_theme(theme_id, 2, name="Stolen")
    assert not accessor.delete_user_theme(theme_id, 2)
    assert accessor.get_theme(theme_id)["name"] == "Mine"


def test_update_without_changes_returns_false(accessor):
    theme_id = _create(accessor)
    assert not accessor.update_user_theme(theme_id, 1)


def test_update_invalidates_cached_theme(accessor):
    theme_id = _create(accessor, spatial_effect="depth")

    assert accessor.get_cached_theme(theme_id)["spatial_effect"] == "depth"
    assert theme_id in accessor.cache

    accessor.update_user_theme(theme_id, 1, theme_data={"spatial_effect": "tilt"})
    assert theme_id not in accessor.cache
    assert accessor.get_cached_theme(theme_id)["spatial_effect"] == "tilt"


def test_cached_theme_cannot_be_mutated_by_callers(accessor):
    theme_id = _create(accessor)
    first = accessor.get_cached_theme(theme_id)
    first["name"] = "changed"
    assert accessor.get_cached_theme(theme_id)["name"] == "Mine"

    accessor.clear_cache()
    assert len(accessor.cache) == 0


def test_inactive_themes_are_hidden(accessor, session_factory):
    theme_id = _create(accessor)
    with session_factory() as session:
        session.execute(update(Theme.__table__).where(Theme.__table__.c.id == theme_id).values(is_active=False))
        session.commit()

    assert accessor.get_theme(theme_id) is None
    assert accessor.get_user_themes(1) == []


def test_system_and_user_listings(accessor, session_factory):
    with session_factory() as session:
        system_id = ThemesRepository(session, ThemeSchema()).insert(
            {"name": "Classic", "colors": "{}", "is_active": True}
        )
    user_id = _create(accessor, name="Aurora")

    assert [theme["id"] for theme in accessor.get_system_themes()] == [system_id]
    assert [theme["id"] for theme in accessor.get_user_themes(1)] == [user_id]
    assert [theme["name"] for theme in accessor.get_all_themes()] == ["Aurora", "Classic"]


def test_clone_theme(accessor):
    source_id = _create(accessor, colors={"primary": "#123456"}, spatial_effect="floating")

    clone = accessor.clone_theme(source_id, 2)
    assert clone.success
    record = accessor.get_theme(clone.theme_id)
    assert record["name"] == "Mine Copy"
    assert record["user_id"] == 2
    assert json.loads(record["colors"]) == {"primary": "#123456"}
    assert record["spatial_effect"] == "floating"

    missing = accessor.clone_theme(9999, 2)
    assert not missing.success
    assert missing.error == "Theme not found"
    assert missing.error_code == "not_found"


def test_store_failures_surface_as_persistence_errors():
    engine = create_engine("sqlite://", future=True)
    broken = ThemeAccessor(
        session_factory=sessionmaker(bind=engine, future=True),
        cache=ThemeCache(),
        schema=ThemeSchema(),
    )

    result = broken.create_theme(1, "Nowhere", {})
    assert not result.success
    assert result.error_code == "persistence"
    assert broken.get_theme(1) is None
    assert broken.get_all_themes() == []


def test_legacy_schema_without_token_columns(legacy_accessor):
    result = legacy_accessor.create_theme(
        1,
        "Old",
        {"colors": {"primary": "#222222", "secondary": "#fafafa"}, "color_tokens": {"text": {"primary": "#999999"}}},
    )
    assert result.success

    record = legacy_accessor.get_theme(result.theme_id)
    assert "color_tokens" not in record
    assert "layout_density" not in record

    config = legacy_accessor.get_theme_config({"theme_id": result.theme_id})
    assert config.legacy_color_overrides is True
    assert config.colors.primary == "#222222"
    assert config.page_background == Background.solid("#fafafa")
    assert config.layout_density == "comfortable"

    assert legacy_accessor.update_user_theme(
        result.theme_id, 1, theme_data={"shape_tokens": {"corner": {"md": "0"}}}
    )
    legacy_accessor.clear_theme_columns_cache()
    reloaded = legacy_accessor.get_theme(result.theme_id)
    assert reloaded["name"] == "Old"
    assert "shape_tokens" not in reloaded


def test_validate_theme():
    accessor = ThemeAccessor(cache=ThemeCache(), schema=ThemeSchema())

    assert accessor.validate_theme({"id": 1, "name": "Ok", "colors": '{"primary": "#fff"}'})
    assert accessor.validate_theme({"id": 1, "name": "Ok", "color_tokens": "null"})
    assert not accessor.validate_theme({"id": 1, "name": "Bad", "colors": '{"primary": "red"}'})
    assert not accessor.validate_theme({"id": 1, "name": "Bad", "fonts": "{broken"})
    assert not accessor.validate_theme({"id": 1, "name": "Bad", "color_tokens": "42"})
    assert not accessor.validate_theme({"id": 1, "name": ""})
    assert not accessor.validate_theme(None)


def test_colors_resolve_page_then_theme_then_tokens_then_defaults(accessor):
    page = {"colors": '{"primary": "#111111"}'}
    theme = {
        "colors": {"primary": "#222222", "accent": "#333333"},
        "color_tokens": {"background": {"base": "#444444"}},
    }

    colors = accessor.get_theme_colors(page, theme)
    assert (colors.primary, colors.secondary, colors.accent) == ("#111111", "#444444", "#333333")

    defaults = accessor.get_theme_colors({}, {})
    assert (defaults.primary, defaults.secondary, defaults.accent) == ("#000000", "#ffffff", "#0066ff")


def test_fonts_resolution(accessor):
    page = {"page_primary_font": "Lora"}
    theme = {"typography_tokens": {"font": {"body": "Roboto"}}, "widget_secondary_font": "Open Sans"}

    assert accessor.get_page_fonts(page, theme) == FontPair(primary_font="Lora", secondary_font="Roboto")
    assert accessor.get_widget_fonts(page, theme) == FontPair(primary_font="Lora", secondary_font="Open Sans")
    assert accessor.get_theme_fonts({}, {}) == FontPair(primary_font="Inter", secondary_font="Inter")

    tokens_win = {"typography_tokens": {"font": {"heading": "Poppins"}}}
    assert accessor.get_page_fonts(page, tokens_win).primary_font == "Poppins"


def test_background_resolution_order(accessor):
    gradient = "linear-gradient(135deg, #000000 0%, #ffffff 100%)"
    assert accessor.get_page_background({"page_background": gradient}, {"page_background": "#abcdef"}).is_gradient
    assert accessor.get_page_background({}, {"page_background": "#abcdef"}) == Background.solid("#abcdef")

    from_tokens = accessor.get_page_background({}, {"color_tokens": {"background": {"base": "#101010"}}})
    assert from_tokens == Background.solid("#101010")

    assert accessor.get_page_background({}, {}) == Background.solid("#f5f7fa")
    assert accessor.get_widget_background({}, {}) == Background.solid("#ffffff")
    assert accessor.get_widget_border_color({}, {}) == Background.solid("#d1d5db")


def test_legacy_colors_project_onto_backgrounds(accessor):
    page = {"colors": {"secondary": "#fafafa"}}

    assert accessor.get_page_background(page, {}) == Background.solid("#fafafa")
    assert accessor.get_widget_background(page, {}) == Background.solid("#DCDCDC")


def test_spatial_effect_and_widget_styles(accessor):
    assert accessor.get_spatial_effect({"spatial_effect": "glass"}, {"spatial_effect": "depth"}) == "glass"
    assert accessor.get_spatial_effect({"spatial_effect": "sparkle"}, {"spatial_effect": "depth"}) == "depth"
    assert accessor.get_spatial_effect({}, {}) == "none"

    styles = accessor.get_widget_styles(
        {"widget_styles": '{"border_effect": "glow"}'},
        {"widget_styles": {"border_effect": "shadow", "shape": "square"}},
    )
    assert styles["border_effect"] == "glow"
    assert styles["shape"] == "square"


def test_malformed_json_never_raises(accessor):
    page = {
        "colors": "{broken",
        "widget_styles": "[1, 2]",
        "color_tokens": "nope",
        "spacing_tokens": '{"base_scale": "oops"}',
    }

    config = accessor.get_theme_config(page, {})
    assert config.colors.primary == "#000000"
    assert config.widget_styles["border_effect"] == "shadow"
    assert config.tokens.spacing["values"]["md"] == "2rem"


def test_token_overrides_and_shape_corner_replacement(accessor):
    page = {"token_overrides": {"colors": {"accent": {"primary": "#abcdef"}}, "bogus": 5}}
    theme = {"shape_tokens": {"corner": {"md": "4px"}}}

    tokens = accessor.get_theme_tokens(page, theme)
    assert tokens.colors["accent"]["primary"] == "#abcdef"
    assert tokens.colors["accent"]["muted"] == "#e0edff"
    assert tokens.shape["corner"] == {"md": "4px"}
    assert tokens.shape["border_width"]["regular"] == "2px"
    assert tokens.layout_density == "comfortable"


def test_theme_config_loads_theme_from_page_theme_id(accessor):
    theme_id = _create(accessor, spatial_effect="floating", layout_density="compact")

    config = accessor.get_theme_config({"theme_id": theme_id})
    assert config.spatial_effect == "floating"
    assert config.layout_density == "compact"
    assert theme_id in accessor.cache


def test_build_google_fonts_url(accessor):
    url = accessor.build_google_fonts_url(FontPair(primary_font="Open Sans", secondary_font="Inter"))
    assert url == (
        "https://fonts.googleapis.com/css2?family=Open+Sans:wght@400;600;700"
        "&family=Inter:wght@400;600;700&display=swap"
    )
    assert accessor.build_google_fonts_url({"heading": "Inter", "body": "Inter"}).count("family=") == 1
    assert accessor.build_google_fonts_url([]) == ""
    assert accessor.build_google_fonts_url(["", None]) == ""
