import pytest

from podabio_theme.background import Background


@pytest.mark.parametrize("raw", [None, "", "   ", "null", "NULL"])
def test_empty_values_parse_to_none(raw):
    assert Background.parse(raw) is None


def test_gradients_are_detected_by_function_name():
    for raw in (
        "linear-gradient(135deg, #000 0%, #fff 100%)",
        "radial-gradient(circle, #000, #fff)",
        "repeating-conic-gradient(#000 0 25%, #fff 0 50%)",
    ):
        background = Background.parse(raw)
        assert background.kind == "gradient"
        assert background.is_gradient
        assert background.css() == raw


def test_url_function_unwraps_to_image():
    background = Background.parse("url('https://cdn.example.com/cover.png')")
    assert background == Background(kind="image", value="https://cdn.example.com/cover.png")
    assert background.css() == 'url("https://cdn.example.com/cover.png") center / cover no-repeat'


def test_bare_http_url_is_an_image():
    background = Background.parse("https://cdn.example.com/a.jpg")
    assert background.kind == "image"
    assert not background.is_gradient


def test_everything_else_is_solid():
    background = Background.parse("  #112233 ")
    assert background == Background.solid("#112233")
    assert str(background) == "#112233"


def test_quotes_in_image_urls_are_escaped():
    background = Background(kind="image", value='https://x.test/a"b.png')
    assert background.css() == 'url("https://x.test/a%22b.png") center / cover no-repeat'
