import pytest

from colors import (
    DARK_TEXT,
    DEFAULT_EVENT_COLOR,
    LIGHT_TEXT,
    contrast_color,
    normalize_hex,
    parse_hex,
)


def test_white_and_black():
    assert contrast_color("#FFFFFF") == DARK_TEXT == "#000"
    assert contrast_color("#000000") == LIGHT_TEXT == "#fff"


@pytest.mark.parametrize("value, expected", [
    ("fff", DARK_TEXT),
    ("#ffff00", DARK_TEXT),
    ("#aabbcc", DARK_TEXT),
    ("#abc", DARK_TEXT),
    ("#0000ff", LIGHT_TEXT),
    ("00F", LIGHT_TEXT),
    ("#4a90d9", LIGHT_TEXT),
    ("#ff0000", LIGHT_TEXT),
])
def test_contrast_by_luminance(value, expected):
    assert contrast_color(value) == expected


@pytest.mark.parametrize("value", [None, "", "#", "#12", "#1234", "zzzzzz", "#12345g", 0xFFFFFF])
def test_malformed_defaults_to_dark(value):
    assert contrast_color(value) == DARK_TEXT


def test_result_is_one_of_two_values():
    seen = {contrast_color(f"#{v:02x}{v:02x}{v:02x}") for v in range(0, 256, 5)}
    assert seen == {DARK_TEXT, LIGHT_TEXT}


def test_parse_hex_short_and_long_forms():
    assert parse_hex("#abc") == (0xAA, 0xBB, 0xCC)
    assert parse_hex("AABBCC") == (0xAA, 0xBB, 0xCC)
    assert parse_hex("#abcd") is None


def test_normalize_hex():
    assert normalize_hex("ABC") == "#aabbcc"
    assert normalize_hex("#FF8800") == "#ff8800"
    assert normalize_hex("nope") == DEFAULT_EVENT_COLOR
    assert normalize_hex("nope", default=None) is None
