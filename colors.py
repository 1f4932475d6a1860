"""
Event colors. The text color on top of an event is picked from the
background's perceived luminance (Rec. 709 weights).
"""

DARK_TEXT = "#000"
LIGHT_TEXT = "#fff"

DEFAULT_EVENT_COLOR = "#4a90d9"

# above this the background counts as light
LUMINANCE_THRESHOLD = 180

_HEX_DIGITS = set("0123456789abcdefABCDEF")


def parse_hex(value) -> tuple[int, int, int] | None:
    """'#abc', 'abc', '#aabbcc' or 'aabbcc' -> (r, g, b). Anything else -> None."""
    if not isinstance(value, str):
        return None
    digits = value.strip()
    if digits.startswith("#"):
        digits = digits[1:]
    if len(digits) not in (3, 6) or not set(digits) <= _HEX_DIGITS:
        return None
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return (
        int(digits[0:2], 16),
        int(digits[2:4], 16),
        int(digits[4:6], 16),
    )


def normalize_hex(value, default: str | None = DEFAULT_EVENT_COLOR) -> str | None:
    rgb = parse_hex(value)
    if rgb is None:
        return default
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def luminance(rgb: tuple[int, int, int]) -> float:
    r, g, b = rgb
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_color(value) -> str:
    rgb = parse_hex(value)
    if rgb is None:
        return DARK_TEXT
    return DARK_TEXT if luminance(rgb) > LUMINANCE_THRESHOLD else LIGHT_TEXT
