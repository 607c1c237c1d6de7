import re
from typing import Optional, Tuple

from style_extract.constants import COLOR_PROPS

RGB_RE = re.compile(r"rgba?\(([^)]+)\)", re.IGNORECASE)


def parse_rgb(text: str) -> Optional[Tuple[int, int, int, float]]:
    match = RGB_RE.fullmatch(text.strip())
    if not match:
        return None
    parts = [p for p in re.split(r"[\s,/]+", match.group(1).strip()) if p]
    if len(parts) < 3:
        return None
    try:
        r, g, b = (int(round(float(p))) for p in parts[:3])
        a = 1.0
        if len(parts) > 3:
            alpha = parts[3]
            a = float(alpha[:-1]) / 100.0 if alpha.endswith("%") else float(alpha)
    except ValueError:
        return None
    return r, g, b, a


def rgb_to_hex(value: str) -> str:
    """Rewrite every opaque rgb()/rgba() occurrence in ``value`` as ``#rrggbb``.

    Translucent colours (alpha < 1) are left exactly as written.
    """

    def replace(match: "re.Match[str]") -> str:
        rgba = parse_rgb(match.group(0))
        if rgba is None:
            return match.group(0)
        r, g, b, a = rgba
        if a < 1:
            return match.group(0)
        return "#{:02x}{:02x}{:02x}".format(*(max(0, min(255, c)) for c in (r, g, b)))

    return RGB_RE.sub(replace, value)


def parse_px(value: str) -> Optional[float]:
    if not value:
        return None
    value = value.strip().lower()
    if not value.endswith("px"):
        return None
    try:
        return float(value[:-2])
    except ValueError:
        return None


def format_number(value: float) -> str:
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    if text in {"-0", ""}:
        return "0"
    return text


def px_to_unitless(value: str, font_size: Optional[float]) -> str:
    px = parse_px(value)
    if px is None or not font_size:
        return value
    return format_number(px / font_size)


def px_to_em(value: str, font_size: Optional[float]) -> str:
    px = parse_px(value)
    if px is None or not font_size:
        return value
    return f"{format_number(px / font_size)}em"


def normalize_value(prop: str, value: str, font_size: Optional[float] = None) -> str:
    if prop in COLOR_PROPS:
        return rgb_to_hex(value)
    if prop == "line-height":
        return px_to_unitless(value, font_size)
    if prop == "letter-spacing":
        return px_to_em(value, font_size)
    return value


def font_size_to_mixin_arg(value: str, root_font_size: float) -> Optional[str]:
    value = (value or "").strip().lower()
    px = parse_px(value)
    if px is not None:
        return format_number(px)
    if value.endswith("rem"):
        try:
            return format_number(float(value[:-3]) * root_font_size)
        except ValueError:
            return None
    return None
