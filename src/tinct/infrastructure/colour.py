"""Default colour-math capability built on :mod:`colorsys`.

Colours are handled as RGBA floats in ``[0, 1]``. Lightness arithmetic
works in HLS space; mixing interpolates linearly in RGB and blends
alpha alongside. Results are lowercase hex, with an alpha pair only
when the colour is not fully opaque (or the transform sets alpha
explicitly).
"""

from __future__ import annotations

import colorsys
import logging
import re
from dataclasses import dataclass, replace

from tinct.domain.errors import ColourParseError
from tinct.domain.syntax import is_hex, normalise_hex
from tinct.domain.transforms import Transform, TransformCall

logger = logging.getLogger(__name__)

# CSS Color Module Level 4 named colours, plus transparent.
NAMED_COLOURS: dict[str, str] = {
    "aliceblue": "#f0f8ff",
    "antiquewhite": "#faebd7",
    "aqua": "#00ffff",
    "aquamarine": "#7fffd4",
    "azure": "#f0ffff",
    "beige": "#f5f5dc",
    "bisque": "#ffe4c4",
    "black": "#000000",
    "blanchedalmond": "#ffebcd",
    "blue": "#0000ff",
    "blueviolet": "#8a2be2",
    "brown": "#a52a2a",
    "burlywood": "#deb887",
    "cadetblue": "#5f9ea0",
    "chartreuse": "#7fff00",
    "chocolate": "#d2691e",
    "coral": "#ff7f50",
    "cornflowerblue": "#6495ed",
    "cornsilk": "#fff8dc",
    "crimson": "#dc143c",
    "cyan": "#00ffff",
    "darkblue": "#00008b",
    "darkcyan": "#008b8b",
    "darkgoldenrod": "#b8860b",
    "darkgray": "#a9a9a9",
    "darkgreen": "#006400",
    "darkgrey": "#a9a9a9",
    "darkkhaki": "#bdb76b",
    "darkmagenta": "#8b008b",
    "darkolivegreen": "#556b2f",
    "darkorange": "#ff8c00",
    "darkorchid": "#9932cc",
    "darkred": "#8b0000",
    "darksalmon": "#e9967a",
    "darkseagreen": "#8fbc8f",
    "darkslateblue": "#483d8b",
    "darkslategray": "#2f4f4f",
    "darkslategrey": "#2f4f4f",
    "darkturquoise": "#00ced1",
    "darkviolet": "#9400d3",
    "deeppink": "#ff1493",
    "deepskyblue": "#00bfff",
    "dimgray": "#696969",
    "dimgrey": "#696969",
    "dodgerblue": "#1e90ff",
    "firebrick": "#b22222",
    "floralwhite": "#fffaf0",
    "forestgreen": "#228b22",
    "fuchsia": "#ff00ff",
    "gainsboro": "#dcdcdc",
    "ghostwhite": "#f8f8ff",
    "gold": "#ffd700",
    "goldenrod": "#daa520",
    "gray": "#808080",
    "green": "#008000",
    "greenyellow": "#adff2f",
    "grey": "#808080",
    "honeydew": "#f0fff0",
    "hotpink": "#ff69b4",
    "indianred": "#cd5c5c",
    "indigo": "#4b0082",
    "ivory": "#fffff0",
    "khaki": "#f0e68c",
    "lavender": "#e6e6fa",
    "lavenderblush": "#fff0f5",
    "lawngreen": "#7cfc00",
    "lemonchiffon": "#fffacd",
    "lightblue": "#add8e6",
    "lightcoral": "#f08080",
    "lightcyan": "#e0ffff",
    "lightgoldenrodyellow": "#fafad2",
    "lightgray": "#d3d3d3",
    "lightgreen": "#90ee90",
    "lightgrey": "#d3d3d3",
    "lightpink": "#ffb6c1",
    "lightsalmon": "#ffa07a",
    "lightseagreen": "#20b2aa",
    "lightskyblue": "#87cefa",
    "lightslategray": "#778899",
    "lightslategrey": "#778899",
    "lightsteelblue": "#b0c4de",
    "lightyellow": "#ffffe0",
    "lime": "#00ff00",
    "limegreen": "#32cd32",
    "linen": "#faf0e6",
    "magenta": "#ff00ff",
    "maroon": "#800000",
    "mediumaquamarine": "#66cdaa",
    "mediumblue": "#0000cd",
    "mediumorchid": "#ba55d3",
    "mediumpurple": "#9370db",
    "mediumseagreen": "#3cb371",
    "mediumslateblue": "#7b68ee",
    "mediumspringgreen": "#00fa9a",
    "mediumturquoise": "#48d1cc",
    "mediumvioletred": "#c71585",
    "midnightblue": "#191970",
    "mintcream": "#f5fffa",
    "mistyrose": "#ffe4e1",
    "moccasin": "#ffe4b5",
    "navajowhite": "#ffdead",
    "navy": "#000080",
    "oldlace": "#fdf5e6",
    "olive": "#808000",
    "olivedrab": "#6b8e23",
    "orange": "#ffa500",
    "orangered": "#ff4500",
    "orchid": "#da70d6",
    "palegoldenrod": "#eee8aa",
    "palegreen": "#98fb98",
    "paleturquoise": "#afeeee",
    "palevioletred": "#db7093",
    "papayawhip": "#ffefd5",
    "peachpuff": "#ffdab9",
    "peru": "#cd853f",
    "pink": "#ffc0cb",
    "plum": "#dda0dd",
    "powderblue": "#b0e0e6",
    "purple": "#800080",
    "rebeccapurple": "#663399",
    "red": "#ff0000",
    "rosybrown": "#bc8f8f",
    "royalblue": "#4169e1",
    "saddlebrown": "#8b4513",
    "salmon": "#fa8072",
    "sandybrown": "#f4a460",
    "seagreen": "#2e8b57",
    "seashell": "#fff5ee",
    "sienna": "#a0522d",
    "silver": "#c0c0c0",
    "skyblue": "#87ceeb",
    "slateblue": "#6a5acd",
    "slategray": "#708090",
    "slategrey": "#708090",
    "snow": "#fffafa",
    "springgreen": "#00ff7f",
    "steelblue": "#4682b4",
    "tan": "#d2b48c",
    "teal": "#008080",
    "thistle": "#d8bfd8",
    "tomato": "#ff6347",
    "turquoise": "#40e0d0",
    "violet": "#ee82ee",
    "wheat": "#f5deb3",
    "white": "#ffffff",
    "whitesmoke": "#f5f5f5",
    "yellow": "#ffff00",
    "yellowgreen": "#9acd32",
    "transparent": "#00000000",
}

_FUNCTIONAL = re.compile(r"^(?P<name>rgba?|hsla?|hsva?)\((?P<args>[^()]*)\)$")


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class RGBA:
    """A colour as red, green, blue and alpha floats in ``[0, 1]``."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_hex(cls, value: str) -> RGBA:
        digits = normalise_hex(value).lstrip("#")
        channels = [int(digits[i : i + 2], 16) / 255 for i in range(0, len(digits), 2)]
        return cls(*channels)

    @property
    def opaque(self) -> bool:
        return round(self.a * 255) >= 255

    def to_hex(self, *, with_alpha: bool | None = None) -> str:
        """Render as ``#rrggbb`` or ``#rrggbbaa``.

        *with_alpha* forces (True) or suppresses (False) the alpha pair;
        by default it is written only when the colour is translucent.
        """
        channels = [self.r, self.g, self.b]
        if with_alpha or (with_alpha is None and not self.opaque):
            channels.append(self.a)
        return "#" + "".join(f"{round(_clamp(c) * 255):02x}" for c in channels)

    def to_hls(self) -> tuple[float, float, float]:
        return colorsys.rgb_to_hls(self.r, self.g, self.b)

    @classmethod
    def from_hls(cls, hue: float, lightness: float, saturation: float, a: float = 1.0) -> RGBA:
        return cls(*colorsys.hls_to_rgb(hue, _clamp(lightness), _clamp(saturation)), a=a)


def _number(text: str, expression: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ColourParseError(expression, f"expected a number, got {text!r}") from None


def _channel(text: str, expression: str, *, scale: float) -> float:
    """Parse a channel as a fraction; percentages divide by 100, numbers by *scale*."""
    text = text.strip()
    if text.endswith("%"):
        return _clamp(_number(text[:-1], expression) / 100)
    return _clamp(_number(text, expression) / scale)


def _hue(text: str, expression: str) -> float:
    text = text.strip().lower()
    if text.endswith("deg"):
        text = text[:-3]
    elif text.endswith("turn"):
        return _number(text[:-4], expression) % 1.0
    return (_number(text, expression) % 360) / 360


def _split_components(args: str) -> list[str]:
    # rgb(1, 2, 3) | rgb(1 2 3) | rgb(1 2 3 / 50%)
    body, _, alpha = args.partition("/")
    parts = [p for p in re.split(r"[\s,]+", body.strip()) if p]
    if alpha.strip():
        parts.append(alpha.strip())
    return parts


def parse_colour(expression: str) -> RGBA:
    """Parse hex, a named colour, or ``rgb``/``hsl``/``hsv`` functional notation."""
    text = expression.strip().lower()
    if not text:
        raise ColourParseError(expression, "empty colour expression")
    if is_hex(text):
        return RGBA.from_hex(text)
    if text in NAMED_COLOURS:
        return RGBA.from_hex(NAMED_COLOURS[text])

    match = _FUNCTIONAL.match(text)
    if match is None:
        raise ColourParseError(expression, "unrecognised colour syntax")

    name = match.group("name")
    parts = _split_components(match.group("args"))
    if len(parts) not in (3, 4):
        raise ColourParseError(expression, f"{name}() takes 3 or 4 components, got {len(parts)}")
    alpha = _channel(parts[3], expression, scale=1.0) if len(parts) == 4 else 1.0

    if name.startswith("rgb"):
        r, g, b = (_channel(p, expression, scale=255.0) for p in parts[:3])
        return RGBA(r, g, b, alpha)

    h = _hue(parts[0], expression)
    s = _channel(parts[1], expression, scale=100.0)
    third = _channel(parts[2], expression, scale=100.0)
    if name.startswith("hsl"):
        return RGBA.from_hls(h, third, s, alpha)
    return RGBA(*colorsys.hsv_to_rgb(h, s, third), a=alpha)


def mix(first: RGBA, second: RGBA, percent: float = 50.0) -> RGBA:
    """Interpolate from *first* toward *second* by *percent* (0 to 100)."""
    t = _clamp(percent / 100)
    return RGBA(
        r=first.r + (second.r - first.r) * t,
        g=first.g + (second.g - first.g) * t,
        b=first.b + (second.b - first.b) * t,
        a=first.a + (second.a - first.a) * t,
    )


_BLACK = RGBA(0.0, 0.0, 0.0)
_WHITE = RGBA(1.0, 1.0, 1.0)


class ColorsysColourMath:
    """Colour transforms over :class:`RGBA` values.

    Satisfies the :class:`~tinct.domain.transforms.ColourMath` protocol.
    """

    def to_hex(self, expression: str) -> str:
        return parse_colour(expression).to_hex()

    def apply(self, call: TransformCall) -> str:
        try:
            return self._apply(call)
        except ColourParseError as exc:
            if exc.expression == call.expression:
                raise
            raise ColourParseError(call.expression, str(exc)) from exc

    def _arg(self, call: TransformCall, index: int, default: str | None = None) -> str:
        if index < len(call.args) and call.args[index]:
            return call.args[index]
        if default is not None:
            return default
        msg = f"{call.transform.value}() is missing argument {index + 1}"
        raise ColourParseError(call.expression, msg)

    def _amount(self, call: TransformCall, index: int, default: str | None = None) -> float:
        return _number(self._arg(call, index, default).rstrip("%"), call.expression)

    def _apply(self, call: TransformCall) -> str:
        transform = call.transform

        if transform is Transform.PASSTHROUGH:
            return self.to_hex(call.expression)
        if transform is Transform.CSS:
            return self.to_hex(", ".join(call.args))

        colour = parse_colour(self._arg(call, 0))
        logger.debug("Applying %s to %s", transform.value, call.args)

        if transform in (Transform.LIGHTEN, Transform.DARKEN):
            amount = self._amount(call, 1)
            if transform is Transform.DARKEN:
                amount = -amount
            hue, lightness, saturation = colour.to_hls()
            scaled = lightness * (1 + amount / 100)
            return RGBA.from_hls(hue, scaled, saturation, colour.a).to_hex()
        if transform is Transform.FADE:
            factor = self._amount(call, 1)
            return replace(colour, a=_clamp(colour.a * (1 - factor))).to_hex(with_alpha=True)
        if transform is Transform.SOLIDIFY:
            factor = self._amount(call, 1)
            return replace(colour, a=_clamp(colour.a * (1 + factor))).to_hex(with_alpha=True)
        if transform is Transform.ALPHA:
            return replace(colour, a=_clamp(self._amount(call, 1))).to_hex(with_alpha=True)
        if transform is Transform.INVERT:
            hue, lightness, saturation = colour.to_hls()
            return RGBA.from_hls(hue, 1 - lightness, saturation, colour.a).to_hex()
        if transform is Transform.MIX:
            other = parse_colour(self._arg(call, 1))
            return mix(colour, other, self._amount(call, 2, "50")).to_hex()
        if transform is Transform.SHADE:
            return mix(colour, replace(_BLACK, a=colour.a), self._amount(call, 1)).to_hex()
        if transform is Transform.TINT:
            return mix(colour, replace(_WHITE, a=colour.a), self._amount(call, 1)).to_hex()

        msg = f"unsupported transform {transform.value!r}"
        raise ColourParseError(call.expression, msg)
