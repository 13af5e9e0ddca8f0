"""Conversion of PDF device colors to the RGB styles used by a surface.

The conversion is deliberately naive: no ICC profiles, no rendering intents.
"""

from typing import NamedTuple, Union

RGBTriple = tuple[int, int, int]

BLACK: RGBTriple = (0, 0, 0)
WHITE: RGBTriple = (255, 255, 255)


class GrayColor(NamedTuple):
    gray: float


class RGBColor(NamedTuple):
    red: float
    green: float
    blue: float


class CMYKColor(NamedTuple):
    cyan: float
    magenta: float
    yellow: float
    black: float


class OtherColor(NamedTuple):
    """Any color that is not in a device color space (patterns, separations,
    Lab, ...). Always painted as black.
    """

    components: tuple[object, ...] = ()


Color = Union[GrayColor, RGBColor, CMYKColor, OtherColor]


def _channel(value: float) -> int:
    """Scale a 0..1 component to 0..255, rounding half up."""
    if value != value:  # NaN
        return 0
    value = min(max(value, 0.0), 1.0)
    return int(value * 255 + 0.5)


def gray(g: float) -> RGBTriple:
    v = _channel(g)
    return (v, v, v)


def rgb(r: float, g: float, b: float) -> RGBTriple:
    return (_channel(r), _channel(g), _channel(b))


def cmyk(c: float, m: float, y: float, k: float) -> RGBTriple:
    """Naive CMYK to RGB: each channel is (1 - ink) * (1 - black)."""
    c, m, y, k = (min(max(v, 0.0), 1.0) for v in (c, m, y, k))
    return (
        _channel((1 - c) * (1 - k)),
        _channel((1 - m) * (1 - k)),
        _channel((1 - y) * (1 - k)),
    )


def to_rgb(color: Color) -> RGBTriple:
    if isinstance(color, GrayColor):
        return gray(color.gray)
    elif isinstance(color, RGBColor):
        return rgb(color.red, color.green, color.blue)
    elif isinstance(color, CMYKColor):
        return cmyk(color.cyan, color.magenta, color.yellow, color.black)
    return BLACK


def rgb2css(value: RGBTriple) -> str:
    return "rgb({},{},{})".format(*value)


def to_css(color: Color) -> str:
    """Return the style string handed to the surface's style setters."""
    return rgb2css(to_rgb(color))
