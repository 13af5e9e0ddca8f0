"""The closed set of content-stream operators understood by the interpreter.

Every keyword of a content stream is decoded into one or more of the
variants below. Keywords the interpreter has no use for become
:class:`Ignored`, so the interpreter only ever sees these classes.

Reference: PDF Reference, Appendix A, Operator Summary
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Union

from pdfminer.casting import safe_cmyk, safe_float, safe_matrix, safe_rgb
from pdfminer.psparser import PSLiteral, literal_name
from pdfminer.utils import Matrix, Point

from pdfcanvas.pdfcolor import CMYKColor, Color, GrayColor, OtherColor, RGBColor
from pdfcanvas.pdfexceptions import PDFOperatorParseError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveState:
    pass


@dataclass(frozen=True)
class RestoreState:
    pass


@dataclass(frozen=True)
class Transform:
    matrix: Matrix


@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float


@dataclass(frozen=True)
class CurveTo:
    x1: float
    y1: float
    x2: float
    y2: float
    x3: float
    y3: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ClosePath:
    pass


@dataclass(frozen=True)
class Stroke:
    pass


@dataclass(frozen=True)
class Fill:
    evenodd: bool = False


@dataclass(frozen=True)
class FillAndStroke:
    evenodd: bool = False


@dataclass(frozen=True)
class EndPath:
    pass


@dataclass(frozen=True)
class StrokeColor:
    color: Color


@dataclass(frozen=True)
class FillColor:
    color: Color


@dataclass(frozen=True)
class LineWidth:
    width: float


@dataclass(frozen=True)
class LineCap:
    cap: str


@dataclass(frozen=True)
class LineJoin:
    join: str


@dataclass(frozen=True)
class MiterLimit:
    limit: float


@dataclass(frozen=True)
class BeginText:
    pass


@dataclass(frozen=True)
class EndText:
    pass


@dataclass(frozen=True)
class SetTextMatrix:
    matrix: Matrix


@dataclass(frozen=True)
class TextNewline:
    pass


@dataclass(frozen=True)
class TextFont:
    name: str
    size: float


@dataclass(frozen=True)
class CharSpacing:
    spacing: float


@dataclass(frozen=True)
class WordSpacing:
    spacing: float


@dataclass(frozen=True)
class TextRise:
    rise: float


@dataclass(frozen=True)
class TextLeading:
    leading: float


@dataclass(frozen=True)
class HorizontalScaling:
    scaling: float


@dataclass(frozen=True)
class TextDraw:
    text: bytes


@dataclass(frozen=True)
class TextDrawAdjusted:
    array: tuple[object, ...]


@dataclass(frozen=True)
class Ignored:
    name: str


Operator = Union[
    SaveState,
    RestoreState,
    Transform,
    MoveTo,
    LineTo,
    CurveTo,
    Rect,
    ClosePath,
    Stroke,
    Fill,
    FillAndStroke,
    EndPath,
    StrokeColor,
    FillColor,
    LineWidth,
    LineCap,
    LineJoin,
    MiterLimit,
    BeginText,
    EndText,
    SetTextMatrix,
    TextNewline,
    TextFont,
    CharSpacing,
    WordSpacing,
    TextRise,
    TextLeading,
    HorizontalScaling,
    TextDraw,
    TextDrawAdjusted,
    Ignored,
]

LINE_CAPS = ("butt", "round", "square")
LINE_JOINS = ("miter", "round", "bevel")


def _operands(name: str, args: Sequence[object], n: int) -> Sequence[object]:
    """Return the last `n` operands, like the stack pop of PDFPageInterpreter."""
    if len(args) < n:
        raise PDFOperatorParseError(
            f"Operator {name!r} needs {n} operands, got {len(args)}"
        )
    if len(args) > n:
        log.debug("Discarding extra operands for %r: %r", name, args[:-n])
    return args[len(args) - n :]


def _numbers(name: str, args: Sequence[object], n: int) -> list[float]:
    values = [safe_float(arg) for arg in _operands(name, args, n)]
    result = [v for v in values if v is not None]
    if len(result) != n:
        raise PDFOperatorParseError(
            f"Cannot decode {name!r} because not all values "
            f"in {list(args[-n:])!r} can be parsed as floats"
        )
    return result


def _matrix(name: str, args: Sequence[object]) -> Matrix:
    matrix = safe_matrix(*_operands(name, args, 6))
    if matrix is None:
        raise PDFOperatorParseError(
            f"Cannot decode {name!r} because not all values "
            f"in {list(args[-6:])!r} can be parsed as floats"
        )
    return matrix


def _text(name: str, args: Sequence[object]) -> bytes:
    (s,) = _operands(name, args, 1)
    if not isinstance(s, bytes):
        raise PDFOperatorParseError(f"Operator {name!r} needs a string, got {s!r}")
    return s


def _style(name: str, args: Sequence[object], styles: tuple[str, ...]) -> str:
    (value,) = _numbers(name, args, 1)
    if value not in range(len(styles)):
        raise PDFOperatorParseError(f"Invalid value for {name!r}: {value!r}")
    return styles[int(value)]


def decode_color(name: str, args: Sequence[object]) -> Color:
    """Decode the operands of SC, SCN, sc and scn.

    The color space is inferred from the number of components; a pattern
    name makes the color an OtherColor.
    """
    if not args:
        raise PDFOperatorParseError(f"Operator {name!r} needs at least one operand")
    if isinstance(args[-1], PSLiteral):
        return OtherColor(tuple(args))
    values = [safe_float(arg) for arg in args]
    components = [v for v in values if v is not None]
    if len(components) != len(args):
        raise PDFOperatorParseError(
            f"Cannot decode {name!r} because not all values "
            f"in {list(args)!r} can be parsed as floats"
        )
    if len(components) == 1:
        return GrayColor(components[0])
    elif len(components) == 3:
        return RGBColor(*components)
    elif len(components) == 4:
        return CMYKColor(*components)
    return OtherColor(tuple(components))


def _gray(name: str, args: Sequence[object]) -> Color:
    return GrayColor(*_numbers(name, args, 1))


def _rgb(name: str, args: Sequence[object]) -> Color:
    value = safe_rgb(*_operands(name, args, 3))
    if value is None:
        raise PDFOperatorParseError(f"Cannot decode RGB color {list(args)!r}")
    return RGBColor(*value)


def _cmyk(name: str, args: Sequence[object]) -> Color:
    value = safe_cmyk(*_operands(name, args, 4))
    if value is None:
        raise PDFOperatorParseError(f"Cannot decode CMYK color {list(args)!r}")
    return CMYKColor(*value)


def _font(name: str, args: Sequence[object]) -> TextFont:
    (fontid, size) = _operands(name, args, 2)
    fontsize = safe_float(size)
    if fontsize is None:
        raise PDFOperatorParseError(f"Invalid font size {size!r} for {name!r}")
    if isinstance(fontid, PSLiteral):
        fontname = literal_name(fontid)
    else:
        fontname = str(fontid)
    return TextFont(fontname, fontsize)


def _show_adjusted(name: str, args: Sequence[object]) -> TextDrawAdjusted:
    (seq,) = _operands(name, args, 1)
    if not isinstance(seq, list):
        raise PDFOperatorParseError(f"Operator {name!r} needs an array, got {seq!r}")
    return TextDrawAdjusted(tuple(seq))


def _next_line_show(name: str, args: Sequence[object]) -> list[Operator]:
    (aw, ac, s) = _operands(name, args, 3)
    (wordspace, charspace) = _numbers(name, [aw, ac], 2)
    return [
        WordSpacing(wordspace),
        CharSpacing(charspace),
        TextNewline(),
        TextDraw(_text(name, [s])),
    ]


def _curve_final_replicated(name: str, args: Sequence[object]) -> CurveTo:
    (x1, y1, x3, y3) = _numbers(name, args, 4)
    return CurveTo(x1, y1, x3, y3, x3, y3)


_Decoder = Callable[[str, Sequence[object]], list[Operator]]

_DECODERS: dict[str, _Decoder] = {
    # special graphics state
    "q": lambda n, a: [SaveState()],
    "Q": lambda n, a: [RestoreState()],
    "cm": lambda n, a: [Transform(_matrix(n, a))],
    # general graphics state
    "w": lambda n, a: [LineWidth(*_numbers(n, a, 1))],
    "J": lambda n, a: [LineCap(_style(n, a, LINE_CAPS))],
    "j": lambda n, a: [LineJoin(_style(n, a, LINE_JOINS))],
    "M": lambda n, a: [MiterLimit(*_numbers(n, a, 1))],
    # path construction
    "m": lambda n, a: [MoveTo(*_numbers(n, a, 2))],
    "l": lambda n, a: [LineTo(*_numbers(n, a, 2))],
    "c": lambda n, a: [CurveTo(*_numbers(n, a, 6))],
    "y": lambda n, a: [_curve_final_replicated(n, a)],
    "re": lambda n, a: [Rect(*_numbers(n, a, 4))],
    "h": lambda n, a: [ClosePath()],
    # path painting
    "S": lambda n, a: [Stroke()],
    "s": lambda n, a: [ClosePath(), Stroke()],
    "f": lambda n, a: [Fill()],
    "F": lambda n, a: [Fill()],
    "f*": lambda n, a: [Fill(evenodd=True)],
    "B": lambda n, a: [FillAndStroke()],
    "B*": lambda n, a: [FillAndStroke(evenodd=True)],
    "b": lambda n, a: [ClosePath(), FillAndStroke()],
    "b*": lambda n, a: [ClosePath(), FillAndStroke(evenodd=True)],
    "n": lambda n, a: [EndPath()],
    # color
    "G": lambda n, a: [StrokeColor(_gray(n, a))],
    "g": lambda n, a: [FillColor(_gray(n, a))],
    "RG": lambda n, a: [StrokeColor(_rgb(n, a))],
    "rg": lambda n, a: [FillColor(_rgb(n, a))],
    "K": lambda n, a: [StrokeColor(_cmyk(n, a))],
    "k": lambda n, a: [FillColor(_cmyk(n, a))],
    "SC": lambda n, a: [StrokeColor(decode_color(n, a))],
    "SCN": lambda n, a: [StrokeColor(decode_color(n, a))],
    "sc": lambda n, a: [FillColor(decode_color(n, a))],
    "scn": lambda n, a: [FillColor(decode_color(n, a))],
    # text objects and text state
    "BT": lambda n, a: [BeginText()],
    "ET": lambda n, a: [EndText()],
    "Tm": lambda n, a: [SetTextMatrix(_matrix(n, a))],
    "T*": lambda n, a: [TextNewline()],
    "Tf": lambda n, a: [_font(n, a)],
    "Tc": lambda n, a: [CharSpacing(*_numbers(n, a, 1))],
    "Tw": lambda n, a: [WordSpacing(*_numbers(n, a, 1))],
    "Ts": lambda n, a: [TextRise(*_numbers(n, a, 1))],
    "TL": lambda n, a: [TextLeading(*_numbers(n, a, 1))],
    "Tz": lambda n, a: [HorizontalScaling(*_numbers(n, a, 1))],
    # text showing
    "Tj": lambda n, a: [TextDraw(_text(n, a))],
    "TJ": lambda n, a: [_show_adjusted(n, a)],
    "'": lambda n, a: [TextNewline(), TextDraw(_text(n, a))],
    '"': _next_line_show,
}


def decode_operator(
    name: str,
    args: Sequence[object],
    current_point: Point = (0, 0),
) -> list[Operator]:
    """Decode one keyword and its operands into operator variants.

    `current_point` is the end point of the previous path segment; the `v`
    curve shorthand replicates it as the first control point.

    Raises PDFOperatorParseError if the operands do not fit the keyword.
    """
    if name == "v":
        (x2, y2, x3, y3) = _numbers(name, args, 4)
        (x0, y0) = current_point
        return [CurveTo(x0, y0, x2, y2, x3, y3)]
    decoder = _DECODERS.get(name)
    if decoder is None:
        return [Ignored(name)]
    return decoder(name, args)
