import logging
from typing import NamedTuple

from pdfminer.utils import MATRIX_IDENTITY, Matrix, Point, apply_matrix_pt, mult_matrix

log = logging.getLogger(__name__)


class PDFSurface:
    """A 2D vector drawing target driven by PDFPageInterpreter.

    The methods mirror a canvas-style immediate-mode API: `transform`,
    `translate` and `scale` post-multiply the current transformation, path
    construction accumulates into a current path, and neither `fill` nor
    `stroke` clears that path. This base class ignores every call; concrete
    surfaces override what they draw.
    """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"

    def __enter__(self) -> "PDFSurface":
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def close(self) -> None:
        pass

    def resize(self, width: int, height: int) -> None:
        pass

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        pass

    def save(self) -> None:
        pass

    def restore(self) -> None:
        pass

    def transform(
        self, a: float, b: float, c: float, d: float, e: float, f: float
    ) -> None:
        pass

    def translate(self, x: float, y: float) -> None:
        pass

    def scale(self, sx: float, sy: float) -> None:
        pass

    def begin_path(self) -> None:
        pass

    def move_to(self, x: float, y: float) -> None:
        pass

    def line_to(self, x: float, y: float) -> None:
        pass

    def bezier_curve_to(
        self, x1: float, y1: float, x2: float, y2: float, x3: float, y3: float
    ) -> None:
        pass

    def rect(self, x: float, y: float, width: float, height: float) -> None:
        pass

    def close_path(self) -> None:
        pass

    def fill(self) -> None:
        pass

    def stroke(self) -> None:
        pass

    def set_fill_style(self, style: str) -> None:
        pass

    def set_stroke_style(self, style: str) -> None:
        pass

    def set_line_width(self, width: float) -> None:
        pass

    def set_line_cap(self, cap: str) -> None:
        pass

    def set_line_join(self, join: str) -> None:
        pass

    def set_miter_limit(self, limit: float) -> None:
        pass

    def set_font(self, font: str) -> None:
        pass

    def fill_text(self, text: str, x: float, y: float) -> None:
        pass


class SurfaceCall(NamedTuple):
    """One recorded surface call and the transformation active when made."""

    name: str
    args: tuple[object, ...]
    ctm: Matrix


class RecordingSurface(PDFSurface):
    """Surface that records every call instead of drawing.

    The current transformation matrix is tracked with canvas semantics so
    that recorded coordinates can be mapped to device pixels with
    `to_device`.
    """

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.ctm: Matrix = MATRIX_IDENTITY
        self.calls: list[SurfaceCall] = []
        self._stack: list[Matrix] = []

    def __repr__(self) -> str:
        return (
            f"<RecordingSurface: width={self.width!r}, height={self.height!r}, "
            f"calls={len(self.calls)}>"
        )

    def _record(self, name: str, *args: object) -> None:
        self.calls.append(SurfaceCall(name, args, self.ctm))

    def _concat(self, matrix: Matrix) -> None:
        # canvas semantics: the new matrix applies before the current one
        self.ctm = mult_matrix(matrix, self.ctm)

    def names(self) -> list[str]:
        return [call.name for call in self.calls]

    def find(self, name: str) -> list[SurfaceCall]:
        return [call for call in self.calls if call.name == name]

    def to_device(self, call: SurfaceCall, point: Point) -> Point:
        """Map a point given in `call`'s user space to device pixels."""
        return apply_matrix_pt(call.ctm, point)

    def resize(self, width: int, height: int) -> None:
        # resizing a canvas resets its state
        self.width = width
        self.height = height
        self.ctm = MATRIX_IDENTITY
        self._stack = []
        self._record("resize", width, height)

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        self._record("fill_rect", x, y, width, height)

    def save(self) -> None:
        self._stack.append(self.ctm)
        self._record("save")

    def restore(self) -> None:
        if self._stack:
            self.ctm = self._stack.pop()
        self._record("restore")

    def transform(
        self, a: float, b: float, c: float, d: float, e: float, f: float
    ) -> None:
        self._record("transform", a, b, c, d, e, f)
        self._concat((a, b, c, d, e, f))

    def translate(self, x: float, y: float) -> None:
        self._record("translate", x, y)
        self._concat((1, 0, 0, 1, x, y))

    def scale(self, sx: float, sy: float) -> None:
        self._record("scale", sx, sy)
        self._concat((sx, 0, 0, sy, 0, 0))

    def begin_path(self) -> None:
        self._record("begin_path")

    def move_to(self, x: float, y: float) -> None:
        self._record("move_to", x, y)

    def line_to(self, x: float, y: float) -> None:
        self._record("line_to", x, y)

    def bezier_curve_to(
        self, x1: float, y1: float, x2: float, y2: float, x3: float, y3: float
    ) -> None:
        self._record("bezier_curve_to", x1, y1, x2, y2, x3, y3)

    def rect(self, x: float, y: float, width: float, height: float) -> None:
        self._record("rect", x, y, width, height)

    def close_path(self) -> None:
        self._record("close_path")

    def fill(self) -> None:
        self._record("fill")

    def stroke(self) -> None:
        self._record("stroke")

    def set_fill_style(self, style: str) -> None:
        self._record("set_fill_style", style)

    def set_stroke_style(self, style: str) -> None:
        self._record("set_stroke_style", style)

    def set_line_width(self, width: float) -> None:
        self._record("set_line_width", width)

    def set_line_cap(self, cap: str) -> None:
        self._record("set_line_cap", cap)

    def set_line_join(self, join: str) -> None:
        self._record("set_line_join", join)

    def set_miter_limit(self, limit: float) -> None:
        self._record("set_miter_limit", limit)

    def set_font(self, font: str) -> None:
        self._record("set_font", font)

    def fill_text(self, text: str, x: float, y: float) -> None:
        self._record("fill_text", text, x, y)
