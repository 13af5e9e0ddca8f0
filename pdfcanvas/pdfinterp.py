import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from pdfminer.utils import MATRIX_IDENTITY, Matrix

from pdfcanvas.pdfcolor import WHITE, rgb2css, to_css
from pdfcanvas.pdfcontent import APPLY, ContentItem, Diagnostic, read_operators
from pdfcanvas.pdfcoords import setup_transform
from pdfcanvas.pdfdevice import PDFSurface
from pdfcanvas.pdfexceptions import PDFOperatorApplyError
from pdfcanvas.pdfops import (
    BeginText,
    CharSpacing,
    ClosePath,
    CurveTo,
    EndPath,
    EndText,
    Fill,
    FillAndStroke,
    FillColor,
    HorizontalScaling,
    Ignored,
    LineCap,
    LineJoin,
    LineTo,
    LineWidth,
    MiterLimit,
    MoveTo,
    Operator,
    Rect,
    RestoreState,
    SaveState,
    SetTextMatrix,
    Stroke,
    StrokeColor,
    TextDraw,
    TextDrawAdjusted,
    TextFont,
    TextLeading,
    TextNewline,
    TextRise,
    Transform,
    WordSpacing,
)

log = logging.getLogger(__name__)

# Approximate glyph advance as a fraction of the font size. Real glyph
# widths are never consulted.
TEXT_ADVANCE_FACTOR = 0.5


class RenderParams:
    """Parameters for rendering a page onto a surface

    :param font_family: Generic font family handed to the surface for all
        text. PDF font names are never mapped to real families.
    :param default_font_size: Font size used for text shown before any Tf
        operator.
    :param background: Style used to clear the surface before drawing.
    """

    def __init__(
        self,
        font_family: str = "sans-serif",
        default_font_size: float = 12.0,
        background: str = rgb2css(WHITE),
    ) -> None:
        self.font_family = font_family
        self.default_font_size = default_font_size
        self.background = background

    def __repr__(self) -> str:
        return (
            f"<RenderParams: font_family={self.font_family!r}, "
            f"default_font_size={self.default_font_size!r}, "
            f"background={self.background!r}>"
        )


class PDFTextState:
    matrix: Matrix

    def __init__(self, fontsize: float = 12.0) -> None:
        self.fontname: str | None = None
        self.fontsize = fontsize
        self.charspace: float = 0
        self.wordspace: float = 0
        self.scaling: float = 100
        self.leading: float = 0
        self.rise: float = 0
        self.reset_matrix()
        # self.matrix is set

    def __repr__(self) -> str:
        return (
            f"<PDFTextState: fontname={self.fontname!r}, "
            f"fontsize={self.fontsize!r}, "
            f"charspace={self.charspace!r}, "
            f"wordspace={self.wordspace!r}, "
            f"scaling={self.scaling!r}, "
            f"leading={self.leading!r}, "
            f"rise={self.rise!r}, "
            f"matrix={self.matrix!r}>"
        )

    def reset_matrix(self) -> None:
        self.matrix = MATRIX_IDENTITY


def font_spec(size: float, family: str) -> str:
    """Format a canvas font string, e.g. ``12px sans-serif``."""
    if float(size).is_integer():
        return f"{int(size)}px {family}"
    return f"{size!r}px {family}"


def decode_text(s: bytes) -> str:
    """Lossily decode a shown string; undecodable bytes become U+FFFD."""
    return s.decode("utf-8", "replace")


class PDFPageInterpreter:
    """Replays the operators of a page onto a PDFSurface.

    One render call owns a fresh PDFTextState. Operators that fail to
    decode or to apply are recorded as Diagnostics and skipped; they never
    stop the replay.
    """

    def __init__(self, surface: PDFSurface, params: RenderParams | None = None) -> None:
        self.surface = surface
        self.params = params if params is not None else RenderParams()
        self.dispatch: dict[type, Callable[[Any], None]] = {
            SaveState: self.do_save,
            RestoreState: self.do_restore,
            Transform: self.do_transform,
            MoveTo: self.do_move_to,
            LineTo: self.do_line_to,
            CurveTo: self.do_curve_to,
            Rect: self.do_rect,
            ClosePath: self.do_close_path,
            Stroke: self.do_stroke,
            Fill: self.do_fill,
            FillAndStroke: self.do_fill_and_stroke,
            EndPath: self.do_end_path,
            StrokeColor: self.do_stroke_color,
            FillColor: self.do_fill_color,
            LineWidth: self.do_line_width,
            LineCap: self.do_line_cap,
            LineJoin: self.do_line_join,
            MiterLimit: self.do_miter_limit,
            BeginText: self.do_begin_text,
            EndText: self.do_nothing,
            SetTextMatrix: self.do_set_text_matrix,
            TextNewline: self.do_text_newline,
            TextFont: self.do_text_font,
            CharSpacing: self.do_char_spacing,
            WordSpacing: self.do_word_spacing,
            TextRise: self.do_text_rise,
            TextLeading: self.do_text_leading,
            HorizontalScaling: self.do_horizontal_scaling,
            TextDraw: self.do_text_draw,
            TextDrawAdjusted: self.do_nothing,
            Ignored: self.do_nothing,
        }
        self.init_state()

    def init_state(self) -> None:
        """Initialize the text state for rendering a page."""
        self.textstate = PDFTextState(self.params.default_font_size)
        # depth: number of surface states saved by q and not yet restored.
        self.depth = 0
        self.diagnostics: list[Diagnostic] = []

    def render(
        self,
        parts: Sequence[object],
        width: float,
        height: float,
        zoom: float = 1.0,
    ) -> list[Diagnostic]:
        """Render the content parts of a page of the given extent.

        Raises PDFSurfaceError if the surface cannot be set up; everything
        after that is absorbed into the returned diagnostics.
        """
        log.debug(
            "render: parts=%d, width=%r, height=%r, zoom=%r",
            len(parts),
            width,
            height,
            zoom,
        )
        self.init_state()
        setup_transform(self.surface, width, height, zoom, self.params.background)
        try:
            self.surface.begin_path()
            self.execute(parts)
        finally:
            self.finish()
        return self.diagnostics

    def execute(self, parts: Sequence[object]) -> None:
        log.debug("Rendering %d content streams", len(parts))
        for i, part in enumerate(parts):
            self.execute_items(read_operators(part, i), i)

    def execute_items(self, items: Iterable[ContentItem], part: int = 0) -> None:
        for item in items:
            if isinstance(item, Diagnostic):
                self.report(item)
            else:
                self.report(self.apply(item, part))

    def invoke(self, op: Operator) -> None:
        """Apply one operator; any failure is raised as PDFOperatorApplyError."""
        log.debug("exec: %r", op)
        try:
            self.dispatch[type(op)](op)
        except Exception as err:
            raise PDFOperatorApplyError(f"Failed to render operation: {err}") from err

    def apply(self, op: Operator, part: int = 0) -> Diagnostic | None:
        """Apply one operator, returning a Diagnostic instead of raising."""
        try:
            self.invoke(op)
        except PDFOperatorApplyError as err:
            return Diagnostic(APPLY, part, type(op).__name__, str(err))
        return None

    def report(self, diagnostic: Diagnostic | None) -> None:
        if diagnostic is None:
            return
        log.warning("Warning: %s", diagnostic)
        self.diagnostics.append(diagnostic)

    def finish(self) -> None:
        """Unwind states left open by the content, then the setup state."""
        while self.depth:
            self.surface.restore()
            self.depth -= 1
        self.surface.restore()

    def do_nothing(self, op: Operator) -> None:
        pass

    def do_save(self, op: SaveState) -> None:
        """Save graphics state"""
        self.surface.save()
        self.depth += 1

    def do_restore(self, op: RestoreState) -> None:
        """Restore graphics state"""
        if self.depth:
            self.surface.restore()
            self.depth -= 1
        else:
            log.debug("Ignoring Q without a matching q")

    def do_transform(self, op: Transform) -> None:
        """Concatenate matrix to current transformation matrix"""
        self.adjust(self.surface.transform, *op.matrix)

    def adjust(self, method: Callable[..., None], *args: float) -> None:
        """Call a surface transformation method, ignoring its failure."""
        try:
            method(*args)
        except Exception as err:
            log.debug(
                "Ignoring failed %s%r: %s", getattr(method, "__name__", method), args, err
            )

    def do_move_to(self, op: MoveTo) -> None:
        self.surface.move_to(op.x, op.y)

    def do_line_to(self, op: LineTo) -> None:
        self.surface.line_to(op.x, op.y)

    def do_curve_to(self, op: CurveTo) -> None:
        self.surface.bezier_curve_to(op.x1, op.y1, op.x2, op.y2, op.x3, op.y3)

    def do_rect(self, op: Rect) -> None:
        self.surface.rect(op.x, op.y, op.width, op.height)

    def do_close_path(self, op: ClosePath) -> None:
        self.surface.close_path()

    def do_stroke(self, op: Stroke) -> None:
        try:
            self.surface.stroke()
        finally:
            self.surface.begin_path()

    def do_fill(self, op: Fill) -> None:
        # The winding rule is not passed on: surfaces fill with nonzero.
        try:
            self.surface.fill()
        finally:
            self.surface.begin_path()

    def do_fill_and_stroke(self, op: FillAndStroke) -> None:
        try:
            self.surface.fill()
            self.surface.stroke()
        finally:
            self.surface.begin_path()

    def do_end_path(self, op: EndPath) -> None:
        self.surface.begin_path()

    def do_stroke_color(self, op: StrokeColor) -> None:
        self.surface.set_stroke_style(to_css(op.color))

    def do_fill_color(self, op: FillColor) -> None:
        self.surface.set_fill_style(to_css(op.color))

    def do_line_width(self, op: LineWidth) -> None:
        self.surface.set_line_width(op.width)

    def do_line_cap(self, op: LineCap) -> None:
        self.surface.set_line_cap(op.cap)

    def do_line_join(self, op: LineJoin) -> None:
        self.surface.set_line_join(op.join)

    def do_miter_limit(self, op: MiterLimit) -> None:
        self.surface.set_miter_limit(op.limit)

    def do_begin_text(self, op: BeginText) -> None:
        """Begin text object"""
        self.textstate.reset_matrix()

    def do_set_text_matrix(self, op: SetTextMatrix) -> None:
        self.textstate.matrix = op.matrix

    def do_text_newline(self, op: TextNewline) -> None:
        """Move to start of next text line

        The horizontal offset is reset to zero rather than to the start of
        the current line.
        """
        (a, b, c, d, e, f) = self.textstate.matrix
        self.textstate.matrix = (a, b, c, d, 0, f - self.textstate.leading)

    def do_text_font(self, op: TextFont) -> None:
        self.textstate.fontname = op.name
        self.textstate.fontsize = op.size
        self.surface.set_font(font_spec(op.size, self.params.font_family))

    def do_char_spacing(self, op: CharSpacing) -> None:
        self.textstate.charspace = op.spacing

    def do_word_spacing(self, op: WordSpacing) -> None:
        self.textstate.wordspace = op.spacing

    def do_text_rise(self, op: TextRise) -> None:
        self.textstate.rise = op.rise

    def do_text_leading(self, op: TextLeading) -> None:
        self.textstate.leading = op.leading

    def do_horizontal_scaling(self, op: HorizontalScaling) -> None:
        self.textstate.scaling = op.scaling

    def do_text_draw(self, op: TextDraw) -> None:
        """Show text

        The whole run is drawn with one fill_text call at the text origin,
        and the text matrix advances by a fixed fraction of the font size
        per character whether or not drawing succeeds. Failed transform,
        scale and translate calls are ignored; only a failing fill_text is
        reported.
        """
        textstate = self.textstate
        text = decode_text(op.text)
        (a, b, c, d, e, f) = textstate.matrix
        advance = len(text) * textstate.fontsize * TEXT_ADVANCE_FACTOR
        textstate.matrix = (a, b, c, d, e + advance, f)
        self.surface.save()
        try:
            self.adjust(self.surface.transform, a, b, c, d, e, f)
            if textstate.scaling != 100:
                self.adjust(self.surface.scale, textstate.scaling / 100, 1)
            if textstate.rise != 0:
                self.adjust(self.surface.translate, 0, textstate.rise)
            self.surface.fill_text(text, 0, 0)
        finally:
            self.surface.restore()
