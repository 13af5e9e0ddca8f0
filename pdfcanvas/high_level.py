"""Functions and classes for the most common use-cases of pdfcanvas"""

import logging
import operator

from pdfcanvas.pdfcontent import Diagnostic
from pdfcanvas.pdfcoords import page_extent
from pdfcanvas.pdfdevice import PDFSurface
from pdfcanvas.pdfexceptions import (
    PDFLoadError,
    PDFNoDocumentError,
    PDFPageRangeError,
    PDFRenderError,
    PDFSurfaceError,
)
from pdfcanvas.pdfinterp import PDFPageInterpreter, RenderParams
from pdfcanvas.pdfsource import PDFSource

log = logging.getLogger(__name__)

SURFACE_METHODS = (
    "resize",
    "fill_rect",
    "save",
    "restore",
    "transform",
    "translate",
    "scale",
    "begin_path",
    "move_to",
    "line_to",
    "bezier_curve_to",
    "rect",
    "close_path",
    "fill",
    "stroke",
    "set_fill_style",
    "set_stroke_style",
    "set_line_width",
    "set_line_cap",
    "set_line_join",
    "set_miter_limit",
    "set_font",
    "fill_text",
)


def check_surface(surface: object) -> PDFSurface:
    """Make sure `surface` provides every drawing call the interpreter uses.

    Any object with the PDFSurface methods is accepted, subclass or not.
    """
    if surface is None:
        raise PDFSurfaceError("Failed to get surface: no surface given")
    missing = [m for m in SURFACE_METHODS if not callable(getattr(surface, m, None))]
    if missing:
        raise PDFSurfaceError(
            f"Failed to cast {surface!r} to a drawing surface: "
            f"missing {', '.join(missing)}"
        )
    return surface  # type: ignore[return-value]


class PDFRenderer:
    """A page-by-page renderer for one loaded PDF document.

    The renderer owns at most one document. Loading replaces it wholesale
    and moves the current page back to the first one. Every failure reaches
    the caller as a PDFRenderError carrying a single message.

    Example:

        >>> renderer = PDFRenderer()
        >>> renderer.load(data)
        >>> surface = RecordingSurface()
        >>> renderer.render_page(surface, renderer.current_page(), 1.5)
    """

    def __init__(self, params: RenderParams | None = None) -> None:
        self.params = params if params is not None else RenderParams()
        self.source: PDFSource | None = None
        self._current_page = 0

    def __repr__(self) -> str:
        return (
            f"<PDFRenderer: source={self.source!r}, "
            f"current_page={self._current_page!r}>"
        )

    def load(self, data: bytes, password: str = "") -> None:
        """Load a PDF document from bytes, replacing any previous one."""
        self.source = None
        self._current_page = 0
        try:
            self.source = PDFSource(data, password=password)
        except PDFRenderError:
            raise
        except Exception as err:
            raise PDFLoadError(f"Failed to parse PDF: {err}") from err

    def total_pages(self) -> int:
        if self.source is None:
            return 0
        return self.source.pagecount

    def current_page(self) -> int:
        return self._current_page

    def set_current_page(self, pageno: int) -> None:
        (_, self._current_page) = self._check_pageno(pageno)

    def page_dimensions(self, pageno: int) -> dict[str, float]:
        (source, pageno) = self._check_pageno(pageno)
        try:
            (width, height) = source.page_dimensions(pageno)
        except PDFRenderError:
            raise
        except Exception as err:
            raise PDFRenderError(f"Failed to get page: {err}") from err
        return {"width": width, "height": height}

    def render_page(
        self,
        surface: PDFSurface,
        pageno: int,
        zoom: float = 1.0,
    ) -> list[Diagnostic]:
        """Render one page onto `surface` at the given zoom.

        Content that cannot be decoded or drawn is skipped; what was skipped
        is returned as a list of diagnostics and logged.
        """
        (source, pageno) = self._check_pageno(pageno)
        surface = check_surface(surface)
        try:
            page = source.get_page(pageno)
            (width, height) = page_extent(source.mediabox(page))
            interpreter = PDFPageInterpreter(surface, self.params)
            diagnostics = interpreter.render(
                source.content_parts(page), width, height, zoom
            )
        except PDFRenderError:
            raise
        except Exception as err:
            raise PDFRenderError(f"Failed to render page {pageno}: {err}") from err
        log.info("Rendered page %d at scale %r", pageno + 1, zoom)
        return diagnostics

    def _check_pageno(self, pageno: object) -> tuple[PDFSource, int]:
        """Return the loaded source and `pageno` as a valid page index.

        With no document loaded there is no valid index, so this raises
        PDFNoDocumentError, which is also a PDFPageRangeError.
        """
        try:
            index = operator.index(pageno)  # type: ignore[arg-type]
        except TypeError as err:
            raise PDFPageRangeError(f"Page number out of range: {pageno!r}") from err
        if self.source is None:
            raise PDFNoDocumentError("Page number out of range: PDF not loaded")
        self.source.check_pageno(index)
        return (self.source, index)


def render_page(
    data: bytes,
    pageno: int,
    surface: PDFSurface,
    zoom: float = 1.0,
    password: str = "",
    params: RenderParams | None = None,
) -> list[Diagnostic]:
    """Load a PDF from bytes and render one of its pages onto `surface`.

    :param data: the bytes of the PDF document.
    :param pageno: zero-indexed number of the page to render.
    :param surface: the PDFSurface to draw on.
    :param zoom: scale factor from PDF units to surface pixels.
    :param password: For encrypted PDFs, the password to decrypt.
    :param params: a RenderParams object; defaults are used if None.
    :return: the diagnostics of the content that could not be rendered.
    """
    renderer = PDFRenderer(params)
    renderer.load(data, password=password)
    return renderer.render_page(surface, pageno, zoom)
