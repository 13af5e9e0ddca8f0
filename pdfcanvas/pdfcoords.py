"""Mapping of PDF page space onto surface pixel space.

PDF user space has its origin at the bottom-left corner with y growing
upwards; a surface has its origin at the top-left corner with y growing
downwards. `setup_transform` installs the mapping once per render call:
scale by the zoom factor, translate by the page height, then flip y.
"""

import logging
import math
from typing import Any

from pdfminer.casting import safe_rect_list
from pdfminer.pdftypes import resolve1
from pdfminer.utils import Rect

from pdfcanvas.pdfcolor import BLACK, WHITE, rgb2css
from pdfcanvas.pdfdevice import PDFSurface
from pdfcanvas.pdfexceptions import PDFPageDimensionError, PDFSurfaceError

log = logging.getLogger(__name__)


def parse_mediabox(value: Any) -> Rect:
    """Read a raw /MediaBox entry as (left, bottom, right, top)."""
    try:
        rect = safe_rect_list(resolve1(v) for v in resolve1(value))
    except TypeError:
        rect = None
    if rect is None:
        raise PDFPageDimensionError(f"Unreadable MediaBox: {value!r}")
    return rect


def page_extent(mediabox: Rect) -> tuple[float, float]:
    """Return (width, height) = (right - left, top - bottom)."""
    (left, bottom, right, top) = mediabox
    width = right - left
    height = top - bottom
    if not (width > 0 and height > 0):
        raise PDFPageDimensionError(f"Empty page extent in MediaBox {mediabox!r}")
    return (width, height)


def surface_size(width: float, height: float, zoom: float) -> tuple[int, int]:
    if not (math.isfinite(zoom) and zoom > 0):
        raise PDFSurfaceError(f"Invalid zoom factor: {zoom!r}")
    size = (round(width * zoom), round(height * zoom))
    if size[0] <= 0 or size[1] <= 0:
        raise PDFSurfaceError(f"Surface size {size!r} is empty at zoom {zoom!r}")
    return size


def setup_transform(
    surface: PDFSurface,
    width: float,
    height: float,
    zoom: float,
    background: str = rgb2css(WHITE),
) -> tuple[int, int]:
    """Prepare `surface` for drawing a page of the given extent.

    Leaves one surface state saved; the caller restores it after the
    content has been replayed. Returns the surface size in pixels.
    """
    (w, h) = surface_size(width, height, zoom)
    try:
        surface.resize(w, h)
    except Exception as err:
        raise PDFSurfaceError(f"Failed to resize surface to {w}x{h}: {err}") from err
    try:
        surface.set_fill_style(background)
        surface.fill_rect(0, 0, w, h)
        # PDF paints in black until told otherwise
        surface.set_fill_style(rgb2css(BLACK))
        surface.set_stroke_style(rgb2css(BLACK))
        surface.scale(zoom, zoom)
        surface.save()
        surface.translate(0, height)
        surface.scale(1, -1)
    except Exception as err:
        raise PDFSurfaceError(f"Failed to set up page transform: {err}") from err
    log.debug("setup_transform: size=%dx%d, height=%r, zoom=%r", w, h, height, zoom)
    return (w, h)
