import itertools
import logging
from io import BytesIO

from pdfminer.pdfdocument import PDFDocument
from pdfminer.pdfpage import PDFPage
from pdfminer.pdfparser import PDFParser
from pdfminer.utils import Rect

from pdfcanvas.pdfcoords import page_extent, parse_mediabox
from pdfcanvas.pdfexceptions import (
    PDFLoadError,
    PDFPageDimensionError,
    PDFPageRangeError,
)

log = logging.getLogger(__name__)


class PDFSource:
    """A loaded PDF document, read through pdfminer.six.

    The document is opened without object caching, and pages are looked up
    again on every call, so each render sees freshly decoded content.

    Attributes
    ----------
      data: the bytes the document was loaded from.
      doc: the pdfminer PDFDocument.
      pagecount: the number of pages in the document.

    """

    def __init__(self, data: bytes, password: str = "") -> None:
        self.data = bytes(data)
        try:
            parser = PDFParser(BytesIO(self.data))
            self.doc = PDFDocument(parser, password=password, caching=False)
            if "Pages" not in self.doc.catalog:
                raise PDFLoadError("No page tree in document catalog")
            self.pagecount = sum(1 for _ in PDFPage.create_pages(self.doc))
        except Exception as err:
            raise PDFLoadError(f"Failed to parse PDF: {err}") from err
        log.info("PDF loaded successfully. Total pages: %d", self.pagecount)

    def __repr__(self) -> str:
        return f"<PDFSource: size={len(self.data)}, pagecount={self.pagecount}>"

    def check_pageno(self, pageno: int) -> None:
        if not 0 <= pageno < self.pagecount:
            raise PDFPageRangeError("Page number out of range")

    def get_page(self, pageno: int) -> PDFPage:
        self.check_pageno(pageno)
        pages = PDFPage.create_pages(self.doc)
        page = next(itertools.islice(pages, pageno, None), None)
        if page is None:
            raise PDFPageRangeError("Page number out of range")
        return page

    def mediabox(self, page: PDFPage) -> Rect:
        # pdfminer substitutes US Letter for a broken box; read the raw entry
        # so that an unreadable box is reported instead.
        if "MediaBox" not in page.attrs:
            raise PDFPageDimensionError("Failed to get media box: missing MediaBox")
        return parse_mediabox(page.attrs["MediaBox"])

    def page_dimensions(self, pageno: int) -> tuple[float, float]:
        page = self.get_page(pageno)
        return page_extent(self.mediabox(page))

    def content_parts(self, page: PDFPage) -> list[object]:
        """Return the page's content-stream parts, unresolved, in order."""
        return list(page.contents)
