from pdfminer.pdfexceptions import PDFException


class PDFRenderError(PDFException):
    """Base class for every error reported to callers of pdfcanvas."""


class PDFLoadError(PDFRenderError):
    """Raised when the document bytes cannot be parsed."""


class PDFPageRangeError(PDFRenderError, IndexError):
    """Raised when a page index is not below the page count."""


class PDFNoDocumentError(PDFPageRangeError):
    """Raised by page-addressed calls made before a document is loaded."""


class PDFPageDimensionError(PDFRenderError, ValueError):
    """Raised when a page's media box cannot be read."""


class PDFSurfaceError(PDFRenderError):
    """Raised when the drawing surface cannot be prepared for rendering."""


class PDFStreamDecodeError(PDFRenderError):
    pass


class PDFOperatorParseError(PDFRenderError, ValueError):
    pass


class PDFOperatorApplyError(PDFRenderError):
    pass
