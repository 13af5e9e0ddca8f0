"""Builders for small in-memory PDF documents used by the tests."""

import zlib
from typing import Any

from pdfminer.pdftypes import PDFStream

LETTER = (0, 0, 612, 792)


def content_stream(data: bytes, **attrs: Any) -> PDFStream:
    """A standalone content part, as pdfminer would hand it out."""
    return PDFStream(attrs, data)


def _fmt(value: Any) -> bytes:
    if isinstance(value, (list, tuple)):
        return b"[" + b" ".join(_fmt(v) for v in value) + b"]"
    if isinstance(value, bytes):
        return value
    return str(value).encode("latin-1")


def _stream_object(data: bytes, filter: bytes | None = None) -> bytes:
    if filter == b"/FlateDecode":
        data = zlib.compress(data)
    header = b"<< /Length %d" % len(data)
    if filter is not None:
        header += b" /Filter " + filter
    return header + b" >>\nstream\n" + data + b"\nendstream"


def make_page(
    *contents: bytes,
    mediabox: Any = LETTER,
    filter: bytes | None = None,
) -> dict[str, Any]:
    """Describe one page: its media box and its content-stream parts.

    `mediabox=None` leaves the entry out of the page dictionary.
    """
    return {"mediabox": mediabox, "contents": list(contents), "filter": filter}


def make_pdf(*pages: dict[str, Any], inherited_mediabox: Any = None) -> bytes:
    """Serialize pages into a complete PDF file with a valid xref table."""
    objects: list[bytes] = []

    def add(body: bytes) -> int:
        objects.append(body)
        return len(objects)

    add(b"<< /Type /Catalog /Pages 2 0 R >>")
    add(b"")  # page tree, filled in below
    kids = []
    for page in pages:
        refs = [
            b"%d 0 R" % add(_stream_object(data, page["filter"]))
            for data in page["contents"]
        ]
        body = b"<< /Type /Page /Parent 2 0 R"
        if page["mediabox"] is not None:
            body += b" /MediaBox " + _fmt(page["mediabox"])
        if refs:
            body += b" /Contents [" + b" ".join(refs) + b"]"
        body += b" >>"
        kids.append(b"%d 0 R" % add(body))
    tree = b"<< /Type /Pages /Kids [" + b" ".join(kids) + b"]"
    tree += b" /Count %d" % len(kids)
    if inherited_mediabox is not None:
        tree += b" /MediaBox " + _fmt(inherited_mediabox)
    objects[1] = tree + b" >>"

    out = b"%PDF-1.4\n"
    offsets = []
    for objid, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % objid + body + b"\nendobj\n"
    startxref = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % startxref
    return out
