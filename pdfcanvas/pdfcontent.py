"""Reading of page content-stream parts into operator sequences.

Each part is decoded and tokenized on its own, so a broken part cannot take
its neighbours down with it. Failures are not raised: they are handed back
in-line as Diagnostic items, in the position where they occurred.
"""

import logging
from collections.abc import Iterator
from typing import NamedTuple, Union

from pdfminer.pdfinterp import PDFContentParser
from pdfminer.pdftypes import PDFStream, resolve1
from pdfminer.psexceptions import PSEOF
from pdfminer.psparser import PSKeyword, keyword_name
from pdfminer.utils import Point

from pdfcanvas.pdfexceptions import PDFOperatorParseError, PDFStreamDecodeError
from pdfcanvas.pdfops import (
    ClosePath,
    CurveTo,
    LineTo,
    MoveTo,
    Operator,
    Rect,
    decode_operator,
)

log = logging.getLogger(__name__)

DECODE = "decode"
PARSE = "parse"
APPLY = "apply"


class Diagnostic(NamedTuple):
    """An absorbed failure of one content part or one operator."""

    stage: str
    part: int
    operator: str | None
    message: str

    def __str__(self) -> str:
        where = f"stream {self.part}"
        if self.operator is not None:
            where += f", operator {self.operator!r}"
        return f"{self.stage} failed ({where}): {self.message}"


ContentItem = Union[Operator, Diagnostic]


def decode_part(obj: object) -> PDFStream:
    """Resolve one content part and decode its filters."""
    stream = resolve1(obj)
    if not isinstance(stream, PDFStream):
        raise PDFStreamDecodeError(f"Content part is not a stream: {stream!r}")
    try:
        stream.get_data()
    except Exception as err:
        raise PDFStreamDecodeError(str(err)) from err
    return stream


def _next_point(op: Operator, current: Point, start: Point) -> tuple[Point, Point]:
    """Return the current point and subpath start after `op`."""
    if isinstance(op, (MoveTo, Rect)):
        return ((op.x, op.y), (op.x, op.y))
    elif isinstance(op, LineTo):
        return ((op.x, op.y), start)
    elif isinstance(op, CurveTo):
        return ((op.x3, op.y3), start)
    elif isinstance(op, ClosePath):
        return (start, start)
    return (current, start)


def read_operators(obj: object, part: int = 0) -> Iterator[ContentItem]:
    """Yield the operators of one content part in document order.

    An operator whose operands do not fit is replaced by a Diagnostic and
    reading continues; a failure to decode or tokenize the part yields a
    Diagnostic and ends the part.
    """
    try:
        stream = decode_part(obj)
    except PDFStreamDecodeError as err:
        yield Diagnostic(DECODE, part, None, str(err))
        return
    try:
        parser = PDFContentParser([stream])
    except PSEOF:
        # empty part
        return

    args: list[object] = []
    current: Point = (0, 0)
    start: Point = (0, 0)
    count = 0
    while True:
        try:
            (_, token) = parser.nextobject()
        except PSEOF:
            break
        except Exception as err:
            yield Diagnostic(PARSE, part, None, f"Failed to parse operations: {err}")
            return
        if not isinstance(token, PSKeyword):
            args.append(token)
            continue
        name = keyword_name(token)
        try:
            ops = decode_operator(name, args, current)
        except PDFOperatorParseError as err:
            yield Diagnostic(PARSE, part, name, str(err))
            ops = []
        args = []
        for op in ops:
            (current, start) = _next_point(op, current, start)
            count += 1
            yield op
    log.debug("Stream %d: %d operations", part, count)
