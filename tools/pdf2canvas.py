#!/usr/bin/env python3
"""Replays the drawing operators of PDF pages onto a recording surface and
dumps the resulting surface calls as text or JSON.
"""

import argparse
import json
import logging
import sys
from collections.abc import Iterable
from typing import Any, TextIO

import pdfcanvas
from pdfcanvas.high_level import PDFRenderer
from pdfcanvas.pdfdevice import RecordingSurface
from pdfcanvas.pdfexceptions import PDFRenderError
from pdfcanvas.pdfinterp import RenderParams

logging.basicConfig()

log = logging.getLogger(__name__)

OUTPUT_TYPES = ("text", "json")


def format_value(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str):
        return json.dumps(value)
    return str(value)


def dump_text(outfp: TextIO, pageno: int, surface: RecordingSurface) -> None:
    outfp.write(f"page {pageno + 1} {surface.width}x{surface.height}\n")
    for call in surface.calls:
        args = " ".join(format_value(arg) for arg in call.args)
        outfp.write(f"  {call.name} {args}".rstrip() + "\n")


def page_record(
    pageno: int, surface: RecordingSurface, diagnostics: Iterable[Any]
) -> dict[str, Any]:
    return {
        "page": pageno + 1,
        "width": surface.width,
        "height": surface.height,
        "calls": [[call.name, *call.args] for call in surface.calls],
        "diagnostics": [str(d) for d in diagnostics],
    }


def render_to_fp(
    fname: str,
    outfp: TextIO,
    page_numbers: Iterable[int] | None = None,
    zoom: float = 1.0,
    output_type: str = "text",
    password: str = "",
    font_family: str = "sans-serif",
) -> list[dict[str, Any]]:
    """Render pages of one file.

    With the text output type the surface calls are written to `outfp` as
    the pages are rendered. The page records are returned in either case,
    so that JSON output for several files can be written as one document.
    """
    renderer = PDFRenderer(RenderParams(font_family=font_family))
    with open(fname, "rb") as fp:
        renderer.load(fp.read(), password=password)
    if page_numbers is None:
        pagenos: Iterable[int] = range(renderer.total_pages())
    else:
        pagenos = sorted(page_numbers)
    records = []
    for pageno in pagenos:
        surface = RecordingSurface()
        diagnostics = renderer.render_page(surface, pageno, zoom)
        records.append(page_record(pageno, surface, diagnostics))
        if output_type == "text":
            dump_text(outfp, pageno, surface)
    return records


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, add_help=True)
    parser.add_argument(
        "files",
        type=str,
        default=None,
        nargs="+",
        help="One or more paths to PDF files.",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"pdfcanvas v{pdfcanvas.__version__}",
    )
    parser.add_argument(
        "--debug",
        "-d",
        default=False,
        action="store_true",
        help="Use debug logging level.",
    )
    parser.add_argument(
        "--page-numbers",
        type=int,
        default=None,
        nargs="+",
        help="A space-seperated list of page numbers to render (1-based).",
    )
    parser.add_argument(
        "--zoom",
        "-z",
        type=float,
        default=1.0,
        help="Scale factor from PDF units to surface pixels.",
    )
    parser.add_argument(
        "--outfile",
        "-o",
        type=str,
        default="-",
        help='Path to file where output is written. Or "-" (default) to '
        "write to stdout.",
    )
    parser.add_argument(
        "--output-type",
        "-t",
        type=str,
        choices=OUTPUT_TYPES,
        default="text",
        help="Type of output to generate {text,json}.",
    )
    parser.add_argument(
        "--password",
        "-P",
        type=str,
        default="",
        help="The password to use for decrypting PDF file.",
    )
    parser.add_argument(
        "--font-family",
        type=str,
        default="sans-serif",
        help="Generic font family used for all text.",
    )
    return parser


def main(args: list[str] | None = None) -> int:
    parser = create_parser()
    A = parser.parse_args(args=args)

    if A.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    page_numbers = None
    if A.page_numbers:
        page_numbers = {x - 1 for x in A.page_numbers}

    if A.outfile == "-":
        outfp: TextIO = sys.stdout
    else:
        outfp = open(A.outfile, "w", encoding="utf-8")

    files = []
    try:
        for fname in A.files:
            records = render_to_fp(
                fname,
                outfp,
                page_numbers=page_numbers,
                zoom=A.zoom,
                output_type=A.output_type,
                password=A.password,
                font_family=A.font_family,
            )
            files.append({"file": fname, "pages": records})
        if A.output_type == "json":
            json.dump({"files": files}, outfp, indent=1)
            outfp.write("\n")
    except (PDFRenderError, OSError) as err:
        log.error("%s", err)
        return 1
    finally:
        if outfp is not sys.stdout:
            outfp.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
