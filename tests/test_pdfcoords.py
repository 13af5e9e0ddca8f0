import pytest

from pdfcanvas.pdfcoords import (
    page_extent,
    parse_mediabox,
    setup_transform,
    surface_size,
)
from pdfcanvas.pdfdevice import RecordingSurface
from pdfcanvas.pdfexceptions import PDFPageDimensionError, PDFSurfaceError


@pytest.mark.parametrize(
    ("mediabox", "expected"),
    [
        ((0, 0, 612, 792), (612, 792)),
        ((10, 20, 110, 220), (100, 200)),
        ((-50, -50, 50, 50), (100, 100)),
    ],
)
def test_page_extent(mediabox, expected):
    assert page_extent(mediabox) == expected


@pytest.mark.parametrize("mediabox", [(0, 0, 0, 792), (0, 0, 612, -1), (10, 0, 5, 5)])
def test_page_extent_empty(mediabox):
    with pytest.raises(PDFPageDimensionError):
        page_extent(mediabox)


class TestParseMediabox:
    def test_numbers(self):
        assert parse_mediabox([0, 0, 612, 792]) == (0, 0, 612, 792)
        assert parse_mediabox([0, 0, "595.5", 842]) == (0, 0, 595.5, 842)

    @pytest.mark.parametrize("value", [None, 7, [0, 0, 612], [0, 0, None, 792]])
    def test_unreadable(self, value):
        with pytest.raises(PDFPageDimensionError):
            parse_mediabox(value)


def test_surface_size():
    assert surface_size(612, 792, 1.0) == (612, 792)
    assert surface_size(612, 792, 0.5) == (306, 396)
    with pytest.raises(PDFSurfaceError):
        surface_size(612, 792, 0)
    with pytest.raises(PDFSurfaceError):
        surface_size(1, 1, 0.1)


class TestSetupTransform:
    def test_maps_page_corners(self):
        surface = RecordingSurface()
        assert setup_transform(surface, 200, 100, 2.0) == (400, 200)
        surface.move_to(0, 0)
        surface.move_to(200, 100)
        (origin, corner) = surface.find("move_to")
        assert surface.to_device(origin, (0, 0)) == (0, 200)
        assert surface.to_device(corner, (200, 100)) == (400, 0)

    def test_leaves_one_state_saved(self):
        surface = RecordingSurface()
        setup_transform(surface, 10, 10, 1.0)
        assert surface.names().count("save") == 1
        assert "restore" not in surface.names()

    def test_resize_failure(self):
        class Unresizable(RecordingSurface):
            def resize(self, width, height):
                raise MemoryError("too big")

        with pytest.raises(PDFSurfaceError):
            setup_transform(Unresizable(), 10, 10, 1.0)
