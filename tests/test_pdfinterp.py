import pytest
from pdfminer.psparser import LIT

from pdfcanvas.pdfcontent import APPLY, DECODE, PARSE
from pdfcanvas.pdfdevice import RecordingSurface
from pdfcanvas.pdfexceptions import PDFOperatorApplyError, PDFSurfaceError
from pdfcanvas.pdfinterp import (
    PDFPageInterpreter,
    PDFTextState,
    RenderParams,
    decode_text,
    font_spec,
)
from pdfcanvas.pdfops import MoveTo, Rect, TextDraw
from tests.helpers import content_stream

SETUP = [
    "resize",
    "set_fill_style",
    "fill_rect",
    "set_fill_style",
    "set_stroke_style",
    "scale",
    "save",
    "translate",
    "scale",
    "begin_path",
]


def render(*parts, width=612, height=792, zoom=1.0, params=None, surface=None):
    if surface is None:
        surface = RecordingSurface()
    interpreter = PDFPageInterpreter(surface, params)
    streams = [
        content_stream(p) if isinstance(p, bytes) else p for p in parts
    ]
    diagnostics = interpreter.render(streams, width, height, zoom)
    return surface, interpreter, diagnostics


def content_calls(surface):
    """The calls made while replaying content, without setup and teardown."""
    assert surface.names()[: len(SETUP)] == SETUP
    assert surface.calls[-1].name == "restore"
    return surface.calls[len(SETUP) : -1]


class TestSetup:
    def test_setup_sequence(self):
        (surface, _, diagnostics) = render(width=612, height=792, zoom=1.0)
        assert diagnostics == []
        assert [(c.name, c.args) for c in surface.calls] == [
            ("resize", (612, 792)),
            ("set_fill_style", ("rgb(255,255,255)",)),
            ("fill_rect", (0, 0, 612, 792)),
            ("set_fill_style", ("rgb(0,0,0)",)),
            ("set_stroke_style", ("rgb(0,0,0)",)),
            ("scale", (1.0, 1.0)),
            ("save", ()),
            ("translate", (0, 792)),
            ("scale", (1, -1)),
            ("begin_path", ()),
            ("restore", ()),
        ]

    def test_surface_size_is_rounded(self):
        (surface, _, _) = render(width=100.4, height=50.6, zoom=1.5)
        assert (surface.width, surface.height) == (151, 76)

    @pytest.mark.parametrize("zoom", [0, -1.0, float("nan"), float("inf")])
    def test_invalid_zoom(self, zoom):
        with pytest.raises(PDFSurfaceError):
            render(zoom=zoom)

    def test_background_from_params(self):
        params = RenderParams(background="rgb(10,20,30)")
        (surface, _, _) = render(params=params)
        assert surface.calls[1].args == ("rgb(10,20,30)",)


class TestCoordinates:
    @pytest.mark.parametrize("zoom", [1.0, 2.0, 0.5])
    def test_point_lands_on_flipped_pixel(self, zoom):
        (surface, _, _) = render(b"100 200 m f", height=792, zoom=zoom)
        (move,) = surface.find("move_to")
        assert move.args == (100, 200)
        (x, y) = surface.to_device(move, (100, 200))
        assert x == pytest.approx(100 * zoom)
        assert y == pytest.approx((792 - 200) * zoom)

    def test_rect_extent(self):
        (surface, _, _) = render(b"1 0 0 rg 100 100 50 50 re f")
        (rect,) = surface.find("rect")
        ys = sorted(surface.to_device(rect, p)[1] for p in [(100, 100), (100, 150)])
        assert ys == [642, 692]

    def test_coordinates_are_passed_through(self):
        (surface, _, _) = render(b"1 2 m 3 4 l 5 6 7 8 9 10 c h S")
        assert [(c.name, c.args) for c in content_calls(surface)] == [
            ("move_to", (1, 2)),
            ("line_to", (3, 4)),
            ("bezier_curve_to", (5, 6, 7, 8, 9, 10)),
            ("close_path", ()),
            ("stroke", ()),
            ("begin_path", ()),
        ]


class TestPainting:
    def test_fill_then_new_path(self):
        (surface, _, _) = render(b"0 0 m 1 1 l f* 2 2 m n 3 3 m B")
        assert [c.name for c in content_calls(surface)] == [
            "move_to",
            "line_to",
            "fill",
            "begin_path",
            "move_to",
            "begin_path",
            "move_to",
            "fill",
            "stroke",
            "begin_path",
        ]

    def test_styles(self):
        (surface, _, _) = render(b"2 w 1 J 2 j 4 M 0 0 0 1 K 0.5 g")
        assert [(c.name, c.args) for c in content_calls(surface)] == [
            ("set_line_width", (2,)),
            ("set_line_cap", ("round",)),
            ("set_line_join", ("bevel",)),
            ("set_miter_limit", (4,)),
            ("set_stroke_style", ("rgb(0,0,0)",)),
            ("set_fill_style", ("rgb(128,128,128)",)),
        ]

    def test_path_is_reset_even_if_fill_fails(self):
        class BrokenFill(RecordingSurface):
            def fill(self):
                raise RuntimeError("no fill today")

        (surface, _, diagnostics) = render(b"0 0 m f", surface=BrokenFill())
        assert surface.names()[-2] == "begin_path"
        assert [d.stage for d in diagnostics] == [APPLY]


class TestGraphicsState:
    def test_save_restore(self):
        (surface, _, _) = render(b"q 1 0 0 1 5 5 cm Q")
        assert [(c.name, c.args) for c in content_calls(surface)] == [
            ("save", ()),
            ("transform", (1, 0, 0, 1, 5, 5)),
            ("restore", ()),
        ]

    def test_unmatched_restore_is_ignored(self):
        (surface, _, diagnostics) = render(b"Q Q 0 0 m")
        assert [c.name for c in content_calls(surface)] == ["move_to"]
        assert diagnostics == []

    def test_open_states_are_unwound(self):
        (surface, interpreter, _) = render(b"q q 0 0 m")
        assert surface.names()[-3:] == ["restore", "restore", "restore"]
        assert interpreter.depth == 0
        assert surface.names().count("save") == surface.names().count("restore")

    def test_failed_transform_is_ignored(self):
        class BrokenTransform(RecordingSurface):
            def transform(self, a, b, c, d, e, f):
                raise ValueError("singular")

        (surface, _, diagnostics) = render(
            b"1 0 0 1 5 5 cm 0 0 m", surface=BrokenTransform()
        )
        assert diagnostics == []
        assert surface.names()[-2] == "move_to"


class TestText:
    def test_runs_advance_left_to_right(self):
        (surface, _, _) = render(b"BT /F1 10 Tf (AB) Tj (CD) Tj ET")
        (first, second) = surface.find("transform")
        assert second.args[4] - first.args[4] == 2 * 10 * 0.5
        assert [c.args[0] for c in surface.find("fill_text")] == ["AB", "CD"]

    def test_text_draw_sequence(self):
        (surface, _, _) = render(b"BT /F1 12 Tf 1 0 0 1 72 700 Tm (Hi) Tj ET")
        assert [(c.name, c.args) for c in content_calls(surface)] == [
            ("set_font", ("12px sans-serif",)),
            ("save", ()),
            ("transform", (1, 0, 0, 1, 72, 700)),
            ("fill_text", ("Hi", 0, 0)),
            ("restore", ()),
        ]

    def test_scaling_and_rise(self):
        (surface, _, _) = render(b"BT 50 Tz 3 Ts (x) Tj ET")
        names = [c.name for c in content_calls(surface)]
        assert names == [
            "save",
            "transform",
            "scale",
            "translate",
            "fill_text",
            "restore",
        ]
        assert surface.find("scale")[-1].args == (0.5, 1)
        assert surface.find("translate")[-1].args == (0, 3)

    def test_newline_resets_horizontal_offset(self):
        (_, interpreter, _) = render(b"BT 14 TL 1 0 0 1 72 700 Tm (abc) Tj T* ET")
        assert interpreter.textstate.matrix == (1, 0, 0, 1, 0, 686)

    def test_begin_text_resets_only_the_matrix(self):
        (_, interpreter, _) = render(
            b"BT /F1 20 Tf 2 Tc 3 Tw 4 Ts 5 TL 80 Tz 1 0 0 1 9 9 Tm ET BT ET"
        )
        textstate = interpreter.textstate
        assert textstate.matrix == (1, 0, 0, 1, 0, 0)
        assert (textstate.fontname, textstate.fontsize) == ("F1", 20)
        assert textstate.charspace == 2
        assert textstate.wordspace == 3
        assert textstate.rise == 4
        assert textstate.leading == 5
        assert textstate.scaling == 80

    def test_text_state_persists_across_parts(self):
        (surface, _, _) = render(b"BT /F1 10 Tf (AB) Tj", b"(CD) Tj ET")
        (first, second) = surface.find("transform")
        assert second.args[4] - first.args[4] == 10

    def test_default_font_size_before_tf(self):
        params = RenderParams(default_font_size=8)
        (surface, _, _) = render(b"BT (AB) Tj (C) Tj ET", params=params)
        assert surface.find("transform")[1].args[4] == 8
        assert surface.find("set_font") == []

    def test_font_family_from_params(self):
        params = RenderParams(font_family="serif")
        (surface, _, _) = render(b"BT /Helvetica 10.5 Tf ET", params=params)
        assert surface.find("set_font")[0].args == ("10.5px serif",)

    def test_adjusted_text_is_ignored(self):
        (surface, _, diagnostics) = render(b"BT [(A) -120 (B)] TJ ET")
        assert content_calls(surface) == []
        assert diagnostics == []

    def test_undecodable_bytes_are_replaced(self):
        (surface, _, _) = render(b"BT <41FF42> Tj ET")
        assert surface.find("fill_text")[0].args[0] == "A\ufffdB"


class TestFaultContainment:
    def test_unparsable_operator_among_valid_ones(self):
        (surface, _, diagnostics) = render(b"0 0 m 10 0 l (oops) 7 l 10 10 l f")
        assert [c.name for c in content_calls(surface)] == [
            "move_to",
            "line_to",
            "line_to",
            "fill",
            "begin_path",
        ]
        assert [(d.stage, d.operator) for d in diagnostics] == [(PARSE, "l")]

    def test_broken_part_does_not_stop_the_others(self):
        broken = content_stream(b"0 0 m", Filter=LIT("BogusDecode"))
        (surface, _, diagnostics) = render(b"1 1 m", broken, b"2 2 m")
        assert [c.args for c in surface.find("move_to")] == [(1, 1), (2, 2)]
        assert [(d.stage, d.part) for d in diagnostics] == [(DECODE, 1)]

    def test_failing_operator_is_skipped(self):
        class BrokenText(RecordingSurface):
            def fill_text(self, text, x, y):
                raise RuntimeError("no fonts")

        (surface, _, diagnostics) = render(
            b"BT (a) Tj ET 0 0 m", surface=BrokenText()
        )
        assert [(d.stage, d.operator) for d in diagnostics] == [(APPLY, "TextDraw")]
        assert surface.find("move_to")
        assert surface.names().count("save") == surface.names().count("restore")

    def test_apply_returns_diagnostic(self):
        class Broken(RecordingSurface):
            def move_to(self, x, y):
                raise RuntimeError("broken")

        interpreter = PDFPageInterpreter(Broken())
        diagnostic = interpreter.apply(MoveTo(1, 2), part=4)
        assert diagnostic is not None
        assert (diagnostic.stage, diagnostic.part) == (APPLY, 4)
        assert interpreter.apply(TextDraw(b"")) is None


def test_render_is_repeatable():
    surface1 = RecordingSurface()
    surface2 = RecordingSurface()
    interpreter = PDFPageInterpreter(surface1)
    data = b"BT /F1 10 Tf (AB) Tj ET 0 0 m 5 5 l S"
    interpreter.render([content_stream(data)], 612, 792, 2.0)
    interpreter.surface = surface2
    interpreter.render([content_stream(data)], 612, 792, 2.0)
    assert surface1.calls == surface2.calls


def test_text_state_defaults():
    textstate = PDFTextState()
    assert textstate.fontsize == 12
    assert textstate.scaling == 100
    assert textstate.matrix == (1, 0, 0, 1, 0, 0)


@pytest.mark.parametrize(
    ("size", "family", "expected"),
    [
        (12, "sans-serif", "12px sans-serif"),
        (12.0, "sans-serif", "12px sans-serif"),
        (10.5, "serif", "10.5px serif"),
    ],
)
def test_font_spec(size, family, expected):
    assert font_spec(size, family) == expected


def test_decode_text():
    assert decode_text(b"plain") == "plain"
    assert decode_text("é".encode()) == "é"
    assert decode_text(b"\xff") == "\ufffd"


def test_invoke_raises_apply_error():
    class Broken(RecordingSurface):
        def rect(self, x, y, width, height):
            raise ZeroDivisionError("bad rect")

    interpreter = PDFPageInterpreter(Broken())
    with pytest.raises(PDFOperatorApplyError, match="bad rect"):
        interpreter.invoke(Rect(0, 0, 1, 1))


class TestTextAdjustmentFailures:
    class Unscalable(RecordingSurface):
        def transform(self, a, b, c, d, e, f):
            raise ValueError("singular")

        def scale(self, sx, sy):
            if sy == 1 and sx != 1:
                raise ValueError("no horizontal scaling")
            super().scale(sx, sy)

        def translate(self, x, y):
            if y == 3:
                raise ValueError("no rise")
            super().translate(x, y)

    def test_text_is_drawn_anyway(self):
        (surface, _, diagnostics) = render(
            b"BT 50 Tz 3 Ts (x) Tj ET", surface=self.Unscalable()
        )
        assert diagnostics == []
        assert [c.args for c in surface.find("fill_text")] == [("x", 0, 0)]
        assert surface.names().count("save") == surface.names().count("restore")

    def test_advance_does_not_depend_on_failures(self):
        class BrokenText(RecordingSurface):
            def fill_text(self, text, x, y):
                raise RuntimeError("no fonts")

        data = b"BT /F1 10 Tf (AB) Tj ET"
        for surface in (self.Unscalable(), BrokenText(), RecordingSurface()):
            (_, interpreter, _) = render(data, surface=surface)
            assert interpreter.textstate.matrix[4] == 10
