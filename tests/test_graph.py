from __future__ import annotations

import math
import subprocess
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from grafplot.canvas.recording import RecordingContext
from grafplot.canvas.svg import SvgContext
from grafplot.core.color import Color
from grafplot.core.mesh import Mesh3D
from grafplot.core.runtime_config import set_config_path
from grafplot.core.scene3d import Scene3D
from grafplot.core.shapes import Circle, FunctionGraph, Line, Rectangle, Shape2D, Sprite, Text2D
from grafplot.core.vector import Vec2
from grafplot.export import image
from grafplot.graph import Graph

_NS = {"svg": "http://www.w3.org/2000/svg"}


@pytest.fixture(autouse=True)
def _reset_runtime_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    set_config_path(None)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    yield
    set_config_path(None)


def _graph(width: int = 400, height: int = 400) -> tuple[Graph, RecordingContext]:
    ctx = RecordingContext(width, height)
    graph = Graph(context=ctx)
    graph.center()
    return graph, ctx


def test_defaults_come_from_config() -> None:
    graph = Graph()

    assert isinstance(graph.ctx, SvgContext)
    assert (graph.width, graph.height) == (1000, 1000)
    assert (graph.scale_x, graph.scale_y) == (40.0, -40.0)
    assert (graph.translation_x, graph.translation_y) == (0.0, 0.0)
    assert graph.ctx.line_cap == "round"
    assert graph.ctx.font == "30px Arial"


def test_size_arguments_resize_context() -> None:
    assert (Graph(200, 100).width, Graph(200, 100).height) == (200, 100)

    ctx = RecordingContext(10, 10)
    graph = Graph(300, None, context=ctx)
    assert (ctx.width, ctx.height) == (300, 10)
    assert graph.ctx is ctx


def test_set_size_restores_line_cap_and_font() -> None:
    graph, ctx = _graph()
    graph.set_size(50, 60)

    assert (graph.width, graph.height) == (50, 60)
    assert ctx.line_cap == "round"
    assert ctx.font == "30px Arial"


def test_to_pixel_and_to_graph_are_inverse() -> None:
    graph, _ = _graph()

    assert graph.to_pixel(Vec2(1, 1)) == (240.0, 160.0)
    assert graph.to_graph(240, 160) == Vec2(1, 1)
    assert graph.to_graph(*graph.to_pixel(Vec2(-2.5, 3))) == Vec2(-2.5, 3)


def test_transform_setters() -> None:
    graph, _ = _graph(400, 200)
    assert (graph.translation_x, graph.translation_y) == (200.0, 100.0)

    graph.set_translation(0, 0)
    graph.center_x()
    assert (graph.translation_x, graph.translation_y) == (200.0, 0.0)
    graph.center_y()
    assert graph.translation_y == 100.0

    graph.set_translation_x(1)
    graph.set_translation_y(2)
    graph.translate(10, 20)
    assert (graph.translation_x, graph.translation_y) == (11, 22)

    graph.set_scale(10, -10)
    graph.scale(2, 3)
    assert (graph.scale_x, graph.scale_y) == (20, -30)
    graph.set_scale_x(5)
    graph.set_scale_y(6)
    assert (graph.scale_x, graph.scale_y) == (5, 6)


def test_get_function_graph_spans_visible_range() -> None:
    graph, _ = _graph(1000, 1000)
    fg = graph.get_function_graph(lambda x: x, "red", step=1, precision=0)

    assert (fg.start, fg.end) == (-13.0, 13.0)
    assert fg.points[0].x == -13
    assert fg.points[-1].x == 12
    assert fg.outline_color == "red"


def test_background_ops() -> None:
    graph, ctx = _graph(100, 50)
    graph.clear_background()
    graph.fill_background(Color(1, 2, 3))

    assert ctx.commands[0].op == "clear_rect"
    assert ctx.commands[0].args == (0.0, 0.0, 100.0, 50.0)
    assert ctx.commands[1].op == "fill_rect"
    assert ctx.commands[1].style.fill_style == "rgb(1,2,3)"


def test_draw_axis_uses_translation() -> None:
    graph, ctx = _graph(400, 200)
    graph.draw_axis(line_width=2, color="blue")

    assert ctx.ops() == ["begin_path", "move_to", "line_to", "move_to", "line_to", "stroke"]
    assert [c.args for c in ctx.commands[1:5]] == [(0, 100), (400, 100), (200, 0), (200, 200)]
    stroke = ctx.commands[-1].style
    assert (stroke.line_width, stroke.stroke_style) == (2.0, "blue")


def test_draw_axis_x_and_y() -> None:
    graph, ctx = _graph(400, 200)
    graph.draw_axis_x()
    assert ctx.find("line_to")[0].args == (400, 100)
    assert ctx.find("stroke")[0].style.line_width == 3.0

    ctx.clear_commands()
    graph.draw_axis_y()
    assert ctx.find("line_to")[0].args == (200, 200)


def test_number_line_x_labels_ticks() -> None:
    graph, ctx = _graph()
    graph.draw_number_line_x(color="red", font="12px serif")

    texts = ctx.find("fill_text")
    assert [t.args[0] for t in texts] == [str(v) for v in range(-6, 5)]
    zero = texts[6]
    assert zero.args == ("0", 200.0, 200.0)
    assert zero.style.text_align == "center"
    assert zero.style.text_baseline == "top"
    assert zero.style.fill_style == "red"
    assert zero.style.font == "12px serif"


def test_number_line_x_respects_min_max_and_offset() -> None:
    graph, ctx = _graph()
    graph.draw_number_line_x(offset=Vec2(0.5, -0.5), min_value=-2, max_value=2)

    texts = ctx.find("fill_text")
    assert [t.args[0] for t in texts] == ["-2", "-1", "0", "1", "2"]
    assert texts[2].args[1:] == (220.0, 220.0)


def test_number_line_y_labels_ticks() -> None:
    graph, ctx = _graph()
    graph.draw_number_line_y(step=2)

    texts = ctx.find("fill_text")
    assert "0" in [t.args[0] for t in texts]
    assert "-0" not in [t.args[0] for t in texts]
    top = texts[0]
    assert top.args == ("6", 200.0, -40.0)
    assert top.style.text_align == "right"
    assert top.style.text_baseline == "middle"


def test_number_line_rejects_zero_step() -> None:
    graph, _ = _graph()
    with pytest.raises(ValueError):
        graph.draw_number_line_x(step=0)


def test_draw_grid_counts() -> None:
    graph, ctx = _graph()
    graph.draw_grid(width=2, color="gray")

    assert len(ctx.find("move_to")) == 22
    assert ctx.find("stroke")[0].style.stroke_style == "gray"

    ctx.clear_commands()
    graph.draw_grid_x()
    vertical = [c.args for c in ctx.find("move_to")]
    assert len(vertical) == 11
    assert all(x0 == x1 for (x0, _), (x1, _) in zip(vertical, [c.args for c in ctx.find("line_to")]))

    ctx.clear_commands()
    graph.draw_grid_y(step=2)
    assert len(ctx.find("move_to")) == 6


def test_draw_line_and_arrow() -> None:
    graph, ctx = _graph()
    graph.set_translation(0, 0)
    graph.draw_line(Vec2(0, 0), Vec2(1, 1), "green")

    assert [c.args for c in ctx.commands[1:3]] == [(0, 0), (40, -40)]
    assert ctx.find("stroke")[0].style.line_width == 5.0

    ctx.clear_commands()
    graph.draw_arrow(Vec2(0, 0), Vec2(1, 0), width=1)
    args = [c.args for c in ctx.commands if c.op in ("move_to", "line_to")]
    assert args[0] == (0, 0)
    assert args[1] == (40, 0)
    assert args[2] == pytest.approx((15, -25))
    assert args[3] == (40, 0)
    assert args[4] == pytest.approx((15, 25))
    assert ctx.find("stroke")[0].style.line_width == 1.0


def test_draw_points_use_arcs() -> None:
    graph, ctx = _graph()
    graph.draw_point(Vec2(1, 0), "red")
    graph.draw_points([Vec2(0, 0), Vec2(0, 1)], radius=3)

    arcs = ctx.find("arc")
    assert arcs[0].args == (240.0, 200.0, 7.0, 0.0, math.tau, False)
    assert arcs[0].style.fill_style == "red"
    assert [a.args[2] for a in arcs[1:]] == [3.0, 3.0]
    assert len(ctx.find("fill")) == 3


def test_draw_function_graph_breaks_on_nan() -> None:
    graph, ctx = _graph()
    fg = FunctionGraph(lambda x: x, 0, 3, "blue", step=1)
    fg.points[1].y = math.nan

    graph.draw_function_graph(fg)

    assert ctx.ops() == ["begin_path", "move_to", "stroke", "begin_path", "move_to", "line_to", "stroke"]
    assert ctx.find("stroke")[0].style.stroke_style == "blue"

    ctx.clear_commands()
    graph.draw_function_graph(FunctionGraph(lambda x: x, 1, 0))
    assert ctx.commands == []


def test_draw_shape_fills_with_opacity_then_strokes() -> None:
    graph, ctx = _graph()
    graph.draw_shape(Rectangle(Vec2(0, 0), Vec2(1, 1), Color(255, 0, 0), fill=True))

    assert ctx.ops() == ["begin_path", "move_to", "line_to", "line_to", "line_to", "line_to", "fill", "stroke"]
    fill = ctx.find("fill")[0]
    assert fill.style.global_alpha == 0.2
    assert fill.style.fill_style == "rgb(255,0,0)"
    stroke = ctx.find("stroke")[0]
    assert stroke.style.global_alpha == 1.0
    assert stroke.style.line_width == 5.0


def test_draw_shape_open_and_outline_free() -> None:
    graph, ctx = _graph()
    graph.draw_shape(Line(Vec2(0, 0), Vec2(1, 1)))
    assert ctx.ops() == ["begin_path", "move_to", "line_to", "stroke"]

    ctx.clear_commands()
    shape = Circle(Vec2(), 1, fill=True, point_count=3)
    shape.outline_width = 0
    graph.draw_shape(shape)
    assert "stroke" not in ctx.ops()

    ctx.clear_commands()
    graph.draw_shape(Shape2D([]))
    assert ctx.commands == []


def test_draw_text_sets_font_and_alignment() -> None:
    graph, ctx = _graph()
    graph.draw_text(Text2D("hello", Vec2(1, 1), "purple", size=20, font="serif"))

    cmd = ctx.find("fill_text")[0]
    assert cmd.args == ("hello", 240.0, 160.0)
    assert cmd.style.font == "20px serif"
    assert (cmd.style.text_align, cmd.style.text_baseline) == ("center", "bottom")
    assert cmd.style.fill_style == "purple"


def test_draw_scene3d_fills_and_strokes_each_face() -> None:
    graph, ctx = _graph()
    scene = Scene3D([Mesh3D.cube(1.0, Color(200, 100, 50))], line_width=2)
    graph.draw_scene3d(scene)

    assert ctx.ops().count("begin_path") == 2
    assert ctx.ops().count("fill") == 2
    fill = ctx.find("fill")[0]
    assert fill.style.fill_style == "rgba(200,100,50,1)"
    assert ctx.find("stroke")[0].style.line_width == 2.0

    ctx.clear_commands()
    scene.fill = False
    graph.draw_scene3d(scene)
    assert "fill" not in ctx.ops()


def test_draw_sprite_rotates_around_center() -> None:
    graph, ctx = _graph()
    sprite = Sprite("tex.png", Vec2(0, 0), Vec2(2, 1))
    sprite.angle = math.pi / 2
    graph.draw_sprite(sprite)

    assert ctx.ops() == ["translate", "rotate", "translate", "draw_image", "reset_transform"]
    assert ctx.commands[0].args == (240.0, 180.0)
    assert ctx.commands[1].args == (-math.pi / 2,)
    assert ctx.find("draw_image")[0].args == ("tex.png", 200.0, 200.0, 80.0, -40.0)
    assert not ctx.has_transform()


def test_draw_dispatches_by_type() -> None:
    graph, ctx = _graph()
    graph.draw(FunctionGraph(lambda x: x, 0, 1, step=0.5))
    assert "fill" not in ctx.ops()

    ctx.clear_commands()
    graph.draw(Text2D("t", Vec2()))
    assert ctx.ops() == ["fill_text"]

    ctx.clear_commands()
    graph.draw(Scene3D([]))
    assert ctx.commands == []

    with pytest.raises(TypeError):
        graph.draw("not drawable")  # type: ignore[arg-type]


def test_save_svg_renders_full_plot(tmp_path: Path) -> None:
    graph = Graph(200, 200)
    graph.center()
    graph.draw_grid(color="#cccccc")
    graph.draw_axis()
    graph.draw(graph.get_function_graph(lambda x: math.sin(x), "red"))
    graph.draw(Circle(Vec2(0, 0), 1, "blue", fill=True))

    out = graph.save(tmp_path / "out" / "plot.svg")

    root = ET.fromstring(out.read_text(encoding="utf-8"))
    paths = root.findall("svg:path", _NS)
    assert len(paths) == 5
    assert paths[-2].attrib["fill-opacity"] == "0.200"


def test_save_png_goes_through_resvg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[list[str]] = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(args=cmd, returncode=0, stdout="", stderr="")

    monkeypatch.setattr(image.subprocess, "run", fake_run)

    out = Graph(30, 20).save(tmp_path / "plot.png")
    assert out == tmp_path / "plot.png"
    assert calls[0][calls[0].index("--width") + 1] == "30"


def test_save_requires_svg_context(tmp_path: Path) -> None:
    graph, _ = _graph()
    with pytest.raises(TypeError):
        graph.save(tmp_path / "plot.svg")
