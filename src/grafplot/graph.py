"""
どこで: `src/grafplot/graph.py`。
何を: グラフ空間 → ピクセル空間の軸ごとの変換を持ち、図形を描画コンテキストへ発行する `Graph`。
なぜ: 軸・目盛り・関数グラフ・図形・3D シーンの描画を、同じ座標変換の上で一箇所にまとめるため。
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from pathlib import Path

from grafplot.canvas.context import DrawContext
from grafplot.canvas.svg import SvgContext
from grafplot.core.color import Paint, css
from grafplot.core.numeric import round_to
from grafplot.core.runtime_config import runtime_config
from grafplot.core.scene3d import Scene3D, project_scene
from grafplot.core.shapes import FunctionGraph, Function1D, Shape2D, Sprite, Text2D
from grafplot.core.vector import Vec2
from grafplot.export.image import export_image

_logger = logging.getLogger(__name__)

_ARROW_HEAD = 25.0
_LABEL_DECIMALS = 10

Drawable = Shape2D | Text2D | Sprite | Scene3D


def _ticks(start: float, end: float, step: float) -> Iterator[float]:
    """start から step 刻みで end 未満の値を列挙する（累積誤差を避けて添字から計算）。"""
    i = 0
    while True:
        value = start + i * step
        if value >= end:
            return
        yield value
        i += 1


def _label(value: float) -> str:
    # -0.0 を "0" として出すため 0.0 を足す。
    return f"{round_to(value, _LABEL_DECIMALS) + 0.0:g}"


class Graph:
    """描画コンテキストと、グラフ空間 → ピクセル空間の変換を束ねる。

    Parameters
    ----------
    width, height : int or None, optional
        キャンバス寸法 [px]。None なら context の寸法、context も無ければ config の `canvas.size`。
    context : DrawContext or None, optional
        描画先。None なら `SvgContext` を作る。

    Notes
    -----
    変換は `pixel = coord * scale + translation` を x, y 独立に適用する。
    既定の scale は config の `graph.scale`（(40, -40)、y 上向き）。
    """

    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        context: DrawContext | None = None,
    ) -> None:
        cfg = runtime_config()
        if context is None:
            context = SvgContext(width, height)
        elif width is not None or height is not None:
            context.resize(
                context.width if width is None else width,
                context.height if height is None else height,
            )
        self.ctx: DrawContext = context
        self._line_cap = cfg.line_cap
        self._font = cfg.font
        self._apply_defaults()

        self.scale_x, self.scale_y = cfg.graph_scale
        self.translation_x = 0.0
        self.translation_y = 0.0

    def _apply_defaults(self) -> None:
        self.ctx.line_cap = self._line_cap
        self.ctx.font = self._font

    @property
    def width(self) -> int:
        return self.ctx.width

    @property
    def height(self) -> int:
        return self.ctx.height

    def __repr__(self) -> str:
        return (
            f"Graph({self.width}x{self.height}, scale=({self.scale_x}, {self.scale_y}), "
            f"translation=({self.translation_x}, {self.translation_y}))"
        )

    # --- transform ------------------------------------------------------------

    def to_pixel(self, pos: Vec2) -> tuple[float, float]:
        """グラフ座標をピクセル座標へ写す。"""
        return (
            pos.x * self.scale_x + self.translation_x,
            pos.y * self.scale_y + self.translation_y,
        )

    def to_graph(self, px: float, py: float) -> Vec2:
        """ピクセル座標をグラフ座標へ戻す（`to_pixel` の逆写像）。"""
        return Vec2(
            (px - self.translation_x) / self.scale_x,
            (py - self.translation_y) / self.scale_y,
        )

    def set_size(self, width: int, height: int) -> None:
        """キャンバス寸法を変更する。

        コンテキストの状態は初期化されるため、線端と既定フォントは付け直す。
        """
        self.ctx.resize(width, height)
        self._apply_defaults()

    def center(self) -> None:
        self.translation_x = self.width * 0.5
        self.translation_y = self.height * 0.5

    def center_x(self) -> None:
        self.translation_x = self.width * 0.5

    def center_y(self) -> None:
        self.translation_y = self.height * 0.5

    def set_translation(self, x: float, y: float) -> None:
        self.translation_x = x
        self.translation_y = y

    def set_translation_x(self, x: float) -> None:
        self.translation_x = x

    def set_translation_y(self, y: float) -> None:
        self.translation_y = y

    def translate(self, x: float, y: float) -> None:
        self.translation_x += x
        self.translation_y += y

    def set_scale(self, x: float, y: float) -> None:
        self.scale_x = x
        self.scale_y = y

    def set_scale_x(self, x: float) -> None:
        self.scale_x = x

    def set_scale_y(self, y: float) -> None:
        self.scale_y = y

    def scale(self, x: float, y: float) -> None:
        self.scale_x *= x
        self.scale_y *= y

    def get_function_graph(
        self,
        fun: Function1D,
        color: Paint = "black",
        step: float = 0.01,
        precision: int = 2,
    ) -> FunctionGraph:
        """キャンバスの左端から右端までを覆う FunctionGraph を返す。"""
        start = math.trunc(-self.translation_x / self.scale_x) - 1
        end = math.trunc((-self.translation_x + self.width) / self.scale_x) + 1
        return FunctionGraph(fun, start, end, color, step, precision)

    # --- background / axes ----------------------------------------------------

    def clear_background(self) -> None:
        self.ctx.clear_rect(0, 0, self.width, self.height)

    def fill_background(self, color: Paint) -> None:
        self.ctx.fill_style = css(color)
        self.ctx.fill_rect(0, 0, self.width, self.height)

    def _stroke_segments(
        self,
        segments: Sequence[tuple[float, float, float, float]],
        line_width: float,
        color: Paint,
    ) -> None:
        ctx = self.ctx
        ctx.line_width = line_width
        ctx.stroke_style = css(color)
        ctx.begin_path()
        for x0, y0, x1, y1 in segments:
            ctx.move_to(x0, y0)
            ctx.line_to(x1, y1)
        ctx.stroke()

    def _axis_x_segment(self) -> tuple[float, float, float, float]:
        return (0.0, self.translation_y, float(self.width), self.translation_y)

    def _axis_y_segment(self) -> tuple[float, float, float, float]:
        return (self.translation_x, 0.0, self.translation_x, float(self.height))

    def draw_axis(self, line_width: float = 3, color: Paint = "black") -> None:
        """x 軸と y 軸を描く。"""
        self._stroke_segments([self._axis_x_segment(), self._axis_y_segment()], line_width, color)

    def draw_axis_x(self, line_width: float = 3, color: Paint = "black") -> None:
        self._stroke_segments([self._axis_x_segment()], line_width, color)

    def draw_axis_y(self, line_width: float = 3, color: Paint = "black") -> None:
        self._stroke_segments([self._axis_y_segment()], line_width, color)

    def _pixel_step(self, scale: float, step: float) -> float:
        pixel_step = abs(scale * step)
        if pixel_step == 0 or not math.isfinite(pixel_step):
            raise ValueError(f"目盛り間隔は 0 以外の有限値である必要がある: step={step}, scale={scale}")
        return pixel_step

    def draw_number_line_x(
        self,
        step: float = 1,
        offset: Vec2 | None = None,
        min_value: float = -math.inf,
        max_value: float = math.inf,
        color: Paint = "black",
        font: str = "30px arial",
    ) -> None:
        """x 軸に沿って目盛りの数値を描く。

        Parameters
        ----------
        step : float
            目盛り間隔（グラフ空間）。
        offset : Vec2 or None
            ラベル位置のずらし量（グラフ空間）。
        min_value, max_value : float
            この範囲の値だけを描く。
        color : Color or str
            文字色。
        font : str
            CSS フォント指定。
        """
        off = Vec2() if offset is None else offset
        ctx = self.ctx
        step_x = self._pixel_step(self.scale_x, step)
        start_x = math.fmod(self.translation_x, step_x) - step_x

        ctx.fill_style = css(color)
        ctx.font = font
        ctx.text_align = "center"
        ctx.text_baseline = "top"
        y = self.translation_y + off.y * self.scale_y
        for x in _ticks(start_x, float(self.width), step_x):
            value = (x - self.translation_x) / self.scale_x
            if min_value <= value <= max_value:
                ctx.fill_text(_label(value), x + off.x * self.scale_x, y)

    def draw_number_line_y(
        self,
        step: float = 1,
        offset: Vec2 | None = None,
        min_value: float = -math.inf,
        max_value: float = math.inf,
        color: Paint = "black",
        font: str = "30px arial",
    ) -> None:
        """y 軸に沿って目盛りの数値を描く（引数は `draw_number_line_x` と同じ）。"""
        off = Vec2() if offset is None else offset
        ctx = self.ctx
        step_y = self._pixel_step(self.scale_y, step)
        start_y = math.fmod(self.translation_y, step_y) - step_y

        ctx.fill_style = css(color)
        ctx.font = font
        ctx.text_align = "right"
        ctx.text_baseline = "middle"
        x = self.translation_x + off.x * self.scale_x
        for y in _ticks(start_y, float(self.height), step_y):
            value = (y - self.translation_y) / self.scale_y
            if min_value <= value <= max_value:
                ctx.fill_text(_label(value), x, y + off.y * self.scale_y)

    def _grid_frame(self, step: float) -> tuple[float, float, float, float]:
        step_x = self._pixel_step(self.scale_x, step)
        step_y = self._pixel_step(self.scale_y, step)
        start_x = math.fmod(self.translation_x, step_x) - step_x
        start_y = math.fmod(self.translation_y, step_y) - step_y
        return start_x, start_y, step_x, step_y

    def _grid_vertical(self, step: float) -> list[tuple[float, float, float, float]]:
        start_x, start_y, step_x, _ = self._grid_frame(step)
        end_y = float(self.height)
        return [(x, start_y, x, end_y) for x in _ticks(start_x, float(self.width), step_x)]

    def _grid_horizontal(self, step: float) -> list[tuple[float, float, float, float]]:
        start_x, start_y, _, step_y = self._grid_frame(step)
        end_x = float(self.width)
        return [(start_x, y, end_x, y) for y in _ticks(start_y, float(self.height), step_y)]

    def draw_grid(self, step: float = 1, width: float = 1, color: Paint = "black") -> None:
        """step 間隔の格子を描く。"""
        segments = self._grid_vertical(step) + self._grid_horizontal(step)
        self._stroke_segments(segments, width, color)

    def draw_grid_x(self, step: float = 1, width: float = 1, color: Paint = "black") -> None:
        """縦線（x 方向に並ぶ線）だけの格子を描く。"""
        self._stroke_segments(self._grid_vertical(step), width, color)

    def draw_grid_y(self, step: float = 1, width: float = 1, color: Paint = "black") -> None:
        """横線（y 方向に並ぶ線）だけの格子を描く。"""
        self._stroke_segments(self._grid_horizontal(step), width, color)

    # --- primitives -----------------------------------------------------------

    def _default_line_width(self) -> float:
        return runtime_config().shape_line_width

    def draw_line(
        self,
        pos1: Vec2,
        pos2: Vec2,
        color: Paint = "black",
        width: float | None = None,
    ) -> None:
        lw = self._default_line_width() if width is None else width
        self._stroke_segments([(*self.to_pixel(pos1), *self.to_pixel(pos2))], lw, color)

    def draw_arrow(
        self,
        start: Vec2,
        end: Vec2,
        color: Paint = "black",
        width: float | None = None,
    ) -> None:
        """start から end への矢印を描く。矢じりは 25px。"""
        s = Vec2(start.x * self.scale_x, start.y * self.scale_y)
        e = Vec2(end.x * self.scale_x, end.y * self.scale_y)
        shaft = e.sub(s)
        angle = shaft.angle()
        length = shaft.len()

        p1 = Vec2(length - _ARROW_HEAD, -_ARROW_HEAD).rot_by(angle).add_to(s)
        p2 = Vec2(length - _ARROW_HEAD, _ARROW_HEAD).rot_by(angle).add_to(s)

        tx, ty = self.translation_x, self.translation_y
        ctx = self.ctx
        ctx.begin_path()
        ctx.move_to(s.x + tx, s.y + ty)
        ctx.line_to(e.x + tx, e.y + ty)
        ctx.move_to(p1.x + tx, p1.y + ty)
        ctx.line_to(e.x + tx, e.y + ty)
        ctx.line_to(p2.x + tx, p2.y + ty)
        ctx.line_width = self._default_line_width() if width is None else width
        ctx.stroke_style = css(color)
        ctx.stroke()

    def draw_point(self, pos: Vec2, color: Paint = "black", radius: float | None = None) -> None:
        self.draw_points([pos], color, radius)

    def draw_points(
        self,
        points: Sequence[Vec2],
        color: Paint = "black",
        radius: float | None = None,
    ) -> None:
        """各点を半径 radius [px] の塗り円で描く。既定半径は線幅 + 2。"""
        r = self._default_line_width() + 2 if radius is None else radius
        ctx = self.ctx
        ctx.fill_style = css(color)
        for point in points:
            px, py = self.to_pixel(point)
            ctx.begin_path()
            ctx.arc(px, py, r, 0.0, math.tau)
            ctx.fill()

    # --- drawables ------------------------------------------------------------

    def draw_function_graph(self, graph: FunctionGraph) -> None:
        """FunctionGraph を折れ線で描く。y が非有限の点で線を切る。"""
        if not graph.points:
            _logger.debug("draw_function_graph: 点が無いため何も描きません")
            return
        ctx = self.ctx
        ctx.stroke_style = css(graph.outline_color)
        ctx.line_width = graph.outline_width

        ctx.begin_path()
        ctx.move_to(*self.to_pixel(graph.points[0]))
        for point in graph.points[1:]:
            if not math.isfinite(point.y):
                ctx.stroke()
                ctx.begin_path()
                ctx.move_to(*self.to_pixel(point))
            else:
                ctx.line_to(*self.to_pixel(point))
        ctx.stroke()

    def draw_shape(self, shape: Shape2D) -> None:
        """Shape2D を描く。

        Notes
        -----
        closed かつ fill の図形は `fill_opacity` の不透明度で塗り、
        `outline_width` が 0 でなければ輪郭を描く。
        """
        if not shape.points:
            _logger.debug("draw_shape: 点が無いため何も描きません")
            return
        ctx = self.ctx
        ctx.begin_path()
        ctx.move_to(*self.to_pixel(shape.points[0]))
        for point in shape.points[1:]:
            ctx.line_to(*self.to_pixel(point))

        if shape.closed:
            ctx.line_to(*self.to_pixel(shape.points[0]))
            if shape.fill:
                ctx.global_alpha = shape.fill_opacity
                ctx.fill_style = css(shape.fill_color)
                ctx.fill()
                ctx.global_alpha = 1.0
        if shape.outline_width:
            ctx.stroke_style = css(shape.outline_color)
            ctx.line_width = shape.outline_width
            ctx.stroke()

    def draw_text(self, text: Text2D) -> None:
        ctx = self.ctx
        ctx.font = f"{text.size}px {text.font}"
        ctx.text_baseline = text.baseline
        ctx.text_align = text.align
        ctx.fill_style = css(text.color)
        ctx.fill_text(text.string, *self.to_pixel(text.pos))

    def draw_scene3d(self, scene: Scene3D) -> None:
        """Scene3D を投影し、奥から順に多角形として描く。"""
        faces = project_scene(scene)
        ctx = self.ctx
        ctx.line_width = scene.line_width
        for face in faces:
            color = face.color.to_rgba_string()
            ctx.begin_path()
            first = self.to_pixel(face.points[0])
            ctx.move_to(*first)
            for p in face.points[1:]:
                ctx.line_to(*self.to_pixel(p))
            ctx.line_to(*first)
            if scene.fill:
                ctx.fill_style = color
                ctx.fill()
            ctx.stroke_style = color
            ctx.stroke()
        _logger.debug("draw_scene3d: %d faces drawn", len(faces))

    def draw_sprite(self, sprite: Sprite) -> None:
        """Sprite を中心まわりに `angle` 回転させて描く。"""
        ctx = self.ctx
        cx, cy = self.to_pixel(sprite.center)
        px, py = self.to_pixel(sprite.pos)
        ctx.translate(cx, cy)
        ctx.rotate(-sprite.angle)
        ctx.translate(-cx, -cy)
        ctx.draw_image(sprite.image, px, py, sprite.size.x * self.scale_x, sprite.size.y * self.scale_y)
        ctx.reset_transform()

    def draw(self, obj: Drawable) -> None:
        """オブジェクトの型に応じた描画メソッドへ振り分ける。

        Raises
        ------
        TypeError
            未対応の型の場合。
        """
        if isinstance(obj, FunctionGraph):
            self.draw_function_graph(obj)
        elif isinstance(obj, Shape2D):
            self.draw_shape(obj)
        elif isinstance(obj, Text2D):
            self.draw_text(obj)
        elif isinstance(obj, Sprite):
            self.draw_sprite(obj)
        elif isinstance(obj, Scene3D):
            self.draw_scene3d(obj)
        else:
            raise TypeError(f"描画できない型: {type(obj).__name__}")

    # --- output ---------------------------------------------------------------

    def save(self, path: str | Path) -> Path:
        """描画内容を `.svg` または `.png` として保存する。

        Raises
        ------
        TypeError
            コンテキストが SvgContext でない場合。
        ValueError
            未対応の拡張子の場合。
        """
        if not isinstance(self.ctx, SvgContext):
            raise TypeError(f"save は SvgContext でのみ使える: got={type(self.ctx).__name__}")
        out = export_image(self.ctx, path)
        _logger.info("Graph saved: %s", out)
        return out


__all__ = ["Drawable", "Graph"]
