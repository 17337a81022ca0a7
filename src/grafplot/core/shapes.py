"""
どこで: `src/grafplot/core/shapes.py`。
何を: グラフ空間で定義される 2D 描画オブジェクト（多角形・円・弧・線・関数グラフ・テキスト・スプライト）。
なぜ: 座標変換と描画命令の発行を Graph に任せ、図形側は点列と見た目の属性だけを持つため。
"""

from __future__ import annotations

import copy
import logging
import math
from collections.abc import Callable, Sequence

import numpy as np

from grafplot.core.color import Paint
from grafplot.core.matrix import Mat2x2
from grafplot.core.numeric import round_to
from grafplot.core.runtime_config import runtime_config
from grafplot.core.vector import Vec2

_logger = logging.getLogger(__name__)

Function1D = Callable[[float], float]

# 関数評価で出た場合に NaN（＝線の切れ目）として扱う例外。
_EVAL_ERRORS = (ValueError, ZeroDivisionError, OverflowError)


class Shape2D:
    """点列で定義される 2D 図形。

    Parameters
    ----------
    points : Sequence[Vec2]
        頂点列（グラフ空間）。
    color : Color or str, optional
        塗り色と輪郭色の両方に使う色。
    fill : bool, optional
        True なら閉じた図形を `fill_opacity` で塗る。
    closed : bool, optional
        True なら終点から始点へ線を閉じる。
    center : Vec2 or None, optional
        `rot()` の回転中心。None なら原点。

    Notes
    -----
    `outline_width` と `fill_opacity` の既定値は runtime config の
    `shape.line_width` / `shape.fill_opacity` から取る。
    """

    def __init__(
        self,
        points: Sequence[Vec2],
        color: Paint = "black",
        fill: bool = False,
        closed: bool = True,
        center: Vec2 | None = None,
    ) -> None:
        cfg = runtime_config()
        self.points: list[Vec2] = list(points)
        self.fill_color: Paint = color
        self.outline_color: Paint = color
        self.outline_width: float = cfg.shape_line_width
        self.fill_opacity: float = cfg.shape_fill_opacity
        self.fill = bool(fill)
        self.closed = bool(closed)
        self.center = Vec2() if center is None else center

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(points={len(self.points)}, "
            f"closed={self.closed}, fill={self.fill})"
        )

    def move(self, vec: Vec2) -> Shape2D:
        """全頂点と中心を vec だけ平行移動する。"""
        for point in self.points:
            point.add_to(vec)
        self.center.add_to(vec)
        return self

    def rot(self, angle: float) -> Shape2D:
        """中心まわりに angle [rad] 回転する。"""
        for point in self.points:
            point.rot_around_by(self.center, angle)
        return self

    def transform(self, mat: Mat2x2) -> Shape2D:
        """全頂点に行列を右から掛ける。"""
        for point in self.points:
            point.mult_by_mat(mat)
        return self

    def center_origin(self) -> Shape2D:
        """中心を頂点の平均位置に置き直す。"""
        if not self.points:
            return self
        n = len(self.points)
        self.center = Vec2(
            sum(p.x for p in self.points) / n,
            sum(p.y for p in self.points) / n,
        )
        return self

    def bounds(self) -> tuple[Vec2, Vec2]:
        """(最小角, 最大角) の軸平行境界を返す。

        Raises
        ------
        ValueError
            頂点が空の場合。
        """
        if not self.points:
            raise ValueError("頂点が空の図形は境界を持たない")
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return Vec2(min(xs), min(ys)), Vec2(max(xs), max(ys))

    def clone(self) -> Shape2D:
        return copy.deepcopy(self)

    @classmethod
    def from_string(
        cls,
        text: str,
        color: Paint = "black",
        fill: bool = False,
        closed: bool = True,
    ) -> Shape2D:
        """`"1,2 10,2 5,3"` 形式の文字列から図形を作る。

        `"10,2,"` のような末尾の余分なカンマは無視する。
        """
        points: list[Vec2] = []
        for token in text.split():
            try:
                x_text, y_text, *rest = token.split(",")
                if any(part.strip() for part in rest):
                    raise ValueError(token)
                points.append(Vec2(float(x_text), float(y_text)))
            except ValueError as exc:
                raise ValueError(f"点の書式が不正: {token!r}（`x,y` が必要）") from exc
        return Shape2D(points, color, fill, closed)


class Rectangle(Shape2D):
    """左下 pos と寸法 size で定義する長方形。"""

    def __init__(self, pos: Vec2, size: Vec2, color: Paint = "black", fill: bool = False) -> None:
        points = [
            Vec2(pos.x, pos.y),
            Vec2(pos.x + size.x, pos.y),
            Vec2(pos.x + size.x, pos.y + size.y),
            Vec2(pos.x, pos.y + size.y),
        ]
        center = Vec2(pos.x + size.x * 0.5, pos.y + size.y * 0.5)
        super().__init__(points, color, fill, True, center)
        self.pos = pos.clone()
        self.size = size.clone()


class Box(Rectangle):
    """対角の 2 頂点 pos1 / pos2 で定義する長方形。"""

    def __init__(self, pos1: Vec2, pos2: Vec2, color: Paint = "black", fill: bool = False) -> None:
        super().__init__(pos1, pos2.sub(pos1), color, fill)


class RegularPolygon(Shape2D):
    """正多角形。最初の頂点は中心の真上（+90°）に置く。"""

    def __init__(
        self,
        pos: Vec2,
        point_count: int,
        radius: float = 5,
        color: Paint = "black",
        fill: bool = False,
    ) -> None:
        count = int(point_count)
        if count < 3:
            raise ValueError(f"point_count は 3 以上である必要がある: got={point_count!r}")
        step = math.tau / count
        points = [
            Vec2(
                pos.x + math.cos(math.pi * 0.5 + i * step) * radius,
                pos.y + math.sin(math.pi * 0.5 + i * step) * radius,
            )
            for i in range(count)
        ]
        super().__init__(points, color, fill, True, pos.clone())
        self.pos = pos.clone()
        self.point_count = count
        self.radius = float(radius)


class Circle(RegularPolygon):
    def __init__(
        self,
        pos: Vec2,
        radius: float = 5,
        color: Paint = "black",
        fill: bool = False,
        point_count: int = 50,
    ) -> None:
        super().__init__(pos, point_count, radius, color, fill)


class Arc(Shape2D):
    """start_angle から end_angle [rad] までの円弧（point_count + 1 点）。

    塗る場合のみ閉じる（扇形ではなく弦で閉じる）。
    """

    def __init__(
        self,
        pos: Vec2,
        start_angle: float,
        end_angle: float,
        radius: float = 5,
        color: Paint = "black",
        fill: bool = False,
        point_count: int = 50,
    ) -> None:
        count = int(point_count)
        if count < 1:
            raise ValueError(f"point_count は 1 以上である必要がある: got={point_count!r}")
        step = (end_angle - start_angle) / count
        points = [
            Vec2(
                pos.x + math.cos(start_angle + i * step) * radius,
                pos.y + math.sin(start_angle + i * step) * radius,
            )
            for i in range(count + 1)
        ]
        super().__init__(points, color, fill, fill, pos.clone())
        self.pos = pos.clone()
        self.point_count = count
        self.radius = float(radius)
        self.start_angle = float(start_angle)
        self.end_angle = float(end_angle)


class Line(Shape2D):
    def __init__(self, pos1: Vec2, pos2: Vec2, color: Paint = "black") -> None:
        super().__init__([pos1, pos2], color, False, False)


def _evaluate(fun: Function1D, x: float) -> float:
    try:
        y = fun(x)
    except _EVAL_ERRORS:
        return math.nan
    if isinstance(y, complex):
        return math.nan
    return float(y)


class FunctionGraph(Shape2D):
    """1 変数関数 y = fun(x) を [start, end) で標本化した折れ線。

    Parameters
    ----------
    fun : Callable[[float], float]
        評価する関数。
    start, end : float
        x の範囲（end は含まない）。start > end なら空のグラフになる。
    color : Color or str, optional
        線色。
    step : float, optional
        標本間隔。
    precision : int, optional
        x を丸める小数桁数。

    Notes
    -----
    定義域外などで `ValueError` / `ZeroDivisionError` / `OverflowError` が出た点と、
    複素数を返した点は y=NaN とし、描画時に線を切る。
    """

    def __init__(
        self,
        fun: Function1D,
        start: float,
        end: float,
        color: Paint = "black",
        step: float = 0.01,
        precision: int = 2,
    ) -> None:
        if step <= 0:
            raise ValueError(f"step は正の値である必要がある: got={step!r}")

        points: list[Vec2] = []
        if start <= end:
            count = int(math.ceil((end - start) / step)) + 1
            raw = start + np.arange(count, dtype=np.float64) * step
            # 半開区間の判定は丸め前の x で行う。
            xs = [round_to(float(x), int(precision)) for x in raw[raw < end]]
            points = [Vec2(x, _evaluate(fun, x)) for x in xs]
        super().__init__(points, color, False, False)
        self.fun = fun
        self.start = float(start)
        self.end = float(end)
        self.step = float(step)
        self.precision = int(precision)
        _logger.debug("FunctionGraph: %d samples in [%g, %g)", len(points), start, end)


class Text2D:
    """グラフ空間の位置 pos に描く文字列。"""

    def __init__(
        self,
        string: str,
        pos: Vec2,
        color: Paint = "black",
        size: float = 30,
        font: str = "arial",
    ) -> None:
        self.string = str(string)
        self.pos = pos
        self.color = color
        self.size = size
        self.font = font
        self.baseline = "bottom"
        self.align = "center"

    def __repr__(self) -> str:
        return f"Text2D({self.string!r}, {self.pos!r})"


class Sprite:
    """画像を pos（左下）から size の範囲に貼るオブジェクト。

    `image` は出力側が解決できるパスまたは URL。`angle` [rad] で中心まわりに回転する。
    """

    def __init__(self, image: str, pos: Vec2, size: Vec2 | None = None) -> None:
        self.image = str(image)
        self.pos = pos
        self.size = Vec2(1.0, 1.0) if size is None else size
        self.center = pos.add(self.size.mult(0.5))
        self.angle = 0.0

    def __repr__(self) -> str:
        return f"Sprite({self.image!r}, {self.pos!r}, {self.size!r})"


__all__ = [
    "Arc",
    "Box",
    "Circle",
    "Function1D",
    "FunctionGraph",
    "Line",
    "Rectangle",
    "RegularPolygon",
    "Shape2D",
    "Sprite",
    "Text2D",
]
