# どこで: `src/grafplot/canvas/context.py`。
# 何を: Canvas 2D API 相当の描画コンテキスト規約と、状態・変換を管理する共通基底を定義する。
# なぜ: Graph の描画命令を、SVG 出力や記録用など複数のバックエンドで共有するため。

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from grafplot.core.color import Paint


@dataclass(frozen=True, slots=True)
class DrawStyle:
    """描画命令の発行時点でのスタイル状態のスナップショット。"""

    line_width: float
    line_cap: str
    stroke_style: Paint
    fill_style: Paint
    global_alpha: float
    font: str
    text_align: str
    text_baseline: str


@runtime_checkable
class DrawContext(Protocol):
    """Graph が前提とする Canvas 2D 風の描画コンテキスト。

    座標はすべてピクセル空間（原点左上、y 下向き）。
    """

    line_width: float
    line_cap: str
    stroke_style: Paint
    fill_style: Paint
    global_alpha: float
    font: str
    text_align: str
    text_baseline: str

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def resize(self, width: int, height: int) -> None: ...

    def begin_path(self) -> None: ...

    def move_to(self, x: float, y: float) -> None: ...

    def line_to(self, x: float, y: float) -> None: ...

    def arc(
        self,
        x: float,
        y: float,
        radius: float,
        start_angle: float,
        end_angle: float,
        anticlockwise: bool = False,
    ) -> None: ...

    def close_path(self) -> None: ...

    def stroke(self) -> None: ...

    def fill(self) -> None: ...

    def fill_text(self, text: str, x: float, y: float) -> None: ...

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None: ...

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None: ...

    def draw_image(self, image: str, x: float, y: float, width: float, height: float) -> None: ...

    def translate(self, x: float, y: float) -> None: ...

    def rotate(self, angle: float) -> None: ...

    def reset_transform(self) -> None: ...


class BaseContext:
    """スタイル状態と現在の変換行列を保持する DrawContext の共通実装。

    Notes
    -----
    変換は 3x3 同次行列（列ベクトル規約、Canvas の `setTransform(a,b,c,d,e,f)` と同じ並び）で持つ。
    `resize()` は Canvas と同様にスタイルと変換を初期状態へ戻す。
    """

    def __init__(self, width: int, height: int) -> None:
        self._width = 0
        self._height = 0
        self.resize(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def resize(self, width: int, height: int) -> None:
        w = int(width)
        h = int(height)
        if w <= 0 or h <= 0:
            raise ValueError(f"キャンバス寸法は正の値である必要がある: got=({width}, {height})")
        self._width = w
        self._height = h
        self._reset_state()

    def _reset_state(self) -> None:
        self.line_width: float = 1.0
        self.line_cap: str = "butt"
        self.stroke_style: Paint = "black"
        self.fill_style: Paint = "black"
        self.global_alpha: float = 1.0
        self.font: str = "10px sans-serif"
        self.text_align: str = "start"
        self.text_baseline: str = "alphabetic"
        self.transform = np.eye(3, dtype=np.float64)

    def style(self) -> DrawStyle:
        return DrawStyle(
            line_width=float(self.line_width),
            line_cap=str(self.line_cap),
            stroke_style=self.stroke_style,
            fill_style=self.fill_style,
            global_alpha=float(self.global_alpha),
            font=str(self.font),
            text_align=str(self.text_align),
            text_baseline=str(self.text_baseline),
        )

    def translate(self, x: float, y: float) -> None:
        step = np.array([[1.0, 0.0, float(x)], [0.0, 1.0, float(y)], [0.0, 0.0, 1.0]])
        self.transform = self.transform @ step

    def rotate(self, angle: float) -> None:
        c = math.cos(angle)
        s = math.sin(angle)
        step = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
        self.transform = self.transform @ step

    def reset_transform(self) -> None:
        self.transform = np.eye(3, dtype=np.float64)

    def has_transform(self) -> bool:
        return not np.array_equal(self.transform, np.eye(3))

    def apply_transform(self, x: float, y: float) -> tuple[float, float]:
        """ユーザー座標を現在の変換でデバイス座標へ写す。"""
        t = self.transform
        return (
            float(t[0, 0] * x + t[0, 1] * y + t[0, 2]),
            float(t[1, 0] * x + t[1, 1] * y + t[1, 2]),
        )


__all__ = ["BaseContext", "DrawContext", "DrawStyle"]
