"""
どこで: `src/grafplot/canvas/svg.py`。
何を: 描画命令を SVG 要素として蓄積するコンテキスト `SvgContext` を提供する。
なぜ: ブラウザの Canvas を持たない環境で、Graph の描画結果を決定的なベクタとして保存するため。
"""

from __future__ import annotations

import html
import logging
import math
import re

from grafplot.canvas.context import BaseContext
from grafplot.core.color import Paint, split_opacity
from grafplot.core.runtime_config import runtime_config

_logger = logging.getLogger(__name__)

_SVG_NS = "http://www.w3.org/2000/svg"
_XLINK_NS = "http://www.w3.org/1999/xlink"
_FLOAT_DECIMALS = 3

_FONT_RE = re.compile(r"^\s*(?:(?P<style>italic|oblique|normal)\s+)?(?:(?P<weight>bold|normal|\d{3})\s+)?(?P<size>[\d.]+)px\s+(?P<family>.+?)\s*$", re.IGNORECASE)

_TEXT_ANCHOR = {
    "start": "start",
    "left": "start",
    "center": "middle",
    "end": "end",
    "right": "end",
}

_DOMINANT_BASELINE = {
    "top": "hanging",
    "hanging": "hanging",
    "middle": "middle",
    "alphabetic": "alphabetic",
    "ideographic": "ideographic",
    "bottom": "text-after-edge",
}


def _fmt(value: float, *, decimals: int = _FLOAT_DECIMALS) -> str:
    """SVG 出力向けに float を決定的な文字列へ変換して返す。"""
    text = f"{float(value):.{int(decimals)}f}"
    if text.startswith("-0") and float(text) == 0.0:
        return text[1:]
    return text


def _finite(*values: float) -> bool:
    return all(math.isfinite(float(v)) for v in values)


def parse_font(font: str) -> tuple[float, str, str | None, str | None]:
    """`"bold 30px Arial"` 形式を (size, family, style, weight) に分解する。

    解釈できない場合は (10, font, None, None) を返す。
    """
    match = _FONT_RE.match(str(font))
    if match is None:
        return 10.0, str(font).strip() or "sans-serif", None, None
    return (
        float(match.group("size")),
        match.group("family"),
        match.group("style"),
        match.group("weight"),
    )


class SvgContext(BaseContext):
    """描画命令を SVG 要素列へ変換して保持するコンテキスト。

    Notes
    -----
    - パスは `begin_path()` までリセットされない（Canvas と同じく stroke/fill 後も残る）。
    - 非有限の座標を持つ `move_to` / `line_to` / `arc` は無視する。
    - キャンバス全体を覆う `clear_rect` はそれまでの要素を破棄する。部分的な消去は
      config の `canvas.background` で塗りつぶして表現する。
    """

    def __init__(self, width: int | None = None, height: int | None = None) -> None:
        cfg = runtime_config()
        w = cfg.canvas_size[0] if width is None else width
        h = cfg.canvas_size[1] if height is None else height
        self._background = cfg.background
        self.elements: list[str] = []
        self._path: list[str] = []
        self._drawable = False
        self._current: tuple[float, float] | None = None
        self._subpath_start: tuple[float, float] | None = None
        super().__init__(w, h)

    # --- path -----------------------------------------------------------------

    def begin_path(self) -> None:
        self._path = []
        self._drawable = False
        self._current = None
        self._subpath_start = None

    def _move_device(self, dx: float, dy: float) -> None:
        self._path.append(f"M {_fmt(dx)} {_fmt(dy)}")
        self._current = (dx, dy)
        self._subpath_start = (dx, dy)

    def _line_device(self, dx: float, dy: float) -> None:
        self._path.append(f"L {_fmt(dx)} {_fmt(dy)}")
        self._current = (dx, dy)
        self._drawable = True

    def move_to(self, x: float, y: float) -> None:
        if not _finite(x, y):
            return
        self._move_device(*self.apply_transform(x, y))

    def line_to(self, x: float, y: float) -> None:
        if not _finite(x, y):
            return
        dx, dy = self.apply_transform(x, y)
        if self._current is None:
            # 現在点が無い line_to は move_to として振る舞う。
            self._move_device(dx, dy)
            return
        self._line_device(dx, dy)

    def arc(
        self,
        x: float,
        y: float,
        radius: float,
        start_angle: float,
        end_angle: float,
        anticlockwise: bool = False,
    ) -> None:
        if not _finite(x, y, radius, start_angle, end_angle):
            return
        if radius < 0:
            raise ValueError(f"arc の radius は 0 以上である必要がある: got={radius}")

        if anticlockwise:
            sweep = start_angle - end_angle
            sweep = math.tau if sweep >= math.tau else sweep % math.tau
            sweep = -sweep
        else:
            sweep = end_angle - start_angle
            sweep = math.tau if sweep >= math.tau else sweep % math.tau

        def _at(angle: float) -> tuple[float, float]:
            return self.apply_transform(x + radius * math.cos(angle), y + radius * math.sin(angle))

        sx, sy = _at(start_angle)
        if self._current is None:
            self._move_device(sx, sy)
        else:
            self._line_device(sx, sy)

        if sweep == 0 or radius == 0:
            return

        # SVG の円弧コマンドは 1 本で全周を描けないため、半周以下に分割する。
        pieces = max(1, math.ceil(abs(sweep) / math.pi))
        step = sweep / pieces
        sweep_flag = 1 if sweep > 0 else 0
        r = _fmt(radius)
        for i in range(1, pieces + 1):
            px, py = _at(start_angle + step * i)
            self._path.append(f"A {r} {r} 0 0 {sweep_flag} {_fmt(px)} {_fmt(py)}")
            self._current = (px, py)
        self._drawable = True

    def close_path(self) -> None:
        if self._current is None:
            return
        self._path.append("Z")
        self._current = self._subpath_start

    def _path_d(self) -> str:
        return " ".join(self._path)

    def _opacity_attr(self, name: str, opacity: float) -> str:
        value = opacity * float(self.global_alpha)
        if value >= 1.0:
            return ""
        return f' {name}="{_fmt(max(value, 0.0))}"'

    def stroke(self) -> None:
        if not self._drawable:
            return
        color, opacity = split_opacity(self.stroke_style)
        self.elements.append(
            (
                f'<path d="{self._path_d()}" fill="none" stroke="{html.escape(color)}" '
                f'stroke-width="{_fmt(self.line_width)}" stroke-linecap="{html.escape(self.line_cap)}" '
                f'stroke-linejoin="round"{self._opacity_attr("stroke-opacity", opacity)} />'
            )
        )

    def fill(self) -> None:
        if not self._drawable:
            return
        color, opacity = split_opacity(self.fill_style)
        self.elements.append(
            (
                f'<path d="{self._path_d()}" fill="{html.escape(color)}" stroke="none"'
                f'{self._opacity_attr("fill-opacity", opacity)} />'
            )
        )

    # --- immediate ops --------------------------------------------------------

    def _matrix_attr(self) -> str:
        if not self.has_transform():
            return ""
        t = self.transform
        values = " ".join(_fmt(v, decimals=6) for v in (t[0, 0], t[1, 0], t[0, 1], t[1, 1], t[0, 2], t[1, 2]))
        return f' transform="matrix({values})"'

    def _rect_element(self, x: float, y: float, width: float, height: float, paint: Paint) -> str:
        # 負の寸法は Canvas と同様に正規化する。
        if width < 0:
            x, width = x + width, -width
        if height < 0:
            y, height = y + height, -height
        color, opacity = split_opacity(paint)
        return (
            f'<rect x="{_fmt(x)}" y="{_fmt(y)}" width="{_fmt(width)}" height="{_fmt(height)}" '
            f'fill="{html.escape(color)}"{self._opacity_attr("fill-opacity", opacity)}'
            f"{self._matrix_attr()} />"
        )

    def fill_text(self, text: str, x: float, y: float) -> None:
        if not _finite(x, y):
            return
        size, family, style, weight = parse_font(self.font)
        color, opacity = split_opacity(self.fill_style)
        anchor = _TEXT_ANCHOR.get(str(self.text_align), "start")
        baseline = _DOMINANT_BASELINE.get(str(self.text_baseline), "alphabetic")
        extra = ""
        if style:
            extra += f' font-style="{html.escape(style)}"'
        if weight:
            extra += f' font-weight="{html.escape(weight)}"'
        self.elements.append(
            (
                f'<text x="{_fmt(x)}" y="{_fmt(y)}" font-family="{html.escape(family)}" '
                f'font-size="{_fmt(size)}"{extra} text-anchor="{anchor}" dominant-baseline="{baseline}" '
                f'fill="{html.escape(color)}"{self._opacity_attr("fill-opacity", opacity)}'
                f"{self._matrix_attr()}>{html.escape(str(text), quote=False)}</text>"
            )
        )

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        if not _finite(x, y, width, height):
            return
        self.elements.append(self._rect_element(x, y, width, height, self.fill_style))

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:
        if not _finite(x, y, width, height):
            return
        covers = (
            not self.has_transform()
            and min(x, x + width) <= 0
            and min(y, y + height) <= 0
            and max(x, x + width) >= self.width
            and max(y, y + height) >= self.height
        )
        if covers:
            self.elements.clear()
            return
        saved_alpha = self.global_alpha
        self.global_alpha = 1.0
        self.elements.append(self._rect_element(x, y, width, height, self._background))
        self.global_alpha = saved_alpha

    def draw_image(self, image: str, x: float, y: float, width: float, height: float) -> None:
        if not _finite(x, y, width, height):
            return
        if width < 0:
            x, width = x + width, -width
        if height < 0:
            y, height = y + height, -height
        href = html.escape(str(image))
        opacity = self._opacity_attr("opacity", 1.0)
        self.elements.append(
            (
                f'<image href="{href}" xlink:href="{href}" x="{_fmt(x)}" y="{_fmt(y)}" '
                f'width="{_fmt(width)}" height="{_fmt(height)}" preserveAspectRatio="none"'
                f"{opacity}{self._matrix_attr()} />"
            )
        )

    # --- output ---------------------------------------------------------------

    def to_svg(self) -> str:
        """蓄積した要素から SVG 文書を組み立てて返す。"""
        lines = ['<?xml version="1.0" encoding="UTF-8"?>']
        lines.append(
            (
                f'<svg xmlns="{_SVG_NS}" xmlns:xlink="{_XLINK_NS}" '
                f'viewBox="0 0 {self.width} {self.height}" '
                f'width="{self.width}" height="{self.height}">'
            )
        )
        lines.extend(f"  {element}" for element in self.elements)
        lines.append("</svg>")
        _logger.debug("SvgContext: %d elements", len(self.elements))
        return "\n".join(lines) + "\n"

    def resize(self, width: int, height: int) -> None:
        super().resize(width, height)
        # Canvas と同様にリサイズで描画内容も消える。
        self.elements.clear()
        self.begin_path()


__all__ = ["SvgContext", "parse_font"]
