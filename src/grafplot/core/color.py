"""
どこで: `src/grafplot/core/color.py`。
何を: RGBA 色 `Color` と CSS 色文字列との相互変換を提供する。
なぜ: 図形・3D シェーディング・出力バックエンドで同じ色表現を共有するため。
"""

from __future__ import annotations

import math
import random
import re
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from grafplot.core.numeric import RandomSource

_NAMED_COLORS: dict[str, tuple[int, int, int, float]] = {
    "black": (0, 0, 0, 1.0),
    "white": (255, 255, 255, 1.0),
    "red": (255, 0, 0, 1.0),
    "green": (0, 128, 0, 1.0),
    "lime": (0, 255, 0, 1.0),
    "blue": (0, 0, 255, 1.0),
    "yellow": (255, 255, 0, 1.0),
    "cyan": (0, 255, 255, 1.0),
    "magenta": (255, 0, 255, 1.0),
    "orange": (255, 165, 0, 1.0),
    "purple": (128, 0, 128, 1.0),
    "gray": (128, 128, 128, 1.0),
    "grey": (128, 128, 128, 1.0),
    "transparent": (0, 0, 0, 0.0),
}

_RGB_FUNC_RE = re.compile(r"^rgba?\(\s*([^)]*)\)$")


def _clamp_channel(value: float) -> int:
    """Uint8 clamp 相当（NaN は 0、範囲外は端に寄せ、.5 は偶数丸め）。"""
    v = float(value)
    if math.isnan(v):
        return 0
    if v <= 0.0:
        return 0
    if v >= 255.0:
        return 255
    return int(round(v))


def _clamp_alpha(value: float) -> float:
    v = float(value)
    if math.isnan(v):
        return 0.0
    return 0.0 if v < 0.0 else 1.0 if v > 1.0 else v


def _fmt_alpha(a: float) -> str:
    return f"{a:.3f}".rstrip("0").rstrip(".") or "0"


class Color:
    """RGBA 色。

    Parameters
    ----------
    r, g, b : float, optional
        0..255 のチャンネル値。整数に丸め、範囲外はクランプする。
    a : float, optional
        0..1 の不透明度。範囲外はクランプする。
    """

    __slots__ = ("_r", "_g", "_b", "_a")

    def __init__(self, r: float = 0, g: float = 0, b: float = 0, a: float = 1.0) -> None:
        self._r = _clamp_channel(r)
        self._g = _clamp_channel(g)
        self._b = _clamp_channel(b)
        self._a = _clamp_alpha(a)

    @property
    def r(self) -> int:
        return self._r

    @r.setter
    def r(self, value: float) -> None:
        self._r = _clamp_channel(value)

    @property
    def g(self) -> int:
        return self._g

    @g.setter
    def g(self, value: float) -> None:
        self._g = _clamp_channel(value)

    @property
    def b(self) -> int:
        return self._b

    @b.setter
    def b(self, value: float) -> None:
        self._b = _clamp_channel(value)

    @property
    def a(self) -> float:
        return self._a

    @a.setter
    def a(self, value: float) -> None:
        self._a = _clamp_alpha(value)

    @classmethod
    def from_hex_string(cls, text: str) -> Color:
        """`#rgb` / `#rrggbb` / `#rrggbbaa`（`#` 省略可）から生成する。"""
        s = str(text).strip().removeprefix("#")
        if len(s) == 3:
            s = "".join(ch * 2 for ch in s)
        if len(s) not in (6, 8):
            raise ValueError(f"hex 色文字列の形式が不正: {text!r}")
        try:
            channels = [int(s[i : i + 2], 16) for i in range(0, len(s), 2)]
        except ValueError as exc:
            raise ValueError(f"hex 色文字列の形式が不正: {text!r}") from exc
        alpha = channels[3] / 255.0 if len(channels) == 4 else 1.0
        return cls(channels[0], channels[1], channels[2], alpha)

    @classmethod
    def from_css(cls, text: str) -> Color:
        """CSS 色文字列（hex / rgb() / rgba() / 一部の色名）から生成する。

        Raises
        ------
        ValueError
            解釈できない文字列の場合。
        """
        s = str(text).strip().lower()
        if s.startswith("#"):
            return cls.from_hex_string(s)
        named = _NAMED_COLORS.get(s)
        if named is not None:
            return cls(*named)
        match = _RGB_FUNC_RE.match(s)
        if match is None:
            raise ValueError(f"未対応の色文字列: {text!r}")
        parts = [p.strip() for p in match.group(1).split(",")]
        if len(parts) not in (3, 4):
            raise ValueError(f"未対応の色文字列: {text!r}")
        try:
            values = [float(p) for p in parts]
        except ValueError as exc:
            raise ValueError(f"未対応の色文字列: {text!r}") from exc
        return cls(*values)

    @classmethod
    def random(cls, rng: RandomSource | None = None) -> Color:
        """不透明なランダム色を返す。"""
        source = random if rng is None else rng
        return cls(
            math.floor(source.random() * 256),
            math.floor(source.random() * 256),
            math.floor(source.random() * 256),
        )

    def __repr__(self) -> str:
        return f"Color({self._r}, {self._g}, {self._b}, {self._a!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return self.to_tuple() == other.to_tuple()

    __hash__ = None  # type: ignore[assignment]

    def to_tuple(self) -> tuple[int, int, int, float]:
        return self._r, self._g, self._b, self._a

    def clone(self) -> Color:
        return Color(self._r, self._g, self._b, self._a)

    def to_rgb_string(self) -> str:
        return f"rgb({self._r},{self._g},{self._b})"

    def to_rgba_string(self) -> str:
        return f"rgba({self._r},{self._g},{self._b},{_fmt_alpha(self._a)})"

    def to_hex_string(self) -> str:
        return f"#{self._r:02x}{self._g:02x}{self._b:02x}"

    def add(self, col: Color) -> Color:
        return Color(self._r + col._r, self._g + col._g, self._b + col._b, self._a)

    def add_to(self, col: Color) -> Color:
        self.r, self.g, self.b = self._r + col._r, self._g + col._g, self._b + col._b
        return self

    def sub(self, col: Color) -> Color:
        return Color(self._r - col._r, self._g - col._g, self._b - col._b, self._a)

    def sub_from(self, col: Color) -> Color:
        self.r, self.g, self.b = self._r - col._r, self._g - col._g, self._b - col._b
        return self

    def mult(self, scalar: float) -> Color:
        return Color(self._r * scalar, self._g * scalar, self._b * scalar, self._a)

    def mult_by(self, scalar: float) -> Color:
        self.r, self.g, self.b = self._r * scalar, self._g * scalar, self._b * scalar
        return self

    def div(self, scalar: float) -> Color:
        return Color(self._r / scalar, self._g / scalar, self._b / scalar, self._a)

    def div_by(self, scalar: float) -> Color:
        self.r, self.g, self.b = self._r / scalar, self._g / scalar, self._b / scalar
        return self

    def blend(self, col: Color) -> Color:
        """self を col の上に source-over で合成した色を返す。"""
        src_a = self._a
        dst_a = col._a
        out_a = src_a + dst_a * (1.0 - src_a)
        if out_a == 0.0:
            return Color(0, 0, 0, 0.0)

        def _channel(src: int, dst: int) -> float:
            return (src * src_a + dst * dst_a * (1.0 - src_a)) / out_a

        return Color(
            _channel(self._r, col._r),
            _channel(self._g, col._g),
            _channel(self._b, col._b),
            out_a,
        )

    def inv(self) -> Color:
        return Color(255 - self._r, 255 - self._g, 255 - self._b, self._a)

    def grayscale(self) -> Color:
        luma = self._r * 0.3 + self._g * 0.59 + self._b * 0.11
        return Color(luma, luma, luma, self._a)

    def lerp(self, col: Color, amount: float) -> Color:
        """RGB を線形補間した不透明色を返す。"""
        t = float(amount)
        return Color(
            self._r * (1.0 - t) + col._r * t,
            self._g * (1.0 - t) + col._g * t,
            self._b * (1.0 - t) + col._b * t,
        )

    def lerp_to(self, col: Color, amount: float) -> Color:
        mixed = self.lerp(col, amount)
        self.r, self.g, self.b = mixed.r, mixed.g, mixed.b
        return self


Paint: TypeAlias = "Color | str"


def css(color: Paint) -> str:
    """Color はそのまま CSS 文字列に、str は素通しで返す。"""
    if isinstance(color, Color):
        return color.to_rgba_string() if color.a < 1.0 else color.to_rgb_string()
    return str(color)


def split_opacity(color: Paint) -> tuple[str, float]:
    """色を `(#rrggbb, 不透明度)` に分解する。

    Notes
    -----
    解釈できない文字列（`url(#grad)` など）は `(文字列, 1.0)` として素通しする。
    """
    if isinstance(color, Color):
        return color.to_hex_string(), color.a
    try:
        parsed = Color.from_css(color)
    except ValueError:
        return str(color), 1.0
    return parsed.to_hex_string(), parsed.a


__all__ = ["Color", "Paint", "css", "split_opacity"]
