"""
どこで: `src/grafplot/core/numeric.py`。
何を: 丸め・範囲生成・補間・乱数選択などの小さな数値ヘルパを提供する。
なぜ: ベクトル/色/図形の各モジュールで同じ丸め規則と乱数供給口を共有するため。
"""

from __future__ import annotations

import math
import random
import sys
from collections.abc import Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """`random()` で [0, 1) の float を返す乱数源。"""

    def random(self) -> float: ...


def _source(rng: RandomSource | None) -> RandomSource:
    return random if rng is None else rng  # type: ignore[return-value]


def is_nearly_equal(number1: float, number2: float, difference: float = 0.001) -> bool:
    """2 値の差が `difference` 未満なら True を返す。"""
    return abs(number1 - number2) < difference


def rand_int(min_value: float, max_value: float, rng: RandomSource | None = None) -> int:
    """[ceil(min), floor(max)] の整数を一様に返す（両端を含む）。"""
    lo = math.ceil(min_value)
    hi = math.floor(max_value)
    if hi < lo:
        raise ValueError(f"rand_int の範囲が空です: min={min_value}, max={max_value}")
    return int(math.floor(_source(rng).random() * (hi - lo + 1) + lo))


def random_color(rng: RandomSource | None = None) -> str:
    """ランダムな `#rrggbb` 文字列を返す。"""
    value = int(_source(rng).random() * 0x1000000)
    return f"#{value:06x}"


def array_random(items: Sequence[T], rng: RandomSource | None = None) -> T:
    """シーケンスから 1 要素をランダムに選んで返す。"""
    if not items:
        raise ValueError("array_random に空のシーケンスが渡された")
    return items[int(_source(rng).random() * len(items))]


def rad_to_deg(rad: float) -> float:
    return rad * 180.0 / math.pi


def deg_to_rad(deg: float) -> float:
    return deg * math.pi / 180.0


def round_to(x: float, n: int = 0) -> float:
    """x を小数第 n 位に丸める。

    Notes
    -----
    .5 は +inf 方向へ丸める。`0.1 + 0.2` のような表現誤差で
    切り捨て側に落ちないよう、丸め前に machine epsilon を足す。
    """
    factor = 10.0**n
    return math.floor((x + sys.float_info.epsilon) * factor + 0.5) / factor


def frange(start: float, end: float | None = None, step: float = 1) -> list[float]:
    """float も扱える `range` を list で返す。

    Parameters
    ----------
    start : float
        開始値。`end` 省略時は終端として扱い、開始値は 0 になる。
    end : float or None, optional
        終端（含まない）。
    step : float, optional
        増分。負の値で降順になる。

    Returns
    -------
    list[float]
        生成した値の列。`step` の向きが `end` と逆なら空。

    Raises
    ------
    ValueError
        step が 0 の場合。
    """
    if end is None:
        start, end = 0, start
    if step == 0:
        raise ValueError("frange の step は 0 以外である必要がある")
    if (step < 0 and start <= end) or (step > 0 and start >= end):
        return []

    count = math.ceil((end - start) / step)
    values = [start + i * step for i in range(count)]
    # 除算の丸め誤差で終端ちょうどの値が混ざることがある。
    if step > 0:
        return [v for v in values if v < end]
    return [v for v in values if v > end]


def factorial(n: int) -> int | None:
    """n! を返す。負の n では None を返す。"""
    if n < 0:
        return None
    return math.factorial(int(n))


def combination(n: int, k: int) -> int:
    """二項係数 nCk を返す。"""
    if k < 0 or k > n:
        return 0
    return math.comb(int(n), int(k))


def average(values: Sequence[float]) -> float:
    if not values:
        raise ValueError("average に空のシーケンスが渡された")
    return math.fsum(values) / len(values)


def lerp(min_value: float, max_value: float, amount: float) -> float:
    """min と max を amount で線形補間する。"""
    return min_value * (1.0 - amount) + max_value * amount


__all__ = [
    "RandomSource",
    "array_random",
    "average",
    "combination",
    "deg_to_rad",
    "factorial",
    "frange",
    "is_nearly_equal",
    "lerp",
    "rad_to_deg",
    "rand_int",
    "random_color",
    "round_to",
]
