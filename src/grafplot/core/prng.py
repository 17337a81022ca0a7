# どこで: `src/grafplot/core/prng.py`。
# 何を: 48bit 線形合同法による決定的な擬似乱数生成器を提供する。
# なぜ: seed 固定で同じ図を再現できる乱数源を、標準 random と差し替え可能な形で用意するため。

from __future__ import annotations


class PRNG:
    """48bit 線形合同法（java.util.Random と同じ定数）の擬似乱数生成器。

    Parameters
    ----------
    seed : int
        初期状態。2**48 で剰余を取って保持する。

    Notes
    -----
    状態は Python int で厳密に計算する。`random()` を持つため、
    `grafplot.core.numeric` の `rng` 引数へそのまま渡せる。
    """

    modulus = 1 << 48
    multiplier = 25214903917
    increment = 11

    def __init__(self, seed: int) -> None:
        self.value = int(seed) % self.modulus

    def next_int(self) -> int:
        """状態を 1 ステップ進め、新しい状態を返す。"""
        self.value = (self.value * self.multiplier + self.increment) % self.modulus
        return self.value

    def next(self) -> float:
        """[0, 1) の float を返す。"""
        return self.next_int() / self.modulus

    def random(self) -> float:
        return self.next()

    def __repr__(self) -> str:
        return f"PRNG(value={self.value})"


__all__ = ["PRNG"]
