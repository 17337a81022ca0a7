"""
どこで: `src/grafplot/core/matrix.py`。
何を: 2x2 / 3x3 / 4x4 の正方行列型と、回転・平行移動・拡大縮小の生成関数を提供する。
なぜ: 図形変換と 3D 投影で同じ行列規約（行ベクトル × 行列）を共有するため。

Notes
-----
行列は行優先 `m[row][col]` で保持し、ベクトルは行ベクトルとして右から掛ける
（`v' = v @ M`）。4x4 は 4 行目を平行移動成分とするアフィン変換として扱う。
"""

from __future__ import annotations

import math
from types import NotImplementedType
from typing import Any, ClassVar, Self

import numpy as np

from grafplot.core.numeric import round_to

_SINGULAR_EPS = 1e-12


def _det(a: np.ndarray) -> float:
    """余因子展開（1 行目）で行列式を返す。"""
    n = a.shape[0]
    if n == 1:
        return float(a[0, 0])
    if n == 2:
        return float(a[0, 0] * a[1, 1] - a[1, 0] * a[0, 1])
    total = 0.0
    for col in range(n):
        minor = np.delete(a[1:], col, axis=1)
        sign = -1.0 if col % 2 else 1.0
        total += sign * float(a[0, col]) * _det(minor)
    return total


def _cofactors(a: np.ndarray) -> np.ndarray:
    n = a.shape[0]
    out = np.empty_like(a)
    for row in range(n):
        for col in range(n):
            minor = np.delete(np.delete(a, row, axis=0), col, axis=1)
            sign = -1.0 if (row + col) % 2 else 1.0
            out[row, col] = sign * _det(minor)
    return out


class _SquareMatrix:
    """正方行列の共通実装。サブクラスは `size` を定義する。"""

    size: ClassVar[int]

    __slots__ = ("m",)

    def __init__(self, rows: Any = None) -> None:
        if rows is None:
            m = np.zeros((self.size, self.size), dtype=np.float64)
        else:
            m = np.array(rows, dtype=np.float64)
        if m.shape != (self.size, self.size):
            raise ValueError(
                f"{type(self).__name__} には shape ({self.size}, {self.size}) が必要: got={m.shape}"
            )
        self.m = m

    @classmethod
    def identity(cls) -> Self:
        return cls(np.eye(cls.size, dtype=np.float64))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.m.tolist()!r})"

    def __str__(self) -> str:
        return "\n".join(", \t".join(f"{float(v):g}" for v in row) for row in self.m)

    def __getitem__(self, index: int) -> np.ndarray:
        return self.m[index]

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bool(np.array_equal(self.m, other.m))  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def is_close(self, other: _SquareMatrix, *, atol: float = 1e-9) -> bool:
        """要素ごとの差が atol 以内なら True を返す。"""
        return bool(np.allclose(self.m, other.m, rtol=0.0, atol=atol))

    def clone(self) -> Self:
        return type(self)(self.m.copy())

    def transpose(self) -> Self:
        return type(self)(self.m.T.copy())

    def determinant(self) -> float:
        return _det(self.m)

    def inv(self) -> Self:
        """逆行列（余因子行列の転置 / 行列式）を返す。

        Raises
        ------
        ValueError
            行列式が 0（特異行列）の場合。
        """
        det = self.determinant()
        if abs(det) < _SINGULAR_EPS:
            raise ValueError(f"{type(self).__name__} は特異行列のため逆行列を持たない (det={det!r})")
        adjugate = _cofactors(self.m).T
        return type(self)(adjugate / det)

    def round(self, n: int = 0) -> Self:
        """全要素を小数第 n 位に丸める（in place）。"""
        for index, value in np.ndenumerate(self.m):
            self.m[index] = round_to(float(value), n)
        return self

    def add_mat(self, mat: Self) -> Self:
        return type(self)(self.m + mat.m)

    def mult_scalar(self, scalar: float) -> Self:
        return type(self)(self.m * float(scalar))

    mult = mult_scalar

    def mult_mat(self, mat: Self) -> Self:
        """行列積 `self @ mat` を新しい行列で返す。"""
        return type(self)(self.m @ mat.m)

    def mult_by_mat(self, mat: Self) -> Self:
        """`self = self @ mat` として自身を更新する。"""
        self.m = self.m @ mat.m
        return self

    def __add__(self, other: object) -> Self | NotImplementedType:
        if type(other) is not type(self):
            return NotImplemented
        return self.add_mat(other)  # type: ignore[arg-type]

    def __mul__(self, scalar: object) -> Self | NotImplementedType:
        if not isinstance(scalar, (int, float)):
            return NotImplemented
        return self.mult_scalar(scalar)

    __rmul__ = __mul__

    def __matmul__(self, other: object) -> Self | NotImplementedType:
        if type(other) is not type(self):
            return NotImplemented
        return self.mult_mat(other)  # type: ignore[arg-type]


class Mat2x2(_SquareMatrix):
    size = 2
    __slots__ = ()

    @classmethod
    def rot(cls, angle: float) -> Mat2x2:
        """反時計回りに angle [rad] 回転させる行列を返す。"""
        s = math.sin(angle)
        c = math.cos(angle)
        return cls([[c, s], [-s, c]])


class Mat3x3(_SquareMatrix):
    size = 3
    __slots__ = ()

    @classmethod
    def rot_x(cls, angle: float) -> Mat3x3:
        s = math.sin(angle)
        c = math.cos(angle)
        return cls([[1.0, 0.0, 0.0], [0.0, c, s], [0.0, -s, c]])

    @classmethod
    def rot_y(cls, angle: float) -> Mat3x3:
        s = math.sin(angle)
        c = math.cos(angle)
        return cls([[c, 0.0, -s], [0.0, 1.0, 0.0], [s, 0.0, c]])

    @classmethod
    def rot_z(cls, angle: float) -> Mat3x3:
        s = math.sin(angle)
        c = math.cos(angle)
        return cls([[c, s, 0.0], [-s, c, 0.0], [0.0, 0.0, 1.0]])

    @classmethod
    def scaling(cls, sx: float, sy: float, sz: float) -> Mat3x3:
        return cls(np.diag([float(sx), float(sy), float(sz)]))


class Mat4x4(_SquareMatrix):
    """アフィン変換用の 4x4 行列。4 行目 `m[3][:3]` が平行移動。"""

    size = 4
    __slots__ = ()

    @classmethod
    def from_mat3(cls, mat: Mat3x3) -> Mat4x4:
        """3x3 の線形部分を左上に埋めた 4x4 行列を返す。"""
        m = np.eye(4, dtype=np.float64)
        m[:3, :3] = mat.m
        return cls(m)

    @classmethod
    def rot_x(cls, angle: float) -> Mat4x4:
        return cls.from_mat3(Mat3x3.rot_x(angle))

    @classmethod
    def rot_y(cls, angle: float) -> Mat4x4:
        return cls.from_mat3(Mat3x3.rot_y(angle))

    @classmethod
    def rot_z(cls, angle: float) -> Mat4x4:
        return cls.from_mat3(Mat3x3.rot_z(angle))

    @classmethod
    def translation(cls, x: float, y: float, z: float) -> Mat4x4:
        m = np.eye(4, dtype=np.float64)
        m[3, :3] = (float(x), float(y), float(z))
        return cls(m)

    @classmethod
    def scaling(cls, sx: float, sy: float, sz: float) -> Mat4x4:
        return cls(np.diag([float(sx), float(sy), float(sz), 1.0]))


__all__ = ["Mat2x2", "Mat3x3", "Mat4x4"]
