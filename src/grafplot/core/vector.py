"""
どこで: `src/grafplot/core/vector.py`。
何を: 2D/3D の可変ベクトル型 `Vec2` / `Vec3` を提供する。
なぜ: グラフ空間の座標・図形頂点・3D メッシュ頂点を同じ演算語彙で扱うため。

Notes
-----
`add` などの名前付き演算は新しいベクトルを返し、`add_to` などの in-place 版は
自身を更新して `self` を返す（メソッドチェーン用）。演算子 `+` / `+=` も同じ対応。
行列との積は行ベクトル規約 `v @ M`。
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from types import NotImplementedType
from typing import TYPE_CHECKING, Any

from grafplot.core.numeric import round_to

if TYPE_CHECKING:
    from grafplot.core.matrix import Mat2x2, Mat3x3, Mat4x4


def _is_scalar(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Vec2:
    """2D ベクトル。"""

    __slots__ = ("x", "y")

    def __init__(self, x: float = 0.0, y: float = 0.0) -> None:
        self.x = float(x)
        self.y = float(y)

    @classmethod
    def zero(cls) -> Vec2:
        return cls(0.0, 0.0)

    @classmethod
    def from_object(cls, obj: Any) -> Vec2:
        """`.x` / `.y` 属性を持つ任意のオブジェクトから生成する。"""
        return cls(obj.x, obj.y)

    @classmethod
    def from_complex(cls, value: complex) -> Vec2:
        return cls(value.real, value.imag)

    def to_complex(self) -> complex:
        return complex(self.x, self.y)

    def __repr__(self) -> str:
        return f"Vec2({self.x!r}, {self.y!r})"

    def __str__(self) -> str:
        return f"[{self.x:g}, {self.y:g}]"

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec2):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    __hash__ = None  # type: ignore[assignment]

    def clone(self) -> Vec2:
        return Vec2(self.x, self.y)

    def assign(self, vec: Vec2) -> Vec2:
        self.x = vec.x
        self.y = vec.y
        return self

    def len_sq(self) -> float:
        return self.x * self.x + self.y * self.y

    def len(self) -> float:
        return math.sqrt(self.len_sq())

    def angle(self) -> float:
        """x 軸からの角度 [rad] を返す。"""
        return math.atan2(self.y, self.x)

    def dist_sq(self, vec: Vec2) -> float:
        dx = self.x - vec.x
        dy = self.y - vec.y
        return dx * dx + dy * dy

    def dist(self, vec: Vec2) -> float:
        return math.sqrt(self.dist_sq(vec))

    def add(self, vec: Vec2) -> Vec2:
        return Vec2(self.x + vec.x, self.y + vec.y)

    def add_to(self, vec: Vec2) -> Vec2:
        self.x += vec.x
        self.y += vec.y
        return self

    def sub(self, vec: Vec2) -> Vec2:
        return Vec2(self.x - vec.x, self.y - vec.y)

    def sub_from(self, vec: Vec2) -> Vec2:
        self.x -= vec.x
        self.y -= vec.y
        return self

    def mult(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    def mult_by(self, scalar: float) -> Vec2:
        self.x *= scalar
        self.y *= scalar
        return self

    def div(self, scalar: float) -> Vec2:
        return Vec2(self.x / scalar, self.y / scalar)

    def div_by(self, scalar: float) -> Vec2:
        self.x /= scalar
        self.y /= scalar
        return self

    def dot(self, vec: Vec2) -> float:
        return self.x * vec.x + self.y * vec.y

    def cross(self, vec: Vec2) -> float:
        """3D 外積の z 成分（符号付き平行四辺形面積）を返す。"""
        return self.x * vec.y - self.y * vec.x

    def rot(self, angle: float) -> Vec2:
        """反時計回りに angle [rad] 回転したベクトルを返す。"""
        s = math.sin(angle)
        c = math.cos(angle)
        return Vec2(self.x * c - self.y * s, self.x * s + self.y * c)

    def rot_by(self, angle: float) -> Vec2:
        return self.assign(self.rot(angle))

    def rot_around(self, pos: Vec2, angle: float) -> Vec2:
        """pos を中心に angle [rad] 回転したベクトルを返す。"""
        return self.sub(pos).rot(angle).add(pos)

    def rot_around_by(self, pos: Vec2, angle: float) -> Vec2:
        return self.sub_from(pos).rot_by(angle).add_to(pos)

    def norm(self) -> Vec2:
        """単位ベクトルを返す。長さ 0 のときは零ベクトル。"""
        length = self.len()
        if length == 0:
            return Vec2(0.0, 0.0)
        return Vec2(self.x / length, self.y / length)

    def opposite(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def round(self, n: int = 0) -> Vec2:
        self.x = round_to(self.x, n)
        self.y = round_to(self.y, n)
        return self

    def lerp(self, vec: Vec2, amount: float) -> Vec2:
        return Vec2(
            self.x * (1.0 - amount) + vec.x * amount,
            self.y * (1.0 - amount) + vec.y * amount,
        )

    def lerp_to(self, vec: Vec2, amount: float) -> Vec2:
        return self.assign(self.lerp(vec, amount))

    def mult_mat(self, mat: Mat2x2) -> Vec2:
        """行ベクトルとして `self @ mat` を返す。"""
        m = mat.m
        return Vec2(
            self.x * m[0][0] + self.y * m[1][0],
            self.x * m[0][1] + self.y * m[1][1],
        )

    def mult_by_mat(self, mat: Mat2x2) -> Vec2:
        return self.assign(self.mult_mat(mat))

    def __neg__(self) -> Vec2:
        return self.opposite()

    def __add__(self, other: object) -> Vec2 | NotImplementedType:
        if not isinstance(other, Vec2):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: object) -> Vec2 | NotImplementedType:
        if not isinstance(other, Vec2):
            return NotImplemented
        return self.sub(other)

    def __mul__(self, scalar: object) -> Vec2 | NotImplementedType:
        if not _is_scalar(scalar):
            return NotImplemented
        return self.mult(scalar)  # type: ignore[arg-type]

    __rmul__ = __mul__

    def __truediv__(self, scalar: object) -> Vec2 | NotImplementedType:
        if not _is_scalar(scalar):
            return NotImplemented
        return self.div(scalar)  # type: ignore[arg-type]

    def __iadd__(self, other: Vec2) -> Vec2:
        return self.add_to(other)

    def __isub__(self, other: Vec2) -> Vec2:
        return self.sub_from(other)

    def __imul__(self, scalar: float) -> Vec2:
        return self.mult_by(scalar)

    def __itruediv__(self, scalar: float) -> Vec2:
        return self.div_by(scalar)

    def __matmul__(self, mat: Mat2x2) -> Vec2:
        return self.mult_mat(mat)


class Vec3:
    """3D ベクトル。"""

    __slots__ = ("x", "y", "z")

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> None:
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    @classmethod
    def zero(cls) -> Vec3:
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_object(cls, obj: Any) -> Vec3:
        return cls(obj.x, obj.y, obj.z)

    def __repr__(self) -> str:
        return f"Vec3({self.x!r}, {self.y!r}, {self.z!r})"

    def __str__(self) -> str:
        return f"[{self.x:g}, {self.y:g}, {self.z:g}]"

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return self.x == other.x and self.y == other.y and self.z == other.z

    __hash__ = None  # type: ignore[assignment]

    def clone(self) -> Vec3:
        return Vec3(self.x, self.y, self.z)

    def assign(self, vec: Vec3) -> Vec3:
        self.x = vec.x
        self.y = vec.y
        self.z = vec.z
        return self

    def len_sq(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def len(self) -> float:
        return math.sqrt(self.len_sq())

    def angle_x(self) -> float:
        """x 軸とのなす角 [rad] を返す。"""
        return math.atan2(math.hypot(self.y, self.z), self.x)

    def angle_y(self) -> float:
        return math.atan2(math.hypot(self.z, self.x), self.y)

    def angle_z(self) -> float:
        return math.atan2(math.hypot(self.x, self.y), self.z)

    def dist_sq(self, vec: Vec3) -> float:
        dx = self.x - vec.x
        dy = self.y - vec.y
        dz = self.z - vec.z
        return dx * dx + dy * dy + dz * dz

    def dist(self, vec: Vec3) -> float:
        return math.sqrt(self.dist_sq(vec))

    def add(self, vec: Vec3) -> Vec3:
        return Vec3(self.x + vec.x, self.y + vec.y, self.z + vec.z)

    def add_to(self, vec: Vec3) -> Vec3:
        self.x += vec.x
        self.y += vec.y
        self.z += vec.z
        return self

    def sub(self, vec: Vec3) -> Vec3:
        return Vec3(self.x - vec.x, self.y - vec.y, self.z - vec.z)

    def sub_from(self, vec: Vec3) -> Vec3:
        self.x -= vec.x
        self.y -= vec.y
        self.z -= vec.z
        return self

    def mult(self, scalar: float) -> Vec3:
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    def mult_by(self, scalar: float) -> Vec3:
        self.x *= scalar
        self.y *= scalar
        self.z *= scalar
        return self

    def div(self, scalar: float) -> Vec3:
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def div_by(self, scalar: float) -> Vec3:
        self.x /= scalar
        self.y /= scalar
        self.z /= scalar
        return self

    def dot(self, vec: Vec3) -> float:
        return self.x * vec.x + self.y * vec.y + self.z * vec.z

    def cross(self, vec: Vec3) -> Vec3:
        return Vec3(
            self.y * vec.z - self.z * vec.y,
            self.z * vec.x - self.x * vec.z,
            self.x * vec.y - self.y * vec.x,
        )

    # 各軸回転は Mat3x3.rot_x / rot_y / rot_z を右から掛けた結果と一致する。
    def rot_x(self, angle: float) -> Vec3:
        s = math.sin(angle)
        c = math.cos(angle)
        return Vec3(self.x, self.y * c - self.z * s, self.y * s + self.z * c)

    def rot_y(self, angle: float) -> Vec3:
        s = math.sin(angle)
        c = math.cos(angle)
        return Vec3(self.x * c + self.z * s, self.y, -self.x * s + self.z * c)

    def rot_z(self, angle: float) -> Vec3:
        s = math.sin(angle)
        c = math.cos(angle)
        return Vec3(self.x * c - self.y * s, self.x * s + self.y * c, self.z)

    def norm(self) -> Vec3:
        length = self.len()
        if length == 0:
            return Vec3(0.0, 0.0, 0.0)
        return Vec3(self.x / length, self.y / length, self.z / length)

    def opposite(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def round(self, n: int = 0) -> Vec3:
        self.x = round_to(self.x, n)
        self.y = round_to(self.y, n)
        self.z = round_to(self.z, n)
        return self

    def lerp(self, vec: Vec3, amount: float) -> Vec3:
        return Vec3(
            self.x * (1.0 - amount) + vec.x * amount,
            self.y * (1.0 - amount) + vec.y * amount,
            self.z * (1.0 - amount) + vec.z * amount,
        )

    def lerp_to(self, vec: Vec3, amount: float) -> Vec3:
        return self.assign(self.lerp(vec, amount))

    def mult_mat(self, mat: Mat3x3) -> Vec3:
        """行ベクトルとして `self @ mat`（3x3 線形変換）を返す。"""
        m = mat.m
        return Vec3(
            self.x * m[0][0] + self.y * m[1][0] + self.z * m[2][0],
            self.x * m[0][1] + self.y * m[1][1] + self.z * m[2][1],
            self.x * m[0][2] + self.y * m[1][2] + self.z * m[2][2],
        )

    def mult_by_mat(self, mat: Mat3x3) -> Vec3:
        return self.assign(self.mult_mat(mat))

    def mult_mat4(self, mat: Mat4x4) -> Vec3:
        """w=1 の同次座標として 4x4 アフィン変換を適用したベクトルを返す。"""
        m = mat.m
        return Vec3(
            self.x * m[0][0] + self.y * m[1][0] + self.z * m[2][0] + m[3][0],
            self.x * m[0][1] + self.y * m[1][1] + self.z * m[2][1] + m[3][1],
            self.x * m[0][2] + self.y * m[1][2] + self.z * m[2][2] + m[3][2],
        )

    def mult_by_mat4(self, mat: Mat4x4) -> Vec3:
        return self.assign(self.mult_mat4(mat))

    def __neg__(self) -> Vec3:
        return self.opposite()

    def __add__(self, other: object) -> Vec3 | NotImplementedType:
        if not isinstance(other, Vec3):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: object) -> Vec3 | NotImplementedType:
        if not isinstance(other, Vec3):
            return NotImplemented
        return self.sub(other)

    def __mul__(self, scalar: object) -> Vec3 | NotImplementedType:
        if not _is_scalar(scalar):
            return NotImplemented
        return self.mult(scalar)  # type: ignore[arg-type]

    __rmul__ = __mul__

    def __truediv__(self, scalar: object) -> Vec3 | NotImplementedType:
        if not _is_scalar(scalar):
            return NotImplemented
        return self.div(scalar)  # type: ignore[arg-type]

    def __iadd__(self, other: Vec3) -> Vec3:
        return self.add_to(other)

    def __isub__(self, other: Vec3) -> Vec3:
        return self.sub_from(other)

    def __imul__(self, scalar: float) -> Vec3:
        return self.mult_by(scalar)

    def __itruediv__(self, scalar: float) -> Vec3:
        return self.div_by(scalar)

    def __matmul__(self, mat: Mat3x3 | Mat4x4) -> Vec3:
        if mat.size == 4:
            return self.mult_mat4(mat)  # type: ignore[arg-type]
        return self.mult_mat(mat)  # type: ignore[arg-type]


__all__ = ["Vec2", "Vec3"]
