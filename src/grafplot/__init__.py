# どこで: `src/grafplot/__init__.py`。
# 何を: ルート `grafplot` パッケージを定義し、よく使う型を再エクスポートする。
# なぜ: `from grafplot import Graph, Vec2` の 1 行で描画を始められるようにするため。

from __future__ import annotations

from grafplot.core.color import Color
from grafplot.core.matrix import Mat2x2, Mat3x3, Mat4x4
from grafplot.core.mesh import Face3D, Mesh3D
from grafplot.core.prng import PRNG
from grafplot.core.scene3d import Scene3D
from grafplot.core.shapes import (
    Arc,
    Box,
    Circle,
    FunctionGraph,
    Line,
    Rectangle,
    RegularPolygon,
    Shape2D,
    Sprite,
    Text2D,
)
from grafplot.core.vector import Vec2, Vec3
from grafplot.graph import Graph

__all__ = [
    "Arc",
    "Box",
    "Circle",
    "Color",
    "Face3D",
    "FunctionGraph",
    "Graph",
    "Line",
    "Mat2x2",
    "Mat3x3",
    "Mat4x4",
    "Mesh3D",
    "PRNG",
    "Rectangle",
    "RegularPolygon",
    "Scene3D",
    "Shape2D",
    "Sprite",
    "Text2D",
    "Vec2",
    "Vec3",
]
