"""
どこで: `src/grafplot/core/mesh.py`。
何を: 3D 面 `Face3D` と面集合 `Mesh3D`（OBJ 読み込み・立方体/四面体ビルダ）を提供する。
なぜ: Scene3D の投影パイプラインへ渡す面データを、法線込みで一箇所で組み立てるため。
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from grafplot.core.color import Color
from grafplot.core.vector import Vec3

_logger = logging.getLogger(__name__)


class Face3D:
    """頂点列・色・面法線を持つ 3D 面。

    Parameters
    ----------
    verts : Sequence[Vec3]
        頂点列（3 点以上）。法線は先頭 3 点から求める。
    color : Color
        面の色。

    Notes
    -----
    法線は `(v2 - v0) × (v1 - v0)` を正規化したもの。Scene3D のカリングは
    「法線 · 先頭頂点 < 0 なら表」とみなすので、外向き法線になる巻き順で頂点を並べる。
    """

    __slots__ = ("p", "color", "normal")

    def __init__(self, verts: Sequence[Vec3], color: Color) -> None:
        if len(verts) < 3:
            raise ValueError(f"Face3D には 3 頂点以上が必要: got={len(verts)}")
        self.p: list[Vec3] = list(verts)
        self.color = color
        v0 = self.p[0]
        self.normal = self.p[2].sub(v0).cross(self.p[1].sub(v0)).norm()

    def __repr__(self) -> str:
        return f"Face3D({self.p!r}, {self.color!r})"

    def clone(self) -> Face3D:
        face = Face3D([p.clone() for p in self.p], self.color.clone())
        face.normal = self.normal.clone()
        return face

    def average_z(self) -> float:
        return sum(p.z for p in self.p) / len(self.p)


def _oriented_face(verts: list[Vec3], outward: Vec3, color: Color) -> Face3D:
    """法線が outward 側を向く巻き順で Face3D を作る。"""
    face = Face3D(verts, color.clone())
    if face.normal.dot(outward) < 0:
        face = Face3D(list(reversed(verts)), color.clone())
    return face


def _parse_index(token: str, vertex_count: int, *, line_no: int) -> int:
    head = token.split("/", 1)[0]
    try:
        raw = int(head)
    except ValueError as exc:
        raise ValueError(f"OBJ の面インデックスが不正: line={line_no}, token={token!r}") from exc
    index = raw - 1 if raw > 0 else vertex_count + raw
    if raw == 0 or not 0 <= index < vertex_count:
        raise ValueError(
            f"OBJ の面インデックスが範囲外: line={line_no}, index={raw}, vertices={vertex_count}"
        )
    return index


class Mesh3D:
    """Face3D の集合。"""

    def __init__(self, faces: Sequence[Face3D]) -> None:
        self.faces: list[Face3D] = list(faces)

    def __repr__(self) -> str:
        return f"Mesh3D(faces={len(self.faces)})"

    def __len__(self) -> int:
        return len(self.faces)

    @classmethod
    def from_obj(cls, text: str, color: Color) -> Mesh3D:
        """Wavefront OBJ テキストから `v` / `f` レコードを読み込む。

        Parameters
        ----------
        text : str
            OBJ の内容。
        color : Color
            全面に割り当てる色（面ごとに複製する）。

        Returns
        -------
        Mesh3D
            読み込んだメッシュ。

        Raises
        ------
        ValueError
            頂点座標や面インデックスが不正な場合。

        Notes
        -----
        `v/vt/vn` 形式と負のインデックスに対応する。`vt` / `vn` / `g` などは無視する。
        """
        verts: list[Vec3] = []
        faces: list[Face3D] = []

        for line_no, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.split("#", 1)[0].strip()
            if not line:
                continue
            parts = line.split()
            tag = parts[0]
            if tag == "v":
                if len(parts) < 4:
                    raise ValueError(f"OBJ の頂点には 3 座標が必要: line={line_no}")
                try:
                    verts.append(Vec3(float(parts[1]), float(parts[2]), float(parts[3])))
                except ValueError as exc:
                    raise ValueError(f"OBJ の頂点座標が不正: line={line_no}") from exc
            elif tag == "f":
                indices = [_parse_index(t, len(verts), line_no=line_no) for t in parts[1:]]
                if len(indices) < 3:
                    _logger.warning("OBJ の面を無視します（頂点が 3 未満）: line=%d", line_no)
                    continue
                faces.append(Face3D([verts[i].clone() for i in indices], color.clone()))

        _logger.debug("OBJ loaded: vertices=%d, faces=%d", len(verts), len(faces))
        return cls(faces)

    @classmethod
    def load_obj(cls, path: str | Path, color: Color) -> Mesh3D:
        """OBJ ファイルを読み込む。"""
        _path = Path(path)
        return cls.from_obj(_path.read_text(encoding="utf-8"), color)

    @classmethod
    def cube(cls, size: float = 1.0, color: Color | None = None) -> Mesh3D:
        """原点中心・一辺 size の立方体（12 三角形）を返す。"""
        col = Color(255, 255, 255) if color is None else color
        h = float(size) * 0.5
        faces: list[Face3D] = []
        for axis in range(3):
            for sign in (-1.0, 1.0):
                outward = [0.0, 0.0, 0.0]
                outward[axis] = sign
                u_axis, v_axis = [a for a in range(3) if a != axis]
                corners: list[Vec3] = []
                for du, dv in ((-1.0, -1.0), (1.0, -1.0), (1.0, 1.0), (-1.0, 1.0)):
                    c = [0.0, 0.0, 0.0]
                    c[axis] = sign * h
                    c[u_axis] = du * h
                    c[v_axis] = dv * h
                    corners.append(Vec3(*c))
                normal = Vec3(*outward)
                faces.append(_oriented_face([corners[0], corners[1], corners[2]], normal, col))
                faces.append(
                    _oriented_face([corners[0].clone(), corners[2].clone(), corners[3]], normal, col)
                )
        return cls(faces)

    @classmethod
    def tetrahedron(cls, size: float = 1.0, color: Color | None = None) -> Mesh3D:
        """原点中心の正四面体（頂点は一辺 size の立方体の交互の角）を返す。"""
        col = Color(255, 255, 255) if color is None else color
        h = float(size) * 0.5
        corners = [Vec3(h, h, h), Vec3(h, -h, -h), Vec3(-h, h, -h), Vec3(-h, -h, h)]
        faces: list[Face3D] = []
        for skip in range(4):
            tri = [corners[i].clone() for i in range(4) if i != skip]
            centroid = Vec3(
                sum(p.x for p in tri) / 3.0,
                sum(p.y for p in tri) / 3.0,
                sum(p.z for p in tri) / 3.0,
            )
            faces.append(_oriented_face(tri, centroid, col))
        return cls(faces)


__all__ = ["Face3D", "Mesh3D"]
