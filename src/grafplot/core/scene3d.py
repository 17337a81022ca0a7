"""
どこで: `src/grafplot/core/scene3d.py`。
何を: 3D シーン設定 `Scene3D` と、面を変換・カリング・陰影付け・深度ソートする投影パイプライン。
なぜ: 深度バッファを持たない 2D コンテキストへ、画家のアルゴリズムで 3D メッシュを描くため。
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

import numpy as np

from grafplot.core.color import Color
from grafplot.core.matrix import Mat3x3, Mat4x4
from grafplot.core.mesh import Mesh3D
from grafplot.core.vector import Vec3

_logger = logging.getLogger(__name__)

DepthOrder = Literal["far_to_near", "near_to_far"]
_DEPTH_ORDERS: tuple[str, ...] = ("far_to_near", "near_to_far")


@dataclass(slots=True)
class Scene3D:
    """メッシュ群と変換行列、描画オプションを束ねる 3D シーン。

    Parameters
    ----------
    meshes : list[Mesh3D]
        描画するメッシュ列。
    matrix : Mat3x3 or Mat4x4
        頂点に右から掛けるシーン行列。Mat4x4 は 4 行目を平行移動として扱う。
    fill : bool
        面を塗るか（False なら輪郭のみ）。
    line_width : float
        輪郭の線幅 [px]。
    light_direction : Vec3
        シェーディング用の光の向き。既定はカメラ方向 (0, 0, -1)。
    shading : bool
        True なら面色を `light_direction · 法線` 倍する。
    culling : bool
        True なら裏向きの面を捨てる。
    depth_offset : float
        変換後に z へ足すオフセット（カメラは原点、+z 方向を見る）。
    depth_order : {"far_to_near", "near_to_far"}
        平均 z による描画順。画家のアルゴリズムとしては far_to_near が正しい。
    """

    meshes: list[Mesh3D]
    matrix: Mat3x3 | Mat4x4 = field(default_factory=Mat3x3.identity)
    fill: bool = True
    line_width: float = 1.0
    light_direction: Vec3 = field(default_factory=lambda: Vec3(0.0, 0.0, -1.0))
    shading: bool = True
    culling: bool = True
    depth_offset: float = 3.0
    depth_order: DepthOrder = "far_to_near"


@dataclass(frozen=True, slots=True)
class ProjectedFace:
    """変換・陰影付け済みで描画順に並べられた面。"""

    points: tuple[Vec3, ...]
    color: Color
    depth: float


def _transform_point(p: Vec3, matrix: Mat3x3 | Mat4x4) -> Vec3:
    if isinstance(matrix, Mat4x4):
        return p.mult_mat4(matrix)
    return p.mult_mat(matrix)


def _transform_normal(n: Vec3, matrix: Mat3x3 | Mat4x4) -> Vec3:
    # 法線には平行移動を掛けない。
    if isinstance(matrix, Mat4x4):
        return n.mult_mat(Mat3x3(matrix.m[:3, :3]))
    return n.mult_mat(matrix)


def sort_by_depth(faces: Sequence[ProjectedFace], order: DepthOrder) -> list[ProjectedFace]:
    """平均 z で安定ソートした面列を返す。

    Raises
    ------
    ValueError
        order が未対応の値の場合。
    """
    if order not in _DEPTH_ORDERS:
        raise ValueError(f"未対応の depth_order: {order!r}（{_DEPTH_ORDERS} のいずれか）")
    if not faces:
        return []
    depths = np.array([f.depth for f in faces], dtype=np.float64)
    keys = -depths if order == "far_to_near" else depths
    indices = np.argsort(keys, kind="stable")
    return [faces[int(i)] for i in indices]


def project_scene(scene: Scene3D) -> list[ProjectedFace]:
    """シーンの全メッシュの面を変換し、描画順に並べて返す。

    Parameters
    ----------
    scene : Scene3D
        投影対象のシーン。

    Returns
    -------
    list[ProjectedFace]
        描画順（先頭から順に描く）の面列。x, y をそのまま 2D 座標として使う。

    Notes
    -----
    面ごとに以下を行う。元のメッシュは変更しない。

    1. 頂点にシーン行列を掛け、z に `depth_offset` を足す。
    2. 先頭頂点が z < 0（カメラの後ろ）なら捨てる。
    3. culling 時は変換後の法線と先頭頂点の内積が 0 以上（裏向き）なら捨てる。
    4. shading 時は面色を `light_direction · 法線` 倍する（0..255 にクランプ）。
    5. 平均 z で `depth_order` に従って並べる。
    """
    if scene.depth_order not in _DEPTH_ORDERS:
        raise ValueError(f"未対応の depth_order: {scene.depth_order!r}（{_DEPTH_ORDERS} のいずれか）")

    offset = Vec3(0.0, 0.0, float(scene.depth_offset))
    collected: list[ProjectedFace] = []
    total = 0
    for mesh in scene.meshes:
        for face in mesh.faces:
            total += 1
            points = [_transform_point(p, scene.matrix).add_to(offset) for p in face.p]
            if points[0].z < 0:
                continue

            normal = _transform_normal(face.normal, scene.matrix)
            if scene.culling and normal.dot(points[0]) >= 0:
                continue

            color = face.color.clone()
            if scene.shading:
                color.mult_by(scene.light_direction.dot(normal))

            depth = sum(p.z for p in points) / len(points)
            collected.append(ProjectedFace(points=tuple(points), color=color, depth=depth))

    _logger.debug("project_scene: %d/%d faces kept", len(collected), total)
    return sort_by_depth(collected, scene.depth_order)


__all__ = ["DepthOrder", "ProjectedFace", "Scene3D", "project_scene", "sort_by_depth"]
