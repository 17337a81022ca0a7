from __future__ import annotations

import math

import pytest

from grafplot.core.matrix import Mat2x2, Mat3x3, Mat4x4
from grafplot.core.vector import Vec2, Vec3


def _approx(vec: Vec2 | Vec3, expected: tuple[float, ...]) -> None:
    assert tuple(vec) == pytest.approx(expected, abs=1e-9)


def test_vec2_pure_ops_do_not_mutate_receiver() -> None:
    a = Vec2(1, 2)
    b = Vec2(3, 5)

    assert a.add(b) == Vec2(4, 7)
    assert a.sub(b) == Vec2(-2, -3)
    assert a.mult(2) == Vec2(2, 4)
    assert b.div(2) == Vec2(1.5, 2.5)
    assert a == Vec2(1, 2)


def test_vec2_in_place_ops_return_self_for_chaining() -> None:
    v = Vec2(1, 1)
    out = v.add_to(Vec2(1, 2)).mult_by(3).sub_from(Vec2(1, 1)).div_by(2)

    assert out is v
    assert v == Vec2(2.5, 4)


def test_vec2_operators_match_named_methods() -> None:
    a = Vec2(1, 2)
    b = Vec2(3, 4)

    assert a + b == a.add(b)
    assert a - b == a.sub(b)
    assert a * 2 == 2 * a == Vec2(2, 4)
    assert a / 2 == Vec2(0.5, 1)
    assert -a == Vec2(-1, -2)

    c = a.clone()
    c += b
    assert c == Vec2(4, 6)
    assert a == Vec2(1, 2)


def test_vec2_metrics() -> None:
    v = Vec2(3, 4)

    assert v.len_sq() == 25
    assert v.len() == 5
    assert v.dist(Vec2(0, 0)) == 5
    assert v.dot(Vec2(1, 1)) == 7
    assert Vec2(1, 0).cross(Vec2(0, 1)) == 1
    assert Vec2(0, 1).angle() == pytest.approx(math.pi / 2)


def test_vec2_norm_keeps_zero_vector() -> None:
    assert Vec2(0, 0).norm() == Vec2(0, 0)
    _approx(Vec2(3, 4).norm(), (0.6, 0.8))


def test_vec2_rot_is_counter_clockwise() -> None:
    _approx(Vec2(1, 0).rot(math.pi / 2), (0.0, 1.0))
    _approx(Vec2(2, 1).rot_around(Vec2(1, 1), math.pi), (0.0, 1.0))

    v = Vec2(1, 0)
    assert v.rot_by(math.pi) is v
    _approx(v, (-1.0, 0.0))


def test_vec2_mult_mat_uses_unmodified_components() -> None:
    # x を更新してから y を計算すると結果がずれる。
    mat = Mat2x2([[1, 2], [3, 4]])
    v = Vec2(1, 1)

    assert v.mult_mat(mat) == Vec2(4, 6)
    assert v @ mat == Vec2(4, 6)
    v.mult_by_mat(mat)
    assert v == Vec2(4, 6)


def test_vec2_matches_rotation_matrix() -> None:
    v = Vec2(2, -1)
    _approx(v.mult_mat(Mat2x2.rot(0.7)), tuple(v.rot(0.7)))


def test_vec2_complex_round_trip_and_str() -> None:
    v = Vec2.from_complex(complex(1.5, -2))

    assert v == Vec2(1.5, -2)
    assert v.to_complex() == complex(1.5, -2)
    assert str(Vec2(1, 2.5)) == "[1, 2.5]"
    assert list(Vec2(1, 2)) == [1.0, 2.0]


def test_vec2_round_and_lerp() -> None:
    v = Vec2(1.234, -5.678)
    assert v.round(1) is v
    _approx(v, (1.2, -5.7))

    _approx(Vec2(0, 0).lerp(Vec2(10, 20), 0.25), (2.5, 5.0))
    w = Vec2(0, 0)
    w.lerp_to(Vec2(4, 4), 0.5)
    assert w == Vec2(2, 2)


def test_vec2_from_object_reads_attributes() -> None:
    class _P:
        x = 3
        y = 4

    assert Vec2.from_object(_P()) == Vec2(3, 4)


def test_vec3_add_sums_every_component() -> None:
    assert Vec3(1, 2, 3).add(Vec3(4, 5, 6)) == Vec3(5, 7, 9)
    v = Vec3(1, 2, 3)
    v.add_to(Vec3(1, 1, 2))
    assert v == Vec3(2, 3, 5)


def test_vec3_cross_is_right_handed() -> None:
    assert Vec3(1, 0, 0).cross(Vec3(0, 1, 0)) == Vec3(0, 0, 1)
    assert Vec3(0, 1, 0).cross(Vec3(1, 0, 0)) == Vec3(0, 0, -1)


def test_vec3_axis_angles() -> None:
    assert Vec3(1, 0, 0).angle_x() == pytest.approx(0.0)
    assert Vec3(0, 1, 0).angle_x() == pytest.approx(math.pi / 2)
    assert Vec3(1, 1, 0).angle_x() == pytest.approx(math.pi / 4)
    assert Vec3(0, 0, -1).angle_z() == pytest.approx(math.pi)
    assert Vec3(0, 2, 0).angle_y() == pytest.approx(0.0)


@pytest.mark.parametrize("axis", ["x", "y", "z"])
def test_vec3_axis_rotation_matches_matrix(axis: str) -> None:
    v = Vec3(1, -2, 0.5)
    angle = 0.9
    by_vec = getattr(v, f"rot_{axis}")(angle)
    by_mat = v.mult_mat(getattr(Mat3x3, f"rot_{axis}")(angle))

    _approx(by_vec, tuple(by_mat))
    assert by_vec.len() == pytest.approx(v.len())


def test_vec3_rot_y_rotates_x_toward_minus_z() -> None:
    _approx(Vec3(1, 0, 0).rot_y(math.pi / 2), (0.0, 0.0, -1.0))


def test_vec3_mult_mat4_applies_translation_row() -> None:
    mat = Mat4x4.translation(1, 2, 3)
    v = Vec3(1, 1, 1)

    assert v.mult_mat4(mat) == Vec3(2, 3, 4)
    assert v @ mat == Vec3(2, 3, 4)
    assert v @ Mat3x3.scaling(2, 3, 4) == Vec3(2, 3, 4)
    v.mult_by_mat4(Mat4x4.scaling(2, 2, 2))
    assert v == Vec3(2, 2, 2)


def test_vec3_norm_and_opposite() -> None:
    _approx(Vec3(0, 0, 5).norm(), (0.0, 0.0, 1.0))
    assert Vec3().norm() == Vec3()
    assert Vec3(1, -2, 3).opposite() == Vec3(-1, 2, -3)
    assert str(Vec3(1, 2, 3)) == "[1, 2, 3]"
