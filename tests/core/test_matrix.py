from __future__ import annotations

import math

import numpy as np
import pytest

from grafplot.core.matrix import Mat2x2, Mat3x3, Mat4x4


def test_identity_and_shape_validation() -> None:
    np.testing.assert_array_equal(Mat3x3.identity().m, np.eye(3))
    with pytest.raises(ValueError):
        Mat3x3([[1, 2], [3, 4]])


def test_transpose_returns_new_matrix() -> None:
    m = Mat2x2([[1, 2], [3, 4]])
    t = m.transpose()

    np.testing.assert_array_equal(t.m, [[1, 3], [2, 4]])
    np.testing.assert_array_equal(m.m, [[1, 2], [3, 4]])


def test_determinant_by_cofactor_expansion() -> None:
    assert Mat2x2([[1, 2], [3, 4]]).determinant() == pytest.approx(-2.0)
    assert Mat3x3([[2, 0, 1], [1, 3, 2], [1, 1, 2]]).determinant() == pytest.approx(6.0)
    m4 = Mat4x4([[1, 0, 2, -1], [3, 0, 0, 5], [2, 1, 4, -3], [1, 0, 5, 0]])
    assert m4.determinant() == pytest.approx(float(np.linalg.det(m4.m)))


@pytest.mark.parametrize(
    "mat",
    [
        Mat2x2([[4, 7], [2, 6]]),
        Mat3x3([[2, 0, 1], [1, 3, 2], [1, 1, 2]]),
        Mat4x4.rot_x(0.3).mult_mat(Mat4x4.translation(1, 2, 3)),
    ],
)
def test_inverse_times_matrix_is_identity(mat) -> None:
    product = mat.mult_mat(mat.inv())
    assert product.is_close(type(mat).identity())


def test_inverse_of_singular_matrix_raises() -> None:
    with pytest.raises(ValueError, match="特異行列"):
        Mat2x2([[1, 2], [2, 4]]).inv()


def test_rotation_matrices_are_orthonormal() -> None:
    for mat in (Mat2x2.rot(0.4), Mat3x3.rot_x(0.4), Mat3x3.rot_y(-1.1), Mat3x3.rot_z(2.0), Mat4x4.rot_y(0.8)):
        assert mat.determinant() == pytest.approx(1.0)
        np.testing.assert_allclose(mat.m @ mat.m.T, np.eye(mat.size), atol=1e-12)


def test_mult_mat_and_in_place_variant() -> None:
    a = Mat2x2([[1, 2], [3, 4]])
    b = Mat2x2([[0, 1], [1, 0]])

    np.testing.assert_array_equal(a.mult_mat(b).m, [[2, 1], [4, 3]])
    np.testing.assert_array_equal((a @ b).m, [[2, 1], [4, 3]])
    assert a.mult_by_mat(b) is a
    np.testing.assert_array_equal(a.m, [[2, 1], [4, 3]])


def test_scalar_ops_and_add() -> None:
    a = Mat2x2([[1, 2], [3, 4]])

    np.testing.assert_array_equal((a * 2).m, [[2, 4], [6, 8]])
    np.testing.assert_array_equal((2 * a).m, [[2, 4], [6, 8]])
    np.testing.assert_array_equal(a.mult(0.5).m, [[0.5, 1], [1.5, 2]])
    np.testing.assert_array_equal((a + a).m, [[2, 4], [6, 8]])
    assert a == Mat2x2([[1, 2], [3, 4]])


def test_round_is_in_place() -> None:
    m = Mat2x2([[1.234, 2.5], [-0.04, math.pi]])
    assert m.round(1) is m
    np.testing.assert_allclose(m.m, [[1.2, 2.5], [0.0, 3.1]])


def test_str_separates_columns_with_tab() -> None:
    assert str(Mat2x2([[1, 2], [3, 4.5]])) == "1, \t2\n3, \t4.5"


def test_mat4_from_mat3_and_translation_row() -> None:
    m = Mat4x4.from_mat3(Mat3x3.scaling(2, 3, 4))
    np.testing.assert_array_equal(np.diag(m.m), [2, 3, 4, 1])

    t = Mat4x4.translation(5, 6, 7)
    np.testing.assert_array_equal(t[3], [5, 6, 7, 1])
