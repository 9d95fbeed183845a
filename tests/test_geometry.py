"""Tests for dollforge.geometry: vectors, affine matrices, decomposition."""

from __future__ import annotations

import math

import pytest

from dollforge.geometry import Decomposition, Matrix, Vector2


def _close(v: Vector2, x: float, y: float, tol: float = 1e-9) -> bool:
    return math.isclose(v.x, x, abs_tol=tol) and math.isclose(v.y, y, abs_tol=tol)


# ---------------------------------------------------------------------------
# Vector2
# ---------------------------------------------------------------------------


class TestVector2:
    """Tests for the Vector2 value type."""

    def test_arithmetic(self) -> None:
        a = Vector2(3, 4)
        b = Vector2(1, -2)
        assert a.add(b) == Vector2(4, 2)
        assert a.subtract(b) == Vector2(2, 6)
        assert a.scale(2) == Vector2(6, 8)
        assert a.negative() == Vector2(-3, -4)
        assert a + b == Vector2(4, 2)
        assert a - b == Vector2(2, 6)
        assert -a == Vector2(-3, -4)

    def test_dot_is_a_real_dot_product(self) -> None:
        """x1*x2 + y1*y2, not a component-wise product."""
        assert Vector2(3, 4).dot(Vector2(2, 5)) == 26

    def test_magnitude_and_distance(self) -> None:
        v = Vector2(3, 4)
        assert v.magnitude() == 5
        assert v.magnitude_sqr() == 25
        assert Vector2(1, 1).distance(Vector2(4, 5)) == 5
        assert Vector2(1, 1).distance_sqr(Vector2(4, 5)) == 25

    def test_normalize(self) -> None:
        assert _close(Vector2(0, 5).normalize(), 0, 1)
        assert Vector2(0, 0).normalize() == Vector2(0, 0)

    def test_move_towards_clamps_above_one_only(self) -> None:
        a = Vector2(0, 0)
        b = Vector2(10, 0)
        assert a.move_towards(b, 0.5) == Vector2(5, 0)
        assert a.move_towards(b, 3.0) == Vector2(10, 0)
        assert a.move_towards(b, -0.5) == Vector2(-5, 0)

    def test_angle_and_rotate(self) -> None:
        assert math.isclose(Vector2(0, 1).angle(), math.pi / 2)
        assert _close(Vector2(1, 0).rotate(math.pi / 2), 0, 1)

    def test_str(self) -> None:
        assert str(Vector2(1, 2.25)) == "[1.0; 2.2]"


# ---------------------------------------------------------------------------
# Matrix
# ---------------------------------------------------------------------------


class TestMatrix:
    """Tests for Matrix composition and application."""

    def test_default_is_identity(self) -> None:
        assert Matrix() == Matrix.identity()
        assert Matrix().apply(Vector2(7, -3)) == Vector2(7, -3)

    def test_identity_is_neutral(self) -> None:
        samples = [
            Matrix().rotate(0.7),
            Matrix(1.0, 0.0, 0.4, 1.0, 0.0, 0.0),
            Matrix().translate(12, -5).scale(2, 3),
            Matrix(0.3, -1.2, 2.5, 0.8, 7.0, -9.0),
        ]
        for mtx in samples:
            assert Matrix().transform_matrix(mtx).is_close(mtx)
            assert mtx.transform_matrix(Matrix()).is_close(mtx)

    def test_composition_is_associative(self) -> None:
        a = Matrix().translate(3, 4).rotate(0.3)
        b = Matrix(1.0, 0.2, -0.5, 1.5, -2.0, 6.0)
        c = Matrix().scale(0.5, 2).translate(-7, 1)
        left = a.transform_matrix(b).transform_matrix(c)
        right = a.transform_matrix(b.transform_matrix(c))
        assert left.is_close(right)

    def test_builders_post_multiply(self) -> None:
        """translate().scale() scales the point first, then translates it."""
        mtx = Matrix().translate(10, 0).scale(2, 2)
        assert mtx.apply(Vector2(1, 0)) == Vector2(12, 0)

    def test_transform_matrix_applies_child_first(self) -> None:
        parent = Matrix().translate(5, 5)
        child = Matrix().scale(3, 3)
        composed = parent.transform_matrix(child)
        assert composed.apply(Vector2(1, 1)) == Vector2(8, 8)

    def test_rotate_degrees(self) -> None:
        mtx = Matrix().rotate_degrees(90)
        assert _close(mtx.apply(Vector2(1, 0)), 0, 1)

    def test_vector_builders_match_scalar_builders(self) -> None:
        assert Matrix().translate_vector(Vector2(2, 3)) == Matrix().translate(2, 3)
        assert Matrix().scale_vector(Vector2(2, 3)) == Matrix().scale(2, 3)
        assert Matrix().scale_uniform(4) == Matrix().scale(4, 4)

    def test_inverse_round_trip(self) -> None:
        mtx = Matrix().translate(12, -4).rotate(0.3).scale(2, 0.5)
        assert mtx.transform_matrix(mtx.inverse()).is_close(Matrix())

    def test_inverse_of_singular_raises(self) -> None:
        with pytest.raises(ZeroDivisionError):
            Matrix().scale(0, 1).inverse()

    def test_determinant(self) -> None:
        assert Matrix().scale(2, 3).determinant == 6

    def test_coefficients(self) -> None:
        assert Matrix(1, 2, 3, 4, 5, 6).coefficients == (1, 2, 3, 4, 5, 6)


class TestDecompose:
    """Tests for QR / LU decomposition, including degenerate inputs."""

    def test_qr_recovers_components(self) -> None:
        mtx = Matrix().translate(5, 7).rotate(0.5).scale(2, 3)
        parts = mtx.decompose()
        assert _close(parts.translate, 5, 7)
        assert math.isclose(parts.rotation, 0.5)
        assert _close(parts.scale, 2, 3)
        assert math.isclose(parts.skew.x, 0, abs_tol=1e-9)

    def test_qr_negative_rotation(self) -> None:
        parts = Matrix().rotate(-0.75).decompose()
        assert math.isclose(parts.rotation, -0.75)

    def test_qr_round_trip(self) -> None:
        mtx = Matrix(1.5, 0.4, -0.2, 0.9, 3, 4)
        assert Matrix.from_decomposition(mtx.decompose()).is_close(mtx)

    def test_qr_first_column_zero(self) -> None:
        """a = b = 0 falls back to the second column."""
        parts = Matrix(0, 0, 0, 2, 0, 0).decompose()
        assert _close(parts.scale, 0, 2)
        assert math.isclose(parts.rotation, 0, abs_tol=1e-12)

    def test_qr_all_zero(self) -> None:
        parts = Matrix(0, 0, 0, 0, 5, 6).decompose()
        assert parts.scale == Vector2(0, 0)
        assert parts.translate == Vector2(5, 6)

    def test_lu_pure_scale(self) -> None:
        parts = Matrix().scale(2, 3).decompose(use_lu=True)
        assert _close(parts.scale, 2, 3)
        assert parts.rotation == 0

    def test_lu_zero_a(self) -> None:
        parts = Matrix(0, 2, -1, 0, 0, 0).decompose(use_lu=True)
        assert math.isclose(parts.rotation, math.pi / 2)
        assert _close(parts.scale, 2, 1)

    def test_lu_zero_a_and_b(self) -> None:
        parts = Matrix(0, 0, 3, 4, 0, 0).decompose(use_lu=True)
        assert parts.scale == Vector2(3, 4)
        assert math.isclose(parts.skew.x, math.pi / 4)

    def test_returns_decomposition(self) -> None:
        assert isinstance(Matrix().decompose(), Decomposition)
