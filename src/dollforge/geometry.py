"""2D vector and affine matrix value types.

``Matrix`` uses the canvas convention: the six coefficients
``(a, b, c, d, e, f)`` stand for::

    | a c e |
    | b d f |
    | 0 0 1 |

and every builder method *post*-multiplies, so
``Matrix().translate(10, 0).scale(2, 2)`` first scales a point and then
translates it, exactly like successive calls on a 2D canvas context.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

_DEG_TO_RAD = 0.017453292519943295


@dataclass(frozen=True)
class Vector2:
    """Immutable 2D point / direction."""

    x: float = 0.0
    y: float = 0.0

    def add(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def subtract(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def scale(self, scalar: float) -> Vector2:
        return Vector2(self.x * scalar, self.y * scalar)

    def negative(self) -> Vector2:
        return Vector2(-self.x, -self.y)

    def dot(self, other: Vector2) -> float:
        return self.x * other.x + self.y * other.y

    def move_towards(self, other: Vector2, t: float) -> Vector2:
        """Interpolate from this vector toward *other*.

        ``t`` is clamped to at most 1 but may be negative, which
        extrapolates backwards past this vector.
        """
        t = min(t, 1.0)
        return self.add(other.subtract(self).scale(t))

    def magnitude(self) -> float:
        return math.sqrt(self.magnitude_sqr())

    def magnitude_sqr(self) -> float:
        return self.x * self.x + self.y * self.y

    def distance(self, other: Vector2) -> float:
        return math.sqrt(self.distance_sqr(other))

    def distance_sqr(self, other: Vector2) -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def normalize(self) -> Vector2:
        """Unit vector in the same direction, or zero for a near-zero vector."""
        mag = self.magnitude()
        if abs(mag) < 1e-9:
            return Vector2(0.0, 0.0)
        return Vector2(self.x / mag, self.y / mag)

    def angle(self) -> float:
        return math.atan2(self.y, self.x)

    def rotate(self, radians: float) -> Vector2:
        cos = math.cos(radians)
        sin = math.sin(radians)
        return Vector2(self.x * cos - self.y * sin, self.x * sin + self.y * cos)

    def __add__(self, other: Vector2) -> Vector2:
        return self.add(other)

    def __sub__(self, other: Vector2) -> Vector2:
        return self.subtract(other)

    def __neg__(self) -> Vector2:
        return self.negative()

    def __str__(self) -> str:
        return f"[{self.x:.1f}; {self.y:.1f}]"


@dataclass(frozen=True)
class Decomposition:
    """Result of :meth:`Matrix.decompose`.

    Attributes:
        scale: Per-axis scale.  ``(0, 0)`` marks an all-zero (invalid) matrix.
        translate: Translation (``e``, ``f``).
        rotation: Rotation in radians.
        skew: Skew angles in radians.
    """

    scale: Vector2
    translate: Vector2
    rotation: float
    skew: Vector2


@dataclass(frozen=True)
class Matrix:
    """Immutable 2x3 affine transform, identity by default."""

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> Matrix:
        return cls()

    @classmethod
    def from_decomposition(cls, parts: Decomposition) -> Matrix:
        """Rebuild a matrix from a QR decomposition.

        Applies translate, rotate, scale and skew-x in that order, which is
        the order :meth:`decompose` (QR mode) assumes.
        """
        return (
            cls()
            .translate_vector(parts.translate)
            .rotate(parts.rotation)
            .scale_vector(parts.scale)
            .transform(1.0, 0.0, math.tan(parts.skew.x), 1.0, 0.0, 0.0)
        )

    def transform(
        self, a2: float, b2: float, c2: float, d2: float, e2: float, f2: float
    ) -> Matrix:
        """Return ``self x (a2..f2)``: apply the new transform first, then this one."""
        return Matrix(
            a=self.a * a2 + self.c * b2,
            b=self.b * a2 + self.d * b2,
            c=self.a * c2 + self.c * d2,
            d=self.b * c2 + self.d * d2,
            e=self.a * e2 + self.c * f2 + self.e,
            f=self.b * e2 + self.d * f2 + self.f,
        )

    def transform_matrix(self, child: Matrix) -> Matrix:
        """Compose so that *child* is applied first and this matrix second."""
        return self.transform(child.a, child.b, child.c, child.d, child.e, child.f)

    def rotate(self, radians: float) -> Matrix:
        cos = math.cos(radians)
        sin = math.sin(radians)
        return self.transform(cos, sin, -sin, cos, 0.0, 0.0)

    def rotate_degrees(self, degrees: float) -> Matrix:
        return self.rotate(degrees * _DEG_TO_RAD)

    def scale(self, sx: float, sy: float) -> Matrix:
        return self.transform(sx, 0.0, 0.0, sy, 0.0, 0.0)

    def scale_uniform(self, s: float) -> Matrix:
        return self.scale(s, s)

    def scale_vector(self, v: Vector2) -> Matrix:
        return self.scale(v.x, v.y)

    def translate(self, tx: float, ty: float) -> Matrix:
        return self.transform(1.0, 0.0, 0.0, 1.0, tx, ty)

    def translate_vector(self, v: Vector2) -> Matrix:
        return self.translate(v.x, v.y)

    @property
    def determinant(self) -> float:
        return self.a * self.d - self.b * self.c

    def apply(self, point: Vector2) -> Vector2:
        """Map *point* through this transform."""
        return Vector2(
            self.a * point.x + self.c * point.y + self.e,
            self.b * point.x + self.d * point.y + self.f,
        )

    def inverse(self) -> Matrix:
        """Return the inverse transform.

        Raises:
            ZeroDivisionError: If the matrix is singular.
        """
        det = self.determinant
        if det == 0:
            raise ZeroDivisionError("matrix is not invertible")
        return Matrix(
            a=self.d / det,
            b=-self.b / det,
            c=-self.c / det,
            d=self.a / det,
            e=(self.c * self.f - self.d * self.e) / det,
            f=(self.b * self.e - self.a * self.f) / det,
        )

    def decompose(self, use_lu: bool = False) -> Decomposition:
        """Split into scale, translate, rotation and skew.

        QR (default) reproduces the matrix as translate -> rotate -> scale ->
        skew-x; LU as translate -> skew-y -> scale -> skew-x.  Degenerate
        inputs fall into fixed algebraic branches instead of raising:
        ``a = b = 0`` uses the second column, and an all-zero linear part
        yields a zero scale.
        """
        a, b, c, d = self.a, self.b, self.c, self.d
        translate = Vector2(self.e, self.f)
        rotation = 0.0
        scale = Vector2(1.0, 1.0)
        skew = Vector2(0.0, 0.0)
        determ = a * d - b * c

        if use_lu:
            if a:
                skew = Vector2(math.atan(c / a), math.atan(b / a))
                scale = Vector2(a, determ / a)
            elif b:
                rotation = math.pi * 0.5
                scale = Vector2(b, determ / b)
                skew = Vector2(math.atan(d / b), 0.0)
            else:
                scale = Vector2(c, d)
                skew = Vector2(math.pi * 0.25, 0.0)
        elif a or b:
            r = math.sqrt(a * a + b * b)
            rotation = math.acos(a / r) if b > 0 else -math.acos(a / r)
            scale = Vector2(r, determ / r)
            skew = Vector2(math.atan((a * c + b * d) / (r * r)), 0.0)
        elif c or d:
            s = math.sqrt(c * c + d * d)
            rotation = math.pi * 0.5 - (
                math.acos(-c / s) if d > 0 else -math.acos(c / s)
            )
            scale = Vector2(determ / s, s)
            skew = Vector2(0.0, math.atan((a * c + b * d) / (s * s)))
        else:
            scale = Vector2(0.0, 0.0)

        return Decomposition(
            scale=scale, translate=translate, rotation=rotation, skew=skew
        )

    def is_close(self, other: Matrix, abs_tol: float = 1e-9) -> bool:
        """Coefficient-wise comparison within *abs_tol*."""
        return all(
            math.isclose(mine, theirs, rel_tol=0.0, abs_tol=abs_tol)
            for mine, theirs in zip(self.coefficients, other.coefficients)
        )

    @property
    def coefficients(self) -> tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)
