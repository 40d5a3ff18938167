"""
Linear algebra value types for the chaos game.

Vectors, complex numbers and 2x2 matrices are immutable; every arithmetic
operation returns a new instance. Equality is exact component-wise comparison.
"""

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Vector2D:
    """Immutable 2D real vector."""

    x: float
    y: float

    def add(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x + other.x, self.y + other.y)

    def subtract(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> 'Vector2D':
        return Vector2D(self.x * factor, self.y * factor)

    def multiply(self, other: 'Vector2D') -> 'Vector2D':
        """Component-wise product."""
        return Vector2D(self.x * other.x, self.y * other.y)

    def divide(self, other: 'Vector2D') -> 'Vector2D':
        """
        Component-wise quotient.

        Raises:
            ZeroDivisionError: If either component of ``other`` is zero
        """
        return Vector2D(self.x / other.x, self.y / other.y)

    def __add__(self, other: 'Vector2D') -> 'Vector2D':
        return self.add(other)

    def __sub__(self, other: 'Vector2D') -> 'Vector2D':
        return self.subtract(other)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Complex(Vector2D):
    """A vector read as ``real + imaginary * i``."""

    @property
    def real(self) -> float:
        return self.x

    @property
    def imag(self) -> float:
        return self.y

    @staticmethod
    def sqrt(a: float, b: float) -> 'Complex':
        """
        Principal square root of ``a + bi``.

        The imaginary part takes the sign of ``b``, with ``b == 0`` treated as
        positive so that negative reals map onto the positive imaginary axis.

        Args:
            a: Real part
            b: Imaginary part

        Returns:
            The root with non-negative real part
        """
        r = math.sqrt(a * a + b * b)
        real = math.sqrt(max(0.0, (r + a) / 2))
        imag = math.sqrt(max(0.0, (r - a) / 2))
        if b < 0:
            imag = -imag
        return Complex(real, imag)

    def product(self, other: Vector2D) -> 'Complex':
        """Complex multiplication."""
        return Complex(self.x * other.x - self.y * other.y,
                       self.x * other.y + self.y * other.x)

    def abs_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def to_complex(self) -> complex:
        return complex(self.x, self.y)


@dataclass(frozen=True)
class Matrix2x2:
    """Immutable 2x2 real matrix ``[[a00, a01], [a10, a11]]``."""

    a00: float
    a01: float
    a10: float
    a11: float

    def transform(self, vector: Vector2D) -> Vector2D:
        """Multiply the matrix by a column vector."""
        return Vector2D(self.a00 * vector.x + self.a01 * vector.y,
                        self.a10 * vector.x + self.a11 * vector.y)

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.a00, self.a01, self.a10, self.a11)
