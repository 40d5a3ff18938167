"""
2D transformations applied by the chaos game and the explore sweep.

Transforms form a closed set of variants: affine maps, the two-branch inverse
Julia map, and the forward quadratic Julia map iterated in explore mode. Every
variant is an immutable value exposing ``transform(Vector2D) -> Vector2D``.
"""

from dataclasses import dataclass
from typing import Dict, Any, Tuple, Union

from .linalg import Vector2D, Complex, Matrix2x2


@dataclass(frozen=True)
class AffineTransform2D:
    """Linear map followed by a translation: ``M * v + b``."""

    matrix: Matrix2x2
    vector: Vector2D

    kind = 'affine'

    def transform(self, point: Vector2D) -> Vector2D:
        return self.matrix.transform(point).add(self.vector)

    def describe(self) -> Dict[str, Any]:
        return {
            'type': self.kind,
            'matrix': self.matrix.to_tuple(),
            'vector': self.vector.to_tuple(),
        }


@dataclass(frozen=True)
class JuliaTransform:
    """
    One branch of the inverse quadratic Julia map ``z -> +-sqrt(z - c)``.

    Two instances with opposite signs give both preimages of ``z`` under
    ``z^2 + c``; the chaos game picks between them at random.
    """

    point: Complex
    sign: int = 1

    kind = 'julia'

    def __post_init__(self):
        if self.sign not in (-1, 1):
            raise ValueError(f"sign must be -1 or 1, got {self.sign}")

    @classmethod
    def pair(cls, point: Complex) -> Tuple['JuliaTransform', 'JuliaTransform']:
        """Both branches for the constant ``point``."""
        return cls(point, 1), cls(point, -1)

    @property
    def complex(self) -> Complex:
        return self.point

    def transform(self, point: Vector2D) -> Vector2D:
        root = Complex.sqrt(point.x - self.point.x, point.y - self.point.y)
        return Vector2D(self.sign * root.x, self.sign * root.y)

    def describe(self) -> Dict[str, Any]:
        return {
            'type': self.kind,
            'c': self.point.to_tuple(),
            'sign': self.sign,
        }


@dataclass(frozen=True)
class ExploreJulia:
    """
    Forward quadratic Julia map ``z -> z^2 + c`` for escape-time exploration.

    This is the single-valued counterpart of the ``JuliaTransform`` pair:
    both signed branches of that pair invert this map.
    Iterating an inverse branch instead pulls every orbit toward the Julia
    set, so no point would ever leave the escape radius.
    """

    point: Complex

    kind = 'explore'

    @property
    def complex(self) -> Complex:
        return self.point

    def transform(self, point: Vector2D) -> Vector2D:
        x, y = point.x, point.y
        return Vector2D(x * x - y * y + self.point.x, 2.0 * x * y + self.point.y)

    def describe(self) -> Dict[str, Any]:
        return {
            'type': self.kind,
            'c': self.point.to_tuple(),
        }


Transform2D = Union[AffineTransform2D, JuliaTransform, ExploreJulia]

TRANSFORM_TYPES = (AffineTransform2D, JuliaTransform, ExploreJulia)


def is_transform(obj: Any) -> bool:
    """Check whether ``obj`` is one of the supported transform variants."""
    return isinstance(obj, TRANSFORM_TYPES)
