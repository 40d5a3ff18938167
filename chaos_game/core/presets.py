"""
Built-in fractal descriptions and a registry for looking them up by name.
"""

import logging
from typing import Callable, Dict

from .description import ChaosGameDescription
from .linalg import Vector2D, Complex, Matrix2x2
from .transforms import AffineTransform2D, JuliaTransform, ExploreJulia

logger = logging.getLogger(__name__)

# Default constants for the Julia presets
JULIA_CONSTANT = Complex(-0.74543, 0.11301)
EXPLORE_CONSTANT = Complex(-0.835, 0.2321)

JULIA_MIN = Vector2D(-1.6, -1.0)
JULIA_MAX = Vector2D(1.6, 1.0)


def sierpinski() -> ChaosGameDescription:
    """Sierpinski triangle: three half-scale maps toward the triangle corners."""
    half = Matrix2x2(0.5, 0.0, 0.0, 0.5)
    return ChaosGameDescription(
        Vector2D(0.0, 0.0),
        Vector2D(1.0, 1.0),
        [
            AffineTransform2D(half, Vector2D(0.0, 0.0)),
            AffineTransform2D(half, Vector2D(0.25, 0.5)),
            AffineTransform2D(half, Vector2D(0.5, 0.0)),
        ],
    )


def barnsley() -> ChaosGameDescription:
    """Barnsley fern with its standard 1/85/7/7 weighting."""
    return ChaosGameDescription(
        Vector2D(-2.65, 0.0),
        Vector2D(2.65, 10.0),
        [
            AffineTransform2D(Matrix2x2(0.0, 0.0, 0.0, 0.16), Vector2D(0.0, 0.0)),
            AffineTransform2D(Matrix2x2(0.85, 0.04, -0.04, 0.85), Vector2D(0.0, 1.6)),
            AffineTransform2D(Matrix2x2(0.2, -0.26, 0.23, 0.22), Vector2D(0.0, 1.6)),
            AffineTransform2D(Matrix2x2(-0.15, 0.28, 0.26, 0.24), Vector2D(0.0, 0.44)),
        ],
        [1, 85, 7, 7],
    )


def julia_description(real: float, imag: float) -> ChaosGameDescription:
    """Both inverse Julia branches for ``c = real + imag * i``."""
    return ChaosGameDescription(JULIA_MIN, JULIA_MAX,
                                list(JuliaTransform.pair(Complex(real, imag))))


def julia() -> ChaosGameDescription:
    """Julia set traced by the two inverse branches."""
    return julia_description(JULIA_CONSTANT.x, JULIA_CONSTANT.y)


def explore_julia(real: float = EXPLORE_CONSTANT.x,
                  imag: float = EXPLORE_CONSTANT.y) -> ChaosGameDescription:
    """Forward Julia map for the escape-time sweep."""
    return ChaosGameDescription(JULIA_MIN, JULIA_MAX, [ExploreJulia(Complex(real, imag))])


class DescriptionRegistry:
    """Registry of named description factories."""

    _presets: Dict[str, Callable[[], ChaosGameDescription]] = {
        'sierpinski': sierpinski,
        'barnsley': barnsley,
        'julia': julia,
        'explore_julia': explore_julia,
    }

    @classmethod
    def register(cls, name: str, factory: Callable[[], ChaosGameDescription]) -> None:
        """
        Register a new preset.

        Args:
            name: Unique identifier for the preset
            factory: Callable returning a fresh description
        """
        if not callable(factory):
            raise ValueError("Preset factory must be callable")
        cls._presets[name.lower()] = factory
        logger.info(f"Registered preset: {name}")

    @classmethod
    def get(cls, name: str) -> Callable[[], ChaosGameDescription]:
        factory = cls._presets.get(name.strip().lower())
        if factory is None:
            available = ', '.join(cls._presets.keys())
            raise ValueError(f"Unknown preset '{name}'. Available: {available}")
        return factory

    @classmethod
    def create(cls, name: str) -> ChaosGameDescription:
        """Create a fresh description for the named preset."""
        return cls.get(name)()

    @classmethod
    def list_presets(cls) -> Dict[str, str]:
        """Preset names mapped to the first line of their docstring."""
        result = {}
        for name, factory in cls._presets.items():
            doc = (factory.__doc__ or '').strip().splitlines()
            result[name] = doc[0] if doc else name
        return result
