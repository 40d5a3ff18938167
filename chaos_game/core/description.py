"""
Chaos game descriptions: a coordinate window plus the transforms to apply.
"""

import logging
import numbers
from dataclasses import dataclass
from typing import Dict, Any, Optional, Sequence, Tuple

from .linalg import Vector2D
from .transforms import Transform2D, is_transform

logger = logging.getLogger(__name__)

COORDINATE_LIMIT = 50.0
MAX_TRANSFORMS = 4


def validate_coordinates(min_coords: Vector2D, max_coords: Vector2D) -> None:
    """
    Validate a coordinate window.

    Raises:
        ValueError: If a corner leaves [-50, 50], if min exceeds max on an axis,
            or if the window is empty on an axis
    """
    for value in (min_coords.x, min_coords.y, max_coords.x, max_coords.y):
        if not -COORDINATE_LIMIT <= value <= COORDINATE_LIMIT:
            raise ValueError(f"Coordinates must be between {-COORDINATE_LIMIT:g} "
                             f"and {COORDINATE_LIMIT:g}, got {value}")
    if min_coords == max_coords:
        raise ValueError("Minimum and maximum coordinates cannot be the same")
    if min_coords.x >= max_coords.x or min_coords.y >= max_coords.y:
        raise ValueError("Minimum coordinates must be less than maximum coordinates")


def validate_transforms(transforms: Optional[Sequence[Transform2D]]) -> None:
    if transforms is None:
        raise ValueError("Transformations cannot be None")
    if not 1 <= len(transforms) <= MAX_TRANSFORMS:
        raise ValueError(f"Number of transformations must be between 1 and {MAX_TRANSFORMS}, "
                         f"got {len(transforms)}")
    for transform in transforms:
        if not is_transform(transform):
            raise ValueError(f"Unsupported transformation: {transform!r}")


def _is_whole(weight) -> bool:
    if isinstance(weight, numbers.Integral):
        return True
    return isinstance(weight, numbers.Real) and float(weight).is_integer()


def validate_probabilities(probabilities: Optional[Sequence[int]], count: int) -> None:
    if probabilities is None:
        return
    if len(probabilities) != count:
        raise ValueError(f"Probabilities must match the number of transformations "
                         f"({len(probabilities)} given for {count})")
    for weight in probabilities:
        if not _is_whole(weight):
            raise ValueError(f"Probabilities must be whole numbers, got {weight!r}")
    if any(weight < 0 for weight in probabilities):
        raise ValueError("Probabilities cannot be negative")
    if sum(probabilities) <= 0:
        raise ValueError("Probabilities must have a positive sum")


@dataclass
class ChaosGameDescription:
    """
    Validated bundle of a coordinate window, transforms and optional weights.

    ``min_coords`` and ``max_coords`` may be reassigned directly without
    validation so a window can follow an interactive pan or zoom; ``validate()``
    is the commit step the drivers run before every full render.
    """

    min_coords: Vector2D
    max_coords: Vector2D
    transforms: Tuple[Transform2D, ...]
    probabilities: Optional[Tuple[int, ...]] = None

    def __post_init__(self):
        if self.transforms is not None:
            self.transforms = tuple(self.transforms)
        if self.probabilities is not None:
            self.probabilities = tuple(self.probabilities)
        self.validate()
        if self.probabilities is not None:
            self.probabilities = tuple(int(p) for p in self.probabilities)

    def validate(self) -> None:
        """Run every invariant check on the current state."""
        validate_coordinates(self.min_coords, self.max_coords)
        validate_transforms(self.transforms)
        validate_probabilities(self.probabilities, len(self.transforms))

    def set_transforms(self, transforms: Sequence[Transform2D]) -> None:
        """Replace the transforms after validating them against the weights."""
        validate_transforms(transforms)
        validate_probabilities(self.probabilities, len(transforms))
        self.transforms = tuple(transforms)

    def set_window(self, min_coords: Vector2D, max_coords: Vector2D) -> None:
        """Replace both window corners, validated."""
        validate_coordinates(min_coords, max_coords)
        self.min_coords = min_coords
        self.max_coords = max_coords

    @property
    def weights(self) -> Optional[Tuple[float, ...]]:
        """Normalized selection probabilities, or None for uniform selection."""
        if self.probabilities is None:
            return None
        total = float(sum(self.probabilities))
        return tuple(p / total for p in self.probabilities)

    def copy(self) -> 'ChaosGameDescription':
        return ChaosGameDescription(self.min_coords, self.max_coords,
                                    self.transforms, self.probabilities)

    def summary(self) -> Dict[str, Any]:
        """Numeric summary of the description for display."""
        return {
            'min_coords': self.min_coords.to_tuple(),
            'max_coords': self.max_coords.to_tuple(),
            'transforms': [t.describe() for t in self.transforms],
            'probabilities': list(self.probabilities) if self.probabilities else None,
        }
