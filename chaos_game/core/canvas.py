"""
Pixel canvas for the chaos game and the explore sweep.

The canvas owns a ``height x width`` buffer and the affine map from the
coordinate window to buffer indices. Row 0 is the top of the window (maximum
y), column 0 its left edge (minimum x).
"""

import math
import logging
from typing import Optional, Tuple

import numpy as np

from .linalg import Vector2D, Matrix2x2
from .transforms import AffineTransform2D

logger = logging.getLogger(__name__)

# Slack allowed in index space before a mapped point counts as off-canvas
INDEX_TOLERANCE = 1e-9


def coords_to_indices_transform(width: int, height: int, min_coords: Vector2D,
                                max_coords: Vector2D) -> AffineTransform2D:
    """
    Build the map from window coordinates ``(x, y)`` to ``(row, col)``.

    Args:
        width, height: Canvas size in pixels
        min_coords, max_coords: Window corners

    Returns:
        Affine transform whose output vector is ``(row, col)``
    """
    return AffineTransform2D(
        Matrix2x2(
            0.0, (height - 1) / (min_coords.y - max_coords.y),
            (width - 1) / (max_coords.x - min_coords.x), 0.0),
        Vector2D(
            ((height - 1.0) * max_coords.y) / (max_coords.y - min_coords.y),
            ((width - 1.0) * min_coords.x) / (min_coords.x - max_coords.x)))


def indices_to_coords(col, row, width: int, height: int,
                      min_coords: Vector2D, max_coords: Vector2D):
    """
    Inverse of ``coords_to_indices_transform``.

    Works on scalars and on numpy arrays alike, with the same operation order,
    so vectorized and per-pixel callers see identical coordinates.

    Returns:
        Tuple ``(x, y)``
    """
    x = col * (max_coords.x - min_coords.x) / (width - 1) + min_coords.x
    y = row * (min_coords.y - max_coords.y) / (height - 1) + max_coords.y
    return x, y


class ChaosCanvas:
    """Pixel buffer bound to a coordinate window."""

    def __init__(self, width: int, height: int, min_coords: Vector2D, max_coords: Vector2D):
        """
        Initialize an all-zero canvas.

        Args:
            width, height: Buffer size in pixels, at least 2 each
            min_coords: Lower-left window corner
            max_coords: Upper-right window corner
        """
        self._check_size(width, height)
        self._width = width
        self._height = height
        self._min_coords = min_coords
        self._max_coords = max_coords
        self._buffer = np.zeros((height, width), dtype=np.float64)
        self._rebuild_transform()

    @staticmethod
    def _check_size(width: int, height: int) -> None:
        if width < 2 or height < 2:
            raise ValueError(f"Canvas must be at least 2x2 pixels, got {width}x{height}")

    def _rebuild_transform(self) -> None:
        self._transform = coords_to_indices_transform(
            self._width, self._height, self._min_coords, self._max_coords)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def min_coords(self) -> Vector2D:
        return self._min_coords

    @min_coords.setter
    def min_coords(self, value: Vector2D) -> None:
        self._min_coords = value
        self._rebuild_transform()

    @property
    def max_coords(self) -> Vector2D:
        return self._max_coords

    @max_coords.setter
    def max_coords(self, value: Vector2D) -> None:
        self._max_coords = value
        self._rebuild_transform()

    def set_window(self, min_coords: Vector2D, max_coords: Vector2D) -> None:
        """Move both corners at once and rebuild the mapping."""
        self._min_coords = min_coords
        self._max_coords = max_coords
        self._rebuild_transform()

    @property
    def transform_coords_to_indices(self) -> AffineTransform2D:
        return self._transform

    @property
    def buffer(self) -> np.ndarray:
        return self._buffer

    def get_canvas_array(self) -> np.ndarray:
        """Row-major ``height x width`` pixel values."""
        return self._buffer

    def resize(self, width: int, height: int) -> None:
        """Reallocate an empty buffer of the given size and rebuild the mapping."""
        self._check_size(width, height)
        self._width = width
        self._height = height
        self._buffer = np.zeros((height, width), dtype=np.float64)
        self._rebuild_transform()

    def coords_to_indices(self, point: Vector2D) -> Optional[Tuple[int, int]]:
        """
        Map a coordinate to the nearest ``(row, col)`` cell.

        Returns:
            The cell indices, or None if the point falls off the canvas
        """
        mapped = self._transform.transform(point)
        row, col = mapped.x, mapped.y
        if not (-INDEX_TOLERANCE <= row <= self._height - 1 + INDEX_TOLERANCE
                and -INDEX_TOLERANCE <= col <= self._width - 1 + INDEX_TOLERANCE):
            return None
        row_index = min(int(math.floor(row + 0.5)), self._height - 1)
        col_index = min(int(math.floor(col + 0.5)), self._width - 1)
        return row_index, col_index

    def transform_indices_to_coords(self, i: int, j: int) -> Vector2D:
        """
        Map column ``i`` and row ``j`` back to the coordinate they represent.
        """
        x, y = indices_to_coords(i, j, self._width, self._height,
                                 self._min_coords, self._max_coords)
        return Vector2D(x, y)

    def coordinate_grid(self) -> Tuple[np.ndarray, np.ndarray]:
        """Coordinates of every pixel as two ``height x width`` arrays."""
        cols, rows = np.meshgrid(np.arange(self._width, dtype=np.float64),
                                 np.arange(self._height, dtype=np.float64))
        return indices_to_coords(cols, rows, self._width, self._height,
                                 self._min_coords, self._max_coords)

    def put_pixel_chaos(self, point: Vector2D) -> None:
        """Increment the cell under ``point``; points off the canvas are dropped."""
        indices = self.coords_to_indices(point)
        if indices is not None:
            self._buffer[indices] += 1

    def put_pixels_chaos(self, xs: np.ndarray, ys: np.ndarray) -> int:
        """
        Vectorized ``put_pixel_chaos`` over many points.

        Args:
            xs, ys: Point coordinates

        Returns:
            Number of points that landed on the canvas
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        m = self._transform.matrix
        b = self._transform.vector
        rows = (m.a00 * xs + m.a01 * ys) + b.x
        cols = (m.a10 * xs + m.a11 * ys) + b.y

        inside = ((rows >= -INDEX_TOLERANCE) & (rows <= self._height - 1 + INDEX_TOLERANCE)
                  & (cols >= -INDEX_TOLERANCE) & (cols <= self._width - 1 + INDEX_TOLERANCE))
        if not np.any(inside):
            return 0

        row_idx = np.minimum(np.floor(rows[inside] + 0.5).astype(np.intp), self._height - 1)
        col_idx = np.minimum(np.floor(cols[inside] + 0.5).astype(np.intp), self._width - 1)
        np.add.at(self._buffer, (row_idx, col_idx), 1)
        return int(row_idx.size)

    def put_pixel_explore(self, col: int, row: int, value: float) -> None:
        """Set a cell to an escape-time value; out-of-range indices are ignored."""
        if 0 <= row < self._height and 0 <= col < self._width:
            self._buffer[row, col] = value

    def get_pixel(self, point: Vector2D) -> float:
        """Value of the cell under ``point``, or 0 off the canvas."""
        indices = self.coords_to_indices(point)
        if indices is None:
            return 0.0
        return float(self._buffer[indices])

    def clear_canvas(self) -> None:
        self._buffer.fill(0.0)
