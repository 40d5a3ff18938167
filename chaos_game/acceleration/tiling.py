"""
Tile-based sweep for escape-time rendering.

The canvas is split into rectangular tiles which are evaluated independently,
either in-process or across a pool of worker processes, and then assembled
into the canvas buffer. Each tile owns its cells, so no synchronization is
needed beyond waiting for every tile to finish.
"""

import logging
import multiprocessing as mp
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Tuple
from threading import Event

import numpy as np

from ..core.canvas import ChaosCanvas, indices_to_coords
from ..core.escape import EscapeTimeIterator
from ..core.linalg import Vector2D
from ..core.transforms import Transform2D

logger = logging.getLogger(__name__)


class SweepCancelled(Exception):
    """Raised when a tiled sweep is cancelled before every tile finished."""


@dataclass(frozen=True)
class TileSpec:
    """Specification for a single tile of the sweep."""
    tile_id: int
    x_start: int
    x_end: int
    y_start: int
    y_end: int

    @property
    def width(self) -> int:
        return self.x_end - self.x_start

    @property
    def height(self) -> int:
        return self.y_end - self.y_start


@dataclass
class TileResult:
    """Escape-time values computed for one tile."""
    tile_id: int
    values: np.ndarray
    x_start: int
    y_start: int
    processing_time: float


@dataclass(frozen=True)
class SweepParams:
    """Everything a worker needs to evaluate a tile without the canvas."""
    transform: Transform2D
    min_coords: Vector2D
    max_coords: Vector2D
    width: int
    height: int
    max_iter: int
    escape_radius: float


def create_tile_grid(width: int, height: int, tile_size: int = 64) -> List[TileSpec]:
    """
    Create a grid of tiles covering the canvas.

    Args:
        width: Canvas width
        height: Canvas height
        tile_size: Target tile edge in pixels

    Returns:
        List of TileSpec objects in row-major order
    """
    if tile_size <= 0:
        raise ValueError("tile_size must be positive")

    tiles = []
    tile_id = 0
    for y in range(0, height, tile_size):
        for x in range(0, width, tile_size):
            tiles.append(TileSpec(
                tile_id=tile_id,
                x_start=x,
                x_end=min(x + tile_size, width),
                y_start=y,
                y_end=min(y + tile_size, height),
            ))
            tile_id += 1

    logger.debug(f"Created {len(tiles)} tiles of target size {tile_size}x{tile_size}")
    return tiles


def process_tile(params: SweepParams, tile: TileSpec) -> TileResult:
    """
    Evaluate one tile. Runs in worker processes, so it only touches its inputs.
    """
    start_time = time.time()

    cols, rows = np.meshgrid(np.arange(tile.x_start, tile.x_end, dtype=np.float64),
                             np.arange(tile.y_start, tile.y_end, dtype=np.float64))
    xs, ys = indices_to_coords(cols, rows, params.width, params.height,
                               params.min_coords, params.max_coords)

    iterator = EscapeTimeIterator(params.max_iter, params.escape_radius)
    values = iterator.iterate_grid(params.transform, xs, ys)

    return TileResult(
        tile_id=tile.tile_id,
        values=values,
        x_start=tile.x_start,
        y_start=tile.y_start,
        processing_time=time.time() - start_time,
    )


def assemble_tile(canvas: ChaosCanvas, result: TileResult) -> None:
    """Write a tile's values into its block of the canvas buffer."""
    tile_height, tile_width = result.values.shape
    canvas.buffer[result.y_start:result.y_start + tile_height,
                  result.x_start:result.x_start + tile_width] = result.values


class TiledSweep:
    """Escape-time sweep over a canvas, optionally across worker processes."""

    def __init__(self, workers: int = 1, tile_size: int = 64):
        """
        Initialize the sweep.

        Args:
            workers: Number of worker processes; 1 runs tiles in-process
            tile_size: Tile edge in pixels
        """
        if workers is None:
            workers = get_optimal_process_count()
        if tile_size <= 0:
            raise ValueError("tile_size must be positive")
        self.workers = max(1, workers)
        self.tile_size = tile_size

    def run(self, canvas: ChaosCanvas, transform: Transform2D, iterator: EscapeTimeIterator,
            cancel: Optional[Event] = None) -> Tuple[int, float]:
        """
        Fill ``canvas`` with escape-time values.

        Args:
            canvas: Destination canvas; its window defines the starting points
            transform: Map to iterate
            iterator: Escape-time settings
            cancel: Optional event polled between tiles

        Returns:
            Tuple of (tiles completed, summed per-tile processing time)

        Raises:
            SweepCancelled: If ``cancel`` was set before the sweep completed
        """
        params = SweepParams(
            transform=transform,
            min_coords=canvas.min_coords,
            max_coords=canvas.max_coords,
            width=canvas.width,
            height=canvas.height,
            max_iter=iterator.max_iter,
            escape_radius=iterator.escape_radius,
        )
        tiles = create_tile_grid(canvas.width, canvas.height, self.tile_size)

        if self.workers == 1 or len(tiles) == 1:
            return self._run_sequential(canvas, params, tiles, cancel)
        return self._run_parallel(canvas, params, tiles, cancel)

    def _run_sequential(self, canvas, params, tiles, cancel):
        processing_time = 0.0
        for completed, tile in enumerate(tiles):
            if cancel is not None and cancel.is_set():
                raise SweepCancelled(f"Sweep cancelled after {completed}/{len(tiles)} tiles")
            result = process_tile(params, tile)
            assemble_tile(canvas, result)
            processing_time += result.processing_time
        return len(tiles), processing_time

    def _run_parallel(self, canvas, params, tiles, cancel):
        logger.info(f"Processing {len(tiles)} tiles with {self.workers} processes")
        processing_time = 0.0
        completed = 0

        with ProcessPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(process_tile, params, tile) for tile in tiles]

            for future in as_completed(futures):
                if cancel is not None and cancel.is_set():
                    for pending in futures:
                        pending.cancel()
                    raise SweepCancelled(f"Sweep cancelled after {completed}/{len(tiles)} tiles")

                result = future.result()
                assemble_tile(canvas, result)
                processing_time += result.processing_time
                completed += 1

                if completed % max(1, len(tiles) // 10) == 0:
                    progress = (completed / len(tiles)) * 100
                    logger.debug(f"Completed {completed}/{len(tiles)} tiles ({progress:.1f}%)")

        return completed, processing_time


def get_optimal_process_count() -> int:
    """Leave one core for the rest of the system."""
    return max(1, mp.cpu_count() - 1)
