"""
Drivers for the two fractal algorithms.

``ChaosGame`` runs the random iterated-function-system accumulation and
``ExploreGame`` the deterministic per-pixel escape-time sweep. Both own one
description and one canvas, rebuild the canvas whenever the description or
size changes, and report completed operations to registered listeners.
"""

import logging
import time
from dataclasses import dataclass
from threading import Event
from typing import Any, Callable, List, Optional

import numpy as np

from .canvas import ChaosCanvas
from .description import ChaosGameDescription
from .escape import EscapeTimeIterator
from .linalg import Vector2D
from ..acceleration.tiling import TiledSweep

logger = logging.getLogger(__name__)

MIN_STEPS = 1
MAX_STEPS = 10_000_000

# Transform applications performed unplotted before the first counted step
WARMUP_STEPS = 1

# Steps drawn and plotted per batch; cancellation is polled between batches
CHUNK_SIZE = 10_000

SEED_POINT = Vector2D(0.0, 0.0)


@dataclass(frozen=True)
class GameEvent:
    """Notification sent to listeners after a completed operation."""
    kind: str
    game: Any


Listener = Callable[[GameEvent], None]


def parse_steps(text: str) -> int:
    """
    Parse a step count from user-supplied text.

    Raises:
        ValueError: If the text is not an integer in [1, 10000000]
    """
    try:
        steps = int(str(text).strip())
    except ValueError:
        raise ValueError(f"Steps must be a number between {MIN_STEPS} and {MAX_STEPS}, "
                         f"got {text!r}") from None
    validate_steps(steps)
    return steps


def validate_steps(steps: int) -> None:
    if isinstance(steps, bool) or not isinstance(steps, (int, np.integer)):
        raise ValueError(f"Steps must be an integer, got {steps!r}")
    if not MIN_STEPS <= steps <= MAX_STEPS:
        raise ValueError(f"Steps must be a number between {MIN_STEPS} and {MAX_STEPS}, "
                         f"got {steps}")


class _Observable:
    """Listener bookkeeping shared by the drivers."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _notify(self, kind: str) -> None:
        event = GameEvent(kind, self)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Listener failed on '{kind}' event: {e}")


class ChaosGame(_Observable):
    """Chaos game (random IFS) driver."""

    def __init__(self, description: ChaosGameDescription, width: int, height: int,
                 seed: Optional[int] = None):
        """
        Initialize the game.

        Args:
            description: Validated description to play
            width, height: Canvas size in pixels
            seed: Random seed; equal seeds give identical canvases
        """
        super().__init__()
        description.validate()
        self._description = description
        self._canvas = ChaosCanvas(width, height, description.min_coords, description.max_coords)
        self._seed = seed
        self._rng = np.random.default_rng(seed)
        self.current_point = SEED_POINT
        self.steps = 0
        self.total_steps = 0
        self._warmed_up = False

    @property
    def description(self) -> ChaosGameDescription:
        return self._description

    @property
    def canvas(self) -> ChaosCanvas:
        return self._canvas

    def set_description(self, description: ChaosGameDescription) -> None:
        """Replace the description and start over on a fresh canvas."""
        description.validate()
        self._description = description
        self._new_canvas(self._canvas.width, self._canvas.height)
        self._notify('description')

    def resize(self, width: int, height: int) -> None:
        self._new_canvas(width, height)
        self._notify('description')

    def _new_canvas(self, width: int, height: int) -> None:
        self._canvas = ChaosCanvas(width, height, self._description.min_coords,
                                   self._description.max_coords)
        self.current_point = SEED_POINT
        self._warmed_up = False

    def reset(self) -> None:
        """Clear the canvas, the step counters and the running point."""
        self._canvas.clear_canvas()
        self.current_point = SEED_POINT
        self._warmed_up = False
        self._rng = np.random.default_rng(self._seed)
        self.steps = 0
        self.total_steps = 0
        self._notify('reset')

    def run_steps(self, steps: int, cancel: Optional[Event] = None) -> int:
        """
        Run the chaos game for ``steps`` plotted iterations.

        Args:
            steps: Number of points to plot, in [1, 10000000]
            cancel: Optional event polled between batches

        Returns:
            Number of steps actually run (fewer if cancelled)

        Raises:
            ValueError: If ``steps`` is out of range or the description is invalid
        """
        validate_steps(steps)
        self._description.validate()
        self._sync_canvas_window()

        start_time = time.time()
        transforms = self._description.transforms
        weights = self._description.weights
        point = self.current_point

        if not self._warmed_up:
            for index in self._choose(WARMUP_STEPS, len(transforms), weights):
                point = transforms[index].transform(point)
            self._warmed_up = True

        done = 0
        while done < steps:
            if cancel is not None and cancel.is_set():
                logger.info(f"Chaos game cancelled after {done}/{steps} steps")
                break

            batch = min(CHUNK_SIZE, steps - done)
            xs = np.empty(batch, dtype=np.float64)
            ys = np.empty(batch, dtype=np.float64)
            for n, index in enumerate(self._choose(batch, len(transforms), weights)):
                point = transforms[index].transform(point)
                xs[n] = point.x
                ys[n] = point.y
            self._canvas.put_pixels_chaos(xs, ys)
            done += batch

        self.current_point = point
        self.steps = done
        self.total_steps += done

        logger.info(f"Ran {done} chaos game steps in {time.time() - start_time:.2f}s "
                    f"(total {self.total_steps})")
        self._notify('steps')
        return done

    def _choose(self, count: int, n_transforms: int, weights) -> List[int]:
        if n_transforms == 1:
            return [0] * count
        return self._rng.choice(n_transforms, size=count, p=weights).tolist()

    def _sync_canvas_window(self) -> None:
        # The description window may have been moved with the unchecked setters
        if (self._canvas.min_coords != self._description.min_coords
                or self._canvas.max_coords != self._description.max_coords):
            self._new_canvas(self._canvas.width, self._canvas.height)

    def get_info(self):
        """Summary of the live game for display."""
        info = self._description.summary()
        info.update({
            'width': self._canvas.width,
            'height': self._canvas.height,
            'steps': self.steps,
            'total_steps': self.total_steps,
        })
        return info


class ExploreGame(_Observable):
    """Escape-time (explore mode) driver."""

    def __init__(self, description: ChaosGameDescription, width: int, height: int,
                 max_iterations: int = 100, escape_radius: float = 2.0,
                 workers: int = 1, tile_size: int = 64):
        """
        Initialize the explore game.

        Args:
            description: Description whose first transform is iterated
            width, height: Canvas size in pixels
            max_iterations: Iteration cap per pixel
            escape_radius: Divergence radius
            workers: Worker processes for the sweep
            tile_size: Sweep tile edge in pixels
        """
        super().__init__()
        description.validate()
        self._description = description
        self._canvas = ChaosCanvas(width, height, description.min_coords, description.max_coords)
        self.iterator = EscapeTimeIterator(max_iterations, escape_radius)
        self.sweep = TiledSweep(workers, tile_size)

    @property
    def description(self) -> ChaosGameDescription:
        return self._description

    @property
    def canvas(self) -> ChaosCanvas:
        return self._canvas

    @property
    def max_iterations(self) -> int:
        return self.iterator.max_iter

    def set_description(self, description: ChaosGameDescription) -> None:
        description.validate()
        self._description = description
        self._canvas = ChaosCanvas(self._canvas.width, self._canvas.height,
                                   description.min_coords, description.max_coords)
        self._notify('description')

    def resize(self, width: int, height: int) -> None:
        self._canvas = ChaosCanvas(width, height, self._description.min_coords,
                                   self._description.max_coords)
        self._notify('description')

    def set_max_iterations(self, max_iterations: int) -> None:
        self.iterator = EscapeTimeIterator(max_iterations, self.iterator.escape_radius)

    def explore_fractals(self, cancel: Optional[Event] = None) -> np.ndarray:
        """
        Run the escape-time sweep over every pixel.

        Args:
            cancel: Optional event polled between tiles

        Returns:
            The canvas buffer

        Raises:
            SweepCancelled: If cancelled before the sweep completed
            ValueError: If the description window is invalid
        """
        self._description.validate()
        self._canvas.set_window(self._description.min_coords, self._description.max_coords)
        self._canvas.clear_canvas()

        start_time = time.time()
        transform = self._description.transforms[0]
        tiles, processing_time = self.sweep.run(self._canvas, transform, self.iterator, cancel)

        logger.info(f"Explore sweep complete: {self._canvas.width}x{self._canvas.height}, "
                    f"{tiles} tiles, {time.time() - start_time:.2f}s "
                    f"({processing_time:.2f}s processing)")
        self._notify('explore')
        return self._canvas.get_canvas_array()

    def get_info(self):
        info = self._description.summary()
        info.update({
            'width': self._canvas.width,
            'height': self._canvas.height,
            'max_iterations': self.iterator.max_iter,
            'escape_radius': self.iterator.escape_radius,
        })
        return info
