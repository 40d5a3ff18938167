"""
High-level interface for chaos game and explore rendering.

``FractalRenderer`` turns a description into a colored image or raw buffer,
``ChaosGameSession`` and ``FractalExplorer`` hold the state a presentation
layer drives: preset selection, step runs, file load/save, pan and zoom.
None of these depend on a GUI toolkit.
"""

import logging
import time
from pathlib import Path
from threading import Event
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .core.canvas import indices_to_coords
from .core.description import ChaosGameDescription
from .core.game import ChaosGame, ExploreGame, Listener, parse_steps
from .core.linalg import Vector2D, Complex
from .core.presets import DescriptionRegistry, julia_description, explore_julia
from .core.transforms import AffineTransform2D, JuliaTransform, ExploreJulia
from .io.config import RenderConfig
from .io.description_file import read_description, write_description
from .rendering.coloring import ColoringEngine
from .rendering.image_output import ImageExporter, RenderMetadata

logger = logging.getLogger(__name__)

ZOOM_IN_LIMIT = 1e-15
ZOOM_OUT_LIMIT = 8.0
JULIA_PART_RANGE = (-1.0, 1.0)


class FractalRenderer:
    """Renders descriptions to images or raw buffers."""

    def __init__(self, config: Optional[RenderConfig] = None):
        """
        Initialize fractal renderer.

        Args:
            config: Rendering configuration (uses defaults if None)
        """
        self.config = config or RenderConfig()
        self.config.validate()
        self.coloring_engine = ColoringEngine()
        self.image_exporter = ImageExporter()

        logger.info(f"FractalRenderer initialized: {self.config.width}x{self.config.height}")

    def render_chaos(self, description: ChaosGameDescription,
                     output_path: Optional[Union[str, Path]] = None,
                     cancel: Optional[Event] = None) -> Tuple[np.ndarray, ChaosGame]:
        """
        Run the chaos game and color the result.

        Args:
            description: Description to play
            output_path: Optional ``.png`` or ``.npy`` output
            cancel: Optional cancellation event

        Returns:
            Tuple of (RGB image array, the game that produced it)
        """
        start_time = time.time()
        game = ChaosGame(description, self.config.width, self.config.height, self.config.seed)
        game.run_steps(self.config.steps, cancel)

        buffer = game.canvas.get_canvas_array()
        rgb_image = self.coloring_engine.render_chaos(
            buffer, palette=self.config.palette, log_scale=self.config.log_scale)

        if output_path:
            metadata = self._metadata('chaos', description, time.time() - start_time,
                                      total_steps=game.total_steps)
            self._save(rgb_image, buffer, output_path, metadata)

        return rgb_image, game

    def render_explore(self, description: ChaosGameDescription,
                       output_path: Optional[Union[str, Path]] = None,
                       cancel: Optional[Event] = None) -> Tuple[np.ndarray, ExploreGame]:
        """
        Run the escape-time sweep and color the result.

        Args:
            description: Description whose first transform is iterated
            output_path: Optional ``.png`` or ``.npy`` output
            cancel: Optional cancellation event

        Returns:
            Tuple of (RGB image array, the game that produced it)
        """
        start_time = time.time()
        game = ExploreGame(description, self.config.width, self.config.height,
                           max_iterations=self.config.max_iterations,
                           escape_radius=self.config.escape_radius,
                           workers=self.config.workers, tile_size=self.config.tile_size)
        buffer = game.explore_fractals(cancel)

        rgb_image = self.coloring_engine.render_explore(
            buffer, self.config.max_iterations, palette=self.config.palette)

        if output_path:
            metadata = self._metadata('explore', description, time.time() - start_time,
                                      max_iterations=self.config.max_iterations)
            self._save(rgb_image, buffer, output_path, metadata)

        return rgb_image, game

    def _metadata(self, mode: str, description: ChaosGameDescription,
                  render_time: float, **extra) -> RenderMetadata:
        summary = description.summary()
        return RenderMetadata(
            mode=mode,
            min_coords=summary['min_coords'],
            max_coords=summary['max_coords'],
            resolution=(self.config.width, self.config.height),
            transforms=summary['transforms'],
            probabilities=summary['probabilities'],
            palette=self.config.palette,
            render_time_seconds=render_time,
            **extra,
        )

    def _save(self, rgb_image: np.ndarray, buffer: np.ndarray,
              output_path: Union[str, Path], metadata: RenderMetadata) -> Path:
        output_path = Path(output_path)
        if output_path.suffix.lower() == '.npy':
            return self.image_exporter.save_raw_data(buffer, output_path, metadata)
        return self.image_exporter.save_image(rgb_image, output_path, metadata)


class ChaosGameSession:
    """State behind an interactive chaos game page."""

    def __init__(self, preset: str = 'sierpinski', width: int = 1200, height: int = 800,
                 seed: Optional[int] = None):
        self.game = ChaosGame(DescriptionRegistry.create(preset), width, height, seed)

    @property
    def description(self) -> ChaosGameDescription:
        return self.game.description

    def add_listener(self, listener: Listener) -> None:
        self.game.add_listener(listener)

    def select_preset(self, name: Optional[str]) -> None:
        """Switch to a built-in description by name."""
        if name is None or not name.strip():
            raise ValueError("Please select a preset")
        self.game.set_description(DescriptionRegistry.create(name))

    def run_steps(self, steps: int, cancel: Optional[Event] = None) -> int:
        return self.game.run_steps(steps, cancel)

    def run_steps_text(self, text: str, cancel: Optional[Event] = None) -> int:
        """Validate a step count typed by the user, then run it."""
        return self.game.run_steps(parse_steps(text), cancel)

    def set_window(self, min_coords: Vector2D, max_coords: Vector2D) -> None:
        """Keep the transforms, replace the coordinate window."""
        current = self.game.description
        self.game.set_description(ChaosGameDescription(
            min_coords, max_coords, current.transforms, current.probabilities))

    def open_file(self, filepath: Union[str, Path]) -> None:
        self.game.set_description(read_description(filepath))

    def save_file(self, filepath: Union[str, Path]) -> None:
        write_description(self.game.description, filepath)

    def create_affine_fractal(self, transforms: Sequence[AffineTransform2D],
                              probabilities: Optional[Sequence[int]] = None) -> None:
        """Play user-defined affine transforms on the unit square."""
        self.game.set_description(ChaosGameDescription(
            Vector2D(0.0, 0.0), Vector2D(1.0, 1.0), list(transforms), probabilities))

    def create_julia_fractal(self, real: float, imag: float) -> None:
        """Play both inverse Julia branches for ``c = real + imag * i``."""
        low, high = JULIA_PART_RANGE
        if not (low <= real <= high and low <= imag <= high):
            raise ValueError(f"Julia constant parts must be between {low:g} and {high:g}")
        self.game.set_description(julia_description(real, imag))

    def update_julia_value(self, part: str, value: float) -> None:
        """
        Change one part of the current Julia constant.

        Args:
            part: 'real' or 'imaginary'
            value: New value for that part
        """
        first = self.game.description.transforms[0]
        if not isinstance(first, JuliaTransform):
            raise ValueError("Current description is not a Julia fractal")
        real, imag = _updated_constant(first.point, part, value)
        self.game.set_description(julia_description(real, imag))

    def reset(self) -> None:
        self.game.reset()

    def info(self) -> Dict[str, Any]:
        return self.game.get_info()


class FractalExplorer:
    """Interactive escape-time exploration with pan, zoom and history."""

    def __init__(self, description: Optional[ChaosGameDescription] = None,
                 width: int = 1200, height: int = 800, max_iterations: int = 100,
                 escape_radius: float = 2.0, workers: int = 1, tile_size: int = 64):
        """Initialize the explorer; defaults to the explore Julia preset."""
        description = description or explore_julia()
        self._home = (description.min_coords, description.max_coords)
        self.game = ExploreGame(description, width, height, max_iterations,
                                escape_radius, workers, tile_size)
        self.history: List[Tuple[Vector2D, Vector2D, float]] = []
        self.cumulative_scale = 1.0

    @property
    def description(self) -> ChaosGameDescription:
        return self.game.description

    @property
    def canvas(self):
        return self.game.canvas

    def add_listener(self, listener: Listener) -> None:
        self.game.add_listener(listener)

    def render(self, cancel: Optional[Event] = None) -> np.ndarray:
        """Commit the current window and sweep every pixel."""
        return self.game.explore_fractals(cancel)

    def _push_history(self) -> None:
        self.history.append((self.description.min_coords, self.description.max_coords,
                             self.cumulative_scale))

    def _pixel_to_coords(self, col: float, row: float) -> Vector2D:
        canvas = self.game.canvas
        x, y = indices_to_coords(col, row, canvas.width, canvas.height,
                                 self.description.min_coords, self.description.max_coords)
        return Vector2D(x, y)

    def pan(self, dx: float, dy: float) -> None:
        """
        Move the window by a drag gesture measured in pixels.

        Args:
            dx: Horizontal drag, positive to the right
            dy: Vertical drag, positive downwards (screen convention)
        """
        self._push_history()
        canvas = self.game.canvas
        description = self.description

        span = description.max_coords.subtract(description.min_coords)
        drag = Vector2D(dx, -dy).multiply(span).divide(Vector2D(canvas.width, canvas.height))
        description.min_coords = description.min_coords.subtract(drag)
        description.max_coords = description.max_coords.subtract(drag)

    def zoom(self, scale_factor: float, col: Optional[float] = None,
             row: Optional[float] = None) -> bool:
        """
        Scale the window about a pixel (the canvas center by default).

        Factors below 1 zoom in. Zooming stops once the cumulative scale
        leaves [1e-15, 8].

        Returns:
            True if the window changed
        """
        if scale_factor <= 0:
            raise ValueError("scale_factor must be positive")
        if scale_factor < 1 and self.cumulative_scale <= ZOOM_IN_LIMIT:
            logger.info("Zoom-in limit reached")
            return False
        if scale_factor > 1 and self.cumulative_scale >= ZOOM_OUT_LIMIT:
            logger.info("Zoom-out limit reached")
            return False

        canvas = self.game.canvas
        if col is None or row is None:
            col, row = canvas.width // 2, canvas.height // 2

        self._push_history()
        self.cumulative_scale *= scale_factor
        center = self._pixel_to_coords(col, row)
        description = self.description
        description.min_coords = center.subtract(
            center.subtract(description.min_coords).scale(scale_factor))
        description.max_coords = center.add(
            description.max_coords.subtract(center).scale(scale_factor))

        logger.debug(f"Zoomed by {scale_factor} about ({center.x:.6g}, {center.y:.6g})")
        return True

    def zoom_in(self, base: float = 1.1, col: Optional[float] = None,
                row: Optional[float] = None) -> bool:
        return self.zoom(1.0 / base, col, row)

    def zoom_out(self, base: float = 1.1, col: Optional[float] = None,
                 row: Optional[float] = None) -> bool:
        return self.zoom(base, col, row)

    def go_back(self) -> bool:
        """Return to the previous window and its zoom scale."""
        if not self.history:
            logger.warning("No history available")
            return False
        min_coords, max_coords, self.cumulative_scale = self.history.pop()
        self.description.min_coords, self.description.max_coords = min_coords, max_coords
        return True

    def reset_view(self) -> None:
        """Return to the starting window."""
        self.description.min_coords, self.description.max_coords = self._home
        self.cumulative_scale = 1.0
        self.history = []
        logger.info("Reset to default view")

    def resize(self, width: int, height: int) -> None:
        self.game.resize(width, height)

    def adjust_iterations(self, max_iterations: int) -> None:
        if max_iterations <= 0:
            raise ValueError("Iterations must be positive")
        self.game.set_max_iterations(max_iterations)
        logger.info(f"Set max iterations to {max_iterations}")

    def update_julia_value(self, part: str, value: float) -> None:
        """Change one part of the explored Julia constant."""
        first = self.description.transforms[0]
        if not isinstance(first, (ExploreJulia, JuliaTransform)):
            raise ValueError("Current description has no Julia constant")
        real, imag = _updated_constant(first.point, part, value)
        self.description.set_transforms([ExploreJulia(Complex(real, imag))])

    def get_exploration_info(self) -> Dict[str, Any]:
        description = self.description
        span = description.max_coords.subtract(description.min_coords)
        center = description.min_coords.add(span.scale(0.5))
        info = self.game.get_info()
        info.update({
            'center': center.to_tuple(),
            'cumulative_scale': self.cumulative_scale,
            'history_depth': len(self.history),
            'pixels_per_unit': self.game.canvas.width / span.x,
        })
        return info


def _updated_constant(point: Complex, part: str, value: float) -> Tuple[float, float]:
    if part == 'real':
        return value, point.y
    if part == 'imaginary':
        return point.x, value
    raise ValueError(f"part must be 'real' or 'imaginary', got {part!r}")
