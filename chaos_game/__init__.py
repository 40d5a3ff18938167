"""
Chaos game fractal engine.

Two ways of drawing fractals from a small set of 2D transforms:

- The chaos game: pick a transform at random, apply it to a running point and
  count where the point lands on a pixel canvas (Sierpinski triangle,
  Barnsley fern, inverse-iteration Julia sets).
- Explore mode: iterate the forward Julia map from every pixel and record how
  many steps the orbit takes to escape.

Example usage:
    >>> from chaos_game import ChaosGame, DescriptionRegistry
    >>> game = ChaosGame(DescriptionRegistry.create('sierpinski'), 400, 400, seed=1)
    >>> game.run_steps(100000)
    100000
    >>> counts = game.canvas.get_canvas_array()
"""

__version__ = "1.0.0"
__author__ = "Chaos Game Team"

from chaos_game.core.linalg import Vector2D, Complex, Matrix2x2
from chaos_game.core.transforms import AffineTransform2D, JuliaTransform, ExploreJulia
from chaos_game.core.description import ChaosGameDescription
from chaos_game.core.canvas import ChaosCanvas
from chaos_game.core.game import ChaosGame, ExploreGame, GameEvent
from chaos_game.core.presets import DescriptionRegistry
from chaos_game.io.config import RenderConfig, ConfigManager
from chaos_game.io.description_file import read_description, write_description
from chaos_game.rendering.coloring import ColoringEngine, Palette
from chaos_game.rendering.image_output import ImageExporter

# Main API classes
from chaos_game.api import FractalRenderer, ChaosGameSession, FractalExplorer

__all__ = [
    "Vector2D",
    "Complex",
    "Matrix2x2",
    "AffineTransform2D",
    "JuliaTransform",
    "ExploreJulia",
    "ChaosGameDescription",
    "ChaosCanvas",
    "ChaosGame",
    "ExploreGame",
    "GameEvent",
    "DescriptionRegistry",
    "RenderConfig",
    "ConfigManager",
    "read_description",
    "write_description",
    "ColoringEngine",
    "Palette",
    "ImageExporter",
    "FractalRenderer",
    "ChaosGameSession",
    "FractalExplorer",
]
