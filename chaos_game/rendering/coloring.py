"""
Coloring of canvas buffers.

Chaos game buffers hold visit counts and explore buffers hold escape-time
values; both are normalized to [0, 1] and mapped through a color palette to an
RGB float image.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
from matplotlib import colormaps

logger = logging.getLogger(__name__)


@dataclass
class ColorRGB:
    """RGB color representation."""
    r: float
    g: float
    b: float

    def __post_init__(self):
        """Validate RGB values."""
        for component in [self.r, self.g, self.b]:
            if not 0 <= component <= 1:
                raise ValueError("RGB components must be between 0 and 1")

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def to_uint8_tuple(self) -> Tuple[int, int, int]:
        return (int(self.r * 255), int(self.g * 255), int(self.b * 255))

    @classmethod
    def from_hex(cls, value: str) -> 'ColorRGB':
        """Parse ``#rrggbb``."""
        value = value.lstrip('#')
        if len(value) != 6:
            raise ValueError(f"Invalid hex color: #{value}")
        return cls(*(int(value[i:i + 2], 16) / 255.0 for i in (0, 2, 4)))


class Palette:
    """Color palette with linear interpolation between stops."""

    def __init__(self, colors: List[Union[ColorRGB, Tuple[float, float, float]]],
                 name: str = "Custom"):
        """
        Initialize color palette.

        Args:
            colors: Evenly spaced color stops
            name: Human-readable name for the palette
        """
        self.name = name
        self.colors = []

        for color in colors:
            if isinstance(color, ColorRGB):
                self.colors.append(color)
            elif isinstance(color, (tuple, list)) and len(color) == 3:
                self.colors.append(ColorRGB(*color))
            else:
                raise ValueError(f"Invalid color format: {color}")

        if len(self.colors) < 2:
            raise ValueError("Palette must contain at least 2 colors")

    def interpolate(self, t: np.ndarray) -> np.ndarray:
        """
        Map positions in [0, 1] to colors.

        Args:
            t: Array of positions, any shape

        Returns:
            Array of shape ``t.shape + (3,)``
        """
        t = np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)
        stops = np.linspace(0.0, 1.0, len(self.colors))
        channels = np.array([c.to_tuple() for c in self.colors])

        rgb = np.empty(t.shape + (3,), dtype=np.float64)
        for channel in range(3):
            rgb[..., channel] = np.interp(t, stops, channels[:, channel])
        return rgb

    @classmethod
    def from_matplotlib(cls, cmap_name: str, n_samples: int = 32) -> 'Palette':
        """Create palette from a matplotlib colormap."""
        cmap = colormaps[cmap_name]
        colors = [ColorRGB(*cmap(t)[:3]) for t in np.linspace(0, 1, n_samples)]
        return cls(colors, name=cmap_name)


def normalize_counts(buffer: np.ndarray, log_scale: bool = True) -> np.ndarray:
    """Scale visit counts to [0, 1], logarithmically by default."""
    values = np.asarray(buffer, dtype=np.float64)
    if log_scale:
        values = np.log1p(values)
    peak = values.max() if values.size else 0.0
    if peak <= 0:
        return np.zeros_like(values)
    return values / peak


def normalize_escape(buffer: np.ndarray, max_iter: int) -> np.ndarray:
    """Scale escape-time values to [0, 1] by the iteration cap."""
    if max_iter <= 0:
        raise ValueError("max_iter must be positive")
    return np.asarray(buffer, dtype=np.float64) / max_iter


class ColoringEngine:
    """Maps canvas buffers to RGB images."""

    MATPLOTLIB_PALETTES = ('viridis', 'plasma', 'inferno', 'magma', 'cividis')

    def __init__(self):
        self.palettes = self._create_builtin_palettes()

    def _create_builtin_palettes(self) -> Dict[str, Palette]:
        palettes = {}

        palettes['hot'] = Palette([
            ColorRGB(0, 0, 0),      # Black
            ColorRGB(1, 0, 0),      # Red
            ColorRGB(1, 1, 0),      # Yellow
            ColorRGB(1, 1, 1),      # White
        ], name="Hot")

        palettes['cool'] = Palette([
            ColorRGB(0, 0, 0),
            ColorRGB(0, 0, 1),
            ColorRGB(0, 1, 1),
            ColorRGB(1, 1, 1),
        ], name="Cool")

        palettes['gray'] = Palette([
            ColorRGB(0, 0, 0),
            ColorRGB(1, 1, 1),
        ], name="Grayscale")

        palettes['fern'] = Palette([
            ColorRGB(0, 0, 0),
            ColorRGB(0, 0.4, 0),
            ColorRGB(0.2, 0.8, 0.2),
            ColorRGB(0.8, 1, 0.6),
        ], name="Fern")

        for name in self.MATPLOTLIB_PALETTES:
            palettes[name] = Palette.from_matplotlib(name)

        return palettes

    def add_palette(self, name: str, palette: Palette) -> None:
        self.palettes[name] = palette
        logger.info(f"Added color palette: {name}")

    def get_palette(self, name: str) -> Palette:
        if name not in self.palettes:
            available = ', '.join(self.palettes.keys())
            raise ValueError(f"Unknown color palette '{name}'. Available: {available}")
        return self.palettes[name]

    def list_palettes(self) -> List[str]:
        return list(self.palettes.keys())

    def render_chaos(self, buffer: np.ndarray, palette: str = 'hot', log_scale: bool = True,
                     background: Optional[ColorRGB] = None) -> np.ndarray:
        """
        Color a visit-count buffer.

        Args:
            buffer: Visit counts, ``height x width``
            palette: Palette name
            log_scale: Compress counts logarithmically before mapping
            background: Color for unvisited cells (defaults to the palette start)

        Returns:
            RGB image array (height, width, 3) with values 0-1
        """
        rgb = self.get_palette(palette).interpolate(normalize_counts(buffer, log_scale))
        if background is not None:
            rgb[np.asarray(buffer) == 0] = background.to_tuple()
        return rgb

    def render_explore(self, buffer: np.ndarray, max_iter: int, palette: str = 'hot',
                       inside_color: Optional[ColorRGB] = None) -> np.ndarray:
        """
        Color an escape-time buffer.

        Args:
            buffer: Escape-time values in [0, max_iter]
            max_iter: Iteration cap used for the sweep
            palette: Palette name
            inside_color: Color for cells that never escaped (defaults to black)

        Returns:
            RGB image array (height, width, 3) with values 0-1
        """
        if inside_color is None:
            inside_color = ColorRGB(0, 0, 0)

        rgb = self.get_palette(palette).interpolate(normalize_escape(buffer, max_iter))
        rgb[np.asarray(buffer) >= max_iter] = inside_color.to_tuple()
        return rgb
