"""
Image and raw buffer export.

Colored images are written as PNG with the render metadata embedded as a JSON
text chunk; raw buffers are written as ``.npy`` with a JSON sidecar.
"""

import json
import logging
from dataclasses import dataclass, asdict, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple, Union

import numpy as np
from PIL import Image, PngImagePlugin

from .. import __version__

logger = logging.getLogger(__name__)


@dataclass
class RenderMetadata:
    """Metadata for chaos game and explore renders."""

    mode: str  # 'chaos' or 'explore'
    min_coords: Tuple[float, float]
    max_coords: Tuple[float, float]
    resolution: Tuple[int, int]  # width, height
    transforms: List[Dict[str, Any]] = field(default_factory=list)
    probabilities: Optional[List[int]] = None

    total_steps: Optional[int] = None
    max_iterations: Optional[int] = None
    palette: str = 'hot'
    render_time_seconds: float = 0.0

    timestamp: str = ""
    software_version: str = __version__

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        return cls.from_dict(json.loads(json_str))


class ImageExporter:
    """PNG and raw-buffer export."""

    METADATA_KEY = "ChaosGameMetadata"

    def save_image(self, image_array: np.ndarray, filepath: Union[str, Path],
                   metadata: Optional[RenderMetadata] = None) -> Path:
        """
        Save an RGB image array as PNG.

        Args:
            image_array: RGB image array (height, width, 3) with values 0-1
            filepath: Output file path
            metadata: Render metadata to embed

        Returns:
            The path written
        """
        filepath = Path(filepath)
        if filepath.suffix.lower() != '.png':
            raise ValueError(f"Unsupported format '{filepath.suffix}'. Supported: .png")

        image_array = self._prepare_image_array(image_array)
        pil_image = Image.fromarray(image_array)

        pnginfo = PngImagePlugin.PngInfo()
        if metadata:
            pnginfo.add_text("Title", f"Chaos game: {metadata.mode}")
            pnginfo.add_text("Software", f"chaos-game v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text(self.METADATA_KEY, metadata.to_json())

        pil_image.save(filepath, "PNG", pnginfo=pnginfo)
        logger.info(f"Saved image: {filepath} ({pil_image.size[0]}x{pil_image.size[1]})")
        return filepath

    def _prepare_image_array(self, image_array: np.ndarray) -> np.ndarray:
        if len(image_array.shape) != 3 or image_array.shape[2] != 3:
            raise ValueError(f"Expected RGB image array (H, W, 3), got {image_array.shape}")

        if image_array.dtype != np.uint8:
            if np.issubdtype(image_array.dtype, np.floating):
                image_array = np.clip(image_array, 0.0, 1.0)
                image_array = (image_array * 255).astype(np.uint8)
            else:
                image_array = np.clip(image_array, 0, 255).astype(np.uint8)

        return image_array

    def save_raw_data(self, buffer: np.ndarray, filepath: Union[str, Path],
                      metadata: Optional[RenderMetadata] = None) -> Path:
        """
        Save a canvas buffer as a NumPy array.

        Args:
            buffer: Buffer to save
            filepath: Output file path (.npy)
            metadata: Metadata to save alongside as JSON

        Returns:
            The path written
        """
        filepath = Path(filepath)
        if filepath.suffix.lower() != '.npy':
            filepath = filepath.with_suffix('.npy')

        np.save(filepath, buffer)

        if metadata:
            metadata_path = filepath.with_suffix('.json')
            with open(metadata_path, 'w', encoding='utf-8') as f:
                f.write(metadata.to_json())

        logger.info(f"Saved raw data: {filepath}")
        return filepath

    def load_raw_data(self, filepath: Union[str, Path]) -> Tuple[np.ndarray, Optional[RenderMetadata]]:
        """Load a raw buffer and its metadata sidecar, if present."""
        filepath = Path(filepath)
        buffer = np.load(filepath)

        metadata = None
        metadata_path = filepath.with_suffix('.json')
        if metadata_path.exists():
            with open(metadata_path, 'r', encoding='utf-8') as f:
                metadata = RenderMetadata.from_json(f.read())

        return buffer, metadata

    def extract_metadata_from_image(self, filepath: Union[str, Path]) -> Optional[RenderMetadata]:
        """Read the embedded metadata from a PNG written by ``save_image``."""
        with Image.open(filepath) as img:
            text = getattr(img, 'text', {})
            if self.METADATA_KEY in text:
                return RenderMetadata.from_json(text[self.METADATA_KEY])
        return None
