"""Piecewise-linear transfer function mapping density to color and opacity."""

import logging
from pathlib import Path
from typing import List, Sequence, Tuple, Union

import numpy as np
import matplotlib.image

logger = logging.getLogger(__name__)

DEFAULT_COLOR = (1.0, 1.0, 1.0)
DEFAULT_OPACITY = 1.0


class TransferFunction:
    """Ordered color and opacity control points over the density domain [0, 1].

    Points are kept in ascending position order. Points sharing a position
    keep their insertion order, and lookups treat the later-inserted one as
    the right side of the bracket. Two points at the same position therefore
    produce a step: the value just below the position comes from the earlier
    point, the value at and above it from the later one.
    """

    def __init__(self):
        self._color_positions: List[float] = []
        self._colors: List[Tuple[float, float, float]] = []
        self._opacity_positions: List[float] = []
        self._opacities: List[float] = []

    def clear(self):
        """Remove all color and opacity control points."""
        self._color_positions = []
        self._colors = []
        self._opacity_positions = []
        self._opacities = []

    def add_color_point(self, position: float, color: Sequence[float]):
        """Insert an RGB control point, after any existing point at the same position."""
        position = float(np.clip(position, 0.0, 1.0))
        color = tuple(float(c) for c in color)
        if len(color) != 3:
            raise ValueError(f"Color must have 3 components, got {color}")
        idx = _insertion_index(self._color_positions, position)
        self._color_positions.insert(idx, position)
        self._colors.insert(idx, color)

    def add_opacity_point(self, position: float, opacity: float):
        """Insert an opacity control point, after any existing point at the same position."""
        position = float(np.clip(position, 0.0, 1.0))
        opacity = float(np.clip(opacity, 0.0, 1.0))
        idx = _insertion_index(self._opacity_positions, position)
        self._opacity_positions.insert(idx, position)
        self._opacities.insert(idx, opacity)

    def set_points(self, color_points, opacity_points):
        """Replace both control point sets at once.

        Args:
            color_points: Iterable of (position, (r, g, b))
            opacity_points: Iterable of (position, opacity)
        """
        replacement = TransferFunction()
        for position, color in color_points:
            replacement.add_color_point(position, color)
        for position, opacity in opacity_points:
            replacement.add_opacity_point(position, opacity)

        self._color_positions = replacement._color_positions
        self._colors = replacement._colors
        self._opacity_positions = replacement._opacity_positions
        self._opacities = replacement._opacities

    @property
    def color_points(self) -> List[Tuple[float, Tuple[float, float, float]]]:
        return list(zip(self._color_positions, self._colors))

    @property
    def opacity_points(self) -> List[Tuple[float, float]]:
        return list(zip(self._opacity_positions, self._opacities))

    def evaluate_color(self, density: Union[float, np.ndarray]) -> np.ndarray:
        """Interpolated RGB for one or more densities; shape (..., 3)."""
        if not self._colors:
            return np.broadcast_to(
                np.asarray(DEFAULT_COLOR), np.shape(density) + (3,)
            ).copy()
        return _interpolate(self._color_positions, np.asarray(self._colors), density)

    def evaluate_opacity(self, density: Union[float, np.ndarray]) -> np.ndarray:
        """Interpolated opacity for one or more densities."""
        if not self._opacities:
            return np.full(np.shape(density), DEFAULT_OPACITY)
        return _interpolate(self._opacity_positions, np.asarray(self._opacities), density)

    def evaluate(self, density: float) -> Tuple[Tuple[float, float, float], float]:
        """Evaluate color and opacity at a single density.

        Args:
            density: Scalar density, clamped to [0, 1]

        Returns:
            Tuple of ((r, g, b), opacity)
        """
        color = self.evaluate_color(float(density))
        opacity = self.evaluate_opacity(float(density))
        return tuple(float(c) for c in color), float(opacity)

    def bake_lookup_table(self, resolution: int = 256) -> np.ndarray:
        """Sample the function at evenly spaced densities in [0, 1].

        Args:
            resolution: Number of table entries

        Returns:
            Float array of shape (resolution, 4) holding RGBA
        """
        if resolution < 1:
            raise ValueError(f"Lookup table resolution must be >= 1, got {resolution}")
        densities = np.linspace(0.0, 1.0, resolution)
        table = np.empty((resolution, 4), dtype=np.float32)
        table[:, :3] = self.evaluate_color(densities)
        table[:, 3] = self.evaluate_opacity(densities)
        return table

    def export_png(self, output_path: Union[Path, str], resolution: int = 256) -> Path:
        """Write the baked table as a 1 pixel tall RGBA strip."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        strip = lut_to_rgba8(self.bake_lookup_table(resolution))[None, :, :]
        matplotlib.image.imsave(output_path, strip, format="png")

        logger.info("Wrote transfer function to %s", output_path)
        return output_path


def lut_to_rgba8(table: np.ndarray) -> np.ndarray:
    """Quantize a float RGBA table to uint8."""
    return np.round(np.clip(table, 0.0, 1.0) * 255.0).astype(np.uint8)


def _insertion_index(positions: List[float], position: float) -> int:
    # after every point at or below the position, so equal positions keep insertion order
    return int(np.searchsorted(positions, position, side="right")) if positions else 0


def _interpolate(positions: List[float], values: np.ndarray, density) -> np.ndarray:
    """Piecewise-linear lookup with endpoint clamping and right-side tie-breaking."""
    xp = np.asarray(positions, dtype=np.float64)
    x = np.clip(np.asarray(density, dtype=np.float64), 0.0, 1.0)

    right = np.searchsorted(xp, x, side="right")
    left = np.clip(right - 1, 0, len(xp) - 1)
    right_c = np.clip(right, 0, len(xp) - 1)

    span = xp[right_c] - xp[left]
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(span > 0, (x - xp[left]) / np.where(span > 0, span, 1.0), 0.0)

    # before the first point: first value; at or after the last: last value
    t = np.where(right == 0, 0.0, t)
    left = np.where(right == 0, 0, left)

    if values.ndim > 1:
        t = t[..., None]
    return (1.0 - t) * values[left] + t * values[right_c]
