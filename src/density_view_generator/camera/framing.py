"""Bounding-sphere framing of the volume."""

import math
from typing import Sequence

import numpy as np


def horizontal_fov(y_fov: float, aspect_ratio: float) -> float:
    """Horizontal field of view in degrees for a symmetric perspective camera."""
    half = math.radians(y_fov) * 0.5
    return math.degrees(2.0 * math.atan(math.tan(half) * aspect_ratio))


class ViewFramer:
    """Computes the vertical extent at focus that keeps the volume in view.

    The box diagonal is used as a conservative bounding-sphere radius. With
    the focus at the volume center, the extent is the hypotenuse of the right
    triangle whose opposite side is that radius and whose angle at the focus
    is ``90 - y_fov / 2`` degrees.
    """

    def __init__(self, y_fov: float = 45.0):
        _check_fov(y_fov)
        self.y_fov = float(y_fov)

    def frame(self, extent: Sequence[float], aspect_ratio: float, zoom: float = 1.0) -> float:
        """Vertical extent visible at the focus distance.

        Args:
            extent: Size of the bounding box along x, y, z
            aspect_ratio: Viewport width over height
            zoom: Multiplier applied to the framed extent

        Returns:
            Extent at focus in world units
        """
        return frame_extent(extent, self.y_fov, aspect_ratio, zoom)

    def focus_distance(self, extent_at_focus: float) -> float:
        """Eye-to-focus distance at which ``extent_at_focus`` fills the viewport height."""
        return extent_at_focus / (2.0 * math.tan(math.radians(self.y_fov) * 0.5))


def frame_extent(
    extent: Sequence[float],
    y_fov: float,
    aspect_ratio: float,
    zoom: float = 1.0
) -> float:
    """Functional form of :meth:`ViewFramer.frame`."""
    _check_fov(y_fov)
    if aspect_ratio <= 0:
        raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
    if zoom <= 0:
        raise ValueError(f"zoom must be positive, got {zoom}")

    radius = float(np.linalg.norm(np.asarray(extent, dtype=np.float64)))
    angle = math.radians(90.0 - y_fov * 0.5)
    extent_factor = (radius / math.sin(angle)) * zoom

    if aspect_ratio >= 1.0:
        return extent_factor
    # approximate widening for portrait viewports
    return (extent_factor + extent_factor / aspect_ratio) / 2.0


def _check_fov(y_fov: float):
    if not 0.0 < y_fov < 180.0:
        raise ValueError(f"y_fov must be in (0, 180) degrees, got {y_fov}")
