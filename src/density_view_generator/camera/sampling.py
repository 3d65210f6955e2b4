"""Random view sampling for dataset export."""

import math
from typing import Optional, Tuple

import numpy as np

ZOOM_MEAN = 1.0
ZOOM_STDDEV = 0.3
ZOOM_RANGE = (0.1, 2.0)
PAN_RANGE = 0.5


class ViewSampler:
    """Draws view directions, zoom factors and pan offsets from one generator.

    The generator is owned by the sampler and independent from the one used
    for field synthesis.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def sample_sphere(self) -> np.ndarray:
        """Uniform point on the unit sphere via inverse-CDF sampling."""
        theta = 2.0 * math.pi * self.rng.random()
        phi = math.acos(1.0 - 2.0 * self.rng.random())
        return np.array([
            math.sin(phi) * math.cos(theta),
            math.sin(phi) * math.sin(theta),
            math.cos(phi),
        ])

    def sample_zoom(self) -> float:
        """Zoom factor from N(1, 0.3) clamped to [0.1, 2.0]."""
        zoom = self.rng.normal(ZOOM_MEAN, ZOOM_STDDEV)
        return float(np.clip(zoom, *ZOOM_RANGE))

    def sample_pan(self) -> Tuple[float, float]:
        """Pan offsets, each uniform in [-0.5, 0.5]."""
        dx = self.rng.random() - PAN_RANGE
        dy = self.rng.random() - PAN_RANGE
        return float(dx), float(dy)
