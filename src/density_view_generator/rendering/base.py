"""Contracts for the rendering and capture collaborators."""

from pathlib import Path
from typing import Protocol, Tuple, runtime_checkable

import numpy as np

from ..camera.pose import CameraFrame
from ..field.density_field import DensityField


@runtime_checkable
class Renderer(Protocol):
    """Turns a density field, a baked transfer function and a camera into pixels.

    ``render`` returns an owned ``(height, width, 4)`` uint8 RGBA array with
    row 0 at the top of the image; it must not alias renderer memory.
    """

    def resize(self, width: int, height: int) -> None: ...

    def render(
        self,
        field: DensityField,
        lut: np.ndarray,
        bounds: Tuple[np.ndarray, np.ndarray],
        frame: CameraFrame
    ) -> np.ndarray: ...

    def get_gamma(self) -> float: ...

    def set_gamma(self, value: float) -> None: ...


@runtime_checkable
class CaptureService(Protocol):
    """Encodes an image to disk under a collision-free name."""

    def capture(self, image: np.ndarray, target_path: Path) -> Path: ...
