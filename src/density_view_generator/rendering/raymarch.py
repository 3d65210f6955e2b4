"""Emission-absorption ray marcher used as the default renderer."""

import math
from typing import Tuple

import numpy as np
from scipy import ndimage

from ..camera.pose import CameraFrame
from ..field.density_field import DensityField


def ray_box_intersection(
    ray_origins: np.ndarray,
    ray_dirs: np.ndarray,
    box_min: np.ndarray,
    box_max: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Vectorized slab test against an axis-aligned box.

    Returns:
        Tuple of (t_enter, t_exit, hit_mask); t_enter is clamped to 0 for
        rays starting inside the box
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        inv_dirs = 1.0 / np.where(ray_dirs == 0, 1e-12, ray_dirs)
    t1 = (box_min - ray_origins) * inv_dirs
    t2 = (box_max - ray_origins) * inv_dirs

    t_enter = np.max(np.minimum(t1, t2), axis=-1)
    t_exit = np.min(np.maximum(t1, t2), axis=-1)

    mask = (t_exit >= t_enter) & (t_exit > 0)
    t_enter = np.maximum(t_enter, 0.0)
    return t_enter, t_exit, mask


class RaymarchRenderer:
    """Minimal perspective volume renderer on the CPU.

    Samples the field trilinearly along each pixel ray, maps densities
    through the baked transfer function table and composites front to back.
    """

    def __init__(
        self,
        width: int = 1024,
        height: int = 1024,
        steps: int = 128,
        density_scale: float = 5.0,
        gamma: float = 2.2
    ):
        self.width = width
        self.height = height
        self.steps = steps
        self.density_scale = density_scale
        self.gamma = gamma

    def resize(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Render target must be positive, got {width}x{height}")
        self.width = width
        self.height = height

    def get_gamma(self) -> float:
        return self.gamma

    def set_gamma(self, value: float):
        if value <= 0:
            raise ValueError(f"Gamma must be positive, got {value}")
        self.gamma = value

    def primary_rays(self, frame: CameraFrame) -> np.ndarray:
        """Unit ray directions for every pixel, shape (height * width, 3)."""
        tan_half = math.tan(math.radians(frame.y_fov) * 0.5)
        aspect = self.width / self.height

        x = (2.0 * (np.arange(self.width) + 0.5) / self.width - 1.0) * tan_half * aspect
        y = (1.0 - 2.0 * (np.arange(self.height) + 0.5) / self.height) * tan_half
        xx, yy = np.meshgrid(x, y)

        dirs = (
            frame.forward[None, :]
            + xx.reshape(-1, 1) * frame.right[None, :]
            + yy.reshape(-1, 1) * frame.up[None, :]
        )
        return dirs / np.linalg.norm(dirs, axis=1, keepdims=True)

    def render(
        self,
        field: DensityField,
        lut: np.ndarray,
        bounds: Tuple[np.ndarray, np.ndarray],
        frame: CameraFrame
    ) -> np.ndarray:
        """Render one RGBA image, shape (height, width, 4), dtype uint8."""
        box_min = np.asarray(bounds[0], dtype=np.float64)
        box_max = np.asarray(bounds[1], dtype=np.float64)
        lut = np.asarray(lut, dtype=np.float64)

        ray_dirs = self.primary_rays(frame)
        ray_origins = np.broadcast_to(frame.eye, ray_dirs.shape)
        t_enter, t_exit, mask = ray_box_intersection(ray_origins, ray_dirs, box_min, box_max)

        image = np.zeros((self.height * self.width, 4))
        hits = np.nonzero(mask)[0]

        if len(hits) > 0:
            origins = ray_origins[hits]
            dirs = ray_dirs[hits]
            t0 = t_enter[hits]
            step = (t_exit[hits] - t0) / self.steps

            # world position -> continuous (z, y, x) index into field.data
            scale = np.asarray(field.resolution, dtype=np.float64) / (box_max - box_min)

            acc_color = np.zeros((len(hits), 3))
            acc_alpha = np.zeros(len(hits))

            for i in range(self.steps):
                t = t0 + (i + 0.5) * step
                pos = origins + dirs * t[:, None]
                idx = (pos - box_min) * scale - 0.5
                values = ndimage.map_coordinates(
                    field.data, [idx[:, 2], idx[:, 1], idx[:, 0]],
                    order=1, mode="nearest"
                )

                lut_idx = np.clip(np.round(values * (len(lut) - 1)), 0, len(lut) - 1).astype(int)
                color = lut[lut_idx, :3]
                src_alpha = np.clip(lut[lut_idx, 3] * step * self.density_scale, 0.0, 1.0)

                remaining = 1.0 - acc_alpha
                acc_color += (remaining * src_alpha)[:, None] * color
                acc_alpha += remaining * src_alpha

            image[hits, :3] = acc_color
            image[hits, 3] = acc_alpha

        image[:, :3] = np.power(np.clip(image[:, :3], 0.0, 1.0), 1.0 / self.gamma)
        image = image.reshape((self.height, self.width, 4))
        return np.round(np.clip(image, 0.0, 1.0) * 255.0).astype(np.uint8)
