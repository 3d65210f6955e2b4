"""Procedural scalar density field built by sphere splatting."""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

HISTOGRAM_BUCKETS = 128

# (count, radius, contribution); each batch is splatted additively, then subtractively
SPLAT_BATCHES = (
    (5, 0.2, 0.5),
    (50, 0.1, 0.25),
    (100, 0.05, 0.1),
    (200, 0.025, 0.1),
)

CENTER_SPHERE_RADIUS = 0.5
CENTER_SPHERE_CONTRIBUTION = 0.75


class DensityField:
    """Dense 3D grid of scalar densities in [0, 1].

    Voxels are stored x-fastest: ``data`` has shape ``(nz, ny, nx)`` so that
    its C-order flattening matches the ``x + nx*y + nx*ny*z`` layout of the
    raw volume files.
    """

    def __init__(
        self,
        resolution: Sequence[int] = (128, 128, 128),
        spacing: Sequence[float] = (1.0, 1.0, 1.0),
        bounds_min: Sequence[float] = (-0.5, -0.5, -0.5),
        bounds_max: Sequence[float] = (0.5, 0.5, 0.5),
    ):
        """Initialize an empty (all zero) field.

        Args:
            resolution: Voxel counts along x, y, z
            spacing: Physical voxel spacing along x, y, z
            bounds_min: Minimum world-space corner of the field
            bounds_max: Maximum world-space corner of the field
        """
        self.resolution = _as_resolution(resolution)
        self.spacing = _as_spacing(spacing)
        self.set_bounds(bounds_min, bounds_max)
        self.data = np.zeros(self.shape, dtype=np.float32)
        self.histogram = np.zeros(HISTOGRAM_BUCKETS, dtype=np.int64)

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Array shape of ``data``, i.e. the resolution reversed to (nz, ny, nx)."""
        nx, ny, nz = self.resolution
        return (nz, ny, nx)

    @property
    def num_voxels(self) -> int:
        return int(np.prod(self.resolution))

    @property
    def values(self) -> np.ndarray:
        """Flat x-fastest view of the voxel values."""
        return self.data.reshape(-1)

    @property
    def extent(self) -> np.ndarray:
        """Size of the world-space bounding box."""
        return self.bounds_max - self.bounds_min

    @property
    def center(self) -> np.ndarray:
        return 0.5 * (self.bounds_min + self.bounds_max)

    @property
    def voxel_size(self) -> float:
        """Edge length of a voxel; cubic voxels are derived from the x axis."""
        return float(self.extent[0] / self.resolution[0])

    def resize(self, resolution: Sequence[int]) -> bool:
        """Reallocate a zeroed grid if the resolution changes.

        Returns:
            True if the grid was reallocated
        """
        resolution = _as_resolution(resolution)
        if resolution == self.resolution:
            return False

        self.resolution = resolution
        self.data = np.zeros(self.shape, dtype=np.float32)
        self.update_histogram()
        return True

    def set_bounds(self, bounds_min: Sequence[float], bounds_max: Sequence[float]):
        bounds_min = np.asarray(bounds_min, dtype=np.float64)
        bounds_max = np.asarray(bounds_max, dtype=np.float64)
        if np.any(bounds_max <= bounds_min):
            raise ValueError(f"Invalid bounds: min={bounds_min}, max={bounds_max}")
        self.bounds_min = bounds_min
        self.bounds_max = bounds_max

    def replace(self, resolution: Sequence[int], spacing: Sequence[float], values: np.ndarray):
        """Swap in a complete new grid in one step.

        Args:
            resolution: New voxel counts along x, y, z
            spacing: New voxel spacing
            values: Flat x-fastest array or array of shape (nz, ny, nx)
        """
        resolution = _as_resolution(resolution)
        spacing = _as_spacing(spacing)
        nx, ny, nz = resolution
        values = np.asarray(values, dtype=np.float32)
        if values.size != nx * ny * nz:
            raise ValueError(
                f"Expected {nx * ny * nz} values for resolution {resolution}, got {values.size}"
            )

        self.resolution = resolution
        self.spacing = spacing
        self.data = values.reshape((nz, ny, nx)).copy()
        self.update_histogram()

    def voxel_centers(self, axis: int, start: int = 0, stop: Optional[int] = None) -> np.ndarray:
        """World-space voxel center coordinates along one axis."""
        if stop is None:
            stop = self.resolution[axis]
        idx = np.arange(start, stop, dtype=np.float64)
        return self.bounds_min[axis] + (idx + 0.5) * self.voxel_size

    def splat_sphere(
        self,
        voxel_size: float,
        center: Sequence[float],
        radius: float,
        contribution: float
    ):
        """Add a soft sphere to the field.

        Each voxel whose center lies strictly inside the sphere receives
        ``contribution * sqrt(1 - dist / radius)``. Values are not clamped.

        Args:
            voxel_size: Voxel edge length used for index conversion
            center: Sphere center in world space
            radius: Sphere radius in world units
            contribution: Peak value added at the center (negative carves)
        """
        center = np.asarray(center, dtype=np.float64)
        box_min = center - radius
        # shrink so voxels on the far boundary are not picked up twice
        box_max = center + radius - 0.005 * voxel_size

        res = np.asarray(self.resolution)
        sidx = np.trunc((box_min - self.bounds_min) / voxel_size).astype(np.int64)
        eidx = np.trunc((box_max - self.bounds_min) / voxel_size).astype(np.int64)
        sidx = np.clip(sidx, 0, res - 1)
        eidx = np.clip(eidx, 0, res - 1)

        xs = self.bounds_min[0] + (np.arange(sidx[0], eidx[0] + 1) + 0.5) * voxel_size
        ys = self.bounds_min[1] + (np.arange(sidx[1], eidx[1] + 1) + 0.5) * voxel_size
        zs = self.bounds_min[2] + (np.arange(sidx[2], eidx[2] + 1) + 0.5) * voxel_size

        dz = (zs - center[2])[:, None, None]
        dy = (ys - center[1])[None, :, None]
        dx = (xs - center[0])[None, None, :]
        dist = np.sqrt(dx * dx + dy * dy + dz * dz)

        inside = dist < radius
        falloff = np.sqrt(np.clip(1.0 - dist / radius, 0.0, None))
        block = self.data[sidx[2]:eidx[2] + 1, sidx[1]:eidx[1] + 1, sidx[0]:eidx[0] + 1]
        block += np.where(inside, contribution * falloff, 0.0).astype(np.float32)

    def splat_spheres(
        self,
        voxel_size: float,
        rng: np.random.Generator,
        n: int,
        radius: float,
        contribution: float
    ):
        """Splat ``n`` spheres at positions drawn uniformly inside the bounds."""
        for _ in range(n):
            u = rng.random(3)
            pos = self.bounds_min + u * (self.bounds_max - self.bounds_min)
            self.splat_sphere(voxel_size, pos, radius, contribution)

    def synthesize(
        self,
        resolution: Optional[Sequence[int]] = None,
        bounds: Optional[Tuple[Sequence[float], Sequence[float]]] = None,
        seed: int = 42
    ) -> np.ndarray:
        """Build the procedural volume.

        A large soft sphere is placed at the box center, then batches of
        progressively smaller and more numerous random spheres are added and
        subtracted. The result is clamped to [0, 1] and the histogram updated.

        Args:
            resolution: Optional new resolution (reallocates the grid)
            bounds: Optional (min, max) world bounding box
            seed: Seed for the sphere placement generator

        Returns:
            The synthesized data array of shape (nz, ny, nx)
        """
        if bounds is not None:
            self.set_bounds(*bounds)
        if resolution is not None:
            self.resolution = _as_resolution(resolution)

        self.data = np.zeros(self.shape, dtype=np.float32)
        voxel_size = self.voxel_size
        rng = np.random.default_rng(seed)

        self.splat_sphere(voxel_size, self.center, CENTER_SPHERE_RADIUS, CENTER_SPHERE_CONTRIBUTION)

        for count, radius, contribution in SPLAT_BATCHES:
            self.splat_spheres(voxel_size, rng, count, radius, contribution)
            self.splat_spheres(voxel_size, rng, count, radius, -contribution)

        np.clip(self.data, 0.0, 1.0, out=self.data)
        self.update_histogram()

        logger.info(
            "Synthesized %dx%dx%d density field (seed=%d, occupancy=%.2f%%)",
            *self.resolution, seed, 100.0 * float(np.mean(self.data > 0))
        )
        return self.data

    def update_histogram(self) -> np.ndarray:
        """Recompute the 128-bucket histogram over voxel values."""
        buckets = np.clip(np.floor(self.values * HISTOGRAM_BUCKETS), 0, HISTOGRAM_BUCKETS - 1)
        self.histogram = np.bincount(buckets.astype(np.int64), minlength=HISTOGRAM_BUCKETS)
        return self.histogram

    def fit_to_resolution(self):
        """Scale the bounding box to the grid's aspect, longest axis spanning 1."""
        scaling = np.asarray(self.resolution, dtype=np.float64) / max(self.resolution)
        self.set_bounds(-0.5 * scaling, 0.5 * scaling)

    def fit_to_spacing(self):
        """Scale the bounding box to the voxel spacing."""
        self.set_bounds(-0.5 * self.spacing, 0.5 * self.spacing)

    def fit_to_resolution_and_spacing(self):
        scaling = np.asarray(self.resolution, dtype=np.float64) / max(self.resolution)
        scaling = scaling * self.spacing
        self.set_bounds(-0.5 * scaling, 0.5 * scaling)

    def stats(self) -> dict:
        """Summary statistics of the current field."""
        values = self.values
        return {
            "resolution": list(self.resolution),
            "min": float(values.min()),
            "max": float(values.max()),
            "mean": float(values.mean()),
            "occupancy_ratio": float(np.count_nonzero(values) / values.size),
        }


def _as_resolution(resolution: Sequence[int]) -> Tuple[int, int, int]:
    resolution = tuple(int(r) for r in resolution)
    if len(resolution) != 3 or min(resolution) <= 0:
        raise ValueError(f"Resolution must be three positive integers, got {resolution}")
    return resolution


def _as_spacing(spacing: Sequence[float]) -> np.ndarray:
    spacing = np.asarray(spacing, dtype=np.float64)
    if spacing.shape != (3,) or np.any(spacing <= 0.0):
        raise ValueError(f"Spacing must be three positive values, got {spacing}")
    return spacing
