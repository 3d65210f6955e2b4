"""Configuration management for view dataset generation."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass
class GeneratorConfig:
    """Configuration for density field synthesis and view dataset export.

    Attributes:
        volume_resolution: Voxel grid resolution (nx, ny, nz)
        voxel_spacing: Physical spacing of the voxels, used by fit_to_spacing
        bounds_min: Minimum corner of the world-space bounding box
        bounds_max: Maximum corner of the world-space bounding box
        field_seed: Seed for the deterministic sphere-splatting generator
        sampling_seed: Seed for camera sampling (None draws fresh entropy)
        sample_count: Number of views captured per export run
        sample_width: Width of each captured image in pixels
        sample_height: Height of each captured image in pixels
        randomize_zoom: Draw a per-frame zoom factor from N(1, 0.3)
        randomize_offset: Apply a per-frame random pan in [-0.5, 0.5]^2
        y_fov: Vertical field of view in degrees
        transfer_function_preset: Index of the transfer function preset (0-3)
        lut_resolution: Number of samples in the baked transfer function table
        render_steps: Marching steps used by the reference renderer
        output_dir: Base directory for all exported artifacts
    """

    volume_resolution: Tuple[int, int, int] = (128, 128, 128)
    voxel_spacing: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    bounds_min: Tuple[float, float, float] = (-0.5, -0.5, -0.5)
    bounds_max: Tuple[float, float, float] = (0.5, 0.5, 0.5)
    field_seed: int = 42
    sampling_seed: Optional[int] = None
    sample_count: int = 150
    sample_width: int = 1024
    sample_height: int = 1024
    randomize_zoom: bool = False
    randomize_offset: bool = False
    y_fov: float = 45.0
    transfer_function_preset: int = 1
    lut_resolution: int = 256
    render_steps: int = 128
    output_dir: Path = Path("out")

    def __post_init__(self):
        """Validate configuration and normalize types."""
        self.volume_resolution = tuple(int(r) for r in self.volume_resolution)
        self.voxel_spacing = tuple(float(s) for s in self.voxel_spacing)
        self.bounds_min = tuple(float(v) for v in self.bounds_min)
        self.bounds_max = tuple(float(v) for v in self.bounds_max)

        if len(self.volume_resolution) != 3 or min(self.volume_resolution) <= 0:
            raise ValueError(
                f"volume_resolution must be three positive integers, got {self.volume_resolution}"
            )

        if len(self.voxel_spacing) != 3 or min(self.voxel_spacing) <= 0:
            raise ValueError(
                f"voxel_spacing must be three positive floats, got {self.voxel_spacing}"
            )

        if any(hi <= lo for lo, hi in zip(self.bounds_min, self.bounds_max)):
            raise ValueError(
                f"bounds_max {self.bounds_max} must exceed bounds_min {self.bounds_min} on every axis"
            )

        if not 1 <= self.sample_count <= 1000:
            raise ValueError(f"sample_count must be in [1, 1000], got {self.sample_count}")

        if self.sample_width <= 0 or self.sample_height <= 0:
            raise ValueError(
                f"Sample resolution must be positive, got {self.sample_width}x{self.sample_height}"
            )

        if not 0.0 < self.y_fov < 180.0:
            raise ValueError(f"y_fov must be in (0, 180) degrees, got {self.y_fov}")

        if self.lut_resolution < 1:
            raise ValueError(f"lut_resolution must be >= 1, got {self.lut_resolution}")

        if self.render_steps <= 0:
            raise ValueError(f"render_steps must be positive, got {self.render_steps}")

        self.output_dir = Path(self.output_dir)

    @property
    def aspect_ratio(self) -> float:
        """Width over height of the captured images."""
        return self.sample_width / self.sample_height

    @property
    def images_dir(self) -> Path:
        """Directory receiving captured images (recreated on every export)."""
        return self.output_dir / "images"

    @property
    def manifest_path(self) -> Path:
        """Path of the transforms.json manifest."""
        return self.output_dir / "transforms.json"

    @property
    def volume_data_path(self) -> Path:
        """Path of the raw one-byte-per-voxel dump."""
        return self.output_dir / "volume_data.vox"

    @property
    def volume_header_path(self) -> Path:
        """Path of the text header paired with the raw dump."""
        return self.output_dir / "volume_data.hd"

    @property
    def transfer_function_path(self) -> Path:
        """Path of the baked transfer function strip."""
        return self.output_dir / "transfer_function.png"
