"""Main pipeline for generating NeRF-style view datasets of a density volume."""

import logging
import shutil
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np
from tqdm import tqdm

from .camera.framing import ViewFramer, horizontal_fov
from .camera.pose import CameraFrame, WORLD_UP
from .camera.sampling import ViewSampler
from .errors import RendererUnavailableError
from .field.density_field import DensityField
from .field.raw_io import export_volume_data, load_volume_file
from .rendering.base import Renderer, CaptureService
from .rendering.capture import ImageCapture
from .rendering.raymarch import RaymarchRenderer
from .transfer.presets import load_preset, Preset
from .transfer.transfer_function import TransferFunction
from .utils.config import GeneratorConfig
from .utils.metadata import DatasetManifest, ManifestWriter

logger = logging.getLogger(__name__)

CAPTURE_GAMMA = 1.0
CAPTURE_STEM = "generation"
AABB_SCALE = 2.0


class ExportState(str, Enum):
    """Phases of an export run."""
    IDLE = "idle"
    PREPARING = "preparing"
    CAPTURING = "capturing"
    FINALIZING = "finalizing"


class DatasetExporter:
    """Captures random views of the volume and writes the transforms.json manifest.

    A run moves through ``IDLE -> PREPARING -> CAPTURING -> FINALIZING -> IDLE``.
    Captures are strictly sequential. A failing capture aborts the whole run;
    no frame is skipped.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        field: DensityField,
        transfer_function: TransferFunction,
        renderer: Optional[Renderer],
        capture: Optional[CaptureService] = None,
        sampler: Optional[ViewSampler] = None,
        framer: Optional[ViewFramer] = None
    ):
        """Initialize the exporter.

        Args:
            config: Generation settings (sample count, resolution, flags, paths)
            field: Density field to render
            transfer_function: Transfer function baked for the renderer
            renderer: Rendering collaborator (None if no context is available)
            capture: Image writer (defaults to PNG capture with unique names)
            sampler: Random view sampler (seeded from config if not provided)
            framer: View framer (uses config.y_fov if not provided)
        """
        self.config = config
        self.field = field
        self.transfer_function = transfer_function
        self.renderer = renderer
        self.capture = capture or ImageCapture()
        self.sampler = sampler or ViewSampler(seed=config.sampling_seed)
        self.framer = framer or ViewFramer(config.y_fov)
        self.state = ExportState.IDLE

    def _prepare(self) -> DatasetManifest:
        """Recreate the image directory and start an empty manifest.

        Any existing contents of the image directory are deleted, together
        with the manifest of a previous run that referenced them.
        """
        images_dir = self.config.images_dir
        if images_dir.exists():
            shutil.rmtree(images_dir)
        images_dir.mkdir(parents=True)
        self.config.manifest_path.unlink(missing_ok=True)

        y_fov = self.framer.y_fov
        return DatasetManifest(
            y_fov=y_fov,
            x_fov=horizontal_fov(y_fov, self.config.aspect_ratio),
            width=self.config.sample_width,
            height=self.config.sample_height,
            aabb_scale=AABB_SCALE,
        )

    def sample_frame(self) -> CameraFrame:
        """Draw a random camera frame looking at the volume center."""
        view_dir = self.sampler.sample_sphere()
        # drawn but unused: the up direction is pinned to world +Y
        self.sampler.sample_sphere()

        zoom = self.sampler.sample_zoom() if self.config.randomize_zoom else 1.0
        extent = self.framer.frame(self.field.extent, self.config.aspect_ratio, zoom)
        frame = CameraFrame.look_along(
            view_dir,
            focus=np.zeros(3),
            y_fov=self.framer.y_fov,
            extent_at_focus=extent,
            view_up=WORLD_UP,
            zoom=zoom
        )

        if self.config.randomize_offset:
            frame = frame.panned(*self.sampler.sample_pan())
        return frame

    def _capture_frame(self, frame: CameraFrame, lut: np.ndarray) -> str:
        start = time.perf_counter()
        image = self.renderer.render(
            self.field, lut, (self.field.bounds_min, self.field.bounds_max), frame
        )
        target = self.config.images_dir / f"{CAPTURE_STEM}.png"
        path = Path(self.capture.capture(image, target))
        logger.debug("Captured %s in %.0fms", path, 1000.0 * (time.perf_counter() - start))
        return path.relative_to(self.config.output_dir).as_posix()

    def run(
        self,
        show_progress: bool = True,
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> DatasetManifest:
        """Execute one export run.

        Args:
            show_progress: Whether to show a progress bar
            should_cancel: Polled between frames; returning True stops capturing
                and writes the manifest for the frames taken so far

        Returns:
            The written manifest

        Raises:
            RendererUnavailableError: If no renderer is attached
            RuntimeError: If a run is already in progress
        """
        if self.renderer is None:
            raise RendererUnavailableError("No rendering context available, cannot generate samples")
        if self.state is not ExportState.IDLE:
            raise RuntimeError(f"Export already in progress (state={self.state.value})")

        logger.info("Generating %d samples ...", self.config.sample_count)
        old_gamma = self.renderer.get_gamma()
        pbar = None
        try:
            self.state = ExportState.PREPARING
            manifest = self._prepare()
            self.renderer.resize(self.config.sample_width, self.config.sample_height)
            self.renderer.set_gamma(CAPTURE_GAMMA)
            lut = self.transfer_function.bake_lookup_table(self.config.lut_resolution)

            self.state = ExportState.CAPTURING
            pbar = tqdm(total=self.config.sample_count, desc="Capturing views", disable=not show_progress)
            for _ in range(self.config.sample_count):
                frame = self.sample_frame()
                file_path = self._capture_frame(frame, lut)
                manifest.append(file_path, frame.pose_matrix())
                pbar.update(1)

                if should_cancel is not None and should_cancel():
                    logger.info("Export cancelled after %d frames", len(manifest.frames))
                    break

            self.state = ExportState.FINALIZING
            logger.info("Writing sample info to %s", self.config.manifest_path)
            ManifestWriter.write_manifest(self.config.manifest_path, manifest)
        finally:
            if pbar is not None:
                pbar.close()
            self.renderer.set_gamma(old_gamma)
            self.state = ExportState.IDLE

        return manifest


class ViewDatasetGenerator:
    """Owns the field, the transfer function and the renderer.

    Exposes the operations a host application wires to its controls:
    synthesize or load a volume, select a preset, resize, export artifacts
    and generate view samples.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        renderer: Optional[Renderer] = None,
        capture: Optional[CaptureService] = None
    ):
        """Initialize the generator.

        Args:
            config: Configuration object (uses defaults if not provided)
            renderer: Rendering collaborator (None disables sampling)
            capture: Image writer for captured views
        """
        self.config = config or GeneratorConfig()
        self.field = DensityField(
            resolution=self.config.volume_resolution,
            spacing=self.config.voxel_spacing,
            bounds_min=self.config.bounds_min,
            bounds_max=self.config.bounds_max
        )
        self.transfer_function = TransferFunction()
        self.preset = load_preset(self.transfer_function, self.config.transfer_function_preset)
        self.renderer = renderer
        self.capture = capture
        self.exporter = DatasetExporter(
            self.config, self.field, self.transfer_function, renderer, capture
        )

    def synthesize(self) -> DensityField:
        """Build the procedural volume from the configured resolution and seed."""
        self.field.synthesize(
            resolution=self.config.volume_resolution,
            seed=self.config.field_seed
        )
        return self.field

    def load_volume(self, file_path: Union[Path, str]) -> DensityField:
        """Replace the field with a ``.hd``/``.vox`` volume from disk."""
        load_volume_file(self.field, file_path)
        self.config.volume_resolution = self.field.resolution
        self.config.voxel_spacing = tuple(float(s) for s in self.field.spacing)
        return self.field

    def apply_preset(self, index: int) -> Preset:
        self.preset = load_preset(self.transfer_function, index)
        self.config.transfer_function_preset = int(self.preset)
        return self.preset

    def resize_volume(self, resolution) -> bool:
        """Reallocate the field for a new resolution (contents become zero)."""
        changed = self.field.resize(resolution)
        self.config.volume_resolution = self.field.resolution
        return changed

    def resize_render_target(self, width: int, height: int):
        if self.renderer is None:
            raise RendererUnavailableError("No rendering context available, cannot resize")
        self.config.sample_width = width
        self.config.sample_height = height
        self.renderer.resize(width, height)

    def fit_to_resolution(self):
        self.field.fit_to_resolution()

    def fit_to_spacing(self):
        self.field.fit_to_spacing()

    def fit_to_resolution_and_spacing(self):
        self.field.fit_to_resolution_and_spacing()

    def export_volume_data(self):
        return export_volume_data(
            self.field, self.config.volume_data_path, self.config.volume_header_path
        )

    def export_transfer_function(self) -> Path:
        return self.transfer_function.export_png(
            self.config.transfer_function_path, self.config.lut_resolution
        )

    def generate_samples(self, show_progress: bool = True, should_cancel=None) -> DatasetManifest:
        return self.exporter.run(show_progress=show_progress, should_cancel=should_cancel)


def generate_dataset(
    output_dir: Path = Path("out"),
    num_samples: int = 150,
    width: int = 1024,
    height: int = 1024,
    volume_resolution: int = 128,
    volume_file: Optional[Path] = None,
    preset: int = 1,
    randomize_zoom: bool = False,
    randomize_offset: bool = False,
    seed: Optional[int] = None,
    render_steps: int = 128
) -> DatasetManifest:
    """Synthesize (or load) a volume and export a full view dataset.

    This is a convenience function that runs every export with the built-in
    ray marcher.

    Args:
        output_dir: Output directory for all artifacts
        num_samples: Number of views to capture
        width: Image width in pixels
        height: Image height in pixels
        volume_resolution: Cubic resolution of the synthesized volume
        volume_file: Optional .hd/.vox file to load instead of synthesizing
        preset: Transfer function preset index
        randomize_zoom: Randomize the per-view zoom
        randomize_offset: Randomize the per-view pan
        seed: Seed for camera sampling
        render_steps: Marching steps of the ray marcher

    Returns:
        The written manifest
    """
    config = GeneratorConfig(
        volume_resolution=(volume_resolution,) * 3,
        sample_count=num_samples,
        sample_width=width,
        sample_height=height,
        randomize_zoom=randomize_zoom,
        randomize_offset=randomize_offset,
        transfer_function_preset=preset,
        sampling_seed=seed,
        render_steps=render_steps,
        output_dir=output_dir
    )
    renderer = RaymarchRenderer(width=width, height=height, steps=render_steps)
    generator = ViewDatasetGenerator(config, renderer=renderer)

    if volume_file is not None:
        generator.load_volume(volume_file)
    else:
        generator.synthesize()

    generator.export_volume_data()
    generator.export_transfer_function()
    manifest = generator.generate_samples()

    logger.info("Dataset generation complete: %d frames in %s", len(manifest.frames), output_dir)
    return manifest


def main():
    """Command line entry point."""
    import argparse

    from .logging_config import setup_logging

    parser = argparse.ArgumentParser(
        description="Generate a NeRF-style view dataset of a procedural density volume"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("out"),
        help="Output directory"
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=150,
        help="Number of views to capture"
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1024,
        help="Image width in pixels"
    )
    parser.add_argument(
        "--height",
        type=int,
        default=1024,
        help="Image height in pixels"
    )
    parser.add_argument(
        "--resolution",
        type=int,
        default=128,
        help="Resolution of the synthesized volume"
    )
    parser.add_argument(
        "--volume",
        type=Path,
        default=None,
        help="Load a .hd/.vox volume instead of synthesizing one"
    )
    parser.add_argument(
        "--preset",
        type=int,
        default=1,
        choices=[int(p) for p in Preset],
        help="Transfer function preset (0=white, 1=default, 2=aneurysm, 3=head)"
    )
    parser.add_argument(
        "--randomize-zoom",
        action="store_true",
        help="Randomize zoom per view"
    )
    parser.add_argument(
        "--randomize-offset",
        action="store_true",
        help="Randomize pan per view"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for camera sampling"
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=128,
        help="Ray marching steps"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional log file"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    generate_dataset(
        output_dir=args.output_dir,
        num_samples=args.samples,
        width=args.width,
        height=args.height,
        volume_resolution=args.resolution,
        volume_file=args.volume,
        preset=args.preset,
        randomize_zoom=args.randomize_zoom,
        randomize_offset=args.randomize_offset,
        seed=args.seed,
        render_steps=args.steps
    )


if __name__ == "__main__":
    main()
