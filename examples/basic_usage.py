"""Basic usage example for the density view generator."""

from pathlib import Path

from density_view_generator import GeneratorConfig, ViewDatasetGenerator
from density_view_generator.logging_config import setup_logging
from density_view_generator.rendering import RaymarchRenderer


def example_synthetic_volume():
    """Synthesize a volume and export a small view dataset."""
    config = GeneratorConfig(
        volume_resolution=(64, 64, 64),
        sample_count=20,
        sample_width=256,
        sample_height=256,
        randomize_zoom=True,
        output_dir=Path("output/synthetic")
    )

    renderer = RaymarchRenderer(width=config.sample_width, height=config.sample_height, steps=64)
    generator = ViewDatasetGenerator(config, renderer=renderer)

    field = generator.synthesize()
    print(f"Field statistics: {field.stats()}")

    generator.export_volume_data()
    generator.export_transfer_function()

    manifest = generator.generate_samples()
    print(f"Captured {len(manifest.frames)} views into {config.images_dir}")


def example_loaded_volume():
    """Render views of a volume stored as a .hd/.vox pair."""
    volume_path = Path("path/to/head256.vox")

    if not volume_path.exists():
        print(f"Volume file not found: {volume_path}")
        return

    config = GeneratorConfig(
        sample_count=50,
        sample_width=512,
        sample_height=512,
        transfer_function_preset=3,
        output_dir=Path("output/head")
    )
    renderer = RaymarchRenderer(width=512, height=512)
    generator = ViewDatasetGenerator(config, renderer=renderer)

    generator.load_volume(volume_path)
    generator.fit_to_resolution_and_spacing()
    generator.generate_samples()


if __name__ == "__main__":
    setup_logging()

    print("=" * 60)
    print("Example 1: Synthetic volume")
    print("=" * 60)
    example_synthetic_volume()

    print("\n" + "=" * 60)
    print("Example 2: Volume loaded from disk")
    print("=" * 60)
    example_loaded_volume()
