"""Basic tests to verify core functionality."""

import numpy as np
import tempfile
from pathlib import Path

import pytest

from density_view_generator.utils.config import GeneratorConfig
from density_view_generator.field.density_field import DensityField
from density_view_generator.transfer.presets import from_preset
from density_view_generator.camera.framing import ViewFramer


def test_config():
    """Test configuration creation and derived paths."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = GeneratorConfig(
            volume_resolution=(64, 64, 32),
            sample_width=800,
            sample_height=400,
            output_dir=Path(tmpdir)
        )

        assert config.volume_resolution == (64, 64, 32)
        assert config.aspect_ratio == 2.0
        assert config.images_dir == Path(tmpdir) / "images"
        assert config.manifest_path == Path(tmpdir) / "transforms.json"
        assert config.volume_data_path.name == "volume_data.vox"
        assert config.volume_header_path.name == "volume_data.hd"
        assert config.transfer_function_path.name == "transfer_function.png"

        print(" Config test passed")


def test_config_validation():
    """Test that invalid settings are rejected."""
    with pytest.raises(ValueError):
        GeneratorConfig(volume_resolution=(0, 16, 16))
    with pytest.raises(ValueError):
        GeneratorConfig(voxel_spacing=(1.0, -1.0, 1.0))
    with pytest.raises(ValueError):
        GeneratorConfig(bounds_min=(0.5, 0.5, 0.5), bounds_max=(0.5, 1.0, 1.0))
    with pytest.raises(ValueError):
        GeneratorConfig(sample_count=0)
    with pytest.raises(ValueError):
        GeneratorConfig(sample_width=0)
    with pytest.raises(ValueError):
        GeneratorConfig(y_fov=180.0)


def test_synthesis_pipeline():
    """Test that a synthesized field can be colored and framed."""
    field = DensityField(resolution=(16, 16, 16))
    field.synthesize(seed=42)

    assert field.values.size == 16 ** 3
    assert field.values.min() >= 0.0
    assert field.values.max() <= 1.0
    assert field.histogram.sum() == field.num_voxels

    lut = from_preset(1).bake_lookup_table(64)
    assert lut.shape == (64, 4)

    extent = ViewFramer(45.0).frame(field.extent, aspect_ratio=1.0)
    assert extent > np.linalg.norm(field.extent)

    print(" Synthesis pipeline test passed")


if __name__ == "__main__":
    print("Running basic tests...\n")

    test_config()
    test_config_validation()
    test_synthesis_pipeline()

    print("\nAll tests passed!")
