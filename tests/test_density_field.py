"""Tests for density field synthesis and raw volume I/O."""

import logging

import numpy as np
import pytest

from density_view_generator.errors import FormatError
from density_view_generator.field import (
    DensityField,
    HISTOGRAM_BUCKETS,
    parse_header,
    load_from_header_and_raw,
    load_volume_file,
    export_volume_data,
    volume_file_pair,
)


class TestDensityField:
    """Tests for grid allocation and bookkeeping."""

    def test_empty_on_construction(self):
        """Test a new field is all zeros with the requested layout."""
        field = DensityField(resolution=(4, 5, 6))
        assert field.shape == (6, 5, 4)
        assert field.values.size == 4 * 5 * 6
        assert np.all(field.values == 0.0)

    def test_x_fastest_layout(self):
        """Test flat index x + nx*y + nx*ny*z addresses data[z, y, x]."""
        field = DensityField(resolution=(4, 5, 6))
        field.data[3, 2, 1] = 1.0
        assert field.values[1 + 4 * 2 + 4 * 5 * 3] == 1.0

    def test_voxel_size_from_x_axis(self):
        """Test voxel size is the x extent over the x resolution."""
        field = DensityField(resolution=(8, 16, 4), bounds_min=(-1, -1, -1), bounds_max=(1, 1, 1))
        assert field.voxel_size == pytest.approx(0.25)

    def test_resize_only_on_change(self):
        """Test reallocation happens only when the resolution changes."""
        field = DensityField(resolution=(4, 4, 4))
        field.data[:] = 0.5

        assert field.resize((4, 4, 4)) is False
        assert np.all(field.values == 0.5)

        assert field.resize((2, 3, 4)) is True
        assert field.values.size == 24
        assert np.all(field.values == 0.0)

    def test_invalid_resolution(self):
        """Test non-positive resolutions are rejected."""
        with pytest.raises(ValueError):
            DensityField(resolution=(0, 4, 4))
        field = DensityField(resolution=(4, 4, 4))
        with pytest.raises(ValueError):
            field.resize((4, -1, 4))

    def test_invalid_bounds_and_spacing(self):
        """Test inverted or empty bounds and non-positive spacing are rejected on construction."""
        with pytest.raises(ValueError):
            DensityField(resolution=(4, 4, 4), bounds_min=(1, 1, 1), bounds_max=(0, 0, 0))
        with pytest.raises(ValueError):
            DensityField(resolution=(4, 4, 4), bounds_min=(0, 0, 0), bounds_max=(1, 0, 1))
        with pytest.raises(ValueError):
            DensityField(resolution=(4, 4, 4), spacing=(1.0, 0.0, 1.0))
        with pytest.raises(ValueError):
            DensityField(resolution=(4, 4, 4), spacing=(1.0, -2.0, 1.0))

        field = DensityField(resolution=(2, 2, 2))
        with pytest.raises(ValueError):
            field.replace((2, 2, 2), (0.0, 1.0, 1.0), np.zeros(8))
        np.testing.assert_array_equal(field.spacing, [1.0, 1.0, 1.0])

    def test_fit_to_resolution(self):
        """Test the bounding box follows the grid aspect."""
        field = DensityField(resolution=(64, 32, 16))
        field.fit_to_resolution()
        np.testing.assert_allclose(field.bounds_min, [-0.5, -0.25, -0.125])
        np.testing.assert_allclose(field.bounds_max, [0.5, 0.25, 0.125])

    def test_fit_to_spacing(self):
        """Test the bounding box follows the voxel spacing."""
        field = DensityField(resolution=(16, 16, 16), spacing=(1.0, 2.0, 0.5))
        field.fit_to_spacing()
        np.testing.assert_allclose(field.bounds_max, [0.5, 1.0, 0.25])

        field.fit_to_resolution_and_spacing()
        np.testing.assert_allclose(field.bounds_max, [0.5, 1.0, 0.25])


class TestSplatting:
    """Tests for the sphere splat primitive."""

    def test_sphere_between_voxel_centers_leaves_zeros(self):
        """Test a sphere that contains no voxel center adds nothing."""
        field = DensityField(resolution=(2, 2, 2), bounds_min=(-1, -1, -1), bounds_max=(1, 1, 1))
        field.splat_sphere(field.voxel_size, (0.0, 0.0, 0.0), 0.5, 1.0)
        np.clip(field.data, 0.0, 1.0, out=field.data)
        assert np.all(field.values == 0.0)

    def test_square_root_falloff(self):
        """Test values follow contribution * sqrt(1 - d/r) inside and zero outside."""
        field = DensityField(resolution=(32, 32, 32), bounds_min=(-1, -1, -1), bounds_max=(1, 1, 1))
        radius = 0.5
        field.splat_sphere(field.voxel_size, (0.0, 0.0, 0.0), radius, 1.0)

        c = field.voxel_centers(0)
        zz, yy, xx = np.meshgrid(c, c, c, indexing="ij")
        dist = np.sqrt(xx ** 2 + yy ** 2 + zz ** 2)
        expected = np.where(dist < radius, np.sqrt(np.clip(1.0 - dist / radius, 0, None)), 0.0)

        np.testing.assert_allclose(field.data, expected, atol=1e-6)
        assert np.all(field.data[dist >= radius] == 0.0)

    def test_monotonic_falloff_along_axis(self):
        """Test values strictly decrease moving away from the center up to the radius."""
        field = DensityField(resolution=(32, 32, 32), bounds_min=(-1, -1, -1), bounds_max=(1, 1, 1))
        field.splat_sphere(field.voxel_size, (0.0, 0.0, 0.0), 0.5, 1.0)
        np.clip(field.data, 0.0, 1.0, out=field.data)

        c = field.voxel_centers(0)
        row = field.data[16, 16, 16:]
        dist = np.sqrt(c[16:] ** 2 + 2 * c[16] ** 2)
        inside = row[dist < 0.5]

        assert len(inside) > 3
        assert np.all(np.diff(inside) < 0)
        assert np.all(row[dist >= 0.5] == 0.0)

    def test_negative_contribution_and_no_clamp(self):
        """Test splats are additive and unclamped until synthesis finishes."""
        field = DensityField(resolution=(16, 16, 16))
        field.splat_sphere(field.voxel_size, field.center, 0.3, 0.8)
        field.splat_sphere(field.voxel_size, field.center, 0.3, 0.8)
        assert field.values.max() > 1.0

        field.splat_sphere(field.voxel_size, field.center, 0.3, -3.0)
        assert field.values.min() < 0.0

    def test_sphere_outside_bounds(self):
        """Test a sphere far outside the box leaves the field untouched."""
        field = DensityField(resolution=(8, 8, 8))
        field.splat_sphere(field.voxel_size, (5.0, 5.0, 5.0), 0.2, 1.0)
        assert np.all(field.values == 0.0)


class TestSynthesis:
    """Tests for the procedural volume."""

    @pytest.mark.parametrize("resolution", [(8, 8, 8), (8, 12, 16), (1, 1, 1), (20, 10, 5)])
    def test_values_in_unit_range(self, resolution):
        """Test output size matches the resolution and values lie in [0, 1]."""
        field = DensityField(resolution=resolution)
        field.synthesize(seed=42)

        assert field.values.size == int(np.prod(resolution))
        assert field.values.min() >= 0.0
        assert field.values.max() <= 1.0

    def test_deterministic_for_seed(self):
        """Test the same seed reproduces the same field."""
        a = DensityField(resolution=(16, 16, 16))
        b = DensityField(resolution=(16, 16, 16))
        a.synthesize(seed=7)
        b.synthesize(seed=7)
        np.testing.assert_array_equal(a.data, b.data)

        b.synthesize(seed=8)
        assert not np.array_equal(a.data, b.data)

    def test_center_is_dense(self):
        """Test the central sphere dominates the middle of the volume."""
        field = DensityField(resolution=(32, 32, 32))
        field.synthesize()
        assert field.values.max() > 0.5
        assert field.data[12:20, 12:20, 12:20].mean() > field.values.mean()

    def test_resolution_and_bounds_override(self):
        """Test synthesize reallocates for a new resolution and bounds."""
        field = DensityField(resolution=(4, 4, 4))
        field.synthesize(resolution=(10, 6, 8), bounds=((-1, -1, -1), (1, 1, 1)))
        assert field.shape == (8, 6, 10)
        np.testing.assert_allclose(field.extent, [2.0, 2.0, 2.0])

    def test_histogram(self):
        """Test the histogram counts every voxel into 128 buckets."""
        field = DensityField(resolution=(16, 16, 16))
        field.synthesize()
        hist = field.histogram

        assert hist.shape == (HISTOGRAM_BUCKETS,)
        assert hist.sum() == field.num_voxels

        expected = np.clip(np.floor(field.values * 128), 0, 127).astype(int)
        assert hist[0] == np.count_nonzero(expected == 0)
        assert hist[127] == np.count_nonzero(expected == 127)

    def test_histogram_saturated_values(self):
        """Test values of exactly 1.0 land in the last bucket."""
        field = DensityField(resolution=(2, 2, 2))
        field.data[:] = 1.0
        field.update_histogram()
        assert field.histogram[127] == 8

    def test_stats(self):
        """Test summary statistics."""
        field = DensityField(resolution=(4, 4, 4))
        field.data[0, 0, 0] = 1.0
        stats = field.stats()
        assert stats["max"] == 1.0
        assert stats["occupancy_ratio"] == pytest.approx(1 / 64)


class TestHeaderParsing:
    """Tests for the .hd header format."""

    def test_size_and_spacing(self):
        """Test colon, comma and whitespace separated values."""
        resolution, spacing = parse_header("Size: 4 5 6\nSpacing: 0.5, 1, 2\n")
        assert resolution == (4, 5, 6)
        assert spacing == (0.5, 1.0, 2.0)

    def test_x_separated_dimension(self):
        """Test the WxHxD form and the Dimension alias."""
        resolution, spacing = parse_header("Dimension 2x3x4")
        assert resolution == (2, 3, 4)
        assert spacing == (1.0, 1.0, 1.0)

    def test_unknown_identifier_is_logged(self, caplog):
        """Test unknown identifiers are ignored with a warning."""
        with caplog.at_level(logging.WARNING):
            resolution, _ = parse_header("Size 2 2 2\nFormat: uchar\n")
        assert resolution == (2, 2, 2)
        assert "Format" in caplog.text

    def test_missing_resolution(self):
        """Test a header without a complete size fails."""
        with pytest.raises(FormatError):
            parse_header("Spacing 1 1 1")
        with pytest.raises(FormatError):
            parse_header("Size 4 4")

    def test_negative_spacing(self):
        """Test negative spacing is rejected."""
        with pytest.raises(FormatError):
            parse_header("Size 2 2 2\nSpacing -1 1 1")
        with pytest.raises(FormatError):
            parse_header("Size 2 2 2\nSpacing 1 0 1")


class TestRawVolumeIO:
    """Tests for loading and exporting .vox/.hd pairs."""

    def test_load_rescales_bytes(self):
        """Test each byte is divided by 255 and the box is fitted."""
        field = DensityField(resolution=(2, 2, 2))
        raw = bytes([0, 255, 51, 102, 0, 0, 0, 255, 0, 0, 0, 0])
        load_from_header_and_raw(field, "Size 3x2x2", raw)

        assert field.resolution == (3, 2, 2)
        np.testing.assert_allclose(field.values[:4], [0.0, 1.0, 0.2, 0.4], atol=1e-6)
        np.testing.assert_allclose(field.bounds_max, [0.5, 1 / 3, 1 / 3])
        assert field.histogram.sum() == 12

    def test_byte_count_mismatch_keeps_previous_state(self):
        """Test a short raw buffer fails without touching the field."""
        field = DensityField(resolution=(2, 2, 2))
        field.data[:] = 0.25

        with pytest.raises(FormatError):
            load_from_header_and_raw(field, "Size 4 4 4", bytes(10))

        assert field.resolution == (2, 2, 2)
        assert np.all(field.values == 0.25)

    def test_bad_header_keeps_previous_state(self):
        """Test a malformed header fails without touching the field."""
        field = DensityField(resolution=(2, 2, 2))
        with pytest.raises(FormatError):
            load_from_header_and_raw(field, "Nothing here", bytes(8))
        assert field.resolution == (2, 2, 2)

    def test_round_trip_within_quantization(self, tmp_path):
        """Test export followed by load reproduces the field to within 1/255."""
        field = DensityField(resolution=(12, 10, 8))
        field.synthesize()

        raw_path, header_path = export_volume_data(field, tmp_path / "volume_data.vox")
        assert raw_path.stat().st_size == 12 * 10 * 8
        assert header_path.read_text() == "Size 12x10x8"

        loaded = load_volume_file(DensityField(), header_path)
        assert loaded.resolution == (12, 10, 8)
        assert np.max(np.abs(loaded.values - field.values)) <= 1.0 / 255.0 + 1e-6

    def test_missing_sibling(self, tmp_path):
        """Test a header without its raw file raises FileNotFoundError."""
        (tmp_path / "lonely.hd").write_text("Size 2 2 2")
        with pytest.raises(FileNotFoundError):
            load_volume_file(DensityField(), tmp_path / "lonely.hd")

    def test_file_pair_resolution(self, tmp_path):
        """Test either member of the pair resolves both paths."""
        hd, vox = volume_file_pair(tmp_path / "head256.vox")
        assert hd.name == "head256.hd"
        assert vox.name == "head256.vox"

        with pytest.raises(FormatError):
            volume_file_pair(tmp_path / "volume.raw")
