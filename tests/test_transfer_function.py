"""Tests for transfer functions and presets."""

import numpy as np
import pytest
import matplotlib.image

from density_view_generator.transfer import (
    TransferFunction,
    Preset,
    PRESETS,
    load_preset,
    from_preset,
    lut_to_rgba8,
)


class TestInterpolation:
    """Tests for piecewise-linear evaluation."""

    def test_linear_between_points(self):
        """Test colors and opacities interpolate linearly."""
        tf = TransferFunction()
        tf.add_color_point(0.0, (0.0, 0.0, 1.0))
        tf.add_color_point(0.5, (1.0, 0.0, 0.0))
        tf.add_opacity_point(0.0, 0.0)
        tf.add_opacity_point(1.0, 1.0)

        color, opacity = tf.evaluate(0.25)
        assert color == pytest.approx((0.5, 0.0, 0.5))
        assert opacity == pytest.approx(0.25)

    def test_clamps_outside_control_points(self):
        """Test densities before the first or after the last point take the endpoint value."""
        tf = TransferFunction()
        tf.add_opacity_point(0.2, 0.3)
        tf.add_opacity_point(0.8, 0.9)

        assert tf.evaluate(0.0)[1] == pytest.approx(0.3)
        assert tf.evaluate(0.1)[1] == pytest.approx(0.3)
        assert tf.evaluate(0.95)[1] == pytest.approx(0.9)

    def test_density_is_clamped(self):
        """Test out-of-range densities behave like 0 and 1."""
        tf = from_preset(Preset.WHITE)
        assert tf.evaluate(-2.0) == tf.evaluate(0.0)
        assert tf.evaluate(3.0) == tf.evaluate(1.0)

    def test_insertion_order_independent(self):
        """Test points are processed by position regardless of insertion order."""
        a = TransferFunction()
        b = TransferFunction()
        points = [(0.0, 0.0), (0.3, 0.8), (0.6, 0.2), (1.0, 1.0)]
        for position, opacity in points:
            a.add_opacity_point(position, opacity)
        for position, opacity in reversed(points):
            b.add_opacity_point(position, opacity)

        densities = np.linspace(0.0, 1.0, 33)
        np.testing.assert_allclose(a.evaluate_opacity(densities), b.evaluate_opacity(densities))

    def test_duplicate_position_takes_later_point(self):
        """Test the later of two points at the same position wins at that position."""
        tf = TransferFunction()
        tf.add_opacity_point(0.0, 0.0)
        tf.add_opacity_point(0.5, 0.2)
        tf.add_opacity_point(0.5, 0.8)
        tf.add_opacity_point(1.0, 1.0)

        assert tf.evaluate(0.5)[1] == pytest.approx(0.8)
        # just below the step the earlier point is the right bracket
        assert tf.evaluate(0.4999)[1] == pytest.approx(0.2, abs=1e-3)
        assert tf.evaluate(0.75)[1] == pytest.approx(0.9)

    def test_duplicate_position_inserted_out_of_order(self):
        """Test tie-breaking follows insertion order even when other points come later."""
        tf = TransferFunction()
        tf.add_opacity_point(1.0, 1.0)
        tf.add_opacity_point(0.5, 0.6)
        tf.add_opacity_point(0.0, 0.0)
        tf.add_opacity_point(0.5, 0.1)

        assert tf.evaluate(0.5)[1] == pytest.approx(0.1)

    def test_empty_function_defaults(self):
        """Test a function without points is opaque white."""
        tf = TransferFunction()
        assert tf.evaluate(0.3) == ((1.0, 1.0, 1.0), 1.0)

    def test_vectorized_matches_scalar(self):
        """Test array evaluation agrees with scalar evaluation."""
        tf = from_preset(Preset.HEAD)
        densities = np.linspace(0.0, 1.0, 17)
        colors = tf.evaluate_color(densities)
        opacities = tf.evaluate_opacity(densities)
        for d, c, o in zip(densities, colors, opacities):
            color, opacity = tf.evaluate(d)
            assert color == pytest.approx(tuple(c))
            assert opacity == pytest.approx(o)


class TestPresets:
    """Tests for the named presets."""

    @pytest.mark.parametrize("preset", list(Preset))
    def test_boundary_values(self, preset):
        """Test density 0 and 1 give the first and last control point values."""
        tf = from_preset(preset)
        color_points, opacity_points = PRESETS[preset]

        color, opacity = tf.evaluate(0.0)
        assert color == pytest.approx(color_points[0][1])
        assert opacity == pytest.approx(opacity_points[0][1])

        color, opacity = tf.evaluate(1.0)
        assert color == pytest.approx(color_points[-1][1])
        assert opacity == pytest.approx(opacity_points[-1][1])

    def test_exactly_four_presets(self):
        """Test the preset catalogue."""
        assert [int(p) for p in Preset] == [0, 1, 2, 3]
        assert set(PRESETS) == set(Preset)

    def test_selection_replaces_points(self):
        """Test loading a preset clears previously added points."""
        tf = TransferFunction()
        tf.add_color_point(0.1, (0.0, 1.0, 0.0))
        tf.add_opacity_point(0.1, 0.5)

        load_preset(tf, Preset.ANEURYSM)
        assert len(tf.color_points) == 3
        assert len(tf.opacity_points) == 2
        assert tf.evaluate(0.25)[0] == pytest.approx((0.95, 1.0, 0.8))

    def test_index_clamped_to_last(self):
        """Test indices past the last preset select the head preset."""
        tf = TransferFunction()
        assert load_preset(tf, 9) == Preset.HEAD
        with pytest.raises(ValueError):
            load_preset(tf, -1)

    def test_default_preset_step(self):
        """Test the duplicated opacity point of the default preset."""
        tf = from_preset(Preset.DEFAULT)
        assert tf.evaluate(0.35)[1] == pytest.approx(0.0)
        assert tf.evaluate(0.2)[1] == pytest.approx(0.1)
        assert tf.evaluate(0.525)[1] == pytest.approx(0.15)


class TestLookupTable:
    """Tests for baking and exporting the lookup table."""

    def test_bake_shape_and_endpoints(self):
        """Test the table samples [0, 1] evenly including both ends."""
        tf = from_preset(Preset.DEFAULT)
        table = tf.bake_lookup_table(256)

        assert table.shape == (256, 4)
        color, opacity = tf.evaluate(0.0)
        np.testing.assert_allclose(table[0], list(color) + [opacity], atol=1e-6)
        color, opacity = tf.evaluate(1.0)
        np.testing.assert_allclose(table[-1], list(color) + [opacity], atol=1e-6)

    def test_white_ramp(self):
        """Test the white preset bakes to a linear alpha ramp."""
        table = from_preset(Preset.WHITE).bake_lookup_table(5)
        np.testing.assert_allclose(table[:, :3], 1.0)
        np.testing.assert_allclose(table[:, 3], [0.0, 0.25, 0.5, 0.75, 1.0])

    def test_single_entry_table(self):
        """Test a one-entry table holds the value at density 0."""
        tf = from_preset(Preset.WHITE)
        table = tf.bake_lookup_table(1)
        assert table.shape == (1, 4)
        color, opacity = tf.evaluate(0.0)
        np.testing.assert_allclose(table[0], list(color) + [opacity])

    def test_invalid_resolution(self):
        """Test an empty table is rejected."""
        with pytest.raises(ValueError):
            TransferFunction().bake_lookup_table(0)

    def test_rgba8(self):
        """Test quantization to bytes."""
        rgba = lut_to_rgba8(np.array([[0.0, 0.5, 1.0, 1.2]]))
        assert rgba.dtype == np.uint8
        assert rgba.tolist() == [[0, 128, 255, 255]]

    def test_export_png(self, tmp_path):
        """Test the exported strip is one pixel tall and matches the table."""
        tf = from_preset(Preset.WHITE)
        path = tf.export_png(tmp_path / "transfer_function.png", resolution=64)

        strip = matplotlib.image.imread(path)
        assert strip.shape == (1, 64, 4)
        assert strip[0, 0, 3] == pytest.approx(0.0)
        assert strip[0, -1, 3] == pytest.approx(1.0)
