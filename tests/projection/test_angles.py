"""Unit tests for point validity and angle helpers."""

import math

import numpy as np
import pytest

from src.projection.angles import is_point_valid, azimuth, elevation, point_range


class TestIsPointValid:
    """Test suite for is_point_valid."""

    def test_zero_point_is_invalid(self):
        """Test that the (0, 0, 0) sentinel is never valid."""
        assert not is_point_valid(0.0, 0.0, 0.0)
        assert not is_point_valid(np.float32(0.0), np.float32(0.0), np.float32(0.0))

    def test_single_nonzero_coordinate_is_valid(self):
        """Test that one nonzero coordinate is enough."""
        assert is_point_valid(0.0, 0.0, 1.0)
        assert is_point_valid(-0.5, 0.0, 0.0)

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_is_invalid(self, bad):
        """Test that NaN and infinite coordinates are rejected."""
        assert not is_point_valid(bad, 1.0, 1.0)
        assert not is_point_valid(1.0, bad, 1.0)
        assert not is_point_valid(1.0, 1.0, bad)


class TestAngles:
    """Test suite for azimuth, elevation and range."""

    def test_azimuth_quadrants(self):
        """Test azimuth along the axes."""
        assert azimuth(1.0, 0.0) == pytest.approx(0.0)
        assert azimuth(0.0, 1.0) == pytest.approx(math.pi / 2)
        assert azimuth(0.0, -1.0) == pytest.approx(-math.pi / 2)
        # Negative x axis maps to +pi, the closed end of the range
        assert azimuth(-1.0, 0.0) == pytest.approx(math.pi)

    def test_elevation(self):
        """Test elevation for horizontal, tilted and vertical points."""
        assert elevation(3.0, 4.0, 0.0) == pytest.approx(0.0)
        assert elevation(1.0, 0.0, 1.0) == pytest.approx(math.pi / 4)
        assert elevation(1.0, 0.0, -1.0) == pytest.approx(-math.pi / 4)

    def test_elevation_on_vertical_axis(self):
        """Test that zero horizontal distance gives +-pi/2 rather than NaN."""
        assert elevation(0.0, 0.0, 2.0) == pytest.approx(math.pi / 2)
        assert elevation(0.0, 0.0, -2.0) == pytest.approx(-math.pi / 2)

    def test_point_range(self):
        """Test Euclidean range."""
        assert point_range(3.0, 4.0, 12.0) == pytest.approx(13.0)
        assert point_range(0.0, 0.0, -2.0) == pytest.approx(2.0)

    def test_float32_precision(self):
        """Test that float32 inputs are accepted."""
        value = azimuth(np.float32(1.0), np.float32(1.0))
        assert value == pytest.approx(math.pi / 4, rel=1e-6)
