# tests/test_projection.py
"""Tests for planar texture projection."""

import math

import pytest

from homemesh.materials.types import TextureTransform
from homemesh.mesh.projection import is_horizontal, planar_uvs


class TestPlanarUVs:
    """Tests for planar_uvs."""

    def test_horizontal_triangle_uses_xz_plane(self):
        points = [(0, 0, 0), (25, 0, 0), (0, 0, 75)]
        uvs = planar_uvs(points, TextureTransform(scale_x=0.01, scale_y=0.01))
        assert uvs == pytest.approx([(0.0, 0.0), (0.25, 0.0), (0.0, 0.75)])

    def test_vertical_triangle_uses_xy_plane(self):
        points = [(0, 0, 0), (25, 0, 0), (0, 50, 0)]
        uvs = planar_uvs(points, TextureTransform(scale_x=0.01, scale_y=0.01))
        assert uvs == pytest.approx([(0.0, 0.0), (0.25, 0.0), (0.0, 0.5)])

    def test_small_y_variance_counts_as_horizontal(self):
        assert is_horizontal([(0, 0.0, 0), (1, 0.01, 0), (0, 0.02, 1)])
        assert not is_horizontal([(0, 0, 0), (1, 0, 0), (0, 10, 0)])

    def test_coordinates_wrap_into_unit_range(self):
        points = [(150, 0, 0), (-30, 0, 0), (0, 0, 260)]
        uvs = planar_uvs(points, TextureTransform(scale_x=0.01, scale_y=0.01))
        assert uvs[0] == pytest.approx((0.5, 0.0))
        assert uvs[1] == pytest.approx((0.7, 0.0))
        assert uvs[2] == pytest.approx((0.0, 0.6))
        for u, v in uvs:
            assert 0.0 <= u < 1.0
            assert 0.0 <= v < 1.0

    def test_offset_is_added_after_scaling(self):
        points = [(10, 0, 0), (20, 0, 0), (10, 0, 10)]
        transform = TextureTransform(offset_x=0.25, offset_y=0.5, scale_x=0.01, scale_y=0.01)
        uvs = planar_uvs(points, transform)
        assert uvs[0] == pytest.approx((0.35, 0.5))

    def test_rotation(self):
        """A quarter turn maps the u axis onto v."""
        points = [(0, 0, 0), (50, 0, 0), (0, 0, 10)]
        transform = TextureTransform(angle=math.pi / 2, scale_x=0.01, scale_y=0.01)
        uvs = planar_uvs(points, transform)
        assert uvs[1] == pytest.approx((0.0, 0.5), abs=1e-9)

    def test_tiny_negative_never_wraps_to_one(self):
        uvs = planar_uvs([(-1e-18, 0, 0), (1, 0, 0), (0, 0, 1)], TextureTransform())
        assert uvs[0][0] < 1.0
