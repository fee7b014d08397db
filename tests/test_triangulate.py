# tests/test_triangulate.py
"""Tests for floor and ceiling polygon triangulation."""

import math

import pytest

from homemesh.mesh.triangulate import triangulate_polygon


def _normal_y(triangle):
    (ax, _, az), (bx, _, bz), (cx, _, cz) = triangle
    return (bz - az) * (cx - ax) - (bx - ax) * (cz - az)


class TestTriangulatePolygon:
    """Tests for triangulate_polygon."""

    def test_triangle_is_kept(self):
        points = [(0, 0), (100, 0), (0, 100)]
        triangles = triangulate_polygon(points, 0)
        assert triangles == [((0.0, 0.0, 0.0), (100.0, 0.0, 0.0), (0.0, 0.0, 100.0))]

    def test_flipped_triangle_is_reversed(self):
        points = [(0, 0), (100, 0), (0, 100)]
        triangles = triangulate_polygon(points, 0, flip=True)
        assert triangles == [((0.0, 0.0, 100.0), (100.0, 0.0, 0.0), (0.0, 0.0, 0.0))]

    def test_quad_splits_along_first_diagonal(self):
        points = [(0, 0), (400, 0), (400, 300), (0, 300)]
        triangles = triangulate_polygon(points, 250)
        assert triangles == [
            ((0.0, 250.0, 0.0), (400.0, 250.0, 0.0), (400.0, 250.0, 300.0)),
            ((0.0, 250.0, 0.0), (400.0, 250.0, 300.0), (0.0, 250.0, 300.0)),
        ]

    @pytest.mark.parametrize("count", [5, 6, 8, 12])
    def test_convex_polygon_gives_n_minus_two_triangles(self, count):
        points = [
            (100 * math.cos(2 * math.pi * i / count), 100 * math.sin(2 * math.pi * i / count))
            for i in range(count)
        ]
        assert len(triangulate_polygon(points, 0)) == count - 2

    def test_flip_reverses_every_triangle(self):
        """Floor and ceiling triangles should have opposite windings."""
        points = [(0, 0), (400, 0), (400, 300), (0, 300), (-100, 150)]
        ceiling = triangulate_polygon(points, 0)
        floor = triangulate_polygon(points, 0, flip=True)
        for up, down in zip(ceiling, floor):
            assert set(up) == set(down)
            assert _normal_y(up) == pytest.approx(-_normal_y(down))
            assert _normal_y(up) != 0

    def test_elevation_maps_to_y(self):
        triangles = triangulate_polygon([(1, 2), (3, 2), (3, 4)], 42)
        for tri in triangles:
            for x, y, z in tri:
                assert y == 42.0

    def test_too_few_points(self):
        with pytest.raises(ValueError):
            triangulate_polygon([(0, 0), (1, 1)], 0)
