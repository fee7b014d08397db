# tests/test_mesh_buffer.py
"""Tests for the export geometry buffer."""

import math

import numpy as np
import pytest

from homemesh.materials.types import TextureTransform
from homemesh.mesh.types import Face, MeshBuffer


class TestFace:
    """Tests for Face validation."""

    def test_rejects_partial_normal_triple(self):
        """A face with a missing normal index should be rejected."""
        with pytest.raises(ValueError):
            Face(vertices=(1, 2, 3), material="m", normals=(1, None, 1))

    def test_rejects_short_uv_triple(self):
        with pytest.raises(ValueError):
            Face(vertices=(1, 2, 3), material="m", tex_coords=(1, 2))

    def test_plain_face(self):
        face = Face(vertices=(1, 2, 3), material="m")
        assert not face.has_normals
        assert not face.has_tex_coords


class TestMeshBuffer:
    """Tests for MeshBuffer pools and primitives."""

    def test_indices_are_one_based_and_sequential(self):
        buffer = MeshBuffer()
        assert buffer.add_vertex((0, 0, 0)) == 1
        assert buffer.add_vertex((1, 0, 0)) == 2
        assert buffer.add_normal((0, 1, 0)) == 1
        assert buffer.add_tex_coord(0.5, 0.5) == 1

    def test_identical_vertices_are_not_merged_by_default(self):
        buffer = MeshBuffer()
        first = buffer.add_vertex((1, 2, 3))
        second = buffer.add_vertex((1, 2, 3))
        assert first != second
        assert len(buffer.vertices) == 2

    def test_dedupe_hook_merges_identical_vertices(self):
        buffer = MeshBuffer(dedupe_vertices=True)
        first = buffer.add_vertex((1, 2, 3))
        second = buffer.add_vertex((1.0, 2.0, 3.0))
        assert first == second
        assert len(buffer.vertices) == 1

    def test_degenerate_normals_are_dropped(self):
        """Zero-length and non-finite normals should not enter the pool."""
        buffer = MeshBuffer()
        assert buffer.add_normal((0, 0, 0)) is None
        assert buffer.add_normal((math.nan, 1, 0)) is None
        assert buffer.add_normal((math.inf, 0, 0)) is None
        assert buffer.normals == []

    def test_triangle_without_normal_is_vertex_only(self):
        buffer = MeshBuffer()
        face = buffer.add_triangle((0, 0, 0), (1, 0, 0), (0, 0, 1), (0, 0, 0), "m")
        assert face.normals is None
        assert face.tex_coords is None

    def test_add_face_rejects_dangling_index(self):
        buffer = MeshBuffer()
        buffer.add_vertex((0, 0, 0))
        buffer.add_vertex((1, 0, 0))
        with pytest.raises(ValueError, match="Dangling"):
            buffer.add_face((1, 2, 3), "m")

    def test_add_face_rejects_dangling_normal(self):
        buffer = MeshBuffer()
        for p in [(0, 0, 0), (1, 0, 0), (0, 1, 0)]:
            buffer.add_vertex(p)
        with pytest.raises(ValueError):
            buffer.add_face((1, 2, 3), "m", normals=(1, 1, 1))

    def test_quad_splits_along_first_diagonal(self):
        """A quad should become (v0, v1, v2) and (v0, v2, v3)."""
        buffer = MeshBuffer()
        first, second = buffer.add_quad(
            (0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1), (0, -1, 0), "m"
        )
        assert first.vertices == (1, 2, 3)
        assert second.vertices == (4, 5, 6)
        assert buffer.vertices[3] == buffer.vertices[0]
        assert buffer.vertices[4] == buffer.vertices[2]
        assert buffer.vertices[5] == (0.0, 0.0, 1.0)

    def test_triangle_shares_one_normal(self):
        buffer = MeshBuffer()
        face = buffer.add_triangle((0, 0, 0), (1, 0, 0), (0, 0, 1), (0, 1, 0), "m")
        assert face.normals == (1, 1, 1)
        assert len(buffer.normals) == 1

    def test_texture_transform_generates_uvs(self):
        buffer = MeshBuffer()
        transform = TextureTransform(scale_x=0.01, scale_y=0.01)
        face = buffer.add_triangle(
            (0, 0, 0), (50, 0, 0), (0, 0, 50), (0, 1, 0), "m", transform
        )
        assert face.tex_coords == (1, 2, 3)
        assert buffer.tex_coords[1] == pytest.approx((0.5, 0.0))
        assert buffer.tex_coords[2] == pytest.approx((0.0, 0.5))

    def test_rollback_truncates_all_pools(self):
        buffer = MeshBuffer()
        buffer.add_triangle((0, 0, 0), (1, 0, 0), (0, 0, 1), (0, 1, 0), "a")
        mark = buffer.mark()

        buffer.add_quad(
            (0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0), (0, 0, 1), "b",
            TextureTransform(),
        )
        assert len(buffer.faces) == 3

        buffer.rollback(mark)
        assert len(buffer.vertices) == 3
        assert len(buffer.normals) == 1
        assert len(buffer.tex_coords) == 0
        assert len(buffer.faces) == 1

    def test_rollback_forgets_deduplicated_vertices(self):
        buffer = MeshBuffer(dedupe_vertices=True)
        mark = buffer.mark()
        buffer.add_vertex((5, 5, 5))
        buffer.rollback(mark)
        assert buffer.add_vertex((5, 5, 5)) == 1

    def test_bounds(self):
        buffer = MeshBuffer()
        buffer.add_vertex((-1, 0, 2))
        buffer.add_vertex((3, 4, -5))
        lower, upper = buffer.bounds()
        assert np.allclose(lower, (-1, 0, -5))
        assert np.allclose(upper, (3, 4, 2))

    def test_empty_buffer(self):
        buffer = MeshBuffer()
        assert buffer.is_empty
        assert buffer.bounds() == ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_to_trimesh(self):
        """Conversion should keep every vertex and use zero-based faces."""
        buffer = MeshBuffer()
        buffer.add_quad((0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1), (0, -1, 0), "floor")
        mesh = buffer.to_trimesh()
        assert len(mesh.vertices) == 6
        assert len(mesh.faces) == 2
        assert mesh.faces.min() == 0
        assert mesh.metadata["materials"] == ["floor"]
