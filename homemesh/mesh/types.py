"""Geometry accumulator for OBJ export."""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import trimesh

from homemesh.materials.types import TextureTransform

from .projection import DEFAULT_VERTICAL_THRESHOLD, planar_uvs

logger = logging.getLogger(__name__)

Point3D = Tuple[float, float, float]
Vector3D = Tuple[float, float, float]
IndexTriple = Tuple[int, int, int]

MIN_NORMAL_LENGTH = 1e-9


@dataclass(frozen=True)
class Face:
    """Triangle referencing 1-based pool indices and a material name."""

    vertices: IndexTriple
    material: str
    normals: Optional[IndexTriple] = None
    tex_coords: Optional[IndexTriple] = None

    def __post_init__(self):
        for label, triple in (
            ("vertex", self.vertices),
            ("normal", self.normals),
            ("texture coordinate", self.tex_coords),
        ):
            if triple is None:
                continue
            if len(triple) != 3 or any(i is None for i in triple):
                raise ValueError(f"Face needs three {label} indices, got {triple!r}")

    @property
    def has_normals(self) -> bool:
        return self.normals is not None

    @property
    def has_tex_coords(self) -> bool:
        return self.tex_coords is not None


class BufferMark(NamedTuple):
    """Pool sizes captured by MeshBuffer.mark()."""

    vertices: int
    normals: int
    tex_coords: int
    faces: int


class MeshBuffer:
    """Append-only vertex, normal, UV and face pools of one export pass.

    Indices handed out are 1-based and stay valid until the buffer is
    discarded or rolled back past them.
    """

    def __init__(
        self,
        dedupe_vertices: bool = False,
        precision: int = 7,
        uv_threshold: float = DEFAULT_VERTICAL_THRESHOLD,
    ):
        self.vertices: List[Point3D] = []
        self.normals: List[Vector3D] = []
        self.tex_coords: List[Tuple[float, float]] = []
        self.faces: List[Face] = []
        self.dedupe_vertices = dedupe_vertices
        self.precision = precision
        self.uv_threshold = uv_threshold
        self._vertex_keys: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Pools
    # ------------------------------------------------------------------

    def add_vertex(self, point: Sequence[float]) -> int:
        """Append a vertex and return its 1-based index."""
        vertex = (float(point[0]), float(point[1]), float(point[2]))
        if self.dedupe_vertices:
            key = self._vertex_key(vertex)
            existing = self._vertex_keys.get(key)
            if existing is not None:
                return existing
            self.vertices.append(vertex)
            self._vertex_keys[key] = len(self.vertices)
            return len(self.vertices)
        self.vertices.append(vertex)
        return len(self.vertices)

    def add_normal(self, vector: Sequence[float]) -> Optional[int]:
        """Append a normal; degenerate or non-finite vectors return None."""
        normal = (float(vector[0]), float(vector[1]), float(vector[2]))
        if not all(math.isfinite(c) for c in normal):
            logger.debug(f"Dropping non-finite normal {normal}")
            return None
        if math.sqrt(sum(c * c for c in normal)) < MIN_NORMAL_LENGTH:
            logger.debug(f"Dropping degenerate normal {normal}")
            return None
        self.normals.append(normal)
        return len(self.normals)

    def add_tex_coord(self, u: float, v: float) -> int:
        """Append a texture coordinate and return its 1-based index."""
        self.tex_coords.append((float(u), float(v)))
        return len(self.tex_coords)

    def add_face(
        self,
        vertices: IndexTriple,
        material: str,
        normals: Optional[IndexTriple] = None,
        tex_coords: Optional[IndexTriple] = None,
    ) -> Face:
        """Append a face after checking that all referenced indices exist."""
        self._check_indices(vertices, len(self.vertices), "vertex")
        if normals is not None:
            self._check_indices(normals, len(self.normals), "normal")
        if tex_coords is not None:
            self._check_indices(tex_coords, len(self.tex_coords), "texture coordinate")
        face = Face(
            vertices=tuple(vertices),
            material=material,
            normals=tuple(normals) if normals is not None else None,
            tex_coords=tuple(tex_coords) if tex_coords is not None else None,
        )
        self.faces.append(face)
        return face

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def add_triangle(
        self,
        v0: Point3D,
        v1: Point3D,
        v2: Point3D,
        normal: Optional[Vector3D],
        material: str,
        transform: Optional[TextureTransform] = None,
    ) -> Face:
        """Add a triangle with one shared normal.

        With a texture transform, per-vertex UVs are synthesized by planar
        projection.
        """
        indices = (self.add_vertex(v0), self.add_vertex(v1), self.add_vertex(v2))
        normal_index = self.add_normal(normal) if normal is not None else None
        normals = (normal_index,) * 3 if normal_index is not None else None

        tex_coords = None
        if transform is not None:
            uvs = planar_uvs((v0, v1, v2), transform, self.uv_threshold)
            tex_coords = tuple(self.add_tex_coord(u, v) for u, v in uvs)

        return self.add_face(indices, material, normals=normals, tex_coords=tex_coords)

    def add_quad(
        self,
        v0: Point3D,
        v1: Point3D,
        v2: Point3D,
        v3: Point3D,
        normal: Optional[Vector3D],
        material: str,
        transform: Optional[TextureTransform] = None,
    ) -> Tuple[Face, Face]:
        """Add a quad as two triangles sharing the v0-v2 diagonal."""
        first = self.add_triangle(v0, v1, v2, normal, material, transform)
        second = self.add_triangle(v0, v2, v3, normal, material, transform)
        return first, second

    # ------------------------------------------------------------------
    # Savepoints
    # ------------------------------------------------------------------

    def mark(self) -> BufferMark:
        """Capture pool sizes for a later rollback."""
        return BufferMark(
            vertices=len(self.vertices),
            normals=len(self.normals),
            tex_coords=len(self.tex_coords),
            faces=len(self.faces),
        )

    def rollback(self, mark: BufferMark) -> None:
        """Discard everything appended after `mark`."""
        del self.vertices[mark.vertices:]
        del self.normals[mark.normals:]
        del self.tex_coords[mark.tex_coords:]
        del self.faces[mark.faces:]
        if self._vertex_keys:
            self._vertex_keys = {
                key: index for key, index in self._vertex_keys.items() if index <= mark.vertices
            }

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.vertices

    def bounds(self) -> Tuple[Point3D, Point3D]:
        """Axis-aligned bounding box of all vertices."""
        if not self.vertices:
            return ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        points = np.asarray(self.vertices, dtype=float)
        return (tuple(points.min(axis=0)), tuple(points.max(axis=0)))

    def to_trimesh(self) -> trimesh.Trimesh:
        """Convert to a trimesh object (zero-based faces, no vertex merging)."""
        if not self.vertices or not self.faces:
            return trimesh.Trimesh()
        vertices = np.asarray(self.vertices, dtype=float)
        faces = np.asarray([f.vertices for f in self.faces], dtype=np.int64) - 1
        mesh = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
        mesh.metadata["materials"] = sorted({f.material for f in self.faces})
        return mesh

    def _vertex_key(self, vertex: Point3D) -> str:
        return ",".join(f"{c:.{self.precision}f}" for c in vertex)

    @staticmethod
    def _check_indices(indices: Sequence[Optional[int]], count: int, label: str) -> None:
        if len(indices) != 3:
            raise ValueError(f"Face needs three {label} indices, got {indices!r}")
        for index in indices:
            if index is None or index < 1 or index > count:
                raise ValueError(f"Dangling {label} index {index!r} (pool size {count})")
