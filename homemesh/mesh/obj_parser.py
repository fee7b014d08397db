"""Wavefront OBJ text parsing.

Only the statements needed to integrate furniture models are understood:
`v`, `vn`, `vt`, `f`, `usemtl` and `mtllib`. Everything else (groups,
smoothing, lines, free-form geometry) is ignored.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from homemesh.errors import ObjParseError

Point3D = Tuple[float, float, float]
IndexTriple = Tuple[int, int, int]


@dataclass(frozen=True)
class ObjFace:
    """Triangle with zero-based indices into the model's own pools."""

    vertices: IndexTriple
    normals: Optional[IndexTriple] = None
    tex_coords: Optional[IndexTriple] = None
    material: Optional[str] = None


@dataclass
class ObjModel:
    """Parsed mesh text."""

    vertices: List[Point3D] = field(default_factory=list)
    normals: List[Point3D] = field(default_factory=list)
    tex_coords: List[Tuple[float, float]] = field(default_factory=list)
    faces: List[ObjFace] = field(default_factory=list)
    material_libraries: List[str] = field(default_factory=list)

    @property
    def materials(self) -> List[str]:
        """Material names in order of first use."""
        seen = []
        for face in self.faces:
            if face.material is not None and face.material not in seen:
                seen.append(face.material)
        return seen


def _floats(values: List[str], count: int, keyword: str, line_number: int) -> List[float]:
    if len(values) < count:
        raise ObjParseError(f"'{keyword}' needs {count} values, got {len(values)}", line_number)
    try:
        return [float(v) for v in values[:count]]
    except ValueError:
        raise ObjParseError(f"Invalid number in '{keyword}' statement", line_number)


def _resolve_index(raw: str, count: int, label: str, line_number: int) -> int:
    """Turn a 1-based or negative relative index into a zero-based one."""
    try:
        index = int(raw)
    except ValueError:
        raise ObjParseError(f"Invalid {label} index {raw!r}", line_number)
    if index > 0:
        resolved = index - 1
    elif index < 0:
        resolved = count + index
    else:
        raise ObjParseError(f"{label} index 0 is not allowed", line_number)
    if resolved < 0 or resolved >= count:
        raise ObjParseError(f"{label} index {index} out of range ({count} defined)", line_number)
    return resolved


def parse_face_refs(
    values: List[str],
    counts: Tuple[int, int, int],
    line_number: int = 0,
) -> Tuple[List[int], Optional[List[int]], Optional[List[int]]]:
    """Parse `v`, `v/vt`, `v//vn` and `v/vt/vn` references of one face.

    `counts` are the vertex, UV and normal pool sizes at this line. UV or
    normal references are only kept when every corner of the face has them.
    """
    vertex_count, uv_count, normal_count = counts
    vertices: List[int] = []
    uvs: List[Optional[int]] = []
    normals: List[Optional[int]] = []

    for ref in values:
        parts = ref.split("/")
        if len(parts) > 3 or not parts[0]:
            raise ObjParseError(f"Invalid face reference {ref!r}", line_number)
        vertices.append(_resolve_index(parts[0], vertex_count, "vertex", line_number))
        uv = parts[1] if len(parts) > 1 else ""
        normal = parts[2] if len(parts) > 2 else ""
        uvs.append(_resolve_index(uv, uv_count, "texture", line_number) if uv else None)
        normals.append(_resolve_index(normal, normal_count, "normal", line_number) if normal else None)

    kept_uvs = uvs if all(i is not None for i in uvs) else None
    kept_normals = normals if all(i is not None for i in normals) else None
    return vertices, kept_uvs, kept_normals


def fan(indices: List[int]) -> List[IndexTriple]:
    """Triangulate a polygon's index list from its first corner."""
    return [(indices[0], indices[i], indices[i + 1]) for i in range(1, len(indices) - 1)]


def parse_obj(text: str) -> ObjModel:
    """Parse OBJ text into pools and triangulated faces.

    Triangles are kept, quads split 0-1-2 / 0-2-3 and larger polygons fanned.

    Raises:
        ObjParseError: on malformed numbers or out-of-range references.
    """
    model = ObjModel()
    material: Optional[str] = None

    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        keyword, values = parts[0], parts[1:]

        if keyword == "v":
            x, y, z = _floats(values, 3, keyword, line_number)
            model.vertices.append((x, y, z))
        elif keyword == "vn":
            x, y, z = _floats(values, 3, keyword, line_number)
            model.normals.append((x, y, z))
        elif keyword == "vt":
            # a lone u is legal; v defaults to 0
            coords = _floats(values, min(max(len(values), 1), 2), keyword, line_number)
            model.tex_coords.append((coords[0], coords[1] if len(coords) > 1 else 0.0))
        elif keyword == "f":
            if len(values) < 3:
                raise ObjParseError(f"Face needs at least 3 vertices, got {len(values)}", line_number)
            counts = (len(model.vertices), len(model.tex_coords), len(model.normals))
            vertices, uvs, normals = parse_face_refs(values, counts, line_number)
            vertex_tris = fan(vertices)
            uv_tris = fan(uvs) if uvs is not None else [None] * len(vertex_tris)
            normal_tris = fan(normals) if normals is not None else [None] * len(vertex_tris)
            for tri, uv_tri, normal_tri in zip(vertex_tris, uv_tris, normal_tris):
                model.faces.append(
                    ObjFace(vertices=tri, normals=normal_tri, tex_coords=uv_tri, material=material)
                )
        elif keyword == "usemtl":
            material = " ".join(values).strip() or None
        elif keyword == "mtllib":
            model.material_libraries.extend(values)

    return model
