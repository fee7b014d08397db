"""OBJ and MTL text serialization."""

from typing import Iterable, List

from homemesh.materials.types import MaterialRecord

from .types import Face, MeshBuffer

GENERATOR = "homemesh"


def format_number(value: float, precision: int = 7) -> str:
    """Fixed-point text; negative zero is written without a sign."""
    text = f"{value:.{precision}f}"
    if text.startswith("-") and not text.strip("-0."):
        return text[1:]
    return text


def format_face(face: Face) -> str:
    """`f` statement in the v, v//vn, v/vt or v/vt/vn variant the face supports."""
    corners = []
    for i in range(3):
        v = face.vertices[i]
        vt = face.tex_coords[i] if face.tex_coords is not None else None
        vn = face.normals[i] if face.normals is not None else None
        if vt is not None and vn is not None:
            corners.append(f"{v}/{vt}/{vn}")
        elif vn is not None:
            corners.append(f"{v}//{vn}")
        elif vt is not None:
            corners.append(f"{v}/{vt}")
        else:
            corners.append(str(v))
    return "f " + " ".join(corners)


def write_obj(
    buffer: MeshBuffer,
    name: str = "home",
    mtl_name: str = "materials.mtl",
    precision: int = 7,
) -> str:
    """Serialize a mesh buffer to OBJ text.

    A `usemtl` statement is written whenever the material changes between
    consecutive faces, so face order is preserved exactly.
    """
    fmt = lambda value: format_number(value, precision)  # noqa: E731

    lines: List[str] = [
        f"# Exported by {GENERATOR}",
        f"# Home: {name}",
        "",
        f"mtllib {mtl_name}",
        "",
        f"# Vertices: {len(buffer.vertices)}",
    ]
    lines.extend(f"v {fmt(x)} {fmt(y)} {fmt(z)}" for x, y, z in buffer.vertices)
    lines.append("")

    lines.append(f"# Normals: {len(buffer.normals)}")
    lines.extend(f"vn {fmt(x)} {fmt(y)} {fmt(z)}" for x, y, z in buffer.normals)
    lines.append("")

    if buffer.tex_coords:
        lines.append(f"# Texture coordinates: {len(buffer.tex_coords)}")
        lines.extend(f"vt {fmt(u)} {fmt(v)}" for u, v in buffer.tex_coords)
        lines.append("")

    lines.append(f"# Faces: {len(buffer.faces)}")
    current = None
    for face in buffer.faces:
        if face.material != current:
            current = face.material
            lines.append("")
            lines.append(f"usemtl {current}")
        lines.append(format_face(face))

    return "\n".join(lines) + "\n"


def write_mtl(materials: Iterable[MaterialRecord], precision: int = 7) -> str:
    """Serialize material records, in the given order, to MTL text."""
    fmt = lambda value: format_number(value, precision)  # noqa: E731

    lines: List[str] = [f"# Material library generated by {GENERATOR}", ""]
    for record in materials:
        lines.append(f"newmtl {record.name}")
        lines.append("Ka " + " ".join(fmt(c) for c in record.ambient))
        lines.append("Kd " + " ".join(fmt(c) for c in record.diffuse))
        lines.append("Ks " + " ".join(fmt(c) for c in record.specular))
        lines.append(f"Ns {fmt(record.shininess)}")
        lines.append(f"d {fmt(record.dissolve)}")
        lines.append("illum 2")
        if record.texture:
            lines.append(f"map_Kd {record.texture}")
        lines.append("")

    return "\n".join(lines) + "\n"
