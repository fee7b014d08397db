"""Planar UV projection for generated geometry."""

import math
from typing import List, Sequence, Tuple

from homemesh.materials.types import TextureTransform

Point3D = Tuple[float, float, float]
UV = Tuple[float, float]

DEFAULT_VERTICAL_THRESHOLD = 1e-3


def is_horizontal(points: Sequence[Point3D], threshold: float = DEFAULT_VERTICAL_THRESHOLD) -> bool:
    """Check if a triangle lies (nearly) flat, from the variance of its Y values."""
    ys = [p[1] for p in points]
    mean = sum(ys) / len(ys)
    variance = sum((y - mean) ** 2 for y in ys) / len(ys)
    return variance < threshold


def planar_uvs(
    points: Sequence[Point3D],
    transform: TextureTransform,
    threshold: float = DEFAULT_VERTICAL_THRESHOLD,
) -> List[UV]:
    """Project triangle corners onto a plane and map them to texture space.

    Horizontal triangles use the (x, z) plane, all others (x, y). Coordinates
    are scaled, rotated by the transform angle, offset, then wrapped into
    [0, 1) so that tiled textures repeat.
    """
    horizontal = is_horizontal(points, threshold)
    cos_a = math.cos(transform.angle)
    sin_a = math.sin(transform.angle)

    uvs = []
    for x, y, z in points:
        a, b = (x, z) if horizontal else (x, y)
        s = a * transform.scale_x
        t = b * transform.scale_y
        u = s * cos_a - t * sin_a + transform.offset_x
        v = s * sin_a + t * cos_a + transform.offset_y
        uvs.append((_wrap(u), _wrap(v)))
    return uvs


def _wrap(value: float) -> float:
    wrapped = value % 1.0
    # float modulo of a tiny negative rounds up to exactly 1.0
    return 0.0 if wrapped >= 1.0 else wrapped
