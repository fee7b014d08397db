"""Floor and ceiling polygon triangulation."""

from typing import List, Sequence, Tuple

Point2D = Tuple[float, float]
Point3D = Tuple[float, float, float]
Triangle = Tuple[Point3D, Point3D, Point3D]


def triangulate_polygon(
    points: Sequence[Point2D], elevation: float, flip: bool = False
) -> List[Triangle]:
    """Split a closed plan polygon into triangles at a fixed elevation.

    Plan (x, y) maps to (x, elevation, y). Triangles are returned as-is,
    quads split along the 0-2 diagonal and larger polygons fanned from the
    first point. `flip` reverses the winding of every triangle.

    Concave polygons are not handled: the fan may produce triangles outside
    the outline.
    """
    if len(points) < 3:
        raise ValueError(f"Need at least 3 points to triangulate, got {len(points)}")

    lifted = [(float(p[0]), float(elevation), float(p[1])) for p in points]

    if len(lifted) == 3:
        p0, p1, p2 = lifted
        return [(p2, p1, p0)] if flip else [(p0, p1, p2)]

    p0 = lifted[0]

    triangles = []
    for i in range(1, len(lifted) - 1):
        a, b = lifted[i], lifted[i + 1]
        if flip:
            triangles.append((p0, b, a))
        else:
            triangles.append((p0, a, b))

    return triangles
