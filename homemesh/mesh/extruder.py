"""Wall and room extrusion into the export mesh buffer."""

import math
from typing import Optional, Tuple

from homemesh.home.elements import Room, Wall
from homemesh.materials.types import TextureTransform

from .triangulate import triangulate_polygon
from .types import MeshBuffer

Point3D = Tuple[float, float, float]

MIN_WALL_LENGTH = 1e-6

FLOOR_NORMAL = (0.0, -1.0, 0.0)
CEILING_NORMAL = (0.0, 1.0, 0.0)


class WallExtruder:
    """Extrudes a straight wall into a six-sided prism."""

    def __init__(self, default_height: float = 250.0, default_thickness: float = 10.0):
        self.default_height = default_height
        self.default_thickness = default_thickness

    def extrude(
        self,
        buffer: MeshBuffer,
        wall: Wall,
        left_material: str,
        right_material: Optional[str] = None,
        left_transform: Optional[TextureTransform] = None,
        right_transform: Optional[TextureTransform] = None,
    ) -> bool:
        """Emit the wall's six quads; zero-length walls emit nothing.

        The left side faces the left-hand perpendicular of the start -> end
        direction. The right face uses `right_material` when given, every
        other face the left material.

        Returns:
            True if geometry was emitted.
        """
        height = wall.height if wall.height is not None else self.default_height
        thickness = wall.thickness if wall.thickness is not None else self.default_thickness

        dx = wall.x_end - wall.x_start
        dy = wall.y_end - wall.y_start
        length = math.sqrt(dx * dx + dy * dy)
        if length < MIN_WALL_LENGTH:
            return False

        if right_material is None:
            right_material = left_material
            right_transform = left_transform

        # Unit direction and left-hand perpendicular, plan y -> world z
        ux, uz = dx / length, dy / length
        nx, nz = -uz, ux
        half_t = thickness / 2

        def corner(x: float, z: float, side: float, y: float) -> Point3D:
            return (x + nx * half_t * side, y, z + nz * half_t * side)

        xs, zs, xe, ze = wall.x_start, wall.y_start, wall.x_end, wall.y_end

        # Right side (-n) and left side (+n), bottom and top
        r_start_bottom = corner(xs, zs, -1, 0.0)
        r_end_bottom = corner(xe, ze, -1, 0.0)
        r_end_top = corner(xe, ze, -1, height)
        r_start_top = corner(xs, zs, -1, height)
        l_start_bottom = corner(xs, zs, 1, 0.0)
        l_end_bottom = corner(xe, ze, 1, 0.0)
        l_end_top = corner(xe, ze, 1, height)
        l_start_top = corner(xs, zs, 1, height)

        # Left face
        buffer.add_quad(
            l_start_bottom, l_end_bottom, l_end_top, l_start_top,
            (nx, 0.0, nz), left_material, left_transform,
        )
        # Right face
        buffer.add_quad(
            r_start_bottom, r_start_top, r_end_top, r_end_bottom,
            (-nx, 0.0, -nz), right_material, right_transform,
        )
        # Top
        buffer.add_quad(
            r_start_top, l_start_top, l_end_top, r_end_top,
            (0.0, 1.0, 0.0), left_material, left_transform,
        )
        # Bottom
        buffer.add_quad(
            r_start_bottom, r_end_bottom, l_end_bottom, l_start_bottom,
            (0.0, -1.0, 0.0), left_material, left_transform,
        )
        # Start cap
        buffer.add_quad(
            r_start_bottom, l_start_bottom, l_start_top, r_start_top,
            (-ux, 0.0, -uz), left_material, left_transform,
        )
        # End cap
        buffer.add_quad(
            r_end_bottom, r_end_top, l_end_top, l_end_bottom,
            (ux, 0.0, uz), left_material, left_transform,
        )
        return True


class RoomExtruder:
    """Emits a room's floor and ceiling surfaces."""

    def __init__(self, floor_elevation: float = 0.0, ceiling_elevation: float = 250.0):
        self.floor_elevation = floor_elevation
        self.ceiling_elevation = ceiling_elevation

    def extrude(
        self,
        buffer: MeshBuffer,
        room: Room,
        floor_material: str,
        ceiling_material: str,
        floor_transform: Optional[TextureTransform] = None,
        ceiling_transform: Optional[TextureTransform] = None,
    ) -> bool:
        """Triangulate the outline twice: floor facing down, ceiling up.

        Returns:
            True if geometry was emitted.
        """
        if len(room.points) < 3:
            return False

        for tri in triangulate_polygon(room.points, self.floor_elevation, flip=True):
            buffer.add_triangle(*tri, FLOOR_NORMAL, floor_material, floor_transform)

        for tri in triangulate_polygon(room.points, self.ceiling_elevation, flip=False):
            buffer.add_triangle(*tri, CEILING_NORMAL, ceiling_material, ceiling_transform)

        return True
