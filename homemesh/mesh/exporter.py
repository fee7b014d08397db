"""Home export orchestration: geometry, materials and packaging."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from homemesh.config import ExportConfig
from homemesh.errors import ExportError
from homemesh.home.elements import Home, Room, Wall
from homemesh.materials.manager import sanitize_name
from homemesh.materials.mtl import DefaultMaterialLibrary
from homemesh.materials.types import TextureAsset
from homemesh.resources.fetcher import ResourceFetcher, create_fetcher
from homemesh.resources.resolver import ModelResolver

from .extruder import MIN_WALL_LENGTH, RoomExtruder, WallExtruder
from .furniture import FurnitureIntegrator
from .packager import ensure_compression_available, package_export
from .session import ExportSession
from .writer import write_mtl, write_obj

logger = logging.getLogger(__name__)

Point3D = Tuple[float, float, float]


@dataclass
class ExportResult:
    """Output of one export: texts, textures, the ZIP bundle and statistics."""

    name: str
    obj_text: str
    mtl_text: str
    archive: bytes = field(repr=False)
    textures: List[TextureAsset] = field(default_factory=list, repr=False)
    vertex_count: int = 0
    normal_count: int = 0
    tex_coord_count: int = 0
    face_count: int = 0
    material_count: int = 0
    walls_exported: int = 0
    rooms_exported: int = 0
    furniture_models: int = 0
    furniture_boxes: int = 0
    bounds: Tuple[Point3D, Point3D] = ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    surface_area: float = 0.0

    @property
    def file_name(self) -> str:
        return f"{self.name}.zip"

    @property
    def texture_count(self) -> int:
        return len(self.textures)

    def to_dict(self) -> dict:
        """Statistics for serialization; the bundle bytes are left out."""
        return {
            "name": self.name,
            "file_name": self.file_name,
            "vertices": self.vertex_count,
            "normals": self.normal_count,
            "tex_coords": self.tex_coord_count,
            "faces": self.face_count,
            "materials": self.material_count,
            "textures": self.texture_count,
            "walls": self.walls_exported,
            "rooms": self.rooms_exported,
            "furniture_models": self.furniture_models,
            "furniture_boxes": self.furniture_boxes,
            "bounds": {"min": list(self.bounds[0]), "max": list(self.bounds[1])},
            "surface_area": self.surface_area,
            "archive_size": len(self.archive),
        }


def export_name(name: Optional[str], default: str = "home") -> str:
    """Base name of the bundle and its mesh file, without extension."""
    name = (name or "").strip()
    if name.lower().endswith(".zip"):
        name = name[:-4]
    if name.lower().endswith(".obj"):
        name = name[:-4]
    return sanitize_name(name) if name else default


class HomeExporter:
    """
    Exports a home to an OBJ/MTL bundle.

    Pipeline:
    1. Extrude walls into prisms with per-side materials
    2. Triangulate room floors and ceilings
    3. Integrate furniture models, falling back to boxes
    4. Serialize mesh and material library
    5. Bundle mesh, materials and textures into a ZIP archive

    Elements are processed in order, one at a time, so output is
    deterministic for a given home and resource set.
    """

    def __init__(
        self,
        config: Optional[ExportConfig] = None,
        fetcher: Optional[ResourceFetcher] = None,
        default_library: Optional[DefaultMaterialLibrary] = None,
    ):
        self.config = config or ExportConfig()
        self.fetcher = fetcher
        if default_library is None:
            default_library = DefaultMaterialLibrary.from_file(self.config.default_material_library)
        self.default_library = default_library

        self.wall_extruder = WallExtruder(
            default_height=self.config.default_wall_height,
            default_thickness=self.config.default_wall_thickness,
        )
        self.room_extruder = RoomExtruder(ceiling_elevation=self.config.ceiling_height)
        self.furniture_integrator = FurnitureIntegrator(
            resolver=ModelResolver(self.config.models_dir),
            fetcher=fetcher,
            default_library=self.default_library,
        )

    def new_session(self) -> ExportSession:
        return ExportSession(
            fetcher=self.fetcher,
            dedupe_vertices=self.config.dedupe_vertices,
            precision=self.config.precision,
            uv_threshold=self.config.uv_vertical_threshold,
        )

    async def export(self, home: Optional[Home], name: Optional[str] = None) -> ExportResult:
        """
        Export a home.

        Args:
            home: Home to export
            name: Bundle base name; defaults to the home name, then the
                configured default

        Returns:
            ExportResult with the OBJ and MTL text, textures and ZIP bytes

        Raises:
            ExportError: if packaging is unavailable, the home is missing or
                no geometry could be produced
        """
        ensure_compression_available()
        if home is None:
            raise ExportError("Home object is null or undefined", error_type="invalid_input")

        base_name = export_name(name or home.name, self.config.default_name)
        session = self.new_session()
        logger.info(
            f"Exporting {base_name}: {len(home.walls)} walls, {len(home.rooms)} rooms, "
            f"{len(home.furniture)} furniture"
        )

        walls_exported = 0
        for i, wall in enumerate(home.walls):
            if await self._export_wall(session, wall, f"wall_{i}"):
                walls_exported += 1

        rooms_exported = 0
        for i, room in enumerate(home.rooms):
            if await self._export_room(session, room, f"room_{i}"):
                rooms_exported += 1

        models = boxes = 0
        for i, piece in enumerate(home.furniture):
            if await self.furniture_integrator.integrate(session, piece, i):
                models += 1
            else:
                boxes += 1

        buffer = session.buffer
        if buffer.is_empty:
            total = home.element_count
            if total == 0:
                raise ExportError(
                    "No geometry exported. The home is empty - no walls, rooms, or furniture found.",
                    error_type="empty_home",
                )
            raise ExportError(
                f"No geometry exported. Found {total} items but failed to generate geometry.",
                error_type="no_geometry",
            )

        records = list(session.materials.materials.values())
        obj_text = write_obj(buffer, base_name, self.config.mtl_filename, self.config.precision)
        mtl_text = write_mtl(records, self.config.precision)
        textures = list(session.materials.textures)
        archive = package_export(base_name, obj_text, mtl_text, textures, self.config.mtl_filename)

        result = ExportResult(
            name=base_name,
            obj_text=obj_text,
            mtl_text=mtl_text,
            archive=archive,
            textures=textures,
            vertex_count=len(buffer.vertices),
            normal_count=len(buffer.normals),
            tex_coord_count=len(buffer.tex_coords),
            face_count=len(buffer.faces),
            material_count=len(records),
            walls_exported=walls_exported,
            rooms_exported=rooms_exported,
            furniture_models=models,
            furniture_boxes=boxes,
            bounds=buffer.bounds(),
            surface_area=float(buffer.to_trimesh().area),
        )
        logger.info(
            f"Exported {result.file_name}: {result.vertex_count} vertices, "
            f"{result.face_count} faces, {result.material_count} materials, "
            f"{result.texture_count} textures"
        )
        return result

    async def _export_wall(self, session: ExportSession, wall: Wall, key: str) -> bool:
        if wall.length < MIN_WALL_LENGTH:
            logger.debug(f"Skipping zero-length wall {key}")
            return False

        materials = session.materials
        try:
            with session.savepoint():
                left = await materials.resolve_surface_material(
                    wall.left_color, wall.left_texture, f"{key}_left", "wall"
                )
                right = None
                if wall.has_right_side():
                    right = await materials.resolve_surface_material(
                        wall.right_color,
                        wall.right_texture,
                        f"{key}_right",
                        "wall",
                        fallback=left,
                    )
                return self.wall_extruder.extrude(
                    session.buffer,
                    wall,
                    left,
                    right,
                    left_transform=materials.transform_for(left),
                    right_transform=materials.transform_for(right) if right else None,
                )
        except Exception as e:
            logger.warning(f"Failed to export {key}: {e}")
            return False

    async def _export_room(self, session: ExportSession, room: Room, key: str) -> bool:
        if len(room.points) < 3:
            logger.debug(f"Skipping room {key} with {len(room.points)} points")
            return False

        materials = session.materials
        try:
            with session.savepoint():
                floor = await materials.resolve_surface_material(
                    room.floor_color, room.floor_texture, f"{key}_floor", "floor"
                )
                ceiling = await materials.resolve_surface_material(
                    room.ceiling_color, room.ceiling_texture, f"{key}_ceiling", "ceiling"
                )
                return self.room_extruder.extrude(
                    session.buffer,
                    room,
                    floor,
                    ceiling,
                    floor_transform=materials.transform_for(floor),
                    ceiling_transform=materials.transform_for(ceiling),
                )
        except Exception as e:
            logger.warning(f"Failed to export {key}: {e}")
            return False


async def export_home(
    home: Optional[Home],
    name: Optional[str] = None,
    config: Optional[ExportConfig] = None,
    fetcher: Optional[ResourceFetcher] = None,
    default_library: Optional[DefaultMaterialLibrary] = None,
) -> ExportResult:
    """
    Convenience function to export a home.

    Without a fetcher, one is built from the configuration and closed
    when the export finishes.
    """
    config = config or ExportConfig()
    if fetcher is not None:
        return await HomeExporter(config, fetcher, default_library).export(home, name)

    async with create_fetcher(config) as owned:
        return await HomeExporter(config, owned, default_library).export(home, name)
