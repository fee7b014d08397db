"""Furniture model integration.

Each furniture piece is replaced by its library model, normalized to the
piece's bounding dimensions and placed at its position and yaw. When the
model cannot be located, fetched or parsed, a box of the piece's size is
emitted instead so the piece never disappears from the export.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

import numpy as np

from homemesh.home.elements import Furniture
from homemesh.materials.manager import sanitize_name
from homemesh.materials.mtl import DefaultMaterialLibrary, MtlEntry, parse_mtl
from homemesh.resources.archive import ModelArchive
from homemesh.resources.fetcher import ResourceFetcher
from homemesh.resources.resolver import ModelResolver

from .obj_parser import ObjModel, parse_obj
from .session import ExportSession
from .types import MeshBuffer

logger = logging.getLogger(__name__)

# Box corner order: bottom ring 0-3, top ring 4-7
BOX_QUADS = (
    ((0, 1, 2, 3), (0.0, -1.0, 0.0)),  # bottom
    ((4, 7, 6, 5), (0.0, 1.0, 0.0)),  # top
    ((0, 3, 7, 4), (-1.0, 0.0, 0.0)),  # -x side
    ((1, 5, 6, 2), (1.0, 0.0, 0.0)),  # +x side
    ((3, 2, 6, 7), (0.0, 0.0, 1.0)),  # +z side
    ((0, 4, 5, 1), (0.0, 0.0, -1.0)),  # -z side
)


def rotate_y(points: np.ndarray, angle: float) -> np.ndarray:
    """Rotate (N, 3) points about the Y axis by a plan yaw angle.

    x' = x cos - z sin, z' = x sin + z cos
    """
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    rotated = points.copy()
    rotated[:, 0] = points[:, 0] * cos_a - points[:, 2] * sin_a
    rotated[:, 2] = points[:, 0] * sin_a + points[:, 2] * cos_a
    return rotated


def place_model(vertices: Sequence[Sequence[float]], piece: Furniture) -> np.ndarray:
    """Fit model vertices into a piece's box and move them into the home.

    The model is centred on X/Z with its lowest point at Y=0, scaled per
    axis to the piece's width, height and depth (an axis with no extent
    keeps its size), rotated by the piece's yaw, then translated to
    (x, elevation, y).
    """
    points = np.asarray(vertices, dtype=float).reshape(-1, 3)
    mins = points.min(axis=0)
    maxs = points.max(axis=0)
    size = maxs - mins

    origin = np.array([(mins[0] + maxs[0]) / 2, mins[1], (mins[2] + maxs[2]) / 2])
    target = np.array([piece.width, piece.height, piece.depth], dtype=float)
    scale = np.divide(target, size, out=np.ones(3), where=size > 0)

    local = (points - origin) * scale
    world = rotate_y(local, piece.angle)
    world += np.array([piece.x, piece.elevation, piece.y])
    return world


def box_corners(piece: Furniture) -> np.ndarray:
    """World-space corners of a piece's bounding box, bottom ring first."""
    half_w, half_d, h = piece.width / 2, piece.depth / 2, piece.height
    local = np.array(
        [
            [-half_w, 0.0, -half_d],
            [half_w, 0.0, -half_d],
            [half_w, 0.0, half_d],
            [-half_w, 0.0, half_d],
            [-half_w, h, -half_d],
            [half_w, h, -half_d],
            [half_w, h, half_d],
            [-half_w, h, half_d],
        ]
    )
    world = rotate_y(local, piece.angle)
    world += np.array([piece.x, piece.elevation, piece.y])
    return world


def add_box(buffer: MeshBuffer, piece: Furniture, material: str) -> None:
    """Emit the 8-vertex, 6-quad placeholder box of a piece."""
    corners = [tuple(c) for c in box_corners(piece)]
    normals = rotate_y(np.array([n for _, n in BOX_QUADS]), piece.angle)
    for (quad, _), normal in zip(BOX_QUADS, normals):
        buffer.add_quad(*(corners[i] for i in quad), tuple(normal), material)


class FurnitureIntegrator:
    """Imports furniture models into an export session."""

    def __init__(
        self,
        resolver: ModelResolver,
        fetcher: Optional[ResourceFetcher],
        default_library: Optional[DefaultMaterialLibrary] = None,
    ):
        self.resolver = resolver
        self.fetcher = fetcher
        self.default_library = default_library or DefaultMaterialLibrary()

    def base_material(self, session: ExportSession, piece: Furniture) -> str:
        """Color override material, else the furniture default."""
        if piece.color is not None:
            return session.materials.color_material(piece.color)
        return session.materials.default_material("furniture")

    async def integrate(self, session: ExportSession, piece: Furniture, index: int) -> bool:
        """Add one piece to the session.

        Returns:
            True if the library model was used, False if a box was emitted.
        """
        label = f"{piece.name or 'unnamed'} (furniture_{index})"

        request = self.resolver.resolve(piece)
        if request is None:
            logger.info(f"No model reference for {label}, using box")
            add_box(session.buffer, piece, self.base_material(session, piece))
            return False

        try:
            if self.fetcher is None:
                raise RuntimeError("No resource fetcher configured")
            data = await self.fetcher.fetch(request.archive)
            archive = ModelArchive.from_bytes(data)
            model = parse_obj(archive.mesh_text)
            if not model.vertices or not model.faces:
                raise ValueError(f"Model {archive.mesh_name} has no geometry")
            entries = parse_mtl(archive.mtl_text) if archive.mtl_text else {}

            with session.savepoint():
                self._commit(session, piece, index, model, archive, entries)
        except Exception as e:
            logger.warning(
                f"Failed to integrate model {request.archive} for {label}: {e}; using box"
            )
            add_box(session.buffer, piece, self.base_material(session, piece))
            return False

        logger.debug(
            f"Integrated {label} from {request.archive} via {request.rule} "
            f"({len(model.faces)} faces)"
        )
        return True

    def _commit(
        self,
        session: ExportSession,
        piece: Furniture,
        index: int,
        model: ObjModel,
        archive: ModelArchive,
        entries: Dict[str, MtlEntry],
    ) -> None:
        buffer = session.buffer
        # registered on first use
        base: Optional[str] = None

        world = place_model(model.vertices, piece)
        vertex_ids = [buffer.add_vertex(tuple(p)) for p in world]

        normal_ids: List[Optional[int]] = []
        if model.normals:
            rotated = rotate_y(np.asarray(model.normals, dtype=float), piece.angle)
            normal_ids = [buffer.add_normal(tuple(n)) for n in rotated]

        uv_ids = [buffer.add_tex_coord(u, v) for u, v in model.tex_coords]

        materials: Dict[str, str] = {}
        for face in model.faces:
            if face.material is None:
                if base is None:
                    base = self.base_material(session, piece)
                material = base
            else:
                material = materials.get(face.material)
                if material is None:
                    material = self._model_material(session, index, face.material, archive, entries)
                    materials[face.material] = material

            normals = None
            if face.normals is not None:
                mapped = tuple(normal_ids[i] for i in face.normals)
                if all(i is not None for i in mapped):
                    normals = mapped

            tex_coords = None
            if face.tex_coords is not None:
                tex_coords = tuple(uv_ids[i] for i in face.tex_coords)

            buffer.add_face(
                tuple(vertex_ids[i] for i in face.vertices),
                material,
                normals=normals,
                tex_coords=tex_coords,
            )

    def _model_material(
        self,
        session: ExportSession,
        index: int,
        source_name: str,
        archive: ModelArchive,
        entries: Dict[str, MtlEntry],
    ) -> str:
        """Material for a `usemtl` name: archive library, default library, flat default."""
        name = f"furniture_{index}_{sanitize_name(source_name)}"
        if session.materials.get(name) is not None:
            return name

        entry = entries.get(source_name.lower())
        if entry is None:
            entry = self.default_library.get(source_name)
            if entry is None:
                logger.debug(f"Material {source_name} not declared, using flat default")

        texture = None
        if entry is not None and entry.texture:
            image = archive.find_image(entry.texture)
            if image:
                texture = session.materials.register_texture(image, source=entry.texture)
            else:
                logger.debug(f"Texture {entry.texture} not in {archive.mesh_name} archive")

        return session.materials.material_from_entry(name, entry, texture)
