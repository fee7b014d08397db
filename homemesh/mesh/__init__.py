"""Mesh generation and OBJ export.

Converts a home into a triangulated Wavefront OBJ mesh with a material
library, bundled with its textures into one ZIP archive.

Usage:
    from homemesh.mesh import HomeExporter

    exporter = HomeExporter(config, fetcher)
    result = await exporter.export(home)
    Path(result.file_name).write_bytes(result.archive)
"""

from .exporter import ExportResult, HomeExporter, export_home
from .extruder import RoomExtruder, WallExtruder
from .furniture import FurnitureIntegrator, add_box, place_model
from .obj_parser import ObjFace, ObjModel, parse_obj
from .packager import ensure_compression_available, package_export
from .projection import planar_uvs
from .session import ExportSession
from .triangulate import triangulate_polygon
from .types import Face, MeshBuffer
from .writer import write_mtl, write_obj

__all__ = [
    # Export
    "HomeExporter",
    "ExportResult",
    "ExportSession",
    "export_home",
    # Geometry
    "Face",
    "MeshBuffer",
    "WallExtruder",
    "RoomExtruder",
    "triangulate_polygon",
    "planar_uvs",
    # Furniture
    "FurnitureIntegrator",
    "add_box",
    "place_model",
    "ObjFace",
    "ObjModel",
    "parse_obj",
    # Output
    "write_obj",
    "write_mtl",
    "package_export",
    "ensure_compression_available",
]
