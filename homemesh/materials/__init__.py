"""Materials system for home export.

Material records are created lazily per export and written to the
material library; texture images are deduplicated by content.

Usage:
    from homemesh.materials import MaterialManager

    manager = MaterialManager(fetcher)
    name = await manager.resolve_surface_material(0xFF0000, None, "wall_0_left", "wall")
"""

from .manager import (
    MaterialManager,
    color_material_name,
    sanitize_name,
    sniff_extension,
)
from .mtl import DefaultMaterialLibrary, MtlEntry, parse_mtl
from .types import MaterialRecord, TextureAsset, TextureTransform

__all__ = [
    # Core types
    "MaterialRecord",
    "TextureAsset",
    "TextureTransform",
    # Bookkeeping
    "MaterialManager",
    "color_material_name",
    "sanitize_name",
    "sniff_extension",
    # Material libraries
    "MtlEntry",
    "parse_mtl",
    "DefaultMaterialLibrary",
]
