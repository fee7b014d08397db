"""Material and texture bookkeeping for one export pass."""

import hashlib
import io
import logging
import re
from pathlib import PurePosixPath
from typing import Dict, List, NamedTuple, Optional

from PIL import Image, UnidentifiedImageError

from homemesh.errors import ExportException
from homemesh.resources.fetcher import ResourceFetcher

from .mtl import MtlEntry
from .types import MaterialRecord, TextureAsset, TextureTransform

logger = logging.getLogger(__name__)

SURFACE_KINDS = ("wall", "floor", "ceiling", "furniture")

# Pillow format name -> file extension
FORMAT_EXTENSIONS = {
    "JPEG": "jpg",
    "PNG": "png",
    "GIF": "gif",
    "BMP": "bmp",
    "TIFF": "tif",
    "WEBP": "webp",
    "TGA": "tga",
}


def sanitize_name(name: str) -> str:
    """Make a name safe for `newmtl` / `usemtl` statements."""
    cleaned = re.sub(r"[^A-Za-z0-9_.\-]+", "_", name.strip())
    return cleaned or "unnamed"


def color_channels(color: int) -> tuple:
    """Split a 0xRRGGBB color into 0-255 channels."""
    return ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)


def color_material_name(color: int) -> str:
    """Deterministic name shared by every surface with this color."""
    r, g, b = color_channels(color)
    return f"color_{r}_{g}_{b}"


def sniff_extension(data: bytes, source: str = "") -> str:
    """Guess an image file extension from its content, then its source name."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError, ValueError):
        image_format = None
    if image_format:
        return FORMAT_EXTENSIONS.get(image_format.upper(), image_format.lower())
    suffix = PurePosixPath(source.replace("\\", "/")).suffix.lower().lstrip(".")
    return suffix or "png"


class ManagerMark(NamedTuple):
    materials: int
    textures: int


class MaterialManager:
    """Creates material records lazily and deduplicates texture images.

    Materials are kept in insertion order, which is the order they are
    written to the material library.
    """

    def __init__(self, fetcher: Optional[ResourceFetcher] = None):
        self.fetcher = fetcher
        self.materials: Dict[str, MaterialRecord] = {}
        self.textures: List[TextureAsset] = []
        self._textures_by_digest: Dict[str, List[TextureAsset]] = {}

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def get(self, name: str) -> Optional[MaterialRecord]:
        return self.materials.get(name)

    def add(self, record: MaterialRecord) -> str:
        """Register a record unless one with the same name exists."""
        self.materials.setdefault(record.name, record)
        return record.name

    def names(self) -> List[str]:
        return list(self.materials)

    def default_material(self, kind: str) -> str:
        """Fixed fallback material of a surface kind."""
        if kind not in SURFACE_KINDS:
            raise ValueError(f"Unknown surface kind: {kind}")
        return self.add(MaterialRecord(name=f"default_{kind}"))

    def color_material(self, color: int) -> str:
        """Flat material for a 0xRRGGBB color."""
        name = color_material_name(color)
        if name not in self.materials:
            r, g, b = (c / 255.0 for c in color_channels(color))
            self.materials[name] = MaterialRecord(
                name=name,
                ambient=(r * 0.2, g * 0.2, b * 0.2),
                diffuse=(r, g, b),
                specular=(0.3, 0.3, 0.3),
                shininess=20.0,
            )
        return name

    def texture_material(
        self, name: str, asset: TextureAsset, transform: Optional[TextureTransform] = None
    ) -> str:
        """Material drawing its diffuse color from a texture asset."""
        return self.add(
            MaterialRecord(
                name=name,
                ambient=(0.2, 0.2, 0.2),
                diffuse=(1.0, 1.0, 1.0),
                specular=(0.3, 0.3, 0.3),
                shininess=20.0,
                texture=asset.file_name,
                texture_transform=transform,
            )
        )

    def material_from_entry(
        self, name: str, entry: Optional[MtlEntry], texture: Optional[TextureAsset] = None
    ) -> str:
        """Material built from a parsed material-library entry.

        Missing properties keep the record defaults.
        """
        record = MaterialRecord(name=name)
        if entry is not None:
            if entry.ambient is not None:
                record.ambient = entry.ambient
            if entry.diffuse is not None:
                record.diffuse = entry.diffuse
            if entry.specular is not None:
                record.specular = entry.specular
            if entry.shininess is not None:
                record.shininess = entry.shininess
            if entry.transparency is not None:
                record.transparency = min(max(entry.transparency, 0.0), 1.0)
        if texture is not None:
            record.texture = texture.file_name
        return self.add(record)

    # ------------------------------------------------------------------
    # Textures
    # ------------------------------------------------------------------

    def register_texture(self, data: bytes, source: str = "") -> TextureAsset:
        """Store texture bytes once; byte-identical images share one asset."""
        digest = hashlib.sha256(data).hexdigest()
        for asset in self._textures_by_digest.get(digest, []):
            if asset.data == data:
                return asset

        file_name = f"texture_{len(self.textures)}.{sniff_extension(data, source)}"
        asset = TextureAsset(file_name=file_name, data=data, source=source)
        self.textures.append(asset)
        self._textures_by_digest.setdefault(digest, []).append(asset)
        logger.debug(f"Registered texture {file_name} from {source or 'inline data'}")
        return asset

    async def fetch_texture(self, image: str) -> Optional[TextureAsset]:
        """Fetch and register a texture image; failures are logged and give None."""
        if self.fetcher is None:
            logger.warning(f"No resource fetcher configured, skipping texture {image}")
            return None
        try:
            data = await self.fetcher.fetch(image)
        except ExportException as e:
            logger.warning(f"Failed to fetch texture {image}: {e}")
            return None
        if not data:
            logger.warning(f"Texture {image} is empty")
            return None
        return self.register_texture(data, source=image)

    # ------------------------------------------------------------------
    # Surface resolution
    # ------------------------------------------------------------------

    async def resolve_surface_material(
        self,
        color: Optional[int],
        texture,
        instance_key: str,
        kind: str,
        fallback: Optional[str] = None,
    ) -> str:
        """Pick the material of a wall side, floor or ceiling.

        A texture wins over a flat color, a color over `fallback`, and
        `fallback` over the surface default. `texture` is a TextureRef-like
        object with `image` and `transform()`.
        """
        if texture is not None and texture.image:
            asset = await self.fetch_texture(texture.image)
            if asset is not None:
                return self.texture_material(
                    f"{sanitize_name(instance_key)}_texture", asset, texture.transform()
                )
            logger.info(f"Texture missing for {instance_key}, using color material")

        if color is not None:
            return self.color_material(color)

        if fallback is not None:
            return fallback

        return self.default_material(kind)

    def transform_for(self, name: str) -> Optional[TextureTransform]:
        """Texture transform of a material, used to generate UVs."""
        record = self.materials.get(name)
        if record is None or record.texture is None:
            return None
        return record.texture_transform

    # ------------------------------------------------------------------
    # Savepoints
    # ------------------------------------------------------------------

    def mark(self) -> ManagerMark:
        return ManagerMark(materials=len(self.materials), textures=len(self.textures))

    def rollback(self, mark: ManagerMark) -> None:
        """Forget materials and textures registered after `mark`."""
        for name in list(self.materials)[mark.materials:]:
            del self.materials[name]
        for asset in self.textures[mark.textures:]:
            digest = hashlib.sha256(asset.data).hexdigest()
            bucket = self._textures_by_digest.get(digest, [])
            if asset in bucket:
                bucket.remove(asset)
            if not bucket:
                self._textures_by_digest.pop(digest, None)
        del self.textures[mark.textures:]
