"""Furniture model archive reading."""

import io
import zipfile
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, Optional

from homemesh.errors import ModelArchiveError

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tga", ".tif", ".tiff", ".webp"}


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


@dataclass
class ModelArchive:
    """Mesh text, optional material library and images of one model archive."""

    mesh_name: str
    mesh_text: str
    mtl_name: Optional[str] = None
    mtl_text: Optional[str] = None
    images: Dict[str, bytes] = field(default_factory=dict, repr=False)  # lower-cased base name

    @classmethod
    def from_bytes(cls, data: bytes) -> "ModelArchive":
        """Read an archive, locating its mesh file by extension.

        The material library whose stem matches the mesh file is preferred;
        otherwise any material library in the archive is used.
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                entries = [info for info in zf.infolist() if not info.is_dir()]

                mesh_info = next(
                    (i for i in entries if i.filename.lower().endswith(".obj")), None
                )
                if mesh_info is None:
                    raise ModelArchiveError("No OBJ file found in model archive")

                mtl_entries = [i for i in entries if i.filename.lower().endswith(".mtl")]
                mesh_stem = PurePosixPath(mesh_info.filename).stem.lower()
                mtl_info = next(
                    (i for i in mtl_entries if PurePosixPath(i.filename).stem.lower() == mesh_stem),
                    mtl_entries[0] if mtl_entries else None,
                )

                images = {}
                for info in entries:
                    path = PurePosixPath(info.filename)
                    if path.suffix.lower() in IMAGE_EXTENSIONS:
                        images.setdefault(path.name.lower(), zf.read(info))

                return cls(
                    mesh_name=mesh_info.filename,
                    mesh_text=_decode_text(zf.read(mesh_info)),
                    mtl_name=mtl_info.filename if mtl_info else None,
                    mtl_text=_decode_text(zf.read(mtl_info)) if mtl_info else None,
                    images=images,
                )
        except zipfile.BadZipFile as e:
            raise ModelArchiveError(f"Failed to read model archive: {e}")

    def find_image(self, reference: str) -> Optional[bytes]:
        """Look up an image by the file name a material library refers to."""
        name = PurePosixPath(reference.replace("\\", "/")).name.lower()
        return self.images.get(name)
