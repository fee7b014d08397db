"""ZIP bundling of an export."""

import io
import logging
import zipfile
from typing import Iterable

from homemesh.errors import ExportError
from homemesh.materials.types import TextureAsset

logger = logging.getLogger(__name__)


def ensure_compression_available() -> None:
    """Fail early when the interpreter cannot write deflated archives."""
    try:
        import zlib  # noqa: F401
    except ImportError:
        raise ExportError(
            "ZIP compression is unavailable: the zlib module is missing",
            error_type="missing_dependency",
        )


def package_export(
    name: str,
    obj_text: str,
    mtl_text: str,
    textures: Iterable[TextureAsset] = (),
    mtl_name: str = "materials.mtl",
) -> bytes:
    """Bundle mesh, material library and textures into one ZIP archive.

    Entries are `<name>.obj`, the material library and every texture under
    its flat file name, all at the archive root.
    """
    ensure_compression_available()

    output = io.BytesIO()
    with zipfile.ZipFile(output, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(f"{name}.obj", obj_text)
        zf.writestr(mtl_name, mtl_text)
        for asset in textures:
            zf.writestr(asset.file_name, asset.data)

    data = output.getvalue()
    logger.debug(f"Packaged {name}.obj into {len(data)} byte archive")
    return data
