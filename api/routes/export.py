"""Export routes: OBJ bundle and device-metadata sidecar."""

import logging
from typing import Any, AsyncGenerator, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, field_validator

from homemesh.config import ExportConfig
from homemesh.errors import ExportError
from homemesh.home import Home
from homemesh.materials import DefaultMaterialLibrary
from homemesh.mesh import HomeExporter
from homemesh.metadata import build_device_metadata
from homemesh.resources import ResourceFetcher, create_fetcher

logger = logging.getLogger(__name__)

router = APIRouter()


class ExportRequest(BaseModel):
    """Home to export and the bundle name."""

    home: dict[str, Any]
    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_must_be_plain(cls, v: Optional[str]) -> Optional[str]:
        """Validate that the bundle name is a bare file name."""
        if v is not None and ("/" in v or "\\" in v or ".." in v):
            raise ValueError("Name must not contain path separators")
        return v


class DeviceMetadataRequest(BaseModel):
    """Home whose devices are listed."""

    home: dict[str, Any]


def get_config(request: Request) -> ExportConfig:
    """Export configuration, loaded from the environment on first use."""
    config = getattr(request.app.state, "export_config", None)
    if config is None:
        config = ExportConfig.from_env()
        request.app.state.export_config = config
    return config


def get_default_library(
    request: Request, config: ExportConfig = Depends(get_config)
) -> DefaultMaterialLibrary:
    """Process-wide default material library, loaded once."""
    library = getattr(request.app.state, "default_library", None)
    if library is None:
        library = DefaultMaterialLibrary.from_file(config.default_material_library)
        request.app.state.default_library = library
    return library


async def get_fetcher(
    config: ExportConfig = Depends(get_config),
) -> AsyncGenerator[ResourceFetcher, None]:
    """Resource fetcher for one request."""
    fetcher = create_fetcher(config)
    try:
        yield fetcher
    finally:
        await fetcher.close()


def parse_home(data: dict[str, Any]) -> Home:
    try:
        return Home.from_dict(data)
    except (TypeError, ValueError, IndexError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid home: {e}")


@router.post("")
async def export_bundle(
    request: ExportRequest,
    config: ExportConfig = Depends(get_config),
    fetcher: ResourceFetcher = Depends(get_fetcher),
    default_library: DefaultMaterialLibrary = Depends(get_default_library),
):
    """Export a home as a ZIP bundle of OBJ, MTL and textures."""
    home = parse_home(request.home)
    exporter = HomeExporter(config, fetcher, default_library)

    try:
        result = await exporter.export(home, request.name)
    except ExportError as e:
        logger.warning(f"Export failed: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    return Response(
        content=result.archive,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{result.file_name}"',
            "X-Export-Vertices": str(result.vertex_count),
            "X-Export-Faces": str(result.face_count),
            "X-Export-Materials": str(result.material_count),
            "X-Export-Textures": str(result.texture_count),
        },
    )


@router.post("/devices")
async def export_devices(
    request: DeviceMetadataRequest,
    config: ExportConfig = Depends(get_config),
):
    """Device-metadata sidecar of a home."""
    home = parse_home(request.home)
    return build_device_metadata(home, config=config)
