"""Health check routes."""

from fastapi import APIRouter

from homemesh.errors import ExportError
from homemesh.mesh import ensure_compression_available

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/packaging")
async def packaging_status():
    """Check that deflated ZIP bundles can be written."""
    try:
        ensure_compression_available()
    except ExportError as e:
        return {"zip_deflate_available": False, "error": str(e)}
    return {"zip_deflate_available": True}
