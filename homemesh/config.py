"""Exporter configuration management."""

import os
from dataclasses import dataclass
from typing import Optional


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ExportConfig:
    """Scene export configuration.

    All lengths are centimeters, matching the home model.
    """

    # Where model archives and texture images are fetched from.
    # Either a local directory or an http(s) base URL.
    resource_root: str = "resources"
    models_dir: str = "models"

    # Element defaults
    default_wall_height: float = 250.0
    default_wall_thickness: float = 10.0
    ceiling_height: float = 250.0

    # Output
    precision: int = 7
    mtl_filename: str = "materials.mtl"
    default_name: str = "home"

    # Y variance below which a triangle is projected on the (x, z) plane
    uv_vertical_threshold: float = 1e-3

    # Vertex dedup hook; off so indices match one vertex per emitted corner
    dedupe_vertices: bool = False

    # Remote fetches (seconds); None leaves timeouts to the environment
    fetch_timeout: Optional[float] = None

    # Allow absolute http(s) references in the home
    allow_remote_urls: bool = False

    # Optional process-wide fallback material library (MTL file)
    default_material_library: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ExportConfig":
        """Load configuration from environment variables."""
        return cls(
            resource_root=os.getenv("HOMEMESH_RESOURCE_ROOT", "resources"),
            models_dir=os.getenv("HOMEMESH_MODELS_DIR", "models"),
            default_wall_height=_env_float("HOMEMESH_WALL_HEIGHT", 250.0),
            default_wall_thickness=_env_float("HOMEMESH_WALL_THICKNESS", 10.0),
            ceiling_height=_env_float("HOMEMESH_CEILING_HEIGHT", 250.0),
            precision=int(os.getenv("HOMEMESH_PRECISION", "7")),
            mtl_filename=os.getenv("HOMEMESH_MTL_FILENAME", "materials.mtl"),
            default_name=os.getenv("HOMEMESH_DEFAULT_NAME", "home"),
            uv_vertical_threshold=_env_float("HOMEMESH_UV_THRESHOLD", 1e-3),
            dedupe_vertices=_env_bool("HOMEMESH_DEDUPE_VERTICES", False),
            fetch_timeout=_env_float("HOMEMESH_FETCH_TIMEOUT", None),
            allow_remote_urls=_env_bool("HOMEMESH_ALLOW_REMOTE_URLS", False),
            default_material_library=os.getenv("HOMEMESH_DEFAULT_MTL"),
        )

    def is_remote(self) -> bool:
        """Check if resources are served over HTTP."""
        return self.resource_root.startswith(("http://", "https://"))
