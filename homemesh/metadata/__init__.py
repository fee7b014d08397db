"""Device-metadata sidecar accompanying a mesh export."""

from .sidecar import DEVICE_KEYWORDS, build_device_metadata, device_type, is_smart_device

__all__ = [
    "build_device_metadata",
    "is_smart_device",
    "device_type",
    "DEVICE_KEYWORDS",
]
