"""Device-metadata sidecar for the exported mesh.

The sidecar lists smart devices placed in the home together with room and
wall outlines, converted to meters and degrees for the consuming engine.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from homemesh.config import ExportConfig
from homemesh.home.elements import Furniture, Home, Room, Wall

SIDECAR_VERSION = "1.0"

CM_TO_M = 0.01
CM2_TO_M2 = 0.0001

DEVICE_KEYWORDS = (
    "sensor",
    "temperature",
    "humidity",
    "motion",
    "light",
    "camera",
    "thermostat",
    "switch",
    "dimmer",
    "plug",
    "speaker",
    "display",
    "monitor",
    "detector",
)

ENTITY_ID_PROPERTY = "haEntityId"


def is_smart_device(piece: Furniture) -> bool:
    """Check the piece's name, then its catalog id, for device keywords."""
    name = (piece.name or "").lower()
    if any(keyword in name for keyword in DEVICE_KEYWORDS):
        return True
    catalog_id = (piece.catalog_id or "").lower()
    return any(keyword in catalog_id for keyword in DEVICE_KEYWORDS)


def device_type(piece: Furniture) -> str:
    """Classify a device from keywords in its name and catalog id."""
    text = f"{piece.name or ''} {piece.catalog_id or ''}".lower()

    if "temperature" in text or "temp" in text:
        return "temperature_sensor"
    if "humidity" in text:
        return "humidity_sensor"
    if "motion" in text or "pir" in text:
        return "motion_sensor"
    if "light" in text and "sensor" in text:
        return "light_sensor"
    if "camera" in text:
        return "camera"
    if "thermostat" in text:
        return "thermostat"
    if "switch" in text:
        return "switch"
    if "dimmer" in text:
        return "dimmer"
    if "plug" in text:
        return "smart_plug"
    return "unknown"


def _device_entry(piece: Furniture, index: int) -> Dict[str, Any]:
    entry = {
        "id": f"device_{index}",
        "name": piece.name or f"Device {index}",
        "type": device_type(piece),
        "catalogId": piece.catalog_id or "",
        "position": {
            "x": piece.x * CM_TO_M,
            "y": piece.elevation * CM_TO_M,
            "z": piece.y * CM_TO_M,
        },
        "rotation": {"y": math.degrees(piece.angle)},
        "isIoTDevice": True,
        "dimensions": {
            "width": piece.width * CM_TO_M,
            "height": piece.height * CM_TO_M,
            "depth": piece.depth * CM_TO_M,
        },
    }
    entity_id = piece.properties.get(ENTITY_ID_PROPERTY)
    if entity_id:
        entry["haEntityId"] = entity_id
    return entry


def _room_entry(room: Room, index: int, ceiling_height: float) -> Dict[str, Any]:
    return {
        "id": f"room_{index}",
        "name": room.name or f"Room {index}",
        "points": [{"x": x * CM_TO_M, "z": y * CM_TO_M} for x, y in room.points],
        "area": room.area * CM2_TO_M2,
        "floorLevel": 0,
        "ceilingHeight": ceiling_height * CM_TO_M,
    }


def _wall_entry(wall: Wall, index: int, config: ExportConfig) -> Dict[str, Any]:
    height = wall.height if wall.height is not None else config.default_wall_height
    thickness = wall.thickness if wall.thickness is not None else config.default_wall_thickness
    return {
        "id": f"wall_{index}",
        "start": {"x": wall.x_start * CM_TO_M, "z": wall.y_start * CM_TO_M},
        "end": {"x": wall.x_end * CM_TO_M, "z": wall.y_end * CM_TO_M},
        "height": height * CM_TO_M,
        "thickness": thickness * CM_TO_M,
    }


def build_device_metadata(
    home: Home,
    exported_at: Optional[datetime] = None,
    config: Optional[ExportConfig] = None,
) -> Dict[str, Any]:
    """
    Build the device-metadata sidecar of a home.

    Args:
        home: Home being exported
        exported_at: Export timestamp; defaults to now (UTC)
        config: Supplies wall and ceiling defaults

    Returns:
        JSON-serializable dictionary
    """
    config = config or ExportConfig()
    exported_at = exported_at or datetime.now(timezone.utc)

    devices: List[Dict[str, Any]] = []
    for piece in home.furniture:
        if is_smart_device(piece):
            devices.append(_device_entry(piece, len(devices)))

    rooms = [_room_entry(room, i, config.ceiling_height) for i, room in enumerate(home.rooms)]
    walls = [_wall_entry(wall, i, config) for i, wall in enumerate(home.walls)]

    return {
        "version": SIDECAR_VERSION,
        "exportedAt": exported_at.isoformat(),
        "unitsystem": "meters",
        "coordinateSystem": {
            "origin": "center",
            "yAxis": "up",
            "zAxis": "forward",
        },
        "devices": devices,
        "rooms": rooms,
        "walls": walls,
        "metadata": {
            "deviceCount": len(devices),
            "roomCount": len(rooms),
            "wallCount": len(walls),
        },
    }
