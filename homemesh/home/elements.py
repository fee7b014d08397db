"""Home model element data classes read by the exporter.

Coordinates follow the floor-plan editor: centimeters, plan axes x/y,
elevation measured upward from the floor. Every field has a default so a
partially described element is still exportable.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from homemesh.materials.types import TextureTransform

Point2D = Tuple[float, float]
Color = int  # 0xRRGGBB


def parse_color(value: Union[int, str, None]) -> Optional[Color]:
    """Normalize a color given as an int or a '#RRGGBB' / '0xRRGGBB' string.

    Any alpha byte above the RGB channels is dropped.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid color: {value!r}")
    if isinstance(value, int):
        return value & 0xFFFFFF
    text = str(value).strip()
    if text.startswith("#"):
        text = text[1:]
    elif text.lower().startswith("0x"):
        text = text[2:]
    try:
        return int(text, 16) & 0xFFFFFF
    except ValueError:
        raise ValueError(f"Invalid color: {value!r}")


def _number(data: Dict[str, Any], key: str, default: Optional[float]) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return default
    return float(value)


@dataclass
class TextureRef:
    """Texture applied to a wall side, floor or ceiling."""

    image: str = ""  # path relative to the resource root, or URL
    width: float = 100.0  # cm covered by one tile
    height: float = 100.0
    x_offset: float = 0.0  # fraction of a tile
    y_offset: float = 0.0
    angle: float = 0.0  # radians
    scale: float = 1.0

    def transform(self) -> TextureTransform:
        """Planar projection parameters for this texture."""
        width = self.width if self.width > 0 else 100.0
        height = self.height if self.height > 0 else 100.0
        scale = self.scale if self.scale > 0 else 1.0
        return TextureTransform(
            offset_x=self.x_offset,
            offset_y=self.y_offset,
            angle=self.angle,
            scale_x=1.0 / (width * scale),
            scale_y=1.0 / (height * scale),
        )

    def to_dict(self) -> dict:
        return {
            "image": self.image,
            "width": self.width,
            "height": self.height,
            "x_offset": self.x_offset,
            "y_offset": self.y_offset,
            "angle": self.angle,
            "scale": self.scale,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["TextureRef"]:
        """Create TextureRef from dictionary; None or an image-less dict gives None."""
        if not data:
            return None
        if isinstance(data, str):
            return cls(image=data)
        image = data.get("image")
        if not image:
            return None
        return cls(
            image=str(image),
            width=_number(data, "width", 100.0),
            height=_number(data, "height", 100.0),
            x_offset=_number(data, "x_offset", 0.0),
            y_offset=_number(data, "y_offset", 0.0),
            angle=_number(data, "angle", 0.0),
            scale=_number(data, "scale", 1.0),
        )


@dataclass
class Wall:
    """A straight wall between two plan points."""

    x_start: float = 0.0
    y_start: float = 0.0
    x_end: float = 0.0
    y_end: float = 0.0
    height: Optional[float] = None  # None -> exporter default
    thickness: Optional[float] = None
    left_color: Optional[Color] = None
    right_color: Optional[Color] = None
    left_texture: Optional[TextureRef] = None
    right_texture: Optional[TextureRef] = None
    name: str = ""

    @property
    def length(self) -> float:
        return math.hypot(self.x_end - self.x_start, self.y_end - self.y_start)

    @property
    def start_point(self) -> Point2D:
        return (self.x_start, self.y_start)

    @property
    def end_point(self) -> Point2D:
        return (self.x_end, self.y_end)

    def has_right_side(self) -> bool:
        """Check if the right side carries its own color or texture."""
        return self.right_color is not None or self.right_texture is not None

    def to_dict(self) -> dict:
        return {
            "x_start": self.x_start,
            "y_start": self.y_start,
            "x_end": self.x_end,
            "y_end": self.y_end,
            "height": self.height,
            "thickness": self.thickness,
            "left_color": self.left_color,
            "right_color": self.right_color,
            "left_texture": self.left_texture.to_dict() if self.left_texture else None,
            "right_texture": self.right_texture.to_dict() if self.right_texture else None,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Wall":
        """Create Wall from dictionary."""
        return cls(
            x_start=_number(data, "x_start", 0.0),
            y_start=_number(data, "y_start", 0.0),
            x_end=_number(data, "x_end", 0.0),
            y_end=_number(data, "y_end", 0.0),
            height=_number(data, "height", None),
            thickness=_number(data, "thickness", None),
            left_color=parse_color(data.get("left_color")),
            right_color=parse_color(data.get("right_color")),
            left_texture=TextureRef.from_dict(data.get("left_texture")),
            right_texture=TextureRef.from_dict(data.get("right_texture")),
            name=data.get("name") or "",
        )


@dataclass
class Room:
    """A room outline with floor and ceiling finishes."""

    points: List[Point2D] = field(default_factory=list)
    name: str = ""
    floor_color: Optional[Color] = None
    floor_texture: Optional[TextureRef] = None
    ceiling_color: Optional[Color] = None
    ceiling_texture: Optional[TextureRef] = None

    @property
    def area(self) -> float:
        """Calculate room area using shoelace formula."""
        if len(self.points) < 3:
            return 0.0
        n = len(self.points)
        area = 0.0
        for i in range(n):
            j = (i + 1) % n
            area += self.points[i][0] * self.points[j][1]
            area -= self.points[j][0] * self.points[i][1]
        return abs(area) / 2.0

    def to_dict(self) -> dict:
        return {
            "points": [list(p) for p in self.points],
            "name": self.name,
            "floor_color": self.floor_color,
            "floor_texture": self.floor_texture.to_dict() if self.floor_texture else None,
            "ceiling_color": self.ceiling_color,
            "ceiling_texture": self.ceiling_texture.to_dict() if self.ceiling_texture else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Room":
        """Create Room from dictionary."""
        points = [(float(p[0]), float(p[1])) for p in (data.get("points") or [])]
        return cls(
            points=points,
            name=data.get("name") or "",
            floor_color=parse_color(data.get("floor_color")),
            floor_texture=TextureRef.from_dict(data.get("floor_texture")),
            ceiling_color=parse_color(data.get("ceiling_color")),
            ceiling_texture=TextureRef.from_dict(data.get("ceiling_texture")),
        )


@dataclass
class Furniture:
    """A placed furniture piece."""

    x: float = 0.0
    y: float = 0.0
    elevation: float = 0.0
    angle: float = 0.0  # yaw, radians
    width: float = 50.0
    depth: float = 50.0
    height: float = 50.0
    color: Optional[Color] = None
    model: Optional[str] = None  # model URL as stored by the editor
    catalog_id: Optional[str] = None
    name: str = ""
    properties: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "elevation": self.elevation,
            "angle": self.angle,
            "width": self.width,
            "depth": self.depth,
            "height": self.height,
            "color": self.color,
            "model": self.model,
            "catalog_id": self.catalog_id,
            "name": self.name,
            "properties": dict(self.properties),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Furniture":
        """Create Furniture from dictionary."""
        return cls(
            x=_number(data, "x", 0.0),
            y=_number(data, "y", 0.0),
            elevation=_number(data, "elevation", 0.0),
            angle=_number(data, "angle", 0.0),
            width=_number(data, "width", 50.0),
            depth=_number(data, "depth", 50.0),
            height=_number(data, "height", 50.0),
            color=parse_color(data.get("color")),
            model=data.get("model") or None,
            catalog_id=data.get("catalog_id") or None,
            name=data.get("name") or "",
            properties={str(k): str(v) for k, v in (data.get("properties") or {}).items()},
        )


@dataclass
class Home:
    """Complete home: ordered walls, rooms and furniture."""

    name: str = ""
    walls: List[Wall] = field(default_factory=list)
    rooms: List[Room] = field(default_factory=list)
    furniture: List[Furniture] = field(default_factory=list)

    @property
    def element_count(self) -> int:
        return len(self.walls) + len(self.rooms) + len(self.furniture)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "walls": [w.to_dict() for w in self.walls],
            "rooms": [r.to_dict() for r in self.rooms],
            "furniture": [f.to_dict() for f in self.furniture],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Home":
        """Create Home from dictionary. Missing lists are treated as empty."""
        return cls(
            name=data.get("name") or "",
            walls=[Wall.from_dict(w) for w in (data.get("walls") or []) if w is not None],
            rooms=[Room.from_dict(r) for r in (data.get("rooms") or []) if r is not None],
            furniture=[
                Furniture.from_dict(f) for f in (data.get("furniture") or []) if f is not None
            ],
        )
