"""Data types for the materials system."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

RGB = Tuple[float, float, float]


@dataclass(frozen=True)
class TextureTransform:
    """Planar texture placement: scale (uv per cm), rotation, then offset."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    angle: float = 0.0  # radians
    scale_x: float = 0.01
    scale_y: float = 0.01


@dataclass
class MaterialRecord:
    """One `newmtl` entry of the exported material library."""

    name: str
    ambient: RGB = (0.2, 0.2, 0.2)
    diffuse: RGB = (0.8, 0.8, 0.8)
    specular: RGB = (0.5, 0.5, 0.5)
    shininess: float = 30.0
    transparency: float = 0.0  # 0 = opaque
    texture: Optional[str] = None  # file name of a TextureAsset
    texture_transform: Optional[TextureTransform] = None

    @property
    def dissolve(self) -> float:
        """Opacity as written to the `d` statement."""
        return 1.0 - self.transparency

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "ambient": list(self.ambient),
            "diffuse": list(self.diffuse),
            "specular": list(self.specular),
            "shininess": self.shininess,
            "transparency": self.transparency,
            "texture": self.texture,
        }


@dataclass
class TextureAsset:
    """Texture image bundled with the export."""

    file_name: str
    data: bytes = field(repr=False)
    source: str = ""

    @property
    def size(self) -> int:
        return len(self.data)
