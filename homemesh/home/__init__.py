"""Home model module

Read-only description of a home as exported by the floor-plan editor:
walls, rooms and furniture placements.
"""

from .elements import Furniture, Home, Room, TextureRef, Wall, parse_color

__all__ = [
    "Home",
    "Wall",
    "Room",
    "Furniture",
    "TextureRef",
    "parse_color",
]
