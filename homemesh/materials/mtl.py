"""Material-library (MTL) text parsing and the default material library."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .types import RGB

logger = logging.getLogger(__name__)


@dataclass
class MtlEntry:
    """Surface properties declared by one `newmtl` block."""

    name: str
    ambient: Optional[RGB] = None
    diffuse: Optional[RGB] = None
    specular: Optional[RGB] = None
    shininess: Optional[float] = None
    transparency: Optional[float] = None
    texture: Optional[str] = None  # map_Kd file reference


def _parse_rgb(values: List[str]) -> Optional[RGB]:
    if not values:
        return None
    # "Kd spectral ..." and "Kd xyz ..." are not supported
    if values[0].lower() in ("spectral", "xyz"):
        return None
    numbers = [float(v) for v in values[:3]]
    if len(numbers) == 1:
        numbers = numbers * 3
    if len(numbers) != 3:
        return None
    return (numbers[0], numbers[1], numbers[2])


# map_* options with a fixed argument count; -o, -s and -t take one to three numbers
_MAP_OPTIONS = {
    "-blendu": 1, "-blendv": 1, "-bm": 1, "-boost": 1, "-cc": 1, "-clamp": 1,
    "-imfchan": 1, "-mm": 2, "-texres": 1,
}


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


def _parse_map(values: List[str]) -> Optional[str]:
    """Drop map statement options, keep the file name (which may contain spaces)."""
    i = 0
    while i < len(values) and values[i].startswith("-"):
        option = values[i].lower()
        i += 1
        if option in ("-o", "-s", "-t"):
            taken = 0
            while taken < 3 and i < len(values) and _is_number(values[i]):
                i += 1
                taken += 1
        else:
            i += _MAP_OPTIONS.get(option, 1)
    name = " ".join(values[i:]).strip()
    return name or None


def parse_mtl(text: str) -> Dict[str, MtlEntry]:
    """Parse material-library text into entries keyed by lower-cased name.

    Malformed numeric statements are skipped with a debug log; the first
    declaration of a name wins.
    """
    entries: Dict[str, MtlEntry] = {}
    current: Optional[MtlEntry] = None

    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        keyword, values = parts[0], parts[1:]
        key = keyword.lower()

        if key == "newmtl":
            name = " ".join(values).strip()
            if not name:
                current = None
                continue
            current = MtlEntry(name=name)
            entries.setdefault(name.lower(), current)
            continue

        if current is None:
            continue

        try:
            if key == "ka":
                current.ambient = _parse_rgb(values)
            elif key == "kd":
                current.diffuse = _parse_rgb(values)
            elif key == "ks":
                current.specular = _parse_rgb(values)
            elif key == "ns":
                current.shininess = float(values[0])
            elif key == "d":
                # "d -halo 0.5"
                number = values[-1]
                current.transparency = 1.0 - float(number)
            elif key == "tr":
                current.transparency = float(values[0])
            elif key == "map_kd":
                current.texture = _parse_map(values)
        except (ValueError, IndexError):
            logger.debug(f"Skipping malformed MTL statement on line {line_number}: {line}")

    return entries


class DefaultMaterialLibrary:
    """Read-only fallback materials shared by every export in a process.

    Used when a model refers to a material its own archive does not declare.
    """

    def __init__(self, entries: Optional[Dict[str, MtlEntry]] = None):
        self.entries: Dict[str, MtlEntry] = {
            name.lower(): entry for name, entry in (entries or {}).items()
        }

    @classmethod
    def from_text(cls, text: str) -> "DefaultMaterialLibrary":
        return cls(parse_mtl(text))

    @classmethod
    def from_file(cls, path: Optional[str]) -> "DefaultMaterialLibrary":
        """Load a library from an MTL file; a missing file gives an empty library."""
        if not path:
            return cls()
        library_path = Path(path)
        if not library_path.exists():
            logger.warning(f"Default material library not found: {library_path}")
            return cls()
        try:
            text = library_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Failed to load default material library: {e}")
            return cls()
        library = cls.from_text(text)
        logger.info(f"Loaded {library.count()} default materials from {library_path}")
        return library

    def get(self, name: str) -> Optional[MtlEntry]:
        """Case-insensitive lookup."""
        return self.entries.get(name.lower())

    def count(self) -> int:
        return len(self.entries)

    def names(self) -> List[str]:
        return sorted(entry.name for entry in self.entries.values())
