"""Per-export state shared by the geometry generators."""

from contextlib import contextmanager
from typing import Iterator, Optional

from homemesh.materials.manager import MaterialManager
from homemesh.resources.fetcher import ResourceFetcher

from .projection import DEFAULT_VERTICAL_THRESHOLD
from .types import MeshBuffer


class ExportSession:
    """Geometry buffer plus material manager of one export call.

    A session is created for every export and discarded afterwards, so
    nothing leaks between exports.
    """

    def __init__(
        self,
        fetcher: Optional[ResourceFetcher] = None,
        dedupe_vertices: bool = False,
        precision: int = 7,
        uv_threshold: float = DEFAULT_VERTICAL_THRESHOLD,
    ):
        self.buffer = MeshBuffer(
            dedupe_vertices=dedupe_vertices,
            precision=precision,
            uv_threshold=uv_threshold,
        )
        self.materials = MaterialManager(fetcher)

    @contextmanager
    def savepoint(self) -> Iterator["ExportSession"]:
        """Undo every buffer and material change made inside the block if it raises."""
        buffer_mark = self.buffer.mark()
        materials_mark = self.materials.mark()
        try:
            yield self
        except Exception:
            self.buffer.rollback(buffer_mark)
            self.materials.rollback(materials_mark)
            raise
