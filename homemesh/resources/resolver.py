"""Model reference resolution.

Furniture pieces reference their 3D model in several URL shapes depending on
how the home was created. Each shape is described by one rule below; the
first matching rule turns the reference into the path of a model archive.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

if TYPE_CHECKING:
    from homemesh.home.elements import Furniture


@dataclass(frozen=True)
class ModelRequest:
    """Canonical request to load one model archive."""

    archive: str
    rule: str  # name of the rule that produced it
    source: str  # original reference


@dataclass(frozen=True)
class ResolverRule:
    """Pattern plus the rewrite applied to its match."""

    name: str
    pattern: "re.Pattern[str]"
    rewrite: Callable[[re.Match, str], str]


def default_rules() -> List[ResolverRule]:
    """Rules in priority order. The rewrite receives the match and models_dir."""
    return [
        # jar:file:/path/catalog.jar!/folder/chair.obj
        ResolverRule(
            name="archive_entry_mesh",
            pattern=re.compile(r"^jar:[^!]+!/(?:.*/)?([^/]+)\.obj$", re.IGNORECASE),
            rewrite=lambda m, models_dir: f"{models_dir}/{m.group(1)}.zip",
        ),
        # jar:file:/path/catalog.jar!/models/chair.zip; the inner path is taken
        # relative to the resource root, not to models_dir
        ResolverRule(
            name="archive_entry",
            pattern=re.compile(r"^jar:[^!]+!/(.+)$", re.IGNORECASE),
            rewrite=lambda m, models_dir: m.group(1),
        ),
        # models/chair.obj, http://host/lib/chair.obj
        ResolverRule(
            name="mesh_file",
            pattern=re.compile(r"^(?:.*/)?([^/]+)\.obj$", re.IGNORECASE),
            rewrite=lambda m, models_dir: f"{models_dir}/{m.group(1)}.zip",
        ),
        # anything else is taken as an archive path already
        ResolverRule(
            name="pre_resolved",
            pattern=re.compile(r"^.+$"),
            rewrite=lambda m, models_dir: m.group(0),
        ),
    ]


class ModelResolver:
    """Turns furniture model references into model archive requests."""

    def __init__(self, models_dir: str = "models", rules: Optional[List[ResolverRule]] = None):
        self.models_dir = models_dir.rstrip("/")
        self.rules = rules if rules is not None else default_rules()

    def resolve_reference(self, reference: str) -> Optional[ModelRequest]:
        """Resolve an explicit model reference; None when no rule matches."""
        reference = reference.strip()
        if not reference:
            return None
        for rule in self.rules:
            match = rule.pattern.match(reference)
            if match:
                archive = rule.rewrite(match, self.models_dir)
                return ModelRequest(archive=archive, rule=rule.name, source=reference)
        return None

    def resolve_catalog_id(self, catalog_id: str) -> Optional[ModelRequest]:
        """Build the conventional archive path for a catalog identifier."""
        catalog_id = catalog_id.strip()
        if not catalog_id:
            return None
        return ModelRequest(
            archive=f"{self.models_dir}/{catalog_id}.zip",
            rule="catalog_id",
            source=catalog_id,
        )

    def resolve(self, piece: "Furniture") -> Optional[ModelRequest]:
        """Explicit model reference first, then catalog id."""
        if piece.model:
            request = self.resolve_reference(piece.model)
            if request is not None:
                return request
        if piece.catalog_id:
            return self.resolve_catalog_id(piece.catalog_id)
        return None

    def describe(self) -> List[Tuple[str, str]]:
        """List (rule name, pattern) pairs in priority order."""
        return [(rule.name, rule.pattern.pattern) for rule in self.rules]
