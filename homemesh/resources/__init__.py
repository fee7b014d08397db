"""External resources: model archive lookup, fetching and reading."""

from .archive import ModelArchive
from .fetcher import HttpResourceFetcher, LocalResourceFetcher, ResourceFetcher, create_fetcher
from .resolver import ModelRequest, ModelResolver, ResolverRule, default_rules

__all__ = [
    "ModelArchive",
    "ResourceFetcher",
    "LocalResourceFetcher",
    "HttpResourceFetcher",
    "create_fetcher",
    "ModelResolver",
    "ModelRequest",
    "ResolverRule",
    "default_rules",
]
