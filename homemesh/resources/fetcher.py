"""Resource fetching for model archives and texture images."""

import asyncio
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

import aiohttp

from homemesh.config import ExportConfig
from homemesh.errors import ResourceNotFoundError

logger = logging.getLogger(__name__)


def is_url(path: str) -> bool:
    return path.startswith(("http://", "https://"))


class ResourceFetcher:
    """Fetches raw resource bytes by path relative to a resource root."""

    async def fetch(self, path: str) -> bytes:
        raise NotImplementedError

    async def close(self) -> None:
        """Release any held connections."""

    async def __aenter__(self) -> "ResourceFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class LocalResourceFetcher(ResourceFetcher):
    """Reads resources from a local directory.

    Paths are confined to the root directory. Absolute http(s) references
    are delegated to an HTTP fetcher created on first use, and only when
    ``allow_urls`` is set.
    """

    def __init__(
        self,
        root: str = "resources",
        timeout: Optional[float] = None,
        allow_urls: bool = False,
    ):
        self.root = Path(root)
        self.timeout = timeout
        self.allow_urls = allow_urls
        self._http: Optional["HttpResourceFetcher"] = None

    async def fetch(self, path: str) -> bytes:
        if is_url(path):
            if not self.allow_urls:
                raise ResourceNotFoundError(f"Absolute URLs are not allowed: {path}")
            if self._http is None:
                self._http = HttpResourceFetcher(timeout=self.timeout, allow_urls=True)
            return await self._http.fetch(path)

        target = self._resolve(path)
        if not target.is_file():
            raise ResourceNotFoundError(f"Resource not found: {path}")
        try:
            return target.read_bytes()
        except OSError as e:
            raise ResourceNotFoundError(f"Failed to read resource {path}: {e}")

    async def close(self) -> None:
        if self._http is not None:
            await self._http.close()
            self._http = None

    def _resolve(self, path: str) -> Path:
        """Resolve a path under the root; anything escaping it is refused."""
        if "\x00" in path:
            raise ResourceNotFoundError(f"Invalid resource path: {path!r}")
        root = self.root.resolve()
        target = (root / path).resolve()
        if not target.is_relative_to(root):
            logger.warning(f"Refused resource outside {root}: {path}")
            raise ResourceNotFoundError(f"Resource outside resource root: {path}")
        return target


class HttpResourceFetcher(ResourceFetcher):
    """Fetches resources over HTTP with a shared aiohttp session.

    Relative paths must stay under ``base_url``. Absolute URLs are fetched
    only when ``allow_urls`` is set.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: Optional[float] = None,
        allow_urls: bool = False,
    ):
        if base_url and not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url
        self.timeout = timeout
        self.allow_urls = allow_urls
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def url_for(self, path: str) -> str:
        if is_url(path):
            if not self.allow_urls:
                raise ResourceNotFoundError(f"Absolute URLs are not allowed: {path}")
            return path
        if ".." in path.replace("\\", "/").split("/"):
            raise ResourceNotFoundError(f"Resource outside resource root: {path}")
        url = urljoin(self.base_url, path.lstrip("/"))
        if not url.startswith(self.base_url):
            raise ResourceNotFoundError(f"Resource outside resource root: {path}")
        return url

    async def fetch(self, path: str) -> bytes:
        url = self.url_for(path)
        session = await self._get_session()
        try:
            async with session.get(url) as response:
                if response.status != 200:
                    raise ResourceNotFoundError(f"HTTP {response.status} fetching {url}")
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ResourceNotFoundError(f"Failed to fetch {url}: {e}")


def create_fetcher(config: ExportConfig) -> ResourceFetcher:
    """Build the fetcher matching the configured resource root."""
    if config.is_remote():
        logger.debug(f"Fetching resources over HTTP from {config.resource_root}")
        return HttpResourceFetcher(
            config.resource_root,
            timeout=config.fetch_timeout,
            allow_urls=config.allow_remote_urls,
        )
    logger.debug(f"Fetching resources from directory {config.resource_root}")
    return LocalResourceFetcher(
        config.resource_root,
        timeout=config.fetch_timeout,
        allow_urls=config.allow_remote_urls,
    )
