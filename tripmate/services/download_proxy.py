"""
Download proxy for stored assets.

Fetches a remote asset on behalf of the browser so it can be saved with a
chosen file name. Recently fetched assets are kept in a bounded LRU cache.

Usage:
    >>> proxy = DownloadProxy()
    >>> asset = await proxy.fetch("https://cdn.example.com/trips/t1/items/1_a.jpg")
    >>> len(asset.content)
"""

import threading
from collections import OrderedDict
from dataclasses import dataclass

import httpx

from tripmate.config import settings
from tripmate.errors import DownloadFailedError
from tripmate.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class FetchedAsset:
    """Bytes of a proxied asset."""

    content: bytes
    content_type: str
    source: str  # "cache" | "remote"

    @property
    def size(self) -> int:
        return len(self.content)


class AssetCache:
    """
    Least-recently-used cache of fetched assets keyed by URL.

    Bounded by entry count and by total content bytes; the least recently
    used entry is evicted first. Assets larger than max_entry_bytes are
    never cached.
    """

    def __init__(
        self,
        max_entries: int,
        max_bytes: int | None = None,
        max_entry_bytes: int | None = None,
    ):
        self.max_entries = max_entries
        self.max_bytes = settings.asset_cache_max_bytes if max_bytes is None else max_bytes
        self.max_entry_bytes = (
            settings.asset_cache_max_entry_bytes if max_entry_bytes is None else max_entry_bytes
        )
        self._entries: OrderedDict[str, tuple[bytes, str]] = OrderedDict()
        self._size = 0
        self._lock = threading.Lock()

    @property
    def size_bytes(self) -> int:
        with self._lock:
            return self._size

    def get(self, url: str) -> tuple[bytes, str] | None:
        with self._lock:
            entry = self._entries.get(url)
            if entry is not None:
                self._entries.move_to_end(url)
            return entry

    def put(self, url: str, content: bytes, content_type: str) -> None:
        if self.max_entries <= 0:
            return
        if len(content) > min(self.max_entry_bytes, self.max_bytes):
            logger.debug("asset_cache_skipped", url=url, size_bytes=len(content))
            return
        with self._lock:
            previous = self._entries.pop(url, None)
            if previous is not None:
                self._size -= len(previous[0])
            self._entries[url] = (content, content_type)
            self._size += len(content)
            while len(self._entries) > self.max_entries or self._size > self.max_bytes:
                evicted, (evicted_content, _) = self._entries.popitem(last=False)
                self._size -= len(evicted_content)
                logger.debug("asset_cache_evicted", url=evicted, size_bytes=len(evicted_content))

    def __contains__(self, url: str) -> bool:
        with self._lock:
            return url in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._size = 0


class DownloadProxy:
    """
    Fetches remote assets through httpx with an LRU cache in front.

    Args:
        cache: Shared cache (defaults to a new one sized from settings)
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        cache: AssetCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cache = cache if cache is not None else AssetCache(settings.asset_cache_max_entries)
        self.transport = transport
        self.timeout = settings.download_timeout_seconds

    async def fetch(self, url: str) -> FetchedAsset:
        """
        Get the bytes behind url.

        Raises:
            DownloadFailedError: With the upstream status for non-2xx answers,
                500 for transport errors
        """
        cached = self.cache.get(url)
        if cached is not None:
            logger.debug("asset_cache_hit", url=url)
            content, content_type = cached
            return FetchedAsset(content=content, content_type=content_type, source="cache")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException as e:
            logger.warning("asset_download_timeout", url=url)
            raise DownloadFailedError("Download failed", url=url) from e
        except httpx.HTTPError as e:
            logger.error("asset_download_failed", url=url, error=str(e))
            raise DownloadFailedError("Download failed", url=url) from e

        if not response.is_success:
            logger.warning(
                "asset_download_rejected",
                url=url,
                status_code=response.status_code,
            )
            raise DownloadFailedError(
                "Failed to fetch file",
                status_code=response.status_code,
                url=url,
            )

        content = response.content
        content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE
        self.cache.put(url, content, content_type)

        logger.info(
            "asset_downloaded",
            url=url,
            size_bytes=len(content),
            content_type=content_type,
        )

        return FetchedAsset(content=content, content_type=content_type, source="remote")


# Process-wide cache shared by every request
asset_cache = AssetCache(settings.asset_cache_max_entries)


async def fetch_asset(url: str) -> FetchedAsset:
    """Fetch through a proxy backed by the process-wide cache."""
    return await DownloadProxy(cache=asset_cache).fetch(url)
