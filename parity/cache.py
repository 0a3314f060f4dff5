"""Local cache of rendered frame images keyed by node id."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

import requests

from .config import DEFAULT_REQUEST_TIMEOUT
from .errors import ImageDownloadError
from .utils import cache_key_for

logger = logging.getLogger("parity")


class ImageCache:
    """Resolve signed image URLs to files under ``cache_dir``.

    The file name depends only on the key, never on the URL or the bytes, so a
    frame re-rendered upstream under the same node id keeps serving the old file
    until the cache is cleared. Writes are not locked; concurrent runs that miss
    on the same key both download and the last writer wins.
    """

    def __init__(
        self,
        cache_dir: Path,
        *,
        extension: str = "png",
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.extension = extension.lstrip(".")
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def path_for(self, key: str) -> Path:
        return self.cache_dir / f"{cache_key_for(key)}.{self.extension}"

    async def resolve(self, key: str, url: str) -> Path:
        """Return the cached file for ``key``, downloading ``url`` on a miss."""
        destination = self.path_for(key)
        if destination.exists():
            logger.debug("Using cached image for %s", key)
            return destination

        logger.info("Downloading image for %s", key)
        resp = await asyncio.to_thread(self.session.get, url, timeout=self.timeout)
        if not resp.ok:
            raise ImageDownloadError(key, resp.status_code, resp.reason or "")

        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = destination.with_suffix(destination.suffix + ".part")
        try:
            partial.write_bytes(resp.content)
            os.replace(partial, destination)
        except OSError:
            partial.unlink(missing_ok=True)
            raise
        return destination

    def clear(self) -> None:
        """Remove the whole cache directory; a missing directory is fine."""
        try:
            shutil.rmtree(self.cache_dir)
        except FileNotFoundError:
            return
        logger.info("Cache cleared: %s", self.cache_dir)
