"""Figma REST API client with per-tier rate limiting."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import requests

from .config import (
    DEFAULT_REQUEST_TIMEOUT,
    FIGMA_API_BASE,
    TIER1_REQUESTS_PER_MINUTE,
    TIER2_REQUESTS_PER_MINUTE,
)
from .errors import FigmaAPIError, FigmaExportError, FigmaSchemaError
from .rate_limiter import RateLimiter
from .schema import (
    FigmaFile,
    FigmaNode,
    FigmaNodesResponse,
    ImageExportResponse,
    parse_payload,
)

logger = logging.getLogger("parity")


class FigmaClient:
    """Thin async wrapper around the Figma REST endpoints we need.

    Each instance owns one limiter per rate-limit tier: tier 1 for image exports
    and tier 2 for file metadata. ``requests`` calls run in a worker thread so
    waiting on the network never blocks the event loop.
    """

    def __init__(
        self,
        token: str,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = FIGMA_API_BASE,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        tier1_requests_per_minute: float = TIER1_REQUESTS_PER_MINUTE,
        tier2_requests_per_minute: float = TIER2_REQUESTS_PER_MINUTE,
    ) -> None:
        if not token:
            raise ValueError("A Figma API token is required")
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self._owns_session = session is None
        self.session = session or requests.Session()
        # The limiter deadline also covers time spent waiting on the thread pool.
        self.tier1_limiter = RateLimiter(
            tier1_requests_per_minute,
            task_timeout=request_timeout * 2,
            name="tier1",
        )
        self.tier2_limiter = RateLimiter(
            tier2_requests_per_minute,
            task_timeout=request_timeout * 2,
            name="tier2",
        )

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    async def _get_json(
        self, endpoint: str, params: Optional[Mapping[str, str]] = None
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug("GET %s %s", url, dict(params or {}))
        resp = await asyncio.to_thread(
            self.session.get,
            url,
            params=params,
            headers={"X-Figma-Token": self.token},
            timeout=self.request_timeout,
        )
        if not resp.ok:
            raise FigmaAPIError(resp.status_code, resp.text)
        try:
            return resp.json()
        except ValueError as exc:
            raise FigmaSchemaError(f"Response from {endpoint} is not JSON") from exc

    async def request(
        self,
        endpoint: str,
        limiter: RateLimiter,
        params: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Issue a GET against ``endpoint`` through ``limiter``."""
        return await limiter.schedule(lambda: self._get_json(endpoint, params))

    async def get_file(self, file_key: str) -> FigmaFile:
        """Fetch a file's metadata and full document tree."""
        data = await self.request(f"/files/{file_key}", self.tier2_limiter)
        return parse_payload(FigmaFile, data, "file")

    async def get_nodes(
        self, file_key: str, node_ids: Sequence[str]
    ) -> Dict[str, FigmaNode]:
        """Fetch specific nodes; ids unknown to Figma are left out of the result."""
        data = await self.request(
            f"/files/{file_key}/nodes",
            self.tier2_limiter,
            params={"ids": ",".join(node_ids)},
        )
        parsed = parse_payload(FigmaNodesResponse, data, "nodes")
        return {
            node_id: entry.document
            for node_id, entry in parsed.nodes.items()
            if entry is not None
        }

    async def export_images(
        self,
        file_key: str,
        node_ids: Sequence[str],
        image_format: str = "png",
        scale: float = 2.0,
    ) -> Dict[str, Optional[str]]:
        """Request render URLs for ``node_ids`` in one tier 1 call.

        Ids that failed to render come back missing or ``None``; a top-level
        ``err`` fails the whole call.
        """
        data = await self.request(
            f"/images/{file_key}",
            self.tier1_limiter,
            params={
                "ids": ",".join(node_ids),
                "format": image_format,
                "scale": f"{scale:g}",
            },
        )
        parsed = parse_payload(ImageExportResponse, data, "image export")
        if parsed.err:
            raise FigmaExportError(parsed.err)
        return parsed.images

