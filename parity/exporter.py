"""High-level orchestration for exporting and caching Figma frames."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

import requests

from .batching import ImageExportOptions, apply_frame_limit, export_frame_images
from .cache import ImageCache
from .client import FigmaClient
from .config import DEFAULT_BATCH_SIZE, DEFAULT_MAX_FRAMES, ExportConfig, load_token
from .errors import ImageDownloadError
from .frames import find_frames
from .models import DesignTokens, ExportedFrame
from .tokens import extract_design_tokens

logger = logging.getLogger("parity")


@dataclass
class ExportResult:
    """Frames and optional tokens produced by one export run."""

    file_key: str
    frames: List[ExportedFrame]
    total_seconds: float
    tokens: Optional[DesignTokens] = None

    @property
    def cached_count(self) -> int:
        return sum(1 for frame in self.frames if frame.cached)


class FrameExporter:
    """Export every frame of a Figma file and cache the rendered images."""

    def __init__(
        self,
        client: FigmaClient,
        cache: ImageCache,
        *,
        options: Optional[ImageExportOptions] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.client = client
        self.cache = cache
        self.options = options or ImageExportOptions()
        self.batch_size = batch_size

    async def export_all(
        self,
        file_key: str,
        *,
        max_frames: int = DEFAULT_MAX_FRAMES,
        download_images: bool = True,
    ) -> List[ExportedFrame]:
        """Discover, export and optionally download all frames of ``file_key``.

        Fetch and export failures propagate. A frame whose render is missing or
        whose download fails is left without ``local_path``.
        """
        logger.info("Fetching file structure for %s", file_key)
        file = await self.client.get_file(file_key)

        frames = apply_frame_limit(find_frames(file.document), max_frames)
        logger.info("Found %d frames, exporting images", len(frames))
        await export_frame_images(
            self.client,
            file_key,
            frames,
            options=self.options,
            batch_size=self.batch_size,
        )

        if download_images:
            for frame in frames:
                if not frame.image_url:
                    continue
                try:
                    frame.local_path = await self.cache.resolve(
                        frame.node_id, frame.image_url
                    )
                except (ImageDownloadError, requests.RequestException, OSError) as exc:
                    logger.warning("Skipping image for %s: %s", frame.node_id, exc)

        logger.info("Export complete: %d frames", len(frames))
        return frames

    async def extract_design_tokens(self, file_key: str) -> DesignTokens:
        file = await self.client.get_file(file_key)
        return extract_design_tokens(file)


async def run_export(
    config: ExportConfig,
    file_key: str,
    token: Optional[str] = None,
) -> ExportResult:
    """Build a client and cache from ``config`` and export ``file_key``."""
    options = ImageExportOptions(format=config.image_format, scale=config.scale)
    client = FigmaClient(
        token or load_token(),
        request_timeout=config.request_timeout,
    )
    cache = ImageCache(
        config.cache_dir,
        extension=config.image_format,
        timeout=config.request_timeout,
    )
    exporter = FrameExporter(
        client,
        cache,
        options=options,
        batch_size=config.batch_size,
    )
    start = time.perf_counter()
    try:
        frames = await exporter.export_all(
            file_key,
            max_frames=config.max_frames,
            download_images=config.download_images,
        )
        tokens = None
        if config.extract_tokens:
            logger.info("Extracting design tokens")
            tokens = await exporter.extract_design_tokens(file_key)
    finally:
        client.close()
        cache.close()
    return ExportResult(
        file_key=file_key,
        frames=frames,
        total_seconds=time.perf_counter() - start,
        tokens=tokens,
    )
