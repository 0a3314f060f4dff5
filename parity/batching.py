"""Batched image-export requests for discovered frames."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .client import FigmaClient
from .config import DEFAULT_BATCH_SIZE, MAX_BATCH_SIZE
from .models import ExportedFrame

logger = logging.getLogger("parity")

SUPPORTED_FORMATS = {"png", "jpg", "svg", "pdf"}
MAX_SCALE = 4.0


@dataclass
class ImageExportOptions:
    """Rendering options forwarded to the image export endpoint."""

    format: str = "png"
    scale: float = 2.0

    def __post_init__(self) -> None:
        self.format = self.format.lower()
        if self.format not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported export format {self.format!r}; "
                f"expected one of {sorted(SUPPORTED_FORMATS)}"
            )
        if not 0 < self.scale <= MAX_SCALE:
            raise ValueError(f"Export scale must be in (0, {MAX_SCALE:g}]")


def apply_frame_limit(
    frames: List[ExportedFrame], max_frames: int
) -> List[ExportedFrame]:
    """Keep the first ``max_frames`` frames in discovery order."""
    if max_frames < 0:
        raise ValueError("max_frames must not be negative")
    if len(frames) > max_frames:
        logger.warning("Found %d frames, limiting to %d", len(frames), max_frames)
        return frames[:max_frames]
    return frames


async def export_frame_images(
    client: FigmaClient,
    file_key: str,
    frames: Sequence[ExportedFrame],
    options: Optional[ImageExportOptions] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Sequence[ExportedFrame]:
    """Populate ``image_url`` on each frame, one export request per batch.

    Batches are contiguous slices of ``frames`` issued in order. Frames whose id
    is absent from a response keep an empty ``image_url``; any API or export error
    aborts the whole call.
    """
    if not 1 <= batch_size <= MAX_BATCH_SIZE:
        raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}")
    options = options or ImageExportOptions()

    for start in range(0, len(frames), batch_size):
        batch = frames[start : start + batch_size]
        logger.debug(
            "Exporting batch %d-%d of %d frames",
            start + 1,
            start + len(batch),
            len(frames),
        )
        images = await client.export_images(
            file_key,
            [frame.node_id for frame in batch],
            image_format=options.format,
            scale=options.scale,
        )
        for frame in batch:
            frame.image_url = images.get(frame.node_id) or ""

    missing = sum(1 for frame in frames if not frame.image_url)
    if missing:
        logger.info("%d of %d frames returned no image URL", missing, len(frames))
    return frames
