"""MCP server exposing the Figma frame export as a tool."""

from __future__ import annotations

import json
import logging

from mcp.server.fastmcp import FastMCP

from .config import DEFAULT_MAX_FRAMES, ExportConfig
from .exporter import run_export

logger = logging.getLogger("parity.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="parity")


@mcp.tool()
async def figma_export(
    file_key: str,
    max_frames: int = DEFAULT_MAX_FRAMES,
    download_images: bool = True,
) -> str:
    """Export every frame of a Figma file and return the frame list as JSON."""

    config = ExportConfig(max_frames=max_frames, download_images=download_images)
    result = await run_export(config, file_key)
    return json.dumps([frame.to_dict() for frame in result.frames], indent=2)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
