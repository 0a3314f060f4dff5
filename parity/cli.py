"""Command-line entry point for the Figma frame exporter."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Sequence

import requests

from .cache import ImageCache
from .config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_FRAMES,
    DEFAULT_REQUEST_TIMEOUT,
    ExportConfig,
    default_cache_dir,
)
from .errors import FigmaError
from .exporter import ExportResult, run_export

logger = logging.getLogger("parity.cli")

SUMMARY_LIMIT = 20


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("figma-export", *argv)


def _add_output_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        default=None,
        type=Path,
        help="Cache directory for exported images (default: .parity-cache/figma)",
    )


def _add_export_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file_key", help="The Figma file key (from the file URL)")
    _add_output_argument(parser)
    parser.add_argument(
        "--max",
        dest="max_frames",
        type=int,
        default=DEFAULT_MAX_FRAMES,
        help="Maximum number of frames to export",
    )
    parser.add_argument(
        "--no-cache",
        dest="download_images",
        action="store_false",
        help="Only request render URLs; do not download images",
    )
    parser.add_argument(
        "--json",
        dest="write_json",
        action="store_true",
        help="Write frame data to frames.json in the output directory",
    )
    parser.add_argument(
        "--tokens",
        dest="extract_tokens",
        action="store_true",
        help="Also extract colour and typography tokens",
    )
    parser.add_argument(
        "--format",
        dest="image_format",
        default="png",
        choices=("png", "jpg", "svg", "pdf"),
        help="Image format to render",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=2.0,
        help="Render scale, above 0 and at most 4",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help="Node ids per export request (at most 500)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="parity",
        description="Export Figma frames as images with rate limiting and local caching.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser(
        "figma-export", help="Export every frame of a Figma file"
    )
    _add_export_arguments(export_parser)

    clear_parser = subparsers.add_parser(
        "clear-cache", help="Delete the local image cache"
    )
    _add_output_argument(clear_parser)
    clear_parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def write_json_outputs(result: ExportResult, output_dir: Path) -> list[Path]:
    """Write ``frames.json`` (and ``tokens.json`` when present) to ``output_dir``."""
    output_dir.mkdir(parents=True, exist_ok=True)
    frames_path = output_dir / "frames.json"
    frames_path.write_text(
        json.dumps([frame.to_dict() for frame in result.frames], indent=2),
        encoding="utf-8",
    )
    written = [frames_path]
    if result.tokens is not None:
        tokens_path = output_dir / "tokens.json"
        tokens_path.write_text(json.dumps(result.tokens.to_dict(), indent=2), encoding="utf-8")
        written.append(tokens_path)
    return written


def _log_summary(result: ExportResult) -> None:
    logger.info(
        "Exported %d frames in %.1fs (%d cached)",
        len(result.frames),
        result.total_seconds,
        result.cached_count,
    )
    for frame in result.frames[:SUMMARY_LIMIT]:
        logger.info(
            "%s %s (%gx%g)",
            "cached" if frame.cached else "remote",
            frame.path,
            frame.width,
            frame.height,
        )
    if len(result.frames) > SUMMARY_LIMIT:
        logger.info("... and %d more", len(result.frames) - SUMMARY_LIMIT)
    if result.tokens is not None:
        logger.info(
            "Design tokens: %d colors, %d text styles",
            len(result.tokens.colors),
            len(result.tokens.typography),
        )


def _run_export(args: argparse.Namespace) -> int:
    _configure_logging(args.verbose)
    config = ExportConfig(
        cache_dir=(args.output or default_cache_dir()).resolve(),
        max_frames=args.max_frames,
        download_images=args.download_images,
        image_format=args.image_format,
        scale=args.scale,
        batch_size=args.batch_size,
        request_timeout=args.timeout,
        extract_tokens=args.extract_tokens,
        write_json=args.write_json,
    )
    logger.debug(
        "Exporting %s (max frames: %d, download: %s, output: %s)",
        args.file_key,
        config.max_frames,
        config.download_images,
        config.cache_dir,
    )
    try:
        result = asyncio.run(run_export(config, args.file_key))
    except (FigmaError, ValueError, asyncio.TimeoutError, requests.RequestException) as exc:
        logger.error("%s", exc)
        return 1

    _log_summary(result)
    if config.write_json:
        for path in write_json_outputs(result, config.cache_dir):
            logger.info("Saved %s", path)
    return 0


def _run_clear_cache(args: argparse.Namespace) -> int:
    _configure_logging(args.verbose)
    cache = ImageCache(args.output or default_cache_dir())
    try:
        cache.clear()
    finally:
        cache.close()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    if args.command == "figma-export":
        return _run_export(args)
    return _run_clear_cache(args)


if __name__ == "__main__":
    sys.exit(main())
