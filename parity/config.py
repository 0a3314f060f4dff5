"""Configuration objects and constants for the Figma exporter."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .errors import TokenNotFoundError

logger = logging.getLogger("parity")

FIGMA_API_BASE = "https://api.figma.com/v1"
DEFAULT_CACHE_DIR = Path(".parity-cache") / "figma"
CACHE_DIR_ENV = "PARITY_CACHE_DIR"
TOKEN_ENV = "FIGMA_TOKEN"

# Requests per minute for each Figma rate-limit tier.
TIER1_REQUESTS_PER_MINUTE = 20
TIER2_REQUESTS_PER_MINUTE = 100

DEFAULT_MAX_FRAMES = 100
DEFAULT_BATCH_SIZE = 100
MAX_BATCH_SIZE = 500
DEFAULT_REQUEST_TIMEOUT = 30.0


def default_cache_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    override = env.get(CACHE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CACHE_DIR


@dataclass
class ExportConfig:
    """Top-level settings that control a frame export run."""

    cache_dir: Path = field(default_factory=default_cache_dir)
    max_frames: int = DEFAULT_MAX_FRAMES
    download_images: bool = True
    image_format: str = "png"
    scale: float = 2.0
    batch_size: int = DEFAULT_BATCH_SIZE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    extract_tokens: bool = False
    write_json: bool = False


def token_search_paths() -> Sequence[Path]:
    return (
        Path.home() / ".config" / "figma" / "token",
        Path(".figma-token"),
    )


def load_token(
    environ: Optional[Mapping[str, str]] = None,
    search_paths: Optional[Sequence[Path]] = None,
) -> str:
    """Locate a Figma personal access token.

    The ``FIGMA_TOKEN`` environment variable wins; otherwise the first readable,
    non-empty token file from ``search_paths`` is used.
    """
    env = os.environ if environ is None else environ
    token = env.get(TOKEN_ENV, "").strip()
    if token:
        return token

    for path in search_paths if search_paths is not None else token_search_paths():
        try:
            token = path.read_text(encoding="utf-8").strip()
        except OSError:
            continue
        if token:
            logger.debug("Loaded Figma token from %s", path)
            return token

    raise TokenNotFoundError(
        "Figma token not found. Set FIGMA_TOKEN or create ~/.config/figma/token"
    )
