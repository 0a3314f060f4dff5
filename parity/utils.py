"""Utility helpers for cache-key normalization."""

from __future__ import annotations

import re

CACHE_KEY_PATTERN = re.compile(r"[^a-zA-Z0-9]")


def cache_key_for(value: str) -> str:
    """Map an identifier to a filesystem-safe token.

    Every character outside ``[A-Za-z0-9]`` becomes ``_`` so that Figma node ids
    such as ``12:34`` or ``I1:2;3:4`` map to stable file names.
    """
    if not value:
        raise ValueError("Cache key must not be empty")
    return CACHE_KEY_PATTERN.sub("_", value)
