"""Exception types raised by the Figma export pipeline."""

from __future__ import annotations

from typing import Optional


class FigmaError(RuntimeError):
    """Base class for all export pipeline errors."""


class FigmaAPIError(FigmaError):
    """The Figma REST API answered with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Figma API error ({status_code}): {message}")


class FigmaExportError(FigmaError):
    """An image export response carried a top-level ``err`` value."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Figma image export error: {message}")


class FigmaSchemaError(FigmaError):
    """A response payload did not match the expected shape."""


class ImageDownloadError(FigmaError):
    """Downloading a rendered image from its signed URL failed."""

    def __init__(self, key: str, status_code: Optional[int], reason: str = "") -> None:
        self.key = key
        self.status_code = status_code
        detail = f"{status_code}" if status_code is not None else "no response"
        if reason:
            detail = f"{detail} {reason}"
        super().__init__(f"Failed to download image for {key}: {detail}")


class TokenNotFoundError(FigmaError):
    """No Figma API token could be located."""
