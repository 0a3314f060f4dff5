"""Data models used throughout the export pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class BoundingBox:
    """Position and size of a node in document coordinate space."""

    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class ExportedFrame:
    """An image-exportable node discovered in a Figma document.

    ``image_url`` stays empty until the frame has been through an export batch and
    ``local_path`` stays unset until the rendered image has been cached locally.
    Frames that were exported but not cached are valid and callers should treat
    them as unavailable for comparison.
    """

    node_id: str
    name: str
    path: str
    width: float
    height: float
    bounding_box: BoundingBox
    image_url: str = ""
    local_path: Optional[Path] = None

    @property
    def exported(self) -> bool:
        return bool(self.image_url)

    @property
    def cached(self) -> bool:
        return self.local_path is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "nodeId": self.node_id,
            "name": self.name,
            "path": self.path,
            "imageUrl": self.image_url,
            "width": self.width,
            "height": self.height,
            "boundingBox": self.bounding_box.to_dict(),
        }
        if self.local_path is not None:
            data["localPath"] = str(self.local_path)
        return data


@dataclass
class RGBA:
    r: float
    g: float
    b: float
    a: float = 1.0


@dataclass
class ColorToken:
    """A named fill style resolved to a concrete colour."""

    name: str
    value: str
    rgba: RGBA


@dataclass
class TypographyToken:
    """A named text style resolved to concrete font settings."""

    name: str
    font_family: str
    font_size: float
    font_weight: float
    line_height: Optional[float] = None
    letter_spacing: Optional[float] = None


@dataclass
class DesignTokens:
    """Colour and typography tokens extracted from a file's shared styles."""

    colors: List[ColorToken] = field(default_factory=list)
    typography: List[TypographyToken] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "colors": [
                {
                    "name": color.name,
                    "value": color.value,
                    "rgba": {
                        "r": color.rgba.r,
                        "g": color.rgba.g,
                        "b": color.rgba.b,
                        "a": color.rgba.a,
                    },
                }
                for color in self.colors
            ],
            "typography": [
                {
                    "name": style.name,
                    "fontFamily": style.font_family,
                    "fontSize": style.font_size,
                    "fontWeight": style.font_weight,
                    "lineHeight": style.line_height,
                    "letterSpacing": style.letter_spacing,
                }
                for style in self.typography
            ],
        }
