"""Pydantic models describing the Figma REST API payloads we consume."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import FigmaSchemaError

logger = logging.getLogger("parity")

M = TypeVar("M", bound=BaseModel)


class _FigmaModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Rectangle(_FigmaModel):
    x: float
    y: float
    width: float
    height: float


class Color(_FigmaModel):
    r: float
    g: float
    b: float
    a: float = 1.0


class Paint(_FigmaModel):
    type: str
    visible: bool = True
    opacity: float = 1.0
    color: Optional[Color] = None


class TypeStyle(_FigmaModel):
    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    font_size: Optional[float] = Field(default=None, alias="fontSize")
    font_weight: Optional[float] = Field(default=None, alias="fontWeight")
    line_height_px: Optional[float] = Field(default=None, alias="lineHeightPx")
    letter_spacing: Optional[float] = Field(default=None, alias="letterSpacing")


class FigmaNode(_FigmaModel):
    """A node of the recursive document tree.

    ``type`` is kept as an open string; Figma adds node kinds over time and only
    the exportable ones matter to us.
    """

    id: str
    name: str
    type: str
    children: List["FigmaNode"] = Field(default_factory=list)
    absolute_bounding_box: Optional[Rectangle] = Field(
        default=None, alias="absoluteBoundingBox"
    )
    absolute_render_bounds: Optional[Rectangle] = Field(
        default=None, alias="absoluteRenderBounds"
    )
    background_color: Optional[Color] = Field(default=None, alias="backgroundColor")
    fills: List[Paint] = Field(default_factory=list)
    strokes: List[Any] = Field(default_factory=list)
    effects: List[Any] = Field(default_factory=list)
    style: Optional[TypeStyle] = None
    styles: Dict[str, str] = Field(default_factory=dict)


FigmaNode.model_rebuild()


class StyleMetadata(_FigmaModel):
    name: str = ""
    style_type: str = Field(default="", alias="styleType")
    description: str = ""


class FigmaFile(_FigmaModel):
    name: str
    last_modified: str = Field(alias="lastModified")
    version: str
    document: FigmaNode
    components: Dict[str, Any] = Field(default_factory=dict)
    styles: Dict[str, StyleMetadata] = Field(default_factory=dict)


class NodeEntry(_FigmaModel):
    document: FigmaNode


class FigmaNodesResponse(_FigmaModel):
    nodes: Dict[str, Optional[NodeEntry]]


class ImageExportResponse(_FigmaModel):
    err: Optional[str] = None
    images: Dict[str, Optional[str]] = Field(default_factory=dict)


def parse_payload(model: Type[M], data: Any, what: str) -> M:
    """Validate a decoded JSON payload, raising ``FigmaSchemaError`` on mismatch."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.error("Malformed %s payload: %s", what, exc)
        raise FigmaSchemaError(f"Malformed {what} payload: {exc}") from exc
