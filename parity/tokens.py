"""Design-token extraction from a file's shared styles."""

from __future__ import annotations

from typing import Dict, Iterator, Optional

from .models import RGBA, ColorToken, DesignTokens, TypographyToken
from .schema import FigmaFile, FigmaNode, Paint, TypeStyle

FALLBACK_COLOR = "#000000"
FALLBACK_FONT_FAMILY = "Unknown"
FALLBACK_FONT_SIZE = 16.0
FALLBACK_FONT_WEIGHT = 400.0


def _walk(node: FigmaNode) -> Iterator[FigmaNode]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def to_hex(r: float, g: float, b: float) -> str:
    """Convert 0..1 colour channels to ``#rrggbb``."""
    channels = (max(0, min(255, round(c * 255))) for c in (r, g, b))
    return "#" + "".join(f"{c:02x}" for c in channels)


def _first_solid(fills) -> Optional[Paint]:
    for paint in fills:
        if paint.type == "SOLID" and paint.visible and paint.color is not None:
            return paint
    return None


def extract_design_tokens(file: FigmaFile) -> DesignTokens:
    """Build colour and typography tokens for the file's FILL and TEXT styles.

    Style metadata only names a style; the values come from the first node in the
    document that uses it. Styles no node references fall back to placeholders.
    """
    fills: Dict[str, Paint] = {}
    texts: Dict[str, TypeStyle] = {}
    for node in _walk(file.document):
        fill_id = node.styles.get("fill")
        if fill_id and fill_id not in fills:
            paint = _first_solid(node.fills)
            if paint is not None:
                fills[fill_id] = paint
        text_id = node.styles.get("text")
        if text_id and text_id not in texts and node.style is not None:
            texts[text_id] = node.style

    tokens = DesignTokens()
    for style_id, meta in file.styles.items():
        name = meta.name or style_id
        if meta.style_type == "FILL":
            paint = fills.get(style_id)
            if paint is None or paint.color is None:
                tokens.colors.append(
                    ColorToken(name=name, value=FALLBACK_COLOR, rgba=RGBA(0, 0, 0, 1))
                )
                continue
            color = paint.color
            tokens.colors.append(
                ColorToken(
                    name=name,
                    value=to_hex(color.r, color.g, color.b),
                    rgba=RGBA(color.r, color.g, color.b, color.a * paint.opacity),
                )
            )
        elif meta.style_type == "TEXT":
            style = texts.get(style_id)
            if style is None:
                style = TypeStyle()
            tokens.typography.append(
                TypographyToken(
                    name=name,
                    font_family=style.font_family or FALLBACK_FONT_FAMILY,
                    font_size=style.font_size or FALLBACK_FONT_SIZE,
                    font_weight=style.font_weight or FALLBACK_FONT_WEIGHT,
                    line_height=style.line_height_px,
                    letter_spacing=style.letter_spacing,
                )
            )
    return tokens
