"""Discovery of exportable frames in a Figma document tree."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import BoundingBox, ExportedFrame
from .schema import FigmaNode

EXPORTABLE_NODE_TYPES = frozenset({"FRAME", "COMPONENT"})
PATH_SEPARATOR = " / "


def find_frames(node: FigmaNode, ancestors: Sequence[str] = ()) -> List[ExportedFrame]:
    """Flatten ``node`` into exportable frames in depth-first pre-order.

    Each frame's ``path`` is the chain of ancestor names, including its own,
    joined with ``" / "``. Exportable nodes without a bounding box are skipped
    but their children are still visited. The input is assumed to be a tree.
    """
    frames: List[ExportedFrame] = []
    stack: List[Tuple[FigmaNode, Tuple[str, ...]]] = [(node, tuple(ancestors))]
    while stack:
        current, parents = stack.pop()
        current_path = parents + (current.name,)
        box = current.absolute_bounding_box
        if current.type in EXPORTABLE_NODE_TYPES and box is not None:
            frames.append(
                ExportedFrame(
                    node_id=current.id,
                    name=current.name,
                    path=PATH_SEPARATOR.join(current_path),
                    width=box.width,
                    height=box.height,
                    bounding_box=BoundingBox(
                        x=box.x, y=box.y, width=box.width, height=box.height
                    ),
                )
            )
        for child in reversed(current.children):
            stack.append((child, current_path))
    return frames
