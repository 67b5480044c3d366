# Canvas graph: node and edge records plus the mutating model

from prompt_canvas.graph.types import (
    Edge,
    GroupNode,
    ImageNode,
    Node,
    NodeColor,
    NodeKind,
    Point,
    PromptNode,
    Rect,
    Sheet,
    Size,
    TemplateNode,
)
from prompt_canvas.graph.errors import PromptCanvasError, MalformedImportError, SheetNotFoundError

__all__ = [
    "Edge",
    "GroupNode",
    "ImageNode",
    "Node",
    "NodeColor",
    "NodeKind",
    "Point",
    "PromptNode",
    "Rect",
    "Sheet",
    "Size",
    "TemplateNode",
    "PromptCanvasError",
    "MalformedImportError",
    "SheetNotFoundError",
]
