"""
Default node sizes per type and expansion state.

The layout table is what auto-layout assigns; the creation table is what a
freshly created node starts with.
"""

from typing import Dict

from prompt_canvas.graph.types import NodeKind, Size


COLLAPSED_SIZE = Size(200, 50)
EXPANDED_GROUP_SIZE = Size(450, 350)

LAYOUT_SIZES: Dict[NodeKind, Size] = {
    NodeKind.PROMPT: Size(280, 180),
    NodeKind.TEMPLATE: Size(320, 220),
    NodeKind.GROUP: EXPANDED_GROUP_SIZE,
    NodeKind.IMAGE: Size(280, 180),
}

CREATION_SIZES: Dict[NodeKind, Size] = {
    NodeKind.PROMPT: Size(240, 140),
    NodeKind.TEMPLATE: Size(320, 220),
    NodeKind.GROUP: COLLAPSED_SIZE,
    NodeKind.IMAGE: Size(150, 150),
}

# Image nodes fit their picture into this box, plus chrome
IMAGE_MAX_PICTURE = 300
IMAGE_MIN_NODE = 150
IMAGE_CHROME_WIDTH = 24
IMAGE_CHROME_HEIGHT = 60


def layout_size(kind: NodeKind, expanded: bool) -> Size:
    if not expanded:
        return Size(COLLAPSED_SIZE.width, COLLAPSED_SIZE.height)
    size = LAYOUT_SIZES[kind]
    return Size(size.width, size.height)


def creation_size(kind: NodeKind) -> Size:
    size = CREATION_SIZES[kind]
    return Size(size.width, size.height)


def image_node_size(picture_width: float, picture_height: float) -> Size:
    """Size an image node so the picture keeps its aspect ratio inside the max box."""
    width, height = float(picture_width), float(picture_height)
    if width > IMAGE_MAX_PICTURE:
        height = height * IMAGE_MAX_PICTURE / width
        width = IMAGE_MAX_PICTURE
    if height > IMAGE_MAX_PICTURE:
        width = width * IMAGE_MAX_PICTURE / height
        height = IMAGE_MAX_PICTURE
    return Size(
        max(IMAGE_MIN_NODE, width + IMAGE_CHROME_WIDTH),
        max(IMAGE_MIN_NODE, height + IMAGE_CHROME_HEIGHT),
    )
