"""
Image attachment - images pinned to an anchor of another node
"""

from typing import List, Optional
import logging

from prompt_canvas.graph.model import GraphModel
from prompt_canvas.graph.types import AnchorPoint, ImageNode, Node, NodeKind, Point, Sheet

logger = logging.getLogger(__name__)


# corner anchors sit this far outside the parent box
ANCHOR_GAP = 20
ANCHOR_OUTSET = 100
SYNC_TOLERANCE = 1.0


def anchor_position(parent: Node, anchor: AnchorPoint) -> Point:
    x, y = parent.position.x, parent.position.y
    width, height = parent.size.width, parent.size.height

    anchors = {
        AnchorPoint.TOP_LEFT: Point(x - ANCHOR_OUTSET, y - ANCHOR_OUTSET),
        AnchorPoint.TOP_RIGHT: Point(x + width + ANCHOR_GAP, y),
        AnchorPoint.BOTTOM_LEFT: Point(x - ANCHOR_OUTSET, y + height + ANCHOR_GAP),
        AnchorPoint.BOTTOM_RIGHT: Point(x + width + ANCHOR_GAP, y + height),
        AnchorPoint.CENTER: Point(x + width / 2, y + height / 2),
    }
    return anchors.get(AnchorPoint(anchor), anchors[AnchorPoint.TOP_RIGHT])


def attach_image(
    model: GraphModel,
    image_id: str,
    target_id: str,
    anchor: AnchorPoint = AnchorPoint.TOP_RIGHT,
    offset: Optional[Point] = None,
) -> Optional[ImageNode]:
    image = model.get(image_id)
    target = model.get(target_id)
    if not isinstance(image, ImageNode) or target is None:
        return None
    if target.kind is NodeKind.IMAGE:
        logger.debug("attach_image: images cannot anchor to images (%s)", target_id)
        return None

    image.attached_to = target_id
    image.anchor_point = AnchorPoint(anchor)
    image.offset = offset or Point()
    _snap(image, target)
    return image


def detach_image(model: GraphModel, image_id: str) -> Optional[ImageNode]:
    image = model.get(image_id)
    if not isinstance(image, ImageNode):
        return None
    image.attached_to = None
    return image


def _snap(image: ImageNode, target: Node) -> bool:
    anchor = anchor_position(target, image.anchor_point)
    wanted = anchor + image.offset
    if (
        abs(image.position.x - wanted.x) > SYNC_TOLERANCE
        or abs(image.position.y - wanted.y) > SYNC_TOLERANCE
    ):
        image.position = wanted
        return True
    return False


def sync_attached_images(sheet: Sheet) -> List[str]:
    """
    Move attached images back onto their anchors.

    Images whose anchor node is gone are detached. Returns the ids of images
    that changed.
    """
    changed: List[str] = []
    for node in sheet.nodes:
        if not isinstance(node, ImageNode) or node.attached_to is None:
            continue

        target = sheet.get_node(node.attached_to)
        if target is None:
            node.attached_to = None
            changed.append(node.id)
            continue

        if _snap(node, target):
            changed.append(node.id)
    return changed
