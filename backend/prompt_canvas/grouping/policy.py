"""
Grouping Policy - geometry-driven group containment

Applied by the host when a drag stops:
- a child dragged far enough outside its group leaves it
- a free node dropped onto exactly one group joins it
Groups never nest. Edit mode only changes interactivity, never geometry.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional
import logging

from prompt_canvas.branch.resolver import path_roots
from prompt_canvas.graph.model import GraphModel
from prompt_canvas.graph.types import GroupNode, Point, Sheet, Size
from prompt_canvas.layout.sizes import EXPANDED_GROUP_SIZE

logger = logging.getLogger(__name__)


class DragOutcome(str, Enum):
    NONE = "none"
    GROUPED = "grouped"
    UNGROUPED = "ungrouped"


@dataclass
class GroupingConfig:
    # a child may stray this far past the group's left/top edge
    outside_margin_before: float = 50.0
    # ...and this far past its right/bottom edge
    outside_margin_after: float = 20.0
    # minimum inset of an adopted child, keeps it below the header band
    inset_x: float = 20.0
    inset_y: float = 60.0


@dataclass
class NodeViewState:
    hidden: bool = False
    draggable: bool = True
    selectable: bool = True
    z_index: int = 0
    is_path_root: bool = False


class GroupingPolicy:

    def __init__(self, model: GraphModel, config: Optional[GroupingConfig] = None):
        self.model = model
        self.config = config or GroupingConfig()

    @property
    def sheet(self) -> Sheet:
        return self.model.sheet

    def on_drag_stop(self, node_id: str) -> DragOutcome:
        node = self.model.get(node_id)
        if node is None or node.is_group:
            return DragOutcome.NONE

        if node.parent_group_id is not None:
            if self.release_if_outside(node_id):
                return DragOutcome.UNGROUPED
            return DragOutcome.NONE

        if self.adopt_if_inside(node_id) is not None:
            return DragOutcome.GROUPED
        return DragOutcome.NONE

    def release_if_outside(self, node_id: str) -> bool:
        node = self.model.get(node_id)
        if node is None:
            return False
        parent = self.sheet.get_group(node.parent_group_id)
        if parent is None:
            return False

        before = self.config.outside_margin_before
        after = self.config.outside_margin_after
        pos = node.position
        outside = (
            pos.x < -before
            or pos.x > parent.size.width + after
            or pos.y < -before
            or pos.y > parent.size.height + after
        )
        if not outside:
            return False

        node.position = parent.position + pos
        node.parent_group_id = None
        logger.debug("Node %s left group %s", node_id, parent.id)
        return True

    def adopt_if_inside(self, node_id: str) -> Optional[str]:
        node = self.model.get(node_id)
        if node is None or node.is_group or node.parent_group_id is not None:
            return None

        box = self.model.bounds(node)
        hits = [
            g for g in self.sheet.nodes
            if isinstance(g, GroupNode) and g.id != node.id and self.model.bounds(g).intersects(box)
        ]
        if len(hits) != 1:
            return None
        group = hits[0]

        if not group.expanded:
            group.expanded = True
            group.size = Size(EXPANDED_GROUP_SIZE.width, EXPANDED_GROUP_SIZE.height)

        node.position = Point(
            max(self.config.inset_x, node.position.x - group.position.x),
            max(self.config.inset_y, node.position.y - group.position.y),
        )
        node.parent_group_id = group.id
        logger.debug("Node %s joined group %s", node_id, group.id)
        return group.id


def node_view_states(sheet: Sheet) -> Dict[str, NodeViewState]:
    """Per-node visibility and interactivity flags derived from group state."""
    roots = path_roots(sheet)
    states: Dict[str, NodeViewState] = {}

    for node in sheet.nodes:
        state = NodeViewState(is_path_root=node.id in roots)

        if isinstance(node, GroupNode):
            if node.edit_mode:
                state.draggable = False
                state.selectable = False
                state.z_index = -1
        else:
            parent = sheet.get_group(node.parent_group_id)
            if parent is not None and not parent.expanded:
                state.hidden = True
            elif parent is not None and parent.edit_mode:
                state.z_index = 1000

        states[node.id] = state
    return states
