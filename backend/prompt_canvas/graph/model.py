"""
Graph Model - authoritative node/edge collections for one sheet

All mutations go through this class so the referential invariants hold:
- edges reference nodes of the same sheet (cascade delete)
- only non-group nodes carry a parent group, and it names a Group
- at most one active edge per target
Unknown ids are no-ops, never errors.
"""

from dataclasses import fields, replace
from typing import Any, Dict, List, Optional
import copy
import logging
import random

from prompt_canvas.graph.types import (
    Edge,
    GroupNode,
    ImageNode,
    Node,
    NodeColor,
    NodeKind,
    NODE_TYPES,
    Point,
    PromptNode,
    Rect,
    Sheet,
    TemplateNode,
    new_id,
)
from prompt_canvas.layout.sizes import creation_size, layout_size
from prompt_canvas.template.engine import DEFAULT_TEMPLATE, prune_values

logger = logging.getLogger(__name__)


DUPLICATE_OFFSET = Point(50, 50)

# Fields the host may never overwrite through update_node
_PROTECTED_FIELDS = {"id", "kind"}

_CREATION_DEFAULTS: Dict[NodeKind, Dict[str, Any]] = {
    NodeKind.PROMPT: {"title": "New Prompt", "content": "Your prompt here...", "expanded": True},
    NodeKind.TEMPLATE: {"title": "Template", "template": DEFAULT_TEMPLATE, "expanded": True},
    NodeKind.GROUP: {"title": "New Group", "expanded": False},
    NodeKind.IMAGE: {"title": "Image", "expanded": True},
}


class GraphModel:
    """
    Mutation interface over a single Sheet.

    Usage:
        model = GraphModel(sheet)
        a = model.create_node(NodeKind.PROMPT, Point(0, 0))
        b = model.create_node(NodeKind.PROMPT, Point(0, 200))
        model.create_edge(a.id, b.id)
    """

    def __init__(self, sheet: Sheet, rng: Optional[random.Random] = None):
        self.sheet = sheet
        self.rng = rng or random.Random()

    # ---------- helpers ----------

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        return self.sheet.get_node(node_id)

    def absolute_position(self, node: Node) -> Point:
        parent = self.sheet.get_group(node.parent_group_id)
        if parent is None:
            return Point(node.position.x, node.position.y)
        return parent.position + node.position

    def bounds(self, node: Node) -> Rect:
        origin = self.absolute_position(node)
        return Rect(origin.x, origin.y, node.size.width, node.size.height)

    def _has_active_into(self, target_id: str) -> bool:
        return any(e.active for e in self.sheet.edges_into(target_id))

    def _release_child(self, child: Node, parent: Node):
        child.position = parent.position + child.position
        child.parent_group_id = None

    def _valid_parent(self, kind: NodeKind, parent_id: Optional[str]) -> bool:
        if parent_id is None:
            return True
        if kind is NodeKind.GROUP:
            return False
        return self.sheet.get_group(parent_id) is not None

    # ---------- nodes ----------

    def create_node(
        self,
        kind: NodeKind,
        position: Point,
        color: NodeColor = NodeColor.PURPLE,
        **data: Any,
    ) -> Node:
        kind = NodeKind(kind)
        node_cls = NODE_TYPES[kind]
        attrs = dict(_CREATION_DEFAULTS[kind])
        attrs.update(data)
        for reserved in ("id", "position", "color"):
            attrs.pop(reserved, None)

        allowed = {f.name for f in fields(node_cls)}
        unknown = set(attrs) - allowed
        if unknown:
            logger.debug("create_node: ignoring fields %s for %s", sorted(unknown), kind.value)
            attrs = {k: v for k, v in attrs.items() if k in allowed}

        attrs.setdefault("size", creation_size(kind))
        if not self._valid_parent(kind, attrs.get("parent_group_id")):
            attrs["parent_group_id"] = None

        node = node_cls(
            id=new_id(),
            position=Point(position.x, position.y),
            color=NodeColor(color),
            **attrs,
        )
        if isinstance(node, TemplateNode):
            node.values = prune_values(node.template, node.values)

        self.sheet.nodes.append(node)
        logger.debug("Created %s node %s", kind.value, node.id)
        return node

    def create_template(
        self,
        title: str,
        template: str,
        values: Optional[Dict[str, str]] = None,
        color: NodeColor = NodeColor.CYAN,
        position: Optional[Point] = None,
    ) -> Node:
        return self.create_node(
            NodeKind.TEMPLATE,
            position or Point(300, 200),
            color,
            title=title,
            template=template,
            values=dict(values or {}),
        )

    def update_node(self, node_id: str, **changes: Any) -> Optional[Node]:
        node = self.get(node_id)
        if node is None:
            logger.debug("update_node: unknown node %s", node_id)
            return None

        allowed = {f.name for f in fields(node)} - _PROTECTED_FIELDS
        for name, value in changes.items():
            if name not in allowed:
                logger.debug("update_node: ignoring field '%s' on %s", name, node_id)
                continue
            if name == "expanded":
                if value is not None:
                    self.set_expanded(node_id, bool(value))
                continue
            if name == "parent_group_id" and not self._valid_parent(node.kind, value):
                logger.debug("update_node: refusing parent %s for %s", value, node_id)
                continue
            if name == "attached_to" and value is not None:
                anchor = self.get(value)
                if anchor is None or anchor.kind is NodeKind.IMAGE or value == node_id:
                    logger.debug("update_node: refusing attachment %s for %s", value, node_id)
                    continue
            if name == "color":
                value = NodeColor(value)
                for edge in self.sheet.edges:
                    if edge.source == node_id:
                        edge.color = value
            setattr(node, name, value)

        if isinstance(node, TemplateNode):
            node.values = prune_values(node.template, node.values)
        return node

    def set_template_value(self, node_id: str, name: str, value: str) -> Optional[Node]:
        node = self.get(node_id)
        if not isinstance(node, TemplateNode):
            return None
        return self.update_node(node_id, values={**node.values, name: value})

    def set_expanded(self, node_id: str, expanded: bool) -> Optional[Node]:
        node = self.get(node_id)
        if node is None:
            return None
        node.expanded = expanded
        if node.is_group and expanded:
            node.size = layout_size(NodeKind.GROUP, True)
        return node

    def set_edit_mode(self, group_id: str, edit_mode: bool) -> Optional[GroupNode]:
        group = self.sheet.get_group(group_id)
        if group is not None:
            group.edit_mode = edit_mode
        return group

    def delete_node(self, node_id: str) -> bool:
        node = self.get(node_id)
        if node is None:
            logger.debug("delete_node: unknown node %s", node_id)
            return False

        self.sheet.nodes = [n for n in self.sheet.nodes if n.id != node_id]
        self.sheet.edges = [
            e for e in self.sheet.edges if e.source != node_id and e.target != node_id
        ]
        for other in self.sheet.nodes:
            if other.parent_group_id == node_id:
                self._release_child(other, node)
            if isinstance(other, ImageNode) and other.attached_to == node_id:
                other.attached_to = None

        logger.debug("Deleted node %s", node_id)
        return True

    def ungroup(self, group_id: str) -> List[Node]:
        group = self.sheet.get_group(group_id)
        if group is None:
            return []
        released = self.sheet.children_of(group_id)
        for child in released:
            self._release_child(child, group)
        return released

    def duplicate_node(self, node_id: str) -> Optional[Node]:
        original = self.get(node_id)
        if original is None:
            return None

        palette = [c for c in NodeColor if c != original.color]
        new_color = self.rng.choice(palette)

        clone = replace(
            copy.deepcopy(original),
            id=new_id(),
            position=original.position + DUPLICATE_OFFSET,
            color=new_color,
        )
        self.sheet.nodes.append(clone)

        for edge in list(self.sheet.edges):
            if edge.source != node_id and edge.target != node_id:
                continue
            source = clone.id if edge.source == node_id else edge.source
            target = clone.id if edge.target == node_id else edge.target
            duplicate = Edge(
                source=source,
                target=target,
                color=new_color,
                active=edge.active and not self._has_active_into(target),
            )
            self.sheet.edges.append(duplicate)

        logger.debug("Duplicated node %s as %s", node_id, clone.id)
        return clone

    # ---------- edges ----------

    def create_edge(self, source_id: str, target_id: str) -> Optional[Edge]:
        source = self.get(source_id)
        if source is None or self.get(target_id) is None:
            logger.debug("create_edge: missing endpoint %s -> %s", source_id, target_id)
            return None

        existing = next(
            (e for e in self.sheet.edges if e.source == source_id and e.target == target_id),
            None,
        )
        if existing is not None:
            return existing

        edge = Edge(
            source=source_id,
            target=target_id,
            color=source.color,
            active=not self._has_active_into(target_id),
        )
        self.sheet.edges.append(edge)
        return edge

    def delete_edge(self, edge_id: str) -> bool:
        before = len(self.sheet.edges)
        self.sheet.edges = [e for e in self.sheet.edges if e.id != edge_id]
        return len(self.sheet.edges) != before

    def clear(self):
        self.sheet.nodes = []
        self.sheet.edges = []


def welcome_node() -> PromptNode:
    return PromptNode(
        id="welcome",
        position=Point(250, 100),
        title="Welcome",
        content=(
            "# Prompt Canvas\n\nDouble-click to edit. Connect nodes to show flow.\n\n"
            "**Tips:**\n- Right-click canvas to add nodes\n- Drag from handles to connect\n"
            "- Drag nodes onto groups to organize\n- Click collapsed groups to expand"
        ),
    )
