"""
Layout Engine - layered (topological) placement for one sheet

Free nodes are placed in rows by a breadth-first pass: a node joins the next
row once every source of its incoming edges sits in an earlier row. Groups
follow as one row each. Child nodes ride with their group and are not moved.
Single pass, no cross-row collision avoidance.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

from prompt_canvas.graph.types import Node, Point, Rect, Sheet
from prompt_canvas.layout.sizes import layout_size

logger = logging.getLogger(__name__)


@dataclass
class LayoutConfig:
    center_x: float = 250.0
    start_y: float = 100.0
    horizontal_padding_expanded: float = 40.0
    horizontal_padding_collapsed: float = 20.0
    vertical_padding_expanded: float = 80.0
    vertical_padding_collapsed: float = 40.0

    def horizontal_padding(self, expanded: bool) -> float:
        return self.horizontal_padding_expanded if expanded else self.horizontal_padding_collapsed

    def vertical_padding(self, expanded: bool) -> float:
        return self.vertical_padding_expanded if expanded else self.vertical_padding_collapsed


@dataclass
class LayoutResult:
    rows: List[List[str]] = field(default_factory=list)
    group_rows: List[str] = field(default_factory=list)
    bounds: Optional[Rect] = None   # host refits its viewport to this

    def row_of(self, node_id: str) -> Optional[int]:
        for index, row in enumerate(self.rows):
            if node_id in row:
                return index
        return None


def compute_rows(free_nodes: List[Node], sheet: Sheet) -> List[List[str]]:
    """Assign free nodes to rows; nodes unreachable from any root get singleton rows."""
    free_ids = [n.id for n in free_nodes]
    free_set = set(free_ids)

    outgoing: Dict[str, List[str]] = {}
    incoming: Dict[str, List[str]] = {}
    for edge in sheet.edges:
        if edge.source not in free_set or edge.target not in free_set:
            continue
        outgoing.setdefault(edge.source, []).append(edge.target)
        incoming.setdefault(edge.target, []).append(edge.source)

    roots = [node_id for node_id in free_ids if not incoming.get(node_id)]
    rows: List[List[str]] = [roots] if roots else []
    placed = set(roots)

    current = 0
    while current < len(rows):
        next_row: List[str] = []
        for node_id in rows[current]:
            for target_id in outgoing.get(node_id, []):
                if target_id in placed or target_id in next_row:
                    continue
                # sources placed in this pass's next row don't count yet
                if all(src in placed for src in incoming.get(target_id, [])):
                    next_row.append(target_id)
        if next_row:
            rows.append(next_row)
            placed.update(next_row)
        current += 1

    for node_id in free_ids:
        if node_id not in placed:
            rows.append([node_id])
            placed.add(node_id)

    return rows


def auto_layout(sheet: Sheet, expand: bool, config: Optional[LayoutConfig] = None) -> LayoutResult:
    """
    Expand or collapse every node and recompute positions.

    Returns the rows used and the bounding box of all nodes.
    """
    config = config or LayoutConfig()

    for node in sheet.nodes:
        node.expanded = expand
        node.size = layout_size(node.kind, expand)

    free_nodes = [n for n in sheet.nodes if n.parent_group_id is None and not n.is_group]
    group_nodes = [n for n in sheet.nodes if n.is_group]
    node_map = {n.id: n for n in free_nodes}

    rows = compute_rows(free_nodes, sheet)

    h_pad = config.horizontal_padding(expand)
    v_pad = config.vertical_padding(expand)
    current_y = config.start_y

    for row in rows:
        row_nodes = [node_map[node_id] for node_id in row if node_id in node_map]
        if not row_nodes:
            continue

        total_width = sum(n.size.width for n in row_nodes) + (len(row_nodes) - 1) * h_pad
        max_height = max(n.size.height for n in row_nodes)

        current_x = config.center_x - total_width / 2
        for node in row_nodes:
            node.position = Point(current_x, current_y)
            current_x += node.size.width + h_pad

        current_y += max_height + v_pad

    for group in group_nodes:
        group.position = Point(config.center_x - group.size.width / 2, current_y)
        current_y += group.size.height + v_pad

    result = LayoutResult(
        rows=rows,
        group_rows=[g.id for g in group_nodes],
        bounds=sheet_bounds(sheet),
    )
    logger.info(
        "Auto-layout (%s): %d rows, %d groups",
        "expanded" if expand else "collapsed",
        len(rows),
        len(group_nodes),
    )
    return result


def sheet_bounds(sheet: Sheet) -> Optional[Rect]:
    rects = []
    for node in sheet.nodes:
        origin = node.position
        parent = sheet.get_group(node.parent_group_id)
        if parent is not None:
            origin = parent.position + node.position
        rects.append(Rect(origin.x, origin.y, node.size.width, node.size.height))
    return Rect.union(rects)
