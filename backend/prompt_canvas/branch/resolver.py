"""
Branch Resolver - active-edge selection and active-path text

Branch rule: among edges sharing a target, at most one is active.
The active path is a breadth-first walk over active edges only; its text is
what the host copies to the clipboard.
"""

from collections import deque
from typing import Dict, List, Optional, Set
import logging

from prompt_canvas.graph.types import Edge, Node, PromptNode, Sheet, TemplateNode
from prompt_canvas.template.engine import render

logger = logging.getLogger(__name__)


PATH_SEPARATOR = "\n\n"


def set_active(sheet: Sheet, edge_id: str) -> bool:
    """Make *edge_id* the single active edge into its target."""
    edge = sheet.get_edge(edge_id)
    if edge is None:
        logger.debug("set_active: unknown edge %s", edge_id)
        return False

    for sibling in sheet.edges:
        if sibling.target == edge.target:
            sibling.active = sibling.id == edge.id
    return True


def branches(sheet: Sheet) -> Dict[str, List[Edge]]:
    """Targets with more than one incoming edge, mapped to those edges."""
    by_target: Dict[str, List[Edge]] = {}
    for edge in sheet.edges:
        by_target.setdefault(edge.target, []).append(edge)
    return {target: edges for target, edges in by_target.items() if len(edges) > 1}


def path_roots(sheet: Sheet) -> Set[str]:
    """Non-group nodes with outgoing but no incoming edges, active or not."""
    has_outgoing = {e.source for e in sheet.edges}
    has_incoming = {e.target for e in sheet.edges}
    return {
        n.id for n in sheet.nodes
        if not n.is_group and n.id in has_outgoing and n.id not in has_incoming
    }


def _active_adjacency(sheet: Sheet) -> Dict[str, List[str]]:
    node_ids = sheet.node_ids()
    adjacency: Dict[str, List[str]] = {}
    for edge in sheet.edges:
        if not edge.active:
            continue
        # dangling endpoints are skipped, not reported
        if edge.source not in node_ids or edge.target not in node_ids:
            continue
        adjacency.setdefault(edge.source, []).append(edge.target)
    return adjacency


def _roots(sheet: Sheet, adjacency: Dict[str, List[str]]) -> List[str]:
    has_incoming = {t for targets in adjacency.values() for t in targets}
    return [
        n.id for n in sheet.nodes
        if not n.is_group and n.id in adjacency and n.id not in has_incoming
    ]


def active_path(sheet: Sheet, start_node_id: Optional[str] = None) -> List[Node]:
    """
    Non-group nodes reachable over active edges, in visitation order.

    Seeds with *start_node_id* when given, otherwise with every root. Each
    node is visited at most once, so active cycles terminate.
    """
    adjacency = _active_adjacency(sheet)

    if start_node_id is not None:
        queue = deque([start_node_id])
    else:
        if not adjacency:
            return []
        queue = deque(_roots(sheet, adjacency))

    visited: Set[str] = set()
    ordered: List[Node] = []

    while queue:
        node_id = queue.popleft()
        if node_id in visited:
            continue
        visited.add(node_id)

        node = sheet.get_node(node_id)
        if node is not None and not node.is_group:
            ordered.append(node)

        for target_id in adjacency.get(node_id, []):
            if target_id not in visited:
                queue.append(target_id)

    return ordered


def node_text(node: Node) -> str:
    if isinstance(node, TemplateNode):
        return render(node.template, node.values)
    if isinstance(node, PromptNode):
        return node.content or ""
    # images and groups carry no text
    return ""


def compute_active_path_text(sheet: Sheet, start_node_id: Optional[str] = None) -> str:
    contributions = [node_text(node) for node in active_path(sheet, start_node_id)]
    return PATH_SEPARATOR.join(text for text in contributions if text.strip())

