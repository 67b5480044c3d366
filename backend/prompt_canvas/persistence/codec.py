"""
JSON codec for sheets, nodes and edges.

Node shape:
    {id, type, position{x,y}, size{width,height}, parentGroupId,
     data{title, color, isExpanded, ...variant fields}}
Edge shape:
    {id, source, target, data{color, active}}
"""

from typing import Any, Dict, List, Set

from prompt_canvas.graph.types import (
    AnchorPoint,
    Edge,
    Node,
    NodeColor,
    NodeKind,
    NODE_TYPES,
    Point,
    Sheet,
    Size,
)

# json key -> dataclass attribute, per variant
VARIANT_FIELDS: Dict[NodeKind, Dict[str, str]] = {
    NodeKind.PROMPT: {"content": "content"},
    NodeKind.TEMPLATE: {"template": "template", "values": "values"},
    NodeKind.GROUP: {"isEditMode": "edit_mode"},
    NodeKind.IMAGE: {
        "src": "src",
        "thumbnail": "thumbnail",
        "attachedTo": "attached_to",
        "anchorPoint": "anchor_point",
        "offset": "offset",
        "opacity": "opacity",
        "showBorder": "show_border",
    },
}


def _point(raw: Any) -> Point:
    raw = raw or {}
    if not isinstance(raw, dict):
        raise TypeError(f"Expected a point object, got {type(raw).__name__}")
    return Point(float(raw.get("x", 0)), float(raw.get("y", 0)))


def _encode_value(value: Any) -> Any:
    if isinstance(value, Point):
        return {"x": value.x, "y": value.y}
    if isinstance(value, (NodeColor, AnchorPoint)):
        return value.value
    if isinstance(value, dict):
        return dict(value)
    return value


def node_to_dict(node: Node) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "title": node.title,
        "color": node.color.value,
        "isExpanded": node.expanded,
    }
    for key, attr in VARIANT_FIELDS[node.kind].items():
        data[key] = _encode_value(getattr(node, attr))

    return {
        "id": node.id,
        "type": node.kind.value,
        "position": {"x": node.position.x, "y": node.position.y},
        "size": {"width": node.size.width, "height": node.size.height},
        "parentGroupId": node.parent_group_id,
        "data": data,
    }


def node_from_dict(raw: Dict[str, Any]) -> Node:
    kind = NodeKind(raw["type"])
    data = raw.get("data") or {}
    size = raw.get("size") or {}
    default_size = Size()

    attrs: Dict[str, Any] = {
        "id": str(raw["id"]),
        "position": _point(raw.get("position")),
        "size": Size(
            float(size.get("width", default_size.width)),
            float(size.get("height", default_size.height)),
        ),
        "title": data.get("title", ""),
        "color": NodeColor(data.get("color") or NodeColor.PURPLE.value),
        "expanded": bool(data.get("isExpanded", True)),
        "parent_group_id": raw.get("parentGroupId"),
    }
    for key, attr in VARIANT_FIELDS[kind].items():
        if data.get(key) is not None:
            attrs[attr] = data[key]

    if kind is NodeKind.IMAGE:
        attrs["offset"] = _point(data.get("offset"))
        attrs["anchor_point"] = AnchorPoint(data.get("anchorPoint") or AnchorPoint.TOP_RIGHT.value)
    elif kind is NodeKind.TEMPLATE:
        values = data.get("values") or {}
        if not isinstance(values, dict):
            raise TypeError(f"Template values must be an object, got {type(values).__name__}")
        attrs["values"] = {str(k): str(v) for k, v in values.items()}
    elif kind is NodeKind.GROUP:
        # groups never nest
        attrs["parent_group_id"] = None

    return NODE_TYPES[kind](**attrs)


def edge_to_dict(edge: Edge) -> Dict[str, Any]:
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "data": {"color": edge.color.value, "active": edge.active},
    }


def edge_from_dict(raw: Dict[str, Any]) -> Edge:
    data = raw.get("data") or {}
    return Edge(
        id=str(raw["id"]),
        source=str(raw["source"]),
        target=str(raw["target"]),
        color=NodeColor(data.get("color") or NodeColor.PURPLE.value),
        active=data.get("active") is not False,
    )


def sheet_to_dict(sheet: Sheet) -> Dict[str, Any]:
    return {
        "id": sheet.id,
        "name": sheet.name,
        "nodes": [node_to_dict(n) for n in sheet.nodes],
        "edges": [edge_to_dict(e) for e in sheet.edges],
    }


def sheet_from_dict(raw: Dict[str, Any]) -> Sheet:
    sheet = Sheet(
        id=str(raw["id"]),
        name=raw.get("name", ""),
        nodes=[node_from_dict(n) for n in raw.get("nodes") or []],
        edges=[edge_from_dict(e) for e in raw.get("edges") or []],
    )
    normalize_branches(sheet.edges)
    return sheet


def normalize_branches(edges: List[Edge]) -> List[str]:
    """
    Keep the first active edge per target, in list order, and deactivate
    the rest. Returns the ids of the edges that were switched off.
    """
    seen: Set[str] = set()
    switched_off: List[str] = []
    for edge in edges:
        if not edge.active:
            continue
        if edge.target in seen:
            edge.active = False
            switched_off.append(edge.id)
        else:
            seen.add(edge.target)
    return switched_off
