from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional
import uuid


def new_id() -> str:
    return str(uuid.uuid4())


class NodeKind(str, Enum):
    PROMPT = "prompt"
    TEMPLATE = "template"
    GROUP = "group"
    IMAGE = "image"


class NodeColor(str, Enum):
    PURPLE = "purple"
    BLUE = "blue"
    CYAN = "cyan"
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"
    PINK = "pink"
    SLATE = "slate"


class AnchorPoint(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    CENTER = "center"


@dataclass
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)


@dataclass
class Size:
    width: float = 280.0
    height: float = 180.0


@dataclass
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def intersects(self, other: "Rect") -> bool:
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )

    @classmethod
    def union(cls, rects: List["Rect"]) -> Optional["Rect"]:
        if not rects:
            return None
        left = min(r.x for r in rects)
        top = min(r.y for r in rects)
        right = max(r.right for r in rects)
        bottom = max(r.bottom for r in rects)
        return cls(left, top, right - left, bottom - top)


# ------------------------------------------------------------------ #
# Nodes
# ------------------------------------------------------------------ #

@dataclass
class Node:
    id: str = field(default_factory=new_id)
    position: Point = field(default_factory=Point)
    size: Size = field(default_factory=Size)
    title: str = ""
    color: NodeColor = NodeColor.PURPLE
    expanded: bool = True
    parent_group_id: Optional[str] = None  # weak reference, Group nodes only

    kind: ClassVar[NodeKind]

    @property
    def is_group(self) -> bool:
        return self.kind is NodeKind.GROUP


@dataclass
class PromptNode(Node):
    content: str = ""

    kind: ClassVar[NodeKind] = NodeKind.PROMPT


@dataclass
class TemplateNode(Node):
    template: str = ""
    values: Dict[str, str] = field(default_factory=dict)

    kind: ClassVar[NodeKind] = NodeKind.TEMPLATE


@dataclass
class GroupNode(Node):
    edit_mode: bool = False

    kind: ClassVar[NodeKind] = NodeKind.GROUP


@dataclass
class ImageNode(Node):
    src: str = ""
    thumbnail: Optional[str] = None
    attached_to: Optional[str] = None       # weak reference, non-image nodes only
    anchor_point: AnchorPoint = AnchorPoint.TOP_RIGHT
    offset: Point = field(default_factory=Point)
    opacity: float = 1.0
    show_border: bool = True

    kind: ClassVar[NodeKind] = NodeKind.IMAGE


NODE_TYPES: Dict[NodeKind, type] = {
    NodeKind.PROMPT: PromptNode,
    NodeKind.TEMPLATE: TemplateNode,
    NodeKind.GROUP: GroupNode,
    NodeKind.IMAGE: ImageNode,
}


# ------------------------------------------------------------------ #
# Edges and sheets
# ------------------------------------------------------------------ #

@dataclass
class Edge:
    source: str
    target: str
    id: str = field(default_factory=new_id)
    color: NodeColor = NodeColor.PURPLE
    active: bool = True


@dataclass
class Sheet:
    id: str = field(default_factory=new_id)
    name: str = ""
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def get_node(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return next((n for n in self.nodes if n.id == node_id), None)

    def get_edge(self, edge_id: Optional[str]) -> Optional[Edge]:
        if edge_id is None:
            return None
        return next((e for e in self.edges if e.id == edge_id), None)

    def get_group(self, node_id: Optional[str]) -> Optional[GroupNode]:
        node = self.get_node(node_id)
        return node if isinstance(node, GroupNode) else None

    def children_of(self, group_id: str) -> List[Node]:
        return [n for n in self.nodes if n.parent_group_id == group_id]

    def node_ids(self) -> set:
        return {n.id for n in self.nodes}

    def edges_into(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.target == node_id]

