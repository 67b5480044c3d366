from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List

from prompt_canvas.graph.types import AnchorPoint, NodeColor, NodeKind
from prompt_canvas.routing.path_router import Facing


# ------------------------------------------------------------------ #
# Persisted / exported shapes
# ------------------------------------------------------------------ #

class PointModel(BaseModel):
    x: float = 0.0
    y: float = 0.0


class SizeModel(BaseModel):
    width: float
    height: float


class NodePayload(BaseModel):
    id: str
    type: NodeKind
    position: PointModel = Field(default_factory=PointModel)
    size: Optional[SizeModel] = None
    parentGroupId: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class EdgePayload(BaseModel):
    id: str
    source: str
    target: str
    data: Dict[str, Any] = Field(default_factory=dict)


class SheetExportPayload(BaseModel):
    """Single-sheet export file"""
    nodes: List[NodePayload]
    edges: List[EdgePayload]
    exportedAt: Optional[str] = None


class SheetPayload(BaseModel):
    id: str
    name: str = ""
    nodes: List[NodePayload] = Field(default_factory=list)
    edges: List[EdgePayload] = Field(default_factory=list)


class WorkspaceSnapshot(BaseModel):
    """Whole-state snapshot written to the key-value store"""
    sheets: List[SheetPayload]
    activeSheetId: Optional[str] = None


# ------------------------------------------------------------------ #
# Request bodies
# ------------------------------------------------------------------ #

class CreateSheetRequest(BaseModel):
    name: Optional[str] = None


class RenameSheetRequest(BaseModel):
    name: str


class CreateNodeRequest(BaseModel):
    type: NodeKind = NodeKind.PROMPT
    position: PointModel = Field(default_factory=PointModel)
    color: NodeColor = NodeColor.PURPLE
    title: Optional[str] = None
    content: Optional[str] = None
    template: Optional[str] = None
    values: Optional[Dict[str, str]] = None
    src: Optional[str] = None
    thumbnail: Optional[str] = None
    imageWidth: Optional[float] = None   # picture size, used to size image nodes
    imageHeight: Optional[float] = None
    parentGroupId: Optional[str] = None


class CreateTemplateRequest(BaseModel):
    """Template authored from the builder, optionally starting from a preset"""
    title: str = "New Template"
    template: Optional[str] = None
    preset: Optional[str] = None
    values: Dict[str, str] = Field(default_factory=dict)
    color: NodeColor = NodeColor.CYAN
    position: Optional[PointModel] = None


class UpdateNodeRequest(BaseModel):
    """Partial update; only fields that are set are merged"""
    title: Optional[str] = None
    color: Optional[NodeColor] = None
    expanded: Optional[bool] = None
    position: Optional[PointModel] = None
    size: Optional[SizeModel] = None
    parentGroupId: Optional[str] = None
    content: Optional[str] = None
    template: Optional[str] = None
    values: Optional[Dict[str, str]] = None
    editMode: Optional[bool] = None
    src: Optional[str] = None
    thumbnail: Optional[str] = None
    anchorPoint: Optional[AnchorPoint] = None
    offset: Optional[PointModel] = None
    opacity: Optional[float] = None
    showBorder: Optional[bool] = None


class DragStopRequest(BaseModel):
    """Where the node was dropped, in its current coordinate frame"""
    position: Optional[PointModel] = None


class TemplateValueRequest(BaseModel):
    name: str
    value: str


class ExpandRequest(BaseModel):
    expanded: bool


class EditModeRequest(BaseModel):
    editMode: bool


class AttachImageRequest(BaseModel):
    targetId: str
    anchorPoint: AnchorPoint = AnchorPoint.TOP_RIGHT
    offset: PointModel = Field(default_factory=PointModel)


class CreateEdgeRequest(BaseModel):
    source: str
    target: str


class LayoutRequest(BaseModel):
    expand: bool = True


class RouteRequest(BaseModel):
    source: PointModel
    target: PointModel
    sourceFacing: Facing = Facing.BOTTOM
    targetFacing: Facing = Facing.TOP
