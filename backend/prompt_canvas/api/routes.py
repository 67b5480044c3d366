from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from prompt_canvas.api.serializers import serialize
from prompt_canvas.api.state import CanvasState, get_state
from prompt_canvas.branch.resolver import branches, compute_active_path_text, set_active
from prompt_canvas.graph.errors import MalformedImportError, SheetNotFoundError
from prompt_canvas.graph.types import Node, Point, Size
from prompt_canvas.grouping.attachments import attach_image, detach_image
from prompt_canvas.grouping.policy import GroupingPolicy, node_view_states
from prompt_canvas.layout.engine import auto_layout
from prompt_canvas.layout.sizes import image_node_size
from prompt_canvas.persistence.codec import edge_to_dict, node_to_dict, sheet_to_dict
from prompt_canvas.routing.path_router import Facing, handle_point, route
from prompt_canvas.schemas import (
    AttachImageRequest,
    CreateEdgeRequest,
    CreateNodeRequest,
    CreateSheetRequest,
    CreateTemplateRequest,
    DragStopRequest,
    EditModeRequest,
    ExpandRequest,
    LayoutRequest,
    RenameSheetRequest,
    RouteRequest,
    TemplateValueRequest,
    UpdateNodeRequest,
)
from prompt_canvas.template.engine import TEMPLATE_PRESETS, extract_parameters, get_preset
from prompt_canvas.validation.sheet_validator import validate_sheet

router = APIRouter()


# request field -> node attribute
_UPDATE_FIELDS = {
    "parentGroupId": "parent_group_id",
    "editMode": "edit_mode",
    "anchorPoint": "anchor_point",
    "showBorder": "show_border",
}


def _node_or_404(state: CanvasState, node_id: str) -> Node:
    node = state.workspace.model().get(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Unknown node '{node_id}'")
    return node


def _sheet_summary(state: CanvasState) -> Dict[str, Any]:
    return {
        "sheets": [{"id": s.id, "name": s.name} for s in state.workspace.sheets],
        "activeSheetId": state.workspace.active_sheet_id,
    }


# ============================
# Sheets
# ============================

@router.get("/sheets")
def list_sheets(state: CanvasState = Depends(get_state)):
    return _sheet_summary(state)


@router.post("/sheets")
def add_sheet(request: CreateSheetRequest, state: CanvasState = Depends(get_state)):
    state.workspace.add_sheet(request.name)
    state.commit()
    return _sheet_summary(state)


@router.patch("/sheets/{sheet_id}")
def rename_sheet(sheet_id: str, request: RenameSheetRequest, state: CanvasState = Depends(get_state)):
    try:
        state.workspace.rename_sheet(sheet_id, request.name)
    except SheetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    state.commit()
    return _sheet_summary(state)


@router.delete("/sheets/{sheet_id}")
def delete_sheet(sheet_id: str, state: CanvasState = Depends(get_state)):
    deleted = state.workspace.delete_sheet(sheet_id)
    if deleted:
        state.commit()
    return {"deleted": deleted, **_sheet_summary(state)}


@router.post("/sheets/{sheet_id}/activate")
def switch_sheet(sheet_id: str, state: CanvasState = Depends(get_state)):
    try:
        state.workspace.switch_sheet(sheet_id)
    except SheetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    state.commit()
    return sheet_to_dict(state.workspace.active_sheet)


@router.get("/sheet")
def get_active_sheet(state: CanvasState = Depends(get_state)):
    return sheet_to_dict(state.workspace.active_sheet)


@router.post("/sheet/clear")
def clear_sheet(state: CanvasState = Depends(get_state)):
    state.workspace.clear_sheet()
    state.commit()
    return sheet_to_dict(state.workspace.active_sheet)


# ============================
# Nodes
# ============================

@router.post("/nodes")
def create_node(request: CreateNodeRequest, state: CanvasState = Depends(get_state)):
    data = {
        "title": request.title,
        "content": request.content,
        "template": request.template,
        "values": request.values,
        "src": request.src,
        "thumbnail": request.thumbnail,
        "parent_group_id": request.parentGroupId,
    }
    data = {k: v for k, v in data.items() if v is not None}
    if request.imageWidth and request.imageHeight:
        data["size"] = image_node_size(request.imageWidth, request.imageHeight)

    node = state.workspace.model().create_node(
        request.type,
        Point(request.position.x, request.position.y),
        request.color,
        **data,
    )
    state.commit()
    return node_to_dict(node)


@router.post("/nodes/template")
def create_template(request: CreateTemplateRequest, state: CanvasState = Depends(get_state)):
    template = request.template
    if template is None and request.preset:
        preset = get_preset(request.preset)
        if preset is None:
            raise HTTPException(status_code=404, detail=f"Unknown preset '{request.preset}'")
        template = preset.template

    position = Point(request.position.x, request.position.y) if request.position else None
    node = state.workspace.model().create_template(
        request.title, template or "", request.values, request.color, position
    )
    state.commit()
    return node_to_dict(node)


@router.patch("/nodes/{node_id}")
def update_node(node_id: str, request: UpdateNodeRequest, state: CanvasState = Depends(get_state)):
    changes: Dict[str, Any] = {}
    for name, value in request.model_dump(exclude_unset=True).items():
        if name in ("position", "offset", "size"):
            if value is None:
                continue
            if name == "size":
                value = Size(value["width"], value["height"])
            else:
                value = Point(value["x"], value["y"])
        changes[_UPDATE_FIELDS.get(name, name)] = value

    node = state.workspace.model().update_node(node_id, **changes)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Unknown node '{node_id}'")
    state.commit()
    return node_to_dict(node)


@router.delete("/nodes/{node_id}")
def delete_node(node_id: str, state: CanvasState = Depends(get_state)):
    deleted = state.workspace.model().delete_node(node_id)
    if deleted:
        state.commit()
    return {"deleted": deleted}


@router.post("/nodes/{node_id}/duplicate")
def duplicate_node(node_id: str, state: CanvasState = Depends(get_state)):
    clone = state.workspace.model().duplicate_node(node_id)
    if clone is None:
        raise HTTPException(status_code=404, detail=f"Unknown node '{node_id}'")
    state.commit()
    return node_to_dict(clone)


@router.post("/nodes/{node_id}/drag-stop")
def drag_stop(node_id: str, request: DragStopRequest, state: CanvasState = Depends(get_state)):
    model = state.workspace.model()
    node = _node_or_404(state, node_id)
    if request.position is not None:
        node.position = Point(request.position.x, request.position.y)

    outcome = GroupingPolicy(model).on_drag_stop(node_id)
    state.commit()
    return {"outcome": outcome.value, "node": node_to_dict(node)}


@router.post("/nodes/{node_id}/expand")
def set_expanded(node_id: str, request: ExpandRequest, state: CanvasState = Depends(get_state)):
    node = state.workspace.model().set_expanded(node_id, request.expanded)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Unknown node '{node_id}'")
    state.commit()
    return node_to_dict(node)


@router.put("/nodes/{node_id}/values")
def set_template_value(node_id: str, request: TemplateValueRequest, state: CanvasState = Depends(get_state)):
    node = state.workspace.model().set_template_value(node_id, request.name, request.value)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Unknown template node '{node_id}'")
    state.commit()
    return node_to_dict(node)


# ============================
# Groups and images
# ============================

@router.post("/groups/{group_id}/ungroup")
def ungroup(group_id: str, state: CanvasState = Depends(get_state)):
    released = state.workspace.model().ungroup(group_id)
    state.commit()
    return {"released": [n.id for n in released]}


@router.post("/groups/{group_id}/edit-mode")
def set_edit_mode(group_id: str, request: EditModeRequest, state: CanvasState = Depends(get_state)):
    group = state.workspace.model().set_edit_mode(group_id, request.editMode)
    if group is None:
        raise HTTPException(status_code=404, detail=f"Unknown group '{group_id}'")
    state.commit()
    return node_to_dict(group)


@router.post("/images/{image_id}/attach")
def attach(image_id: str, request: AttachImageRequest, state: CanvasState = Depends(get_state)):
    image = attach_image(
        state.workspace.model(),
        image_id,
        request.targetId,
        request.anchorPoint,
        Point(request.offset.x, request.offset.y),
    )
    if image is None:
        raise HTTPException(status_code=400, detail="Image or anchor node is not attachable")
    state.commit()
    return node_to_dict(image)


@router.post("/images/{image_id}/detach")
def detach(image_id: str, state: CanvasState = Depends(get_state)):
    image = detach_image(state.workspace.model(), image_id)
    if image is None:
        raise HTTPException(status_code=404, detail=f"Unknown image '{image_id}'")
    state.commit()
    return node_to_dict(image)


# ============================
# Edges and branches
# ============================

@router.post("/edges")
def create_edge(request: CreateEdgeRequest, state: CanvasState = Depends(get_state)):
    edge = state.workspace.model().create_edge(request.source, request.target)
    if edge is None:
        return {"edge": None}
    state.commit()
    return {"edge": edge_to_dict(edge)}


@router.delete("/edges/{edge_id}")
def delete_edge(edge_id: str, state: CanvasState = Depends(get_state)):
    deleted = state.workspace.model().delete_edge(edge_id)
    if deleted:
        state.commit()
    return {"deleted": deleted}


@router.post("/edges/{edge_id}/activate")
def activate_edge(edge_id: str, state: CanvasState = Depends(get_state)):
    sheet = state.workspace.active_sheet
    changed = set_active(sheet, edge_id)
    if changed:
        state.commit()
    return {"activated": changed, "edges": [edge_to_dict(e) for e in sheet.edges]}


@router.get("/branches")
def list_branches(state: CanvasState = Depends(get_state)):
    return {
        target: [edge_to_dict(e) for e in edges]
        for target, edges in branches(state.workspace.active_sheet).items()
    }


@router.get("/edges/{edge_id}/path")
def edge_path(edge_id: str, state: CanvasState = Depends(get_state)):
    model = state.workspace.model()
    edge = model.sheet.get_edge(edge_id)
    source = model.get(edge.source) if edge else None
    target = model.get(edge.target) if edge else None
    if source is None or target is None:
        raise HTTPException(status_code=404, detail=f"Edge '{edge_id}' has no routable endpoints")

    curve = route(
        handle_point(model.bounds(source), Facing.BOTTOM),
        handle_point(model.bounds(target), Facing.TOP),
        Facing.BOTTOM,
        Facing.TOP,
        state.router_config,
    )
    return {"path": curve.to_svg_path(), "curve": serialize(curve), "labelPoint": serialize(curve.label_point)}


@router.post("/route")
def route_points(request: RouteRequest, state: CanvasState = Depends(get_state)):
    curve = route(
        Point(request.source.x, request.source.y),
        Point(request.target.x, request.target.y),
        request.sourceFacing,
        request.targetFacing,
        state.router_config,
    )
    return {"path": curve.to_svg_path(), "curve": serialize(curve), "labelPoint": serialize(curve.label_point)}


# ============================
# Layout, copy-path, templates
# ============================

@router.post("/layout")
def layout(request: LayoutRequest, state: CanvasState = Depends(get_state)):
    result = auto_layout(state.workspace.active_sheet, request.expand)
    state.commit()
    return {"layout": serialize(result), "sheet": sheet_to_dict(state.workspace.active_sheet)}


@router.get("/path-text")
def path_text(start: Optional[str] = None, state: CanvasState = Depends(get_state)):
    return {"text": compute_active_path_text(state.workspace.active_sheet, start)}


@router.get("/templates/presets")
def template_presets():
    return [
        {"name": p.name, "template": p.template, "parameters": extract_parameters(p.template)}
        for p in TEMPLATE_PRESETS
    ]


# ============================
# Import / export / diagnostics
# ============================

@router.get("/export")
def export_sheet(state: CanvasState = Depends(get_state)):
    return state.workspace.export_sheet()


@router.post("/import")
def import_sheet(payload: Any = Body(...), state: CanvasState = Depends(get_state)):
    try:
        sheet = state.workspace.import_sheet(payload)
    except MalformedImportError as e:
        raise HTTPException(status_code=400, detail=str(e))

    report = validate_sheet(sheet)
    state.commit()
    return {"sheet": sheet_to_dict(sheet), "validation": report.to_dict()}


@router.get("/validate")
def validate(state: CanvasState = Depends(get_state)):
    return validate_sheet(state.workspace.active_sheet).to_dict()


@router.get("/view-state")
def view_state(state: CanvasState = Depends(get_state)):
    return serialize(node_view_states(state.workspace.active_sheet))
