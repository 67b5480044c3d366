"""
Group containment on drag stop, view states and image attachments.
Run with: pytest test_grouping.py
"""

from prompt_canvas.graph.model import GraphModel
from prompt_canvas.graph.types import (
    AnchorPoint,
    Edge,
    GroupNode,
    ImageNode,
    Point,
    PromptNode,
    Sheet,
    Size,
)
from prompt_canvas.grouping.attachments import (
    anchor_position,
    attach_image,
    detach_image,
    sync_attached_images,
)
from prompt_canvas.grouping.policy import DragOutcome, GroupingPolicy, node_view_states


def make_model(*nodes, edges=()):
    return GraphModel(Sheet(id="s", nodes=list(nodes), edges=list(edges)))


def group(node_id="g", x=100, y=100, expanded=True, **kwargs):
    size = Size(450, 350) if expanded else Size(200, 50)
    return GroupNode(id=node_id, position=Point(x, y), size=size, expanded=expanded, **kwargs)


def card(node_id="n", x=0, y=0, parent=None):
    return PromptNode(id=node_id, position=Point(x, y), size=Size(240, 140), parent_group_id=parent)


# ---------- adopt ----------

def test_drop_onto_group_adopts_with_relative_position():
    model = make_model(group(), card(x=130, y=170))
    outcome = GroupingPolicy(model).on_drag_stop("n")
    node = model.get("n")
    assert outcome == DragOutcome.GROUPED
    assert node.parent_group_id == "g"
    assert node.position == Point(30, 70)


def test_adopt_clamps_below_header():
    model = make_model(group(), card(x=105, y=110))
    GroupingPolicy(model).on_drag_stop("n")
    assert model.get("n").position == Point(20, 60)


def test_adopt_expands_collapsed_group():
    model = make_model(group(expanded=False), card(x=120, y=120))
    GroupingPolicy(model).on_drag_stop("n")
    g = model.get("g")
    assert g.expanded is True
    assert g.size == Size(450, 350)
    assert model.get("n").parent_group_id == "g"


def test_overlapping_groups_do_not_adopt():
    model = make_model(group("g1", 0, 0), group("g2", 200, 0), card(x=250, y=100))
    assert GroupingPolicy(model).on_drag_stop("n") == DragOutcome.NONE
    assert model.get("n").parent_group_id is None


def test_drop_on_empty_canvas():
    model = make_model(group(), card(x=1000, y=1000))
    assert GroupingPolicy(model).on_drag_stop("n") == DragOutcome.NONE


def test_groups_are_never_adopted():
    model = make_model(group("g1", 0, 0), group("g2", 50, 50))
    assert GroupingPolicy(model).on_drag_stop("g2") == DragOutcome.NONE
    assert model.get("g2").parent_group_id is None


# ---------- release ----------

def test_child_dragged_far_left_leaves_group():
    model = make_model(group(), card(x=-60, y=10, parent="g"))
    outcome = GroupingPolicy(model).on_drag_stop("n")
    node = model.get("n")
    assert outcome == DragOutcome.UNGROUPED
    assert node.parent_group_id is None
    assert node.position == Point(40, 110)


def test_child_within_margin_stays():
    model = make_model(group(), card(x=-40, y=370, parent="g"))
    assert GroupingPolicy(model).on_drag_stop("n") == DragOutcome.NONE
    assert model.get("n").parent_group_id == "g"


def test_child_past_right_margin_leaves():
    model = make_model(group(), card(x=471, y=0, parent="g"))
    assert GroupingPolicy(model).on_drag_stop("n") == DragOutcome.UNGROUPED


def test_unknown_node_drag():
    assert GroupingPolicy(make_model()).on_drag_stop("ghost") == DragOutcome.NONE


# ---------- view states ----------

def test_collapsed_group_hides_children():
    model = make_model(group(expanded=False), card(parent="g"))
    states = node_view_states(model.sheet)
    assert states["n"].hidden is True
    assert states["g"].hidden is False


def test_edit_mode_lifts_children_and_locks_group():
    model = make_model(group(edit_mode=True), card(parent="g"), card("free", 900, 900))
    states = node_view_states(model.sheet)
    assert states["g"].draggable is False
    assert states["g"].selectable is False
    assert states["g"].z_index == -1
    assert states["n"].z_index == 1000
    assert states["free"].z_index == 0


def test_edit_mode_leaves_geometry_alone():
    g = group()
    model = make_model(g, card(x=30, y=70, parent="g"))
    model.set_edit_mode("g", True)
    assert g.position == Point(100, 100)
    assert model.get("n").position == Point(30, 70)


def test_path_root_flag():
    model = make_model(card("a"), card("b"), edges=[Edge("a", "b")])
    states = node_view_states(model.sheet)
    assert states["a"].is_path_root is True
    assert states["b"].is_path_root is False


# ---------- image attachments ----------

def test_attach_snaps_to_anchor():
    model = make_model(card("t"), ImageNode(id="i"))
    image = attach_image(model, "i", "t", AnchorPoint.TOP_RIGHT, Point(5, 5))
    assert image.attached_to == "t"
    assert image.position == Point(265, 5)


def test_sync_follows_moved_anchor():
    model = make_model(card("t"), ImageNode(id="i"))
    attach_image(model, "i", "t", AnchorPoint.BOTTOM_LEFT)
    model.get("t").position = Point(300, 0)
    assert sync_attached_images(model.sheet) == ["i"]
    assert model.get("i").position == Point(200, 160)
    assert sync_attached_images(model.sheet) == []


def test_sync_detaches_orphans():
    model = make_model(ImageNode(id="i", attached_to="gone"))
    assert sync_attached_images(model.sheet) == ["i"]
    assert model.get("i").attached_to is None


def test_images_cannot_anchor_to_images():
    model = make_model(ImageNode(id="i"), ImageNode(id="j"))
    assert attach_image(model, "i", "j") is None
    assert model.get("i").attached_to is None


def test_detach_and_anchor_table():
    model = make_model(card("t"), ImageNode(id="i", attached_to="t"))
    assert detach_image(model, "i").attached_to is None
    assert anchor_position(card("t"), AnchorPoint.CENTER) == Point(120, 70)
    assert anchor_position(card("t"), AnchorPoint.TOP_LEFT) == Point(-100, -100)
