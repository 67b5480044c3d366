"""
Graph model mutations: creation defaults, cascades, duplication, edges.
Run with: pytest test_graph_model.py
"""

import random

from prompt_canvas.graph.model import DUPLICATE_OFFSET, GraphModel, welcome_node
from prompt_canvas.graph.types import (
    Edge,
    GroupNode,
    ImageNode,
    NodeColor,
    NodeKind,
    Point,
    PromptNode,
    Sheet,
    Size,
    TemplateNode,
)


def make_model(*nodes, edges=None):
    sheet = Sheet(id="s", name="S", nodes=list(nodes), edges=list(edges or []))
    return GraphModel(sheet, random.Random(7))


def prompt(node_id, x=0, y=0, **kwargs):
    return PromptNode(id=node_id, position=Point(x, y), **kwargs)


# ---------- creation ----------

def test_create_prompt_defaults():
    model = make_model()
    node = model.create_node(NodeKind.PROMPT, Point(10, 20))
    assert isinstance(node, PromptNode)
    assert node.title == "New Prompt"
    assert node.size == Size(240, 140)
    assert node.position == Point(10, 20)
    assert model.sheet.nodes == [node]


def test_create_group_starts_collapsed():
    model = make_model()
    group = model.create_node(NodeKind.GROUP, Point(0, 0))
    assert group.expanded is False
    assert group.size == Size(200, 50)


def test_create_ids_are_unique():
    model = make_model()
    ids = {model.create_node(NodeKind.PROMPT, Point()).id for _ in range(20)}
    assert len(ids) == 20


def test_create_ignores_unknown_fields_and_bad_parent():
    model = make_model(prompt("p"))
    node = model.create_node(NodeKind.PROMPT, Point(), bogus=1, parent_group_id="p")
    assert node.parent_group_id is None
    assert not hasattr(node, "bogus")


def test_create_template_prunes_values():
    model = make_model()
    node = model.create_template("T", "Hi {{name}}", {"name": "Ada", "old": "x"})
    assert isinstance(node, TemplateNode)
    assert node.values == {"name": "Ada"}
    assert node.color == NodeColor.CYAN


# ---------- updates ----------

def test_update_unknown_node_is_noop():
    model = make_model()
    assert model.update_node("nope", title="x") is None


def test_update_cannot_change_id():
    model = make_model(prompt("a"))
    node = model.update_node("a", id="b", title="New")
    assert node.id == "a"
    assert node.title == "New"


def test_color_change_recolors_outgoing_edges():
    edges = [Edge("a", "b", id="e1"), Edge("b", "a", id="e2", color=NodeColor.RED)]
    model = make_model(prompt("a"), prompt("b"), edges=edges)
    model.update_node("a", color=NodeColor.GREEN)
    assert model.sheet.get_edge("e1").color == NodeColor.GREEN
    assert model.sheet.get_edge("e2").color == NodeColor.RED


def test_group_cannot_get_parent():
    model = make_model(GroupNode(id="g1"), GroupNode(id="g2"))
    model.update_node("g1", parent_group_id="g2")
    assert model.get("g1").parent_group_id is None


def test_parent_must_be_group():
    model = make_model(prompt("a"), prompt("b"), GroupNode(id="g"))
    model.update_node("a", parent_group_id="b")
    assert model.get("a").parent_group_id is None
    model.update_node("a", parent_group_id="g")
    assert model.get("a").parent_group_id == "g"


def test_template_edit_prunes_values():
    model = make_model(TemplateNode(id="t", template="{{a}} {{b}}", values={"a": "1", "b": "2"}))
    model.update_node("t", template="{{a}}")
    assert model.get("t").values == {"a": "1"}


def test_set_template_value():
    model = make_model(TemplateNode(id="t", template="{{a}}"))
    model.set_template_value("t", "a", "x")
    assert model.get("t").values == {"a": "x"}
    assert model.set_template_value("missing", "a", "x") is None


def test_expanding_group_gets_full_size():
    model = make_model(GroupNode(id="g", expanded=False, size=Size(200, 50)))
    model.set_expanded("g", True)
    assert model.get("g").size == Size(450, 350)


def test_update_expanded_resizes_group():
    model = make_model(GroupNode(id="g", expanded=False, size=Size(200, 50)))
    model.update_node("g", expanded=True)
    assert model.get("g").expanded is True
    assert model.get("g").size == Size(450, 350)


# ---------- deletion ----------

def test_delete_cascades_edges():
    edges = [Edge("a", "b", id="e1"), Edge("b", "c", id="e2")]
    model = make_model(prompt("a"), prompt("b"), prompt("c"), edges=edges)
    assert model.delete_node("b") is True
    assert model.sheet.edges == []
    assert model.sheet.node_ids() == {"a", "c"}


def test_delete_group_releases_children_at_absolute_position():
    group = GroupNode(id="g", position=Point(100, 100), size=Size(450, 350))
    child = prompt("c", 30, 70, parent_group_id="g")
    model = make_model(group, child)
    model.delete_node("g")
    assert child.parent_group_id is None
    assert child.position == Point(130, 170)


def test_delete_anchor_detaches_images():
    image = ImageNode(id="i", attached_to="a")
    model = make_model(prompt("a"), image)
    model.delete_node("a")
    assert image.attached_to is None


def test_delete_unknown_node():
    model = make_model(prompt("a"))
    assert model.delete_node("zzz") is False
    assert model.sheet.node_ids() == {"a"}


def test_ungroup_keeps_absolute_positions():
    group = GroupNode(id="g", position=Point(50, 60))
    model = make_model(group, prompt("c", 10, 10, parent_group_id="g"))
    released = model.ungroup("g")
    assert [n.id for n in released] == ["c"]
    assert model.get("c").position == Point(60, 70)
    assert model.get("g") is not None


# ---------- duplication ----------

def test_duplicate_offsets_and_recolors():
    original = prompt("a", 10, 10, color=NodeColor.BLUE, content="hello")
    model = make_model(original)
    clone = model.duplicate_node("a")
    assert clone.id != "a"
    assert clone.position == original.position + DUPLICATE_OFFSET
    assert clone.color != NodeColor.BLUE
    assert clone.content == "hello"


def test_duplicate_copies_edges_without_breaking_branch_rule():
    edges = [Edge("a", "b", id="e1", active=True)]
    model = make_model(prompt("a"), prompt("b"), edges=edges)
    clone = model.duplicate_node("a")

    copied = [e for e in model.sheet.edges if e.source == clone.id]
    assert len(copied) == 1
    assert copied[0].target == "b"
    assert copied[0].color == clone.color
    assert copied[0].active is False
    assert sum(1 for e in model.sheet.edges_into("b") if e.active) == 1


def test_duplicate_unknown_node():
    assert make_model().duplicate_node("x") is None


# ---------- edges ----------

def test_create_edge_takes_source_color():
    model = make_model(prompt("a", color=NodeColor.ORANGE), prompt("b"))
    edge = model.create_edge("a", "b")
    assert edge.color == NodeColor.ORANGE
    assert edge.active is True


def test_second_edge_into_target_is_inactive():
    model = make_model(prompt("a"), prompt("b"), prompt("c"))
    first = model.create_edge("a", "c")
    second = model.create_edge("b", "c")
    assert first.active is True
    assert second.active is False


def test_create_edge_missing_endpoint():
    model = make_model(prompt("a"))
    assert model.create_edge("a", "ghost") is None
    assert model.sheet.edges == []


def test_create_edge_returns_existing_duplicate():
    model = make_model(prompt("a"), prompt("b"))
    first = model.create_edge("a", "b")
    assert model.create_edge("a", "b") is first
    assert len(model.sheet.edges) == 1


def test_delete_edge():
    model = make_model(prompt("a"), prompt("b"), edges=[Edge("a", "b", id="e")])
    assert model.delete_edge("e") is True
    assert model.delete_edge("e") is False


def test_welcome_node():
    node = welcome_node()
    assert node.id == "welcome"
    assert node.position == Point(250, 100)
    assert "Prompt Canvas" in node.content
