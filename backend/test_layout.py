"""
Auto-layout rows, positions and sizes.
Run with: pytest test_layout.py
"""

from prompt_canvas.graph.types import (
    Edge,
    GroupNode,
    ImageNode,
    NodeKind,
    Point,
    PromptNode,
    Sheet,
    Size,
    TemplateNode,
)
from prompt_canvas.layout.engine import LayoutConfig, auto_layout, compute_rows, sheet_bounds
from prompt_canvas.layout.sizes import image_node_size, layout_size


def make_sheet(nodes, edges=()):
    return Sheet(id="s", nodes=list(nodes), edges=list(edges))


def test_chain_rows_and_positions():
    sheet = make_sheet(
        [PromptNode(id="a"), PromptNode(id="b"), PromptNode(id="c")],
        [Edge("a", "b"), Edge("b", "c")],
    )
    result = auto_layout(sheet, expand=True)

    assert result.rows == [["a"], ["b"], ["c"]]
    a, b, c = sheet.nodes
    # 280 wide, centered on x=250
    assert a.position == Point(110, 100)
    assert b.position == Point(110, 100 + 180 + 80)
    assert c.position == Point(110, 100 + 2 * (180 + 80))


def test_row_is_centered_with_padding():
    sheet = make_sheet([PromptNode(id="a"), PromptNode(id="b")])
    auto_layout(sheet, expand=True)
    a, b = sheet.nodes
    total = 280 * 2 + 40
    assert a.position.x == 250 - total / 2
    assert b.position.x == a.position.x + 280 + 40
    assert a.position.y == b.position.y == 100


def test_targets_below_sources():
    sheet = make_sheet(
        [PromptNode(id="a"), PromptNode(id="b"), PromptNode(id="c"), PromptNode(id="d")],
        [Edge("a", "b"), Edge("a", "c"), Edge("b", "d"), Edge("c", "d"), Edge("a", "d")],
    )
    result = auto_layout(sheet, expand=True)
    for edge in sheet.edges:
        assert result.row_of(edge.target) >= result.row_of(edge.source) + 1


def test_collapse_uses_compact_sizes_and_padding():
    sheet = make_sheet(
        [PromptNode(id="a"), TemplateNode(id="t")],
        [Edge("a", "t")],
    )
    auto_layout(sheet, expand=False)
    a, t = sheet.nodes
    assert a.expanded is False and t.expanded is False
    assert a.size == Size(200, 50)
    assert t.position.y == 100 + 50 + 40


def test_expanded_sizes_per_kind():
    sheet = make_sheet([PromptNode(id="p"), TemplateNode(id="t"), GroupNode(id="g")])
    auto_layout(sheet, expand=True)
    sizes = {n.id: n.size for n in sheet.nodes}
    assert sizes == {"p": Size(280, 180), "t": Size(320, 220), "g": Size(450, 350)}


def test_groups_stack_after_free_rows_and_children_stay():
    group = GroupNode(id="g", position=Point(999, 999))
    child = PromptNode(id="c", position=Point(30, 70), parent_group_id="g")
    sheet = make_sheet([PromptNode(id="a"), group, child])
    result = auto_layout(sheet, expand=True)

    assert result.group_rows == ["g"]
    assert group.position == Point(250 - 450 / 2, 100 + 180 + 80)
    assert child.position == Point(30, 70)
    assert result.row_of("c") is None


def test_cycle_members_get_own_rows():
    sheet = make_sheet(
        [PromptNode(id="a"), PromptNode(id="b")],
        [Edge("a", "b"), Edge("b", "a")],
    )
    rows = compute_rows(sheet.nodes, sheet)
    assert rows == [["a"], ["b"]]


def test_custom_config():
    sheet = make_sheet([PromptNode(id="a")])
    auto_layout(sheet, expand=True, config=LayoutConfig(center_x=0, start_y=0))
    assert sheet.nodes[0].position == Point(-140, 0)


def test_bounds_cover_children():
    group = GroupNode(id="g", position=Point(0, 0), size=Size(450, 350))
    child = PromptNode(id="c", position=Point(400, 300), size=Size(100, 100), parent_group_id="g")
    bounds = sheet_bounds(make_sheet([group, child]))
    assert (bounds.right, bounds.bottom) == (500, 400)
    assert sheet_bounds(make_sheet([])) is None


def test_image_node_size():
    assert image_node_size(600, 300) == Size(324, 210)
    assert image_node_size(50, 50) == Size(150, 150)
    assert layout_size(NodeKind.IMAGE, False) == Size(200, 50)
    assert isinstance(ImageNode().size, Size)
