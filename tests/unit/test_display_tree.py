"""
Tests for the dashboard display tree
"""
import logging

import pytest

from godown_ui.tree import (
    ITEM,
    LOCATION,
    TreeNode,
    collect_filter_values,
    filter_tree,
    find_node,
    find_parent_id,
    locations_to_tree,
    move_item,
    resolve_drop_target,
)


def item(item_id, name, **details):
    data = {"id": item_id, "name": name, "category": "Tools", "brand": "Acme", "status": "in_stock"}
    data.update(details)
    return data


def location(loc_id, name, items=(), subs=()):
    return {"id": loc_id, "name": name, "items": list(items), "sub_godowns": list(subs)}


@pytest.fixture
def server_tree():
    """Warehouse A > (Shelf 1 > Widget, Shelf 2 > Bolt, Empty), Warehouse B (empty)"""
    return [
        location(
            "wa",
            "Warehouse A",
            subs=[
                location("s1", "Shelf 1", items=[item("w", "Widget")]),
                location("s2", "Shelf 2", items=[item("b", "Bolt", category="Parts", brand="Zeta")]),
                location("empty", "Empty"),
            ],
        ),
        location("wb", "Warehouse B"),
    ]


@pytest.fixture
def tree(server_tree):
    return locations_to_tree(server_tree)


@pytest.mark.unit
class TestConversion:
    """Tests for locations_to_tree"""

    def test_empty_locations_dropped(self, tree):
        assert [n.id for n in tree] == ["wa"]
        assert [c.id for c in tree[0].children] == ["s1", "s2"]

    def test_sub_locations_before_items(self):
        converted = locations_to_tree(
            [location("top", "Top", items=[item("i", "Loose")], subs=[location("sub", "Sub", items=[item("j", "Deep")])])]
        )
        assert [(c.id, c.type) for c in converted[0].children] == [("sub", LOCATION), ("i", ITEM)]

    def test_leaf_flag_and_details(self, tree):
        assert tree[0].is_leaf_location is False
        shelf = find_node(tree, "s1")
        assert shelf.is_leaf_location is True
        assert find_node(tree, "w").item_details["brand"] == "Acme"


@pytest.mark.unit
class TestMoveReconciliation:
    """Tests for move_item"""

    def test_item_spliced_to_target(self, tree):
        moved = move_item(tree, "w", "s2")
        assert [c.id for c in find_node(moved, "s2").children] == ["b", "w"]
        assert find_node(moved, "s1").children == []
        assert find_parent_id(moved, "w") == "s2"

    def test_original_tree_untouched(self, tree):
        move_item(tree, "w", "s2")
        assert [c.id for c in find_node(tree, "s1").children] == ["w"]

    def test_missing_item_is_noop(self, tree, caplog):
        with caplog.at_level(logging.ERROR, logger="godown_ui.tree"):
            result = move_item(tree, "ghost", "s2")
        assert result is tree
        assert "ghost" in caplog.text

    def test_missing_target_is_noop(self, tree):
        assert move_item(tree, "w", "nowhere") is tree


@pytest.mark.unit
class TestDropTarget:
    """Tests for resolve_drop_target"""

    def test_leaf_location(self, tree):
        assert resolve_drop_target(tree, find_node(tree, "w"), find_node(tree, "s2")) == "s2"

    def test_item_target_uses_parent(self, tree):
        assert resolve_drop_target(tree, find_node(tree, "w"), find_node(tree, "b")) == "s2"

    def test_branch_location_invalid(self, tree):
        assert resolve_drop_target(tree, find_node(tree, "w"), find_node(tree, "wa")) is None

    def test_dragging_location_invalid(self, tree):
        assert resolve_drop_target(tree, find_node(tree, "s1"), find_node(tree, "s2")) is None


@pytest.mark.unit
class TestSearchNarrowing:
    """Tests for filter_tree"""

    def test_descendant_match_expands_ancestors(self):
        tree = locations_to_tree(
            [location("wa", "Warehouse A", subs=[location("s1", "Shelf 1", items=[item("w", "Widget")])])]
        )
        result = filter_tree(tree, "wid")
        assert [n.name for n in result] == ["Warehouse A"]
        assert result[0].should_expand is True
        shelf = result[0].children[0]
        assert shelf.name == "Shelf 1"
        assert shelf.should_expand is True
        assert [c.name for c in shelf.children] == ["Widget"]

    def test_location_name_match_keeps_children_collapsed(self, tree):
        result = filter_tree(tree, "shelf 2")
        shelf = result[0].children[0]
        assert shelf.id == "s2"
        assert shelf.should_expand is False
        assert [c.id for c in shelf.children] == ["b"]

    def test_non_matching_pruned(self, tree):
        result = filter_tree(tree, "bolt")
        assert [c.id for c in result[0].children] == ["s2"]

    def test_no_match(self, tree):
        assert filter_tree(tree, "zzz") == []

    def test_empty_query_unchanged(self, tree):
        assert filter_tree(tree, "") is tree


@pytest.mark.unit
def test_collect_filter_values(tree):
    values = collect_filter_values(tree)
    assert values == {
        "categories": ["All", "Parts", "Tools"],
        "brands": ["All", "Acme", "Zeta"],
        "statuses": ["All", "in_stock"],
    }


@pytest.mark.unit
def test_tree_node_kinds():
    node = TreeNode(id="x", name="X", type=ITEM)
    assert node.is_item and not node.is_location
