"""
Tests for the hierarchy engine and godown structure maintenance
"""
import logging

import pytest

from godown.config import settings
from godown.core.exceptions import AuthorizationError, InvalidInputError, NotFoundError
from godown.models import Godown, Item
from godown.services.filters import ItemFilter
from godown.services.godown_service import godown_service
from godown.services.hierarchy import hierarchy_service


@pytest.fixture
def chain(make_user, make_godown, make_item):
    """Five nested godowns, one item at every level"""
    owner = make_user()
    levels = []
    parent = None
    for depth in range(5):
        parent = make_godown(owner, f"Level {depth}", parent)
        make_item(parent, f"Item {depth}")
        levels.append(parent)
    return owner, levels


def depth_of(node):
    depth = 0
    while node["sub_godowns"]:
        node = node["sub_godowns"][0]
        depth += 1
    return depth


@pytest.mark.unit
class TestBuildTree:
    """Tests for level-by-level tree construction"""

    def test_full_tree_reaches_every_level(self, test_db, chain):
        owner, _ = chain
        tree = hierarchy_service.full_tree(test_db, owner)
        assert len(tree) == 1
        assert depth_of(tree[0]) == 4

        node = tree[0]
        while node["sub_godowns"]:
            assert len(node["items"]) == 1
            node = node["sub_godowns"][0]
        assert node["items"][0]["name"] == "Item 4"

    def test_depth_cap_truncates_and_warns(self, test_db, chain, monkeypatch, caplog):
        owner, _ = chain
        monkeypatch.setattr(settings, "MAX_TREE_DEPTH", 2)
        with caplog.at_level(logging.WARNING, logger="godown.services.hierarchy"):
            tree = hierarchy_service.full_tree(test_db, owner)
        assert depth_of(tree[0]) == 2
        assert "truncated" in caplog.text

    def test_levels_zero_returns_roots_only(self, test_db, chain):
        owner, levels = chain
        nodes = hierarchy_service.build_tree(test_db, owner.id, [levels[1]], levels=0)
        assert nodes[0]["sub_godowns"] == []
        assert [i["name"] for i in nodes[0]["items"]] == ["Item 1"]

    def test_filter_applies_per_level(self, test_db, chain):
        owner, _ = chain
        tree = hierarchy_service.filtered_tree(
            test_db, owner, ItemFilter.from_params(search="item 3")
        )
        node = tree[0]
        found = []
        while True:
            found.extend(i["name"] for i in node["items"])
            if not node["sub_godowns"]:
                break
            node = node["sub_godowns"][0]
        assert found == ["Item 3"]
        assert depth_of(tree[0]) == 4

    def test_descendant_ids(self, test_db, chain):
        owner, levels = chain
        ids = hierarchy_service.descendant_ids(test_db, owner.id, [levels[2].id])
        assert ids == [levels[3].id, levels[4].id]


@pytest.mark.unit
class TestOwnershipPolicy:
    """Absent ids are 404, foreign ids are 403, malformed ids are 400"""

    def test_policy(self, test_db, chain, make_user):
        owner, levels = chain
        stranger = make_user("stranger@example.com")
        with pytest.raises(AuthorizationError):
            hierarchy_service.godown_subtree(test_db, stranger, levels[0].id)
        with pytest.raises(NotFoundError):
            hierarchy_service.godown_subtree(test_db, owner, "00000000-0000-4000-8000-000000000000")
        with pytest.raises(InvalidInputError):
            hierarchy_service.godown_subtree(test_db, owner, "nope")


@pytest.mark.unit
class TestStructureMaintenance:
    """Leaf flags, cycle prevention and cascade delete"""

    def test_leaf_flags_follow_children(self, test_db, make_user):
        owner = make_user()
        top = godown_service.create_godown(test_db, owner, "Top")
        child = godown_service.create_godown(test_db, owner, "Child", parent_godown=top["id"])
        assert test_db.get(Godown, top["id"]).is_leaf is False
        assert child["is_leaf"] is True

        godown_service.update_godown(test_db, owner, child["id"], {"parent_godown": None})
        test_db.expire_all()
        assert test_db.get(Godown, top["id"]).is_leaf is True

    def test_cycle_rejected(self, test_db, chain):
        owner, levels = chain
        with pytest.raises(InvalidInputError, match="descendant"):
            godown_service.update_godown(
                test_db, owner, levels[1].id, {"parent_godown": levels[4].id}
            )

    def test_delete_all_for_owner(self, test_db, chain, make_user, make_godown, make_item):
        owner, _ = chain
        other = make_user("other@example.com")
        keep = make_godown(other, "Keep")
        make_item(keep, "Kept")

        removed = godown_service.delete_all_for_owner(test_db, owner)
        test_db.commit()
        assert removed == 5
        assert [g.name for g in test_db.query(Godown).all()] == ["Keep"]
        assert [i.name for i in test_db.query(Item).all()] == ["Kept"]
