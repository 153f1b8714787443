"""
Hierarchy query engine.

Builds nested godown trees level by level: one query for the godowns of a
level and one for their items, with an explicit depth counter instead of
recursion.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from godown.config import settings
from godown.core.exceptions import InvalidInputError
from godown.models.godown import Godown
from godown.models.item import Item
from godown.models.user import User
from godown.services.filters import ItemFilter
from godown.services.ownership import load_owned_godown
from godown.services.serializers import godown_node, item_to_dict

logger = logging.getLogger(__name__)

# Keeps IN (...) lists under SQLite's bound-parameter limit
IN_CLAUSE_CHUNK = 500


def _chunks(ids: List[str], size: int = IN_CLAUSE_CHUNK) -> Iterable[List[str]]:
    for start in range(0, len(ids), size):
        yield ids[start:start + size]


class HierarchyService:
    def top_level_godowns(self, db: Session, owner: User) -> List[Godown]:
        return (
            db.query(Godown)
            .filter(Godown.owner_id == owner.id, Godown.parent_godown_id.is_(None))
            .order_by(Godown.name, Godown.id)
            .all()
        )

    def children_of(self, db: Session, owner_id: int, parent_ids: List[str]) -> List[Godown]:
        children = []
        for chunk in _chunks(parent_ids):
            children.extend(
                db.query(Godown)
                .filter(Godown.owner_id == owner_id, Godown.parent_godown_id.in_(chunk))
                .order_by(Godown.name, Godown.id)
                .all()
            )
        return children

    def descendant_ids(self, db: Session, owner_id: int, root_ids: List[str]) -> List[str]:
        """All godown ids below ``root_ids`` (roots excluded), breadth first."""
        found: List[str] = []
        seen = set(root_ids)
        frontier = list(root_ids)
        while frontier:
            next_frontier = []
            for chunk in _chunks(frontier):
                rows = (
                    db.query(Godown.id)
                    .filter(Godown.owner_id == owner_id, Godown.parent_godown_id.in_(chunk))
                    .all()
                )
                for (child_id,) in rows:
                    if child_id not in seen:
                        seen.add(child_id)
                        next_frontier.append(child_id)
            found.extend(next_frontier)
            frontier = next_frontier
        return found

    def _attach_items(
        self,
        db: Session,
        nodes: Dict[str, Dict[str, Any]],
        godown_ids: List[str],
        item_filter: ItemFilter,
    ) -> None:
        for chunk in _chunks(godown_ids):
            query = db.query(Item).filter(Item.godown_id.in_(chunk))
            query = item_filter.apply(query).order_by(Item.name, Item.id)
            for item in query.all():
                nodes[item.godown_id]["items"].append(item_to_dict(item))

    def build_tree(
        self,
        db: Session,
        owner_id: int,
        roots: List[Godown],
        item_filter: Optional[ItemFilter] = None,
        levels: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Build nodes for ``roots`` and their descendants.

        ``levels`` is how many child levels to descend below the roots
        (0 = roots only). ``None`` means as deep as MAX_TREE_DEPTH allows.
        Every level gets its items filtered independently; godowns without
        matching items stay in the tree.
        """
        item_filter = item_filter or ItemFilter()
        limit = settings.MAX_TREE_DEPTH if levels is None else min(levels, settings.MAX_TREE_DEPTH)

        nodes: Dict[str, Dict[str, Any]] = {}
        result = []
        for godown in roots:
            node = godown_node(godown)
            nodes[godown.id] = node
            result.append(node)

        frontier = [godown.id for godown in roots]
        depth = 0
        while frontier:
            self._attach_items(db, nodes, frontier, item_filter)
            if depth >= limit:
                if levels is None and self.children_of(db, owner_id, frontier):
                    logger.warning(
                        f"Tree for owner {owner_id} truncated at depth {depth} "
                        f"(MAX_TREE_DEPTH={settings.MAX_TREE_DEPTH})"
                    )
                break

            children = self.children_of(db, owner_id, frontier)
            for child in children:
                if child.id in nodes:
                    continue
                node = godown_node(child)
                nodes[child.id] = node
                nodes[child.parent_godown_id]["sub_godowns"].append(node)
            frontier = [child.id for child in children]
            depth += 1

        return result

    def full_tree(self, db: Session, owner: User) -> List[Dict[str, Any]]:
        """Every top-level godown of the owner with its whole subtree."""
        return self.build_tree(db, owner.id, self.top_level_godowns(db, owner))

    def godown_subtree(self, db: Session, owner: User, godown_id: str) -> Dict[str, Any]:
        godown = load_owned_godown(db, owner, godown_id)
        return self.build_tree(db, owner.id, [godown])[0]

    def filtered_tree(
        self,
        db: Session,
        owner: User,
        item_filter: ItemFilter,
        godown_id: Optional[str] = None,
        subgodown_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Scoped and filtered hierarchy.

        * godown only: that node with its items; a top-level godown also gets
          its immediate children (each without further children).
        * subgodown only: that node alone.
        * both: the godown frames the response and holds only the subgodown,
          and only the subgodown's items are listed.
          Naming the same godown twice is the same as naming it once.
        * neither: all top-level godowns with full subtrees.
        """
        godown = load_owned_godown(db, owner, godown_id) if godown_id else None
        subgodown = (
            load_owned_godown(db, owner, subgodown_id, "SubGodown") if subgodown_id else None
        )

        if godown is not None and subgodown is not None and godown.id == subgodown.id:
            subgodown = None

        if godown is not None and subgodown is not None:
            if subgodown.parent_godown_id != godown.id:
                raise InvalidInputError("SubGodown does not belong to the selected Godown.")
            frame = godown_node(godown)
            frame["sub_godowns"] = self.build_tree(
                db, owner.id, [subgodown], item_filter, levels=0
            )
            return [frame]

        if subgodown is not None:
            return self.build_tree(db, owner.id, [subgodown], item_filter, levels=0)

        if godown is not None:
            levels = 1 if godown.is_top_level else 0
            return self.build_tree(db, owner.id, [godown], item_filter, levels=levels)

        return self.build_tree(
            db, owner.id, self.top_level_godowns(db, owner), item_filter
        )

    def filter_options(
        self,
        db: Session,
        owner: User,
        godown_id: Optional[str] = None,
        subgodown_id: Optional[str] = None,
        brand: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Dict[str, List[str]]:
        """Distinct brands and categories among the items in scope."""
        query = db.query(Item)
        if subgodown_id:
            subgodown = load_owned_godown(db, owner, subgodown_id, "SubGodown")
            query = query.filter(Item.godown_id == subgodown.id)
        elif godown_id:
            godown = load_owned_godown(db, owner, godown_id)
            scope = [godown.id] + self.descendant_ids(db, owner.id, [godown.id])
            query = query.filter(Item.godown_id.in_(scope))
        else:
            owned = select(Godown.id).where(Godown.owner_id == owner.id)
            query = query.filter(Item.godown_id.in_(owned))

        if brand:
            query = query.filter(Item.brand == brand)
        if category:
            query = query.filter(Item.category == category)

        brands = [row[0] for row in query.with_entities(Item.brand).distinct().all()]
        categories = [row[0] for row in query.with_entities(Item.category).distinct().all()]
        return {"brands": sorted(brands), "categories": sorted(categories)}


hierarchy_service = HierarchyService()
