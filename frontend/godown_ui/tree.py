"""
Display tree for the dashboard.

Converts the server's nested godown response into location/item nodes and
provides the local operations the dashboard needs: move reconciliation,
drop target resolution, search narrowing and filter value collection.
Every operation returns new node lists and leaves its input untouched.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

LOCATION = "location"
ITEM = "item"
ALL = "All"


@dataclass(frozen=True)
class TreeNode:
    id: str
    name: str
    type: str
    children: List["TreeNode"] = field(default_factory=list)
    item_details: Optional[Dict[str, Any]] = None
    is_leaf_location: bool = False
    should_expand: bool = False

    @property
    def is_location(self) -> bool:
        return self.type == LOCATION

    @property
    def is_item(self) -> bool:
        return self.type == ITEM


def locations_to_tree(locations: List[Dict[str, Any]]) -> List[TreeNode]:
    """
    Convert server godown nodes into display nodes.

    A location's children are its converted sub-godowns followed by its
    items. Locations that end up with no children are left out.
    """
    result = []
    for location in locations or []:
        sub_godowns = location.get("sub_godowns") or []
        children = locations_to_tree(sub_godowns)
        children.extend(
            TreeNode(id=item["id"], name=item["name"], type=ITEM, item_details=item)
            for item in location.get("items") or []
        )
        if not children:
            continue
        result.append(
            TreeNode(
                id=location["id"],
                name=location["name"],
                type=LOCATION,
                children=children,
                is_leaf_location=not sub_godowns,
            )
        )
    return result


def iter_nodes(tree: List[TreeNode]) -> Iterator[TreeNode]:
    """Depth-first walk over every node."""
    stack = list(reversed(tree))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_node(tree: List[TreeNode], node_id: str) -> Optional[TreeNode]:
    for node in iter_nodes(tree):
        if node.id == node_id:
            return node
    return None


def find_parent_id(tree: List[TreeNode], node_id: str) -> Optional[str]:
    for node in iter_nodes(tree):
        if any(child.id == node_id for child in node.children):
            return node.id
    return None


def _remove(nodes: List[TreeNode], node_id: str, removed: List[TreeNode]) -> List[TreeNode]:
    result = []
    for node in nodes:
        if node.id == node_id:
            removed.append(node)
            continue
        if node.children:
            node = replace(node, children=_remove(node.children, node_id, removed))
        result.append(node)
    return result


def _append(nodes: List[TreeNode], parent_id: str, child: TreeNode) -> List[TreeNode]:
    result = []
    for node in nodes:
        if node.id == parent_id:
            node = replace(node, children=node.children + [child])
        elif node.children:
            node = replace(node, children=_append(node.children, parent_id, child))
        result.append(node)
    return result


def move_item(tree: List[TreeNode], item_id: str, target_id: str) -> List[TreeNode]:
    """
    Splice an item node out of its location and append it to ``target_id``.

    If either the item or the target location is missing from the tree the
    anomaly is logged and the tree is returned as it was.
    """
    removed: List[TreeNode] = []
    pruned = _remove(tree, item_id, removed)
    if not removed:
        logger.error(f"Item with ID {item_id} not found in the display tree")
        return tree
    target = find_node(pruned, target_id)
    if target is None or not target.is_location:
        logger.error(f"Target location {target_id} not found in the display tree")
        return tree
    return _append(pruned, target_id, removed[0])


def resolve_drop_target(
    tree: List[TreeNode], dragged: TreeNode, target: TreeNode
) -> Optional[str]:
    """
    Location id an item dropped on ``target`` should move to.

    A leaf location receives the item itself; an item target means its
    parent location. Anything else is not a valid drop.
    """
    if not dragged.is_item:
        logger.error(f"Only items can be moved, got {dragged.type} {dragged.id}")
        return None
    if target.is_location and target.is_leaf_location:
        return target.id
    if target.is_item:
        parent_id = find_parent_id(tree, target.id)
        if parent_id is None:
            logger.error(f"Parent not found for target item {target.id}")
        return parent_id
    logger.error(f"Invalid drop target {target.id}")
    return None


def filter_tree(tree: List[TreeNode], query: str) -> List[TreeNode]:
    """
    Narrow the tree to nodes matching ``query`` (case-insensitive substring).

    A location whose own name matches keeps all of its children and is not
    expanded. A location with matching descendants keeps only those and is
    marked for expansion. An empty query returns ``tree`` unchanged.
    """
    if not query:
        return tree
    needle = query.lower()

    def narrow(nodes: List[TreeNode]) -> List[TreeNode]:
        result = []
        for node in nodes:
            name_match = needle in node.name.lower()
            if node.is_item:
                if name_match:
                    result.append(node)
            elif name_match:
                result.append(replace(node, should_expand=False))
            else:
                children = narrow(node.children)
                if children:
                    result.append(replace(node, children=children, should_expand=True))
        return result

    return narrow(tree)


def collect_filter_values(tree: List[TreeNode]) -> Dict[str, List[str]]:
    """Distinct categories, brands and statuses in the tree, each led by "All"."""
    categories, brands, statuses = set(), set(), set()
    for node in iter_nodes(tree):
        details = node.item_details
        if not node.is_item or not details:
            continue
        if details.get("category"):
            categories.add(details["category"])
        if details.get("brand"):
            brands.add(details["brand"])
        if details.get("status"):
            statuses.add(details["status"])
    return {
        "categories": [ALL] + sorted(categories),
        "brands": [ALL] + sorted(brands),
        "statuses": [ALL] + sorted(statuses),
    }
