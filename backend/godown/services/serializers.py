"""
ORM -> plain dict conversion shared by services and routers.
"""

from typing import Any, Dict

from godown.models.godown import Godown
from godown.models.item import Item


def godown_summary(godown: Godown) -> Dict[str, Any]:
    return {
        "id": godown.id,
        "name": godown.name,
        "parent_godown": godown.parent_godown_id,
        "is_leaf": bool(godown.is_leaf),
    }


def godown_detail(godown: Godown) -> Dict[str, Any]:
    data = godown_summary(godown)
    data.update(
        owner=godown.owner_id,
        created_at=godown.created_at,
        updated_at=godown.updated_at,
    )
    return data


def godown_node(godown: Godown) -> Dict[str, Any]:
    """Tree node with empty item and child lists, filled in by the traversal."""
    data = godown_summary(godown)
    data["items"] = []
    data["sub_godowns"] = []
    return data


def item_to_dict(item: Item) -> Dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "quantity": item.quantity,
        "category": item.category,
        "price": item.price,
        "status": item.status.value if item.status else None,
        "godown_id": item.godown_id,
        "brand": item.brand,
        "attributes": item.attributes,
        "image_url": item.image_url,
        "created_at": item.created_at,
        "updated_at": item.updated_at,
    }


def item_with_godown(item: Item) -> Dict[str, Any]:
    data = item_to_dict(item)
    data["godown"] = godown_summary(item.godown)
    return data
