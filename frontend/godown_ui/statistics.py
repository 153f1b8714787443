"""
Aggregate inventory statistics over a server godown response.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List

LOW_STOCK_THRESHOLD = 10


@dataclass
class InventoryStatistics:
    total_items: int = 0
    total_locations: int = 0
    total_godowns: int = 0
    total_sub_godowns: int = 0
    in_stock: int = 0
    out_of_stock: int = 0
    total_inventory_value: float = 0.0
    items_per_category: Dict[str, int] = field(default_factory=dict)
    items_per_brand: Dict[str, int] = field(default_factory=dict)
    low_stock_items: List[Dict[str, Any]] = field(default_factory=list)


def compute_statistics(locations: List[Dict[str, Any]]) -> InventoryStatistics:
    """
    Walk every node of the response. Nodes at the top of the response count
    as godowns, nested nodes as sub-godowns.
    """
    items: List[Dict[str, Any]] = []
    sub_godowns = 0
    stack = list(locations or [])
    while stack:
        location = stack.pop()
        items.extend(location.get("items") or [])
        children = location.get("sub_godowns") or []
        sub_godowns += len(children)
        stack.extend(children)

    godowns = len(locations or [])
    return InventoryStatistics(
        total_items=len(items),
        total_locations=godowns + sub_godowns,
        total_godowns=godowns,
        total_sub_godowns=sub_godowns,
        in_stock=sum(1 for item in items if item.get("status") == "in_stock"),
        out_of_stock=sum(1 for item in items if item.get("status") == "out_of_stock"),
        total_inventory_value=sum(
            float(item.get("price") or 0) * int(item.get("quantity") or 0) for item in items
        ),
        items_per_category=dict(Counter(item.get("category") for item in items)),
        items_per_brand=dict(Counter(item.get("brand") for item in items)),
        low_stock_items=[
            item for item in items if int(item.get("quantity") or 0) < LOW_STOCK_THRESHOLD
        ],
    )
