"""
Dashboard application state.

One ``DashboardState`` instance holds everything the dashboard reads and
writes; it is handed explicitly to the controller and the UI.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from godown_ui.tree import ALL, TreeNode, collect_filter_values, filter_tree, iter_nodes


@dataclass
class AppliedFilters:
    """Server-side filters. ``"All"`` and empty values are inactive."""

    category: str = ALL
    status: str = ALL
    brand: str = ALL
    min_price: str = ""
    max_price: str = ""
    min_quantity: str = ""
    max_quantity: str = ""

    def to_params(self) -> Dict[str, str]:
        """Query parameters for ``GET /godown/filtered``."""
        params = {}
        for key, value in (
            ("category", self.category),
            ("status", self.status),
            ("brand", self.brand),
        ):
            if value and value != ALL:
                params[key] = value
        for key, value in (
            ("minPrice", self.min_price),
            ("maxPrice", self.max_price),
            ("minQuantity", self.min_quantity),
            ("maxQuantity", self.max_quantity),
        ):
            if value not in ("", None):
                params[key] = str(value)
        return params

    def reset(self) -> None:
        self.category = self.status = self.brand = ALL
        self.min_price = self.max_price = self.min_quantity = self.max_quantity = ""


class ExpansionState:
    """Per-node expanded flags; unknown nodes are collapsed."""

    def __init__(self):
        self._expanded: Dict[str, bool] = {}

    def recompute(self, displayed: List[TreeNode]) -> None:
        """Discard user toggles and take the flags the displayed tree asks for."""
        self._expanded = {
            node.id: node.should_expand for node in iter_nodes(displayed) if node.is_location
        }

    def is_expanded(self, node_id: str) -> bool:
        return self._expanded.get(node_id, False)

    def toggle(self, node_id: str) -> bool:
        self._expanded[node_id] = not self.is_expanded(node_id)
        return self._expanded[node_id]

    def sync(self, expanded_ids: List[str]) -> None:
        """Adopt the expanded set reported by the tree widget."""
        expanded = set(expanded_ids or [])
        for node_id in set(self._expanded) | expanded:
            self._expanded[node_id] = node_id in expanded

    def expanded_ids(self) -> List[str]:
        return [node_id for node_id, expanded in self._expanded.items() if expanded]


@dataclass
class DashboardState:
    search_query: str = ""
    filters: AppliedFilters = field(default_factory=AppliedFilters)
    categories: List[str] = field(default_factory=lambda: [ALL])
    brands: List[str] = field(default_factory=lambda: [ALL])
    statuses: List[str] = field(default_factory=lambda: [ALL])
    tree: List[TreeNode] = field(default_factory=list)
    displayed_tree: List[TreeNode] = field(default_factory=list)
    expansion: ExpansionState = field(default_factory=ExpansionState)
    selected: Optional[TreeNode] = None
    loading: bool = False
    error: str = ""

    def filter_params(self) -> Dict[str, Any]:
        return self.filters.to_params()

    def set_tree(self, tree: List[TreeNode]) -> None:
        """Take a freshly fetched tree, re-deriving the displayed view and filter values."""
        self.tree = tree
        values = collect_filter_values(tree)
        self.categories = values["categories"]
        self.brands = values["brands"]
        self.statuses = values["statuses"]
        self._redisplay()

    def replace_tree(self, tree: List[TreeNode]) -> None:
        """Swap in a locally edited tree; expansion flags and filter values stay."""
        self.tree = tree
        self.displayed_tree = filter_tree(tree, self.search_query)

    def set_search_query(self, query: str) -> None:
        self.search_query = query
        self._redisplay()

    def set_error(self, message: str) -> None:
        self.error = message
        self.tree = []
        self.displayed_tree = []

    def _redisplay(self) -> None:
        self.displayed_tree = filter_tree(self.tree, self.search_query)
        self.expansion.recompute(self.displayed_tree)
