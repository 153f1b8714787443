"""
Dashboard controller: moves data between the API client and DashboardState.
"""

import logging
from typing import Callable, Optional

from godown_ui.api_client import ApiClient, ApiError
from godown_ui.debounce import Debouncer
from godown_ui.state import DashboardState
from godown_ui.statistics import InventoryStatistics, compute_statistics
from godown_ui.tree import find_node, locations_to_tree, move_item, resolve_drop_target

logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load tree data."
STATS_ERROR = "Failed to load statistics."


class DashboardController:
    def __init__(
        self,
        client: ApiClient,
        state: Optional[DashboardState] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.client = client
        self.state = state or DashboardState()
        self.on_change = on_change
        self.search = Debouncer(self.commit_search)

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def commit_search(self, query: str) -> None:
        self.state.set_search_query(query)
        self._changed()

    async def refresh(self) -> None:
        """Fetch the filtered hierarchy and rebuild the display tree."""
        state = self.state
        state.loading = True
        state.error = ""
        try:
            locations = await self.client.filtered_tree(state.filter_params())
            state.set_tree(locations_to_tree(locations))
        except ApiError as e:
            logger.error(f"Error fetching tree data: {e}")
            state.set_error(LOAD_ERROR)
        finally:
            state.loading = False
            self._changed()

    async def move(self, item_id: str, to_location_id: str) -> bool:
        """
        Ask the server to move an item, then splice the local tree.

        Returns False when the server refuses; the tree is left untouched.
        """
        try:
            await self.client.move_item(item_id, to_location_id)
        except ApiError as e:
            logger.error(f"Error moving item {item_id}: {e}")
            return False

        state = self.state
        state.replace_tree(move_item(state.tree, item_id, to_location_id))
        moved = find_node(state.tree, item_id)
        if moved is None:
            logger.error(f"Moved item with ID {item_id} not found in the updated tree")
        state.selected = moved
        self._changed()
        return True

    async def drop(self, dragged_id: str, target_id: str) -> bool:
        """Move the node dragged onto another node of the tree, if that is a valid drop."""
        tree = self.state.tree
        dragged = find_node(tree, dragged_id)
        target = find_node(tree, target_id)
        if dragged is None or target is None:
            logger.error(f"Drop between unknown nodes {dragged_id} -> {target_id}")
            return False
        location_id = resolve_drop_target(tree, dragged, target)
        if location_id is None:
            return False
        return await self.move(dragged.id, location_id)

    def select(self, node_id: Optional[str]) -> None:
        self.state.selected = find_node(self.state.tree, node_id) if node_id else None
        self._changed()

    async def statistics(self, **scope: Optional[str]) -> InventoryStatistics:
        """Statistics over ``/godown/filtered`` for an optional godown/subgodown/brand/category scope."""
        params = {key: value for key, value in scope.items() if value}
        locations = await self.client.filtered_tree(params)
        return compute_statistics(locations)

    def teardown(self) -> None:
        self.search.cancel()
