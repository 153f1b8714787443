"""
Tests for dashboard state, expansion and debounced search
"""
import asyncio

import pytest

from godown_ui.debounce import Debouncer
from godown_ui.state import AppliedFilters, DashboardState
from godown_ui.tree import locations_to_tree


def sample_tree():
    return locations_to_tree(
        [
            {
                "id": "wa",
                "name": "Warehouse A",
                "items": [],
                "sub_godowns": [
                    {
                        "id": "s1",
                        "name": "Shelf 1",
                        "items": [{"id": "w", "name": "Widget", "category": "Tools", "brand": "Acme", "status": "in_stock"}],
                        "sub_godowns": [],
                    }
                ],
            }
        ]
    )


@pytest.mark.unit
class TestAppliedFilters:
    """Tests for query parameter building"""

    def test_defaults_send_nothing(self):
        assert AppliedFilters().to_params() == {}

    def test_active_values(self):
        filters = AppliedFilters(category="Tools", status="All", min_price="1", max_quantity=5)
        assert filters.to_params() == {"category": "Tools", "minPrice": "1", "maxQuantity": "5"}

    def test_reset(self):
        filters = AppliedFilters(brand="Acme", min_price="3")
        filters.reset()
        assert filters.to_params() == {}


@pytest.mark.unit
class TestDashboardState:
    """Tests for tree display and expansion recompute"""

    def test_set_tree_collects_options(self):
        state = DashboardState()
        state.set_tree(sample_tree())
        assert state.categories == ["All", "Tools"]
        assert state.displayed_tree == state.tree

    def test_search_recomputes_expansion(self):
        state = DashboardState()
        state.set_tree(sample_tree())
        assert state.expansion.expanded_ids() == []

        state.set_search_query("wid")
        assert set(state.expansion.expanded_ids()) == {"wa", "s1"}

        state.expansion.toggle("s1")
        assert state.expansion.is_expanded("s1") is False

        state.set_search_query("wi")
        assert state.expansion.is_expanded("s1") is True

        state.set_search_query("")
        assert state.expansion.expanded_ids() == []

    def test_widget_sync_kept_until_recompute(self):
        state = DashboardState()
        state.set_tree(sample_tree())
        state.expansion.sync(["wa"])
        assert state.expansion.expanded_ids() == ["wa"]
        state.set_search_query("shelf")
        assert state.expansion.is_expanded("wa") is True
        assert state.expansion.is_expanded("s1") is False

    def test_unknown_node_collapsed(self):
        assert DashboardState().expansion.is_expanded("nope") is False

    def test_error_clears_tree(self):
        state = DashboardState()
        state.set_tree(sample_tree())
        state.set_error("Failed to load tree data.")
        assert state.tree == [] and state.displayed_tree == []
        assert state.error == "Failed to load tree data."


@pytest.mark.unit
@pytest.mark.asyncio
class TestDebouncer:
    """Tests for the search debounce"""

    async def test_only_last_call_fires(self):
        calls = []
        debounced = Debouncer(calls.append, delay=0.02)
        debounced("w")
        debounced("wi")
        debounced("wid")
        assert debounced.pending
        await asyncio.sleep(0.06)
        assert calls == ["wid"]
        assert not debounced.pending

    async def test_cancel_drops_pending_call(self):
        calls = []
        debounced = Debouncer(calls.append, delay=0.02)
        debounced("wid")
        debounced.cancel()
        await asyncio.sleep(0.05)
        assert calls == []
