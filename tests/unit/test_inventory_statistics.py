"""
Tests for inventory statistics aggregation
"""
import pytest

from godown_ui.statistics import compute_statistics


@pytest.mark.unit
def test_compute_statistics():
    locations = [
        {
            "id": "wa",
            "name": "Warehouse A",
            "items": [{"name": "Crate", "quantity": 20, "price": 1.0, "status": "in_stock", "category": "Storage", "brand": "Acme"}],
            "sub_godowns": [
                {
                    "id": "s1",
                    "name": "Shelf 1",
                    "items": [
                        {"name": "Widget", "quantity": 5, "price": 2.5, "status": "in_stock", "category": "Tools", "brand": "Acme"},
                        {"name": "Bolt", "quantity": 0, "price": 0.1, "status": "out_of_stock", "category": "Parts", "brand": "Zeta"},
                    ],
                    "sub_godowns": [],
                },
                {"id": "s2", "name": "Shelf 2", "items": [], "sub_godowns": []},
            ],
        },
        {"id": "wb", "name": "Warehouse B", "items": [], "sub_godowns": []},
    ]

    stats = compute_statistics(locations)

    assert stats.total_items == 3
    assert stats.total_godowns == 2
    assert stats.total_sub_godowns == 2
    assert stats.total_locations == 4
    assert (stats.in_stock, stats.out_of_stock) == (2, 1)
    assert stats.total_inventory_value == pytest.approx(32.5)
    assert stats.items_per_category == {"Storage": 1, "Tools": 1, "Parts": 1}
    assert stats.items_per_brand == {"Acme": 2, "Zeta": 1}
    assert {i["name"] for i in stats.low_stock_items} == {"Widget", "Bolt"}


@pytest.mark.unit
def test_empty_response():
    stats = compute_statistics([])
    assert stats.total_items == 0
    assert stats.total_locations == 0
    assert stats.total_inventory_value == 0
