"""
Tests for cart normalization and reconciliation.
"""

import pytest

from rest_api.services.domain import CartService, normalize_cart_lines
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import CartLine


class TestNormalizeCartLines:

    def test_keeps_valid_lines(self):
        lines = normalize_cart_lines([
            {"menu_item_id": 1, "quantity": 2, "name": "Latte"},
            {"menu_item_id": "7", "quantity": 1},
        ])
        assert lines == [
            CartLine(menu_item_id=1, quantity=2, name="Latte"),
            CartLine(menu_item_id=7, quantity=1, name=None),
        ]

    def test_floors_fractional_quantities(self):
        lines = normalize_cart_lines([{"menu_item_id": 1, "quantity": 2.9}])
        assert lines[0].quantity == 2

    @pytest.mark.parametrize("raw", [
        "not a dict",
        None,
        {"quantity": 1},
        {"menu_item_id": None, "quantity": 1},
        {"menu_item_id": "abc", "quantity": 1},
        {"menu_item_id": -3, "quantity": 1},
        {"menu_item_id": True, "quantity": 1},
        {"menu_item_id": 1, "quantity": 0},
        {"menu_item_id": 1, "quantity": 0.5},
        {"menu_item_id": 1, "quantity": -1},
        {"menu_item_id": 1, "quantity": "2"},
        {"menu_item_id": 1, "quantity": float("nan")},
        {"menu_item_id": 1, "quantity": float("inf")},
        {"menu_item_id": 2**63, "quantity": 1},
        {"menu_item_id": "9" * 30, "quantity": 1},
    ])
    def test_drops_malformed_lines(self, raw):
        assert normalize_cart_lines([raw]) == []

    def test_max_quantity_is_accepted(self):
        assert normalize_cart_lines([{"menu_item_id": 1, "quantity": 99.7}])[0].quantity == 99

    @pytest.mark.parametrize("quantity", [100, 1e20, 10**30])
    def test_rejects_oversized_quantity(self, quantity):
        with pytest.raises(ValidationError) as exc:
            normalize_cart_lines([{"menu_item_id": 1, "quantity": quantity}])
        assert exc.value.status_code == 400

    def test_non_string_name_is_dropped(self):
        lines = normalize_cart_lines([{"menu_item_id": 1, "quantity": 1, "name": 42}])
        assert lines[0].name is None


class TestRefreshCartItems:

    def test_empty_cart(self, db_session):
        result = CartService(db_session).refresh_cart_items([])
        assert result.active == []
        assert result.removed == []

    def test_partitions_lines_in_input_order(self, db_session, latte, cold_brew, retired_item):
        lines = [
            CartLine(menu_item_id=cold_brew.id, quantity=2, name="stale name"),
            CartLine(menu_item_id=9999, quantity=1, name="Ghost Drink"),
            CartLine(menu_item_id=retired_item.id, quantity=1, name="client name"),
            CartLine(menu_item_id=latte.id, quantity=3),
        ]

        result = CartService(db_session).refresh_cart_items(lines)

        assert [(a.menu_item_id, a.quantity) for a in result.active] == [
            (cold_brew.id, 2),
            (latte.id, 3),
        ]
        # Catalog data wins over client data
        assert result.active[0].name == "Cold Brew"
        assert result.active[0].price_cents == 475

        assert [(r.menu_item_id, r.reason, r.name) for r in result.removed] == [
            (9999, "NOT_FOUND", "Ghost Drink"),
            (retired_item.id, "INACTIVE", "Pumpkin Spice"),
        ]

    def test_duplicate_lines_are_kept_separately(self, db_session, latte):
        lines = [
            CartLine(menu_item_id=latte.id, quantity=1),
            CartLine(menu_item_id=latte.id, quantity=2),
        ]
        result = CartService(db_session).refresh_cart_items(lines)
        assert [a.quantity for a in result.active] == [1, 2]
