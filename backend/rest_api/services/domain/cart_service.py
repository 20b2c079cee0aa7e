"""
Cart Reconciliation.

Validates a client-held cart against the live catalog. This is the only
path from untrusted cart data to order creation: names and prices always
come from the catalog, never from the client.
"""

from __future__ import annotations

import math
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import MenuItem
from shared.config.constants import Limits, RemovalReason
from shared.config.logging import get_logger
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import (
    ActiveCartLine,
    CartLine,
    CartRefreshResponse,
    RemovedCartLine,
)

logger = get_logger(__name__)

# Largest id a BIGINT key can hold
MAX_ITEM_ID = 2**63 - 1


def _coerce_item_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and 0 < value <= MAX_ITEM_ID:
        return value
    return None


def _coerce_quantity(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    quantity = math.floor(value)
    return quantity if quantity > 0 else None


def normalize_cart_lines(raw_items: list[Any]) -> list[CartLine]:
    """
    Turn raw client lines into CartLines.

    Lines without a usable menu item id or with a non-positive or
    non-finite quantity are dropped. Fractional quantities are floored.

    Raises:
        ValidationError: A line asks for more than Limits.MAX_QUANTITY.
    """
    lines: list[CartLine] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        item_id = _coerce_item_id(raw.get("menu_item_id"))
        quantity = _coerce_quantity(raw.get("quantity"))
        if item_id is None or quantity is None:
            continue
        if quantity > Limits.MAX_QUANTITY:
            raise ValidationError(
                f"Quantity must be at most {Limits.MAX_QUANTITY}.",
                menu_item_id=item_id,
            )
        name = raw.get("name")
        lines.append(
            CartLine(
                menu_item_id=item_id,
                quantity=quantity,
                name=name if isinstance(name, str) else None,
            )
        )
    return lines


class CartService:
    def __init__(self, db: Session):
        self._db = db

    def refresh_cart_items(self, lines: list[CartLine]) -> CartRefreshResponse:
        """
        Partition cart lines into still-orderable and removed ones.

        Every input line lands in exactly one of the two lists, in input
        order. Quantities pass through unchanged. An empty cart returns
        immediately without querying the catalog.
        """
        if not lines:
            return CartRefreshResponse(active=[], removed=[])

        ids = {line.menu_item_id for line in lines}
        catalog = {
            item.id: item
            for item in self._db.scalars(
                select(MenuItem).where(MenuItem.id.in_(ids))
            ).all()
        }

        active: list[ActiveCartLine] = []
        removed: list[RemovedCartLine] = []
        for line in lines:
            item = catalog.get(line.menu_item_id)
            if item is None:
                removed.append(
                    RemovedCartLine(
                        menu_item_id=line.menu_item_id,
                        name=line.name,
                        reason=RemovalReason.NOT_FOUND,
                    )
                )
            elif not item.is_active:
                removed.append(
                    RemovedCartLine(
                        menu_item_id=line.menu_item_id,
                        name=item.name,
                        reason=RemovalReason.INACTIVE,
                    )
                )
            else:
                active.append(
                    ActiveCartLine(
                        menu_item_id=item.id,
                        name=item.name,
                        price_cents=item.price_cents,
                        image_url=item.image_url,
                        image_placeholder_url=item.image_placeholder_url,
                        quantity=line.quantity,
                    )
                )

        if removed:
            logger.info("Cart lines removed", removed=len(removed), active=len(active))
        return CartRefreshResponse(active=active, removed=removed)
