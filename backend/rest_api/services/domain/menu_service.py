"""
Menu Catalog.

Orderable items, their availability and display rank. Order lines keep
their own price snapshot, so price edits never touch historical orders.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import MenuItem, OrderItem
from shared.config.logging import menu_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import ConflictError, NotFoundError, ValidationError
from shared.utils.schemas import MenuItemCreate, MenuItemOutput, MenuItemUpdate
from shared.utils.validators import require_text, validate_badges, validate_image_url


def menu_item_to_output(item: MenuItem) -> MenuItemOutput:
    return MenuItemOutput(
        id=item.id,
        name=item.name,
        price_cents=item.price_cents,
        image_url=item.image_url,
        image_placeholder_url=item.image_placeholder_url,
        badges=item.badges,
        is_active=item.is_active,
        sort_order=item.sort_order,
        created_at=item.created_at,
    )


class MenuService:
    """
    Business rules:
    - Prices are non-negative integer cents
    - New items go to the end of the display order
    - Items referenced by past orders cannot be deleted (deactivate them)
    """

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_menu_items(self) -> list[MenuItem]:
        """Management view: every item, newest first."""
        return list(
            self._db.scalars(
                select(MenuItem).order_by(MenuItem.created_at.desc(), MenuItem.id.desc())
            ).all()
        )

    def get_active_menu_items(self) -> list[MenuItem]:
        """Public view: active items in display order."""
        return list(
            self._db.scalars(
                select(MenuItem)
                .where(MenuItem.is_active.is_(True))
                .order_by(MenuItem.sort_order, MenuItem.created_at, MenuItem.id)
            ).all()
        )

    def get_menu_item(self, item_id: int) -> MenuItem:
        item = self._db.get(MenuItem, item_id)
        if item is None:
            raise NotFoundError("Menu item", item_id)
        return item

    # =========================================================================
    # Command Methods
    # =========================================================================

    def create_menu_item(self, data: MenuItemCreate) -> MenuItem:
        fields = self._clean_fields(data.model_dump())

        max_rank = self._db.scalar(select(func.max(MenuItem.sort_order)))
        item = MenuItem(
            name=fields["name"],
            price_cents=fields["price_cents"],
            image_url=fields.get("image_url"),
            image_placeholder_url=fields.get("image_placeholder_url"),
            badges=fields.get("badges"),
            is_active=fields.get("is_active", True),
            sort_order=0 if max_rank is None else max_rank + 1,
        )
        self._db.add(item)
        safe_commit(self._db)
        self._db.refresh(item)

        logger.info("Menu item created", item_id=item.id, price_cents=item.price_cents)
        return item

    def update_menu_item(self, item_id: int, data: MenuItemUpdate) -> MenuItem:
        """Apply only the fields present in the request."""
        item = self.get_menu_item(item_id)
        fields = self._clean_fields(data.model_dump(exclude_unset=True))

        for key, value in fields.items():
            setattr(item, key, value)

        safe_commit(self._db)
        self._db.refresh(item)

        logger.info("Menu item updated", item_id=item_id, fields=sorted(fields))
        return item

    def delete_menu_item(self, item_id: int) -> MenuItemOutput:
        """
        Hard delete. Returns the deleted item.

        Raises:
            NotFoundError: If the item does not exist.
            ConflictError: If order lines reference the item.
        """
        item = self.get_menu_item(item_id)

        referenced = self._db.scalar(
            select(OrderItem.id).where(OrderItem.menu_item_id == item_id).limit(1)
        )
        if referenced is not None:
            raise ConflictError(
                "Menu item is used by existing orders. Deactivate it instead.",
                item_id=item_id,
            )

        output = menu_item_to_output(item)
        self._db.delete(item)
        try:
            safe_commit(self._db)
        except IntegrityError:
            # An order referencing the item committed in between
            raise ConflictError(
                "Menu item is used by existing orders. Deactivate it instead.",
                item_id=item_id,
            )

        logger.info("Menu item deleted", item_id=item_id)
        return output

    def reorder_menu_items(self, ordered_ids: list[int]) -> list[MenuItem]:
        """
        Persist a new display order.

        Listed items get ranks 0..n-1 in the given order. Unknown ids are
        ignored. Unlisted items keep their relative order after the listed
        ones. Returns the whole catalog in display order.
        """
        items = self._db.scalars(
            select(MenuItem).order_by(MenuItem.sort_order, MenuItem.created_at, MenuItem.id)
        ).all()
        by_id = {item.id: item for item in items}

        listed: list[MenuItem] = []
        seen: set[int] = set()
        for item_id in ordered_ids:
            if item_id in by_id and item_id not in seen:
                listed.append(by_id[item_id])
                seen.add(item_id)
        unlisted = [item for item in items if item.id not in seen]

        for rank, item in enumerate(listed + unlisted):
            item.sort_order = rank

        safe_commit(self._db)
        logger.info("Menu reordered", listed=len(listed), total=len(items))

        return list(
            self._db.scalars(
                select(MenuItem).order_by(MenuItem.sort_order, MenuItem.created_at, MenuItem.id)
            ).all()
        )

    # =========================================================================
    # Private Helpers - Validation
    # =========================================================================

    def _clean_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Validate and normalize the fields present in a create/update body."""
        cleaned: dict[str, Any] = {}

        if "name" in fields:
            try:
                cleaned["name"] = require_text(fields["name"], "Name")
            except ValueError as e:
                raise ValidationError(str(e), field="name")

        if "price_cents" in fields:
            price = fields["price_cents"]
            if not isinstance(price, int) or isinstance(price, bool) or price < 0:
                raise ValidationError("Price must be a non-negative integer", field="price_cents")
            cleaned["price_cents"] = price

        for key in ("image_url", "image_placeholder_url"):
            if key in fields:
                try:
                    cleaned[key] = validate_image_url(fields[key])
                except ValueError as e:
                    raise ValidationError(str(e), field=key)

        if "badges" in fields:
            try:
                cleaned["badges"] = validate_badges(fields["badges"])
            except ValueError as e:
                raise ValidationError(str(e), field="badges")

        if "is_active" in fields:
            if fields["is_active"] is None:
                raise ValidationError("is_active cannot be null", field="is_active")
            cleaned["is_active"] = bool(fields["is_active"])

        return cleaned
