"""
Menu catalog management.

Staff can read the full catalog, including inactive items; only admins
can change it.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common import require_action
from rest_api.services.domain import MenuService, menu_item_to_output
from rest_api.services.permissions import Action
from shared.infrastructure.db import get_db
from shared.security.auth import Principal
from shared.utils.schemas import (
    MenuItemCreate,
    MenuItemListResponse,
    MenuItemResponse,
    MenuItemUpdate,
    MenuReorderRequest,
)


router = APIRouter(prefix="/api/menu-items", tags=["menu"])


@router.get("", response_model=MenuItemListResponse)
def list_menu_items(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.VIEW_MENU)),
) -> MenuItemListResponse:
    items = MenuService(db).list_menu_items()
    return MenuItemListResponse(items=[menu_item_to_output(i) for i in items])


@router.post("", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    body: MenuItemCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.MANAGE_MENU)),
) -> MenuItemResponse:
    """New items go to the end of the display order."""
    item = MenuService(db).create_menu_item(body)
    return MenuItemResponse(item=menu_item_to_output(item))


# Declared before /{item_id} routes
@router.post("/reorder", response_model=MenuItemListResponse)
def reorder_menu_items(
    body: MenuReorderRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.MANAGE_MENU)),
) -> MenuItemListResponse:
    """
    Persist the display order given as a list of ids.

    Returns the whole catalog in its new display order.
    """
    items = MenuService(db).reorder_menu_items(body.ids)
    return MenuItemListResponse(items=[menu_item_to_output(i) for i in items])


@router.get("/{item_id}", response_model=MenuItemResponse)
def get_menu_item(
    item_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.VIEW_MENU)),
) -> MenuItemResponse:
    return MenuItemResponse(item=menu_item_to_output(MenuService(db).get_menu_item(item_id)))


@router.patch("/{item_id}", response_model=MenuItemResponse)
def update_menu_item(
    item_id: int,
    body: MenuItemUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.MANAGE_MENU)),
) -> MenuItemResponse:
    """Partial update; fields absent from the body are left untouched."""
    item = MenuService(db).update_menu_item(item_id, body)
    return MenuItemResponse(item=menu_item_to_output(item))


@router.delete("/{item_id}", response_model=MenuItemResponse)
def delete_menu_item(
    item_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.MANAGE_MENU)),
) -> MenuItemResponse:
    """409 while any order references the item; deactivate it instead."""
    return MenuItemResponse(item=MenuService(db).delete_menu_item(item_id))
