"""
Admin API router - combines the management sub-routers.

- sessions: /api/sessions
- menu_items: /api/menu-items
- invites: /api/invites

Read endpoints are open to any staff member; writes require an
admin-class role (OWNER or ADMIN).
"""

from fastapi import APIRouter

from .sessions import router as sessions_router
from .menu_items import router as menu_items_router
from .invites import router as invites_router


router = APIRouter()

router.include_router(sessions_router)
router.include_router(menu_items_router)
router.include_router(invites_router)

__all__ = ["router"]
