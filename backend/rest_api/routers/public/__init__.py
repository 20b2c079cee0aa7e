"""
Public routers - no staff authentication required.
- /api/public/* - storefront (menu, cart, orders)
- /api/health - health checks
"""

from .storefront import router as storefront_router
from .health import router as health_router

__all__ = ["storefront_router", "health_router"]
