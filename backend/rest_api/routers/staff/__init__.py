"""
Staff routers - authenticated order queue at /api/orders/*.
"""

from .orders import router

__all__ = ["router"]
