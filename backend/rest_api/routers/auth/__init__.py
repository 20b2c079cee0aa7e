"""
Authentication routers - /api/auth/*
Handles signup, login and profile.
"""

from .routes import router

__all__ = ["router"]
