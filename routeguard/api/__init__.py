"""API routes."""

from .rights import router as rights_router
from .auth_routes import router as auth_router

__all__ = ["rights_router", "auth_router"]
