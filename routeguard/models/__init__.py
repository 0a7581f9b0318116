"""Database models."""

from .user import User, SystemRight

__all__ = ["User", "SystemRight"]
