"""Data access repositories."""

from .base import BaseRepository
from .user_repository import UserRepository
from .system_rights_repository import SystemRightsRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "SystemRightsRepository",
]
