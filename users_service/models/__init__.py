"""Database models."""

from users_service.models.users import metadata, users

__all__ = [
    "metadata",
    "users",
]
