"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends

from users_service.database import AsyncSessionLocal
from users_service.services.user_service import UserService
from users_service.services.user_store import UserStore


def get_user_store() -> UserStore:
    """Get a user store bound to the application session factory."""
    return UserStore(AsyncSessionLocal)


def get_user_service(
    store: Annotated[UserStore, Depends(get_user_store)],
) -> UserService:
    """Get a user service for the current request."""
    return UserService(store)


# Type aliases for dependency injection
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
