"""User service for business logic."""

import time
from collections.abc import AsyncIterator, Awaitable, Mapping
from contextlib import aclosing
from typing import Any, TypeVar

import structlog
from sqlalchemy.exc import IntegrityError, NoResultFound

from users_service.core.exceptions import UnauthenticatedException
from users_service.core.validation import validate_request
from users_service.schemas.users import (
    AuthRequest,
    DeleteUserRequest,
    Empty,
    UpdateUserRequest,
    User,
    UserId,
    UserIds,
    UserRole,
)
from users_service.services.user_mapper import CursorRow, RowSource, map_user
from users_service.services.user_store import UserStore

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class UserService:
    """Service for user operations.

    Holds no state besides the injected store; every call goes to the
    database.
    """

    def __init__(self, store: UserStore):
        """Initialize service with a user store."""
        self.store = store

    async def auth(self, payload: Mapping[str, Any] | AuthRequest) -> User:
        """
        Get the user for an email, creating it on first sight.

        Args:
            payload: Email and subject of the caller

        Returns:
            Existing or newly created user

        Raises:
            InvalidArgumentException: If email or sub are malformed
            UnauthenticatedException: If the account was soft-deleted
        """
        start = time.time()
        request = validate_request(AuthRequest, payload)

        found = await self._run("Auth", self.store.find_by_email(request.email))
        try:
            user = map_user(found)
        except NoResultFound:
            user = None
        except Exception as e:
            logger.error("map_user_failed", operation="Auth", error=str(e))
            raise

        if user is not None:
            if user.deleted:
                logger.warning("auth_rejected", operation="Auth", user_id=str(user.id))
                raise UnauthenticatedException("Unauthenticated")
        else:
            try:
                created = await self.store.create_if_absent(
                    request.email, request.sub, role=UserRole.USER
                )
            except IntegrityError as e:
                # Lost a race with a concurrent Auth for the same email
                logger.error("auth_create_conflict", operation="Auth", error=str(e))
                raise
            except Exception as e:
                logger.error("store_call_failed", operation="Auth", error=str(e))
                raise
            user = self._map("Auth", created)

        logger.info("Auth", duration=time.time() - start)
        return user

    async def get_users(self, payload: Mapping[str, Any] | UserIds) -> AsyncIterator[User]:
        """
        Stream the users matching a set of ids, in store order.

        Ids with no row are skipped. Items already yielded stay delivered if
        the stream fails part way; the cursor is released on every exit.
        """
        start = time.time()
        request = validate_request(UserIds, payload)
        sent = 0

        try:
            async with aclosing(self.store.find_by_ids(request.user_ids)) as rows:
                async for row in rows:
                    user = map_user(CursorRow(row))
                    sent += 1
                    yield user
        except GeneratorExit:
            logger.warning("GetUsers", aborted=True, sent=sent, duration=time.time() - start)
            raise
        except Exception as e:
            logger.error("stream_failed", operation="GetUsers", sent=sent, error=str(e))
            raise

        logger.info("GetUsers", sent=sent, duration=time.time() - start)

    async def get_user(self, payload: Mapping[str, Any] | UserId) -> User:
        """Get a single user by id; NoResultFound if there is none."""
        start = time.time()
        request = validate_request(UserId, payload)

        found = await self._run("GetUser", self.store.find_by_id(request.user_id))
        user = self._map("GetUser", found)

        logger.info("GetUser", duration=time.time() - start)
        return user

    async def update_user(self, payload: Mapping[str, Any] | UpdateUserRequest) -> Empty:
        """
        Update name and avatar of a live user.

        Succeeds even when nothing matched, including soft-deleted users.
        """
        start = time.time()
        request = validate_request(UpdateUserRequest, payload)

        rows = await self._run(
            "UpdateUser",
            self.store.update_profile(request.name, request.avatar_id, request.id),
        )

        logger.info("UpdateUser", rows=rows, duration=time.time() - start)
        return Empty()

    async def delete_user(self, payload: Mapping[str, Any] | DeleteUserRequest) -> Empty:
        """
        Soft delete a user when id, sub and email all match.

        A mismatch is a silent no-op.
        """
        start = time.time()
        request = validate_request(DeleteUserRequest, payload)

        rows = await self._run(
            "DeleteUser",
            self.store.soft_delete(request.id, request.sub, request.email),
        )

        logger.info("DeleteUser", rows=rows, duration=time.time() - start)
        return Empty()

    @staticmethod
    async def _run(operation: str, call: Awaitable[T]) -> T:
        """Await a store call, logging any failure once."""
        try:
            return await call
        except Exception as e:
            logger.error("store_call_failed", operation=operation, error=str(e))
            raise

    @staticmethod
    def _map(operation: str, source: RowSource) -> User:
        try:
            return map_user(source)
        except Exception as e:
            logger.error("map_user_failed", operation=operation, error=str(e))
            raise
