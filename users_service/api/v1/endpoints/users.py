"""User endpoints."""

from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Annotated, Any

from fastapi import APIRouter, Body, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from users_service.dependencies import UserServiceDep
from users_service.schemas.users import Empty, User

router = APIRouter(prefix="/users", tags=["users"])

RequestBody = Annotated[dict[str, Any], Body()]


@router.post(
    "/auth",
    response_model=User,
    status_code=status.HTTP_200_OK,
    summary="Authenticate or provision a user",
)
async def auth(payload: RequestBody, user_service: UserServiceDep) -> User:
    """
    Get the user for an email, creating it on first sight.

    Args:
        payload: Email and subject established by the identity provider
        user_service: User service

    Returns:
        Existing or newly created user

    Raises:
        InvalidArgumentException: If email or sub are malformed
        UnauthenticatedException: If the account was deleted
    """
    return await user_service.auth(payload)


@router.post(
    "/stream",
    response_class=StreamingResponse,
    status_code=status.HTTP_200_OK,
    summary="Stream users by id",
)
async def get_users(payload: RequestBody, user_service: UserServiceDep) -> StreamingResponse:
    """
    Stream the users for a set of ids as newline-delimited JSON.

    The first user is fetched before the response starts, so validation and
    query errors are returned as regular error responses. A failure after
    that ends the stream early; lines already sent stay sent.
    """
    users = user_service.get_users(payload)
    try:
        first: User | None = await anext(users)
    except StopAsyncIteration:
        first = None

    async def ndjson() -> AsyncIterator[str]:
        async with aclosing(users) as remaining:
            if first is None:
                return
            yield first.model_dump_json() + "\n"
            async for user in remaining:
                yield user.model_dump_json() + "\n"

    # Closes the stream even if the body is never iterated
    return StreamingResponse(
        ndjson(),
        media_type="application/x-ndjson",
        background=BackgroundTask(users.aclose),
    )


@router.get(
    "/{user_id}",
    response_model=User,
    status_code=status.HTTP_200_OK,
    summary="Get a user",
)
async def get_user(user_id: str, user_service: UserServiceDep) -> User:
    """Get a single user by id."""
    return await user_service.get_user({"user_id": user_id})


@router.put(
    "/{user_id}",
    response_model=Empty,
    status_code=status.HTTP_200_OK,
    summary="Update a user's profile",
)
async def update_user(user_id: str, payload: RequestBody, user_service: UserServiceDep) -> Empty:
    """
    Replace name and avatar of a user.

    Both fields are written; one left out of the body is stored as null.
    Succeeds even if the user is missing or deleted.
    """
    return await user_service.update_user({**payload, "id": user_id})


@router.delete(
    "/{user_id}",
    response_model=Empty,
    status_code=status.HTTP_200_OK,
    summary="Soft delete a user",
)
async def delete_user(user_id: str, payload: RequestBody, user_service: UserServiceDep) -> Empty:
    """Soft delete a user. Succeeds even if sub or email do not match."""
    return await user_service.delete_user({**payload, "id": user_id})
