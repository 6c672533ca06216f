"""Tests for mapping rows to User records."""

from datetime import UTC, datetime
from uuid import uuid4

import pytest
from sqlalchemy.exc import NoResultFound

from users_service.core.exceptions import InternalError
from users_service.schemas.users import UserRole
from users_service.services.user_mapper import CursorRow, SingleRow, map_user


def make_row(**overrides) -> dict:
    row = {
        "id": uuid4(),
        "email": "ada@example.com",
        "role": "user",
        "sub": "auth0|42",
        "name": None,
        "avatar_id": None,
        "deleted": None,
    }
    row.update(overrides)
    return row


def test_map_single_row():
    """Test mapping a single-row result."""
    row = make_row(name="Ada", avatar_id="avatar-1")

    user = map_user(SingleRow(row))

    assert user.id == row["id"]
    assert user.email == "ada@example.com"
    assert user.role is UserRole.USER
    assert user.sub == "auth0|42"
    assert user.name == "Ada"
    assert user.avatar_id == "avatar-1"
    assert user.deleted == ""


def test_map_cursor_row():
    """Test mapping the current row of a cursor."""
    row = make_row(role="admin")

    user = map_user(CursorRow(row))

    assert user.id == row["id"]
    assert user.role is UserRole.ADMIN


def test_map_deleted_marker():
    """Test the deleted timestamp becomes a non-empty string."""
    deleted = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)

    user = map_user(SingleRow(make_row(deleted=deleted)))

    assert user.deleted == deleted.isoformat()


def test_map_missing_single_row_raises_no_result():
    """Test an empty single-row result surfaces the no rows signal."""
    with pytest.raises(NoResultFound):
        map_user(SingleRow(None))


def test_map_unknown_source_is_internal_error():
    """Test anything but a row source is rejected."""
    with pytest.raises(InternalError):
        map_user(make_row())  # type: ignore[arg-type]


def test_map_unknown_role_fails():
    """Test a role outside the enum is not silently accepted."""
    with pytest.raises(ValueError):
        map_user(CursorRow(make_row(role="superuser")))
