"""Mapping of `users` rows to User records."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import NoResultFound

from users_service.core.exceptions import InternalError
from users_service.schemas.users import User, UserRole


@dataclass(frozen=True)
class SingleRow:
    """Outcome of a statement expected to return at most one row."""

    row: RowMapping | None


@dataclass(frozen=True)
class CursorRow:
    """Current row of a multi-row cursor."""

    row: RowMapping


RowSource = SingleRow | CursorRow


def _deleted_marker(value: datetime | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def map_user(source: RowSource) -> User:
    """
    Build a User from one row of `select * from users`.

    Args:
        source: Single-row result or current cursor row

    Returns:
        Populated User record

    Raises:
        NoResultFound: If a single-row source matched nothing
        InternalError: If the source is not a known row source
    """
    if isinstance(source, SingleRow):
        if source.row is None:
            raise NoResultFound("No row was found when one was required")
        row = source.row
    elif isinstance(source, CursorRow):
        row = source.row
    else:
        raise InternalError("Unsupported row source")

    return User(
        id=row["id"],
        email=row["email"],
        role=UserRole(row["role"]),
        sub=row["sub"],
        name=row["name"],
        avatar_id=row["avatar_id"],
        deleted=_deleted_marker(row["deleted"]),
    )
