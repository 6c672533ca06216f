"""User model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    MetaData,
    Table,
    Text,
    Uuid,
    text,
)

metadata = MetaData()

# Column order is part of the row contract read by the user mapper.
users = Table(
    "users",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid4),
    Column("email", Text, nullable=False, unique=True),
    Column("role", Text, nullable=False, server_default=text("'user'")),
    # External identity subject, mirrored from the identity provider
    Column("sub", Text, nullable=False),
    # Profile info (mutable)
    Column("name", Text),
    Column("avatar_id", Text),
    # Soft delete marker, NULL while the account is live
    Column("deleted", DateTime(timezone=True)),
)
