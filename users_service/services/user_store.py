"""Store adapter for the `users` table."""

from collections.abc import AsyncIterator, Iterable
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from users_service.models.users import users
from users_service.schemas.users import UserRole
from users_service.services.user_mapper import SingleRow


class UserStore:
    """Parameterized statements against `users`.

    Each call opens its own session and issues a single statement; writes are
    committed immediately. Driver errors propagate unchanged.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize store with a session factory."""
        self.session_factory = session_factory

    async def find_by_email(self, email: str) -> SingleRow:
        """Get the row for an email, if any."""
        async with self.session_factory() as session:
            result = await session.execute(select(users).where(users.c.email == email))
            return SingleRow(result.mappings().first())

    async def create_if_absent(
        self, email: str, sub: str, role: UserRole = UserRole.USER
    ) -> SingleRow:
        """Insert a new user and return the inserted row."""
        query = users.insert().values(email=email, role=role.value, sub=sub).returning(users)

        async with self.session_factory() as session:
            result = await session.execute(query)
            row = result.mappings().first()
            await session.commit()
            return SingleRow(row)

    async def find_by_ids(self, ids: Iterable[UUID]) -> AsyncIterator[RowMapping]:
        """
        Stream rows whose id is in `ids`.

        Rows arrive in store order. The cursor and its session are released
        when the generator finishes or is closed, so callers should wrap it
        in `contextlib.aclosing`.
        """
        query = select(users).where(users.c.id.in_(list(ids)))

        async with self.session_factory() as session:
            result = await session.stream(query)
            try:
                async for row in result.mappings():
                    yield row
            finally:
                await result.close()

    async def find_by_id(self, user_id: UUID) -> SingleRow:
        """Get the row for an id, if any."""
        async with self.session_factory() as session:
            result = await session.execute(select(users).where(users.c.id == user_id))
            return SingleRow(result.mappings().first())

    async def update_profile(self, name: str | None, avatar_id: str | None, user_id: UUID) -> int:
        """Update name and avatar of a live user. Returns rows affected."""
        query = (
            update(users)
            .where(users.c.id == user_id, users.c.deleted.is_(None))
            .values(name=name, avatar_id=avatar_id)
        )

        async with self.session_factory() as session:
            result = await session.execute(query)
            await session.commit()
            return result.rowcount  # type: ignore[attr-defined]

    async def soft_delete(self, user_id: UUID, sub: str, email: str) -> int:
        """Mark a user deleted when id, sub and email all match. Returns rows affected."""
        query = (
            update(users)
            .where(users.c.id == user_id, users.c.sub == sub, users.c.email == email)
            .values(deleted=func.now())
        )

        async with self.session_factory() as session:
            result = await session.execute(query)
            await session.commit()
            return result.rowcount  # type: ignore[attr-defined]
