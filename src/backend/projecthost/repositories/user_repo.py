"""Repository for users mirrored from the identity provider."""

from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from projecthost.models.user import User


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def create_if_absent(
        self, user_id: str, email: str, name: str, image: str, role: str = "user"
    ) -> bool:
        """Insert the user unless the id already exists. Returns True if inserted."""
        stmt = (
            pg_insert(User)
            .values(id=user_id, email=email, name=name, image=image, role=role)
            .on_conflict_do_nothing(index_elements=["id"])
            .returning(User.id)
        )
        result = await self.session.execute(stmt)
        inserted = result.scalar_one_or_none() is not None
        await self.session.flush()
        return inserted

    async def update(self, user_id: str, **fields) -> User | None:
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        for name, value in fields.items():
            setattr(user, name, value)
        user.updated_at = datetime.now(UTC)
        await self.session.flush()
        return user

    async def delete(self, user_id: str) -> bool:
        result = await self.session.execute(delete(User).where(User.id == user_id))
        await self.session.flush()
        return (result.rowcount or 0) > 0
