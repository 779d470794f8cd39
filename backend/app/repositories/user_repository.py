from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, update
from app.models.user import User
from app.repositories.search import contains_pattern, LIKE_ESCAPE


class UserRepository:
    async def find_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        return await db.get(User, user_id)

    async def find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        if not email:
            return None
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def find_by_reset_token(self, db: AsyncSession, token_hash: str, now: datetime) -> Optional[User]:
        result = await db.execute(
            select(User).where(
                User.reset_password_token == token_hash,
                User.reset_password_expire > now,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, **fields) -> User:
        user = User(**fields)
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    async def update(self, db: AsyncSession, user: User, fields: dict) -> User:
        for key, value in fields.items():
            setattr(user, key, value)
        await db.flush()
        await db.refresh(user)
        return user

    async def increment(self, db: AsyncSession, user_id: int, column: str, amount: int = 1) -> None:
        col = getattr(User, column)
        await db.execute(update(User).where(User.id == user_id).values({col: col + amount}))

    def _filtered(self, query, role: str = "", department: str = "", search: str = ""):
        if role:
            query = query.where(User.role == role)
        if department:
            query = query.where(User.department == department)
        if search:
            pattern = contains_pattern(search)
            query = query.where(
                or_(
                    User.name.ilike(pattern, escape=LIKE_ESCAPE),
                    User.email.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        return query

    async def paginate(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        role: str = "",
        department: str = "",
        search: str = "",
    ) -> tuple[list[User], int]:
        query = self._filtered(select(User), role, department, search)
        count_query = select(func.count()).select_from(query.subquery())
        total = await db.scalar(count_query) or 0

        query = query.order_by(User.created_at.desc(), User.id.desc())
        result = await db.execute(query.offset((page - 1) * limit).limit(limit))
        return list(result.scalars().all()), total

    async def list_active_admins(self, db: AsyncSession) -> list[User]:
        result = await db.execute(
            select(User).where(User.role == "admin", User.is_active.is_(True))
        )
        return list(result.scalars().all())

    async def count_active(self, db: AsyncSession) -> int:
        return await db.scalar(select(func.count(User.id)).where(User.is_active.is_(True))) or 0


user_repository = UserRepository()
