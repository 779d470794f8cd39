from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete
from app.models.notification import Notification


class NotificationRepository:
    async def create_many(self, db: AsyncSession, items: list[dict]) -> list[Notification]:
        notifications = [Notification(**item) for item in items]
        db.add_all(notifications)
        await db.flush()
        return notifications

    async def find_by_id(self, db: AsyncSession, notification_id: int) -> Optional[Notification]:
        return await db.get(Notification, notification_id)

    async def list_for_user(self, db: AsyncSession, user_id: int, limit: int = 50) -> list[Notification]:
        result = await db.execute(
            select(Notification)
            .where(Notification.recipient_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def unread_count(self, db: AsyncSession, user_id: int) -> int:
        return await db.scalar(
            select(func.count(Notification.id)).where(
                Notification.recipient_id == user_id,
                Notification.is_read.is_(False),
            )
        ) or 0

    async def delete_read_before(self, db: AsyncSession, cutoff: datetime) -> int:
        result = await db.execute(
            delete(Notification).where(
                Notification.is_read.is_(True),
                Notification.created_at < cutoff,
            )
        )
        return result.rowcount or 0


notification_repository = NotificationRepository()
