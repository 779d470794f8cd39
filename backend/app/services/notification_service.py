import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.notification_repository import notification_repository
from app.repositories.user_repository import user_repository

logger = logging.getLogger(__name__)


class NotificationService:
    async def send(
        self,
        db: AsyncSession,
        recipient_id: int,
        type: str,
        title: str,
        message: str,
        target_type: str,
        target_id: Optional[int] = None,
        priority: str = "medium",
    ) -> None:
        await notification_repository.create_many(db, [{
            "recipient_id": recipient_id,
            "type": type,
            "title": title[:100],
            "message": message[:500],
            "target_type": target_type,
            "target_id": target_id,
            "priority": priority,
        }])
        logger.info("Notification sent to user %s: %s", recipient_id, title)

    async def send_to_admins(
        self,
        db: AsyncSession,
        type: str,
        title: str,
        message: str,
        target_type: str,
        target_id: Optional[int] = None,
        priority: str = "medium",
    ) -> int:
        admins = await user_repository.list_active_admins(db)
        if not admins:
            return 0
        await notification_repository.create_many(db, [
            {
                "recipient_id": admin.id,
                "type": type,
                "title": title[:100],
                "message": message[:500],
                "target_type": target_type,
                "target_id": target_id,
                "priority": priority,
            }
            for admin in admins
        ])
        logger.info("Sent %d admin notifications: %s", len(admins), title)
        return len(admins)

    async def list_for_user(self, db: AsyncSession, user_id: int) -> dict:
        notifications = await notification_repository.list_for_user(db, user_id)
        unread = await notification_repository.unread_count(db, user_id)
        return {"notifications": notifications, "unread": unread}

    async def mark_read(self, db: AsyncSession, notification_id: int, user_id: int) -> dict:
        notification = await notification_repository.find_by_id(db, notification_id)
        if not notification or notification.recipient_id != user_id:
            return {"success": False, "message": "Notification not found", "status": 404}
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(timezone.utc)
            await db.flush()
            await db.refresh(notification)
        return {"success": True, "data": notification}

    async def cleanup_old(self, db: AsyncSession, days: int = 30) -> int:
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        deleted = await notification_repository.delete_read_before(db, cutoff)
        logger.info("Deleted %d read notifications older than %d days", deleted, days)
        return deleted


notification_service = NotificationService()
