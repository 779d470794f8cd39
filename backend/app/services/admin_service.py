import logging
import math
import time
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth import UserPrincipal
from app.models.complaint import STATUSES
from app.repositories.complaint_repository import complaint_repository, ComplaintFilter
from app.repositories.comment_repository import comment_repository
from app.repositories.user_repository import user_repository
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

STARTED_AT = time.time()
API_VERSION = "1.0.0"


class AdminService:
    async def list_complaints(
        self,
        db: AsyncSession,
        filters: ComplaintFilter,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        ascending: bool = False,
    ) -> dict:
        complaints, total = await complaint_repository.paginate(
            db, filters, page=page, limit=limit, sort_by=sort_by, ascending=ascending
        )
        return {
            "success": True,
            "count": len(complaints),
            "pagination": {
                "current": page,
                "pages": math.ceil(total / limit) if limit else 0,
                "total": total,
            },
            "data": complaints,
        }

    async def update_status(self, db: AsyncSession, complaint_id: int, status: str) -> dict:
        if status not in STATUSES:
            return {"success": False, "message": "Invalid status", "status": 400}

        complaint = await complaint_repository.find_by_id(db, complaint_id)
        if not complaint:
            return {"success": False, "message": "Complaint not found", "status": 404}

        previous = complaint.status
        if previous == status:
            return {"success": True, "message": "Complaint status updated successfully", "data": complaint}

        complaint = await complaint_repository.update(db, complaint, {"status": status})

        # keep the owner's resolved counter in step with the transition
        if previous != "resolved" and status == "resolved":
            await user_repository.increment(db, complaint.submitted_by, "complaints_resolved", 1)
        elif previous == "resolved":
            await user_repository.increment(db, complaint.submitted_by, "complaints_resolved", -1)

        await notification_service.send(
            db,
            recipient_id=complaint.submitted_by,
            type="complaint_updated",
            title="Complaint Status Updated",
            message=f'Your complaint "{complaint.title}" status has been updated to {status}',
            target_type="complaint",
            target_id=complaint.id,
        )
        logger.info("Complaint %s status %s -> %s", complaint.id, previous, status)
        return {"success": True, "message": "Complaint status updated successfully", "data": complaint}

    async def add_reply(
        self, db: AsyncSession, complaint_id: int, content: str, admin: UserPrincipal
    ) -> dict:
        if not content or not content.strip():
            return {"success": False, "message": "Reply content is required", "status": 400}

        complaint = await complaint_repository.find_by_id(db, complaint_id)
        if not complaint:
            return {"success": False, "message": "Complaint not found", "status": 404}

        comment = await comment_repository.create(
            db, complaint_id, admin.id, content, is_admin_reply=True
        )
        await complaint_repository.update(db, complaint, {"admin_reply": comment.content})

        if complaint.submitted_by != admin.id:
            await notification_service.send(
                db,
                recipient_id=complaint.submitted_by,
                type="admin_message",
                title="Admin Replied",
                message=f'An administrator replied to your complaint "{complaint.title}"',
                target_type="complaint",
                target_id=complaint.id,
            )
        return {"success": True, "message": "Reply added successfully", "data": comment}

    async def dashboard(self, db: AsyncSession) -> dict:
        total_complaints = await complaint_repository.count(db)
        pending_complaints = await complaint_repository.count(db, status="pending")
        total_users = await user_repository.count_active(db)
        total_comments = await comment_repository.count_live(db)
        recent = await complaint_repository.recent(db, limit=5)
        urgent = await complaint_repository.open_urgent(db, limit=10)

        return {
            "success": True,
            "data": {
                "overview": {
                    "totalComplaints": total_complaints,
                    "pendingComplaints": pending_complaints,
                    "totalUsers": total_users,
                    "totalComments": total_comments,
                    "urgentComplaints": len(urgent),
                },
                "recentComplaints": recent,
                "urgentComplaints": urgent,
                "categoryStats": await complaint_repository.count_by(db, "category"),
                "statusStats": await complaint_repository.count_by(db, "status"),
            },
        }

    async def health(self, db: AsyncSession) -> dict:
        try:
            await db.execute(text("SELECT 1"))
            database = "connected"
        except Exception as e:
            logger.error("Database health check failed: %s", e)
            database = "unreachable"
        return {
            "success": True,
            "data": {
                "status": "healthy" if database == "connected" else "degraded",
                "database": database,
                "uptime_seconds": int(time.time() - STARTED_AT),
                "version": API_VERSION,
            },
        }

    async def maintenance(self, db: AsyncSession, action: str) -> dict:
        if action == "cleanup_old_notifications":
            deleted = await notification_service.cleanup_old(db, days=30)
            return {"success": True, "message": f"Cleaned up {deleted} old notifications"}
        return {"success": False, "message": "Invalid maintenance action", "status": 400}


admin_service = AdminService()
