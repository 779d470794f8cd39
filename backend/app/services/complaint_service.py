import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth import UserPrincipal
from app.models.complaint import CATEGORIES, PRIORITIES, STATUSES
from app.repositories.complaint_repository import complaint_repository, ComplaintFilter
from app.repositories.comment_repository import comment_repository
from app.repositories.user_repository import user_repository
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)


def _check_fields(data: dict) -> Optional[str]:
    if "title" in data and not (data["title"] or "").strip():
        return "Please provide a title"
    if "description" in data and not (data["description"] or "").strip():
        return "Please provide a description"
    if "category" in data and data["category"] not in CATEGORIES:
        return "Please select a valid category"
    if "priority" in data and data["priority"] not in PRIORITIES:
        return "Invalid priority"
    if "status" in data and data["status"] not in STATUSES:
        return "Invalid status"
    return None


class ComplaintService:
    async def list_complaints(
        self, db: AsyncSession, filters: ComplaintFilter, page: int = 1, limit: int = 10
    ) -> dict:
        complaints, total = await complaint_repository.paginate(db, filters, page=page, limit=limit)
        return {"complaints": complaints, "total": total}

    async def get(self, db: AsyncSession, complaint_id: int) -> dict:
        complaint = await complaint_repository.find_by_id(db, complaint_id)
        if not complaint:
            return {"error": "Complaint not found", "status": 404}
        return {"complaint": complaint}

    def validate_new(self, data: dict) -> Optional[str]:
        """Check a submission before anything is uploaded or stored."""
        for field in ("title", "description", "category"):
            data.setdefault(field, None)
        return _check_fields(data)

    async def create(
        self,
        db: AsyncSession,
        data: dict,
        user: UserPrincipal,
        attachments: Optional[list] = None,
    ) -> dict:
        error = self.validate_new(data)
        if error:
            return {"error": error, "status": 400}

        complaint = await complaint_repository.create(
            db,
            title=data["title"].strip(),
            description=data["description"].strip(),
            category=data["category"],
            priority=data.get("priority") or "medium",
            submitted_by=user.id,
            attachments=attachments or [],
        )
        await user_repository.increment(db, user.id, "complaints_submitted")

        await notification_service.send_to_admins(
            db,
            type="complaint_created",
            title="New Complaint Submitted",
            message=f"A new {complaint.category} complaint has been submitted: {complaint.title}",
            target_type="complaint",
            target_id=complaint.id,
            priority="high" if complaint.priority == "urgent" else "medium",
        )
        logger.info("Complaint %s created by user %s", complaint.id, user.id)
        return {"complaint": complaint}

    async def update(
        self,
        db: AsyncSession,
        complaint_id: int,
        data: dict,
        user: UserPrincipal,
        attachments: Optional[list] = None,
    ) -> dict:
        complaint = await complaint_repository.find_by_id(db, complaint_id)
        if not complaint:
            return {"error": "Complaint not found", "status": 404}
        if not user.owns(complaint.submitted_by) and not user.is_admin:
            return {"error": "Not authorized to update this complaint", "status": 401}

        # status moves go through the admin workflow so resolution counters stay right
        data = {k: v for k, v in data.items() if v is not None and k != "status"}
        error = _check_fields(data)
        if error:
            return {"error": error, "status": 400}
        if attachments:
            data["attachments"] = list(complaint.attachments or []) + attachments

        complaint = await complaint_repository.update(db, complaint, data)
        return {"complaint": complaint}

    async def delete(self, db: AsyncSession, complaint_id: int, user: UserPrincipal) -> dict:
        complaint = await complaint_repository.find_by_id(db, complaint_id)
        if not complaint:
            return {"error": "Complaint not found", "status": 404}
        if not user.owns(complaint.submitted_by) and not user.is_admin:
            return {"error": "Not authorized to delete this complaint", "status": 401}

        await complaint_repository.delete(db, complaint)
        logger.info("Complaint %s deleted by user %s", complaint_id, user.id)
        return {"success": True}

    async def list_comments(self, db: AsyncSession, complaint_id: int) -> dict:
        complaint = await complaint_repository.find_by_id(db, complaint_id)
        if not complaint:
            return {"error": "Complaint not found", "status": 404}
        return {"comments": await comment_repository.list_for_complaint(db, complaint_id)}

    async def add_comment(
        self, db: AsyncSession, complaint_id: int, content: str, user: UserPrincipal
    ) -> dict:
        if not content or not content.strip():
            return {"error": "Please provide comment content", "status": 400}
        complaint = await complaint_repository.find_by_id(db, complaint_id)
        if not complaint:
            return {"error": "Complaint not found", "status": 404}

        comment = await comment_repository.create(db, complaint_id, user.id, content)
        if complaint.submitted_by != user.id:
            await notification_service.send(
                db,
                recipient_id=complaint.submitted_by,
                type="comment_added",
                title="New Comment",
                message=f'{user.name} commented on your complaint "{complaint.title}"',
                target_type="complaint",
                target_id=complaint.id,
                priority="low",
            )
        return {"comment": comment}

    async def update_comment(
        self, db: AsyncSession, complaint_id: int, comment_id: int, content: str, user: UserPrincipal
    ) -> dict:
        if not content or not content.strip():
            return {"error": "Please provide comment content", "status": 400}
        comment = await comment_repository.find_live(db, complaint_id, comment_id)
        if not comment:
            return {"error": "Comment not found", "status": 404}
        if not user.owns(comment.author_id) and not user.is_admin:
            return {"error": "Not authorized to update this comment", "status": 401}

        comment = await comment_repository.update(db, comment, {"content": content.strip()})
        return {"comment": comment}

    async def delete_comment(
        self, db: AsyncSession, complaint_id: int, comment_id: int, user: UserPrincipal
    ) -> dict:
        comment = await comment_repository.find_live(db, complaint_id, comment_id)
        if not comment:
            return {"error": "Comment not found", "status": 404}
        if not user.owns(comment.author_id) and not user.is_admin:
            return {"error": "Not authorized to delete this comment", "status": 401}

        # soft delete: hidden from lists and counts, row kept
        await comment_repository.update(db, comment, {"is_deleted": True})
        logger.info("Comment %s deleted by user %s", comment_id, user.id)
        return {"success": True}


complaint_service = ComplaintService()
