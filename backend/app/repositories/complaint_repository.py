from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, delete
from app.models.complaint import Complaint
from app.models.comment import Comment
from app.repositories.search import contains_pattern, LIKE_ESCAPE

# API sort keys -> columns
SORT_COLUMNS = {
    "createdAt": Complaint.created_at,
    "updatedAt": Complaint.updated_at,
    "title": Complaint.title,
    "priority": Complaint.priority,
    "status": Complaint.status,
    "category": Complaint.category,
}


class ComplaintFilter:
    """Query-string filters shared by the public and admin complaint lists."""

    def __init__(
        self,
        category: str = "",
        status: str = "",
        priority: str = "",
        search: str = "",
        submitted_by: Optional[int] = None,
    ):
        # "All" is what the admin UI sends for "no filter"
        self.category = "" if category == "All" else (category or "")
        self.status = "" if status == "All" else (status or "")
        self.priority = "" if priority == "All" else (priority or "")
        self.search = (search or "").strip()
        self.submitted_by = submitted_by

    def apply(self, query):
        if self.category:
            query = query.where(Complaint.category == self.category)
        if self.status:
            query = query.where(Complaint.status == self.status)
        if self.priority:
            query = query.where(Complaint.priority == self.priority)
        if self.submitted_by is not None:
            query = query.where(Complaint.submitted_by == self.submitted_by)
        if self.search:
            pattern = contains_pattern(self.search)
            query = query.where(
                or_(
                    Complaint.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Complaint.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        return query


class ComplaintRepository:
    async def find_by_id(self, db: AsyncSession, complaint_id: int) -> Optional[Complaint]:
        return await db.get(Complaint, complaint_id)

    async def create(self, db: AsyncSession, **fields) -> Complaint:
        complaint = Complaint(**fields)
        db.add(complaint)
        await db.flush()
        await db.refresh(complaint)
        return complaint

    async def update(self, db: AsyncSession, complaint: Complaint, fields: dict) -> Complaint:
        for key, value in fields.items():
            setattr(complaint, key, value)
        await db.flush()
        await db.refresh(complaint)
        return complaint

    async def delete(self, db: AsyncSession, complaint: Complaint) -> None:
        await db.execute(delete(Comment).where(Comment.complaint_id == complaint.id))
        await db.delete(complaint)
        await db.flush()

    async def paginate(
        self,
        db: AsyncSession,
        filters: ComplaintFilter,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        ascending: bool = False,
    ) -> tuple[list[Complaint], int]:
        query = filters.apply(select(Complaint))

        count_query = select(func.count()).select_from(query.subquery())
        total = await db.scalar(count_query) or 0

        column = SORT_COLUMNS.get(sort_by, Complaint.created_at)
        order = column.asc() if ascending else column.desc()
        # id as tie-breaker keeps pages stable when timestamps collide
        tie = Complaint.id.asc() if ascending else Complaint.id.desc()
        query = query.order_by(order, tie).offset((page - 1) * limit).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def recent_for_user(self, db: AsyncSession, user_id: int, limit: int = 5) -> list[Complaint]:
        result = await db.execute(
            select(Complaint)
            .where(Complaint.submitted_by == user_id)
            .order_by(Complaint.created_at.desc(), Complaint.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count(self, db: AsyncSession, status: Optional[str] = None) -> int:
        query = select(func.count(Complaint.id))
        if status:
            query = query.where(Complaint.status == status)
        return await db.scalar(query) or 0

    async def recent(self, db: AsyncSession, limit: int = 5) -> list[Complaint]:
        result = await db.execute(
            select(Complaint).order_by(Complaint.created_at.desc(), Complaint.id.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def open_urgent(self, db: AsyncSession, limit: int = 10) -> list[Complaint]:
        result = await db.execute(
            select(Complaint)
            .where(Complaint.priority == "urgent", Complaint.status != "resolved")
            .order_by(Complaint.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_by(self, db: AsyncSession, column_name: str) -> list[dict]:
        column = getattr(Complaint, column_name)
        result = await db.execute(
            select(column, func.count(Complaint.id).label("count"))
            .group_by(column)
            .order_by(func.count(Complaint.id).desc())
        )
        return [{"_id": value, "count": count} for value, count in result.all()]


complaint_repository = ComplaintRepository()
