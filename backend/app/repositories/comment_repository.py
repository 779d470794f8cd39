from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.models.comment import Comment


class CommentRepository:
    async def create(
        self,
        db: AsyncSession,
        complaint_id: int,
        author_id: int,
        content: str,
        is_admin_reply: bool = False,
    ) -> Comment:
        comment = Comment(
            complaint_id=complaint_id,
            author_id=author_id,
            content=content.strip(),
            is_admin_reply=is_admin_reply,
        )
        db.add(comment)
        await db.flush()
        await db.refresh(comment)
        return comment

    async def find_live(self, db: AsyncSession, complaint_id: int, comment_id: int) -> Optional[Comment]:
        result = await db.execute(
            select(Comment).where(
                Comment.id == comment_id,
                Comment.complaint_id == complaint_id,
                Comment.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    async def update(self, db: AsyncSession, comment: Comment, fields: dict) -> Comment:
        for key, value in fields.items():
            setattr(comment, key, value)
        await db.flush()
        await db.refresh(comment)
        return comment

    async def list_for_complaint(self, db: AsyncSession, complaint_id: int) -> list[Comment]:
        result = await db.execute(
            select(Comment)
            .where(Comment.complaint_id == complaint_id, Comment.is_deleted.is_(False))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list(result.scalars().all())

    async def count_live(self, db: AsyncSession) -> int:
        return await db.scalar(select(func.count(Comment.id)).where(Comment.is_deleted.is_(False))) or 0


comment_repository = CommentRepository()
