from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import ROLES, DEPARTMENTS
from app.repositories.complaint_repository import complaint_repository
from app.repositories.user_repository import user_repository

ADMIN_UPDATABLE_FIELDS = ("name", "department", "year", "role", "is_active", "is_verified", "avatar")


class UserService:
    async def list_users(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        role: str = "",
        department: str = "",
        search: str = "",
    ) -> dict:
        users, total = await user_repository.paginate(
            db, page=page, limit=limit, role=role, department=department, search=search
        )
        return {"users": users, "total": total}

    async def get_user(self, db: AsyncSession, user_id: int) -> dict:
        user = await user_repository.find_by_id(db, user_id)
        if not user:
            return {"error": "User not found"}
        return {"user": user}

    async def get_profile(self, db: AsyncSession, user_id: int) -> dict:
        user = await user_repository.find_by_id(db, user_id)
        if not user or not user.is_active:
            return {"error": "User not found"}
        recent = await complaint_repository.recent_for_user(db, user_id, limit=5)
        return {"user": user, "recent_complaints": recent}

    async def update_user(self, db: AsyncSession, user_id: int, data: dict) -> dict:
        data = {k: v for k, v in data.items() if k in ADMIN_UPDATABLE_FIELDS and v is not None}
        if "role" in data and data["role"] not in ROLES:
            return {"error": f"Role must be one of: {', '.join(ROLES)}"}
        if "department" in data and data["department"] not in DEPARTMENTS:
            return {"error": f"Department must be one of: {', '.join(DEPARTMENTS)}"}

        user = await user_repository.find_by_id(db, user_id)
        if not user:
            return {"error": "User not found"}
        return {"user": await user_repository.update(db, user, data)}

    async def update_avatar(self, db: AsyncSession, user_id: int, avatar_url: str) -> dict:
        user = await user_repository.find_by_id(db, user_id)
        if not user:
            return {"error": "User not found"}
        return {"user": await user_repository.update(db, user, {"avatar": avatar_url})}

    async def deactivate_user(self, db: AsyncSession, user_id: int) -> dict:
        user = await user_repository.find_by_id(db, user_id)
        if not user:
            return {"error": "User not found"}
        await user_repository.update(db, user, {"is_active": False})
        return {"success": True}


user_service = UserService()
