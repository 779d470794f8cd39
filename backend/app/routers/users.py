from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.auth import get_current_user, require_role, UserPrincipal
from app.exceptions import MediaUploadError
from app.schemas.complaint import ComplaintResponse
from app.schemas.user import UserResponse, UserSummary, UserAdminUpdate
from app.services.media_service import media_service
from app.services.user_service import user_service

router = APIRouter()

admin_only = Depends(require_role("admin"))


def _raise_on_error(result: dict) -> None:
    if "error" in result:
        raise HTTPException(status_code=404, detail=result["error"])


@router.get("/profile/{user_id}")
async def get_user_profile(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await user_service.get_profile(db, user_id)
    _raise_on_error(result)
    user = result["user"]
    return {
        "success": True,
        "data": {
            "user": UserSummary.model_validate(user),
            "complaintsSubmitted": user.complaints_submitted,
            "complaintsResolved": user.complaints_resolved,
            "recentComplaints": [ComplaintResponse.model_validate(c) for c in result["recent_complaints"]],
        },
    }


@router.put("/avatar")
async def update_avatar(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    try:
        attachment = await media_service.save_attachment(file, images_only=True)
    except MediaUploadError as e:
        raise HTTPException(status_code=e.status_code, detail=e.reason)

    result = await user_service.update_avatar(db, current_user.id, attachment["url"])
    _raise_on_error(result)
    return {"success": True, "data": {"avatar": result["user"].avatar}}


@router.get("", dependencies=[admin_only])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: str = Query(""),
    department: str = Query(""),
    search: str = Query("", description="Search by name or email"),
    db: AsyncSession = Depends(get_db),
):
    result = await user_service.list_users(
        db, page=page, limit=limit, role=role, department=department, search=search
    )
    return {
        "success": True,
        "count": len(result["users"]),
        "total": result["total"],
        "data": [UserResponse.model_validate(u) for u in result["users"]],
    }


@router.get("/{user_id}", dependencies=[admin_only])
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    result = await user_service.get_user(db, user_id)
    _raise_on_error(result)
    return {"success": True, "data": UserResponse.model_validate(result["user"])}


@router.put("/{user_id}", dependencies=[admin_only])
async def update_user(user_id: int, data: UserAdminUpdate, db: AsyncSession = Depends(get_db)):
    result = await user_service.update_user(db, user_id, data.model_dump(exclude_unset=True))
    if "error" in result:
        status_code = 404 if result["error"] == "User not found" else 400
        raise HTTPException(status_code=status_code, detail=result["error"])
    return {"success": True, "data": UserResponse.model_validate(result["user"])}


@router.delete("/{user_id}", dependencies=[admin_only])
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    result = await user_service.deactivate_user(db, user_id)
    _raise_on_error(result)
    return {"success": True, "message": "User deactivated successfully"}
