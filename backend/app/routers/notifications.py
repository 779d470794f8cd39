from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.auth import get_current_user, UserPrincipal
from app.schemas.notification import NotificationResponse, NotificationListResponse
from app.services.notification_service import notification_service

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await notification_service.list_for_user(db, current_user.id)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in result["notifications"]],
        unread=result["unread"],
    )


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await notification_service.mark_read(db, notification_id, current_user.id)
    if not result["success"]:
        raise HTTPException(status_code=result["status"], detail=result["message"])
    return NotificationResponse.model_validate(result["data"])
