from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.auth import require_role, UserPrincipal
from app.repositories.complaint_repository import ComplaintFilter
from app.schemas.admin import MaintenanceRequest
from app.schemas.complaint import ComplaintResponse, CommentResponse, StatusUpdate, CommentCreate
from app.services.admin_service import admin_service

# Every endpoint below requires an authenticated admin
router = APIRouter(dependencies=[Depends(require_role("admin"))])


def _raise_on_failure(result: dict) -> None:
    if not result.get("success"):
        raise HTTPException(status_code=result.get("status", 400), detail=result["message"])


@router.get("/complaints")
async def list_complaints(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: str = Query(""),
    status: str = Query(""),
    priority: str = Query(""),
    search: str = Query(""),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    db: AsyncSession = Depends(get_db),
):
    filters = ComplaintFilter(category=category, status=status, priority=priority, search=search)
    result = await admin_service.list_complaints(
        db, filters, page=page, limit=limit, sort_by=sort_by, ascending=sort_order == "asc"
    )
    result["data"] = [ComplaintResponse.model_validate(c) for c in result["data"]]
    return result


@router.put("/complaints/{complaint_id}/status")
async def update_complaint_status(
    complaint_id: int,
    body: StatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    result = await admin_service.update_status(db, complaint_id, body.status)
    _raise_on_failure(result)
    result["data"] = ComplaintResponse.model_validate(result["data"])
    return result


@router.post("/complaints/{complaint_id}/reply", status_code=201)
async def add_admin_reply(
    complaint_id: int,
    body: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_role("admin")),
):
    result = await admin_service.add_reply(db, complaint_id, body.content, current_user)
    _raise_on_failure(result)
    result["data"] = CommentResponse.model_validate(result["data"])
    return result


@router.get("/dashboard")
async def get_admin_dashboard(db: AsyncSession = Depends(get_db)):
    result = await admin_service.dashboard(db)
    data = result["data"]
    data["recentComplaints"] = [ComplaintResponse.model_validate(c) for c in data["recentComplaints"]]
    data["urgentComplaints"] = [ComplaintResponse.model_validate(c) for c in data["urgentComplaints"]]
    return result


@router.get("/health")
async def get_admin_health(db: AsyncSession = Depends(get_db)):
    return await admin_service.health(db)


@router.post("/maintenance")
async def post_admin_maintenance(body: MaintenanceRequest, db: AsyncSession = Depends(get_db)):
    result = await admin_service.maintenance(db, body.action)
    _raise_on_failure(result)
    return result
