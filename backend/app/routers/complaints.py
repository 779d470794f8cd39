import math
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File, Form
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.auth import get_current_user, UserPrincipal
from app.exceptions import MediaUploadError
from app.repositories.complaint_repository import ComplaintFilter
from app.schemas.complaint import (
    ComplaintResponse, ComplaintListResponse, ComplaintUpdate, CommentCreate, CommentResponse,
)
from app.services.complaint_service import complaint_service
from app.services.media_service import media_service

router = APIRouter()


def _raise_on_error(result: dict) -> None:
    if "error" in result:
        raise HTTPException(status_code=result.get("status", 400), detail=result["error"])


async def _attachments(file: Optional[UploadFile]) -> list:
    if file is None or not file.filename:
        return []
    try:
        return [await media_service.save_attachment(file)]
    except MediaUploadError as e:
        raise HTTPException(status_code=e.status_code, detail=e.reason)


def _list_response(result: dict, page: int, limit: int) -> ComplaintListResponse:
    complaints = result["complaints"]
    return ComplaintListResponse(
        count=len(complaints),
        total=result["total"],
        page=page,
        pages=math.ceil(result["total"] / limit),
        data=[ComplaintResponse.model_validate(c) for c in complaints],
    )


@router.get("", response_model=ComplaintListResponse)
async def list_complaints(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: str = Query(""),
    status: str = Query(""),
    priority: str = Query(""),
    search: str = Query("", description="Search title and description"),
    db: AsyncSession = Depends(get_db),
):
    filters = ComplaintFilter(category=category, status=status, priority=priority, search=search)
    result = await complaint_service.list_complaints(db, filters, page=page, limit=limit)
    return _list_response(result, page, limit)


@router.get("/user/me", response_model=ComplaintListResponse)
async def my_complaints(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    filters = ComplaintFilter(submitted_by=current_user.id)
    result = await complaint_service.list_complaints(db, filters, page=page, limit=limit)
    return _list_response(result, page, limit)


@router.post("", status_code=201)
async def create_complaint(
    title: str = Form(..., max_length=100),
    description: str = Form(..., max_length=2000),
    category: str = Form(...),
    priority: str = Form("medium"),
    file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    data = {"title": title, "description": description, "category": category, "priority": priority}
    # reject bad fields before anything reaches the media host
    error = complaint_service.validate_new(data)
    if error:
        raise HTTPException(status_code=400, detail=error)
    attachments = await _attachments(file)
    result = await complaint_service.create(db, data, current_user, attachments)
    _raise_on_error(result)
    return {"success": True, "data": ComplaintResponse.model_validate(result["complaint"])}


@router.get("/{complaint_id}")
async def get_complaint(complaint_id: int, db: AsyncSession = Depends(get_db)):
    result = await complaint_service.get(db, complaint_id)
    _raise_on_error(result)
    return {"success": True, "data": ComplaintResponse.model_validate(result["complaint"])}


@router.put("/{complaint_id}")
async def update_complaint(
    complaint_id: int,
    data: ComplaintUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await complaint_service.update(
        db, complaint_id, data.model_dump(exclude_unset=True), current_user
    )
    _raise_on_error(result)
    return {"success": True, "data": ComplaintResponse.model_validate(result["complaint"])}


@router.post("/{complaint_id}/attachments")
async def add_attachment(
    complaint_id: int,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    existing = await complaint_service.get(db, complaint_id)
    _raise_on_error(existing)
    if not current_user.owns(existing["complaint"].submitted_by) and not current_user.is_admin:
        raise HTTPException(status_code=401, detail="Not authorized to update this complaint")

    result = await complaint_service.update(db, complaint_id, {}, current_user, await _attachments(file))
    _raise_on_error(result)
    return {"success": True, "data": ComplaintResponse.model_validate(result["complaint"])}


@router.delete("/{complaint_id}")
async def delete_complaint(
    complaint_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await complaint_service.delete(db, complaint_id, current_user)
    _raise_on_error(result)
    return {"success": True, "message": "Complaint deleted successfully"}


@router.get("/{complaint_id}/comments")
async def list_comments(complaint_id: int, db: AsyncSession = Depends(get_db)):
    result = await complaint_service.list_comments(db, complaint_id)
    _raise_on_error(result)
    comments = [CommentResponse.model_validate(c) for c in result["comments"]]
    return {"success": True, "count": len(comments), "data": comments}


@router.post("/{complaint_id}/comments", status_code=201)
async def add_comment(
    complaint_id: int,
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await complaint_service.add_comment(db, complaint_id, data.content, current_user)
    _raise_on_error(result)
    return {"success": True, "data": CommentResponse.model_validate(result["comment"])}


@router.put("/{complaint_id}/comments/{comment_id}")
async def update_comment(
    complaint_id: int,
    comment_id: int,
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await complaint_service.update_comment(db, complaint_id, comment_id, data.content, current_user)
    _raise_on_error(result)
    return {"success": True, "data": CommentResponse.model_validate(result["comment"])}


@router.delete("/{complaint_id}/comments/{comment_id}")
async def delete_comment(
    complaint_id: int,
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await complaint_service.delete_comment(db, complaint_id, comment_id, current_user)
    _raise_on_error(result)
    return {"success": True, "message": "Comment deleted successfully"}
