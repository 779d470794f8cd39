from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from app.schemas.user import UserSummary


class Attachment(BaseModel):
    filename: str
    original_name: Optional[str] = None
    url: Optional[str] = None
    mimetype: Optional[str] = None
    size: Optional[int] = None
    cloudinary_id: Optional[str] = None


class ComplaintUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = None
    priority: Optional[str] = None


class ComplaintResponse(BaseModel):
    id: int
    title: str
    description: str
    category: str
    priority: str
    status: str
    submitted_by: int
    owner: Optional[UserSummary] = None
    attachments: list[Attachment] = []
    admin_reply: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ComplaintListResponse(BaseModel):
    success: bool = True
    count: int
    total: int
    page: int
    pages: int
    data: list[ComplaintResponse]


class StatusUpdate(BaseModel):
    status: str = ""


class CommentCreate(BaseModel):
    content: str = Field("", max_length=1000)


class CommentResponse(BaseModel):
    id: int
    complaint_id: int
    author_id: int
    author: Optional[UserSummary] = None
    content: str
    is_admin_reply: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
