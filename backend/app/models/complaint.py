from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

CATEGORIES = (
    "Infrastructure",
    "Academic",
    "Hostel",
    "Transportation",
    "Food",
    "Security",
    "Technology",
    "Sports",
    "Library",
    "Other",
)
PRIORITIES = ("low", "medium", "high", "urgent")
STATUSES = ("pending", "in_progress", "resolved", "rejected", "closed")


class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    priority = Column(String(20), nullable=False, default="medium", index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    submitted_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    attachments = Column(JSON, default=list)
    admin_reply = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", lazy="selectin")
