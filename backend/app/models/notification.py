from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)  # complaint_created, complaint_updated, system_alert, ...
    title = Column(String(100), nullable=False)
    message = Column(String(500), nullable=False)
    target_type = Column(String(20), nullable=False)  # complaint | comment | user | system
    target_id = Column(Integer)
    priority = Column(String(20), nullable=False, default="medium")
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
