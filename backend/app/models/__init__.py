from app.models.user import User
from app.models.complaint import Complaint
from app.models.comment import Comment
from app.models.notification import Notification

__all__ = ["User", "Complaint", "Comment", "Notification"]
