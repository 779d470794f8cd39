from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from app.database import Base

ROLES = ("user", "admin")

DEPARTMENTS = (
    "Computer Science",
    "Electrical Engineering",
    "Mechanical Engineering",
    "Civil Engineering",
    "Chemical Engineering",
    "Other",
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(128), nullable=False)  # bcrypt hash
    department = Column(String(50), nullable=False, default="Other", index=True)
    year = Column(Integer)
    role = Column(String(20), nullable=False, default="user")  # "user" | "admin"
    avatar = Column(String(1000), default="")
    is_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True))
    reset_password_token = Column(String(64), index=True)
    reset_password_expire = Column(DateTime(timezone=True))
    complaints_submitted = Column(Integer, nullable=False, default=0)
    complaints_resolved = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
