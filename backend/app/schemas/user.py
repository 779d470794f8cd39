from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional


class UserRegister(BaseModel):
    name: str = Field(..., max_length=50)
    email: EmailStr
    password: str
    department: str = "Other"
    year: Optional[int] = None
    role: Optional[str] = None


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserUpdateDetails(BaseModel):
    name: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    year: Optional[int] = None
    avatar: Optional[str] = None


class PasswordUpdate(BaseModel):
    current_password: str = Field("", alias="currentPassword")
    new_password: str = Field("", alias="newPassword")

    class Config:
        populate_by_name = True


class ForgotPasswordRequest(BaseModel):
    email: str


class PasswordReset(BaseModel):
    password: str


class UserAdminUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = None
    year: Optional[int] = None
    role: Optional[str] = None
    avatar: Optional[str] = None
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None


class UserSummary(BaseModel):
    id: int
    name: str
    avatar: Optional[str] = None
    department: Optional[str] = None
    role: str

    class Config:
        from_attributes = True


class UserResponse(UserSummary):
    email: str
    year: Optional[int] = None
    is_verified: bool = False
    is_active: bool = True
    last_login: Optional[datetime] = None
    complaints_submitted: int = 0
    complaints_resolved: int = 0
    created_at: Optional[datetime] = None
