from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.auth import get_current_user, UserPrincipal
from app.schemas.user import (
    UserRegister, UserLogin, UserUpdateDetails, PasswordUpdate,
    ForgotPasswordRequest, PasswordReset, UserResponse,
)
from app.services.auth_service import auth_service

router = APIRouter()


def _raise_on_error(result: dict, status_code: int = 400) -> None:
    if "error" in result:
        raise HTTPException(status_code=status_code, detail=result["error"])


@router.post("/register", status_code=201)
async def register(data: UserRegister, db: AsyncSession = Depends(get_db)):
    result = await auth_service.register(
        db,
        name=data.name,
        email=data.email,
        password=data.password,
        department=data.department,
        role=data.role,
        year=data.year,
    )
    _raise_on_error(result)
    return {
        "success": True,
        "message": "User registered successfully",
        "data": {
            "user": UserResponse.model_validate(result["user"]),
            "token": result["token"],
        },
    }


@router.post("/login")
async def login(data: UserLogin, db: AsyncSession = Depends(get_db)):
    result = await auth_service.login(db, email=data.email, password=data.password)
    _raise_on_error(result)
    return {
        "success": True,
        "message": "Login successful",
        "data": {
            "user": UserResponse.model_validate(result["user"]),
            "token": result["token"],
        },
    }


@router.get("/me")
async def get_me(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await auth_service.get_me(db, current_user.id)
    _raise_on_error(result, 404)
    return {"success": True, "data": {"user": UserResponse.model_validate(result["user"])}}


@router.put("/updatedetails")
async def update_details(
    data: UserUpdateDetails,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await auth_service.update_details(db, current_user.id, data.model_dump(exclude_unset=True))
    _raise_on_error(result)
    return {
        "success": True,
        "message": "User details updated successfully",
        "data": {"user": UserResponse.model_validate(result["user"])},
    }


@router.put("/updatepassword")
async def update_password(
    data: PasswordUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await auth_service.update_password(
        db, current_user.id, data.current_password, data.new_password
    )
    _raise_on_error(result, 401)
    return {
        "success": True,
        "message": "Password updated successfully",
        "data": {"token": result["token"]},
    }


@router.post("/logout")
async def logout(current_user: UserPrincipal = Depends(get_current_user)):
    # Tokens are stateless; the client drops its copy
    return {"success": True, "message": "Logged out successfully"}


@router.post("/forgotpassword")
async def forgot_password(data: ForgotPasswordRequest, db: AsyncSession = Depends(get_db)):
    result = await auth_service.forgot_password(db, data.email)
    _raise_on_error(result, 404)
    return {
        "success": True,
        "message": "Password reset token generated",
        "data": {"resetToken": result["reset_token"]},
    }


@router.put("/resetpassword/{reset_token}")
async def reset_password(reset_token: str, data: PasswordReset, db: AsyncSession = Depends(get_db)):
    result = await auth_service.reset_password(db, reset_token, data.password)
    _raise_on_error(result)
    return {
        "success": True,
        "message": "Password reset successful",
        "data": {"token": result["token"]},
    }


@router.post("/verify")
async def verify_account(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    result = await auth_service.verify_account(db, current_user.id)
    _raise_on_error(result, 404)
    return {
        "success": True,
        "message": "Account verified successfully",
        "data": {"user": UserResponse.model_validate(result["user"])},
    }
