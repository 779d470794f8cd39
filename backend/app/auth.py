"""
Auth module: password hashing, JWT creation/validation and the FastAPI
dependencies that guard routes.

``get_current_user`` resolves the bearer token to a live, active user and
raises 401 otherwise. ``require_role`` layers a role check (403) on top of it;
admin routers mount ``require_role("admin")`` for every endpoint.
"""

import time
from dataclasses import dataclass
from typing import Optional
import bcrypt
from jose import jwt, JWTError
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import get_settings
from app.database import get_db
from app.repositories.user_repository import user_repository

ALGORITHM = "HS256"


@dataclass
class UserPrincipal:
    """Resolved identity attached to each request."""
    id: int
    name: str
    email: str
    role: str                     # "user" | "admin"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def owns(self, owner_id: int) -> bool:
        return self.id == owner_id


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    settings = get_settings()
    hashed = bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt(rounds=settings.bcrypt_rounds))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    return bcrypt.checkpw(plain_password.encode("utf-8")[:72], hashed_password.encode("utf-8"))


def create_token(user) -> str:
    """Create a signed JWT for the given User model instance."""
    settings = get_settings()
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "exp": int(time.time()) + settings.jwt_expire_seconds,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT. Returns None if invalid/expired."""
    try:
        settings = get_settings()
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if "sub" not in payload:
        return None
    return payload


def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> UserPrincipal:
    """
    FastAPI dependency. Extracts the JWT from the Authorization header and
    loads the user it names.
    """
    token = bearer_token(request)
    if not token:
        raise _unauthorized("Not authorized to access this route")

    payload = decode_token(token)
    if payload is None:
        raise _unauthorized("Not authorized to access this route")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise _unauthorized("Not authorized to access this route")

    user = await user_repository.find_by_id(db, user_id)
    if not user:
        raise _unauthorized("No user found with this id")
    if not user.is_active:
        raise _unauthorized("Account is deactivated")

    return UserPrincipal(id=user.id, name=user.name, email=user.email, role=user.role)


def require_role(*roles: str):
    """Dependency factory: the caller must hold one of ``roles``."""

    async def checker(current_user: UserPrincipal = Depends(get_current_user)) -> UserPrincipal:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {current_user.role} is not authorized to access this route",
            )
        return current_user

    return checker
