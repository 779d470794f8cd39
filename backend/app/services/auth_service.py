"""
Credential service: registration, login and profile/password maintenance.

Every operation returns a plain dict. Failures come back as
``{"error": message}`` rather than being raised, so callers must check for the
``error`` key; validation, not-found and credential-mismatch failures all share
that shape.
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth import hash_password, verify_password, create_token
from app.config import get_settings
from app.models.user import ROLES, DEPARTMENTS
from app.repositories.user_repository import user_repository
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
UPDATABLE_FIELDS = ("name", "email", "department", "year", "avatar")


def _hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def _check_password(password: Optional[str]) -> Optional[str]:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


def _check_profile_fields(fields: dict) -> Optional[str]:
    if "name" in fields and not (fields["name"] or "").strip():
        return "Please provide a name"
    if "department" in fields and fields["department"] not in DEPARTMENTS:
        return f"Department must be one of: {', '.join(DEPARTMENTS)}"
    if fields.get("year") is not None and not 1 <= fields["year"] <= 5:
        return "Year must be between 1 and 5"
    return None


class AuthService:
    async def register(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        department: str = "Other",
        role: Optional[str] = None,
        year: Optional[int] = None,
    ) -> dict:
        email = (email or "").strip().lower()
        if not email:
            return {"error": "Please provide an email"}
        error = _check_password(password) or _check_profile_fields(
            {"name": name, "department": department or "Other", "year": year}
        )
        if error:
            return {"error": error}
        role = role or "user"
        if role not in ROLES:
            return {"error": f"Role must be one of: {', '.join(ROLES)}"}

        if await user_repository.find_by_email(db, email):
            return {"error": "User with this email already exists"}

        try:
            user = await user_repository.create(
                db,
                name=name.strip(),
                email=email,
                password=hash_password(password),
                department=department or "Other",
                year=year,
                role=role,
            )
        except IntegrityError:
            # lost a race against a concurrent registration of the same email
            await db.rollback()
            return {"error": "User with this email already exists"}

        await notification_service.send(
            db,
            recipient_id=user.id,
            type="system_alert",
            title="Welcome to Campus Voice!",
            message="Thank you for joining our community. Start by submitting your first complaint.",
            target_type="user",
            target_id=user.id,
            priority="low",
        )
        logger.info("Registered user %s (%s)", user.id, user.role)
        return {"user": user, "token": create_token(user)}

    async def login(self, db: AsyncSession, email: str, password: str) -> dict:
        if not email or not password:
            return {"error": "Please provide email and password"}

        user = await user_repository.find_by_email(db, email)
        if not user:
            return {"error": "Invalid credentials"}
        if not user.is_active:
            return {"error": "Account is deactivated. Please contact administrator."}
        if not verify_password(password, user.password):
            logger.info("Failed login for user %s", user.id)
            return {"error": "Invalid credentials"}

        user = await user_repository.update(db, user, {"last_login": datetime.now(timezone.utc)})
        return {"user": user, "token": create_token(user)}

    async def get_me(self, db: AsyncSession, user_id: int) -> dict:
        user = await user_repository.find_by_id(db, user_id)
        if not user:
            return {"error": "User not found"}
        return {"user": user}

    async def update_details(self, db: AsyncSession, user_id: int, fields: dict) -> dict:
        fields = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
        error = _check_profile_fields(fields)
        if error:
            return {"error": error}

        if "email" in fields:
            fields["email"] = fields["email"].strip().lower()
            existing = await user_repository.find_by_email(db, fields["email"])
            if existing and existing.id != user_id:
                return {"error": "Email is already taken by another user"}

        user = await user_repository.find_by_id(db, user_id)
        if not user:
            return {"error": "User not found"}
        user = await user_repository.update(db, user, fields)
        return {"user": user}

    async def update_password(
        self, db: AsyncSession, user_id: int, current_password: str, new_password: str
    ) -> dict:
        user = await user_repository.find_by_id(db, user_id)
        if not user:
            return {"error": "User not found"}
        if not verify_password(current_password, user.password):
            return {"error": "Current password is incorrect"}
        error = _check_password(new_password)
        if error:
            return {"error": error}

        user = await user_repository.update(db, user, {"password": hash_password(new_password)})
        return {"token": create_token(user)}

    async def forgot_password(self, db: AsyncSession, email: str) -> dict:
        user = await user_repository.find_by_email(db, email)
        if not user:
            return {"error": "User not found"}

        settings = get_settings()
        raw_token = secrets.token_hex(20)
        await user_repository.update(db, user, {
            "reset_password_token": _hash_reset_token(raw_token),
            "reset_password_expire": datetime.now(timezone.utc)
            + timedelta(seconds=settings.reset_token_expire_seconds),
        })
        # TODO: deliver the reset token by email instead of returning it
        return {"reset_token": raw_token}

    async def reset_password(self, db: AsyncSession, raw_token: str, new_password: str) -> dict:
        user = await user_repository.find_by_reset_token(
            db, _hash_reset_token(raw_token or ""), datetime.now(timezone.utc)
        )
        if not user:
            return {"error": "Invalid token"}
        error = _check_password(new_password)
        if error:
            return {"error": error}

        user = await user_repository.update(db, user, {
            "password": hash_password(new_password),
            "reset_password_token": None,
            "reset_password_expire": None,
        })
        return {"token": create_token(user)}

    async def verify_account(self, db: AsyncSession, user_id: int) -> dict:
        user = await user_repository.find_by_id(db, user_id)
        if not user:
            return {"error": "User not found"}
        user = await user_repository.update(db, user, {"is_verified": True})
        return {"user": user}


auth_service = AuthService()
