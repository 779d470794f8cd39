import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from app.config import get_settings
from app import models  # noqa: F401  registers every table on Base.metadata
from app.database import engine, Base, async_session
from app.logging_config import setup_logging
from app.routers import admin, admin_ui, complaints, notifications, users
from app.routers import auth as auth_router

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


async def seed_admin_user():
    """Create the bootstrap admin from SEED_ADMIN_* if it doesn't exist. Idempotent."""
    from app.auth import hash_password
    from app.repositories.user_repository import user_repository

    if not (settings.seed_admin_email and settings.seed_admin_password):
        return

    async with async_session() as session:
        existing = await user_repository.find_by_email(session, settings.seed_admin_email)
        if not existing:
            await user_repository.create(
                session,
                name="Administrator",
                email=settings.seed_admin_email.strip().lower(),
                password=hash_password(settings.seed_admin_password),
                role="admin",
                is_verified=True,
            )
            logger.info("Seeded admin user %s", settings.seed_admin_email)
        await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables then seed the admin
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await seed_admin_user()
    logger.info("Server running in %s mode", settings.environment)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Campus Voice API",
    description="Complaint management: submission, triage and admin replies",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %s %.1fms",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
        return response


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = {"success": False, "error": "Server Error"}
    if settings.is_development:
        content["details"] = {
            "name": type(exc).__name__,
            "message": str(exc),
            "url": str(request.url.path),
            "method": request.method,
        }
    return JSONResponse(status_code=500, content=content)


app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(complaints.router, prefix="/api/complaints", tags=["Complaints"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_ui.router, prefix="/api/admin-ui", tags=["Admin UI"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "campus-voice-api"}
