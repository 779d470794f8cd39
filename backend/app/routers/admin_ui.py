from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.auth import bearer_token, decode_token
from app.guards import AuthState, resolve_admin_route
from app.repositories.user_repository import user_repository
from app.schemas.admin import RouteDecisionResponse

router = APIRouter()


async def _auth_state(request: Request, db: AsyncSession) -> AuthState:
    token = bearer_token(request)
    payload = decode_token(token) if token else None
    if not payload:
        return AuthState()
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return AuthState()

    # same checks as get_current_user: the account must still exist and be active
    user = await user_repository.find_by_id(db, user_id)
    if not user or not user.is_active:
        return AuthState()
    return AuthState(token=token, role=user.role)


@router.get("/route", response_model=RouteDecisionResponse)
async def resolve_route(
    request: Request,
    path: str = Query("/"),
    db: AsyncSession = Depends(get_db),
):
    """
    Tell the admin UI whether to render ``path`` or where to redirect.
    An invalid or expired token, or one for a deactivated account, counts as
    logged out. The role is read from the stored user, not the token.
    """
    state = await _auth_state(request, db)
    decision = resolve_admin_route(state, path)
    return RouteDecisionResponse(
        path=decision.path,
        render=decision.render,
        page=decision.page,
        redirect_to=decision.redirect_to,
    )
