from fastapi import APIRouter, Depends

from app.tcg.core.deps import get_current_principal, require_active_user
from app.tcg.db.session import get_db
from app.tcg.schemas.auth import LoginRequest, LoginResponse, SessionResponse, UserProfile
from app.tcg.schemas.common import SuccessResponse
from app.tcg.schemas.errors import ErrorResponse
from app.tcg.services.auth import AuthService

router = APIRouter()


def _profile(user) -> UserProfile:
    return UserProfile(
        id=str(user.id),
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        assigned_store_id=str(user.assigned_store_id) if user.assigned_store_id else None,
        is_active=user.is_active,
        last_login_at=user.last_login_at,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def login(payload: LoginRequest, db=Depends(get_db)):
    user, token = AuthService(db).login(payload.identifier, payload.password)
    return LoginResponse(access_token=token, user=_profile(user))


@router.get("/session", response_model=SessionResponse, responses={401: {"model": ErrorResponse}})
def session(user=Depends(require_active_user), _principal=Depends(get_current_principal)):
    return SessionResponse(user=_profile(user))


@router.post("/logout", response_model=SuccessResponse)
def logout(_principal=Depends(get_current_principal)):
    # Tokens are stateless; the client discards its copy.
    return SuccessResponse(message="Logged out")
