from fastapi import Depends, Request
from jose import JWTError
from pydantic import ValidationError

from app.tcg.core.context import Principal, build_principal
from app.tcg.core.error_catalog import AppError, ErrorCatalog
from app.tcg.core.metrics import metrics
from app.tcg.core.security import TokenData, decode_token, oauth2_scheme
from app.tcg.db.session import get_db
from app.tcg.repos.users import UserRepository
from app.tcg.services.authorization import has_permission


def get_current_token_data(token: str = Depends(oauth2_scheme)) -> TokenData:
    try:
        payload = decode_token(token)
        return TokenData(**payload)
    except (JWTError, ValidationError, TypeError) as exc:
        raise AppError(ErrorCatalog.INVALID_TOKEN) from exc


def get_current_user(token_data: TokenData = Depends(get_current_token_data), db=Depends(get_db)):
    if not token_data.sub:
        raise AppError(ErrorCatalog.INVALID_TOKEN)

    user = UserRepository(db).get_by_id(token_data.sub)
    if user is None:
        raise AppError(ErrorCatalog.INVALID_TOKEN)
    return user


def require_active_user(user=Depends(get_current_user)):
    if not user.is_active:
        raise AppError(ErrorCatalog.USER_INACTIVE)
    return user


def get_current_principal(request: Request, user=Depends(require_active_user)) -> Principal:
    principal = build_principal(user)
    request.state.principal = principal
    request.state.user_id = principal.user_id
    return principal


def require_permission(action: str):
    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not has_permission(principal, action):
            metrics.increment_permission_denied(action)
            raise AppError(
                ErrorCatalog.PERMISSION_DENIED,
                details={"action": action, "role": principal.role},
            )
        return principal

    return dependency


__all__ = [
    "get_current_token_data",
    "get_current_user",
    "require_active_user",
    "get_current_principal",
    "require_permission",
]
