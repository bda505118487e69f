from app.tcg.core.error_catalog import AppError, ErrorCatalog
from app.tcg.core.security import create_user_access_token, verify_password
from app.tcg.db.models import utc_now
from app.tcg.repos.users import UserRepository


class AuthService:
    def __init__(self, db):
        self.db = db
        self.repo = UserRepository(db)

    def login(self, identifier: str, password: str):
        user = self.repo.get_by_username_or_email(identifier)
        if user is None or not verify_password(password, user.hashed_password):
            raise AppError(ErrorCatalog.INVALID_CREDENTIALS)
        if not user.is_active:
            raise AppError(ErrorCatalog.USER_INACTIVE)
        user.last_login_at = utc_now()
        self.db.commit()
        return user, create_user_access_token(user)
