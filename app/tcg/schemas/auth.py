from datetime import datetime

from pydantic import EmailStr, Field, model_validator

from app.tcg.schemas.common import ApiModel


class LoginRequest(ApiModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {"email": "manager@example.com", "password": "Secret123"},
                {"usernameOrEmail": "downtown-manager", "password": "Secret123"},
            ]
        }
    }

    email: EmailStr | None = None
    username_or_email: str | None = Field(default=None, min_length=1, max_length=255)
    password: str = Field(min_length=1)

    @model_validator(mode="after")
    def ensure_identifier(self):
        if not self.email and not self.username_or_email:
            raise ValueError("email or usernameOrEmail is required")
        return self

    @property
    def identifier(self) -> str:
        return str(self.email) if self.email else self.username_or_email


class UserProfile(ApiModel):
    id: str
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    assigned_store_id: str | None = None
    is_active: bool
    last_login_at: datetime | None = None


class LoginResponse(ApiModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: UserProfile


class SessionResponse(ApiModel):
    success: bool = True
    user: UserProfile
