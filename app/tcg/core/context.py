from dataclasses import dataclass

from fastapi import Request

from app.tcg.core.enums import PARTNER, STORE_MANAGER


@dataclass(frozen=True)
class Principal:
    """The authenticated actor evaluated by the authorization policy."""

    user_id: str
    role: str
    assigned_store_id: str | None = None
    username: str | None = None

    @property
    def is_partner(self) -> bool:
        return self.role == PARTNER

    @property
    def is_manager(self) -> bool:
        return self.role == STORE_MANAGER


def build_principal(user) -> Principal:
    return Principal(
        user_id=str(user.id),
        role=user.role,
        assigned_store_id=str(user.assigned_store_id) if user.assigned_store_id else None,
        username=user.username,
    )


def get_request_principal(request: Request) -> Principal | None:
    principal = getattr(request.state, "principal", None)
    if isinstance(principal, Principal):
        return principal
    return None
