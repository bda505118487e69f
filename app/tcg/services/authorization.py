"""Role based authorization policy shared by every endpoint and the transfer workflow.

All functions are pure: they look only at the principal and the store ids of the
resource, never at the database.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.tcg.core.context import Principal
from app.tcg.core.enums import EMPLOYEE, PARTNER, STORE_MANAGER
from app.tcg.core.error_catalog import AppError, ErrorCatalog
from app.tcg.core.ids import normalize_uuid
from app.tcg.core.metrics import metrics
from app.tcg.services import transfer_workflow as workflow


ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    PARTNER: frozenset(
        {
            "STORE_VIEW",
            "STORE_MANAGE",
            "STORE_UPDATE",
            "PRODUCT_MANAGE",
            "INVENTORY_VIEW",
            "INVENTORY_VIEW_ALL",
            "INVENTORY_MANAGE",
            "TRANSFER_VIEW",
            "TRANSFER_MANAGE",
            "TRANSFER_DELETE",
        }
    ),
    STORE_MANAGER: frozenset(
        {
            "STORE_VIEW",
            "STORE_UPDATE",
            "INVENTORY_VIEW",
            "INVENTORY_MANAGE",
            "TRANSFER_VIEW",
            "TRANSFER_MANAGE",
        }
    ),
    EMPLOYEE: frozenset({"STORE_VIEW", "INVENTORY_VIEW"}),
}

# The store a manager must be assigned to for each edge they may take.
MANAGER_EDGE_STORE: dict[tuple[str, str], str] = {
    (workflow.OPEN, workflow.REQUESTED): "to_store_id",
    (workflow.REQUESTED, workflow.SENT): "from_store_id",
    (workflow.SENT, workflow.COMPLETE): "to_store_id",
}


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = AccessDecision(True)


def deny(reason: str) -> AccessDecision:
    return AccessDecision(False, reason)


def has_permission(principal: Principal, action: str) -> bool:
    return action in ROLE_PERMISSIONS.get(principal.role, frozenset())


def _same_store(left, right) -> bool:
    left_id = normalize_uuid(left)
    return left_id is not None and left_id == normalize_uuid(right)


def can_access_store(principal: Principal, store_id) -> AccessDecision:
    if principal.is_partner:
        return ALLOW
    if _same_store(principal.assigned_store_id, store_id):
        return ALLOW
    return deny("Access is limited to your assigned store")


def can_manage_store_inventory(principal: Principal, store_id) -> AccessDecision:
    if not has_permission(principal, "INVENTORY_MANAGE"):
        return deny("Only partners and store managers can change inventory")
    return can_access_store(principal, store_id)


def can_create_transfer(principal: Principal, from_store_id, to_store_id) -> AccessDecision:
    if principal.is_partner:
        return ALLOW
    if not principal.is_manager:
        return deny("Only partners and store managers can create transfer requests")
    if _same_store(principal.assigned_store_id, from_store_id) or _same_store(principal.assigned_store_id, to_store_id):
        return ALLOW
    return deny("Managers can only create requests involving their own store")


def can_view_transfer(principal: Principal, transfer) -> AccessDecision:
    if principal.is_partner:
        return ALLOW
    if not principal.is_manager:
        return deny("Insufficient permissions to view transfer requests")
    if _same_store(principal.assigned_store_id, transfer.from_store_id) or _same_store(
        principal.assigned_store_id, transfer.to_store_id
    ):
        return ALLOW
    return deny("Insufficient permissions to view this request")


def can_transition(principal: Principal, transfer, from_status: str, to_status: str) -> AccessDecision:
    if not workflow.is_defined(from_status, to_status):
        return deny(f"No transition from {from_status} to {to_status}")
    if principal.is_partner:
        return ALLOW
    if not principal.is_manager:
        return deny("Your role cannot change transfer request status")
    store_field = MANAGER_EDGE_STORE.get((from_status, to_status))
    if store_field is None:
        return deny("Only partners can close transfer requests")
    if _same_store(principal.assigned_store_id, getattr(transfer, store_field)):
        return ALLOW
    side = "destination" if store_field == "to_store_id" else "source"
    return deny(f"Only the {side} store manager can move a request from {from_status} to {to_status}")


def available_transitions(principal: Principal, transfer) -> list[str]:
    return [
        status
        for status in workflow.next_statuses(transfer.status)
        if can_transition(principal, transfer, transfer.status, status)
    ]


def ensure_allowed(decision: AccessDecision, action: str) -> None:
    if decision:
        return
    metrics.increment_permission_denied(action)
    raise AppError(ErrorCatalog.PERMISSION_DENIED, details={"message": decision.reason, "action": action})
