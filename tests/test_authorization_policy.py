from types import SimpleNamespace

import pytest

from app.tcg.core.context import Principal
from app.tcg.core.error_catalog import AppError
from app.tcg.services.authorization import (
    available_transitions,
    can_access_store,
    can_create_transfer,
    can_manage_store_inventory,
    can_transition,
    can_view_transfer,
    ensure_allowed,
    has_permission,
)

STORE_A = "11111111-1111-1111-1111-111111111111"
STORE_B = "22222222-2222-2222-2222-222222222222"
STORE_C = "33333333-3333-3333-3333-333333333333"

PARTNER = Principal(user_id="p", role="partner")
MANAGER_A = Principal(user_id="ma", role="store-manager", assigned_store_id=STORE_A)
MANAGER_B = Principal(user_id="mb", role="store-manager", assigned_store_id=STORE_B)
MANAGER_C = Principal(user_id="mc", role="store-manager", assigned_store_id=STORE_C)
EMPLOYEE_A = Principal(user_id="ea", role="employee", assigned_store_id=STORE_A)


def _transfer(status: str, from_store: str = STORE_A, to_store: str = STORE_B):
    return SimpleNamespace(status=status, from_store_id=from_store, to_store_id=to_store)


def test_partner_can_take_every_defined_edge():
    for status, targets in {
        "open": ["requested", "closed"],
        "requested": ["sent", "closed"],
        "sent": ["complete", "closed"],
        "complete": [],
        "closed": [],
    }.items():
        assert available_transitions(PARTNER, _transfer(status)) == targets


@pytest.mark.parametrize(
    ("status", "target", "allowed", "denied"),
    [
        ("open", "requested", MANAGER_B, MANAGER_A),
        ("requested", "sent", MANAGER_A, MANAGER_B),
        ("sent", "complete", MANAGER_B, MANAGER_A),
    ],
)
def test_manager_edges_follow_store_side(status, target, allowed, denied):
    transfer = _transfer(status)
    assert can_transition(allowed, transfer, status, target)
    decision = can_transition(denied, transfer, status, target)
    assert not decision
    assert decision.reason


@pytest.mark.parametrize("status", ["open", "requested", "sent"])
def test_only_partner_closes(status):
    transfer = _transfer(status)
    assert can_transition(PARTNER, transfer, status, "closed")
    assert not can_transition(MANAGER_A, transfer, status, "closed")
    assert not can_transition(MANAGER_B, transfer, status, "closed")


def test_employee_has_no_transitions():
    for status in ("open", "requested", "sent"):
        assert available_transitions(EMPLOYEE_A, _transfer(status)) == []


def test_undefined_edge_is_denied_even_for_partner():
    assert not can_transition(PARTNER, _transfer("open"), "open", "complete")


def test_available_transitions_per_manager():
    assert available_transitions(MANAGER_B, _transfer("open")) == ["requested"]
    assert available_transitions(MANAGER_A, _transfer("open")) == []
    assert available_transitions(MANAGER_A, _transfer("requested")) == ["sent"]
    assert available_transitions(MANAGER_B, _transfer("sent")) == ["complete"]
    assert available_transitions(MANAGER_C, _transfer("sent")) == []


def test_view_and_create_rules():
    transfer = _transfer("open")
    assert can_view_transfer(PARTNER, transfer)
    assert can_view_transfer(MANAGER_A, transfer)
    assert can_view_transfer(MANAGER_B, transfer)
    assert not can_view_transfer(MANAGER_C, transfer)
    assert not can_view_transfer(EMPLOYEE_A, transfer)

    assert can_create_transfer(PARTNER, STORE_A, STORE_B)
    assert can_create_transfer(MANAGER_A, STORE_A, STORE_B)
    assert can_create_transfer(MANAGER_B, STORE_A, STORE_B)
    assert not can_create_transfer(MANAGER_C, STORE_A, STORE_B)
    assert not can_create_transfer(EMPLOYEE_A, STORE_A, STORE_B)


def test_store_access_rules():
    assert can_access_store(PARTNER, STORE_C)
    assert can_access_store(EMPLOYEE_A, STORE_A)
    assert not can_access_store(EMPLOYEE_A, STORE_B)
    assert can_manage_store_inventory(MANAGER_A, STORE_A)
    assert not can_manage_store_inventory(MANAGER_A, STORE_B)
    assert not can_manage_store_inventory(EMPLOYEE_A, STORE_A)


def test_role_permissions():
    assert has_permission(PARTNER, "PRODUCT_MANAGE")
    assert not has_permission(MANAGER_A, "PRODUCT_MANAGE")
    assert not has_permission(EMPLOYEE_A, "TRANSFER_VIEW")
    assert not has_permission(Principal(user_id="x", role="unknown"), "STORE_VIEW")


def test_ensure_allowed_raises_permission_denied():
    with pytest.raises(AppError) as excinfo:
        ensure_allowed(can_access_store(EMPLOYEE_A, STORE_B), "INVENTORY_VIEW")
    assert excinfo.value.error.code == "PERMISSION_DENIED"
    assert excinfo.value.details["action"] == "INVENTORY_VIEW"
