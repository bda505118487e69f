"""Transfer request lifecycle.

``open -> requested -> sent -> complete`` with ``closed`` reachable from every
non-terminal status. Inventory moves only on ``sent`` (source decremented) and
``complete`` (destination incremented).
"""

from __future__ import annotations

from app.tcg.core.error_catalog import AppError, ErrorCatalog

OPEN = "open"
REQUESTED = "requested"
SENT = "sent"
COMPLETE = "complete"
CLOSED = "closed"

STATUSES = (OPEN, REQUESTED, SENT, COMPLETE, CLOSED)
TERMINAL_STATUSES = frozenset({COMPLETE, CLOSED})
DELETABLE_STATUSES = frozenset({OPEN, CLOSED})

TRANSITIONS: dict[str, tuple[str, ...]] = {
    OPEN: (REQUESTED, CLOSED),
    REQUESTED: (SENT, CLOSED),
    SENT: (COMPLETE, CLOSED),
    COMPLETE: (),
    CLOSED: (),
}

# Actor and timestamp columns stamped when a request enters each status.
STATUS_STAMPS: dict[str, tuple[str, str]] = {
    REQUESTED: ("requested_by_user_id", "requested_at"),
    SENT: ("sent_by_user_id", "sent_at"),
    COMPLETE: ("completed_by_user_id", "completed_at"),
    CLOSED: ("closed_by_user_id", "closed_at"),
}


def next_statuses(status: str) -> tuple[str, ...]:
    return TRANSITIONS.get(status, ())


def is_defined(from_status: str, to_status: str) -> bool:
    return to_status in next_statuses(from_status)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def ensure_transition(from_status: str, to_status: str) -> None:
    if is_defined(from_status, to_status):
        return
    raise AppError(
        ErrorCatalog.INVALID_TRANSITION,
        details={
            "message": f"Cannot change status from {from_status} to {to_status}",
            "from": from_status,
            "to": to_status,
            "allowed": list(next_statuses(from_status)),
        },
    )
