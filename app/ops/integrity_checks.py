from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select

from app.tcg.core.ids import parse_uuid
from app.tcg.core.metrics import metrics
from app.tcg.db.models import InventoryRecord, Store
from app.tcg.repos.inventory import InventoryRepository
from app.tcg.repos.stores import StoreRepository
from app.tcg.services.capacity import CapacityLedger


SEVERITY_CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class IntegrityFinding:
    check_id: str
    severity: str
    store_id: str
    message: str
    entity: str
    entity_id: str | None
    details: dict


def resolve_stores(db, store: str) -> list[str]:
    if store.lower() != "all":
        if parse_uuid(store) is None:
            raise ValueError(f"Invalid store id: {store}")
        return [str(parse_uuid(store))]
    return [str(row.id) for row in db.execute(select(Store.id).where(Store.is_active.is_(True))).all()]


def check_capacity_drift(db, store_id: str) -> list[IntegrityFinding]:
    store = StoreRepository(db).get_by_id(store_id)
    if store is None:
        return []
    derived = InventoryRepository(db).derived_capacity(store.id)
    if derived == store.current_capacity:
        return []
    metrics.increment_invariant_violation("capacity_drift")
    return [
        IntegrityFinding(
            check_id="capacity_drift",
            severity=SEVERITY_CRITICAL,
            store_id=store_id,
            message="Stored current capacity differs from the units held by active inventory.",
            entity="stores",
            entity_id=store_id,
            details={"stored": store.current_capacity, "derived": derived},
        )
    ]


def check_capacity_overflow(db, store_id: str) -> list[IntegrityFinding]:
    store = StoreRepository(db).get_by_id(store_id)
    if store is None or store.current_capacity <= store.max_capacity:
        return []
    metrics.increment_invariant_violation("capacity_overflow")
    return [
        IntegrityFinding(
            check_id="capacity_overflow",
            severity=SEVERITY_CRITICAL,
            store_id=store_id,
            message="Current capacity exceeds max capacity.",
            entity="stores",
            entity_id=store_id,
            details={"current_capacity": store.current_capacity, "max_capacity": store.max_capacity},
        )
    ]


def check_duplicate_active_records(db, store_id: str) -> list[IntegrityFinding]:
    rows = db.execute(
        select(
            InventoryRecord.product_id,
            InventoryRecord.location,
            func.count(InventoryRecord.id).label("record_count"),
        )
        .where(InventoryRecord.store_id == parse_uuid(store_id))
        .where(InventoryRecord.kind == "product")
        .where(InventoryRecord.is_active.is_(True))
        .group_by(InventoryRecord.product_id, InventoryRecord.location)
        .having(func.count(InventoryRecord.id) > 1)
    ).all()
    findings = []
    for row in rows:
        findings.append(
            IntegrityFinding(
                check_id="duplicate_active_inventory",
                severity=SEVERITY_CRITICAL,
                store_id=store_id,
                message="More than one active record for the same product and location.",
                entity="inventory_records",
                entity_id=None,
                details={
                    "product_id": str(row.product_id),
                    "location": row.location,
                    "record_count": int(row.record_count),
                },
            )
        )
    if findings:
        metrics.increment_invariant_violation("duplicate_active_inventory", len(findings))
    return findings


def check_negative_quantities(db, store_id: str) -> list[IntegrityFinding]:
    rows = db.execute(
        select(InventoryRecord.id, InventoryRecord.quantity)
        .where(InventoryRecord.store_id == parse_uuid(store_id))
        .where(InventoryRecord.quantity < 0)
    ).all()
    findings = []
    for row in rows:
        findings.append(
            IntegrityFinding(
                check_id="negative_quantity",
                severity=SEVERITY_CRITICAL,
                store_id=store_id,
                message="Inventory quantity is negative.",
                entity="inventory_records",
                entity_id=str(row.id),
                details={"quantity": row.quantity},
            )
        )
    if findings:
        metrics.increment_invariant_violation("negative_quantity", len(findings))
    return findings


def run_integrity_checks(db, store_id: str) -> list[IntegrityFinding]:
    findings: list[IntegrityFinding] = []
    findings.extend(check_capacity_drift(db, store_id))
    findings.extend(check_capacity_overflow(db, store_id))
    findings.extend(check_duplicate_active_records(db, store_id))
    findings.extend(check_negative_quantities(db, store_id))
    return findings


def repair_capacity_drift(db, findings: list[IntegrityFinding]) -> list[str]:
    """Re-derive every store reported with capacity drift and commit."""
    store_ids = sorted({f.store_id for f in findings if f.check_id == "capacity_drift"})
    ledger = CapacityLedger(db)
    for store_id in store_ids:
        ledger.recalculate(parse_uuid(store_id))
    db.commit()
    return store_ids
