import logging

import pytest

from app.tcg.core.error_catalog import AppError
from app.tcg.services.capacity import CapacityLedger
from app.tcg.services.inventory import InventoryService
from tests.tcg_helpers import create_product, create_store


def test_reserve_within_bounds(db_session):
    store = create_store(db_session, name="Ledger", max_capacity=10)
    ledger = CapacityLedger(db_session)

    ledger.reserve(store.id, 10)
    db_session.commit()
    db_session.refresh(store)
    assert store.current_capacity == 10

    # Nothing is stocked, so re-deriving drops the reservation.
    assert ledger.recalculate(store.id).current_capacity == 0


def test_reserve_past_max_is_rejected(db_session):
    store = create_store(db_session, name="Ledger", max_capacity=10)
    ledger = CapacityLedger(db_session)
    ledger.reserve(store.id, 7)

    with pytest.raises(AppError) as excinfo:
        ledger.reserve(store.id, 4)
    assert excinfo.value.error.code == "CAPACITY_EXCEEDED"
    assert excinfo.value.details["required"] == 4
    assert excinfo.value.details["available"] == 3


def test_negative_reserve_releases(db_session):
    store = create_store(db_session, name="Ledger", max_capacity=10)
    ledger = CapacityLedger(db_session)
    ledger.reserve(store.id, 6)
    ledger.reserve(store.id, -2)
    db_session.commit()

    db_session.refresh(store)
    assert store.current_capacity == 4


def test_release_below_zero_falls_back_to_recalculate(db_session, caplog):
    store = create_store(db_session, name="Ledger", max_capacity=100)
    product = create_product(db_session, sku="LEDGER-1", unit_size=3)
    service = InventoryService(db_session)
    service.add_product_stock(store.id, product.id, quantity=4, location="floor")
    db_session.commit()

    db_session.refresh(store)
    store.current_capacity = 1
    db_session.commit()

    with caplog.at_level(logging.WARNING, logger="tcg.capacity"):
        CapacityLedger(db_session).release(store.id, 5)
    db_session.commit()

    assert any("capacity.release_drift" in record.getMessage() for record in caplog.records)
    db_session.refresh(store)
    assert store.current_capacity == 12


def test_withdraw_to_zero_deactivates_record(db_session):
    store = create_store(db_session, name="Ledger", max_capacity=100)
    product = create_product(db_session, sku="LEDGER-2", unit_size=2)
    service = InventoryService(db_session)
    record = service.add_product_stock(store.id, product.id, quantity=5, location="back").record
    db_session.commit()

    withdrawn = service.withdraw(record.id, 5)
    db_session.commit()

    assert withdrawn.quantity == 0
    assert withdrawn.is_active is False
    db_session.refresh(store)
    assert store.current_capacity == 0


def test_withdraw_more_than_available(db_session):
    store = create_store(db_session, name="Ledger", max_capacity=100)
    product = create_product(db_session, sku="LEDGER-3", unit_size=1)
    service = InventoryService(db_session)
    record = service.add_product_stock(store.id, product.id, quantity=2, location="floor").record
    db_session.commit()

    with pytest.raises(AppError) as excinfo:
        service.withdraw(record.id, 3)
    assert excinfo.value.error.code == "INSUFFICIENT_INVENTORY"
    assert excinfo.value.details["available"] == 2
