from app.ops.integrity_checks import (
    check_capacity_drift,
    check_capacity_overflow,
    check_duplicate_active_records,
    check_negative_quantities,
    repair_capacity_drift,
    resolve_stores,
    run_integrity_checks,
)
from tests.tcg_helpers import add_inventory, auth, create_product, create_store, create_user, login


def _seed_store_with_stock(client, db_session, *, quantity=6, unit_size=5):
    store = create_store(db_session, name="Store Ops", max_capacity=100)
    create_user(db_session, username="partner-ops", role="partner")
    product = create_product(db_session, sku="OPS-1", unit_size=unit_size)
    token = login(client, "partner-ops")
    add_inventory(client, token, store.id, product.id, quantity)
    return store, product


def test_consistent_store_has_no_findings(client, db_session):
    store, _product = _seed_store_with_stock(client, db_session)

    assert run_integrity_checks(db_session, str(store.id)) == []


def test_capacity_drift_detected_and_repaired(client, db_session):
    store, _product = _seed_store_with_stock(client, db_session)
    db_session.refresh(store)
    store.current_capacity = 7
    db_session.commit()

    findings = check_capacity_drift(db_session, str(store.id))
    assert len(findings) == 1
    assert findings[0].details == {"stored": 7, "derived": 30}

    repaired = repair_capacity_drift(db_session, findings)
    assert repaired == [str(store.id)]
    assert check_capacity_drift(db_session, str(store.id)) == []


def test_capacity_overflow_detected(client, db_session):
    store, _product = _seed_store_with_stock(client, db_session)
    db_session.refresh(store)
    store.max_capacity = 20
    db_session.commit()

    findings = check_capacity_overflow(db_session, str(store.id))
    assert [finding.check_id for finding in findings] == ["capacity_overflow"]
    assert findings[0].details == {"current_capacity": 30, "max_capacity": 20}


def test_stock_set_to_zero_stays_listed_without_findings(client, db_session):
    store = create_store(db_session, name="Store Ops", max_capacity=100)
    create_user(db_session, username="partner-ops", role="partner")
    product = create_product(db_session, sku="OPS-2", unit_size=5)
    token = login(client, "partner-ops")
    record = add_inventory(client, token, store.id, product.id, 6)["inventory"]

    response = client.put(
        f"/api/stores/{store.id}/inventory/{record['id']}",
        headers=auth(token),
        json={"quantity": 0},
    )
    assert response.status_code == 200
    assert response.json()["inventory"]["quantity"] == 0
    assert response.json()["inventory"]["isActive"] is True

    assert run_integrity_checks(db_session, str(store.id)) == []


def test_clean_store_has_no_duplicates_or_negative_quantities(client, db_session):
    store, _product = _seed_store_with_stock(client, db_session)

    assert check_duplicate_active_records(db_session, str(store.id)) == []
    assert check_negative_quantities(db_session, str(store.id)) == []


def test_resolve_stores(client, db_session):
    first = create_store(db_session, name="One")
    second = create_store(db_session, name="Two")
    create_store(db_session, name="Gone", is_active=False)

    assert set(resolve_stores(db_session, "all")) == {str(first.id), str(second.id)}
    assert resolve_stores(db_session, str(first.id)) == [str(first.id)]
