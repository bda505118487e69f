from tests.tcg_helpers import add_inventory, auth, create_store, create_user, login, setup_two_stores


def _store_body(**overrides):
    body = {
        "name": "Riverside",
        "location": {"address": "1 River Rd", "city": "Portland", "state": "OR", "zipCode": "97201"},
        "maxCapacity": 500,
    }
    body.update(overrides)
    return body


def test_partner_creates_store_with_zero_capacity(client, db_session):
    create_user(db_session, username="partner-1", role="partner")
    token = login(client, "partner-1")

    response = client.post("/api/stores", headers=auth(token), json=_store_body())
    assert response.status_code == 201
    store = response.json()["store"]
    assert store["currentCapacity"] == 0
    assert store["availableCapacity"] == 500
    assert store["location"]["zipCode"] == "97201"
    assert store["isActive"] is True


def test_store_validation_errors(client, db_session):
    create_user(db_session, username="partner-1", role="partner")
    token = login(client, "partner-1")

    bad_state = _store_body(location={"address": "x", "city": "y", "state": "ZZ", "zipCode": "97201"})
    response = client.post("/api/stores", headers=auth(token), json=bad_state)
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"

    response = client.post("/api/stores", headers=auth(token), json=_store_body(maxCapacity=0))
    assert response.status_code == 400


def test_manager_cannot_create_store(client, db_session):
    setup_two_stores(db_session)
    token = login(client, "manager-a")

    response = client.post("/api/stores", headers=auth(token), json=_store_body())
    assert response.status_code == 403
    assert response.json()["code"] == "PERMISSION_DENIED"


def test_manager_updates_own_store_only(client, db_session):
    ctx = setup_two_stores(db_session)
    token = login(client, "manager-a")

    own = client.put(f"/api/stores/{ctx['store_a'].id}", headers=auth(token), json={"name": "Downtown West"})
    assert own.status_code == 200
    assert own.json()["store"]["name"] == "Downtown West"

    other = client.put(f"/api/stores/{ctx['store_b'].id}", headers=auth(token), json={"name": "Nope"})
    assert other.status_code == 403


def test_max_capacity_cannot_drop_below_usage(client, db_session):
    ctx = setup_two_stores(db_session)
    token = login(client, "partner-1")
    add_inventory(client, token, ctx["store_a"].id, ctx["product"].id, 40)

    response = client.put(f"/api/stores/{ctx['store_a'].id}", headers=auth(token), json={"maxCapacity": 39})
    assert response.status_code == 409
    assert response.json()["code"] == "CAPACITY_BELOW_USAGE"

    response = client.put(f"/api/stores/{ctx['store_a'].id}", headers=auth(token), json={"maxCapacity": 40})
    assert response.status_code == 200
    assert response.json()["store"]["maxCapacity"] == 40
    assert response.json()["store"]["availableCapacity"] == 0


def test_current_capacity_is_read_only(client, db_session):
    ctx = setup_two_stores(db_session)
    token = login(client, "partner-1")

    response = client.put(f"/api/stores/{ctx['store_a'].id}", headers=auth(token), json={"currentCapacity": 5})
    assert response.status_code == 400


def test_delete_store_in_use_is_refused(client, db_session):
    ctx = setup_two_stores(db_session)
    token = login(client, "partner-1")

    response = client.delete(f"/api/stores/{ctx['store_a'].id}", headers=auth(token))
    assert response.status_code == 409
    assert response.json()["code"] == "STORE_IN_USE"
    assert response.json()["details"]["assigned_users"] == 2


def test_delete_empty_store_is_soft(client, db_session):
    create_user(db_session, username="partner-1", role="partner")
    store = create_store(db_session, name="Pop-up")
    token = login(client, "partner-1")

    response = client.delete(f"/api/stores/{store.id}", headers=auth(token))
    assert response.status_code == 200
    assert response.json()["store"]["isActive"] is False

    listing = client.get("/api/stores", headers=auth(token)).json()
    assert str(store.id) not in {item["id"] for item in listing["stores"]}

    with_inactive = client.get("/api/stores", headers=auth(token), params={"includeInactive": "true"}).json()
    assert str(store.id) in {item["id"] for item in with_inactive["stores"]}


def test_employee_sees_only_assigned_store_detail(client, db_session):
    ctx = setup_two_stores(db_session)
    token = login(client, "employee-a")

    assert client.get(f"/api/stores/{ctx['store_a'].id}", headers=auth(token)).status_code == 200
    assert client.get(f"/api/stores/{ctx['store_b'].id}", headers=auth(token)).status_code == 403
    assert client.get("/api/stores", headers=auth(token)).json()["count"] == 2


def test_recalculate_repairs_drift(client, db_session):
    ctx = setup_two_stores(db_session)
    token = login(client, "partner-1")
    add_inventory(client, token, ctx["store_a"].id, ctx["product"].id, 12)

    store = ctx["store_a"]
    db_session.refresh(store)
    store.current_capacity = 999
    db_session.commit()

    response = client.post(f"/api/stores/{store.id}/capacity/recalculate", headers=auth(token))
    assert response.status_code == 200
    assert response.json()["store"]["currentCapacity"] == 12


def test_unknown_store_is_not_found(client, db_session):
    create_user(db_session, username="partner-1", role="partner")
    token = login(client, "partner-1")

    response = client.get("/api/stores/00000000-0000-0000-0000-000000000000", headers=auth(token))
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"
