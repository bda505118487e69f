from tests.tcg_helpers import add_inventory, auth, login, setup_two_stores


def _payload(ctx, record, quantity=2):
    return {
        "fromStoreId": str(ctx["store_a"].id),
        "toStoreId": str(ctx["store_b"].id),
        "items": [{"inventoryId": record["id"], "requestedQuantity": quantity}],
    }


def test_create_replays_with_same_key(client, db_session):
    ctx = setup_two_stores(db_session)
    token = login(client, "partner-1")
    record = add_inventory(client, token, ctx["store_a"].id, ctx["product"].id, 10)["inventory"]
    headers = auth(token, **{"Idempotency-Key": "create-1"})

    first = client.post("/api/transfer-requests", headers=headers, json=_payload(ctx, record))
    second = client.post("/api/transfer-requests", headers=headers, json=_payload(ctx, record))

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.headers["X-Idempotency-Result"] == "IDEMPOTENCY_REPLAY"
    assert second.json()["transferRequest"]["id"] == first.json()["transferRequest"]["id"]
    assert client.get("/api/transfer-requests", headers=auth(token)).json()["count"] == 1


def test_key_reused_with_different_payload(client, db_session):
    ctx = setup_two_stores(db_session)
    token = login(client, "partner-1")
    record = add_inventory(client, token, ctx["store_a"].id, ctx["product"].id, 10)["inventory"]
    headers = auth(token, **{"Idempotency-Key": "create-2"})

    assert client.post("/api/transfer-requests", headers=headers, json=_payload(ctx, record, 2)).status_code == 201
    response = client.post("/api/transfer-requests", headers=headers, json=_payload(ctx, record, 3))
    assert response.status_code == 409
    assert response.json()["code"] == "IDEMPOTENCY_KEY_REUSED_WITH_DIFFERENT_PAYLOAD"


def test_status_retry_with_key_does_not_double_deduct(client, db_session):
    ctx = setup_two_stores(db_session)
    token = login(client, "partner-1")
    record = add_inventory(client, token, ctx["store_a"].id, ctx["product"].id, 10)["inventory"]
    transfer_id = client.post("/api/transfer-requests", headers=auth(token), json=_payload(ctx, record, 4)).json()[
        "transferRequest"
    ]["id"]
    client.patch(f"/api/transfer-requests/{transfer_id}/status", headers=auth(token), json={"status": "requested"})

    headers = auth(token, **{"Idempotency-Key": "send-1"})
    first = client.patch(f"/api/transfer-requests/{transfer_id}/status", headers=headers, json={"status": "sent"})
    retry = client.patch(f"/api/transfer-requests/{transfer_id}/status", headers=headers, json={"status": "sent"})

    assert first.status_code == 200
    assert retry.status_code == 200
    assert retry.headers["X-Idempotency-Result"] == "IDEMPOTENCY_REPLAY"
    assert retry.json() == first.json()

    inventory = client.get(f"/api/stores/{ctx['store_a'].id}/inventory", headers=auth(token)).json()["inventory"]
    assert inventory[0]["quantity"] == 6


def test_failed_transition_is_replayed_as_failure(client, db_session):
    ctx = setup_two_stores(db_session)
    token = login(client, "partner-1")
    record = add_inventory(client, token, ctx["store_a"].id, ctx["product"].id, 10)["inventory"]
    transfer_id = client.post("/api/transfer-requests", headers=auth(token), json=_payload(ctx, record)).json()[
        "transferRequest"
    ]["id"]

    headers = auth(token, **{"Idempotency-Key": "skip-1"})
    first = client.patch(f"/api/transfer-requests/{transfer_id}/status", headers=headers, json={"status": "complete"})
    retry = client.patch(f"/api/transfer-requests/{transfer_id}/status", headers=headers, json={"status": "complete"})

    assert first.status_code == 409
    assert first.json()["code"] == "INVALID_TRANSITION"
    assert retry.status_code == 409
    assert retry.json()["code"] == "INVALID_TRANSITION"
    assert retry.headers["X-Idempotency-Result"] == "IDEMPOTENCY_REPLAY"
