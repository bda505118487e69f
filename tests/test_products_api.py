from tests.tcg_helpers import auth, create_product, create_user, login, setup_two_stores


def _booster_body(**overrides):
    body = {
        "sku": "ob-bst-001",
        "productType": "boosterPack",
        "name": "Obsidian Booster",
        "brand": "Wizards",
        "unitSize": 1,
        "basePrice": "4.99",
    }
    body.update(overrides)
    return body


def _card_body(**overrides):
    body = {
        "sku": "CARD-001",
        "productType": "singleCard",
        "name": "Serra Angel",
        "unitSize": 0,
        "basePrice": "12.50",
        "cardDetails": {"set": "Alpha", "cardNumber": "42", "rarity": "uncommon", "condition": "mint"},
    }
    body.update(overrides)
    return body


def test_partner_creates_product_with_uppercased_sku(client, db_session):
    create_user(db_session, username="partner-1", role="partner")
    token = login(client, "partner-1")

    response = client.post("/api/products", headers=auth(token), json=_booster_body())
    assert response.status_code == 201
    product = response.json()["product"]
    assert product["sku"] == "OB-BST-001"
    assert product["unitSize"] == 1
    assert product["basePrice"] == "4.99"

    duplicate = client.post("/api/products", headers=auth(token), json=_booster_body(sku="OB-BST-001"))
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "DUPLICATE_SKU"


def test_single_card_rules(client, db_session):
    create_user(db_session, username="partner-1", role="partner")
    token = login(client, "partner-1")

    created = client.post("/api/products", headers=auth(token), json=_card_body())
    assert created.status_code == 201
    details = created.json()["product"]["cardDetails"]
    assert details["cardNumber"] == "42"
    assert details["finish"] == "non-foil"

    sized_card = client.post("/api/products", headers=auth(token), json=_card_body(sku="CARD-002", unitSize=1))
    assert sized_card.status_code == 400

    missing_details = _card_body(sku="CARD-003")
    missing_details.pop("cardDetails")
    assert client.post("/api/products", headers=auth(token), json=missing_details).status_code == 400

    zero_booster = client.post("/api/products", headers=auth(token), json=_booster_body(sku="B-0", unitSize=0))
    assert zero_booster.status_code == 400


def test_update_keeps_identity_fields_immutable(client, db_session):
    create_user(db_session, username="partner-1", role="partner")
    product = create_product(db_session, sku="SLEEVE-01", product_type="sleeves")
    token = login(client, "partner-1")

    response = client.put(
        f"/api/products/{product.id}",
        headers=auth(token),
        json={"name": "Matte Sleeves", "basePrice": "9.00"},
    )
    assert response.status_code == 200
    assert response.json()["product"]["name"] == "Matte Sleeves"
    assert response.json()["product"]["basePrice"] == "9.00"

    for field, value in (("sku", "NEW"), ("unitSize", 5), ("productType", "dice")):
        rejected = client.put(f"/api/products/{product.id}", headers=auth(token), json={field: value})
        assert rejected.status_code == 400


def test_card_details_not_allowed_on_other_types(client, db_session):
    create_user(db_session, username="partner-1", role="partner")
    product = create_product(db_session, sku="BINDER-01", product_type="binder")
    token = login(client, "partner-1")

    response = client.put(
        f"/api/products/{product.id}",
        headers=auth(token),
        json={"cardDetails": {"set": "Alpha", "cardNumber": "1", "rarity": "rare"}},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_list_filters_and_brands(client, db_session):
    create_user(db_session, username="partner-1", role="partner")
    create_product(db_session, sku="A-1", name="Alpha Deck", product_type="deck", brand="Wizards")
    create_product(db_session, sku="B-1", name="Beta Dice", product_type="dice", brand="Chessex")
    hidden = create_product(db_session, sku="C-1", name="Gamma Box", product_type="deckBox", brand="Ultra Pro")
    token = login(client, "partner-1")
    assert client.delete(f"/api/products/{hidden.id}", headers=auth(token)).status_code == 200

    everything = client.get("/api/products", headers=auth(token)).json()
    assert [item["sku"] for item in everything["products"]] == ["A-1", "B-1"]

    dice = client.get("/api/products", headers=auth(token), params={"productType": "dice"}).json()
    assert [item["sku"] for item in dice["products"]] == ["B-1"]

    search = client.get("/api/products", headers=auth(token), params={"search": "alpha"}).json()
    assert [item["sku"] for item in search["products"]] == ["A-1"]

    with_inactive = client.get("/api/products", headers=auth(token), params={"includeInactive": "true"}).json()
    assert with_inactive["count"] == 3

    brands = client.get("/api/products/brands", headers=auth(token)).json()
    assert brands["brands"] == ["Chessex", "Wizards"]


def test_products_are_partner_only(client, db_session):
    setup_two_stores(db_session)
    token = login(client, "manager-a")

    assert client.get("/api/products", headers=auth(token)).status_code == 403
    assert client.post("/api/products", headers=auth(token), json=_booster_body()).status_code == 403
