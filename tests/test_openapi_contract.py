def test_openapi_tags_and_error_schema(client):
    schema = client.get("/openapi.json").json()

    assert schema["info"]["title"] == "TCG-INVENTORY"
    assert "ApiErrorResponse" in schema["components"]["schemas"]

    status_patch = schema["paths"]["/api/transfer-requests/{transfer_id}/status"]["patch"]
    assert status_patch["tags"] == ["Transfer Requests"]
    assert status_patch["operationId"] == "patch_api_transfer_requests_transfer_id_status"
    assert "409" in status_patch["responses"]
    assert "422" not in status_patch["responses"]

    inventory_post = schema["paths"]["/api/stores/{store_id}/inventory"]["post"]
    assert inventory_post["tags"] == ["Inventory"]

    login = schema["paths"]["/api/auth/login"]["post"]
    assert login["tags"] == ["Auth"]
    assert "400" in login["responses"]


def test_wire_models_use_camel_case(client):
    schema = client.get("/openapi.json").json()
    create = schema["components"]["schemas"]["TransferRequestCreate"]

    assert set(create["required"]) == {"fromStoreId", "toStoreId", "items"}
