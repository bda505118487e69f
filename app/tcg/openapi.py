from copy import deepcopy

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi


ERROR_REF = "#/components/schemas/ApiErrorResponse"

TAG_METADATA = [
    {"name": "Auth", "description": "Login, session lookup and logout."},
    {"name": "Stores", "description": "Store CRUD and capacity maintenance."},
    {"name": "Products", "description": "Product catalog administration. Partner only for writes."},
    {"name": "Inventory", "description": "Per-store inventory records. Creating an existing product/location merges quantities."},
    {
        "name": "Transfer Requests",
        "description": (
            "Inter-store transfer workflow: open -> requested -> sent -> complete, or closed from any non-terminal state. "
            "Stock leaves the source store at `sent` and lands in the destination at `complete`."
        ),
    },
    {"name": "Ops", "description": "Health, readiness and metrics."},
]

ERROR_RESPONSE_SCHEMAS = {
    "ApiErrorResponse": {
        "type": "object",
        "required": ["success", "code", "message"],
        "properties": {
            "success": {"type": "boolean", "example": False},
            "code": {"type": "string", "example": "INVALID_TRANSITION"},
            "message": {"type": "string"},
            "details": {"type": "object", "nullable": True, "additionalProperties": True},
            "trace_id": {"type": "string", "nullable": True},
        },
    },
}

_ERROR_DESCRIPTIONS = {
    "400": "Validation error",
    "401": "Authentication required",
    "403": "Permission denied",
    "404": "Resource not found",
    "409": "Conflict",
}


def _operation_id(method: str, path: str) -> str:
    normalized = path.strip("/").replace("/", "_").replace("-", "_").replace("{", "").replace("}", "")
    return f"{method}_{normalized}"


def _assign_tag(path: str) -> str | None:
    if path.startswith("/api/auth"):
        return "Auth"
    if path.startswith("/api/transfer-requests"):
        return "Transfer Requests"
    if path.startswith("/api/inventory") or "/inventory" in path:
        return "Inventory"
    if path.startswith("/api/stores"):
        return "Stores"
    if path.startswith("/api/products"):
        return "Products"
    if path in {"/health", "/ready"} or path.startswith("/ops"):
        return "Ops"
    return None


def _apply_error_responses(path: str, method: str, operation: dict) -> None:
    if not path.startswith("/api"):
        return
    responses = operation.setdefault("responses", {})
    responses.pop("422", None)
    codes = ["400"]
    if path != "/api/auth/login":
        codes.extend(["401", "403"])
    if "{" in path:
        codes.append("404")
    if method in {"post", "put", "patch", "delete"}:
        codes.append("409")
    for code in codes:
        responses.setdefault(
            code,
            {
                "description": _ERROR_DESCRIPTIONS[code],
                "content": {"application/json": {"schema": {"$ref": ERROR_REF}}},
            },
        )


def harden_openapi_schema(app: FastAPI):
    if app.openapi_schema:
        return app.openapi_schema

    schema = get_openapi(title=app.title, version="1.0.0", routes=app.routes)
    schema["tags"] = TAG_METADATA
    schema.setdefault("components", {}).setdefault("schemas", {}).update(deepcopy(ERROR_RESPONSE_SCHEMAS))

    for path, path_item in schema.get("paths", {}).items():
        for method, operation in path_item.items():
            if method not in {"get", "post", "put", "patch", "delete"}:
                continue
            tag = _assign_tag(path)
            if tag:
                operation["tags"] = [tag]
            operation["operationId"] = _operation_id(method, path)
            _apply_error_responses(path, method, operation)

    app.openapi_schema = schema
    return app.openapi_schema
