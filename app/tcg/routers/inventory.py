from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.tcg.core.deps import require_permission
from app.tcg.db.session import get_db, transaction
from app.tcg.repos.inventory import InventoryQueryFilters
from app.tcg.routers.presenters import inventory_response
from app.tcg.schemas.errors import ErrorResponse
from app.tcg.schemas.inventory import (
    DuplicateCheckResponse,
    InventoryCreateRequest,
    InventoryEnvelope,
    InventoryKind,
    InventoryListResponse,
    InventoryUpdateRequest,
    Location,
)
from app.tcg.schemas.products import ProductType
from app.tcg.services.authorization import can_access_store, can_manage_store_inventory, ensure_allowed
from app.tcg.services.inventory import InventoryService
from app.tcg.services.stores import StoreService

router = APIRouter()

_ERRORS = {403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


def _list_response(records) -> InventoryListResponse:
    return InventoryListResponse(count=len(records), inventory=[inventory_response(record) for record in records])


@router.get("/inventory", response_model=InventoryListResponse)
def list_all_inventory(
    store_id: UUID | None = Query(default=None, alias="storeId"),
    location: Location | None = Query(default=None),
    product_type: ProductType | None = Query(default=None, alias="productType"),
    kind: InventoryKind | None = Query(default=None),
    _principal=Depends(require_permission("INVENTORY_VIEW_ALL")),
    db=Depends(get_db),
):
    filters = InventoryQueryFilters(
        store_id=str(store_id) if store_id else None,
        location=location,
        product_type=product_type,
        kind=kind,
    )
    return _list_response(InventoryService(db).list_records(filters))


@router.get("/inventory/check-duplicate", response_model=DuplicateCheckResponse, responses=_ERRORS)
def check_duplicate(
    store_id: UUID = Query(alias="storeId"),
    product_id: UUID = Query(alias="productId"),
    location: Location = Query(default="floor"),
    principal=Depends(require_permission("INVENTORY_VIEW")),
    db=Depends(get_db),
):
    ensure_allowed(can_access_store(principal, store_id), "INVENTORY_VIEW")
    result = InventoryService(db).find_duplicate(store_id, product_id, location)
    return DuplicateCheckResponse(
        verdict=result.verdict,
        exact_match=inventory_response(result.exact_match) if result.exact_match else None,
        different_location=[inventory_response(record) for record in result.different_location],
    )


@router.get("/stores/{store_id}/inventory", response_model=InventoryListResponse, responses=_ERRORS)
def list_store_inventory(
    store_id: UUID,
    location: Location | None = Query(default=None),
    product_type: ProductType | None = Query(default=None, alias="productType"),
    kind: InventoryKind | None = Query(default=None),
    principal=Depends(require_permission("INVENTORY_VIEW")),
    db=Depends(get_db),
):
    ensure_allowed(can_access_store(principal, store_id), "INVENTORY_VIEW")
    StoreService(db).get(store_id, include_inactive=True)
    filters = InventoryQueryFilters(store_id=str(store_id), location=location, product_type=product_type, kind=kind)
    return _list_response(InventoryService(db).list_records(filters))


@router.get("/stores/{store_id}/inventory/low-stock", response_model=InventoryListResponse, responses=_ERRORS)
def list_low_stock(store_id: UUID, principal=Depends(require_permission("INVENTORY_VIEW")), db=Depends(get_db)):
    ensure_allowed(can_access_store(principal, store_id), "INVENTORY_VIEW")
    StoreService(db).get(store_id, include_inactive=True)
    return _list_response(InventoryService(db).list_low_stock(store_id))


@router.post("/stores/{store_id}/inventory", response_model=InventoryEnvelope, status_code=201, responses=_ERRORS)
def create_inventory(
    store_id: UUID,
    payload: InventoryCreateRequest,
    principal=Depends(require_permission("INVENTORY_MANAGE")),
    db=Depends(get_db),
):
    ensure_allowed(can_manage_store_inventory(principal, store_id), "INVENTORY_MANAGE")
    service = InventoryService(db)
    with transaction(db):
        store = StoreService(db).get(store_id)
        if payload.kind == "container":
            record = service.add_container(
                store.id,
                container_type=payload.container_type,
                container_name=payload.container_name,
                container_unit_size=payload.container_unit_size,
                card_items=[item.model_dump() for item in payload.card_items],
                location=payload.location,
                notes=payload.notes,
            )
            merged = False
        else:
            result = service.add_product_stock(
                store.id,
                payload.product_id,
                quantity=payload.quantity,
                location=payload.location,
                min_stock_level=payload.min_stock_level,
                notes=payload.notes,
            )
            record, merged = result.record, result.merged
    message = "Inventory merged with existing record" if merged else "Inventory created successfully"
    return InventoryEnvelope(message=message, merged=merged, inventory=inventory_response(service.get(record.id)))


@router.put("/stores/{store_id}/inventory/{inventory_id}", response_model=InventoryEnvelope, responses=_ERRORS)
def update_inventory(
    store_id: UUID,
    inventory_id: UUID,
    payload: InventoryUpdateRequest,
    principal=Depends(require_permission("INVENTORY_MANAGE")),
    db=Depends(get_db),
):
    ensure_allowed(can_manage_store_inventory(principal, store_id), "INVENTORY_MANAGE")
    service = InventoryService(db)
    with transaction(db):
        record = service.update(inventory_id, store_id=store_id, changes=payload.model_dump(exclude_unset=True))
    return InventoryEnvelope(message="Inventory updated successfully", inventory=inventory_response(service.get(record.id)))


@router.delete("/stores/{store_id}/inventory/{inventory_id}", response_model=InventoryEnvelope, responses=_ERRORS)
def delete_inventory(
    store_id: UUID,
    inventory_id: UUID,
    principal=Depends(require_permission("INVENTORY_MANAGE")),
    db=Depends(get_db),
):
    ensure_allowed(can_manage_store_inventory(principal, store_id), "INVENTORY_MANAGE")
    with transaction(db):
        record = InventoryService(db).remove(inventory_id, store_id=store_id)
    return InventoryEnvelope(message="Inventory deleted successfully", inventory=inventory_response(record))
