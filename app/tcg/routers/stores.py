from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.tcg.core.deps import require_permission
from app.tcg.db.session import get_db
from app.tcg.routers.presenters import store_response
from app.tcg.schemas.errors import ErrorResponse
from app.tcg.schemas.stores import StoreCreateRequest, StoreEnvelope, StoreListResponse, StoreUpdateRequest
from app.tcg.services.authorization import can_access_store, ensure_allowed
from app.tcg.services.stores import StoreService

router = APIRouter()

_ERRORS = {403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@router.get("", response_model=StoreListResponse)
def list_stores(
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    principal=Depends(require_permission("STORE_VIEW")),
    db=Depends(get_db),
):
    stores = StoreService(db).list_stores(include_inactive=include_inactive and principal.is_partner)
    return StoreListResponse(count=len(stores), stores=[store_response(store) for store in stores])


@router.get("/{store_id}", response_model=StoreEnvelope, responses=_ERRORS)
def get_store(store_id: UUID, principal=Depends(require_permission("STORE_VIEW")), db=Depends(get_db)):
    ensure_allowed(can_access_store(principal, store_id), "STORE_VIEW")
    store = StoreService(db).get(store_id, include_inactive=principal.is_partner)
    return StoreEnvelope(store=store_response(store))


@router.post("", response_model=StoreEnvelope, status_code=201, responses=_ERRORS)
def create_store(
    payload: StoreCreateRequest,
    _principal=Depends(require_permission("STORE_MANAGE")),
    db=Depends(get_db),
):
    store = StoreService(db).create(
        name=payload.name,
        address=payload.location.address,
        city=payload.location.city,
        state=payload.location.state,
        zip_code=payload.location.zip_code,
        max_capacity=payload.max_capacity,
    )
    return StoreEnvelope(message="Store created successfully", store=store_response(store))


@router.put("/{store_id}", response_model=StoreEnvelope, responses={**_ERRORS, 409: {"model": ErrorResponse}})
def update_store(
    store_id: UUID,
    payload: StoreUpdateRequest,
    principal=Depends(require_permission("STORE_UPDATE")),
    db=Depends(get_db),
):
    ensure_allowed(can_access_store(principal, store_id), "STORE_UPDATE")
    changes = {}
    if payload.name is not None:
        changes["name"] = payload.name
    if payload.location is not None:
        changes.update(payload.location.model_dump())
    if payload.max_capacity is not None:
        changes["max_capacity"] = payload.max_capacity
    store = StoreService(db).update(store_id, changes)
    return StoreEnvelope(message="Store updated successfully", store=store_response(store))


@router.delete("/{store_id}", response_model=StoreEnvelope, responses={**_ERRORS, 409: {"model": ErrorResponse}})
def delete_store(store_id: UUID, _principal=Depends(require_permission("STORE_MANAGE")), db=Depends(get_db)):
    store = StoreService(db).delete(store_id)
    return StoreEnvelope(message="Store deleted successfully", store=store_response(store))


@router.post("/{store_id}/capacity/recalculate", response_model=StoreEnvelope, responses=_ERRORS)
def recalculate_capacity(
    store_id: UUID,
    _principal=Depends(require_permission("STORE_MANAGE")),
    db=Depends(get_db),
):
    store = StoreService(db).recalculate_capacity(store_id)
    return StoreEnvelope(message="Store capacity recalculated", store=store_response(store))
