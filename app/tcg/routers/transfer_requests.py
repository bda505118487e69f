from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.tcg.core.context import Principal
from app.tcg.core.deps import require_permission
from app.tcg.core.error_catalog import ErrorCatalog
from app.tcg.db.session import get_db
from app.tcg.routers.presenters import transfer_request_response
from app.tcg.schemas.errors import ErrorResponse
from app.tcg.schemas.transfer_requests import (
    TransferRequestCreate,
    TransferRequestEnvelope,
    TransferRequestListResponse,
    TransferStatus,
    TransferStatusUpdate,
)
from app.tcg.services.idempotency import (
    IDEMPOTENCY_RESULT_HEADER,
    IdempotencyService,
    extract_idempotency_key,
)
from app.tcg.services.transfer_requests import TransferItemInput, TransferRequestService

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}

_STATUS_MESSAGES = {
    "requested": "Transfer request submitted",
    "sent": "Transfer request marked as sent",
    "complete": "Transfer request completed",
    "closed": "Transfer request closed",
}


def _start_idempotency(request: Request, db, principal: Principal, payload: dict) -> JSONResponse | None:
    idempotency_key = extract_idempotency_key(request.headers)
    if not idempotency_key:
        return None
    context, replay = IdempotencyService(db).start(
        user_id=principal.user_id,
        endpoint=str(request.url.path),
        method=request.method,
        idempotency_key=idempotency_key,
        request_hash=IdempotencyService.fingerprint(payload),
    )
    if replay:
        return JSONResponse(
            status_code=replay.status_code,
            content=replay.response_body,
            headers={IDEMPOTENCY_RESULT_HEADER: ErrorCatalog.IDEMPOTENCY_REPLAY.code},
        )
    request.state.idempotency = context
    return None


def _finish_idempotency(request: Request, status_code: int, response: TransferRequestEnvelope) -> None:
    context = getattr(request.state, "idempotency", None)
    if context is not None:
        context.record_success(status_code=status_code, response_body=response.model_dump(mode="json", by_alias=True))


@router.post("", response_model=TransferRequestEnvelope, status_code=201, responses=_ERRORS)
def create_transfer_request(
    request: Request,
    payload: TransferRequestCreate,
    principal=Depends(require_permission("TRANSFER_MANAGE")),
    db=Depends(get_db),
):
    replay = _start_idempotency(request, db, principal, payload.model_dump(mode="json"))
    if replay is not None:
        return replay
    transfer = TransferRequestService(db).create(
        principal,
        from_store_id=payload.from_store_id,
        to_store_id=payload.to_store_id,
        items=[
            TransferItemInput(inventory_id=str(item.inventory_id), requested_quantity=item.requested_quantity)
            for item in payload.items
        ],
        notes=payload.notes,
    )
    response = TransferRequestEnvelope(
        message="Transfer request created successfully",
        transfer_request=transfer_request_response(db, transfer, principal),
    )
    _finish_idempotency(request, 201, response)
    return response


@router.get("", response_model=TransferRequestListResponse, responses=_ERRORS)
def list_transfer_requests(
    status: TransferStatus | None = Query(default=None),
    store_id: UUID | None = Query(default=None, alias="storeId"),
    principal=Depends(require_permission("TRANSFER_VIEW")),
    db=Depends(get_db),
):
    transfers = TransferRequestService(db).list_requests(
        principal,
        status=status,
        store_id=str(store_id) if store_id else None,
    )
    return TransferRequestListResponse(
        count=len(transfers),
        transfer_requests=[transfer_request_response(db, transfer, principal) for transfer in transfers],
    )


@router.get("/{transfer_id}", response_model=TransferRequestEnvelope, responses=_ERRORS)
def get_transfer_request(
    transfer_id: UUID,
    principal=Depends(require_permission("TRANSFER_VIEW")),
    db=Depends(get_db),
):
    transfer = TransferRequestService(db).get(principal, transfer_id)
    return TransferRequestEnvelope(transfer_request=transfer_request_response(db, transfer, principal))


@router.patch("/{transfer_id}/status", response_model=TransferRequestEnvelope, responses=_ERRORS)
def update_transfer_request_status(
    request: Request,
    transfer_id: UUID,
    payload: TransferStatusUpdate,
    principal=Depends(require_permission("TRANSFER_MANAGE")),
    db=Depends(get_db),
):
    replay = _start_idempotency(request, db, principal, payload.model_dump(mode="json"))
    if replay is not None:
        return replay
    transfer = TransferRequestService(db).change_status(
        principal,
        transfer_id,
        payload.status,
        close_reason=payload.close_reason,
    )
    response = TransferRequestEnvelope(
        message=_STATUS_MESSAGES.get(payload.status),
        transfer_request=transfer_request_response(db, transfer, principal),
    )
    _finish_idempotency(request, 200, response)
    return response


@router.delete("/{transfer_id}", response_model=TransferRequestEnvelope, responses=_ERRORS)
def delete_transfer_request(
    transfer_id: UUID,
    principal=Depends(require_permission("TRANSFER_DELETE")),
    db=Depends(get_db),
):
    transfer = TransferRequestService(db).delete(principal, transfer_id)
    return TransferRequestEnvelope(
        message="Transfer request deleted successfully",
        transfer_request=transfer_request_response(db, transfer, principal),
    )
