from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from app.tcg.schemas.common import ApiModel, StrictApiModel

TransferStatus = Literal["open", "requested", "sent", "complete", "closed"]


class TransferItemCreate(StrictApiModel):
    inventory_id: UUID
    requested_quantity: int = Field(gt=0)


class TransferRequestCreate(StrictApiModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "fromStoreId": "5d1c9a9e-3f0b-4d55-9a0c-1a2b3c4d5e6f",
                "toStoreId": "7e2d0b0f-4a1c-4e66-8b1d-2b3c4d5e6f70",
                "items": [{"inventoryId": "0b6f...", "requestedQuantity": 20}],
                "notes": "Restock for the weekend prerelease",
            }
        }
    }

    from_store_id: UUID
    to_store_id: UUID
    items: list[TransferItemCreate] = Field(min_length=1)
    notes: str | None = Field(default=None, max_length=1000)


class TransferStatusUpdate(StrictApiModel):
    status: TransferStatus
    close_reason: str | None = Field(default=None, max_length=500)


class TransferItemResponse(ApiModel):
    inventory_id: str
    product_id: str
    product_name: str | None = None
    product_sku: str | None = None
    requested_quantity: int
    max_quantity: int
    location: str


class TransferRequestResponse(ApiModel):
    id: str
    request_number: str
    from_store_id: str
    from_store_name: str | None = None
    to_store_id: str
    to_store_name: str | None = None
    status: TransferStatus
    items: list[TransferItemResponse]
    notes: str | None = None
    close_reason: str | None = None
    available_transitions: list[TransferStatus]
    created_by: str
    created_at: datetime
    requested_by: str | None = None
    requested_at: datetime | None = None
    sent_by: str | None = None
    sent_at: datetime | None = None
    completed_by: str | None = None
    completed_at: datetime | None = None
    closed_by: str | None = None
    closed_at: datetime | None = None
    updated_at: datetime | None = None


class TransferRequestEnvelope(ApiModel):
    success: bool = True
    message: str | None = None
    transfer_request: TransferRequestResponse


class TransferRequestListResponse(ApiModel):
    success: bool = True
    count: int
    transfer_requests: list[TransferRequestResponse]
