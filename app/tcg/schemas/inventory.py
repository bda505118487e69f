from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, model_validator

from app.tcg.schemas.common import ApiModel, StrictApiModel
from app.tcg.schemas.products import CardCondition, ProductSummary

Location = Literal["floor", "back"]
InventoryKind = Literal["product", "container"]
ContainerType = Literal["display-case", "bulk-box", "bulk-bin"]


class CardItem(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    set: str | None = Field(default=None, max_length=100)
    condition: CardCondition | None = None
    quantity: int = Field(default=1, ge=1)


class InventoryCreateRequest(StrictApiModel):
    kind: InventoryKind = "product"
    product_id: UUID | None = None
    quantity: int = Field(default=0, ge=0)
    location: Location = "floor"
    min_stock_level: int | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=500)
    container_type: ContainerType | None = None
    container_name: str | None = Field(default=None, min_length=1, max_length=200)
    container_unit_size: int | None = Field(default=None, gt=0)
    card_items: list[CardItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_kind_fields(self):
        if self.kind == "product":
            if self.product_id is None:
                raise ValueError("productId is required for product inventory")
            if self.container_type or self.container_name or self.container_unit_size or self.card_items:
                raise ValueError("Container fields are only allowed for container inventory")
        else:
            if self.product_id is not None:
                raise ValueError("Container inventory cannot reference a product")
            if not (self.container_type and self.container_name and self.container_unit_size):
                raise ValueError("containerType, containerName and containerUnitSize are required for containers")
        return self


class InventoryUpdateRequest(StrictApiModel):
    quantity: int | None = Field(default=None, ge=0)
    location: Location | None = None
    min_stock_level: int | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=500)
    container_name: str | None = Field(default=None, min_length=1, max_length=200)
    container_unit_size: int | None = Field(default=None, gt=0)
    card_items: list[CardItem] | None = None


class InventoryRecordResponse(ApiModel):
    id: str
    store_id: str
    kind: str
    product: ProductSummary | None = None
    quantity: int
    location: str
    min_stock_level: int
    notes: str | None = None
    container_type: str | None = None
    container_name: str | None = None
    container_unit_size: int | None = None
    card_items: list[CardItem] | None = None
    capacity_units: int
    is_active: bool
    last_restocked_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None


class InventoryEnvelope(ApiModel):
    success: bool = True
    message: str | None = None
    merged: bool = False
    inventory: InventoryRecordResponse


class InventoryListResponse(ApiModel):
    success: bool = True
    count: int
    inventory: list[InventoryRecordResponse]


class DuplicateCheckResponse(ApiModel):
    success: bool = True
    verdict: Literal["exact_match", "different_location", "none"]
    exact_match: InventoryRecordResponse | None = None
    different_location: list[InventoryRecordResponse] = Field(default_factory=list)
