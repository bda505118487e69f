from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import Field, model_validator

from app.tcg.core.enums import SINGLE_CARD
from app.tcg.schemas.common import ApiModel, StrictApiModel

ProductType = Literal[
    "singleCard",
    "boosterPack",
    "collectorBooster",
    "deck",
    "deckBox",
    "dice",
    "sleeves",
    "playmat",
    "binder",
    "other",
]
CardCondition = Literal["mint", "near-mint", "lightly-played", "moderately-played", "heavily-played", "damaged"]
CardFinish = Literal["non-foil", "foil", "etched", "holo", "reverse-holo"]


class CardDetails(ApiModel):
    set: str = Field(min_length=1, max_length=100)
    card_number: str = Field(min_length=1, max_length=20)
    rarity: str = Field(min_length=1, max_length=50)
    condition: CardCondition = "near-mint"
    finish: CardFinish = "non-foil"


class ProductCreateRequest(StrictApiModel):
    sku: str = Field(min_length=1, max_length=64)
    product_type: ProductType
    name: str = Field(min_length=1, max_length=200)
    brand: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    unit_size: int = Field(ge=0)
    base_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    bulk_quantity: int | None = Field(default=None, ge=1)
    card_details: CardDetails | None = None

    @model_validator(mode="after")
    def check_type_rules(self):
        if self.product_type == SINGLE_CARD:
            if self.unit_size != 0:
                raise ValueError("Single cards must have a unit size of 0")
            if self.card_details is None:
                raise ValueError("Card details are required for single cards")
        else:
            if self.unit_size <= 0:
                raise ValueError("Unit size must be greater than 0 for non single card products")
            if self.card_details is not None:
                raise ValueError("Card details are only allowed for single cards")
        return self


class ProductUpdateRequest(StrictApiModel):
    """``sku``, ``productType`` and ``unitSize`` are fixed once a product exists."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    brand: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    base_price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    bulk_quantity: int | None = Field(default=None, ge=1)
    card_details: CardDetails | None = None


class ProductSummary(ApiModel):
    id: str
    sku: str
    name: str
    product_type: str
    brand: str | None = None
    unit_size: int


class ProductResponse(ProductSummary):
    description: str | None = None
    base_price: Decimal
    bulk_quantity: int | None = None
    card_details: CardDetails | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime | None = None


class ProductStoreStock(ApiModel):
    store_id: str
    store_name: str
    floor: int
    back: int
    total: int


class ProductEnvelope(ApiModel):
    success: bool = True
    message: str | None = None
    product: ProductResponse
    stock: list[ProductStoreStock] | None = None


class ProductListResponse(ApiModel):
    success: bool = True
    count: int
    products: list[ProductResponse]


class BrandListResponse(ApiModel):
    success: bool = True
    brands: list[str]
