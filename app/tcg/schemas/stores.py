from datetime import datetime

from pydantic import Field, field_validator

from app.tcg.core.enums import US_STATES
from app.tcg.schemas.common import ApiModel, StrictApiModel


class StoreLocation(ApiModel):
    address: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(pattern=r"^[A-Z]{2}$")
    zip_code: str = Field(pattern=r"^\d{5}(-\d{4})?$")

    @field_validator("state")
    @classmethod
    def known_state(cls, value: str) -> str:
        if value not in US_STATES:
            raise ValueError(f"Unknown state code: {value}")
        return value


class StoreCreateRequest(StrictApiModel):
    name: str = Field(min_length=1, max_length=100)
    location: StoreLocation
    max_capacity: int = Field(gt=0)


class StoreUpdateRequest(StrictApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    location: StoreLocation | None = None
    max_capacity: int | None = Field(default=None, gt=0)


class StoreResponse(ApiModel):
    id: str
    name: str
    location: StoreLocation
    max_capacity: int
    current_capacity: int
    available_capacity: int
    utilization_percent: float
    is_active: bool
    created_at: datetime
    updated_at: datetime | None = None


class StoreEnvelope(ApiModel):
    success: bool = True
    message: str | None = None
    store: StoreResponse


class StoreListResponse(ApiModel):
    success: bool = True
    count: int
    stores: list[StoreResponse]
