from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "code": "CAPACITY_EXCEEDED",
                "message": "Insufficient capacity at Downtown. Required: 40, available: 12",
                "details": {"store_id": "8f0c...", "required": 40, "available": 12},
                "trace_id": "trace-123",
            }
        }
    }

    success: bool = False
    code: str
    message: str
    details: Any | None = None
    trace_id: str
