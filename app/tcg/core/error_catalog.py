from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    INVALID_TOKEN = ErrorDefinition("INVALID_TOKEN", "Invalid token", status.HTTP_401_UNAUTHORIZED)
    INVALID_CREDENTIALS = ErrorDefinition(
        "INVALID_CREDENTIALS",
        "Invalid credentials",
        status.HTTP_401_UNAUTHORIZED,
    )
    USER_INACTIVE = ErrorDefinition(
        "USER_INACTIVE",
        "User is inactive",
        status.HTTP_403_FORBIDDEN,
    )
    PERMISSION_DENIED = ErrorDefinition(
        "PERMISSION_DENIED",
        "Permission denied",
        status.HTTP_403_FORBIDDEN,
    )
    NOT_FOUND = ErrorDefinition(
        "NOT_FOUND",
        "Resource not found",
        status.HTTP_404_NOT_FOUND,
    )
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_400_BAD_REQUEST,
    )
    INVALID_TRANSITION = ErrorDefinition(
        "INVALID_TRANSITION",
        "Status transition is not allowed from the current status",
        status.HTTP_409_CONFLICT,
    )
    INSUFFICIENT_INVENTORY = ErrorDefinition(
        "INSUFFICIENT_INVENTORY",
        "Insufficient inventory quantity",
        status.HTTP_409_CONFLICT,
    )
    CAPACITY_EXCEEDED = ErrorDefinition(
        "CAPACITY_EXCEEDED",
        "Store capacity exceeded",
        status.HTTP_409_CONFLICT,
    )
    CAPACITY_BELOW_USAGE = ErrorDefinition(
        "CAPACITY_BELOW_USAGE",
        "Maximum capacity cannot be lower than current usage",
        status.HTTP_409_CONFLICT,
    )
    DUPLICATE_SKU = ErrorDefinition(
        "DUPLICATE_SKU",
        "A product with this SKU already exists",
        status.HTTP_409_CONFLICT,
    )
    DUPLICATE_INVENTORY = ErrorDefinition(
        "DUPLICATE_INVENTORY",
        "An active inventory record already exists for this product and location",
        status.HTTP_409_CONFLICT,
    )
    STORE_IN_USE = ErrorDefinition(
        "STORE_IN_USE",
        "Store still has assigned users or active inventory",
        status.HTTP_409_CONFLICT,
    )
    TRANSFER_NOT_DELETABLE = ErrorDefinition(
        "TRANSFER_NOT_DELETABLE",
        "Only open or closed transfer requests can be deleted",
        status.HTTP_409_CONFLICT,
    )
    CONCURRENT_MODIFICATION = ErrorDefinition(
        "CONCURRENT_MODIFICATION",
        "Resource was modified concurrently, retry the request",
        status.HTTP_409_CONFLICT,
    )
    DB_UNAVAILABLE = ErrorDefinition(
        "DB_UNAVAILABLE",
        "Database unavailable",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    LOCK_TIMEOUT = ErrorDefinition(
        "LOCK_TIMEOUT",
        "Lock wait timeout",
        status.HTTP_409_CONFLICT,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    IDEMPOTENCY_KEY_REUSED_WITH_DIFFERENT_PAYLOAD = ErrorDefinition(
        "IDEMPOTENCY_KEY_REUSED_WITH_DIFFERENT_PAYLOAD",
        "Idempotency key reused with different payload",
        status.HTTP_409_CONFLICT,
    )
    IDEMPOTENCY_REQUEST_IN_PROGRESS = ErrorDefinition(
        "IDEMPOTENCY_REQUEST_IN_PROGRESS",
        "Idempotency request already in progress",
        status.HTTP_409_CONFLICT,
    )
    IDEMPOTENCY_REPLAY = ErrorDefinition(
        "IDEMPOTENCY_REPLAY",
        "Idempotent replay",
        status.HTTP_200_OK,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)


def not_found(resource: str, resource_id: object) -> AppError:
    return AppError(ErrorCatalog.NOT_FOUND, details={"resource": resource, "id": str(resource_id)})


def validation_error(message: str, **details) -> AppError:
    return AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": message, **details})
