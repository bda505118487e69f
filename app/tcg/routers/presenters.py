"""ORM row to response model conversions shared by the routers."""

from app.tcg.core.context import Principal
from app.tcg.db.models import InventoryRecord, Product, Store, TransferRequest
from app.tcg.repos.products import ProductRepository
from app.tcg.repos.stores import StoreRepository
from app.tcg.schemas.inventory import CardItem, InventoryRecordResponse
from app.tcg.schemas.products import CardDetails, ProductResponse, ProductSummary
from app.tcg.schemas.stores import StoreLocation, StoreResponse
from app.tcg.schemas.transfer_requests import TransferItemResponse, TransferRequestResponse
from app.tcg.services.authorization import available_transitions
from app.tcg.services.inventory import capacity_units


def _id(value) -> str | None:
    return str(value) if value is not None else None


def store_response(store: Store) -> StoreResponse:
    utilization = round(store.current_capacity / store.max_capacity * 100, 2) if store.max_capacity else 0.0
    return StoreResponse(
        id=str(store.id),
        name=store.name,
        location=StoreLocation(
            address=store.address,
            city=store.city,
            state=store.state,
            zip_code=store.zip_code,
        ),
        max_capacity=store.max_capacity,
        current_capacity=store.current_capacity,
        available_capacity=max(store.max_capacity - store.current_capacity, 0),
        utilization_percent=utilization,
        is_active=store.is_active,
        created_at=store.created_at,
        updated_at=store.updated_at,
    )


def product_summary(product: Product) -> ProductSummary:
    return ProductSummary(
        id=str(product.id),
        sku=product.sku,
        name=product.name,
        product_type=product.product_type,
        brand=product.brand,
        unit_size=product.unit_size,
    )


def product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        **product_summary(product).model_dump(),
        description=product.description,
        base_price=product.base_price,
        bulk_quantity=product.bulk_quantity,
        card_details=CardDetails(**product.card_details) if product.card_details else None,
        is_active=product.is_active,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def inventory_response(record: InventoryRecord) -> InventoryRecordResponse:
    return InventoryRecordResponse(
        id=str(record.id),
        store_id=str(record.store_id),
        kind=record.kind,
        product=product_summary(record.product) if record.product is not None else None,
        quantity=record.quantity,
        location=record.location,
        min_stock_level=record.min_stock_level,
        notes=record.notes,
        container_type=record.container_type,
        container_name=record.container_name,
        container_unit_size=record.container_unit_size,
        card_items=[CardItem(**item) for item in record.card_items] if record.card_items else None,
        capacity_units=capacity_units(record),
        is_active=record.is_active,
        last_restocked_at=record.last_restocked_at,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def transfer_request_response(db, transfer: TransferRequest, principal: Principal) -> TransferRequestResponse:
    stores = StoreRepository(db)
    products = ProductRepository(db)
    from_store = stores.get_by_id(transfer.from_store_id)
    to_store = stores.get_by_id(transfer.to_store_id)
    items = []
    for item in transfer.items:
        product = products.get_by_id(item.product_id)
        items.append(
            TransferItemResponse(
                inventory_id=str(item.inventory_id),
                product_id=str(item.product_id),
                product_name=product.name if product else None,
                product_sku=product.sku if product else None,
                requested_quantity=item.requested_quantity,
                max_quantity=item.max_quantity,
                location=item.location,
            )
        )
    return TransferRequestResponse(
        id=str(transfer.id),
        request_number=transfer.request_number,
        from_store_id=str(transfer.from_store_id),
        from_store_name=from_store.name if from_store else None,
        to_store_id=str(transfer.to_store_id),
        to_store_name=to_store.name if to_store else None,
        status=transfer.status,
        items=items,
        notes=transfer.notes,
        close_reason=transfer.close_reason,
        available_transitions=available_transitions(principal, transfer),
        created_by=str(transfer.created_by_user_id),
        created_at=transfer.created_at,
        requested_by=_id(transfer.requested_by_user_id),
        requested_at=transfer.requested_at,
        sent_by=_id(transfer.sent_by_user_id),
        sent_at=transfer.sent_at,
        completed_by=_id(transfer.completed_by_user_id),
        completed_at=transfer.completed_at,
        closed_by=_id(transfer.closed_by_user_id),
        closed_at=transfer.closed_at,
        updated_at=transfer.updated_at,
    )
