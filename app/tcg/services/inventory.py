from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError

from app.tcg.core.config import settings
from app.tcg.core.enums import KIND_CONTAINER, KIND_PRODUCT, LOCATIONS
from app.tcg.core.error_catalog import AppError, ErrorCatalog, not_found, validation_error
from app.tcg.db.models import InventoryRecord, utc_now
from app.tcg.repos.inventory import InventoryQueryFilters, InventoryRepository
from app.tcg.repos.products import ProductRepository
from app.tcg.services.capacity import CapacityLedger


@dataclass(frozen=True)
class DuplicateCheck:
    exact_match: InventoryRecord | None = None
    different_location: list[InventoryRecord] = field(default_factory=list)

    @property
    def verdict(self) -> str:
        if self.exact_match is not None:
            return "exact_match"
        if self.different_location:
            return "different_location"
        return "none"


@dataclass(frozen=True)
class UpsertResult:
    record: InventoryRecord
    merged: bool


def capacity_units(record: InventoryRecord) -> int:
    if record.kind == KIND_CONTAINER:
        return record.container_unit_size or 0
    unit_size = record.product.unit_size if record.product is not None else 0
    return record.quantity * unit_size


def insufficient_inventory(inventory_id, requested: int, available: int) -> AppError:
    return AppError(
        ErrorCatalog.INSUFFICIENT_INVENTORY,
        details={
            "message": f"Insufficient quantity. Requested: {requested}, available: {available}",
            "inventory_id": str(inventory_id) if inventory_id else None,
            "requested": requested,
            "available": available,
        },
    )


class InventoryService:
    """Quantity changes paired with capacity ledger updates.

    Methods flush but never commit.
    """

    def __init__(self, db):
        self.db = db
        self.repo = InventoryRepository(db)
        self.products = ProductRepository(db)
        self.ledger = CapacityLedger(db)

    def list_records(self, filters: InventoryQueryFilters) -> list[InventoryRecord]:
        return self.repo.list_records(filters)

    def list_low_stock(self, store_id) -> list[InventoryRecord]:
        return self.repo.list_low_stock(store_id, settings.DEFAULT_LOW_STOCK_THRESHOLD)

    def get(self, inventory_id, *, store_id=None) -> InventoryRecord:
        record = self.repo.get_by_id(inventory_id)
        if record is None or not record.is_active:
            raise not_found("inventory", inventory_id)
        if store_id is not None and str(record.store_id) != str(store_id):
            raise not_found("inventory", inventory_id)
        return record

    def find_duplicate(self, store_id, product_id, location: str) -> DuplicateCheck:
        return DuplicateCheck(
            exact_match=self.repo.find_active(store_id, product_id, location),
            different_location=list(self.repo.find_active_elsewhere(store_id, product_id, location)),
        )

    def upsert_quantity(
        self,
        store_id,
        product_id,
        location: str,
        delta_quantity: int,
        unit_size: int,
        *,
        min_stock_level: int | None = None,
        notes: str | None = None,
    ) -> UpsertResult:
        if location not in LOCATIONS:
            raise validation_error(f"Invalid location: {location}")
        now = utc_now()
        existing = self.repo.find_active(store_id, product_id, location, for_update=True)
        if existing is None:
            if delta_quantity < 0:
                raise insufficient_inventory(None, -delta_quantity, 0)
            record = InventoryRecord(
                store_id=store_id,
                kind=KIND_PRODUCT,
                product_id=product_id,
                quantity=delta_quantity,
                location=location,
                min_stock_level=min_stock_level or 0,
                notes=notes,
                last_restocked_at=now if delta_quantity > 0 else None,
                is_active=True,
            )
            try:
                with self.db.begin_nested():
                    self.ledger.reserve(store_id, delta_quantity * unit_size)
                    self.repo.create(record)
                return UpsertResult(record=record, merged=False)
            except IntegrityError:
                # A concurrent writer created the same active record first.
                existing = self.repo.find_active(store_id, product_id, location, for_update=True)
                if existing is None:
                    raise

        if delta_quantity > 0:
            self.ledger.reserve(store_id, delta_quantity * unit_size)
        if not self.repo.try_add_quantity(existing.id, delta_quantity):
            raise insufficient_inventory(existing.id, -delta_quantity, existing.quantity)
        if delta_quantity < 0:
            self.ledger.release(store_id, -delta_quantity * unit_size)
        record = self.repo.get_by_id(existing.id)
        if min_stock_level is not None and min_stock_level > record.min_stock_level:
            record.min_stock_level = min_stock_level
        if notes is not None:
            record.notes = notes
        if delta_quantity > 0:
            record.last_restocked_at = now
        record.updated_at = now
        self.db.flush()
        return UpsertResult(record=record, merged=True)

    def add_product_stock(
        self,
        store_id,
        product_id,
        *,
        quantity: int,
        location: str,
        min_stock_level: int | None = None,
        notes: str | None = None,
    ) -> UpsertResult:
        product = self.products.get_by_id(product_id)
        if product is None or not product.is_active:
            raise not_found("product", product_id)
        return self.upsert_quantity(
            store_id,
            product.id,
            location,
            quantity,
            product.unit_size,
            min_stock_level=min_stock_level,
            notes=notes,
        )

    def add_container(
        self,
        store_id,
        *,
        container_type: str,
        container_name: str,
        container_unit_size: int,
        card_items: list[dict],
        location: str,
        notes: str | None = None,
    ) -> InventoryRecord:
        self.ledger.reserve(store_id, container_unit_size)
        record = InventoryRecord(
            store_id=store_id,
            kind=KIND_CONTAINER,
            quantity=sum(int(item.get("quantity", 1)) for item in card_items),
            location=location,
            container_type=container_type,
            container_name=container_name,
            container_unit_size=container_unit_size,
            card_items=card_items,
            notes=notes,
            last_restocked_at=utc_now(),
            is_active=True,
        )
        return self.repo.create(record)

    def set_quantity(self, inventory_id, new_quantity: int) -> InventoryRecord:
        if new_quantity < 0:
            raise validation_error("Quantity cannot be negative")
        record = self.repo.get_by_id(inventory_id, for_update=True)
        if record is None or not record.is_active:
            raise not_found("inventory", inventory_id)
        if record.kind != KIND_PRODUCT:
            raise validation_error("Container quantity follows its card items")
        old_quantity = record.quantity
        delta = new_quantity - old_quantity
        if delta == 0:
            return record
        unit_size = record.product.unit_size
        if delta > 0:
            self.ledger.reserve(record.store_id, delta * unit_size)
        if not self.repo.try_replace_quantity(record.id, old_quantity, new_quantity):
            raise AppError(ErrorCatalog.CONCURRENT_MODIFICATION, details={"inventory_id": str(record.id)})
        if delta < 0:
            self.ledger.release(record.store_id, -delta * unit_size)
        record = self.repo.get_by_id(record.id)
        if delta > 0:
            record.last_restocked_at = utc_now()
            self.db.flush()
        return record

    def update(self, inventory_id, *, store_id, changes: dict) -> InventoryRecord:
        record = self.get(inventory_id, store_id=store_id)
        now = utc_now()

        location = changes.get("location")
        if location is not None and location != record.location:
            if location not in LOCATIONS:
                raise validation_error(f"Invalid location: {location}")
            if record.kind == KIND_PRODUCT:
                clash = self.repo.find_active(record.store_id, record.product_id, location)
                if clash is not None and clash.id != record.id:
                    raise AppError(
                        ErrorCatalog.DUPLICATE_INVENTORY,
                        details={"existing_inventory_id": str(clash.id), "location": location},
                    )
            record.location = location

        if record.kind == KIND_CONTAINER:
            unit_size = changes.get("container_unit_size")
            if unit_size is not None and unit_size != record.container_unit_size:
                self.ledger.reserve(record.store_id, unit_size - (record.container_unit_size or 0))
                record.container_unit_size = unit_size
            if changes.get("container_name") is not None:
                record.container_name = changes["container_name"]
            if changes.get("card_items") is not None:
                record.card_items = changes["card_items"]
                record.quantity = sum(int(item.get("quantity", 1)) for item in changes["card_items"])
        elif changes.get("quantity") is not None:
            self.db.flush()
            record = self.set_quantity(record.id, changes["quantity"])

        if changes.get("min_stock_level") is not None:
            record.min_stock_level = changes["min_stock_level"]
        if "notes" in changes:
            record.notes = changes["notes"]
        record.updated_at = now
        self.db.flush()
        return record

    def withdraw(self, inventory_id, quantity: int, *, store_id=None) -> InventoryRecord:
        """Remove ``quantity`` units from a record, deactivating it when it empties."""
        record = self.repo.get_by_id(inventory_id, for_update=True)
        if record is None:
            raise not_found("inventory", inventory_id)
        if not record.is_active or record.kind != KIND_PRODUCT:
            raise insufficient_inventory(record.id, quantity, 0)
        if store_id is not None and str(record.store_id) != str(store_id):
            raise insufficient_inventory(record.id, quantity, 0)
        if not self.repo.try_add_quantity(record.id, -quantity):
            current = self.repo.get_by_id(record.id)
            raise insufficient_inventory(record.id, quantity, current.quantity if current else 0)
        self.ledger.release(record.store_id, quantity * record.product.unit_size)
        record = self.repo.get_by_id(record.id)
        if record.quantity == 0:
            self.repo.try_deactivate(record.id)
            record = self.repo.get_by_id(record.id)
        return record

    def remove(self, inventory_id, *, store_id=None) -> InventoryRecord:
        record = self.get(inventory_id, store_id=store_id)
        units = capacity_units(record)
        if not self.repo.try_deactivate(record.id):
            raise not_found("inventory", inventory_id)
        self.ledger.release(record.store_id, units)
        return self.repo.get_by_id(record.id)
