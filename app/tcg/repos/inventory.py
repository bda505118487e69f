from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select, update
from sqlalchemy.orm import selectinload

from app.tcg.core.ids import parse_uuid
from app.tcg.db.models import InventoryRecord, Product, utc_now


@dataclass(frozen=True)
class InventoryQueryFilters:
    store_id: str | None = None
    location: str | None = None
    product_type: str | None = None
    kind: str | None = None
    product_id: str | None = None


class InventoryRepository:
    def __init__(self, db):
        self.db = db

    def list_records(self, filters: InventoryQueryFilters) -> list[InventoryRecord]:
        query = (
            select(InventoryRecord)
            .options(selectinload(InventoryRecord.product), selectinload(InventoryRecord.store))
            .where(InventoryRecord.is_active.is_(True))
        )
        if filters.store_id:
            query = query.where(InventoryRecord.store_id == parse_uuid(filters.store_id))
        if filters.location:
            query = query.where(InventoryRecord.location == filters.location)
        if filters.kind:
            query = query.where(InventoryRecord.kind == filters.kind)
        if filters.product_id:
            query = query.where(InventoryRecord.product_id == parse_uuid(filters.product_id))
        if filters.product_type:
            query = query.join(Product, Product.id == InventoryRecord.product_id).where(
                Product.product_type == filters.product_type
            )
        return self.db.execute(query.order_by(InventoryRecord.created_at.desc())).scalars().all()

    def get_by_id(self, inventory_id, *, for_update: bool = False) -> InventoryRecord | None:
        parsed = parse_uuid(inventory_id)
        if parsed is None:
            return None
        query = select(InventoryRecord).where(InventoryRecord.id == parsed).execution_options(populate_existing=True)
        if for_update:
            query = query.with_for_update()
        return self.db.execute(query).scalars().first()

    def find_active(self, store_id, product_id, location: str, *, for_update: bool = False) -> InventoryRecord | None:
        query = select(InventoryRecord).where(
            InventoryRecord.store_id == store_id,
            InventoryRecord.product_id == product_id,
            InventoryRecord.location == location,
            InventoryRecord.kind == "product",
            InventoryRecord.is_active.is_(True),
        )
        if for_update:
            query = query.with_for_update()
        return self.db.execute(query.execution_options(populate_existing=True)).scalars().first()

    def find_active_elsewhere(self, store_id, product_id, location: str) -> list[InventoryRecord]:
        query = select(InventoryRecord).where(
            InventoryRecord.store_id == store_id,
            InventoryRecord.product_id == product_id,
            InventoryRecord.location != location,
            InventoryRecord.kind == "product",
            InventoryRecord.is_active.is_(True),
        )
        return self.db.execute(query).scalars().all()

    def create(self, record: InventoryRecord) -> InventoryRecord:
        self.db.add(record)
        self.db.flush()
        return record

    def try_add_quantity(self, inventory_id, delta: int) -> bool:
        """Apply ``delta`` to an active record only if the quantity stays non-negative."""
        stmt = (
            update(InventoryRecord)
            .where(
                InventoryRecord.id == inventory_id,
                InventoryRecord.is_active.is_(True),
                InventoryRecord.quantity + delta >= 0,
            )
            .values(quantity=InventoryRecord.quantity + delta, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def try_replace_quantity(self, inventory_id, expected: int, quantity: int) -> bool:
        stmt = (
            update(InventoryRecord)
            .where(
                InventoryRecord.id == inventory_id,
                InventoryRecord.is_active.is_(True),
                InventoryRecord.quantity == expected,
            )
            .values(quantity=quantity, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def try_deactivate(self, inventory_id) -> bool:
        stmt = (
            update(InventoryRecord)
            .where(InventoryRecord.id == inventory_id, InventoryRecord.is_active.is_(True))
            .values(is_active=False, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def derived_capacity(self, store_id) -> int:
        product_units = (
            select(func.coalesce(func.sum(InventoryRecord.quantity * Product.unit_size), 0))
            .join(Product, Product.id == InventoryRecord.product_id)
            .where(
                InventoryRecord.store_id == store_id,
                InventoryRecord.kind == "product",
                InventoryRecord.is_active.is_(True),
            )
        )
        container_units = select(func.coalesce(func.sum(InventoryRecord.container_unit_size), 0)).where(
            InventoryRecord.store_id == store_id,
            InventoryRecord.kind == "container",
            InventoryRecord.is_active.is_(True),
        )
        return int(self.db.execute(product_units).scalar_one()) + int(self.db.execute(container_units).scalar_one())

    def count_active(self, store_id) -> int:
        query = (
            select(func.count())
            .select_from(InventoryRecord)
            .where(InventoryRecord.store_id == store_id, InventoryRecord.is_active.is_(True))
        )
        return int(self.db.execute(query).scalar_one())

    def list_low_stock(self, store_id, default_threshold: int) -> list[InventoryRecord]:
        threshold = func.coalesce(func.nullif(InventoryRecord.min_stock_level, 0), default_threshold)
        query = (
            select(InventoryRecord)
            .options(selectinload(InventoryRecord.product))
            .where(
                InventoryRecord.store_id == store_id,
                InventoryRecord.kind == "product",
                InventoryRecord.is_active.is_(True),
                InventoryRecord.quantity <= threshold,
            )
            .order_by(InventoryRecord.quantity)
        )
        return self.db.execute(query).scalars().all()
