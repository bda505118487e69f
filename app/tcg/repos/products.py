from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import case, func, or_, select

from app.tcg.core.ids import parse_uuid
from app.tcg.db.models import InventoryRecord, Product, Store


@dataclass(frozen=True)
class ProductQueryFilters:
    product_type: str | None = None
    brand: str | None = None
    search: str | None = None
    include_inactive: bool = False


class ProductRepository:
    def __init__(self, db):
        self.db = db

    def list_products(self, filters: ProductQueryFilters) -> list[Product]:
        query = select(Product)
        if not filters.include_inactive:
            query = query.where(Product.is_active.is_(True))
        if filters.product_type:
            query = query.where(Product.product_type == filters.product_type)
        if filters.brand:
            query = query.where(Product.brand == filters.brand)
        if filters.search:
            pattern = f"%{filters.search.strip().lower()}%"
            query = query.where(
                or_(
                    func.lower(Product.name).like(pattern),
                    func.lower(Product.sku).like(pattern),
                    func.lower(Product.brand).like(pattern),
                )
            )
        return self.db.execute(query.order_by(Product.name)).scalars().all()

    def get_by_id(self, product_id) -> Product | None:
        parsed = parse_uuid(product_id)
        if parsed is None:
            return None
        return self.db.get(Product, parsed)

    def get_by_sku(self, sku: str) -> Product | None:
        return self.db.execute(select(Product).where(Product.sku == sku)).scalars().first()

    def list_brands(self) -> list[str]:
        query = (
            select(Product.brand)
            .where(Product.is_active.is_(True), Product.brand.is_not(None))
            .distinct()
            .order_by(Product.brand)
        )
        return [row for row in self.db.execute(query).scalars().all() if row]

    def stock_by_store(self, product_id) -> list[dict]:
        floor_qty = func.sum(case((InventoryRecord.location == "floor", InventoryRecord.quantity), else_=0))
        back_qty = func.sum(case((InventoryRecord.location == "back", InventoryRecord.quantity), else_=0))
        query = (
            select(Store.id, Store.name, floor_qty, back_qty)
            .join(InventoryRecord, InventoryRecord.store_id == Store.id)
            .where(
                InventoryRecord.product_id == product_id,
                InventoryRecord.is_active.is_(True),
                InventoryRecord.kind == "product",
            )
            .group_by(Store.id, Store.name)
            .order_by(Store.name)
        )
        rows = []
        for store_id, store_name, floor, back in self.db.execute(query).all():
            floor = int(floor or 0)
            back = int(back or 0)
            rows.append(
                {
                    "store_id": str(store_id),
                    "store_name": store_name,
                    "floor": floor,
                    "back": back,
                    "total": floor + back,
                }
            )
        return rows
