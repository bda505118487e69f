from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select, update

from app.tcg.core.ids import parse_uuid
from app.tcg.db.models import Store, utc_now


@dataclass(frozen=True)
class StoreQueryFilters:
    include_inactive: bool = False
    store_id: str | None = None


class StoreRepository:
    def __init__(self, db):
        self.db = db

    def list_stores(self, filters: StoreQueryFilters) -> list[Store]:
        query = select(Store)
        if not filters.include_inactive:
            query = query.where(Store.is_active.is_(True))
        if filters.store_id:
            query = query.where(Store.id == parse_uuid(filters.store_id))
        return self.db.execute(query.order_by(Store.name)).scalars().all()

    def get_by_id(self, store_id, *, for_update: bool = False) -> Store | None:
        parsed = parse_uuid(store_id)
        if parsed is None:
            return None
        query = select(Store).where(Store.id == parsed).execution_options(populate_existing=True)
        if for_update:
            query = query.with_for_update()
        return self.db.execute(query).scalars().first()

    def create(self, store: Store) -> Store:
        self.db.add(store)
        self.db.flush()
        return store

    def try_adjust_capacity(self, store_id, delta_units: int) -> bool:
        """Add ``delta_units`` only if the result stays within ``[0, max_capacity]``."""
        stmt = (
            update(Store)
            .where(
                Store.id == store_id,
                Store.current_capacity + delta_units <= Store.max_capacity,
                Store.current_capacity + delta_units >= 0,
            )
            .values(current_capacity=Store.current_capacity + delta_units, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def try_set_max_capacity(self, store_id, max_capacity: int) -> bool:
        stmt = (
            update(Store)
            .where(Store.id == store_id, Store.current_capacity <= max_capacity)
            .values(max_capacity=max_capacity, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def set_current_capacity(self, store_id, current_capacity: int) -> None:
        stmt = (
            update(Store)
            .where(Store.id == store_id)
            .values(current_capacity=current_capacity, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        self.db.execute(stmt)
