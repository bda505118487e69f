from __future__ import annotations

from app.tcg.core.error_catalog import AppError, ErrorCatalog, not_found
from app.tcg.db.models import Store, utc_now
from app.tcg.db.session import transaction
from app.tcg.repos.inventory import InventoryRepository
from app.tcg.repos.stores import StoreQueryFilters, StoreRepository
from app.tcg.repos.users import UserRepository
from app.tcg.services.capacity import CapacityLedger


class StoreService:
    def __init__(self, db):
        self.db = db
        self.repo = StoreRepository(db)

    def list_stores(self, *, include_inactive: bool = False, store_id: str | None = None) -> list[Store]:
        return self.repo.list_stores(StoreQueryFilters(include_inactive=include_inactive, store_id=store_id))

    def get(self, store_id, *, include_inactive: bool = False) -> Store:
        store = self.repo.get_by_id(store_id)
        if store is None or (not store.is_active and not include_inactive):
            raise not_found("store", store_id)
        return store

    def create(self, *, name: str, address: str, city: str, state: str, zip_code: str, max_capacity: int) -> Store:
        with transaction(self.db):
            store = self.repo.create(
                Store(
                    name=name,
                    address=address,
                    city=city,
                    state=state,
                    zip_code=zip_code,
                    max_capacity=max_capacity,
                    current_capacity=0,
                    is_active=True,
                )
            )
        return store

    def update(self, store_id, changes: dict) -> Store:
        with transaction(self.db):
            store = self.get(store_id)
            max_capacity = changes.pop("max_capacity", None)
            for key, value in changes.items():
                if value is not None:
                    setattr(store, key, value)
            store.updated_at = utc_now()
            self.db.flush()
            if max_capacity is not None and not self.repo.try_set_max_capacity(store.id, max_capacity):
                current = self.get(store.id)
                raise AppError(
                    ErrorCatalog.CAPACITY_BELOW_USAGE,
                    details={
                        "message": (
                            f"Cannot set max capacity ({max_capacity}) below current usage ({current.current_capacity})"
                        ),
                        "current_capacity": current.current_capacity,
                        "requested_max_capacity": max_capacity,
                    },
                )
        return self.get(store_id)

    def delete(self, store_id) -> Store:
        with transaction(self.db):
            store = self.get(store_id)
            assigned_users = UserRepository(self.db).count_assigned_to_store(store.id)
            active_inventory = InventoryRepository(self.db).count_active(store.id)
            if assigned_users or active_inventory:
                raise AppError(
                    ErrorCatalog.STORE_IN_USE,
                    details={"assigned_users": assigned_users, "active_inventory": active_inventory},
                )
            store.is_active = False
            store.updated_at = utc_now()
        return store

    def recalculate_capacity(self, store_id) -> Store:
        with transaction(self.db):
            store = self.get(store_id)
            CapacityLedger(self.db).recalculate(store.id)
        return self.get(store_id)
