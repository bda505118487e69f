from __future__ import annotations

import logging

from app.tcg.core.error_catalog import AppError, ErrorCatalog, not_found
from app.tcg.core.logging import log_json
from app.tcg.core.metrics import metrics
from app.tcg.db.models import Store
from app.tcg.repos.inventory import InventoryRepository
from app.tcg.repos.stores import StoreRepository

logger = logging.getLogger("tcg.capacity")


class CapacityLedger:
    """Keeps ``Store.current_capacity`` equal to the units held by active inventory.

    Every adjustment is a single conditional UPDATE on the store row, so two
    concurrent writers cannot both pass the bound check. Nothing here commits;
    the caller owns the transaction that also writes the inventory change.
    """

    def __init__(self, db):
        self.db = db
        self.stores = StoreRepository(db)
        self.inventory = InventoryRepository(db)

    def reserve(self, store_id, delta_units: int) -> None:
        if delta_units < 0:
            self.release(store_id, -delta_units)
            return
        if delta_units == 0:
            return
        if self.stores.try_adjust_capacity(store_id, delta_units):
            return
        store = self._require_store(store_id)
        available = max(store.max_capacity - store.current_capacity, 0)
        metrics.increment_capacity_rejected()
        raise AppError(
            ErrorCatalog.CAPACITY_EXCEEDED,
            details={
                "message": (
                    f"Insufficient capacity at {store.name}. "
                    f"Required: {delta_units}, available: {available}"
                ),
                "store_id": str(store.id),
                "required": delta_units,
                "available": available,
            },
        )

    def release(self, store_id, units: int) -> None:
        if units <= 0:
            return
        if self.stores.try_adjust_capacity(store_id, -units):
            return
        store = self._require_store(store_id)
        log_json(
            logger,
            {
                "event": "capacity.release_drift",
                "store_id": str(store.id),
                "current_capacity": store.current_capacity,
                "release_units": units,
            },
            level=logging.WARNING,
        )
        self.recalculate(store_id)

    def recalculate(self, store_id) -> Store:
        store = self._require_store(store_id)
        self.db.flush()
        derived = self.inventory.derived_capacity(store.id)
        previous = store.current_capacity
        self.stores.set_current_capacity(store.id, derived)
        log_json(
            logger,
            {
                "event": "capacity.recalculated",
                "store_id": str(store.id),
                "previous": previous,
                "current": derived,
            },
        )
        return self._require_store(store.id)

    def _require_store(self, store_id) -> Store:
        store = self.stores.get_by_id(store_id)
        if store is None:
            raise not_found("store", store_id)
        return store
