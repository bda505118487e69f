from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from app.tcg.core.config import settings
from app.tcg.core.context import Principal
from app.tcg.core.enums import KIND_PRODUCT
from app.tcg.core.error_catalog import AppError, ErrorCatalog, not_found, validation_error
from app.tcg.core.ids import normalize_uuid, parse_uuid
from app.tcg.core.logging import log_json
from app.tcg.core.metrics import metrics
from app.tcg.db.models import Store, TransferRequest, TransferRequestItem, utc_now
from app.tcg.repos.inventory import InventoryRepository
from app.tcg.repos.products import ProductRepository
from app.tcg.repos.stores import StoreRepository
from app.tcg.repos.transfer_requests import TransferRequestQueryFilters, TransferRequestRepository
from app.tcg.services import transfer_workflow as workflow
from app.tcg.services.authorization import (
    can_access_store,
    can_create_transfer,
    can_transition,
    can_view_transfer,
    deny,
    ensure_allowed,
)
from app.tcg.services.inventory import InventoryService, insufficient_inventory

logger = logging.getLogger("tcg.transfer_requests")


@dataclass(frozen=True)
class TransferItemInput:
    inventory_id: str
    requested_quantity: int


def format_request_number(prefix: str, day: datetime, sequence: int) -> str:
    return f"{prefix}-{day:%Y%m%d}-{sequence:04d}"


def next_sequence(latest: str | None, day_prefix: str) -> int:
    if not latest or not latest.startswith(day_prefix):
        return 1
    try:
        return int(latest[len(day_prefix):]) + 1
    except ValueError:
        return 1


class TransferRequestService:
    def __init__(self, db):
        self.db = db
        self.repo = TransferRequestRepository(db)
        self.stores = StoreRepository(db)
        self.inventory_repo = InventoryRepository(db)
        self.products = ProductRepository(db)
        self.inventory = InventoryService(db)

    def list_requests(self, principal: Principal, *, status: str | None = None, store_id: str | None = None):
        if principal.is_partner:
            return self.repo.list_requests(TransferRequestQueryFilters(status=status, store_id=store_id))
        if not principal.is_manager:
            ensure_allowed(deny("Insufficient permissions to view transfer requests"), "TRANSFER_VIEW")
        if store_id:
            ensure_allowed(can_access_store(principal, store_id), "TRANSFER_VIEW")
        if not principal.assigned_store_id:
            return []
        return self.repo.list_requests(
            TransferRequestQueryFilters(status=status, store_id=principal.assigned_store_id)
        )

    def get(self, principal: Principal, transfer_id) -> TransferRequest:
        transfer = self.repo.get_by_id(transfer_id)
        if transfer is None:
            raise not_found("transfer_request", transfer_id)
        ensure_allowed(can_view_transfer(principal, transfer), "TRANSFER_VIEW")
        return transfer

    def create(
        self,
        principal: Principal,
        *,
        from_store_id,
        to_store_id,
        items: list[TransferItemInput],
        notes: str | None = None,
    ) -> TransferRequest:
        ensure_allowed(can_create_transfer(principal, from_store_id, to_store_id), "TRANSFER_CREATE")
        if normalize_uuid(from_store_id) == normalize_uuid(to_store_id):
            raise validation_error("Cannot transfer inventory to the same store")
        if not items:
            raise validation_error("At least one item is required")
        source = self._require_active_store(from_store_id, "fromStoreId")
        destination = self._require_active_store(to_store_id, "toStoreId")

        lines: list[dict] = []
        seen: set[str] = set()
        for position, item in enumerate(items):
            inventory_key = normalize_uuid(item.inventory_id)
            if inventory_key in seen:
                raise validation_error("Each inventory record may appear only once", inventory_id=inventory_key)
            seen.add(inventory_key)
            if item.requested_quantity <= 0:
                raise validation_error("Requested quantity must be greater than zero", inventory_id=inventory_key)
            record = self.inventory_repo.get_by_id(item.inventory_id)
            if record is None or not record.is_active:
                raise not_found("inventory", item.inventory_id)
            if record.store_id != source.id:
                raise validation_error(
                    "Inventory item does not belong to the source store", inventory_id=inventory_key
                )
            if record.kind != KIND_PRODUCT:
                raise validation_error("Card containers cannot be transferred", inventory_id=inventory_key)
            if item.requested_quantity > record.quantity:
                raise insufficient_inventory(record.id, item.requested_quantity, record.quantity)
            lines.append(
                {
                    "position": position,
                    "inventory_id": record.id,
                    "product_id": record.product_id,
                    "requested_quantity": item.requested_quantity,
                    "max_quantity": record.quantity,
                    "location": record.location,
                }
            )

        max_attempts = max(settings.TRANSFER_NUMBER_MAX_ATTEMPTS, 1)
        attempt = 0
        while True:
            attempt += 1
            # Request numbers are unique per day; a concurrent create can take ours first.
            transfer = TransferRequest(
                request_number=self._next_request_number(),
                from_store_id=source.id,
                to_store_id=destination.id,
                status=workflow.OPEN,
                notes=notes,
                created_by_user_id=parse_uuid(principal.user_id),
                is_active=True,
                items=[TransferRequestItem(**line) for line in lines],
            )
            try:
                self.repo.create(transfer)
                self.db.commit()
                break
            except IntegrityError:
                self.db.rollback()
                if attempt >= max_attempts:
                    raise

        log_json(
            logger,
            {
                "event": "transfer_request.created",
                "transfer_request_id": str(transfer.id),
                "request_number": transfer.request_number,
                "from_store_id": str(transfer.from_store_id),
                "to_store_id": str(transfer.to_store_id),
                "items": len(lines),
                "user_id": principal.user_id,
            },
        )
        return self.repo.get_by_id(transfer.id)

    def change_status(
        self,
        principal: Principal,
        transfer_id,
        target_status: str,
        *,
        close_reason: str | None = None,
    ) -> TransferRequest:
        if target_status not in workflow.STATUSES:
            raise validation_error(f"Unknown status: {target_status}")
        try:
            transfer = self.repo.get_by_id(transfer_id, for_update=True)
            if transfer is None:
                raise not_found("transfer_request", transfer_id)
            ensure_allowed(can_view_transfer(principal, transfer), "TRANSFER_TRANSITION")
            current_status = transfer.status
            workflow.ensure_transition(current_status, target_status)
            ensure_allowed(can_transition(principal, transfer, current_status, target_status), "TRANSFER_TRANSITION")

            now = utc_now()
            actor_field, at_field = workflow.STATUS_STAMPS[target_status]
            values = {
                "status": target_status,
                "updated_at": now,
                actor_field: parse_uuid(principal.user_id),
                at_field: now,
            }
            if target_status == workflow.CLOSED:
                values["close_reason"] = close_reason
            if not self.repo.try_change_status(transfer.id, current_status, values):
                # Another request moved it first; report against the fresh status.
                latest = self.repo.get_by_id(transfer.id)
                workflow.ensure_transition(latest.status if latest else current_status, target_status)
                raise AppError(ErrorCatalog.CONCURRENT_MODIFICATION, details={"transfer_request_id": str(transfer.id)})

            if target_status == workflow.SENT:
                self._dispatch_items(transfer)
            elif target_status == workflow.COMPLETE:
                self._receive_items(transfer)
            elif (
                target_status == workflow.CLOSED
                and current_status == workflow.SENT
                and settings.TRANSFER_RESTOCK_ON_CLOSE
            ):
                self._restock_items(transfer)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        metrics.increment_transfer_transition(current_status, target_status)
        log_json(
            logger,
            {
                "event": "transfer_request.transition",
                "transfer_request_id": str(transfer.id),
                "request_number": transfer.request_number,
                "from_status": current_status,
                "to_status": target_status,
                "user_id": principal.user_id,
            },
        )
        return self.repo.get_by_id(transfer.id)

    def delete(self, principal: Principal, transfer_id) -> TransferRequest:
        try:
            transfer = self.repo.get_by_id(transfer_id, for_update=True)
            if transfer is None:
                raise not_found("transfer_request", transfer_id)
            if transfer.status not in workflow.DELETABLE_STATUSES:
                raise AppError(
                    ErrorCatalog.TRANSFER_NOT_DELETABLE,
                    details={"status": transfer.status, "allowed": sorted(workflow.DELETABLE_STATUSES)},
                )
            transfer.is_active = False
            transfer.updated_at = utc_now()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        log_json(
            logger,
            {
                "event": "transfer_request.deleted",
                "transfer_request_id": str(transfer.id),
                "request_number": transfer.request_number,
                "user_id": principal.user_id,
            },
        )
        return transfer

    def _next_request_number(self) -> str:
        today = utc_now()
        day_prefix = format_request_number(settings.TRANSFER_NUMBER_PREFIX, today, 0)[:-4]
        latest = self.repo.latest_request_number(day_prefix)
        return format_request_number(settings.TRANSFER_NUMBER_PREFIX, today, next_sequence(latest, day_prefix))

    def _require_active_store(self, store_id, field_name: str) -> Store:
        store = self.stores.get_by_id(store_id)
        if store is None or not store.is_active:
            raise AppError(
                ErrorCatalog.NOT_FOUND,
                details={"message": f"Store not found: {store_id}", "resource": "store", "field": field_name},
            )
        return store

    def _dispatch_items(self, transfer: TransferRequest) -> None:
        for item in transfer.items:
            self.inventory.withdraw(item.inventory_id, item.requested_quantity, store_id=transfer.from_store_id)

    def _receive_items(self, transfer: TransferRequest) -> None:
        self._require_active_store(transfer.to_store_id, "toStoreId")
        for item in transfer.items:
            self._put_away(transfer.to_store_id, item)

    def _restock_items(self, transfer: TransferRequest) -> None:
        for item in transfer.items:
            self._put_away(transfer.from_store_id, item)

    def _put_away(self, store_id, item: TransferRequestItem) -> None:
        product = self.products.get_by_id(item.product_id)
        if product is None:
            raise not_found("product", item.product_id)
        self.inventory.upsert_quantity(
            store_id,
            product.id,
            item.location,
            item.requested_quantity,
            product.unit_size,
        )
