from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import selectinload

from app.tcg.core.ids import parse_uuid
from app.tcg.db.models import TransferRequest


@dataclass(frozen=True)
class TransferRequestQueryFilters:
    status: str | None = None
    store_id: str | None = None


class TransferRequestRepository:
    def __init__(self, db):
        self.db = db

    def list_requests(self, filters: TransferRequestQueryFilters) -> list[TransferRequest]:
        query = (
            select(TransferRequest)
            .options(selectinload(TransferRequest.items))
            .where(TransferRequest.is_active.is_(True))
        )
        if filters.status:
            query = query.where(TransferRequest.status == filters.status)
        if filters.store_id:
            store_id = parse_uuid(filters.store_id)
            query = query.where(
                or_(TransferRequest.from_store_id == store_id, TransferRequest.to_store_id == store_id)
            )
        return self.db.execute(query.order_by(TransferRequest.created_at.desc())).scalars().all()

    def get_by_id(self, transfer_id, *, for_update: bool = False) -> TransferRequest | None:
        parsed = parse_uuid(transfer_id)
        if parsed is None:
            return None
        query = (
            select(TransferRequest)
            .options(selectinload(TransferRequest.items))
            .where(TransferRequest.id == parsed, TransferRequest.is_active.is_(True))
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        return self.db.execute(query).scalars().first()

    def latest_request_number(self, prefix: str) -> str | None:
        # Sequences outgrow their zero padding, so a longer number is a larger one.
        query = (
            select(TransferRequest.request_number)
            .where(TransferRequest.request_number.like(f"{prefix}%"))
            .order_by(func.length(TransferRequest.request_number).desc(), TransferRequest.request_number.desc())
            .limit(1)
        )
        return self.db.execute(query).scalars().first()

    def create(self, transfer: TransferRequest) -> TransferRequest:
        self.db.add(transfer)
        self.db.flush()
        return transfer

    def try_change_status(self, transfer_id, expected_status: str, values: dict) -> bool:
        """Write ``values`` only while the request is still in ``expected_status``."""
        stmt = (
            update(TransferRequest)
            .where(
                TransferRequest.id == transfer_id,
                TransferRequest.status == expected_status,
                TransferRequest.is_active.is_(True),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1
