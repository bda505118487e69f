import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, func, inspect, select
from sqlalchemy.orm import sessionmaker

from app.tcg.core.security import verify_password
from app.tcg.db.models import User, utc_now
from app.tcg.db.seed import run_seed
from tests.tcg_helpers import create_store


def _run_migrations(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


def test_migrations_apply(tmp_path: Path):
    db_path = tmp_path / "migrations.db"
    database_url = f"sqlite+pysqlite:///{db_path}"
    _run_migrations(database_url)

    engine = create_engine(database_url, future=True)
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())

    for table in (
        "stores",
        "users",
        "products",
        "inventory_records",
        "transfer_requests",
        "transfer_request_items",
        "idempotency_records",
    ):
        assert table in tables

    indexes = {index["name"]: index for index in inspector.get_indexes("inventory_records")}
    assert indexes["uq_inventory_records_active_product_location"]["unique"]
    engine.dispose()


def test_seed_is_idempotent(tmp_path: Path):
    db_path = tmp_path / "seed.db"
    database_url = f"sqlite+pysqlite:///{db_path}"
    _run_migrations(database_url)

    engine = create_engine(database_url, future=True)
    SessionLocal = sessionmaker(bind=engine, future=True)

    with SessionLocal() as db:
        run_seed(db)
        users_count = db.scalar(select(func.count()).select_from(User))
        run_seed(db)
        users_count_after = db.scalar(select(func.count()).select_from(User))

        assert users_count == 1
        assert users_count_after == users_count

        partner = db.execute(select(User)).scalars().one()
        assert partner.role == "partner"
        assert partner.assigned_store_id is None
        assert verify_password("change-me", partner.hashed_password)
    engine.dispose()


def test_timestamps_are_naive_utc(client, db_session):
    stamp = utc_now()
    assert stamp.tzinfo is None
    assert abs(stamp - datetime.now(timezone.utc).replace(tzinfo=None)) < timedelta(minutes=1)

    store = create_store(db_session, name="Clock")
    db_session.refresh(store)
    assert store.created_at.tzinfo is None
    assert abs(store.created_at - stamp) < timedelta(minutes=1)
