"""stores, catalog, inventory and transfer requests

Revision ID: 0001_tcg_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_tcg_initial"
down_revision = None
branch_labels = None
depends_on = None


class GUID(sa.TypeDecorator):
    impl = sa.CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID

            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(sa.CHAR(36))


def upgrade() -> None:
    op.create_table(
        "stores",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column("state", sa.String(length=2), nullable=False),
        sa.Column("zip_code", sa.String(length=10), nullable=False),
        sa.Column("max_capacity", sa.Integer(), nullable=False),
        sa.Column("current_capacity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("max_capacity > 0", name="ck_stores_max_capacity_positive"),
        sa.CheckConstraint("current_capacity >= 0", name="ck_stores_current_capacity_non_negative"),
    )

    op.create_table(
        "users",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("username", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("role", sa.String(length=50), nullable=False, server_default="employee"),
        sa.Column("assigned_store_id", GUID(), sa.ForeignKey("stores.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_assigned_store_id", "users", ["assigned_store_id"])

    op.create_table(
        "products",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("sku", sa.String(length=64), nullable=False),
        sa.Column("product_type", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("brand", sa.String(length=100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("unit_size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("base_price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("bulk_quantity", sa.Integer(), nullable=True),
        sa.Column("card_details", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("unit_size >= 0", name="ck_products_unit_size_non_negative"),
    )
    op.create_index("ix_products_sku", "products", ["sku"], unique=True)
    op.create_index("ix_products_product_type", "products", ["product_type"])
    op.create_index("ix_products_brand", "products", ["brand"])

    op.create_table(
        "inventory_records",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("store_id", GUID(), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("kind", sa.String(length=16), nullable=False, server_default="product"),
        sa.Column("product_id", GUID(), sa.ForeignKey("products.id"), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("location", sa.String(length=16), nullable=False, server_default="floor"),
        sa.Column("min_stock_level", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("container_type", sa.String(length=32), nullable=True),
        sa.Column("container_name", sa.String(length=200), nullable=True),
        sa.Column("container_unit_size", sa.Integer(), nullable=True),
        sa.Column("card_items", sa.JSON(), nullable=True),
        sa.Column("last_restocked_at", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("quantity >= 0", name="ck_inventory_records_quantity_non_negative"),
    )
    op.create_index("ix_inventory_records_store_id", "inventory_records", ["store_id"])
    op.create_index("ix_inventory_records_product_id", "inventory_records", ["product_id"])
    op.create_index("ix_inventory_records_store_active", "inventory_records", ["store_id", "is_active"])
    op.create_index(
        "uq_inventory_records_active_product_location",
        "inventory_records",
        ["store_id", "product_id", "location"],
        unique=True,
        sqlite_where=sa.text("is_active = 1 AND kind = 'product'"),
        postgresql_where=sa.text("is_active AND kind = 'product'"),
    )

    op.create_table(
        "transfer_requests",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("request_number", sa.String(length=32), nullable=False),
        sa.Column("from_store_id", GUID(), nullable=False),
        sa.Column("to_store_id", GUID(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("close_reason", sa.Text(), nullable=True),
        sa.Column("created_by_user_id", GUID(), nullable=False),
        sa.Column("requested_by_user_id", GUID(), nullable=True),
        sa.Column("sent_by_user_id", GUID(), nullable=True),
        sa.Column("completed_by_user_id", GUID(), nullable=True),
        sa.Column("closed_by_user_id", GUID(), nullable=True),
        sa.Column("requested_at", sa.DateTime(), nullable=True),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("from_store_id <> to_store_id", name="ck_transfer_requests_distinct_stores"),
    )
    op.create_index("ix_transfer_requests_request_number", "transfer_requests", ["request_number"], unique=True)
    op.create_index("ix_transfer_requests_from_store_id", "transfer_requests", ["from_store_id"])
    op.create_index("ix_transfer_requests_to_store_id", "transfer_requests", ["to_store_id"])
    op.create_index("ix_transfer_requests_status", "transfer_requests", ["status"])
    op.create_index(
        "ix_transfer_requests_stores_status",
        "transfer_requests",
        ["from_store_id", "to_store_id", "status"],
    )

    op.create_table(
        "transfer_request_items",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("transfer_request_id", GUID(), sa.ForeignKey("transfer_requests.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("inventory_id", GUID(), nullable=False),
        sa.Column("product_id", GUID(), nullable=False),
        sa.Column("requested_quantity", sa.Integer(), nullable=False),
        sa.Column("max_quantity", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(length=16), nullable=False, server_default="floor"),
        sa.CheckConstraint("requested_quantity > 0", name="ck_transfer_request_items_quantity_positive"),
        sa.UniqueConstraint("transfer_request_id", "position", name="uq_transfer_request_items_position"),
    )
    op.create_index(
        "ix_transfer_request_items_transfer_request_id",
        "transfer_request_items",
        ["transfer_request_id"],
    )

    op.create_table(
        "idempotency_records",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), nullable=False),
        sa.Column("endpoint", sa.String(length=255), nullable=False),
        sa.Column("method", sa.String(length=10), nullable=False),
        sa.Column("idempotency_key", sa.String(length=255), nullable=False),
        sa.Column("request_hash", sa.String(length=64), nullable=False),
        sa.Column("state", sa.String(length=20), nullable=False, server_default="in_progress"),
        sa.Column("status_code", sa.Integer(), nullable=True),
        sa.Column("response_body", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("user_id", "endpoint", "method", "idempotency_key", name="uq_idempotency"),
    )
    op.create_index("ix_idempotency_records_user_id", "idempotency_records", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_idempotency_records_user_id", table_name="idempotency_records")
    op.drop_table("idempotency_records")
    op.drop_index("ix_transfer_request_items_transfer_request_id", table_name="transfer_request_items")
    op.drop_table("transfer_request_items")
    op.drop_index("ix_transfer_requests_stores_status", table_name="transfer_requests")
    op.drop_index("ix_transfer_requests_status", table_name="transfer_requests")
    op.drop_index("ix_transfer_requests_to_store_id", table_name="transfer_requests")
    op.drop_index("ix_transfer_requests_from_store_id", table_name="transfer_requests")
    op.drop_index("ix_transfer_requests_request_number", table_name="transfer_requests")
    op.drop_table("transfer_requests")
    op.drop_index("uq_inventory_records_active_product_location", table_name="inventory_records")
    op.drop_index("ix_inventory_records_store_active", table_name="inventory_records")
    op.drop_index("ix_inventory_records_product_id", table_name="inventory_records")
    op.drop_index("ix_inventory_records_store_id", table_name="inventory_records")
    op.drop_table("inventory_records")
    op.drop_index("ix_products_brand", table_name="products")
    op.drop_index("ix_products_product_type", table_name="products")
    op.drop_index("ix_products_sku", table_name="products")
    op.drop_table("products")
    op.drop_index("ix_users_assigned_store_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    op.drop_table("stores")
