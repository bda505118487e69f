from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from app.tcg.core.enums import SINGLE_CARD
from app.tcg.core.error_catalog import AppError, ErrorCatalog, not_found, validation_error
from app.tcg.db.models import Product, utc_now
from app.tcg.db.session import transaction
from app.tcg.repos.products import ProductQueryFilters, ProductRepository


_REQUIRED_FIELDS = frozenset({"name", "base_price"})


class ProductService:
    def __init__(self, db):
        self.db = db
        self.repo = ProductRepository(db)

    def list_products(self, filters: ProductQueryFilters) -> list[Product]:
        return self.repo.list_products(filters)

    def list_brands(self) -> list[str]:
        return self.repo.list_brands()

    def get(self, product_id) -> Product:
        product = self.repo.get_by_id(product_id)
        if product is None:
            raise not_found("product", product_id)
        return product

    def stock_by_store(self, product: Product) -> list[dict]:
        return self.repo.stock_by_store(product.id)

    def create(self, values: dict) -> Product:
        sku = values["sku"].strip().upper()
        if self.repo.get_by_sku(sku) is not None:
            raise AppError(ErrorCatalog.DUPLICATE_SKU, details={"sku": sku})
        try:
            with transaction(self.db):
                product = Product(**{**values, "sku": sku, "is_active": True})
                self.db.add(product)
                self.db.flush()
        except IntegrityError as exc:
            raise AppError(ErrorCatalog.DUPLICATE_SKU, details={"sku": sku}) from exc
        return product

    def update(self, product_id, changes: dict) -> Product:
        with transaction(self.db):
            product = self.get(product_id)
            if "card_details" in changes:
                is_single_card = product.product_type == SINGLE_CARD
                if is_single_card and changes["card_details"] is None:
                    raise validation_error("Card details are required for single cards")
                if not is_single_card and changes["card_details"] is not None:
                    raise validation_error("Card details are only allowed for single cards")
            for key, value in changes.items():
                if value is None and key in _REQUIRED_FIELDS:
                    continue
                setattr(product, key, value)
            product.updated_at = utc_now()
        return product

    def delete(self, product_id) -> Product:
        with transaction(self.db):
            product = self.get(product_id)
            product.is_active = False
            product.updated_at = utc_now()
        return product
