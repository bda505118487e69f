from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.tcg.core.deps import require_permission
from app.tcg.db.session import get_db
from app.tcg.repos.products import ProductQueryFilters
from app.tcg.routers.presenters import product_response
from app.tcg.schemas.errors import ErrorResponse
from app.tcg.schemas.products import (
    BrandListResponse,
    ProductCreateRequest,
    ProductEnvelope,
    ProductListResponse,
    ProductStoreStock,
    ProductType,
    ProductUpdateRequest,
)
from app.tcg.services.products import ProductService

router = APIRouter()

_ERRORS = {403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@router.get("", response_model=ProductListResponse)
def list_products(
    product_type: ProductType | None = Query(default=None, alias="productType"),
    brand: str | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    _principal=Depends(require_permission("PRODUCT_MANAGE")),
    db=Depends(get_db),
):
    filters = ProductQueryFilters(
        product_type=product_type,
        brand=brand,
        search=search,
        include_inactive=include_inactive,
    )
    products = ProductService(db).list_products(filters)
    return ProductListResponse(count=len(products), products=[product_response(product) for product in products])


@router.get("/brands", response_model=BrandListResponse)
def list_brands(_principal=Depends(require_permission("PRODUCT_MANAGE")), db=Depends(get_db)):
    return BrandListResponse(brands=ProductService(db).list_brands())


@router.get("/{product_id}", response_model=ProductEnvelope, responses=_ERRORS)
def get_product(product_id: UUID, _principal=Depends(require_permission("PRODUCT_MANAGE")), db=Depends(get_db)):
    service = ProductService(db)
    product = service.get(product_id)
    stock = [ProductStoreStock(**row) for row in service.stock_by_store(product)]
    return ProductEnvelope(product=product_response(product), stock=stock)


@router.post("", response_model=ProductEnvelope, status_code=201, responses={**_ERRORS, 409: {"model": ErrorResponse}})
def create_product(
    payload: ProductCreateRequest,
    _principal=Depends(require_permission("PRODUCT_MANAGE")),
    db=Depends(get_db),
):
    product = ProductService(db).create(payload.model_dump())
    return ProductEnvelope(message="Product created successfully", product=product_response(product))


@router.put("/{product_id}", response_model=ProductEnvelope, responses=_ERRORS)
def update_product(
    product_id: UUID,
    payload: ProductUpdateRequest,
    _principal=Depends(require_permission("PRODUCT_MANAGE")),
    db=Depends(get_db),
):
    product = ProductService(db).update(product_id, payload.model_dump(exclude_unset=True))
    return ProductEnvelope(message="Product updated successfully", product=product_response(product))


@router.delete("/{product_id}", response_model=ProductEnvelope, responses=_ERRORS)
def delete_product(product_id: UUID, _principal=Depends(require_permission("PRODUCT_MANAGE")), db=Depends(get_db)):
    product = ProductService(db).delete(product_id)
    return ProductEnvelope(message="Product deleted successfully", product=product_response(product))
