# storefront/api/routers/products.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import RequestContext, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import ProductCreate, ProductOut, ProductPageOut, ProductUpdate
from storefront.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=ProductPageOut)
def list_products(
    category: str | None = None,
    search: str | None = None,
    sort: str | None = None,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
):
    return CatalogService(db).list_products(category=category, search=search, sort=sort, page=page)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return CatalogService(db).get_product(product_id)


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return CatalogService(db).create_product(payload)


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return CatalogService(db).update_product(product_id, payload)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    CatalogService(db).delete_product(product_id)
    return {"success": True, "message": "Product deleted successfully"}
