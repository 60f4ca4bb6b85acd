# storefront/services/catalog_service.py
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.enums import PRODUCT_CATEGORIES
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.domain.pricing import to_money
from storefront.domain.schemas import ProductCreate, ProductOut, ProductUpdate
from storefront.repos.product_repo import ProductRepo
from storefront.utils.settings import PRODUCTS_PAGE_SIZE
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_PRODUCT_FIELDS = ("name", "description", "price", "category", "stock")


class CatalogService:
    """
    Product catalog: public browsing (query) and admin edits (commands).
    Stock and sales_count are changed by checkout/cancellation through
    ProductRepo, not here, apart from an admin setting stock directly.
    """

    def __init__(self, db: Session, page_size: int = PRODUCTS_PAGE_SIZE):
        self.repo = ProductRepo(db)
        self.page_size = page_size

    #query
    def list_products(
        self,
        category: str | None = None,
        search: str | None = None,
        sort: str | None = None,
        page: int = 1,
    ) -> Dict[str, Any]:
        page = max(page or 1, 1)
        products, total = self.repo.list_products(
            category=category,
            search=search.strip() if search else None,
            sort=sort,
            offset=(page - 1) * self.page_size,
            limit=self.page_size,
        )

        return {
            "products": [ProductOut.model_validate(p) for p in products],
            "current_page": page,
            "total_pages": math.ceil(total / self.page_size) if total else 0,
            "total_products": total,
        }

    def get_product(self, product_id: int) -> ProductOut:
        return ProductOut.model_validate(self._get_or_404(product_id))

    #commands
    def create_product(self, payload: ProductCreate) -> ProductOut:
        missing = [f for f in REQUIRED_PRODUCT_FIELDS if _is_blank(getattr(payload, f))]
        if missing:
            raise ValidationError("All required fields must be filled", fields=missing)

        _validate_price(payload.price)
        _validate_stock(payload.stock)
        _validate_category(payload.category)

        product = ProductModel(
            name=payload.name.strip(),
            description=payload.description.strip(),
            price=to_money(payload.price),
            category=payload.category,
            stock=payload.stock,
            sales_count=0,
            is_available=payload.is_available,
            created_at=datetime.now(timezone.utc),
        )
        self.repo.add_product(product)
        self.repo.commit()

        logger.info(f"Product {product.id} ({product.name}) created")
        return ProductOut.model_validate(product)

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductOut:
        product = self._get_or_404(product_id)

        # all checks first, the row is not touched on a rejected update
        if payload.name is not None and not payload.name.strip():
            raise ValidationError("Name cannot be empty", fields=["name"])
        if payload.description is not None and not payload.description.strip():
            raise ValidationError("Description cannot be empty", fields=["description"])
        if payload.price is not None:
            _validate_price(payload.price)
        if payload.category is not None:
            _validate_category(payload.category)
        if payload.stock is not None:
            _validate_stock(payload.stock)

        #field by field, only what the allow-list has
        if payload.name is not None:
            product.name = payload.name.strip()
        if payload.description is not None:
            product.description = payload.description.strip()
        if payload.price is not None:
            product.price = to_money(payload.price)
        if payload.category is not None:
            product.category = payload.category
        if payload.stock is not None:
            product.stock = payload.stock
        if payload.is_available is not None:
            product.is_available = payload.is_available

        self.repo.commit()

        logger.info(f"Product {product_id} updated")
        return ProductOut.model_validate(product)

    def delete_product(self, product_id: int) -> None:
        product = self._get_or_404(product_id)
        self.repo.delete_product(product)
        self.repo.commit()

        logger.info(f"Product {product_id} deleted")

    def _get_or_404(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _validate_price(price: Decimal) -> None:
    if price <= 0:
        raise ValidationError("Price must be greater than 0", fields=["price"])


def _validate_stock(stock: int) -> None:
    if stock < 0:
        raise ValidationError("Stock cannot be negative", fields=["stock"])


def _validate_category(category: str) -> None:
    if category not in PRODUCT_CATEGORIES:
        raise ValidationError("Invalid category selected", fields=["category"])
