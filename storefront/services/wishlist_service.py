# storefront/services/wishlist_service.py
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.wishlist_item import WishlistItemModel
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.domain.schemas import ProductOut
from storefront.repos.product_repo import ProductRepo
from storefront.repos.wishlist_repo import WishlistRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class WishlistService:
    """
    Saved products per user, independent of cart and stock.
    Every command returns the wishlist as it is afterwards.
    """

    def __init__(self, db: Session):
        self.repo = WishlistRepo(db)
        self.products = ProductRepo(db)

    def get_wishlist(self, user_id: int) -> Dict[str, Any]:
        return {
            "user_id": user_id,
            "products": [ProductOut.model_validate(p) for p in self.repo.list_products(user_id)],
        }

    def add_to_wishlist(self, user_id: int, product_id: int) -> Dict[str, Any]:
        if not self.products.get_product(product_id):
            raise NotFoundError("Product not found")

        if self.repo.get_item(user_id, product_id):
            raise ValidationError("Product already in wishlist", fields=["product_id"])

        self._add(user_id, product_id)
        return self.get_wishlist(user_id)

    def remove_from_wishlist(self, user_id: int, product_id: int) -> Dict[str, Any]:
        item = self.repo.get_item(user_id, product_id)
        if not item:
            raise NotFoundError("Product not found in wishlist")

        self.repo.delete_item(item)
        self.repo.commit()

        logger.info(f"Product {product_id} removed from wishlist of user {user_id}")
        return self.get_wishlist(user_id)

    def toggle_wishlist(self, user_id: int, product_id: int) -> Dict[str, Any]:
        if not self.products.get_product(product_id):
            raise NotFoundError("Product not found")

        item = self.repo.get_item(user_id, product_id)
        if item:
            self.repo.delete_item(item)
            self.repo.commit()
            logger.info(f"Product {product_id} removed from wishlist of user {user_id}")
        else:
            self._add(user_id, product_id)

        return {**self.get_wishlist(user_id), "in_wishlist": item is None}

    def clear_wishlist(self, user_id: int) -> Dict[str, Any]:
        removed = self.repo.delete_items(user_id)
        self.repo.commit()

        logger.info(f"Wishlist of user {user_id} cleared, {removed} entries removed")
        return self.get_wishlist(user_id)

    def _add(self, user_id: int, product_id: int) -> None:
        try:
            self.repo.add_item(
                WishlistItemModel(
                    user_id=user_id,
                    product_id=product_id,
                    created_at=datetime.now(timezone.utc),
                )
            )
            self.repo.commit()
        except IntegrityError:
            # a parallel request saved the same product first
            self.repo.rollback()
            raise ValidationError("Product already in wishlist", fields=["product_id"]) from None

        logger.info(f"Product {product_id} added to wishlist of user {user_id}")
