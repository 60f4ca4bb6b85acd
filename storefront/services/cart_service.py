from datetime import datetime, timezone
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.domain.pricing import compute_totals, to_money
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use cases of the cart domain.
    commands (add, update, remove, clear) change state and bump the cart version
    query (get) only reads, apart from creating the cart on first access
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self._get_or_create_cart(user_id)
        return self._cart_view(cart)

    #commands
    def add_to_cart(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        _validate_quantity(quantity)

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        if not product.is_available:
            raise ValidationError(f"{product.name} is not available")

        #stock check at add time, checkout checks again
        if product.stock < quantity:
            raise InsufficientStockError(product.name, product.stock, quantity)

        cart = self._get_or_create_cart(user_id)
        existing_item = self.repo.get_cart_item_by_product(cart.id, product_id)

        if existing_item:
            logger.info(
                f"Product {product_id} already in cart {cart.id}, quantity "
                f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
            )
            existing_item.quantity += quantity
            existing_item.price = product.price  # price refresh
        else:
            logger.info(f"Adding product {product_id} to cart {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(
                    cart_id=cart.id,
                    product_id=product_id,
                    quantity=quantity,
                    price=product.price,
                )
            )

        self._bump_version(cart)
        return self._cart_view(cart)

    def update_cart_item(self, user_id: int, item_id: int, quantity: int) -> Dict[str, Any]:
        _validate_quantity(quantity)

        cart = self._get_cart_or_404(user_id)
        item = self.repo.get_cart_item(cart.id, item_id)
        if not item:
            raise NotFoundError("Item not found in cart")

        product = self.products.get_product(item.product_id)
        if not product:
            raise ProductNotFoundError(item.product_id)

        if product.stock < quantity:
            raise InsufficientStockError(product.name, product.stock, quantity)

        logger.info(f"Cart {cart.id} item {item_id} quantity {item.quantity} -> {quantity}")
        item.quantity = quantity

        self._bump_version(cart)
        return self._cart_view(cart)

    def remove_from_cart(self, user_id: int, item_id: int) -> Dict[str, Any]:
        cart = self._get_cart_or_404(user_id)
        item = self.repo.get_cart_item(cart.id, item_id)
        if not item:
            raise NotFoundError("Item not found in cart")

        logger.info(f"Removing item {item_id} from cart {cart.id}")
        self.repo.delete_cart_item(item)

        self._bump_version(cart)
        return self._cart_view(cart)

    def remove_product_from_cart(self, user_id: int, product_id: int) -> Dict[str, Any]:
        cart = self._get_cart_or_404(user_id)
        item = self.repo.get_cart_item_by_product(cart.id, product_id)
        if not item:
            raise NotFoundError("Product not found in cart")

        logger.info(f"Removing product {product_id} from cart {cart.id}")
        self.repo.delete_cart_item(item)

        self._bump_version(cart)
        return self._cart_view(cart)

    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self._get_cart_or_404(user_id)

        removed = self.repo.delete_cart_items(cart.id)
        logger.info(f"Cart {cart.id} cleared, {removed} items removed")

        self._bump_version(cart)
        return self._cart_view(cart)

    def _get_or_create_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        now = datetime.now(timezone.utc)
        try:
            cart = self.repo.create_cart(
                CartModel(user_id=user_id, version=1, created_at=now, updated_at=now)
            )
            logger.info(f"Created cart {cart.id} for user {user_id}")
        except IntegrityError:
            # a parallel request created it first, or the user does not exist
            self.repo.rollback()
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                raise NotFoundError("User not found")

        return cart

    def _get_cart_or_404(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")
        return cart

    def _bump_version(self, cart: CartModel) -> None:
        # optimistic locking on the version column
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={
                "version": cart.version + 1,
                "updated_at": datetime.now(timezone.utc),
            },
        )

        if rowcount == 0:
            self.repo.rollback()
            raise ConflictError("Cart was modified by another operation, please retry")

        self.repo.commit()

    def _cart_view(self, cart: CartModel) -> Dict[str, Any]:
        items = self.repo.get_cart_items(cart.id)
        totals = compute_totals(items)

        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "items": [
                {
                    "item_id": i.id,
                    "product_id": i.product_id,
                    "quantity": i.quantity,
                    "price": to_money(i.price),
                    "line_total": to_money(i.price * i.quantity),
                }
                for i in items
            ],
            "subtotal": totals.subtotal,
            "tax": totals.tax,
            "shipping": totals.shipping,
            "total": totals.total,
        }


def _validate_quantity(quantity: int) -> None:
    if quantity is None or quantity < 1:
        raise ValidationError("Quantity must be at least 1", fields=["quantity"])
