# storefront/services/checkout_service.py
from datetime import datetime, timezone
from typing import Any, Dict

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.product import ProductModel
from storefront.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from storefront.domain.errors import (
    ConflictError,
    DependencyFailureError,
    EmptyCartError,
    InsufficientStockError,
    ProductNotFoundError,
    StorefrontError,
    ValidationError,
)
from storefront.domain.payment_rules import validate_card
from storefront.domain.pricing import Totals, compute_totals
from storefront.domain.schemas import CheckoutIn
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import order_to_dict
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_TEXT_FIELDS = ("shipping_address", "name", "email")


def new_order(
    user_id: int,
    items: list[CartItemModel],
    products: dict[int, ProductModel],
    totals: Totals,
    payload: CheckoutIn,
    method: PaymentMethod,
    payment_status: PaymentStatus,
    payment_details: dict,
    now: datetime,
) -> OrderModel:
    """
    Builds a pending order with every derived field set: frozen item prices,
    totals, customer snapshot and timestamps.
    """
    return OrderModel(
        user_id=user_id,
        items=[
            OrderItemModel(
                product_id=i.product_id,
                product_name=products[i.product_id].name,
                quantity=i.quantity,
                price=i.price,
            )
            for i in items
        ],
        subtotal=totals.subtotal,
        tax=totals.tax,
        shipping=totals.shipping,
        final_amount=totals.subtotal + totals.tax + totals.shipping,
        shipping_address=payload.shipping_address.strip(),
        customer_name=payload.name.strip(),
        customer_email=payload.email.strip(),
        customer_phone=(payload.phone or "").strip(),
        order_notes=(payload.order_notes or "").strip(),
        status=OrderStatus.pending.value,
        payment_method=method.value,
        payment_status=payment_status.value,
        payment_details=payment_details,
        version=1,
        created_at=now,
        updated_at=now,
    )


class CheckoutService:
    """
    Use Case: cart -> order.

    1. per-user checkout lock (redis)
    2. cart not empty, stock re-validated for every line
    3. totals recomputed, never taken from the client
    4. required fields, payment simulation per method
    5. one transaction: order insert, atomic stock decrement, cart emptied
    6. confirmation email, best effort
    """

    def __init__(
        self,
        db: Session,
        payment_client,
        lock_service: LockService,
        notification_service: NotificationService,
    ):
        self.db = db
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.payment_client = payment_client
        self.lock_service = lock_service
        self.notification_service = notification_service

    def checkout(self, user_id: int, payload: CheckoutIn) -> Dict[str, Any]:
        key = self.lock_service.checkout_key(user_id)
        token = self.lock_service.new_token()

        try:
            locked = self.lock_service.acquire(key, token, CHECKOUT_LOCK_TTL_SECONDS)
        except RedisError as e:
            logger.error(f"Checkout lock for user {user_id} unavailable: {e}")
            raise DependencyFailureError("Checkout is temporarily unavailable, please try again later") from e

        if not locked:
            raise ConflictError("Checkout already in progress for this cart")

        try:
            order = self._place_order(user_id, payload, token)
        finally:
            self._release_lock(key, token)

        logger.info(
            f"Order {order.id} placed by user {user_id}: {order.final_amount} "
            f"via {order.payment_method} (payment {order.payment_status})"
        )

        try:
            self.notification_service.send_order_confirmation(order)
        except Exception as e:
            logger.warning(f"Order confirmation for order {order.id} failed: {e}")

        return order_to_dict(order)

    def _place_order(self, user_id: int, payload: CheckoutIn, attempt: str) -> OrderModel:
        cart = self.carts.get_cart_by_user(user_id)
        items = self.carts.get_cart_items(cart.id) if cart else []
        if not items:
            raise EmptyCartError()

        cart_id, cart_version = cart.id, cart.version

        #second stock check, the one at add time may be stale
        products: dict[int, ProductModel] = {}
        for item in items:
            product = self.products.get_product(item.product_id)
            if not product:
                raise ProductNotFoundError(item.product_id)
            if product.stock < item.quantity:
                raise InsufficientStockError(product.name, product.stock, item.quantity)
            products[item.product_id] = product

        totals = compute_totals(items)
        method = self._validate_fields(payload)

        # one key per attempt: a rolled back attempt leaves the cart version as it was
        reference = f"cart-{cart_id}-v{cart_version}-{attempt}"
        payment_status, payment_details = self._process_payment(method, payload, totals.total, reference)

        order = new_order(
            user_id=user_id,
            items=items,
            products=products,
            totals=totals,
            payload=payload,
            method=method,
            payment_status=payment_status,
            payment_details=payment_details,
            now=datetime.now(timezone.utc),
        )

        try:
            self.orders.add_order(order)

            # stock goes down only together with the order row
            for item in items:
                if not self.products.decrement_stock(item.product_id, item.quantity):
                    product = products[item.product_id]
                    available = self.products.get_stock(item.product_id)
                    if available is None:
                        raise ProductNotFoundError(item.product_id, product.name)
                    raise InsufficientStockError(product.name, available, item.quantity)

            self.carts.delete_cart_items(cart_id)
            rowcount = self.carts.update_cart_version(
                cart_id=cart_id,
                old_version=cart_version,
                new_data={"version": cart_version + 1, "updated_at": order.created_at},
            )
            if rowcount == 0:
                raise ConflictError("Cart was modified during checkout, please review it and retry")

            self.db.commit()
        except StorefrontError:
            self.db.rollback()
            self._refund_quietly(payment_details)
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during checkout of cart {cart_id}: {e}")
            self._refund_quietly(payment_details)
            raise DependencyFailureError("Could not place the order, please try again") from e

        return order

    def _validate_fields(self, payload: CheckoutIn) -> PaymentMethod:
        missing = []
        if not payload.payment_method:
            missing.append("payment_method")
        for field in REQUIRED_TEXT_FIELDS:
            value = getattr(payload, field)
            if not value or not value.strip():
                missing.append(field)
        if not payload.terms_accepted:
            missing.append("terms_accepted")

        if missing:
            raise ValidationError(
                f"Please fill in all required fields and accept terms: {', '.join(missing)}",
                fields=missing,
            )

        if "@" not in payload.email:
            raise ValidationError("Invalid email address", fields=["email"])

        try:
            return PaymentMethod(payload.payment_method)
        except ValueError:
            raise ValidationError(
                f"Unsupported payment method: {payload.payment_method}",
                fields=["payment_method"],
            ) from None

    def _process_payment(
        self,
        method: PaymentMethod,
        payload: CheckoutIn,
        amount,
        reference: str,
    ) -> tuple[PaymentStatus, dict]:
        if method is PaymentMethod.credit_card:
            card = validate_card(
                payload.card_number,
                payload.cardholder_name,
                payload.expiry_date,
                payload.cvv,
            )
            charge = self.payment_client.charge(method.value, amount, reference)
            # never the full number or the cvv
            return PaymentStatus.completed, {
                "transaction_id": charge.transaction_id,
                "payment_date": charge.payment_date.isoformat(),
                "card_last4": card.last4,
                "cardholder_name": card.cardholder_name,
                "method": "Credit Card",
            }

        if method is PaymentMethod.paypal:
            charge = self.payment_client.charge(method.value, amount, reference)
            return PaymentStatus.completed, {
                "transaction_id": charge.transaction_id,
                "payment_date": charge.payment_date.isoformat(),
                "method": "PayPal",
            }

        return PaymentStatus.pending, {"method": "Cash on Delivery"}

    def _refund_quietly(self, payment_details: dict) -> None:
        transaction_id = payment_details.get("transaction_id")
        if not transaction_id:
            return

        try:
            self.payment_client.refund(transaction_id)
            logger.info(f"Charge {transaction_id} refunded after failed checkout")
        except StorefrontError as e:
            logger.error(f"Refund of {transaction_id} after failed checkout failed: {e}")

    def _release_lock(self, key: str, token: str) -> None:
        try:
            self.lock_service.release(key, token)
        except RedisError as e:
            # the key expires on its own
            logger.warning(f"Could not release {key}: {e}")
