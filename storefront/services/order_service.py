# storefront/services/order_service.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from storefront.domain.errors import (
    ConflictError,
    DependencyFailureError,
    InvalidTransitionError,
    NotFoundError,
    StorefrontError,
    ValidationError,
)
from storefront.domain.lifecycle import check_transition, parse_status
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DATE_FILTERS = ("today", "week", "month", "year")


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "items": [
            {
                "product_id": i.product_id,
                "product_name": i.product_name,
                "quantity": i.quantity,
                "price": i.price,
            }
            for i in order.items
        ],
        "subtotal": order.subtotal,
        "tax": order.tax,
        "shipping": order.shipping,
        "final_amount": order.final_amount,
        "shipping_address": order.shipping_address,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "order_notes": order.order_notes,
        "status": order.status,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "payment_details": dict(order.payment_details or {}),
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


class OrderService:
    """
    Order lifecycle after checkout.
    pending -> processing -> shipped -> delivered, pending -> cancelled
    """

    def __init__(self, db: Session, payment_client, notification_service: NotificationService):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.payment_client = payment_client
        self.notification_service = notification_service

    #query
    def get_order(self, order_id: int, user_id: int | None = None) -> Dict[str, Any]:
        """
        Use Case: single order. With user_id only the owner sees it,
        without it (admin) any order.
        """
        order = self.repo.get_order(order_id)

        if not order or (user_id is not None and order.user_id != user_id):
            raise NotFoundError("Order not found")

        return order_to_dict(order)

    def list_orders(self, user_id: int) -> list[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_user_orders(user_id)]

    def admin_list_orders(
        self,
        status: str | None = None,
        customer: str | None = None,
        date_filter: str | None = None,
        now: datetime | None = None,
    ) -> list[Dict[str, Any]]:
        if status:
            parse_status(status)

        since = _date_filter_start(date_filter, now or datetime.now(timezone.utc))
        orders = self.repo.list_orders(
            status=status or None,
            customer=customer.strip() if customer else None,
            since=since,
        )
        return [order_to_dict(o) for o in orders]

    #commands
    def cancel_order(self, order_id: int, user_id: int | None = None) -> Dict[str, Any]:
        """
        Use Case: cancellation, only from pending.

        1. refund a completed card payment (failure is logged, does not block)
        2. give the stock back, sales_count floored at 0
        3. status cancelled
        """
        try:
            order = self._get_for_update(order_id, user_id)

            if order.status != OrderStatus.pending.value:
                raise InvalidTransitionError(order.status, OrderStatus.cancelled.value)

            now = datetime.now(timezone.utc)
            payment_status, payment_details = self._refund_if_charged(order, now)

            for item in order.items:
                if not self.products.restore_stock(item.product_id, item.quantity):
                    logger.warning(
                        f"Product {item.product_id} no longer exists, stock of order {order_id} not restored"
                    )

            rowcount = self.repo.update_order_version(
                order_id=order.id,
                old_version=order.version,
                new_data={
                    "status": OrderStatus.cancelled.value,
                    "payment_status": payment_status,
                    "payment_details": payment_details,
                    "updated_at": now,
                },
            )
            if rowcount == 0:
                raise ConflictError("Order was modified by another operation, please retry")

            self.repo.commit()
        except StorefrontError:
            self.repo.rollback()
            raise
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Database error while cancelling order {order_id}: {e}")
            raise DependencyFailureError("Could not cancel the order, please try again") from e

        logger.info(f"Order {order_id} cancelled (payment {payment_status})")
        self._notify(self.notification_service.send_order_cancelled, order)

        return order_to_dict(order)

    def update_order_status(self, order_id: int, status: str) -> Dict[str, Any]:
        """
        Use Case: admin status change. cancelled goes through cancel_order,
        everything else has to be the next step of the happy path.
        """
        target = parse_status(status)

        if target is OrderStatus.cancelled:
            return self.cancel_order(order_id)

        try:
            order = self._get_for_update(order_id, None)
            old_status = order.status
            check_transition(old_status, target.value)

            rowcount = self.repo.update_order_version(
                order_id=order.id,
                old_version=order.version,
                new_data={
                    "status": target.value,
                    "updated_at": datetime.now(timezone.utc),
                },
            )
            if rowcount == 0:
                raise ConflictError("Order was modified by another operation, please retry")

            self.repo.commit()
        except StorefrontError:
            self.repo.rollback()
            raise
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Database error while updating order {order_id}: {e}")
            raise DependencyFailureError("Could not update the order, please try again") from e

        logger.info(f"Order {order_id} status changed from {old_status} to {target.value}")
        self._notify(lambda o: self.notification_service.send_status_update(o, old_status), order)

        return order_to_dict(order)

    def _get_for_update(self, order_id: int, user_id: int | None) -> OrderModel:
        order = self.repo.get_order_for_update(order_id)
        if not order or (user_id is not None and order.user_id != user_id):
            raise NotFoundError("Order not found")
        return order

    def _refund_if_charged(self, order: OrderModel, now: datetime) -> tuple[str, dict]:
        payment_status = order.payment_status
        payment_details = dict(order.payment_details or {})

        if not (
            order.payment_method == PaymentMethod.credit_card.value
            and payment_status == PaymentStatus.completed.value
        ):
            return payment_status, payment_details

        transaction_id = payment_details.get("transaction_id")
        if not transaction_id:
            logger.warning(f"Order {order.id} has no transaction id, refund skipped")
            return payment_status, payment_details

        try:
            refund_id = self.payment_client.refund(transaction_id)
        except StorefrontError as e:
            # cancellation goes on, payment stays completed
            logger.error(f"Refund of order {order.id} ({transaction_id}) failed: {e}")
            return payment_status, payment_details

        payment_details["refund_id"] = refund_id
        payment_details["refund_date"] = now.isoformat()
        logger.info(f"Order {order.id} refunded ({refund_id})")
        return PaymentStatus.refunded.value, payment_details

    def _notify(self, send, order: OrderModel) -> None:
        try:
            send(order)
        except Exception as e:
            logger.warning(f"Notification for order {order.id} failed: {e}")


def _date_filter_start(date_filter: str | None, now: datetime) -> datetime | None:
    if not date_filter:
        return None

    if date_filter == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_filter == "week":
        return now - timedelta(days=7)
    if date_filter == "month":
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if date_filter == "year":
        return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)

    raise ValidationError(
        f"Invalid date filter: {date_filter}, expected one of {', '.join(DATE_FILTERS)}",
        fields=["date_filter"],
    )
