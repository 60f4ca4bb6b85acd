# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import (
    RequestContext,
    get_lock_service,
    get_notification_service,
    get_payment_client,
    get_request_context,
)
from storefront.data.database import get_db
from storefront.domain.schemas import CheckoutIn, OrderOut
from storefront.services.checkout_service import CheckoutService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/checkout", response_model=OrderOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    payment_client=Depends(get_payment_client),
    lock_service=Depends(get_lock_service),
    notification_service=Depends(get_notification_service),
):
    """
    Places an order from the caller's cart.
    Confirmation email goes out asynchronously.
    """
    svc = CheckoutService(db, payment_client, lock_service, notification_service)
    return svc.checkout(ctx.user_id, payload)


@router.get("/", response_model=List[OrderOut])
def list_orders(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    payment_client=Depends(get_payment_client),
    notification_service=Depends(get_notification_service),
):
    svc = OrderService(db, payment_client, notification_service)
    return svc.list_orders(ctx.user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    payment_client=Depends(get_payment_client),
    notification_service=Depends(get_notification_service),
):
    svc = OrderService(db, payment_client, notification_service)
    return svc.get_order(order_id, ctx.user_id)


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    payment_client=Depends(get_payment_client),
    notification_service=Depends(get_notification_service),
):
    """Cancels the caller's own pending order."""
    svc = OrderService(db, payment_client, notification_service)
    return svc.cancel_order(order_id, ctx.user_id)
