# storefront/api/routers/admin.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import (
    RequestContext,
    get_notification_service,
    get_payment_client,
    require_admin,
)
from storefront.data.database import get_db
from storefront.domain.schemas import OrderOut, OrderStatusIn
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/admin", tags=["admin"])


def get_service(
    db: Session = Depends(get_db),
    payment_client=Depends(get_payment_client),
    notification_service=Depends(get_notification_service),
) -> OrderService:
    return OrderService(db, payment_client, notification_service)


@router.get("/orders", response_model=List[OrderOut])
def list_orders(
    status: str | None = None,
    customer: str | None = None,
    date_filter: str | None = None,
    ctx: RequestContext = Depends(require_admin),
    svc: OrderService = Depends(get_service),
):
    return svc.admin_list_orders(status=status, customer=customer, date_filter=date_filter)


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    ctx: RequestContext = Depends(require_admin),
    svc: OrderService = Depends(get_service),
):
    return svc.get_order(order_id)


@router.post("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    ctx: RequestContext = Depends(require_admin),
    svc: OrderService = Depends(get_service),
):
    return svc.update_order_status(order_id, payload.status)


@router.post("/orders/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    ctx: RequestContext = Depends(require_admin),
    svc: OrderService = Depends(get_service),
):
    return svc.cancel_order(order_id)
