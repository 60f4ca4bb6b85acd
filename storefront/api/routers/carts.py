#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import RequestContext, get_request_context
from storefront.data.database import get_db
from storefront.domain.schemas import CartOut, ItemIn, QuantityIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("/", response_model=CartOut)
def get_cart(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return CartService(db).get_cart(ctx.user_id)


@router.post("/items", response_model=CartOut)
def add_to_cart(
    payload: ItemIn,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return CartService(db).add_to_cart(ctx.user_id, payload.product_id, payload.quantity)


@router.patch("/items/{item_id}", response_model=CartOut)
def update_cart_item(
    item_id: int,
    payload: QuantityIn,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return CartService(db).update_cart_item(ctx.user_id, item_id, payload.quantity)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_from_cart(
    item_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return CartService(db).remove_from_cart(ctx.user_id, item_id)


@router.delete("/products/{product_id}", response_model=CartOut)
def remove_product_from_cart(
    product_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return CartService(db).remove_product_from_cart(ctx.user_id, product_id)


@router.delete("/", response_model=CartOut)
def clear_cart(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return CartService(db).clear_cart(ctx.user_id)
