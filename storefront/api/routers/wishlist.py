# storefront/api/routers/wishlist.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import RequestContext, get_request_context
from storefront.data.database import get_db
from storefront.domain.schemas import WishlistOut, WishlistToggleOut
from storefront.services.wishlist_service import WishlistService

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


@router.get("/", response_model=WishlistOut)
def get_wishlist(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return WishlistService(db).get_wishlist(ctx.user_id)


@router.post("/{product_id}", response_model=WishlistOut)
def add_to_wishlist(
    product_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return WishlistService(db).add_to_wishlist(ctx.user_id, product_id)


@router.post("/{product_id}/toggle", response_model=WishlistToggleOut)
def toggle_wishlist(
    product_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Adds the product when absent, removes it when present."""
    return WishlistService(db).toggle_wishlist(ctx.user_id, product_id)


@router.delete("/{product_id}", response_model=WishlistOut)
def remove_from_wishlist(
    product_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return WishlistService(db).remove_from_wishlist(ctx.user_id, product_id)


@router.delete("/", response_model=WishlistOut)
def clear_wishlist(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return WishlistService(db).clear_wishlist(ctx.user_id)
