# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List
from decimal import Decimal
from datetime import datetime


class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")
    quantity: int = Field(1, description="Quantity, at least 1")


class QuantityIn(BaseModel):
    """Schema for changing the quantity of a cart line."""

    quantity: int


class CartItemOut(BaseModel):
    item_id: int
    product_id: int
    quantity: int
    price: Decimal
    line_total: Decimal


class CartOut(BaseModel):
    """Schema for the cart (response)."""

    cart_id: int
    user_id: int
    items: List[CartItemOut]
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


class CheckoutIn(BaseModel):
    """
    Checkout form. Fields are optional here, the checkout service reports
    all missing ones in a single error.
    """

    payment_method: str | None = None
    shipping_address: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    order_notes: str | None = None
    terms_accepted: bool = False

    card_number: str | None = None
    cardholder_name: str | None = None
    expiry_date: str | None = None
    cvv: str | None = None


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    price: Decimal


class OrderOut(BaseModel):
    """Schema for an order (response)."""

    id: int
    user_id: int
    items: List[OrderItemOut]
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    final_amount: Decimal
    shipping_address: str
    customer_name: str
    customer_email: str
    customer_phone: str
    order_notes: str
    status: str
    payment_method: str
    payment_status: str
    payment_details: Dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderStatusIn(BaseModel):
    status: str


class ProductCreate(BaseModel):
    """Schema for creating a product (admin)."""

    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    category: str | None = None
    stock: int | None = None
    is_available: bool = True


class ProductUpdate(BaseModel):
    """Allow-list of product fields an admin may change."""

    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    category: str | None = None
    stock: int | None = None
    is_available: bool | None = None


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    category: str
    price: Decimal
    stock: int
    sales_count: int
    is_available: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductPageOut(BaseModel):
    products: List[ProductOut]
    current_page: int
    total_pages: int
    total_products: int


class UserCreate(BaseModel):
    """Schema for creating a user."""

    id: int = Field(..., gt=0, description="User ID (must be > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="User name")
    email: str = ""
    phone: str = ""
    is_admin: bool = False


class UserRead(BaseModel):
    """Schema for a user (response)."""

    id: int
    name: str
    email: str
    phone: str
    is_admin: bool

    model_config = ConfigDict(from_attributes=True)


class WishlistOut(BaseModel):
    """Schema for a user's wishlist (response)."""

    user_id: int
    products: List[ProductOut]


class WishlistToggleOut(WishlistOut):
    in_wishlist: bool
