# storefront/domain/enums.py
import enum


class OrderStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentMethod(str, enum.Enum):
    credit_card = "credit_card"
    paypal = "paypal"
    cash_on_delivery = "cash_on_delivery"


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"


PRODUCT_CATEGORIES = (
    "Cakes",
    "Cookies",
    "Ice Cream",
    "Pastries",
    "Pies",
    "Breads",
    "Desserts",
    "Beverages",
    "Other",
)
