from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Text, JSON
from sqlalchemy.orm import relationship

from storefront.data.database import Base

class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    shipping = Column(Numeric(10, 2), nullable=False)
    final_amount = Column(Numeric(10, 2), nullable=False)

    shipping_address = Column(Text, nullable=False)
    # customer snapshot, independent of the users row
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)
    order_notes = Column(Text, nullable=False)

    status = Column(String(20), nullable=False, index=True)  # pending, processing, shipped, delivered, cancelled
    payment_method = Column(String(20), nullable=False)
    payment_status = Column(String(20), nullable=False)
    payment_details = Column(JSON, nullable=False)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
