#storefront/data/models/wishlist_item.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint

from storefront.data.database import Base


class WishlistItemModel(Base):
    __tablename__ = "wishlist_items"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # reference only, like cart items; entries of deleted products are not listed
    product_id = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="u_wishlist_user_product"),
    )
