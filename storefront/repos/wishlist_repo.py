# storefront/repos/wishlist_repo.py
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.wishlist_item import WishlistItemModel


class WishlistRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_products(self, user_id: int) -> list[ProductModel]:
        # inner join: products deleted from the catalog drop out
        return list(
            self.db.execute(
                select(ProductModel)
                .join(WishlistItemModel, WishlistItemModel.product_id == ProductModel.id)
                .where(WishlistItemModel.user_id == user_id)
                .order_by(WishlistItemModel.id)
            ).scalars().all()
        )

    def get_item(self, user_id: int, product_id: int) -> WishlistItemModel | None:
        return self.db.execute(
            select(WishlistItemModel).where(
                WishlistItemModel.user_id == user_id,
                WishlistItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def add_item(self, item: WishlistItemModel) -> None:
        self.db.add(item)
        self.db.flush()

    def delete_item(self, item: WishlistItemModel) -> None:
        self.db.delete(item)

    def delete_items(self, user_id: int) -> int:
        result = self.db.execute(
            delete(WishlistItemModel)
            .where(WishlistItemModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
