# storefront/repos/product_repo.py
from sqlalchemy import case, func, or_, select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel

SORT_OPTIONS = {
    "price_asc": ProductModel.price.asc(),
    "price_desc": ProductModel.price.desc(),
    "newest": ProductModel.created_at.desc(),
}


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(
        self,
        category: str | None,
        search: str | None,
        sort: str | None,
        offset: int,
        limit: int,
    ) -> tuple[list[ProductModel], int]:
        stmt = select(ProductModel).where(ProductModel.is_available.is_(True))

        if category:
            stmt = stmt.where(ProductModel.category == category)

        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(ProductModel.name).like(pattern),
                    func.lower(ProductModel.description).like(pattern),
                )
            )

        total = self.db.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()

        order_by = SORT_OPTIONS.get(sort or "newest", SORT_OPTIONS["newest"])
        products = self.db.execute(
            stmt.order_by(order_by, ProductModel.id.desc()).offset(offset).limit(limit)
        ).scalars().all()

        return list(products), total

    def get_stock(self, product_id: int) -> int | None:
        return self.db.execute(
            select(ProductModel.stock).where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Atomic decrement-if-sufficient.
        UPDATE products SET stock = stock - q, sales_count = sales_count + q
        WHERE id = :id AND stock >= q
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(
                stock=ProductModel.stock - quantity,
                sales_count=ProductModel.sales_count + quantity,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def restore_stock(self, product_id: int, quantity: int) -> bool:
        #sales_count never goes below zero
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(
                stock=ProductModel.stock + quantity,
                sales_count=case(
                    (ProductModel.sales_count > quantity, ProductModel.sales_count - quantity),
                    else_=0,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
