# storefront/repos/order_repo.py
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_for_update(self, order_id: int) -> OrderModel | None:
        # FOR UPDATE on postgres, sqlite ignores it
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id).with_for_update()
        ).scalar_one_or_none()

    def list_user_orders(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )

    def list_orders(
        self,
        status: str | None = None,
        customer: str | None = None,
        since: datetime | None = None,
    ) -> list[OrderModel]:
        stmt = select(OrderModel)

        if status:
            stmt = stmt.where(OrderModel.status == status)

        if customer:
            pattern = f"%{customer.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(OrderModel.customer_name).like(pattern),
                    func.lower(OrderModel.customer_email).like(pattern),
                )
            )

        if since is not None:
            stmt = stmt.where(OrderModel.created_at >= since)

        return list(
            self.db.execute(
                stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )

    def update_order_version(self, order_id: int, old_version: int, new_data: Dict[str, Any]) -> int:
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.version == old_version)
            .values(version=old_version + 1, **new_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
