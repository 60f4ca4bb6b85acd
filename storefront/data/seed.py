# storefront/data/seed.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.database import SessionLocal, init_db
from storefront.data.models import ProductModel, UserModel

ADMIN = {"id": 1, "name": "Admin", "email": "admin@dessert-shop.local", "phone": "", "is_admin": True}

PRODUCTS = [
    ("Chocolate Cake", "Rich three-layer chocolate cake", "Cakes", "20.00", 10),
    ("Cheesecake", "New York style cheesecake", "Cakes", "24.50", 6),
    ("Oatmeal Cookies", "Box of 12 oatmeal raisin cookies", "Cookies", "7.99", 40),
    ("Vanilla Ice Cream", "Half a litre of vanilla bean ice cream", "Ice Cream", "6.50", 25),
    ("Apple Pie", "Classic lattice apple pie", "Pies", "15.00", 8),
    ("Croissant", "Butter croissant", "Pastries", "2.75", 60),
]


def seed(db: Session | None = None) -> bool:
    own_session = db is None
    db = db or SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return False

        if not db.get(UserModel, ADMIN["id"]):
            db.add(UserModel(**ADMIN))

        now = datetime.now(timezone.utc)
        for name, description, category, price, stock in PRODUCTS:
            db.add(
                ProductModel(
                    name=name,
                    description=description,
                    category=category,
                    price=Decimal(price),
                    stock=stock,
                    sales_count=0,
                    is_available=True,
                    created_at=now,
                )
            )
        db.commit()
        return True
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    init_db()
    seed()
