import os

# must be set before storefront.utils.settings is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["PAYMENT_SERVICE_URL"] = ""
os.environ["SMTP_HOST"] = ""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.deps import get_lock_service, get_notification_service, get_payment_client
from storefront.data.database import get_db, init_db
from storefront.data.models import ProductModel, UserModel
from storefront.domain.schemas import CheckoutIn
from storefront.main import create_app
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.payment_client import SimulatedPaymentClient

ADMIN_ID = 1
USER_ID = 2


class FakeRedis:
    """The part of redis.Redis used by LockService: SET NX EX and the release script."""

    def __init__(self):
        self.store = {}
        self.down = False

    def set(self, name, value, nx=False, ex=None):
        self._check()
        if nx and name in self.store:
            return None
        self.store[name] = value
        return True

    def eval(self, script, numkeys, key, token):
        self._check()
        if self.store.get(key) == token:
            del self.store[key]
            return 1
        return 0

    def _check(self):
        if self.down:
            raise redis.ConnectionError("redis is down")


class FakePaymentClient(SimulatedPaymentClient):
    """Simulated gateway that records calls and can be told to fail."""

    def __init__(self):
        self.charges = []
        self.refunds = []
        self.charge_error = None
        self.refund_error = None

    def charge(self, method, amount, reference):
        if self.charge_error:
            raise self.charge_error
        result = super().charge(method, amount, reference)
        self.charges.append(
            {
                "method": method,
                "amount": amount,
                "reference": reference,
                "transaction_id": result.transaction_id,
            }
        )
        return result

    def refund(self, transaction_id):
        if self.refund_error:
            raise self.refund_error
        refund_id = super().refund(transaction_id)
        self.refunds.append(transaction_id)
        return refund_id


class FakeNotificationService(NotificationService):
    def __init__(self):
        self.sent = []
        self.error = None

    def send(self, template, to, context):
        if self.error:
            raise self.error
        self.sent.append((template, to, context))
        return True

    def templates(self):
        return [t for t, _, _ in self.sent]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def lock_service(fake_redis):
    return LockService(client=fake_redis)


@pytest.fixture
def payment_client():
    return FakePaymentClient()


@pytest.fixture
def notifier():
    return FakeNotificationService()


@pytest.fixture
def cart_service(db):
    return CartService(db)


@pytest.fixture
def checkout_service(db, payment_client, lock_service, notifier):
    return CheckoutService(db, payment_client, lock_service, notifier)


@pytest.fixture
def order_service(db, payment_client, notifier):
    return OrderService(db, payment_client, notifier)


@pytest.fixture
def make_user(db):
    def _make(user_id=USER_ID, name="Alice", email="alice@example.com", is_admin=False):
        db.add(UserModel(id=user_id, name=name, email=email, phone="", is_admin=is_admin))
        db.commit()
        return user_id

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(user_id=ADMIN_ID, name="Admin", email="admin@example.com", is_admin=True)


@pytest.fixture
def make_product(db):
    def _make(
        name="Chocolate Cake",
        price="20.00",
        stock=10,
        category="Cakes",
        description=None,
        is_available=True,
        created_at=None,
    ):
        product = ProductModel(
            name=name,
            description=description or f"Fresh {name.lower()}",
            category=category,
            price=Decimal(price),
            stock=stock,
            sales_count=0,
            is_available=is_available,
            created_at=created_at or datetime.now(timezone.utc),
        )
        db.add(product)
        db.commit()
        return product.id

    return _make


@pytest.fixture
def product_row(db):
    """Fresh read of a product, bypassing the identity map."""

    def _get(product_id):
        db.expire_all()
        return db.get(ProductModel, product_id)

    return _get


@pytest.fixture
def checkout_form():
    def _form(**overrides):
        data = {
            "payment_method": "cash_on_delivery",
            "shipping_address": "1 Sugar Street, Candytown",
            "name": "Alice Baker",
            "email": "alice@example.com",
            "phone": "555-0100",
            "order_notes": "Leave at the door",
            "terms_accepted": True,
        }
        data.update(overrides)
        return CheckoutIn(**data)

    return _form


@pytest.fixture
def card_details():
    return {
        "payment_method": "credit_card",
        "card_number": "4111 1111 1111 1111",
        "cardholder_name": "Alice Baker",
        "expiry_date": "12/99",
        "cvv": "123",
    }


@pytest.fixture
def client(db, lock_service, payment_client, notifier):
    app = create_app()

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_payment_client] = lambda: payment_client
    app.dependency_overrides[get_notification_service] = lambda: notifier

    # no context manager: the lifespan would create tables on the default engine
    return TestClient(app)
