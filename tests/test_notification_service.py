import smtplib
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from storefront.data.models import OrderModel
from storefront.notifications.email import LoggingEmailSender, SmtpEmailSender, get_email_sender
from storefront.notifications.templates import TEMPLATE_REGISTRY, get_template
from storefront.services import notification_service as notification_module
from storefront.services.notification_service import NotificationService, send_email_task


class RecordingSender:
    def __init__(self):
        self.outbox = []

    def send(self, to, subject, body):
        self.outbox.append({"to": to, "subject": subject, "body": body})


@pytest.fixture
def outbox(monkeypatch):
    sender = RecordingSender()
    monkeypatch.setattr(notification_module, "get_email_sender", lambda: sender)
    return sender.outbox


@pytest.fixture
def order():
    now = datetime.now(timezone.utc)
    return OrderModel(
        id=17,
        user_id=2,
        final_amount=Decimal("49.00"),
        customer_email="alice@example.com",
        status="shipped",
        payment_method="credit_card",
        payment_status="refunded",
        created_at=now,
        updated_at=now,
    )


class TestNotificationService:
    def test_order_confirmation_is_delivered(self, outbox, order):
        assert NotificationService().send_order_confirmation(order) is True

        assert len(outbox) == 1
        mail = outbox[0]
        assert mail["to"] == "alice@example.com"
        assert mail["subject"] == "Order Confirmation - Dessert Shop"
        assert "Order ID: 17" in mail["body"]
        assert "$49.00" in mail["body"]
        assert "Credit Card" in mail["body"]

    def test_cancellation_mentions_refund(self, outbox, order):
        NotificationService().send_order_cancelled(order)

        assert outbox[0]["subject"] == "Order #17 Cancelled"
        assert "refunded" in outbox[0]["body"]

    def test_status_update(self, outbox, order):
        NotificationService().send_status_update(order, "processing")

        assert outbox[0]["subject"] == "Order #17 is now shipped"
        assert "from processing to shipped" in outbox[0]["body"]

    def test_no_recipient(self, outbox, order):
        order.customer_email = ""

        assert NotificationService().send_order_confirmation(order) is False
        assert outbox == []

    def test_broker_failure_is_swallowed(self, monkeypatch, outbox, order):
        def broken(*args, **kwargs):
            raise ConnectionError("broker unreachable")

        monkeypatch.setattr(send_email_task, "apply_async", broken)

        assert NotificationService().send_order_confirmation(order) is False
        assert outbox == []

    def test_unknown_template(self, outbox):
        assert NotificationService().send("birthday_card", "alice@example.com", {}) is False


class TestSendEmailTask:
    def test_runs_directly(self, outbox):
        result = send_email_task.run("order_cancellation", "bob@example.com", {"order_id": "3"})

        assert result == {"to": "bob@example.com", "template": "order_cancellation", "status": "sent"}
        assert outbox[0]["to"] == "bob@example.com"


class TestTemplates:
    def test_registry(self):
        assert set(TEMPLATE_REGISTRY) == {"order_confirmation", "order_cancellation", "order_status_update"}

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_template("birthday_card")

    def test_missing_context_keys(self):
        rendered = get_template("order_confirmation").render({})

        assert "Order ID: N/A" in rendered["body"]


class TestEmailSender:
    def test_logging_sender_without_smtp(self):
        assert isinstance(get_email_sender(), LoggingEmailSender)

    def test_smtp_sender_with_host(self, monkeypatch):
        from storefront.notifications import email as email_module

        monkeypatch.setattr(email_module, "SMTP_HOST", "smtp.example.com")

        assert isinstance(email_module.get_email_sender(), SmtpEmailSender)

    def test_smtp_sender_retries_dropped_connection(self, monkeypatch):
        from storefront.notifications import email as email_module

        attempts = []
        delivered = []

        class FakeSMTP:
            def __init__(self, host, port, timeout):
                attempts.append((host, port))
                if len(attempts) == 1:
                    raise smtplib.SMTPServerDisconnected("connection dropped")

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

            def starttls(self):
                pass

            def login(self, user, password):
                pass

            def send_message(self, msg):
                delivered.append(msg)

        monkeypatch.setattr(email_module.smtplib, "SMTP", FakeSMTP)

        SmtpEmailSender(host="smtp.example.com", port=587, user="", sender="shop@example.com").send(
            "alice@example.com", "Hello", "Body"
        )

        assert attempts == [("smtp.example.com", 587)] * 2
        assert delivered[0]["To"] == "alice@example.com"
        assert delivered[0]["Subject"] == "Hello"
