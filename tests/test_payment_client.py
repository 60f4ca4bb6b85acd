from decimal import Decimal

import pytest
import requests

from storefront.domain.errors import DependencyFailureError, PaymentValidationError
from storefront.services import payment_client as payment_module
from storefront.services.payment_client import (
    PaymentClient,
    SimulatedPaymentClient,
    get_payment_client,
)


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload


@pytest.fixture
def calls(monkeypatch):
    recorded = []
    responses = []

    def fake_post(url, json, headers, timeout):
        recorded.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(payment_module.requests, "post", fake_post)
    return recorded, responses


class TestPaymentClient:
    def test_charge(self, calls):
        recorded, responses = calls
        responses.append(
            FakeResponse(200, {"transaction_id": "TXN_1", "created_at": "2026-10-19T10:00:00+00:00"})
        )

        result = PaymentClient("http://payments:8001/", timeout=1.5).charge(
            "credit_card", Decimal("49.00"), "cart-1-v3"
        )

        assert result.transaction_id == "TXN_1"
        assert result.payment_date.year == 2026
        assert recorded[0]["url"] == "http://payments:8001/charges"
        assert recorded[0]["json"] == {"method": "credit_card", "amount": "49.00", "reference": "cart-1-v3"}
        assert recorded[0]["headers"] == {"Idempotency-Key": "charge-cart-1-v3"}
        assert recorded[0]["timeout"] == 1.5

    def test_refund(self, calls):
        recorded, responses = calls
        responses.append(FakeResponse(200, {"refund_id": "RF_1"}))

        assert PaymentClient("http://payments").refund("TXN_1") == "RF_1"
        assert recorded[0]["headers"] == {"Idempotency-Key": "refund-TXN_1"}

    def test_declined(self, calls):
        _, responses = calls
        responses.append(FakeResponse(402, {"detail": "Card declined"}))

        with pytest.raises(PaymentValidationError, match="Card declined"):
            PaymentClient("http://payments").charge("credit_card", Decimal("1.00"), "ref")

    def test_server_error(self, calls):
        _, responses = calls
        responses.append(FakeResponse(500, {"detail": "boom"}))

        with pytest.raises(DependencyFailureError):
            PaymentClient("http://payments").charge("paypal", Decimal("1.00"), "ref")

    def test_retries_connection_errors(self, calls):
        recorded, responses = calls
        responses.extend(
            [
                requests.ConnectionError("refused"),
                FakeResponse(200, {"refund_id": "RF_2"}),
            ]
        )

        assert PaymentClient("http://payments").refund("TXN_1") == "RF_2"
        assert len(recorded) == 2

    def test_unreachable(self, calls):
        recorded, responses = calls
        responses.extend([requests.Timeout("slow")] * 3)

        with pytest.raises(DependencyFailureError, match="unavailable"):
            PaymentClient("http://payments").refund("TXN_1")

        assert len(recorded) == 3


class TestSimulatedPaymentClient:
    @pytest.mark.parametrize("method, prefix", [("credit_card", "TXN_"), ("paypal", "PP_")])
    def test_transaction_prefix(self, method, prefix):
        result = SimulatedPaymentClient().charge(method, Decimal("10.00"), "ref")

        assert result.transaction_id.startswith(prefix)
        assert result.payment_date.tzinfo is not None

    def test_refund_id(self):
        assert SimulatedPaymentClient().refund("TXN_1").startswith("RF_")

    def test_selected_without_gateway_url(self):
        assert isinstance(get_payment_client(), SimulatedPaymentClient)

    def test_http_client_with_gateway_url(self, monkeypatch):
        monkeypatch.setattr(payment_module, "PAYMENT_SERVICE_URL", "http://payments")

        assert isinstance(get_payment_client(), PaymentClient)
