# storefront/services/payment_client.py
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

import requests
from requests import RequestException

from storefront.domain.errors import DependencyFailureError, PaymentValidationError
from storefront.utils.retry import http_retry
from storefront.utils.settings import PAYMENT_SERVICE_URL, PAYMENT_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

TRANSACTION_PREFIXES = {
    "credit_card": "TXN_",
    "paypal": "PP_",
}


@dataclass(frozen=True)
class ChargeResult:
    transaction_id: str
    payment_date: datetime


class PaymentClient:
    """HTTP client of the payment gateway (charge / refund)."""

    def __init__(self, base_url: str | None = None, timeout: float = PAYMENT_TIMEOUT_SECONDS):
        self.base_url = (base_url or PAYMENT_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    def charge(self, method: str, amount: Decimal, reference: str) -> ChargeResult:
        data = self._call(
            "/charges",
            {"method": method, "amount": str(amount), "reference": reference},
            idempotency_key=f"charge-{reference}",
        )
        return ChargeResult(
            transaction_id=data["transaction_id"],
            payment_date=datetime.fromisoformat(data["created_at"]),
        )

    def refund(self, transaction_id: str) -> str:
        data = self._call(
            "/refunds",
            {"transaction_id": transaction_id},
            idempotency_key=f"refund-{transaction_id}",
        )
        return data["refund_id"]

    def _call(self, path: str, payload: dict, idempotency_key: str) -> dict:
        try:
            resp = self._post(path, payload, idempotency_key)
        except RequestException as e:
            logger.error(f"Payment service call {path} failed: {e}")
            raise DependencyFailureError("Payment service is unavailable, please try again later") from e

        if resp.status_code == 402:
            detail = resp.json().get("detail", "Payment declined")
            raise PaymentValidationError(detail)

        if resp.status_code >= 400:
            logger.error(f"Payment service {path} returned {resp.status_code}: {resp.text}")
            raise DependencyFailureError(f"Payment service error ({resp.status_code})")

        return resp.json()

    @http_retry()
    def _post(self, path: str, payload: dict, idempotency_key: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"PaymentClient POST {url}")

        return requests.post(
            url,
            json=payload,
            headers={"Idempotency-Key": idempotency_key},
            timeout=self.timeout,
        )


class SimulatedPaymentClient:
    """
    In-process stand-in for the gateway. Charges and refunds always succeed
    and return synthetic ids.
    """

    def charge(self, method: str, amount: Decimal, reference: str) -> ChargeResult:
        prefix = TRANSACTION_PREFIXES.get(method, "TX_")
        transaction_id = f"{prefix}{int(time.time() * 1000)}{uuid.uuid4().hex[:6].upper()}"
        logger.info(f"Simulated {method} charge {transaction_id} for {amount} (ref {reference})")
        return ChargeResult(transaction_id=transaction_id, payment_date=datetime.now(timezone.utc))

    def refund(self, transaction_id: str) -> str:
        refund_id = f"RF_{uuid.uuid4().hex[:12].upper()}"
        logger.info(f"Simulated refund {refund_id} of {transaction_id}")
        return refund_id


def get_payment_client() -> PaymentClient | SimulatedPaymentClient:
    if PAYMENT_SERVICE_URL:
        return PaymentClient()
    return SimulatedPaymentClient()
