# storefront/payment_gateway/main.py
import time
import uuid
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel

from storefront.services.payment_client import TRANSACTION_PREFIXES

app = FastAPI(title="Payment Gateway (dev mock)")


class ChargeIn(BaseModel):
    method: str
    amount: str
    reference: str


class RefundIn(BaseModel):
    transaction_id: str


#idempotency key -> response, in memory
CHARGES: dict[str, dict] = {}
REFUNDS: dict[str, dict] = {}


@app.post("/charges")
def create_charge(payload: ChargeIn, idempotency_key: str = Header(...)):
    if idempotency_key in CHARGES:
        return CHARGES[idempotency_key]

    if payload.method not in TRANSACTION_PREFIXES:
        raise HTTPException(status_code=402, detail=f"Unsupported payment method: {payload.method}")

    try:
        amount = Decimal(payload.amount)
    except InvalidOperation:
        raise HTTPException(status_code=422, detail="Invalid amount")

    if amount <= 0:
        raise HTTPException(status_code=402, detail="Amount must be greater than 0")

    prefix = TRANSACTION_PREFIXES[payload.method]
    charge = {
        "transaction_id": f"{prefix}{int(time.time() * 1000)}{uuid.uuid4().hex[:6].upper()}",
        "amount": str(amount),
        "reference": payload.reference,
        "status": "succeeded",
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    CHARGES[idempotency_key] = charge
    return charge


@app.post("/refunds")
def create_refund(payload: RefundIn, idempotency_key: str = Header(...)):
    if idempotency_key in REFUNDS:
        return REFUNDS[idempotency_key]

    if not any(c["transaction_id"] == payload.transaction_id for c in CHARGES.values()):
        raise HTTPException(status_code=404, detail="Transaction not found")

    refund = {
        "refund_id": f"RF_{uuid.uuid4().hex[:12].upper()}",
        "transaction_id": payload.transaction_id,
        "status": "succeeded",
    }
    REFUNDS[idempotency_key] = refund
    return refund
