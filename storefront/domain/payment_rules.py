# storefront/domain/payment_rules.py
from dataclasses import dataclass
from datetime import date

from storefront.domain.errors import PaymentValidationError


@dataclass(frozen=True)
class CardDetails:
    cardholder_name: str
    last4: str


def validate_card(
    card_number: str | None,
    cardholder_name: str | None,
    expiry_date: str | None,
    cvv: str | None,
    today: date | None = None,
) -> CardDetails:
    """
    Simulated card checks: length of number and cvv, expiry not in the past.
    Only the last 4 digits and the cardholder name leave this function.
    """
    if not card_number or not cardholder_name or not expiry_date or not cvv:
        raise PaymentValidationError("Please provide all card details")

    clean_number = "".join(card_number.split())
    if not clean_number.isdigit() or not 13 <= len(clean_number) <= 19:
        raise PaymentValidationError("Invalid card number")

    cvv = cvv.strip()
    if not cvv.isdigit() or not 3 <= len(cvv) <= 4:
        raise PaymentValidationError("Invalid CVV")

    month, year = _parse_expiry(expiry_date)
    today = today or date.today()
    # year and month only, a card is valid through the end of its month
    if (year, month) < (today.year, today.month):
        raise PaymentValidationError("Card has expired")

    return CardDetails(
        cardholder_name=cardholder_name.strip(),
        last4=clean_number[-4:],
    )


def _parse_expiry(expiry_date: str) -> tuple[int, int]:
    parts = expiry_date.strip().split("/")
    if len(parts) != 2 or not all(p.strip().isdigit() for p in parts):
        raise PaymentValidationError("Invalid expiry date, expected MM/YY")

    month_part, year_part = parts[0].strip(), parts[1].strip()
    month, year = int(month_part), int(year_part)
    if not 1 <= month <= 12 or len(year_part) not in (2, 4):
        raise PaymentValidationError("Invalid expiry date, expected MM/YY")

    # MM/YYYY is accepted too, YY means 20YY
    if len(year_part) == 2:
        year += 2000
    return month, year
