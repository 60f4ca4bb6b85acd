# storefront/domain/lifecycle.py
from storefront.domain.enums import OrderStatus
from storefront.domain.errors import InvalidStatusError, InvalidTransitionError

# forward-only happy path, cancellation only from pending
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.pending: frozenset({OrderStatus.processing, OrderStatus.cancelled}),
    OrderStatus.processing: frozenset({OrderStatus.shipped}),
    OrderStatus.shipped: frozenset({OrderStatus.delivered}),
    OrderStatus.delivered: frozenset(),
    OrderStatus.cancelled: frozenset(),
}

TERMINAL_STATUSES = frozenset({OrderStatus.delivered, OrderStatus.cancelled})


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatusError(value) from None


def check_transition(current: str, target: str) -> OrderStatus:
    """Returns the parsed target status or raises if the move is not allowed."""
    target_status = parse_status(target)
    current_status = OrderStatus(current)

    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidTransitionError(current_status.value, target_status.value)

    return target_status
