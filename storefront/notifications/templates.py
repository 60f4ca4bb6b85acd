"""Email templates for order notifications.

Each template renders a ``{"subject": ..., "body": ...}`` dict from a plain
context dict (strings only, the context travels through the task queue).
"""


class OrderConfirmationTemplate:
    name = "order_confirmation"

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        total = context.get("final_amount", "0.00")
        method = context.get("payment_method", "").replace("_", " ").title()
        return {
            "subject": "Order Confirmation - Dessert Shop",
            "body": (
                "Thank you for your order!\n\n"
                f"Order ID: {order_id}\n"
                f"Total Amount: ${total}\n"
                f"Payment Method: {method}\n\n"
                "We'll notify you when your order ships."
            ),
        }


class OrderCancellationTemplate:
    name = "order_cancellation"

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        payment_status = context.get("payment_status", "")
        refund_line = (
            "Your payment has been refunded.\n\n"
            if payment_status == "refunded"
            else ""
        )
        return {
            "subject": f"Order #{order_id} Cancelled",
            "body": (
                f"Your order #{order_id} has been cancelled.\n\n"
                f"{refund_line}"
                "If you have questions, please contact our support team."
            ),
        }


class OrderStatusUpdateTemplate:
    name = "order_status_update"

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        status = context.get("status", "")
        return {
            "subject": f"Order #{order_id} is now {status}",
            "body": (
                f"The status of your order #{order_id} changed "
                f"from {context.get('old_status', '')} to {status}.\n\n"
                "Thank you for shopping with us!"
            ),
        }


TEMPLATE_REGISTRY: dict[str, type] = {
    OrderConfirmationTemplate.name: OrderConfirmationTemplate,
    OrderCancellationTemplate.name: OrderCancellationTemplate,
    OrderStatusUpdateTemplate.name: OrderStatusUpdateTemplate,
}


def get_template(name: str):
    """Look up a template class by name."""
    template_cls = TEMPLATE_REGISTRY.get(name)
    if template_cls is None:
        raise ValueError(f"No template registered under name: {name}")
    return template_cls
