# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.data.models.order import OrderModel
from storefront.notifications.email import get_email_sender
from storefront.notifications.templates import get_template
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Email notifications, fire-and-forget through Celery.
    A failure to publish is logged and never reaches the caller.
    """

    def send(self, template: str, to: str, context: dict) -> bool:
        if not to:
            logger.warning(f"Notification {template} skipped, no recipient")
            return False

        try:
            get_template(template)
            # retry=False: an unreachable broker fails immediately
            send_email_task.apply_async(args=(template, to, context), retry=False)
        except Exception as e:
            logger.warning(f"Notification {template} to {to} not sent: {e}")
            return False

        logger.info(f"Notification {template} queued for {to}")
        return True

    def send_order_confirmation(self, order: OrderModel) -> bool:
        return self.send(
            "order_confirmation",
            order.customer_email,
            {
                "order_id": str(order.id),
                "final_amount": f"{order.final_amount:.2f}",
                "payment_method": order.payment_method,
            },
        )

    def send_order_cancelled(self, order: OrderModel) -> bool:
        return self.send(
            "order_cancellation",
            order.customer_email,
            {"order_id": str(order.id), "payment_status": order.payment_status},
        )

    def send_status_update(self, order: OrderModel, old_status: str) -> bool:
        return self.send(
            "order_status_update",
            order.customer_email,
            {"order_id": str(order.id), "old_status": old_status, "status": order.status},
        )


@celery_app.task(name="storefront.services.notification_service.send_email_task")
def send_email_task(template: str, to: str, context: dict):
    """
    Celery task: renders the template and hands it to the email sender
    (SMTP when configured, log only otherwise).
    """
    content = get_template(template).render(context)
    get_email_sender().send(to, content["subject"], content["body"])

    logger.info(f"[NOTIFICATION] {template} sent to {to}")
    return {"to": to, "template": template, "status": "sent"}
