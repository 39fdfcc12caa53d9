import logging

from django.dispatch import receiver

from .signals import order_status_changed

logger = logging.getLogger("orders.events")


@receiver(order_status_changed, dispatch_uid="orders.log_status_change")
def log_status_change(sender, order, previous_status, **kwargs):
    if previous_status is None:
        logger.info("Order %s created with status %s", order.pk, order.status)
    else:
        logger.info("Order %s status changed: %s -> %s", order.pk, previous_status, order.status)
