"""Order status change notifications.

`order_status_changed` is sent with `order` and `previous_status` (None for a
newly created order) once the surrounding transaction has committed. It is
sent robustly: a failing receiver is logged by Django on the `django.dispatch`
logger and never reaches the caller.
"""

from django.db import transaction
from django.dispatch import Signal

order_status_changed = Signal()


def emit_status_changed(order, previous_status):
    """Queue the signal for after commit."""
    transaction.on_commit(
        lambda: order_status_changed.send_robust(
            sender=order.__class__, order=order, previous_status=previous_status
        )
    )
