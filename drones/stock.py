"""Stock ledger for drones.

Every write to `Drone.stock_quantity` goes through this module. Each write is a
single conditional UPDATE built from `F()` expressions, so the database applies
the read-modify-write atomically and concurrent reservations for the same drone
cannot drive the count below zero.
"""

import logging

from django.db import transaction
from django.db.models import Case, F, Value, When
from django.utils import timezone

from common.exceptions import InsufficientStock, NotFound, Unavailable
from .models import Drone

logger = logging.getLogger(__name__)


def _check_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValueError(f"Quantity must be a positive integer, got {quantity!r}.")


def _explain_rejected_reservation(drone_id, quantity: int):
    """Return the error describing why a conditional decrement matched no row."""
    drone = Drone.objects.filter(pk=drone_id).only("stock_quantity", "in_stock").first()
    if drone is None:
        return NotFound("Drone not found")
    # A sold-out drone has in_stock=False as well; only a listing hidden while
    # units remain is Unavailable.
    if not drone.in_stock and drone.stock_quantity > 0:
        return Unavailable()
    if drone.stock_quantity < quantity:
        return InsufficientStock(available=drone.stock_quantity, requested=quantity)
    return Unavailable()


@transaction.atomic
def reserve_stock(drone_id, quantity: int) -> Drone:
    """Take `quantity` units of a drone out of stock.

    Raises NotFound, Unavailable or InsufficientStock when the reservation
    cannot be made; nothing is written in that case.
    """
    _check_quantity(quantity)
    updated = Drone.objects.filter(
        pk=drone_id, in_stock=True, stock_quantity__gte=quantity
    ).update(stock_quantity=F("stock_quantity") - quantity, updated_at=timezone.now())

    if not updated:
        error = _explain_rejected_reservation(drone_id, quantity)
        logger.warning("Stock reservation rejected for drone %s (qty=%s): %s", drone_id, quantity, error.detail)
        raise error

    Drone.objects.filter(pk=drone_id, stock_quantity=0).update(in_stock=False)
    drone = Drone.objects.get(pk=drone_id)
    logger.info("Reserved %s unit(s) of drone %s, %s left", quantity, drone_id, drone.stock_quantity)
    return drone


def _increment(drone_id, quantity: int, in_stock) -> Drone:
    _check_quantity(quantity)
    updated = Drone.objects.filter(pk=drone_id).update(
        stock_quantity=F("stock_quantity") + quantity,
        in_stock=in_stock,
        updated_at=timezone.now(),
    )
    if not updated:
        raise NotFound("Drone not found")
    return Drone.objects.get(pk=drone_id)


@transaction.atomic
def release_stock(drone_id, quantity: int) -> Drone:
    """Give back units held by a cancelled order; always marks the drone in stock."""
    drone = _increment(drone_id, quantity, in_stock=True)
    logger.info("Released %s unit(s) of drone %s, %s left", quantity, drone_id, drone.stock_quantity)
    return drone


@transaction.atomic
def restock(drone_id, quantity: int) -> Drone:
    """Add newly delivered units to a drone's stock (admin action).

    A sold-out drone is listed again; a listing hidden while it still had
    units stays hidden.
    """
    # SET expressions see the row as it was before the update.
    in_stock = Case(When(stock_quantity=0, then=Value(True)), default=F("in_stock"))
    drone = _increment(drone_id, quantity, in_stock=in_stock)
    logger.info("Restocked drone %s with %s unit(s), %s now", drone_id, quantity, drone.stock_quantity)
    return drone
