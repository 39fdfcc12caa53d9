"""Drones app models.

Defines the Drone model: the catalogue entry plus the inventory counters
(`stock_quantity`, `in_stock`) that order creation and cancellation reserve
and release. The counters are written only through `drones.stock`.
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Drone(models.Model):
    """A drone listed in the storefront."""

    class Category(models.TextChoices):
        CAMERA = "camera", "camera"
        HANDHELD = "handheld", "handheld"
        POWER = "power", "power"
        SPECIALIZED = "specialized", "specialized"

    name = models.CharField(max_length=100, unique=True)
    model = models.CharField(max_length=50)
    description = models.TextField(max_length=2000)
    category = models.CharField(max_length=20, choices=Category.choices)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100000)],
    )
    # PositiveIntegerField adds a `>= 0` CHECK constraint at the database level.
    stock_quantity = models.PositiveIntegerField(default=0)
    # Can be switched off independently of the count to hide a listing.
    in_stock = models.BooleanField(default=True)
    featured = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "drones"
        ordering = ["-featured", "-created_at", "-id"]

    def __str__(self):
        return f"{self.name} (#{self.pk})"

    def is_available(self) -> bool:
        """True if the drone can currently be ordered."""
        return self.in_stock and self.stock_quantity > 0

    @property
    def availability_status(self) -> str:
        if not self.in_stock or self.stock_quantity == 0:
            return "Out of Stock"
        if self.stock_quantity < settings.LOW_STOCK_THRESHOLD:
            return "Low Stock"
        return "In Stock"
