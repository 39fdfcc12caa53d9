from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from rest_framework.authtoken.models import Token

from drones.models import Drone

DEMO_USERS = {
    "admin": {"username": "admin", "password": "admin12345", "email": "admin@arrow3.example", "is_staff": True},
    "customer": {"username": "pilot", "password": "pilot12345", "email": "pilot@arrow3.example", "is_staff": False},
}

DEMO_DRONES = [
    {"name": "Arrow3 Pocket Air", "model": "PA-2104", "price": "499.00", "category": "handheld", "stock_quantity": 500,
     "description": "Palm-sized selfie drone that folds into a pocket."},
    {"name": "Arrow3 GoCam S", "model": "GC-4501", "price": "1099.00", "category": "handheld", "stock_quantity": 190,
     "description": "Stabilised handheld camera drone for travel."},
    {"name": "Arrow3 Vista 4K", "model": "V4-3300", "price": "1299.00", "category": "camera", "stock_quantity": 120,
     "description": "4K gimbal camera drone with 35 minute flight time.", "featured": True},
    {"name": "Arrow3 Storm X", "model": "SX-9902", "price": "6499.00", "category": "power", "stock_quantity": 65,
     "description": "High-thrust platform for heavy payloads."},
    {"name": "Arrow3 CargoLift", "model": "CL-4705", "price": "5299.00", "category": "power", "stock_quantity": 75,
     "description": "Delivery drone with a 10 kg winch."},
    {"name": "Arrow3 AgriScan", "model": "AS-7010", "price": "8999.00", "category": "specialized", "stock_quantity": 3,
     "description": "Multispectral crop survey drone."},
]


class Command(BaseCommand):
    help = "Create or update a staff user, a customer and a small drone catalogue for local development."

    def add_arguments(self, parser):
        parser.add_argument("--no-drones", action="store_true", help="Only create the demo users.")

    @transaction.atomic
    def handle(self, *args, **options):
        User = get_user_model()

        for role, cfg in DEMO_USERS.items():
            u, created = User.objects.get_or_create(
                username=cfg["username"],
                defaults={"email": cfg["email"], "is_staff": cfg["is_staff"]},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f"Created user '{u.username}'"))
            else:
                self.stdout.write(f"User '{u.username}' already exists")

            u.set_password(cfg["password"])
            u.is_staff = cfg["is_staff"]
            u.save(update_fields=["password", "is_staff"])

            token, _ = Token.objects.get_or_create(user=u)
            self.stdout.write(f"  → role={role}, token={token.key}")

        if options["no_drones"]:
            self.stdout.write(self.style.SUCCESS("Demo users ready."))
            return

        for spec in DEMO_DRONES:
            data = dict(spec, price=Decimal(spec["price"]))
            name = data.pop("name")
            # Existing drones keep their stock; it moves only through orders and restock.
            stock_quantity = data.pop("stock_quantity")
            drone, created = Drone.objects.update_or_create(
                name=name, defaults=data, create_defaults=dict(data, stock_quantity=stock_quantity)
            )
            verb = "Created" if created else "Updated"
            self.stdout.write(f"{verb} drone '{drone.name}' (stock {drone.stock_quantity})")

        self.stdout.write(self.style.SUCCESS("Demo data ready."))
