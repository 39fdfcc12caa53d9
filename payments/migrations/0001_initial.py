import django.core.validators
import django.db.models.deletion
import payments.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentIntent",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=payments.models.new_intent_id,
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("currency", models.CharField(default="usd", max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("requires_payment_method", "requires_payment_method"),
                            ("succeeded", "succeeded"),
                            ("failed", "failed"),
                        ],
                        default="requires_payment_method",
                        max_length=32,
                    ),
                ),
                ("client_secret", models.CharField(max_length=100)),
                ("card_brand", models.CharField(blank=True, default="", max_length=20)),
                ("card_last4", models.CharField(blank=True, default="", max_length=4)),
                ("decline_code", models.CharField(blank=True, default="", max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_intents",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "payment_intents",
                "ordering": ["-created_at"],
            },
        ),
    ]
