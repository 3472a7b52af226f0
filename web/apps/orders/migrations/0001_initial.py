import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="OrderModel",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("internal_id", models.BigIntegerField(editable=False, null=True, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("NEW", "New"),
                            ("PAID", "Paid"),
                            ("BAKING", "Baking"),
                            ("DELIVERING", "Delivering"),
                            ("DELIVERED", "Delivered"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="NEW",
                        max_length=32,
                    ),
                ),
                ("comment", models.TextField(blank=True, default="")),
                ("ordered_at", models.DateTimeField()),
                ("estimated_time_of_delivery", models.DateTimeField(blank=True, null=True)),
                ("total_cents", models.PositiveIntegerField(default=0)),
                ("currency", models.CharField(default="EUR", max_length=3)),
                ("firstname", models.CharField(max_length=100)),
                ("lastname", models.CharField(max_length=100)),
                ("street", models.CharField(max_length=200)),
                ("city", models.CharField(max_length=100)),
                ("postal_code", models.CharField(max_length=20)),
                ("telephone", models.CharField(max_length=40)),
                ("email", models.CharField(blank=True, default="", max_length=254)),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-internal_id"],
            },
        ),
        migrations.CreateModel(
            name="LineItemModel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("amount", models.PositiveIntegerField()),
                ("pizza_id", models.BigIntegerField()),
                ("price_cents", models.PositiveIntegerField(default=0)),
                ("currency", models.CharField(default="EUR", max_length=3)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="line_items",
                        to="orders.ordermodel",
                    ),
                ),
            ],
            options={
                "db_table": "order_line_items",
                "ordering": ["position"],
            },
        ),
        migrations.CreateModel(
            name="IdempotencyKey",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=128, unique=True)),
                ("request_hash", models.CharField(max_length=64)),
                ("response_status", models.PositiveSmallIntegerField(default=0)),
                ("response_body", models.JSONField(default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to="orders.ordermodel",
                    ),
                ),
            ],
            options={
                "db_table": "idempotency_keys",
            },
        ),
    ]
