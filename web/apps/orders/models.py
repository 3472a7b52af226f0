import uuid
from django.db import models, transaction

class OrderModel(models.Model):
    # UUID PK exposed in the API
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Internal incremental counter, drives "newest first" ordering
    internal_id = models.BigIntegerField(unique=True, editable=False, null=True)

    class Status(models.TextChoices):
        NEW = "NEW"
        PAID = "PAID"
        BAKING = "BAKING"
        DELIVERING = "DELIVERING"
        DELIVERED = "DELIVERED"
        CANCELLED = "CANCELLED"

    status = models.CharField(max_length=32, choices=Status.choices, default=Status.NEW)
    comment = models.TextField(blank=True, default="")
    ordered_at = models.DateTimeField()
    estimated_time_of_delivery = models.DateTimeField(null=True, blank=True)
    total_cents = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3, default="EUR")

    # Embedded delivery address
    firstname = models.CharField(max_length=100)
    lastname = models.CharField(max_length=100)
    street = models.CharField(max_length=200)
    city = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    telephone = models.CharField(max_length=40)
    email = models.CharField(max_length=254, blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-internal_id"]

    def save(self, *args, **kwargs):
        # Assign incremental `internal_id` only on creation
        if self.internal_id is None:
            with transaction.atomic():
                last = (
                    OrderModel.objects.select_for_update()
                    .order_by("-internal_id")
                    .first()
                )
                self.internal_id = 1 if not last or last.internal_id is None else last.internal_id + 1

        super().save(*args, **kwargs)


class LineItemModel(models.Model):
    order = models.ForeignKey(OrderModel, related_name="line_items", on_delete=models.CASCADE)
    position = models.PositiveSmallIntegerField(default=0)
    amount = models.PositiveIntegerField()
    # Catalog pizza id; the catalog service owns the pizza itself
    pizza_id = models.BigIntegerField()
    price_cents = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3, default="EUR")

    class Meta:
        db_table = "order_line_items"
        ordering = ["position"]


class IdempotencyKey(models.Model):
    key = models.CharField(max_length=128, unique=True)
    request_hash = models.CharField(max_length=64)
    response_status = models.PositiveSmallIntegerField(default=0)
    response_body = models.JSONField(default=dict)
    order = models.ForeignKey(OrderModel, null=True, blank=True, on_delete=models.SET_NULL)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "idempotency_keys"
