import secrets
import string
import time
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from authentication.models import Restaurant
from inventory.models import Product


def generate_order_number():
    """Human readable order reference, e.g. CMD-1718000000000-X7K2Q"""
    suffix = ''.join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(5))
    return f"CMD-{int(time.time() * 1000)}-{suffix}"


class Order(models.Model):
    CASH = 'cash'
    ELECTRONIC = 'electronic'
    PAYMENT_METHOD_CHOICES = [
        (CASH, 'Cash'),
        (ELECTRONIC, 'Electronic'),
    ]

    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name='orders')
    manager = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='created_orders'
    )
    order_number = models.CharField(max_length=40, unique=True, editable=False)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(condition=models.Q(total_amount__gte=0), name='orders_total_non_negative'),
        ]

    def save(self, *args, **kwargs):
        if not self.order_number:
            self.order_number = generate_order_number()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.order_number} - {self.restaurant.name}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.RESTRICT, related_name='order_items')
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'order_items'
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name='order_items_quantity_positive'),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.product.name}"
