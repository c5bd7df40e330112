from django.conf import settings
from django.db import models

from authentication.models import Restaurant


class Product(models.Model):
    DISH = 'dish'
    DRINK = 'drink'
    TYPE_CHOICES = [
        (DISH, 'Dish'),
        (DRINK, 'Drink'),
    ]

    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name='products')
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    drink_category = models.CharField(max_length=50, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'products'
        ordering = ['type', 'name']
        constraints = [
            models.CheckConstraint(condition=models.Q(price__gte=0), name='products_price_non_negative'),
            models.CheckConstraint(
                condition=models.Q(type='drink') | models.Q(drink_category__isnull=True),
                name='products_drink_category_only_for_drinks',
            ),
        ]
        indexes = [
            models.Index(fields=['restaurant', 'name', 'type', 'price'], name='products_lookup_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.type})"

    @property
    def is_stock_tracked(self):
        return self.type == self.DRINK


class Stock(models.Model):
    """Quantity on hand for a stock-tracked product"""
    product = models.OneToOneField(Product, on_delete=models.CASCADE, related_name='stock')
    quantity = models.IntegerField(default=0)
    min_threshold = models.IntegerField(default=10)
    max_threshold = models.IntegerField(null=True, blank=True)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stock'
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=0), name='stock_quantity_non_negative'),
        ]

    def __str__(self):
        return f"{self.product.name}: {self.quantity}"

    @property
    def is_low_stock(self):
        return self.quantity <= self.min_threshold

    @property
    def stock_percentage(self):
        if not self.min_threshold:
            return 100.0
        return round(self.quantity * 100.0 / self.min_threshold, 1)


class StockMovement(models.Model):
    """Append-only audit trail of stock changes"""
    SALE = 'sale'
    RESTOCK = 'restock'
    ADJUSTMENT = 'adjustment'
    TYPE_CHOICES = [
        (SALE, 'Sale'),
        (RESTOCK, 'Restock'),
        (ADJUSTMENT, 'Adjustment'),
    ]

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='movements')
    movement_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    quantity_change = models.IntegerField()
    quantity_before = models.IntegerField()
    quantity_after = models.IntegerField()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='stock_movements'
    )
    order = models.ForeignKey(
        'orders.Order', on_delete=models.CASCADE, null=True, blank=True,
        related_name='stock_movements'
    )
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.movement_type} {self.quantity_change:+d} {self.product.name}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError('Stock movements cannot be modified')
        super().save(*args, **kwargs)
