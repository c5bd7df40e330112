from django.contrib import admin

from .models import Product, Stock, StockMovement


class StockInline(admin.StackedInline):
    model = Stock
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'price', 'drink_category', 'restaurant', 'is_active']
    list_filter = ['type', 'is_active', 'restaurant']
    search_fields = ['name']
    inlines = [StockInline]


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ['product', 'movement_type', 'quantity_change', 'quantity_after', 'user', 'created_at']
    list_filter = ['movement_type']

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
