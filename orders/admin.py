from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product', 'quantity', 'unit_price', 'total_price']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'restaurant', 'manager', 'payment_method', 'total_amount', 'created_at']
    list_filter = ['payment_method', 'restaurant']
    search_fields = ['order_number']
    readonly_fields = ['order_number', 'created_at']
    inlines = [OrderItemInline]
