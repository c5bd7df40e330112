from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from inventory.models import Product
from .models import Order, OrderItem


# =============== ORDER INPUT ===============

class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(required=False, allow_null=True)
    name = serializers.CharField(max_length=255)
    type = serializers.ChoiceField(choices=Product.TYPE_CHOICES)
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    drink_category = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)

    def validate(self, attrs):
        line_total = attrs['quantity'] * attrs['unit_price']
        declared = attrs.get('total_price')
        if declared is not None and declared != line_total:
            raise serializers.ValidationError({
                'total_price': f"Line total {declared} does not equal quantity x unit price ({line_total})"
            })
        attrs['total_price'] = line_total

        if attrs['type'] != Product.DRINK or not attrs.get('drink_category'):
            attrs['drink_category'] = None
        return attrs


class OrderCreateSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))

    def validate(self, attrs):
        if settings.RESTAURANTPRO['ENFORCE_DECLARED_TOTAL']:
            line_sum = sum((item['total_price'] for item in attrs['items']), Decimal('0'))
            if attrs['total_amount'] != line_sum:
                raise serializers.ValidationError({
                    'total_amount': f"Declared total {attrs['total_amount']} does not match the items ({line_sum})"
                })
        return attrs


# =============== ORDER OUTPUT ===============

class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_type = serializers.CharField(source='product.type', read_only=True)
    drink_category = serializers.CharField(source='product.drink_category', read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            'id', 'product_id', 'product_name', 'product_type', 'drink_category',
            'quantity', 'unit_price', 'total_price'
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    restaurant_id = serializers.IntegerField(read_only=True)
    manager_id = serializers.IntegerField(read_only=True)
    manager_name = serializers.CharField(source='manager.username', read_only=True, default=None)
    items_count = serializers.SerializerMethodField()
    items_summary = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'restaurant_id', 'manager_id', 'manager_name',
            'total_amount', 'payment_method', 'created_at', 'items_count', 'items_summary'
        ]
        read_only_fields = fields

    def get_items_count(self, obj):
        return len(obj.items.all())

    def get_items_summary(self, obj):
        return ', '.join(f"{item.product.name} ({item.quantity})" for item in obj.items.all())


class OrderDetailSerializer(OrderSerializer):
    restaurant_name = serializers.CharField(source='restaurant.name', read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ['restaurant_name', 'items']
        read_only_fields = fields
