from rest_framework import serializers

from .models import Product, Stock, StockMovement


class ProductSerializer(serializers.ModelSerializer):
    restaurant_id = serializers.IntegerField(read_only=True)
    quantity = serializers.IntegerField(source='stock.quantity', read_only=True)
    min_threshold = serializers.IntegerField(source='stock.min_threshold', read_only=True)
    is_low_stock = serializers.BooleanField(source='stock.is_low_stock', read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'restaurant_id', 'name', 'type', 'price', 'drink_category',
            'is_active', 'quantity', 'min_threshold', 'is_low_stock', 'created_at'
        ]
        read_only_fields = ['id', 'is_active', 'created_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative")
        return value

    def validate(self, attrs):
        if attrs.get('type') != Product.DRINK and attrs.get('drink_category'):
            raise serializers.ValidationError({'drink_category': "Only drinks have a drink category"})
        return attrs


class StockLevelSerializer(serializers.ModelSerializer):
    """A product seen through its stock row; dishes report no quantity"""
    product_id = serializers.IntegerField(source='id', read_only=True)
    quantity = serializers.IntegerField(source='stock.quantity', read_only=True)
    min_threshold = serializers.IntegerField(source='stock.min_threshold', read_only=True)
    max_threshold = serializers.IntegerField(source='stock.max_threshold', read_only=True)
    is_low_stock = serializers.SerializerMethodField()
    last_updated = serializers.DateTimeField(source='stock.updated_at', read_only=True)

    class Meta:
        model = Product
        fields = [
            'product_id', 'name', 'type', 'drink_category', 'quantity',
            'min_threshold', 'max_threshold', 'is_low_stock', 'last_updated'
        ]

    def get_is_low_stock(self, obj):
        return bool(getattr(obj, 'low_stock', 0))


class StockAlertSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(source='product.id', read_only=True)
    name = serializers.CharField(source='product.name', read_only=True)
    type = serializers.CharField(source='product.type', read_only=True)
    drink_category = serializers.CharField(source='product.drink_category', read_only=True)
    stock_percentage = serializers.FloatField(read_only=True)

    class Meta:
        model = Stock
        fields = ['id', 'name', 'type', 'drink_category', 'quantity', 'min_threshold', 'stock_percentage']


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True, default=None)
    movement_type_label = serializers.CharField(source='get_movement_type_display', read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            'id', 'product_id', 'product_name', 'movement_type', 'movement_type_label',
            'quantity_change', 'quantity_before', 'quantity_after', 'unit_cost',
            'user_id', 'username', 'order_id', 'notes', 'created_at'
        ]
        read_only_fields = fields


class RestockSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)


class AdjustSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    new_quantity = serializers.IntegerField()
    reason = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
