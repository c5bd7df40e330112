from django.contrib.auth.password_validation import validate_password
from django.db.models import Count, F, Q, Sum
from django.utils import timezone
from rest_framework import serializers

from .models import Restaurant, User


class UserSerializer(serializers.ModelSerializer):
    restaurant_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'role', 'restaurant_id']
        read_only_fields = fields


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)
    user_type = serializers.ChoiceField(choices=User.ROLE_CHOICES, required=False)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(trim_whitespace=False)
    new_password = serializers.CharField(trim_whitespace=False, validators=[validate_password])

    def validate(self, attrs):
        if attrs['current_password'] == attrs['new_password']:
            raise serializers.ValidationError("The new password must differ from the current one")
        return attrs


class RestaurantSerializer(serializers.ModelSerializer):
    owner_id = serializers.IntegerField(read_only=True)
    stats = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Restaurant
        fields = [
            'id', 'name', 'location', 'status', 'owner_id',
            'stats', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'owner_id', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_location(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Location is required")
        return value

    def get_stats(self, obj):
        """Today's activity plus staffing and stock alerts."""
        from inventory.models import Stock

        today = timezone.localdate()
        totals = obj.orders.filter(created_at__date=today).aggregate(
            today_orders=Count('id'),
            today_revenue=Sum('total_amount'),
            cash_revenue=Sum('total_amount', filter=Q(payment_method='cash')),
            electronic_revenue=Sum('total_amount', filter=Q(payment_method='electronic')),
        )
        stock_alerts = Stock.objects.filter(
            product__restaurant=obj,
            product__is_active=True,
            quantity__lte=F('min_threshold'),
        ).count()

        return {
            'today_orders': totals['today_orders'],
            'today_revenue': float(totals['today_revenue'] or 0),
            'cash_revenue': float(totals['cash_revenue'] or 0),
            'electronic_revenue': float(totals['electronic_revenue'] or 0),
            'manager_count': obj.managers.count(),
            'stock_alerts': stock_alerts,
        }


class ManagerSerializer(serializers.ModelSerializer):
    restaurant_id = serializers.IntegerField(read_only=True)
    restaurant_name = serializers.CharField(source='restaurant.name', read_only=True)
    restaurant_location = serializers.CharField(source='restaurant.location', read_only=True)
    created_at = serializers.DateTimeField(source='date_joined', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'role', 'restaurant_id',
            'restaurant_name', 'restaurant_location', 'created_at'
        ]
        read_only_fields = fields


class ManagerCreateSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, trim_whitespace=False, validators=[validate_password])
    restaurant_id = serializers.IntegerField()

    def validate_username(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Username is required")
        return value
