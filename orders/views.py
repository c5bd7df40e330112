from collections.abc import Mapping

from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiExample
from rest_framework import generics, status
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.exceptions import InvalidOrder, NotFound
from authentication.models import User
from authentication.permissions import HasRestaurantAccess, IsManagerOrOwner
from .filters import OrderFilter
from .models import Order
from .serializers import OrderCreateSerializer, OrderDetailSerializer, OrderSerializer
from .services import place_order


class OrderPagination(LimitOffsetPagination):
    default_limit = settings.RESTAURANTPRO['ORDER_PAGE_SIZE']
    max_limit = 500


class OrderCreateView(APIView):
    """Record a new order and its stock effects"""
    permission_classes = [IsManagerOrOwner]

    @extend_schema(
        summary="Create Order",
        request=OrderCreateSerializer,
        responses={
            201: OrderDetailSerializer,
            400: {'description': 'Invalid order or insufficient stock'},
            403: {'description': 'Restaurant not accessible to this manager'},
        },
        examples=[
            OpenApiExample(
                'Cash Order',
                value={
                    "restaurant_id": 1,
                    "payment_method": "cash",
                    "total_amount": 1500,
                    "items": [
                        {"name": "Coca-Cola", "type": "drink", "quantity": 3,
                         "unit_price": 500, "total_price": 1500, "drink_category": "plastic_small"}
                    ]
                }
            )
        ]
    )
    def post(self, request):
        if not isinstance(request.data, Mapping):
            raise InvalidOrder('Order payload must be a JSON object')

        restaurant_id = request.data.get('restaurant_id')
        if restaurant_id is None:
            raise InvalidOrder({'restaurant_id': ['This field is required.']})

        order = place_order(
            request.user,
            restaurant_id,
            request.data.get('items'),
            request.data.get('payment_method'),
            request.data.get('total_amount'),
        )
        return Response({
            'message': 'Order recorded successfully',
            'order_id': order.id,
            'order_number': order.order_number,
            'order': OrderDetailSerializer(order).data,
        }, status=status.HTTP_201_CREATED)


class RestaurantOrderListView(generics.ListAPIView):
    """
    Orders of one restaurant, newest first. Filter with ``date``
    (YYYY-MM-DD) and ``payment_method``; page with ``limit``/``offset``.
    """
    permission_classes = [HasRestaurantAccess]
    serializer_class = OrderSerializer
    pagination_class = OrderPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter

    def get_queryset(self):
        return Order.objects.filter(
            restaurant=self.request.restaurant
        ).select_related('manager').prefetch_related('items__product')


class OrderDetailView(generics.RetrieveAPIView):
    permission_classes = [IsManagerOrOwner]
    serializer_class = OrderDetailSerializer

    def get_queryset(self):
        user = self.request.user
        orders = Order.objects.select_related('restaurant', 'manager').prefetch_related('items__product')
        if user.role == User.OWNER:
            return orders.filter(restaurant__owner=user)
        return orders.filter(restaurant_id=user.restaurant_id)

    def get_object(self):
        try:
            return self.get_queryset().get(pk=self.kwargs['pk'])
        except Order.DoesNotExist:
            raise NotFound('Order not found')
