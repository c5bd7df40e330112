from django.conf import settings
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiParameter
from rest_framework import generics, status
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import HasRestaurantAccess, IsManagerOrOwner, IsOwner
from . import services
from .models import Product
from .serializers import (
    AdjustSerializer, ProductSerializer, RestockSerializer,
    StockAlertSerializer, StockLevelSerializer, StockMovementSerializer
)


class MovementPagination(LimitOffsetPagination):
    default_limit = settings.RESTAURANTPRO['MOVEMENT_PAGE_SIZE']
    max_limit = 200


class RestaurantContextMixin:
    """Mixin to scope a view to the restaurant resolved from the URL"""
    permission_classes = [HasRestaurantAccess]

    def get_restaurant(self):
        return self.request.restaurant


# =============== PRODUCTS ===============

class ProductListCreateView(RestaurantContextMixin, generics.ListCreateAPIView):
    """
    get: List the active products of a restaurant with their stock
    post: Create a product (drinks start with an empty stock row)
    """
    serializer_class = ProductSerializer
    pagination_class = None

    @extend_schema(
        parameters=[OpenApiParameter('type', str, enum=['dish', 'drink'], required=False)],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        products = Product.objects.filter(
            restaurant=self.get_restaurant(), is_active=True
        ).select_related('stock')

        product_type = self.request.query_params.get('type')
        if product_type:
            products = products.filter(type=product_type)
        return products

    @extend_schema(
        examples=[
            OpenApiExample('Create Drink', value={
                "name": "Sprite", "type": "drink", "price": 500, "drink_category": "plastic_small"
            }),
            OpenApiExample('Create Dish', value={"name": "Yassa poulet", "type": "dish", "price": 2700}),
        ]
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = services.create_product(self.get_restaurant(), **serializer.validated_data)
        return Response(self.get_serializer(product).data, status=status.HTTP_201_CREATED)


# =============== STOCK ===============

class StockLevelView(RestaurantContextMixin, generics.ListAPIView):
    serializer_class = StockLevelSerializer
    pagination_class = None

    def get_queryset(self):
        return services.stock_levels(self.get_restaurant())


class StockAlertView(RestaurantContextMixin, generics.ListAPIView):
    serializer_class = StockAlertSerializer
    pagination_class = None

    def get_queryset(self):
        return services.low_stock_alerts(self.get_restaurant())


class StockMovementListView(generics.ListAPIView):
    """
    Movement history of one product, newest first. Visible to the product
    restaurant's manager and to its owner.
    """
    permission_classes = [IsManagerOrOwner]
    serializer_class = StockMovementSerializer
    pagination_class = MovementPagination

    def get_queryset(self):
        return services.product_movements(self.request.user, self.kwargs['product_id'])


class RestockView(APIView):
    permission_classes = [IsOwner]

    @extend_schema(
        summary="Restock Product",
        request=RestockSerializer,
        responses={200: {'type': 'object'}, 400: {'description': 'Invalid quantity'}, 404: {'description': 'Product not found'}},
        examples=[OpenApiExample('Restock', value={"product_id": 4, "quantity": 20, "notes": "Weekly delivery"})]
    )
    def post(self, request):
        serializer = RestockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.restock(request.user, **serializer.validated_data)
        return Response({'message': 'Stock updated successfully', **result})


class AdjustStockView(APIView):
    permission_classes = [IsOwner]

    @extend_schema(
        summary="Adjust Stock",
        request=AdjustSerializer,
        responses={200: {'type': 'object'}, 400: {'description': 'Invalid quantity'}, 404: {'description': 'Product not found'}},
        examples=[OpenApiExample('Adjust', value={"product_id": 4, "new_quantity": 40, "reason": "Inventory count"})]
    )
    def post(self, request):
        serializer = AdjustSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.adjust(request.user, **serializer.validated_data)
        return Response({'message': 'Stock adjusted successfully', **result})
