import logging

from django.conf import settings
from django.db import connection
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiExample
from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .models import User
from .permissions import HasRestaurantAccess, IsManagerOrOwner, IsOwner
from .serializers import (
    ChangePasswordSerializer, LoginSerializer, ManagerCreateSerializer,
    ManagerSerializer, RestaurantSerializer, UserSerializer
)

logger = logging.getLogger(__name__)


def _raw_token(request):
    """The bearer token exactly as the client sent it, or None."""
    authenticator = getattr(request, 'successful_authenticator', None)
    if authenticator is None:
        return None
    header = authenticator.get_header(request)
    if header is None:
        return None
    return authenticator.get_raw_token(header)


# =============== AUTHENTICATION VIEWS ===============

class LoginView(APIView):
    """
    Exchange a username and password for a bearer token.

    Unknown user, wrong password and a ``user_type`` that does not match the
    account's role all produce the same 401 response.
    """
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        summary="User Login",
        request=LoginSerializer,
        responses={
            200: {
                'type': 'object',
                'properties': {
                    'message': {'type': 'string'},
                    'token': {'type': 'string', 'description': 'JWT access token'},
                    'user': {'type': 'object', 'description': 'User information'},
                }
            },
            401: {'description': 'Invalid credentials'},
        },
        examples=[
            OpenApiExample(
                'Owner Login',
                value={"username": "proprietaire", "password": "owner123", "user_type": "owner"}
            ),
            OpenApiExample(
                'Manager Login',
                value={"username": "gerant1", "password": "manager123", "user_type": "manager"}
            ),
        ]
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user, token = services.login(
            serializer.validated_data['username'],
            serializer.validated_data['password'],
            expected_role=serializer.validated_data.get('user_type'),
        )
        logger.info(f"Login: user_id={user.id} role={user.role}")

        return Response({
            'message': 'Login successful',
            'token': token,
            'user': UserSerializer(user).data,
        })


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(summary="Logout", request=None, responses={200: {'type': 'object'}})
    def post(self, request):
        raw_token = _raw_token(request)
        if raw_token is not None and settings.RESTAURANTPRO['TOKEN_REVOCATION']:
            services.revoke(raw_token, request.user)
        return Response({'message': 'Logout successful'})


class VerifyTokenView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(summary="Verify Token", responses={200: {'type': 'object'}, 401: {'description': 'Invalid token'}})
    def get(self, request):
        return Response({
            'valid': True,
            'user': UserSerializer(request.user).data,
        })


@extend_schema(
    summary="Change Password",
    request=ChangePasswordSerializer,
    responses={200: {'type': 'object'}, 400: {'description': 'Current password is incorrect'}}
)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def change_password(request):
    serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    services.change_password(
        request.user,
        serializer.validated_data['current_password'],
        serializer.validated_data['new_password'],
    )
    return Response({'message': 'Password changed successfully'})


# =============== MANAGER MANAGEMENT ===============

class ManagerListCreateView(generics.ListCreateAPIView):
    """
    List and create managers. Owners only see and create managers for the
    restaurants they own.
    """
    permission_classes = [IsOwner]
    serializer_class = ManagerSerializer

    def get_queryset(self):
        return User.objects.filter(
            role=User.MANAGER,
            created_by=self.request.user,
        ).select_related('restaurant').order_by('-date_joined')

    @extend_schema(
        summary="Create Manager",
        request=ManagerCreateSerializer,
        responses={
            201: ManagerSerializer,
            400: {'description': 'Username already taken'},
            404: {'description': 'Restaurant not found'},
        },
        examples=[
            OpenApiExample(
                'Create Manager',
                value={"username": "gerant4", "password": "manager123", "restaurant_id": 1}
            )
        ]
    )
    def create(self, request, *args, **kwargs):
        serializer = ManagerCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        manager = services.create_manager(
            request.user,
            serializer.validated_data['username'],
            serializer.validated_data['password'],
            serializer.validated_data['restaurant_id'],
        )
        return Response(ManagerSerializer(manager).data, status=status.HTTP_201_CREATED)


class ManagerDetailView(APIView):
    permission_classes = [IsOwner]

    @extend_schema(summary="Delete Manager", responses={204: None, 404: {'description': 'Manager not found'}})
    def delete(self, request, manager_id):
        services.delete_manager(request.user, manager_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============== RESTAURANT MANAGEMENT ===============

class RestaurantListCreateView(generics.ListCreateAPIView):
    """
    Owners list their restaurants, managers list the one they work for.
    Each entry carries today's order and revenue figures.
    """
    serializer_class = RestaurantSerializer

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsOwner()]
        return [IsManagerOrOwner()]

    def get_queryset(self):
        return services.accessible_restaurants(self.request.user)

    @extend_schema(
        summary="Create Restaurant",
        request=RestaurantSerializer,
        responses={201: RestaurantSerializer},
        examples=[
            OpenApiExample('Create Restaurant', value={"name": "Restaurant Est", "location": "Zone Est"})
        ]
    )
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def perform_create(self, serializer):
        restaurant = serializer.save(owner=self.request.user)
        logger.info(f"Restaurant created: restaurant_id={restaurant.id} owner_id={self.request.user.id}")


class RestaurantDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = RestaurantSerializer

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [HasRestaurantAccess()]
        return [IsOwner(), HasRestaurantAccess()]

    def get_object(self):
        return self.request.restaurant

    def perform_update(self, serializer):
        restaurant = serializer.save()
        logger.info(f"Restaurant updated: restaurant_id={restaurant.id} owner_id={self.request.user.id}")

    def perform_destroy(self, instance):
        restaurant_id = instance.id
        instance.delete()
        logger.info(f"Restaurant deleted: restaurant_id={restaurant_id} owner_id={self.request.user.id}")


# =============== SYSTEM ===============

@extend_schema(
    summary="Health Check",
    auth=[],
    responses={
        200: {
            'type': 'object',
            'properties': {
                'message': {'type': 'string'},
                'version': {'type': 'string'},
                'timestamp': {'type': 'string'},
                'environment': {'type': 'string'},
                'database': {'type': 'string'},
            }
        },
        503: {'description': 'Database unreachable'},
    }
)
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def health_check(request):
    payload = {
        'message': 'Restaurant Pro API is running',
        'version': settings.API_VERSION,
        'timestamp': timezone.now().isoformat(),
        'environment': settings.ENVIRONMENT,
    }
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        payload.update(database='disconnected')
        return Response(payload, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    payload.update(database='connected')
    return Response(payload)
