from django.urls import path

from . import views

urlpatterns = [
    path('', views.OrderCreateView.as_view(), name='order_create'),
    path('restaurant/<int:restaurant_id>/', views.RestaurantOrderListView.as_view(), name='restaurant_orders'),
    path('<int:pk>/', views.OrderDetailView.as_view(), name='order_detail'),
]
