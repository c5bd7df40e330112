from django.urls import path

from . import views

urlpatterns = [
    # =============== AUTHENTICATION ===============
    path('auth/login/', views.LoginView.as_view(), name='login'),
    path('auth/logout/', views.LogoutView.as_view(), name='logout'),
    path('auth/verify/', views.VerifyTokenView.as_view(), name='verify_token'),
    path('auth/change-password/', views.change_password, name='change_password'),

    # =============== MANAGER MANAGEMENT ===============
    path('managers/', views.ManagerListCreateView.as_view(), name='manager_list_create'),
    path('managers/<int:manager_id>/', views.ManagerDetailView.as_view(), name='manager_detail'),

    # =============== RESTAURANT MANAGEMENT ===============
    path('restaurants/', views.RestaurantListCreateView.as_view(), name='restaurant_list_create'),
    path('restaurants/<int:restaurant_id>/', views.RestaurantDetailView.as_view(), name='restaurant_detail'),

    # =============== SYSTEM ===============
    path('ping/', views.health_check, name='health_check'),
]
