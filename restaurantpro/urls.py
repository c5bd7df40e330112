"""
URL configuration for the Restaurant Pro API.
"""
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path('admin/', admin.site.urls),

    # =============== API DOCUMENTATION ===============
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # =============== API ===============
    path('api/', include('authentication.urls')),
    path('api/', include('inventory.urls')),
    path('api/orders/', include('orders.urls')),
    path('api/reports/', include('reports.urls')),
]
