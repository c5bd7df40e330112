from django.urls import path

from . import views

urlpatterns = [
    path('consolidated/', views.consolidated_report, name='consolidated_report'),
    path('<int:restaurant_id>/', views.daily_report, name='daily_report'),
]
