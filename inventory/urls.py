from django.urls import path

from . import views

urlpatterns = [
    # =============== PRODUCTS ===============
    path('restaurants/<int:restaurant_id>/products/', views.ProductListCreateView.as_view(), name='product_list_create'),

    # =============== STOCK ===============
    path('stock/restaurant/<int:restaurant_id>/', views.StockLevelView.as_view(), name='stock_levels'),
    path('stock/alerts/<int:restaurant_id>/', views.StockAlertView.as_view(), name='stock_alerts'),
    path('stock/movements/<int:product_id>/', views.StockMovementListView.as_view(), name='stock_movements'),
    path('stock/restock/', views.RestockView.as_view(), name='stock_restock'),
    path('stock/adjust/', views.AdjustStockView.as_view(), name='stock_adjust'),
]
